"""Labyrinth Engine - command-line entry point.

Generates a maze for a size/difficulty preset and prints it:

    python -m labyrinth.main --size small --difficulty easy --seed 7 --solution
"""

import argparse
import logging
import sys
from typing import Optional

from labyrinth.config import get_settings
from labyrinth.core.exceptions import MazeConfigError, MazeConsistencyError
from labyrinth.core.generator import generate_maze
from labyrinth.core.profiles import DIFFICULTY_PROFILES, SIZE_PROFILES

logger = logging.getLogger("labyrinth")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labyrinth",
        description="Generate a maze with a guaranteed solution.",
    )
    parser.add_argument("--size", default="small", help=f"one of: {', '.join(SIZE_PROFILES)}")
    parser.add_argument(
        "--difficulty", default="easy", help=f"one of: {', '.join(DIFFICULTY_PROFILES)}"
    )
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--solution", action="store_true", help="overlay the solution path")
    parser.add_argument("--log-level", default=None, help="override LABYRINTH_LOG_LEVEL")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level.upper() if args.log_level else None)

    try:
        generated = generate_maze(args.size, args.difficulty, seed=args.seed)
    except MazeConfigError as e:
        logger.error(str(e))
        return 2
    except MazeConsistencyError as e:
        logger.error(f"Maze generation failed: {e}")
        return 1

    if args.solution:
        generated.maze.mark_cells(generated.solution, "is_path")

    print(generated.maze.render())
    print()
    print(f"Seed: {generated.seed}")
    print(f"Start: {generated.start.key}  End: {generated.end.key}")
    print(f"Solution: {len(generated.solution)} cells ({generated.optimal_moves} moves)")
    print(f"Tuning: {generated.report.to_dict()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
