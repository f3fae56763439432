"""
Maze generation pipeline.

carve -> tune -> solve (-> verify). The caller gets nothing until every
pass has succeeded; an internal-consistency failure throws the maze away
and starts over from a fresh seed.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from ..config import Settings, get_settings
from .carver import carve_maze
from .exceptions import MazeConfigError, MazeConsistencyError, PathCountBudgetExceeded
from .grid import Maze, Position
from .pathfinder import solve
from .profiles import (
    DifficultyProfile,
    SizeProfile,
    get_difficulty_profile,
    get_size_profile,
)
from .tuner import TuningReport, tune_maze
from .validator import validate_maze, verify_unique_solution

logger = logging.getLogger(__name__)

# Offset between retry seeds, so a retried seed never repeats a previous one
_RETRY_SEED_STRIDE = 7919


@dataclass
class GeneratedMaze:
    """A finished maze and its canonical solution."""

    maze: Maze
    solution: list[Position]
    seed: int
    report: TuningReport
    size: Optional[SizeProfile] = None
    difficulty: Optional[DifficultyProfile] = None
    attempts: int = 1
    verified: bool = field(default=False)

    @property
    def start(self) -> Position:
        if self.maze.start is None:
            raise MazeConsistencyError("Generated maze has no start cell")
        return self.maze.start

    @property
    def end(self) -> Position:
        if self.maze.end is None:
            raise MazeConsistencyError("Generated maze has no end cell")
        return self.maze.end

    @property
    def optimal_moves(self) -> int:
        """Moves needed to walk the canonical solution."""
        return len(self.solution) - 1


def new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def build_maze(
    grid_size: int,
    complexity: float,
    seed: int,
    settings: Optional[Settings] = None,
) -> tuple[Maze, list[Position], TuningReport, bool]:
    """
    Run a single carve/tune/solve attempt.

    Returns:
        Tuple of (maze, solution, tuning report, uniqueness_verified).

    Raises:
        MazeConfigError: If grid_size is below the configured minimum.
        MazeConsistencyError: If the result breaks an engine invariant.
    """
    settings = settings or get_settings()
    rng = random.Random(seed)

    maze = carve_maze(grid_size, rng, min_size=settings.min_grid_size)
    report = tune_maze(
        maze,
        complexity,
        rng,
        extreme_threshold=settings.extreme_threshold,
        attempt_factor=settings.loop_attempt_factor,
        branch_density=settings.branch_density,
    )

    solution = solve(maze)
    if not validate_maze(maze):
        raise MazeConsistencyError("Generated maze has unreachable open cells or bad endpoints")

    verified = False
    extreme = complexity > settings.extreme_threshold
    if extreme and settings.verify_uniqueness and grid_size <= settings.path_count_max_size:
        try:
            verify_unique_solution(
                maze,
                max_steps=settings.path_count_max_steps,
                timeout=settings.path_count_timeout_seconds,
            )
            verified = True
        except PathCountBudgetExceeded as e:
            logger.warning(f"Skipped uniqueness check for seed {seed}: {e}")

    return maze, solution, report, verified


def generate_maze(
    size: str,
    difficulty: str,
    seed: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> GeneratedMaze:
    """
    Generate a maze for a size/difficulty preset pair.

    Args:
        size: Size preset key (small, medium, large).
        difficulty: Difficulty preset key (easy, medium, hard).
        seed: Random seed; drawn from the OS when omitted.
        settings: Engine settings; defaults to the cached instance.

    Returns:
        GeneratedMaze whose topology will not change again.

    Raises:
        MazeConfigError: If a preset key is unknown.
        MazeConsistencyError: If every attempt produced a broken maze.
    """
    settings = settings or get_settings()
    size_profile = get_size_profile(size)
    difficulty_profile = get_difficulty_profile(difficulty)
    if size_profile.grid_size < settings.min_grid_size:
        raise MazeConfigError(
            f"Size '{size}' ({size_profile.grid_size}) is below the minimum grid size "
            f"{settings.min_grid_size}"
        )

    base_seed = seed if seed is not None else new_seed()
    logger.info(
        f"Generating {size_profile.key} maze ({size_profile.grid_size}x{size_profile.grid_size}) "
        f"with {difficulty_profile.key} difficulty, seed={base_seed}"
    )

    last_error: Optional[MazeConsistencyError] = None
    for attempt in range(settings.max_generation_attempts):
        attempt_seed = base_seed + attempt * _RETRY_SEED_STRIDE
        try:
            maze, solution, report, verified = build_maze(
                size_profile.grid_size,
                difficulty_profile.path_complexity,
                attempt_seed,
                settings,
            )
        except MazeConsistencyError as e:
            last_error = e
            logger.warning(f"Discarding maze from seed {attempt_seed} (attempt {attempt + 1}): {e}")
            continue

        if size_profile.grid_size <= settings.debug_render_max_size:
            logger.debug("Generated maze:\n%s", maze.render(show_flags=False))
        logger.info(f"Maze generated. Solution path length: {len(solution)}")

        return GeneratedMaze(
            maze=maze,
            solution=solution,
            seed=attempt_seed,
            report=report,
            size=size_profile,
            difficulty=difficulty_profile,
            attempts=attempt + 1,
            verified=verified,
        )

    raise MazeConsistencyError(
        f"Failed to generate a consistent maze after {settings.max_generation_attempts} attempts"
    ) from last_error
