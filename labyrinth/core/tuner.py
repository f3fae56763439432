"""
Complexity tuner.

Post-processes a freshly carved perfect maze according to the difficulty
profile's path-complexity scalar. Two strategies:

Loop-adding (complexity at or below the extreme threshold)
    Reopens random interior walls that touch exactly two open cells. Both
    cells already belong to the single connected region, so each opening
    closes one cycle and disconnects nothing. Walls with three or four open
    neighbours are skipped: they would join more than two corridors at once
    or leave a one-cell pocket.

Dead-end injection (complexity above the extreme threshold)
    Opens walls that touch exactly one open cell and grows them into
    branches, one cell at a time, only ever onto walls whose sole open
    neighbour is the current branch tip. Every opened cell is a new leaf of
    the tree, so the start-to-end path stays unique.

Both passes mutate the maze in place and report what they did.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Literal

from .grid import Maze, Position
from .validator import dead_end_count

logger = logging.getLogger(__name__)

EXTREME_THRESHOLD = 0.9
LOOP_ATTEMPT_FACTOR = 10
BRANCH_DENSITY = 0.5
BRANCH_LENGTH_SCALE = 4


@dataclass
class TuningReport:
    """Summary of one tuning pass."""

    strategy: Literal["loops", "dead_ends"]
    complexity: float
    attempts: int = 0
    loops_added: int = 0
    branches_added: int = 0
    cells_opened: int = 0
    dead_ends_before: int = 0
    dead_ends_after: int = 0
    opened: list[Position] = field(default_factory=list, repr=False)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "strategy": self.strategy,
            "complexity": self.complexity,
            "attempts": self.attempts,
            "loops_added": self.loops_added,
            "branches_added": self.branches_added,
            "cells_opened": self.cells_opened,
            "dead_ends_before": self.dead_ends_before,
            "dead_ends_after": self.dead_ends_after,
        }


def add_loops(
    maze: Maze,
    complexity: float,
    rng: random.Random,
    attempt_factor: int = LOOP_ATTEMPT_FACTOR,
) -> TuningReport:
    """
    Reopen walls to create alternative routes.

    Targets ``floor(size * complexity)`` openings and gives up after
    ``target * attempt_factor`` draws; running out of candidates early is
    expected and not an error.
    """
    report = TuningReport(strategy="loops", complexity=complexity)
    report.dead_ends_before = dead_end_count(maze)

    target = math.floor(maze.size * complexity)
    candidates = maze.wall_cells(interior_only=True)
    max_attempts = target * attempt_factor

    while report.attempts < max_attempts and report.loops_added < target and candidates:
        report.attempts += 1
        position = rng.choice(candidates)
        if maze.is_open(position):
            continue
        if maze.open_neighbor_count(position) != 2:
            continue

        maze.open_cell(position)
        report.loops_added += 1
        report.opened.append(position)

    report.cells_opened = len(report.opened)
    report.dead_ends_after = dead_end_count(maze)
    return report


def _is_leaf_candidate(maze: Maze, position: Position) -> bool:
    """Interior wall with exactly one open neighbour."""
    return (
        maze.is_interior(position)
        and not maze.is_open(position)
        and maze.open_neighbor_count(position) == 1
    )


def _extend_branch(maze: Maze, root: Position, max_length: int, rng: random.Random) -> list[Position]:
    """Grow a branch from root; returns the cells opened after root."""
    opened = []
    tip = root
    while len(opened) < max_length:
        options = [
            n for n in maze.neighbors(tip)
            if _is_leaf_candidate(maze, n)  # tip is the only open neighbour
        ]
        if not options:
            break
        tip = rng.choice(options)
        maze.open_cell(tip)
        opened.append(tip)
    return opened


def inject_dead_ends(
    maze: Maze,
    complexity: float,
    rng: random.Random,
    branch_density: float = BRANCH_DENSITY,
) -> TuningReport:
    """
    Add dead-end branches without creating any cycle.

    Roots are walls with exactly one open neighbour; up to
    ``floor(size * complexity * branch_density)`` of them are opened and each
    is extended by at most ``1 + int(complexity * BRANCH_LENGTH_SCALE)``
    further cells (the actual cap is drawn per branch).
    """
    report = TuningReport(strategy="dead_ends", complexity=complexity)

    degrees = maze.degrees()
    report.dead_ends_before = sum(1 for d in degrees.values() if d == 1)

    roots = [p for p in maze.wall_cells(interior_only=True) if _is_leaf_candidate(maze, p)]
    rng.shuffle(roots)

    budget = math.floor(maze.size * complexity * branch_density)
    longest = 1 + int(complexity * BRANCH_LENGTH_SCALE)

    for root in roots:
        if report.branches_added >= budget:
            break
        report.attempts += 1
        # earlier branches may have touched this wall since it was listed
        if not _is_leaf_candidate(maze, root):
            continue

        maze.open_cell(root)
        report.opened.append(root)
        report.opened.extend(_extend_branch(maze, root, rng.randint(1, longest), rng))
        report.branches_added += 1

    report.cells_opened = len(report.opened)
    report.dead_ends_after = dead_end_count(maze)
    return report


def tune_maze(
    maze: Maze,
    complexity: float,
    rng: random.Random,
    extreme_threshold: float = EXTREME_THRESHOLD,
    attempt_factor: int = LOOP_ATTEMPT_FACTOR,
    branch_density: float = BRANCH_DENSITY,
) -> TuningReport:
    """Apply the strategy matching the complexity scalar."""
    if not 0.0 <= complexity <= 1.0:
        raise ValueError(f"Path complexity must be within [0, 1], got {complexity}")

    if complexity > extreme_threshold:
        report = inject_dead_ends(maze, complexity, rng, branch_density=branch_density)
    else:
        report = add_loops(maze, complexity, rng, attempt_factor=attempt_factor)

    logger.info(
        f"Tuned maze ({report.strategy}, complexity={complexity}): "
        f"opened {report.cells_opened} cells in {report.attempts} attempts, "
        f"dead ends {report.dead_ends_before} -> {report.dead_ends_after}"
    )
    return report
