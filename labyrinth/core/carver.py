"""
Carving generator.

Builds a perfect maze (a spanning tree of open cells) with randomized
backtracking over the odd sublattice, starting at (1, 1). Carving always
moves two cells at a time; the cell in between is the wall that gets opened.

The backtracking uses an explicit stack of frames instead of recursion so a
45x45 grid (roughly 500 sublattice cells deep in the worst case) never runs
into the interpreter's recursion limit. Each frame shuffles its directions
when it is pushed, which is the same point a recursive call would shuffle,
so a seeded run visits cells in the same order as the recursive version.
"""

import logging
import random
from typing import Iterator

from .exceptions import MazeConfigError
from .grid import CellType, Direction, Maze, Position

logger = logging.getLogger(__name__)

MIN_GRID_SIZE = 5

# Candidate order before shuffling
CARVE_DIRECTIONS = tuple(Direction)


def working_size(size: int) -> int:
    """Odd dimension the sublattice is carved on."""
    return size if size % 2 == 1 else size + 1


def end_position(size: int) -> Position:
    """Nearest odd coordinate to (size - 2, size - 2)."""
    row = col = size - 2
    if row % 2 == 0:
        row -= 1
    if col % 2 == 0:
        col -= 1
    return Position(min(row, size - 1), min(col, size - 1))


def _is_carvable(position: Position, size: int) -> bool:
    """Inside the border and on odd coordinates."""
    return (
        0 < position.row < size - 1
        and 0 < position.col < size - 1
        and position.row % 2 == 1
        and position.col % 2 == 1
    )


def _shuffled_directions(rng: random.Random) -> Iterator[Direction]:
    directions = list(CARVE_DIRECTIONS)
    rng.shuffle(directions)
    return iter(directions)


def carve_passages(maze: Maze, origin: Position, rng: random.Random) -> int:
    """
    Carve a spanning tree over the odd sublattice of ``maze`` in place.

    Args:
        maze: All-wall maze of odd size.
        origin: Sublattice cell the carve starts from.
        rng: Random source; shuffles neighbour order per cell.

    Returns:
        Number of sublattice cells carved.
    """
    size = maze.size
    start_cell = maze.cell(origin)
    start_cell.type = CellType.EMPTY
    start_cell.carved = True

    stack: list[tuple[Position, Iterator[Direction]]] = [
        (origin, _shuffled_directions(rng))
    ]
    carved = 1

    while stack:
        current, directions = stack[-1]
        direction = next(directions, None)
        if direction is None:
            stack.pop()
            continue

        drow, dcol = direction.delta
        candidate = current.offset(drow * 2, dcol * 2)
        if not _is_carvable(candidate, size) or maze.cell(candidate).carved:
            continue

        wall = current.offset(drow, dcol)
        wall_cell = maze.cell(wall)
        wall_cell.type = CellType.EMPTY
        wall_cell.carved = True

        next_cell = maze.cell(candidate)
        next_cell.type = CellType.EMPTY
        next_cell.carved = True
        carved += 1

        stack.append((candidate, _shuffled_directions(rng)))

    return carved


def carve_maze(size: int, rng: random.Random, min_size: int = MIN_GRID_SIZE) -> Maze:
    """
    Carve a perfect maze of ``size`` x ``size`` cells.

    Even sizes are carved one cell larger and trimmed back; the trimmed row
    and column only ever hold border walls.

    Raises:
        MazeConfigError: If size is below ``min_size``.
    """
    if size < min_size:
        raise MazeConfigError(f"Grid size {size} is too small (minimum {min_size})")

    carve_size = working_size(size)
    work = Maze(carve_size)
    carved = carve_passages(work, Position(1, 1), rng)
    logger.debug(f"Carved {carved} sublattice cells on a {carve_size}x{carve_size} grid")

    if carve_size == size:
        maze = work
    else:
        maze = Maze(size)
        for row in range(size):
            for col in range(size):
                src = work.cells[row][col]
                dst = maze.cells[row][col]
                dst.type = src.type
                dst.carved = src.carved

    maze.set_type(Position(1, 1), CellType.START)
    maze.set_type(end_position(size), CellType.END)
    return maze
