"""
Breadth-first pathfinding.

Serves two callers: the generator, which computes the canonical solution
once per maze, and the game session, which asks for hint cells at runtime.
Paths are reconstructed from parent pointers rather than copied along with
every queue entry, which keeps memory linear on the large preset.
"""

from collections import deque
from typing import Optional, Sequence

from .exceptions import MazeConsistencyError
from .grid import NEIGHBOR_DELTAS, Direction, Maze, Position


def find_path(maze: Maze, start: Position, end: Position) -> Optional[list[Position]]:
    """
    Find the shortest open path from start to end.

    Args:
        maze: Maze to search.
        start: First cell of the path.
        end: Last cell of the path.

    Returns:
        List of positions from start to end (both included), or None if end
        is unreachable.
    """
    if not maze.is_open(start) or not maze.is_open(end):
        return None
    if start == end:
        return [start]

    parents: dict[Position, Optional[Position]] = {start: None}
    queue = deque([start])

    while queue:
        pos = queue.popleft()

        for drow, dcol in NEIGHBOR_DELTAS:
            new_pos = pos.offset(drow, dcol)

            if new_pos in parents or not maze.is_open(new_pos):
                continue

            parents[new_pos] = pos
            if new_pos == end:
                return _reconstruct(parents, end)
            queue.append(new_pos)

    return None  # No path found


def _reconstruct(parents: dict[Position, Optional[Position]], end: Position) -> list[Position]:
    path = []
    node: Optional[Position] = end
    while node is not None:
        path.append(node)
        node = parents[node]
    path.reverse()
    return path


def require_path(maze: Maze, start: Position, end: Position) -> list[Position]:
    """
    Like find_path, but a missing route is an internal-consistency error.

    Raises:
        MazeConsistencyError: If end is unreachable from start.
    """
    path = find_path(maze, start, end)
    if path is None:
        raise MazeConsistencyError(
            f"No path from {start.key} to {end.key} on a {maze.size}x{maze.size} maze"
        )
    return path


def solve(maze: Maze) -> list[Position]:
    """Canonical solution between the maze's own start and end cells."""
    if maze.start is None or maze.end is None:
        raise MazeConsistencyError("Maze has no start or end cell")
    return require_path(maze, maze.start, maze.end)


def solution_index(solution: Sequence[Position], position: Position) -> int:
    """Index of position on the solution, or -1 when it is off the path."""
    for index, step in enumerate(solution):
        if step == position:
            return index
    return -1


def hint_cells(
    solution: Sequence[Position],
    position: Position,
    count: int = 3,
) -> Optional[list[Position]]:
    """
    Next cells along the solution after the player's position.

    Returns:
        Up to ``count`` positions following ``position``; an empty list when
        the player already stands on the last cell; None when ``position`` is
        not on the solution at all.
    """
    index = solution_index(solution, position)
    if index == -1:
        return None
    return list(solution[index + 1 : index + 1 + count])


def available_directions(maze: Maze, position: Position) -> list[Direction]:
    """Directions leading to an open cell from position."""
    return [d for d in Direction if maze.is_open(position.move(d))]


def is_valid_move(maze: Maze, origin: Position, target: Position) -> bool:
    """Adjacent (no diagonals) and not a wall."""
    if origin.manhattan(target) != 1:
        return False
    return maze.is_open(target)
