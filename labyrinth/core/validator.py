"""
Path counter and structural validators.

``count_paths`` enumerates every simple path between two cells. Its worst
case is exponential, so it only runs in tests and behind the
``verify_uniqueness`` debug switch, always with a step and time budget.
"""

import time
from collections import deque
from typing import Callable, Iterator, Optional

from .exceptions import MazeConsistencyError, PathCountBudgetExceeded
from .grid import CellType, Maze, Position

# How often (in DFS steps) the wall clock is consulted
_CLOCK_CHECK_INTERVAL = 1024


def count_paths(
    maze: Maze,
    start: Position,
    end: Position,
    limit: Optional[int] = None,
    max_steps: Optional[int] = None,
    timeout: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Count distinct simple paths from start to end.

    Depth-first enumeration with a visited set that is pushed on descent and
    popped on backtrack. Iterative, so path length is not bounded by the
    recursion limit.

    Args:
        maze: Maze to search.
        start: Path origin.
        end: Path destination.
        limit: Stop early once this many paths are found.
        max_steps: Maximum neighbour expansions before giving up.
        timeout: Maximum wall-clock seconds before giving up.
        clock: Time source for the timeout.

    Returns:
        Number of paths found (capped at ``limit`` when given).

    Raises:
        PathCountBudgetExceeded: If the step or time budget runs out.
    """
    if not maze.is_open(start) or not maze.is_open(end):
        return 0
    if start == end:
        return 1

    deadline = clock() + timeout if timeout is not None else None
    visited = {start}
    stack: list[tuple[Position, Iterator[Position]]] = [
        (start, iter(maze.open_neighbors(start)))
    ]
    count = 0
    steps = 0

    while stack:
        pos, candidates = stack[-1]
        nxt = next(candidates, None)
        if nxt is None:
            stack.pop()
            visited.discard(pos)
            continue

        steps += 1
        if max_steps is not None and steps > max_steps:
            raise PathCountBudgetExceeded(
                f"Path count exceeded {max_steps} steps ({count} paths so far)", count
            )
        if deadline is not None and steps % _CLOCK_CHECK_INTERVAL == 0 and clock() > deadline:
            raise PathCountBudgetExceeded(
                f"Path count exceeded {timeout}s ({count} paths so far)", count
            )

        if nxt in visited:
            continue
        if nxt == end:
            count += 1
            if limit is not None and count >= limit:
                return count
            continue

        visited.add(nxt)
        stack.append((nxt, iter(maze.open_neighbors(nxt))))

    return count


def enumerate_paths(maze: Maze, start: Position, end: Position, limit: int = 16) -> list[list[Position]]:
    """Materialize up to ``limit`` simple paths (test helper for small grids)."""
    if not maze.is_open(start) or not maze.is_open(end):
        return []
    if start == end:
        return [[start]]

    paths: list[list[Position]] = []
    trail = [start]
    visited = {start}
    stack: list[Iterator[Position]] = [iter(maze.open_neighbors(start))]

    while stack and len(paths) < limit:
        nxt = next(stack[-1], None)
        if nxt is None:
            stack.pop()
            visited.discard(trail.pop())
            continue
        if nxt in visited:
            continue
        if nxt == end:
            paths.append(trail + [end])
            continue
        visited.add(nxt)
        trail.append(nxt)
        stack.append(iter(maze.open_neighbors(nxt)))

    return paths


def find_endpoints(maze: Maze) -> tuple[list[Position], list[Position]]:
    """All start cells and all end cells, in row-major order."""
    starts, ends = [], []
    for cell in maze.iter_cells():
        if cell.type is CellType.START:
            starts.append(cell.position)
        elif cell.type is CellType.END:
            ends.append(cell.position)
    return starts, ends


def reachable_cells(maze: Maze, origin: Position) -> set[Position]:
    """Open cells connected to origin."""
    if not maze.is_open(origin):
        return set()
    seen = {origin}
    queue = deque([origin])
    while queue:
        pos = queue.popleft()
        for nxt in maze.open_neighbors(pos):
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    return seen


def validate_maze(maze: Maze) -> bool:
    """
    Structural check of a finished maze.

    Exactly one start and one end, and every open cell (end included)
    reachable from start.
    """
    starts, ends = find_endpoints(maze)
    if len(starts) != 1 or len(ends) != 1:
        return False
    reachable = reachable_cells(maze, starts[0])
    return ends[0] in reachable and len(reachable) == len(maze.open_cells())


def cycle_rank(maze: Maze) -> int:
    """
    Number of independent cycles in the open-cell graph.

    Edges minus nodes plus connected components; 0 means every component is
    a tree.
    """
    open_cells = maze.open_cells()
    edges = 0
    for pos in open_cells:
        # count each edge once, from its upper/left end
        if maze.is_open(pos.offset(1, 0)):
            edges += 1
        if maze.is_open(pos.offset(0, 1)):
            edges += 1

    remaining = set(open_cells)
    components = 0
    while remaining:
        components += 1
        remaining -= reachable_cells(maze, next(iter(remaining)))

    return edges - len(open_cells) + components


def dead_end_count(maze: Maze) -> int:
    """Open cells with exactly one open neighbour."""
    return sum(1 for degree in maze.degrees().values() if degree == 1)


def verify_unique_solution(
    maze: Maze,
    max_steps: Optional[int] = None,
    timeout: Optional[float] = None,
) -> None:
    """
    Assert exactly one simple path between the maze's start and end.

    Raises:
        MazeConsistencyError: If the path count is not 1.
        PathCountBudgetExceeded: If counting ran out of budget.
    """
    if maze.start is None or maze.end is None:
        raise MazeConsistencyError("Maze has no start or end cell")
    paths = count_paths(maze, maze.start, maze.end, limit=2, max_steps=max_steps, timeout=timeout)
    if paths != 1:
        raise MazeConsistencyError(
            f"Expected exactly one path from start to end, found {paths if paths < 2 else '2+'}"
        )
