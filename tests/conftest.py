"""Pytest configuration and fixtures."""

import random

import pytest

from labyrinth.config import Settings
from labyrinth.core.grid import Direction, Maze, Position
from labyrinth.core.maze_parser import parse_maze_text
from labyrinth.core.pathfinder import solve
from labyrinth.core.session import GameSession, ManualHintScheduler


# Ring maze: two routes from S to E
SIMPLE_MAZE = """XXXXX
XS..X
X.X.X
X..EX
XXXXX"""

# U-shaped corridor: one route, one wall touching both S and E
U_MAZE = """XXXXX
XSXEX
X.X.X
X...X
XXXXX"""

# Start sits on the left edge of the grid
EDGE_MAZE = """XXXXX
S...X
X.X.X
X..EX
XXXXX"""


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def open_room(size: int) -> Maze:
    """Walled square with a fully open interior; S top-left, E bottom-right."""
    rows = ["X" * size]
    for _ in range(size - 2):
        rows.append("X" + "." * (size - 2) + "X")
    rows.append("X" * size)
    rows[1] = "XS" + rows[1][2:]
    last = size - 2
    rows[last] = rows[last][: size - 2] + "EX"
    return parse_maze_text("\n".join(rows))


def directions_along(path: list[Position]) -> list[Direction]:
    """Directions that walk a path cell by cell."""
    lookup = {d.delta: d for d in Direction}
    return [
        lookup[(b.row - a.row, b.col - a.col)]
        for a, b in zip(path, path[1:])
    ]


@pytest.fixture
def settings() -> Settings:
    """Engine settings independent of the environment."""
    return Settings(
        _env_file=None,
        max_hints=3,
        hint_cells=3,
        hint_duration_seconds=3.0,
        verify_uniqueness=True,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> ManualHintScheduler:
    return ManualHintScheduler()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def simple_maze() -> Maze:
    return parse_maze_text(SIMPLE_MAZE)


@pytest.fixture
def simple_session(simple_maze, clock, scheduler) -> GameSession:
    """Started session on the ring maze."""
    session = GameSession(
        simple_maze,
        solve(simple_maze),
        session_id="sess_test",
        size="small",
        difficulty="easy",
        seed=1,
        clock=clock,
        scheduler=scheduler,
    )
    session.start()
    return session
