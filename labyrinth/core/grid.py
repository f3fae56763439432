"""
Labyrinth grid model.

Cell vocabulary, coordinates and adjacency shared by the generator, the
tuner, the pathfinder and the game session.

Grid Format:
    S = Start position
    E = End (goal)
    X = Wall (impassable)
    . = Open path

Coordinates are (row, col) with (0, 0) at the top-left corner. Adjacency is
4-connected; diagonals never count.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional


class CellType(Enum):
    """Types of cells in the maze."""
    WALL = "X"
    EMPTY = "."
    START = "S"
    END = "E"

    @classmethod
    def from_char(cls, char: str) -> "CellType":
        """Convert character to CellType."""
        mapping = {
            ".": cls.EMPTY,
            " ": cls.EMPTY,
            "X": cls.WALL,
            "S": cls.START,
            "E": cls.END,
        }
        return mapping.get(char, cls.WALL)

    @property
    def is_open(self) -> bool:
        """Whether a player can stand on this cell."""
        return self is not CellType.WALL


class Direction(Enum):
    """Movement directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        """Get (drow, dcol) for this direction."""
        deltas = {
            Direction.UP: (-1, 0),
            Direction.DOWN: (1, 0),
            Direction.LEFT: (0, -1),
            Direction.RIGHT: (0, 1),
        }
        return deltas[self]


# Fixed neighbour order; BFS and path counting iterate in this order.
NEIGHBOR_DELTAS: tuple[tuple[int, int], ...] = tuple(d.delta for d in Direction)


@dataclass(frozen=True)
class Position:
    """2D position in the maze."""
    row: int
    col: int

    def move(self, direction: Direction) -> "Position":
        """Return new position after moving in direction."""
        drow, dcol = direction.delta
        return Position(self.row + drow, self.col + dcol)

    def offset(self, drow: int, dcol: int) -> "Position":
        return Position(self.row + drow, self.col + dcol)

    def manhattan(self, other: "Position") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)

    @property
    def key(self) -> str:
        return coordinates_to_key(self.row, self.col)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"row": self.row, "col": self.col}


def coordinates_to_key(row: int, col: int) -> str:
    """Canonical set key for a coordinate pair."""
    return f"{row},{col}"


def key_to_coordinates(key: str) -> Position:
    """Inverse of coordinates_to_key."""
    row, col = key.split(",")
    return Position(int(row), int(col))


@dataclass
class Cell:
    """One grid position.

    ``carved`` is only meaningful while the generator runs. ``is_path`` and
    ``is_hint`` are presentation flags and never affect topology.
    """
    row: int
    col: int
    type: CellType = CellType.WALL
    carved: bool = False
    is_path: bool = False
    is_hint: bool = False

    @property
    def position(self) -> Position:
        return Position(self.row, self.col)

    @property
    def is_open(self) -> bool:
        return self.type.is_open


PRESENTATION_FLAGS = ("is_path", "is_hint")


class Maze:
    """
    Square grid of cells.

    Out-of-range reads behave like walls, so callers can inspect neighbours of
    border cells without bounds checks of their own.
    """

    def __init__(self, size: int):
        if size < 1:
            raise ValueError(f"Maze size must be positive, got {size}")
        self.size = size
        self.cells: list[list[Cell]] = [
            [Cell(row, col) for col in range(size)] for row in range(size)
        ]
        self.start: Optional[Position] = None
        self.end: Optional[Position] = None

    def __repr__(self) -> str:
        return f"<Maze {self.size}x{self.size} start={self.start} end={self.end}>"

    # Coordinates

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def contains(self, position: Position) -> bool:
        return self.in_bounds(position.row, position.col)

    def cell(self, position: Position) -> Cell:
        """Get the cell at position; raises IndexError when out of range."""
        if not self.contains(position):
            raise IndexError(f"Position out of range: {position}")
        return self.cells[position.row][position.col]

    def cell_type(self, position: Position) -> CellType:
        """Get cell type at position; out of bounds = wall."""
        if not self.contains(position):
            return CellType.WALL
        return self.cells[position.row][position.col].type

    def is_open(self, position: Position) -> bool:
        return self.cell_type(position).is_open

    def neighbors(self, position: Position) -> list[Position]:
        """In-bounds 4-connected neighbours."""
        result = []
        for drow, dcol in NEIGHBOR_DELTAS:
            candidate = position.offset(drow, dcol)
            if self.contains(candidate):
                result.append(candidate)
        return result

    def open_neighbors(self, position: Position) -> list[Position]:
        return [n for n in self.neighbors(position) if self.is_open(n)]

    def open_neighbor_count(self, position: Position) -> int:
        return len(self.open_neighbors(position))

    def is_interior(self, position: Position) -> bool:
        """True for cells that are not on the outer ring."""
        return 0 < position.row < self.size - 1 and 0 < position.col < self.size - 1

    # Topology

    def set_type(self, position: Position, cell_type: CellType) -> None:
        self.cell(position).type = cell_type
        if cell_type is CellType.START:
            self.start = position
        elif cell_type is CellType.END:
            self.end = position

    def open_cell(self, position: Position) -> None:
        """Carve a wall into an empty cell."""
        self.cell(position).type = CellType.EMPTY

    def iter_cells(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def open_cells(self) -> list[Position]:
        return [c.position for c in self.iter_cells() if c.is_open]

    def wall_cells(self, interior_only: bool = False) -> list[Position]:
        walls = [c.position for c in self.iter_cells() if not c.is_open]
        if interior_only:
            walls = [p for p in walls if self.is_interior(p)]
        return walls

    def degrees(self) -> dict[Position, int]:
        """Open-neighbour count for every open cell."""
        return {p: self.open_neighbor_count(p) for p in self.open_cells()}

    # Presentation flags

    def clear_flags(self, *flags: str) -> None:
        """Reset presentation flags on every cell."""
        flags = flags or PRESENTATION_FLAGS
        for name in flags:
            if name not in PRESENTATION_FLAGS:
                raise ValueError(f"Not a presentation flag: {name}")
        for cell in self.iter_cells():
            for name in flags:
                setattr(cell, name, False)

    def mark_cells(self, positions: Iterable[Position], flag: str, value: bool = True) -> None:
        """Set a presentation flag on the given cells."""
        if flag not in PRESENTATION_FLAGS:
            raise ValueError(f"Not a presentation flag: {flag}")
        for position in positions:
            setattr(self.cell(position), flag, value)

    def flagged(self, flag: str) -> list[Position]:
        return [c.position for c in self.iter_cells() if getattr(c, flag)]

    # Copies and text forms

    def clone(self) -> "Maze":
        """Deep copy, flags included."""
        copy = Maze(self.size)
        for src, dst in zip(self.iter_cells(), copy.iter_cells()):
            dst.type = src.type
            dst.carved = src.carved
            dst.is_path = src.is_path
            dst.is_hint = src.is_hint
        copy.start = self.start
        copy.end = self.end
        return copy

    def to_rows(self) -> list[str]:
        """Topology as one string per row."""
        return ["".join(cell.type.value for cell in row) for row in self.cells]

    def topology(self) -> tuple[str, ...]:
        """Hashable topology fingerprint (flags excluded)."""
        return tuple(self.to_rows())

    def render(self, player: Optional[Position] = None, show_flags: bool = True) -> str:
        """
        Generate ASCII visualization of the maze.

        Args:
            player: If provided, drawn as ``@``.
            show_flags: Draw solution cells as ``*`` and hint cells as ``+``.

        Returns:
            ASCII string representation.
        """
        lines = []
        for row in self.cells:
            line = ""
            for cell in row:
                if player is not None and cell.position == player:
                    line += "@"
                elif show_flags and cell.is_hint and cell.type is CellType.EMPTY:
                    line += "+"
                elif show_flags and cell.is_path and cell.type is CellType.EMPTY:
                    line += "*"
                elif cell.type is CellType.WALL:
                    line += "█"
                elif cell.type is CellType.EMPTY:
                    line += " "
                else:
                    line += cell.type.value
            lines.append(line)
        return "\n".join(lines)
