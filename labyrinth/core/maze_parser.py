"""
Maze Parser for the labyrinth engine.

Rebuilds a Maze from its row-string form, as stored in session snapshots.

Grid Format:
    S = Start position
    E = End (goal)
    X = Wall (impassable)
    . = Open path (can also be space)
"""

from typing import Optional

from .exceptions import MazeParseError, MazeValidationError
from .grid import CellType, Maze, Position

VALID_CHARS = {"S", "E", "X", ".", " "}


def parse_maze_rows(rows: list[str]) -> Maze:
    """
    Parse a list of row strings into a Maze.

    Args:
        rows: One string per grid row; the grid must be square.

    Returns:
        Maze with start and end positions set.

    Raises:
        MazeParseError: If the rows cannot form a grid.
        MazeValidationError: If the grid is not a valid maze.
    """
    if not rows:
        raise MazeParseError("Maze has no rows")

    size = len(rows)
    for y, line in enumerate(rows):
        if len(line) != size:
            raise MazeParseError(
                f"Maze must be square: row {y} has {len(line)} columns, expected {size}"
            )

    maze = Maze(size)
    start_pos: Optional[Position] = None
    end_pos: Optional[Position] = None

    for row, line in enumerate(rows):
        for col, char in enumerate(line):
            if char not in VALID_CHARS:
                raise MazeValidationError(
                    f"Invalid character '{char}' at position ({row}, {col}). "
                    f"Valid characters: {', '.join(sorted(VALID_CHARS))}"
                )

            cell_type = CellType.from_char(char)
            position = Position(row, col)

            if cell_type is CellType.START:
                if start_pos is not None:
                    raise MazeValidationError(
                        f"Multiple start positions found: "
                        f"first at {start_pos.key}, second at {position.key}"
                    )
                start_pos = position
            elif cell_type is CellType.END:
                if end_pos is not None:
                    raise MazeValidationError(
                        f"Multiple end positions found: "
                        f"first at {end_pos.key}, second at {position.key}"
                    )
                end_pos = position

            maze.set_type(position, cell_type)

    if start_pos is None:
        raise MazeValidationError("Maze must have a start position (S)")

    if end_pos is None:
        raise MazeValidationError("Maze must have an end position (E)")

    return maze


def parse_maze_text(maze_text: str) -> Maze:
    """Parse a multi-line grid string."""
    if not maze_text or not maze_text.strip():
        raise MazeParseError("Maze text is empty")
    return parse_maze_rows(maze_text.strip("\n").split("\n"))


def validate_maze_text(maze_text: str) -> tuple[bool, Optional[str]]:
    """
    Validate maze text without raising exceptions.

    Returns:
        Tuple of (is_valid, error_message).
        error_message is None if valid.
    """
    try:
        parse_maze_text(maze_text)
        return True, None
    except (MazeParseError, MazeValidationError) as e:
        return False, str(e)
