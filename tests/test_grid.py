"""Tests for the grid model and maze parser."""

import pytest

from labyrinth.core.exceptions import MazeParseError, MazeValidationError
from labyrinth.core.grid import (
    CellType,
    Direction,
    Maze,
    Position,
    coordinates_to_key,
    key_to_coordinates,
)
from labyrinth.core.maze_parser import parse_maze_text, validate_maze_text

from conftest import EDGE_MAZE, SIMPLE_MAZE


class TestGridModel:
    """Tests for cells, positions and adjacency."""

    def test_cell_type_from_char(self):
        """Test character mapping, unknown characters read as walls."""
        assert CellType.from_char("X") is CellType.WALL
        assert CellType.from_char(".") is CellType.EMPTY
        assert CellType.from_char(" ") is CellType.EMPTY
        assert CellType.from_char("S") is CellType.START
        assert CellType.from_char("E") is CellType.END
        assert CellType.from_char("?") is CellType.WALL

    def test_start_and_end_are_open(self):
        """Test that start and end cells are traversable."""
        assert CellType.START.is_open
        assert CellType.END.is_open
        assert not CellType.WALL.is_open

    def test_direction_deltas(self):
        """Test that directions are 4-connected unit steps."""
        origin = Position(5, 5)
        assert origin.move(Direction.UP) == Position(4, 5)
        assert origin.move(Direction.DOWN) == Position(6, 5)
        assert origin.move(Direction.LEFT) == Position(5, 4)
        assert origin.move(Direction.RIGHT) == Position(5, 6)

    def test_key_round_trip(self):
        """Test canonical coordinate keys."""
        assert coordinates_to_key(3, 12) == "3,12"
        assert key_to_coordinates("3,12") == Position(3, 12)
        assert Position(7, 1).key == "7,1"

    def test_out_of_bounds_reads_as_wall(self):
        """Test that probing outside the grid never raises."""
        maze = Maze(5)
        assert maze.cell_type(Position(-1, 0)) is CellType.WALL
        assert maze.cell_type(Position(0, 5)) is CellType.WALL
        assert not maze.is_open(Position(10, 10))

    def test_cell_access_out_of_bounds_raises(self):
        """Test that direct cell access rejects bad coordinates."""
        with pytest.raises(IndexError):
            Maze(5).cell(Position(5, 0))

    def test_neighbors_exclude_diagonals(self):
        """Test 4-connected adjacency, clipped at the border."""
        maze = Maze(5)
        assert set(maze.neighbors(Position(2, 2))) == {
            Position(1, 2), Position(3, 2), Position(2, 1), Position(2, 3),
        }
        assert set(maze.neighbors(Position(0, 0))) == {Position(1, 0), Position(0, 1)}

    def test_open_neighbor_count(self):
        """Test counting open neighbours on the ring maze."""
        maze = parse_maze_text(SIMPLE_MAZE)
        assert maze.open_neighbor_count(Position(1, 1)) == 2
        assert maze.open_neighbor_count(Position(2, 2)) == 4
        assert maze.open_neighbor_count(Position(0, 0)) == 0

    def test_flags_do_not_touch_topology(self):
        """Test that presentation flags leave walls and paths alone."""
        maze = parse_maze_text(SIMPLE_MAZE)
        before = maze.topology()

        maze.mark_cells([Position(1, 2), Position(1, 3)], "is_path")
        maze.mark_cells([Position(2, 1)], "is_hint")
        assert set(maze.flagged("is_path")) == {Position(1, 2), Position(1, 3)}

        maze.clear_flags("is_hint")
        assert maze.flagged("is_hint") == []
        assert len(maze.flagged("is_path")) == 2

        maze.clear_flags()
        assert maze.flagged("is_path") == []
        assert maze.topology() == before

    def test_unknown_flag_rejected(self):
        """Test that only presentation flags can be set or cleared."""
        maze = Maze(5)
        with pytest.raises(ValueError):
            maze.mark_cells([Position(1, 1)], "type")
        with pytest.raises(ValueError):
            maze.clear_flags("carved")

    def test_clone_is_independent(self):
        """Test that a clone does not share cells with the original."""
        maze = parse_maze_text(SIMPLE_MAZE)
        copy = maze.clone()
        copy.open_cell(Position(2, 2))
        copy.mark_cells([Position(1, 2)], "is_hint")

        assert not maze.is_open(Position(2, 2))
        assert maze.flagged("is_hint") == []
        assert copy.start == maze.start and copy.end == maze.end

    def test_render_marks_player_and_flags(self):
        """Test ASCII rendering."""
        maze = parse_maze_text(SIMPLE_MAZE)
        maze.mark_cells([Position(1, 2)], "is_path")
        maze.mark_cells([Position(1, 3)], "is_hint")

        lines = maze.render(player=Position(2, 1)).split("\n")
        assert lines[1] == "█S*+█"
        assert lines[2] == "█@█ █"
        assert lines[3] == "█  E█"


class TestMazeParser:
    """Tests for maze parser functionality."""

    def test_parse_simple_maze(self):
        """Test parsing a simple valid maze."""
        maze = parse_maze_text(SIMPLE_MAZE)

        assert maze.size == 5
        assert maze.start == Position(1, 1)
        assert maze.end == Position(3, 3)
        assert maze.to_rows() == SIMPLE_MAZE.split("\n")

    def test_parse_edge_start(self):
        """Test that open cells on the border are allowed."""
        maze = parse_maze_text(EDGE_MAZE)
        assert maze.start == Position(1, 0)

    def test_parse_empty_maze_raises_error(self):
        """Test that empty maze raises MazeParseError."""
        with pytest.raises(MazeParseError, match="Maze text is empty"):
            parse_maze_text("")

    def test_parse_non_square_raises_error(self):
        """Test that ragged or rectangular grids are rejected."""
        with pytest.raises(MazeParseError, match="must be square"):
            parse_maze_text("XXXXX\nXS.EX\nXXXXX")

    def test_parse_maze_missing_start_raises_error(self):
        """Test that maze without start position raises error."""
        with pytest.raises(MazeValidationError, match="must have a start position"):
            parse_maze_text(SIMPLE_MAZE.replace("S", "."))

    def test_parse_maze_missing_end_raises_error(self):
        """Test that maze without end position raises error."""
        with pytest.raises(MazeValidationError, match="must have an end position"):
            parse_maze_text(SIMPLE_MAZE.replace("E", "."))

    def test_parse_maze_multiple_starts_raises_error(self):
        """Test that maze with multiple starts raises error."""
        maze = """XXXXX
XS.SX
X.X.X
X..EX
XXXXX"""
        with pytest.raises(MazeValidationError, match="Multiple start positions"):
            parse_maze_text(maze)

    def test_parse_maze_invalid_char_raises_error(self):
        """Test that maze with invalid character raises error."""
        with pytest.raises(MazeValidationError, match="Invalid character"):
            parse_maze_text(SIMPLE_MAZE.replace("X.X.X", "X.X?X"))

    def test_validate_maze_text(self):
        """Test non-raising validation."""
        assert validate_maze_text(SIMPLE_MAZE) == (True, None)
        ok, error = validate_maze_text("")
        assert not ok
        assert "empty" in error
