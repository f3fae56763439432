"""Tests for session snapshot serialization."""

import json

import pytest
from pydantic import ValidationError

from labyrinth.core.exceptions import MazeValidationError
from labyrinth.core.grid import Direction, Position
from labyrinth.core.pathfinder import solve
from labyrinth.core.session import GameSession, SessionStatus
from labyrinth.schemas.session import SNAPSHOT_VERSION, deserialize_session, serialize_session

from conftest import SIMPLE_MAZE


class TestSnapshot:
    """Tests for serialize_session / deserialize_session."""

    def test_snapshot_fields(self, simple_session):
        """Test the JSON-compatible snapshot layout."""
        simple_session.move(Direction.DOWN)
        data = serialize_session(simple_session)

        assert data["version"] == SNAPSHOT_VERSION
        assert data["session_id"] == "sess_test"
        assert data["grid"] == SIMPLE_MAZE.split("\n")
        assert data["player_position"] == {"row": 2, "col": 1}
        assert data["visited_cells"] == ["1,1", "2,1"]
        assert data["status"] == "playing"
        assert data["solution"][0] == {"row": 1, "col": 1}

    def test_round_trip_through_json(self, simple_session, clock, scheduler):
        """Test that a restored session continues where it left off."""
        simple_session.move(Direction.RIGHT)
        simple_session.hint()
        clock.advance(3)
        simple_session.pause()

        payload = json.dumps(serialize_session(simple_session))
        restored = deserialize_session(json.loads(payload), clock=clock, scheduler=scheduler)

        assert restored.session_id == simple_session.session_id
        assert restored.maze.topology() == simple_session.maze.topology()
        assert restored.solution == simple_session.solution
        assert restored.position == Position(1, 2)
        assert restored.visit_order == simple_session.visit_order
        assert restored.hints_used == 1
        assert restored.status is SessionStatus.PAUSED
        assert restored.elapsed_seconds() == simple_session.elapsed_seconds()
        assert restored.size == "small" and restored.seed == 1
        # hint markers are transient
        assert restored.maze.flagged("is_hint") == []

        assert restored.resume()
        assert restored.move(Direction.RIGHT).accepted

    def test_solution_overlay_restored(self, simple_session, clock, scheduler):
        """Test that a visible solution is visible again after restore."""
        simple_session.toggle_solution()
        restored = deserialize_session(serialize_session(simple_session), clock=clock, scheduler=scheduler)

        assert restored.showing_solution
        assert set(restored.maze.flagged("is_path")) == set(restored.solution)

    def test_completed_session_round_trip(self, simple_session, clock, scheduler):
        """Test that completion and its record survive."""
        for direction in ["down", "down", "right", "right"]:
            simple_session.move(direction)
        restored = deserialize_session(serialize_session(simple_session), clock=clock, scheduler=scheduler)

        assert restored.completed
        assert restored.completion_record() == simple_session.completion_record()

    def test_bad_grid_rejected(self, simple_session):
        """Test that a grid without an end cell is not a maze."""
        data = serialize_session(simple_session)
        data["grid"] = [row.replace("E", ".") for row in data["grid"]]

        with pytest.raises(MazeValidationError):
            deserialize_session(data)

    def test_bad_visited_key_rejected(self, simple_session):
        """Test schema validation of cell keys."""
        data = serialize_session(simple_session)
        data["visited_cells"] = ["1;1"]

        with pytest.raises(ValidationError):
            deserialize_session(data)

    def test_bad_status_rejected(self, simple_session):
        """Test schema validation of the status name."""
        data = serialize_session(simple_session)
        data["status"] = "won"

        with pytest.raises(ValidationError):
            deserialize_session(data)

    def test_player_on_wall_rejected(self, simple_session):
        """Test that progress must sit on an open cell."""
        data = serialize_session(simple_session)
        data["player_position"] = {"row": 0, "col": 0}

        with pytest.raises(ValueError, match="not an open cell"):
            deserialize_session(data)

    @pytest.mark.parametrize(
        "status, overrides",
        [
            ("paused", {"paused_at": None}),
            ("playing", {"paused_at": 1002.0}),
            ("completed", {"end_time": None}),
            ("playing", {"end_time": 1010.0}),
            ("playing", {"start_time": None}),
        ],
    )
    def test_status_and_timestamps_must_agree(self, simple_session, status, overrides):
        """Test that a snapshot whose timestamps contradict its status is rejected."""
        if status == "paused":
            simple_session.pause()
        elif status == "completed":
            for direction in ["down", "down", "right", "right"]:
                simple_session.move(direction)
        data = serialize_session(simple_session)
        assert data["status"] == status
        data.update(overrides)

        with pytest.raises(ValidationError):
            deserialize_session(data)

    def test_configuring_snapshot_needs_no_start_time(self, simple_maze, clock, scheduler):
        """Test that an unstarted session round-trips and can still start."""
        session = GameSession(simple_maze, solve(simple_maze), clock=clock, scheduler=scheduler)
        restored = deserialize_session(serialize_session(session), clock=clock, scheduler=scheduler)

        assert restored.status is SessionStatus.CONFIGURING
        assert restored.start()

    def test_hint_settings_applied_on_restore(self, simple_session, settings, clock, scheduler):
        """Test that restored sessions take hint length and duration from settings."""
        settings.hint_cells = 2
        settings.hint_duration_seconds = 5.0
        restored = deserialize_session(
            serialize_session(simple_session), clock=clock, scheduler=scheduler, settings=settings
        )

        assert restored.hint_length == 2
        assert restored.hint_duration == 5.0
        assert len(restored.hint().cells) == 2
        assert scheduler.advance(4.9) == 0
        assert scheduler.advance(0.2) == 1
