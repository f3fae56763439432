"""Tests for the maze engine session registry."""

import pytest

from labyrinth.core.engine import MazeEngine
from labyrinth.core.exceptions import MazeConfigError
from labyrinth.core.session import MoveRejection, SessionStatus
from labyrinth.schemas.session import deserialize_session

from conftest import directions_along


@pytest.fixture
def engine(settings, clock, scheduler) -> MazeEngine:
    return MazeEngine(settings=settings, clock=clock, scheduler=scheduler)


class TestMazeEngine:
    """Tests for engine actions by session id."""

    def test_create_session(self, engine):
        """Test that a new session is registered and playing."""
        session = engine.create_session("small", "easy", seed=7)

        assert engine.get_session(session.session_id) is session
        assert session.status is SessionStatus.PLAYING
        assert session.size == "small"
        assert session.difficulty == "easy"
        assert session.seed == 7
        assert session.max_hints == 3

    def test_custom_session_id(self, engine):
        """Test caller-supplied ids."""
        session = engine.create_session("small", "easy", seed=7, session_id="player-1")
        assert session.session_id == "player-1"

    def test_unknown_preset(self, engine):
        """Test that bad presets surface as configuration errors."""
        with pytest.raises(MazeConfigError):
            engine.create_session("gigantic", "easy")

    def test_unknown_session_raises(self, engine):
        """Test actions on a missing id."""
        with pytest.raises(ValueError, match="Session not found"):
            engine.move("nope", "up")
        assert engine.get_session("nope") is None

    def test_move_and_complete(self, engine):
        """Test walking the canonical solution through the engine."""
        session = engine.create_session("small", "medium", seed=21)

        for direction in directions_along(session.solution):
            result = engine.move(session.session_id, direction)
            assert result.accepted

        assert result.completed
        record = engine.completion_record(session.session_id)
        assert record.optimal
        assert record.config_key == "small-medium"

    def test_wall_move_rejected(self, engine):
        """Test that the border wall above the start blocks movement."""
        session = engine.create_session("small", "easy", seed=2)
        result = engine.move(session.session_id, "up")
        assert result.reason is MoveRejection.WALL

    def test_hint_pause_and_solution(self, engine, scheduler):
        """Test the pass-through actions."""
        session = engine.create_session("medium", "easy", seed=4)
        sid = session.session_id

        assert engine.hint(sid).accepted
        assert scheduler.pending == 1
        assert engine.toggle_solution(sid) is True
        assert engine.pause(sid)
        assert engine.resume(sid)
        assert engine.reset(sid)
        assert session.hints_used == 0

    def test_regenerate_keeps_id(self, engine, scheduler):
        """Test that a new maze replaces the old one under the same id."""
        old = engine.create_session("small", "easy", seed=1, session_id="game")
        engine.hint("game")

        new = engine.regenerate("game", seed=2)

        assert new.session_id == "game"
        assert new is not old
        assert engine.get_session("game") is new
        assert new.move_count == 0
        assert scheduler.pending == 0

    def test_end_session_returns_snapshot(self, engine, clock, scheduler):
        """Test the persistence hand-off."""
        session = engine.create_session("small", "easy", seed=9)
        engine.move(session.session_id, directions_along(session.solution)[0])

        snapshot = engine.end_session(session.session_id)

        assert engine.get_session(session.session_id) is None
        assert snapshot["move_count"] == 1
        assert engine.end_session(session.session_id) is None

        restored = engine.add_session(deserialize_session(snapshot, clock=clock, scheduler=scheduler))
        assert engine.get_session(restored.session_id) is restored
        assert restored.position == session.position

    def test_visualize(self, engine):
        """Test the ASCII render with the player marker."""
        session = engine.create_session("small", "easy", seed=3)
        lines = engine.visualize(session.session_id).split("\n")

        assert len(lines) == 10
        assert lines[1][1] == "@"
