"""
Labyrinth Maze Engine

Session registry for a host application:
- Maze generation per size/difficulty preset
- Move, hint, pause and solution actions by session id
- Regeneration at the configuring boundary
- Snapshot hand-off when a session ends

The engine keeps no statistics and touches no storage; ``end_session``
returns the final snapshot and completed sessions expose a completion record
for the host to pass on.
"""

import logging
import time
from typing import Callable, Optional, Union

from ..config import Settings, get_settings
from ..schemas.session import serialize_session
from ..schemas.stats import CompletionRecord
from .generator import GeneratedMaze, generate_maze
from .grid import Direction
from .session import GameSession, HintResult, HintScheduler, MoveResult

logger = logging.getLogger(__name__)


class MazeEngine:
    """
    Core maze engine for the labyrinth game.

    Example usage:
        engine = MazeEngine()
        session = engine.create_session("small", "easy")

        result = engine.move(session.session_id, Direction.DOWN)
        hint = engine.hint(session.session_id)

        snapshot = engine.end_session(session.session_id)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
        scheduler: Optional[HintScheduler] = None,
    ):
        self.settings = settings or get_settings()
        self._clock = clock
        self._scheduler = scheduler

        # Active sessions
        self._sessions: dict[str, GameSession] = {}

    def _build_session(self, generated: GeneratedMaze, session_id: Optional[str]) -> GameSession:
        return GameSession.from_generated(
            generated,
            session_id=session_id,
            max_hints=self.settings.max_hints,
            hint_length=self.settings.hint_cells,
            hint_duration=self.settings.hint_duration_seconds,
            clock=self._clock,
            scheduler=self._scheduler,
        )

    def create_session(
        self,
        size: str,
        difficulty: str,
        seed: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> GameSession:
        """
        Generate a maze and start a session on it.

        Args:
            size: Size preset key.
            difficulty: Difficulty preset key.
            seed: Optional random seed for reproducible mazes.
            session_id: Optional custom session ID.

        Returns:
            GameSession in the playing state.

        Raises:
            MazeConfigError: If a preset key is unknown.
            MazeConsistencyError: If generation kept failing.
        """
        generated = generate_maze(size, difficulty, seed=seed, settings=self.settings)
        session = self._build_session(generated, session_id)
        if session.session_id in self._sessions:
            self._sessions[session.session_id].close()
        self._sessions[session.session_id] = session
        logger.info(f"Session {session.session_id} started on {size}/{difficulty} (seed={generated.seed})")
        return session

    def add_session(self, session: GameSession) -> GameSession:
        """Register a session rebuilt from a snapshot."""
        previous = self._sessions.get(session.session_id)
        if previous is not None and previous is not session:
            previous.close()
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[GameSession]:
        """Get session by ID."""
        return self._sessions.get(session_id)

    def _require(self, session_id: str) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise ValueError(f"Session not found: {session_id}")
        return session

    def end_session(self, session_id: str) -> Optional[dict]:
        """
        End and remove a session.

        Returns:
            Final snapshot for the persistence collaborator, or None if the
            session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        session.close()
        return serialize_session(session)

    def regenerate(self, session_id: str, seed: Optional[int] = None) -> GameSession:
        """Replace a session's maze with a fresh one on the same presets."""
        old = self._require(session_id)
        if old.size is None or old.difficulty is None:
            raise ValueError(f"Session {session_id} was not created from presets")
        old.close()
        return self.create_session(old.size, old.difficulty, seed=seed, session_id=session_id)

    def move(self, session_id: str, direction: Union[Direction, str]) -> MoveResult:
        """
        Move in a direction.

        Raises:
            ValueError: If session not found.
        """
        session = self._require(session_id)
        result = session.move(direction)
        if result.completed and result.accepted:
            logger.info(
                f"Session {session_id} completed in {result.move_count} moves "
                f"({session.elapsed_seconds():.1f}s)"
            )
        return result

    def hint(self, session_id: str) -> HintResult:
        return self._require(session_id).hint()

    def toggle_solution(self, session_id: str) -> bool:
        return self._require(session_id).toggle_solution()

    def pause(self, session_id: str) -> bool:
        return self._require(session_id).pause()

    def resume(self, session_id: str) -> bool:
        return self._require(session_id).resume()

    def reset(self, session_id: str) -> bool:
        return self._require(session_id).reset()

    def completion_record(self, session_id: str) -> Optional[CompletionRecord]:
        return self._require(session_id).completion_record()

    def visualize(self, session_id: str) -> str:
        """ASCII render of a session's maze with the player marker."""
        session = self._require(session_id)
        return session.maze.render(player=session.position)
