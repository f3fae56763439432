"""
Game session state machine.

Tracks one player's live traversal of a generated maze:

    configuring -> playing <-> paused -> completed

Moves and hints that cannot be honoured are routine player input, so they
come back as reason-coded results instead of exceptions. The session only
touches the maze's presentation flags (solution and hint markers), never its
wall/empty topology.

Hint markers expire after a fixed delay through a cancellable scheduled
callback. Every scheduled expiry carries the token that was current when it
was scheduled; reset, close and newer hints advance the token, so a late
callback for an older hint does nothing.
"""

import asyncio
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Callable, Optional, Protocol, Union

from ..schemas.stats import CompletionRecord
from .grid import Direction, Maze, Position
from .pathfinder import find_path, hint_cells


class SessionStatus(Enum):
    """Lifecycle states of a game session."""
    CONFIGURING = "configuring"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"


class MoveRejection(Enum):
    """Why a move left the session unchanged."""
    NOT_STARTED = "not_started"
    PAUSED = "paused"
    COMPLETED = "completed"
    OUT_OF_BOUNDS = "out_of_bounds"
    WALL = "wall"


class HintRejection(Enum):
    """Why a hint request was refused."""
    NOT_PLAYING = "not_playing"
    BUDGET_EXHAUSTED = "budget_exhausted"
    NO_ROUTE = "no_route"


@dataclass
class MoveResult:
    """Result of a move action."""
    accepted: bool
    position: Position
    move_count: int
    completed: bool = False
    reason: Optional[MoveRejection] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        result = {
            "accepted": self.accepted,
            "position": self.position.to_dict(),
            "move_count": self.move_count,
            "completed": self.completed,
        }
        if self.reason:
            result["reason"] = self.reason.value
        return result


@dataclass
class HintResult:
    """Result of a hint request."""
    accepted: bool
    cells: list[Position] = field(default_factory=list)
    hints_used: int = 0
    hints_remaining: int = 0
    off_path: bool = False
    reason: Optional[HintRejection] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        result = {
            "accepted": self.accepted,
            "cells": [c.to_dict() for c in self.cells],
            "hints_used": self.hints_used,
            "hints_remaining": self.hints_remaining,
            "off_path": self.off_path,
        }
        if self.reason:
            result["reason"] = self.reason.value
        return result


class ScheduledHandle(Protocol):
    def cancel(self) -> None: ...


class HintScheduler(Protocol):
    """Runs a callback once after a delay; the handle can cancel it."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle: ...


class AsyncioHintScheduler:
    """Schedules expiry on the running event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ThreadingHintScheduler:
    """Schedules expiry on a daemon timer thread."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class DefaultHintScheduler:
    """Event loop when one is running in this thread, timer thread otherwise."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return ThreadingHintScheduler().schedule(delay, callback)
        return loop.call_later(delay, callback)


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualHintScheduler:
    """Deterministic scheduler driven by ``advance``; for tests and replays."""

    def __init__(self):
        self.now = 0.0
        self._pending: list[_ManualHandle] = []

    @property
    def pending(self) -> int:
        return sum(1 for h in self._pending if not h.cancelled)

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        handle = _ManualHandle(self.now + delay, callback)
        self._pending.append(handle)
        return handle

    def advance(self, seconds: float) -> int:
        """Move time forward and fire due callbacks; returns how many fired."""
        self.now += seconds
        due = [h for h in self._pending if h.due <= self.now]
        self._pending = [h for h in self._pending if h.due > self.now]
        fired = 0
        for handle in sorted(due, key=lambda h: h.due):
            if not handle.cancelled:
                handle.callback()
                fired += 1
        return fired


class GameSession:
    """
    Live traversal of one maze by one player.

    Example usage:
        generated = generate_maze("small", "easy", seed=7)
        session = GameSession.from_generated(generated)

        result = session.move(Direction.DOWN)
        hint = session.hint()  # marks up to 3 cells for a few seconds
    """

    def __init__(
        self,
        maze: Maze,
        solution: list[Position],
        *,
        session_id: Optional[str] = None,
        size: Optional[str] = None,
        difficulty: Optional[str] = None,
        seed: Optional[int] = None,
        max_hints: int = 3,
        hint_length: int = 3,
        hint_duration: float = 3.0,
        clock: Callable[[], float] = time.time,
        scheduler: Optional[HintScheduler] = None,
    ):
        if maze.start is None or maze.end is None:
            raise ValueError("Maze must have a start and an end cell")
        if not solution or solution[0] != maze.start or solution[-1] != maze.end:
            raise ValueError("Solution must run from the maze start to the maze end")

        self.session_id = session_id or f"maze_{uuid.uuid4().hex[:12]}"
        self.maze = maze
        self.solution = list(solution)
        self.size = size
        self.difficulty = difficulty
        self.seed = seed

        self.max_hints = max_hints
        self.hint_length = hint_length
        self.hint_duration = hint_duration

        self.start_position: Position = maze.start
        self.end_position: Position = maze.end
        self.position: Position = maze.start
        self._visited: dict[str, None] = {self.start_position.key: None}
        self.move_count = 0
        self.hints_used = 0

        self.status = SessionStatus.CONFIGURING
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.paused_time = 0.0
        self.paused_at: Optional[float] = None
        self.showing_solution = False

        self._clock = clock
        self._scheduler: HintScheduler = scheduler or DefaultHintScheduler()
        self._lock = threading.RLock()
        self._hint_handle: Optional[ScheduledHandle] = None
        self._hint_token = 0

    @classmethod
    def from_generated(cls, generated, autostart: bool = True, **kwargs) -> "GameSession":
        """Build a session on its own copy of a GeneratedMaze and (by default) start it."""
        session = cls(
            generated.maze.clone(),
            generated.solution,
            size=generated.size.key if generated.size else None,
            difficulty=generated.difficulty.key if generated.difficulty else None,
            seed=generated.seed,
            **kwargs,
        )
        if autostart:
            session.start()
        return session

    def __repr__(self) -> str:
        return (
            f"<GameSession {self.session_id} status={self.status.value} "
            f"moves={self.move_count} hints={self.hints_used}>"
        )

    # State

    @property
    def visited_cells(self) -> frozenset[str]:
        return frozenset(self._visited)

    @property
    def visit_order(self) -> list[str]:
        """Visited keys in first-visit order."""
        return list(self._visited)

    @property
    def is_paused(self) -> bool:
        return self.status is SessionStatus.PAUSED

    @property
    def completed(self) -> bool:
        return self.status is SessionStatus.COMPLETED

    @property
    def hints_remaining(self) -> int:
        return max(self.max_hints - self.hints_used, 0)

    @property
    def optimal_moves(self) -> int:
        return len(self.solution) - 1

    @property
    def is_optimal(self) -> bool:
        return self.move_count == self.optimal_moves

    def elapsed_seconds(self, now: Optional[float] = None) -> float:
        """Play time excluding pauses; frozen once completed."""
        with self._lock:
            if self.start_time is None:
                return 0.0
            if self.end_time is not None:
                reference = self.end_time
            elif self.paused_at is not None:
                reference = self.paused_at
            else:
                reference = now if now is not None else self._clock()
            return reference - self.start_time - self.paused_time

    # Events

    def start(self) -> bool:
        """configuring -> playing."""
        with self._lock:
            if self.status is not SessionStatus.CONFIGURING:
                return False
            self.start_time = self._clock()
            self.status = SessionStatus.PLAYING
            return True

    def move(self, direction: Union[Direction, str]) -> MoveResult:
        """Move one cell; rejected moves change nothing."""
        direction = Direction(direction)
        with self._lock:
            rejection = self._move_rejection(direction)
            if rejection is not None:
                return MoveResult(
                    accepted=False,
                    position=self.position,
                    move_count=self.move_count,
                    completed=self.completed,
                    reason=rejection,
                )

            self.position = self.position.move(direction)
            self._visited[self.position.key] = None
            self.move_count += 1

            if self.position == self.end_position:
                self.end_time = self._clock()
                self.status = SessionStatus.COMPLETED

            return MoveResult(
                accepted=True,
                position=self.position,
                move_count=self.move_count,
                completed=self.completed,
            )

    def _move_rejection(self, direction: Direction) -> Optional[MoveRejection]:
        if self.status is SessionStatus.CONFIGURING:
            return MoveRejection.NOT_STARTED
        if self.status is SessionStatus.PAUSED:
            return MoveRejection.PAUSED
        if self.status is SessionStatus.COMPLETED:
            return MoveRejection.COMPLETED
        target = self.position.move(direction)
        if not self.maze.contains(target):
            return MoveRejection.OUT_OF_BOUNDS
        if not self.maze.is_open(target):
            return MoveRejection.WALL
        return None

    def hint(self) -> HintResult:
        """
        Mark the next few cells toward the exit.

        On the canonical solution the hint is read from it by index. Off it
        (the player is exploring a side branch) the route is recomputed with
        BFS from the current cell and ``off_path`` is set on the result.
        """
        with self._lock:
            if self.status is not SessionStatus.PLAYING:
                return self._hint_rejected(HintRejection.NOT_PLAYING)
            if self.hints_used >= self.max_hints:
                return self._hint_rejected(HintRejection.BUDGET_EXHAUSTED)

            off_path = False
            cells = hint_cells(self.solution, self.position, self.hint_length)
            if cells is None:
                off_path = True
                local = find_path(self.maze, self.position, self.end_position)
                cells = local[1 : 1 + self.hint_length] if local else []
            if not cells:
                return self._hint_rejected(HintRejection.NO_ROUTE)

            self._cancel_hint_expiry()
            self.maze.clear_flags("is_hint")
            self.maze.mark_cells(cells, "is_hint")
            self.hints_used += 1

            token = self._hint_token
            self._hint_handle = self._scheduler.schedule(
                self.hint_duration, partial(self._expire_hint, token)
            )

            return HintResult(
                accepted=True,
                cells=cells,
                hints_used=self.hints_used,
                hints_remaining=self.hints_remaining,
                off_path=off_path,
            )

    def _hint_rejected(self, reason: HintRejection) -> HintResult:
        return HintResult(
            accepted=False,
            hints_used=self.hints_used,
            hints_remaining=self.hints_remaining,
            reason=reason,
        )

    def _expire_hint(self, token: int) -> None:
        with self._lock:
            if token != self._hint_token:
                return
            self.maze.clear_flags("is_hint")
            self._hint_handle = None

    def _cancel_hint_expiry(self) -> None:
        if self._hint_handle is not None:
            self._hint_handle.cancel()
            self._hint_handle = None
        self._hint_token += 1

    @property
    def hint_pending(self) -> bool:
        return self._hint_handle is not None

    def toggle_solution(self) -> bool:
        """Show or hide the canonical path; returns the new display state."""
        with self._lock:
            self.showing_solution = not self.showing_solution
            if self.showing_solution:
                self.maze.clear_flags("is_hint")
                self.maze.mark_cells(self.solution, "is_path")
            else:
                self.maze.clear_flags("is_path", "is_hint")
            return self.showing_solution

    def pause(self) -> bool:
        with self._lock:
            if self.status is not SessionStatus.PLAYING:
                return False
            self.paused_at = self._clock()
            self.status = SessionStatus.PAUSED
            return True

    def resume(self) -> bool:
        with self._lock:
            if self.status is not SessionStatus.PAUSED or self.paused_at is None:
                return False
            self.paused_time += self._clock() - self.paused_at
            self.paused_at = None
            self.status = SessionStatus.PLAYING
            return True

    def toggle_pause(self) -> bool:
        """Pause when playing, resume when paused; returns is_paused."""
        with self._lock:
            if self.status is SessionStatus.PAUSED:
                self.resume()
            else:
                self.pause()
            return self.is_paused

    def reset(self) -> bool:
        """
        Send the player back to the start of the same maze.

        Counters and the visited trail are cleared and any pending hint is
        cancelled; the clock and the pause state are left alone. A completed
        session cannot be reset.
        """
        with self._lock:
            if self.status in (SessionStatus.CONFIGURING, SessionStatus.COMPLETED):
                return False
            self._cancel_hint_expiry()
            self.maze.clear_flags("is_hint")
            self.position = self.start_position
            self._visited = {self.start_position.key: None}
            self.move_count = 0
            self.hints_used = 0
            return True

    def load_progress(
        self,
        *,
        position: Position,
        visited: list[str],
        move_count: int,
        hints_used: int,
        status: SessionStatus,
        start_time: Optional[float],
        end_time: Optional[float],
        paused_time: float,
        paused_at: Optional[float],
    ) -> None:
        """Overwrite live progress with previously persisted values."""
        if not self.maze.is_open(position):
            raise ValueError(f"Player position {position.key} is not an open cell")
        with self._lock:
            self.position = position
            self._visited = dict.fromkeys(visited or [self.start_position.key])
            self.move_count = move_count
            self.hints_used = hints_used
            self.status = status
            self.start_time = start_time
            self.end_time = end_time
            self.paused_time = paused_time
            self.paused_at = paused_at

    def close(self) -> None:
        """Invalidate pending timers before the session is discarded or replaced."""
        with self._lock:
            self._cancel_hint_expiry()

    def completion_record(self) -> Optional[CompletionRecord]:
        """Flat record for the statistics collaborator; None until completed."""
        with self._lock:
            if not self.completed:
                return None
            return CompletionRecord(
                size=self.size or "custom",
                difficulty=self.difficulty or "custom",
                elapsed_seconds=self.elapsed_seconds(),
                move_count=self.move_count,
                hints_used=self.hints_used,
                optimal=self.is_optimal,
            )
