"""Session snapshot schemas for the persistence collaborator.

``serialize_session`` and ``deserialize_session`` are a pure pair: the
visited set travels as an ordered list of ``"row,col"`` keys (first-visit
order) and the maze as one string per row.
"""

import time
from typing import Callable, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import Settings, get_settings
from ..core.grid import Position
from ..core.maze_parser import parse_maze_rows
from ..core.session import GameSession, HintScheduler, SessionStatus

SNAPSHOT_VERSION = 1


class SnapshotPosition(BaseModel):
    """Schema for a position in the maze."""

    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)

    @classmethod
    def from_position(cls, position: Position) -> "SnapshotPosition":
        return cls(row=position.row, col=position.col)

    def to_position(self) -> Position:
        return Position(self.row, self.col)


class SessionSnapshot(BaseModel):
    """Serializable state of a game session."""

    version: int = SNAPSHOT_VERSION
    session_id: str
    size: Optional[str] = None
    difficulty: Optional[str] = None
    seed: Optional[int] = None

    grid: list[str] = Field(..., min_length=5)
    solution: list[SnapshotPosition] = Field(..., min_length=1)

    player_position: SnapshotPosition
    visited_cells: list[str]
    move_count: int = Field(0, ge=0)
    hints_used: int = Field(0, ge=0)
    max_hints: int = Field(3, ge=0)

    status: str = Field(..., pattern="^(configuring|playing|paused|completed)$")
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    paused_time: float = Field(0.0, ge=0)
    paused_at: Optional[float] = None
    showing_solution: bool = False

    @field_validator("visited_cells")
    @classmethod
    def validate_visited_keys(cls, v: list[str]) -> list[str]:
        """Each entry must look like 'row,col'."""
        for key in v:
            parts = key.split(",")
            if len(parts) != 2 or not all(p.isdigit() for p in parts):
                raise ValueError(f"Invalid cell key: {key!r}")
        return v

    @model_validator(mode="after")
    def validate_timestamps(self) -> "SessionSnapshot":
        """Timestamps must agree with the status."""
        if self.status != "configuring" and self.start_time is None:
            raise ValueError(f"start_time is required when status is {self.status}")
        if (self.status == "paused") != (self.paused_at is not None):
            raise ValueError("paused_at must be set exactly when status is paused")
        if (self.status == "completed") != (self.end_time is not None):
            raise ValueError("end_time must be set exactly when status is completed")
        return self


def serialize_session(session: GameSession) -> dict:
    """Snapshot a session as a JSON-compatible dict."""
    snapshot = SessionSnapshot(
        session_id=session.session_id,
        size=session.size,
        difficulty=session.difficulty,
        seed=session.seed,
        grid=session.maze.to_rows(),
        solution=[SnapshotPosition.from_position(p) for p in session.solution],
        player_position=SnapshotPosition.from_position(session.position),
        visited_cells=session.visit_order,
        move_count=session.move_count,
        hints_used=session.hints_used,
        max_hints=session.max_hints,
        status=session.status.value,
        start_time=session.start_time,
        end_time=session.end_time,
        paused_time=session.paused_time,
        paused_at=session.paused_at,
        showing_solution=session.showing_solution,
    )
    return snapshot.model_dump(mode="json")


def deserialize_session(
    data: dict,
    clock: Callable[[], float] = time.time,
    scheduler: Optional[HintScheduler] = None,
    hint_length: Optional[int] = None,
    hint_duration: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> GameSession:
    """
    Rebuild a session from a snapshot dict.

    Hint markers are not restored; they are transient by nature. Hint length
    and duration default to the engine settings.

    Raises:
        pydantic.ValidationError: If the snapshot is malformed.
        MazeParseError / MazeValidationError: If the grid is not a maze.
    """
    settings = settings or get_settings()
    snapshot = SessionSnapshot.model_validate(data)
    maze = parse_maze_rows(snapshot.grid)

    session = GameSession(
        maze,
        [p.to_position() for p in snapshot.solution],
        session_id=snapshot.session_id,
        size=snapshot.size,
        difficulty=snapshot.difficulty,
        seed=snapshot.seed,
        max_hints=snapshot.max_hints,
        hint_length=hint_length if hint_length is not None else settings.hint_cells,
        hint_duration=hint_duration if hint_duration is not None else settings.hint_duration_seconds,
        clock=clock,
        scheduler=scheduler,
    )

    session.load_progress(
        position=snapshot.player_position.to_position(),
        visited=snapshot.visited_cells,
        move_count=snapshot.move_count,
        hints_used=snapshot.hints_used,
        status=SessionStatus(snapshot.status),
        start_time=snapshot.start_time,
        end_time=snapshot.end_time,
        paused_time=snapshot.paused_time,
        paused_at=snapshot.paused_at,
    )
    if snapshot.showing_solution:
        session.toggle_solution()
    return session
