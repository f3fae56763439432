"""Statistics schemas exchanged with the statistics collaborator."""

from pydantic import BaseModel, Field


class CompletionRecord(BaseModel):
    """Flat record emitted once per completed game."""

    size: str
    difficulty: str
    elapsed_seconds: float = Field(..., ge=0)
    move_count: int = Field(..., ge=0)
    hints_used: int = Field(..., ge=0)
    optimal: bool  # move_count equals the canonical solution's step count

    @property
    def config_key(self) -> str:
        return f"{self.size}-{self.difficulty}"

    @property
    def is_perfect(self) -> bool:
        """No hints and the shortest route."""
        return self.hints_used == 0 and self.optimal


class MazeStats(BaseModel):
    """Aggregate statistics for one profile."""

    games_played: int = 0
    games_completed: int = 0
    total_time: float = 0.0
    total_moves: int = 0
    best_time_by_config: dict[str, float] = Field(default_factory=dict)
    least_moves_by_config: dict[str, int] = Field(default_factory=dict)
    perfect_games: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    hints_used: int = 0
