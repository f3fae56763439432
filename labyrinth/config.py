"""Engine configuration using Pydantic settings."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, ".env"),
        env_file_encoding="utf-8",
        env_prefix="LABYRINTH_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Labyrinth Engine"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Redis (persistence and statistics collaborators)
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "maze"

    # Session
    max_hints: int = 3
    hint_cells: int = 3
    hint_duration_seconds: float = 3.0

    # Generation
    min_grid_size: int = 5
    max_generation_attempts: int = 3
    extreme_threshold: float = 0.9
    loop_attempt_factor: int = 10  # attempts per requested loop
    branch_density: float = 0.5  # dead-end branches per grid row at complexity 1.0

    # Path counter (exponential worst case, debug/test only)
    verify_uniqueness: bool = True
    path_count_max_size: int = 45
    path_count_max_steps: int = 2_000_000
    path_count_timeout_seconds: float = 5.0

    # Debug rendering of freshly generated mazes
    debug_render_max_size: int = 15

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("min_grid_size")
    @classmethod
    def validate_min_grid_size(cls, v: int) -> int:
        """Grids below 5 cannot separate start and end."""
        if v < 5:
            raise ValueError("MIN_GRID_SIZE must be at least 5")
        return v

    @field_validator("extreme_threshold", "branch_density")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        """Scalars that must fall inside [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("value must be between 0 and 1")
        return v

    @field_validator(
        "max_hints",
        "hint_cells",
        "max_generation_attempts",
        "loop_attempt_factor",
        "path_count_max_steps",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counters that must be at least one."""
        if v < 1:
            raise ValueError("value must be a positive integer")
        return v

    @property
    def redis_key_prefix(self) -> str:
        """Key prefix without a trailing separator."""
        return self.key_prefix.rstrip(":")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
