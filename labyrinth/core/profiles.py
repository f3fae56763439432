"""Size and difficulty presets.

Both sets are closed: callers pick a key, never a free-form dimension or
complexity value.
"""

from dataclasses import dataclass

from .exceptions import MazeConfigError


@dataclass(frozen=True)
class SizeProfile:
    """Named grid dimension."""

    key: str
    grid_size: int
    label: str
    description: str


@dataclass(frozen=True)
class DifficultyProfile:
    """Named path-complexity scalar.

    ``path_complexity`` sits in [0, 1]. The low end drives how many loops the
    tuner reopens; above the extreme threshold it drives how many dead-end
    branches get injected instead.
    """

    key: str
    path_complexity: float
    label: str
    description: str

    def is_extreme(self, threshold: float = 0.9) -> bool:
        return self.path_complexity > threshold


SIZE_PROFILES: dict[str, SizeProfile] = {
    "small": SizeProfile("small", 10, "Small", "Perfect for beginners"),
    "medium": SizeProfile("medium", 15, "Medium", "A balanced challenge"),
    "large": SizeProfile("large", 45, "Large", "A massive maze for experts"),
}

DIFFICULTY_PROFILES: dict[str, DifficultyProfile] = {
    "easy": DifficultyProfile("easy", 0.3, "Easy", "Few dead ends"),
    "medium": DifficultyProfile("medium", 0.6, "Medium", "Several possible routes"),
    "hard": DifficultyProfile(
        "hard", 0.95, "Hard", "Very complex maze with many false trails"
    ),
}


def get_size_profile(key: str) -> SizeProfile:
    """Look up a size preset; unknown keys are configuration errors."""
    try:
        return SIZE_PROFILES[key.lower()]
    except (KeyError, AttributeError):
        raise MazeConfigError(
            f"Invalid size '{key}'. Must be one of: {', '.join(SIZE_PROFILES)}"
        ) from None


def get_difficulty_profile(key: str) -> DifficultyProfile:
    """Look up a difficulty preset; unknown keys are configuration errors."""
    try:
        return DIFFICULTY_PROFILES[key.lower()]
    except (KeyError, AttributeError):
        raise MazeConfigError(
            f"Invalid difficulty '{key}'. Must be one of: {', '.join(DIFFICULTY_PROFILES)}"
        ) from None


def config_key(size: str, difficulty: str) -> str:
    """Key used to group statistics by preset pair."""
    return f"{size}-{difficulty}"
