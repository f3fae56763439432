"""Exceptions raised by the labyrinth engine."""


class MazeError(Exception):
    """Base class for engine errors."""

    pass


class MazeConfigError(MazeError):
    """Exception raised for invalid generation parameters.

    Unknown size/difficulty keys and grids too small to separate start and
    end. Raised before any carving happens.
    """

    pass


class MazeConsistencyError(MazeError):
    """Exception raised when a generated maze breaks an engine invariant.

    Indicates a generator or tuner defect; the current maze must be
    discarded rather than shown to a player.
    """

    pass


class PathCountBudgetExceeded(MazeError):
    """Exception raised when path enumeration runs out of steps or time."""

    def __init__(self, message: str, paths_found: int):
        super().__init__(message)
        self.paths_found = paths_found


class MazeParseError(MazeError):
    """Exception raised when grid text cannot be parsed."""

    pass


class MazeValidationError(MazeError):
    """Exception raised when parsed grid text is not a valid maze."""

    pass
