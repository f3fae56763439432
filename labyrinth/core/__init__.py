# Core module
from .exceptions import (
    MazeError,
    MazeConfigError,
    MazeConsistencyError,
    MazeParseError,
    MazeValidationError,
    PathCountBudgetExceeded,
)
from .grid import Cell, CellType, Direction, Maze, Position, coordinates_to_key, key_to_coordinates
from .maze_parser import parse_maze_rows, parse_maze_text, validate_maze_text
from .profiles import (
    DIFFICULTY_PROFILES,
    SIZE_PROFILES,
    DifficultyProfile,
    SizeProfile,
    get_difficulty_profile,
    get_size_profile,
)
from .carver import carve_maze
from .pathfinder import find_path, hint_cells, require_path, solve
from .validator import count_paths, cycle_rank, reachable_cells, validate_maze
from .tuner import TuningReport, tune_maze
from .generator import GeneratedMaze, generate_maze
from .session import (
    GameSession,
    HintRejection,
    HintResult,
    ManualHintScheduler,
    MoveRejection,
    MoveResult,
    SessionStatus,
)

__all__ = [
    "MazeError",
    "MazeConfigError",
    "MazeConsistencyError",
    "MazeParseError",
    "MazeValidationError",
    "PathCountBudgetExceeded",
    "Cell",
    "CellType",
    "Direction",
    "Maze",
    "Position",
    "coordinates_to_key",
    "key_to_coordinates",
    "parse_maze_rows",
    "parse_maze_text",
    "validate_maze_text",
    "DIFFICULTY_PROFILES",
    "SIZE_PROFILES",
    "DifficultyProfile",
    "SizeProfile",
    "get_difficulty_profile",
    "get_size_profile",
    "carve_maze",
    "find_path",
    "hint_cells",
    "require_path",
    "solve",
    "count_paths",
    "cycle_rank",
    "reachable_cells",
    "validate_maze",
    "TuningReport",
    "tune_maze",
    "GeneratedMaze",
    "generate_maze",
    "GameSession",
    "HintRejection",
    "HintResult",
    "ManualHintScheduler",
    "MoveRejection",
    "MoveResult",
    "SessionStatus",
]
