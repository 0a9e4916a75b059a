"""
Authoritative engine for a turn-based grid combat game.

Core modules:
- grid: Board bounds, adjacency and spawn cells
- entities: Player/obstacle records and the position index
- turn: Turn rotation
- actions: Action validation and execution
- victory: End-of-game detection
- game: Phase state machine and snapshots
- protocol: Wire message parsing and encoding
"""

from .config import GameConfig, load_config
from .errors import InvariantError, Reason, ValidationError
from .grid import Grid, Position
from .entities import EntityRegistry, Obstacle, Player, PlayerStatus
from .turn import TurnSequencer
from .actions import ActionOutcome, ActionRequest, ActionResolver, ActionType
from .victory import GameResult, WinDetector
from .game import GameEngine, GameSnapshot, ObstacleView, Phase, PlayerView

__all__ = [
    # Config
    "GameConfig", "load_config",
    # Errors
    "InvariantError", "Reason", "ValidationError",
    # Grid
    "Grid", "Position",
    # Entities
    "EntityRegistry", "Obstacle", "Player", "PlayerStatus",
    # Turns and actions
    "TurnSequencer", "ActionOutcome", "ActionRequest", "ActionResolver", "ActionType",
    # Victory
    "GameResult", "WinDetector",
    # Game
    "GameEngine", "GameSnapshot", "ObstacleView", "Phase", "PlayerView",
]
