"""
Engine Core - Deterministic puzzle state management.

The engine is the runtime that:
1. Derives a target from an identifier
2. Manages PuzzleState
3. Checks and generates legal moves
4. Applies actions via the reducer
5. Rolls power-ups and obstacles through an injected random source
"""

from .state import PuzzleState, GameStatus, Difficulty, PowerUp, Obstacle
from .action import (
    Action,
    ActionType,
    ActionPayload,
    ActionResult,
    Notification,
    NotificationLevel,
    ReasonCode,
    SuggestedMove,
)
from .config import RuleConfig
from .randomness import RandomSource
from .reducer import Reducer, apply_action
from .move_generator import MoveGenerator, InteractionMode, legal_moves, best_swap
from .sequence import InvalidIdentifier, DigitStatus, derive_target, format_time

__all__ = [
    "PuzzleState",
    "GameStatus",
    "Difficulty",
    "PowerUp",
    "Obstacle",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Notification",
    "NotificationLevel",
    "ReasonCode",
    "SuggestedMove",
    "RuleConfig",
    "RandomSource",
    "Reducer",
    "apply_action",
    "MoveGenerator",
    "InteractionMode",
    "legal_moves",
    "best_swap",
    "InvalidIdentifier",
    "DigitStatus",
    "derive_target",
    "format_time",
]
