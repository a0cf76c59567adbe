"""
Action System - Actions, notifications, and results.

Actions represent:
1. Player commands (start, move, use power-up, next level, reset, help)
2. Clock ticks from the external scheduler

All state changes flow through actions. Results never raise: every
action yields an ActionResult holding the resulting state and the
notifications the presentation layer may surface.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Difficulty


class ActionType(Enum):
    """Types of actions in the system."""
    # Player commands
    START_GAME = "start_game"
    MOVE = "move"
    USE_POWER_UP = "use_power_up"
    NEXT_LEVEL = "next_level"
    RESET_GAME = "reset_game"
    TOGGLE_HELP = "toggle_help"

    # System actions
    TICK = "tick"


class NotificationLevel(Enum):
    """How the presentation layer should classify a notification."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ReasonCode(Enum):
    """Structured reason attached to a notification."""
    # Error taxonomy
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    POSITION_LOCKED = "POSITION_LOCKED"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    NO_OP_POWER_UP = "NO_OP_POWER_UP"
    NOT_PLAYING = "NOT_PLAYING"

    # Informational
    GAME_STARTED = "GAME_STARTED"
    TRIVIALLY_SOLVED = "TRIVIALLY_SOLVED"
    PUZZLE_SOLVED = "PUZZLE_SOLVED"
    POWER_UP_GAINED = "POWER_UP_GAINED"
    POWER_UP_USED = "POWER_UP_USED"
    SWAP_ARMED = "SWAP_ARMED"
    HINT = "HINT"
    OBSTACLE_ACTIVATED = "OBSTACLE_ACTIVATED"
    OBSTACLE_EXPIRED = "OBSTACLE_EXPIRED"
    JUMBLED = "JUMBLED"
    LEVEL_STARTED = "LEVEL_STARTED"
    DIFFICULTY_INCREASED = "DIFFICULTY_INCREASED"
    GAME_RESET = "GAME_RESET"


@dataclass(frozen=True)
class Notification:
    """A fire-and-forget message for the presentation layer."""
    level: NotificationLevel
    message: str
    reason: ReasonCode | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def info(cls, message: str, reason: ReasonCode | None = None, **details) -> Notification:
        return cls(NotificationLevel.INFO, message, reason, details)

    @classmethod
    def success(cls, message: str, reason: ReasonCode | None = None, **details) -> Notification:
        return cls(NotificationLevel.SUCCESS, message, reason, details)

    @classmethod
    def warning(cls, message: str, reason: ReasonCode | None = None, **details) -> Notification:
        return cls(NotificationLevel.WARNING, message, reason, details)

    @classmethod
    def error(cls, message: str, reason: ReasonCode | None = None, **details) -> Notification:
        return cls(NotificationLevel.ERROR, message, reason, details)


@dataclass(frozen=True)
class SuggestedMove:
    """Output of the Hint power-up: the best swap found."""
    from_index: int
    to_index: int
    improvement: int


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    # START_GAME
    identifier: str | None = None
    difficulty: Difficulty | None = None

    # MOVE
    from_index: int | None = None
    to_index: int | None = None

    # USE_POWER_UP
    inventory_index: int | None = None

    # TOGGLE_HELP
    open_help: bool | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the puzzle state.

    The timestamp is the clock reading used for obstacle expiry and
    elapsed time. The session controller stamps it.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)
    timestamp: float | None = None
    action_id: str | None = None

    @classmethod
    def start_game(
        cls,
        identifier: str,
        difficulty: Difficulty = Difficulty.EASY,
        timestamp: float | None = None,
    ) -> Action:
        """Factory for start game action."""
        return cls(
            action_type=ActionType.START_GAME,
            payload=ActionPayload(identifier=identifier, difficulty=difficulty),
            timestamp=timestamp,
        )

    @classmethod
    def move(cls, from_index: int, to_index: int, timestamp: float | None = None) -> Action:
        """Factory for move action."""
        return cls(
            action_type=ActionType.MOVE,
            payload=ActionPayload(from_index=from_index, to_index=to_index),
            timestamp=timestamp,
        )

    @classmethod
    def use_power_up(cls, inventory_index: int, timestamp: float | None = None) -> Action:
        """Factory for power-up activation."""
        return cls(
            action_type=ActionType.USE_POWER_UP,
            payload=ActionPayload(inventory_index=inventory_index),
            timestamp=timestamp,
        )

    @classmethod
    def next_level(cls, timestamp: float | None = None) -> Action:
        return cls(action_type=ActionType.NEXT_LEVEL, timestamp=timestamp)

    @classmethod
    def reset_game(cls, timestamp: float | None = None) -> Action:
        return cls(action_type=ActionType.RESET_GAME, timestamp=timestamp)

    @classmethod
    def toggle_help(cls, open_help: bool, timestamp: float | None = None) -> Action:
        return cls(
            action_type=ActionType.TOGGLE_HELP,
            payload=ActionPayload(open_help=open_help),
            timestamp=timestamp,
        )

    @classmethod
    def tick(cls, timestamp: float) -> Action:
        return cls(action_type=ActionType.TICK, timestamp=timestamp)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action changed anything
    - The resulting state (unchanged state for no-ops)
    - Error details (for rejected actions)
    - Notifications (for UI updates)
    """
    success: bool
    new_state: Any | None = None  # PuzzleState
    error: str | None = None
    error_code: str | None = None

    # For UI/presentation
    notifications: list[Notification] = field(default_factory=list)

    # Hint output, returned rather than stored
    suggested_move: SuggestedMove | None = None

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    def has_reason(self, reason: ReasonCode) -> bool:
        return any(n.reason == reason for n in self.notifications)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        state: Any | None = None,
        notifications: list[Notification] | None = None,
    ) -> ActionResult:
        """Create a failure result. The given state is passed through unchanged."""
        return cls(
            success=False,
            new_state=state,
            error=error,
            error_code=error_code,
            notifications=notifications or [],
        )

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        notifications: list[Notification] | None = None,
        suggested_move: SuggestedMove | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            notifications=notifications or [],
            suggested_move=suggested_move,
        )
