"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a client and the engine.
A client renders from PuzzleStateResponse alone: it never has to infer
hidden state such as the reversed target or masked digits.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_IDENTIFIER: Identifier is not at least 8 numeric characters
- VALIDATION_ERROR: Request body failed validation
- INTERNAL_ERROR: Unexpected server error
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class PuzzleStatus(str, Enum):
    """Puzzle lifecycle values."""
    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"
    SHOWING_HELP = "showing_help"


class DifficultyLevel(str, Enum):
    """Difficulty tiers."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class PowerUpKind(str, Enum):
    """Power-up kinds."""
    REVEAL = "reveal"
    SHUFFLE = "shuffle"
    HINT = "hint"
    SWAP = "swap"
    FREEZE = "freeze"


class ObstacleKind(str, Enum):
    """Obstacle kinds."""
    LOCK = "lock"
    REVERSE = "reverse"
    BLIND = "blind"
    JUMBLE = "jumble"


class DigitStatusValue(str, Enum):
    """Per-position comparison with the target."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    DEFAULT = "default"


class InteractionModeValue(str, Enum):
    """Which position pairs a client may submit as a move."""
    ADJACENT = "adjacent"
    FREE_SWAP = "free_swap"


class NotificationKind(str, Enum):
    """How a client should present a notification."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class NotificationInfo(BaseModel):
    """A message produced by the engine for the player."""
    level: NotificationKind
    message: str
    reason: Optional[str] = Field(None, description="Machine-readable reason code")
    details: dict[str, Any] = Field(default_factory=dict)


class PowerUpInfo(BaseModel):
    """One inventory slot."""
    index: int = Field(..., ge=0, description="Slot to pass to the power-up endpoint")
    kind: PowerUpKind
    description: str


class ObstacleInfo(BaseModel):
    """The active obstacle."""
    kind: ObstacleKind
    warning: str
    started_at: Optional[float] = None
    expires_at: Optional[float] = None
    seconds_remaining: Optional[int] = Field(None, ge=0)


class SuggestedMoveInfo(BaseModel):
    """Best swap found by the Hint power-up."""
    from_index: int
    to_index: int
    improvement: int = Field(..., ge=1, description="Additional correct positions")


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new session."""
    seed: Optional[int] = Field(None, description="Seed for a reproducible session")


class StartGameRequest(BaseModel):
    """Request to start a puzzle."""
    identifier: str = Field(..., description="Numeric identifier, at least 8 digits")
    difficulty: DifficultyLevel = Field(DifficultyLevel.EASY, description="Starting difficulty")


class MoveRequest(BaseModel):
    """Request to swap two positions."""
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class HelpRequest(BaseModel):
    """Request to open or close the help overlay."""
    open: bool = Field(..., description="True to open, False to close")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class PuzzleStateResponse(BaseModel):
    """
    Complete puzzle snapshot for rendering.

    `display_target` and `display_sequence` already account for the
    Reverse and Blind obstacles.
    """
    session_id: str
    status: PuzzleStatus
    identifier: str = ""

    # Board
    target_sequence: list[str] = Field(default_factory=list)
    current_sequence: list[str] = Field(default_factory=list)
    display_target: list[str] = Field(default_factory=list)
    display_sequence: list[str] = Field(default_factory=list)
    digit_statuses: list[DigitStatusValue] = Field(default_factory=list)
    locked_positions: list[int] = Field(default_factory=list)
    frozen_positions: list[int] = Field(default_factory=list)
    grid_columns: int = 3

    # Progress
    correct_positions: int = 0
    total_positions: int = 0
    move_count: int = 0
    elapsed_seconds: int = 0
    formatted_time: str = "00:00"
    score: int = 0

    # Progression
    difficulty: DifficultyLevel = DifficultyLevel.EASY
    level: int = Field(1, ge=1)
    streak: int = Field(0, ge=0)

    # Effects
    inventory: list[PowerUpInfo] = Field(default_factory=list)
    active_power_up: Optional[PowerUpKind] = None
    active_obstacle: Optional[ObstacleInfo] = None
    interaction_mode: InteractionModeValue = InteractionModeValue.ADJACENT

    api_version: str = "v1"


class ActionResponse(BaseModel):
    """
    Result of a puzzle command.

    A rejected command (locked position, illegal move, nothing to do) is
    not an HTTP error: `success` is false and the unchanged state is
    returned with the notifications explaining why.
    """
    session_id: str
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    notifications: list[NotificationInfo] = Field(default_factory=list)
    suggested_move: Optional[SuggestedMoveInfo] = None
    state: PuzzleStateResponse
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Session summary."""
    session_id: str
    status: PuzzleStatus
    created_at: float
    last_active: float
    level: int
    difficulty: DifficultyLevel
    seed: Optional[int] = None
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str
