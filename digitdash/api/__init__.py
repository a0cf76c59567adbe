"""
API Module - Client interface.

Exposes the engine via REST API. A client:
1. Creates a session
2. Starts a puzzle from an identifier
3. Submits moves and power-up activations
4. Renders the returned snapshot and notifications

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    StartGameRequest,
    MoveRequest,
    HelpRequest,
    # Responses
    ActionResponse,
    PuzzleStateResponse,
    SessionResponse,
    ErrorResponse,
    # Shared
    NotificationInfo,
    PowerUpInfo,
    ObstacleInfo,
    SuggestedMoveInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "StartGameRequest",
    "MoveRequest",
    "HelpRequest",
    # Responses
    "ActionResponse",
    "PuzzleStateResponse",
    "SessionResponse",
    "ErrorResponse",
    # Shared
    "NotificationInfo",
    "PowerUpInfo",
    "ObstacleInfo",
    "SuggestedMoveInfo",
    # Service
    "APIService",
    "create_app",
]
