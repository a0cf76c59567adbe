"""
Session Module - Manages ephemeral puzzle sessions.

A session represents one player's run:
- Created when a client connects
- Holds the current puzzle state through a SessionController
- Destroyed when the client ends it or it goes stale

Sessions are EPHEMERAL:
- No persistence to database
- Each session owns its own random source
"""

from .controller import SessionController
from .manager import SessionManager, Session

__all__ = [
    "SessionController",
    "SessionManager",
    "Session",
]
