"""
Session Manager - Creates and manages puzzle sessions.

Sessions are EPHEMERAL:
- In-memory only, no persistence across restarts
- Each session owns its own controller and random source
- Ending a session discards its state
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging
import time
import uuid

from ..engine_core.config import RuleConfig
from ..engine_core.randomness import RandomSource
from ..engine_core.state import PuzzleState, GameStatus
from .controller import SessionController

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One player's puzzle session.

    Holds the controller driving the puzzle and its bookkeeping times.
    """
    session_id: str
    controller: SessionController
    created_at: float
    last_active: float
    seed: int | None = None

    @property
    def state(self) -> PuzzleState:
        return self.controller.state

    def is_active(self) -> bool:
        """A session is active while a puzzle is loaded or being set up."""
        return self.controller.state.status in {
            GameStatus.IDLE,
            GameStatus.PLAYING,
            GameStatus.SHOWING_HELP,
        }

    def touch(self, now: float):
        self.last_active = now


class SessionManager:
    """
    Manages puzzle sessions.

    Responsibilities:
    - Create sessions with independent random sources
    - Track sessions by ID
    - Clean up sessions nobody has touched for a while
    """

    def __init__(
        self,
        config: RuleConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or RuleConfig()
        self.clock = clock
        self._sessions: dict[str, Session] = {}

    def create_session(self, seed: int | None = None) -> Session:
        """
        Create a new IDLE session.

        Args:
            seed: Optional seed for a reproducible random source

        Returns:
            New Session ready to start a game
        """
        session_id = str(uuid.uuid4())
        now = self.clock()

        controller = SessionController(
            rng=RandomSource(seed=seed),
            config=self.config,
            clock=self.clock,
        )
        session = Session(
            session_id=session_id,
            controller=controller,
            created_at=now,
            last_active=now,
            seed=seed,
        )

        self._sessions[session_id] = session
        logger.info("Created session %s", session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and discard it.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions still in play."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def list_sessions(self) -> list[str]:
        """List IDs of every session held."""
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: float = 3600) -> list[str]:
        """
        End sessions idle for longer than max_age.

        Called periodically to free memory. Returns the removed IDs.
        """
        current_time = self.clock()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.last_active > max_age_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return to_remove
