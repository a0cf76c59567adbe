"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to controller commands
2. Manages sessions
3. Enforces the interaction-mode contract on moves
4. Formats engine state into response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging

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
    # Enums
    ErrorCode,
    PuzzleStatus,
    DifficultyLevel,
    PowerUpKind,
    ObstacleKind,
    DigitStatusValue,
    InteractionModeValue,
    NotificationKind,
)
from ..engine_core.action import ActionResult, Notification, ReasonCode
from ..engine_core.state import Difficulty, GameStatus
from ..engine_core.sequence import digit_status, format_time
from ..engine_core.effects import describe_power_up, obstacle_warning
from ..session import SessionManager, Session, SessionController

logger = logging.getLogger(__name__)

Command = Callable[[SessionController], ActionResult]


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest(seed=7))
        service.start_game(session.session_id, StartGameRequest(identifier="12345678"))
        response = service.move(session.session_id, MoveRequest(from_index=0, to_index=1))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Seed used when a create request does not carry one
    default_seed: int | None = None

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest | None = None) -> SessionResponse:
        """Create a new IDLE session."""
        seed = request.seed if request and request.seed is not None else self.default_seed
        session = self.session_manager.create_session(seed=seed)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def get_state(self, session_id: str) -> PuzzleStateResponse | ErrorResponse:
        """Bring the session clock up to date and return its snapshot."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        session.controller.tick()
        session.touch(session.controller.clock())
        return self._build_state_response(session)

    # =========================================================================
    # Puzzle commands
    # =========================================================================

    def start_game(self, session_id: str, request: StartGameRequest) -> ActionResponse | ErrorResponse:
        difficulty = Difficulty(request.difficulty.value)
        response = self._run(
            session_id, lambda c: c.start_game(request.identifier, difficulty)
        )
        if isinstance(response, ActionResponse) and response.error_code == ReasonCode.INVALID_IDENTIFIER.value:
            return ErrorResponse(
                error=response.error or "Invalid identifier",
                error_code=ErrorCode.INVALID_IDENTIFIER,
                details={"identifier": request.identifier},
            )
        return response

    def move(self, session_id: str, request: MoveRequest) -> ActionResponse | ErrorResponse:
        """
        Swap two positions.

        Pairs that break the interaction mode are rejected here with the
        unchanged state; the engine itself executes any in-range pair.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        controller = session.controller
        controller.tick()
        a, b = request.from_index, request.to_index

        if controller.state.status == GameStatus.PLAYING and not controller.is_legal_move(a, b):
            mode = controller.interaction_mode()
            note = Notification.error(
                f"Cannot swap positions {a} and {b} in {mode.value} mode",
                ReasonCode.ILLEGAL_MOVE,
                from_index=a,
                to_index=b,
                mode=mode.value,
            )
            logger.debug("Session %s: illegal move %d -> %d", session_id, a, b)
            session.touch(controller.clock())
            return self._build_action_response(
                session,
                ActionResult.failure(
                    note.message,
                    error_code=ReasonCode.ILLEGAL_MOVE.value,
                    state=controller.state,
                    notifications=[note],
                ),
            )

        return self._run(session_id, lambda c: c.move(a, b))

    def activate_power_up(self, session_id: str, inventory_index: int) -> ActionResponse | ErrorResponse:
        return self._run(session_id, lambda c: c.activate_power_up(inventory_index))

    def next_level(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._run(session_id, lambda c: c.next_level())

    def reset_game(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._run(session_id, lambda c: c.reset_game())

    def toggle_help(self, session_id: str, request: HelpRequest) -> ActionResponse | ErrorResponse:
        return self._run(session_id, lambda c: c.toggle_help(request.open))

    def _run(self, session_id: str, command: Command) -> ActionResponse | ErrorResponse:
        """Tick the session clock, run a command and build the response."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        controller = session.controller
        controller.tick()
        result = command(controller)
        session.touch(controller.clock())
        if result.error_code == "HANDLER_ERROR":
            logger.error("Session %s: engine failed: %s", session_id, result.error)
            return ErrorResponse(
                error=result.error or "Engine failure",
                error_code=ErrorCode.INTERNAL_ERROR,
            )
        return self._build_action_response(session, result)

    # =========================================================================
    # Response building
    # =========================================================================

    def _session_not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        state = session.state
        return SessionResponse(
            session_id=session.session_id,
            status=PuzzleStatus(state.status.value),
            created_at=session.created_at,
            last_active=session.last_active,
            level=state.level,
            difficulty=DifficultyLevel(state.difficulty.value),
            seed=session.seed,
        )

    def _build_action_response(self, session: Session, result: ActionResult) -> ActionResponse:
        suggestion = None
        if result.suggested_move:
            suggestion = SuggestedMoveInfo(
                from_index=result.suggested_move.from_index,
                to_index=result.suggested_move.to_index,
                improvement=result.suggested_move.improvement,
            )

        return ActionResponse(
            session_id=session.session_id,
            success=result.success,
            error=result.error,
            error_code=result.error_code,
            notifications=[self._notification_info(n) for n in result.notifications],
            suggested_move=suggestion,
            state=self._build_state_response(session),
        )

    def _notification_info(self, notification: Notification) -> NotificationInfo:
        return NotificationInfo(
            level=NotificationKind(notification.level.value),
            message=notification.message,
            reason=notification.reason.value if notification.reason else None,
            details=dict(notification.details),
        )

    def _build_state_response(self, session: Session) -> PuzzleStateResponse:
        """Convert the session's PuzzleState into the rendering snapshot."""
        controller = session.controller
        state = controller.state
        now = controller.clock()

        obstacle = None
        if state.active_obstacle is not None:
            obstacle = ObstacleInfo(
                kind=ObstacleKind(state.active_obstacle.value),
                warning=obstacle_warning(state.active_obstacle, controller.config.obstacle_duration),
                started_at=state.obstacle_started_at,
                expires_at=state.obstacle_expires_at,
                seconds_remaining=controller.obstacle_seconds_remaining(now),
            )

        return PuzzleStateResponse(
            session_id=session.session_id,
            status=PuzzleStatus(state.status.value),
            identifier=state.identifier,
            target_sequence=list(state.target_sequence),
            current_sequence=list(state.current_sequence),
            display_target=controller.display_target(),
            display_sequence=controller.display_sequence(now),
            digit_statuses=[
                DigitStatusValue(digit_status(digit, i, state.target_sequence).value)
                for i, digit in enumerate(state.current_sequence)
            ],
            locked_positions=sorted(state.locked_positions),
            frozen_positions=sorted(state.frozen_positions),
            grid_columns=controller.move_generator.columns,
            correct_positions=state.correct_positions,
            total_positions=state.total_positions,
            move_count=state.move_count,
            elapsed_seconds=state.elapsed_seconds,
            formatted_time=format_time(state.elapsed_seconds),
            score=state.score,
            difficulty=DifficultyLevel(state.difficulty.value),
            level=state.level,
            streak=state.streak,
            inventory=[
                PowerUpInfo(
                    index=i,
                    kind=PowerUpKind(power_up.value),
                    description=describe_power_up(power_up),
                )
                for i, power_up in enumerate(state.inventory)
            ],
            active_power_up=(
                PowerUpKind(state.active_power_up.value) if state.active_power_up else None
            ),
            active_obstacle=obstacle,
            interaction_mode=InteractionModeValue(controller.interaction_mode().value),
        )
