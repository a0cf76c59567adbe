"""
FastAPI Application - REST API for puzzle clients.

Endpoints:
    POST   /api/v1/sessions                         Create session
    GET    /api/v1/sessions                         List active sessions
    GET    /api/v1/sessions/{id}                    Get session summary
    DELETE /api/v1/sessions/{id}                    End session
    GET    /api/v1/sessions/{id}/state              Get puzzle snapshot
    POST   /api/v1/sessions/{id}/start              Start a puzzle
    POST   /api/v1/sessions/{id}/move               Swap two positions
    POST   /api/v1/sessions/{id}/power-ups/{index}  Activate a power-up
    POST   /api/v1/sessions/{id}/next-level         Start the next level
    POST   /api/v1/sessions/{id}/reset              Reset to idle
    POST   /api/v1/sessions/{id}/help               Open or close help

All responses are JSON with explicit Pydantic schemas.
Rejected puzzle commands are 200 responses with success=false. Unknown
sessions (404), malformed identifiers and parameters (400) and engine
failures (500) are HTTP errors.
"""

from typing import Annotated, Optional, Union
import os

from ..logging_config import configure_logging

# Environment configuration
DIGITDASH_ENV = os.getenv("DIGITDASH_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
DIGITDASH_SEED = os.getenv("DIGITDASH_SEED", None)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Path, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        StartGameRequest,
        MoveRequest,
        HelpRequest,
        # Response models
        ActionResponse,
        PuzzleStateResponse,
        SessionResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        ErrorResponse,
        # Enums
        ErrorCode,
    )
    from .. import __version__

    configure_logging()

    is_production = DIGITDASH_ENV == "production"
    app = FastAPI(
        title="Digit Dash API",
        description="""
Digit Dash - a roguelike number puzzle.

Arrange the shuffled digits of your identifier to match it, using
adjacent swaps, power-ups and surviving obstacles.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_IDENTIFIER` | Identifier is not at least 8 numeric characters |
| `VALIDATION_ERROR` | Request parameter out of range |
| `INTERNAL_ERROR` | The engine failed while applying a command |
        """,
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    default_seed = int(DIGITDASH_SEED) if DIGITDASH_SEED else None
    api_service = service or APIService(default_seed=default_seed)

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.INVALID_IDENTIFIER: 400,
        ErrorCode.VALIDATION_ERROR: 400,
        ErrorCode.INTERNAL_ERROR: 500,
    }

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def respond(response):
        """Pass models through, turning ErrorResponse into its HTTP status."""
        if isinstance(response, ErrorResponse):
            return make_error_response(
                response.error_code,
                response.error,
                status_code=status_codes.get(response.error_code, 400),
                details=response.details,
            )
        return response

    error_responses = {404: {"model": ErrorResponse, "description": "Session not found"}}

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(body: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """Create an IDLE session. Pass a `seed` for a reproducible run."""
        return api_service.create_session(body)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Sessions"],
        summary="Get session summary",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a session and discard its state."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Puzzle Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=PuzzleStateResponse,
        responses=error_responses,
        tags=["Puzzle"],
        summary="Get the puzzle snapshot",
    )
    async def get_state(session_id: str) -> Union[PuzzleStateResponse, JSONResponse]:
        """Everything needed to render the board, with obstacles already applied."""
        return respond(api_service.get_state(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/start",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid identifier"},
            **error_responses,
        },
        tags=["Puzzle"],
        summary="Start a puzzle",
    )
    async def start_game(session_id: str, body: StartGameRequest) -> Union[ActionResponse, JSONResponse]:
        """
        Start a puzzle from an identifier.

        **Request Body:**
        ```json
        {"identifier": "12345678", "difficulty": "easy"}
        ```
        """
        return respond(api_service.start_game(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/move",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Puzzle"],
        summary="Swap two positions",
    )
    async def move(session_id: str, body: MoveRequest) -> Union[ActionResponse, JSONResponse]:
        """
        Swap two positions.

        Positions must be grid neighbours unless the Swap power-up is armed.
        """
        return respond(api_service.move(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/power-ups/{index}",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Puzzle"],
        summary="Activate a power-up",
    )
    async def activate_power_up(
        session_id: str,
        index: Annotated[int, Path(description="Inventory slot")],
    ) -> Union[ActionResponse, JSONResponse]:
        """Consume the power-up in an inventory slot. A Hint returns `suggested_move`."""
        if index < 0:
            return make_error_response(
                ErrorCode.VALIDATION_ERROR,
                "Inventory slot must be zero or greater",
                details={"index": index},
            )
        return respond(api_service.activate_power_up(session_id, index))

    @app.post(
        "/api/v1/sessions/{session_id}/next-level",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Puzzle"],
        summary="Start the next level",
    )
    async def next_level(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.next_level(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Puzzle"],
        summary="Reset to idle",
    )
    async def reset_game(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.reset_game(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/help",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Puzzle"],
        summary="Open or close the help overlay",
    )
    async def toggle_help(session_id: str, body: HelpRequest) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.toggle_help(session_id, body))

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="digitdash",
            version=__version__,
            environment=DIGITDASH_ENV,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Digit Dash API",
            "version": __version__,
            "docs": None if is_production else "/api/docs",
            "health": "/health",
        }

    return app


# Create default app instance
app = None
try:
    app = create_app()
except ImportError:
    pass  # FastAPI not installed
