"""
Tests for API Pydantic schemas.

Validates that:
- Request/response models serialize correctly
- Request validation rejects malformed input
- Error codes are properly structured
- OpenAPI generation includes every model and endpoint
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_puzzle_state_response_schema(self):
        """PuzzleStateResponse serializes enums as their values."""
        from digitdash.api.schemas import (
            PuzzleStateResponse, PuzzleStatus, PowerUpInfo, PowerUpKind, ObstacleInfo, ObstacleKind,
        )

        response = PuzzleStateResponse(
            session_id="session-123",
            status=PuzzleStatus.PLAYING,
            identifier="12345678",
            target_sequence=list("12345678"),
            current_sequence=list("21436587"),
            display_target=list("87654321"),
            display_sequence=list("21436587"),
            inventory=[PowerUpInfo(index=0, kind=PowerUpKind.HINT, description="Get a hint")],
            active_obstacle=ObstacleInfo(kind=ObstacleKind.REVERSE, warning="Reversed", seconds_remaining=12),
        )

        data = response.model_dump(mode="json")
        assert data["status"] == "playing"
        assert data["inventory"][0]["kind"] == "hint"
        assert data["active_obstacle"]["kind"] == "reverse"
        assert data["interaction_mode"] == "adjacent"
        assert data["api_version"] == "v1"

    def test_action_response_schema(self):
        from digitdash.api.schemas import (
            ActionResponse, PuzzleStateResponse, PuzzleStatus, NotificationInfo, NotificationKind,
            SuggestedMoveInfo,
        )

        response = ActionResponse(
            session_id="session-123",
            success=True,
            notifications=[
                NotificationInfo(level=NotificationKind.SUCCESS, message="Hint!", reason="HINT"),
            ],
            suggested_move=SuggestedMoveInfo(from_index=0, to_index=1, improvement=2),
            state=PuzzleStateResponse(session_id="session-123", status=PuzzleStatus.PLAYING),
        )

        data = response.model_dump(mode="json")
        assert data["notifications"][0]["level"] == "success"
        assert data["suggested_move"]["improvement"] == 2
        assert data["state"]["session_id"] == "session-123"

    def test_error_response_schema(self):
        from digitdash.api.schemas import ErrorResponse, ErrorCode

        error = ErrorResponse(
            error="Identifier must be numeric",
            error_code=ErrorCode.INVALID_IDENTIFIER,
            details={"identifier": "12ab"},
        )

        data = error.model_dump(mode="json")
        assert data["error_code"] == "INVALID_IDENTIFIER"
        assert data["details"]["identifier"] == "12ab"
        assert data["api_version"] == "v1"

    def test_error_codes_complete(self):
        from digitdash.api.schemas import ErrorCode

        assert {code.value for code in ErrorCode} == {
            "SESSION_NOT_FOUND",
            "INVALID_IDENTIFIER",
            "VALIDATION_ERROR",
            "INTERNAL_ERROR",
        }

    def test_move_request_rejects_negative_index(self):
        from digitdash.api.schemas import MoveRequest

        with pytest.raises(ValidationError):
            MoveRequest(from_index=-1, to_index=0)

    def test_start_request_defaults(self):
        from digitdash.api.schemas import StartGameRequest, DifficultyLevel

        request = StartGameRequest(identifier="12345678")
        assert request.difficulty == DifficultyLevel.EASY

    def test_start_request_rejects_unknown_difficulty(self):
        from digitdash.api.schemas import StartGameRequest

        with pytest.raises(ValidationError):
            StartGameRequest(identifier="12345678", difficulty="nightmare")

    def test_start_request_requires_identifier(self):
        from digitdash.api.schemas import StartGameRequest

        with pytest.raises(ValidationError):
            StartGameRequest()

    def test_suggested_move_improves(self):
        from digitdash.api.schemas import SuggestedMoveInfo

        with pytest.raises(ValidationError):
            SuggestedMoveInfo(from_index=0, to_index=1, improvement=0)


class TestOpenAPI:
    """Tests for OpenAPI generation."""

    @pytest.fixture
    def app(self):
        from digitdash.api.app import create_app
        return create_app()

    def test_openapi_schema_generates(self, app):
        """OpenAPI schema generates without errors."""
        from fastapi.openapi.utils import get_openapi

        schema = get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )

        assert "paths" in schema
        assert "components" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, app):
        """Response models appear in OpenAPI schema."""
        from fastapi.openapi.utils import get_openapi

        schema = get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )

        schemas = schema["components"]["schemas"]
        for name in [
            "PuzzleStateResponse",
            "ActionResponse",
            "SessionResponse",
            "SessionListResponse",
            "ErrorResponse",
            "StartGameRequest",
            "MoveRequest",
            "HelpRequest",
        ]:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_present(self, app):
        """Every puzzle endpoint is routed."""
        paths = {route.path for route in app.routes}

        for path in [
            "/api/v1/sessions",
            "/api/v1/sessions/{session_id}",
            "/api/v1/sessions/{session_id}/state",
            "/api/v1/sessions/{session_id}/start",
            "/api/v1/sessions/{session_id}/move",
            "/api/v1/sessions/{session_id}/power-ups/{index}",
            "/api/v1/sessions/{session_id}/next-level",
            "/api/v1/sessions/{session_id}/reset",
            "/api/v1/sessions/{session_id}/help",
            "/health",
            "/",
        ]:
            assert path in paths, f"Missing endpoint: {path}"

    def test_endpoints_have_response_models(self, app):
        """Puzzle endpoints declare response models."""
        for route in app.routes:
            path = getattr(route, "path", "")
            if path.startswith("/api/v1/sessions/{session_id}/"):
                assert route.response_model is not None, f"{path} has no response model"
