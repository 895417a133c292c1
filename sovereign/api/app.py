"""
FastAPI Application - REST API for the game front end.

Endpoints:
    POST   /api/v1/sessions               Create and start a session
    GET    /api/v1/sessions               List active sessions
    GET    /api/v1/sessions/{id}          Get session status
    DELETE /api/v1/sessions/{id}          End session
    GET    /api/v1/sessions/{id}/state    Live resources, capitals and turn
    GET    /api/v1/sessions/{id}/card     Pending card with choice availability
    POST   /api/v1/sessions/{id}/choice   Submit a choice (index or label)
    POST   /api/v1/sessions/{id}/pause    Pause the turn loop
    POST   /api/v1/sessions/{id}/resume   Resume the turn loop
    GET    /api/v1/decks                  Catalog overview
    WS     /api/v1/sessions/{id}/ws       Real-time session events

Card Flow:
    1. Every turns_per_card turns the session pauses and draws a card
    2. GET /card returns it; locked choices have available=false
    3. POST /choice applies a choice and the turns resume
    Cards with no available choice are skipped without waiting.

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Optional, Union
import asyncio
import json
import logging
import os

from .. import __version__

logger = logging.getLogger(__name__)

# Environment configuration
SOVEREIGN_ENV = os.getenv("SOVEREIGN_ENV", "development")
SOVEREIGN_CARDS_PATH = os.getenv("SOVEREIGN_CARDS_PATH", None)
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

ERROR_STATUS = {
    "SESSION_NOT_FOUND": 404,
    "NO_PENDING_CARD": 409,
    "CHOICE_LOCKED": 409,
    "INVALID_CHOICE": 400,
    "VALIDATION_ERROR": 400,
    "INTERNAL_ERROR": 500,
}

# Events buffered per WebSocket before new ones are dropped
WS_QUEUE_SIZE = 256


def queue_event(queue: asyncio.Queue, message: dict, session_id: str) -> bool:
    """Buffer an event for a WebSocket client. Returns False if it was dropped."""
    try:
        queue.put_nowait(message)
    except asyncio.QueueFull:
        logger.warning(
            "WebSocket for session %s is not keeping up, dropped %s event",
            session_id, message.get("kind"),
        )
        return False
    return True


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, WebSocket, WebSocketDisconnect
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
        SubmitChoiceRequest,
        # Response models
        SessionResponse,
        GameStateResponse,
        PendingCardResponse,
        ChoiceResponse,
        DecksResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    api_service = service or APIService(cards_path=SOVEREIGN_CARDS_PATH)

    @asynccontextmanager
    async def lifespan(app):
        yield
        await api_service.shutdown()

    app = FastAPI(
        title="Sovereign Engine API",
        description="""
Turn-based civilization engine. Capitals produce resources every turn;
every few turns an event card interrupts the clock until a choice is made.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `NO_PENDING_CARD` | No card is waiting for a choice |
| `CHOICE_LOCKED` | The choice's conditions are not met |
| `INVALID_CHOICE` | Index or label is not on the card |
| `VALIDATION_ERROR` | Invalid request |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code or ERROR_STATUS.get(error_code.value, 400),
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def to_error(response: ErrorResponse) -> JSONResponse:
        return make_error_response(response.error_code, response.error, details=response.details)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid parameters"}},
        tags=["Sessions"],
        summary="Create and start a game session",
    )
    async def create_session(
        request: Optional[CreateSessionRequest] = None,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session and start its turn loop.

        With `policy=external` cards wait for `POST /choice`; any other policy
        resolves cards automatically.
        """
        try:
            return await api_service.create_session(request or CreateSessionRequest())
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

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
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a game session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return to_error(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """Stop the turn loop and forget the session."""
        return await api_service.end_session(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/pause",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Pause the turn loop",
    )
    async def pause_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.pause_session(session_id)
        if isinstance(response, ErrorResponse):
            return to_error(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/resume",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Resume the turn loop",
    )
    async def resume_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Resume turns. Has no effect while a card is waiting for a choice."""
        response = api_service.resume_session(session_id)
        if isinstance(response, ErrorResponse):
            return to_error(response)
        return response

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get live game state",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Resources, capitals, turn number and recent events."""
        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            return to_error(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/card",
        response_model=PendingCardResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the card waiting for a choice",
    )
    async def get_pending_card(session_id: str) -> Union[PendingCardResponse, JSONResponse]:
        """
        The pending card with every choice.

        Choices whose conditions fail are listed with `available=false` so the
        UI can disable them.
        """
        response = api_service.get_pending_card(session_id)
        if isinstance(response, ErrorResponse):
            return to_error(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/choice",
        response_model=ChoiceResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Choice not on the card"},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "No pending card or choice locked"},
        },
        tags=["Game"],
        summary="Submit a choice for the pending card",
    )
    async def submit_choice(
        session_id: str,
        request: SubmitChoiceRequest,
    ) -> Union[ChoiceResponse, JSONResponse]:
        """Apply a choice by `index` or `label`. The turn loop resumes afterwards."""
        response = api_service.submit_choice(session_id, request)
        if isinstance(response, ErrorResponse):
            return to_error(response)
        return response

    @app.get(
        "/api/v1/decks",
        response_model=DecksResponse,
        tags=["Cards"],
        summary="List decks and cards",
    )
    async def get_decks() -> DecksResponse:
        return api_service.get_decks()

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Current state, sent on connect
        - turn_started, turn_ended, card_drawn, choice_applied: Session events
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        state = api_service.get_game_state(session_id)
        if isinstance(state, ErrorResponse):
            await websocket.send_json({"type": "error", "payload": state.model_dump(mode="json")})
            await websocket.close()
            return

        queue: asyncio.Queue = asyncio.Queue(maxsize=WS_QUEUE_SIZE)
        unsubscribe = api_service.subscribe(
            session_id, lambda event: queue_event(queue, event.to_dict(), session_id)
        )

        async def forward_events():
            while True:
                event = await queue.get()
                await websocket.send_json({"type": event["kind"], "payload": event})

        await websocket.send_json({"type": "state_update", "payload": state.model_dump(mode="json")})
        forwarder = asyncio.create_task(forward_events())

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})
        except WebSocketDisconnect:
            logger.debug("WebSocket for session %s disconnected", session_id)
        finally:
            if unsubscribe is not None:
                unsubscribe()
            forwarder.cancel()
            try:
                await forwarder
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("WebSocket event forwarding failed for session %s", session_id)

    # =========================================================================
    # Health Check
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
            service="sovereign-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Sovereign Engine API",
            "version": __version__,
            "environment": SOVEREIGN_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn sovereign.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
