"""
FastAPI Application - REST API for rendering clients.

Endpoints:
    POST   /api/v1/sessions                               Create game session
    GET    /api/v1/sessions                               List sessions
    GET    /api/v1/sessions/{id}                          Get game state
    DELETE /api/v1/sessions/{id}                          End session
    POST   /api/v1/sessions/{id}/move                     Directional input
    POST   /api/v1/sessions/{id}/animation-complete       One entity animation finished
    POST   /api/v1/sessions/{id}/restart                  Restart the game
    POST   /api/v1/sessions/{id}/acknowledge              Dismiss WON / GAME_OVER
    POST   /api/v1/sessions/{id}/expire-stalled           Expire a timed-out animation wait
    WS     /api/v1/sessions/{id}/ws                       Real-time state updates

Round flow:
    1. Client animates every entity in the response
    2. Client posts one animation-complete per finished entity, tagged
       with the response's wait_id
    3. When phase is "input", client posts a move

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
import json
import logging

from ..config import EngineConfig
from ..engine_core.errors import EngineFault


logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

FAULT_STATUS_CODES = {
    "INVALID_DIRECTION": 400,
    "OUT_OF_RANGE": 400,
    "PROTOCOL_FAULT": 409,
}


def create_app(service=None, config: Optional[EngineConfig] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        config: Optional EngineConfig (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
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
        MoveRequest,
        AnimationCompleteRequest,
        DirectionName,
        # Response models
        GameStateResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )
    from ..session import SessionManager

    config = config or EngineConfig.from_env()

    app = FastAPI(
        title="Boxmerge Engine API",
        description="""
Sliding/merging puzzle engine for 3D-rendered boards.

## Animation protocol

Every state response lists the `entities` to draw. The engine advances only
after the client reports one `animation-complete` per entity (one for the
spawn in the `init` and `spawn` phases). Tag each report with `wait_id`;
reports for an older wait are dropped.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_DIRECTION` | Direction is not a single unit axis |
| `PROTOCOL_FAULT` | Signal sent in a phase that does not expect it |
| `OUT_OF_RANGE` | Position outside the board |
        """,
        version=API_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(session_manager=SessionManager(config))

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}
    app.state.ws_connections = ws_connections

    # =========================================================================
    # Error helpers
    # =========================================================================

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

    @app.exception_handler(EngineFault)
    async def engine_fault_handler(request: Request, exc: EngineFault) -> JSONResponse:
        """Faults abort the request; the session state is left as it was."""
        logger.warning("Engine fault on %s: %s", request.url.path, exc)
        try:
            error_code = ErrorCode(exc.error_code)
        except ValueError:
            error_code = ErrorCode.INTERNAL_ERROR
        return make_error_response(
            error_code,
            str(exc),
            status_code=FAULT_STATUS_CODES.get(exc.error_code, 400),
        )

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        if session_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[session_id]:
                try:
                    await ws.send_json(message)
                except (WebSocketDisconnect, RuntimeError):
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[session_id].remove(ws)
            if not ws_connections[session_id]:
                del ws_connections[session_id]

    async def respond(
        session_id: str,
        response: Union[GameStateResponse, ErrorResponse],
        broadcast: bool = True,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Turn a service response into an HTTP response and push updates."""
        if isinstance(response, ErrorResponse):
            return make_error_response(response.error_code, response.error, status_code=404)
        if broadcast and response.applied:
            await broadcast_to_session(session_id, {
                "type": "state_update",
                "payload": response.model_dump(mode="json"),
            })
        return response

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=GameStateResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: CreateSessionRequest) -> GameStateResponse:
        """
        Create a new game session.

        The game starts in phase `init` with one spawned block, waiting for
        its spawn animation to complete.
        """
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
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get current game state",
    )
    async def get_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Get the current state and the entities to render."""
        return await respond(session_id, api_service.get_state(session_id), broadcast=False)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/move",
        response_model=GameStateResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid direction"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game Loop"],
        summary="Send a directional input",
    )
    async def move(session_id: str, body: MoveRequest) -> Union[GameStateResponse, JSONResponse]:
        """
        Send a directional input.

        Ignored (`applied=false`) unless the phase is `input`.
        """
        return await respond(session_id, api_service.move(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/animation-complete",
        response_model=GameStateResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "No animation expected"},
        },
        tags=["Game Loop"],
        summary="Report one finished entity animation",
    )
    async def animation_complete(
        session_id: str,
        body: AnimationCompleteRequest,
    ) -> Union[GameStateResponse, JSONResponse]:
        """
        Report that one entity animation has finished.

        `wait_id` is required; completions for an abandoned wait are ignored
        (`applied=false`).
        """
        return await respond(session_id, api_service.animation_complete(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/restart",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Restart the game",
    )
    async def restart(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Restart with a fresh board of the same size."""
        return await respond(session_id, api_service.restart(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/acknowledge",
        response_model=GameStateResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "Game is not over"},
        },
        tags=["Game Loop"],
        summary="Acknowledge a win or game over",
    )
    async def acknowledge(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Dismiss the `won` or `game_over` phase and start again."""
        return await respond(session_id, api_service.acknowledge(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/expire-stalled",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Expire a timed-out animation wait",
    )
    async def expire_stalled(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Advance past an animation wait older than the configured timeout."""
        return await respond(session_id, api_service.expire_stalled(session_id))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Game state changed
        - error: Request failed

        Messages from client:
        - ping: Keep-alive
        - animation_complete: {"wait_id": n} (wait_id required)
        - move: {"direction": "left"}
        """
        await websocket.accept()
        ws_connections.setdefault(session_id, []).append(websocket)

        try:
            response = api_service.get_state(session_id)
            if isinstance(response, GameStateResponse):
                await websocket.send_json({
                    "type": "state_update",
                    "payload": response.model_dump(mode="json"),
                })

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
                if not isinstance(message, dict):
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Message must be a JSON object"},
                    })
                    continue

                message_type = message.get("type")
                try:
                    if message_type == "ping":
                        await websocket.send_json({"type": "pong"})
                        continue
                    if message_type == "animation_complete":
                        response = api_service.animation_complete(
                            session_id,
                            AnimationCompleteRequest(wait_id=message.get("wait_id")),
                        )
                    elif message_type == "move":
                        response = api_service.move(
                            session_id,
                            MoveRequest(direction=DirectionName(message.get("direction"))),
                        )
                    else:
                        await websocket.send_json({
                            "type": "error",
                            "payload": {"message": f"Unknown message type: {message_type}"},
                        })
                        continue
                except (EngineFault, ValueError) as e:
                    await websocket.send_json({"type": "error", "payload": {"message": str(e)}})
                    continue

                if isinstance(response, ErrorResponse):
                    await websocket.send_json({
                        "type": "error",
                        "payload": response.model_dump(mode="json"),
                    })
                elif response.applied:
                    await broadcast_to_session(session_id, {
                        "type": "state_update",
                        "payload": response.model_dump(mode="json"),
                    })

        except WebSocketDisconnect:
            pass
        finally:
            connections = ws_connections.get(session_id, [])
            if websocket in connections:
                connections.remove(websocket)
            if not connections:
                ws_connections.pop(session_id, None)

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
            service="boxmerge-engine",
            version=API_VERSION,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Boxmerge Engine API",
            "version": API_VERSION,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn boxmerge.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
