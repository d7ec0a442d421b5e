"""
API Module - Rendering client interface.

Exposes the engine via REST and WebSocket. A rendering client:
1. Creates a game session
2. Draws and animates the entities in each state response
3. Reports one animation completion per entity
4. Sends moves during the input phase
5. Acknowledges wins and game overs

All state is session-scoped.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    MoveRequest,
    AnimationCompleteRequest,
    # Responses
    GameStateResponse,
    SessionListResponse,
    EndSessionResponse,
    ErrorResponse,
    # Shared
    EntityInfo,
    PositionInfo,
    DirectionName,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "MoveRequest",
    "AnimationCompleteRequest",
    # Responses
    "GameStateResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "ErrorResponse",
    # Shared
    "EntityInfo",
    "PositionInfo",
    "DirectionName",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
