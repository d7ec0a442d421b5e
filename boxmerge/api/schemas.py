"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a rendering client and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- INVALID_DIRECTION: Move direction is not a single unit axis
- PROTOCOL_FAULT: Signal or action sent in a phase that does not expect it
- OUT_OF_RANGE: Position outside the board
- VALIDATION_ERROR: Request body failed validation
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.grid import Vector
from ..engine_core.phase import Phase


# =============================================================================
# Enums
# =============================================================================

class DirectionName(str, Enum):
    """Move directions accepted by the API."""
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"

    def to_vector(self) -> Vector:
        return {
            DirectionName.LEFT: Vector.LEFT,
            DirectionName.RIGHT: Vector.RIGHT,
            DirectionName.UP: Vector.UP,
            DirectionName.DOWN: Vector.DOWN,
        }[self]


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_DIRECTION = "INVALID_DIRECTION"
    PROTOCOL_FAULT = "PROTOCOL_FAULT"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PositionInfo(BaseModel):
    """Grid coordinates: x is the column, y the row (0 = top)."""
    x: int
    y: int


class EntityInfo(BaseModel):
    """One box the renderer should draw and animate."""
    id: str
    value: int
    grid_position: PositionInfo
    screen_position: tuple[float, float, float] = Field(
        description="Board-plane coordinates, origin at the centre, y up"
    )
    is_new: bool = False
    is_merged: bool = Field(False, description="Absorbed by a merge this round")
    color: str = Field(description="Text colour")
    background: str = Field(description="Face colour")


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to start a new game."""
    size: Optional[int] = Field(None, ge=2, le=16, description="Board size, default from config")
    seed: Optional[int] = Field(None, description="Seed for reproducible spawns")


class MoveRequest(BaseModel):
    """Directional input."""
    direction: DirectionName


class AnimationCompleteRequest(BaseModel):
    """One entity animation finished."""
    wait_id: int = Field(
        ..., description="Wait this completion belongs to; stale ids are dropped"
    )


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Current game state for display."""
    session_id: str
    phase: Phase
    size: int
    wait_id: int = Field(description="Tag completions with this to guard against stale rounds")
    expected_completions: int = Field(0, description="Completions the current wait needs")
    completions_received: int = 0
    score: int = 0
    moves: int = 0
    max_value: int = 0
    entities: list[EntityInfo] = Field(default_factory=list)
    applied: bool = Field(True, description="False when the request was ignored")
    changes: list[str] = Field(default_factory=list)
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
