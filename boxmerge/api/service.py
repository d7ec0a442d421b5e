"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to game loop calls
2. Manages sessions
3. Formats state for the rendering client

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.).
Engine faults propagate to the caller, which decides how to report them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from .schemas import (
    AnimationCompleteRequest,
    CreateSessionRequest,
    EntityInfo,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    MoveRequest,
    PositionInfo,
)
from ..engine_core.action import ActionResult
from ..engine_core.aggregator import expected_count
from ..engine_core.phase import ANIMATED_PHASES
from ..engine_core.projection import box_color, project_entities
from ..engine_core.terminal import max_block_value
from ..session import GameLoop, Session, SessionManager


@dataclass
class APIService:
    """
    Main API service for rendering clients.

    Usage:
        service = APIService()

        state = service.create_session(CreateSessionRequest(size=4))
        state = service.animation_complete(
            state.session_id, AnimationCompleteRequest(wait_id=state.wait_id)
        )
        state = service.move(state.session_id, MoveRequest(direction="left"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def create_session(self, request: CreateSessionRequest) -> GameStateResponse:
        """Create a new game session."""
        session = self.session_manager.create_session(size=request.size, seed=request.seed)
        return self._state_response(session)

    def get_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Get the current state of a session."""
        return self._with_session(session_id, lambda loop: None)

    def move(self, session_id: str, request: MoveRequest) -> GameStateResponse | ErrorResponse:
        """Deliver a directional input."""
        direction = request.direction.to_vector()
        return self._with_session(session_id, lambda loop: loop.move(direction))

    def animation_complete(
        self,
        session_id: str,
        request: AnimationCompleteRequest,
    ) -> GameStateResponse | ErrorResponse:
        """Deliver one entity-animation completion, tagged with the wait it belongs to."""
        return self._with_session(
            session_id, lambda loop: loop.animation_complete(request.wait_id)
        )

    def restart(self, session_id: str) -> GameStateResponse | ErrorResponse:
        return self._with_session(session_id, lambda loop: loop.restart())

    def acknowledge(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Acknowledge WON or GAME_OVER."""
        return self._with_session(session_id, lambda loop: loop.acknowledge())

    def expire_stalled(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Expire the current animation wait if it has timed out."""

        def expire(loop: GameLoop) -> ActionResult:
            expired = loop.expire_stalled()
            reason = "Animation wait expired" if expired else "Animation wait not stalled"
            return ActionResult(applied=expired, new_state=loop.state, state_changes=[reason])

        return self._with_session(session_id, expire)

    def end_session(self, session_id: str) -> bool:
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _with_session(
        self,
        session_id: str,
        operation: Callable[[GameLoop], ActionResult | None],
    ) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return ErrorResponse(
                error=f"Session {session_id} not found",
                error_code=ErrorCode.SESSION_NOT_FOUND,
            )
        session.touch()
        result = operation(session.loop)
        return self._state_response(session, result)

    def _state_response(
        self,
        session: Session,
        result: ActionResult | None = None,
    ) -> GameStateResponse:
        state = session.loop.state
        waiting = state.phase in ANIMATED_PHASES
        return GameStateResponse(
            session_id=session.session_id,
            phase=state.phase,
            size=state.size,
            wait_id=state.wait_id,
            expected_completions=expected_count(state.phase, state.grid) if waiting else 0,
            completions_received=state.barrier.count,
            score=state.score,
            moves=state.moves,
            max_value=max_block_value(state.grid),
            entities=[
                EntityInfo(
                    id=entity.id,
                    value=entity.value,
                    grid_position=PositionInfo(x=entity.grid_position.x, y=entity.grid_position.y),
                    screen_position=entity.screen_position,
                    is_new=entity.is_new,
                    is_merged=entity.is_merged,
                    color=box_color(entity.value)[0],
                    background=box_color(entity.value)[1],
                )
                for entity in project_entities(state.grid)
            ],
            applied=result.applied if result else True,
            changes=result.state_changes if result else [],
        )
