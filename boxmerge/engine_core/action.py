"""
Action System - Actions, payloads, and results.

Actions represent:
1. Player intents (move, acknowledge, restart)
2. Collaborator signals (animation complete, wait expired)
3. Loop-driven steps (evaluate a test phase, add the spawned block)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .grid import Block, Vector


class ActionType(Enum):
    """Types of actions in the system."""
    # Player intents
    MOVE = "move"
    ACKNOWLEDGE = "acknowledge"
    RESTART = "restart"

    # Animation layer signals
    ANIMATION_COMPLETE = "animation_complete"
    EXPIRE_WAIT = "expire_wait"

    # Immediate phase steps
    EVALUATE = "evaluate"
    ADD_NEW_BLOCK = "add_new_block"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields; validation happens in the
    reducer.
    """
    direction: Vector | None = None
    position: Vector | None = None
    block: Block | None = None


@dataclass(frozen=True)
class Action:
    """A complete action to be applied to the game state."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def move(cls, direction: Vector) -> Action:
        return cls(ActionType.MOVE, ActionPayload(direction=direction))

    @classmethod
    def animation_complete(cls) -> Action:
        return cls(ActionType.ANIMATION_COMPLETE)

    @classmethod
    def expire_wait(cls) -> Action:
        return cls(ActionType.EXPIRE_WAIT)

    @classmethod
    def evaluate(cls) -> Action:
        return cls(ActionType.EVALUATE)

    @classmethod
    def add_new_block(cls, position: Vector, block: Block | None = None) -> Action:
        return cls(
            ActionType.ADD_NEW_BLOCK,
            ActionPayload(position=position, block=block or Block.spawn(2)),
        )

    @classmethod
    def acknowledge(cls, position: Vector, block: Block | None = None) -> Action:
        """Acknowledge WON or GAME_OVER; restarts with a block at position."""
        return cls(
            ActionType.ACKNOWLEDGE,
            ActionPayload(position=position, block=block or Block.spawn(2)),
        )

    @classmethod
    def restart(cls, position: Vector, block: Block | None = None) -> Action:
        """Restart with the single starting block placed at position."""
        return cls(
            ActionType.RESTART,
            ActionPayload(position=position, block=block or Block.spawn(2)),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action changed anything
    - New state (the input state when nothing changed)
    - Whether the completion barrier fired
    - Human-readable changes, for logging
    """
    applied: bool
    new_state: Any
    fired: bool = False
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def unchanged(cls, state: Any, reason: str) -> ActionResult:
        """Create a result for an action that was ignored."""
        return cls(applied=False, new_state=state, state_changes=[reason])

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        fired: bool = False,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(applied=True, new_state=state, fired=fired, state_changes=changes or [])
