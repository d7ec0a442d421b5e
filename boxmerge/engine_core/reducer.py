"""
Reducer - Applies actions to game state.

The reducer is the phase state machine. All state changes go through
apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Randomness arrives in the action payload, never drawn here
- Validates the phase before applying; faults raise and leave the input
  state untouched
- Moves outside INPUT are ignored, not faults

Transitions:
    INIT            --animation complete (1)-------> INPUT
    INPUT           --move--------------------------> ACTIVE
    ACTIVE          --animation complete (entities)-> TEST_WON
    TEST_WON        --evaluate----------------------> WON | SPAWN
    SPAWN           --add new block (once)----------> SPAWN
    SPAWN           --animation complete (1)--------> TEST_GAME_OVER
    TEST_GAME_OVER  --evaluate----------------------> GAME_OVER | INPUT
    WON, GAME_OVER  --acknowledge-------------------> INIT
    any             --restart-----------------------> INIT
"""

from __future__ import annotations
from dataclasses import dataclass

from .action import Action, ActionResult, ActionType
from .aggregator import expected_count
from .errors import ProtocolError
from .grid import Grid
from .merge import merge_gain, resolve_grid
from .phase import ANIMATED_PHASES, TERMINAL_PHASES, Phase
from .state import GameState, new_game_state
from .terminal import WIN_VALUE, find_empty_cell_positions, has_lost, has_new_block, has_won


# Phase reached once an animation wait completes
NEXT_PHASE_AFTER_ANIMATION = {
    Phase.INIT: Phase.INPUT,
    Phase.ACTIVE: Phase.TEST_WON,
    Phase.SPAWN: Phase.TEST_GAME_OVER,
}

ACCEPTED_PHASES = {
    ActionType.ANIMATION_COMPLETE: ANIMATED_PHASES,
    ActionType.EXPIRE_WAIT: ANIMATED_PHASES,
    ActionType.EVALUATE: frozenset({Phase.TEST_WON, Phase.SPAWN, Phase.TEST_GAME_OVER}),
    ActionType.ADD_NEW_BLOCK: frozenset({Phase.SPAWN}),
    ActionType.ACKNOWLEDGE: TERMINAL_PHASES,
}


def clear_transient_state(grid: Grid) -> Grid:
    """Drop is_new and merged_block flags after their one-round use."""
    return grid.update_cells(lambda cell, _: cell.cleared())


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """
    win_value: int = WIN_VALUE

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the new state. Raises an EngineFault when
        the action breaks the engine's contract.
        """
        self._validate_action(state, action)
        handler = self._get_handler(action.action_type)
        return handler(state, action)

    def _validate_action(self, state: GameState, action: Action):
        """Raise ProtocolError if the phase does not accept this action."""
        accepted = ACCEPTED_PHASES.get(action.action_type)
        if accepted is not None and state.phase not in accepted:
            raise ProtocolError(
                f"{action.action_type.value} delivered during unexpected phase {state.phase.value}"
            )

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.MOVE: self._handle_move,
            ActionType.ANIMATION_COMPLETE: self._handle_animation_complete,
            ActionType.EXPIRE_WAIT: self._handle_expire_wait,
            ActionType.EVALUATE: self._handle_evaluate,
            ActionType.ADD_NEW_BLOCK: self._handle_add_new_block,
            ActionType.ACKNOWLEDGE: self._handle_restart,
            ActionType.RESTART: self._handle_restart,
        }
        return handlers[action_type]

    def _handle_move(self, state: GameState, action: Action) -> ActionResult:
        """Resolve the grid in the move direction and start the ACTIVE wait."""
        if state.phase != Phase.INPUT:
            return ActionResult.unchanged(state, f"Move ignored during {state.phase.value}")

        direction = action.payload.direction
        if direction is None:
            raise ProtocolError("Move action carries no direction")

        # no-op moves still spend an animation round
        grid = resolve_grid(direction, state.grid)
        gain = merge_gain(grid)
        new_state = state._copy_with(
            phase=Phase.ACTIVE,
            grid=grid,
            barrier=state.barrier.reset(),
            score=state.score + gain,
            moves=state.moves + 1,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Moved ({direction.x}, {direction.y}), merged for {gain}"],
        )

    def _handle_animation_complete(self, state: GameState, action: Action) -> ActionResult:
        """Count one completion; advance the phase when the wait is over."""
        barrier, fired = state.barrier.record(expected_count(state.phase, state.grid))
        if not fired:
            return ActionResult.success_with_state(state._copy_with(barrier=barrier))
        return self._finish_wait(state)

    def _handle_expire_wait(self, state: GameState, action: Action) -> ActionResult:
        """Give up on the outstanding completions and advance anyway."""
        result = self._finish_wait(state)
        result.state_changes.insert(0, f"Animation wait {state.wait_id} expired")
        return result

    def _finish_wait(self, state: GameState) -> ActionResult:
        next_phase = NEXT_PHASE_AFTER_ANIMATION[state.phase]
        new_state = state._copy_with(
            phase=next_phase,
            grid=clear_transient_state(state.grid),
            barrier=state.barrier.reset(),
            wait_id=state.wait_id + 1,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Animations done: {state.phase.value} -> {next_phase.value}"],
            fired=True,
        )

    def _handle_evaluate(self, state: GameState, action: Action) -> ActionResult:
        """Resolve an immediate test phase."""
        grid = state.grid

        if state.phase == Phase.TEST_WON:
            next_phase = Phase.WON if has_won(grid, self.win_value) else Phase.SPAWN
        elif state.phase == Phase.TEST_GAME_OVER:
            if has_lost(grid):
                next_phase = Phase.GAME_OVER
            else:
                next_phase = Phase.INPUT
                grid = clear_transient_state(grid)
        else:
            # SPAWN is only skipped when there is nowhere to put a block
            if has_new_block(grid) or find_empty_cell_positions(grid):
                raise ProtocolError("SPAWN can only be skipped on a full board")
            next_phase = Phase.TEST_GAME_OVER

        return ActionResult.success_with_state(
            state._copy_with(phase=next_phase, grid=grid),
            changes=[f"{state.phase.value} -> {next_phase.value}"],
        )

    def _handle_add_new_block(self, state: GameState, action: Action) -> ActionResult:
        """
        Place the spawned block.

        Guarded so that a second spawn in the same round is a no-op: the
        caller picks a random block and position, and repeating that would
        put two blocks on the board.
        """
        if has_new_block(state.grid):
            return ActionResult.unchanged(state, "Block already spawned this round")

        position, block = action.payload.position, action.payload.block
        if position is None or block is None:
            raise ProtocolError("Spawn action needs a position and a block")
        if not state.grid.cell_at(position).is_empty:
            raise ProtocolError(f"Cannot spawn on occupied cell ({position.x}, {position.y})")

        new_state = state._copy_with(grid=state.grid.with_block(position, block))
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Spawned {block.value} at ({position.x}, {position.y})"],
        )

    def _handle_restart(self, state: GameState, action: Action) -> ActionResult:
        """
        Start a fresh game of the same size.

        The new wait_id makes every completion still in flight for the
        abandoned round stale.
        """
        position, block = action.payload.position, action.payload.block
        if position is None:
            raise ProtocolError("Restart action needs a starting position")

        new_state = new_game_state(state.size, position, block, wait_id=state.wait_id + 1)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Restarted {state.size}x{state.size} game"],
        )


def apply_action(state: GameState, action: Action, win_value: int = WIN_VALUE) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(win_value=win_value)
    return reducer.apply(state, action)
