"""
Game Loop - Drives the reducer for one game.

The loop owns the single current GameState and is the only thing that
replaces it. Collaborators talk to it through four entry points:

1. move(direction)         - keyboard/controller intent
2. animation_complete()    - called once per finished entity animation
3. acknowledge()           - dismiss WON / GAME_OVER
4. restart()               - start over at any time

After every accepted action the loop runs the phases that need no outside
input (TEST_WON, the guarded SPAWN, TEST_GAME_OVER) until it reaches a
phase that waits on a collaborator.

Animation completions may arrive from several threads; a reentrant lock
serialises them so the barrier sees them one at a time.
"""

from __future__ import annotations
from typing import Callable
import logging
import threading
import time

from ..config import DEFAULT_GRID_SIZE
from ..engine_core.action import Action, ActionResult
from ..engine_core.grid import Vector
from ..engine_core.phase import ANIMATED_PHASES, Phase
from ..engine_core.projection import EntityView, project_entities
from ..engine_core.reducer import Reducer
from ..engine_core.state import (
    GameState,
    RandomSource,
    make_random_source,
    new_game_state,
    random_item,
    random_position,
)
from ..engine_core.terminal import WIN_VALUE, find_empty_cell_positions, has_new_block


logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(size=4, random_source=random.Random(7))

        # renderer animates loop.entities, then for each finished box:
        loop.animation_complete(loop.wait_id)

        # once loop.phase is INPUT
        loop.move(Vector.LEFT)
    """

    def __init__(
        self,
        size: int = DEFAULT_GRID_SIZE,
        random_source: RandomSource | None = None,
        win_value: int = WIN_VALUE,
        animation_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        initial_state: GameState | None = None,
    ):
        self._random = random_source or make_random_source()
        self._reducer = Reducer(win_value=win_value)
        self._lock = threading.RLock()
        self._listeners: list[StateListener] = []
        self._clock = clock
        self.animation_timeout = animation_timeout

        self._state = initial_state or new_game_state(size, random_position(self._random, size))
        self._wait_started_at = clock()
        self._settle()

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def wait_id(self) -> int:
        return self._state.wait_id

    @property
    def entities(self) -> list[EntityView]:
        """What the renderer should draw for the current snapshot."""
        return project_entities(self._state.grid)

    def add_listener(self, listener: StateListener):
        """Call listener with the settled state after every applied action."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener):
        self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def move(self, direction: Vector) -> ActionResult:
        """Directional intent. Ignored unless the phase is INPUT."""
        return self._dispatch(Action.move(direction))

    def animation_complete(self, wait_id: int | None = None) -> ActionResult:
        """
        One entity animation finished.

        When wait_id is given and does not match the current wait, the
        signal belongs to an abandoned round and is dropped.
        """
        with self._lock:
            if wait_id is not None and wait_id != self._state.wait_id:
                logger.warning(
                    "Dropping stale animation completion for wait %s (current wait %s)",
                    wait_id,
                    self._state.wait_id,
                )
                return ActionResult.unchanged(self._state, f"Stale completion for wait {wait_id}")
            return self._dispatch(Action.animation_complete())

    def acknowledge(self) -> ActionResult:
        """Dismiss WON or GAME_OVER and start a new game."""
        with self._lock:
            position = random_position(self._random, self._state.size)
            return self._dispatch(Action.acknowledge(position))

    def restart(self) -> ActionResult:
        """Start a new game of the same size, abandoning any pending wait."""
        with self._lock:
            position = random_position(self._random, self._state.size)
            return self._dispatch(Action.restart(position))

    def expire_stalled(self, now: float | None = None) -> bool:
        """
        Advance past an animation wait that has run longer than the timeout.

        Returns True if the wait was expired.
        """
        with self._lock:
            if not self.animation_timeout or self._state.phase not in ANIMATED_PHASES:
                return False
            now = self._clock() if now is None else now
            elapsed = now - self._wait_started_at
            if elapsed < self.animation_timeout:
                return False
            logger.warning(
                "Animation wait %s stalled in %s for %.2fs, expiring",
                self._state.wait_id,
                self._state.phase.value,
                elapsed,
            )
            self._dispatch(Action.expire_wait())
            return True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _dispatch(self, action: Action) -> ActionResult:
        with self._lock:
            result = self._reducer.apply(self._state, action)
            if not result.applied:
                logger.debug("%s: %s", action.action_type.value, "; ".join(result.state_changes))
                return result

            changes = list(result.state_changes)
            self._commit(result.new_state)
            changes.extend(self._settle())
            self._notify()
            return ActionResult(
                applied=True,
                new_state=self._state,
                fired=result.fired,
                state_changes=changes,
            )

    def _settle(self) -> list[str]:
        """Run immediate phases until one waits on a collaborator."""
        changes = []
        while True:
            state = self._state
            if state.phase in (Phase.TEST_WON, Phase.TEST_GAME_OVER):
                action = Action.evaluate()
            elif state.phase == Phase.SPAWN and not has_new_block(state.grid):
                empty = find_empty_cell_positions(state.grid)
                if empty:
                    action = Action.add_new_block(random_item(self._random, empty))
                else:
                    # a move that merged nothing on a full board
                    action = Action.evaluate()
            else:
                return changes

            result = self._reducer.apply(state, action)
            logger.debug("%s: %s", action.action_type.value, "; ".join(result.state_changes))
            changes.extend(result.state_changes)
            self._commit(result.new_state)

    def _commit(self, new_state: GameState):
        old_state = self._state
        self._state = new_state

        if new_state.phase != old_state.phase:
            logger.debug("Phase %s -> %s", old_state.phase.value, new_state.phase.value)
        if new_state.phase != old_state.phase or new_state.wait_id != old_state.wait_id:
            self._wait_started_at = self._clock()

    def _notify(self):
        """Hand the settled state to every listener. A failing listener is logged and skipped."""
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener %r failed", listener)
