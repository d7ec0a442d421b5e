"""
Game State - The (phase, grid) pair and its bookkeeping.

Design principles:
- Immutable: all transitions return a new GameState
- Pure data: randomness is injected by the caller, never stored here
- The animation barrier lives in the state, so restarting discards it
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Protocol, Sequence, TypeVar
import random

from .aggregator import CompletionBarrier
from .grid import Block, Grid, Vector
from .phase import Phase


T = TypeVar("T")


class RandomSource(Protocol):
    """Uniform random integers over an inclusive range."""

    def randint(self, a: int, b: int) -> int: ...


def make_random_source(seed: int | None = None) -> RandomSource:
    """Default random source; pass a seed for reproducible games."""
    return random.Random(seed)


def random_item(source: RandomSource, items: Sequence[T]) -> T:
    """Pick one item uniformly using only randint."""
    return items[source.randint(0, len(items) - 1)]


def random_position(source: RandomSource, size: int) -> Vector:
    return Vector(source.randint(0, size - 1), source.randint(0, size - 1))


@dataclass(frozen=True)
class GameState:
    """
    Complete engine state at a point in time.

    wait_id identifies the current animation wait. It changes whenever a
    wait completes or the game restarts, so a completion signal tagged with
    an older wait_id can be recognised as stale.
    """
    phase: Phase
    grid: Grid
    barrier: CompletionBarrier = field(default_factory=CompletionBarrier)
    wait_id: int = 0
    score: int = 0
    moves: int = 0

    @property
    def size(self) -> int:
        return self.grid.size

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def new_game_state(
    size: int,
    position: Vector,
    block: Block | None = None,
    wait_id: int = 0,
) -> GameState:
    """A fresh game: empty grid plus one spawned block, phase INIT."""
    grid = Grid.empty(size).with_block(position, block or Block.spawn(2))
    return GameState(phase=Phase.INIT, grid=grid, wait_id=wait_id)
