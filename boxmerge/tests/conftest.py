"""
Pytest fixtures for Boxmerge tests.
"""

import random

import pytest

from ..engine_core.grid import Grid
from ..engine_core.phase import Phase
from ..engine_core.state import GameState
from ..session import GameLoop


_ = None

# 6x6 board used throughout the resolver tests
MOCK_GRID = [
    [_, _, 2, _, _, 2],
    [_, 2, _, _, _, _],
    [_, _, _, _, _, _],
    [_, 4, _, _, _, 2],
    [_, _, _, 2, _, _],
    [_, _, _, _, _, _],
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_state(values, phase=Phase.INPUT, **kwargs) -> GameState:
    """Build a GameState from a matrix of values (None = empty)."""
    return GameState(phase=phase, grid=Grid.from_values(values), **kwargs)


def make_loop(values, phase=Phase.INPUT, seed=0, **kwargs) -> GameLoop:
    """Build a GameLoop starting from a fixed board."""
    state = make_state(values, phase)
    return GameLoop(
        size=state.size,
        random_source=random.Random(seed),
        initial_state=state,
        **kwargs,
    )


def complete_all(loop: GameLoop) -> int:
    """Deliver completions until the current wait fires. Returns how many were sent."""
    wait_id = loop.wait_id
    sent = 0
    while loop.wait_id == wait_id:
        loop.animation_complete(wait_id)
        sent += 1
    return sent


@pytest.fixture
def mock_grid() -> Grid:
    return Grid.from_values(MOCK_GRID)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def seeded_loop() -> GameLoop:
    """A fresh 4x4 game with a fixed seed, in phase INIT."""
    return GameLoop(size=4, random_source=random.Random(7))
