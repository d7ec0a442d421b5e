"""
Animation-Completion Aggregator.

The rendering layer runs one animation per visible entity, each finishing
at its own time and in no particular order. The barrier counts their
completion signals and fires exactly once when the expected number has
arrived, then resets for the next round.

The barrier is a plain value carried inside GameState, so counting and
resetting are ordinary state transitions.
"""

from __future__ import annotations
from dataclasses import dataclass

from .grid import Grid
from .phase import Phase


def visible_entity_count(grid: Grid) -> int:
    """Number of rendered entities: every block and every merged block."""
    count = 0
    for _, cell in grid.iter_cells():
        if cell.block is not None:
            count += 1
        if cell.merged_block is not None:
            count += 1
    return count


def expected_count(phase: Phase, grid: Grid) -> int:
    """
    Completions needed before the phase may advance.

    During ACTIVE every visible entity animates; INIT and SPAWN only
    animate the single spawned block.
    """
    if phase == Phase.ACTIVE:
        return visible_entity_count(grid)
    return 1


@dataclass(frozen=True)
class CompletionBarrier:
    """Counter of completion signals received in the current wait."""
    count: int = 0

    def record(self, expected: int) -> tuple[CompletionBarrier, bool]:
        """
        Count one completion.

        Returns (next barrier, fired). When the count reaches expected the
        returned barrier is reset to zero and fired is True.
        """
        count = self.count + 1
        if count >= expected:
            return CompletionBarrier(), True
        return CompletionBarrier(count=count), False

    def reset(self) -> CompletionBarrier:
        return CompletionBarrier()
