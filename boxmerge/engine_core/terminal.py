"""
Terminal-State Detector - Empty cells, win and loss tests.
"""

from __future__ import annotations

from .grid import Grid, Vector
from .merge import line_has_pairs


WIN_VALUE = 2048


def find_empty_cell_positions(grid: Grid) -> list[Vector]:
    """All positions without a block, in row-major order."""
    return [position for position, cell in grid.iter_cells() if cell.block is None]


def has_new_block(grid: Grid) -> bool:
    """
    True if a block spawned this round is still flagged as new.

    Derived from the grid rather than stored, so it can't drift out of sync
    with the snapshot it describes.
    """
    for _, cell in grid.iter_cells():
        if cell.block is not None and cell.block.is_new:
            return True
    return False


def max_block_value(grid: Grid) -> int:
    return max((cell.block.value for _, cell in grid.iter_cells() if cell.block), default=0)


def has_won(grid: Grid, win_value: int = WIN_VALUE) -> bool:
    """True iff some block has reached the win value."""
    return max_block_value(grid) >= win_value


def has_lost(grid: Grid) -> bool:
    """
    True iff no legal move exists.

    Any empty cell means a move is possible. Otherwise a move exists only if
    some row or column holds an adjacent equal pair; the direction of the
    scan doesn't matter, only whether a pair exists.
    """
    for _, cell in grid.iter_cells():
        if cell.block is None:
            return False

    for index in range(grid.size):
        if line_has_pairs(grid.column_at(index)) or line_has_pairs(grid.row_at(index)):
            return False

    return True
