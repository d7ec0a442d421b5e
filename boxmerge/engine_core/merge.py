"""
Merge Resolver - Pairing and compaction of a single row or column.

Pairing is "edge-first greedy": scan from the destination edge toward the
trailing edge, pairing each unconsumed block with its trailing neighbour when
the values match. A block is consumed at most once, so three equal blocks
give one pair (at the destination edge) plus one singleton, never a triple.

Directions here are signs: +1 moves toward the high-index edge, -1 toward
index 0.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Sequence

from .errors import InvalidDirectionError
from .grid import Block, Cell, Grid, Vector


Group = tuple[Block, ...]


@dataclass(frozen=True)
class PairingResult:
    """
    Result of pairing one compacted line.

    groups are singletons or pairs, each in natural low-to-high index order,
    and the groups themselves are in natural index order.
    """
    groups: tuple[Group, ...]
    has_pairs: bool


def _check_sign(direction: int):
    if direction not in (1, -1):
        raise InvalidDirectionError(f"Line direction must be +1 or -1, got {direction}")


def find_block_pairs(direction: int, blocks: Sequence[Block]) -> PairingResult:
    """
    Pair equal adjacent blocks of a compacted line, destination edge first.

    Also used with either direction to test whether a full line has any
    possible merge.
    """
    _check_sign(direction)
    count = len(blocks)
    groups: list[Group] = []
    has_pairs = False

    index = count - 1 if direction == 1 else 0
    while 0 <= index < count:
        neighbour = index - direction
        if 0 <= neighbour < count and blocks[neighbour].value == blocks[index].value:
            low, high = sorted((index, neighbour))
            groups.append((blocks[low], blocks[high]))
            has_pairs = True
            index -= 2 * direction
        else:
            groups.append((blocks[index],))
            index -= direction

    # scanning from the high edge collects groups back to front
    if direction == 1:
        groups.reverse()

    return PairingResult(groups=tuple(groups), has_pairs=has_pairs)


def _merge_group(direction: int, group: Group) -> Cell:
    if len(group) == 1:
        return Cell(block=group[0])
    low, high = group
    base, absorbed = (high, low) if direction == 1 else (low, high)
    return Cell(
        block=replace(base, value=base.value + absorbed.value),
        merged_block=absorbed,
    )


def resolve_line(direction: int, cells: Sequence[Cell]) -> tuple[Cell, ...]:
    """
    Compact, pair and merge one row or column toward its destination edge.

    Returns a line of the same length as the input.
    """
    _check_sign(direction)
    blocks = [cell.block for cell in cells if cell.block is not None]
    if not blocks:
        return tuple(cells)

    merged = [_merge_group(direction, group) for group in find_block_pairs(direction, blocks).groups]
    padding = [Cell.EMPTY] * (len(cells) - len(merged))

    if direction == 1:
        return tuple(padding + merged)
    return tuple(merged + padding)


def resolve_grid(direction: Vector, grid: Grid) -> Grid:
    """
    Resolve every row (horizontal move) or column (vertical move).

    Raises InvalidDirectionError unless exactly one axis is +1 or -1.
    """
    if not direction.is_unit_axis():
        raise InvalidDirectionError(
            f"Direction must have exactly one unit axis, got ({direction.x}, {direction.y})"
        )

    next_grid = grid.clone()
    if direction.x == 0:
        for x in range(next_grid.size):
            next_grid = next_grid.with_column(x, resolve_line(direction.y, next_grid.column_at(x)))
    else:
        for y in range(next_grid.size):
            next_grid = next_grid.with_row(y, resolve_line(direction.x, next_grid.row_at(y)))
    return next_grid


def line_has_pairs(cells: Sequence[Cell]) -> bool:
    """True if the compacted line holds at least one mergeable pair."""
    blocks = [cell.block for cell in cells if cell.block is not None]
    return find_block_pairs(1, blocks).has_pairs


def merge_gain(grid: Grid) -> int:
    """Sum of the values created by merges in this snapshot."""
    return sum(
        cell.block.value
        for _, cell in grid.iter_cells()
        if cell.merged_block is not None and cell.block is not None
    )
