"""
Entity projection for the rendering layer.

The renderer draws one box per visible entity. A cell holding a merged
block yields two entities at the same position: the surviving block and
the absorbed one, which the renderer animates into it.
"""

from __future__ import annotations
from dataclasses import dataclass

from .grid import Block, Grid, Vector


BOX_SIZE = 1.0
BOX_GAP = 0.2

# value -> (text colour, face colour)
BOX_COLORS: dict[int, tuple[str, str]] = {
    2: ("#121211", "#eee4da"),
    4: ("#121211", "#ede0c8"),
    8: ("#f9f6f2", "#f2b179"),
    16: ("#f9f6f2", "#f59563"),
    32: ("#f9f6f2", "#f67c5f"),
    64: ("#f9f6f2", "#f65e3b"),
    128: ("#f9f6f2", "#edcf72"),
    256: ("#f9f6f2", "#edcc61"),
    512: ("#f9f6f2", "#edc850"),
    1024: ("#f9f6f2", "#edc53f"),
    2048: ("#f9f6f2", "#edc22e"),
}


def box_color(value: int) -> tuple[str, str]:
    """Colours for a value; anything past the table uses the top colour."""
    if value in BOX_COLORS:
        return BOX_COLORS[value]
    return BOX_COLORS[max(BOX_COLORS)] if value > max(BOX_COLORS) else BOX_COLORS[2]


@dataclass(frozen=True)
class EntityView:
    """Read-only view of one rendered box."""
    id: str
    value: int
    grid_position: Vector
    screen_position: tuple[float, float, float]
    is_new: bool
    is_merged: bool


def grid_to_screen_position(size: int, position: Vector) -> tuple[float, float, float]:
    """
    Map a grid position onto a plane centred on the origin, y axis up.

    Row 0 is the top of the board, so y is flipped.
    """
    step = BOX_SIZE + BOX_GAP
    board_extent = size * BOX_SIZE + (size - 1) * BOX_GAP
    offset = board_extent / 2 - BOX_SIZE / 2
    return (
        position.x * step - offset,
        (size - 1 - position.y) * step - offset,
        0.0,
    )


def _view(block: Block, position: Vector, size: int, is_merged: bool) -> EntityView:
    return EntityView(
        id=block.id,
        value=block.value,
        grid_position=position,
        screen_position=grid_to_screen_position(size, position),
        is_new=block.is_new,
        is_merged=is_merged,
    )


def project_entities(grid: Grid) -> list[EntityView]:
    """Visible entities in row-major order, a block before its merged block."""
    entities = []
    for position, cell in grid.iter_cells():
        if cell.block is None:
            continue
        entities.append(_view(cell.block, position, grid.size, is_merged=False))
        if cell.merged_block is not None:
            entities.append(_view(cell.merged_block, position, grid.size, is_merged=True))
    return entities
