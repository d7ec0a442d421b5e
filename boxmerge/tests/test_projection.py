"""
Tests for the renderer-facing entity projection.
"""

import pytest

from ..engine_core.grid import Block, Cell, Grid, Vector
from ..engine_core.projection import (
    BOX_COLORS,
    box_color,
    grid_to_screen_position,
    project_entities,
)


_ = None


class TestScreenPosition:
    """Grid coordinates map onto a board centred on the origin."""

    @pytest.mark.parametrize(
        "position, expected",
        [
            (Vector(0, 0), (-3.0, 3.0, 0.0)),
            (Vector(5, 5), (3.0, -3.0, 0.0)),
            (Vector(5, 0), (3.0, 3.0, 0.0)),
        ],
    )
    def test_corners_of_six_by_six(self, position, expected):
        assert grid_to_screen_position(6, position) == pytest.approx(expected)

    def test_odd_board_centre_is_origin(self):
        assert grid_to_screen_position(3, Vector(1, 1)) == pytest.approx((0.0, 0.0, 0.0))

    def test_row_zero_is_on_top(self):
        top = grid_to_screen_position(4, Vector(0, 0))
        bottom = grid_to_screen_position(4, Vector(0, 3))
        assert top[1] > bottom[1]


class TestProjectEntities:
    def test_one_entity_per_block(self, mock_grid):
        entities = project_entities(mock_grid)

        assert [e.id for e in entities] == ["1", "2", "3", "4", "5", "6"]
        assert not any(e.is_merged for e in entities)

    def test_merged_block_follows_survivor(self):
        grid = Grid.empty(2).with_cell(
            Vector(1, 0), Cell(block=Block("a", 4), merged_block=Block("b", 2))
        )

        entities = project_entities(grid)

        assert [(e.id, e.is_merged) for e in entities] == [("a", False), ("b", True)]
        assert entities[0].grid_position == entities[1].grid_position == Vector(1, 0)
        assert entities[1].value == 2

    def test_new_flag_carried(self):
        grid = Grid.empty(2).with_block(Vector(0, 1), Block("n", 2, is_new=True))
        assert project_entities(grid)[0].is_new

    def test_empty_board(self):
        assert project_entities(Grid.empty(3)) == []


class TestBoxColor:
    def test_known_values(self):
        assert box_color(2) == BOX_COLORS[2]
        assert box_color(2048) == BOX_COLORS[2048]

    def test_beyond_table_uses_top_colour(self):
        assert box_color(8192) == BOX_COLORS[2048]
