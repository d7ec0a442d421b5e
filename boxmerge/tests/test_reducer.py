"""
Tests for the reducer (phase transitions).

Tests:
- Action application
- Phase guards
- Spawn guard
- Protocol faults leave the input state untouched
"""

import pytest

from ..engine_core.action import Action, ActionType
from ..engine_core.aggregator import CompletionBarrier
from ..engine_core.errors import InvalidDirectionError, OutOfRangeError, ProtocolError
from ..engine_core.grid import Block, Cell, Grid, Vector
from ..engine_core.phase import Phase
from ..engine_core.reducer import Reducer, apply_action, clear_transient_state
from ..engine_core.state import new_game_state
from .conftest import MOCK_GRID, make_state


_ = None


class TestMoveAction:
    """Tests for move action."""

    def test_move_resolves_grid_and_enters_active(self):
        state = make_state(MOCK_GRID)

        result = apply_action(state, Action.move(Vector.UP))

        assert result.applied
        assert result.new_state.phase == Phase.ACTIVE
        assert result.new_state.grid.values()[0] == [_, 2, 2, 2, _, 4]
        assert result.new_state.moves == 1
        assert result.new_state.score == 4

    def test_move_ignored_outside_input(self):
        state = make_state(MOCK_GRID, phase=Phase.ACTIVE)

        result = apply_action(state, Action.move(Vector.LEFT))

        assert not result.applied
        assert result.new_state is state

    def test_no_op_move_still_enters_active(self):
        state = make_state([[2, 4], [_, _]])

        result = apply_action(state, Action.move(Vector.UP))

        assert result.new_state.phase == Phase.ACTIVE
        assert result.new_state.grid.values() == [[2, 4], [_, _]]

    def test_invalid_direction_faults(self):
        state = make_state(MOCK_GRID)

        with pytest.raises(InvalidDirectionError):
            apply_action(state, Action.move(Vector(1, 1)))

        assert state.phase == Phase.INPUT

    def test_score_accumulates(self):
        state = make_state([[2, 2], [4, 4]], score=10)

        result = apply_action(state, Action.move(Vector.LEFT))

        assert result.new_state.score == 10 + 4 + 8


class TestAnimationComplete:
    """Tests for the completion barrier driven through the reducer."""

    def test_init_advances_after_one(self):
        state = new_game_state(4, Vector(1, 1))

        result = apply_action(state, Action.animation_complete())

        assert result.fired
        assert result.new_state.phase == Phase.INPUT
        assert result.new_state.wait_id == 1

    def test_active_waits_for_every_entity(self):
        state = apply_action(make_state(MOCK_GRID), Action.move(Vector.UP)).new_state
        # five blocks plus one absorbed block
        expected = 6

        for _signal in range(expected - 1):
            result = apply_action(state, Action.animation_complete())
            assert not result.fired
            state = result.new_state
            assert state.phase == Phase.ACTIVE

        result = apply_action(state, Action.animation_complete())
        assert result.fired
        assert result.new_state.phase == Phase.TEST_WON
        assert result.new_state.barrier == CompletionBarrier()

    def test_finishing_clears_transient_state(self):
        state = apply_action(make_state(MOCK_GRID), Action.move(Vector.UP)).new_state

        result = apply_action(state, Action.expire_wait())

        assert all(
            not cell.has_transient_state for _pos, cell in result.new_state.grid.iter_cells()
        )

    def test_completion_in_input_faults(self):
        state = make_state(MOCK_GRID)

        with pytest.raises(ProtocolError):
            apply_action(state, Action.animation_complete())

    def test_expire_wait_advances_immediately(self):
        state = make_state(MOCK_GRID, phase=Phase.SPAWN, barrier=CompletionBarrier(0))

        result = apply_action(state, Action.expire_wait())

        assert result.fired
        assert result.new_state.phase == Phase.TEST_GAME_OVER
        assert "expired" in result.state_changes[0]


class TestEvaluate:
    """Tests for the immediate test phases."""

    def test_test_won_to_won(self):
        state = make_state([[2048, _], [_, _]], phase=Phase.TEST_WON)
        assert apply_action(state, Action.evaluate()).new_state.phase == Phase.WON

    def test_test_won_to_spawn(self):
        state = make_state([[1024, _], [_, _]], phase=Phase.TEST_WON)
        assert apply_action(state, Action.evaluate()).new_state.phase == Phase.SPAWN

    def test_custom_win_value(self):
        state = make_state([[64, _], [_, _]], phase=Phase.TEST_WON)

        result = Reducer(win_value=64).apply(state, Action.evaluate())

        assert result.new_state.phase == Phase.WON

    def test_test_game_over_to_game_over(self):
        state = make_state([[2, 4], [4, 2]], phase=Phase.TEST_GAME_OVER)
        assert apply_action(state, Action.evaluate()).new_state.phase == Phase.GAME_OVER

    def test_test_game_over_to_input(self):
        state = make_state([[2, 2], [4, 8]], phase=Phase.TEST_GAME_OVER)
        assert apply_action(state, Action.evaluate()).new_state.phase == Phase.INPUT

    def test_spawn_skipped_on_full_board(self):
        state = make_state([[2, 2], [4, 8]], phase=Phase.SPAWN)
        assert apply_action(state, Action.evaluate()).new_state.phase == Phase.TEST_GAME_OVER

    def test_spawn_skip_with_room_faults(self):
        state = make_state([[2, _], [4, 8]], phase=Phase.SPAWN)

        with pytest.raises(ProtocolError):
            apply_action(state, Action.evaluate())

    def test_evaluate_in_input_faults(self):
        with pytest.raises(ProtocolError):
            apply_action(make_state(MOCK_GRID), Action.evaluate())


class TestAddNewBlock:
    """Tests for the guarded spawn."""

    def test_places_block(self):
        state = make_state([[2, _], [_, _]], phase=Phase.SPAWN)
        block = Block("n", 2, is_new=True)

        result = apply_action(state, Action.add_new_block(Vector(1, 1), block))

        assert result.applied
        assert result.new_state.grid.cell_at(Vector(1, 1)).block == block
        assert result.new_state.phase == Phase.SPAWN

    def test_second_spawn_is_ignored(self):
        state = make_state([[2, _], [_, _]], phase=Phase.SPAWN)
        state = apply_action(state, Action.add_new_block(Vector(1, 1))).new_state

        result = apply_action(state, Action.add_new_block(Vector(1, 0)))

        assert not result.applied
        assert result.new_state.grid.cell_at(Vector(1, 0)).is_empty

    def test_occupied_cell_faults(self):
        state = make_state([[2, _], [_, _]], phase=Phase.SPAWN)

        with pytest.raises(ProtocolError):
            apply_action(state, Action.add_new_block(Vector(0, 0)))

    def test_out_of_range_position_faults(self):
        state = make_state([[2, _], [_, _]], phase=Phase.SPAWN)

        with pytest.raises(OutOfRangeError):
            apply_action(state, Action.add_new_block(Vector(2, 0)))

    def test_outside_spawn_faults(self):
        with pytest.raises(ProtocolError):
            apply_action(make_state([[2, _], [_, _]]), Action.add_new_block(Vector(1, 1)))


class TestRestartAndAcknowledge:
    """Tests for starting over."""

    @pytest.mark.parametrize("phase", list(Phase))
    def test_restart_from_any_phase(self, phase):
        state = make_state(MOCK_GRID, phase=phase, barrier=CompletionBarrier(3), wait_id=4)

        result = apply_action(state, Action.restart(Vector(2, 3)))
        new_state = result.new_state

        assert new_state.phase == Phase.INIT
        assert new_state.size == 6
        assert new_state.barrier.count == 0
        assert new_state.wait_id == 5
        assert new_state.score == 0
        assert new_state.grid.values()[3][2] == 2
        assert new_state.grid.total_value() == 2

    @pytest.mark.parametrize("phase", [Phase.WON, Phase.GAME_OVER])
    def test_acknowledge_terminal(self, phase):
        state = make_state([[2, 4], [4, 2]], phase=phase)

        result = apply_action(state, Action.acknowledge(Vector(0, 0)))

        assert result.new_state.phase == Phase.INIT

    def test_acknowledge_during_play_faults(self):
        state = make_state(MOCK_GRID)

        with pytest.raises(ProtocolError):
            apply_action(state, Action.acknowledge(Vector(0, 0)))

    def test_action_types(self):
        assert Action.restart(Vector(0, 0)).action_type == ActionType.RESTART
        assert Action.acknowledge(Vector(0, 0)).payload.block.is_new


class TestClearTransientState:
    def test_clears_flags(self):
        grid = Grid.empty(2).with_cell(
            Vector(0, 0), Cell(block=Block("a", 4, is_new=True), merged_block=Block("b", 2))
        )

        cleared = clear_transient_state(grid)

        assert cleared.cell_at(Vector(0, 0)) == Cell(block=Block("a", 4))
