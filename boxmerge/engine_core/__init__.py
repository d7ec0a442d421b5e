"""
Engine Core - Deterministic board logic and the phase state machine.

The engine:
1. Holds the board as immutable Grid snapshots
2. Resolves moves with the merge resolver
3. Detects win and loss
4. Sequences rounds through the reducer
5. Counts animation completions with the completion barrier
"""

from .errors import EngineFault, InvalidDirectionError, ProtocolError, OutOfRangeError
from .grid import Vector, Block, Cell, Grid
from .merge import PairingResult, find_block_pairs, resolve_line, resolve_grid, line_has_pairs, merge_gain
from .terminal import find_empty_cell_positions, has_new_block, has_won, has_lost
from .phase import Phase
from .aggregator import CompletionBarrier, expected_count, visible_entity_count
from .state import GameState, RandomSource, make_random_source, new_game_state
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action
from .projection import EntityView, project_entities, grid_to_screen_position

__all__ = [
    "EngineFault",
    "InvalidDirectionError",
    "ProtocolError",
    "OutOfRangeError",
    "Vector",
    "Block",
    "Cell",
    "Grid",
    "PairingResult",
    "find_block_pairs",
    "resolve_line",
    "resolve_grid",
    "line_has_pairs",
    "merge_gain",
    "find_empty_cell_positions",
    "has_new_block",
    "has_won",
    "has_lost",
    "Phase",
    "CompletionBarrier",
    "expected_count",
    "visible_entity_count",
    "GameState",
    "RandomSource",
    "make_random_source",
    "new_game_state",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
    "EntityView",
    "project_entities",
    "grid_to_screen_position",
]
