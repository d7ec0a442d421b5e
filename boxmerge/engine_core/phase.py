"""Game phases."""

from enum import Enum


class Phase(str, Enum):
    """
    Phases of a round.

    INIT, ACTIVE and SPAWN wait for animation completions; INPUT waits for a
    move; WON and GAME_OVER wait for acknowledgment; TEST_WON and
    TEST_GAME_OVER are evaluated immediately.
    """
    INIT = "init"
    INPUT = "input"
    ACTIVE = "active"
    TEST_WON = "test_won"
    WON = "won"
    SPAWN = "spawn"
    TEST_GAME_OVER = "test_game_over"
    GAME_OVER = "game_over"


ANIMATED_PHASES = frozenset({Phase.INIT, Phase.ACTIVE, Phase.SPAWN})
TERMINAL_PHASES = frozenset({Phase.WON, Phase.GAME_OVER})
