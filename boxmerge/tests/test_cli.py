"""
Tests for the terminal CLI helpers.
"""

import pytest

from ..cli import KEY_DIRECTIONS, finish_animations, main, render_board
from ..engine_core.grid import Vector
from ..engine_core.phase import Phase
from .conftest import make_loop


_ = None


class TestRenderBoard:
    def test_aligned_columns(self):
        loop = make_loop([[2, _], [128, 4]])
        assert render_board(loop) == "  2   .\n128   4"


class TestFinishAnimations:
    def test_runs_new_game_to_input(self, seeded_loop):
        finish_animations(seeded_loop)
        assert seeded_loop.phase == Phase.INPUT

    def test_runs_round_to_input(self):
        loop = make_loop([[2, _, 2], [_, _, _], [_, _, _]])
        loop.move(Vector.LEFT)

        finish_animations(loop)

        assert loop.phase == Phase.INPUT
        assert loop.state.grid.total_value() == 6

    def test_stops_at_game_over(self):
        loop = make_loop([[2, 4], [8, _]])
        loop.move(Vector.LEFT)

        finish_animations(loop)

        assert loop.phase == Phase.GAME_OVER


class TestMain:
    def test_key_bindings(self):
        assert KEY_DIRECTIONS["a"] == KEY_DIRECTIONS["h"] == Vector.LEFT
        assert KEY_DIRECTIONS["k"] == Vector.UP

    def test_play_quits_on_eof(self, monkeypatch, capsys):
        def eof(_prompt):
            raise EOFError
        monkeypatch.setattr("builtins.input", eof)

        main(["play", "--size", "3", "--seed", "1"])

        assert "Score: 0" in capsys.readouterr().out

    def test_play_moves_then_quits(self, monkeypatch, capsys):
        keys = iter(["a", "x", "q"])
        monkeypatch.setattr("builtins.input", lambda _prompt: next(keys))

        main(["play", "--size", "3", "--seed", "1"])

        out = capsys.readouterr().out
        assert "Moves: 1" in out
        assert "Unknown key: 'x'" in out

    def test_no_command_exits(self):
        with pytest.raises(SystemExit):
            main([])
