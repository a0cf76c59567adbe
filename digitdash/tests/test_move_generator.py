"""
Tests for the move generator.

Tests:
- Grid adjacency
- Interaction modes
- Legal move enumeration
- Best swap search
"""

import pytest

from ..engine_core.state import PuzzleState, GameStatus, PowerUp
from ..engine_core.move_generator import (
    InteractionMode,
    MoveGenerator,
    is_adjacent,
    best_swap,
    legal_moves,
)
from .conftest import make_state


class TestAdjacency:
    """Tests for grid neighbours."""

    @pytest.mark.parametrize("a,b,expected", [
        (0, 1, True),    # same row
        (0, 3, True),    # same column
        (4, 1, True),
        (2, 3, False),   # row wrap
        (0, 4, False),   # diagonal
        (0, 2, False),
        (0, 6, False),
    ])
    def test_three_columns(self, a, b, expected):
        assert is_adjacent(a, b, 3) is expected

    def test_other_widths(self):
        assert is_adjacent(3, 4, 4) is False
        assert is_adjacent(0, 4, 4) is True


class TestMoveGenerator:
    """Tests for mode and legality."""

    def test_default_mode_is_adjacent(self, scrambled):
        assert MoveGenerator().mode(scrambled) == InteractionMode.ADJACENT

    def test_armed_swap_frees_moves(self, scrambled):
        state = scrambled._copy_with(active_power_up=PowerUp.SWAP)
        generator = MoveGenerator()

        assert generator.mode(state) == InteractionMode.FREE_SWAP
        assert generator.is_legal(state, 0, 7)

    def test_is_legal(self, scrambled):
        generator = MoveGenerator()

        assert generator.is_legal(scrambled, 0, 1)
        assert generator.is_legal(scrambled, 4, 7)
        assert not generator.is_legal(scrambled, 0, 4)
        assert not generator.is_legal(scrambled, 1, 1)
        assert not generator.is_legal(scrambled, 7, 8)
        assert not generator.is_legal(scrambled, -1, 0)

    def test_generate_eight_tiles(self, scrambled):
        """Eight tiles on three columns have ten neighbouring pairs."""
        moves = MoveGenerator(columns=3).generate(scrambled)

        assert len(moves) == 10
        assert (0, 1) in moves
        assert (4, 7) in moves
        assert (2, 3) not in moves

    def test_generate_skips_locked(self):
        state = make_state("21436587", frozen_positions=frozenset({4}))
        moves = MoveGenerator().generate(state)

        assert len(moves) == 6
        assert all(4 not in pair for pair in moves)

    def test_generate_free_swap(self):
        state = make_state("21436587", active_power_up=PowerUp.SWAP)
        assert len(MoveGenerator().generate(state)) == 28

    def test_generate_needs_a_game(self):
        assert MoveGenerator().generate(PuzzleState()) == []
        won = make_state("12345678", status=GameStatus.WON)
        assert MoveGenerator().generate(won) == []

    def test_legal_moves_convenience(self, scrambled):
        assert legal_moves(scrambled) == MoveGenerator().generate(scrambled)


class TestBestSwap:
    """Tests for the best swap search."""

    def test_double_fix_preferred(self):
        move = best_swap("21436587", "12345678")
        assert (move.from_index, move.to_index, move.improvement) == (0, 1, 2)

    def test_single_fix(self):
        # 3-cycle: no swap fixes two at once
        move = best_swap("231", "123")
        assert move.improvement == 1

    def test_solved_has_no_suggestion(self):
        assert best_swap("12345678", "12345678") is None

    def test_excluded_positions(self):
        assert best_swap("21345678", "12345678", excluded={0}) is None
