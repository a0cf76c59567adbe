"""
Move Generator - The interaction-mode legality contract.

The reducer executes any in-range pair it receives. Which pairs a player
may actually submit is decided here and enforced by the presentation
boundary (API service, CLI):

1. ADJACENT: tiles sit on a grid and may swap with a neighbour
   (up, down, left, right)
2. FREE_SWAP: any two tiles, while the Swap power-up is armed

The generator is also used by the Hint power-up to search for the best
swap.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Iterable, Sequence

from .state import PuzzleState, PowerUp, GameStatus
from .action import SuggestedMove


class InteractionMode(Enum):
    """Which index pairs the presentation layer may submit."""
    ADJACENT = "adjacent"
    FREE_SWAP = "free_swap"


def is_adjacent(a: int, b: int, columns: int) -> bool:
    """Grid neighbours, no diagonals."""
    row_a, col_a = divmod(a, columns)
    row_b, col_b = divmod(b, columns)
    if row_a == row_b:
        return abs(col_a - col_b) == 1
    if col_a == col_b:
        return abs(row_a - row_b) == 1
    return False


def best_swap(
    current: Sequence[str],
    target: Sequence[str],
    excluded: Iterable[int] = (),
) -> SuggestedMove | None:
    """
    Search all unordered pairs for the swap that places the most digits.

    Pairs touching an excluded index are skipped. Returns None if no swap
    improves the number of correct positions.
    """
    excluded = set(excluded)
    best: SuggestedMove | None = None
    for i, j in combinations(range(len(current)), 2):
        if i in excluded or j in excluded:
            continue
        # Only positions i and j change, so compare them alone
        before = (current[i] == target[i]) + (current[j] == target[j])
        after = (current[j] == target[i]) + (current[i] == target[j])
        improvement = after - before
        if improvement > 0 and (best is None or improvement > best.improvement):
            best = SuggestedMove(from_index=i, to_index=j, improvement=improvement)
    return best


@dataclass
class MoveGenerator:
    """
    Generates and checks legal moves for the current puzzle state.

    Stateless apart from the board geometry.
    """
    columns: int = 3

    def mode(self, state: PuzzleState) -> InteractionMode:
        """Interaction mode in force for the next move."""
        if state.active_power_up == PowerUp.SWAP:
            return InteractionMode.FREE_SWAP
        return InteractionMode.ADJACENT

    def is_legal(self, state: PuzzleState, from_index: int, to_index: int) -> bool:
        """
        Check a pair against the active mode.

        Locked positions are not checked here; the reducer reports them.
        """
        if not state.is_valid_index(from_index) or not state.is_valid_index(to_index):
            return False
        if from_index == to_index:
            return False
        if self.mode(state) == InteractionMode.FREE_SWAP:
            return True
        return is_adjacent(from_index, to_index, self.columns)

    def generate(self, state: PuzzleState) -> list[tuple[int, int]]:
        """
        All unordered legal pairs that avoid locked positions.

        Empty unless a puzzle is being played.
        """
        if state.status != GameStatus.PLAYING:
            return []

        locked = state.locked_positions
        moves = []
        for i, j in combinations(range(len(state.current_sequence)), 2):
            if i in locked or j in locked:
                continue
            if self.is_legal(state, i, j):
                moves.append((i, j))
        return moves


def legal_moves(state: PuzzleState, columns: int = 3) -> list[tuple[int, int]]:
    """
    Convenience function to list legal moves.

    Creates a MoveGenerator and generates pairs.
    """
    return MoveGenerator(columns=columns).generate(state)
