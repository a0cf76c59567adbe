"""
Pytest fixtures for Digit Dash tests.
"""

import pytest

from ..engine_core.state import PuzzleState, GameStatus, Difficulty
from ..engine_core.randomness import RandomSource
from ..engine_core.reducer import Reducer
from ..session.controller import SessionController


class NoEffects(RandomSource):
    """Never drops a power-up, rolls an obstacle or jumbles."""

    def chance(self, probability):
        return False


class AlwaysEffects(RandomSource):
    """Every probability roll succeeds."""

    def chance(self, probability):
        return True


class ScriptedChance(RandomSource):
    """Returns scripted roll outcomes in order, then False."""

    def __init__(self, outcomes, seed=0):
        super().__init__(seed=seed)
        self.outcomes = list(outcomes)
        self.rolls = []

    def chance(self, probability):
        self.rolls.append(probability)
        return self.outcomes.pop(0) if self.outcomes else False


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_state(current, target="12345678", **kwargs) -> PuzzleState:
    """Build a PLAYING state from digit strings."""
    defaults = dict(
        identifier=target,
        target_sequence=tuple(target),
        current_sequence=tuple(current),
        status=GameStatus.PLAYING,
        clock_at=100.0,
        difficulty=Difficulty.EASY,
    )
    defaults.update(kwargs)
    return PuzzleState(**defaults)


@pytest.fixture
def quiet_rng() -> NoEffects:
    """Random source with every effect disabled."""
    return NoEffects(seed=1)


@pytest.fixture
def reducer(quiet_rng) -> Reducer:
    """Reducer that never rolls effects."""
    return Reducer(rng=quiet_rng)


@pytest.fixture
def nearly_solved() -> PuzzleState:
    """Only positions 0 and 1 are wrong."""
    return make_state("21345678")


@pytest.fixture
def scrambled() -> PuzzleState:
    """Pairs of neighbours exchanged: 21436587."""
    return make_state("21436587")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def controller(clock) -> SessionController:
    """Controller with effects disabled and a fake clock."""
    return SessionController(rng=NoEffects(seed=3), clock=clock)
