"""
Rule Configuration - Tunable constants of the puzzle rules.

The defaults reproduce the shipped game. A custom RuleConfig can be
passed to the reducer (e.g. for tests or experimental modes).
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .state import Difficulty


@dataclass(frozen=True)
class RuleConfig:
    """Rule parameters consumed by the reducer and move generator."""
    # Identifier
    target_length: int = 8  # Digits taken from the identifier
    min_identifier_length: int = 8

    # Power-ups
    inventory_capacity: int = 3
    power_up_drop_chance: float = 0.10
    starting_power_ups: dict[Difficulty, int] = field(default_factory=lambda: {
        Difficulty.EASY: 2,
        Difficulty.MEDIUM: 1,
        Difficulty.HARD: 0,
    })

    # Obstacles
    obstacle_chance: dict[Difficulty, float] = field(default_factory=lambda: {
        Difficulty.EASY: 0.05,
        Difficulty.MEDIUM: 0.10,
        Difficulty.HARD: 0.15,
    })
    obstacle_duration: float = 20.0  # Seconds
    obstacle_min_moves: int = 2  # Moves that must precede an obstacle roll
    jumble_chance: float = 0.5
    lock_count_min: int = 2
    lock_count_max: int = 3
    blind_duration: float = 5.0  # Seconds the digits stay hidden

    # Progression
    levels_per_tier: int = 3

    # Board geometry for the adjacency contract
    grid_columns: int = 3

    def starting_power_up_count(self, difficulty: Difficulty) -> int:
        return self.starting_power_ups.get(difficulty, 0)

    def obstacle_probability(self, difficulty: Difficulty) -> float:
        return self.obstacle_chance.get(difficulty, 0.0)

