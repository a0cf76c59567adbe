"""
Effect Generators - Random selection of power-ups and obstacles.

Both generators are pure with respect to the injected RandomSource.
"""

from __future__ import annotations

from .state import PowerUp, Obstacle
from .randomness import RandomSource


POWER_UP_KINDS: tuple[PowerUp, ...] = (
    PowerUp.REVEAL,
    PowerUp.SHUFFLE,
    PowerUp.HINT,
    PowerUp.SWAP,
    PowerUp.FREEZE,
)

OBSTACLE_KINDS: tuple[Obstacle, ...] = (
    Obstacle.LOCK,
    Obstacle.REVERSE,
    Obstacle.BLIND,
    Obstacle.JUMBLE,
)

POWER_UP_DESCRIPTIONS: dict[PowerUp, str] = {
    PowerUp.REVEAL: "Reveal a correct position",
    PowerUp.SHUFFLE: "Shuffle all incorrect positions",
    PowerUp.HINT: "Get a hint for your next move",
    PowerUp.SWAP: "Swap any two tiles (not just adjacent)",
    PowerUp.FREEZE: "Freeze a correct position",
}

OBSTACLE_WARNINGS: dict[Obstacle, str] = {
    Obstacle.LOCK: "Obstacle: Some positions will be locked for {seconds} seconds!",
    Obstacle.REVERSE: "Obstacle: Target sequence reversed for {seconds} seconds!",
    Obstacle.BLIND: "Obstacle: Numbers will be hidden for {seconds} seconds!",
    Obstacle.JUMBLE: "Obstacle: Your moves might cause jumbles for {seconds} seconds!",
}


def random_power_up(rng: RandomSource | None = None) -> PowerUp:
    """Uniform choice over all power-up kinds."""
    rng = rng or RandomSource()
    return rng.choice(POWER_UP_KINDS)


def random_obstacle(rng: RandomSource | None = None) -> Obstacle:
    """Uniform choice over all obstacle kinds."""
    rng = rng or RandomSource()
    return rng.choice(OBSTACLE_KINDS)


def describe_power_up(power_up: PowerUp) -> str:
    return POWER_UP_DESCRIPTIONS.get(power_up, "")


def obstacle_warning(obstacle: Obstacle, duration: float) -> str:
    return OBSTACLE_WARNINGS[obstacle].format(seconds=int(duration))
