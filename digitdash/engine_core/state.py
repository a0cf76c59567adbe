"""
Puzzle State - The immutable aggregate the engine operates on.

Design principles:
- Immutable: the dataclass is frozen, all mutations return new state
- Caller-held: no global session, every operation takes and returns a state
- Self-describing: derived values (progress, locks) are computed properties
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class GameStatus(Enum):
    """Lifecycle states of a puzzle session."""
    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"
    SHOWING_HELP = "showing_help"  # Overlay, puzzle data untouched


class Difficulty(Enum):
    """Difficulty tiers. Never decreases across levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    def escalate(self) -> Difficulty:
        """Next tier up, saturating at HARD."""
        order = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]
        idx = order.index(self)
        return order[min(idx + 1, len(order) - 1)]


class PowerUp(Enum):
    """Single-use beneficial effects."""
    REVEAL = "reveal"  # Moves one digit into its correct position
    SHUFFLE = "shuffle"  # Reshuffles all incorrect positions
    HINT = "hint"  # Suggests the best next swap
    SWAP = "swap"  # Next move may swap any two tiles
    FREEZE = "freeze"  # Permanently locks a correct position


class Obstacle(Enum):
    """Time-bounded adverse effects."""
    LOCK = "lock"  # Some positions cannot be swapped
    REVERSE = "reverse"  # Target is displayed reversed
    BLIND = "blind"  # Digits are hidden for a few seconds
    JUMBLE = "jumble"  # Moves may swap an extra pair


@dataclass(frozen=True)
class PuzzleState:
    """
    Complete puzzle session at a point in time.

    A fresh PuzzleState() is the IDLE session. All state changes
    go through the reducer.
    """
    identifier: str = ""
    target_sequence: tuple[str, ...] = ()
    current_sequence: tuple[str, ...] = ()
    status: GameStatus = GameStatus.IDLE

    # Counters
    move_count: int = 0
    elapsed: float = 0.0  # Seconds spent PLAYING
    clock_at: float | None = None  # Last clock reading seen by the engine
    score: int = 0

    # Power-ups
    inventory: tuple[PowerUp, ...] = ()
    active_power_up: PowerUp | None = None

    # Obstacles
    active_obstacle: Obstacle | None = None
    obstacle_started_at: float | None = None
    obstacle_expires_at: float | None = None
    obstacle_locks: frozenset[int] = field(default_factory=frozenset)

    # Freeze power-up locks, never cleared by obstacle expiry
    frozen_positions: frozenset[int] = field(default_factory=frozenset)

    # Progression
    difficulty: Difficulty = Difficulty.EASY
    level: int = 1
    streak: int = 0

    @property
    def locked_positions(self) -> frozenset[int]:
        """Positions that cannot take part in a swap."""
        return self.obstacle_locks | self.frozen_positions

    @property
    def has_puzzle(self) -> bool:
        return len(self.target_sequence) > 0

    @property
    def total_positions(self) -> int:
        return len(self.target_sequence)

    @property
    def correct_positions(self) -> int:
        return sum(
            1 for a, b in zip(self.current_sequence, self.target_sequence) if a == b
        )

    @property
    def is_solved(self) -> bool:
        return self.has_puzzle and tuple(self.current_sequence) == tuple(self.target_sequence)

    @property
    def elapsed_seconds(self) -> int:
        return int(self.elapsed)

    def incorrect_indices(self) -> list[int]:
        return [
            i for i, (a, b) in enumerate(zip(self.current_sequence, self.target_sequence))
            if a != b
        ]

    def correct_indices(self) -> list[int]:
        return [
            i for i, (a, b) in enumerate(zip(self.current_sequence, self.target_sequence))
            if a == b
        ]

    def is_valid_index(self, index: int) -> bool:
        return isinstance(index, int) and 0 <= index < len(self.current_sequence)

    def obstacle_expired(self, now: float) -> bool:
        """True if an obstacle expiry time exists and has passed."""
        return self.obstacle_expires_at is not None and now > self.obstacle_expires_at

    def _copy_with(self, **kwargs) -> PuzzleState:
        """Create a copy with some fields replaced."""
        return PuzzleState(
            identifier=kwargs.get("identifier", self.identifier),
            target_sequence=tuple(kwargs.get("target_sequence", self.target_sequence)),
            current_sequence=tuple(kwargs.get("current_sequence", self.current_sequence)),
            status=kwargs.get("status", self.status),
            move_count=kwargs.get("move_count", self.move_count),
            elapsed=kwargs.get("elapsed", self.elapsed),
            clock_at=kwargs.get("clock_at", self.clock_at),
            score=kwargs.get("score", self.score),
            inventory=tuple(kwargs.get("inventory", self.inventory)),
            active_power_up=kwargs.get("active_power_up", self.active_power_up),
            active_obstacle=kwargs.get("active_obstacle", self.active_obstacle),
            obstacle_started_at=kwargs.get("obstacle_started_at", self.obstacle_started_at),
            obstacle_expires_at=kwargs.get("obstacle_expires_at", self.obstacle_expires_at),
            obstacle_locks=frozenset(kwargs.get("obstacle_locks", self.obstacle_locks)),
            frozen_positions=frozenset(kwargs.get("frozen_positions", self.frozen_positions)),
            difficulty=kwargs.get("difficulty", self.difficulty),
            level=kwargs.get("level", self.level),
            streak=kwargs.get("streak", self.streak),
        )
