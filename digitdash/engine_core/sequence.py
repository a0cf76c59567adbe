"""
Sequence Utilities - Pure helpers over digit sequences.

None of these functions touch PuzzleState; the reducer composes them.
"""

from __future__ import annotations
from enum import Enum
from typing import Sequence, TypeVar

from .randomness import RandomSource

T = TypeVar("T")

IDENTIFIER_LENGTH = 8


class InvalidIdentifier(ValueError):
    """Raised when an identifier is not at least 8 numeric characters."""


class DigitStatus(Enum):
    """Status of a digit compared to the target at the same position."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    DEFAULT = "default"  # Position outside the target


def shuffle(sequence: Sequence[T], rng: RandomSource | None = None) -> list[T]:
    """
    Fisher-Yates shuffle.

    Returns a new list; the argument is left untouched.
    """
    rng = rng or RandomSource()
    items = list(sequence)
    for i in range(len(items) - 1, 0, -1):
        j = rng.randrange(i + 1)
        items[i], items[j] = items[j], items[i]
    return items


def is_solved(current: Sequence[str], target: Sequence[str]) -> bool:
    """True if both sequences have the same length and match elementwise."""
    if len(current) != len(target):
        return False
    return all(a == b for a, b in zip(current, target))


def count_matches(current: Sequence[str], target: Sequence[str]) -> int:
    """Count positions where current agrees with target."""
    return sum(1 for a, b in zip(current, target) if a == b)


def compute_score(moves: int, elapsed_seconds: int, target_length: int) -> int:
    """
    Score awarded at the win transition.

    1000 base, minus 10 per move and 2 per second, plus 50 per digit.
    Never negative.
    """
    base_score = 1000
    moves_penalty = moves * 10
    time_penalty = elapsed_seconds * 2
    length_bonus = target_length * 50
    return max(0, base_score - moves_penalty - time_penalty + length_bonus)


def validate_identifier(identifier: str, min_length: int = IDENTIFIER_LENGTH) -> bool:
    """Numeric only and at least min_length characters."""
    return identifier.isascii() and identifier.isdigit() and len(identifier) >= min_length


def prepare_identifier(identifier: str, length: int = IDENTIFIER_LENGTH) -> str:
    """Limit the identifier to its first `length` characters."""
    return identifier[:length] if len(identifier) > length else identifier


def derive_target(
    identifier: str,
    length: int = IDENTIFIER_LENGTH,
    min_length: int = IDENTIFIER_LENGTH,
) -> tuple[str, ...]:
    """
    Build the target sequence for an identifier.

    Raises InvalidIdentifier if the identifier is malformed.
    """
    if not isinstance(identifier, str) or not validate_identifier(identifier, min_length):
        raise InvalidIdentifier(
            f"Identifier must be numeric with at least {min_length} digits"
        )
    return tuple(prepare_identifier(identifier, length))


def digit_status(digit: str | None, index: int, target: Sequence[str]) -> DigitStatus:
    if index >= len(target):
        return DigitStatus.DEFAULT
    if digit == target[index]:
        return DigitStatus.CORRECT
    return DigitStatus.INCORRECT


def swapped(sequence: Sequence[T], a: int, b: int) -> list[T]:
    """Return a copy of sequence with positions a and b exchanged."""
    items = list(sequence)
    items[a], items[b] = items[b], items[a]
    return items


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins:02d}:{secs:02d}"
