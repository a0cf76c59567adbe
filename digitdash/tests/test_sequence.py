"""
Tests for sequence utilities and effect generators.

Tests:
- Shuffle and win detection
- Score formula
- Identifier validation and target derivation
- Power-up and obstacle selection
"""

from collections import Counter

import pytest

from ..engine_core.randomness import RandomSource
from ..engine_core.sequence import (
    InvalidIdentifier,
    DigitStatus,
    shuffle,
    is_solved,
    count_matches,
    compute_score,
    validate_identifier,
    prepare_identifier,
    derive_target,
    digit_status,
    swapped,
    format_time,
)
from ..engine_core.state import PowerUp, Obstacle
from ..engine_core.effects import (
    POWER_UP_KINDS,
    OBSTACLE_KINDS,
    random_power_up,
    random_obstacle,
    describe_power_up,
    obstacle_warning,
)


class TestShuffle:
    """Tests for shuffle."""

    def test_shuffle_is_permutation(self):
        """Shuffle keeps every element."""
        items = list("12345678")
        result = shuffle(items, RandomSource(seed=5))

        assert sorted(result) == sorted(items)
        assert len(result) == len(items)

    def test_shuffle_leaves_input_untouched(self):
        items = list("12345678")
        shuffle(items, RandomSource(seed=5))
        assert items == list("12345678")

    def test_shuffle_is_seeded(self):
        """Same seed, same permutation."""
        a = shuffle("12345678", RandomSource(seed=9))
        b = shuffle("12345678", RandomSource(seed=9))
        assert a == b

    def test_shuffle_is_uniform(self):
        """Every ordering of three items turns up about equally often."""
        rng = RandomSource(seed=2024)
        draws = 6000
        counts = Counter(tuple(shuffle("abc", rng)) for _ in range(draws))

        assert len(counts) == 6
        expected = draws / 6
        for ordering, count in counts.items():
            assert abs(count - expected) < 0.15 * expected, ordering

    def test_shuffle_empty_and_single(self):
        assert shuffle([], RandomSource(seed=1)) == []
        assert shuffle(["7"], RandomSource(seed=1)) == ["7"]


class TestWinDetection:
    """Tests for is_solved and count_matches."""

    def test_sequence_solves_itself(self):
        assert is_solved(list("12345678"), tuple("12345678"))

    def test_any_difference_is_unsolved(self):
        assert not is_solved(list("21345678"), list("12345678"))

    def test_length_mismatch_is_unsolved(self):
        assert not is_solved(list("1234"), list("12345"))

    def test_count_matches(self):
        assert count_matches("21436587", "12345678") == 0
        assert count_matches("12436587", "12345678") == 2
        assert count_matches("12345678", "12345678") == 8

    def test_swapped_twice_restores(self):
        seq = list("21436587")
        assert swapped(swapped(seq, 2, 5), 2, 5) == seq


class TestScore:
    """Tests for the score formula."""

    def test_base_score(self):
        assert compute_score(0, 0, 8) == 1400

    def test_penalties(self):
        # 1000 - 100 - 60 + 400
        assert compute_score(10, 30, 8) == 1240

    def test_never_negative(self):
        assert compute_score(500, 0, 8) == 0
        assert compute_score(0, 10_000, 8) == 0

    def test_monotonic_in_moves_and_time(self):
        for m in range(0, 150, 7):
            for t in range(0, 600, 37):
                assert compute_score(m + 1, t, 8) <= compute_score(m, t, 8)
                assert compute_score(m, t + 1, 8) <= compute_score(m, t, 8)

    def test_non_decreasing_in_length(self):
        for length in range(1, 12):
            assert compute_score(20, 60, length + 1) >= compute_score(20, 60, length)


class TestIdentifier:
    """Tests for identifier validation and target derivation."""

    @pytest.mark.parametrize("identifier", ["12345678", "1234567890", "00000000"])
    def test_valid_identifiers(self, identifier):
        assert validate_identifier(identifier)

    @pytest.mark.parametrize("identifier", ["", "1234567", "1234abcd", "1234 5678", "１２３４５６７８"])
    def test_invalid_identifiers(self, identifier):
        assert not validate_identifier(identifier)

    def test_prepare_truncates(self):
        assert prepare_identifier("1234567890") == "12345678"
        assert prepare_identifier("12345678") == "12345678"

    def test_derive_target(self):
        assert derive_target("9876543210") == tuple("98765432")

    def test_derive_target_rejects_malformed(self):
        with pytest.raises(InvalidIdentifier):
            derive_target("12ab5678")

    def test_derive_target_rejects_non_string(self):
        with pytest.raises(InvalidIdentifier):
            derive_target(None)

    def test_invalid_identifier_is_value_error(self):
        with pytest.raises(ValueError):
            derive_target("123")


class TestPresentationHelpers:
    """Tests for digit status and time formatting."""

    def test_digit_status(self):
        target = tuple("12345678")
        assert digit_status("1", 0, target) == DigitStatus.CORRECT
        assert digit_status("2", 0, target) == DigitStatus.INCORRECT
        assert digit_status("1", 8, target) == DigitStatus.DEFAULT

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00"),
        (5, "00:05"),
        (65, "01:05"),
        (3600, "60:00"),
        (-3, "00:00"),
    ])
    def test_format_time(self, seconds, expected):
        assert format_time(seconds) == expected


class TestEffectGenerators:
    """Tests for power-up and obstacle selection."""

    def test_power_ups_cover_all_kinds(self):
        rng = RandomSource(seed=0)
        drawn = {random_power_up(rng) for _ in range(200)}
        assert drawn == set(POWER_UP_KINDS)

    def test_obstacles_cover_all_kinds(self):
        rng = RandomSource(seed=0)
        drawn = {random_obstacle(rng) for _ in range(200)}
        assert drawn == set(OBSTACLE_KINDS)

    def test_descriptions(self):
        assert describe_power_up(PowerUp.SWAP) == "Swap any two tiles (not just adjacent)"
        for power_up in POWER_UP_KINDS:
            assert describe_power_up(power_up)

    def test_obstacle_warning_includes_duration(self):
        assert obstacle_warning(Obstacle.LOCK, 20.0) == (
            "Obstacle: Some positions will be locked for 20 seconds!"
        )
        assert "20 seconds" in obstacle_warning(Obstacle.BLIND, 20)
