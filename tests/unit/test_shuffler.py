"""
Unit tests for option shuffling.
"""

import random
from collections import Counter

from quizsession.study.shuffler import shuffle_options


class TestShuffleOptions:
    """Tests for the Fisher-Yates shuffler."""

    def test_returns_permutation(self):
        options = ["A", "B", "C", "D"]
        shuffled = shuffle_options(options, random.Random(7))

        assert sorted(shuffled) == sorted(options)
        assert len(shuffled) == len(options)

    def test_input_is_not_mutated(self):
        options = ["A", "B", "C", "D"]
        shuffle_options(options, random.Random(1))

        assert options == ["A", "B", "C", "D"]

    def test_accepts_tuples(self):
        shuffled = shuffle_options(("x", "y"), random.Random(3))

        assert isinstance(shuffled, list)
        assert set(shuffled) == {"x", "y"}

    def test_empty_and_single(self):
        assert shuffle_options([]) == []
        assert shuffle_options(["only"]) == ["only"]

    def test_seeded_rng_is_deterministic(self):
        options = list("ABCDEFG")

        assert shuffle_options(options, random.Random(42)) == shuffle_options(options, random.Random(42))

    def test_correct_option_lands_everywhere(self):
        """The canonical answer must not be stuck in one slot."""
        rng = random.Random(2024)
        positions = Counter(
            shuffle_options(["correct", "b", "c", "d"], rng).index("correct")
            for _ in range(2000)
        )

        assert set(positions) == {0, 1, 2, 3}
        for count in positions.values():
            assert 350 < count < 650
