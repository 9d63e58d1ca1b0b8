"""Unit tests for the seeded PRNG and the difficulty model."""

import unittest

from duel.prng import advance_seed, pick, chance, shuffle_seeded, hash_seed, initial_seed
from duel.difficulty import (
    DifficultyDistribution, calculate_distribution, get_difficulty_for_index,
    calculate_max_score, calculate_success_rate, calculate_accuracy,
)


class TestSeededPRNG(unittest.TestCase):
    """Tests for the LCG helpers."""

    def test_advance_seed(self):
        self.assertEqual(advance_seed(0), 12345)
        self.assertEqual(advance_seed(1), 1103527590)

    def test_advance_seed_stays_in_31_bits(self):
        seed = 123456789
        for _ in range(1000):
            seed = advance_seed(seed)
            self.assertGreaterEqual(seed, 0)
            self.assertLessEqual(seed, 0x7fffffff)

    def test_pick_returns_value_and_new_seed(self):
        value, seed = pick(0, 10)
        self.assertEqual(seed, 12345)
        self.assertEqual(value, 5)

    def test_pick_empty_range_raises(self):
        with self.assertRaises(ValueError):
            pick(1, 0)

    def test_chance_extremes(self):
        seed = 99
        for _ in range(50):
            result, seed = chance(seed, 0)
            self.assertFalse(result)

    def test_chance_is_deterministic(self):
        self.assertEqual(chance(42, 0.5), chance(42, 0.5))

    def test_shuffle_is_deterministic_permutation(self):
        items = list(range(20))
        first, seed1 = shuffle_seeded(items, 7)
        second, seed2 = shuffle_seeded(items, 7)
        self.assertEqual(first, second)
        self.assertEqual(seed1, seed2)
        self.assertEqual(sorted(first), items)

    def test_shuffle_does_not_modify_input(self):
        items = ['a', 'b', 'c', 'd']
        shuffle_seeded(items, 3)
        self.assertEqual(items, ['a', 'b', 'c', 'd'])

    def test_shuffle_single_item_keeps_seed(self):
        result, seed = shuffle_seeded(['only'], 11)
        self.assertEqual(result, ['only'])
        self.assertEqual(seed, 11)

    def test_hash_seed(self):
        self.assertEqual(hash_seed(''), 18652613)
        self.assertEqual(hash_seed('casa::0'), hash_seed('casa::0'))
        self.assertNotEqual(hash_seed('a'), hash_seed('b'))

    def test_initial_seed(self):
        self.assertEqual(initial_seed(0), 1588444911)
        self.assertLessEqual(initial_seed(1_700_000_000_000), 0x7fffffff)


class TestDifficultyDistribution(unittest.TestCase):
    """Tests for calculate_distribution and friends."""

    def test_ten_words_easy_preset(self):
        dist = calculate_distribution(10)
        self.assertEqual(dist, DifficultyDistribution(5, 3, 2))
        self.assertEqual(dist.easy_end, 5)
        self.assertEqual(dist.medium_end, 8)

    def test_remainder_goes_to_easy(self):
        self.assertEqual(calculate_distribution(7), DifficultyDistribution(4, 2, 1))
        self.assertEqual(calculate_distribution(1), DifficultyDistribution(1, 0, 0))

    def test_medium_preset(self):
        self.assertEqual(calculate_distribution(5, 'medium'), DifficultyDistribution(0, 3, 2))

    def test_hard_preset(self):
        self.assertEqual(calculate_distribution(4, 'hard'), DifficultyDistribution(0, 0, 4))

    def test_zero_words(self):
        self.assertEqual(calculate_distribution(0), DifficultyDistribution(0, 0, 0))
        self.assertEqual(calculate_distribution(-3), DifficultyDistribution(0, 0, 0))

    def test_bands_always_sum_to_word_count(self):
        for preset in ('easy', 'medium', 'hard'):
            for n in range(0, 60):
                self.assertEqual(calculate_distribution(n, preset).total, n)

    def test_difficulty_for_index(self):
        dist = calculate_distribution(10)
        first = get_difficulty_for_index(0, dist)
        self.assertEqual(first.level, 'easy')
        self.assertEqual(first.points, 1)
        self.assertEqual(first.wrong_count, 3)
        self.assertEqual(get_difficulty_for_index(5, dist).level, 'medium')
        self.assertEqual(get_difficulty_for_index(7, dist).points, 2)
        last = get_difficulty_for_index(9, dist)
        self.assertEqual(last.level, 'hard')
        self.assertEqual(last.points, 3)
        self.assertEqual(last.option_count, 6)

    def test_scoring_helpers(self):
        dist = calculate_distribution(10)
        self.assertEqual(calculate_max_score(10, dist), 17)
        self.assertEqual(calculate_success_rate(17, 17), 100)
        self.assertEqual(calculate_success_rate(5, 0), 0)
        self.assertEqual(calculate_accuracy(3, 4), 75)
        self.assertEqual(calculate_accuracy(0, 0), 0)


if __name__ == '__main__':
    unittest.main()
