"""Difficulty distribution and scoring for classic duels.

Questions are assigned levels in contiguous bands over the (shuffled) word
order: all easy questions first, then medium, then hard. The position in the
order decides difficulty, so shuffling the order is what randomizes which
words end up hard.
"""

import math

from .config import (
    DIFFICULTY_RATIO_EASY, DIFFICULTY_RATIO_MEDIUM, DIFFICULTY_RATIO_HARD,
    POINTS_EASY, POINTS_MEDIUM, POINTS_HARD,
    WRONG_COUNT_EASY, WRONG_COUNT_MEDIUM, WRONG_COUNT_HARD,
)

LEVEL_POINTS = {'easy': POINTS_EASY, 'medium': POINTS_MEDIUM, 'hard': POINTS_HARD}
LEVEL_WRONG_COUNT = {'easy': WRONG_COUNT_EASY, 'medium': WRONG_COUNT_MEDIUM, 'hard': WRONG_COUNT_HARD}


class DifficultyDistribution:
    """Band sizes plus the exclusive end index of the easy and medium bands."""

    def __init__(self, easy: int, medium: int, hard: int):
        self.easy = easy
        self.medium = medium
        self.hard = hard
        self.easy_end = easy
        self.medium_end = easy + medium
        self.total = easy + medium + hard

    def to_dict(self) -> dict:
        return {
            'easy': self.easy,
            'medium': self.medium,
            'hard': self.hard,
            'easy_end': self.easy_end,
            'medium_end': self.medium_end,
            'total': self.total
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, DifficultyDistribution):
            return NotImplemented
        return (self.easy, self.medium, self.hard) == (other.easy, other.medium, other.hard)

    def __repr__(self) -> str:
        return f"DifficultyDistribution(easy={self.easy}, medium={self.medium}, hard={self.hard})"


class DifficultyInfo:
    """Level, points and distractor count for one question index."""

    def __init__(self, level: str):
        self.level = level
        self.points = LEVEL_POINTS[level]
        self.wrong_count = LEVEL_WRONG_COUNT[level]

    @property
    def option_count(self) -> int:
        return self.wrong_count + 1

    def to_dict(self) -> dict:
        return {
            'level': self.level,
            'points': self.points,
            'wrong_count': self.wrong_count,
            'option_count': self.option_count
        }


def _progressive_distribution(word_count: int) -> DifficultyDistribution:
    easy = math.floor(word_count * DIFFICULTY_RATIO_EASY)
    medium = math.floor(word_count * DIFFICULTY_RATIO_MEDIUM)
    hard = math.floor(word_count * DIFFICULTY_RATIO_HARD)
    # Whole remainder goes to the largest band
    easy += word_count - (easy + medium + hard)
    return DifficultyDistribution(easy, medium, hard)


def calculate_distribution(word_count: int, preset: str = 'easy') -> DifficultyDistribution:
    """Split word_count into easy/medium/hard bands for the given preset.

    The three counts always sum to word_count.
    """
    if word_count <= 0:
        return DifficultyDistribution(0, 0, 0)

    if preset == 'medium':
        medium = math.ceil(word_count / 2)
        return DifficultyDistribution(0, medium, word_count - medium)
    if preset == 'hard':
        return DifficultyDistribution(0, 0, word_count)
    return _progressive_distribution(word_count)


def get_difficulty_for_index(index: int, distribution: DifficultyDistribution) -> DifficultyInfo:
    if index < distribution.easy_end:
        return DifficultyInfo('easy')
    if index < distribution.medium_end:
        return DifficultyInfo('medium')
    return DifficultyInfo('hard')


def calculate_max_score(question_count: int, distribution: DifficultyDistribution) -> int:
    """Sum of points available over the first question_count questions."""
    return sum(get_difficulty_for_index(i, distribution).points for i in range(question_count))


def calculate_success_rate(score: int, max_score: int) -> int:
    if max_score <= 0:
        return 0
    return round(score / max_score * 100)


def calculate_accuracy(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(correct / total * 100)
