"""Presentation levels and word mastery for solo-style duels.

Level 1 is the easiest presentation (typed with letter slots), level 2 is
either multiple choice or free typing, level 3 is free typing with no help.
A word answered correctly at level 3 is mastered for good.
"""

from .config import (
    LEVEL_1_START_PROBABILITY, LEVEL_2_TYPING_PROBABILITY,
    L1_TO_L2_PROBABILITY, L2_STAY_PROBABILITY, MAX_LEVEL,
)
from .models import WordState
from .pools import pick_next
from .prng import chance


class NextQuestion:
    """Outcome of picking a player's next solo-style question."""

    def __init__(self, word_index: int | None, level: int, level2_mode: str, is_complete: bool):
        self.word_index = word_index
        self.level = level
        self.level2_mode = level2_mode
        self.is_complete = is_complete

    def to_dict(self) -> dict:
        return {
            'word_index': self.word_index,
            'level': self.level,
            'level2_mode': self.level2_mode,
            'is_complete': self.is_complete
        }


def create_word_states(word_count: int) -> list[WordState]:
    return [WordState(idx) for idx in range(word_count)]


def determine_initial_level(seed: int) -> tuple[int, int]:
    """Level a fresh word is presented at. Returns (level, new_seed)."""
    start_at_one, seed = chance(seed, LEVEL_1_START_PROBABILITY)
    return (1 if start_at_one else 2), seed


def determine_level2_mode(seed: int) -> tuple[str, int]:
    """Returns ('typing' | 'multiple_choice', new_seed)."""
    typing, seed = chance(seed, LEVEL_2_TYPING_PROBABILITY)
    return ('typing' if typing else 'multiple_choice'), seed


def update_word_state_after_answer(word_state: WordState, current_level: int,
                                   was_correct: bool, seed: int) -> tuple[WordState, int]:
    """Advance or reset a word after an answer at current_level.

    Correct at level 1 moves to level 2 (L1_TO_L2_PROBABILITY) or straight
    to 3; correct at level 2 stays (L2_STAY_PROBABILITY) or moves to 3;
    correct at level 3 masters the word. A wrong answer drops one level.
    Returns (updated_state, new_seed); the input state is not modified.
    """
    updated = word_state.copy()

    if was_correct:
        if current_level <= 1:
            to_level_two, seed = chance(seed, L1_TO_L2_PROBABILITY)
            updated.current_level = 2 if to_level_two else MAX_LEVEL
        elif current_level == 2:
            stay, seed = chance(seed, L2_STAY_PROBABILITY)
            updated.current_level = 2 if stay else MAX_LEVEL
            updated.answered_level2_plus = True
        else:
            updated.current_level = MAX_LEVEL
            updated.completed_level3 = True
            updated.answered_level2_plus = True
    elif updated.current_level > 1:
        updated.current_level -= 1

    return updated, seed


def pick_next_question(active_pool: list[int], word_states: list[WordState],
                       current_word_index: int | None, seed: int) -> tuple[NextQuestion, int]:
    """Pick the next non-mastered word from the active pool.

    Seed consumption order: word pick, level coin (only for words still at
    level 1), level-2 mode coin.
    """
    states = {ws.word_index: ws for ws in word_states}
    incomplete = [idx for idx in active_pool
                  if not (idx in states and states[idx].completed_level3)]

    if not incomplete:
        return NextQuestion(current_word_index, MAX_LEVEL, 'typing', True), seed

    word_index, seed = pick_next(incomplete, seed, exclude=current_word_index)

    state = states.get(word_index)
    if state is None or state.current_level <= 1:
        level, seed = determine_initial_level(seed)
    else:
        level = state.current_level

    level2_mode, seed = determine_level2_mode(seed)
    return NextQuestion(word_index, level, level2_mode, False), seed
