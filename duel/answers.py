"""Deterministic answer options for duel questions.

Options are derived from the word content and question index only, so both
players see the same options in the same order without the duel storing them.
"""

from .config import HARD_MODE_NONE_CHANCE, NONE_OF_THE_ABOVE, WRONG_COUNT_EASY
from .difficulty import DifficultyInfo, calculate_distribution, get_difficulty_for_index
from .prng import hash_seed, shuffle_seeded, chance
from .utils import normalize_answer


class Question:
    """A presented question: prompt, options (empty for typed input) and the correct option."""

    def __init__(self, prompt: str, options: list[str], correct_option: str,
                 has_none_option: bool = False, level=None, points: int = 0):
        self.prompt = prompt
        self.options = options
        self.correct_option = correct_option
        self.has_none_option = has_none_option
        self.level = level
        self.points = points

    @property
    def is_typed(self) -> bool:
        return not self.options

    def is_correct(self, answer: str | None) -> bool:
        if self.is_typed:
            return normalize_answer(answer) == normalize_answer(self.correct_option)
        return answer == self.correct_option

    def to_view(self) -> dict:
        """Client-facing view; the correct option is never included."""
        view = {
            'prompt': self.prompt,
            'options': list(self.options),
            'has_none_option': self.has_none_option,
            'level': self.level,
            'points': self.points
        }
        if self.is_typed:
            view['answer_length'] = len(self.correct_option)
            view['space_positions'] = [i for i, c in enumerate(self.correct_option) if c == ' ']
        return view


def _distractors(word) -> list[str]:
    seen = set()
    distractors = []
    for wrong in word.wrong_answers:
        if wrong == word.correct_answer or wrong == NONE_OF_THE_ABOVE or wrong in seen:
            continue
        seen.add(wrong)
        distractors.append(wrong)
    return distractors


def build_options(word, seed_key: str, wrong_count: int, hard: bool = False) -> tuple[list[str], str, bool]:
    """Select distractors and shuffle them with the answer.

    Returns (options, correct_option, has_none_option). On hard questions a
    "None of the above" option is added, and with HARD_MODE_NONE_CHANCE it is
    the correct one (the real answer is then left out).
    """
    base_seed = hash_seed(seed_key)
    shuffled_wrong, seed = shuffle_seeded(_distractors(word), base_seed)
    selected = shuffled_wrong[:wrong_count]
    correct = word.correct_answer
    has_none = False

    if hard:
        has_none = True
        none_is_correct, seed = chance(seed, HARD_MODE_NONE_CHANCE)
        if none_is_correct and selected:
            options = selected + [NONE_OF_THE_ABOVE]
            correct = NONE_OF_THE_ABOVE
        else:
            options = [word.correct_answer] + selected[:max(0, wrong_count - 1)] + [NONE_OF_THE_ABOVE]
    else:
        options = [word.correct_answer] + selected

    final, _ = shuffle_seeded(options, hash_seed(f"{seed_key}::final"))
    return final, correct, has_none


def build_question(word, question_index: int, difficulty: DifficultyInfo) -> Question:
    options, correct, has_none = build_options(
        word, f"{word.prompt}::{question_index}",
        difficulty.wrong_count, hard=difficulty.level == 'hard'
    )
    return Question(word.prompt, options, correct, has_none, difficulty.level, difficulty.points)


def build_solo_question(word, word_index: int, level: int, level2_mode: str, attempt: int) -> Question:
    """Solo-style presentation: multiple choice only on level 2 multiple_choice, typed otherwise."""
    if level == 2 and level2_mode == 'multiple_choice':
        options, correct, _ = build_options(
            word, f"{word.prompt}::{word_index}::{attempt}", WRONG_COUNT_EASY
        )
        return Question(word.prompt, options, correct, False, level, level)
    return Question(word.prompt, [], word.correct_answer, False, level, level)


def generate_anagram(answer: str, nonce: int = 0) -> str:
    """Scramble the letters of answer, keeping spaces where they are."""
    letters = [c for c in answer if c != ' ']
    if len(set(letters)) <= 1:
        return answer

    seed = hash_seed(f"{answer}::{nonce}")
    shuffled, seed = shuffle_seeded(letters, seed)
    for _ in range(8):
        if shuffled != letters:
            break
        shuffled, seed = shuffle_seeded(letters, seed)
    if shuffled == letters:
        shuffled = letters[1:] + letters[:1]

    result = []
    idx = 0
    for char in answer:
        if char == ' ':
            result.append(' ')
        else:
            result.append(shuffled[idx])
            idx += 1
    return ''.join(result)


def is_correct_answer(question: Question, answer: str | None) -> bool:
    return question.is_correct(answer)


def current_question(duel, theme, role: str) -> Question | None:
    """The question role is currently facing, rebuilt from the duel and theme."""
    if duel.is_classic:
        if duel.status != 'accepted' or duel.current_word_index >= duel.word_count:
            return None
        word = theme.words[duel.theme_word_index()]
        distribution = calculate_distribution(duel.word_count, duel.difficulty_preset)
        info = get_difficulty_for_index(duel.current_word_index, distribution)
        return build_question(word, duel.current_word_index, info)

    player = duel.player(role)
    if duel.status != 'challenging' or player.completed or player.current_word_index is None:
        return None
    word = theme.words[player.current_word_index]
    return build_solo_question(word, player.current_word_index, player.current_level,
                               player.level2_mode, player.stats['questions_answered'])
