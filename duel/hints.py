"""Hint negotiation between the two players.

A player stuck on a question asks the other player for help. Channel A covers
typed questions (solo-style only), channel B covers multiple-choice
questions. Each channel holds at most one request; the non-requesting role
is the provider and is the only one who may accept or fulfil it.
"""

import logging

from .answers import current_question, generate_anagram
from .config import (
    HINT_TIME_BONUS_MS, MAX_LETTER_HINTS, MAX_ELIMINATED_OPTIONS,
)
from .errors import InvalidState, PreconditionFailed
from .models import HintChannelA, HintChannelB
from .phase import ANSWERING, pause_question_timer, resume_question_timer
from .utils import other_role

logger = logging.getLogger(__name__)

HINT_TYPES_B = ('eliminate', 'flash', 'tts')


def allowed_hint_types_a(level: int | None, level2_mode: str | None) -> tuple:
    if level == 1:
        return ('letters', 'flash', 'tts')
    if level == 3 or (level == 2 and level2_mode == 'typing'):
        return ('anagram', 'flash', 'tts')
    return ()


def _require_active(duel) -> None:
    if not duel.is_active:
        raise InvalidState(f"Duel is {duel.status}")


def _require_provider(channel, role: str) -> None:
    if not channel.is_open:
        raise PreconditionFailed("No hint request is open")
    if channel.requested_by == role:
        raise PreconditionFailed("You are not the hint provider")


def clear_hints(duel, requester: str | None = None) -> None:
    """Drop open hint requests; only those of requester when one is given."""
    if requester is None or duel.hint_a.requested_by == requester:
        duel.hint_a = HintChannelA()
    if requester is None or duel.hint_b.requested_by == requester:
        duel.hint_b = HintChannelB()


# ============================================================================
# Channel A (typed questions)
# ============================================================================

def request_hint_a(duel, theme, role: str, now: int,
                   typed_letters: list = None, revealed_positions: list = None) -> None:
    _require_active(duel)
    if duel.is_classic:
        raise InvalidState("Typing hints are only available in solo-style duels")
    if duel.hint_a.is_open:
        raise PreconditionFailed("A hint request is already open")

    player = duel.player(role)
    if player.completed or player.current_word_index is None:
        raise InvalidState("No question to ask a hint for")
    if not allowed_hint_types_a(player.current_level, player.level2_mode):
        raise PreconditionFailed("Typing hints are not available for this question")

    channel = HintChannelA()
    channel.requested_by = role
    channel.word_index = player.current_word_index
    channel.level = player.current_level
    channel.typed_letters = list(typed_letters or [])
    channel.revealed_positions = list(revealed_positions or [])
    duel.hint_a = channel


def accept_hint_a(duel, theme, role: str, now: int, hint_type: str = None) -> None:
    _require_active(duel)
    channel = duel.hint_a
    _require_provider(channel, role)
    if channel.accepted:
        raise PreconditionFailed("Hint already accepted")

    requester = duel.player(channel.requested_by)
    if hint_type not in allowed_hint_types_a(channel.level, requester.level2_mode):
        raise PreconditionFailed(f"Hint type '{hint_type}' is not allowed at level {channel.level}")

    channel.accepted = True
    channel.hint_type = hint_type
    if hint_type == 'anagram':
        answer = theme.words[channel.word_index].correct_answer
        channel.anagram = generate_anagram(answer, requester.stats['questions_answered'])


def provide_hint_a(duel, theme, role: str, now: int, position: int = None) -> None:
    """Reveal one letter of the requester's answer."""
    _require_active(duel)
    channel = duel.hint_a
    _require_provider(channel, role)
    if not channel.accepted or channel.hint_type != 'letters':
        raise PreconditionFailed("No letter hint has been accepted")
    if len(channel.provided_positions) >= MAX_LETTER_HINTS:
        raise PreconditionFailed(f"At most {MAX_LETTER_HINTS} letters can be revealed")

    answer = theme.words[channel.word_index].correct_answer
    if position is None or not 0 <= position < len(answer):
        raise PreconditionFailed("Position is outside the answer")
    if answer[position] == ' ':
        raise PreconditionFailed("Cannot reveal a space")
    if position in channel.provided_positions:
        raise PreconditionFailed("Letter already revealed")
    if position in channel.revealed_positions:
        raise PreconditionFailed("Letter already revealed by the requester")

    channel.provided_positions = channel.provided_positions + [position]


def update_hint_a(duel, theme, role: str, now: int,
                  typed_letters: list = None, revealed_positions: list = None) -> None:
    """Requester shares their current input so the provider picks useful letters."""
    _require_active(duel)
    channel = duel.hint_a
    if not channel.is_open or channel.requested_by != role:
        raise PreconditionFailed("Only the requester can update the hint state")
    channel.typed_letters = list(typed_letters or [])
    channel.revealed_positions = list(revealed_positions or [])


def cancel_hint_a(duel, theme, role: str, now: int) -> None:
    channel = duel.hint_a
    if not channel.is_open:
        return
    if channel.requested_by != role and channel.accepted:
        raise PreconditionFailed("An accepted hint can only be cancelled by the requester")
    duel.hint_a = HintChannelA()


# ============================================================================
# Channel B (multiple-choice questions)
# ============================================================================

def request_hint_b(duel, theme, role: str, now: int, options: list = None) -> None:
    _require_active(duel)
    if duel.hint_b.is_open:
        raise PreconditionFailed("A hint request is already open")

    question = current_question(duel, theme, role)
    if question is None:
        raise InvalidState("No question to ask a hint for")

    player = duel.player(role)
    if duel.is_classic:
        if duel.phase != ANSWERING:
            raise InvalidState("Not accepting hint requests right now")
        if player.answered:
            raise PreconditionFailed("You already answered this question")
        if not duel.player(other_role(role)).answered:
            raise PreconditionFailed("Your opponent has not answered yet")
        word_index = duel.current_word_index
    else:
        if player.current_level != 2 or player.level2_mode != 'multiple_choice':
            raise PreconditionFailed("Option hints need a multiple-choice question")
        word_index = player.current_word_index

    if list(options or []) != question.options:
        raise PreconditionFailed("Options do not match the current question")

    channel = HintChannelB()
    channel.requested_by = role
    channel.word_index = word_index
    channel.options = list(question.options)
    duel.hint_b = channel


def accept_hint_b(duel, theme, role: str, now: int, hint_type: str = None) -> None:
    _require_active(duel)
    channel = duel.hint_b
    _require_provider(channel, role)
    if channel.accepted:
        raise PreconditionFailed("Hint already accepted")
    if hint_type not in HINT_TYPES_B:
        raise PreconditionFailed(f"Hint type '{hint_type}' is not allowed for options")

    channel.accepted = True
    channel.hint_type = hint_type
    logger.debug(f"Option hint '{hint_type}' accepted for {channel.requested_by} in duel {duel.duel_id}")
    if duel.is_classic:
        if duel.question_start_time is not None:
            duel.question_start_time += HINT_TIME_BONUS_MS
        if hint_type == 'eliminate':
            pause_question_timer(duel, channel.requested_by, now)


def eliminate_option(duel, theme, role: str, now: int, option: str = None) -> None:
    _require_active(duel)
    channel = duel.hint_b
    _require_provider(channel, role)
    if not channel.accepted or channel.hint_type != 'eliminate':
        raise PreconditionFailed("No elimination hint has been accepted")
    if option not in channel.options:
        raise PreconditionFailed("Option is not part of this question")
    if option in channel.eliminated_options:
        raise PreconditionFailed("Option already eliminated")
    if len(channel.eliminated_options) >= MAX_ELIMINATED_OPTIONS:
        raise PreconditionFailed(f"At most {MAX_ELIMINATED_OPTIONS} options can be eliminated")

    question = current_question(duel, theme, channel.requested_by)
    if question is not None and option == question.correct_option:
        raise PreconditionFailed("Cannot eliminate the correct option")

    channel.eliminated_options = channel.eliminated_options + [option]
    if duel.is_classic and len(channel.eliminated_options) >= MAX_ELIMINATED_OPTIONS:
        resume_question_timer(duel, now)


def cancel_hint_b(duel, theme, role: str, now: int) -> None:
    channel = duel.hint_b
    if not channel.is_open:
        return
    if channel.requested_by != role and channel.accepted:
        raise PreconditionFailed("An accepted hint can only be cancelled by the requester")
    if duel.is_classic:
        resume_question_timer(duel, now)
    duel.hint_b = HintChannelB()
