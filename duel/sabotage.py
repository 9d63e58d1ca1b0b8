"""Sabotage: one player disrupts the other's input for the current question."""

import logging

from .config import (
    SABOTAGE_EFFECTS, MAX_SABOTAGES_PER_DUEL,
    SABOTAGE_STICKY_DURATION_MS, SABOTAGE_FALLBACK_DURATION_MS,
)
from .errors import InvalidState, PreconditionFailed
from .utils import other_role

logger = logging.getLogger(__name__)


def target_question_start(duel, role: str) -> int | None:
    if duel.is_classic:
        return duel.question_start_time
    return duel.player(role).question_started_at


def is_sabotage_active(duel, role: str, now: int) -> bool:
    """Sticky wears off after a fixed time; the other effects last for the question they hit.

    Classic duels shift question_start_time for pauses and hint bonuses, so
    there the record's question index identifies the question instead.
    """
    sabotage = duel.player(role).sabotage
    if not sabotage:
        return False

    timestamp = sabotage['timestamp']
    if sabotage['effect'] == 'sticky':
        return now - timestamp < SABOTAGE_STICKY_DURATION_MS

    if duel.is_classic:
        return sabotage.get('question_index') == duel.current_word_index and duel.is_active

    start = target_question_start(duel, role)
    if start is None:
        return now - timestamp < SABOTAGE_FALLBACK_DURATION_MS
    return timestamp >= start


def send_sabotage(duel, theme, role: str, now: int, effect: str = None) -> None:
    if not duel.is_active:
        raise InvalidState(f"Duel is {duel.status}")
    if effect not in SABOTAGE_EFFECTS:
        raise PreconditionFailed(f"Unknown sabotage effect: {effect}")

    sender = duel.player(role)
    target_role = other_role(role)
    target = duel.player(target_role)

    if sender.sabotages_used >= MAX_SABOTAGES_PER_DUEL:
        raise PreconditionFailed(f"All {MAX_SABOTAGES_PER_DUEL} sabotages used")
    if target.answered or target.completed:
        raise PreconditionFailed("Your opponent already answered")
    if is_sabotage_active(duel, target_role, now):
        raise PreconditionFailed("Your opponent is already sabotaged")

    target.sabotage = {
        'effect': effect,
        'timestamp': now,
        'question_index': duel.current_word_index if duel.is_classic else target.current_word_index
    }
    sender.sabotages_used += 1
    logger.debug(f"{role} sent '{effect}' in duel {duel.duel_id} ({sender.sabotages_used}/{MAX_SABOTAGES_PER_DUEL})")
