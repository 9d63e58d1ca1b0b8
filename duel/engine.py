"""Duel session reducer.

Every operation takes the duel document, the theme, the acting role and the
server time, validates, and mutates the document in place. apply_action wraps
them so a failed operation never touches the caller's copy: it works on a
deep copy, refreshes the phase first, and bumps the version on success.
Storage and transport live in the server package; nothing here does I/O.
"""

import logging

from . import hints, phase, sabotage
from .answers import current_question, is_correct_answer
from .config import (
    CHALLENGER, OPPONENT, ROLES, MODE_CLASSIC, HINT_PROVIDER_BONUS,
    MAX_SABOTAGES_PER_DUEL, TIMEOUT_ANSWER,
)
from .difficulty import (
    calculate_accuracy, calculate_distribution, calculate_max_score, calculate_success_rate,
)
from .errors import InvalidState, PreconditionFailed, Unauthorized
from .levels import (
    create_word_states, determine_initial_level, determine_level2_mode,
    pick_next_question, update_word_state_after_answer,
)
from .models import DuelSession
from .pools import initialize_pools, pick_next, should_expand, expand_pool
from .prng import initial_seed, shuffle_seeded
from .utils import other_role

logger = logging.getLogger(__name__)


# ============================================================================
# Lifecycle
# ============================================================================

def create_duel(duel_id: str, challenger_id: str, opponent_id: str, theme,
                mode: str = MODE_CLASSIC, difficulty_preset: str = 'easy',
                now: int = 0, word_count: int = None) -> DuelSession:
    """Create a pending challenge over theme."""
    if not challenger_id or not opponent_id:
        raise PreconditionFailed("Both players are required")
    if challenger_id == opponent_id:
        raise PreconditionFailed("You cannot challenge yourself")
    theme.validate()

    count = len(theme) if word_count is None else word_count
    if count <= 0 or count > len(theme):
        raise PreconditionFailed(f"Word count must be between 1 and {len(theme)}")

    return DuelSession(duel_id, challenger_id, opponent_id, theme.theme_id, count,
                       mode, difficulty_preset, created_at=now)


def resolve_role(duel: DuelSession, user_id: str) -> str:
    role = duel.role_of(user_id)
    if role is None:
        raise Unauthorized("You are not a participant in this duel")
    return role


def _require_pending(duel: DuelSession) -> None:
    if duel.status != 'pending':
        raise InvalidState(f"Duel is {duel.status}")


def _require_active(duel: DuelSession) -> None:
    if not duel.is_active:
        raise InvalidState(f"Duel is {duel.status}")


def accept_duel(duel: DuelSession, theme, role: str, now: int, seed: int = None) -> None:
    """Opponent accepts: draw the seed and lay out the game.

    Solo-style seed consumption order is fixed: challenger pools, opponent
    pools, challenger pick, opponent pick, challenger level and mode,
    opponent level and mode.
    """
    if role != OPPONENT:
        raise Unauthorized("Only the challenged player can accept")
    _require_pending(duel)

    seed = initial_seed(now) if seed is None else seed

    if duel.is_classic:
        order, seed = shuffle_seeded(list(range(len(theme))), seed)
        duel.word_order = order[:duel.word_count]
        duel.current_word_index = 0
        duel.question_start_time = now
        duel.status = 'accepted'
    else:
        for r in ROLES:
            player = duel.player(r)
            player.active_pool, player.remaining_pool, seed = initialize_pools(duel.word_count, seed)
        for r in ROLES:
            duel.player(r).word_states = create_word_states(duel.word_count)
        for r in ROLES:
            player = duel.player(r)
            player.current_word_index, seed = pick_next(player.active_pool, seed)
        for r in ROLES:
            player = duel.player(r)
            player.current_level, seed = determine_initial_level(seed)
            player.level2_mode, seed = determine_level2_mode(seed)
            player.question_started_at = now
        duel.status = 'challenging'

    duel.phase = phase.ANSWERING
    duel.seed = seed
    logger.info(f"Duel {duel.duel_id} accepted ({duel.mode}, {duel.word_count} words)")


def reject_duel(duel: DuelSession, theme, role: str, now: int) -> None:
    if role != OPPONENT:
        raise Unauthorized("Only the challenged player can reject")
    _require_pending(duel)
    duel.status = 'rejected'


def cancel_duel(duel: DuelSession, theme, role: str, now: int) -> None:
    if role != CHALLENGER:
        raise Unauthorized("Only the challenger can cancel")
    _require_pending(duel)
    duel.status = 'cancelled'


def stop_duel(duel: DuelSession, theme, role: str, now: int) -> None:
    _require_active(duel)
    hints.clear_hints(duel)
    duel.status = 'stopped'


# ============================================================================
# Answers
# ============================================================================

def _advance_if_locked(duel: DuelSession, now: int) -> None:
    """Once both roles are locked in, move to the next question or finish."""
    if not all(duel.player(r).answered for r in ROLES):
        return

    hints.clear_hints(duel)
    if duel.current_word_index + 1 >= duel.word_count:
        duel.status = 'completed'
        duel.phase = phase.TRANSITION
        duel.question_timer_paused_at = None
        duel.question_timer_paused_by = None
        logger.info(f"Duel {duel.duel_id} completed: "
                    f"{duel.challenger.score} - {duel.opponent.score}")
        return

    duel.current_word_index += 1
    for r in ROLES:
        player = duel.player(r)
        player.answered = False
        player.timed_out = False
    phase.enter_transition(duel, now)


def _submit_classic(duel: DuelSession, theme, role: str, answer: str,
                    question_index: int | None, now: int) -> None:
    if duel.phase != phase.ANSWERING:
        raise InvalidState("Not accepting answers right now")
    if question_index is not None and question_index != duel.current_word_index:
        raise InvalidState("Answer is for a different question")

    player = duel.player(role)
    if player.answered:
        raise PreconditionFailed("You already answered this question")

    question = current_question(duel, theme, role)
    is_correct = is_correct_answer(question, answer)

    player.answered = True
    player.last_answer = answer
    player.record_answer(is_correct)
    if is_correct:
        player.score += question.points
        # Provider earns the bonus only once an option was actually eliminated
        channel = duel.hint_b
        if (channel.accepted and channel.requested_by == role
                and channel.word_index == duel.current_word_index and channel.eliminated_options):
            duel.player(other_role(role)).score += HINT_PROVIDER_BONUS

    _advance_if_locked(duel, now)


def _submit_solo(duel: DuelSession, theme, role: str, answer: str,
                 question_index: int | None, now: int) -> None:
    player = duel.player(role)
    if player.completed:
        raise InvalidState("You have already finished every word")
    if question_index is not None and question_index != player.current_word_index:
        raise InvalidState("Answer is for a different question")

    question = current_question(duel, theme, role)
    is_correct = is_correct_answer(question, answer)
    word_index = player.current_word_index
    seed = duel.seed

    player.word_states[word_index], seed = update_word_state_after_answer(
        player.word_states[word_index], player.current_level, is_correct, seed
    )
    player.last_answer = answer
    player.record_answer(is_correct)
    if is_correct:
        player.score += player.current_level

    if should_expand(player.active_pool, player.word_states, player.remaining_pool):
        player.active_pool, player.remaining_pool, seed = expand_pool(
            player.active_pool, player.remaining_pool, seed
        )

    nxt, seed = pick_next_question(player.active_pool, player.word_states, word_index, seed)
    duel.seed = seed
    hints.clear_hints(duel, requester=role)

    if nxt.is_complete:
        player.completed = True
        player.question_started_at = None
    else:
        player.current_word_index = nxt.word_index
        player.current_level = nxt.level
        player.level2_mode = nxt.level2_mode
        player.question_started_at = now

    if all(duel.player(r).completed for r in ROLES):
        duel.status = 'completed'
        logger.info(f"Duel {duel.duel_id} completed: "
                    f"{duel.challenger.score} - {duel.opponent.score}")


def submit_answer(duel: DuelSession, theme, role: str, now: int,
                  answer: str = None, question_index: int = None) -> None:
    _require_active(duel)
    if duel.is_classic:
        _submit_classic(duel, theme, role, answer, question_index, now)
    else:
        _submit_solo(duel, theme, role, answer, question_index, now)


def _record_timeout(player) -> None:
    player.answered = True
    player.timed_out = True
    player.last_answer = TIMEOUT_ANSWER
    player.record_answer(False)


def expire_question(duel: DuelSession, now: int) -> bool:
    """Once the server timer has run out, lock in every role still unanswered as a timeout.

    Returns True when something expired. The advance that follows is anchored
    at now, so at most one question expires per call.
    """
    if not duel.is_classic or not duel.is_active or duel.phase != phase.ANSWERING:
        return False
    remaining = phase.question_time_remaining(duel, now)
    if remaining is None or remaining > 0:
        return False

    stalled = [r for r in ROLES if not duel.player(r).answered]
    if not stalled:
        return False
    for r in stalled:
        _record_timeout(duel.player(r))
    logger.info(f"Duel {duel.duel_id} question {duel.current_word_index} expired for {', '.join(stalled)}")
    _advance_if_locked(duel, now)
    return True


def timeout_answer(duel: DuelSession, theme, role: str, now: int, question_index: int = None) -> None:
    """Settle the current question once the server timer has run out.

    Either participant may call it: every role still unanswered is locked in
    as a timeout, including a stalled opponent. Idempotent: a timeout for a
    question that was already settled does nothing.
    """
    if not duel.is_classic:
        raise InvalidState("Timeouts only apply to classic duels")
    _require_active(duel)
    if question_index is not None and question_index != duel.current_word_index:
        return
    if all(duel.player(r).answered for r in ROLES):
        return
    if not expire_question(duel, now):
        raise PreconditionFailed("Time remains on this question")


# ============================================================================
# Countdown actions
# ============================================================================

def pause_countdown(duel, theme, role, now):
    phase.pause_countdown(duel, role, now)


def request_unpause(duel, theme, role, now):
    phase.request_unpause(duel, role, now)


def confirm_unpause(duel, theme, role, now):
    phase.confirm_unpause(duel, role, now)


def skip_countdown(duel, theme, role, now):
    phase.skip_countdown(duel, role, now)


# ============================================================================
# Dispatch
# ============================================================================

ACTIONS = {
    'accept': accept_duel,
    'reject': reject_duel,
    'cancel': cancel_duel,
    'stop': stop_duel,
    'answer': submit_answer,
    'timeout': timeout_answer,
    'hint_a_request': hints.request_hint_a,
    'hint_a_accept': hints.accept_hint_a,
    'hint_a_provide': hints.provide_hint_a,
    'hint_a_update': hints.update_hint_a,
    'hint_a_cancel': hints.cancel_hint_a,
    'hint_b_request': hints.request_hint_b,
    'hint_b_accept': hints.accept_hint_b,
    'hint_b_eliminate': hints.eliminate_option,
    'hint_b_cancel': hints.cancel_hint_b,
    'sabotage': sabotage.send_sabotage,
    'countdown_pause': pause_countdown,
    'countdown_request_unpause': request_unpause,
    'countdown_confirm_unpause': confirm_unpause,
    'countdown_skip': skip_countdown,
}


def apply_action(duel: DuelSession, theme, role: str, action: str, now: int, **params) -> DuelSession:
    """Run one action against a copy of duel and return the new document.

    Raises a DuelError when the action is rejected; duel itself is never
    modified either way. A classic question whose timer ran out is expired
    first; an answer or timeout arriving after that is absorbed by the expiry,
    so a late answer is committed as a zero-point timeout.
    """
    handler = ACTIONS.get(action)
    if handler is None:
        raise PreconditionFailed(f"Unknown action: {action}")
    if role not in ROLES:
        raise Unauthorized("You are not a participant in this duel")

    working = duel.clone()
    phase.refresh_phase(working, now)
    expired = expire_question(working, now)
    if not (expired and action in ('answer', 'timeout')):
        handler(working, theme, role, now, **params)
    working.version += 1
    return working


# ============================================================================
# Read model
# ============================================================================

def max_score(duel: DuelSession) -> int | None:
    """Best possible classic score for this duel, or None for solo-style duels."""
    if not duel.is_classic:
        return None
    return calculate_max_score(duel.word_count,
                               calculate_distribution(duel.word_count, duel.difficulty_preset))


def _player_stats(duel: DuelSession, player) -> dict:
    stats = dict(player.stats)
    stats['accuracy'] = calculate_accuracy(stats['correct_answers'], stats['questions_answered'])
    best = max_score(duel)
    if best is not None:
        stats['success_rate'] = calculate_success_rate(player.score, best)
    return stats


def _player_view(duel: DuelSession, role: str, now: int) -> dict:
    player = duel.player(role)
    view = {
        'user_id': player.user_id,
        'score': player.score,
        'answered': player.answered,
        'timed_out': player.timed_out,
        'last_answer': player.last_answer,
        'stats': _player_stats(duel, player),
        'sabotages_used': player.sabotages_used,
        'sabotage': dict(player.sabotage) if player.sabotage else None,
        'sabotage_active': sabotage.is_sabotage_active(duel, role, now)
    }
    if not duel.is_classic:
        view.update({
            'current_word_index': player.current_word_index,
            'current_level': player.current_level,
            'level2_mode': player.level2_mode,
            'completed': player.completed,
            'active_pool_size': len(player.active_pool),
            'mastered': sum(1 for ws in player.word_states if ws.completed_level3)
        })
    return view


def _hint_a_view(duel: DuelSession, theme) -> dict | None:
    """Typing hint channel plus the letters the provider revealed."""
    if not duel.hint_a.is_open:
        return None
    view = duel.hint_a.to_dict()
    answer = theme.words[duel.hint_a.word_index].correct_answer
    view['provided_letters'] = {str(pos): answer[pos] for pos in duel.hint_a.provided_positions}
    return view


def build_view(duel: DuelSession, theme, now: int, viewer_role: str = None) -> dict:
    """Client-facing snapshot of the duel. Correct answers are never included.

    Classic questions are shown to both players but only while answering;
    solo-style questions are per player and only shown to viewer_role.
    """
    duel = duel.clone()
    phase.refresh_phase(duel, now)

    question = None
    if duel.is_classic:
        if duel.phase == phase.ANSWERING:
            question = current_question(duel, theme, CHALLENGER)
    elif viewer_role in ROLES:
        question = current_question(duel, theme, viewer_role)

    return {
        'duel_id': duel.duel_id,
        'theme_id': duel.theme_id,
        'mode': duel.mode,
        'difficulty_preset': duel.difficulty_preset,
        'status': duel.status,
        'phase': duel.phase,
        'current_word_index': duel.current_word_index,
        'word_count': duel.word_count,
        'max_score': max_score(duel),
        'question': question.to_view() if question else None,
        'per_role': {role: _player_view(duel, role, now) for role in ROLES},
        'hint_a': _hint_a_view(duel, theme),
        'hint_b': duel.hint_b.to_dict() if duel.hint_b.is_open else None,
        'sabotage_slots': {role: MAX_SABOTAGES_PER_DUEL - duel.player(role).sabotages_used
                           for role in ROLES},
        'timer': {
            'question_start_time': duel.question_start_time,
            'question_timer_paused_at': duel.question_timer_paused_at,
            'question_time_remaining': (phase.question_time_remaining(duel, now)
                                        if duel.is_classic and duel.is_active else None),
            'countdown_remaining': phase.countdown_remaining(duel, now),
            'countdown_paused_by': duel.countdown_paused_by,
            'countdown_unpause_requested_by': duel.countdown_unpause_requested_by,
            'countdown_skip_requested_by': list(duel.countdown_skip_requested_by)
        },
        'created_at': duel.created_at,
        'version': duel.version
    }
