"""Question phases, timers and the transition countdown.

Server side, the phase of a classic duel follows from stored timestamps:
when both players are locked in, the question index advances and
question_start_time is set to the advance time. The next question starts
answering TRANSITION_COUNTDOWN_SECONDS later (no offset for question 0), so
the countdown and the answering timer are both derived from one stored
timestamp and the server clock. Client-reported elapsed time is never used.

Client side, PhaseTracker re-derives the same phases from read-model
snapshots for presentation only.
"""

import logging

from .config import QUESTION_TIMER_SECONDS, TRANSITION_COUNTDOWN_SECONDS, ROLES
from .errors import InvalidState, PreconditionFailed

logger = logging.getLogger(__name__)

IDLE = 'idle'
ANSWERING = 'answering'
TRANSITION = 'transition'
PHASES = (IDLE, ANSWERING, TRANSITION)


# ============================================================================
# Server-side timer math
# ============================================================================

def transition_offset_ms(question_index: int) -> int:
    return 0 if question_index == 0 else TRANSITION_COUNTDOWN_SECONDS * 1000


def effective_question_start(duel) -> int | None:
    """Server time at which answering the current question begins."""
    if duel.question_start_time is None:
        return None
    return duel.question_start_time + transition_offset_ms(duel.current_word_index)


def _reference_time(duel, now: int) -> int:
    """Clock reading to measure against; frozen while any pause is in effect."""
    paused = [t for t in (duel.question_timer_paused_at, duel.countdown_paused_at) if t is not None]
    return min(paused) if paused else now


def question_time_remaining(duel, now: int) -> float | None:
    """Seconds left to answer the current classic question, or None without a timer."""
    start = effective_question_start(duel)
    if start is None:
        return None
    elapsed = max(0, _reference_time(duel, now) - start) / 1000
    return max(0.0, QUESTION_TIMER_SECONDS - elapsed)


def countdown_remaining(duel, now: int) -> float | None:
    """Seconds left in the transition countdown, or None when no countdown runs."""
    if duel.phase != TRANSITION or duel.is_terminal:
        return None
    start = effective_question_start(duel)
    if start is None:
        return None
    return max(0.0, (start - _reference_time(duel, now)) / 1000)


def refresh_phase(duel, now: int) -> None:
    """Move transition -> answering once the countdown has run out."""
    if not duel.is_classic or duel.phase != TRANSITION or not duel.is_active:
        return
    if duel.countdown_paused_by is not None:
        return
    start = effective_question_start(duel)
    if start is not None and now >= start:
        duel.phase = ANSWERING
        duel.countdown_skip_requested_by = []


def enter_transition(duel, now: int) -> None:
    """Called when the index advances after both players locked in."""
    duel.phase = TRANSITION
    duel.question_start_time = now
    duel.question_timer_paused_at = None
    duel.question_timer_paused_by = None
    duel.countdown_paused_by = None
    duel.countdown_paused_at = None
    duel.countdown_unpause_requested_by = None
    duel.countdown_skip_requested_by = []


def pause_question_timer(duel, role: str, now: int) -> None:
    if duel.question_timer_paused_at is None:
        duel.question_timer_paused_at = now
        duel.question_timer_paused_by = role


def resume_question_timer(duel, now: int) -> None:
    """Shift the start time by the paused span so no answering time is lost."""
    if duel.question_timer_paused_at is None:
        return
    paused_for = max(0, now - duel.question_timer_paused_at)
    if duel.question_start_time is not None:
        duel.question_start_time += paused_for
    duel.question_timer_paused_at = None
    duel.question_timer_paused_by = None


# ============================================================================
# Countdown pause / unpause / skip
# ============================================================================

def _require_countdown(duel) -> None:
    if not duel.is_classic:
        raise InvalidState("Not a classic duel")
    if not duel.is_active:
        raise InvalidState("Duel is not active")
    if duel.phase != TRANSITION:
        raise InvalidState("No countdown is running")


def pause_countdown(duel, role: str, now: int) -> None:
    _require_countdown(duel)
    if duel.countdown_paused_by is not None:
        raise PreconditionFailed("Countdown already paused")
    duel.countdown_paused_by = role
    duel.countdown_paused_at = now
    duel.countdown_unpause_requested_by = None
    duel.countdown_skip_requested_by = []


def request_unpause(duel, role: str, now: int) -> None:
    if not duel.is_classic:
        raise InvalidState("Not a classic duel")
    if duel.countdown_paused_by is None:
        raise InvalidState("Countdown is not paused")
    if duel.countdown_unpause_requested_by == role:
        return
    if duel.countdown_unpause_requested_by is not None:
        raise PreconditionFailed("Unpause already requested by the other player; confirm it instead")
    duel.countdown_unpause_requested_by = role


def confirm_unpause(duel, role: str, now: int) -> None:
    """Resume the countdown. Needs the other player's consent, so the requester cannot confirm."""
    if not duel.is_classic:
        raise InvalidState("Not a classic duel")
    if duel.countdown_unpause_requested_by is None:
        return
    if duel.countdown_unpause_requested_by == role:
        raise PreconditionFailed("Cannot confirm your own unpause request")

    paused_for = max(0, now - duel.countdown_paused_at) if duel.countdown_paused_at is not None else 0
    if duel.question_start_time is not None:
        duel.question_start_time += paused_for
    duel.countdown_paused_by = None
    duel.countdown_paused_at = None
    duel.countdown_unpause_requested_by = None
    logger.debug(f"Countdown resumed after {paused_for}ms pause")


def skip_countdown(duel, role: str, now: int) -> bool:
    """Record a skip vote. When both players voted, the next question starts now.

    Returns True when the countdown was skipped.
    """
    _require_countdown(duel)
    if duel.countdown_paused_by is not None:
        raise PreconditionFailed("Cannot skip while countdown is paused")
    if role not in duel.countdown_skip_requested_by:
        duel.countdown_skip_requested_by = duel.countdown_skip_requested_by + [role]
    if not all(r in duel.countdown_skip_requested_by for r in ROLES):
        return False
    duel.question_start_time = now - transition_offset_ms(duel.current_word_index)
    duel.phase = ANSWERING
    duel.countdown_skip_requested_by = []
    return True


# ============================================================================
# Client-side presentation tracker
# ============================================================================

class PhaseTracker:
    """Derives the local phase from successive read-model snapshots.

    Transition is entered only when this client had locked in an answer (or
    timed out) and the server index then advanced, so both players see the
    transition at the same logical point. Nothing here writes game state:
    the tracker can be thrown away and rebuilt from the next snapshot.
    """

    def __init__(self, viewer_role: str):
        self.viewer_role = viewer_role
        self.phase = IDLE
        self.active_index = None
        self.locked_answer = None
        self.timed_out = False
        self.frozen = None
        self.status = None
        self._countdown_deadline = None
        self._countdown_frozen = None
        self._question_deadline = None
        self._timeout_fired = False

    def lock(self, answer: str) -> None:
        self.locked_answer = answer

    def observe(self, view: dict, now: int) -> str:
        """Fold a server snapshot into the local phase. Returns the phase."""
        index = view['current_word_index']
        self.status = view['status']
        me = view['per_role'][self.viewer_role]

        if self.active_index is None:
            if view['status'] in ('accepted', 'challenging'):
                self.active_index = index
                self.phase = ANSWERING
        elif index != self.active_index or (view['status'] == 'completed' and self.phase == ANSWERING):
            # The last question completes the duel without moving the index
            if self.locked_answer is not None or self.timed_out or me.get('answered'):
                other = 'opponent' if self.viewer_role == 'challenger' else 'challenger'
                self.phase = TRANSITION
                self.frozen = {
                    'word_index': self.active_index,
                    'selected_answer': self.locked_answer,
                    'opponent_answer': view['per_role'][other].get('last_answer')
                }
            else:
                self._reset_question()
                self.phase = ANSWERING
            self.active_index = index

        timer = view.get('timer') or {}
        countdown = timer.get('countdown_remaining')
        if self.phase == TRANSITION:
            if countdown is None:
                self._countdown_deadline = None
                self._countdown_frozen = None
            elif timer.get('countdown_paused_by'):
                self._countdown_frozen = countdown
                self._countdown_deadline = None
            else:
                self._countdown_frozen = None
                self._countdown_deadline = now + int(countdown * 1000)

        remaining = timer.get('question_time_remaining')
        if remaining is not None and view.get('phase') == ANSWERING:
            self._question_deadline = now + int(remaining * 1000)
        return self.tick(now)

    def countdown(self, now: int) -> float | None:
        if self._countdown_frozen is not None:
            return self._countdown_frozen
        if self._countdown_deadline is None:
            return None
        return max(0.0, (self._countdown_deadline - now) / 1000)

    def question_remaining(self, now: int) -> float | None:
        if self._question_deadline is None or self.phase != ANSWERING:
            return None
        return max(0.0, (self._question_deadline - now) / 1000)

    def tick(self, now: int) -> str:
        """Local countdown step; ends the transition when it reaches zero."""
        if self.phase == TRANSITION and self.status not in ('completed', 'stopped', 'cancelled', 'rejected'):
            remaining = self.countdown(now)
            if remaining is not None and remaining <= 0:
                self._reset_question()
                self.phase = ANSWERING
        return self.phase

    def should_fire_timeout(self, now: int) -> bool:
        """True once the local timer ran out, until timeout_sent() acknowledges the request.

        Fires even after this client answered, so a stalled opponent is settled.
        """
        remaining = self.question_remaining(now)
        if remaining is None or remaining > 0 or self._timeout_fired:
            return False
        return True

    def timeout_sent(self) -> None:
        """Server accepted the timeout for the current question."""
        self._timeout_fired = True
        if self.locked_answer is None:
            self.timed_out = True

    def _reset_question(self) -> None:
        self.frozen = None
        self.locked_answer = None
        self.timed_out = False
        self._timeout_fired = False
        self._countdown_deadline = None
        self._countdown_frozen = None
        self._question_deadline = None
