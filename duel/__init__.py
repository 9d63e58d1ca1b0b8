from .models import WordEntry, Theme, WordState, PlayerState, DuelSession
from .interfaces import Storage
from .errors import (
    DuelError, Unauthorized, InvalidState, PreconditionFailed, NotFound, VersionConflict
)
from .engine import create_duel, resolve_role, apply_action, build_view
from .phase import PhaseTracker
from .config import (
    QUESTION_TIMER_SECONDS, TRANSITION_COUNTDOWN_SECONDS,
    CHALLENGER, OPPONENT, ROLES, MODE_CLASSIC, MODE_SOLO_STYLE
)

__all__ = [
    'WordEntry', 'Theme', 'WordState', 'PlayerState', 'DuelSession',
    'Storage',
    'DuelError', 'Unauthorized', 'InvalidState', 'PreconditionFailed', 'NotFound', 'VersionConflict',
    'create_duel', 'resolve_role', 'apply_action', 'build_view',
    'PhaseTracker',
    'QUESTION_TIMER_SECONDS', 'TRANSITION_COUNTDOWN_SECONDS',
    'CHALLENGER', 'OPPONENT', 'ROLES', 'MODE_CLASSIC', 'MODE_SOLO_STYLE'
]
