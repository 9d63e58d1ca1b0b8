"""Transactional runner: read, reduce, compare-and-swap write."""

import logging
import uuid

from duel.config import MAX_TRANSACTION_RETRIES
from duel.engine import apply_action, build_view, create_duel, resolve_role
from duel.errors import NotFound, VersionConflict
from duel.interfaces import Storage
from duel.models import Theme
from duel.sweep import sweep_expired_duels
from duel.utils import now_ms

logger = logging.getLogger(__name__)


class DuelService:
    """Runs duel actions against a Storage with optimistic concurrency.

    Each action is one read-modify-write. If another writer committed in
    between, the whole transaction is re-run on the fresh document, up to
    MAX_TRANSACTION_RETRIES times.
    """

    def __init__(self, storage: Storage, clock=now_ms):
        self.storage = storage
        self.clock = clock

    def _log_event(self, event: str, duel_id: str, user_id: str = None, **data) -> None:
        if hasattr(self.storage, 'log_event'):
            self.storage.log_event(event, duel_id, user_id, **data)

    def get_theme(self, theme_id: str) -> Theme:
        theme = self.storage.load_theme(theme_id)
        if theme is None:
            raise NotFound(f"Theme {theme_id} not found")
        return theme

    def save_theme(self, theme: Theme) -> Theme:
        theme.validate()
        self.storage.save_theme(theme)
        logger.info(f"Saved theme {theme.theme_id} ({len(theme)} words)")
        return theme

    def _load(self, duel_id: str):
        duel = self.storage.load_duel(duel_id)
        if duel is None:
            raise NotFound(f"Duel {duel_id} not found")
        return duel

    def create(self, challenger_id: str, opponent_id: str, theme_id: str,
               mode: str = 'classic', difficulty_preset: str = 'easy',
               word_count: int = None, duel_id: str = None) -> dict:
        theme = self.get_theme(theme_id)
        now = self.clock()
        duel = create_duel(duel_id or uuid.uuid4().hex[:12], challenger_id, opponent_id,
                           theme, mode, difficulty_preset, now, word_count)
        self.storage.create_duel(duel)
        logger.info(f"Duel {duel.duel_id} created: {challenger_id} vs {opponent_id} on {theme_id}")
        self._log_event('duel.create', duel.duel_id, challenger_id,
                        opponent_id=opponent_id, mode=mode, theme_id=theme_id)
        return build_view(duel, theme, now, 'challenger')

    def view(self, duel_id: str, user_id: str = None) -> dict:
        duel = self._load(duel_id)
        theme = self.get_theme(duel.theme_id)
        role = resolve_role(duel, user_id) if user_id else None
        return build_view(duel, theme, self.clock(), role)

    def run(self, duel_id: str, user_id: str, action: str, **params) -> dict:
        """Apply action for user_id and return the committed read model."""
        for attempt in range(1, MAX_TRANSACTION_RETRIES + 1):
            duel = self._load(duel_id)
            theme = self.get_theme(duel.theme_id)
            role = resolve_role(duel, user_id)
            now = self.clock()
            updated = apply_action(duel, theme, role, action, now, **params)
            try:
                self.storage.save_duel(updated, duel.version)
            except VersionConflict:
                logger.warning(f"Version conflict on duel {duel_id} ({action}), attempt {attempt}")
                continue
            logger.info(f"Duel {duel_id}: {role} {action} -> {updated.status}/{updated.phase} v{updated.version}")
            self._log_event(f'duel.{action}', duel_id, user_id, role=role, version=updated.version)
            return build_view(updated, theme, now, role)
        raise VersionConflict(f"Duel {duel_id} is too busy, try again")

    def sweep(self) -> list[str]:
        cancelled = sweep_expired_duels(self.storage, self.clock())
        for duel_id in cancelled:
            self._log_event('duel.expire', duel_id)
        return cancelled
