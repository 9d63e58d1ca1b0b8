"""In-memory storage implementation (tests and single-process demos)."""

import threading

from duel.errors import VersionConflict
from duel.interfaces import Storage
from duel.models import DuelSession, Theme


class MemoryStorage(Storage):
    """Keeps serialized documents in dicts so callers never share objects."""

    def __init__(self):
        self._lock = threading.Lock()
        self._themes: dict[str, dict] = {}
        self._duels: dict[str, dict] = {}
        self.events: list[dict] = []

    def load_theme(self, theme_id: str) -> Theme | None:
        with self._lock:
            data = self._themes.get(theme_id)
        return Theme.from_dict(data) if data else None

    def save_theme(self, theme: Theme) -> None:
        with self._lock:
            self._themes[theme.theme_id] = theme.to_dict()

    def load_duel(self, duel_id: str) -> DuelSession | None:
        with self._lock:
            data = self._duels.get(duel_id)
        return DuelSession.from_dict(data) if data else None

    def create_duel(self, duel: DuelSession) -> None:
        with self._lock:
            if duel.duel_id in self._duels:
                raise VersionConflict(f"Duel {duel.duel_id} already exists")
            self._duels[duel.duel_id] = duel.to_dict()

    def save_duel(self, duel: DuelSession, expected_version: int) -> None:
        with self._lock:
            stored = self._duels.get(duel.duel_id)
            if stored is None or stored['version'] != expected_version:
                raise VersionConflict(f"Duel {duel.duel_id} was modified concurrently")
            self._duels[duel.duel_id] = duel.to_dict()

    def list_duels(self, status: str = None) -> list[DuelSession]:
        with self._lock:
            rows = list(self._duels.values())
        return [DuelSession.from_dict(d) for d in rows
                if status is None or d['status'] == status]

    def log_event(self, event: str, duel_id: str, user_id: str = None, **data) -> None:
        with self._lock:
            self.events.append({'event': event, 'duel_id': duel_id, 'user_id': user_id, 'data': data})
