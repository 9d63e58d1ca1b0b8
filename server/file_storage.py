"""File-based storage implementation."""

import json
import logging
import os
import threading
import time

from duel.errors import VersionConflict
from duel.interfaces import Storage
from duel.models import DuelSession, Theme

logger = logging.getLogger(__name__)


class FileStorage(Storage):
    """One JSON file per theme and per duel, plus an append-only events log.

    A process-wide lock makes the version check and the write atomic; this
    backend is meant for a single server process.
    """

    def __init__(self, state_dir: str = None):
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or os.path.join(project_root, 'data')
        self._lock = threading.Lock()
        os.makedirs(self._themes_dir(), exist_ok=True)
        os.makedirs(self._duels_dir(), exist_ok=True)

    def _themes_dir(self) -> str:
        return os.path.join(self.state_dir, 'themes')

    def _duels_dir(self) -> str:
        return os.path.join(self.state_dir, 'duels')

    def _get_theme_file(self, theme_id: str) -> str:
        return os.path.join(self._themes_dir(), f'{theme_id}.json')

    def _get_duel_file(self, duel_id: str) -> str:
        return os.path.join(self._duels_dir(), f'duel_{duel_id}.json')

    def _get_events_file(self) -> str:
        return os.path.join(self.state_dir, 'events.jsonl')

    def _read(self, path: str) -> dict | None:
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read {path}: {e}")
            return None

    def _write(self, path: str, data: dict) -> None:
        # Atomic replace
        tmp_path = f'{path}.tmp'
        with open(tmp_path, 'w') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, path)

    def load_theme(self, theme_id: str) -> Theme | None:
        data = self._read(self._get_theme_file(theme_id))
        return Theme.from_dict(data) if data else None

    def save_theme(self, theme: Theme) -> None:
        with self._lock:
            self._write(self._get_theme_file(theme.theme_id), theme.to_dict())

    def load_duel(self, duel_id: str) -> DuelSession | None:
        data = self._read(self._get_duel_file(duel_id))
        return DuelSession.from_dict(data) if data else None

    def create_duel(self, duel: DuelSession) -> None:
        path = self._get_duel_file(duel.duel_id)
        with self._lock:
            if os.path.exists(path):
                raise VersionConflict(f"Duel {duel.duel_id} already exists")
            self._write(path, duel.to_dict())

    def save_duel(self, duel: DuelSession, expected_version: int) -> None:
        path = self._get_duel_file(duel.duel_id)
        with self._lock:
            stored = self._read(path)
            if stored is None or stored.get('version') != expected_version:
                raise VersionConflict(f"Duel {duel.duel_id} was modified concurrently")
            self._write(path, duel.to_dict())

    def list_duels(self, status: str = None) -> list[DuelSession]:
        duels = []
        for filename in sorted(os.listdir(self._duels_dir())):
            if not (filename.startswith('duel_') and filename.endswith('.json')):
                continue
            data = self._read(os.path.join(self._duels_dir(), filename))
            if data and (status is None or data.get('status') == status):
                duels.append(DuelSession.from_dict(data))
        return duels

    def log_event(self, event: str, duel_id: str, user_id: str = None, **data) -> None:
        """Append an event line. Failures are logged, never raised."""
        record = {
            'timestamp': int(time.time() * 1000),
            'event': event,
            'duel_id': duel_id,
            'user_id': user_id,
            'data': data or None
        }
        try:
            with self._lock:
                with open(self._get_events_file(), 'a') as f:
                    f.write(json.dumps(record) + '\n')
        except OSError as e:
            logger.error(f"Error logging event: {e}")

    def get_duel_events(self, duel_id: str, limit: int = 100) -> list[dict]:
        path = self._get_events_file()
        if not os.path.exists(path):
            return []
        events = []
        with open(path, 'r') as f:
            for line in f:
                record = json.loads(line)
                if record['duel_id'] == duel_id:
                    events.append(record)
        return events[-limit:][::-1]
