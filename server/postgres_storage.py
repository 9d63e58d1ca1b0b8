"""PostgreSQL storage implementation."""

import json
import logging
import os
import psycopg2
from psycopg2.extras import RealDictCursor

from duel.errors import VersionConflict
from duel.interfaces import Storage
from duel.models import DuelSession, Theme

logger = logging.getLogger(__name__)


class PostgresStorage(Storage):
    """PostgreSQL-based storage implementation.

    Duel documents live in a JSONB column next to a version column; saves are
    a single UPDATE guarded by the expected version.
    """

    def __init__(self, db_url: str = None):
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/lingoduel'
        )
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.db_url)
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS themes (
                    theme_id VARCHAR(255) PRIMARY KEY,
                    theme JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS duels (
                    duel_id VARCHAR(255) PRIMARY KEY,
                    status VARCHAR(32) NOT NULL,
                    version INTEGER NOT NULL,
                    duel JSONB NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_duels_status ON duels(status)
            """)
            # Events log table
            cur.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    id SERIAL PRIMARY KEY,
                    timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    event VARCHAR(50) NOT NULL,
                    duel_id VARCHAR(255) NOT NULL,
                    user_id VARCHAR(255),
                    data JSONB
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_duel_id ON events(duel_id)
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_timestamp ON events(timestamp)
            """)
        self._conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()

    def load_theme(self, theme_id: str) -> Theme | None:
        with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute("SELECT theme FROM themes WHERE theme_id = %s", (theme_id,))
            row = cur.fetchone()
        self.conn.commit()
        return Theme.from_dict(row['theme']) if row else None

    def save_theme(self, theme: Theme) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO themes (theme_id, theme, updated_at)
                    VALUES (%s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (theme_id)
                    DO UPDATE SET theme = EXCLUDED.theme, updated_at = CURRENT_TIMESTAMP
                """, (theme.theme_id, json.dumps(theme.to_dict())))
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error saving theme: {e}")
            self.conn.rollback()
            raise

    def load_duel(self, duel_id: str) -> DuelSession | None:
        with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute("SELECT duel FROM duels WHERE duel_id = %s", (duel_id,))
            row = cur.fetchone()
        self.conn.commit()
        return DuelSession.from_dict(row['duel']) if row else None

    def create_duel(self, duel: DuelSession) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO duels (duel_id, status, version, duel)
                    VALUES (%s, %s, %s, %s)
                    ON CONFLICT (duel_id) DO NOTHING
                """, (duel.duel_id, duel.status, duel.version, json.dumps(duel.to_dict())))
                inserted = cur.rowcount > 0
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error creating duel: {e}")
            self.conn.rollback()
            raise
        if not inserted:
            raise VersionConflict(f"Duel {duel.duel_id} already exists")

    def save_duel(self, duel: DuelSession, expected_version: int) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    UPDATE duels
                    SET duel = %s, status = %s, version = %s, updated_at = CURRENT_TIMESTAMP
                    WHERE duel_id = %s AND version = %s
                """, (json.dumps(duel.to_dict()), duel.status, duel.version,
                      duel.duel_id, expected_version))
                updated = cur.rowcount > 0
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error saving duel: {e}")
            self.conn.rollback()
            raise
        if not updated:
            raise VersionConflict(f"Duel {duel.duel_id} was modified concurrently")

    def list_duels(self, status: str = None) -> list[DuelSession]:
        with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
            if status:
                cur.execute("SELECT duel FROM duels WHERE status = %s ORDER BY created_at", (status,))
            else:
                cur.execute("SELECT duel FROM duels ORDER BY created_at")
            rows = cur.fetchall()
        self.conn.commit()
        return [DuelSession.from_dict(row['duel']) for row in rows]

    def log_event(self, event: str, duel_id: str, user_id: str = None, **data) -> None:
        """Log an event to the database."""
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO events (event, duel_id, user_id, data)
                    VALUES (%s, %s, %s, %s)
                """, (event, duel_id, user_id, json.dumps(data) if data else None))
            self.conn.commit()
        except Exception as e:
            logger.error(f"Error logging event: {e}")
            self.conn.rollback()

    def get_duel_events(self, duel_id: str, limit: int = 100) -> list[dict]:
        """Get recent events for a duel."""
        with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute("""
                SELECT * FROM events
                WHERE duel_id = %s
                ORDER BY timestamp DESC LIMIT %s
            """, (duel_id, limit))
            rows = [dict(row) for row in cur.fetchall()]
        self.conn.commit()
        return rows
