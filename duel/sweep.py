"""Expiry of challenges nobody answered."""

import logging

from .config import PENDING_DUEL_TTL_MS
from .errors import VersionConflict

logger = logging.getLogger(__name__)


def is_created_at_expired(created_at: int | None, now: int, ttl_ms: int = PENDING_DUEL_TTL_MS) -> bool:
    if created_at is None:
        return False
    return now - created_at > ttl_ms


def sweep_expired_duels(storage, now: int, ttl_ms: int = PENDING_DUEL_TTL_MS) -> list[str]:
    """Cancel pending duels older than ttl_ms. Returns the cancelled duel ids.

    A duel that fails to update is logged and left for the next sweep.
    """
    cancelled = []
    for duel in storage.list_duels(status='pending'):
        if not is_created_at_expired(duel.created_at, now, ttl_ms):
            continue
        updated = duel.clone()
        updated.status = 'cancelled'
        updated.version += 1
        try:
            storage.save_duel(updated, duel.version)
        except VersionConflict:
            logger.info(f"Duel {duel.duel_id} changed during sweep, skipping")
            continue
        except Exception as e:
            logger.error(f"Failed to expire duel {duel.duel_id}: {e}", exc_info=True)
            continue
        cancelled.append(duel.duel_id)
        logger.info(f"Expired pending duel {duel.duel_id}")
    return cancelled
