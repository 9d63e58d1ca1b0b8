"""Utility functions for the duel engine."""

import re
import time


def normalize_answer(text: str | None) -> str:
    """Normalize a typed answer for comparison: trim, collapse spaces, case-fold."""
    if not text:
        return ''
    return re.sub(r'\s+', ' ', text.strip()).casefold()


def other_role(role: str) -> str:
    return 'opponent' if role == 'challenger' else 'challenger'


def now_ms() -> int:
    """Server wall clock in milliseconds."""
    return int(time.time() * 1000)
