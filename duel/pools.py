"""Word pool management for solo-style duels.

Each player works through an active pool (words eligible for selection) that
grows out of a remaining pool (words not yet introduced) as they progress.
"""

import math

from .config import INITIAL_POOL_RATIO, POOL_EXPANSION_THRESHOLD, POOL_EXPANSION_SIZE
from .prng import pick, shuffle_seeded


def initialize_pools(word_count: int, seed: int) -> tuple[list[int], list[int], int]:
    """Shuffle every word index and split off the initial active pool.

    Returns (active_pool, remaining_pool, new_seed).
    """
    if word_count <= 0:
        return [], [], seed
    initial_size = math.ceil(word_count * INITIAL_POOL_RATIO)
    shuffled, seed = shuffle_seeded(list(range(word_count)), seed)
    return shuffled[:initial_size], shuffled[initial_size:], seed


def pick_next(active_pool: list[int], seed: int, exclude: int | None = None) -> tuple[int, int]:
    """Draw uniformly from the active pool, avoiding exclude when anything else is left.

    Returns (word_index, new_seed).
    """
    candidates = [idx for idx in active_pool if idx != exclude]
    if not candidates:
        candidates = list(active_pool)
    choice, seed = pick(seed, len(candidates))
    return candidates[choice], seed


def should_expand(active_pool: list[int], word_states: list, remaining_pool: list[int]) -> bool:
    """True once enough of the active pool has been answered at level 2 or above."""
    if not remaining_pool:
        return False
    states = {ws.word_index: ws for ws in word_states}
    progressed = sum(1 for idx in active_pool
                     if idx in states and states[idx].answered_level2_plus)
    return progressed >= math.ceil(len(active_pool) * POOL_EXPANSION_THRESHOLD)


def expand_pool(active_pool: list[int], remaining_pool: list[int],
                seed: int) -> tuple[list[int], list[int], int]:
    """Move up to POOL_EXPANSION_SIZE random words from remaining into active.

    Returns (new_active_pool, new_remaining_pool, new_seed).
    """
    to_add = min(POOL_EXPANSION_SIZE, len(remaining_pool))
    if to_add == 0:
        return list(active_pool), list(remaining_pool), seed
    shuffled, seed = shuffle_seeded(remaining_pool, seed)
    return list(active_pool) + shuffled[:to_add], shuffled[to_add:], seed
