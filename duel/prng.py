"""Seeded pseudo-random helpers.

Every function takes a seed and returns the advanced seed alongside its
result, so a duel only ever stores one integer and both clients can replay
the same decisions.
"""

from .config import LCG_MULTIPLIER, LCG_INCREMENT, LCG_MODULUS, SEED_XOR_MASK


def advance_seed(seed: int) -> int:
    """Advance the linear congruential generator one step."""
    return (seed * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MODULUS


def pick(seed: int, n: int) -> tuple[int, int]:
    """Pick a value in [0, n). Returns (value, new_seed)."""
    if n <= 0:
        raise ValueError(f"Cannot pick from an empty range (n={n})")
    new_seed = advance_seed(seed)
    return new_seed % n, new_seed


def chance(seed: int, probability: float) -> tuple[bool, int]:
    """Seeded coin flip that comes up True with the given probability."""
    new_seed = advance_seed(seed)
    return new_seed / LCG_MODULUS < probability, new_seed


def shuffle_seeded(items: list, seed: int) -> tuple[list, int]:
    """Fisher-Yates shuffle. The input list is not modified."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j, seed = pick(seed, i + 1)
        result[i], result[j] = result[j], result[i]
    return result, seed


def hash_seed(text: str) -> int:
    """FNV-1a 32-bit hash, used to derive per-question seeds from content."""
    h = 2166136261
    for char in text:
        h ^= ord(char)
        h = (h * 16777619) & 0xffffffff
    return h & LCG_MODULUS


def initial_seed(now_ms: int) -> int:
    """Seed drawn when a duel is accepted."""
    return (now_ms ^ SEED_XOR_MASK) & LCG_MODULUS
