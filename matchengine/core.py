from __future__ import annotations

import random
from typing import List, Sequence, Tuple, TypeVar

ENGINE_VERSION: str = "possession_1.0"

T = TypeVar("T")

# -------------------------
# Helpers
# -------------------------

def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def chance(rng: random.Random, p: float) -> bool:
    """Bernoulli trial: True with probability p (inclusive comparison against U(0,1))."""
    return rng.random() <= p


def pick_uniform(rng: random.Random, items: Sequence[T]) -> T:
    if not items:
        raise ValueError("pick_uniform: empty candidate list")
    return items[rng.randrange(len(items))]


# Banded draw over 1..15 used for assister / rebounder selection.
# Index 0 is the best-ranked candidate.
RANK_BANDS: Tuple[Tuple[int, int], ...] = (
    (5, 0),   # 1-5
    (9, 1),   # 6-9
    (12, 2),  # 10-12
    (14, 3),  # 13-14
    (15, 4),  # 15
)
RANK_BAND_MAX = 15


def band_to_rank(draw: int) -> int:
    if draw < 1 or draw > RANK_BAND_MAX:
        raise ValueError(f"rank draw out of range: {draw}")
    for upper, rank in RANK_BANDS:
        if draw <= upper:
            return rank
    return RANK_BANDS[-1][1]


def banded_pick(rng: random.Random, ranked: List[T]) -> T:
    """Pick from a best-first list using the 1..15 band table (rank 1 most likely)."""
    if not ranked:
        raise ValueError("banded_pick: empty candidate list")
    rank = band_to_rank(rng.randint(1, RANK_BAND_MAX))
    return ranked[min(rank, len(ranked) - 1)]
