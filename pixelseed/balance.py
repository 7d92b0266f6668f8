"""
pixelseed/balance.py
Top/bottom balanced selection of candidates.

Candidates are split at height // 2. Each half contributes its share of the
desired count (top share = round(desired * top_bottom_ratio)), best
importance first. Shortfalls are backfilled from whatever was left in either
half, again best first.
"""
from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .fill import round_half_up
from .models import Candidate

# Above this fraction of the pool a full sort beats argpartition + sort
FULL_SORT_FRACTION = 0.75


def top_k(importance: np.ndarray, k: int) -> np.ndarray:
    """
    Indices of the k largest values, highest first.

    Ties keep input order. Uses a partial selection unless k is close to the
    pool size.
    """
    n = importance.size
    if k <= 0 or n == 0:
        return np.zeros(0, dtype=np.int64)
    if k >= n or k >= FULL_SORT_FRACTION * n:
        return np.argsort(-importance, kind="stable")[:k]
    part = np.argpartition(-importance, k - 1)[:k]
    # Restore a deterministic order: importance desc, then index asc
    order = np.lexsort((part, -importance[part]))
    return part[order]


def select_balanced(
    candidates: Sequence[Candidate],
    desired_count: int,
    height: int,
    top_bottom_ratio: float,
) -> List[Candidate]:
    """
    Pick up to desired_count candidates honoring the top/bottom ratio.

    Args:
        candidates: Scored pool (unique coordinates)
        desired_count: How many to return at most
        height: Image height, split at height // 2
        top_bottom_ratio: Share of the result taken from the top half

    Returns:
        Selected candidates: top picks, bottom picks, then backfill
    """
    if desired_count <= 0 or not candidates:
        return []

    mid = height // 2
    ys = np.fromiter((c.y for c in candidates), dtype=np.int64, count=len(candidates))
    importance = np.fromiter((c.importance for c in candidates), dtype=np.float64,
                             count=len(candidates))
    top_idx = np.flatnonzero(ys < mid)
    bottom_idx = np.flatnonzero(ys >= mid)

    target_top = round_half_up(desired_count * top_bottom_ratio)
    target_bottom = desired_count - target_top

    chosen_top = top_idx[top_k(importance[top_idx], target_top)]
    chosen_bottom = bottom_idx[top_k(importance[bottom_idx], target_bottom)]
    chosen = np.concatenate([chosen_top, chosen_bottom])

    if chosen.size < desired_count:
        taken = np.zeros(len(candidates), dtype=bool)
        taken[chosen] = True
        rest = np.flatnonzero(~taken)
        backfill = rest[top_k(importance[rest], desired_count - chosen.size)]
        chosen = np.concatenate([chosen, backfill])

    return [candidates[int(i)] for i in chosen[:desired_count]]
