# tests/test_balance.py
"""
Tests for pixelseed/balance.py (top/bottom balanced selection).
"""
import numpy as np

from pixelseed.balance import select_balanced, top_k
from pixelseed.models import Candidate

COLOR = (0.5, 0.5, 0.5, 1.0)


def _pool(top=10, bottom=10, height=20):
    """Candidates in both halves; importance rises with x."""
    out = []
    for x in range(top):
        out.append(Candidate(x, 2, COLOR, x / 10.0))
    for x in range(bottom):
        out.append(Candidate(x, height - 3, COLOR, x / 10.0))
    return out


# -----------------------------------------------------------------------------
# top_k
# -----------------------------------------------------------------------------

def test_top_k_partial_matches_full_sort():
    rng = np.random.default_rng(1)
    values = rng.random(200)
    expected = np.argsort(-values, kind="stable")[:20]
    assert top_k(values, 20).tolist() == expected.tolist()


def test_top_k_ties_keep_input_order():
    values = np.array([0.5, 0.9, 0.5, 0.5, 0.1])
    assert top_k(values, 4).tolist() == [1, 0, 2, 3]
    assert top_k(values, 10).tolist() == [1, 0, 2, 3, 4]


def test_top_k_empty():
    assert top_k(np.zeros(0), 3).size == 0
    assert top_k(np.ones(4), 0).size == 0


# -----------------------------------------------------------------------------
# select_balanced
# -----------------------------------------------------------------------------

def test_ratio_split():
    picked = select_balanced(_pool(), 10, 20, 0.7)
    top = [c for c in picked if c.y < 10]
    bottom = [c for c in picked if c.y >= 10]
    assert len(top) == 7
    assert len(bottom) == 3
    # best of each half
    assert sorted(c.x for c in top) == list(range(3, 10))
    assert sorted(c.x for c in bottom) == [7, 8, 9]


def test_shortfall_backfilled_from_other_half():
    picked = select_balanced(_pool(top=2, bottom=20), 10, 20, 0.5)
    assert len(picked) == 10
    assert sum(1 for c in picked if c.y < 10) == 2


def test_small_pool_returns_everything():
    pool = _pool(top=2, bottom=3)
    assert len(select_balanced(pool, 50, 20, 0.5)) == 5


def test_no_duplicates_and_never_over():
    picked = select_balanced(_pool(), 15, 20, 0.33)
    assert len(picked) == 15
    assert len({(c.x, c.y) for c in picked}) == 15


def test_empty_inputs():
    assert select_balanced([], 10, 20, 0.5) == []
    assert select_balanced(_pool(), 0, 20, 0.5) == []
