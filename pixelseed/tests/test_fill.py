# tests/test_fill.py
"""
Tests for pixelseed/fill.py (occupancy mask and shared fills).
"""
import numpy as np

from pixelseed.fill import (
    OccupancyMask,
    fill_grid_stride,
    fill_random,
    fill_row_major,
    fill_uniform_balanced,
    round_half_up,
)
from pixelseed.models import Sample
from pixelseed.source import PixelGrid, from_array


def _grid(h=10, w=10, alpha=1.0):
    img = np.full((h, w, 4), 0.5, dtype=np.float32)
    img[..., 3] = alpha
    return PixelGrid(from_array(img, premultiplied=True), w, h)


def _unique(samples):
    return len({s.coord for s in samples}) == len(samples)


# -----------------------------------------------------------------------------
# OccupancyMask
# -----------------------------------------------------------------------------

def test_mask_add_and_discard():
    used = OccupancyMask(4, 3)
    assert used.add(1, 2)
    assert not used.add(1, 2)
    assert (1, 2) in used
    assert len(used) == 1
    used.discard(1, 2)
    assert (1, 2) not in used


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.49) == 2


# -----------------------------------------------------------------------------
# Fills
# -----------------------------------------------------------------------------

def test_row_major_skips_used_and_stops_at_target():
    grid = _grid()
    samples = [Sample(0, 0, grid.color(0, 0))]
    used = OccupancyMask.from_samples(samples, 10, 10)
    added = fill_row_major(samples, used, grid, 5)
    assert added == 4
    assert [s.coord for s in samples] == [(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)]


def test_row_major_alpha_gate():
    grid = _grid(alpha=0.0)
    samples = []
    added = fill_row_major(samples, OccupancyMask(10, 10), grid, 5, alpha_gate=0.1)
    assert added == 0
    assert samples == []


def test_grid_stride_limited_rows():
    grid = _grid()
    samples = []
    fill_grid_stride(samples, OccupancyMask(10, 10), grid, 50, 3, 3, rows=range(5, 10))
    assert samples
    assert all(s.y >= 5 for s in samples)
    assert all(s.x % 3 == 0 for s in samples)


def test_random_fill_respects_cap_and_seed():
    a, b = [], []
    fill_random(a, OccupancyMask(10, 10), _grid(), 30, np.random.default_rng(7), 200)
    fill_random(b, OccupancyMask(10, 10), _grid(), 30, np.random.default_rng(7), 200)
    assert [s.coord for s in a] == [s.coord for s in b]
    assert len(a) == 30
    assert _unique(a)

    c = []
    fill_random(c, OccupancyMask(10, 10), _grid(), 30, np.random.default_rng(7), 5)
    assert len(c) <= 5


def test_uniform_balanced_honors_ratio():
    grid = _grid(h=100, w=100)
    samples = []
    fill_uniform_balanced(samples, OccupancyMask(100, 100), grid, 40, 0.75,
                          np.random.default_rng(0))
    assert len(samples) == 40
    assert sum(1 for s in samples if s.y < 50) == 30
    assert _unique(samples)
