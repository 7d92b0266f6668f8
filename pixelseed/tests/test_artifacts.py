# tests/test_artifacts.py
"""
Tests for pixelseed/artifacts.py (validation and correction passes).
"""
import numpy as np
import pytest

from pixelseed.artifacts import (
    analyze,
    apply_corner_correction,
    apply_coverage_correction,
    cell_box,
    cell_of,
    clustered_fraction,
    corner_boxes,
    coverage_ratio,
    fill_to_required_count,
    has_clustering,
    prevent_artifacts,
    validate_corner_coverage,
    validate_coverage,
)
from pixelseed.fill import OccupancyMask
from pixelseed.models import Sample, SamplingParams
from pixelseed.seeds import SamplingContext
from pixelseed.source import PixelGrid, from_array

COLOR = (0.5, 0.5, 0.5, 1.0)


def _grid(h=64, w=64, alpha=1.0):
    img = np.full((h, w, 4), 0.4, dtype=np.float32)
    img[..., 3] = alpha
    return PixelGrid(from_array(img, premultiplied=True), w, h)


def _samples(coords):
    return [Sample(x, y, COLOR) for x, y in coords]


def _quadrant_block():
    """100 samples packed into the top-left 20x20 pixels."""
    return _samples((x, y) for y in range(0, 20, 2) for x in range(0, 20, 2))


def _unique(samples):
    return len({s.coord for s in samples}) == len(samples)


# -----------------------------------------------------------------------------
# Geometry
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("size", [4, 10, 37, 64])
def test_cell_box_matches_cell_of(size):
    for cy in range(4):
        for cx in range(4):
            x0, y0, x1, y1 = cell_box(cx, cy, size, size, 4)
            for x in range(x0, x1):
                assert cell_of(x, y0, size, size, 4) == (cx, cy)


def test_corner_boxes():
    assert corner_boxes(100, 50) == [
        (0, 0, 10, 5), (90, 0, 100, 5), (0, 45, 10, 50), (90, 45, 100, 50),
    ]
    # tiny images still get one-pixel boxes
    assert corner_boxes(3, 3)[3] == (2, 2, 3, 3)


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

def test_coverage_ratio():
    centers = _samples((8 + 16 * cx, 8 + 16 * cy) for cy in range(4) for cx in range(4))
    assert coverage_ratio(centers, 64, 64) == 1.0
    assert validate_coverage(centers, 64, 64)
    assert coverage_ratio(centers[:1], 64, 64) == pytest.approx(1 / 16)
    assert not validate_coverage(_quadrant_block(), 64, 64)


def test_corner_validation():
    corners = _samples([(0, 0), (63, 0), (0, 63), (63, 63)])
    assert validate_corner_coverage(corners, 64, 64)
    assert not validate_corner_coverage(corners[:3], 64, 64)


def test_clustering_detection():
    block = _samples((x, y) for y in range(5) for x in range(5))
    assert clustered_fraction(block) > 0.5
    assert has_clustering(block)

    spread = _samples((x * 10, y * 10) for y in range(5) for x in range(5))
    assert clustered_fraction(spread) == 0.0
    assert not has_clustering(spread)


def test_clustering_counts_neighbors_within_one_hash_cell():
    # 3 px spacing: even a corner sample has 3 neighbors closer than 6 px
    lattice = _samples((x, y) for y in range(0, 30, 3) for x in range(0, 30, 3))
    assert clustered_fraction(lattice) == 1.0
    assert has_clustering(lattice)

    # exactly one cell (6 px) apart is not close
    edge = _samples((x, y) for y in range(0, 60, 6) for x in range(0, 60, 6))
    assert clustered_fraction(edge) == 0.0


def test_clustering_needs_enough_samples():
    tiny = _samples((x, 0) for x in range(4))
    assert not has_clustering(tiny)


def test_analyze_report():
    report = analyze(_quadrant_block(), 64, 64)
    assert report.count == 100
    assert report.top_count == 100
    assert not report.coverage_ok
    assert report.corners["top_left"]
    assert not report.corners_ok
    d = report.to_dict()
    assert d["coverage_ok"] is False
    assert set(d["corners"]) == {"top_left", "top_right", "bottom_left", "bottom_right"}


# -----------------------------------------------------------------------------
# Corrections
# -----------------------------------------------------------------------------

def test_coverage_correction_at_target_evicts():
    grid = _grid()
    samples = _quadrant_block()
    used = OccupancyMask.from_samples(samples, 64, 64)
    filled = apply_coverage_correction(samples, used, grid, 100)
    assert filled == 12
    assert len(samples) == 100
    assert coverage_ratio(samples, 64, 64) == 1.0
    assert _unique(samples)
    assert len(used) == 100


def test_coverage_correction_fills_below_target():
    grid = _grid()
    samples = _samples([(0, 0)])
    used = OccupancyMask.from_samples(samples, 64, 64)
    apply_coverage_correction(samples, used, grid, 40)
    assert len(samples) == 40
    assert coverage_ratio(samples, 64, 64) == 1.0


def test_corner_correction_inserts_midpoints():
    grid = _grid()
    samples = _samples([(30, 30), (31, 30), (32, 30)])
    used = OccupancyMask.from_samples(samples, 64, 64)
    added = apply_corner_correction(samples, used, grid, 10)
    assert added == 4
    assert (2, 2) in {s.coord for s in samples}
    assert validate_corner_coverage(samples, 64, 64)


def test_transparent_grid_corrections_do_nothing():
    grid = _grid(alpha=0.0)
    samples = _samples([(10, 10)])
    used = OccupancyMask.from_samples(samples, 64, 64)
    assert apply_coverage_correction(samples, used, grid, 20) == 0
    assert apply_corner_correction(samples, used, grid, 20) == 0
    assert len(samples) == 1


def test_fill_to_required_count_truncates():
    grid = _grid()
    samples = _quadrant_block()
    used = OccupancyMask.from_samples(samples, 64, 64)
    fill_to_required_count(samples, used, grid, 30, SamplingContext())
    assert len(samples) == 30
    assert len(used) == 30


def test_fill_to_required_count_tops_up():
    grid = _grid()
    samples = _samples([(0, 0)])
    used = OccupancyMask.from_samples(samples, 64, 64)
    fill_to_required_count(samples, used, grid, 50, SamplingContext())
    assert len(samples) == 50
    assert _unique(samples)


# -----------------------------------------------------------------------------
# Full pass
# -----------------------------------------------------------------------------

def test_prevent_artifacts_repairs_quadrant_cluster():
    out = prevent_artifacts(_quadrant_block(), _grid(), 100, SamplingParams())
    assert len(out) == 100
    assert _unique(out)
    assert coverage_ratio(out, 64, 64) >= 0.85
    assert validate_corner_coverage(out, 64, 64)
    assert all(0 <= s.x < 64 and 0 <= s.y < 64 for s in out)


def test_prevent_artifacts_is_deterministic():
    a = prevent_artifacts(_quadrant_block(), _grid(), 80, SamplingParams())
    b = prevent_artifacts(_quadrant_block(), _grid(), 80, SamplingParams())
    assert [s.coord for s in a] == [s.coord for s in b]
