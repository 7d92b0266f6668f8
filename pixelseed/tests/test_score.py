# tests/test_score.py
"""
Tests for pixelseed/score.py.

Synthetic colors only.
"""
import numpy as np
import pytest

from pixelseed.models import SamplingParams
from pixelseed.score import (
    background_penalty,
    dominant_rgb,
    sanitize,
    saturation_deviation,
    saturation_hsv,
    score_batch,
    score_pixel,
    unpremultiply,
)

GRAY = (0.5, 0.5, 0.5, 1.0)
WHITE = (1.0, 1.0, 1.0, 1.0)
RED = (1.0, 0.0, 0.0, 1.0)


# -----------------------------------------------------------------------------
# Color helpers
# -----------------------------------------------------------------------------

def test_unpremultiply_guards_zero_alpha():
    rgba = np.array([[0.25, 0.25, 0.25, 0.5], [0.3, 0.3, 0.3, 0.0]], dtype=np.float32)
    rgb = unpremultiply(rgba)
    assert rgb[0] == pytest.approx([0.5, 0.5, 0.5])
    assert rgb[1] == pytest.approx([0.0, 0.0, 0.0])


def test_sanitize_removes_nan_and_negative_zero():
    arr = sanitize(np.array([np.nan, -0.0, 2.0, -1.0], dtype=np.float32))
    assert arr.tolist() == [0.0, 0.0, 1.0, 0.0]
    assert not np.signbit(arr).any()


def test_saturation_variants():
    rgb = np.array([[1.0, 0.0, 0.0], [0.5, 0.5, 0.5], [0.0, 0.0, 0.0]], dtype=np.float32)
    hsv = saturation_hsv(rgb)
    dev = saturation_deviation(rgb)
    assert hsv.tolist() == pytest.approx([1.0, 0.0, 0.0])
    assert dev[0] == pytest.approx(np.sqrt(6.0) / 3.0, abs=1e-6)
    assert dev[1] == pytest.approx(0.0)


def test_background_penalty_only_for_bright_grey():
    bright = np.array([1.0, 0.9, 0.5, 1.0])
    sat = np.array([0.0, 0.0, 0.0, 0.5])
    pen = background_penalty(bright, sat)
    assert pen[0] == pytest.approx(1.0)
    assert pen[1] == pytest.approx(0.5)
    assert pen[2] == 0.0
    assert pen[3] == 0.0


def test_dominant_rgb_drops_alpha():
    assert dominant_rgb(None).shape == (0, 3)
    assert dominant_rgb([RED, GRAY]).shape == (2, 3)


# -----------------------------------------------------------------------------
# Importance
# -----------------------------------------------------------------------------

def test_transparent_pixel_scores_zero():
    params = SamplingParams()
    assert score_pixel((0.0, 0.0, 0.0, 0.0), [RED] * 8, params) == 0.0
    assert score_pixel((0.05, 0.0, 0.0, 0.05), [GRAY] * 8, params) == 0.0


def test_flat_white_background_is_suppressed():
    assert score_pixel(WHITE, [WHITE] * 8, SamplingParams()) == 0.0


def test_flat_gray_scores_uniqueness_only():
    # contrast 0, saturation 0, uniqueness 1 -> 0.3 * 3
    assert score_pixel(GRAY, [GRAY] * 8, SamplingParams()) == pytest.approx(0.9, abs=1e-6)


def test_dominant_color_match_removes_uniqueness():
    assert score_pixel(GRAY, [GRAY] * 8, SamplingParams(), [GRAY]) == pytest.approx(0.0)


def test_saturated_edge_clamps_to_one():
    assert score_pixel(RED, [GRAY] * 8, SamplingParams()) == pytest.approx(1.0)


def test_premultiplied_color_scores_like_straight():
    half = (0.25, 0.25, 0.25, 0.5)
    params = SamplingParams()
    assert score_pixel(half, [GRAY] * 8, params) == pytest.approx(
        score_pixel(GRAY, [GRAY] * 8, params), abs=1e-6)


def test_score_without_neighbors():
    value = score_pixel(RED, [], SamplingParams())
    assert 0.0 <= value <= 1.0


def test_nan_input_stays_finite():
    value = score_pixel((np.nan, 0.5, 0.5, 1.0), [GRAY] * 8, SamplingParams())
    assert np.isfinite(value)
    assert 0.0 <= value <= 1.0


def test_batch_matches_scalar():
    rng = np.random.default_rng(3)
    params = SamplingParams(contrast_weight=0.3, saturation_weight=0.2)
    pixels = rng.random((20, 4)).astype(np.float32)
    pixels[:, :3] *= pixels[:, 3:4]
    neighbors = rng.random((20, 8, 4)).astype(np.float32)
    neighbors[..., :3] *= neighbors[..., 3:4]
    valid = np.ones((20, 8), dtype=bool)
    batch = score_batch(pixels, neighbors, valid, params, dominant_rgb([GRAY]))
    for i in range(20):
        assert batch[i] == pytest.approx(
            score_pixel(pixels[i], neighbors[i], params, [GRAY]), abs=1e-5)
