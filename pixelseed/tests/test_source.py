# tests/test_source.py
"""
Tests for pixelseed/source.py (pixel sources and the per-call grid).
"""
import io

import numpy as np
import pytest

from pixelseed.source import ArrayPixelSource, PixelGrid, from_array, load_image


def _img_rgb_u8(h=6, w=8):
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[..., 0] = np.arange(w, dtype=np.uint8)[None, :] * 30
    img[..., 1] = 128
    return img


class _CallbackSource:
    """Minimal PixelSource without an rgba array."""

    def __init__(self, w, h):
        self.width = w
        self.height = h

    def color(self, x, y):
        return (x / 10.0, y / 10.0, 0.0, 1.0)

    def neighbors(self, x, y, radius=1):
        return []


# -----------------------------------------------------------------------------
# from_array / load_image
# -----------------------------------------------------------------------------

def test_rgb_u8_is_opaque_and_scaled():
    src = from_array(_img_rgb_u8())
    assert (src.width, src.height) == (8, 6)
    r, g, b, a = src.color(2, 0)
    assert r == pytest.approx(60 / 255.0)
    assert g == pytest.approx(128 / 255.0)
    assert a == 1.0


def test_straight_alpha_is_premultiplied():
    img = np.zeros((2, 2, 4), dtype=np.float32)
    img[..., 0] = 1.0
    img[..., 3] = 0.5
    assert from_array(img).color(0, 0)[:1] == pytest.approx((0.5,))
    assert from_array(img, premultiplied=True).color(0, 0)[:1] == pytest.approx((1.0,))


def test_bad_shape_rejected():
    with pytest.raises(ValueError):
        from_array(np.zeros((4, 4), dtype=np.float32))
    with pytest.raises(ValueError):
        ArrayPixelSource(np.zeros((4, 4, 3), dtype=np.float32))


def test_load_image_from_png_bytes():
    from PIL import Image

    buf = io.BytesIO()
    Image.fromarray(_img_rgb_u8()).save(buf, format="PNG")
    src = load_image(buf.getvalue())
    assert (src.width, src.height) == (8, 6)
    assert src.color(0, 0)[3] == 1.0


def test_source_is_read_only():
    src = from_array(_img_rgb_u8())
    with pytest.raises(ValueError):
        src.rgba[0, 0, 0] = 1.0


# -----------------------------------------------------------------------------
# color / neighbors
# -----------------------------------------------------------------------------

def test_color_out_of_bounds():
    src = from_array(_img_rgb_u8())
    with pytest.raises(IndexError):
        src.color(8, 0)


def test_neighbors_clip_at_edges():
    src = from_array(_img_rgb_u8())
    assert len(src.neighbors(0, 0)) == 3
    assert len(src.neighbors(3, 3)) == 8
    assert len(src.neighbors(3, 3, radius=3)) == 5


# -----------------------------------------------------------------------------
# PixelGrid
# -----------------------------------------------------------------------------

def test_grid_index_round_trip():
    grid = PixelGrid(from_array(_img_rgb_u8()), 8, 6)
    assert grid.total == 48
    assert grid.coords(grid.index(5, 4)) == (5, 4)
    assert grid.color_at(grid.index(5, 4)) == grid.color(5, 4)


def test_grid_from_callback_source():
    grid = PixelGrid(_CallbackSource(4, 3), 4, 3)
    assert grid.rgba.shape == (3, 4, 4)
    assert grid.color(3, 2) == pytest.approx((0.3, 0.2, 0.0, 1.0))


def test_grid_maps_are_per_pixel():
    grid = PixelGrid(from_array(_img_rgb_u8()), 8, 6)
    assert grid.brightness.shape == (48,)
    assert grid.saturation.shape == (48,)
    assert grid.straight.shape == (48, 3)
    assert np.all((grid.saturation >= 0.0) & (grid.saturation <= 1.0))
