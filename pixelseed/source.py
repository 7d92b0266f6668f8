"""
pixelseed/source.py
Pixel sources and the per-call pixel grid cache

A pixel source answers color-at-coordinate queries with premultiplied RGBA
in [0, 1]. ArrayPixelSource is the numpy-backed implementation; any object
satisfying the PixelSource protocol works with the strategies.
"""
from __future__ import annotations

import io
from functools import cached_property
from pathlib import Path
from typing import List, Protocol, Tuple, Union

import numpy as np

from .models import Color
from .score import (
    brightness,
    saturation_deviation,
    saturation_hsv,
    sanitize,
    unpremultiply,
)

# 8 compass offsets, scaled by the neighbor radius
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


class PixelSource(Protocol):
    """Read-only access to a decoded image."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def color(self, x: int, y: int) -> Color: ...

    def neighbors(self, x: int, y: int, radius: int = 1) -> List[Color]: ...


class ArrayPixelSource:
    """
    PixelSource over a float32 [H,W,4] premultiplied RGBA array.

    Use from_array() or load_image() rather than building one by hand unless
    the array is already premultiplied and in [0, 1].
    """

    def __init__(self, rgba: np.ndarray):
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise ValueError(f"Expected RGBA image [H,W,4], got {rgba.shape}")
        self._rgba = sanitize(rgba)
        self._rgba.setflags(write=False)

    @property
    def rgba(self) -> np.ndarray:
        return self._rgba

    @property
    def width(self) -> int:
        return int(self._rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self._rgba.shape[0])

    def color(self, x: int, y: int) -> Color:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        return tuple(float(c) for c in self._rgba[y, x])

    def neighbors(self, x: int, y: int, radius: int = 1) -> List[Color]:
        """In-bounds colors at the 8 compass offsets scaled by radius."""
        r = max(1, int(radius))
        out = []
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx * r, y + dy * r
            if 0 <= nx < self.width and 0 <= ny < self.height:
                out.append(tuple(float(c) for c in self._rgba[ny, nx]))
        return out


def from_array(img: np.ndarray, *, premultiplied: bool = False) -> ArrayPixelSource:
    """
    Build a source from a numpy image.

    img:
      - np.uint8 [H,W,3|4] in 0..255
      - or float [H,W,3|4] in 0..1
    RGB input is treated as fully opaque. Straight alpha is premultiplied
    unless premultiplied=True.
    """
    if img.ndim != 3 or img.shape[2] not in (3, 4):
        raise ValueError(f"Expected RGB or RGBA image [H,W,C], got {img.shape}")
    if img.dtype == np.uint8:
        arr = img.astype(np.float32) / 255.0
    else:
        arr = sanitize(img)
    if arr.shape[2] == 3:
        alpha = np.ones(arr.shape[:2] + (1,), dtype=np.float32)
        arr = np.concatenate([arr, alpha], axis=2)
    elif not premultiplied:
        arr = arr.copy()
        arr[..., :3] *= arr[..., 3:4]
    return ArrayPixelSource(arr)


def load_image(source: Union[str, Path, bytes]) -> ArrayPixelSource:
    """
    Decode an image file (or bytes) with Pillow into a premultiplied source.
    """
    from PIL import Image

    if isinstance(source, bytes):
        img = Image.open(io.BytesIO(source))
    else:
        img = Image.open(source)

    if img.mode != "RGBA":
        img = img.convert("RGBA")

    return from_array(np.array(img))


class PixelGrid:
    """
    Per-call cache of the full pixel grid and derived per-pixel maps.

    Built once at the start of a sampling call and discarded with it. Maps
    are computed lazily, so strategies only pay for what they read.
    """

    def __init__(self, source: PixelSource, width: int, height: int):
        self.source = source
        self.width = int(width)
        self.height = int(height)

    @property
    def total(self) -> int:
        return self.width * self.height

    @cached_property
    def rgba(self) -> np.ndarray:
        arr = getattr(self.source, "rgba", None)
        if isinstance(arr, np.ndarray):
            return sanitize(arr[: self.height, : self.width])
        # Generic source: one color() call per pixel
        out = np.empty((self.height, self.width, 4), dtype=np.float32)
        for y in range(self.height):
            for x in range(self.width):
                out[y, x] = self.source.color(x, y)
        return sanitize(out)

    @cached_property
    def flat(self) -> np.ndarray:
        """[H*W,4] view in row-major order."""
        return self.rgba.reshape(-1, 4)

    @property
    def alpha(self) -> np.ndarray:
        return self.flat[:, 3]

    @cached_property
    def straight(self) -> np.ndarray:
        """[H*W,3] un-premultiplied RGB."""
        return unpremultiply(self.flat)

    @cached_property
    def brightness(self) -> np.ndarray:
        return brightness(self.straight)

    @cached_property
    def saturation(self) -> np.ndarray:
        """(max - min) / max saturation; zero where alpha is zero."""
        return saturation_hsv(self.straight)

    @cached_property
    def saturation_deviation(self) -> np.ndarray:
        return saturation_deviation(self.straight)

    def color(self, x: int, y: int) -> Color:
        return tuple(float(c) for c in self.rgba[y, x])

    def color_at(self, index: int) -> Color:
        return tuple(float(c) for c in self.flat[index])

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def coords(self, index: int) -> Tuple[int, int]:
        return index % self.width, index // self.width
