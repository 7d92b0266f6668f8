"""
pixelseed/strategies/vibrant.py
Vibrant pixel search shared by the adaptive and advanced strategies
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from ..config import THRESHOLDS
from ..fill import OccupancyMask
from ..source import PixelGrid


def vibrancy(grid: PixelGrid) -> np.ndarray:
    """brightness * (max - min) / max per pixel."""
    return grid.brightness * grid.saturation


def find_vibrant_pixels(grid: PixelGrid, count: int, used: Optional[OccupancyMask] = None) -> np.ndarray:
    """
    Flat indices of the `count` most vibrant visible pixels.

    Looks at every (total // (count * 10))-th pixel so the search cost stays
    proportional to the request. Ties keep row-major order.
    """
    if count <= 0:
        return np.zeros(0, dtype=np.int64)
    step = max(1, grid.total // (count * 10))
    idx = np.arange(0, grid.total, step)
    keep = grid.alpha[idx] > THRESHOLDS.alpha_threshold
    if used is not None:
        keep &= ~used.bits[idx]
    idx = idx[keep]
    order = np.argsort(-vibrancy(grid)[idx], kind="stable")
    return idx[order[:count]]
