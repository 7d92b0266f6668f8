"""
pixelseed/strategies/uniform.py
Uniform stride and 2-D grid strategies
"""

import math
from typing import List

import numpy as np

from ..config import ADVANCED_CONFIG, THRESHOLDS
from ..fill import OccupancyMask, fill_row_major, round_half_up, samples_from_indices
from ..models import Color, Sample, SamplingParams
from ..seeds import SamplingContext
from ..source import PixelGrid
from .base import SamplingStrategy, StrategyDefinition


def stride_indices(total: int, count: int) -> np.ndarray:
    """
    `count` flat indices spread evenly over [0, total) with a float step,
    rounded to the nearest index. The last index is pinned to total - 1.
    """
    if count <= 0:
        return np.zeros(0, dtype=np.int64)
    step = total / count
    idx = np.floor(np.arange(count) * step + 0.5).astype(np.int64)
    idx = np.clip(idx, 0, total - 1)
    if count > 1:
        idx[-1] = total - 1
    # Already non-decreasing; drop rounding collisions
    return np.unique(idx)


def vivid_indices(grid: PixelGrid) -> np.ndarray:
    a = ADVANCED_CONFIG
    mask = (
        (grid.alpha > THRESHOLDS.alpha_threshold)
        & (grid.brightness > a.vivid_brightness)
        & (grid.saturation > a.vivid_saturation)
    )
    return np.flatnonzero(mask)


def interleave(base: List[Sample], extra: List[Sample]) -> List[Sample]:
    """Insert `extra` at evenly spaced positions of `base`."""
    if not extra:
        return list(base)
    out: List[Sample] = []
    gap = len(base) / float(len(extra) + 1)
    positions = [int(round(gap * (i + 1))) for i in range(len(extra))]
    j = 0
    for i, s in enumerate(base):
        while j < len(extra) and positions[j] == i:
            out.append(extra[j])
            j += 1
        out.append(s)
    out.extend(extra[j:])
    return out


class UniformStrategy(SamplingStrategy):
    """Float-step walk over the flattened image plus a vivid-detail pass."""

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="uniform",
            family="uniform",
            display_name="Uniform",
            description="Even stride over row-major pixels with vivid pixels interleaved",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        vivid_quota = int(target_count * ADVANCED_CONFIG.vivid_fraction)
        walk = stride_indices(grid.total, target_count - vivid_quota)

        extra = np.zeros(0, dtype=np.int64)
        if vivid_quota > 0:
            vivid = np.setdiff1d(vivid_indices(grid), walk, assume_unique=True)
            if vivid.size > vivid_quota:
                picks = np.linspace(0, vivid.size - 1, vivid_quota)
                vivid = vivid[np.floor(picks + 0.5).astype(np.int64)]
            extra = np.unique(vivid)

        samples = interleave(samples_from_indices(grid, walk),
                             samples_from_indices(grid, extra))
        used = OccupancyMask.from_samples(samples, grid.width, grid.height)
        padded = fill_row_major(samples, used, grid, target_count)
        ctx.log.debug("Uniform: %d stride, %d vivid, %d padded",
                      walk.size, extra.size, padded)
        return samples


def grid_axis(index: int, size: int, max_coord: int) -> int:
    """Coordinate of lattice line `index` of `size`, edges inclusive."""
    if size <= 1:
        return max_coord // 2
    return round_half_up(index / float(size - 1) * max_coord)


class GridStrategy(SamplingStrategy):
    """Aspect-matched lattice that touches all four image edges."""

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="grid",
            family="uniform",
            display_name="Grid",
            description="2-D lattice with inclusive edges, padded row-major",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        aspect = grid.width / float(grid.height)
        rows = max(1, int(math.sqrt(target_count / aspect)))
        cols = max(1, int(math.ceil(target_count / float(rows))))

        samples: List[Sample] = []
        used = OccupancyMask(grid.width, grid.height)
        for gy in range(rows):
            y = min(grid_axis(gy, rows, grid.height - 1), grid.height - 1)
            for gx in range(cols):
                if len(samples) >= target_count:
                    break
                x = min(grid_axis(gx, cols, grid.width - 1), grid.width - 1)
                if used.add(x, y):
                    samples.append(Sample(x, y, grid.color(x, y)))

        lattice = len(samples)
        fill_row_major(samples, used, grid, target_count)
        ctx.log.debug("Grid: %dx%d lattice, %d points, %d padded",
                      cols, rows, lattice, len(samples) - lattice)
        return samples
