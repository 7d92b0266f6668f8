"""
pixelseed/fill.py
Occupancy tracking and the shared fill routines

Every fill appends to an existing sample list in place, skips pixels that
are already occupied, never grows the list past the target, and returns how
many samples it added.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .models import Sample
from .source import PixelGrid


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class OccupancyMask:
    """Fixed-size bit-vector of used pixels keyed by flattened index."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.bits = np.zeros(width * height, dtype=bool)

    @classmethod
    def from_samples(cls, samples: Iterable[Sample], width: int, height: int) -> "OccupancyMask":
        mask = cls(width, height)
        for s in samples:
            mask.add(s.x, s.y)
        return mask

    def __contains__(self, xy) -> bool:
        x, y = xy
        return bool(self.bits[y * self.width + x])

    def __len__(self) -> int:
        return int(self.bits.sum())

    def add(self, x: int, y: int) -> bool:
        """Mark a pixel; True if it was free."""
        i = y * self.width + x
        if self.bits[i]:
            return False
        self.bits[i] = True
        return True

    def discard(self, x: int, y: int) -> None:
        self.bits[y * self.width + x] = False


def samples_from_indices(grid: PixelGrid, indices: Sequence[int]) -> List[Sample]:
    """Row-major flat indices -> Sample list (in the given order)."""
    out = []
    for i in indices:
        x, y = grid.coords(int(i))
        out.append(Sample(x, y, grid.color_at(int(i))))
    return out


def _eligible(grid: PixelGrid, indices: np.ndarray, used: OccupancyMask,
              alpha_gate: Optional[float]) -> np.ndarray:
    keep = ~used.bits[indices]
    if alpha_gate is not None:
        keep &= grid.alpha[indices] > alpha_gate
    return indices[keep]


def _append(samples: List[Sample], used: OccupancyMask, grid: PixelGrid,
            indices: np.ndarray, limit: int) -> int:
    added = 0
    for i in indices:
        if added >= limit:
            break
        x, y = grid.coords(int(i))
        if used.add(x, y):
            samples.append(Sample(x, y, grid.color_at(int(i))))
            added += 1
    return added


def fill_row_major(
    samples: List[Sample],
    used: OccupancyMask,
    grid: PixelGrid,
    target: int,
    *,
    alpha_gate: Optional[float] = None,
) -> int:
    """Scan every pixel in row-major order until the target is reached."""
    needed = target - len(samples)
    if needed <= 0:
        return 0
    indices = _eligible(grid, np.arange(grid.total), used, alpha_gate)
    return _append(samples, used, grid, indices[:needed], needed)


def fill_grid_stride(
    samples: List[Sample],
    used: OccupancyMask,
    grid: PixelGrid,
    target: int,
    step_x: int,
    step_y: int,
    *,
    alpha_gate: Optional[float] = None,
    rows: Optional[range] = None,
) -> int:
    """
    Visit a coarse lattice (optionally limited to a row range) in row-major
    order, adding free pixels until the target is reached.
    """
    needed = target - len(samples)
    if needed <= 0:
        return 0
    rows = rows if rows is not None else range(0, grid.height)
    ys = np.arange(rows.start, rows.stop, max(1, step_y))
    xs = np.arange(0, grid.width, max(1, step_x))
    if ys.size == 0 or xs.size == 0:
        return 0
    indices = (ys[:, None] * grid.width + xs[None, :]).ravel()
    indices = _eligible(grid, indices, used, alpha_gate)
    return _append(samples, used, grid, indices[:needed], needed)


def fill_random(
    samples: List[Sample],
    used: OccupancyMask,
    grid: PixelGrid,
    target: int,
    rng: np.random.Generator,
    max_attempts: int,
    *,
    alpha_gate: Optional[float] = None,
) -> int:
    """
    Bounded random fill. Each attempt draws one pixel uniformly; attempts
    that land on used (or gated) pixels still count against max_attempts.
    """
    added = 0
    attempts = 0
    while len(samples) < target and attempts < max_attempts:
        batch = min(max_attempts - attempts, max(1024, 4 * (target - len(samples))))
        draws = rng.integers(0, grid.total, size=batch)
        attempts += batch
        for i in draws:
            if len(samples) >= target:
                break
            i = int(i)
            if alpha_gate is not None and grid.alpha[i] <= alpha_gate:
                continue
            x, y = grid.coords(i)
            if used.add(x, y):
                samples.append(Sample(x, y, grid.color_at(i)))
                added += 1
    return added


def fill_uniform_balanced(
    samples: List[Sample],
    used: OccupancyMask,
    grid: PixelGrid,
    target: int,
    top_bottom_ratio: float,
    rng: np.random.Generator,
    *,
    divisor: int = 100,
    random_multiplier: int = 5,
    alpha_gate: Optional[float] = None,
) -> int:
    """
    Grid-stride fill that first tops each image half up to its share of the
    target (top share = round(target * top_bottom_ratio)), then fills the
    rest without a half restriction, then falls back to a bounded random
    fill.
    """
    start = len(samples)
    if start >= target:
        return 0
    step_x = max(1, grid.width // divisor)
    step_y = max(1, grid.height // divisor)
    mid = grid.height // 2

    want_top = round_half_up(target * top_bottom_ratio)
    have_top = sum(1 for s in samples if s.y < mid)
    have_bottom = len(samples) - have_top

    top_goal = len(samples) + max(0, want_top - have_top)
    fill_grid_stride(samples, used, grid, min(target, top_goal), step_x, step_y,
                     alpha_gate=alpha_gate, rows=range(0, mid))
    bottom_goal = len(samples) + max(0, (target - want_top) - have_bottom)
    fill_grid_stride(samples, used, grid, min(target, bottom_goal), step_x, step_y,
                     alpha_gate=alpha_gate, rows=range(mid, grid.height))

    fill_grid_stride(samples, used, grid, target, step_x, step_y, alpha_gate=alpha_gate)
    if len(samples) < target:
        needed = target - len(samples)
        fill_random(samples, used, grid, target, rng, needed * random_multiplier,
                    alpha_gate=alpha_gate)
    return len(samples) - start
