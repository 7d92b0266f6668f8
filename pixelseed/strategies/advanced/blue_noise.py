"""
pixelseed/strategies/advanced/blue_noise.py
Greedy blue-noise sampling

Seeds with a handful of vibrant pixels, then each step proposes up to 32
brightness-weighted random candidates and keeps the one maximizing
    min_distance_to_existing * (vibrancy * 2 + 0.5)
Existing samples live in a uniform spatial hash so the distance query
only looks at nearby cells.
"""

import math
from collections import defaultdict
from typing import Dict, List, Tuple

import numpy as np

from ...config import ADVANCED_CONFIG
from ...fill import OccupancyMask, fill_row_major
from ...models import Color, Sample, SamplingParams
from ...seeds import SamplingContext
from ...source import PixelGrid
from ..base import SamplingStrategy, StrategyDefinition
from ..vibrant import find_vibrant_pixels, vibrancy

# Cells searched on each side of the query cell
SEARCH_RADIUS = 2


class SpatialHash:
    """Placed points bucketed by cell."""

    def __init__(self, cell: int):
        self.cell = max(1, cell)
        self.buckets: Dict[Tuple[int, int], List[Tuple[int, int]]] = defaultdict(list)

    def add(self, x: int, y: int) -> None:
        self.buckets[(x // self.cell, y // self.cell)].append((x, y))

    def min_distance(self, x: int, y: int) -> float:
        """Distance to the nearest placed point, capped at 2 * cell."""
        cap = 2.0 * self.cell
        cx, cy = x // self.cell, y // self.cell
        best = cap * cap
        for dy in range(-SEARCH_RADIUS, SEARCH_RADIUS + 1):
            for dx in range(-SEARCH_RADIUS, SEARCH_RADIUS + 1):
                for px, py in self.buckets.get((cx + dx, cy + dy), ()):
                    d2 = (px - x) ** 2 + (py - y) ** 2
                    if d2 < best:
                        best = d2
        return math.sqrt(best)


class BlueNoiseStrategy(SamplingStrategy):

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="blue_noise",
            family="advanced",
            display_name="Blue Noise",
            seeded=True,
            description="Best-of-32 candidates by distance to placed samples and vibrancy",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        cfg = ADVANCED_CONFIG
        rng = ctx.rng("blue_noise")
        samples: List[Sample] = []
        used = OccupancyMask(grid.width, grid.height)
        cell = max(1, int(math.sqrt(grid.total / float(target_count))))
        placed = SpatialHash(cell)

        def place(i: int) -> None:
            x, y = grid.coords(i)
            if used.add(x, y):
                samples.append(Sample(x, y, grid.color_at(i)))
                placed.add(x, y)

        n_seeds = min(target_count // cfg.seed_divisor, cfg.max_seed_points)
        for i in find_vibrant_pixels(grid, n_seeds):
            place(int(i))
        seeded = len(samples)

        accept = 0.6 * grid.brightness + 0.4 * grid.saturation
        vivid = vibrancy(grid)
        k, tries = cfg.candidates_per_step, cfg.rejection_tries
        rows = np.arange(k)
        stall = 0

        while len(samples) < target_count and stall < cfg.blue_noise_stall_limit:
            # Rejection sampling: first accepted draw per candidate row
            draws = rng.integers(0, grid.total, size=(k, tries))
            ok = (rng.random((k, tries)) < accept[draws]) & ~used.bits[draws]
            cand = draws[rows, ok.argmax(axis=1)][ok.any(axis=1)]
            if cand.size == 0:
                raw = draws[:, 0]
                cand = raw[~used.bits[raw]]
            if cand.size == 0:
                stall += 1
                continue

            best, best_score = -1, -1.0
            for i in np.unique(cand):
                x, y = grid.coords(int(i))
                score = placed.min_distance(x, y) * (float(vivid[i]) * 2.0 + 0.5)
                if score > best_score:
                    best, best_score = int(i), score
            place(best)
            stall = 0

        greedy = len(samples) - seeded
        padded = fill_row_major(samples, used, grid, target_count)
        ctx.log.debug("Blue noise: %d seeds, %d greedy, %d padded (cell %d)",
                      seeded, greedy, padded, cell)
        return samples
