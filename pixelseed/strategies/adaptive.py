"""
pixelseed/strategies/adaptive.py
Multi-phase adaptive blend

Target split:
- 40% most vibrant pixels (brightness * saturation)
- 30% uniform stride
- remainder: closest matches to up to 3 dominant colors
- shortfall: seeded random fill capped at 2 attempts per pixel
"""

from typing import List

import numpy as np

from ..config import ADAPTIVE_CONFIG
from ..fill import OccupancyMask, fill_random
from ..models import Color, Sample, SamplingParams
from ..score import dominant_rgb
from ..seeds import SamplingContext
from ..source import PixelGrid
from .base import SamplingStrategy, StrategyDefinition
from .uniform import stride_indices
from .vibrant import find_vibrant_pixels


def color_similarity(rgb: np.ndarray, reference: np.ndarray) -> np.ndarray:
    """1 / (1 + 2 * distance); 1.0 for an exact match."""
    dist = np.sqrt(np.sum((rgb - reference[None, :]) ** 2, axis=-1))
    return 1.0 / (1.0 + 2.0 * dist)


def add_indices(samples: List[Sample], used: OccupancyMask, grid: PixelGrid,
                indices, limit: int) -> int:
    added = 0
    for i in indices:
        if added >= limit:
            break
        x, y = grid.coords(int(i))
        if used.add(x, y):
            samples.append(Sample(x, y, grid.color_at(int(i))))
            added += 1
    return added


def dominant_matches(grid: PixelGrid, color: np.ndarray, count: int,
                     used: OccupancyMask) -> np.ndarray:
    """Unused pixels closest to `color` above the similarity threshold, best first."""
    cfg = ADAPTIVE_CONFIG
    step = max(1, grid.total // cfg.dominant_scan_points)
    idx = np.arange(0, grid.total, step)
    idx = idx[~used.bits[idx]]
    sim = color_similarity(grid.straight[idx], color)
    keep = sim > cfg.similarity_threshold
    idx, sim = idx[keep], sim[keep]
    return idx[np.argsort(-sim, kind="stable")][:count]


class AdaptiveStrategy(SamplingStrategy):

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="adaptive",
            family="uniform",
            display_name="Adaptive",
            seeded=True,
            description="Vibrant, uniform and dominant-color phases with random fill",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        cfg = ADAPTIVE_CONFIG
        samples: List[Sample] = []
        used = OccupancyMask(grid.width, grid.height)

        vibrant_n = int(target_count * cfg.vibrant_fraction)
        uniform_n = int(target_count * cfg.uniform_fraction)

        vibrant = add_indices(samples, used, grid,
                              find_vibrant_pixels(grid, vibrant_n), vibrant_n)
        uniform = add_indices(samples, used, grid,
                              stride_indices(grid.total, uniform_n), uniform_n)

        dominant = dominant_rgb(dominant_colors[:cfg.max_dominant_colors])
        matched = 0
        if dominant.shape[0] and len(samples) < target_count:
            per_color = -(-(target_count - len(samples)) // dominant.shape[0])
            for color in dominant:
                room = min(per_color, target_count - len(samples))
                if room <= 0:
                    break
                matched += add_indices(samples, used, grid,
                                       dominant_matches(grid, color, room, used), room)

        random_added = 0
        if len(samples) < target_count:
            random_added = fill_random(
                samples, used, grid, target_count, ctx.rng("adaptive"),
                grid.total * cfg.random_attempts_multiplier,
            )

        ctx.log.debug(
            "Adaptive: %d vibrant, %d uniform, %d dominant, %d random",
            vibrant, uniform, matched, random_added,
        )
        return samples
