"""
pixelseed/strategies/advanced/low_discrepancy.py
Van der Corput (base 2 / base 3) sampling

Points come from an unscrambled Halton sequence, which pairs the base-2 and
base-3 radical inverses. A landed pixel that is dim or grey is swapped for
the most vibrant free pixel of its 3x3 neighborhood when one scores above
the floor.
"""

from typing import List, Optional

import numpy as np

from ...config import ADVANCED_CONFIG
from ...fill import OccupancyMask, fill_row_major
from ...models import Color, Sample, SamplingParams
from ...seeds import SamplingContext
from ...source import PixelGrid
from ..base import SamplingStrategy, StrategyDefinition
from ..vibrant import vibrancy


def brighter_neighbor(grid: PixelGrid, x: int, y: int, vivid: np.ndarray,
                      used: OccupancyMask) -> Optional[int]:
    """Flat index of the best free pixel in the 3x3 window, or None."""
    best, best_score = None, ADVANCED_CONFIG.neighbor_score_floor
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            nx, ny = x + dx, y + dy
            if not (0 <= nx < grid.width and 0 <= ny < grid.height):
                continue
            i = ny * grid.width + nx
            if used.bits[i]:
                continue
            if vivid[i] > best_score:
                best, best_score = i, float(vivid[i])
    return best


class LowDiscrepancyStrategy(SamplingStrategy):

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="low_discrepancy",
            family="advanced",
            display_name="Low Discrepancy",
            description="Base-2/base-3 radical inverse points nudged toward vivid neighbors",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        from scipy.stats import qmc

        cfg = ADVANCED_CONFIG
        engine = qmc.Halton(d=2, scramble=False)
        vivid = vibrancy(grid)
        samples: List[Sample] = []
        used = OccupancyMask(grid.width, grid.height)

        max_points = target_count * (1 + cfg.extra_draw_multiplier)
        drawn = substituted = 0
        while len(samples) < target_count and drawn < max_points:
            n = min(target_count - len(samples), max_points - drawn)
            points = engine.random(n)
            drawn += n
            xs = np.minimum((points[:, 0] * grid.width).astype(np.int64), grid.width - 1)
            ys = np.minimum((points[:, 1] * grid.height).astype(np.int64), grid.height - 1)
            for x, y in zip(xs, ys):
                x, y = int(x), int(y)
                i = y * grid.width + x
                if grid.brightness[i] < cfg.dim_brightness or grid.saturation[i] < cfg.dim_saturation:
                    better = brighter_neighbor(grid, x, y, vivid, used)
                    if better is not None:
                        i = better
                        x, y = grid.coords(i)
                        substituted += 1
                if used.add(x, y):
                    samples.append(Sample(x, y, grid.color_at(i)))

        padded = fill_row_major(samples, used, grid, target_count)
        ctx.log.debug("Low discrepancy: %d points drawn, %d substituted, %d padded",
                      drawn, substituted, padded)
        return samples
