"""
pixelseed/strategies/advanced/phased.py
Phased adaptive and band-stratified strategies
"""

from typing import List

import numpy as np

from ...config import ADAPTIVE_CONFIG, ARTIFACT_CONFIG, THRESHOLDS
from ...fill import (
    OccupancyMask,
    fill_grid_stride,
    fill_random,
    fill_row_major,
    round_half_up,
)
from ...models import Color, Sample, SamplingParams
from ...seeds import SamplingContext
from ...source import PixelGrid
from ...stratified import SAMPLE_DTYPE, array_to_samples, stratified_sample
from ..base import SamplingStrategy, StrategyDefinition
from ..importance import importance_chain


class PhasedAdaptiveStrategy(SamplingStrategy):
    """
    70% through the importance chain, then a coarse grid-stride pass over
    free pixels, then a seeded random fill capped at 5 attempts per
    missing sample.
    """

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="phased_adaptive",
            family="advanced",
            display_name="Phased Adaptive",
            seeded=True,
            description="Importance phase followed by uniform and random fill",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        cfg = ADAPTIVE_CONFIG
        important_n = round_half_up(target_count * cfg.importance_fraction)
        samples: List[Sample] = []
        if important_n > 0:
            samples = importance_chain(grid, important_n, params, dominant_colors, ctx)
        used = OccupancyMask.from_samples(samples, grid.width, grid.height)
        important = len(samples)

        fill_grid_stride(
            samples, used, grid, target_count,
            max(1, grid.width // cfg.phased_uniform_divisor),
            max(1, grid.height // cfg.phased_uniform_divisor),
        )
        uniform = len(samples) - important

        needed = target_count - len(samples)
        if needed > 0:
            fill_random(samples, used, grid, target_count, ctx.rng("phased_fill"),
                        needed * cfg.phased_random_multiplier)

        ctx.log.debug("Phased adaptive: %d importance, %d uniform, %d random",
                      important, uniform, len(samples) - important - uniform)
        return samples


def grid_to_array(grid: PixelGrid, indices: np.ndarray) -> np.ndarray:
    arr = np.empty(indices.size, dtype=SAMPLE_DTYPE)
    arr["x"] = indices % grid.width
    arr["y"] = indices // grid.width
    for k, name in enumerate(("r", "g", "b", "a")):
        arr[name] = grid.flat[indices, k]
    return arr


class StratifiedStrategy(SamplingStrategy):
    """All visible pixels reduced to the target by band-stratified selection."""

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="stratified",
            family="advanced",
            display_name="Stratified",
            description="Horizontal bands weighted by alpha * brightness",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        visible = np.flatnonzero(grid.alpha > THRESHOLDS.alpha_threshold)
        if visible.size == 0:
            ctx.log.debug("Stratified: no visible pixels, using the whole grid")
            visible = np.arange(grid.total)

        picked = stratified_sample(grid_to_array(grid, visible), target_count,
                                   grid.height, ARTIFACT_CONFIG.stratified_bands)
        samples = array_to_samples(picked)
        used = OccupancyMask.from_samples(samples, grid.width, grid.height)
        padded = fill_row_major(samples, used, grid, target_count)
        ctx.log.debug("Stratified: %d of %d visible pixels, %d padded",
                      len(picked), visible.size, padded)
        return samples
