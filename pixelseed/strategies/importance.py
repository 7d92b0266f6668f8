"""
pixelseed/strategies/importance.py
Importance-ranked and tiered (hybrid) strategies

Importance chain:
1. Collect scored candidates (stride scan + grid fallback)
2. Balanced top/bottom selection
3. Artifact prevention (coverage, clustering, corners, count)
"""

from typing import List, Optional

from ..artifacts import prevent_artifacts
from ..balance import select_balanced
from ..collect import CandidatePool, ScanStride, collect_candidates, scan_candidates
from ..config import ADAPTIVE_CONFIG, SCAN_CONFIG
from ..fill import OccupancyMask, fill_uniform_balanced, round_half_up
from ..models import Color, Sample, SamplingParams
from ..seeds import SamplingContext
from ..source import PixelGrid, PixelSource
from .base import SamplingStrategy, StrategyDefinition, validate_request

HIGH_TIER_FACTOR = 1.5
MIDDLE_TIER_FACTOR = 0.5


def importance_chain(
    grid: PixelGrid,
    target_count: int,
    params: SamplingParams,
    dominant_colors: List[Color],
    ctx: SamplingContext,
) -> List[Sample]:
    """Collector -> balanced selector -> artifact prevention."""
    pool = collect_candidates(grid, target_count, params, dominant_colors, ctx)
    selected = select_balanced(pool.candidates, target_count, grid.height,
                               params.top_bottom_ratio)
    ctx.log.debug("Selected %d of %d candidates (top/bottom ratio %.2f)",
                  len(selected), len(pool.candidates), params.top_bottom_ratio)
    samples = [c.to_sample() for c in selected]
    return prevent_artifacts(samples, grid, target_count, params, ctx)


class ImportanceStrategy(SamplingStrategy):
    """Default high-quality strategy."""

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="importance",
            family="importance",
            display_name="Importance",
            description="Scored candidates, balanced halves, artifact correction",
        )

    def candidate_pool(
        self,
        width: int,
        height: int,
        target_count: int,
        params: Optional[SamplingParams],
        source: PixelSource,
        dominant_colors=(),
    ) -> CandidatePool:
        """Run only the collector stage; useful for tuning thresholds."""
        params = validate_request(width, height, target_count, params, source)
        ctx = SamplingContext(log=self.log)
        return collect_candidates(PixelGrid(source, width, height), target_count,
                                  params, list(dominant_colors), ctx)

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        return importance_chain(grid, target_count, params, dominant_colors, ctx)


class HybridStrategy(SamplingStrategy):
    """
    Tiered importance.

    High tier: important_sampling_ratio of the target through the importance
    chain at 1.5x the threshold. Middle tier: up to as many again from a
    scan at 0.5x the threshold. Remainder: balanced uniform fill.
    """

    @property
    def definition(self) -> StrategyDefinition:
        return StrategyDefinition(
            name="hybrid",
            family="importance",
            display_name="Hybrid",
            description="High and middle importance tiers plus balanced uniform fill",
        )

    def _sample(self, grid: PixelGrid, target_count: int, params: SamplingParams,
                dominant_colors: List[Color], ctx: SamplingContext) -> List[Sample]:
        samples: List[Sample] = []
        used = OccupancyMask(grid.width, grid.height)

        high_count = round_half_up(target_count * params.important_sampling_ratio)
        if high_count > 0:
            high_params = params.replace(
                importance_threshold=params.importance_threshold * HIGH_TIER_FACTOR)
            for s in importance_chain(grid, high_count, high_params, dominant_colors, ctx):
                if used.add(s.x, s.y):
                    samples.append(s)
        high = len(samples)

        middle_count = min(high_count, target_count - len(samples))
        if middle_count > 0:
            stride = ScanStride(
                x=max(1, grid.width // SCAN_CONFIG.tier_scan_dimension),
                y=max(1, grid.height // SCAN_CONFIG.tier_scan_dimension),
            )
            middle = scan_candidates(
                grid, stride, params, dominant_colors,
                floor=params.importance_threshold * MIDDLE_TIER_FACTOR,
            )
            middle = [c for c in middle if (c.x, c.y) not in used]
            middle.sort(key=lambda c: c.importance, reverse=True)
            for c in middle[:middle_count]:
                used.add(c.x, c.y)
                samples.append(c.to_sample())
        middle_added = len(samples) - high

        fill_uniform_balanced(
            samples, used, grid, target_count, params.top_bottom_ratio,
            ctx.rng("hybrid_fill"),
            divisor=ADAPTIVE_CONFIG.phased_uniform_divisor,
            random_multiplier=ADAPTIVE_CONFIG.phased_random_multiplier,
        )
        ctx.log.debug("Hybrid: %d high, %d middle, %d uniform",
                      high, middle_added, len(samples) - high - middle_added)
        return samples
