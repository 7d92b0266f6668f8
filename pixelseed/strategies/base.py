"""
pixelseed/strategies/base.py
Base class for sampling strategies

Each strategy defines:
- A StrategyDefinition (name, family, whether it draws random numbers)
- _sample(): the algorithm proper, run on a per-call PixelGrid

The public sample() wrapper validates the request, handles the
every-pixel case and guarantees a non-empty, duplicate-free result.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..config import DEFAULT_SEED
from ..fill import samples_from_indices
from ..models import (
    Color,
    EmptyResult,
    InvalidDimensions,
    InvalidTargetCount,
    Sample,
    SamplingParams,
)
from ..seeds import SamplingContext
from ..source import PixelGrid, PixelSource


@dataclass(frozen=True)
class StrategyDefinition:
    """Registry metadata for a strategy."""
    name: str                # e.g., "blue_noise"
    family: str              # "uniform", "importance" or "advanced"
    display_name: str        # e.g., "Blue Noise"
    seeded: bool = False     # output depends on the seed argument
    description: str = ""


def validate_request(
    width: int,
    height: int,
    target_count: int,
    params: Optional[SamplingParams],
    source: Optional[PixelSource] = None,
) -> SamplingParams:
    """
    Check a sampling request; return validated params.

    Raises:
        InvalidDimensions: width/height not positive or not the source's size
        InvalidTargetCount: target_count not positive
        InvalidParameters: params out of range
    """
    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"Image size must be positive, got {width}x{height}")
    if source is not None and (source.width != width or source.height != height):
        raise InvalidDimensions(
            f"Requested {width}x{height} but source is {source.width}x{source.height}"
        )
    if target_count <= 0:
        raise InvalidTargetCount(f"target_count must be positive, got {target_count}")
    return (params or SamplingParams()).validate()


def all_pixels(grid: PixelGrid) -> List[Sample]:
    """Every pixel once, row-major."""
    return samples_from_indices(grid, np.arange(grid.total))


class SamplingStrategy(ABC):
    """
    Abstract base class for sampling strategies.

    Strategies hold no per-call state; the injected logger is the only
    thing a constructor takes, so one instance can serve concurrent calls.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logging.getLogger(f"pixelseed.strategies.{self.definition.name}")

    @property
    @abstractmethod
    def definition(self) -> StrategyDefinition:
        """Return the strategy definition."""
        pass

    @abstractmethod
    def _sample(
        self,
        grid: PixelGrid,
        target_count: int,
        params: SamplingParams,
        dominant_colors: List[Color],
        ctx: SamplingContext,
    ) -> List[Sample]:
        """Run the algorithm; target_count is below the pixel total here."""
        pass

    def sample(
        self,
        width: int,
        height: int,
        target_count: int,
        params: Optional[SamplingParams],
        source: PixelSource,
        dominant_colors: Sequence[Color] = (),
        *,
        seed: int = DEFAULT_SEED,
    ) -> List[Sample]:
        """
        Select up to target_count samples from the source.

        Args:
            width, height: Image size (must match the source)
            target_count: Samples wanted
            params: Tuning bundle (defaults when None)
            source: Pixel source
            dominant_colors: Reference colors for uniqueness scoring
            seed: Seed for every random draw in this call

        Returns:
            Samples with unique coordinates inside the image. Exactly every
            pixel in row-major order when target_count >= width * height.

        Raises:
            InvalidDimensions, InvalidTargetCount, InvalidParameters,
            EmptyResult
        """
        params = validate_request(width, height, target_count, params, source)
        grid = PixelGrid(source, width, height)
        ctx = SamplingContext(seed=seed, log=self.log)

        if target_count >= grid.total:
            self.log.debug("Target %d covers all %d pixels", target_count, grid.total)
            return all_pixels(grid)

        samples = self._sample(grid, target_count, params, list(dominant_colors), ctx)
        if not samples:
            raise EmptyResult(
                f"{self.definition.name} produced no samples for {width}x{height}"
            )
        if len(samples) < target_count:
            self.log.warning("%s sampling incomplete: %d of %d samples",
                             self.definition.name, len(samples), target_count)
        return samples[:target_count]
