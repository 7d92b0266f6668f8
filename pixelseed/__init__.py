"""
pixelseed - Pixel sampling for particle effects

Turns a raster image into a small set of (x, y, color) samples that keep its
edges, saturated regions and corners, spread over the whole frame.

Usage:
    python -m pixelseed sample --image input.png --count 2000
    python -m pixelseed list-strategies
"""

__version__ = "0.1.0"

from .models import (
    Sample,
    Candidate,
    SamplingParams,
    SamplingError,
    InvalidDimensions,
    InvalidTargetCount,
    InvalidParameters,
    EmptyResult,
    UnknownStrategy,
)
from .seeds import SamplingContext, stable_u32, input_fingerprint
from .source import PixelSource, ArrayPixelSource, PixelGrid, from_array, load_image
from .score import score_pixel
from .collect import collect_candidates, CandidatePool
from .balance import select_balanced
from .stratified import stratified_sample, stratified_resample
from .artifacts import prevent_artifacts, analyze, ArtifactReport
from .strategies import (
    SamplingStrategy,
    StrategyDefinition,
    get_strategy,
    list_strategies,
    list_strategies_by_family,
    register_strategy,
    sample_pixels,
)
from .config import DEFAULT_SEED, FORMAT_VERSION

__all__ = [
    # Version
    "__version__",
    # Models
    "Sample",
    "Candidate",
    "SamplingParams",
    # Errors
    "SamplingError",
    "InvalidDimensions",
    "InvalidTargetCount",
    "InvalidParameters",
    "EmptyResult",
    "UnknownStrategy",
    # Seeds
    "SamplingContext",
    "stable_u32",
    "input_fingerprint",
    # Sources
    "PixelSource",
    "ArrayPixelSource",
    "PixelGrid",
    "from_array",
    "load_image",
    # Pipeline pieces
    "score_pixel",
    "collect_candidates",
    "CandidatePool",
    "select_balanced",
    "stratified_sample",
    "stratified_resample",
    "prevent_artifacts",
    "analyze",
    "ArtifactReport",
    # Strategies
    "SamplingStrategy",
    "StrategyDefinition",
    "get_strategy",
    "list_strategies",
    "list_strategies_by_family",
    "register_strategy",
    "sample_pixels",
    # Config
    "DEFAULT_SEED",
    "FORMAT_VERSION",
]
