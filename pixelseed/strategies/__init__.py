"""
pixelseed/strategies/__init__.py
Strategy registry - maps names to sampling strategies
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..config import DEFAULT_SEED
from ..models import Color, Sample, SamplingParams, UnknownStrategy
from ..source import PixelSource
from .base import SamplingStrategy, StrategyDefinition

# Global registry
_REGISTRY: Dict[str, SamplingStrategy] = {}

DEFAULT_STRATEGY = "importance"


def register_strategy(strategy: SamplingStrategy) -> None:
    """Register a strategy instance under its definition name."""
    name = strategy.definition.name
    if name in _REGISTRY:
        raise ValueError(f"Strategy {name} already registered")
    _REGISTRY[name] = strategy


def get_strategy(name: str, log: Optional[logging.Logger] = None) -> SamplingStrategy:
    """
    Look up a strategy by name.

    With `log`, a fresh instance bound to that logger is returned instead
    of the shared one.
    """
    try:
        strategy = _REGISTRY[name]
    except KeyError:
        raise UnknownStrategy(
            f"Unknown strategy {name!r}; available: {', '.join(list_strategies())}"
        ) from None
    if log is not None:
        return type(strategy)(log=log)
    return strategy


def list_strategies() -> List[str]:
    """List all registered strategy names."""
    return list(_REGISTRY.keys())


def list_strategies_by_family(family: str) -> List[str]:
    """List strategy names for a specific family."""
    return [
        name for name, strategy in _REGISTRY.items()
        if strategy.definition.family == family
    ]


def get_all_strategies() -> Dict[str, SamplingStrategy]:
    """Get all registered strategies."""
    return dict(_REGISTRY)


def sample_pixels(
    name: str,
    width: int,
    height: int,
    target_count: int,
    source: PixelSource,
    params: Optional[SamplingParams] = None,
    dominant_colors: Sequence[Color] = (),
    *,
    seed: int = DEFAULT_SEED,
    log: Optional[logging.Logger] = None,
) -> List[Sample]:
    """Run the named strategy once."""
    strategy = get_strategy(name, log=log)
    return strategy.sample(width, height, target_count, params, source,
                           dominant_colors, seed=seed)


# =============================================================================
# Auto-registration of built-in strategies
# =============================================================================

def _register_builtins():
    """Register all built-in strategies."""
    # Import here to avoid circular imports
    from .uniform import UniformStrategy, GridStrategy
    from .importance import ImportanceStrategy, HybridStrategy
    from .adaptive import AdaptiveStrategy
    from .advanced import (
        BlueNoiseStrategy,
        LowDiscrepancyStrategy,
        HashWeightedStrategy,
        PhasedAdaptiveStrategy,
        StratifiedStrategy,
    )

    register_strategy(UniformStrategy())
    register_strategy(GridStrategy())
    register_strategy(ImportanceStrategy())
    register_strategy(AdaptiveStrategy())
    register_strategy(HybridStrategy())
    register_strategy(BlueNoiseStrategy())
    register_strategy(LowDiscrepancyStrategy())
    register_strategy(HashWeightedStrategy())
    register_strategy(PhasedAdaptiveStrategy())
    register_strategy(StratifiedStrategy())


# Register on import
_register_builtins()

__all__ = [
    "DEFAULT_STRATEGY",
    "SamplingStrategy",
    "StrategyDefinition",
    "register_strategy",
    "get_strategy",
    "list_strategies",
    "list_strategies_by_family",
    "get_all_strategies",
    "sample_pixels",
]
