"""
pixelseed/strategies/advanced
Advanced sampling family
"""

from .blue_noise import BlueNoiseStrategy
from .hash_weighted import HashWeightedStrategy
from .low_discrepancy import LowDiscrepancyStrategy
from .phased import PhasedAdaptiveStrategy, StratifiedStrategy

__all__ = [
    "BlueNoiseStrategy",
    "HashWeightedStrategy",
    "LowDiscrepancyStrategy",
    "PhasedAdaptiveStrategy",
    "StratifiedStrategy",
]
