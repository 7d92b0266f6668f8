"""
pixelseed/config.py
Configuration constants for pixel sampling

Every tuning value used by the scorer, collector, selectors and the
artifact-prevention layer lives here so runs can be reproduced from a
single place.
"""

from dataclasses import dataclass

# =============================================================================
# Version
# =============================================================================

FORMAT_VERSION = "1.0"

# Default seed for every seeded strategy (explicit override via seed=)
DEFAULT_SEED = 42

# =============================================================================
# Thresholds
# =============================================================================

@dataclass(frozen=True)
class ThresholdConfig:
    """Alpha gates and scoring constants."""
    alpha_threshold: float = 0.1        # below: transparent, never a candidate
    weak_alpha_threshold: float = 0.05  # grid-fallback gate

    # Collector background rejection (near-white, almost gray)
    white_brightness: float = 0.95
    white_saturation: float = 0.05

    # Scorer background penalty
    penalty_brightness: float = 0.8
    penalty_saturation: float = 0.2
    penalty_weight: float = 2.0

    uniqueness_weight: float = 0.3
    score_scale: float = 3.0


THRESHOLDS = ThresholdConfig()

# =============================================================================
# Candidate scan
# =============================================================================

@dataclass(frozen=True)
class ScanConfig:
    """Stride selection and fallback grid for the candidate collector."""
    max_scan_dimension: int = 512
    min_scan_divider: int = 16
    early_exit_multiplier: int = 2

    # Fallback grid kicks in below max(target // 4, min_candidates)
    min_candidates: int = 10
    fallback_divisor: int = 4
    fallback_grid_factor: float = 1.5
    fallback_importance: float = 0.1

    # Middle-tier scan used by the hybrid strategy
    tier_scan_dimension: int = 200


SCAN_CONFIG = ScanConfig()

# =============================================================================
# Artifact prevention
# =============================================================================

@dataclass(frozen=True)
class ArtifactConfig:
    """Coverage, corner and clustering validation settings."""
    coverage_grid: int = 4
    min_coverage_ratio: float = 0.85
    corner_margin_ratio: float = 0.1

    clustering_distance: int = 2        # hash cell is 3x this; closer than a cell counts
    min_cluster_size: int = 3
    max_clustered_fraction: float = 0.1
    min_samples_for_clustering: int = 10

    stratified_bands: int = 16
    random_fill_multiplier: int = 10


ARTIFACT_CONFIG = ArtifactConfig()

# =============================================================================
# Adaptive blend
# =============================================================================

@dataclass(frozen=True)
class AdaptiveConfig:
    """Phase fractions for the adaptive strategies."""
    vibrant_fraction: float = 0.4
    uniform_fraction: float = 0.3
    max_dominant_colors: int = 3
    dominant_scan_points: int = 1000
    similarity_threshold: float = 0.7
    random_attempts_multiplier: int = 2

    # phased_adaptive: importance chain first, uniform fill after
    importance_fraction: float = 0.7
    phased_uniform_divisor: int = 100
    phased_random_multiplier: int = 5


ADAPTIVE_CONFIG = AdaptiveConfig()

# =============================================================================
# Advanced family
# =============================================================================

@dataclass(frozen=True)
class AdvancedConfig:
    """Blue-noise, low-discrepancy and hash-weighted settings."""
    # Uniform vivid pass
    vivid_brightness: float = 0.6
    vivid_saturation: float = 0.3
    vivid_fraction: float = 0.1

    # Blue noise
    candidates_per_step: int = 32
    rejection_tries: int = 100
    seed_divisor: int = 10
    max_seed_points: int = 50
    blue_noise_stall_limit: int = 64

    # Low discrepancy
    dim_brightness: float = 0.3
    dim_saturation: float = 0.2
    neighbor_score_floor: float = 0.15
    extra_draw_multiplier: int = 4

    # Hash-weighted draw
    probability_floor: float = 0.01
    attempts_multiplier: int = 5
    brightness_weight: float = 0.7
    saturation_weight: float = 0.3


ADVANCED_CONFIG = AdvancedConfig()

# =============================================================================
# Default sampling parameters
# =============================================================================

DEFAULT_PARAMS = {
    "importance_threshold": 0.15,
    "contrast_weight": 0.6,
    "saturation_weight": 0.4,
    "edge_radius": 2,
    "important_sampling_ratio": 0.7,
    "top_bottom_ratio": 0.5,
    "apply_anti_clustering": True,
}
