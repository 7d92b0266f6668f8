"""
pixelseed/models.py
Core data models for pixel sampling

Sample, Candidate and SamplingParams plus the error kinds surfaced to
callers. Everything here is created fresh per sampling call.
"""

from dataclasses import dataclass, asdict, replace as dc_replace
from typing import Dict, Tuple

from .config import DEFAULT_PARAMS

Color = Tuple[float, float, float, float]


# =============================================================================
# Errors
# =============================================================================

class SamplingError(Exception):
    """Base class for every error raised by pixelseed."""


class InvalidDimensions(SamplingError, ValueError):
    """Width or height is not positive (or disagrees with the source)."""


class InvalidTargetCount(SamplingError, ValueError):
    """Target count is not positive."""


class InvalidParameters(SamplingError, ValueError):
    """A SamplingParams field is out of range."""


class EmptyResult(SamplingError, RuntimeError):
    """Every fallback path ran and no sample was produced."""


class UnknownStrategy(SamplingError, KeyError):
    """No strategy registered under the requested name."""


# =============================================================================
# Sample / Candidate
# =============================================================================

@dataclass(frozen=True)
class Sample:
    """A selected pixel: integer position and premultiplied RGBA color."""
    x: int
    y: int
    color: Color

    @property
    def coord(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "color": list(self.color)}

    @classmethod
    def from_dict(cls, d: dict) -> "Sample":
        return cls(x=int(d["x"]), y=int(d["y"]), color=tuple(float(c) for c in d["color"]))


@dataclass(frozen=True)
class Candidate:
    """A scored sample, only used inside strategies."""
    x: int
    y: int
    color: Color
    importance: float

    def to_sample(self) -> Sample:
        return Sample(self.x, self.y, self.color)


# =============================================================================
# SamplingParams
# =============================================================================

@dataclass(frozen=True)
class SamplingParams:
    """
    Tuning bundle shared by all strategies.

    Ratios must lie in [0, 1]; call validate() before use.
    """
    importance_threshold: float = DEFAULT_PARAMS["importance_threshold"]
    contrast_weight: float = DEFAULT_PARAMS["contrast_weight"]
    saturation_weight: float = DEFAULT_PARAMS["saturation_weight"]
    edge_radius: int = DEFAULT_PARAMS["edge_radius"]
    important_sampling_ratio: float = DEFAULT_PARAMS["important_sampling_ratio"]
    top_bottom_ratio: float = DEFAULT_PARAMS["top_bottom_ratio"]
    apply_anti_clustering: bool = DEFAULT_PARAMS["apply_anti_clustering"]

    def validate(self) -> "SamplingParams":
        """Raise InvalidParameters for out-of-range fields; return self."""
        for name in ("important_sampling_ratio", "top_bottom_ratio"):
            value = getattr(self, name)
            # NaN fails both comparisons
            if not (0.0 <= value <= 1.0):
                raise InvalidParameters(f"{name} must be in [0, 1], got {value!r}")
        for name in ("importance_threshold", "contrast_weight", "saturation_weight"):
            value = getattr(self, name)
            if value != value:
                raise InvalidParameters(f"{name} is NaN")
        if self.edge_radius < 1:
            raise InvalidParameters(f"edge_radius must be >= 1, got {self.edge_radius}")
        return self

    def replace(self, **changes) -> "SamplingParams":
        return dc_replace(self, **changes)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "SamplingParams":
        known = {k: d[k] for k in DEFAULT_PARAMS if k in d}
        unknown = sorted(set(d) - set(DEFAULT_PARAMS))
        if unknown:
            raise InvalidParameters(f"Unknown sampling parameters: {', '.join(unknown)}")
        return cls(**known)
