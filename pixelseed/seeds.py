"""
pixelseed/seeds.py
Deterministic seed derivation

CRITICAL: Do NOT use Python's built-in hash() or the global numpy/random
state. Every random draw comes from a generator seeded here so identical
inputs and seed give identical samples.
"""

import hashlib
import logging
from dataclasses import dataclass, field

import numpy as np

from .config import DEFAULT_SEED


def stable_u32(*parts) -> int:
    """
    Generate a stable 32-bit unsigned integer from arbitrary parts.

    Uses SHA-256 truncated to 4 bytes for cross-platform determinism.

    Example:
        stable_u32("blue_noise", 42) -> consistent value across runs
    """
    s = "|".join(str(p) for p in parts).encode("utf-8")
    return int.from_bytes(hashlib.sha256(s).digest()[:4], "big")


def input_fingerprint(data: bytes) -> str:
    """SHA-256 fingerprint for an input image, used in export reports."""
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


@dataclass
class SamplingContext:
    """
    Per-call state threaded through the sampling helpers.

    Carries the run seed and the injected logger. Each phase gets its own
    generator derived from (phase, seed), so adding a phase never shifts the
    random stream of another.

    Attributes:
        seed: Master seed for this sampling call
        log: Logger receiving diagnostic events
    """
    seed: int = DEFAULT_SEED
    log: logging.Logger = field(default_factory=lambda: logging.getLogger("pixelseed"))

    def phase_seed(self, phase: str) -> int:
        return stable_u32("phase", self.seed, phase)

    def rng(self, phase: str) -> np.random.Generator:
        """Fresh generator for a named phase (e.g. "fill", "blue_noise")."""
        return np.random.default_rng(self.phase_seed(phase))
