"""
pixelseed/score.py
Pixel importance scoring

importance = contrast_weight * local_contrast
           + saturation_weight * saturation
           + 0.3 * uniqueness
           - 2.0 * background_penalty
scaled by 3.0 and clamped to [0, 1].

Colors arrive alpha-premultiplied; everything is measured on straight
(un-premultiplied) RGB. The importance family measures saturation as the
distance from the channel mean; the advanced family uses (max - min) / max.
Both variants live here so each family picks one and sticks with it.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from .config import THRESHOLDS
from .models import SamplingParams

EPS = 1e-6


# ----------------------------
# Color helpers (vectorized over the last axis)
# ----------------------------

def sanitize(rgba: np.ndarray) -> np.ndarray:
    """Replace NaN/inf, clamp to [0, 1] and drop negative zeros."""
    arr = np.nan_to_num(np.asarray(rgba, dtype=np.float32), nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(arr, 0.0, 1.0) + np.float32(0.0)


def unpremultiply(rgba: np.ndarray) -> np.ndarray:
    """Straight RGB from premultiplied RGBA; alpha == 0 gives black."""
    rgba = np.asarray(rgba, dtype=np.float32)
    alpha = rgba[..., 3:4]
    safe = np.where(alpha > 0.0, alpha, 1.0)
    rgb = np.where(alpha > 0.0, rgba[..., :3] / safe, 0.0)
    return np.clip(rgb, 0.0, 1.0).astype(np.float32)


def brightness(rgb: np.ndarray) -> np.ndarray:
    return np.mean(rgb, axis=-1)


def saturation_deviation(rgb: np.ndarray) -> np.ndarray:
    """Euclidean distance of the color from its own channel mean."""
    mean = np.mean(rgb, axis=-1, keepdims=True)
    return np.sqrt(np.sum((rgb - mean) ** 2, axis=-1))


def saturation_hsv(rgb: np.ndarray) -> np.ndarray:
    """HSV-style saturation (max - min) / max, 0 for black."""
    cmax = np.max(rgb, axis=-1)
    cmin = np.min(rgb, axis=-1)
    return np.where(cmax > EPS, (cmax - cmin) / np.maximum(cmax, EPS), 0.0).astype(np.float32)


def dominant_rgb(dominant_colors: Optional[Iterable[Sequence[float]]]) -> np.ndarray:
    """Dominant colors as a (K, 3) straight-RGB array (alpha channel dropped)."""
    if not dominant_colors:
        return np.zeros((0, 3), dtype=np.float32)
    arr = np.asarray([tuple(c)[:3] for c in dominant_colors], dtype=np.float32)
    return sanitize(arr)


# ----------------------------
# Components
# ----------------------------

def local_contrast(rgb: np.ndarray, neighbor_rgb: np.ndarray, valid: np.ndarray) -> np.ndarray:
    """
    Mean RGB distance between each pixel and its valid neighbors.

    rgb: [N,3], neighbor_rgb: [N,K,3], valid: [N,K] bool
    """
    dist = np.sqrt(np.sum((neighbor_rgb - rgb[:, None, :]) ** 2, axis=-1))
    count = valid.sum(axis=1)
    total = np.where(valid, dist, 0.0).sum(axis=1)
    return np.where(count > 0, total / np.maximum(count, 1), 0.0)


def uniqueness(rgb: np.ndarray, dominant: np.ndarray) -> np.ndarray:
    """Min distance to any dominant color, capped at 1; 1.0 with none."""
    if dominant.shape[0] == 0:
        return np.ones(rgb.shape[0], dtype=np.float32)
    dist = np.sqrt(np.sum((rgb[:, None, :] - dominant[None, :, :]) ** 2, axis=-1))
    return np.minimum(dist.min(axis=1), 1.0)


def background_penalty(bright: np.ndarray, sat: np.ndarray) -> np.ndarray:
    """Penalty for flat near-white pixels, 0 elsewhere."""
    t = THRESHOLDS
    mask = (bright > t.penalty_brightness) & (sat < t.penalty_saturation)
    ramp = (bright - t.penalty_brightness) / (1.0 - t.penalty_brightness)
    return np.where(mask, ramp * (1.0 - sat), 0.0)


# ----------------------------
# Public API
# ----------------------------

def score_batch(
    pixels: np.ndarray,
    neighbors: np.ndarray,
    valid: np.ndarray,
    params: SamplingParams,
    dominant: np.ndarray,
) -> np.ndarray:
    """
    Importance for N pixels at once.

    pixels: [N,4] premultiplied RGBA
    neighbors: [N,K,4] premultiplied RGBA
    valid: [N,K] bool, False where the neighbor is off-image
    dominant: [D,3] straight RGB

    Pixels at or below the alpha threshold score 0.
    """
    t = THRESHOLDS
    rgb = unpremultiply(pixels)
    n_rgb = unpremultiply(neighbors)

    contrast = local_contrast(rgb, n_rgb, valid)
    sat = saturation_deviation(rgb)
    uniq = uniqueness(rgb, dominant)
    penalty = background_penalty(brightness(rgb), sat)

    raw = (
        params.contrast_weight * contrast
        + params.saturation_weight * sat
        + t.uniqueness_weight * uniq
        - t.penalty_weight * penalty
    )
    importance = np.clip(np.nan_to_num(raw * t.score_scale, nan=0.0), 0.0, 1.0)
    return np.where(pixels[:, 3] > t.alpha_threshold, importance, 0.0).astype(np.float32)


def score_pixel(
    color: Sequence[float],
    neighbors: Sequence[Sequence[float]],
    params: SamplingParams,
    dominant_colors: Optional[Iterable[Sequence[float]]] = None,
) -> float:
    """
    Importance of a single pixel given its neighbor colors.

    Args:
        color: Premultiplied (r, g, b, a)
        neighbors: Premultiplied neighbor colors (any count, may be empty)
        params: Weights to apply
        dominant_colors: Reference colors for the uniqueness term

    Returns:
        Importance in [0, 1]; 0 for transparent pixels
    """
    pixel = sanitize(np.asarray(color, dtype=np.float32).reshape(1, 4))
    if len(neighbors):
        nb = sanitize(np.asarray(neighbors, dtype=np.float32).reshape(1, -1, 4))
    else:
        nb = np.zeros((1, 0, 4), dtype=np.float32)
    valid = np.ones(nb.shape[:2], dtype=bool)
    return float(score_batch(pixel, nb, valid, params, dominant_rgb(dominant_colors))[0])
