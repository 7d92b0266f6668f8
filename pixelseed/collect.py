"""
pixelseed/collect.py
Candidate collection for importance-driven strategies

Scans the grid at a stride, drops transparent and near-white background
pixels, scores the rest and keeps those above the noise floor. The early
exit budget is shared between the top and bottom halves. A grid fallback
guarantees material when the scan comes back thin.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import numpy as np

from .config import ARTIFACT_CONFIG, SCAN_CONFIG, THRESHOLDS
from .fill import round_half_up
from .models import Candidate, SamplingParams
from .score import dominant_rgb, score_batch
from .seeds import SamplingContext
from .source import NEIGHBOR_OFFSETS, PixelGrid
from .stratified import stratified_resample

# Points scored per vectorized chunk; bounds memory and lets the scan stop early
SCAN_CHUNK = 16384


@dataclass(frozen=True)
class ScanStride:
    x: int
    y: int


@dataclass
class CandidatePool:
    """Collector output plus the bookkeeping strategies log."""
    candidates: List[Candidate]
    scanned: int                # kept by the importance scan
    fallback: int               # appended by the grid fallback
    stride: ScanStride
    debug: dict = field(default_factory=dict)


def scan_stride(width: int, height: int) -> ScanStride:
    """Stride that keeps the scan near max_scan_dimension points per axis."""
    c = SCAN_CONFIG
    return ScanStride(
        x=max(1, min(width // c.max_scan_dimension, width // c.min_scan_divider)),
        y=max(1, min(height // c.max_scan_dimension, height // c.min_scan_divider)),
    )


def neighbor_stack(grid: PixelGrid, xs: np.ndarray, ys: np.ndarray,
                   radius: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Neighbor colors at the 8 compass offsets scaled by radius.

    Returns:
        neighbors [N,8,4] and valid [N,8] (False where off-image)
    """
    r = max(1, int(radius))
    offsets = np.asarray(NEIGHBOR_OFFSETS, dtype=np.int64) * r
    nx = xs[:, None] + offsets[None, :, 0]
    ny = ys[:, None] + offsets[None, :, 1]
    valid = (nx >= 0) & (nx < grid.width) & (ny >= 0) & (ny < grid.height)
    flat = np.clip(ny, 0, grid.height - 1) * grid.width + np.clip(nx, 0, grid.width - 1)
    return grid.flat[flat], valid


def importance_at(grid: PixelGrid, indices: np.ndarray, params: SamplingParams,
                  dominant: np.ndarray) -> np.ndarray:
    """Vectorized importance for flat pixel indices."""
    xs = indices % grid.width
    ys = indices // grid.width
    neighbors, valid = neighbor_stack(grid, xs, ys, params.edge_radius)
    return score_batch(grid.flat[indices], neighbors, valid, params, dominant)


def is_white_background(grid: PixelGrid, indices: np.ndarray) -> np.ndarray:
    t = THRESHOLDS
    return (
        (grid.brightness[indices] > t.white_brightness)
        & (grid.saturation_deviation[indices] < t.white_saturation)
    )


def scan_indices(grid: PixelGrid, stride: ScanStride) -> np.ndarray:
    ys = np.arange(0, grid.height, stride.y)
    xs = np.arange(0, grid.width, stride.x)
    return (ys[:, None] * grid.width + xs[None, :]).ravel()


def scan_candidates(
    grid: PixelGrid,
    stride: ScanStride,
    params: SamplingParams,
    dominant_colors: Optional[Sequence] = None,
    limit: Optional[int] = None,
    floor: Optional[float] = None,
    rows: Optional[Tuple[int, int]] = None,
) -> List[Candidate]:
    """
    Importance scan in row-major order.

    Keeps pixels with alpha above the threshold, not near-white background,
    and importance above `floor` (default: half of
    params.importance_threshold). Stops once `limit` candidates are found.
    `rows` restricts the scan to y in [start, stop).
    """
    dominant = dominant_rgb(dominant_colors)
    if floor is None:
        floor = 0.5 * params.importance_threshold
    points = scan_indices(grid, stride)
    if rows is not None:
        ys = points // grid.width
        points = points[(ys >= rows[0]) & (ys < rows[1])]

    out: List[Candidate] = []
    for start in range(0, points.size, SCAN_CHUNK):
        chunk = points[start:start + SCAN_CHUNK]
        chunk = chunk[grid.alpha[chunk] > THRESHOLDS.alpha_threshold]
        chunk = chunk[~is_white_background(grid, chunk)]
        if chunk.size == 0:
            continue
        importance = importance_at(grid, chunk, params, dominant)
        keep = importance > floor
        for i, imp in zip(chunk[keep], importance[keep]):
            x, y = grid.coords(int(i))
            out.append(Candidate(x, y, grid.color_at(int(i)), float(imp)))
            if limit is not None and len(out) >= limit:
                return out
    return out


def grid_fallback(
    grid: PixelGrid,
    needed: int,
    exclude: Optional[Set[Tuple[int, int]]] = None,
    ctx: Optional[SamplingContext] = None,
) -> List[Candidate]:
    """
    Deterministic grid points regardless of importance.

    Uses a ceil(sqrt(needed) * 1.5) lattice gated only by the weak alpha
    threshold. If no lattice point passes the gate (fully transparent
    image) the lattice is taken ungated so later stages still have
    material.
    """
    if needed <= 0:
        return []
    c = SCAN_CONFIG
    size = int(math.ceil(math.sqrt(needed) * c.fallback_grid_factor))
    step_x = max(1, int(math.ceil(grid.width / size)))
    step_y = max(1, int(math.ceil(grid.height / size)))

    lattice: List[Tuple[int, int]] = []
    seen = set(exclude or ())
    for gy in range(size):
        for gx in range(size):
            x = min(gx * step_x, grid.width - 1)
            y = min(gy * step_y, grid.height - 1)
            if (x, y) in seen:
                continue
            seen.add((x, y))
            lattice.append((x, y))

    gated = [(x, y) for x, y in lattice
             if grid.rgba[y, x, 3] > THRESHOLDS.weak_alpha_threshold]
    if not gated and lattice:
        if ctx is not None:
            ctx.log.warning("Grid fallback: no visible pixels on the lattice, using it ungated")
        gated = lattice

    return [
        Candidate(x, y, grid.color(x, y), c.fallback_importance)
        for x, y in gated[:needed]
    ]


def thin_clusters(candidates: List[Candidate], height: int) -> List[Candidate]:
    """Band-stratified reselection of the candidate list, keeping importances."""
    by_coord = {(c.x, c.y): c for c in candidates}
    resampled = stratified_resample(
        [c.to_sample() for c in candidates],
        len(candidates),
        height,
        ARTIFACT_CONFIG.stratified_bands,
    )
    return [by_coord[(s.x, s.y)] for s in resampled]


def scan_halves(
    grid: PixelGrid,
    stride: ScanStride,
    params: SamplingParams,
    dominant_colors: Optional[Sequence],
    limit: int,
) -> List[Candidate]:
    """
    Early-exit scan with the limit split between top and bottom halves by
    params.top_bottom_ratio. A half that comes back short hands its unused
    share to the other, so the total is min(limit, candidates found).
    """
    mid = grid.height // 2
    top = scan_candidates(grid, stride, params, dominant_colors, limit, rows=(0, mid))
    bottom = scan_candidates(grid, stride, params, dominant_colors, limit,
                             rows=(mid, grid.height))

    top_budget = round_half_up(limit * params.top_bottom_ratio)
    top_keep = min(len(top), max(top_budget, limit - len(bottom)))
    bottom_keep = min(len(bottom), limit - top_keep)
    return top[:top_keep] + bottom[:bottom_keep]


def collect_candidates(
    grid: PixelGrid,
    target_count: int,
    params: SamplingParams,
    dominant_colors: Optional[Iterable] = None,
    ctx: Optional[SamplingContext] = None,
    stride: Optional[ScanStride] = None,
) -> CandidatePool:
    """
    Scan, optionally thin, then top up with the grid fallback.

    Args:
        grid: Per-call pixel cache
        target_count: Samples the caller will eventually keep
        params: Weights and thresholds
        dominant_colors: Reference colors for uniqueness scoring
        ctx: Logger/seed carrier
        stride: Override for the scan stride

    Returns:
        CandidatePool with candidates and counts
    """
    ctx = ctx or SamplingContext()
    stride = stride or scan_stride(grid.width, grid.height)
    limit = SCAN_CONFIG.early_exit_multiplier * target_count
    dominant = list(dominant_colors or ())

    candidates = scan_halves(grid, stride, params, dominant, limit)
    if params.apply_anti_clustering and candidates:
        candidates = thin_clusters(candidates, grid.height)
    scanned = len(candidates)

    min_needed = max(target_count // SCAN_CONFIG.fallback_divisor, SCAN_CONFIG.min_candidates)
    fallback: List[Candidate] = []
    if scanned < min_needed:
        ctx.log.debug(
            "Only %d important pixels (need %d), adding grid fallback",
            scanned, min_needed,
        )
        fallback = grid_fallback(
            grid,
            target_count - scanned,
            exclude={(c.x, c.y) for c in candidates},
            ctx=ctx,
        )
        candidates = candidates + fallback

    ctx.log.debug(
        "Collected %d candidates (%d scanned, %d fallback) at stride %dx%d for target %d",
        len(candidates), scanned, len(fallback), stride.x, stride.y, target_count,
    )
    return CandidatePool(
        candidates=candidates,
        scanned=scanned,
        fallback=len(fallback),
        stride=stride,
        debug={"min_needed": min_needed, "limit": limit},
    )
