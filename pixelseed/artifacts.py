"""
pixelseed/artifacts.py
Artifact validation and correction

Three checks run on a finished sample list:
- coverage: occupied cells of a 4x4 grid, must reach 0.85
- corners: each 10% margin box holds at least one sample
- clustering: share of samples with 3+ close neighbors stays under 10%

Failed checks trigger in-place corrections, then the count is reconciled
against the target.
"""
from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from .config import ARTIFACT_CONFIG, THRESHOLDS
from .fill import OccupancyMask, fill_grid_stride, fill_random, fill_row_major
from .models import Sample, SamplingParams
from .seeds import SamplingContext
from .source import PixelGrid
from .stratified import stratified_resample

Box = Tuple[int, int, int, int]  # x0, y0, x1, y1 (end exclusive)
CORNER_NAMES = ("top_left", "top_right", "bottom_left", "bottom_right")


# -----------------------------------------------------------------------------
# Geometry
# -----------------------------------------------------------------------------

def cell_of(x: int, y: int, width: int, height: int, cells: int) -> Tuple[int, int]:
    return min(x * cells // width, cells - 1), min(y * cells // height, cells - 1)


def cell_box(cx: int, cy: int, width: int, height: int, cells: int) -> Box:
    """Pixel bounds of a coverage cell; matches cell_of() exactly."""
    return (
        -(-cx * width // cells),
        -(-cy * height // cells),
        -(-(cx + 1) * width // cells),
        -(-(cy + 1) * height // cells),
    )


def corner_boxes(width: int, height: int) -> List[Box]:
    """Margin boxes at TL, TR, BL, BR."""
    mw = max(1, int(width * ARTIFACT_CONFIG.corner_margin_ratio))
    mh = max(1, int(height * ARTIFACT_CONFIG.corner_margin_ratio))
    return [
        (0, 0, mw, mh),
        (width - mw, 0, width, mh),
        (0, height - mh, mw, height),
        (width - mw, height - mh, width, height),
    ]


def _in_box(x: int, y: int, box: Box) -> bool:
    return box[0] <= x < box[2] and box[1] <= y < box[3]


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

def coverage_ratio(samples: Sequence[Sample], width: int, height: int) -> float:
    cells = ARTIFACT_CONFIG.coverage_grid
    occupied = {cell_of(s.x, s.y, width, height, cells) for s in samples}
    return len(occupied) / float(cells * cells)


def validate_coverage(samples: Sequence[Sample], width: int, height: int) -> bool:
    return coverage_ratio(samples, width, height) >= ARTIFACT_CONFIG.min_coverage_ratio


def corner_coverage(samples: Sequence[Sample], width: int, height: int) -> List[bool]:
    boxes = corner_boxes(width, height)
    return [any(_in_box(s.x, s.y, box) for s in samples) for box in boxes]


def validate_corner_coverage(samples: Sequence[Sample], width: int, height: int) -> bool:
    return all(corner_coverage(samples, width, height))


def clustered_fraction(samples: Sequence[Sample]) -> float:
    """
    Fraction of samples with at least min_cluster_size neighbors closer
    than one hash cell (3 * clustering_distance, strict).
    """
    if not samples:
        return 0.0
    c = ARTIFACT_CONFIG
    cell = 3 * c.clustering_distance
    limit = cell * cell

    buckets: Dict[Tuple[int, int], List[Tuple[int, int]]] = defaultdict(list)
    for s in samples:
        buckets[(s.x // cell, s.y // cell)].append((s.x, s.y))

    clustered = 0
    for s in samples:
        bx, by = s.x // cell, s.y // cell
        close = 0
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                for ox, oy in buckets.get((bx + dx, by + dy), ()):
                    if (ox, oy) == (s.x, s.y):
                        continue
                    if (ox - s.x) ** 2 + (oy - s.y) ** 2 < limit:
                        close += 1
        if close >= c.min_cluster_size:
            clustered += 1
    return clustered / float(len(samples))


def has_clustering(samples: Sequence[Sample]) -> bool:
    if len(samples) <= ARTIFACT_CONFIG.min_samples_for_clustering:
        return False
    return clustered_fraction(samples) > ARTIFACT_CONFIG.max_clustered_fraction


@dataclass
class ArtifactReport:
    """Validation summary for a finished sample list."""
    count: int
    coverage_ratio: float
    corners: Dict[str, bool]
    clustered_fraction: float
    top_count: int
    bottom_count: int

    @property
    def coverage_ok(self) -> bool:
        return self.coverage_ratio >= ARTIFACT_CONFIG.min_coverage_ratio

    @property
    def corners_ok(self) -> bool:
        return all(self.corners.values())

    @property
    def clustering_ok(self) -> bool:
        if self.count <= ARTIFACT_CONFIG.min_samples_for_clustering:
            return True
        return self.clustered_fraction <= ARTIFACT_CONFIG.max_clustered_fraction

    def to_dict(self) -> dict:
        d = asdict(self)
        d.update(coverage_ok=self.coverage_ok, corners_ok=self.corners_ok,
                 clustering_ok=self.clustering_ok)
        return d


def analyze(samples: Sequence[Sample], width: int, height: int) -> ArtifactReport:
    mid = height // 2
    top = sum(1 for s in samples if s.y < mid)
    return ArtifactReport(
        count=len(samples),
        coverage_ratio=coverage_ratio(samples, width, height),
        corners=dict(zip(CORNER_NAMES, corner_coverage(samples, width, height))),
        clustered_fraction=clustered_fraction(samples),
        top_count=top,
        bottom_count=len(samples) - top,
    )


# -----------------------------------------------------------------------------
# Correction helpers
# -----------------------------------------------------------------------------

def find_pixel_in_box(grid: PixelGrid, box: Box, used: OccupancyMask) -> Optional[Tuple[int, int]]:
    """Box midpoint if usable, else the first usable pixel row-major."""
    x0, y0, x1, y1 = box
    if x1 <= x0 or y1 <= y0:
        return None
    mx, my = (x0 + x1 - 1) // 2, (y0 + y1 - 1) // 2
    if grid.rgba[my, mx, 3] > THRESHOLDS.alpha_threshold and (mx, my) not in used:
        return mx, my

    ys, xs = np.mgrid[y0:y1, x0:x1]
    idx = (ys * grid.width + xs).ravel()
    ok = idx[(grid.alpha[idx] > THRESHOLDS.alpha_threshold) & ~used.bits[idx]]
    if ok.size == 0:
        return None
    return grid.coords(int(ok[0]))


def _evict_one(
    samples: List[Sample],
    used: OccupancyMask,
    width: int,
    height: int,
    pinned: Set[Tuple[int, int]],
) -> bool:
    """
    Drop the last unpinned sample of the most crowded cell (2+ samples),
    never touching samples inside a corner box. False if nothing qualifies.
    """
    cells = ARTIFACT_CONFIG.coverage_grid
    boxes = corner_boxes(width, height)
    members: Dict[Tuple[int, int], List[int]] = defaultdict(list)
    for i, s in enumerate(samples):
        members[cell_of(s.x, s.y, width, height, cells)].append(i)

    for key in sorted(members, key=lambda k: (-len(members[k]), k[1], k[0])):
        if len(members[key]) < 2:
            break
        for i in reversed(members[key]):
            s = samples[i]
            if s.coord in pinned or any(_in_box(s.x, s.y, b) for b in boxes):
                continue
            samples.pop(i)
            used.discard(s.x, s.y)
            return True
    return False


def _insert(samples, used, grid, xy, target, pinned) -> bool:
    if len(samples) >= target and not _evict_one(samples, used, grid.width, grid.height, pinned):
        return False
    x, y = xy
    used.add(x, y)
    samples.append(Sample(x, y, grid.color(x, y)))
    pinned.add((x, y))
    return True


# -----------------------------------------------------------------------------
# Corrections
# -----------------------------------------------------------------------------

def apply_coverage_correction(
    samples: List[Sample],
    used: OccupancyMask,
    grid: PixelGrid,
    target: int,
    pinned: Optional[Set[Tuple[int, int]]] = None,
) -> int:
    """
    Put a sample into every empty coverage cell that has a visible pixel,
    evicting from crowded cells when already at target, then top up
    row-major. Returns the number of cells filled.
    """
    pinned = pinned if pinned is not None else set()
    cells = ARTIFACT_CONFIG.coverage_grid
    occupied = {cell_of(s.x, s.y, grid.width, grid.height, cells) for s in samples}

    filled = 0
    for cy in range(cells):
        for cx in range(cells):
            if (cx, cy) in occupied:
                continue
            xy = find_pixel_in_box(grid, cell_box(cx, cy, grid.width, grid.height, cells), used)
            if xy is None:
                continue
            if not _insert(samples, used, grid, xy, target, pinned):
                return filled
            filled += 1

    fill_row_major(samples, used, grid, target, alpha_gate=THRESHOLDS.alpha_threshold)
    return filled


def apply_corner_correction(
    samples: List[Sample],
    used: OccupancyMask,
    grid: PixelGrid,
    target: int,
    pinned: Optional[Set[Tuple[int, int]]] = None,
) -> int:
    """Insert the midpoint (or any visible pixel) of each empty corner box."""
    pinned = pinned if pinned is not None else set()
    boxes = corner_boxes(grid.width, grid.height)
    covered = corner_coverage(samples, grid.width, grid.height)
    added = 0
    for box, ok in zip(boxes, covered):
        if ok:
            continue
        xy = find_pixel_in_box(grid, box, used)
        if xy is None:
            continue
        if not _insert(samples, used, grid, xy, target, pinned):
            break
        added += 1
    return added


def apply_anti_clustering(samples: List[Sample], height: int) -> List[Sample]:
    """Band-stratified reselection at the current size."""
    return stratified_resample(samples, len(samples), height, ARTIFACT_CONFIG.stratified_bands)


def fill_to_required_count(
    samples: List[Sample],
    used: OccupancyMask,
    grid: PixelGrid,
    target: int,
    ctx: SamplingContext,
) -> None:
    """Truncate to target, or top up with a grid-stride pass then a capped random fill."""
    if len(samples) > target:
        for s in samples[target:]:
            used.discard(s.x, s.y)
        del samples[target:]
        return
    if len(samples) == target:
        return

    needed = target - len(samples)
    side = max(1, int(math.sqrt(target)))
    fill_grid_stride(
        samples, used, grid, target,
        max(1, grid.width // side), max(1, grid.height // side),
        alpha_gate=THRESHOLDS.alpha_threshold,
    )
    if len(samples) < target:
        fill_random(
            samples, used, grid, target, ctx.rng("reconcile"),
            needed * ARTIFACT_CONFIG.random_fill_multiplier,
            alpha_gate=THRESHOLDS.alpha_threshold,
        )
    if len(samples) < target:
        ctx.log.warning("Could only reach %d of %d samples", len(samples), target)


def prevent_artifacts(
    samples: Sequence[Sample],
    grid: PixelGrid,
    target: int,
    params: SamplingParams,
    ctx: Optional[SamplingContext] = None,
) -> List[Sample]:
    """
    Validate and repair a sample list.

    Order: coverage, clustering (only with params.apply_anti_clustering),
    corners, then count reconciliation.

    Returns:
        New list with unique coordinates and at most `target` samples
    """
    ctx = ctx or SamplingContext()
    out = list(samples)
    used = OccupancyMask.from_samples(out, grid.width, grid.height)
    pinned: Set[Tuple[int, int]] = set()

    ratio = coverage_ratio(out, grid.width, grid.height)
    ctx.log.debug("Coverage ratio %.2f over %d samples", ratio, len(out))
    if ratio < ARTIFACT_CONFIG.min_coverage_ratio:
        filled = apply_coverage_correction(out, used, grid, target, pinned)
        ctx.log.debug("Coverage correction filled %d cells, ratio now %.2f",
                      filled, coverage_ratio(out, grid.width, grid.height))

    if params.apply_anti_clustering and has_clustering(out):
        ctx.log.debug("Clustering detected (%.1f%%), resampling",
                      100.0 * clustered_fraction(out))
        out = apply_anti_clustering(out, grid.height)
        used = OccupancyMask.from_samples(out, grid.width, grid.height)

    if not validate_corner_coverage(out, grid.width, grid.height):
        added = apply_corner_correction(out, used, grid, target, pinned)
        ctx.log.debug("Corner correction inserted %d samples", added)

    fill_to_required_count(out, used, grid, target, ctx)
    return out
