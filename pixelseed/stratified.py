"""
pixelseed/stratified.py
Band-stratified resampling over flat sample arrays

Samples are packed into a numpy structured array (x, y, r, g, b, a). The
image is cut into horizontal bands; each band receives a share of the
target proportional to its summed alpha * brightness, picks evenly strided
members from its importance-sorted list, and a second pass tops the result
up from whatever was not picked. Output order depends only on the input
array and the band count.
"""
from __future__ import annotations

from typing import Iterable, List

import numpy as np

from .models import Sample

SAMPLE_DTYPE = np.dtype([
    ("x", np.int32),
    ("y", np.int32),
    ("r", np.float32),
    ("g", np.float32),
    ("b", np.float32),
    ("a", np.float32),
])


def samples_to_array(samples: Iterable[Sample]) -> np.ndarray:
    rows = [(s.x, s.y, *s.color) for s in samples]
    return np.array(rows, dtype=SAMPLE_DTYPE)


def array_to_samples(arr: np.ndarray) -> List[Sample]:
    return [
        Sample(int(row["x"]), int(row["y"]),
               (float(row["r"]), float(row["g"]), float(row["b"]), float(row["a"])))
        for row in arr
    ]


def sample_importance(arr: np.ndarray) -> np.ndarray:
    """alpha * mean(r, g, b) on the premultiplied channels."""
    return arr["a"] * (arr["r"] + arr["g"] + arr["b"]) / 3.0


def _unique_first(arr: np.ndarray) -> np.ndarray:
    """Drop repeated coordinates, keeping first occurrences in input order."""
    width = int(arr["x"].max()) + 1
    keys = arr["y"].astype(np.int64) * width + arr["x"].astype(np.int64)
    _, first = np.unique(keys, return_index=True)
    return arr[np.sort(first)]


def band_quotas(band_importance: np.ndarray, target_count: int) -> np.ndarray:
    """
    Split target_count across bands proportionally to importance; leftover
    units go one each to the most important bands.
    """
    total = float(band_importance.sum())
    quota = np.floor(band_importance / total * target_count).astype(np.int64)
    remaining = band_importance.astype(np.float64).copy()
    assigned = int(quota.sum())
    while assigned < target_count:
        b = int(np.argmax(remaining))
        quota[b] += 1
        remaining[b] = 0.0
        assigned += 1
    return quota


def stratified_sample(
    samples: np.ndarray,
    target_count: int,
    image_height: int,
    bands: int = 16,
) -> np.ndarray:
    """
    Reselect up to target_count samples spread across horizontal bands.

    Args:
        samples: SAMPLE_DTYPE array
        target_count: Maximum number of samples to return
        image_height: Height used to size the bands
        bands: Number of horizontal bands

    Returns:
        SAMPLE_DTYPE array with at most target_count unique coordinates
    """
    if samples.size == 0 or target_count <= 0 or bands <= 0 or image_height <= 0:
        return samples[:0]

    samples = _unique_first(samples)
    band_height = -(-image_height // bands)
    band = np.clip(samples["y"] // band_height, 0, bands - 1)
    importance = sample_importance(samples).astype(np.float64)

    band_importance = np.bincount(band, weights=importance, minlength=bands)
    if band_importance.sum() <= 0.0:
        # All black or transparent: weight bands by population instead
        band_importance = np.bincount(band, minlength=bands).astype(np.float64)
    if band_importance.sum() <= 0.0:
        return samples[:0]

    quota = band_quotas(band_importance, target_count)

    # Members of each band, most important first (stable on ties)
    members = []
    for b in range(bands):
        idx = np.flatnonzero(band == b)
        order = np.argsort(-importance[idx], kind="stable")
        members.append(idx[order])

    picked = np.zeros(samples.size, dtype=bool)
    out: List[int] = []

    for b in range(bands):
        count = members[b].size
        if count == 0 or quota[b] == 0:
            continue
        step = max(1, count // int(quota[b]))
        for i in members[b][::step][: int(quota[b])]:
            if len(out) >= target_count:
                break
            out.append(int(i))
            picked[i] = True

    # Second pass: top up from unpicked members, band by band
    for b in range(bands):
        if len(out) >= target_count:
            break
        for i in members[b]:
            if len(out) >= target_count:
                break
            if not picked[i]:
                out.append(int(i))
                picked[i] = True

    return samples[np.asarray(out, dtype=np.int64)]


def stratified_resample(
    samples: List[Sample],
    target_count: int,
    image_height: int,
    bands: int = 16,
) -> List[Sample]:
    """List-of-Sample wrapper around stratified_sample()."""
    if not samples:
        return []
    arr = stratified_sample(samples_to_array(samples), target_count, image_height, bands)
    return array_to_samples(arr)
