# tests/test_stratified.py
"""
Tests for pixelseed/stratified.py (band-stratified resampling).
"""
import numpy as np

from pixelseed.models import Sample
from pixelseed.stratified import (
    SAMPLE_DTYPE,
    band_quotas,
    samples_to_array,
    stratified_resample,
    stratified_sample,
)


def _samples_dense_top(w=32, h=64):
    """Bright samples packed in the top rows, a few dim ones below."""
    out = []
    for y in range(8):
        for x in range(w):
            out.append(Sample(x, y, (0.9, 0.9, 0.9, 1.0)))
    for y in range(8, h, 8):
        out.append(Sample(0, y, (0.2, 0.2, 0.2, 1.0)))
    return out


# -----------------------------------------------------------------------------
# Quotas
# -----------------------------------------------------------------------------

def test_band_quotas_sum_to_target():
    q = band_quotas(np.array([5.0, 3.0, 2.0, 0.0]), 7)
    assert int(q.sum()) == 7
    assert q[3] == 0
    assert q[0] >= q[1] >= q[2]


# -----------------------------------------------------------------------------
# stratified_sample
# -----------------------------------------------------------------------------

def test_size_and_uniqueness():
    arr = samples_to_array(_samples_dense_top())
    out = stratified_sample(arr, 50, 64, bands=16)
    assert out.dtype == SAMPLE_DTYPE
    assert out.size == 50
    keys = set(zip(out["x"].tolist(), out["y"].tolist()))
    assert len(keys) == 50


def test_deterministic_for_same_input():
    arr = samples_to_array(_samples_dense_top())
    a = stratified_sample(arr, 40, 64)
    b = stratified_sample(arr, 40, 64)
    assert a.tobytes() == b.tobytes()


def test_target_above_size_keeps_everything():
    samples = _samples_dense_top()
    out = stratified_resample(samples, len(samples) + 10, 64)
    assert sorted(s.coord for s in out) == sorted(s.coord for s in samples)


def test_duplicates_dropped():
    s = Sample(1, 1, (0.5, 0.5, 0.5, 1.0))
    out = stratified_resample([s, s, Sample(2, 2, (0.5, 0.5, 0.5, 1.0))], 10, 4)
    assert len(out) == 2


def test_all_black_uses_population():
    samples = [Sample(x, y, (0.0, 0.0, 0.0, 1.0)) for y in range(16) for x in range(4)]
    out = stratified_resample(samples, 16, 16, bands=4)
    assert len(out) == 16
    # each band of 4 rows gets an equal share
    bands = [s.y // 4 for s in out]
    assert all(bands.count(b) == 4 for b in range(4))


def test_empty_input():
    assert stratified_resample([], 10, 10) == []
    assert stratified_sample(np.zeros(0, dtype=SAMPLE_DTYPE), 10, 10).size == 0
