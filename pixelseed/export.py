"""
pixelseed/export.py
Sample export

- JSON document (format version, image fingerprint, seed, strategy, params,
  samples, artifact report)
- PNG preview: samples drawn over a dimmed copy of the source image
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from .artifacts import analyze
from .config import FORMAT_VERSION
from .models import Sample, SamplingParams
from .source import ArrayPixelSource

# Preview background brightness and marker half-size
PREVIEW_DIM = 0.25
MARKER_RADIUS = 1


def samples_to_dict(
    samples: Sequence[Sample],
    width: int,
    height: int,
    *,
    strategy: str,
    seed: int,
    params: SamplingParams,
    fingerprint: Optional[str] = None,
) -> Dict:
    """Build the JSON-ready export document."""
    return {
        "format_version": FORMAT_VERSION,
        "generated_at": datetime.now().isoformat(),
        "image": {
            "width": width,
            "height": height,
            "fingerprint": fingerprint,
        },
        "strategy": strategy,
        "seed": seed,
        "params": params.to_dict(),
        "count": len(samples),
        "report": analyze(samples, width, height).to_dict(),
        "samples": [s.to_dict() for s in samples],
    }


def export_samples(doc: Dict, path: Union[str, Path]) -> Path:
    """Write an export document as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(doc, f, indent=2)
    return path


def load_samples(path: Union[str, Path]) -> List[Sample]:
    with open(path) as f:
        doc = json.load(f)
    return [Sample.from_dict(d) for d in doc["samples"]]


def render_preview(
    samples: Sequence[Sample],
    source: ArrayPixelSource,
    path: Union[str, Path],
) -> Path:
    """
    Save a PNG with each sample drawn as a small square in its own color
    over the dimmed image.
    """
    from PIL import Image

    rgba = np.asarray(source.rgba, dtype=np.float32)
    canvas = rgba[..., :3] * PREVIEW_DIM
    h, w = canvas.shape[:2]
    for s in samples:
        color = np.asarray(s.color[:3], dtype=np.float32)
        a = s.color[3]
        if a > 0.0:
            color = np.clip(color / a, 0.0, 1.0)
        y0, y1 = max(0, s.y - MARKER_RADIUS), min(h, s.y + MARKER_RADIUS + 1)
        x0, x1 = max(0, s.x - MARKER_RADIUS), min(w, s.x + MARKER_RADIUS + 1)
        canvas[y0:y1, x0:x1] = color

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray((canvas * 255.0 + 0.5).astype(np.uint8)).save(path)
    return path
