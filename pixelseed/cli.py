"""
pixelseed/cli.py
Command-line interface for pixelseed

Usage:
    python -m pixelseed sample --image input.png --count 2000 --strategy blue_noise
    python -m pixelseed preview --image input.png --count 2000 --output preview.png
    python -m pixelseed report --image input.png --count 2000
    python -m pixelseed list-strategies
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .config import DEFAULT_SEED, FORMAT_VERSION
from .models import Color, Sample, SamplingError, SamplingParams


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_hex_color(text: str) -> Color:
    """'#rrggbb' or 'rrggbb' -> opaque (r, g, b, 1.0) in [0, 1]."""
    value = text.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected a color like #ff8800, got {text!r}")
    r, g, b = (int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
    return (r, g, b, 1.0)


def load_params(path: Optional[str]) -> SamplingParams:
    if not path:
        return SamplingParams()
    with open(path) as f:
        return SamplingParams.from_dict(json.load(f))


def run_sampling(args: argparse.Namespace):
    """
    Load the image and run the requested strategy.

    Returns:
        (source, samples, params, fingerprint)
    """
    from .seeds import input_fingerprint
    from .source import load_image
    from .strategies import sample_pixels

    image_path = Path(args.image)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    data = image_path.read_bytes()
    source = load_image(data)
    params = load_params(args.params)
    dominant = [parse_hex_color(c) for c in (args.dominant or [])]

    samples = sample_pixels(
        args.strategy, source.width, source.height, args.count, source,
        params, dominant, seed=args.seed,
    )
    return source, samples, params, input_fingerprint(data)


def _run_or_report(args: argparse.Namespace) -> Tuple[Optional[tuple], int]:
    try:
        return run_sampling(args), 0
    except (SamplingError, OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return None, 1


def _print_summary(samples: List[Sample], width: int, height: int) -> None:
    from .artifacts import analyze

    report = analyze(samples, width, height)
    print(f"Samples:     {report.count}")
    print(f"Coverage:    {report.coverage_ratio:.2f} ({'ok' if report.coverage_ok else 'LOW'})")
    corners = ", ".join(k for k, v in report.corners.items() if not v) or "all covered"
    print(f"Corners:     {corners}")
    print(f"Clustered:   {100.0 * report.clustered_fraction:.1f}%")
    print(f"Top/bottom:  {report.top_count}/{report.bottom_count}")


def cmd_sample(args: argparse.Namespace) -> int:
    """Sample an image and print or export the result."""
    from .export import export_samples, samples_to_dict

    result, code = _run_or_report(args)
    if result is None:
        return code
    source, samples, params, fingerprint = result

    doc = samples_to_dict(
        samples, source.width, source.height,
        strategy=args.strategy, seed=args.seed, params=params, fingerprint=fingerprint,
    )
    if args.output:
        path = export_samples(doc, args.output)
        print(f"Wrote {len(samples)} samples to {path}")
    if args.json:
        print(json.dumps(doc, indent=2))
    elif not args.output:
        print(f"{args.strategy}: {source.width}x{source.height}, seed {args.seed}")
        _print_summary(samples, source.width, source.height)
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    """Render the samples over the image as a PNG."""
    from .export import render_preview

    result, code = _run_or_report(args)
    if result is None:
        return code
    source, samples, _, _ = result
    path = render_preview(samples, source, args.output)
    print(f"Preview: {path} ({len(samples)} samples)")
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """Print artifact validation for a sampling run."""
    from .artifacts import analyze

    result, code = _run_or_report(args)
    if result is None:
        return code
    source, samples, _, _ = result
    if args.json:
        print(json.dumps(analyze(samples, source.width, source.height).to_dict(), indent=2))
    else:
        _print_summary(samples, source.width, source.height)
    return 0


def cmd_list_strategies(args: argparse.Namespace) -> int:
    """List available sampling strategies."""
    from .strategies import get_all_strategies

    print("Registered sampling strategies:")
    print()

    by_family = {}
    for name, strategy in get_all_strategies().items():
        by_family.setdefault(strategy.definition.family, []).append(strategy.definition)

    for family, definitions in sorted(by_family.items()):
        print(f"[{family}]")
        for d in definitions:
            seeded = " (seeded)" if d.seeded else ""
            print(f"  {d.name}{seeded}")
            print(f"    {d.display_name}: {d.description}")
        print()
    return 0


def _add_sampling_args(p: argparse.ArgumentParser) -> None:
    from .strategies import DEFAULT_STRATEGY

    p.add_argument("--image", "-i", type=str, required=True, help="Input image path")
    p.add_argument("--count", "-c", type=int, required=True, help="Target sample count")
    p.add_argument("--strategy", "-m", type=str, default=DEFAULT_STRATEGY, help="Strategy name")
    p.add_argument("--seed", "-s", type=int, default=DEFAULT_SEED, help="Seed value")
    p.add_argument("--params", "-p", type=str, help="JSON file with sampling parameters")
    p.add_argument("--dominant", "-d", type=str, nargs="*", help="Dominant colors as #rrggbb")
    p.add_argument("--verbose", "-v", action="store_true", help="Show debug info")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="pixelseed",
        description="Pick representative pixel samples to seed particle effects",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {__version__} (format {FORMAT_VERSION})"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # sample command
    sample_parser = subparsers.add_parser("sample", help="Sample an image")
    _add_sampling_args(sample_parser)
    sample_parser.add_argument("--json", "-j", action="store_true", help="Print JSON")
    sample_parser.add_argument("--output", "-o", type=str, help="Write JSON export here")
    sample_parser.set_defaults(func=cmd_sample)

    # preview command
    preview_parser = subparsers.add_parser("preview", help="Render samples over the image")
    _add_sampling_args(preview_parser)
    preview_parser.add_argument("--output", "-o", type=str, required=True, help="Output .png")
    preview_parser.set_defaults(func=cmd_preview)

    # report command
    report_parser = subparsers.add_parser("report", help="Artifact report for a run")
    _add_sampling_args(report_parser)
    report_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    report_parser.set_defaults(func=cmd_report)

    # list-strategies command
    list_parser = subparsers.add_parser("list-strategies", help="List sampling strategies")
    list_parser.set_defaults(func=cmd_list_strategies)

    args = parser.parse_args(argv)
    setup_logging(getattr(args, "verbose", False))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
