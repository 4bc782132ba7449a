"""Thin CLI entry point — builds a ConversionManifest and calls the engine."""

import argparse
import logging
import subprocess
import sys
from pathlib import Path

from giftune import ffutil
from giftune.engine import process, recommend, resolve_time_range
from giftune.manifest import (
    ConversionManifest,
    RangeConfig,
    SettingsOverride,
    load_manifest,
)
from giftune.models import QUALITY_TIERS
from giftune.validation import format_file_size, format_time, parse_time


def _add_clip_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--start", type=parse_time, help="Clip start (SS, MM:SS or HH:MM:SS)")
    p.add_argument("--end", type=parse_time, help="Clip end (SS, MM:SS or HH:MM:SS)")
    p.add_argument("--fps", type=int, help="Override the recommended frame rate")
    p.add_argument("--width", type=int, help="Override the recommended width (height follows)")
    p.add_argument("--quality", choices=QUALITY_TIERS, help="Apply a size preset (480/720/1080px)")


def _overrides(args: argparse.Namespace) -> SettingsOverride:
    return SettingsOverride(fps=args.fps, width=args.width, quality=args.quality)


def _estimate(args: argparse.Namespace) -> None:
    ffutil.check_ffmpeg()
    metadata = ffutil.probe(args.video)
    time_range = resolve_time_range(metadata, RangeConfig(start=args.start, end=args.end))
    settings, report = recommend(metadata, time_range, _overrides(args))

    print(f"Source: {metadata.file_name} {metadata.width}x{metadata.height}, "
          f"{format_time(metadata.duration)}, {format_file_size(metadata.size_bytes)}")
    print(f"Clip:   {format_time(time_range.start)} -> {format_time(time_range.end)} "
          f"({time_range.duration:.1f}s)")
    print(f"GIF:    {settings.fps} fps, {settings.width}x{settings.height} ({settings.quality})")
    print(f"Estimated size: {report.label}")
    if report.exceeds_budget:
        print("Warning: estimated size exceeds the 1MB target.")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="giftune",
        description="giftune — turn a video clip into a GIF that fits a 1MB budget.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    est = sub.add_parser("estimate", help="Show recommended GIF settings for a clip")
    est.add_argument("video", type=Path, help="Input video file")
    _add_clip_options(est)

    conv = sub.add_parser("convert", help="Convert a clip to GIF")
    conv.add_argument("video", nargs="?", type=Path, help="Input video file")
    conv.add_argument("--manifest", "-m", type=Path, help="Path to a JSON manifest file")
    conv.add_argument("--output", "-o", type=Path, help="Output GIF path")
    _add_clip_options(conv)

    serve = sub.add_parser("serve", help="Launch the web UI")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from giftune.web import create_app
        app = create_app()
        print(f"giftune web UI: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    try:
        if args.command == "estimate":
            _estimate(args)
            return

        if args.manifest:
            m = load_manifest(args.manifest)
        elif args.video:
            m = ConversionManifest(
                input=args.video,
                output=args.output or args.video.with_suffix(".gif"),
                range=RangeConfig(start=args.start, end=args.end),
                settings=_overrides(args),
            )
        else:
            print("Error: provide either a VIDEO argument or --manifest.", file=sys.stderr)
            sys.exit(1)

        def on_progress(stage: str, frac: float) -> None:
            print(f"  [{frac:3.0%}] {stage}")

        result = process(m, on_progress=on_progress)
    except (ValueError, RuntimeError, subprocess.CalledProcessError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    s = result.settings
    print()
    print(f"Done! Output: {result.output_path}")
    print(f"  Clip: {result.time_range.start:.1f}s -> {result.time_range.end:.1f}s")
    print(f"  GIF: {s.fps} fps, {s.width}x{s.height} ({s.quality})")
    print(f"  Size: {format_file_size(result.actual_bytes)} (estimated {result.estimate_label})")
    if result.exceeds_budget:
        print("  Warning: estimated size exceeded the 1MB target.")
