"""Orchestrator — turns a ConversionManifest into a size-budgeted GIF."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from giftune import ffutil
from giftune.budget import BudgetReport, evaluate
from giftune.manifest import ConversionManifest, RangeConfig, SettingsOverride
from giftune.models import GifSettings, TimeRange, VideoMetadata
from giftune.optimizer import (
    optimize_settings,
    with_fps,
    with_quality_preset,
    with_width,
)
from giftune.validation import default_time_range, validate_time_range

logger = logging.getLogger(__name__)


@dataclass
class EngineResult:
    output_path: Path
    settings: GifSettings
    time_range: TimeRange
    estimated_bytes: float = 0.0
    estimate_label: str = ""
    exceeds_budget: bool = False
    actual_bytes: int = 0


def resolve_time_range(metadata: VideoMetadata, range_cfg: RangeConfig) -> TimeRange:
    """Fill unset bounds from the default clip and validate the result."""
    default = default_time_range(metadata.duration)
    start = range_cfg.start if range_cfg.start is not None else default.start
    if range_cfg.end is not None:
        end = range_cfg.end
    elif range_cfg.start is not None:
        end = min(metadata.duration, start + (default.end - default.start))
    else:
        end = default.end

    check = validate_time_range(start, end, metadata.duration)
    if not check.valid:
        raise ValueError(check.message)
    if check.message:
        logger.warning(check.message)
    return TimeRange(start=start, end=end)


def apply_overrides(
    settings: GifSettings, metadata: VideoMetadata, overrides: SettingsOverride
) -> GifSettings:
    """Apply quality preset, then width, then fps."""
    if overrides.quality is not None:
        settings = with_quality_preset(settings, metadata, overrides.quality)
    if overrides.width is not None:
        settings = with_width(settings, metadata, overrides.width)
    if overrides.fps is not None:
        settings = with_fps(settings, overrides.fps)
    return settings


def recommend(
    metadata: VideoMetadata,
    time_range: TimeRange,
    overrides: SettingsOverride | None = None,
) -> tuple[GifSettings, BudgetReport]:
    """Recommended (optionally overridden) settings plus their size estimate."""
    settings = optimize_settings(metadata, time_range)
    if overrides is not None:
        settings = apply_overrides(settings, metadata, overrides)
    return settings, evaluate(settings, time_range.duration)


def process(
    manifest: ConversionManifest,
    on_progress: Callable[[str, float], None] | None = None,
) -> EngineResult:
    """Execute the full conversion pipeline.

    Args:
        manifest: Validated conversion manifest.
        on_progress: Optional callback(stage_name, fraction_complete).
    """

    def _progress(stage: str, frac: float) -> None:
        if on_progress:
            on_progress(stage, frac)

    def _sub_progress(stage: str, base: float, span: float):
        """Return a callback that maps ffmpeg's [0,1] to [base, base+span]."""
        def cb(frac: float) -> None:
            _progress(stage, base + frac * span)
        return cb

    ffutil.check_ffmpeg()

    _progress("Probing video metadata", 0.0)
    metadata = ffutil.probe(manifest.input)
    logger.info(
        "Probed %s: %dx%d, %.2fs", metadata.file_name, metadata.width,
        metadata.height, metadata.duration,
    )

    time_range = resolve_time_range(metadata, manifest.range)
    _progress("Choosing GIF settings", 0.05)
    settings, report = recommend(metadata, time_range, manifest.settings)
    logger.info(
        "Settings: %d fps, %dx%d (%s), estimated %s",
        settings.fps, settings.width, settings.height, settings.quality, report.label,
    )
    if report.exceeds_budget:
        logger.warning("Estimated size %s exceeds the target budget", report.label)

    _progress("Encoding GIF", 0.10)
    ffutil.convert_to_gif(
        manifest.input,
        manifest.output,
        time_range,
        settings,
        on_progress=_sub_progress("Encoding GIF", 0.10, 0.85),
    )

    _progress("Verifying result", 0.95)
    actual_bytes = manifest.output.stat().st_size

    _progress("Done", 1.0)
    return EngineResult(
        output_path=manifest.output,
        settings=settings,
        time_range=time_range,
        estimated_bytes=report.estimated_bytes,
        estimate_label=report.label,
        exceeds_budget=report.exceeds_budget,
        actual_bytes=actual_bytes,
    )
