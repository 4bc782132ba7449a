"""Recommend GIF settings that keep the estimated size under budget."""

from dataclasses import replace

from giftune.models import QUALITY_TIERS, GifSettings, TimeRange, VideoMetadata
from giftune.sizing import (
    MAX_TARGET_SIZE,
    estimate_size,
    round_half_up,
    snap_to_common_width,
)

BASELINE_FPS = 15
REDUCED_FPS = 10
MIN_FPS = 8

# Width applied when the user picks a quality preset.
QUALITY_PRESET_WIDTHS = {"low": 480, "medium": 720, "high": 1080}


def quality_tier_for_width(width: int) -> str:
    """Classify a final output width as a display-only quality label."""
    if width >= 720:
        return "high"
    if width >= 480:
        return "medium"
    return "low"


def _height_for(width: int, metadata: VideoMetadata) -> int:
    return round_half_up(width * metadata.aspect_ratio)


def optimize_settings(metadata: VideoMetadata, time_range: TimeRange) -> GifSettings:
    """Pick fps/width/height for *time_range* of the source video.

    A source that already fits the budget at the baseline frame rate is
    returned at full size. Otherwise the strategies below run in order and
    stop as soon as the estimate is within ``MAX_TARGET_SIZE``:

    1. drop to ``REDUCED_FPS``;
    2. scale the width by ``sqrt(MAX / estimate)`` and snap it to a common
       width;
    3. lower the frame rate proportionally, floored at ``MIN_FPS``.

    The result of the last strategy is returned as is, even when it is still
    over budget.
    """
    duration = time_range.duration

    fps = BASELINE_FPS
    width = metadata.width
    height = _height_for(width, metadata)
    estimated = estimate_size(width, height, duration, fps)

    if estimated <= MAX_TARGET_SIZE:
        return GifSettings(fps=fps, width=width, height=height, quality="high")

    fps = REDUCED_FPS
    estimated = estimate_size(width, height, duration, fps)

    if estimated > MAX_TARGET_SIZE:
        # Size is bilinear in width and height, hence the square root.
        scale_factor = (MAX_TARGET_SIZE / estimated) ** 0.5
        width = snap_to_common_width(round_half_up(metadata.width * scale_factor))
        height = _height_for(width, metadata)
        estimated = estimate_size(width, height, duration, fps)

    if estimated > MAX_TARGET_SIZE and fps > REDUCED_FPS:
        fps = max(MIN_FPS, round_half_up(fps * (MAX_TARGET_SIZE / estimated)))

    return GifSettings(
        fps=fps, width=width, height=height, quality=quality_tier_for_width(width)
    )


def with_width(settings: GifSettings, metadata: VideoMetadata, width: int) -> GifSettings:
    """Return *settings* at a new width, with height following the aspect ratio."""
    return replace(settings, width=width, height=_height_for(width, metadata))


def with_fps(settings: GifSettings, fps: int) -> GifSettings:
    return replace(settings, fps=fps)


def with_quality_preset(
    settings: GifSettings, metadata: VideoMetadata, quality: str
) -> GifSettings:
    """Apply one of the low/medium/high size presets."""
    if quality not in QUALITY_TIERS:
        raise ValueError(
            f"Unknown quality tier {quality!r}; expected one of {', '.join(QUALITY_TIERS)}"
        )
    width = QUALITY_PRESET_WIDTHS[quality]
    return replace(
        settings, width=width, height=_height_for(width, metadata), quality=quality
    )


def rescale_for(settings: GifSettings, metadata: VideoMetadata) -> GifSettings:
    """Recompute height after the source metadata changed."""
    return with_width(settings, metadata, settings.width)
