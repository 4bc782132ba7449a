"""Upload and time-range checks, plus small formatting helpers."""

import math
from dataclasses import dataclass

from giftune.models import TimeRange

ACCEPTED_VIDEO_FORMATS = (
    "video/mp4",
    "video/webm",
    "video/quicktime",
    "video/x-msvideo",
)
LARGE_FILE_WARNING_BYTES = 100 * 1024 * 1024
LONG_CLIP_WARNING_SECONDS = 10.0
DEFAULT_CLIP_SECONDS = 5.0


@dataclass
class ValidationResult:
    """Outcome of a check. ``message`` is an error when invalid, a warning otherwise."""

    valid: bool
    message: str | None = None


def validate_video_file(mime_type: str, size_bytes: int) -> ValidationResult:
    if mime_type not in ACCEPTED_VIDEO_FORMATS:
        return ValidationResult(
            valid=False,
            message="Invalid file type. Please upload MP4, WebM, MOV, or AVI files.",
        )

    if size_bytes > LARGE_FILE_WARNING_BYTES:
        return ValidationResult(
            valid=True,
            message=(
                f"Warning: File size is {size_bytes / 1024 / 1024:.2f}MB. "
                "Large files may take longer to process."
            ),
        )

    return ValidationResult(valid=True)


def validate_time_range(start: float, end: float, duration: float) -> ValidationResult:
    """Check ``0 <= start < end <= duration``; warn about long clips."""
    if start < 0 or start >= duration:
        return ValidationResult(valid=False, message="Start time is out of range")
    if end <= start:
        return ValidationResult(valid=False, message="End time must be after start time")
    if end > duration:
        return ValidationResult(valid=False, message="End time exceeds video duration")

    clip_seconds = end - start
    if clip_seconds > LONG_CLIP_WARNING_SECONDS:
        return ValidationResult(
            valid=True,
            message=(
                f"Warning: {clip_seconds:.1f}s duration may result in a large GIF file. "
                "Consider keeping it under 10 seconds."
            ),
        )

    return ValidationResult(valid=True)


def default_time_range(duration: float) -> TimeRange:
    """The clip selected right after a video is loaded."""
    return TimeRange(start=0.0, end=min(duration, DEFAULT_CLIP_SECONDS))


def format_time(seconds: float) -> str:
    hrs = int(seconds // 3600)
    mins = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hrs > 0:
        return f"{hrs:02d}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def parse_time(text: str) -> float:
    """Parse ``HH:MM:SS``, ``MM:SS`` or plain seconds into seconds."""
    parts = text.strip().split(":")
    if len(parts) > 3:
        raise ValueError(f"Invalid time string: {text!r}")
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise ValueError(f"Invalid time string: {text!r}") from None

    seconds = 0.0
    for value in values:
        seconds = seconds * 60 + value
    return seconds


def format_file_size(size_bytes: int) -> str:
    if size_bytes == 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(units) - 1)
    value = round(size_bytes / 1024**i, 2)
    return f"{value:g} {units[i]}"
