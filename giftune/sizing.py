"""GIF size model and common-width snapping.

The constants here are empirical tuning knobs. Their values must stay as they
are so that estimates match what users already see.
"""

import math

# Bytes per pixel per frame for a typical palette-compressed GIF.
COMPRESSION_FACTOR = 0.4

TARGET_SIZE_BYTES = 1 * 1024 * 1024
GRACE_PERCENTAGE = 0.05
MAX_TARGET_SIZE = TARGET_SIZE_BYTES * (1 + GRACE_PERCENTAGE)

COMMON_WIDTHS = (320, 480, 640, 720, 1080)
MIN_WIDTH = 64


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def estimate_size(
    width: float, height: float, duration_seconds: float, fps: float
) -> float:
    """Predict the GIF byte size for the given dimensions, length and rate."""
    total_frames = duration_seconds * fps
    pixels_per_frame = width * height
    return total_frames * pixels_per_frame * COMPRESSION_FACTOR


def snap_to_common_width(width: int) -> int:
    """Return the largest common width <= *width*, never going below 64px."""
    for common in reversed(COMMON_WIDTHS):
        if common <= width:
            return common
    return max(MIN_WIDTH, width)
