"""Live size feedback for the currently chosen (possibly overridden) settings."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from giftune.models import GifSettings
from giftune.sizing import MAX_TARGET_SIZE, estimate_size, round_half_up

# Below this many MiB the label switches to kilobytes.
KB_LABEL_THRESHOLD_MB = 0.1


@dataclass
class BudgetReport:
    estimated_bytes: float
    label: str
    exceeds_budget: bool


def _estimate(settings: GifSettings, duration: float) -> float:
    return estimate_size(settings.width, settings.height, duration, settings.fps)


def estimate_label(settings: GifSettings, duration: float) -> str:
    """Human-readable estimate, e.g. ``~9KB`` or ``~0.9MB``.

    Both units round halves up, so 0.25 MiB reads ``~0.3MB``.
    """
    estimated_bytes = _estimate(settings, duration)
    estimated_mb = estimated_bytes / (1024 * 1024)

    if estimated_mb < KB_LABEL_THRESHOLD_MB:
        return f"~{round_half_up(estimated_bytes / 1024)}KB"
    tenths = Decimal(estimated_mb).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"~{tenths}MB"


def exceeds_budget(settings: GifSettings, duration: float) -> bool:
    """True when *settings* would likely produce a GIF over the size budget."""
    return _estimate(settings, duration) > MAX_TARGET_SIZE


def evaluate(settings: GifSettings, duration: float) -> BudgetReport:
    return BudgetReport(
        estimated_bytes=_estimate(settings, duration),
        label=estimate_label(settings, duration),
        exceeds_budget=exceeds_budget(settings, duration),
    )
