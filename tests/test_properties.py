"""Property-based tests for size estimation and the optimizer."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from giftune.budget import exceeds_budget
from giftune.models import TimeRange
from giftune.optimizer import BASELINE_FPS, optimize_settings
from giftune.sizing import (
    COMMON_WIDTHS,
    MAX_TARGET_SIZE,
    estimate_size,
    snap_to_common_width,
)
from tests.conftest import make_metadata

pytestmark = pytest.mark.property

dims = st.integers(min_value=1, max_value=4096)
durations = st.floats(min_value=0.01, max_value=600.0, allow_nan=False)
rates = st.integers(min_value=1, max_value=60)


@st.composite
def sources(draw):
    """A source video plus a clip inside it."""
    width = draw(st.integers(min_value=64, max_value=4096))
    height = draw(st.integers(min_value=64, max_value=4096))
    duration = draw(st.floats(min_value=0.1, max_value=600.0, allow_nan=False))
    start = draw(st.floats(min_value=0.0, max_value=duration * 0.9, allow_nan=False))
    end = draw(st.floats(min_value=start + duration * 0.01, max_value=duration, allow_nan=False))
    return make_metadata(width=width, height=height, duration=duration), TimeRange(start, end)


class TestEstimateProperties:
    @given(w=dims, h=dims, d=durations, fps=rates, extra=st.integers(min_value=0, max_value=500))
    def test_monotonic_in_each_input(self, w, h, d, fps, extra):
        base = estimate_size(w, h, d, fps)
        assert estimate_size(w + extra, h, d, fps) >= base
        assert estimate_size(w, h + extra, d, fps) >= base
        assert estimate_size(w, h, d + extra, fps) >= base
        assert estimate_size(w, h, d, fps + extra) >= base


class TestSnapProperties:
    @given(width=st.integers(min_value=320, max_value=10_000))
    def test_snaps_to_common_width_not_above(self, width):
        snapped = snap_to_common_width(width)
        assert snapped <= width
        assert snapped in COMMON_WIDTHS

    @given(width=st.integers(min_value=-100, max_value=319))
    def test_small_widths_floor_at_64(self, width):
        assert snap_to_common_width(width) == max(64, width)


class TestOptimizerProperties:
    @given(source=sources())
    @settings(max_examples=200)
    def test_never_upscales(self, source):
        meta, time_range = source
        result = optimize_settings(meta, time_range)
        assert result.width <= meta.width

    @given(source=sources())
    def test_deterministic(self, source):
        meta, time_range = source
        assert optimize_settings(meta, time_range) == optimize_settings(meta, time_range)

    @given(source=sources())
    def test_baseline_result_is_within_budget(self, source):
        meta, time_range = source
        result = optimize_settings(meta, time_range)
        if result.fps == BASELINE_FPS:
            assert result.width == meta.width
            assert not exceeds_budget(result, time_range.duration)

    @given(source=sources())
    def test_exceeds_budget_matches_estimate(self, source):
        meta, time_range = source
        result = optimize_settings(meta, time_range)
        estimated = estimate_size(result.width, result.height, time_range.duration, result.fps)
        assert exceeds_budget(result, time_range.duration) == (estimated > MAX_TARGET_SIZE)
