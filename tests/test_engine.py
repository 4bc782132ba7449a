"""Tests for the engine module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from giftune.engine import (
    EngineResult,
    apply_overrides,
    process,
    recommend,
    resolve_time_range,
)
from giftune.manifest import ConversionManifest, RangeConfig, SettingsOverride
from giftune.models import GifSettings, TimeRange
from tests.conftest import make_metadata


class TestEngineResult:
    def test_defaults(self):
        r = EngineResult(
            output_path=Path("out.gif"),
            settings=GifSettings(fps=10, width=320, height=180),
            time_range=TimeRange(start=0.0, end=3.0),
        )
        assert r.estimated_bytes == 0.0
        assert r.estimate_label == ""
        assert r.exceeds_budget is False
        assert r.actual_bytes == 0


class TestResolveTimeRange:
    def test_default_clip(self):
        meta = make_metadata(duration=30.0)
        assert resolve_time_range(meta, RangeConfig()) == TimeRange(0.0, 5.0)

    def test_start_only(self):
        meta = make_metadata(duration=30.0)
        assert resolve_time_range(meta, RangeConfig(start=27.0)) == TimeRange(27.0, 30.0)

    def test_explicit(self):
        meta = make_metadata(duration=30.0)
        assert resolve_time_range(meta, RangeConfig(start=2.0, end=4.0)) == TimeRange(2.0, 4.0)

    def test_invalid_raises(self):
        meta = make_metadata(duration=30.0)
        with pytest.raises(ValueError, match="End time exceeds video duration"):
            resolve_time_range(meta, RangeConfig(start=2.0, end=40.0))


class TestOverrides:
    def test_order_preset_then_width_then_fps(self):
        meta = make_metadata(width=1920, height=1080)
        base = GifSettings(fps=10, width=320, height=180, quality="low")
        result = apply_overrides(base, meta, SettingsOverride(fps=12, width=600, quality="high"))
        assert result == GifSettings(fps=12, width=600, height=338, quality="high")

    def test_no_overrides(self):
        meta = make_metadata()
        base = GifSettings(fps=10, width=320, height=180, quality="low")
        assert apply_overrides(base, meta, SettingsOverride()) == base

    def test_recommend_reports_override(self):
        meta = make_metadata(width=640, height=360, duration=3.0)
        settings, report = recommend(meta, TimeRange(0.0, 3.0), SettingsOverride(width=480))
        assert (settings.width, settings.height) == (480, 270)
        assert report.exceeds_budget is True


class TestProcess:
    @patch("giftune.engine.ffutil.convert_to_gif")
    @patch("giftune.engine.ffutil.probe")
    @patch("giftune.engine.ffutil.check_ffmpeg")
    def test_pipeline(self, mock_check, mock_probe, mock_convert, tmp_path):
        mock_probe.return_value = make_metadata(width=640, height=360, duration=3.0)

        def fake_convert(input_path, output_path, time_range, settings, on_progress=None):
            output_path.write_bytes(b"GIF89a" + b"\0" * 994)
            on_progress(0.5)
            return output_path

        mock_convert.side_effect = fake_convert
        manifest = ConversionManifest(input=tmp_path / "in.mp4", output=tmp_path / "out.gif")
        stages: list[tuple[str, float]] = []

        result = process(manifest, on_progress=lambda s, f: stages.append((s, f)))

        assert result.settings == GifSettings(fps=10, width=320, height=180, quality="low")
        assert result.time_range == TimeRange(0.0, 3.0)
        assert result.estimate_label == "~0.7MB"
        assert result.exceeds_budget is False
        assert result.actual_bytes == 1000
        assert ("Encoding GIF", pytest.approx(0.525)) in stages
        assert stages[-1] == ("Done", 1.0)
        mock_check.assert_called_once()

    @patch("giftune.engine.ffutil.convert_to_gif")
    @patch("giftune.engine.ffutil.probe")
    @patch("giftune.engine.ffutil.check_ffmpeg")
    def test_invalid_range_stops_before_encoding(self, mock_check, mock_probe, mock_convert):
        mock_probe.return_value = make_metadata(duration=3.0)
        manifest = ConversionManifest(
            input=Path("in.mp4"),
            output=Path("out.gif"),
            range=RangeConfig(start=5.0, end=6.0),
        )
        with pytest.raises(ValueError, match="Start time is out of range"):
            process(manifest)
        mock_convert.assert_not_called()
