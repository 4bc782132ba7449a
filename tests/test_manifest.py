"""Tests for manifest loading and validation."""

import json
from pathlib import Path

import pytest

from giftune.manifest import (
    ConversionManifest,
    RangeConfig,
    SettingsOverride,
    load_manifest,
)


class TestRangeConfig:
    def test_defaults(self):
        cfg = RangeConfig()
        assert cfg.start is None
        assert cfg.end is None


class TestSettingsOverride:
    def test_defaults(self):
        cfg = SettingsOverride()
        assert cfg.fps is None
        assert cfg.width is None
        assert cfg.quality is None

    def test_custom_values(self):
        cfg = SettingsOverride(fps=12, width=480)
        assert cfg.fps == 12
        assert cfg.width == 480


class TestConversionManifest:
    def test_minimal(self):
        m = ConversionManifest(input=Path("in.mp4"), output=Path("out.gif"))
        assert m.version == "1"
        assert m.range == RangeConfig()
        assert m.settings == SettingsOverride()


class TestLoadManifest:
    def test_load_sample(self, sample_manifest_path: Path):
        m = load_manifest(sample_manifest_path)
        assert m.version == "1"
        assert m.input == Path("video.mp4")
        assert m.output == Path("video.gif")
        assert m.range == RangeConfig(start=2.0, end=6.5)
        assert m.settings.fps == 12
        assert m.settings.quality == "medium"
        assert m.settings.width is None

    def test_load_invalid_json(self, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text("not json")
        with pytest.raises(json.JSONDecodeError):
            load_manifest(bad)

    def test_load_missing_fields(self, tmp_path: Path):
        incomplete = tmp_path / "incomplete.json"
        incomplete.write_text('{"version": "1"}')
        with pytest.raises(ValueError, match="must contain"):
            load_manifest(incomplete)
