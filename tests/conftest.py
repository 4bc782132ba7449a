"""Shared test fixtures."""

from pathlib import Path

import pytest

from giftune.models import VideoMetadata

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_manifest_path() -> Path:
    return FIXTURES_DIR / "sample_manifest.json"


def make_metadata(
    width: int = 1920, height: int = 1080, duration: float = 30.0
) -> VideoMetadata:
    return VideoMetadata(
        duration=duration,
        width=width,
        height=height,
        size_bytes=5 * 1024 * 1024,
        file_name="clip.mp4",
        mime_type="video/mp4",
        fps=30.0,
        codec_video="h264",
    )
