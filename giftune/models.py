"""Shared data types used across giftune."""

from dataclasses import dataclass

QUALITY_TIERS = ("low", "medium", "high")


@dataclass
class TimeRange:
    """A start/end time pair in seconds."""

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class VideoMetadata:
    """Metadata of a source video, extracted once per loaded file."""

    duration: float
    width: int
    height: int
    size_bytes: int
    file_name: str
    mime_type: str
    fps: float | None = None
    codec_video: str | None = None

    @property
    def aspect_ratio(self) -> float:
        return self.height / self.width


@dataclass
class GifSettings:
    """Output parameters handed to the GIF encoder."""

    fps: int
    width: int
    height: int
    quality: str = "medium"
