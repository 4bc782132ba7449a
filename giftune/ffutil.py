"""FFmpeg/ffprobe subprocess helpers."""

import json
import logging
import mimetypes
import shutil
import subprocess
from pathlib import Path
from typing import Callable

from giftune.models import GifSettings, TimeRange, VideoMetadata

logger = logging.getLogger(__name__)


class FFmpegNotFoundError(RuntimeError):
    pass


class ConversionError(RuntimeError):
    """Raised when ffmpeg fails to produce the GIF."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


def check_ffmpeg() -> None:
    """Raise FFmpegNotFoundError if ffmpeg/ffprobe are not on PATH."""
    for cmd in ("ffmpeg", "ffprobe"):
        if shutil.which(cmd) is None:
            raise FFmpegNotFoundError(f"{cmd} not found on PATH")


def _parse_rate(rate: str | None) -> float | None:
    if not rate:
        return None
    num, _, den = rate.partition("/")
    try:
        if not den:
            return float(num)
        if float(den) == 0:
            return None
        return float(num) / float(den)
    except ValueError:
        return None


def probe(input_path: Path) -> VideoMetadata:
    """Extract video metadata via ffprobe."""
    cmd = [
        "ffprobe",
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(input_path),
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    data = json.loads(result.stdout)

    video_stream = next(
        (s for s in data.get("streams", []) if s.get("codec_type") == "video"), None
    )
    if video_stream is None:
        raise ValueError(f"No video stream found in {input_path}")

    fmt = data.get("format", {})
    size_bytes = int(fmt["size"]) if "size" in fmt else input_path.stat().st_size
    mime_type, _ = mimetypes.guess_type(input_path.name)

    return VideoMetadata(
        duration=float(fmt["duration"]),
        width=int(video_stream["width"]),
        height=int(video_stream["height"]),
        size_bytes=size_bytes,
        file_name=input_path.name,
        mime_type=mime_type or "application/octet-stream",
        fps=_parse_rate(video_stream.get("avg_frame_rate"))
        or _parse_rate(video_stream.get("r_frame_rate")),
        codec_video=video_stream.get("codec_name"),
    )


def build_gif_command(
    input_path: Path,
    output_path: Path,
    time_range: TimeRange,
    settings: GifSettings,
) -> list[str]:
    """Build the ffmpeg command that encodes *time_range* as a GIF."""
    return [
        "ffmpeg", "-y",
        "-hide_banner", "-loglevel", "error",
        "-i", str(input_path),
        "-ss", str(time_range.start),
        "-t", str(time_range.duration),
        "-vf", f"fps={settings.fps},scale={settings.width}:-1:flags=lanczos",
        "-gifflags", "+transdiff",
        "-progress", "pipe:1",
        "-nostats",
        str(output_path),
    ]


def parse_progress_line(line: str, total_duration_us: float) -> float | None:
    """Turn one line of ``-progress`` output into a fraction in [0, 1].

    ffmpeg reports ``out_time_ms`` in microseconds despite its name, so both
    keys are read the same way.
    """
    key, sep, value = line.strip().partition("=")
    if not sep or key not in ("out_time_us", "out_time_ms"):
        return None
    if total_duration_us <= 0:
        return None
    try:
        out_time_us = int(value)
    except ValueError:
        return None
    return max(0.0, min(out_time_us / total_duration_us, 1.0))


def convert_to_gif(
    input_path: Path,
    output_path: Path,
    time_range: TimeRange,
    settings: GifSettings,
    on_progress: Callable[[float], None] | None = None,
) -> Path:
    """Encode the clip to a GIF, reporting fractional progress."""
    cmd = build_gif_command(input_path, output_path, time_range, settings)
    total_duration_us = time_range.duration * 1_000_000
    logger.debug("Running %s", " ".join(cmd))

    process = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    # stderr is read only after stdout closes; -loglevel error keeps it short.
    for line in process.stdout:
        frac = parse_progress_line(line, total_duration_us)
        if frac is not None and on_progress:
            on_progress(frac)
    stderr = process.stderr.read()
    returncode = process.wait()

    if returncode != 0:
        logger.error("ffmpeg exited with %d for %s", returncode, input_path)
        tail = stderr.strip()[-500:]
        raise ConversionError(
            f"ffmpeg failed to encode GIF (rc={returncode}): {tail}"
            if tail
            else f"ffmpeg failed to encode GIF (rc={returncode})",
            stderr=stderr,
        )

    if on_progress:
        on_progress(1.0)
    return output_path
