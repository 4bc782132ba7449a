#!/usr/bin/env python3
"""Generate a synthetic test video for trying out GIF conversion.

Produces an 8-second 1280x720 clip cycling through four colored test
patterns, two seconds each, with a moving timestamp overlay so that frame-rate
changes are visible in the resulting GIF.
"""

import subprocess
import sys
from pathlib import Path


def generate_test_video(output: Path, width: int = 1280, height: int = 720) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)

    size = f"{width}x{height}"
    video_filter = (
        f"testsrc2=s={size}:d=2:r=30[v0];"
        f"color=c=red:s={size}:d=2:r=30[v1];"
        f"smptebars=s={size}:d=2:r=30[v2];"
        f"color=c=blue:s={size}:d=2:r=30[v3];"
        "[v0][v1][v2][v3]concat=n=4:v=1:a=0,"
        "drawbox=x='mod(t*200,iw)':y=ih/2-20:w=40:h=40:color=white:t=fill[vout]"
    )

    cmd = [
        "ffmpeg", "-y",
        "-filter_complex", video_filter,
        "-map", "[vout]",
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        str(output),
    ]
    subprocess.run(cmd, check=True)
    print(f"Generated: {output}")


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("tests/fixtures/synthetic.mp4")
    generate_test_video(out)
