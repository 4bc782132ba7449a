"""JSON manifest schema — the contract between CLI/API and engine."""

import json
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class RangeConfig:
    """Clip to convert. Unset bounds fall back to the default clip."""

    start: float | None = None
    end: float | None = None


@dataclass
class SettingsOverride:
    """User overrides applied on top of the recommended settings."""

    fps: int | None = None
    width: int | None = None
    quality: str | None = None


@dataclass
class ConversionManifest:
    """Top-level conversion manifest."""

    input: Path
    output: Path
    version: str = "1"
    range: RangeConfig = field(default_factory=RangeConfig)
    settings: SettingsOverride = field(default_factory=SettingsOverride)


def load_manifest(path: str | Path) -> ConversionManifest:
    """Load and validate a manifest from a JSON file."""
    path = Path(path)
    data = json.loads(path.read_text())

    if "input" not in data or "output" not in data:
        raise ValueError("Manifest must contain 'input' and 'output' fields")

    range_cfg = RangeConfig(**data["range"]) if "range" in data else RangeConfig()
    overrides = SettingsOverride(**data["settings"]) if "settings" in data else SettingsOverride()

    return ConversionManifest(
        version=data.get("version", "1"),
        input=Path(data["input"]),
        output=Path(data["output"]),
        range=range_cfg,
        settings=overrides,
    )
