from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lutmerge.chain.compositor import BAKE_SIZE
from lutmerge.lut.cube import DEFAULT_MERGED_TITLE


@dataclass
class ExportConfig:
    bake_size: int = BAKE_SIZE
    merged_title: str = DEFAULT_MERGED_TITLE
    output_prefix: str = "edited_"
    jpeg_quality: int = 95


@dataclass
class ThumbnailConfig:
    width: int = 480
    height: int = 270
    jpeg_quality: int = 95


@dataclass
class AppConfig:
    export: ExportConfig = field(default_factory=ExportConfig)
    thumbnail: ThumbnailConfig = field(default_factory=ThumbnailConfig)
    log_level: str = "INFO"
    log_file: Path | None = None


def _expand_path(value: str | None, base: Path) -> Path | None:
    if value in (None, ""):
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"config section {key!r} must be a mapping")
    return value


def _quality(value: Any, key: str) -> int:
    quality = int(value)
    if not 1 <= quality <= 100:
        raise ValueError(f"{key} must be between 1 and 100, got {quality}")
    return quality


def validate_config(config: AppConfig) -> AppConfig:
    if config.export.bake_size < 2:
        raise ValueError(f"export.bake_size must be at least 2, got {config.export.bake_size}")
    if config.thumbnail.width <= 0 or config.thumbnail.height <= 0:
        raise ValueError("thumbnail.width and thumbnail.height must be positive")
    _quality(config.export.jpeg_quality, "export.jpeg_quality")
    _quality(config.thumbnail.jpeg_quality, "thumbnail.jpeg_quality")
    return config


def default_config() -> AppConfig:
    return AppConfig()


def load_config(path: str | Path | None) -> AppConfig:
    if path is None:
        return default_config()

    try:
        import yaml  # type: ignore
    except Exception as exc:
        raise RuntimeError("PyYAML is required for config loading. Install with: pip install PyYAML") from exc

    cfg_path = Path(path).expanduser().resolve()
    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config root must be a mapping: {cfg_path}")

    base = cfg_path.parent
    export_raw = _section(raw, "export")
    thumb_raw = _section(raw, "thumbnail")

    export = ExportConfig(
        bake_size=int(export_raw.get("bake_size", BAKE_SIZE)),
        merged_title=str(export_raw.get("merged_title", DEFAULT_MERGED_TITLE)),
        output_prefix=str(export_raw.get("output_prefix", "edited_")),
        jpeg_quality=int(export_raw.get("jpeg_quality", 95)),
    )
    thumbnail = ThumbnailConfig(
        width=int(thumb_raw.get("width", 480)),
        height=int(thumb_raw.get("height", 270)),
        jpeg_quality=int(thumb_raw.get("jpeg_quality", 95)),
    )

    app = AppConfig(
        export=export,
        thumbnail=thumbnail,
        log_level=str(raw.get("log_level", "INFO")),
        log_file=_expand_path(raw.get("log_file"), base),
    )
    return validate_config(app)
