"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from luminaria.common.errors import ConfigError
from luminaria.common.fs import read_yaml
from luminaria.common.schema import validate_settings_config

SETTINGS_FILENAME = "settings.yml"

DEFAULT_IMAGERY = {
    "enabled": True,
    "base_url": "https://api.openai.com/v1",
    "model": "dall-e-3",
    "size": "1024x1024",
    "timeout_seconds": 60,
}


@dataclass(frozen=True)
class Settings:
    inventory_path: Path | None
    sheet_index: int
    geocoding: dict[str, Any]
    log_level: str
    imagery: dict[str, Any]


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must be a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def _resolve_inventory_path(raw: str | None, config_dir: Path) -> Path | None:
    if not raw:
        return None
    path = Path(raw)
    if path.is_absolute():
        return path
    # Relative paths are anchored at the directory holding config/.
    return config_dir.parent / path


def load_settings(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> Settings:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / SETTINGS_FILENAME
    cfg = validate_settings_config(
        _load_yaml_with_overlay(config_dir / SETTINGS_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )
    return Settings(
        inventory_path=_resolve_inventory_path(cfg["inventory"]["path"], config_dir),
        sheet_index=cfg["inventory"]["sheet_index"],
        geocoding=dict(cfg["geocoding"]),
        log_level=str(cfg["logging"]["level"]).upper(),
        imagery={**DEFAULT_IMAGERY, **cfg.get("imagery", {})},
    )
