"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from luminaria.common.errors import ConfigError

SETTINGS_SECTIONS = {"inventory", "geocoding", "logging"}
OPTIONAL_SECTIONS = {"imagery"}
INVENTORY_KEYS = {"path", "sheet_index"}
GEOCODING_KEYS = {"base_url", "user_agent", "timeout_seconds", "rate_limit_per_sec", "max_attempts"}
LOGGING_KEYS = {"level"}
IMAGERY_KEYS = {"enabled", "base_url", "model", "size", "timeout_seconds"}
LOG_LEVELS = {"DEBUG", "INFO", "WARN", "WARNING", "ERROR"}


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def _validate_imagery(imagery, allow_unknown: bool) -> None:
    _assert_mapping(imagery, "imagery")
    _assert_required_keys(imagery, IMAGERY_KEYS, "imagery")
    _assert_no_unknown_keys(imagery, IMAGERY_KEYS, "imagery", allow_unknown)
    if not isinstance(imagery["enabled"], bool):
        raise ConfigError("imagery.enabled must be a boolean")
    if not str(imagery["base_url"]).startswith(("http://", "https://")):
        raise ConfigError("imagery.base_url must be an http(s) URL")
    for key in ("model", "size"):
        if not isinstance(imagery[key], str) or not imagery[key].strip():
            raise ConfigError(f"imagery.{key} must be a non-empty string")
    _assert_positive_number(imagery["timeout_seconds"], "imagery.timeout_seconds")


def validate_settings_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_mapping(cfg, "settings")
    _assert_required_keys(cfg, SETTINGS_SECTIONS, "settings")
    _assert_no_unknown_keys(cfg, SETTINGS_SECTIONS | OPTIONAL_SECTIONS, "settings", allow_unknown)

    for section, keys in (
        ("inventory", INVENTORY_KEYS),
        ("geocoding", GEOCODING_KEYS),
        ("logging", LOGGING_KEYS),
    ):
        _assert_mapping(cfg[section], section)
        _assert_required_keys(cfg[section], keys, section)
        _assert_no_unknown_keys(cfg[section], keys, section, allow_unknown)

    sheet_index = cfg["inventory"]["sheet_index"]
    if isinstance(sheet_index, bool) or not isinstance(sheet_index, int) or sheet_index < 0:
        raise ConfigError("inventory.sheet_index must be a non-negative integer")

    geocoding = cfg["geocoding"]
    if not str(geocoding["base_url"]).startswith(("http://", "https://")):
        raise ConfigError("geocoding.base_url must be an http(s) URL")
    _assert_positive_number(geocoding["timeout_seconds"], "geocoding.timeout_seconds")
    _assert_positive_number(geocoding["rate_limit_per_sec"], "geocoding.rate_limit_per_sec")
    if isinstance(geocoding["max_attempts"], bool) or not isinstance(geocoding["max_attempts"], int) or geocoding["max_attempts"] < 1:
        raise ConfigError("geocoding.max_attempts must be an integer >= 1")

    if str(cfg["logging"]["level"]).upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of: {', '.join(sorted(LOG_LEVELS))}")

    if "imagery" in cfg:
        _validate_imagery(cfg["imagery"], allow_unknown)

    return cfg
