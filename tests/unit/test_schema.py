import copy

import pytest

from luminaria.common.errors import ConfigError
from luminaria.common.schema import validate_settings_config

BASE_SETTINGS = {
    "inventory": {"path": "data/inventario.xlsx", "sheet_index": 0},
    "geocoding": {
        "base_url": "https://nominatim.example.test",
        "user_agent": "test-agent",
        "timeout_seconds": 5,
        "rate_limit_per_sec": 1.0,
        "max_attempts": 2,
    },
    "logging": {"level": "INFO"},
    "imagery": {
        "enabled": True,
        "base_url": "https://images.example.test/v1",
        "model": "dall-e-3",
        "size": "1024x1024",
        "timeout_seconds": 60,
    },
}


def _settings():
    return copy.deepcopy(BASE_SETTINGS)


def test_validate_settings_accepts_valid_shape():
    assert validate_settings_config(_settings())["inventory"]["sheet_index"] == 0


def test_validate_settings_rejects_unknown_key_by_default():
    bad = _settings()
    bad["unexpected"] = True
    with pytest.raises(ConfigError):
        validate_settings_config(bad)


def test_validate_settings_allows_unknown_when_enabled():
    okay = _settings()
    okay["geocoding"]["extra"] = 1
    validate_settings_config(okay, allow_unknown=True)


def test_validate_settings_rejects_missing_section():
    bad = _settings()
    del bad["geocoding"]
    with pytest.raises(ConfigError):
        validate_settings_config(bad)


@pytest.mark.parametrize(
    ("section", "key", "value"),
    [
        ("inventory", "sheet_index", -1),
        ("inventory", "sheet_index", True),
        ("geocoding", "base_url", "ftp://nominatim"),
        ("geocoding", "timeout_seconds", 0),
        ("geocoding", "rate_limit_per_sec", "fast"),
        ("geocoding", "max_attempts", 0),
        ("logging", "level", "LOUD"),
        ("imagery", "enabled", "yes"),
        ("imagery", "base_url", "api.openai.com"),
        ("imagery", "model", ""),
        ("imagery", "timeout_seconds", -5),
    ],
)
def test_validate_settings_rejects_bad_values(section, key, value):
    bad = _settings()
    bad[section][key] = value
    with pytest.raises(ConfigError):
        validate_settings_config(bad)


def test_validate_settings_imagery_section_is_optional():
    cfg = _settings()
    del cfg["imagery"]

    assert "imagery" not in validate_settings_config(cfg)
