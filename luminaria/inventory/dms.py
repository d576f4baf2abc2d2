"""Degrees / decimal-minutes coordinate parsing.

Handles values such as ``"N 10°44.710'"``, ``"W074°45.460'"`` or a bare
``"10°44.710"``. Every parser here returns ``None`` for input it cannot
decode so callers can fall through to the next coordinate encoding.
"""

from __future__ import annotations

import re

DMS_PATTERN = re.compile(r"(\d+)°([\d.]+)'?")
NON_DMS_CHARS = re.compile(r"[^0-9°.']")
DEGREE_GROUP = re.compile(r"[NSWEO]\s*\d+°", re.IGNORECASE)
NORTH_SOUTH_GROUP = re.compile(r"([NS])\s*(\d+°[\d.]+')", re.IGNORECASE)
EAST_WEST_GROUP = re.compile(r"([EW])\s*(\d+°[\d.]+')", re.IGNORECASE)

NEGATIVE_HEMISPHERES = ("S", "W")


def parse_dms(value: str | None) -> float | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    negative = text[:1].upper() in NEGATIVE_HEMISPHERES
    match = DMS_PATTERN.search(NON_DMS_CHARS.sub("", text))
    if match is None:
        return None
    try:
        degrees = float(match.group(1))
        minutes = float(match.group(2))
    except ValueError:
        return None

    # Minutes of 60 or more are passed through unnormalised.
    result = degrees + minutes / 60.0
    return -result if negative else result


def _parse_comma_pair(parts: list[str]) -> tuple[float, float] | None:
    lat = parse_dms(parts[0])
    lon = parse_dms(parts[1])
    if lat is None or lon is None:
        return None
    return lat, lon


def _parse_tagged_groups(text: str) -> tuple[float, float] | None:
    if len(DEGREE_GROUP.findall(text)) < 2:
        return None
    ns = NORTH_SOUTH_GROUP.search(text)
    ew = EAST_WEST_GROUP.search(text)
    if ns is None or ew is None:
        return None
    lat = parse_dms(f"{ns.group(1)} {ns.group(2)}")
    lon = parse_dms(f"{ew.group(1)} {ew.group(2)}")
    if lat is None or lon is None:
        return None
    return lat, lon


def parse_coordinate_pair(value: str | None) -> tuple[float, float] | None:
    """Decode a combined ``"N 10°44.710', W 074°45.460'"`` style cell."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    parts = [part.strip() for part in text.split(",") if part.strip()]
    if len(parts) == 2:
        return _parse_comma_pair(parts)
    if len(parts) == 1:
        return _parse_tagged_groups(text)
    return None
