"""Exhaustive nearest-neighbour search over loaded asset records."""

from __future__ import annotations

from typing import Iterable

from luminaria.common.constants import MAX_DISTANCE
from luminaria.common.models import AssetRecord, NearestMatch


def find_nearest(records: Iterable[AssetRecord], lat: float, lon: float) -> NearestMatch:
    """Linear scan; on ties the earliest record wins."""
    nearest: AssetRecord | None = None
    min_distance = MAX_DISTANCE
    for record in records:
        distance = record.distance_to(lat, lon)
        if distance < min_distance:
            min_distance = distance
            nearest = record
    return NearestMatch(record=nearest, distance_meters=min_distance)
