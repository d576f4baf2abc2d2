"""Data models shared by the inventory core and the locate pipeline."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any

from luminaria.common.constants import EARTH_RADIUS_KM, MAX_DISTANCE, SOURCE_EPSG, TARGET_EPSG

_DEG_TO_RAD = math.pi / 180.0


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters on a sphere of radius ``EARTH_RADIUS_KM``."""
    lat1_rad = lat1 * _DEG_TO_RAD
    lat2_rad = lat2 * _DEG_TO_RAD
    delta_lat = (lat2 - lat1) * _DEG_TO_RAD
    delta_lon = (lon2 - lon1) * _DEG_TO_RAD

    a = math.sin(delta_lat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    # Rounding can push a past 1 for near-antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000


@dataclass(frozen=True)
class AssetRecord:
    barrio: str | None = None
    direccion_final: str | None = None
    codigo_luminaria: str | None = None
    tecnologia: str | None = None
    potencia: str | None = None
    lat: float | None = None
    lon: float | None = None

    def distance_to(self, lat: float, lon: float) -> float:
        if self.lat is None or self.lon is None:
            return MAX_DISTANCE
        return haversine_meters(self.lat, self.lon, lat, lon)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NearestMatch:
    record: AssetRecord | None
    distance_meters: float

    @property
    def found(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class GeocodeResult:
    country: str
    city: str
    address: str
    query_used: str
    display_name: str
    lat: float
    lon: float
    source: str = "nominatim"


@dataclass(frozen=True)
class LocateResult:
    geocode: GeocodeResult
    easting: float
    northing: float
    nearest: NearestMatch
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        nearest_asset = None
        if self.nearest.record is not None:
            nearest_asset = self.nearest.record.to_dict()
            nearest_asset["distance_meters"] = self.nearest.distance_meters
            nearest_asset["image_url"] = self.image_url
        return {
            "country": self.geocode.country,
            "city": self.geocode.city,
            "address": self.geocode.address,
            "query_used": self.geocode.query_used,
            "display_name": self.geocode.display_name,
            "lat": self.geocode.lat,
            "lon": self.geocode.lon,
            "source_epsg": SOURCE_EPSG,
            "easting": self.easting,
            "northing": self.northing,
            "target_epsg": TARGET_EPSG,
            "source": self.geocode.source,
            "nearest_asset": nearest_asset,
        }
