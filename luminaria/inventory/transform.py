"""WGS84 <-> national grid (MAGNA-SIRGAS / Origen-Nacional) transforms."""

from __future__ import annotations

from functools import lru_cache

from pyproj import CRS, Transformer
from pyproj.exceptions import ProjError

from luminaria.common.errors import CoordinateRangeError, TransformError

# Transverse Mercator on GRS 1980; MAGNA-SIRGAS is coincident with WGS84.
NATIONAL_GRID_PROJ = (
    "+proj=tmerc +lat_0=4 +lon_0=-73 +k=0.9992 "
    "+x_0=5000000 +y_0=2000000 +ellps=GRS80 "
    "+towgs84=0,0,0,0,0,0,0 +units=m +no_defs +type=crs"
)


def _check_range(lat: float, lon: float) -> None:
    if not -90 <= lat <= 90:
        raise CoordinateRangeError(f"Latitude must be between -90 and 90, got {lat}")
    if not -180 <= lon <= 180:
        raise CoordinateRangeError(f"Longitude must be between -180 and 180, got {lon}")


class CoordinateTransformer:
    """Bidirectional transform between WGS84 and the national grid.

    Both pyproj transformers are built with ``always_xy=True`` so every call
    passes and receives coordinates in (x, y) = (lon, lat) / (easting,
    northing) order regardless of the CRS axis definitions.
    """

    def __init__(self, grid_definition: str = NATIONAL_GRID_PROJ) -> None:
        wgs84 = CRS.from_epsg(4326)
        grid = CRS.from_proj4(grid_definition)
        self._forward = Transformer.from_crs(wgs84, grid, always_xy=True)
        self._inverse = Transformer.from_crs(grid, wgs84, always_xy=True)

    def to_projected(self, lat: float, lon: float) -> tuple[float, float]:
        _check_range(lat, lon)
        try:
            easting, northing = self._forward.transform(lon, lat)
        except ProjError as exc:
            raise TransformError(f"Projection failed for lat={lat}, lon={lon}") from exc
        return easting, northing

    def to_geographic(self, easting: float, northing: float) -> tuple[float, float]:
        try:
            x, y = self._inverse.transform(easting, northing)
        except ProjError as exc:
            raise TransformError(f"Inverse projection failed for E={easting}, N={northing}") from exc
        return y, x


@lru_cache(maxsize=1)
def default_transformer() -> CoordinateTransformer:
    return CoordinateTransformer()


def to_projected(lat: float, lon: float) -> tuple[float, float]:
    return default_transformer().to_projected(lat, lon)


def to_geographic(easting: float, northing: float) -> tuple[float, float]:
    return default_transformer().to_geographic(easting, northing)
