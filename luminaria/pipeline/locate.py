"""Address -> national grid coordinates -> nearest street-light fixture."""

from __future__ import annotations

from typing import Protocol

from luminaria.common.errors import InputError, NotFoundError
from luminaria.common.logging import get_logger, log_event
from luminaria.common.models import GeocodeResult, LocateResult, NearestMatch
from luminaria.inventory.transform import CoordinateTransformer, default_transformer

logger = get_logger("locate")


class Geocoder(Protocol):
    def geocode(self, country: str, city: str, address: str) -> GeocodeResult | None: ...


class Inventory(Protocol):
    def find_nearest(self, lat: float, lon: float) -> NearestMatch: ...


class ImageProvider(Protocol):
    def image_url(self, barrio: str | None, tecnologia: str | None, potencia: str | None) -> str: ...


def locate(
    country: str,
    city: str,
    address: str,
    *,
    geocoder: Geocoder,
    inventory: Inventory,
    imagery: ImageProvider | None = None,
    transformer: CoordinateTransformer | None = None,
) -> LocateResult:
    country = (country or "").strip()
    city = (city or "").strip()
    address = (address or "").strip()
    if not country or not city or not address:
        raise InputError("country, city and address are all required")

    geocoded = geocoder.geocode(country, city, address)
    if geocoded is None:
        raise NotFoundError(f"No results for address: {address}, {city}, {country}")

    transformer = transformer or default_transformer()
    easting, northing = transformer.to_projected(geocoded.lat, geocoded.lon)
    nearest = inventory.find_nearest(geocoded.lat, geocoded.lon)
    image_url = None
    if imagery is not None and nearest.record is not None:
        record = nearest.record
        image_url = imagery.image_url(record.barrio, record.tecnologia, record.potencia)

    log_event(
        logger,
        "address located",
        stage="locate",
        event="LOCATE_DONE",
        status="ok" if nearest.found else "no_match",
    )
    return LocateResult(geocode=geocoded, easting=easting, northing=northing, nearest=nearest, image_url=image_url)
