"""Nominatim geocoding client."""

from __future__ import annotations

import logging
from typing import Any

from luminaria.common.http import HttpClient, HttpRequestError, RetryableHttpError, TimeoutConfig
from luminaria.common.logging import get_logger, log_event
from luminaria.common.models import GeocodeResult
from luminaria.common.values import parse_number

DEFAULT_BASE_URL = "https://nominatim.openstreetmap.org"


def build_query(country: str, city: str, address: str) -> str:
    return f"{address}, {city}, {country}"


class NominatimClient:
    def __init__(
        self,
        http: HttpClient,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: TimeoutConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or get_logger("geocoding")

    def search(self, query: str) -> list[dict[str, Any]]:
        payload = self.http.get_json(
            f"{self.base_url}/search",
            source_type="nominatim",
            params={"q": query, "format": "json", "limit": 1, "addressdetails": 0},
            timeout=self.timeout,
        )
        if not isinstance(payload, list):
            raise HttpRequestError("Unexpected Nominatim payload: expected a JSON array", status_code=200)
        return payload

    def geocode(self, country: str, city: str, address: str) -> GeocodeResult | None:
        """Resolve an address, or ``None`` when Nominatim has no usable answer.

        Error statuses and unreadable payloads count as "no answer"; transport
        failures that outlast the retries propagate.
        """
        query = build_query(country, city, address)
        try:
            results = self.search(query)
        except HttpRequestError as exc:
            if isinstance(exc, RetryableHttpError) and exc.status_code is None:
                raise
            log_event(
                self.logger,
                f"geocoding request for {query!r} failed: {exc}",
                level=logging.WARNING,
                event="GEOCODE_FAILED",
                source="nominatim",
                error_code=exc.error_code,
            )
            return None

        if not results or not isinstance(results[0], dict):
            log_event(self.logger, f"no geocoding result for {query!r}", event="GEOCODE_EMPTY", source="nominatim")
            return None

        first = results[0]
        lat = parse_number(first.get("lat"))
        lon = parse_number(first.get("lon"))
        if lat is None or lon is None:
            log_event(
                self.logger,
                f"geocoding result without usable coordinates for {query!r}",
                level=logging.WARNING,
                event="GEOCODE_INVALID",
                source="nominatim",
            )
            return None

        return GeocodeResult(
            country=country,
            city=city,
            address=address,
            query_used=query,
            display_name=first.get("display_name") or "",
            lat=lat,
            lon=lon,
        )
