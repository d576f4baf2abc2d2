"""Illustrative pictures of a street-light fixture.

Pictures come from an OpenAI-compatible image generation endpoint when the
service is enabled and an API key is configured. In every other case, and
whenever the remote call fails, a locally rendered SVG is returned as a
``data:`` URL so callers always get something to show.
"""

from __future__ import annotations

import logging
import threading
from html import escape
from typing import Any
from urllib.parse import quote

import requests

from luminaria.common.http import HttpClient, HttpRequestError, TimeoutConfig
from luminaria.common.logging import get_logger, log_event

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "dall-e-3"
DEFAULT_SIZE = "1024x1024"
BILLING_LIMIT_CODE = "billing_hard_limit_reached"

UNKNOWN_BARRIO = "desconocido"
UNKNOWN_LABEL = "desconocida"

# Once the account hits its billing limit every later call in the process
# goes straight to the fallback.
_billing_limit_reached = threading.Event()


def billing_limit_reached() -> bool:
    return _billing_limit_reached.is_set()


def reset_billing_limit() -> None:
    _billing_limit_reached.clear()


def _is_led(tecnologia: str) -> bool:
    return "led" in tecnologia.casefold()


def build_prompt(barrio: str, tecnologia: str, potencia: str) -> str:
    light = "blanca neutra y brillante" if _is_led(tecnologia) else "anaranjada cálida"
    return (
        "Genera una imagen realista dividida en dos mitades. "
        f"Izquierda (día): luminaria de {potencia} apagada, montada en un poste gris metálico "
        f"en una calle del barrio {barrio}, tecnología {tecnologia}, luz natural de mediodía. "
        "Derecha (noche): la misma luminaria en el mismo poste y la misma ubicación, encendida a las 20:00, "
        f"con luz {light} iluminando la calle, casas, árboles y personas a distancia. "
        "Fotografía realista de estilo urbano colombiano; el contraste día/noche debe ser evidente."
    )


def fallback_svg_data_url(barrio: str, tecnologia: str, potencia: str) -> str:
    """Day/night SVG sketch of the fixture, rendered the same way for the same inputs."""
    glow = "#ffffff" if _is_led(tecnologia) else "#ffb347"
    label = escape(f"{barrio} - {tecnologia} {potencia}")
    svg = (
        "<svg xmlns='http://www.w3.org/2000/svg' width='1600' height='800' viewBox='0 0 1600 800'>"
        "<defs>"
        "<linearGradient id='skyDay' x1='0' x2='0' y1='0' y2='1'>"
        "<stop offset='0' stop-color='#87CEEB'/><stop offset='1' stop-color='#BFE9FF'/>"
        "</linearGradient>"
        "<linearGradient id='skyNight' x1='0' x2='0' y1='0' y2='1'>"
        "<stop offset='0' stop-color='#081730'/><stop offset='1' stop-color='#001426'/>"
        "</linearGradient>"
        "</defs>"
        "<rect x='0' y='0' width='800' height='800' fill='url(#skyDay)'/>"
        "<rect x='360' y='220' width='16' height='380' fill='#666'/>"
        "<circle cx='368' cy='210' r='30' fill='#999'/>"
        "<rect x='0' y='600' width='800' height='200' fill='#ddd'/>"
        f"<text x='20' y='760' font-size='22' fill='#333'>Día - {label}</text>"
        "<rect x='800' y='0' width='800' height='800' fill='url(#skyNight)'/>"
        "<rect x='1160' y='220' width='16' height='380' fill='#333'/>"
        "<circle cx='1168' cy='210' r='28' fill='#222'/>"
        f"<circle cx='1168' cy='210' r='90' fill='{glow}' fill-opacity='0.08'/>"
        f"<circle cx='1168' cy='210' r='170' fill='{glow}' fill-opacity='0.02'/>"
        "<rect x='800' y='600' width='800' height='200' fill='#111'/>"
        f"<text x='820' y='760' font-size='22' fill='#fff'>Noche - {label}</text>"
        "<line x1='800' y1='0' x2='800' y2='800' stroke='#444' stroke-width='2'/>"
        "<text x='20' y='30' font-size='14' fill='#222'>Simulación local</text>"
        "</svg>"
    )
    return "data:image/svg+xml;utf8," + quote(svg, safe="")


def _image_from_payload(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return None
    first = data[0]
    if first.get("url"):
        return first["url"]
    if first.get("b64_json"):
        return "data:image/png;base64," + first["b64_json"]
    return None


def _error_code(payload: Any) -> str | None:
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return payload["error"].get("code")
    return None


class ImageClient:
    def __init__(
        self,
        http: HttpClient,
        *,
        api_key: str | None,
        enabled: bool = True,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        size: str = DEFAULT_SIZE,
        timeout: TimeoutConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.http = http
        self.api_key = (api_key or "").strip() or None
        self.enabled = enabled
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.size = size
        self.timeout = timeout
        self.logger = logger or get_logger("imagery")

    def image_url(self, barrio: str | None, tecnologia: str | None, potencia: str | None) -> str:
        barrio = barrio or UNKNOWN_BARRIO
        tecnologia = tecnologia or UNKNOWN_LABEL
        potencia = potencia or UNKNOWN_LABEL

        if not self.enabled:
            log_event(self.logger, "image generation disabled", level=logging.DEBUG, event="IMAGE_FALLBACK", status="disabled")
            return fallback_svg_data_url(barrio, tecnologia, potencia)
        if billing_limit_reached():
            log_event(
                self.logger,
                "image generation off after billing limit",
                level=logging.WARNING,
                event="IMAGE_FALLBACK",
                status="billing_limit",
            )
            return fallback_svg_data_url(barrio, tecnologia, potencia)
        if self.api_key is None:
            log_event(self.logger, "no image API key configured", level=logging.WARNING, event="IMAGE_FALLBACK", status="no_key")
            return fallback_svg_data_url(barrio, tecnologia, potencia)

        try:
            payload = self.http.post_json(
                f"{self.base_url}/images/generations",
                source_type="openai",
                json_body={
                    "model": self.model,
                    "prompt": build_prompt(barrio, tecnologia, potencia),
                    "n": 1,
                    "size": self.size,
                    "quality": "standard",
                    "style": "natural",
                    "response_format": "url",
                },
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except HttpRequestError as exc:
            if _error_code(exc.payload) == BILLING_LIMIT_CODE:
                _billing_limit_reached.set()
                log_event(
                    self.logger,
                    "image API billing limit reached; using local pictures from now on",
                    level=logging.WARNING,
                    event="IMAGE_BILLING_LIMIT",
                    status="billing_limit",
                    error_code=BILLING_LIMIT_CODE,
                )
            else:
                log_event(
                    self.logger,
                    f"image generation failed: {exc}",
                    level=logging.ERROR,
                    event="IMAGE_FAILED",
                    status="error",
                    error_code=exc.error_code,
                )
            return fallback_svg_data_url(barrio, tecnologia, potencia)
        except requests.RequestException as exc:
            log_event(
                self.logger,
                f"image generation failed: {exc}",
                level=logging.ERROR,
                event="IMAGE_FAILED",
                status="error",
                error_code="HTTP_ERROR",
            )
            return fallback_svg_data_url(barrio, tecnologia, potencia)

        image = _image_from_payload(payload)
        if image is None:
            log_event(self.logger, "image response carried no picture", level=logging.WARNING, event="IMAGE_EMPTY", status="fallback")
            return fallback_svg_data_url(barrio, tecnologia, potencia)
        log_event(self.logger, f"image generated for {barrio}", event="IMAGE_GENERATED", status="ok")
        return image
