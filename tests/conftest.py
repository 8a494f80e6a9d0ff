"""
Shared offline fakes for the provider-facing tests.

Nothing here touches the network: `FakeSession` stands in for
`requests.Session` and routes each GET to a handler registered per URL.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import pytest
import requests

from pinboundary.providers.google_client import GoogleMapsClient

GEOCODE_URL = "https://geo.example.com/geocode/json"
ROADS_URL = "https://roads.example.com/v1/snapToRoads"
PLACES_URL = "https://geo.example.com/place/nearbysearch/json"

# Ahmedabad 380015; the viewport diagonal is roughly 2 km.
CENTROID = {"lat": 23.0330, "lng": 72.5714}
VIEWPORT = {
    "northeast": {"lat": 23.03936, "lng": 72.57832},
    "southwest": {"lat": 23.02664, "lng": 72.56448},
}


class FakeResponse:
    # A minimal fake `requests.Response` supporting the methods our client uses.
    def __init__(self, *, status_code: int = 200, payload: object | None = None, text: str | None = None, headers: dict[str, str] | None = None) -> None:
        self.status_code = int(status_code)
        self._payload = payload
        self._text = text if text is not None else json.dumps(payload, ensure_ascii=False)
        self.headers = dict(headers or {})

    @property
    def text(self) -> str:
        return self._text

    def json(self) -> object:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def raise_for_status(self) -> None:
        # Match `requests` behavior: raise an HTTPError for 4xx/5xx status codes.
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


Handler = Callable[[dict[str, Any]], FakeResponse]


class FakeSession:
    # Routes GETs by URL; a handler may return a FakeResponse or raise (e.g. requests.Timeout).
    def __init__(self, handlers: dict[str, Handler] | None = None) -> None:
        self.handlers: dict[str, Handler] = dict(handlers or {})
        self.get_calls: list[dict[str, Any]] = []

    def get(self, url: str, params: dict[str, Any], timeout: float) -> FakeResponse:
        self.get_calls.append({"url": url, "params": dict(params), "timeout": timeout})
        return self.handlers[url](dict(params))

    def calls_to(self, url: str) -> list[dict[str, Any]]:
        return [c for c in self.get_calls if c["url"] == url]


def geocode_ok(*, centroid: dict[str, float] = CENTROID, viewport: dict[str, Any] | None = VIEWPORT) -> Handler:
    geometry: dict[str, Any] = {"location": dict(centroid)}
    if viewport is not None:
        geometry["viewport"] = viewport
    payload = {
        "status": "OK",
        "results": [
            {
                "place_id": "ChIJ-380015",
                "geometry": geometry,
                "postcode_localities": ["Satellite", "Jodhpur"],
                "address_components": [
                    {"long_name": "380015", "types": ["postal_code"]},
                    {"long_name": "Satellite", "types": ["sublocality", "political"]},
                    {"long_name": "Ahmedabad", "types": ["locality", "political"]},
                    {"long_name": "Gujarat", "types": ["administrative_area_level_1"]},
                ],
            }
        ],
    }
    return lambda params: FakeResponse(payload=payload)


def roads_echo(*, nudge: float = 1e-5) -> Handler:
    # Snap every point onto a "road" a tiny step north of where it was sent.
    def handler(params: dict[str, Any]) -> FakeResponse:
        snapped = []
        for i, pair in enumerate(params["path"].split("|")):
            lat, lng = (float(v) for v in pair.split(","))
            snapped.append({"location": {"latitude": lat + nudge, "longitude": lng}, "originalIndex": i})
        return FakeResponse(payload={"snappedPoints": snapped})

    return handler


def roads_error(status_code: int = 403) -> Handler:
    return lambda params: FakeResponse(status_code=status_code, payload={"error": {"status": "PERMISSION_DENIED"}})


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_client(sleeps: list[float]) -> Callable[..., GoogleMapsClient]:
    def _make(session: FakeSession, *, api_key: str | None = "test-key", **kwargs: Any) -> GoogleMapsClient:
        return GoogleMapsClient(
            api_key=api_key,
            geocode_url=GEOCODE_URL,
            roads_url=ROADS_URL,
            places_url=PLACES_URL,
            sleep_fn=sleeps.append,
            session=session,  # type: ignore[arg-type]
            **kwargs,
        )

    return _make
