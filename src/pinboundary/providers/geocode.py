"""
Resolve a postal code to a centroid, viewport and locality names.

This is the first stage of boundary generation and the only fatal one: no
boundary can be produced without a centroid, so every failure here surfaces
as `GeocodeFailed`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pinboundary.errors import GeocodeFailed, ProviderError
from pinboundary.log import get_logger
from pinboundary.models import GeoPoint, Viewport
from pinboundary.providers.google_client import GoogleMapsClient

# Address component types whose names we report as localities.
LOCALITY_TYPES = ("sublocality", "locality")


@dataclass(frozen=True)
class GeocodeResult:
    centroid: GeoPoint
    viewport: Viewport | None
    place_id: str | None
    localities: tuple[str, ...]


def _parse_viewport(geometry: dict[str, Any]) -> Viewport | None:
    vp = geometry.get("viewport")
    if not isinstance(vp, dict):
        return None
    try:
        return Viewport(
            northeast=GeoPoint.from_mapping(vp["northeast"]),
            southwest=GeoPoint.from_mapping(vp["southwest"]),
        )
    except (KeyError, TypeError, ValueError):
        # A broken viewport only costs us the radius estimate; the default radius is used instead.
        get_logger().warning("Ignoring malformed viewport: %s", vp)
        return None


def extract_localities(result: dict[str, Any]) -> tuple[str, ...]:
    """
    Locality names for a geocode result, deduplicated, first-seen order.

    `postcode_localities` (reported for postal codes spanning several
    localities) comes first, then `sublocality` / `locality` address components.
    """
    names: list[str] = []
    for name in result.get("postcode_localities") or []:
        if name and name not in names:
            names.append(str(name))
    for comp in result.get("address_components") or []:
        types = comp.get("types") or []
        if not any(t in types for t in LOCALITY_TYPES):
            continue
        name = comp.get("long_name")
        if name and name not in names:
            names.append(str(name))
    return tuple(names)


def resolve_pincode(client: GoogleMapsClient, pincode: str, *, country: str = "IN") -> GeocodeResult:
    logger = get_logger()
    if not client.configured:
        logger.warning("No Google Maps API key configured; cannot geocode %s", pincode)
        raise GeocodeFailed(pincode, status="NO_API_KEY")

    try:
        data = client.geocode(components=f"postal_code:{pincode}|country:{country}")
    except ProviderError as e:
        logger.error("Geocode API error for %s: %s", pincode, e)
        raise GeocodeFailed(pincode, status="REQUEST_FAILED") from e

    status = data.get("status") if isinstance(data, dict) else None
    results = (data.get("results") or []) if isinstance(data, dict) else []
    if status != "OK" or not results:
        logger.warning("Geocode failed for %s: %s", pincode, status)
        raise GeocodeFailed(pincode, status=status)

    first = results[0]
    geometry = first.get("geometry") or {}
    try:
        centroid = GeoPoint.from_mapping(geometry["location"])
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodeFailed(pincode, status="NO_LOCATION") from e

    return GeocodeResult(
        centroid=centroid,
        viewport=_parse_viewport(geometry),
        place_id=first.get("place_id"),
        localities=extract_localities(first),
    )
