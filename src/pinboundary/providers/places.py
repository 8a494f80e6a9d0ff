from __future__ import annotations

from typing import Any

from pinboundary.errors import ProviderError
from pinboundary.log import get_logger
from pinboundary.models import GeoPoint
from pinboundary.providers.google_client import GoogleMapsClient

NEIGHBOURHOOD_TYPES = "neighborhood|sublocality|locality"


def nearby_localities(client: GoogleMapsClient, centroid: GeoPoint, *, radius_m: int = 2000) -> list[dict[str, Any]]:
    """Named places around a centroid; informational only, so failures yield an empty list."""
    logger = get_logger()
    if not client.configured:
        return []
    try:
        data = client.nearby_search(
            location=f"{centroid.lat},{centroid.lng}",
            radius_m=radius_m,
            place_type=NEIGHBOURHOOD_TYPES,
        )
    except ProviderError as e:
        logger.warning("Places API error: %s", e)
        return []

    out: list[dict[str, Any]] = []
    for place in (data.get("results") if isinstance(data, dict) else None) or []:
        geometry = place.get("geometry") or {}
        out.append(
            {
                "name": place.get("name"),
                "location": geometry.get("location"),
                "viewport": geometry.get("viewport"),
                "types": place.get("types") or [],
            }
        )
    return out
