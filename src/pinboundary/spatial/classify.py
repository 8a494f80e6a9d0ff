"""
Point-in-polygon classification against generated boundaries.

Downstream consumers use this to scope listings, projects and professionals
to a postal code's approximate area. Entities without coordinates fall back
to exact pincode matching; consumers rely on that fallback, so it lives here
next to the geometric test rather than in each caller.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, Union

import numpy as np

from pinboundary.log import get_logger
from pinboundary.models import GeoPoint, LngLat, Polygon

PolygonLike = Union[Polygon, Sequence[Sequence[float]], Mapping[str, Any]]


def _ring_from(polygon: PolygonLike) -> np.ndarray:
    if isinstance(polygon, Polygon):
        return np.asarray(polygon.ring, dtype=float)
    if isinstance(polygon, Mapping):
        # Accept a GeoJSON Feature or a bare Polygon geometry.
        geometry = polygon.get("geometry", polygon)
        if not isinstance(geometry, Mapping) or geometry.get("type") != "Polygon":
            raise ValueError("Expected a GeoJSON Polygon geometry")
        # Only the outer ring is used; holes are not supported.
        return np.asarray(geometry["coordinates"][0], dtype=float)
    return np.asarray(polygon, dtype=float)


def point_in_ring(lng: float, lat: float, ring: np.ndarray) -> bool:
    """Even-odd ray casting; `ring` is an (N, 2) array of (lng, lat), open or closed."""
    if ring.ndim != 2 or ring.shape[0] < 3 or ring.shape[1] != 2:
        raise ValueError("Ring must be an (N>=3, 2) array")
    xi, yi = ring[:, 0], ring[:, 1]
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)
    # Edges whose latitude span straddles the point's latitude.
    straddles = (yi > lat) != (yj > lat)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = (xj - xi) * (lat - yi) / (yj - yi) + xi
    crossings = straddles & (lng < x_cross)
    return bool(np.count_nonzero(crossings) % 2 == 1)


def contains(point: GeoPoint | Mapping[str, Any], polygon: PolygonLike) -> bool:
    """
    True if `point` lies inside `polygon`.

    Malformed input (missing coordinates, non-polygon geometry) is logged and
    classified as outside.
    """
    try:
        pt = point if isinstance(point, GeoPoint) else GeoPoint.from_mapping(dict(point))
        ring = _ring_from(polygon)
        return point_in_ring(pt.lng, pt.lat, ring)
    except (ValueError, TypeError, KeyError, IndexError) as e:
        get_logger().debug("Point-in-polygon on malformed input treated as outside: %s", e)
        return False


def _has_coordinates(entity: Mapping[str, Any]) -> bool:
    # Zero / empty coordinates count as missing, same as unset ones.
    return bool(entity.get("latitude")) and bool(entity.get("longitude"))


def entity_in_boundary(
    entity: Mapping[str, Any],
    postal_code: str,
    polygon: PolygonLike,
    *,
    match_territories: bool = False,
) -> bool:
    """
    Geometric membership for entities with coordinates, pincode equality otherwise.

    With `match_territories` (projects), an entity without coordinates also
    matches when the postal code is one of its `territories`.
    """
    if _has_coordinates(entity):
        # Parsed inside `contains` so unparseable coordinates classify as outside.
        return contains({"lat": entity["latitude"], "lng": entity["longitude"]}, polygon)
    if entity.get("pincode") == postal_code:
        return True
    if not match_territories:
        return False
    territories = entity.get("territories") or []
    return postal_code in territories


def filter_entities_in_boundary(
    entities: Iterable[Mapping[str, Any]],
    postal_code: str,
    polygon: PolygonLike,
    *,
    match_territories: bool = False,
) -> list[Mapping[str, Any]]:
    return [
        e for e in entities if entity_in_boundary(e, postal_code, polygon, match_territories=match_territories)
    ]


def ring_to_points(ring: Iterable[LngLat]) -> list[GeoPoint]:
    return [GeoPoint.from_lnglat(c) for c in ring]
