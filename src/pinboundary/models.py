"""
Typed value objects shared by every stage of boundary generation.

Coordinate order is the most common source of bugs in this codebase:
- `GeoPoint` stores named `lat` / `lng` fields.
- Polygon rings store `(lng, lat)` tuples, matching GeoJSON.
The only conversions between the two go through `GeoPoint.as_lnglat()` and
`GeoPoint.from_lnglat()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from pinboundary.errors import DegenerateRing

LngLat = tuple[float, float]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def as_lnglat(self) -> LngLat:
        return (float(self.lng), float(self.lat))

    @classmethod
    def from_lnglat(cls, coord: Iterable[float]) -> "GeoPoint":
        lng, lat = coord
        return cls(lat=float(lat), lng=float(lng))

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "GeoPoint":
        # Providers return `{"lat", "lng"}`; the roads API uses `{"latitude", "longitude"}`.
        lat = data.get("lat", data.get("latitude"))
        lng = data.get("lng", data.get("longitude"))
        if lat is None or lng is None:
            raise ValueError(f"Mapping has no lat/lng: {data}")
        return cls(lat=float(lat), lng=float(lng))

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Viewport:
    northeast: GeoPoint
    southwest: GeoPoint

    def to_dict(self) -> dict[str, Any]:
        return {"northeast": self.northeast.to_dict(), "southwest": self.southwest.to_dict()}


@dataclass(frozen=True)
class RadialPoint:
    point: GeoPoint
    angle: float  # degrees, 0-360


@dataclass(frozen=True)
class SnappedPoint:
    point: GeoPoint
    original_index: int  # index into the full radial point list


class BoundarySource(str, Enum):
    ROAD_ML_APPROXIMATION = "road_ml_approximation"


@dataclass(frozen=True)
class Polygon:
    """A single closed linear ring of (lng, lat) positions. No holes."""

    ring: tuple[LngLat, ...]

    def __post_init__(self) -> None:
        if len(self.ring) < 4:
            raise DegenerateRing(len(self.ring), minimum=4)
        if self.ring[0] != self.ring[-1]:
            raise ValueError("Polygon ring must be closed (first position == last position)")

    @classmethod
    def from_ring(cls, coords: Iterable[Iterable[float]]) -> "Polygon":
        return cls(ring=tuple((float(lng), float(lat)) for lng, lat in coords))

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "properties": {},
            "geometry": {"type": "Polygon", "coordinates": [[list(c) for c in self.ring]]},
        }


@dataclass(frozen=True)
class BoundaryRecord:
    """
    Cached result of boundary generation for one postal code.

    Built only by `pinboundary.boundary.generator.assemble_boundary` and never
    mutated; cache invalidation replaces the whole record.
    """

    postal_code: str
    centroid: GeoPoint
    viewport: Viewport | None
    polygon: Polygon
    boundary_points: tuple[GeoPoint, ...]
    localities: tuple[str, ...]
    place_id: str | None
    radius_m: float
    snapped: bool
    source: BoundarySource = BoundarySource.ROAD_ML_APPROXIMATION
    generated_at: str = field(default_factory=utc_now_iso)

    @property
    def point_count(self) -> int:
        return len(self.boundary_points)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape served by the API and written by the CLI."""
        return {
            "postalCode": self.postal_code,
            "source": self.source.value,
            "centroid": self.centroid.to_dict(),
            "viewport": self.viewport.to_dict() if self.viewport is not None else None,
            "polygon": self.polygon.to_geojson(),
            "boundary": [p.to_dict() for p in self.boundary_points],
            "pointCount": self.point_count,
            "localities": list(self.localities),
            "placeId": self.place_id,
            "radiusM": round(self.radius_m, 1),
            "snapped": self.snapped,
            "generatedAt": self.generated_at,
        }
