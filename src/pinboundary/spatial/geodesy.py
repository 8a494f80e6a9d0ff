"""
Spherical-Earth geometry primitives.

Boundary generation needs exactly two geodesic operations:
- the great-circle distance between two points (to size the search radius),
- the destination point at a bearing and distance (to cast sampling rays).

Both are the standard haversine / forward-azimuth formulas. Over the few
kilometres a postal code spans, the spherical approximation is far below the
error introduced by the rest of the pipeline, so we do not pull in a full
ellipsoidal geodesy library.
"""

from __future__ import annotations

import math

import numpy as np

from pinboundary.models import GeoPoint

# Mean Earth radius in meters (same constant GeoJSON tooling such as turf uses).
EARTH_RADIUS_M = 6_371_008.8


def great_circle_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    # Haversine formula; numerically stable for short distances.
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2.0) ** 2
    # Clamp so rounding never pushes asin outside its domain.
    return float(2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h))))


def destination_points(
    origin: GeoPoint,
    bearings_deg: np.ndarray,
    distances_m: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Vectorised destination along great circles from a single origin.

    Bearings are clockwise from north, in degrees. Returns `(lat_deg, lng_deg)`
    arrays with one entry per bearing.
    """
    bearings = np.deg2rad(np.asarray(bearings_deg, dtype=float))
    # Angular distance traveled on the sphere.
    delta = np.asarray(distances_m, dtype=float) / EARTH_RADIUS_M
    if bearings.shape != delta.shape:
        raise ValueError("bearings_deg and distances_m must have the same shape")

    lat1 = math.radians(origin.lat)
    lng1 = math.radians(origin.lng)

    lat2 = np.arcsin(
        math.sin(lat1) * np.cos(delta) + math.cos(lat1) * np.sin(delta) * np.cos(bearings)
    )
    lng2 = lng1 + np.arctan2(
        np.sin(bearings) * np.sin(delta) * math.cos(lat1),
        np.cos(delta) - math.sin(lat1) * np.sin(lat2),
    )
    # Normalise longitude into [-180, 180).
    lng2 = (lng2 + 3.0 * math.pi) % (2.0 * math.pi) - math.pi
    return np.rad2deg(lat2), np.rad2deg(lng2)


def destination_point(origin: GeoPoint, bearing_deg: float, distance_m: float) -> GeoPoint:
    lat, lng = destination_points(origin, np.array([bearing_deg]), np.array([distance_m]))
    return GeoPoint(lat=float(lat[0]), lng=float(lng[0]))
