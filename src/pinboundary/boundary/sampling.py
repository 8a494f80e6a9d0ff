"""
Search radius estimation and radial point sampling.

The radius comes from the geocoder's viewport: half of its diagonal, clamped
to a range plausible for a postal code. Viewports are sometimes city-scale or
street-scale, hence the clamp.

Sampling casts `ray_count` evenly spaced rays from the centroid. Each ray's
length is jittered (not its bearing) so the final polygon has an organic
silhouette instead of a perfect circle. The random source is injectable so
tests can seed it.
"""

from __future__ import annotations

import random
from typing import Protocol

import numpy as np

from pinboundary.errors import DegenerateRing
from pinboundary.models import GeoPoint, RadialPoint, Viewport
from pinboundary.spatial.geodesy import destination_points, great_circle_distance_m

DEFAULT_RADIUS_M = 1000.0
MIN_RADIUS_M = 500.0
MAX_RADIUS_M = 3000.0
DEFAULT_RAY_COUNT = 180
DEFAULT_JITTER = (0.85, 1.15)


class UniformSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


def estimate_radius_m(
    viewport: Viewport | None,
    *,
    default_m: float = DEFAULT_RADIUS_M,
    min_m: float = MIN_RADIUS_M,
    max_m: float = MAX_RADIUS_M,
) -> float:
    if viewport is None:
        return float(default_m)
    diagonal = great_circle_distance_m(viewport.southwest, viewport.northeast)
    return float(min(max(diagonal / 2.0, min_m), max_m))


def sample_radial_points(
    centroid: GeoPoint,
    radius_m: float,
    ray_count: int = DEFAULT_RAY_COUNT,
    *,
    jitter: tuple[float, float] = DEFAULT_JITTER,
    rng: UniformSource | None = None,
) -> list[RadialPoint]:
    if ray_count < 3:
        raise DegenerateRing(ray_count)
    if radius_m <= 0:
        raise ValueError("radius_m must be > 0")
    rng = rng or random.Random()
    lo, hi = jitter

    angles = np.arange(ray_count, dtype=float) * 360.0 / ray_count
    distances = np.array([radius_m * rng.uniform(lo, hi) for _ in range(ray_count)], dtype=float)
    lats, lngs = destination_points(centroid, angles, distances)

    return [
        RadialPoint(point=GeoPoint(lat=float(lat), lng=float(lng)), angle=float(angle))
        for lat, lng, angle in zip(lats, lngs, angles)
    ]
