"""
Ring operations: angular ordering, corner-cutting smoothing, closure.

Rings here are sequences of `(lng, lat)` tuples. An "open" ring does not
repeat its first position at the end; `close_ring` produces the closed form a
`Polygon` requires. The smoothing step treats its input as closed even though
it is stored open.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np
from scipy.spatial import ConvexHull

from pinboundary.errors import DegenerateRing
from pinboundary.models import GeoPoint, LngLat


def polar_angles(ring: Sequence[LngLat], centroid: GeoPoint) -> list[float]:
    # atan2(dlat, dlng): angle in radians, counter-clockwise from east, in (-pi, pi].
    return [math.atan2(lat - centroid.lat, lng - centroid.lng) for lng, lat in ring]


def sort_by_angle(points: Iterable[GeoPoint], centroid: GeoPoint) -> list[LngLat]:
    """
    Order points into an open ring by polar angle around the centroid.

    Road snapping can move points along a road past their neighbours, so the
    original ray order no longer describes a simple ring. Re-sorting by the
    true angle around the centroid restores one.
    """
    coords = [p.as_lnglat() for p in points]
    if not coords:
        return []
    angles = np.asarray(polar_angles(coords, centroid), dtype=float)
    # Stable sort keeps input order for points sharing an angle.
    order = np.argsort(angles, kind="stable")
    return [coords[int(i)] for i in order]


def chaikin_smooth(ring: Sequence[LngLat], iterations: int = 3) -> list[LngLat]:
    """
    Chaikin corner cutting over a closed ring stored open.

    Each iteration replaces every edge (p0, p1), including the wrap-around edge
    from the last point to the first, with the two points
    q = 0.75*p0 + 0.25*p1 and r = 0.25*p0 + 0.75*p1.
    Output length is exactly len(ring) * 2**iterations.
    """
    if iterations < 0:
        raise ValueError("iterations must be >= 0")
    if len(ring) < 3:
        raise DegenerateRing(len(ring))

    pts = np.asarray(ring, dtype=float)
    for _ in range(iterations):
        nxt = np.roll(pts, -1, axis=0)
        out = np.empty((pts.shape[0] * 2, 2), dtype=float)
        out[0::2] = 0.75 * pts + 0.25 * nxt
        out[1::2] = 0.25 * pts + 0.75 * nxt
        pts = out
    return [(float(x), float(y)) for x, y in pts]


def close_ring(ring: Sequence[LngLat]) -> list[LngLat]:
    closed = list(ring)
    if closed and closed[0] != closed[-1]:
        closed.append(closed[0])
    return closed


def _orientation(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> np.ndarray:
    # Sign of the cross product (b - a) x (c - a); broadcasts over leading axes.
    return (b[..., 0] - a[..., 0]) * (c[..., 1] - a[..., 1]) - (b[..., 1] - a[..., 1]) * (c[..., 0] - a[..., 0])


def ring_self_intersects(ring: Sequence[LngLat]) -> bool:
    """
    True when two non-adjacent edges of the (open) ring properly cross.

    Touching or collinear-overlapping edges are not reported.
    """
    pts = np.asarray(ring, dtype=float)
    n = pts.shape[0]
    if n < 4:
        return False
    starts = pts
    ends = np.roll(pts, -1, axis=0)
    for i in range(n - 2):
        j = np.arange(i + 2, n)
        if i == 0:
            # Edge n-1 wraps around to point 0 and is adjacent to edge 0.
            j = j[j != n - 1]
        if j.size == 0:
            continue
        p1, p2 = starts[i], ends[i]
        q1, q2 = starts[j], ends[j]
        d1 = _orientation(q1, q2, p1)
        d2 = _orientation(q1, q2, p2)
        d3 = _orientation(p1, p2, q1)
        d4 = _orientation(p1, p2, q2)
        if bool(np.any((d1 * d2 < 0) & (d3 * d4 < 0))):
            return True
    return False


def convex_hull_ring(ring: Sequence[LngLat]) -> list[LngLat]:
    """Open ring of the convex hull vertices, counter-clockwise."""
    if len(ring) < 3:
        raise DegenerateRing(len(ring))
    pts = np.asarray(ring, dtype=float)
    hull = ConvexHull(pts)
    return [(float(pts[i, 0]), float(pts[i, 1])) for i in hull.vertices]
