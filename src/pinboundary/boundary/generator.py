"""
Boundary generation pipeline for one postal code.

Stages, in order:
1) Geocode the postal code (centroid, viewport, localities). Fatal on failure.
2) Estimate a search radius from the viewport and cast jittered radial rays.
3) Snap the ray endpoints to roads; fall back to the raw rays when too few
   snapped points survive.
4) Order the points by angle around the centroid, guard against a
   self-intersecting ring, and smooth it with Chaikin corner cutting.
5) Close the ring and package everything into a `BoundaryRecord`.

Results are memoised per postal code in an injected `BoundaryCache`, which
also coalesces concurrent first-time requests for the same code.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Sequence

from scipy.spatial import QhullError

from pinboundary.boundary.cache import BoundaryCache
from pinboundary.boundary.config import BoundaryConfig
from pinboundary.boundary.sampling import UniformSource, estimate_radius_m, sample_radial_points
from pinboundary.log import LOGGER_NAME
from pinboundary.models import BoundaryRecord, GeoPoint, LngLat, Polygon, Viewport
from pinboundary.providers.geocode import resolve_pincode
from pinboundary.providers.google_client import GoogleMapsClient
from pinboundary.providers.roads import snap_points_to_roads
from pinboundary.spatial.classify import contains, ring_to_points
from pinboundary.spatial.rings import (
    chaikin_smooth,
    close_ring,
    convex_hull_ring,
    ring_self_intersects,
    sort_by_angle,
)


def assemble_boundary(
    postal_code: str,
    smoothed_ring: Sequence[LngLat],
    centroid: GeoPoint,
    *,
    viewport: Viewport | None,
    place_id: str | None,
    localities: Sequence[str],
    radius_m: float,
    snapped: bool,
) -> BoundaryRecord:
    closed = close_ring(smoothed_ring)
    polygon = Polygon.from_ring(closed)
    return BoundaryRecord(
        postal_code=postal_code,
        centroid=centroid,
        viewport=viewport,
        polygon=polygon,
        boundary_points=tuple(ring_to_points(polygon.ring)),
        localities=tuple(localities),
        place_id=place_id,
        radius_m=float(radius_m),
        snapped=snapped,
    )


class BoundaryGenerator:
    def __init__(
        self,
        client: GoogleMapsClient,
        cache: BoundaryCache | None = None,
        config: BoundaryConfig | None = None,
        *,
        rng: UniformSource | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else BoundaryCache()
        self.config = config or BoundaryConfig()
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    @classmethod
    def from_settings(cls, settings: dict[str, Any], *, cache: BoundaryCache | None = None) -> "BoundaryGenerator":
        return cls(
            client=GoogleMapsClient.from_env(settings=settings),
            cache=cache,
            config=BoundaryConfig.from_settings(settings),
        )

    def generate(self, postal_code: str) -> BoundaryRecord:
        """
        Return the boundary for `postal_code`, generating it on first request.

        Raises GeocodeFailed when the postal code cannot be geocoded; nothing
        is cached in that case, so a later call retries.
        """
        cached = self.cache.get(postal_code)
        if cached is not None:
            self.logger.info("Cache hit for pincode: %s", postal_code)
            return cached
        return self.cache.get_or_compute(postal_code, lambda: self._build(postal_code))

    def _ensure_simple(self, ring: list[LngLat], centroid: GeoPoint) -> list[LngLat]:
        if not ring_self_intersects(ring):
            return ring
        if self.config.simplicity_fallback == "none":
            self.logger.warning("Ring is self-intersecting; keeping it as-is")
            return ring
        try:
            hull = convex_hull_ring(ring)
        except QhullError as e:
            self.logger.warning("Ring is self-intersecting and convex hull failed (%s); keeping it as-is", e)
            return ring
        self.logger.warning("Ring is self-intersecting; replaced by its convex hull (%s -> %s points)", len(ring), len(hull))
        return sort_by_angle(ring_to_points(hull), centroid)

    def _build(self, postal_code: str) -> BoundaryRecord:
        cfg = self.config
        log = self.logger
        log.info("Generating boundary for pincode: %s", postal_code)

        geo = resolve_pincode(self.client, postal_code, country=cfg.country)
        centroid = geo.centroid
        log.info("Geocoded %s: centroid=%s,%s", postal_code, centroid.lat, centroid.lng)

        radius_m = estimate_radius_m(
            geo.viewport,
            default_m=cfg.default_radius_m,
            min_m=cfg.min_radius_m,
            max_m=cfg.max_radius_m,
        )
        log.info("Base radius: %.1fm", radius_m)

        radial = sample_radial_points(
            centroid,
            radius_m,
            cfg.ray_count,
            jitter=(cfg.jitter_min, cfg.jitter_max),
            rng=self.rng,
        )
        log.info("Generated %s radial points", len(radial))

        snapped = snap_points_to_roads(
            self.client,
            radial,
            batch_size=cfg.snap_batch_size,
            batch_delay_s=cfg.snap_batch_delay_s,
        )
        log.info("Snapped %s points to roads", len(snapped))

        use_snapped = len(snapped) >= cfg.min_snapped_points
        if use_snapped:
            points = [s.point for s in snapped]
        else:
            log.info(
                "Only %s snapped points (< %s); using unsnapped radial points",
                len(snapped),
                cfg.min_snapped_points,
            )
            points = [r.point for r in radial]

        ring = self._ensure_simple(sort_by_angle(points, centroid), centroid)
        smoothed = chaikin_smooth(ring, cfg.smoothing_iterations)
        log.info("Smoothed to %s points", len(smoothed))

        record = assemble_boundary(
            postal_code,
            smoothed,
            centroid,
            viewport=geo.viewport,
            place_id=geo.place_id,
            localities=geo.localities,
            radius_m=radius_m,
            snapped=use_snapped,
        )
        if not contains(centroid, record.polygon):
            log.warning("Centroid of %s lies outside its generated boundary", postal_code)
        log.info("Successfully generated boundary for %s (%s points)", postal_code, record.point_count)
        return record
