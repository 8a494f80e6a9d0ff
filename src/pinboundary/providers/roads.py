"""
Snap sampled boundary points onto the road network.

The roads API accepts a bounded path per call, so points are sent in batches.
A failed batch is dropped and logged; this stage never raises. The caller
decides whether enough points survived to be useful.
"""

from __future__ import annotations

from typing import Any, Sequence

from pinboundary.errors import ProviderError, SnapBatchFailed
from pinboundary.log import get_logger
from pinboundary.models import GeoPoint, RadialPoint, SnappedPoint
from pinboundary.providers.google_client import GoogleMapsClient

# Path length limit of the snapToRoads endpoint (100) with some headroom.
DEFAULT_BATCH_SIZE = 90
DEFAULT_BATCH_DELAY_S = 0.1


def _path_param(batch: Sequence[RadialPoint]) -> str:
    # The roads API expects `lat,lng` pairs separated by `|`.
    return "|".join(f"{rp.point.lat},{rp.point.lng}" for rp in batch)


def _parse_batch(payload: Any, batch_start: int, batch_size: int) -> list[SnappedPoint]:
    if not isinstance(payload, dict):
        raise SnapBatchFailed(batch_start, batch_size, f"unexpected payload type {type(payload).__name__}")
    snapped: list[SnappedPoint] = []
    # Interpolated points carry no originalIndex; they inherit the last indexed point's.
    last_index = 0
    for item in payload.get("snappedPoints") or []:
        try:
            point = GeoPoint.from_mapping(item["location"])
        except (KeyError, TypeError, ValueError) as e:
            raise SnapBatchFailed(batch_start, batch_size, f"malformed snapped point {item!r}") from e
        if item.get("originalIndex") is not None:
            last_index = int(item["originalIndex"])
        snapped.append(SnappedPoint(point=point, original_index=batch_start + last_index))
    return snapped


def snap_points_to_roads(
    client: GoogleMapsClient,
    points: Sequence[RadialPoint],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay_s: float = DEFAULT_BATCH_DELAY_S,
    interpolate: bool = True,
) -> list[SnappedPoint]:
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")
    logger = get_logger()
    if not client.configured:
        logger.warning("No API key for road snapping; skipping")
        return []

    snapped: list[SnappedPoint] = []
    for start in range(0, len(points), batch_size):
        batch = points[start : start + batch_size]
        try:
            try:
                payload = client.snap_to_roads(path=_path_param(batch), interpolate=interpolate)
            except ProviderError as e:
                raise SnapBatchFailed(start, len(batch), str(e)) from e
            snapped.extend(_parse_batch(payload, start, len(batch)))
        except SnapBatchFailed as e:
            logger.warning("%s", e)

        # Pause between batches (not after the last) to stay under the provider's rate limit.
        if start + batch_size < len(points):
            client.sleep(batch_delay_s)

    return snapped
