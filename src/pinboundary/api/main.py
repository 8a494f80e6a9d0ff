from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.gzip import GZipMiddleware

from pinboundary.api.schemas import CacheClearIn, CacheStats, ContainsResult, EntitiesIn, EntitiesResult, EntityCounts, PointIn
from pinboundary.boundary import service
from pinboundary.boundary.generator import BoundaryGenerator
from pinboundary.errors import GeocodeFailed, InvalidPincode
from pinboundary.models import BoundaryRecord, GeoPoint, utc_now_iso
from pinboundary.settings import load_settings
from pinboundary.spatial.classify import filter_entities_in_boundary

app = FastAPI(title="pinboundary API", version="0.1.0")
app.add_middleware(GZipMiddleware, minimum_size=1000)

CONFIG_PATH = Path(os.getenv("PINBOUNDARY_CONFIG", "config/default.yaml")).resolve()


@lru_cache(maxsize=1)
def _settings() -> dict[str, Any]:
    return load_settings(CONFIG_PATH)


def _generator() -> BoundaryGenerator:
    # Tests (or an embedding app) may have installed a generator already; only build one if not.
    return service.default_generator(lambda: BoundaryGenerator.from_settings(_settings()))


def _boundary_or_error(pincode: str) -> BoundaryRecord:
    try:
        service.validate_pincode(pincode)
    except InvalidPincode as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "error": "INVALID_PINCODE"}) from e
    try:
        return _generator().generate(pincode)
    except GeocodeFailed as e:
        raise HTTPException(
            status_code=404,
            detail={"message": "Could not generate boundary for this pincode", "error": "BOUNDARY_GENERATION_FAILED"},
        ) from e


@app.get("/health")
def health() -> dict[str, Any]:
    gen = _generator()
    return {
        "ok": True,
        "generated_at": utc_now_iso(),
        "provider_configured": gen.client.configured,
        "cache": gen.cache.stats(),
    }


@app.get("/pincode/{pincode}/polygon")
def pincode_polygon(pincode: str) -> dict[str, Any]:
    record = _boundary_or_error(pincode)
    return {
        "success": True,
        **record.to_dict(),
        "message": "Boundary generated using road-network approximation.",
    }


@app.post("/pincode/{pincode}/contains", response_model=ContainsResult)
def pincode_contains(pincode: str, point: PointIn) -> ContainsResult:
    record = _boundary_or_error(pincode)
    inside = service.is_point_in_boundary(GeoPoint(lat=point.lat, lng=point.lng), record.polygon)
    return ContainsResult(pincode=pincode, inside=inside)


@app.post("/pincode/{pincode}/entities", response_model=EntitiesResult)
def pincode_entities(pincode: str, body: EntitiesIn) -> EntitiesResult:
    record = _boundary_or_error(pincode)
    filtered = EntitiesIn(
        properties=filter_entities_in_boundary(body.properties, pincode, record.polygon),
        projects=filter_entities_in_boundary(body.projects, pincode, record.polygon, match_territories=True),
        professionals=filter_entities_in_boundary(body.professionals, pincode, record.polygon),
    )
    return EntitiesResult(
        pincode=pincode,
        centroid=record.centroid.to_dict(),
        entities=filtered,
        counts=EntityCounts(
            properties=len(filtered.properties),
            projects=len(filtered.projects),
            professionals=len(filtered.professionals),
        ),
    )


@app.get("/boundary-cache/stats", response_model=CacheStats)
def cache_stats() -> CacheStats:
    stats = _generator().cache.stats()
    return CacheStats(size=stats["size"], keys=stats["keys"])


@app.post("/boundary-cache/clear")
def cache_clear(body: CacheClearIn | None = None) -> dict[str, Any]:
    pincode = body.pincode if body is not None else None
    _generator().cache.invalidate(pincode or None)
    return {"success": True, "message": f"Cache cleared for {pincode}" if pincode else "All cache cleared"}
