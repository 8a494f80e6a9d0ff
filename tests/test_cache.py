from __future__ import annotations

import threading

import pytest

from pinboundary.boundary.cache import BoundaryCache
from pinboundary.boundary.generator import assemble_boundary
from pinboundary.models import BoundaryRecord, GeoPoint

SQUARE = [(72.0, 23.0), (72.01, 23.0), (72.01, 23.01), (72.0, 23.01)]


def _record(code: str) -> BoundaryRecord:
    return assemble_boundary(
        code,
        SQUARE,
        GeoPoint(lat=23.005, lng=72.005),
        viewport=None,
        place_id=None,
        localities=(),
        radius_m=1000.0,
        snapped=False,
    )


def test_get_put_invalidate_stats() -> None:
    cache = BoundaryCache()
    assert cache.get("380015") is None

    a = _record("380015")
    b = _record("380052")
    cache.put("380015", a)
    cache.put("380052", b)

    assert cache.get("380015") is a
    assert cache.stats() == {"size": 2, "keys": ["380015", "380052"]}
    assert "380015" in cache

    cache.invalidate("380015")
    assert cache.get("380015") is None
    assert len(cache) == 1

    cache.invalidate()
    assert cache.stats() == {"size": 0, "keys": []}


def test_keys_are_not_normalized() -> None:
    cache = BoundaryCache()
    cache.put("380015", _record("380015"))
    assert cache.get(" 380015") is None
    assert cache.get("380015 ") is None


def test_get_or_compute_runs_once_under_concurrency() -> None:
    cache = BoundaryCache()
    record = _record("380015")
    calls: list[int] = []
    entered = threading.Event()
    release = threading.Event()

    def compute() -> BoundaryRecord:
        calls.append(1)
        entered.set()
        assert release.wait(timeout=5)
        return record

    results: list[BoundaryRecord] = []
    threads = [threading.Thread(target=lambda: results.append(cache.get_or_compute("380015", compute))) for _ in range(8)]
    for t in threads:
        t.start()
    assert entered.wait(timeout=5)
    release.set()
    for t in threads:
        t.join(timeout=5)

    assert len(calls) == 1
    assert len(results) == 8
    assert all(r is record for r in results)
    assert cache.get("380015") is record


def test_get_or_compute_failure_is_not_cached() -> None:
    cache = BoundaryCache()

    def boom() -> BoundaryRecord:
        raise RuntimeError("geocoder down")

    with pytest.raises(RuntimeError):
        cache.get_or_compute("380015", boom)
    assert cache.get("380015") is None

    record = _record("380015")
    assert cache.get_or_compute("380015", lambda: record) is record
