from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, Callable

from pinboundary.models import BoundaryRecord


class BoundaryCache:
    """
    In-memory boundary records keyed by raw postal-code string.

    No TTL, no eviction, no key normalization. `get_or_compute` runs at most
    one generation per key at a time; concurrent callers for the same key
    wait on the in-flight computation and share its result or its exception.
    Nothing is stored when a computation fails.
    """

    def __init__(self) -> None:
        self._records: dict[str, BoundaryRecord] = {}
        self._inflight: dict[str, Future[BoundaryRecord]] = {}
        self._lock = threading.Lock()

    def get(self, postal_code: str) -> BoundaryRecord | None:
        with self._lock:
            return self._records.get(postal_code)

    def put(self, postal_code: str, record: BoundaryRecord) -> None:
        with self._lock:
            self._records[postal_code] = record

    def invalidate(self, postal_code: str | None = None) -> None:
        # An in-flight generation is not cancelled; its result still lands in the cache.
        with self._lock:
            if postal_code is None:
                self._records.clear()
            else:
                self._records.pop(postal_code, None)

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {"size": len(self._records), "keys": list(self._records.keys())}

    def __contains__(self, postal_code: object) -> bool:
        with self._lock:
            return postal_code in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get_or_compute(self, postal_code: str, compute: Callable[[], BoundaryRecord]) -> BoundaryRecord:
        with self._lock:
            record = self._records.get(postal_code)
            if record is not None:
                return record
            future = self._inflight.get(postal_code)
            owner = future is None
            if future is None:
                future = Future()
                self._inflight[postal_code] = future

        if not owner:
            return future.result()

        try:
            record = compute()
        except BaseException as e:
            with self._lock:
                self._inflight.pop(postal_code, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._records[postal_code] = record
            self._inflight.pop(postal_code, None)
        future.set_result(record)
        return record
