"""
Process-wide query surface for the rest of the application.

Callers that do not want to wire a `BoundaryGenerator` themselves use these
functions; they share one default generator (and therefore one cache) per
process. `configure_default_generator` replaces it, e.g. with one built from
a config file or, in tests, one with a fake client.
"""

from __future__ import annotations

import re
import threading
from typing import Any, Callable, Mapping

from pinboundary.boundary.generator import BoundaryGenerator
from pinboundary.errors import InvalidPincode
from pinboundary.models import BoundaryRecord, GeoPoint
from pinboundary.settings import DEFAULT_SETTINGS
from pinboundary.spatial.classify import PolygonLike, contains

_PINCODE_RE = re.compile(r"[0-9]{6}")

_default_generator: BoundaryGenerator | None = None
_default_lock = threading.Lock()


def validate_pincode(postal_code: str) -> str:
    if not isinstance(postal_code, str) or not _PINCODE_RE.fullmatch(postal_code):
        raise InvalidPincode(str(postal_code))
    return postal_code


def default_generator(factory: Callable[[], BoundaryGenerator] | None = None) -> BoundaryGenerator:
    """Return the process default generator, creating it with `factory` (or built-in defaults) if absent."""
    global _default_generator
    with _default_lock:
        if _default_generator is None:
            if factory is not None:
                _default_generator = factory()
            else:
                _default_generator = BoundaryGenerator.from_settings(DEFAULT_SETTINGS)
        return _default_generator


def configure_default_generator(generator: BoundaryGenerator | None) -> None:
    """Install `generator` as the process default (`None` resets to lazy creation)."""
    global _default_generator
    with _default_lock:
        _default_generator = generator


def generate_boundary(postal_code: str) -> BoundaryRecord:
    return default_generator().generate(postal_code)


def is_point_in_boundary(point: GeoPoint | Mapping[str, Any], polygon: PolygonLike) -> bool:
    return contains(point, polygon)


def clear_boundary_cache(postal_code: str | None = None) -> None:
    default_generator().cache.invalidate(postal_code)


def get_cache_stats() -> dict[str, Any]:
    return default_generator().cache.stats()
