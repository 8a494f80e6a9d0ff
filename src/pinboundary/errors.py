"""Exception hierarchy for pinboundary."""

from __future__ import annotations


class BoundaryError(RuntimeError):
    """Base exception for all pinboundary errors."""


class InvalidPincode(BoundaryError, ValueError):
    """The provided string is not a 6-digit postal code."""

    def __init__(self, postal_code: str):
        self.postal_code = postal_code
        super().__init__(f"Valid 6-digit pincode is required, got: '{postal_code}'")


class ProviderError(BoundaryError):
    """An external provider call failed after retries (HTTP error, timeout, bad payload)."""

    def __init__(self, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class GeocodeFailed(BoundaryError):
    """The geocoder returned no usable result for a postal code."""

    def __init__(self, postal_code: str, status: str | None = None):
        self.postal_code = postal_code
        self.status = status
        detail = f" (status={status})" if status else ""
        super().__init__(f"Failed to geocode pincode '{postal_code}'{detail}")


class SnapBatchFailed(BoundaryError):
    """One road-snapping batch failed. Caught by the snapper; never escapes it."""

    def __init__(self, batch_start: int, batch_size: int, reason: str):
        self.batch_start = batch_start
        self.batch_size = batch_size
        super().__init__(f"Road snap batch failed at offset {batch_start} ({batch_size} points): {reason}")


class DegenerateRing(BoundaryError, ValueError):
    """A ring has too few points to form a polygon."""

    def __init__(self, count: int, minimum: int = 3):
        self.count = count
        self.minimum = minimum
        super().__init__(f"Ring needs at least {minimum} points, got {count}")
