"""
HTTP client for the Google Maps web services used by boundary generation.

Three endpoint families are consumed: Geocoding (pincode -> centroid),
Roads snapToRoads (raw points -> road-aligned points) and Places nearby
search (centroid -> neighbourhood names).

Why we wrap `requests` instead of calling it directly in each stage:
- Centralize the API key (read from the environment, never from config).
- Centralize throttling (the roads stage fires several calls back to back).
- Centralize timeouts and retries so every stage sees the same failure type,
  `ProviderError`, and can apply its own fallback policy to it.
"""

from __future__ import annotations

import logging
import os
import time
import random
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

import requests

from pinboundary.errors import ProviderError
from pinboundary.log import LOGGER_NAME

# Status codes worth retrying: rate limiting and transient upstream failures.
_TRANSIENT_STATUS = {429, 500, 502, 503, 504}

# The original deployment exposed the key under its frontend build name; accept both.
API_KEY_ENV_VARS = ("GOOGLE_MAPS_API_KEY", "VITE_GOOGLE_MAPS_API_KEY")


def _safe_response_text(resp: requests.Response, *, limit: int = 500) -> str:
    # Response bodies can be large; truncate so logs stay readable.
    try:
        text = resp.text
    except Exception:
        return "<unreadable response body>"
    return text.strip()[:limit]


def _redact(params: dict[str, Any]) -> dict[str, Any]:
    # Never write the API key to logs or exception messages.
    return {k: ("***" if k == "key" else v) for k, v in params.items()}


@dataclass
class GoogleMapsClient:
    # API key for all three services; `None` means "not configured".
    api_key: str | None
    geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    roads_url: str = "https://roads.googleapis.com/v1/snapToRoads"
    places_url: str = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
    # Per-request timeout; a timeout is handled like any other provider error.
    request_timeout_s: float = 10.0
    # Minimum interval between network calls to respect API limits (seconds).
    min_request_interval_s: float = 0.0
    # Max retries for transient errors (429/5xx) before failing.
    max_retries: int = 2
    retry_backoff_initial_s: float = 0.5
    retry_backoff_max_s: float = 5.0
    # Optional sleep function injection (tests can stub).
    sleep_fn: Callable[[float], None] | None = None
    # Optional logger injection for tests or custom logging setups.
    logger: logging.Logger | None = None
    # Optional session injection so tests can stub network calls and prod can reuse connections.
    session: requests.Session | None = None
    # Monotonic timestamp of last network call (for throttling).
    _last_call_monotonic_s: float = 0.0
    # Shared by concurrent generations; guards `_last_call_monotonic_s`.
    _throttle_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _log(self) -> logging.Logger:
        return self.logger or logging.getLogger(LOGGER_NAME)

    def _http(self) -> requests.Session:
        # Lazily create a session so callers who never use the network do not allocate one.
        if self.session is None:
            self.session = requests.Session()
        return self.session

    def sleep(self, seconds: float) -> None:
        (self.sleep_fn or time.sleep)(max(0.0, float(seconds)))

    def _throttle(self) -> None:
        # Use monotonic time so sleeps are stable across clock changes.
        min_dt = float(self.min_request_interval_s)
        if min_dt <= 0:
            return
        # Reserve the next slot under the lock, then sleep outside it.
        with self._throttle_lock:
            now = time.monotonic()
            wait = max(0.0, float(self._last_call_monotonic_s) + min_dt - now)
            self._last_call_monotonic_s = now + wait
        if wait > 0:
            self.sleep(wait)

    @classmethod
    def from_env(cls, *, settings: dict[str, Any]) -> "GoogleMapsClient":
        # Read the key from env vars so we do not store secrets in config files.
        api_key = next((os.getenv(name) for name in API_KEY_ENV_VARS if os.getenv(name)), None)
        google = settings.get("google", {}) or {}
        return cls(
            api_key=api_key,
            geocode_url=str(google.get("geocode_url", cls.geocode_url)),
            roads_url=str(google.get("roads_url", cls.roads_url)),
            places_url=str(google.get("places_url", cls.places_url)),
            request_timeout_s=float(google.get("request_timeout_s", 10.0)),
            min_request_interval_s=float(google.get("min_request_interval_s", 0.0)),
            max_retries=int(google.get("max_retries", 2)),
            retry_backoff_initial_s=float(google.get("retry_backoff_initial_s", 0.5)),
            retry_backoff_max_s=float(google.get("retry_backoff_max_s", 5.0)),
            logger=logging.getLogger(LOGGER_NAME),
        )

    def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        """
        GET `url` with the API key attached and return the decoded JSON body.

        Raises ProviderError on missing key, network failure, timeout, a
        non-2xx status after retries, or a non-JSON body.
        """
        if not self.configured:
            raise ProviderError("No Google Maps API key configured")
        # Copy params so callers can reuse their dict without it being mutated by us.
        params = dict(params or {})
        params["key"] = self.api_key

        resp: requests.Response | None = None
        for attempt in range(int(self.max_retries) + 1):
            self._throttle()
            try:
                resp = self._http().get(url, params=params, timeout=self.request_timeout_s)
            except requests.RequestException as e:
                # Timeouts and connection errors are not retried; the stage decides the fallback.
                raise ProviderError(f"Request failed: url={url} params={_redact(params)} error={e}") from e

            if resp.status_code in _TRANSIENT_STATUS and attempt < int(self.max_retries):
                retry_after = resp.headers.get("Retry-After") if hasattr(resp, "headers") else None
                sleep_s = None
                if retry_after:
                    try:
                        sleep_s = float(retry_after)
                    except ValueError:
                        sleep_s = None
                if sleep_s is None:
                    base = float(self.retry_backoff_initial_s) * (2 ** attempt)
                    # Add a small jitter to avoid herd effects across concurrent generations.
                    sleep_s = min(float(self.retry_backoff_max_s), base) + random.uniform(0, 0.1)
                self._log().warning(
                    "Provider transient error %s, retrying in %.2fs (attempt %s/%s)",
                    resp.status_code,
                    sleep_s,
                    attempt + 1,
                    self.max_retries,
                )
                self.sleep(sleep_s)
                continue
            break

        if resp is None:
            raise ProviderError(f"Request failed: url={url} no response")
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise ProviderError(
                f"Request failed: url={url} status={resp.status_code} body={_safe_response_text(resp)}",
                status_code=int(resp.status_code),
            ) from e
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"Non-JSON response: url={url} body={_safe_response_text(resp)}") from e

    def geocode(self, *, components: str) -> Any:
        return self.get_json(self.geocode_url, params={"components": components})

    def snap_to_roads(self, *, path: str, interpolate: bool = True) -> Any:
        return self.get_json(self.roads_url, params={"path": path, "interpolate": "true" if interpolate else "false"})

    def nearby_search(self, *, location: str, radius_m: int, place_type: str) -> Any:
        return self.get_json(
            self.places_url,
            params={"location": location, "radius": int(radius_m), "type": place_type},
        )
