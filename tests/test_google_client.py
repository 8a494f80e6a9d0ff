"""
Unit tests for the Google Maps HTTP client.

These tests never contact the network; `FakeSession` returns programmed
responses and the injected sleep function records backoff delays.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

from conftest import GEOCODE_URL, FakeResponse, FakeSession
from pinboundary.errors import ProviderError
from pinboundary.providers.google_client import GoogleMapsClient


def _sequence(*responses: FakeResponse):
    queue = list(responses)
    return lambda params: queue.pop(0)


def test_get_json_attaches_key_and_timeout(make_client) -> None:
    session = FakeSession({GEOCODE_URL: _sequence(FakeResponse(payload={"status": "OK", "results": []}))})
    client = make_client(session, request_timeout_s=3.5)

    data = client.geocode(components="postal_code:380015|country:IN")

    assert data == {"status": "OK", "results": []}
    call = session.get_calls[0]
    assert call["params"]["key"] == "test-key"
    assert call["params"]["components"] == "postal_code:380015|country:IN"
    assert call["timeout"] == 3.5


def test_get_json_retries_transient_errors(make_client, sleeps) -> None:
    session = FakeSession(
        {
            GEOCODE_URL: _sequence(
                FakeResponse(status_code=429, payload={}, headers={"Retry-After": "2"}),
                FakeResponse(status_code=503, payload={}),
                FakeResponse(payload={"status": "OK"}),
            )
        }
    )
    client = make_client(session, max_retries=2, retry_backoff_initial_s=0.5)

    assert client.get_json(GEOCODE_URL) == {"status": "OK"}
    assert len(session.get_calls) == 3
    # First sleep honours Retry-After; second is exponential backoff (0.5 * 2) plus small jitter.
    assert sleeps[0] == 2.0
    assert 1.0 <= sleeps[1] <= 1.1


def test_get_json_gives_up_after_max_retries(make_client) -> None:
    session = FakeSession({GEOCODE_URL: lambda params: FakeResponse(status_code=503, payload={}, text="unavailable")})
    client = make_client(session, max_retries=1)

    with pytest.raises(ProviderError) as exc:
        client.get_json(GEOCODE_URL)
    assert exc.value.status_code == 503
    assert len(session.get_calls) == 2


def test_get_json_wraps_timeouts(make_client) -> None:
    def timeout(params):
        raise requests.Timeout("read timed out")

    client = make_client(FakeSession({GEOCODE_URL: timeout}))
    with pytest.raises(ProviderError) as exc:
        client.get_json(GEOCODE_URL, params={"components": "x"})
    # The key is redacted from error messages.
    assert "test-key" not in str(exc.value)


def test_get_json_rejects_non_json(make_client) -> None:
    client = make_client(FakeSession({GEOCODE_URL: lambda params: FakeResponse(payload=None, text="<html>")}))
    with pytest.raises(ProviderError):
        client.get_json(GEOCODE_URL)


def test_unconfigured_client_does_not_touch_network(make_client) -> None:
    session = FakeSession({})
    client = make_client(session, api_key=None)
    assert client.configured is False
    with pytest.raises(ProviderError):
        client.get_json(GEOCODE_URL)
    assert session.get_calls == []


def test_from_env_reads_key_and_settings(monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    monkeypatch.setenv("VITE_GOOGLE_MAPS_API_KEY", "vite-key")
    client = GoogleMapsClient.from_env(settings={"google": {"request_timeout_s": 4, "max_retries": 0}})
    assert client.api_key == "vite-key"
    assert client.request_timeout_s == 4.0
    assert client.max_retries == 0
    assert client.session is None


def test_throttle_spaces_calls_from_concurrent_threads(make_client, sleeps, monkeypatch) -> None:
    # Frozen clock: every caller arrives at the same instant and must queue behind the others.
    monkeypatch.setattr("pinboundary.providers.google_client.time.monotonic", lambda: 100.0)
    client = make_client(FakeSession({}), min_request_interval_s=1.0)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: client._throttle(), range(8)))

    # The first caller goes straight through; the rest each get a distinct slot.
    assert sorted(sleeps) == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0]
    assert client._last_call_monotonic_s == 107.0
