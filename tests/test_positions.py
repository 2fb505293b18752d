"""Tests for sky coordinate parsing and the live position provider."""
from __future__ import annotations

import math
from concurrent.futures import Future
from datetime import datetime, timezone

import numpy as np
import pytest
import requests

from impact_sim.core.config import FetchCfg
from impact_sim.data.bodies import PLANET_CATALOG
from impact_sim.data.positions import (
    AstronomicalPosition,
    LivePositionProvider,
    NullPositionProvider,
    astronomical_to_cartesian,
    fetch_celestial_positions,
    map_planet_name,
    parse_declination,
    parse_right_ascension,
)


class ImmediateExecutor:
    """Runs submitted work synchronously."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:  # noqa: BLE001 - mirrors a worker thread
            future.set_exception(exc)
        return future

    def shutdown(self, wait=True, cancel_futures=False):
        pass


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls: list[dict] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        return self.response

    def close(self):
        self.closed = True


class TestParsing:
    def test_right_ascension(self):
        assert parse_right_ascension("5h 30min 0s") == pytest.approx(82.5)
        assert parse_right_ascension("0h 0min 36s") == pytest.approx(0.15)

    def test_declination(self):
        assert parse_declination("+12°30'0\"") == pytest.approx(12.5)
        assert parse_declination("-0°30'0\"") == pytest.approx(-0.5)
        assert parse_declination("45°0'36\"") == pytest.approx(45.01)

    def test_bad_strings(self):
        with pytest.raises(ValueError):
            parse_right_ascension("not a time")
        with pytest.raises(ValueError):
            parse_declination("")

    def test_cartesian(self):
        pos = astronomical_to_cartesian("6h 0min 0s", "0°0'0\"", 10.0)
        assert pos == pytest.approx([0.0, 0.0, 10.0], abs=1e-9)
        pole = astronomical_to_cartesian("0h 0min 0s", "+90°0'0\"", 2.0)
        assert pole == pytest.approx([0.0, 2.0, 0.0], abs=1e-9)
        assert np.linalg.norm(astronomical_to_cartesian("3h 12min 5s", "-20°1'2\"", 7.0)) == pytest.approx(7.0)

    def test_name_map(self):
        assert map_planet_name("Saturne") == "Saturn"
        assert map_planet_name(" Mars ") == "Mars"
        assert map_planet_name("Vénus") == "Venus"
        assert map_planet_name("Ceres") is None


class TestFetch:
    def test_request_and_parse(self):
        payload = {
            "positions": [
                {"name": "Mars", "ra": "1h 0min 0s", "dec": "+1°0'0\"", "az": "1", "alt": "2"},
                {"ra": "missing name"},
            ]
        }
        session = FakeSession(FakeResponse(payload))
        cfg = FetchCfg(base_url="https://example.test/api")
        when = datetime(2025, 1, 1, tzinfo=timezone.utc)
        entries = fetch_celestial_positions(session, cfg, when)
        assert entries == [AstronomicalPosition("Mars", "1h 0min 0s", "+1°0'0\"", "1", "2")]
        call = session.calls[0]
        assert call["url"] == "https://example.test/api/positions"
        assert call["params"]["datetime"] == when.isoformat()
        assert call["timeout"] == cfg.timeout_s

    def test_token_header(self, monkeypatch):
        monkeypatch.setenv("IMPACT_SIM_API_TOKEN", "secret")
        session = FakeSession(FakeResponse({"positions": []}))
        fetch_celestial_positions(session, FetchCfg())
        assert session.calls[0]["headers"]["Authorization"] == "Bearer secret"

    def test_malformed_payload(self):
        session = FakeSession(FakeResponse({"data": []}))
        with pytest.raises(ValueError):
            fetch_celestial_positions(session, FetchCfg())

    def test_http_error(self):
        session = FakeSession(FakeResponse({}, status=503))
        with pytest.raises(requests.HTTPError):
            fetch_celestial_positions(session, FetchCfg())


class TestLivePositionProvider:
    def _provider(self, fetcher, interval=300.0):
        return LivePositionProvider(
            {"Mars": 30.0, "Venus": 15.0},
            cfg=FetchCfg(interval_s=interval),
            fetcher=fetcher,
            executor=ImmediateExecutor(),
        )

    def test_null_provider(self):
        provider = NullPositionProvider()
        provider.poll(0.0)
        assert provider.try_get_latest("Earth") is None
        assert provider.advisory is None

    def test_result_applied_on_next_poll(self):
        entries = [AstronomicalPosition("Mars", "6h 0min 0s", "0°0'0\"")]
        provider = self._provider(lambda: entries)
        provider.poll(0.0)
        assert provider.pending
        assert provider.try_get_latest("Mars") is None
        provider.poll(1.0)
        assert not provider.pending
        assert provider.try_get_latest("Mars") == pytest.approx([0.0, 0.0, 30.0], abs=1e-9)
        assert provider.try_get_latest("Venus") is None
        assert provider.advisory is None

    def test_wait_applies_result(self):
        entries = [AstronomicalPosition("Vénus", "0h 0min 0s", "0°0'0\"")]
        provider = self._provider(lambda: entries)
        provider.poll(0.0)
        provider.wait(timeout=1.0)
        assert provider.try_get_latest("Venus") == pytest.approx([15.0, 0.0, 0.0])

    def test_cadence(self):
        calls = []

        def fetcher():
            calls.append(1)
            return []

        provider = self._provider(fetcher, interval=10.0)
        for now in (0.0, 1.0, 2.0, 5.0, 9.0):
            provider.poll(now)
        assert len(calls) == 1
        provider.poll(10.0)
        provider.poll(10.5)
        assert len(calls) == 2

    def test_failure_becomes_advisory(self):
        def fetcher():
            raise requests.ConnectionError("no route")

        provider = self._provider(fetcher)
        provider.poll(0.0)
        provider.wait()
        assert provider.advisory is not None
        assert "simulated" in provider.advisory
        assert provider.try_get_latest("Mars") is None

    def test_failure_after_success_drops_old_positions(self):
        outcomes = [[AstronomicalPosition("Mars", "6h 0min 0s", "0°0'0\"")], requests.ConnectionError("down")]

        def fetcher():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        provider = self._provider(fetcher, interval=10.0)
        provider.poll(0.0)
        provider.wait()
        assert provider.try_get_latest("Mars") is not None
        provider.poll(10.0)
        provider.wait()
        assert "simulated" in provider.advisory
        assert provider.try_get_latest("Mars") is None

    def test_unexpected_worker_error_becomes_advisory(self):
        def fetcher():
            raise RuntimeError("boom")

        provider = self._provider(fetcher)
        provider.poll(0.0)
        provider.poll(1.0)
        assert "boom" in provider.advisory
        assert provider.try_get_latest("Mars") is None

    def test_cancelled_fetch_is_ignored(self):
        future: Future = Future()
        future.cancel()

        class CancellingExecutor(ImmediateExecutor):
            def submit(self, fn, *args, **kwargs):
                return future

        provider = LivePositionProvider({"Mars": 30.0}, cfg=FetchCfg(), executor=CancellingExecutor())
        provider.poll(0.0)
        provider.poll(1.0)
        assert not provider.pending
        assert provider.advisory is None
        assert provider.try_get_latest("Mars") is None

    def test_bad_coordinates_skipped(self):
        entries = [
            AstronomicalPosition("Mars", "garbage", "0°0'0\""),
            AstronomicalPosition("Venus", "0h 0min 0s", "0°0'0\""),
        ]
        provider = self._provider(lambda: entries)
        provider.poll(0.0)
        provider.wait()
        assert provider.try_get_latest("Mars") is None
        assert provider.try_get_latest("Venus") is not None
        assert "Mars" in provider.advisory

    def test_returned_position_is_a_copy(self):
        entries = [AstronomicalPosition("Mars", "6h 0min 0s", "0°0'0\"")]
        provider = self._provider(lambda: entries)
        provider.poll(0.0)
        provider.wait()
        first = provider.try_get_latest("Mars")
        first[0] = 999.0
        assert provider.try_get_latest("Mars")[0] == pytest.approx(0.0, abs=1e-9)

    def test_from_catalog_uses_semi_major_axis(self):
        provider = LivePositionProvider.from_catalog(
            PLANET_CATALOG,
            fetcher=lambda: [AstronomicalPosition("Earth", "0h 0min 0s", "0°0'0\"")],
            executor=ImmediateExecutor(),
        )
        provider.poll(0.0)
        provider.wait()
        earth = next(body for body in PLANET_CATALOG if body.name == "Earth")
        assert provider.try_get_latest("Earth")[0] == pytest.approx(earth.orbit.semi_major_axis)
        assert math.isclose(float(np.linalg.norm(provider.try_get_latest("Earth"))), earth.orbit.semi_major_axis)
        provider.close()
