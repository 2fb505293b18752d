"""Optional live sky positions for the planets.

The simulated orbits are always available; a provider can replace a body's
position with one derived from observed right ascension and declination. The
network call runs on a background worker on a slow cadence and its result is
picked up by a later :meth:`LivePositionProvider.poll`, so frame evaluation
never waits for it. Any failure leaves the simulated model in charge and is
reported through ``advisory``.
"""
from __future__ import annotations

import math
import re
from concurrent.futures import CancelledError, Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Protocol

import numpy as np
import requests

from impact_sim.core.config import FETCH_CFG, FetchCfg
from impact_sim.core.numeric import deg_to_rad
from impact_sim.core.timekeeping import CadenceTimer


class PositionProvider(Protocol):
    advisory: str | None

    def poll(self, now: float) -> None: ...

    def try_get_latest(self, body_name: str) -> np.ndarray | None: ...


class NullPositionProvider:
    """Provider that never has data; the simulated model is used throughout."""

    advisory: str | None = None

    def poll(self, now: float) -> None:
        return None

    def try_get_latest(self, body_name: str) -> np.ndarray | None:
        return None


@dataclass(frozen=True)
class AstronomicalPosition:
    name: str
    ra: str
    dec: str
    az: str = ""
    alt: str = ""


_RA_PATTERN = re.compile(r"(\d+)h\s*(\d+)min\s*(\d+(?:\.\d+)?)s")
_DEC_PATTERN = re.compile(r"([+-]?)\s*(\d+)°\s*(\d+)'\s*(\d+(?:\.\d+)?)\"")


def parse_right_ascension(ra: str) -> float:
    """``"5h 23min 12s"`` -> degrees (one hour of right ascension is 15°)."""

    match = _RA_PATTERN.search(ra)
    if match is None:
        raise ValueError(f"Unrecognised right ascension: {ra!r}")
    hours, minutes, seconds = (float(part) for part in match.groups())
    return (hours + minutes / 60.0 + seconds / 3600.0) * 15.0


def parse_declination(dec: str) -> float:
    """``"-12°34'56\\""`` -> signed degrees; the sign also applies to ``-0°``."""

    match = _DEC_PATTERN.search(dec)
    if match is None:
        raise ValueError(f"Unrecognised declination: {dec!r}")
    sign, degrees, minutes, seconds = match.groups()
    value = float(degrees) + float(minutes) / 60.0 + float(seconds) / 3600.0
    return -value if sign == "-" else value


def astronomical_to_cartesian(ra: str, dec: str, distance: float = 1.0) -> np.ndarray:
    """Convert sky coordinates to the scene frame (+Y towards the celestial pole)."""

    ra_rad = deg_to_rad(parse_right_ascension(ra))
    dec_rad = deg_to_rad(parse_declination(dec))
    return np.array(
        [
            distance * math.cos(dec_rad) * math.cos(ra_rad),
            distance * math.sin(dec_rad),
            distance * math.cos(dec_rad) * math.sin(ra_rad),
        ],
        dtype=float,
    )


PLANET_NAME_MAP: dict[str, str] = {
    "Mercury": "Mercury",
    "Mercure": "Mercury",
    "Venus": "Venus",
    "Vénus": "Venus",
    "Mars": "Mars",
    "Jupiter": "Jupiter",
    "Saturn": "Saturn",
    "Saturne": "Saturn",
    "Uranus": "Uranus",
    "Neptune": "Neptune",
    "Moon": "Moon",
    "Lune": "Moon",
    "Sun": "Sun",
    "Soleil": "Sun",
    "Earth": "Earth",
    "Terre": "Earth",
}


def map_planet_name(api_name: str) -> str | None:
    return PLANET_NAME_MAP.get(api_name.strip())


def fetch_celestial_positions(
    session: requests.Session,
    cfg: FetchCfg = FETCH_CFG,
    when: datetime | None = None,
) -> list[AstronomicalPosition]:
    """Query the positions endpoint once and return the parsed entries."""

    when = when or datetime.now(timezone.utc)
    params = {
        "lat": str(cfg.latitude),
        "lon": str(cfg.longitude),
        "elev": str(cfg.elevation),
        "zone": str(cfg.timezone),
        "datetime": when.isoformat(),
    }
    headers = {"accept": "application/json"}
    if cfg.token:
        headers["Authorization"] = f"Bearer {cfg.token}"
    response = session.get(
        f"{cfg.base_url}/positions",
        params=params,
        headers=headers,
        timeout=cfg.timeout_s,
    )
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict) or not isinstance(payload.get("positions"), list):
        raise ValueError("Positions payload has no 'positions' list")
    entries: list[AstronomicalPosition] = []
    for item in payload["positions"]:
        if not isinstance(item, dict) or "name" not in item:
            continue
        entries.append(
            AstronomicalPosition(
                name=str(item["name"]),
                ra=str(item.get("ra", "")),
                dec=str(item.get("dec", "")),
                az=str(item.get("az", "")),
                alt=str(item.get("alt", "")),
            )
        )
    return entries


Fetcher = Callable[[], list[AstronomicalPosition]]


class LivePositionProvider:
    """Fire-and-forget fetcher of observed planet positions.

    Only the latest completed fetch is consulted. Bodies missing from it fall
    back to the simulated orbit. Each body is placed at ``distances[name]``
    from the origin along its observed direction.
    """

    def __init__(
        self,
        distances: dict[str, float],
        *,
        cfg: FetchCfg = FETCH_CFG,
        session: requests.Session | None = None,
        fetcher: Fetcher | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._distances = dict(distances)
        self._cfg = cfg
        self._session = session
        self._fetcher = fetcher
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="positions")
        self._cadence = CadenceTimer(cfg.interval_s)
        self._pending: Future | None = None
        self._latest: dict[str, np.ndarray] = {}
        self.advisory: str | None = None

    @classmethod
    def from_catalog(cls, catalog: Iterable, **kwargs) -> "LivePositionProvider":
        distances = {body.name: body.orbit.semi_major_axis for body in catalog}
        return cls(distances, **kwargs)

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def poll(self, now: float) -> None:
        if self._pending is not None and self._pending.done():
            self._apply(self._pending)
            self._pending = None
        if self._pending is None and self._cadence.due(now):
            self._pending = self._executor.submit(self._fetch)

    def wait(self, timeout: float | None = None) -> None:
        """Block until the in-flight fetch finishes and apply it."""

        if self._pending is None:
            return
        future = self._pending
        self._pending = None
        if future.cancelled():
            return
        try:
            future.exception(timeout=timeout)
        except FutureTimeoutError:
            self._pending = future
            return
        except CancelledError:
            return
        self._apply(future)

    def try_get_latest(self, body_name: str) -> np.ndarray | None:
        position = self._latest.get(body_name)
        return None if position is None else position.copy()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        if self._session is not None:
            self._session.close()

    def _fetch(self) -> list[AstronomicalPosition]:
        if self._fetcher is not None:
            return self._fetcher()
        if self._session is None:
            self._session = requests.Session()
        return fetch_celestial_positions(self._session, self._cfg)

    def _fail(self, exc: BaseException) -> None:
        self._latest = {}
        self.advisory = f"Live positions unavailable, using simulated orbits ({exc})"

    def _apply(self, future: Future) -> None:
        if future.cancelled():
            return
        try:
            entries = future.result()
        except Exception as exc:  # noqa: BLE001 - worker failures never reach the frame loop
            self._fail(exc)
            return

        latest: dict[str, np.ndarray] = {}
        skipped: list[str] = []
        for entry in entries:
            name = map_planet_name(entry.name)
            if name is None or name not in self._distances:
                continue
            try:
                latest[name] = astronomical_to_cartesian(entry.ra, entry.dec, self._distances[name])
            except ValueError:
                skipped.append(name)
        self._latest = latest
        if skipped:
            self.advisory = f"Unreadable coordinates for {', '.join(sorted(skipped))}"
        else:
            self.advisory = None


__all__ = [
    "AstronomicalPosition",
    "LivePositionProvider",
    "NullPositionProvider",
    "PLANET_NAME_MAP",
    "PositionProvider",
    "astronomical_to_cartesian",
    "fetch_celestial_positions",
    "map_planet_name",
    "parse_declination",
    "parse_right_ascension",
]
