"""Scene state: body definitions, the focused-body selection and the frame loop."""
from __future__ import annotations

import json
import time as _time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

import numpy as np

from impact_sim.data.scenarios import (
    CUSTOM_SCENARIO_KEY,
    DEFAULT_SCENARIO_KEY,
    clamp_param,
    get_scenario,
)

from .config import SCENE_CFG, SceneCfg
from .indicators import DerivedIndicators, SimulationParams, compute_derived_indicators
from .kinematics import (
    FocusOverrides,
    OrbitParameters,
    advance_spin,
    asteroid_display_radius,
    asteroid_spin_rates,
    compute_focus_overrides,
    sample_asteroid_offset,
    sample_orbit_position,
)

if TYPE_CHECKING:  # pragma: no cover
    from impact_sim.data.positions import PositionProvider

    from .logging_utils import RunLogger


ASTEROID_NAME = "Asteroid"
SOURCE_SIMULATED = "simulated"
SOURCE_LIVE = "live"


@dataclass(frozen=True)
class RingGeometry:
    inner_radius: float
    outer_radius: float
    texture: str | None = None
    color: str = "#f5e2b5"
    opacity: float = 0.6
    tilt: tuple[float, float, float] = (-np.pi / 2, 0.0, 0.0)


@dataclass(frozen=True)
class CelestialBodyDefinition:
    """Static description of one orbiting body."""

    name: str
    texture: str
    scale: float
    rotation_speed: float
    color: str
    summary: str
    distance_au: float
    inclination_degrees: float
    orbit: OrbitParameters
    rings: RingGeometry | None = None


class SelectionState:
    """At most one focused body; ``None`` means nothing is selected."""

    def __init__(self, known_names: Iterable[str] | None = None) -> None:
        self._known = frozenset(known_names) if known_names is not None else None
        self._selected: str | None = None

    @property
    def selected(self) -> str | None:
        return self._selected

    def select(self, name: str) -> bool:
        """Focus ``name``. Returns ``True`` if the selection changed."""

        if self._known is not None and name not in self._known:
            raise KeyError(f"Unknown body: {name!r}")
        changed = name != self._selected
        self._selected = name
        return changed

    def deselect(self) -> bool:
        changed = self._selected is not None
        self._selected = None
        return changed

    select_none = deselect

    def is_selected(self, name: str) -> bool:
        return self._selected == name


@dataclass(frozen=True)
class FrameSnapshot:
    """Consistent view of the UI-owned state used for one whole frame."""

    params: SimulationParams
    selection: str | None


@dataclass(frozen=True)
class BodyFrame:
    name: str
    position: np.ndarray
    spin: float
    scale: float
    emissive_intensity: float = 0.0
    focused: bool = False
    source: str = SOURCE_SIMULATED


@dataclass(frozen=True)
class FrameState:
    time: float
    bodies: tuple[BodyFrame, ...]
    asteroid: BodyFrame | None
    indicators: DerivedIndicators
    selection: str | None
    advisory: str | None = None
    params: SimulationParams | None = None

    def body(self, name: str) -> BodyFrame:
        for frame in self.bodies:
            if frame.name == name:
                return frame
        if self.asteroid is not None and self.asteroid.name == name:
            return self.asteroid
        raise KeyError(name)


@dataclass
class SimState:
    """Mutable scene state driven by :meth:`tick` from any host loop.

    ``params`` and ``selection`` have a single writer (the UI). Each tick reads
    them once through :meth:`snapshot` so that a frame never mixes old and new
    values.
    """

    catalog: tuple[CelestialBodyDefinition, ...]
    params: SimulationParams = field(default_factory=lambda: get_scenario(DEFAULT_SCENARIO_KEY).params)
    preset_key: str = DEFAULT_SCENARIO_KEY
    anchor_body: str | None = "Earth"
    provider: PositionProvider | None = None
    logger: RunLogger | None = None
    cfg: SceneCfg = SCENE_CFG
    time: float = 0.0
    paused: bool = False
    selection: SelectionState = field(init=False)
    spins: dict[str, float] = field(init=False)
    asteroid_spin: tuple[float, float] = field(init=False, default=(0.0, 0.0))
    last_advisory: str | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        names = [body.name for body in self.catalog]
        if len(set(names)) != len(names):
            raise ValueError("Body names must be unique")
        if self.anchor_body is not None and self.anchor_body not in names:
            self.anchor_body = None
        self.selection = SelectionState(names)
        self.spins = {name: 0.0 for name in names}
        self._by_name = {body.name: body for body in self.catalog}

    # --- UI writes -----------------------------------------------------

    def definition(self, name: str) -> CelestialBodyDefinition:
        return self._by_name[name]

    def select(self, name: str) -> None:
        if self.selection.select(name):
            self._log_event("select", name, {"params": self.params.as_dict()})

    def deselect(self) -> None:
        previous = self.selection.selected
        if self.selection.deselect():
            self._log_event("deselect", previous or "", {})

    def set_param(self, key: str, value: float) -> None:
        updated = clamp_param(self.params, key, value)
        if updated != self.params:
            self.params = updated
            self.preset_key = CUSTOM_SCENARIO_KEY
            self._log_event("param", self.selection.selected or "", {key: getattr(updated, key)})

    def set_params(self, params: SimulationParams) -> None:
        if params != self.params:
            self.params = params
            self.preset_key = CUSTOM_SCENARIO_KEY

    def apply_preset(self, key: str) -> None:
        scenario = get_scenario(key)
        self.params = scenario.params
        self.preset_key = scenario.key
        self._log_event("preset", self.selection.selected or "", {"preset": key})

    def reset(self) -> None:
        self.time = 0.0
        self.spins = {name: 0.0 for name in self.spins}
        self.asteroid_spin = (0.0, 0.0)

    # --- frame evaluation ---------------------------------------------

    def snapshot(self) -> FrameSnapshot:
        return FrameSnapshot(params=self.params, selection=self.selection.selected)

    def indicators(self) -> DerivedIndicators:
        return compute_derived_indicators(self.params)

    def tick(self, dt: float, now: float | None = None) -> FrameState:
        """Advance by ``dt`` scene seconds and return the resulting frame."""

        snap = self.snapshot()
        step = dt if dt > 0.0 and not self.paused else 0.0
        self.time += step

        advisory = None
        if self.provider is not None:
            self.provider.poll(_time.monotonic() if now is None else now)
            advisory = self.provider.advisory
            if advisory != self.last_advisory:
                self.last_advisory = advisory
                self._log_event("advisory", "", {"message": advisory})

        overrides = compute_focus_overrides(snap.params, self.cfg) if snap.selection else None
        bodies = tuple(self._evaluate_body(body, snap, overrides, step) for body in self.catalog)
        asteroid = self._evaluate_asteroid(snap.params, bodies, step)

        return FrameState(
            time=self.time,
            bodies=bodies,
            asteroid=asteroid,
            indicators=compute_derived_indicators(snap.params),
            selection=snap.selection,
            advisory=advisory,
            params=snap.params,
        )

    def _evaluate_body(
        self,
        body: CelestialBodyDefinition,
        snap: FrameSnapshot,
        overrides: FocusOverrides | None,
        step: float,
    ) -> BodyFrame:
        focused = snap.selection == body.name
        active = overrides if focused else None
        rotation_multiplier = active.rotation_multiplier if active else 1.0
        self.spins[body.name] = advance_spin(
            self.spins[body.name], body.rotation_speed, step, rotation_multiplier
        )

        position = None
        source = SOURCE_SIMULATED
        if self.provider is not None:
            position = self.provider.try_get_latest(body.name)
            if position is not None:
                source = SOURCE_LIVE
        if position is None:
            position = sample_orbit_position(body.orbit, self.time, active)

        return BodyFrame(
            name=body.name,
            position=np.asarray(position, dtype=float),
            spin=self.spins[body.name],
            scale=body.scale * (active.radius_multiplier if active else 1.0),
            emissive_intensity=active.emissive_intensity if active else 0.0,
            focused=focused,
            source=source,
        )

    def _evaluate_asteroid(
        self,
        params: SimulationParams,
        bodies: tuple[BodyFrame, ...],
        step: float,
    ) -> BodyFrame | None:
        if self.anchor_body is None:
            return None
        center = next(frame.position for frame in bodies if frame.name == self.anchor_body)
        rate_x, rate_y = asteroid_spin_rates(params, self.cfg)
        spin_x, spin_y = self.asteroid_spin
        self.asteroid_spin = (spin_x + rate_x * step, spin_y + rate_y * step)
        return BodyFrame(
            name=ASTEROID_NAME,
            position=center + sample_asteroid_offset(params, self.time, self.cfg),
            spin=self.asteroid_spin[1],
            scale=asteroid_display_radius(params, self.cfg),
        )

    def _log_event(self, kind: str, body: str, details: dict) -> None:
        if self.logger is None:
            return
        self.logger.log_event([float(self.time), kind, body, json.dumps(details, sort_keys=True)])


__all__ = [
    "ASTEROID_NAME",
    "SOURCE_LIVE",
    "SOURCE_SIMULATED",
    "BodyFrame",
    "CelestialBodyDefinition",
    "FrameSnapshot",
    "FrameState",
    "RingGeometry",
    "SelectionState",
    "SimState",
]
