"""Orbital kinematics for the animated bodies.

Positions follow a Keplerian ellipse parameterised by angle, with the star at
one focus, tilted about the +X axis by the orbit inclination. The angle grows
linearly with time; this is a visual model, not a solution of Kepler's
equation.

Conventions
- The orbital reference plane is x-z, with +Y pointing "up" in the scene.
- Angles are radians unless a name ends in ``_deg``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterator

import numpy as np

from .config import SCENE_CFG, SceneCfg
from .indicators import SimulationParams
from .numeric import clamp, deg_to_rad, rotation_about_x


@dataclass(frozen=True)
class OrbitParameters:
    semi_major_axis: float
    eccentricity: float
    inclination: float
    speed: float
    phase: float

    @property
    def semi_minor_axis(self) -> float:
        e = self.eccentricity
        return self.semi_major_axis * math.sqrt(1.0 - e * e)

    @property
    def periapsis_distance(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity)


@dataclass(frozen=True)
class FocusOverrides:
    """Multipliers applied to the focused body while it stays selected."""

    radius_multiplier: float = 1.0
    speed_multiplier: float = 1.0
    rotation_multiplier: float = 1.0
    tilt_offset: float = 0.0
    emissive_intensity: float = 0.0


def compute_focus_overrides(params: SimulationParams, cfg: SceneCfg = SCENE_CFG) -> FocusOverrides:
    """Derive the focused body's perturbation from the live scenario."""

    return FocusOverrides(
        radius_multiplier=clamp(1.0 + params.radius * cfg.radius_gain, *cfg.radius_multiplier_range),
        speed_multiplier=clamp(1.0 + params.velocity * cfg.speed_gain, *cfg.speed_multiplier_range),
        rotation_multiplier=clamp(
            1.0 + params.mass * cfg.rotation_gain, *cfg.rotation_multiplier_range
        ),
        tilt_offset=deg_to_rad(params.angle) * cfg.tilt_gain,
        emissive_intensity=clamp(
            cfg.emissive_base + params.mass * cfg.emissive_gain, *cfg.emissive_range
        ),
    )


def effective_orbit(orbit: OrbitParameters, overrides: FocusOverrides | None = None) -> OrbitParameters:
    if overrides is None:
        return orbit
    return replace(
        orbit,
        speed=orbit.speed * overrides.speed_multiplier,
        inclination=orbit.inclination + overrides.tilt_offset,
    )


def _ellipse_point(orbit: OrbitParameters, theta: float) -> np.ndarray:
    a = orbit.semi_major_axis
    x = math.cos(theta) * a - a * orbit.eccentricity
    z = math.sin(theta) * orbit.semi_minor_axis
    return np.array([x, 0.0, z], dtype=float)


def orbit_angle(orbit: OrbitParameters, elapsed_time: float) -> float:
    return elapsed_time * orbit.speed + orbit.phase


def sample_orbit_position(
    orbit: OrbitParameters,
    elapsed_time: float,
    overrides: FocusOverrides | None = None,
) -> np.ndarray:
    """Return the body's (x, y, z) position after ``elapsed_time`` scene seconds."""

    active = effective_orbit(orbit, overrides)
    planar = _ellipse_point(active, orbit_angle(active, elapsed_time))
    return rotation_about_x(active.inclination) @ planar


class OrbitPath:
    """Closed ellipse trace of ``segment_count + 1`` points.

    Iterating yields the points lazily; the object can be iterated any number
    of times.
    """

    def __init__(self, orbit: OrbitParameters, segment_count: int) -> None:
        if segment_count < 1:
            raise ValueError("segment_count must be at least 1")
        self._orbit = orbit
        self._segment_count = int(segment_count)
        self._rotation = rotation_about_x(orbit.inclination)

    @property
    def orbit(self) -> OrbitParameters:
        return self._orbit

    @property
    def segment_count(self) -> int:
        return self._segment_count

    def __len__(self) -> int:
        return self._segment_count + 1

    def __iter__(self) -> Iterator[np.ndarray]:
        for i in range(self._segment_count + 1):
            theta = (i / self._segment_count) * math.pi * 2.0
            yield self._rotation @ _ellipse_point(self._orbit, theta)

    def as_array(self) -> np.ndarray:
        return np.array(list(self), dtype=float)


def sample_orbit_path(orbit: OrbitParameters, segment_count: int) -> OrbitPath:
    return OrbitPath(orbit, segment_count)


def advance_spin(spin: float, rotation_speed: float, dt: float, rotation_multiplier: float = 1.0) -> float:
    """Accumulate a body's own rotation angle; ``dt`` below zero is ignored."""

    if dt <= 0.0:
        return spin
    return spin + rotation_speed * rotation_multiplier * dt


def asteroid_display_radius(params: SimulationParams, cfg: SceneCfg = SCENE_CFG) -> float:
    return max(cfg.asteroid_min_display_radius, params.radius * 2.0)


def asteroid_speed_factor(params: SimulationParams, cfg: SceneCfg = SCENE_CFG) -> float:
    return params.velocity / cfg.asteroid_reference_velocity


def sample_asteroid_offset(
    params: SimulationParams,
    elapsed_time: float,
    cfg: SceneCfg = SCENE_CFG,
) -> np.ndarray:
    """Offset of the mission asteroid from Earth's centre.

    The loop widens in z as the entry angle flattens and rises in y as it
    steepens.
    """

    sf = asteroid_speed_factor(params, cfg)
    angle = deg_to_rad(params.angle)
    orbit_radius = cfg.earth_radius * cfg.asteroid_orbit_factor
    phase = elapsed_time * sf
    return np.array(
        [
            math.cos(phase) * orbit_radius,
            math.sin(phase) * cfg.earth_radius * 1.2 + math.sin(angle) * cfg.earth_radius * 0.9,
            math.sin(phase) * orbit_radius * math.cos(angle),
        ],
        dtype=float,
    )


def asteroid_spin_rates(params: SimulationParams, cfg: SceneCfg = SCENE_CFG) -> tuple[float, float]:
    """Spin rates (about X, about Y) of the asteroid in radians per second."""

    return 0.7, 0.5 + asteroid_speed_factor(params, cfg) * 0.05


__all__ = [
    "FocusOverrides",
    "OrbitParameters",
    "OrbitPath",
    "advance_spin",
    "asteroid_display_radius",
    "asteroid_speed_factor",
    "asteroid_spin_rates",
    "compute_focus_overrides",
    "effective_orbit",
    "orbit_angle",
    "sample_asteroid_offset",
    "sample_orbit_path",
    "sample_orbit_position",
]
