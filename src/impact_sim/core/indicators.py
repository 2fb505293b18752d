"""Impact indicator engine.

Turns the six scenario sliders into the seven derived indicators shown in the
panel. Every output is an independent closed-form expression of the inputs, so
the function is pure and cheap enough to evaluate once per frame.

Units
- ``mass`` in 10^12 kg, ``radius`` in km, ``velocity`` in km/s, ``angle`` in
  degrees above the horizon, ``gravity`` in m/s^2, ``density`` in g/cm^3.
- ``energy`` in joules, ``energy_megaton`` in megatons of TNT, ``tsunami_height``
  in metres, ``warning_hours`` in hours, ``deflection_delta`` in m/s.

The formulas are illustrative scalings for teaching, not validated impact
physics.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass

JOULES_PER_MEGATON = 4.184e15
SHALLOW_ENTRY_ANGLE_DEG = 35.0


@dataclass(frozen=True)
class SimulationParams:
    mass: float
    radius: float
    velocity: float
    angle: float
    gravity: float
    density: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class DerivedIndicators:
    energy: float
    energy_megaton: float
    richter: float
    crater_diameter_km: float
    tsunami_height: float
    warning_hours: float
    deflection_delta: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def kinetic_energy(params: SimulationParams) -> float:
    """Kinetic energy in joules."""

    mass_kg = params.mass * 1e12
    velocity_ms = params.velocity * 1000.0
    return 0.5 * mass_kg * velocity_ms**2


def richter_magnitude(energy: float) -> float:
    """Seismic magnitude proxy, floored at zero.

    A non-positive energy only occurs when a caller skips input clamping; it
    maps to magnitude zero instead of a math domain error.
    """

    if energy <= 0.0:
        return 0.0
    return max(0.0, (math.log10(energy) - 4.8) / 1.5)


def tsunami_multiplier(angle: float) -> float:
    # Sharp step: 35 degrees itself already counts as steep.
    return 1.5 if angle < SHALLOW_ENTRY_ANGLE_DEG else 1.0


def compute_derived_indicators(params: SimulationParams) -> DerivedIndicators:
    """Return every indicator for ``params``."""

    energy = kinetic_energy(params)
    energy_megaton = energy / JOULES_PER_MEGATON
    yield_base = max(energy_megaton, 0.0)

    return DerivedIndicators(
        energy=energy,
        energy_megaton=energy_megaton,
        richter=richter_magnitude(energy),
        crater_diameter_km=max(0.8, yield_base**0.29 * (1.1 + params.density * 0.08)),
        tsunami_height=min(80.0, yield_base**0.36 * tsunami_multiplier(params.angle)),
        warning_hours=max(2.0, 18.0 - params.velocity * 0.2 + (40.0 - params.angle) * 0.1),
        deflection_delta=max(35.0, (params.mass * params.velocity) / 6.0),
    )


__all__ = [
    "JOULES_PER_MEGATON",
    "SHALLOW_ENTRY_ANGLE_DEG",
    "DerivedIndicators",
    "SimulationParams",
    "compute_derived_indicators",
    "kinetic_energy",
    "richter_magnitude",
    "tsunami_multiplier",
]
