"""Scenario presets and slider definitions for the impact parameters."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace

from impact_sim.core.indicators import SimulationParams
from impact_sim.core.numeric import clamp


@dataclass(frozen=True)
class Scenario:
    key: str
    label: str
    description: str
    params: SimulationParams


@dataclass(frozen=True)
class ControlDefinition:
    key: str
    label: str
    unit: str
    min: float
    max: float
    step: float
    description: str

    def clamp(self, value: float) -> float:
        return clamp(value, self.min, self.max)


SCENARIO_DEFINITIONS: tuple[Scenario, ...] = (
    Scenario(
        key="impactor",
        label="Current trajectory",
        description="Values inspired by the first estimates for Impactor-2025 at its discovery in January 2025.",
        params=SimulationParams(mass=28, radius=0.9, velocity=22, angle=37, gravity=9.81, density=3.1),
    ),
    Scenario(
        key="oceanic",
        label="Ocean impact",
        description="Oblique entry over the North Pacific with most of the energy released at sea.",
        params=SimulationParams(mass=18, radius=0.7, velocity=19, angle=28, gravity=9.5, density=2.8),
    ),
    Scenario(
        key="continental",
        label="Continental impact",
        description="Impact close to the coast with a steeper entry and a slightly heavier body.",
        params=SimulationParams(mass=35, radius=1.1, velocity=24, angle=49, gravity=10.3, density=3.5),
    ),
)

SCENARIOS: dict[str, Scenario] = {scenario.key: scenario for scenario in SCENARIO_DEFINITIONS}
SCENARIO_DISPLAY_ORDER: list[str] = [scenario.key for scenario in SCENARIO_DEFINITIONS]
DEFAULT_SCENARIO_KEY = SCENARIO_DISPLAY_ORDER[0]
CUSTOM_SCENARIO_KEY = "custom"
CUSTOM_SCENARIO_DESCRIPTION = "Hand-tuned parameters for exploring extreme or specific situations."


CONTROL_DEFINITIONS: tuple[ControlDefinition, ...] = (
    ControlDefinition(
        "mass", "Mass", "10^12 kg", 2, 80, 1,
        "Total estimated mass of the object.",
    ),
    ControlDefinition(
        "radius", "Radius", "km", 0.1, 2.5, 0.05,
        "Mean radius derived from the approximate shape of the asteroid.",
    ),
    ControlDefinition(
        "velocity", "Velocity", "km/s", 10, 45, 0.5,
        "Relative speed at atmospheric entry.",
    ),
    ControlDefinition(
        "angle", "Entry angle", "deg", 5, 80, 1,
        "Angle between the trajectory and the horizon.",
    ),
    ControlDefinition(
        "gravity", "Local gravity", "m/s^2", 7.5, 11.5, 0.1,
        "Effective gravity at the impact point (altitude, latitude).",
    ),
    ControlDefinition(
        "density", "Density", "g/cm^3", 1.5, 5.5, 0.1,
        "Mean density of the object, driving penetration and dispersion.",
    ),
)

CONTROLS: dict[str, ControlDefinition] = {control.key: control for control in CONTROL_DEFINITIONS}


def get_scenario(key: str) -> Scenario:
    try:
        return SCENARIOS[key]
    except KeyError:
        raise KeyError(f"Unknown scenario preset: {key!r}") from None


def scenario_description(key: str) -> str:
    if key == CUSTOM_SCENARIO_KEY:
        return CUSTOM_SCENARIO_DESCRIPTION
    return get_scenario(key).description


def clamp_param(params: SimulationParams, key: str, value: float) -> SimulationParams:
    """Return ``params`` with ``key`` set to ``value`` clamped into its slider range.

    NaN input keeps the previous value.
    """

    control = CONTROLS.get(key)
    if control is None:
        raise ValueError(f"Unknown simulation parameter: {key!r}")
    if math.isnan(value):
        return params
    return replace(params, **{key: control.clamp(float(value))})


def clamp_params(params: SimulationParams) -> SimulationParams:
    clamped = {
        control.key: control.clamp(float(getattr(params, control.key)))
        for control in CONTROL_DEFINITIONS
    }
    return SimulationParams(**clamped)


def step_param(params: SimulationParams, key: str, steps: int) -> SimulationParams:
    """Move ``key`` by ``steps`` slider increments, staying inside the range."""

    control = CONTROLS.get(key)
    if control is None:
        raise ValueError(f"Unknown simulation parameter: {key!r}")
    value = getattr(params, key) + steps * control.step
    # Snap to the slider grid so repeated steps do not accumulate float noise.
    value = round(value / control.step) * control.step
    return clamp_param(params, key, round(value, 6))


def params_from_mapping(data: object, fallback: SimulationParams) -> SimulationParams:
    """Build params from a settings mapping, falling back per field."""

    if not isinstance(data, dict):
        return fallback
    values: dict[str, float] = {}
    for control in CONTROL_DEFINITIONS:
        raw = data.get(control.key)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool) and not math.isnan(raw):
            values[control.key] = control.clamp(float(raw))
        else:
            values[control.key] = float(getattr(fallback, control.key))
    return SimulationParams(**values)


__all__ = [
    "CONTROLS",
    "CONTROL_DEFINITIONS",
    "CUSTOM_SCENARIO_KEY",
    "DEFAULT_SCENARIO_KEY",
    "SCENARIOS",
    "SCENARIO_DEFINITIONS",
    "SCENARIO_DISPLAY_ORDER",
    "ControlDefinition",
    "Scenario",
    "clamp_param",
    "clamp_params",
    "get_scenario",
    "params_from_mapping",
    "scenario_description",
    "step_param",
]
