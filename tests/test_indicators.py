"""Tests for the impact indicator formulas."""
from __future__ import annotations

import itertools
import math

import pytest

from impact_sim.core.indicators import (
    JOULES_PER_MEGATON,
    SimulationParams,
    compute_derived_indicators,
    kinetic_energy,
    richter_magnitude,
    tsunami_multiplier,
)
from impact_sim.data.scenarios import CONTROLS, get_scenario


def _params(**overrides) -> SimulationParams:
    base = dict(mass=28, radius=0.9, velocity=22, angle=37, gravity=9.81, density=3.1)
    base.update(overrides)
    return SimulationParams(**base)


class TestScenarios:
    def test_current_trajectory(self):
        ind = compute_derived_indicators(get_scenario("impactor").params)
        assert ind.energy == pytest.approx(6.776e21)
        assert ind.energy_megaton == pytest.approx(6.776e21 / 4.184e15)
        assert ind.richter == pytest.approx((math.log10(6.776e21) - 4.8) / 1.5)
        assert ind.richter == pytest.approx(11.354, abs=1e-3)
        assert ind.tsunami_height == pytest.approx(80.0)
        assert ind.warning_hours == pytest.approx(13.9)
        assert ind.deflection_delta == pytest.approx(28 * 22 / 6)

    def test_ocean_impact_uses_shallow_multiplier(self):
        params = get_scenario("oceanic").params
        assert params.angle < 35
        assert tsunami_multiplier(params.angle) == 1.5
        ind = compute_derived_indicators(params)
        assert ind.deflection_delta == pytest.approx(57.0)
        assert ind.tsunami_height <= 80.0

    def test_extreme_low_input(self):
        ind = compute_derived_indicators(_params(mass=2, velocity=10, angle=80))
        assert ind.warning_hours == pytest.approx(12.0)
        assert ind.deflection_delta == pytest.approx(35.0)
        for value in ind.as_dict().values():
            assert value >= 0.0


class TestFormulas:
    def test_kinetic_energy_units(self):
        # 1e12 kg at 1 km/s
        assert kinetic_energy(_params(mass=1, velocity=1)) == pytest.approx(0.5e18)

    def test_megaton_conversion(self):
        ind = compute_derived_indicators(_params())
        assert ind.energy_megaton * JOULES_PER_MEGATON == pytest.approx(ind.energy)

    def test_crater_uses_density(self):
        light = compute_derived_indicators(_params(density=1.5))
        heavy = compute_derived_indicators(_params(density=5.5))
        assert heavy.crater_diameter_km > light.crater_diameter_km
        expected = light.energy_megaton ** 0.29 * (1.1 + 1.5 * 0.08)
        assert light.crater_diameter_km == pytest.approx(expected)

    def test_warning_floor(self):
        ind = compute_derived_indicators(_params(velocity=45, angle=80))
        # 18 - 9 - 4 = 5, still above the floor
        assert ind.warning_hours == pytest.approx(5.0)
        unclamped = compute_derived_indicators(_params(velocity=90, angle=80))
        assert unclamped.warning_hours == pytest.approx(2.0)

    def test_richter_guard(self):
        assert richter_magnitude(0.0) == 0.0
        assert richter_magnitude(-1.0) == 0.0
        assert richter_magnitude(10**4.8) == pytest.approx(0.0, abs=1e-9)
        assert richter_magnitude(10**7.8) == pytest.approx(2.0)

    def test_out_of_range_inputs_stay_finite(self):
        ind = compute_derived_indicators(_params(mass=0, velocity=0))
        assert ind.energy == 0.0
        assert ind.richter == 0.0
        assert ind.crater_diameter_km == pytest.approx(0.8)
        assert ind.tsunami_height == 0.0
        assert math.isfinite(ind.warning_hours)


class TestTsunamiThreshold:
    def test_step_at_35_degrees(self):
        shallow = compute_derived_indicators(_params(mass=2, velocity=10, angle=34.999))
        steep = compute_derived_indicators(_params(mass=2, velocity=10, angle=35.0))
        assert shallow.tsunami_height < 80.0
        assert shallow.tsunami_height == pytest.approx(steep.tsunami_height * 1.5)

    def test_multiplier_values(self):
        assert tsunami_multiplier(34.999) == 1.5
        assert tsunami_multiplier(35.0) == 1.0
        assert tsunami_multiplier(80.0) == 1.0


class TestBounds:
    def test_all_slider_corners(self):
        keys = ["mass", "radius", "velocity", "angle", "gravity", "density"]
        corners = [(CONTROLS[key].min, CONTROLS[key].max) for key in keys]
        for values in itertools.product(*corners):
            ind = compute_derived_indicators(SimulationParams(**dict(zip(keys, values))))
            for name, value in ind.as_dict().items():
                assert math.isfinite(value), name
                assert value >= 0.0, name
            assert ind.crater_diameter_km >= 0.8
            assert ind.tsunami_height <= 80.0
            assert ind.warning_hours >= 2.0
            assert ind.deflection_delta >= 35.0
