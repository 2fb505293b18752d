"""Tests for orbit sampling, focus overrides and the asteroid flyby."""
from __future__ import annotations

import math

import numpy as np
import pytest

from impact_sim.core.config import SCENE_CFG
from impact_sim.core.indicators import SimulationParams
from impact_sim.core.kinematics import (
    FocusOverrides,
    OrbitParameters,
    advance_spin,
    asteroid_display_radius,
    asteroid_spin_rates,
    compute_focus_overrides,
    effective_orbit,
    sample_asteroid_offset,
    sample_orbit_path,
    sample_orbit_position,
)
from impact_sim.core.numeric import rotation_about_x


def _params(**overrides) -> SimulationParams:
    base = dict(mass=28, radius=0.9, velocity=22, angle=37, gravity=9.81, density=3.1)
    base.update(overrides)
    return SimulationParams(**base)


ORBIT = OrbitParameters(semi_major_axis=100.0, eccentricity=0.2, inclination=0.3, speed=0.5, phase=0.0)


class TestOrbitPosition:
    def test_periapsis_at_start(self):
        flat = OrbitParameters(semi_major_axis=100.0, eccentricity=0.2, inclination=0.0, speed=0.5, phase=0.0)
        pos = sample_orbit_position(flat, 0.0)
        assert pos == pytest.approx([80.0, 0.0, 0.0])

    def test_periapsis_tilted(self):
        pos = sample_orbit_position(ORBIT, 0.0)
        # Rotation about +X leaves a point on the X axis unchanged.
        assert pos == pytest.approx([ORBIT.periapsis_distance, 0.0, 0.0])

    def test_inclination_lifts_out_of_plane(self):
        quarter = math.pi / 2 / ORBIT.speed
        pos = sample_orbit_position(ORBIT, quarter)
        b = ORBIT.semi_minor_axis
        expected = rotation_about_x(0.3) @ np.array([-ORBIT.semi_major_axis * 0.2, 0.0, b])
        assert pos == pytest.approx(expected)
        assert pos[1] == pytest.approx(-b * math.sin(0.3))

    def test_phase_offsets_start(self):
        shifted = OrbitParameters(100.0, 0.0, 0.0, 1.0, math.pi)
        assert sample_orbit_position(shifted, 0.0) == pytest.approx([-100.0, 0.0, 0.0], abs=1e-9)

    def test_semi_minor_axis(self):
        assert ORBIT.semi_minor_axis == pytest.approx(100.0 * math.sqrt(1 - 0.04))


class TestOrbitPath:
    def test_point_count_and_closed(self):
        path = sample_orbit_path(ORBIT, 240)
        points = path.as_array()
        assert len(path) == 241
        assert points.shape == (241, 3)
        assert points[0] == pytest.approx(points[-1])

    def test_reiterable(self):
        path = sample_orbit_path(ORBIT, 8)
        first = [p.copy() for p in path]
        second = list(path)
        assert len(first) == len(second) == 9
        for a, b in zip(first, second):
            assert a == pytest.approx(b)

    def test_single_segment(self):
        points = sample_orbit_path(ORBIT, 1).as_array()
        assert len(points) == 2
        assert points[0] == pytest.approx(points[1])

    def test_near_parabolic_orbit_stays_finite(self):
        thin = OrbitParameters(semi_major_axis=100.0, eccentricity=0.999999, inclination=0.3, speed=0.5, phase=0.0)
        for t in (0.0, 1.0, math.pi / 2 / thin.speed, 17.3):
            assert np.all(np.isfinite(sample_orbit_position(thin, t)))
        points = sample_orbit_path(thin, 240).as_array()
        assert np.all(np.isfinite(points))
        assert points[0] == pytest.approx([thin.periapsis_distance, 0.0, 0.0], abs=1e-9)

    def test_rejects_zero_segments(self):
        with pytest.raises(ValueError):
            sample_orbit_path(ORBIT, 0)

    def test_path_contains_start_position(self):
        points = sample_orbit_path(ORBIT, 16).as_array()
        assert points[0] == pytest.approx(sample_orbit_position(ORBIT, 0.0))


class TestFocusOverrides:
    def test_impactor_values(self):
        o = compute_focus_overrides(_params())
        assert o.radius_multiplier == pytest.approx(1 + 0.9 * 0.08)
        assert o.speed_multiplier == pytest.approx(1 + 22 * 0.03)
        assert o.rotation_multiplier == pytest.approx(1 + 28 * 0.005)
        assert o.tilt_offset == pytest.approx(math.radians(37) * 0.02)
        assert 0.15 <= o.emissive_intensity <= 0.9

    def test_multipliers_clamped(self):
        o = compute_focus_overrides(_params(radius=100, velocity=500, mass=1000))
        assert o.radius_multiplier == pytest.approx(4.2)
        assert o.speed_multiplier == pytest.approx(4.5)
        assert o.rotation_multiplier == pytest.approx(4.2)
        assert o.emissive_intensity == pytest.approx(0.9)
        low = compute_focus_overrides(_params(radius=-100, velocity=-100, mass=-1000))
        assert low.radius_multiplier == pytest.approx(0.4)
        assert low.speed_multiplier == pytest.approx(0.25)
        assert low.rotation_multiplier == pytest.approx(0.5)

    def test_effective_orbit(self):
        o = FocusOverrides(speed_multiplier=2.0, tilt_offset=0.1)
        eff = effective_orbit(ORBIT, o)
        assert eff.speed == pytest.approx(1.0)
        assert eff.inclination == pytest.approx(0.4)
        assert eff.semi_major_axis == ORBIT.semi_major_axis
        assert effective_orbit(ORBIT, None) is ORBIT

    def test_overridden_position_moves_faster(self):
        o = FocusOverrides(speed_multiplier=2.0)
        t = 0.7
        assert sample_orbit_position(ORBIT, t, o) == pytest.approx(sample_orbit_position(ORBIT, 2 * t))


class TestSpin:
    def test_advance(self):
        assert advance_spin(1.0, 0.25, 2.0) == pytest.approx(1.5)
        assert advance_spin(1.0, 0.25, 2.0, rotation_multiplier=2.0) == pytest.approx(2.0)

    def test_non_positive_dt_ignored(self):
        assert advance_spin(1.0, 0.25, 0.0) == 1.0
        assert advance_spin(1.0, 0.25, -3.0) == 1.0


class TestAsteroid:
    def test_display_radius_floor(self):
        assert asteroid_display_radius(_params(radius=0.1)) == pytest.approx(0.3)
        assert asteroid_display_radius(_params(radius=0.9)) == pytest.approx(1.8)

    def test_offset_at_start(self):
        params = _params(angle=30)
        offset = sample_asteroid_offset(params, 0.0)
        er = SCENE_CFG.earth_radius
        assert offset == pytest.approx([6 * er, math.sin(math.radians(30)) * er * 0.9, 0.0])

    def test_loop_stays_outside_earth(self):
        params = _params()
        for t in np.linspace(0.0, 20.0, 50):
            offset = sample_asteroid_offset(params, float(t))
            assert np.linalg.norm(offset) > SCENE_CFG.earth_radius

    def test_spin_rates_follow_velocity(self):
        slow = asteroid_spin_rates(_params(velocity=18))
        fast = asteroid_spin_rates(_params(velocity=36))
        assert slow == pytest.approx((0.7, 0.55))
        assert fast[1] > slow[1]
