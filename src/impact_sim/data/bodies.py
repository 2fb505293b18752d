"""Planet catalog for the scene.

Distances are compressed so that Neptune sits 650 scene units from the Sun,
inclinations are exaggerated three-fold to make the tilt visible, and orbital
rates are relative to Earth's (scaled by ``speed_scale``).
"""
from __future__ import annotations

import math

from impact_sim.core.config import SCENE_CFG, SceneCfg
from impact_sim.core.kinematics import OrbitParameters
from impact_sim.core.model import CelestialBodyDefinition, RingGeometry
from impact_sim.core.numeric import deg_to_rad

EARTH_NAME = "Earth"

# name, texture, scale, rotation speed, colour, summary,
# distance [AU], inclination [deg], eccentricity, relative speed, phase [rad]
_PLANET_TABLE: tuple[tuple, ...] = (
    (
        "Mercury", "images/mercury_hd.jpg", 0.7, 0.18, "#888888",
        "Smallest planet, close to the Sun on a very fast orbit.",
        0.387, 7.0, 0.2056, 4.15, 0.0,
    ),
    (
        "Venus", "images/venus_hd.jpg", 1.5, 0.06, "#f5d66d",
        "Earth's twin in size but wrapped in a scorching atmosphere.",
        0.723, 3.4, 0.0068, 1.62, math.pi * 0.35,
    ),
    (
        "Mars", "images/mars_hd.jpg", 1.9, 0.08, "#ff5c45",
        "Red desert planet rich in volcanic relief and canyons.",
        1.524, 1.85, 0.0934, 0.53, math.pi * 0.8,
    ),
    (
        "Jupiter", "images/jupiter_hd.jpg", 6.4, 0.03, "#e3a667",
        "Banded gas giant whose gravity shields the inner system.",
        5.203, 1.3, 0.0484, 0.08, math.pi * 1.6,
    ),
    (
        "Saturn", "images/saturn_hd.jpg", 5.2, 0.024, "#f0e2bb",
        "Known for its majestic rings of ice and rock.",
        9.537, 2.49, 0.0541, 0.03, math.pi * 2.1,
    ),
    (
        "Uranus", "images/uranus_hd.jpg", 3.6, 0.026, "#a9d7f5",
        "Ice giant tipped on its side, rolling along its orbit.",
        19.191, 0.77, 0.0472, 0.011, math.pi * 2.6,
    ),
    (
        "Neptune", "images/neptune_hd.jpg", 3.4, 0.022, "#4f79ff",
        "Outermost ice giant, swept by supersonic winds.",
        30.069, 1.77, 0.0086, 0.006, math.pi * 3.2,
    ),
)

_RINGS: dict[str, RingGeometry] = {
    "Saturn": RingGeometry(
        inner_radius=1.3,
        outer_radius=1.9,
        texture="images/saturn_ring.jpg",
        opacity=0.65,
    ),
    "Uranus": RingGeometry(
        inner_radius=1.0,
        outer_radius=1.6,
        color="#cde5ff",
        opacity=0.35,
        tilt=(-math.pi / 2.4, 0.0, math.pi / 9),
    ),
}


def earth_definition(cfg: SceneCfg = SCENE_CFG) -> CelestialBodyDefinition:
    return CelestialBodyDefinition(
        name=EARTH_NAME,
        texture="images/earth_atmos_2048.jpg",
        scale=cfg.earth_radius,
        rotation_speed=cfg.earth_rotation_speed,
        color="#2E96F5",
        summary="Ocean planet with a temperate atmosphere.",
        distance_au=1.0,
        inclination_degrees=0.0,
        orbit=OrbitParameters(
            semi_major_axis=cfg.au,
            eccentricity=cfg.earth_eccentricity,
            inclination=0.0,
            speed=1.0 * cfg.speed_scale,
            phase=0.0,
        ),
    )


def build_planet_catalog(cfg: SceneCfg = SCENE_CFG) -> tuple[CelestialBodyDefinition, ...]:
    """Return every orbiting body ordered by distance from the Sun."""

    planets = []
    for (
        name,
        texture,
        scale,
        rotation_speed,
        color,
        summary,
        distance_au,
        inclination_deg,
        eccentricity,
        relative_speed,
        phase,
    ) in _PLANET_TABLE:
        planets.append(
            CelestialBodyDefinition(
                name=name,
                texture=texture,
                scale=scale,
                rotation_speed=rotation_speed,
                color=color,
                summary=summary,
                distance_au=distance_au,
                inclination_degrees=inclination_deg,
                orbit=OrbitParameters(
                    semi_major_axis=distance_au * cfg.au,
                    eccentricity=eccentricity,
                    inclination=deg_to_rad(inclination_deg * cfg.inclination_multiplier),
                    speed=relative_speed * cfg.speed_scale,
                    phase=phase,
                ),
                rings=_RINGS.get(name),
            )
        )
    planets.append(earth_definition(cfg))
    planets.sort(key=lambda body: body.distance_au)
    return tuple(planets)


PLANET_CATALOG: tuple[CelestialBodyDefinition, ...] = build_planet_catalog()


__all__ = ["EARTH_NAME", "PLANET_CATALOG", "build_planet_catalog", "earth_definition"]
