from __future__ import annotations

import math
import random
from typing import Iterable, TYPE_CHECKING

import numpy as np
import pygame

from .camera import Camera

if TYPE_CHECKING:  # pragma: no cover
    from impact_sim.core.config import RenderCfg
    from impact_sim.core.model import RingGeometry


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb colour, got {color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def body_pixel_radius(scale: float, ppu: float, *, minimum: int = 2) -> int:
    return max(minimum, int(round(scale * ppu)))


def draw_glow(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    intensity: float,
    *,
    color: tuple[int, int, int],
    outer_alpha: int,
    inner_alpha: int,
    radius_factor: float = 1.6,
) -> None:
    if intensity <= 0.0 or radius <= 0:
        return
    intensity = _clamp(intensity, 0.0, 1.0)
    glow_radius = max(2, int(radius * (1.2 + radius_factor * intensity)))
    glow_surface = pygame.Surface((glow_radius * 2, glow_radius * 2), pygame.SRCALPHA)
    center = glow_radius
    outer = int(outer_alpha * intensity)
    inner = int(inner_alpha * intensity)
    if outer > 0:
        pygame.draw.circle(glow_surface, (*color, outer), (center, center), glow_radius)
    if inner > 0:
        pygame.draw.circle(
            glow_surface,
            (*color, inner),
            (center, center),
            max(1, int(glow_radius * 0.6)),
        )
    surface.blit(glow_surface, glow_surface.get_rect(center=position))


def draw_sun(
    surface: pygame.Surface,
    camera: Camera,
    *,
    render_cfg: RenderCfg,
) -> tuple[int, int]:
    sx, sy, _ = camera.project(np.zeros(3))
    radius = body_pixel_radius(render_cfg.sun_radius, camera.ppu, minimum=4)
    draw_glow(
        surface,
        (sx, sy),
        radius,
        1.0,
        color=render_cfg.sun_glow_color,
        outer_alpha=render_cfg.sun_glow_outer_alpha,
        inner_alpha=render_cfg.sun_glow_inner_alpha,
    )
    pygame.draw.circle(surface, render_cfg.sun_color, (sx, sy), radius)
    return sx, sy


def draw_orbit_path(
    surface: pygame.Surface,
    camera: Camera,
    points: np.ndarray,
    color: tuple[int, int, int],
    alpha: int,
) -> None:
    if len(points) < 2:
        return
    projected = camera.project_many(points)
    pygame.draw.aalines(surface, (*color, alpha), False, projected)


def draw_rings(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    rings: RingGeometry,
    pitch: float,
) -> None:
    # Ring planes are drawn in the orbital plane, flattened by the camera pitch.
    color = hex_to_rgb(rings.color)
    alpha = int(255 * _clamp(rings.opacity, 0.0, 1.0))
    squash = max(0.08, abs(math.sin(pitch)))
    for factor in (rings.inner_radius, rings.outer_radius):
        w = max(2, int(radius * factor * 2))
        h = max(2, int(w * squash))
        rect = pygame.Rect(0, 0, w, h)
        rect.center = position
        pygame.draw.ellipse(surface, (*color, alpha), rect, 2)


def draw_body(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    color: tuple[int, int, int],
    spin: float,
    *,
    emissive: float = 0.0,
    focused: bool = False,
    render_cfg: RenderCfg,
) -> None:
    if radius <= 0:
        return
    if emissive > 0.0:
        draw_glow(
            surface,
            position,
            radius,
            emissive,
            color=color,
            outer_alpha=90,
            inner_alpha=160,
        )
    pygame.draw.circle(surface, color, position, radius)
    if radius >= 4:
        # Meridian marker makes the spin visible.
        dx = int(math.sin(spin) * radius * 0.85)
        shade = tuple(max(0, c - 70) for c in color)
        pygame.draw.line(
            surface,
            shade,
            (position[0] + dx, position[1] - radius + 1),
            (position[0] + dx, position[1] + radius - 1),
            1,
        )
    if focused:
        pygame.draw.circle(
            surface,
            render_cfg.focus_outline_color,
            position,
            radius + max(3, radius // 8),
            2,
        )


def generate_starfield(
    num_stars: int,
    *,
    size: tuple[int, int],
    rng: random.Random | None = None,
) -> list[dict[str, object]]:
    rng = rng or random.Random()
    width, height = size
    stars: list[dict[str, object]] = []
    for _ in range(num_stars):
        radius = rng.choice([1, 1, 1, 2])
        alpha = rng.randint(70, 160)
        base = rng.randint(190, 240)
        color = (max(0, base - rng.randint(10, 30)), max(0, base - rng.randint(0, 15)), base)
        star_surface = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(star_surface, (*color, alpha), (radius, radius), radius)
        stars.append(
            {"pos": (rng.uniform(0, width), rng.uniform(0, height)), "surface": star_surface, "radius": radius}
        )
    return stars


def draw_starfield(
    surface: pygame.Surface,
    starfield: Iterable[dict[str, object]],
    camera: Camera,
    *,
    render_cfg: RenderCfg,
) -> None:
    width, height = surface.get_size()
    offset_x = camera.center[0] * camera.ppu * render_cfg.starfield_parallax
    offset_y = camera.center[2] * camera.ppu * render_cfg.starfield_parallax
    for star in starfield:
        base_x, base_y = star["pos"]  # type: ignore[index]
        radius = star["radius"]  # type: ignore[index]
        sx = int((base_x - offset_x) % width)
        sy = int((base_y - offset_y) % height)
        surface.blit(star["surface"], (sx - radius, sy - radius))  # type: ignore[arg-type]
