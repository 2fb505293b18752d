"""Rendering helpers for the impact simulator viewer."""

from .camera import Camera
from .draw import (
    body_pixel_radius,
    draw_body,
    draw_glow,
    draw_orbit_path,
    draw_rings,
    draw_starfield,
    draw_sun,
    generate_starfield,
    hex_to_rgb,
)
from .ui import (
    Button,
    ButtonVisualStyle,
    build_text_panel,
    get_text_surface,
    load_font,
)

__all__ = [
    "Button",
    "ButtonVisualStyle",
    "Camera",
    "body_pixel_radius",
    "build_text_panel",
    "draw_body",
    "draw_glow",
    "draw_orbit_path",
    "draw_rings",
    "draw_starfield",
    "draw_sun",
    "generate_starfield",
    "get_text_surface",
    "hex_to_rgb",
    "load_font",
]
