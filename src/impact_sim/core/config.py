"""Configuration dataclasses for the impact simulator."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SceneCfg:
    # Scene units: Neptune's semi-major axis maps to 650 units.
    solar_scale: float = 650.0 / 30.069
    orbit_scale: float = 1.0
    speed_scale: float = 0.12
    inclination_multiplier: float = 3.0
    orbit_segments: int = 240
    earth_radius: float = 1.6
    earth_rotation_speed: float = 0.25
    earth_eccentricity: float = 0.0167

    radius_gain: float = 0.08
    radius_multiplier_range: tuple[float, float] = (0.4, 4.2)
    speed_gain: float = 0.03
    speed_multiplier_range: tuple[float, float] = (0.25, 4.5)
    rotation_gain: float = 0.005
    rotation_multiplier_range: tuple[float, float] = (0.5, 4.2)
    tilt_gain: float = 0.02
    emissive_base: float = 0.15
    emissive_gain: float = 0.008
    emissive_range: tuple[float, float] = (0.15, 0.9)

    asteroid_orbit_factor: float = 6.0
    asteroid_reference_velocity: float = 18.0
    asteroid_min_display_radius: float = 0.3

    @property
    def au(self) -> float:
        """Scene units per astronomical unit."""

        return self.solar_scale * self.orbit_scale


@dataclass(frozen=True)
class FetchCfg:
    base_url: str = "https://api.le-systeme-solaire.net/rest"
    token_env_var: str = "IMPACT_SIM_API_TOKEN"
    interval_s: float = 300.0
    timeout_s: float = 10.0
    latitude: float = 90.0
    longitude: float = 90.0
    elevation: float = 90.0
    timezone: int = 0

    @property
    def token(self) -> str | None:
        return os.environ.get(self.token_env_var) or None


@dataclass(frozen=True)
class RenderCfg:
    width: int = 1280
    height: int = 800
    background_color: tuple[int, int, int] = (2, 4, 12)
    sun_color: tuple[int, int, int] = (251, 231, 167)
    sun_radius: float = 2.4
    sun_glow_color: tuple[int, int, int] = (248, 210, 122)
    sun_glow_outer_alpha: int = 70
    sun_glow_inner_alpha: int = 150
    orbit_alpha: int = int(255 * 0.18)
    focus_outline_color: tuple[int, int, int] = (234, 254, 7)
    asteroid_color: tuple[int, int, int] = (168, 160, 150)
    hud_text_color: tuple[int, int, int] = (230, 236, 255)
    hud_accent_color: tuple[int, int, int] = (46, 150, 245)
    hud_highlight_color: tuple[int, int, int] = (234, 254, 7)
    hud_muted_color: tuple[int, int, int] = (168, 185, 255)
    panel_background_color: tuple[int, int, int, int] = (255, 255, 255, 26)
    advisory_color: tuple[int, int, int] = (255, 176, 120)
    button_color: tuple[int, int, int, int] = (4, 16, 50, 204)
    button_hover_color: tuple[int, int, int, int] = (18, 52, 94, 224)
    button_active_color: tuple[int, int, int, int] = (46, 150, 245, 200)
    button_border_color: tuple[int, int, int, int] = (46, 150, 245, 110)
    button_text_color: tuple[int, int, int] = (234, 241, 255)
    button_radius: int = 14
    default_camera_pitch_deg: float = 32.0
    default_pixels_per_unit: float = 1.6
    min_pixels_per_unit: float = 0.05
    max_pixels_per_unit: float = 60.0
    focus_pixels_per_unit: float = 14.0
    camera_smoothing: float = 0.08
    starfield_count: int = 320
    starfield_parallax: float = 0.05
    pick_radius_pixels: int = 14
    fps_text_alpha: int = int(255 * 0.6)


SCENE_CFG = SceneCfg()
FETCH_CFG = FetchCfg()
RENDER_CFG = RenderCfg()


SETTINGS_DIR = Path.home() / ".impact_sim"
SETTINGS_PATH = SETTINGS_DIR / "settings.json"


def load_user_settings(path: Path = SETTINGS_PATH) -> dict[str, object]:
    """Return persisted runtime settings if the JSON file is readable."""

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def save_user_settings(settings: dict[str, object], path: Path = SETTINGS_PATH) -> None:
    """Persist runtime settings, ignoring filesystem errors."""

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2, sort_keys=True)
    except OSError:
        # The viewer keeps shutting down even if the preferences cannot be written.
        pass


__all__ = [
    "FETCH_CFG",
    "RENDER_CFG",
    "SCENE_CFG",
    "SETTINGS_PATH",
    "FetchCfg",
    "RenderCfg",
    "SceneCfg",
    "load_user_settings",
    "save_user_settings",
]
