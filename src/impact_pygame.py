"""Interactive pygame viewer for the impact simulator.

Keys: 1-6 choose a parameter, Left/Right step it (Shift for ten steps),
P cycles the presets, Tab cycles the focused planet, Backspace clears the
focus, Space pauses, R resets the clock, Esc quits. Left-click a planet to
focus it, left-click empty space to clear the focus, right-drag to pan and
use the wheel to zoom.
"""
from __future__ import annotations

import argparse
import sys
import time

import numpy as np
import pygame
from pygame.locals import DOUBLEBUF, RESIZABLE

from impact_sim import __version__
from impact_sim.core.config import RENDER_CFG, SCENE_CFG, load_user_settings, save_user_settings
from impact_sim.core.formatters import format_compact, format_decimal, format_scientific
from impact_sim.core.kinematics import compute_focus_overrides, effective_orbit, sample_orbit_path
from impact_sim.core.logging_utils import RunLogger
from impact_sim.core.model import FrameState, SimState
from impact_sim.core.timekeeping import FrameTimer
from impact_sim.data.bodies import EARTH_NAME, build_planet_catalog
from impact_sim.data.positions import LivePositionProvider
from impact_sim.data.scenarios import (
    CONTROL_DEFINITIONS,
    CUSTOM_SCENARIO_KEY,
    DEFAULT_SCENARIO_KEY,
    SCENARIO_DISPLAY_ORDER,
    SCENARIOS,
    params_from_mapping,
    scenario_description,
    step_param,
)
from impact_sim.render import (
    Button,
    ButtonVisualStyle,
    Camera,
    body_pixel_radius,
    build_text_panel,
    draw_body,
    draw_orbit_path,
    draw_rings,
    draw_starfield,
    draw_sun,
    generate_starfield,
    get_text_surface,
    hex_to_rgb,
    load_font,
)

LOG_EVERY_FRAMES = 30
FONT_NAMES = ["consolas", "dejavusansmono", "menlo", "couriernew"]

PRESET_BUTTON_STYLE = ButtonVisualStyle(
    base_color=RENDER_CFG.button_color,
    hover_color=RENDER_CFG.button_hover_color,
    active_color=RENDER_CFG.button_active_color,
    text_color=RENDER_CFG.button_text_color,
    radius=RENDER_CFG.button_radius,
    border_color=RENDER_CFG.button_border_color,
)


def indicator_lines(frame: FrameState) -> list[tuple[str, tuple[int, int, int]]]:
    ind = frame.indicators
    text = RENDER_CFG.hud_text_color
    accent = RENDER_CFG.hud_accent_color
    return [
        ("IMPACT INDICATORS", accent),
        (f"Kinetic energy    {format_scientific(ind.energy)} J", text),
        (f"TNT equivalent    {format_decimal(ind.energy_megaton)} Mt", text),
        (f"Seismic magnitude {ind.richter:.1f}", text),
        (f"Crater diameter   {format_decimal(ind.crater_diameter_km)} km", text),
        (f"Tsunami height    {format_decimal(ind.tsunami_height)} m", text),
        (f"Warning time      {format_decimal(ind.warning_hours)} h", text),
        (f"Deflection dv     {format_compact(ind.deflection_delta)} m/s", text),
    ]


def control_lines(
    state: SimState,
    active_index: int,
) -> list[tuple[str, tuple[int, int, int]]]:
    lines = [(f"PARAMETERS  [{state.preset_key}]", RENDER_CFG.hud_accent_color)]
    for idx, control in enumerate(CONTROL_DEFINITIONS):
        value = getattr(state.params, control.key)
        color = RENDER_CFG.hud_highlight_color if idx == active_index else RENDER_CFG.hud_text_color
        marker = ">" if idx == active_index else " "
        lines.append((f"{marker}{idx + 1} {control.label:<14}{value:>8.2f} {control.unit}", color))
    lines.append(("", RENDER_CFG.hud_text_color))
    description = scenario_description(state.preset_key)
    lines.append((description[:64], RENDER_CFG.hud_muted_color))
    return lines


def focus_lines(state: SimState, frame: FrameState) -> list[tuple[str, tuple[int, int, int]]]:
    if frame.selection is None:
        return []
    definition = state.definition(frame.selection)
    body = frame.body(frame.selection)
    overrides = compute_focus_overrides(frame.params or state.params, state.cfg)
    muted = RENDER_CFG.hud_muted_color
    return [
        (definition.name.upper(), RENDER_CFG.hud_highlight_color),
        (definition.summary, RENDER_CFG.hud_text_color),
        (f"Distance {definition.distance_au:.3f} AU  incl. {definition.inclination_degrees:.2f} deg", muted),
        (f"Size x{overrides.radius_multiplier:.2f}  orbit x{overrides.speed_multiplier:.2f}", muted),
        (f"Spin x{overrides.rotation_multiplier:.2f}  position: {body.source}", muted),
    ]


def pick_body(
    frame: FrameState,
    camera: Camera,
    mouse_pos: tuple[int, int],
    pick_radius: int,
) -> str | None:
    """Return the planet drawn closest to ``mouse_pos`` within reach, if any."""

    best_name: str | None = None
    best_dist = float("inf")
    for body in frame.bodies:
        sx, sy, _ = camera.project(body.position)
        reach = max(pick_radius, body_pixel_radius(body.scale, camera.ppu))
        dist = float(np.hypot(sx - mouse_pos[0], sy - mouse_pos[1]))
        if dist <= reach and dist < best_dist:
            best_name = body.name
            best_dist = dist
    return best_name


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Asteroid impact scenario viewer")
    parser.add_argument("--live", action="store_true", help="Fetch observed planet positions in the background")
    parser.add_argument("--runs-dir", default="data/runs", help="Directory for run logs")
    parser.add_argument("--no-log", action="store_true", help="Disable frame and event logging")
    parser.add_argument("--preset", choices=SCENARIO_DISPLAY_ORDER, help="Start from this preset")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    pygame.init()
    pygame.display.set_caption("Impact simulator")
    user_settings = load_user_settings()

    screen = pygame.display.set_mode((RENDER_CFG.width, RENDER_CFG.height), RESIZABLE | DOUBLEBUF)
    width, height = screen.get_size()
    orbit_layer = pygame.Surface((width, height), pygame.SRCALPHA)

    font = load_font(FONT_NAMES, 16)
    font_small = load_font(FONT_NAMES, 14)
    font_fps = load_font(FONT_NAMES, 13)

    catalog = build_planet_catalog(SCENE_CFG)
    provider = LivePositionProvider.from_catalog(catalog) if args.live else None
    logger = None if args.no_log else RunLogger(args.runs_dir)

    state = SimState(catalog=catalog, provider=provider, logger=logger, cfg=SCENE_CFG)

    preset_key = args.preset or user_settings.get("preset_key")
    if isinstance(preset_key, str) and preset_key in SCENARIOS:
        state.apply_preset(preset_key)
    elif preset_key == CUSTOM_SCENARIO_KEY:
        state.set_params(params_from_mapping(user_settings.get("params"), state.params))
    else:
        state.apply_preset(DEFAULT_SCENARIO_KEY)

    zoom_setting = user_settings.get("zoom_ppu")
    if not isinstance(zoom_setting, (int, float)) or isinstance(zoom_setting, bool):
        zoom_setting = RENDER_CFG.default_pixels_per_unit
    camera = Camera(
        (width, height),
        float(zoom_setting),
        min_ppu=RENDER_CFG.min_pixels_per_unit,
        max_ppu=RENDER_CFG.max_pixels_per_unit,
        pitch_deg=RENDER_CFG.default_camera_pitch_deg,
    )
    unfocused_ppu = camera.ppu

    selected = user_settings.get("selected_body")
    if isinstance(selected, str) and selected in {body.name for body in catalog}:
        state.select(selected)
        camera.set_zoom_target(RENDER_CFG.focus_pixels_per_unit)

    if logger is not None:
        logger.write_meta(
            {
                "code_version": __version__,
                "preset": state.preset_key,
                "params": state.params.as_dict(),
                "bodies": [body.name for body in catalog],
                "live_positions": bool(args.live),
                "solar_scale": SCENE_CFG.solar_scale,
                "speed_scale": SCENE_CFG.speed_scale,
            }
        )

    starfield = generate_starfield(RENDER_CFG.starfield_count, size=(width, height))
    clock = pygame.time.Clock()
    timer = FrameTimer()
    active_control = 0
    frame_counter = 0
    orbit_cache: dict[tuple, np.ndarray] = {}
    frame: FrameState = state.tick(0.0)

    def orbit_points(name: str) -> np.ndarray:
        definition = state.definition(name)
        overrides = None
        if frame.selection == name and frame.params is not None:
            overrides = compute_focus_overrides(frame.params, state.cfg)
        orbit = effective_orbit(definition.orbit, overrides)
        key = (name, orbit)
        cached = orbit_cache.get(key)
        if cached is None:
            cached = sample_orbit_path(orbit, SCENE_CFG.orbit_segments).as_array()
            if len(orbit_cache) > 64:
                orbit_cache.clear()
            orbit_cache[key] = cached
        return cached

    def focus_body(name: str) -> None:
        nonlocal unfocused_ppu
        if frame.selection is None:
            unfocused_ppu = camera.ppu
        state.select(name)
        camera.set_zoom_target(RENDER_CFG.focus_pixels_per_unit)

    def clear_focus() -> None:
        state.deselect()
        camera.set_target(np.zeros(3))
        camera.set_zoom_target(unfocused_ppu)

    def cycle_focus(direction: int) -> None:
        names = [body.name for body in catalog]
        if frame.selection is None:
            focus_body(names[0] if direction > 0 else names[-1])
            return
        idx = names.index(frame.selection)
        focus_body(names[(idx + direction) % len(names)])

    def cycle_preset() -> None:
        if state.preset_key in SCENARIO_DISPLAY_ORDER:
            idx = SCENARIO_DISPLAY_ORDER.index(state.preset_key)
            state.apply_preset(SCENARIO_DISPLAY_ORDER[(idx + 1) % len(SCENARIO_DISPLAY_ORDER)])
        else:
            state.apply_preset(DEFAULT_SCENARIO_KEY)

    def step_active(steps: int) -> None:
        control = CONTROL_DEFINITIONS[active_control]
        updated = step_param(state.params, control.key, steps)
        state.set_param(control.key, getattr(updated, control.key))

    def collect_user_settings() -> dict[str, object]:
        return {
            "preset_key": state.preset_key,
            "params": state.params.as_dict(),
            "selected_body": frame.selection,
            "zoom_ppu": float(unfocused_ppu if frame.selection else camera.ppu),
        }

    def shutdown() -> None:
        save_user_settings(collect_user_settings())
        if provider is not None:
            provider.close()
        if logger is not None:
            logger.close()
        pygame.quit()

    def make_preset_buttons() -> list[Button]:
        buttons = []
        button_w, button_h, gap = 190, 38, 12
        total = len(SCENARIO_DISPLAY_ORDER) * button_w + (len(SCENARIO_DISPLAY_ORDER) - 1) * gap
        x = (width - total) // 2
        y = height - button_h - 20
        for key in SCENARIO_DISPLAY_ORDER:
            buttons.append(
                Button(
                    (x, y, button_w, button_h),
                    SCENARIOS[key].label,
                    lambda key=key: state.apply_preset(key),
                    style=PRESET_BUTTON_STYLE,
                    is_active=lambda key=key: state.preset_key == key,
                )
            )
            x += button_w + gap
        return buttons

    preset_buttons = make_preset_buttons()

    try:
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    width, height = max(640, event.w), max(480, event.h)
                    screen = pygame.display.set_mode((width, height), RESIZABLE | DOUBLEBUF)
                    orbit_layer = pygame.Surface((width, height), pygame.SRCALPHA)
                    camera.update_size((width, height))
                    starfield = generate_starfield(RENDER_CFG.starfield_count, size=(width, height))
                    preset_buttons = make_preset_buttons()
                elif event.type == pygame.KEYDOWN:
                    mods = pygame.key.get_mods()
                    steps = 10 if mods & pygame.KMOD_SHIFT else 1
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif pygame.K_1 <= event.key <= pygame.K_6:
                        active_control = event.key - pygame.K_1
                    elif event.key in (pygame.K_RIGHT, pygame.K_EQUALS, pygame.K_KP_PLUS):
                        step_active(steps)
                    elif event.key in (pygame.K_LEFT, pygame.K_MINUS, pygame.K_KP_MINUS):
                        step_active(-steps)
                    elif event.key == pygame.K_UP:
                        active_control = (active_control - 1) % len(CONTROL_DEFINITIONS)
                    elif event.key == pygame.K_DOWN:
                        active_control = (active_control + 1) % len(CONTROL_DEFINITIONS)
                    elif event.key == pygame.K_p:
                        cycle_preset()
                    elif event.key == pygame.K_TAB:
                        cycle_focus(-1 if mods & pygame.KMOD_SHIFT else 1)
                    elif event.key == pygame.K_BACKSPACE:
                        clear_focus()
                    elif event.key == pygame.K_SPACE:
                        state.paused = not state.paused
                    elif event.key == pygame.K_r:
                        state.reset()
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    if any(button.handle_event(event) for button in preset_buttons):
                        continue
                    if event.button == 1:
                        name = pick_body(frame, camera, event.pos, RENDER_CFG.pick_radius_pixels)
                        if name is None:
                            clear_focus()
                        else:
                            focus_body(name)
                    elif event.button == 3:
                        camera.begin_pan(event.pos)
                    elif event.button == 4:
                        camera.zoom_by_factor(1.15)
                    elif event.button == 5:
                        camera.zoom_by_factor(1 / 1.15)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 3:
                    camera.end_pan()
                elif event.type == pygame.MOUSEMOTION and event.buttons[2]:
                    camera.pan(event.pos)

            if not running:
                break

            # --- Simulation ---
            dt = timer.tick()
            frame = state.tick(dt, now=time.monotonic())
            frame_counter += 1
            if logger is not None and frame_counter % LOG_EVERY_FRAMES == 0:
                logger.log_frame(frame)

            if frame.selection is not None:
                camera.set_target(frame.body(frame.selection).position)
            camera.update(RENDER_CFG.camera_smoothing)

            # --- Render ---
            screen.fill(RENDER_CFG.background_color)
            draw_starfield(screen, starfield, camera, render_cfg=RENDER_CFG)

            orbit_layer.fill((0, 0, 0, 0))
            for body in frame.bodies:
                color = hex_to_rgb(state.definition(body.name).color)
                alpha = 255 if body.focused else RENDER_CFG.orbit_alpha
                draw_orbit_path(orbit_layer, camera, orbit_points(body.name), color, alpha)
            screen.blit(orbit_layer, (0, 0))

            draw_sun(screen, camera, render_cfg=RENDER_CFG)

            drawables = list(frame.bodies)
            if frame.asteroid is not None:
                drawables.append(frame.asteroid)
            projected = [(camera.project(body.position), body) for body in drawables]
            projected.sort(key=lambda item: item[0][2])
            for (sx, sy, _), body in projected:
                radius = body_pixel_radius(body.scale, camera.ppu)
                if frame.asteroid is not None and body is frame.asteroid:
                    draw_body(screen, (sx, sy), radius, RENDER_CFG.asteroid_color, body.spin, render_cfg=RENDER_CFG)
                    continue
                definition = state.definition(body.name)
                color = hex_to_rgb(definition.color)
                if definition.rings is not None:
                    draw_rings(screen, (sx, sy), radius, definition.rings, camera.pitch)
                draw_body(
                    screen,
                    (sx, sy),
                    radius,
                    color,
                    body.spin,
                    emissive=body.emissive_intensity,
                    focused=body.focused,
                    render_cfg=RENDER_CFG,
                )
                if radius >= 3 or body.focused or body.name == EARTH_NAME:
                    label = get_text_surface(font_small, body.name, RENDER_CFG.hud_muted_color)
                    screen.blit(label, (sx + radius + 6, sy - label.get_height() // 2))

            indicator_panel = build_text_panel(
                font, indicator_lines(frame), background_color=RENDER_CFG.panel_background_color
            )
            screen.blit(indicator_panel, (16, 16))

            controls_panel = build_text_panel(
                font_small,
                control_lines(state, active_control),
                background_color=RENDER_CFG.panel_background_color,
            )
            screen.blit(controls_panel, (width - controls_panel.get_width() - 16, 16))

            details = focus_lines(state, frame)
            if details:
                focus_panel = build_text_panel(
                    font_small, details, background_color=RENDER_CFG.panel_background_color
                )
                screen.blit(focus_panel, (16, 32 + indicator_panel.get_height()))

            mouse_pos = pygame.mouse.get_pos()
            for button in preset_buttons:
                button.draw(screen, font_small, mouse_pos)

            if frame.advisory:
                advisory = get_text_surface(font_small, frame.advisory, RENDER_CFG.advisory_color)
                screen.blit(advisory, advisory.get_rect(midbottom=(width // 2, height - 72)))
            if state.paused:
                paused = get_text_surface(font, "PAUSED", RENDER_CFG.hud_highlight_color)
                screen.blit(paused, paused.get_rect(center=(width // 2, 28)))

            fps_text = get_text_surface(font_fps, f"FPS: {clock.get_fps():.1f}", RENDER_CFG.hud_text_color).copy()
            fps_text.set_alpha(RENDER_CFG.fps_text_alpha)
            screen.blit(fps_text, fps_text.get_rect(bottomright=(width - 16, height - 16)))

            pygame.display.flip()
            clock.tick(120)
    finally:
        shutdown()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pygame.quit()
        sys.exit()
