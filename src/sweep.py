"""Parameter sweep of the impact indicators over entry velocity and angle."""
from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from impact_sim.core.indicators import SHALLOW_ENTRY_ANGLE_DEG, compute_derived_indicators
from impact_sim.data.scenarios import CONTROLS, DEFAULT_SCENARIO_KEY, SCENARIO_DISPLAY_ORDER, get_scenario

# ===========================
# SWEEP SETTINGS
# ===========================
VELOCITY_POINTS = 141   # horizontal resolution (x-axis), one per slider step
ANGLE_POINTS = 76       # vertical resolution (y-axis), one per degree

FIGURES_DIR = Path("figures")

# ===========================
# MAIN SWEEP
# ===========================
def run_sweep(preset_key: str = DEFAULT_SCENARIO_KEY) -> tuple[np.ndarray, np.ndarray, dict[str, np.ndarray]]:
    """Evaluate every velocity/angle pair with the preset's other parameters."""

    base = get_scenario(preset_key).params
    velocity = CONTROLS["velocity"]
    angle = CONTROLS["angle"]
    velocities = np.linspace(velocity.min, velocity.max, VELOCITY_POINTS)
    angles = np.linspace(angle.min, angle.max, ANGLE_POINTS)
    fields = ("tsunami_height", "warning_hours", "energy_megaton")
    results = {name: np.zeros((angles.size, velocities.size)) for name in fields}

    print(f"\n--- Running sweep (preset {preset_key}) ---")
    print(f"{angles.size * velocities.size} points ({VELOCITY_POINTS} velocities × {ANGLE_POINTS} angles)")

    for i, entry_angle in enumerate(angles):
        for j, speed in enumerate(velocities):
            params = replace(base, velocity=float(speed), angle=float(entry_angle))
            indicators = compute_derived_indicators(params)
            for name in fields:
                results[name][i, j] = getattr(indicators, name)

    return velocities, angles, results

# ===========================
# PLOTTING
# ===========================
def plot_heatmap(
    velocities: np.ndarray,
    angles: np.ndarray,
    values: np.ndarray,
    *,
    title: str,
    label: str,
    out: Path,
    cmap: str,
) -> None:
    fig, ax = plt.subplots(figsize=(10, 6))
    extent = [velocities.min(), velocities.max(), angles.min(), angles.max()]
    im = ax.imshow(values, origin="lower", extent=extent, aspect="auto", cmap=cmap)
    cbar = fig.colorbar(im)
    cbar.set_label(label)
    ax.axhline(SHALLOW_ENTRY_ANGLE_DEG, color="white", linestyle="--", lw=1.0, alpha=0.8)
    ax.text(
        velocities.max(),
        SHALLOW_ENTRY_ANGLE_DEG,
        f" shallow entry < {SHALLOW_ENTRY_ANGLE_DEG:.0f}°",
        color="white",
        ha="right",
        va="bottom",
        fontsize=9,
    )
    ax.set_xlabel("Entry velocity [km/s]")
    ax.set_ylabel("Entry angle [degrees]")
    ax.set_title(title)
    fig.tight_layout()
    fig.savefig(out, dpi=180)
    plt.close(fig)
    print(f"Heatmap saved to {out}")


def plot_results(preset_key: str, velocities: np.ndarray, angles: np.ndarray, results: dict[str, np.ndarray]) -> None:
    FIGURES_DIR.mkdir(parents=True, exist_ok=True)
    plot_heatmap(
        velocities,
        angles,
        results["tsunami_height"],
        title=f"Tsunami height by velocity and angle ({preset_key})",
        label="Tsunami height [m]",
        out=FIGURES_DIR / f"sweep_tsunami_{preset_key}.png",
        cmap="viridis",
    )
    plot_heatmap(
        velocities,
        angles,
        results["warning_hours"],
        title=f"Warning time by velocity and angle ({preset_key})",
        label="Warning time [h]",
        out=FIGURES_DIR / f"sweep_warning_{preset_key}.png",
        cmap="magma",
    )

# ===========================
# MAIN
# ===========================
def main() -> None:
    parser = argparse.ArgumentParser(description="Sweep impact indicators over velocity and entry angle.")
    parser.add_argument("--preset", choices=SCENARIO_DISPLAY_ORDER, default=DEFAULT_SCENARIO_KEY)
    args = parser.parse_args()

    velocities, angles, results = run_sweep(args.preset)
    tsunami = results["tsunami_height"]
    print(f"Tsunami height range: {tsunami.min():.2f} - {tsunami.max():.2f} m")
    print(f"Warning time range: {results['warning_hours'].min():.2f} - {results['warning_hours'].max():.2f} h")
    plot_results(args.preset, velocities, angles, results)

if __name__ == "__main__":
    main()
