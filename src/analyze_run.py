"""Analyze a recorded viewer run and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
import json
from collections import Counter
from pathlib import Path
from typing import Dict, List

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


FRAMES_FILENAME = "frames.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
FIGS_SUBDIR = "figs"
ASTEROID_NAME = "Asteroid"


def load_frames(path: Path) -> Dict[str, Dict[str, np.ndarray]]:
    """Return per-body columns ``t, x, y, z, spin`` plus the list of sources."""

    raw: Dict[str, Dict[str, list]] = {}
    with path.open("r", newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        for row in reader:
            if not row or not row.get("body"):
                continue
            columns = raw.setdefault(
                row["body"], {"t": [], "x": [], "y": [], "z": [], "spin": [], "source": []}
            )
            for key in ("t", "x", "y", "z", "spin"):
                columns[key].append(float(row[key]))
            columns["source"].append(row.get("source", ""))
    frames: Dict[str, Dict[str, np.ndarray]] = {}
    for body, columns in raw.items():
        frames[body] = {key: np.asarray(values) for key, values in columns.items()}
    return frames


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        events: List[dict] = []
        for row in reader:
            if not row:
                continue
            event = {
                "t": float(row["t"]),
                "type": row["type"],
                "body": row.get("body", ""),
            }
            details_raw = row.get("details", "")
            if details_raw:
                try:
                    event["details"] = json.loads(details_raw)
                except json.JSONDecodeError:
                    event["details"] = details_raw
            events.append(event)
    return events


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: List[dict]) -> Dict[str, int]:
    summary: Dict[str, int] = {"select": 0, "deselect": 0, "preset": 0, "param": 0, "advisory": 0}
    for event in events:
        summary[event["type"]] = summary.get(event["type"], 0) + 1
    return summary


def selection_time(events: List[dict], end_time: float) -> Dict[str, float]:
    """Seconds of scene time each body spent focused."""

    totals: Dict[str, float] = {}
    current: str | None = None
    since = 0.0
    for event in sorted(events, key=lambda item: item["t"]):
        if event["type"] not in ("select", "deselect"):
            continue
        if current is not None:
            totals[current] = totals.get(current, 0.0) + event["t"] - since
        current = event["body"] if event["type"] == "select" else None
        since = event["t"]
    if current is not None:
        totals[current] = totals.get(current, 0.0) + max(0.0, end_time - since)
    return totals


def plot_traces(fig_dir: Path, frames: Dict[str, Dict[str, np.ndarray]]) -> None:
    fig, ax = plt.subplots(figsize=(7, 7))
    for body, columns in frames.items():
        if body == ASTEROID_NAME:
            continue
        ax.plot(columns["x"], columns["z"], lw=1.2, label=body)
    ax.scatter([0.0], [0.0], color="#fbe7a7", s=60, label="Sun")
    ax.set_aspect("equal", "box")
    ax.set_xlabel("x [scene units]")
    ax.set_ylabel("z [scene units]")
    ax.set_title("Body traces (x-z plane)")
    ax.legend(fontsize=8)
    fig.tight_layout()
    fig.savefig(fig_dir / "traces_xz.png", dpi=150)
    plt.close(fig)


def plot_asteroid(fig_dir: Path, frames: Dict[str, Dict[str, np.ndarray]], anchor: str) -> None:
    asteroid = frames.get(ASTEROID_NAME)
    center = frames.get(anchor)
    if asteroid is None or center is None or asteroid["t"].size != center["t"].size:
        return
    dx = asteroid["x"] - center["x"]
    dy = asteroid["y"] - center["y"]
    dz = asteroid["z"] - center["z"]
    fig, (ax_path, ax_dist) = plt.subplots(1, 2, figsize=(11, 4.5))
    ax_path.plot(dx, dz, color="#a8a096", lw=1.2)
    ax_path.scatter([0.0], [0.0], color="#2e96f5", s=50, label=anchor)
    ax_path.set_aspect("equal", "box")
    ax_path.set_xlabel("dx")
    ax_path.set_ylabel("dz")
    ax_path.set_title(f"Asteroid relative to {anchor}")
    ax_path.legend()
    ax_dist.plot(asteroid["t"], np.sqrt(dx**2 + dy**2 + dz**2), color="#ffa94d")
    ax_dist.set_xlabel("t [s]")
    ax_dist.set_ylabel("distance [scene units]")
    ax_dist.set_title("Flyby distance")
    ax_dist.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "asteroid_flyby.png", dpi=150)
    plt.close(fig)


def plot_events(fig_dir: Path, events: List[dict]) -> None:
    if not events:
        return
    kinds = sorted({event["type"] for event in events})
    fig, ax = plt.subplots(figsize=(8, 3.5))
    for idx, kind in enumerate(kinds):
        times = [event["t"] for event in events if event["type"] == kind]
        ax.scatter(times, [idx] * len(times), s=24, label=kind)
    ax.set_yticks(range(len(kinds)))
    ax.set_yticklabels(kinds)
    ax.set_xlabel("t [s]")
    ax.set_title("Events over time")
    ax.grid(True, axis="x", alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "events.png", dpi=150)
    plt.close(fig)


def print_summary(
    run_dir: Path,
    meta: dict,
    frames: Dict[str, Dict[str, np.ndarray]],
    event_summary: Dict[str, int],
    focused: Dict[str, float],
) -> None:
    print(f"Run: {run_dir.name}")
    print(f" Preset at start: {meta.get('preset', 'unknown')}")
    print(f" Live positions: {'on' if meta.get('live_positions') else 'off'}")
    print(f" Bodies logged: {', '.join(sorted(frames))}")
    live_counts = Counter()
    for body, columns in frames.items():
        live_counts[body] = int(np.sum(columns["source"] == "live"))
    live_bodies = [body for body, count in live_counts.items() if count]
    if live_bodies:
        print(f" Live samples for: {', '.join(sorted(live_bodies))}")
    print(
        " Event summary:" +
        ", ".join(f" {etype}: {count}" for etype, count in event_summary.items())
    )
    if focused:
        print(
            " Focus time:" +
            ", ".join(f" {body}: {seconds:.1f} s" for body, seconds in sorted(focused.items()))
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze a logged run and create figures.")
    parser.add_argument("run_dir", nargs="?", help="Path to a specific run directory")
    parser.add_argument("--anchor", default="Earth", help="Body the asteroid circles")
    args = parser.parse_args()

    base_runs_dir = Path("data") / "runs"
    if args.run_dir:
        run_path = Path(args.run_dir)
        if not run_path.is_dir():
            run_path = base_runs_dir / args.run_dir
    else:
        last_run_file = base_runs_dir / "last_run.txt"
        if not last_run_file.exists():
            parser.error("No run given and last_run.txt is missing.")
        run_id = last_run_file.read_text(encoding="utf-8").strip()
        run_path = base_runs_dir / run_id

    if not run_path.is_dir():
        parser.error(f"Could not find run directory: {run_path}")

    meta_path = run_path / META_FILENAME
    frames_path = run_path / FRAMES_FILENAME
    ev_path = run_path / EVENTS_FILENAME

    if not frames_path.exists() or not ev_path.exists():
        parser.error("Run directory is missing frames.csv or events.csv.")

    meta: dict = {}
    if meta_path.exists():
        with meta_path.open("r", encoding="utf-8") as fh:
            meta = json.load(fh)

    frames = load_frames(frames_path)
    events = load_events(ev_path)
    if not frames:
        parser.error("frames.csv is empty, nothing to analyze.")

    end_time = max(float(columns["t"].max()) for columns in frames.values())
    fig_dir = ensure_fig_dir(run_path)
    plot_traces(fig_dir, frames)
    plot_asteroid(fig_dir, frames, args.anchor)
    plot_events(fig_dir, events)

    print_summary(run_path, meta, frames, summarize_events(events), selection_time(events, end_time))


if __name__ == "__main__":
    main()
