"""Logging helpers scoped to the impact simulator package."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .model import FrameState


class RunLogger:
    """Buffered logger that stores sampled frames and UI events to CSV files.

    Each run gets its own directory below ``root_dir`` holding ``frames.csv``,
    ``events.csv`` and ``meta.json``; ``last_run.txt`` in ``root_dir`` names
    the most recent run.
    """

    FRAMES_HEADER = ["t", "body", "x", "y", "z", "spin", "source"]
    EVENTS_HEADER = ["t", "type", "body", "details"]

    def __init__(
        self,
        root_dir: str | Path = "data/runs",
        run_id: Optional[str] = None,
        *,
        frames_flush_threshold: int = 200,
        events_flush_threshold: int = 50,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base = run_id or f"{timestamp}_run"
        candidate_id = base
        suffix = 1
        while (self.root_dir / candidate_id).exists():
            candidate_id = f"{base}_{suffix:02d}"
            suffix += 1

        self.run_id = candidate_id
        self.run_dir = self.root_dir / self.run_id
        self.run_dir.mkdir(parents=True, exist_ok=False)

        self.frames_path = self.run_dir / "frames.csv"
        self.events_path = self.run_dir / "events.csv"
        self.meta_path = self.run_dir / "meta.json"

        self._frames_file = self.frames_path.open("w", newline="", encoding="utf-8")
        self._frames_file.write(",".join(self.FRAMES_HEADER) + "\n")
        self._events_file = self.events_path.open("w", newline="", encoding="utf-8")
        self._events_file.write(",".join(self.EVENTS_HEADER) + "\n")

        self._frames_buffer: list[str] = []
        self._events_buffer: list[str] = []
        self._frames_threshold = max(1, frames_flush_threshold)
        self._events_threshold = max(1, events_flush_threshold)
        self._closed = False

        (self.root_dir / "last_run.txt").write_text(self.run_id, encoding="utf-8")

    def write_meta(self, meta: dict) -> None:
        with self.meta_path.open("w", encoding="utf-8") as fh:
            json.dump(meta, fh, indent=2, sort_keys=True)

    def log_frame_row(self, values: Sequence[object]) -> None:
        self._frames_buffer.append(",".join(self._format_value(v) for v in values))
        if len(self._frames_buffer) >= self._frames_threshold:
            self._flush_frames()

    def log_frame(self, frame: FrameState) -> None:
        """Record one row per body (and the asteroid) of ``frame``."""

        bodies = frame.bodies if frame.asteroid is None else (*frame.bodies, frame.asteroid)
        for body in bodies:
            x, y, z = (float(c) for c in body.position)
            self.log_frame_row([frame.time, body.name, x, y, z, body.spin, body.source])

    def log_event(self, values: Sequence[object]) -> None:
        self._events_buffer.append(",".join(self._format_event_value(v) for v in values))
        if len(self._events_buffer) >= self._events_threshold:
            self._flush_events()

    def close(self) -> None:
        if self._closed:
            return
        self._flush_frames()
        self._flush_events()
        self._frames_file.close()
        self._events_file.close()
        self._closed = True

    def _flush_frames(self) -> None:
        if self._frames_buffer:
            self._frames_file.write("\n".join(self._frames_buffer) + "\n")
            self._frames_file.flush()
            self._frames_buffer.clear()

    def _flush_events(self) -> None:
        if self._events_buffer:
            self._events_file.write("\n".join(self._events_buffer) + "\n")
            self._events_file.flush()
            self._events_buffer.clear()

    @staticmethod
    def _format_value(value: object) -> str:
        if isinstance(value, float):
            return f"{value:.10g}"
        return str(value)

    @staticmethod
    def _format_event_value(value: object) -> str:
        if isinstance(value, (int, float)):
            return f"{value:.10g}"
        text = str(value)
        if any(ch in text for ch in ',"\n'):
            # Details are JSON and usually contain commas.
            return '"' + text.replace('"', '""') + '"'
        return text

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None


__all__ = ["RunLogger"]
