from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass
class CameraState:
    center: np.ndarray
    target: np.ndarray
    ppu: float
    ppu_target: float


class Camera:
    """Orthographic camera looking down on the orbital plane at a fixed pitch.

    ``ppu`` is pixels per scene unit. A pitch of 90 degrees is a top-down view,
    0 degrees looks at the orbital plane edge-on.
    """

    def __init__(
        self,
        size: tuple[int, int],
        ppu: float,
        *,
        min_ppu: float,
        max_ppu: float,
        pitch_deg: float,
    ) -> None:
        self._size = size
        self._min_ppu = min_ppu
        self._max_ppu = max_ppu
        ppu = _clamp(ppu, min_ppu, max_ppu)
        self._state = CameraState(
            center=np.zeros(3, dtype=float),
            target=np.zeros(3, dtype=float),
            ppu=ppu,
            ppu_target=ppu,
        )
        self._pitch = math.radians(pitch_deg)
        self._pan_anchor: tuple[int, int] | None = None

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def update_size(self, size: tuple[int, int]) -> None:
        self._size = size

    @property
    def ppu(self) -> float:
        return self._state.ppu

    @property
    def pitch(self) -> float:
        return self._pitch

    @property
    def center(self) -> np.ndarray:
        return self._state.center

    def set_center(self, position: np.ndarray) -> None:
        self._state.center[:] = position
        self._state.target[:] = position

    def set_target(self, position: np.ndarray) -> None:
        self._state.target[:] = position

    def set_zoom_target(self, ppu: float) -> None:
        self._state.ppu_target = _clamp(ppu, self._min_ppu, self._max_ppu)

    def zoom_by_factor(self, factor: float) -> None:
        self.set_zoom_target(self._state.ppu_target * factor)

    def update(self, smoothing: float = 0.1) -> None:
        state = self._state
        state.ppu += (state.ppu_target - state.ppu) * smoothing
        state.ppu = _clamp(state.ppu, self._min_ppu, self._max_ppu)
        state.center += (state.target - state.center) * smoothing

    def begin_pan(self, position: tuple[int, int]) -> None:
        self._pan_anchor = position

    def pan(self, position: tuple[int, int]) -> None:
        if self._pan_anchor is None:
            return
        dx = position[0] - self._pan_anchor[0]
        dy = position[1] - self._pan_anchor[1]
        if dx == 0 and dy == 0:
            return
        ppu = max(self.ppu, 1e-9)
        sin_pitch = max(math.sin(self._pitch), 1e-3)
        self._state.center[0] -= dx / ppu
        self._state.center[2] -= dy / (ppu * sin_pitch)
        self._state.target[:] = self._state.center
        self._pan_anchor = position

    def end_pan(self) -> None:
        self._pan_anchor = None

    def project(self, point: np.ndarray) -> tuple[int, int, float]:
        """Return screen ``(sx, sy)`` and a depth (larger is nearer the viewer)."""

        width, height = self._size
        rel = np.asarray(point, dtype=float) - self._state.center
        s = math.sin(self._pitch)
        c = math.cos(self._pitch)
        sx = width // 2 + int(rel[0] * self._state.ppu)
        sy = height // 2 + int((rel[2] * s - rel[1] * c) * self._state.ppu)
        depth = rel[2] * c + rel[1] * s
        return sx, sy, float(depth)

    def project_many(self, points: np.ndarray) -> list[tuple[int, int]]:
        width, height = self._size
        rel = np.asarray(points, dtype=float) - self._state.center
        s = math.sin(self._pitch)
        c = math.cos(self._pitch)
        xs = width // 2 + (rel[:, 0] * self._state.ppu).astype(int)
        ys = height // 2 + ((rel[:, 2] * s - rel[:, 1] * c) * self._state.ppu).astype(int)
        return list(zip(xs.tolist(), ys.tolist()))
