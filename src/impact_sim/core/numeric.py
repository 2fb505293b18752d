"""Small numeric helpers shared by the indicator engine and the kinematics."""
from __future__ import annotations

import math

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* between *lo* and *hi*."""

    return max(lo, min(hi, value))


def deg_to_rad(value: float) -> float:
    return value * math.pi / 180.0


def rotation_about_x(angle: float) -> np.ndarray:
    """Return the 3x3 matrix rotating points by ``angle`` radians about +X."""

    c = math.cos(angle)
    s = math.sin(angle)
    return np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, c, -s],
            [0.0, s, c],
        ],
        dtype=float,
    )


__all__ = ["clamp", "deg_to_rad", "rotation_about_x"]
