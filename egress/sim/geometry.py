"""Distance and interpolation primitives shared by the sim core."""

from __future__ import annotations

import math
from typing import Sequence

Vec3 = tuple[float, float, float]

WAIST_HEIGHT = 0.5
FALLBACK_STEPS = 10


def distance3(a: Sequence[float], b: Sequence[float]) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dz = a[2] - b[2]
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def lerp(a: Sequence[float], b: Sequence[float], ratio: float) -> Vec3:
    return (
        a[0] + (b[0] - a[0]) * ratio,
        a[1] + (b[1] - a[1]) * ratio,
        a[2] + (b[2] - a[2]) * ratio,
    )


def lerp_path(start: Vec3, end: Vec3, steps: int = FALLBACK_STEPS) -> list[Vec3]:
    """Evenly spaced points from start to end, both ends included."""
    steps = max(1, steps)
    return [lerp(start, end, i / steps) for i in range(steps + 1)]


def path_length(points: Sequence[Sequence[float]]) -> float:
    return sum(distance3(a, b) for a, b in zip(points, points[1:]))


def floor_point(x: float, elevation: float, z: float) -> Vec3:
    """Plan coordinates lifted to waist height on a level."""
    return (float(x), elevation + WAIST_HEIGHT, float(z))
