from __future__ import annotations

import math

from pygame.math import Vector2

from ...errors import DegenerateVelocity

_DEGENERATE_LENGTH_SQ = 1e-24


def _normalize_or_raise(vector: Vector2) -> Vector2:
    magnitude_sq = vector.x * vector.x + vector.y * vector.y
    if magnitude_sq < _DEGENERATE_LENGTH_SQ or not math.isfinite(magnitude_sq):
        raise DegenerateVelocity(f"cannot normalize velocity ({vector.x!r}, {vector.y!r})")
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(vector.x * inv, vector.y * inv)


def _wrap_axis(value: float, extent: float) -> float:
    wrapped = value % extent
    # float modulo of a tiny negative value can round up to the extent itself
    if wrapped >= extent:
        wrapped -= extent
    return wrapped


def _wrapped_delta(a: float, b: float, extent: float) -> float:
    delta = (b - a) % extent
    if delta > extent * 0.5:
        delta -= extent
    return delta


def _heading_from_velocity(vector: Vector2) -> float:
    if vector.length_squared() < 1e-12:
        return 0.0
    return math.atan2(vector.y, vector.x)


def _is_finite_xy(vector: Vector2) -> bool:
    return math.isfinite(vector.x) and math.isfinite(vector.y)


def _is_positive_finite(value: float) -> bool:
    return math.isfinite(value) and value > 0.0
