from __future__ import annotations

import math
from dataclasses import dataclass, field

from pygame.math import Vector2

from ...errors import InvalidParameter
from ..utils.math2d import _heading_from_velocity, _is_positive_finite


@dataclass(slots=True, frozen=True)
class BirdParams:
    speed: float = 1.5
    cohere_factor: float = 0.1
    separation: float = 2.0
    separate_factor: float = 0.25
    match_factor: float = 0.04
    visual_distance: float = 5.0

    def validate(self) -> "BirdParams":
        if not _is_positive_finite(self.speed):
            raise InvalidParameter(f"speed must be positive and finite, got {self.speed!r}")
        if not _is_positive_finite(self.visual_distance):
            raise InvalidParameter(f"visual_distance must be positive and finite, got {self.visual_distance!r}")
        for name in ("cohere_factor", "separation", "separate_factor", "match_factor"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value >= 0.0):
                raise InvalidParameter(f"{name} must be non-negative and finite, got {value!r}")
        return self


@dataclass(slots=True)
class Bird:
    id: int
    position: Vector2
    velocity: Vector2
    params: BirdParams = field(default_factory=BirdParams)

    @property
    def speed(self) -> float:
        return self.params.speed

    @property
    def visual_distance(self) -> float:
        return self.params.visual_distance

    @property
    def separation(self) -> float:
        return self.params.separation

    @property
    def heading(self) -> float:
        return _heading_from_velocity(self.velocity)
