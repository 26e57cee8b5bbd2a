from __future__ import annotations

import random
from typing import List

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_point(self, width: float, height: float) -> Vector2:
        return Vector2(self.next_range(0.0, width), self.next_range(0.0, height))

    def next_velocity(self) -> Vector2:
        # components uniform in [-1, 1]; redraw the (measure-zero) zero vector
        while True:
            vector = Vector2(self.next_range(-1.0, 1.0), self.next_range(-1.0, 1.0))
            if vector.length_squared() > 0.0:
                return vector

    def permutation(self, items: List[int]) -> List[int]:
        shuffled = list(items)
        self._random.shuffle(shuffled)
        return shuffled
