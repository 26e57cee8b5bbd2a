from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Tuple

from pygame.math import Vector2

from ...errors import InvalidParameter, UnknownAgentId
from ..utils.math2d import _is_positive_finite, _wrapped_delta


class PeriodicSpatialGrid:
    """Uniform bucket grid over a toroidal rectangle.

    Stores position snapshots keyed by agent id. The number of cells per axis is
    chosen so the cells tile each axis exactly; a query only visits the cells
    that can hold a point within the radius, wrapping across the borders.
    """

    def __init__(self, spacing: float) -> None:
        if not _is_positive_finite(spacing):
            raise InvalidParameter(f"grid spacing must be positive and finite, got {spacing!r}")
        self._spacing = spacing
        self._width = 0.0
        self._height = 0.0
        self._cols = 1
        self._rows = 1
        self._cell_w = 0.0
        self._cell_h = 0.0
        self._cells: Dict[Tuple[int, int], List[int]] = {}
        self._positions: Dict[int, Vector2] = {}
        self._keys: Dict[int, Tuple[int, int]] = {}

    @property
    def spacing(self) -> float:
        return self._spacing

    @property
    def shape(self) -> Tuple[int, int]:
        return self._cols, self._rows

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._positions

    def clear(self) -> None:
        self._cells.clear()
        self._positions.clear()
        self._keys.clear()

    def build(self, positions: Mapping[int, Vector2], extent: Tuple[float, float]) -> None:
        width, height = float(extent[0]), float(extent[1])
        if not (_is_positive_finite(width) and _is_positive_finite(height)):
            raise InvalidParameter(f"extent must be positive and finite on both axes, got {extent!r}")
        self._width = width
        self._height = height
        self._cols = max(1, int(width // self._spacing))
        self._rows = max(1, int(height // self._spacing))
        self._cell_w = width / self._cols
        self._cell_h = height / self._rows
        self.clear()
        for agent_id, position in positions.items():
            self._insert(agent_id, Vector2(position))

    def update(self, agent_id: int, position: Vector2) -> None:
        old_key = self._keys.get(agent_id)
        if old_key is None:
            raise UnknownAgentId(agent_id)
        new_key = self._cell_key(position)
        self._positions[agent_id] = Vector2(position)
        if new_key == old_key:
            return
        bucket = self._cells[old_key]
        bucket.remove(agent_id)
        if not bucket:
            del self._cells[old_key]
        self._cells.setdefault(new_key, []).append(agent_id)
        self._keys[agent_id] = new_key

    def position_of(self, agent_id: int) -> Vector2:
        try:
            return self._positions[agent_id]
        except KeyError:
            raise UnknownAgentId(agent_id) from None

    def neighbors_within(self, point: Vector2, radius: float) -> List[int]:
        found: List[int] = []
        if not self._positions or radius < 0.0:
            return found
        width = self._width
        height = self._height
        radius_sq = radius * radius
        px = point.x
        py = point.y
        positions = self._positions
        cells = self._cells
        for key in self._cell_window(point, radius):
            bucket = cells.get(key)
            if not bucket:
                continue
            for agent_id in bucket:
                pos = positions[agent_id]
                dx = _wrapped_delta(px, pos.x, width)
                dy = _wrapped_delta(py, pos.y, height)
                if dx * dx + dy * dy <= radius_sq:
                    found.append(agent_id)
        return found

    def _cell_window(self, point: Vector2, radius: float) -> Iterable[Tuple[int, int]]:
        base_col, base_row = self._cell_key(point)
        range_x = int(math.ceil(radius / self._cell_w))
        range_y = int(math.ceil(radius / self._cell_h))
        cols = self._wrapped_range(base_col, range_x, self._cols)
        rows = self._wrapped_range(base_row, range_y, self._rows)
        return [(col, row) for col in cols for row in rows]

    @staticmethod
    def _wrapped_range(base: int, reach: int, count: int) -> List[int]:
        if 2 * reach + 1 >= count:
            return list(range(count))
        return [(base + offset) % count for offset in range(-reach, reach + 1)]

    def _insert(self, agent_id: int, position: Vector2) -> None:
        key = self._cell_key(position)
        self._positions[agent_id] = position
        self._keys[agent_id] = key
        self._cells.setdefault(key, []).append(agent_id)

    def _cell_key(self, position: Vector2) -> Tuple[int, int]:
        col = int((position.x % self._width) // self._cell_w)
        row = int((position.y % self._height) // self._cell_h)
        # clamp float round-off at the upper border
        return (min(col, self._cols - 1), min(row, self._rows - 1))
