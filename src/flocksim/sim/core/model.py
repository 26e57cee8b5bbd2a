from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, NamedTuple, Tuple

from pygame.math import Vector2

from ...errors import InvalidParameter, UnknownAgentId
from ..utils.math2d import _is_finite_xy, _is_positive_finite, _wrap_axis, _wrapped_delta
from .agent import Bird
from .spatial_grid import PeriodicSpatialGrid

logger = logging.getLogger(__name__)

VISUAL_DISTANCE_PER_SPACING = 1.5


class AgentState(NamedTuple):
    id: int
    position: Vector2
    velocity: Vector2


class FlockModel:
    """The birds of one flock plus the toroidal arena they fly in.

    Population and ids are fixed at construction. Positions are kept inside
    ``[0, width) x [0, height)`` by wrapping on every write.
    """

    def __init__(
        self,
        extent: Tuple[float, float],
        birds: Iterable[Bird],
        spacing: float | None = None,
    ) -> None:
        width, height = float(extent[0]), float(extent[1])
        if not (_is_positive_finite(width) and _is_positive_finite(height)):
            raise InvalidParameter(f"extent must be positive and finite on both axes, got {extent!r}")
        self._extent = (width, height)
        self._birds: Dict[int, Bird] = {}
        for bird in birds:
            if bird.id in self._birds:
                raise InvalidParameter(f"duplicate agent id: {bird.id!r}")
            bird.params.validate()
            if not (_is_finite_xy(bird.position) and _is_finite_xy(bird.velocity)):
                raise InvalidParameter(f"bird {bird.id!r} has a non-finite position or velocity")
            bird.position = self.wrap_position(bird.position)
            self._birds[bird.id] = bird
        self._ids: List[int] = sorted(self._birds)
        if spacing is None:
            reach = max((bird.visual_distance for bird in self._birds.values()), default=1.0)
            spacing = reach / VISUAL_DISTANCE_PER_SPACING
        self._index = PeriodicSpatialGrid(spacing)
        self.rebuild_index()

    @property
    def extent(self) -> Tuple[float, float]:
        return self._extent

    @property
    def index(self) -> PeriodicSpatialGrid:
        return self._index

    @property
    def ids(self) -> List[int]:
        return list(self._ids)

    @property
    def agents(self) -> List[Bird]:
        return [self._birds[agent_id] for agent_id in self._ids]

    def __len__(self) -> int:
        return len(self._birds)

    def __iter__(self) -> Iterator[Bird]:
        return iter(self.agents)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._birds

    def agent(self, agent_id: int) -> Bird:
        try:
            return self._birds[agent_id]
        except KeyError:
            raise UnknownAgentId(agent_id) from None

    def agent_states(self) -> Iterator[AgentState]:
        for agent_id in self._ids:
            bird = self._birds[agent_id]
            yield AgentState(agent_id, Vector2(bird.position), Vector2(bird.velocity))

    def wrap_position(self, position: Vector2) -> Vector2:
        width, height = self._extent
        return Vector2(_wrap_axis(position.x, width), _wrap_axis(position.y, height))

    def move_agent(self, agent_id: int, displacement: Vector2) -> Vector2:
        bird = self.agent(agent_id)
        bird.position = self.wrap_position(
            Vector2(bird.position.x + displacement.x, bird.position.y + displacement.y)
        )
        return bird.position

    def set_velocity(self, agent_id: int, velocity: Vector2) -> None:
        self.agent(agent_id).velocity = Vector2(velocity)

    def direction_to(self, origin: Vector2, target: Vector2) -> Vector2:
        width, height = self._extent
        return Vector2(
            _wrapped_delta(origin.x, target.x, width),
            _wrapped_delta(origin.y, target.y, height),
        )

    def wrapped_distance(self, a: Vector2, b: Vector2) -> float:
        return self.direction_to(a, b).length()

    def rebuild_index(self) -> None:
        self._index.build(
            {agent_id: bird.position for agent_id, bird in self._birds.items()},
            self._extent,
        )
        if logger.isEnabledFor(logging.DEBUG):
            cols, rows = self._index.shape
            logger.debug("Rebuilt spatial index: %d birds in %dx%d cells", len(self._birds), cols, rows)

    def sync_index(self, agent_id: int) -> None:
        self._index.update(agent_id, self.agent(agent_id).position)

    def nearby_ids(self, position: Vector2, radius: float) -> List[int]:
        return self._index.neighbors_within(position, radius)
