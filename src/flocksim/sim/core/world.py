from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from time import perf_counter
from typing import Callable, List, Sequence, Tuple, Union

from pygame.math import Vector2

from ...config import SimulationConfig
from ...errors import InvalidParameter, UnknownAgentId
from ..systems import metrics as metrics_system
from ..systems.flocking import HOLD, FlockingRule, RuleResult
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from ..utils.math2d import _heading_from_velocity, _is_finite_xy, _is_positive_finite
from .agent import Bird, BirdParams
from .model import FlockModel
from .rng import DeterministicRng

logger = logging.getLogger(__name__)

SYNCHRONOUS = "synchronous"
SEQUENTIAL = "sequential"
UPDATE_MODES = (SYNCHRONOUS, SEQUENTIAL)

BY_ID = "by_id"
RANDOM = "random"
SCHEDULERS = (BY_ID, RANDOM)

ParamsSource = Union[BirdParams, Sequence[BirdParams], Callable[[int], BirdParams]]
Sampler = Callable[[int], Vector2]


@dataclass(slots=True)
class TickResult:
    neighbor_checks: int = 0
    degenerate_updates: int = 0


def _params_for(params: ParamsSource, agent_id: int, population_size: int) -> BirdParams:
    if isinstance(params, BirdParams):
        return params
    if callable(params):
        return params(agent_id)
    if len(params) != population_size:
        raise InvalidParameter(
            f"expected {population_size} per-bird parameter sets, got {len(params)}"
        )
    return params[agent_id]


def _lattice_sampler(population_size: int, extent: Tuple[float, float]) -> Sampler:
    width, height = extent
    cols = max(1, int(math.ceil(math.sqrt(population_size * width / height)))) if population_size else 1
    rows = max(1, int(math.ceil(population_size / cols))) if population_size else 1
    step_x = width / cols
    step_y = height / rows

    def sample(agent_id: int) -> Vector2:
        col = agent_id % cols
        row = agent_id // cols
        return Vector2((col + 0.5) * step_x, (row + 0.5) * step_y)

    return sample


def initialize_flock(
    population_size: int,
    params: ParamsSource,
    extent: Tuple[float, float],
    velocity_sampler: Sampler,
    position_sampler: Sampler | None = None,
    spacing: float | None = None,
) -> FlockModel:
    """Create a flock of ``population_size`` birds with ids ``0..n-1``.

    ``params`` is one parameter set shared by every bird, a sequence with one
    entry per bird, or a callable mapping an id to its parameters. Positions
    come from ``position_sampler`` or, when omitted, a regular lattice that
    covers the arena.
    """
    if population_size < 0:
        raise InvalidParameter(f"population_size must be non-negative, got {population_size!r}")
    width, height = float(extent[0]), float(extent[1])
    if not (_is_positive_finite(width) and _is_positive_finite(height)):
        raise InvalidParameter(f"extent must be positive and finite on both axes, got {extent!r}")
    if position_sampler is None:
        position_sampler = _lattice_sampler(population_size, (width, height))

    birds: List[Bird] = []
    for agent_id in range(population_size):
        bird_params = _params_for(params, agent_id, population_size).validate()
        velocity = Vector2(velocity_sampler(agent_id))
        if not _is_finite_xy(velocity) or velocity.length_squared() == 0.0:
            raise InvalidParameter(f"initial velocity of bird {agent_id} must be finite and non-zero, got {velocity!r}")
        position = Vector2(position_sampler(agent_id))
        if not _is_finite_xy(position):
            raise InvalidParameter(f"initial position of bird {agent_id} must be finite, got {position!r}")
        birds.append(Bird(id=agent_id, position=position, velocity=velocity, params=bird_params))

    model = FlockModel((width, height), birds, spacing=spacing)
    logger.debug("Initialized flock of %d birds in %.3gx%.3g arena", population_size, width, height)
    return model


def _resolve_order(model: FlockModel, order: Sequence[int] | None) -> List[int]:
    if order is None:
        return model.ids
    resolved = list(order)
    for agent_id in resolved:
        if agent_id not in model:
            raise UnknownAgentId(agent_id)
    if len(resolved) != len(model) or len(set(resolved)) != len(resolved):
        raise InvalidParameter("tick order must visit every bird exactly once")
    return resolved


def advance_tick(
    model: FlockModel,
    order: Sequence[int] | None = None,
    mode: str = SYNCHRONOUS,
    rule: FlockingRule | None = None,
) -> TickResult:
    """Run the flocking rule once for every bird, mutating ``model`` in place.

    In synchronous mode every bird is planned against the positions and
    velocities at the start of the tick and all updates are committed
    together, so the visiting order has no effect. In sequential mode birds
    are stepped one at a time and later birds see the moves of earlier ones.
    """
    if mode not in UPDATE_MODES:
        raise InvalidParameter(f"mode must be one of {UPDATE_MODES}, got {mode!r}")
    rule = rule if rule is not None else FlockingRule(HOLD)
    visit = _resolve_order(model, order)
    result = TickResult()

    model.rebuild_index()
    if mode == SYNCHRONOUS:
        staged: List[RuleResult] = [rule.plan(agent_id, model) for agent_id in visit]
        for planned in staged:
            rule.commit(planned, model)
            result.neighbor_checks += planned.neighbors
            result.degenerate_updates += planned.degenerate
    else:
        for agent_id in visit:
            planned = rule.step(agent_id, model)
            model.sync_index(agent_id)
            result.neighbor_checks += planned.neighbors
            result.degenerate_updates += planned.degenerate
    return result


class World:
    """A seeded flock driven tick by tick from a ``SimulationConfig``."""

    def __init__(self, config: SimulationConfig):
        if config.update_mode not in UPDATE_MODES:
            raise InvalidParameter(f"update_mode must be one of {UPDATE_MODES}, got {config.update_mode!r}")
        if config.scheduler not in SCHEDULERS:
            raise InvalidParameter(f"scheduler must be one of {SCHEDULERS}, got {config.scheduler!r}")
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._rule = FlockingRule(config.degenerate_policy)
        self._metrics: TickMetrics | None = None
        self._model = self._bootstrap_flock()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def model(self) -> FlockModel:
        return self._model

    @property
    def agents(self) -> List[Bird]:
        return self._model.agents

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def reset(self) -> None:
        self._rng.reset()
        self._metrics = None
        self._model = self._bootstrap_flock()

    def step(self, tick: int) -> TickMetrics:
        start = perf_counter()
        model = self._model
        if self._config.scheduler == RANDOM:
            order = self._rng.permutation(model.ids)
        else:
            order = None
        result = advance_tick(model, order=order, mode=self._config.update_mode, rule=self._rule)
        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            model, tick, result.neighbor_checks, result.degenerate_updates, elapsed_ms
        )
        self._metrics = metrics
        return metrics

    def snapshot(self, tick: int) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(self._model, tick, 0, 0, 0.0)
        width, height = self._model.extent
        agents_payload = [
            {
                "id": state.id,
                "x": state.position.x,
                "y": state.position.y,
                "vx": state.velocity.x,
                "vy": state.velocity.y,
                "heading": _heading_from_velocity(state.velocity),
            }
            for state in self._model.agent_states()
        ]
        metadata = SnapshotMetadata(
            seed=self._config.seed,
            update_mode=self._config.update_mode,
            scheduler=self._config.scheduler,
            config_version=self._config.config_version,
        )
        return Snapshot(
            tick=tick,
            metrics=metrics,
            agents=agents_payload,
            world=SnapshotWorld(width=width, height=height),
            metadata=metadata,
        )

    def _bootstrap_flock(self) -> FlockModel:
        config = self._config
        width, height = config.extent
        params = config.bird.to_params()
        positions = [self._rng.next_point(width, height) for _ in range(config.n_birds)]
        velocities = [self._rng.next_velocity() for _ in range(config.n_birds)]
        return initialize_flock(
            config.n_birds,
            params,
            (width, height),
            velocity_sampler=velocities.__getitem__,
            position_sampler=positions.__getitem__,
            spacing=config.spacing,
        )
