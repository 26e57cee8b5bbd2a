from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pygame.math import Vector2

from ...errors import DegenerateVelocity, InvalidParameter
from ..utils.math2d import _normalize_or_raise

if TYPE_CHECKING:
    from ..core.model import FlockModel

logger = logging.getLogger(__name__)

HOLD = "hold"
RAISE = "raise"
DEGENERATE_POLICIES = (HOLD, RAISE)


@dataclass(slots=True)
class RuleResult:
    agent_id: int
    velocity: Vector2
    neighbors: int
    degenerate: bool = False


class FlockingRule:
    """Cohesion, separation and alignment over the birds within visual range.

    ``plan`` only reads the model, so a whole tick can be planned against one
    snapshot and committed afterwards. ``step`` plans and commits one bird.
    """

    def __init__(self, degenerate_policy: str = HOLD) -> None:
        if degenerate_policy not in DEGENERATE_POLICIES:
            raise InvalidParameter(
                f"degenerate_policy must be one of {DEGENERATE_POLICIES}, got {degenerate_policy!r}"
            )
        self.degenerate_policy = degenerate_policy

    def plan(self, agent_id: int, model: FlockModel) -> RuleResult:
        bird = model.agent(agent_id)
        params = bird.params
        position = bird.position

        cohere_x = cohere_y = 0.0
        separate_x = separate_y = 0.0
        match_x = match_y = 0.0
        count = 0
        for other_id in model.nearby_ids(position, params.visual_distance):
            if other_id == agent_id:
                continue
            other = model.agent(other_id)
            heading = model.direction_to(position, other.position)
            cohere_x += heading.x
            cohere_y += heading.y
            # only cohesion and match see every neighbor
            if heading.length() < params.separation:
                separate_x -= heading.x
                separate_y -= heading.y
            match_x += other.velocity.x
            match_y += other.velocity.y
            count += 1

        divisor = max(count, 1)
        cohere_x = cohere_x / divisor * params.cohere_factor
        cohere_y = cohere_y / divisor * params.cohere_factor
        separate_x = separate_x / divisor * params.separate_factor
        separate_y = separate_y / divisor * params.separate_factor
        match_x = match_x / divisor * params.match_factor
        match_y = match_y / divisor * params.match_factor
        raw = Vector2(
            (bird.velocity.x + cohere_x + separate_x + match_x) / 2.0,
            (bird.velocity.y + cohere_y + separate_y + match_y) / 2.0,
        )
        try:
            velocity = _normalize_or_raise(raw)
        except DegenerateVelocity as exc:
            if self.degenerate_policy == RAISE:
                raise DegenerateVelocity(str(exc), agent_id=agent_id) from exc
            logger.warning("Degenerate velocity for bird %d; holding previous velocity", agent_id)
            return RuleResult(agent_id, Vector2(bird.velocity), count, degenerate=True)
        return RuleResult(agent_id, velocity, count)

    def commit(self, result: RuleResult, model: FlockModel) -> None:
        bird = model.agent(result.agent_id)
        model.set_velocity(result.agent_id, result.velocity)
        model.move_agent(result.agent_id, result.velocity * bird.speed)

    def step(self, agent_id: int, model: FlockModel) -> RuleResult:
        result = self.plan(agent_id, model)
        self.commit(result, model)
        return result
