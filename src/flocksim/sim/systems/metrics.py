from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.model import FlockModel


def polarization(model: FlockModel) -> float:
    """Norm of the mean unit heading: 1.0 when every bird flies the same way."""
    sum_x = 0.0
    sum_y = 0.0
    counted = 0
    for bird in model.agents:
        vx = bird.velocity.x
        vy = bird.velocity.y
        magnitude = math.hypot(vx, vy)
        if magnitude <= 0.0:
            continue
        sum_x += vx / magnitude
        sum_y += vy / magnitude
        counted += 1
    if counted == 0:
        return 0.0
    return math.hypot(sum_x, sum_y) / counted


def create_metrics(
    model: FlockModel,
    tick: int,
    neighbor_checks: int,
    degenerate_updates: int,
    elapsed_ms: float,
) -> TickMetrics:
    population = len(model)
    if population == 0:
        return TickMetrics(
            tick=tick,
            population=0,
            neighbor_checks=neighbor_checks,
            mean_neighbors=0.0,
            degenerate_updates=degenerate_updates,
            polarization=0.0,
            mean_speed=0.0,
            tick_duration_ms=elapsed_ms,
        )
    speed_sum = sum(bird.speed * bird.velocity.length() for bird in model.agents)
    return TickMetrics(
        tick=tick,
        population=population,
        neighbor_checks=neighbor_checks,
        mean_neighbors=neighbor_checks / population,
        degenerate_updates=degenerate_updates,
        polarization=polarization(model),
        mean_speed=speed_sum / population,
        tick_duration_ms=elapsed_ms,
    )
