from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    neighbor_checks: int
    mean_neighbors: float
    degenerate_updates: int
    polarization: float
    mean_speed: float
    tick_duration_ms: float = 0.0
