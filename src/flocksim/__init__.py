from __future__ import annotations

from .config import BirdConfig, SimulationConfig, load_config
from .errors import DegenerateVelocity, FlockError, InvalidParameter, UnknownAgentId
from .sim.core.agent import Bird, BirdParams
from .sim.core.model import AgentState, FlockModel
from .sim.core.spatial_grid import PeriodicSpatialGrid
from .sim.core.world import World, advance_tick, initialize_flock
from .sim.systems.flocking import FlockingRule

__all__ = [
    "AgentState",
    "Bird",
    "BirdConfig",
    "BirdParams",
    "DegenerateVelocity",
    "FlockError",
    "FlockModel",
    "FlockingRule",
    "InvalidParameter",
    "PeriodicSpatialGrid",
    "SimulationConfig",
    "UnknownAgentId",
    "World",
    "advance_tick",
    "initialize_flock",
    "load_config",
]
