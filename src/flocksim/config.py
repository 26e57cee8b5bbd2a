from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .sim.core.agent import BirdParams


@dataclass
class BirdConfig:
    speed: float = 1.5
    cohere_factor: float = 0.1
    separation: float = 2.0
    separate_factor: float = 0.25
    match_factor: float = 0.04
    visual_distance: float = 5.0

    def to_params(self) -> BirdParams:
        return BirdParams(
            speed=float(self.speed),
            cohere_factor=float(self.cohere_factor),
            separation=float(self.separation),
            separate_factor=float(self.separate_factor),
            match_factor=float(self.match_factor),
            visual_distance=float(self.visual_distance),
        )


@dataclass
class SimulationConfig:
    n_birds: int = 100
    extent: tuple[float, float] = (100.0, 100.0)
    seed: int = 2024
    # None derives the grid spacing from the visual distance
    spacing: float | None = None
    update_mode: str = "synchronous"
    scheduler: str = "random"
    degenerate_policy: str = "hold"
    config_version: str = "v1"
    bird: BirdConfig = field(default_factory=BirdConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def _extent(value: Any) -> tuple[float, float]:
    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise ValueError(f"extent must have two entries, got {value!r}")
        return (float(value[0]), float(value[1]))
    side = float(value)
    return (side, side)


def load_config(raw: Mapping[str, Any]) -> SimulationConfig:
    bird = BirdConfig(**raw.get("bird", {}))
    sim_values = {k: v for k, v in raw.items() if k != "bird"}
    if "extent" in sim_values:
        sim_values["extent"] = _extent(sim_values["extent"])
    return SimulationConfig(bird=bird, **sim_values)
