from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Optional

from ..config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "population",
    "neighbor_checks",
    "mean_neighbors",
    "degenerate_updates",
    "polarization",
    "mean_speed",
    "tick_ms",
]

_TRAJECTORY_HEADER = ["tick", "id", "x", "y", "vx", "vy"]

LOG_FORMATS = ("basic", "trajectory")


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.neighbor_checks,
        f"{metrics.mean_neighbors:.4f}",
        metrics.degenerate_updates,
        f"{metrics.polarization:.6f}",
        f"{metrics.mean_speed:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_trajectory_rows(world: World, tick: int) -> list[list[object]]:
    return [
        [
            tick,
            state.id,
            f"{state.position.x:.6f}",
            f"{state.position.y:.6f}",
            f"{state.velocity.x:.6f}",
            f"{state.velocity.y:.6f}",
        ]
        for state in world.model.agent_states()
    ]


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "basic",
    config_path: Optional[Path] = None,
) -> World:
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: {log_format}")
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    world = World(config)
    logger.info(
        "Running %d ticks with %d birds (seed=%d, mode=%s)",
        steps,
        config.n_birds,
        config.seed,
        config.update_mode,
    )

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_BASIC_HEADER if log_format == "basic" else _TRAJECTORY_HEADER)
    try:
        for tick in range(steps):
            metrics = world.step(tick)
            if writer is None:
                continue
            if log_format == "basic":
                tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
                writer.writerow(_format_basic_row(metrics, tick_ms))
            else:
                writer.writerows(_format_trajectory_rows(world, tick))
    finally:
        if csv_file:
            csv_file.close()

    final = world.metrics
    if final is not None:
        logger.info("Finished at tick %d: polarization=%.4f", final.tick, final.polarization)
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=150)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick output")
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="basic",
        help="basic: one metrics row per tick; trajectory: one row per bird per tick",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        config_path=args.config,
    )


if __name__ == "__main__":
    main()
