from __future__ import annotations

import csv

import pytest

from flocksim.app.headless import run_headless


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def _small_config(tmp_path, n_birds=5):
    path = tmp_path / "small.yaml"
    path.write_text(f"n_birds: {n_birds}\nextent: 20\nscheduler: by_id\n")
    return path


def test_headless_basic_log_header(tmp_path):
    log_path = tmp_path / "basic.csv"
    run_headless(steps=2, seed=1, log_path=log_path, deterministic_log=True, config_path=_small_config(tmp_path))
    rows = _read_csv(log_path)
    assert len(rows) == 3
    assert rows[0] == [
        "tick",
        "population",
        "neighbor_checks",
        "mean_neighbors",
        "degenerate_updates",
        "polarization",
        "mean_speed",
        "tick_ms",
    ]
    assert [row[0] for row in rows[1:]] == ["0", "1"]
    assert all(row[1] == "5" for row in rows[1:])
    assert all(row[-1] == "0.000" for row in rows[1:])


def test_headless_deterministic_log_is_reproducible(tmp_path):
    config_path = _small_config(tmp_path, n_birds=20)
    first = tmp_path / "first.csv"
    second = tmp_path / "second.csv"

    run_headless(steps=5, seed=3, log_path=first, deterministic_log=True, config_path=config_path)
    run_headless(steps=5, seed=3, log_path=second, deterministic_log=True, config_path=config_path)

    assert first.read_text() == second.read_text()


def test_headless_trajectory_log_has_row_per_bird(tmp_path):
    log_path = tmp_path / "trajectory.csv"
    world = run_headless(
        steps=3,
        seed=2,
        log_path=log_path,
        log_format="trajectory",
        config_path=_small_config(tmp_path),
    )
    rows = _read_csv(log_path)

    assert rows[0] == ["tick", "id", "x", "y", "vx", "vy"]
    assert len(rows) == 1 + 3 * 5
    last_tick = [row for row in rows[1:] if row[0] == "2"]
    assert [int(row[1]) for row in last_tick] == world.model.ids
    for row, bird in zip(last_tick, world.agents):
        assert float(row[2]) == pytest.approx(bird.position.x, abs=1e-6)


def test_headless_without_log_still_runs(tmp_path):
    world = run_headless(steps=2, seed=4, log_path=None, config_path=_small_config(tmp_path))

    assert world.metrics.tick == 1
    assert world.config.seed == 4


def test_headless_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        run_headless(steps=1, seed=1, log_path=tmp_path / "x.csv", log_format="video")
