from __future__ import annotations

import pytest

from flocksim.config import BirdConfig, SimulationConfig, load_config
from flocksim.sim.core.agent import BirdParams


def test_defaults_match_reference_flock():
    config = SimulationConfig()

    assert config.n_birds == 100
    assert config.extent == (100.0, 100.0)
    assert config.seed == 2024
    assert config.update_mode == "synchronous"
    assert config.bird.to_params() == BirdParams(
        speed=1.5,
        cohere_factor=0.1,
        separation=2.0,
        separate_factor=0.25,
        match_factor=0.04,
        visual_distance=5.0,
    )


def test_load_config_accepts_scalar_extent_and_nested_bird():
    config = load_config({"n_birds": 12, "extent": 50, "bird": {"speed": 2.0, "visual_distance": 3.0}})

    assert config.n_birds == 12
    assert config.extent == (50.0, 50.0)
    assert config.bird == BirdConfig(speed=2.0, visual_distance=3.0)


def test_load_config_rejects_unknown_keys():
    with pytest.raises(TypeError):
        load_config({"n_boids": 12})
    with pytest.raises(TypeError):
        load_config({"bird": {"wingspan": 1.0}})
    with pytest.raises(ValueError):
        load_config({"extent": [1.0, 2.0, 3.0]})


def test_from_yaml(tmp_path):
    path = tmp_path / "flock.yaml"
    path.write_text(
        "n_birds: 8\n"
        "extent: [40.0, 20.0]\n"
        "seed: 5\n"
        "update_mode: sequential\n"
        "scheduler: by_id\n"
        "bird:\n"
        "  cohere_factor: 0.5\n"
    )

    config = SimulationConfig.from_yaml(path)

    assert config.n_birds == 8
    assert config.extent == (40.0, 20.0)
    assert config.update_mode == "sequential"
    assert config.scheduler == "by_id"
    assert config.bird.cohere_factor == 0.5
    assert config.bird.speed == 1.5


def test_from_yaml_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert SimulationConfig.from_yaml(path) == SimulationConfig()
