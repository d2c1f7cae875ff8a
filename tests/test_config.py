"""Tests for NetworkConfig."""

import json

import pytest

from packet_mesh.config import NetworkConfig
from packet_mesh.core.enums import BoundaryPolicy, DestinationPolicy, LayoutStrategy
from packet_mesh.core.network import Network


def test_defaults_are_valid():
    config = NetworkConfig()
    assert config.layout is LayoutStrategy.SCATTER
    assert config.boundary_policy is BoundaryPolicy.DRIFT_RADIUS
    assert config.destination_policy is DestinationPolicy.MULTI_HOP
    assert not config.static


def test_enum_names_are_accepted():
    config = NetworkConfig(layout="lattice", boundary_policy="CANVAS_EDGE")
    assert config.layout is LayoutStrategy.LATTICE
    assert config.boundary_policy is BoundaryPolicy.CANVAS_EDGE


@pytest.mark.parametrize(
    "overrides",
    [
        {"node_count": -1},
        {"node_damping": 1.5},
        {"node_drift_radius": 0},
        {"packet_speed": 0},
        {"min_edges_per_node": 3, "max_edges_per_node": 2},
        {"multi_hop_chance": 2.0},
        {"blink_duration": 0},
        {"lattice_jitter": -0.1},
        {"layout": "spiral"},
        {"layout": 3},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValueError):
        NetworkConfig(**overrides)


def test_with_overrides_validates():
    config = NetworkConfig()
    assert config.with_overrides(packet_max_hops=6).packet_max_hops == 6
    with pytest.raises(ValueError):
        config.with_overrides(max_dt=-1)


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="NODE_RADIUS"):
        NetworkConfig.from_dict({"NODE_RADIUS": 8})


def test_json_round_trip(tmp_path):
    original = NetworkConfig(layout=LayoutStrategy.LATTICE, node_count=100, packet_max_hops=5)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(original.to_dict()))

    loaded = NetworkConfig.from_json(str(path))

    assert loaded == original


def test_integral_floats_from_json_become_ints(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"node_count": 12.0, "packet_max_hops": 4.0}))

    config = NetworkConfig.from_json(str(path))

    assert config.node_count == 12 and type(config.node_count) is int
    assert type(config.packet_max_hops) is int
    network = Network(800, 600, config, seed=1)
    assert len(network.nodes) == 12


@pytest.mark.parametrize("value", [12.5, "12", True, None])
def test_non_integer_counts_are_rejected(value):
    with pytest.raises(ValueError, match="node_count"):
        NetworkConfig(node_count=value)
