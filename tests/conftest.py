import sys
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from packet_mesh.config import NetworkConfig
from packet_mesh.core.enums import DestinationPolicy
from packet_mesh.core.network import Network


@pytest.fixture
def fast_config() -> NetworkConfig:
    """Configuration where every tick of 0.1 s finishes an edge."""

    return NetworkConfig(
        node_count=0,
        packet_speed=20.0,
        packet_max_hops=3,
        destination_policy=DestinationPolicy.SINGLE_HOP,
    )


@pytest.fixture
def build_network(fast_config):
    """Return a factory for hand-wired networks.

    ``build_network(4, [(0, 1), (1, 2)])`` creates four nodes on a row and the
    given directed edges.
    """

    def factory(node_count, edges, config=None, seed=7):
        network = Network(400, 300, config or fast_config, seed=seed)
        for node_id in range(node_count):
            network.add_node(node_id, 50.0 + 60.0 * node_id, 150.0)
        for source, target in edges:
            network.add_edge(source, target)
        return network

    return factory
