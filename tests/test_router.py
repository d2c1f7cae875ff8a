"""Tests for packet forwarding, delivery, drops and emission."""

from packet_mesh.core.enums import DestinationPolicy, PacketState, PulseRole
from packet_mesh.core.node import Node
from packet_mesh.core.packet import Packet
from packet_mesh.core.routing_algorithms import (
    BacktrackAvoidingRouter,
    LoopAvoidingRouter,
    router_factory,
)
from packet_mesh.utils.rng import MeshRNG

import pytest


def test_packet_delivered_on_first_hop(build_network):
    network = build_network(2, [(0, 1)])

    packet = network.emit_packet()
    assert packet is not None
    assert (packet.source, packet.target, packet.final_target) == (0, 1, 1)
    assert [p.role for p in network.effects.pulses] == [PulseRole.SEND]

    network.tick(0.1)

    assert not packet.active
    assert packet.state is PacketState.ARRIVED_FINAL
    assert network.packets == []
    roles = [(p.node_id, p.role) for p in network.effects.pulses]
    assert (1, PulseRole.RECEIVE_FINAL) in roles
    assert [f.node_id for f in network.effects.processing_flashes] == [1]
    assert network.effects.blinks == []
    assert network.effects.ripples[-1].final


def test_hop_limit_drop_blinks_once_at_last_node(build_network):
    network = build_network(4, [(0, 1), (1, 2), (2, 0)])
    packet = Packet(0, 1, final_target=3)
    network.packets.append(packet)

    for _ in range(3):
        network.tick(0.1)
        assert packet.active
        assert packet.hops <= network.config.packet_max_hops
        assert network.effects.blinks == []

    network.tick(0.1)

    assert not packet.active
    assert packet.state is PacketState.DROPPED_HOP_LIMIT
    assert packet.hops == network.config.packet_max_hops + 1
    assert network.packets == []
    assert [b.node_id for b in network.effects.blinks] == [1]


def test_fallback_revisit_only_when_no_fresh_node(build_network):
    network = build_network(4, [(0, 1), (1, 2), (2, 0)])
    packet = Packet(0, 1, final_target=3)
    network.packets.append(packet)

    for _ in range(3):
        network.tick(0.1)

    assert packet.path == [0, 1, 2, 0]
    assert packet.target == 1


def test_no_route_drop(build_network):
    network = build_network(3, [(0, 1)])
    packet = Packet(0, 1, final_target=2)
    network.packets.append(packet)

    network.tick(0.1)

    assert packet.state is PacketState.DROPPED_NO_ROUTE
    assert network.packets == []
    assert [b.node_id for b in network.effects.blinks] == [1]


def test_forwarding_effects(build_network):
    network = build_network(4, [(0, 1), (1, 2), (2, 3)])
    packet = Packet(0, 1, final_target=3)
    network.packets.append(packet)

    network.tick(0.1)

    assert packet.state is PacketState.TRAVELING
    assert (packet.source, packet.target, packet.progress) == (1, 2, 0.0)
    assert packet.path == [0, 1]
    assert [(p.node_id, p.role) for p in network.effects.pulses] == [(1, PulseRole.ROUTE)]
    assert [f.node_id for f in network.effects.processing_flashes] == [1]


def test_progress_is_clamped():
    packet = Packet(0, 1, final_target=1)
    assert packet.advance(5.0)
    assert packet.progress == 1.0
    assert not packet.advance(-3.0)
    assert packet.progress == 0.0


def test_loop_avoiding_candidate_tiers():
    router = LoopAvoidingRouter(MeshRNG(1))
    node = Node(0, 0.0, 0.0, outgoing=[1, 2, 3])

    packet = Packet(1, 0, final_target=9)
    packet.path = [1, 2]
    assert router.candidates(node, packet) == [3]

    packet.path = [1, 2, 3]
    assert router.candidates(node, packet) == [2, 3]

    lonely = Node(0, 0.0, 0.0, outgoing=[1])
    assert router.candidates(lonely, packet) == [1]

    empty = Node(0, 0.0, 0.0)
    assert router.candidates(empty, packet) == []
    assert router.route_packet(empty, packet) is None


def test_backtrack_avoiding_candidates():
    router = BacktrackAvoidingRouter(MeshRNG(1))
    node = Node(0, 0.0, 0.0, outgoing=[1, 2])
    packet = Packet(1, 0, final_target=9)
    packet.path = [1, 2]
    assert router.candidates(node, packet) == [2]


def test_router_factory():
    rng = MeshRNG(3)
    assert isinstance(router_factory("loop-avoiding", rng), LoopAvoidingRouter)
    assert isinstance(router_factory("backtrack-avoiding", rng), BacktrackAvoidingRouter)
    with pytest.raises(ValueError):
        router_factory("dijkstra", rng)


def test_emission_skips_sources_without_edges(build_network):
    network = build_network(3, [(0, 1)])
    for _ in range(50):
        packet = network.emit_packet()
        assert packet is not None
        assert packet.source == 0


def test_emission_without_edges_is_noop(build_network):
    network = build_network(3, [])
    assert network.emit_packet() is None
    assert network.packets == []
    assert len(network.effects) == 0


def test_emission_needs_two_nodes(build_network):
    network = build_network(1, [])
    assert network.emit_packet() is None


def test_pick_source_none_without_outgoing_edges(build_network):
    network = build_network(3, [])
    assert network.router.pick_source(network.nodes) is None


def test_multi_hop_destination_stays_within_hop_limit(build_network, fast_config):
    config = fast_config.with_overrides(
        destination_policy=DestinationPolicy.MULTI_HOP,
        multi_hop_chance=1.0,
        multi_hop_stop_chance=0.0,
    )
    edges = [(i, i + 1) for i in range(7)]
    network = build_network(8, edges, config=config)

    for _ in range(30):
        packet = network.emit_packet()
        span = packet.final_target - packet.source
        assert 1 <= span <= config.packet_max_hops
        if packet.source + config.packet_max_hops <= 7:
            assert span == config.packet_max_hops


def test_multi_hop_packet_reaches_planned_destination(build_network, fast_config):
    config = fast_config.with_overrides(
        destination_policy=DestinationPolicy.MULTI_HOP,
        multi_hop_chance=1.0,
        multi_hop_stop_chance=0.0,
    )
    network = build_network(4, [(0, 1), (1, 2), (2, 3)], config=config)
    delivered = []
    network.register_hook("packet_arrived", lambda packet, node: delivered.append(node.id))

    assert network.router.plan_destination(network.nodes, network.nodes[0], 1) == 3
    packet = Packet(0, 1, final_target=3)
    network.packets.append(packet)
    for _ in range(3):
        network.tick(0.1)

    assert packet.delivered
    assert delivered == [3]
    assert packet.path == [0, 1, 2]
