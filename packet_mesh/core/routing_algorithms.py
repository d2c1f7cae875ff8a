from abc import ABC, abstractmethod
import itertools
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from packet_mesh.config import NetworkConfig
from packet_mesh.core.effects import Blink, EffectScheduler, ProcessingFlash, Pulse, Ripple
from packet_mesh.core.enums import DestinationPolicy, PacketState, PulseRole
from packet_mesh.core.node import Node
from packet_mesh.core.packet import Packet
from packet_mesh.utils.rng import MeshRNG

logger = logging.getLogger(__name__)


class Router(ABC):
    """Abstract base class for next hop selection."""

    def __init__(self, rng: MeshRNG) -> None:
        """
        Initialize the router.

        Args:
            rng: Random number generator used to break ties.
        """
        self.name = "Base Router"
        self.rng = rng

    @abstractmethod
    def candidates(self, node: Node, packet: Packet) -> List[int]:
        """
        List the node IDs a packet may be forwarded to.

        Args:
            node: The node the packet arrived at.
            packet: The packet to be routed.

        Returns:
            Candidate next hops, empty when the packet cannot go anywhere.
        """
        pass

    def route_packet(self, node: Node, packet: Packet) -> Optional[int]:
        """
        Determine the next hop for a packet.

        Args:
            node: The node the packet arrived at.
            packet: The packet to be routed.

        Returns:
            The next hop node ID, or None if there is no route.
        """
        return self.rng.pick(self.candidates(node, packet))

    def __repr__(self) -> str:
        return self.name


class LoopAvoidingRouter(Router):
    """Random walk that avoids the previous node and every visited node.

    When that leaves nothing, only the previous node is avoided, and as a
    last resort any outgoing edge is taken.
    """

    def __init__(self, rng: MeshRNG) -> None:
        super().__init__(rng)
        self.name = "Loop-avoiding"

    def candidates(self, node: Node, packet: Packet) -> List[int]:
        previous = packet.previous
        visited = set(packet.path)
        fresh = [t for t in node.outgoing if t != previous and t not in visited]
        if fresh:
            return fresh
        onward = [t for t in node.outgoing if t != previous]
        if onward:
            return onward
        return list(node.outgoing)


class BacktrackAvoidingRouter(Router):
    """Random walk that only avoids going straight back."""

    def __init__(self, rng: MeshRNG) -> None:
        super().__init__(rng)
        self.name = "Backtrack-avoiding"

    def candidates(self, node: Node, packet: Packet) -> List[int]:
        onward = [t for t in node.outgoing if t != packet.previous]
        return onward or list(node.outgoing)


def router_factory(router_type: str, rng: MeshRNG) -> Router:
    """
    Factory function to create the appropriate router.

    Args:
        router_type: Type of the router ("loop-avoiding" or "backtrack-avoiding").
        rng: Random number generator shared with the network.

    Returns:
        An instance of the selected routing algorithm.
    """
    if router_type == "loop-avoiding":
        return LoopAvoidingRouter(rng)
    elif router_type == "backtrack-avoiding":
        return BacktrackAvoidingRouter(rng)
    raise ValueError(f"Unknown router type: {router_type}")


class PacketRouter:
    """Moves packets along their edges and decides what happens on arrival.

    Every arrival either delivers the packet, drops it (hop limit exhausted
    or no outgoing edge) or forwards it on a new edge. Each outcome queues
    the matching effects on the scheduler it was given.

    Attributes:
        config: Engine configuration.
        rng: Random number generator.
        effects: Scheduler receiving the emitted effects.
        router: Next hop selection strategy.
        notify: Callback receiving (event, *args) for every packet event.
        packet_ids: Counter handing out packet IDs.
    """

    def __init__(
        self,
        config: NetworkConfig,
        rng: MeshRNG,
        effects: EffectScheduler,
        router: Router,
        notify: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.config = config
        self.rng = rng
        self.effects = effects
        self.router = router
        self.notify = notify or (lambda *args, **kwargs: None)
        self.packet_ids = itertools.count(1)

    def advance(self, packets: List[Packet], nodes: Dict[int, Node], dt: float) -> None:
        """Move every active packet and handle the ones that arrived.

        Args:
            packets: Packets in the network.
            nodes: Nodes keyed by ID.
            dt: Time step in seconds.
        """
        step = self.config.packet_speed * dt
        for packet in packets:
            if not packet.active:
                continue
            if packet.advance(step):
                self.handle_arrival(packet, nodes)

    def handle_arrival(self, packet: Packet, nodes: Dict[int, Node]) -> PacketState:
        """Deliver, drop or forward a packet that reached its target.

        Args:
            packet: The packet that arrived.
            nodes: Nodes keyed by ID.

        Returns:
            The state the packet is in afterwards.
        """
        packet.progress = 1.0
        node = nodes[packet.target]
        final = node.id == packet.final_target
        self.effects.add(Ripple(node.id, packet.color, final=final))

        if final:
            packet.finish(PacketState.ARRIVED_FINAL, node.id)
            self.effects.add(
                Pulse(
                    node.id,
                    self.config.pulse_receive_final_color,
                    role=PulseRole.RECEIVE_FINAL,
                )
            )
            self.effects.add(ProcessingFlash(node.id, self.config.processing_flash_color))
            self.notify("packet_arrived", packet, node)
            return packet.state

        packet.state = PacketState.ARRIVED_INTERMEDIATE
        packet.hops += 1
        if packet.hops > self.config.packet_max_hops:
            return self.drop(packet, node, PacketState.DROPPED_HOP_LIMIT)

        next_hop = self.router.route_packet(node, packet)
        if next_hop is None:
            return self.drop(packet, node, PacketState.DROPPED_NO_ROUTE)

        previous = packet.source
        packet.forward(node.id, next_hop)
        self.effects.add(
            Pulse(node.id, self.config.pulse_route_color, role=PulseRole.ROUTE)
        )
        self.effects.add(ProcessingFlash(node.id, self.config.processing_flash_color))
        self.notify("packet_hop", packet, previous, node.id, next_hop)
        return packet.state

    def drop(self, packet: Packet, node: Node, state: PacketState) -> PacketState:
        """Deactivate a packet that cannot continue.

        The blink is queued later, when the packet is swept.
        """
        packet.finish(state, node.id)
        logger.debug("Dropped %r at node %d", packet, node.id)
        self.notify("packet_dropped", packet, node, state)
        return state

    def sweep(self, packets: List[Packet]) -> Tuple[List[Packet], List[Packet]]:
        """Split packets into active and finished ones.

        A blink is queued for every dropped packet removed here.

        Args:
            packets: Packets in the network.

        Returns:
            The packets still active and the packets removed.
        """
        kept: List[Packet] = []
        removed: List[Packet] = []
        for packet in packets:
            if packet.active:
                kept.append(packet)
                continue
            removed.append(packet)
            if packet.dropped and packet.drop_node is not None:
                self.effects.add(Blink(packet.drop_node, self.config.blink_color))
        return kept, removed

    def emit(self, nodes: Dict[int, Node], created_at: float = 0.0) -> Optional[Packet]:
        """Create a packet at a random node that has outgoing edges.

        Args:
            nodes: Nodes keyed by ID.
            created_at: Network clock at emission.

        Returns:
            The new packet, or None when no node has an outgoing edge.
        """
        origin = self.pick_source(nodes)
        if origin is None:
            logger.debug("No node with outgoing edges, emission skipped")
            return None

        first_hop = self.rng.pick(origin.outgoing)
        final_target = self.plan_destination(nodes, origin, first_hop)
        packet = Packet(
            origin.id,
            first_hop,
            final_target,
            self.rng.color(),
            created_at=created_at,
            id=next(self.packet_ids),
        )
        self.effects.add(Pulse(origin.id, self.config.pulse_send_color, role=PulseRole.SEND))
        return packet

    def pick_source(self, nodes: Dict[int, Node]) -> Optional[Node]:
        """Pick a random node with at least one outgoing edge.

        Up to ``emit_source_retries`` random picks are resampled. After that
        the pick is made among the nodes known to have outgoing edges.

        Args:
            nodes: Nodes keyed by ID.

        Returns:
            The chosen node, or None if no node has outgoing edges.
        """
        pool = list(nodes.values())
        if not pool:
            return None
        for _ in range(self.config.emit_source_retries + 1):
            node = self.rng.pick(pool)
            if node.has_outgoing():
                return node
        return self.rng.pick([node for node in pool if node.has_outgoing()])

    def plan_destination(self, nodes: Dict[int, Node], origin: Node, first_hop: int) -> int:
        """Choose the final destination of a new packet.

        Args:
            nodes: Nodes keyed by ID.
            origin: Node the packet starts from.
            first_hop: Node ID of the packet's first target.

        Returns:
            Node ID of the destination.
        """
        config = self.config
        if config.destination_policy is DestinationPolicy.SINGLE_HOP:
            return first_hop
        if not self.rng.chance(config.multi_hop_chance):
            return first_hop

        visited = {origin.id, first_hop}
        current = first_hop
        for _ in range(max(0, config.packet_max_hops - 1)):
            onward = [t for t in nodes[current].outgoing if t not in visited]
            if not onward:
                break
            current = self.rng.pick(onward)
            visited.add(current)
            if self.rng.chance(config.multi_hop_stop_chance):
                break
        return current
