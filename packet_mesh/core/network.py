"""Network class for the packet network.

This module defines the Network class, the facade a host animation loop
drives. It owns the nodes, edges, packets and effect queues and advances
them with ``tick``.
"""

import logging
from collections import Counter
from typing import Any, Callable, Dict, List, Optional

import networkx as nx

from packet_mesh.config import NetworkConfig
from packet_mesh.core.edge import Edge
from packet_mesh.core.effects import EffectScheduler
from packet_mesh.core.enums import LayoutStrategy, PacketState
from packet_mesh.core.kinematics import NodeKinematics
from packet_mesh.core.node import Node
from packet_mesh.core.packet import Packet
from packet_mesh.core.routing_algorithms import PacketRouter, Router, router_factory
from packet_mesh.topology import generators
from packet_mesh.utils.rng import MeshRNG

logger = logging.getLogger(__name__)


class Network:
    """Animated packet network.

    Attributes:
        width: Canvas width.
        height: Canvas height.
        config: Engine configuration.
        rng: Random number generator shared by every component.
        graph: NetworkX directed graph mirroring the edges.
        nodes: Node objects keyed by node ID.
        edges: Edges in creation order.
        packets: Packets currently in the network.
        effects: Live visual effects.
        clock: Seconds simulated so far.
        lattice_shape: (rows, columns) of the grid for lattice layouts.
        stats: Counters of packet outcomes.
    """

    def __init__(
        self,
        width: float,
        height: float,
        config: Optional[NetworkConfig] = None,
        seed: Optional[int] = None,
        router_type: str = "loop-avoiding",
    ):
        """Build the network.

        Args:
            width: Canvas width.
            height: Canvas height.
            config: Engine configuration, defaults to NetworkConfig().
            seed: Random seed, or None for a fresh network every time.
            router_type: Next hop selection strategy, see router_factory.
        """
        self.width = max(float(width), 1.0)
        self.height = max(float(height), 1.0)
        self.config = config or NetworkConfig()
        self.rng = MeshRNG(seed)
        self.graph = nx.DiGraph()
        self.nodes: Dict[int, Node] = {}
        self.edges: List[Edge] = []
        self.packets: List[Packet] = []
        self.effects = EffectScheduler.from_config(self.config)
        self.clock = 0.0
        self.lattice_shape = (0, 0)
        self.stats: Counter = Counter()

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "packet_emitted": [],  # packet leaves its origin
            "packet_hop": [],  # packet forwarded to a new edge
            "packet_arrived": [],  # packet reaches its destination
            "packet_dropped": [],  # packet dropped
        }

        self.kinematics = NodeKinematics(self.config, self.rng, self.width, self.height)
        self.router = PacketRouter(
            self.config,
            self.rng,
            self.effects,
            router_factory(router_type, self.rng),
            notify=self._on_packet_event,
        )

        self.build()

    def build(self) -> None:
        """Place the nodes and create the edges."""
        config = self.config
        if config.layout is LayoutStrategy.LATTICE:
            self.lattice_shape = generators.lattice_shape(
                self.width, self.height, config.node_count
            )
            cells = generators.lattice_cells(*self.lattice_shape)
            points = generators.lattice_positions(
                self.width,
                self.height,
                cells,
                self.lattice_shape,
                self.rng,
                config.lattice_jitter,
                config.node_margin,
            )
            edges = generators.nearest_neighbour_edges(
                points, self.rng, config.min_edges_per_node, config.max_edges_per_node
            )
        else:
            cells = [None] * config.node_count
            points = generators.scatter_positions(
                self.width,
                self.height,
                config.node_count,
                self.rng,
                config.node_min_distance,
                config.node_placement_retries,
            )
            points = generators.normalize_positions(
                points, self.width, self.height, config.node_margin
            )
            edges = generators.planar_nearest_edges(
                points, self.rng, config.max_edges_per_node
            )

        for node_id, ((x, y), cell) in enumerate(zip(points, cells)):
            self.add_node(node_id, x, y, grid_cell=cell)
        for source, target in edges:
            self.add_edge(source, target)

        logger.debug(
            "Built %s network with %d nodes and %d edges",
            config.layout.name.lower(),
            len(self.nodes),
            len(self.edges),
        )

    def add_node(self, node_id: int, x: float, y: float, grid_cell=None) -> Node:
        """Add a node to the network.

        Args:
            node_id: Unique identifier for the node.
            x: Horizontal position.
            y: Vertical position.
            grid_cell: Lattice cell of the node, if any.

        Returns:
            The created Node object.
        """
        if node_id in self.nodes:
            raise ValueError(f"Node {node_id} already exists")
        node = Node(node_id, x, y, color=self.rng.color(), grid_cell=grid_cell)
        self.nodes[node_id] = node
        self.graph.add_node(node_id)
        return node

    def add_edge(self, source: int, target: int) -> Optional[Edge]:
        """Connect two nodes, unless they are already connected either way.

        Args:
            source: Source node ID.
            target: Target node ID.

        Returns:
            The created Edge, or None if the pair was already connected.
        """
        if source not in self.nodes or target not in self.nodes:
            raise ValueError(f"Nodes {source} and/or {target} do not exist")
        if self.graph.has_edge(source, target) or self.graph.has_edge(target, source):
            return None
        edge = Edge(source, target)
        self.edges.append(edge)
        self.nodes[source].outgoing.append(target)
        self.graph.add_edge(source, target)
        return edge

    def tick(self, dt: float) -> None:
        """Advance the simulation by one frame.

        Args:
            dt: Seconds since the previous frame, capped at ``max_dt``.
        """
        dt = min(max(float(dt), 0.0), self.config.max_dt)
        self.clock += dt
        self.effects.advance(dt)
        self.kinematics.update(self.nodes.values(), dt)
        if self.packets:
            self.router.advance(self.packets, self.nodes, dt)
            self.packets, _ = self.router.sweep(self.packets)

    def emit_packet(self) -> Optional[Packet]:
        """Send a packet from a random node.

        Returns:
            The new packet, or None if the network cannot carry one.
        """
        if len(self.nodes) < 2 or not self.edges:
            return None
        packet = self.router.emit(self.nodes, created_at=self.clock)
        if packet is None:
            return None
        self.packets.append(packet)
        self._on_packet_event("packet_emitted", packet, self.nodes[packet.source])
        return packet

    def resize(self, width: float, height: float) -> None:
        """Fit the network to a new canvas size.

        Nodes keep their identity and their relative layout; their velocity
        is reset and their origin moves with them. Edges and packets in
        flight are left alone.

        Args:
            width: New canvas width.
            height: New canvas height.
        """
        if not self.nodes or width <= 0 or height <= 0:
            return
        self.width = float(width)
        self.height = float(height)
        self.kinematics.set_bounds(self.width, self.height)

        ordered = list(self.nodes.values())
        if self.config.layout is LayoutStrategy.LATTICE:
            points = generators.relayout_lattice(
                [node.grid_cell for node in ordered],
                self.lattice_shape,
                self.width,
                self.height,
                self.rng,
                self.config.lattice_jitter,
                self.config.node_margin,
            )
        else:
            points = generators.normalize_positions(
                [node.position for node in ordered],
                self.width,
                self.height,
                self.config.node_margin,
            )
        for node, (x, y) in zip(ordered, points):
            node.move_to(x, y)
        logger.debug("Resized network to %.0fx%.0f", self.width, self.height)

    def packet_position(self, packet: Packet) -> tuple:
        """Interpolate a packet's position along its current edge.

        Args:
            packet: The packet to locate.

        Returns:
            The (x, y) position of the packet.
        """
        source = self.nodes[packet.source]
        target = self.nodes[packet.target]
        return (
            source.x + (target.x - source.x) * packet.progress,
            source.y + (target.y - source.y) * packet.progress,
        )

    def snapshot(self) -> Dict[str, Any]:
        """Get a plain copy of everything a renderer draws.

        Returns:
            Dictionary with nodes, edges, packets and effects.
        """
        return {
            "width": self.width,
            "height": self.height,
            "clock": self.clock,
            "nodes": [
                {"id": n.id, "x": n.x, "y": n.y, "color": n.color}
                for n in self.nodes.values()
            ],
            "edges": [
                {
                    "source": e.source,
                    "target": e.target,
                    "from": self.nodes[e.source].position,
                    "to": self.nodes[e.target].position,
                }
                for e in self.edges
            ],
            "packets": [
                {
                    "id": p.id,
                    "position": self.packet_position(p),
                    "progress": p.progress,
                    "color": p.color,
                    "final_target": p.final_target,
                }
                for p in self.packets
                if p.active
            ],
            "effects": {
                kind.value: [
                    {
                        "node": e.node_id,
                        "elapsed": e.elapsed,
                        "remaining": self.effects.remaining(e),
                        "color": e.color,
                        **({"role": e.role.value} if hasattr(e, "role") else {}),
                        **({"final": e.final} if hasattr(e, "final") else {}),
                    }
                    for e in queue
                ]
                for kind, queue in self.effects.queues.items()
            },
        }

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type.

        Args:
            event_type: The type of event that occurred.
            *args, **kwargs: Arguments to pass to the callback functions.
        """
        if event_type in self.hooks:
            for callback in self.hooks[event_type]:
                callback(*args, **kwargs)

    def _on_packet_event(self, event_type: str, packet: Packet, *args: Any) -> None:
        if event_type == "packet_emitted":
            self.stats["emitted"] += 1
        elif event_type == "packet_hop":
            self.stats["hops"] += 1
        elif event_type == "packet_arrived":
            self.stats["delivered"] += 1
            self.stats["delivered_hops"] += packet.hops
        elif event_type == "packet_dropped":
            self.stats[packet.state.name.lower()] += 1
        self.call_hooks(event_type, packet, *args)

    def calculate_metrics(self) -> Dict[str, Any]:
        """Calculate packet and topology metrics.

        Returns:
            Dictionary of calculated metrics.
        """
        delivered = self.stats["delivered"]
        hop_drops = self.stats[PacketState.DROPPED_HOP_LIMIT.name.lower()]
        route_drops = self.stats[PacketState.DROPPED_NO_ROUTE.name.lower()]
        finished = delivered + hop_drops + route_drops
        node_count = len(self.nodes)

        return {
            "clock": self.clock,
            "layout": self.config.layout.name.lower(),
            "router": self.router.router.name,
            "node_count": node_count,
            "edge_count": len(self.edges),
            "average_out_degree": len(self.edges) / node_count if node_count else 0.0,
            "sink_nodes": sum(1 for n in self.nodes.values() if not n.outgoing),
            "components": (
                nx.number_weakly_connected_components(self.graph) if node_count else 0
            ),
            "packets_emitted": self.stats["emitted"],
            "packets_active": sum(1 for p in self.packets if p.active),
            "packets_delivered": delivered,
            "packets_dropped_hop_limit": hop_drops,
            "packets_dropped_no_route": route_drops,
            "delivery_rate": delivered / finished if finished else 0.0,
            "average_hops": self.stats["delivered_hops"] / delivered if delivered else 0.0,
            "forwarding_steps": self.stats["hops"],
        }

    def __repr__(self) -> str:
        return (
            f"Network({len(self.nodes)} nodes, {len(self.edges)} edges, "
            f"{len(self.packets)} packets)"
        )
