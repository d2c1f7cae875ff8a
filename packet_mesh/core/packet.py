"""Packet class for the packet network.

This module defines the Packet class, which represents a packet travelling
edge by edge through the network.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from packet_mesh.core.enums import PacketState


@dataclass
class Packet:
    """Represents a packet in flight.

    Attributes:
        source: Node ID the packet is travelling from.
        target: Node ID the packet is travelling to.
        final_target: Node ID of the destination.
        color: Display colour.
        created_at: Network clock when the packet was emitted.
        id: Identifier, unique within the network that emitted the packet.
        progress: Fraction of the current edge covered, in [0, 1].
        hops: Number of forwarding steps taken so far.
        path: Node IDs the packet has departed from, in order.
        active: Whether the packet is still travelling.
        state: Current life cycle state.
        drop_node: Node where a dropped packet was last seen.
    """

    source: int
    target: int
    final_target: int
    color: str = "#ff6464"
    created_at: float = 0.0
    id: int = 0
    progress: float = 0.0
    hops: int = 0
    path: List[int] = field(default_factory=list)
    active: bool = True
    state: PacketState = PacketState.TRAVELING
    drop_node: Optional[int] = None

    def __post_init__(self):
        """Initialize derived attributes after initialization."""
        if not self.path:
            self.path.append(self.source)

    @property
    def previous(self) -> int:
        """Node the packet came from on its current edge."""
        return self.source

    def advance(self, distance: float) -> bool:
        """Move the packet along its edge.

        Args:
            distance: Fraction of an edge to cover.

        Returns:
            True if the packet reached the end of the edge.
        """
        self.progress = min(1.0, max(0.0, self.progress + distance))
        return self.progress >= 1.0

    def forward(self, node: int, next_hop: int) -> None:
        """Send the packet on from the node it just reached.

        Args:
            node: Node ID the packet arrived at.
            next_hop: Node ID of the next target.
        """
        self.path.append(node)
        self.source = node
        self.target = next_hop
        self.progress = 0.0
        self.state = PacketState.TRAVELING

    def finish(self, state: PacketState, node: int) -> None:
        """Deactivate the packet in a terminal state.

        Args:
            state: Terminal state to enter.
            node: Node ID where the packet ended.
        """
        self.active = False
        self.state = state
        if state.dropped:
            self.drop_node = node

    @property
    def delivered(self) -> bool:
        return self.state is PacketState.ARRIVED_FINAL

    @property
    def dropped(self) -> bool:
        return self.state.dropped

    def __repr__(self) -> str:
        return (
            f"Packet({self.id}, {self.source}->{self.target} "
            f"@{self.progress:.2f}, final={self.final_target}, {self.state.name})"
        )
