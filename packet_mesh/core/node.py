"""Node class for the packet network.

This module defines the Node class, which represents a drifting network
endpoint drawn on the canvas.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class Node:
    """Represents a network node.

    Attributes:
        id: Unique identifier, stable for the lifetime of the network.
        x: Horizontal position.
        y: Vertical position.
        color: Display colour.
        vx: Horizontal velocity.
        vy: Vertical velocity.
        origin_x: Horizontal spawn position used as a spring anchor.
        origin_y: Vertical spawn position used as a spring anchor.
        outgoing: Target node IDs of the edges this node created, in order.
        grid_cell: (row, column) of the lattice cell, None for scattered nodes.
    """

    id: int
    x: float
    y: float
    color: str = "#6496ff"
    vx: float = 0.0
    vy: float = 0.0
    origin_x: float = field(init=False)
    origin_y: float = field(init=False)
    outgoing: List[int] = field(default_factory=list)
    grid_cell: Optional[Tuple[int, int]] = None

    def __post_init__(self):
        """Anchor the node at its spawn position."""
        self.origin_x = self.x
        self.origin_y = self.y

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    def move_to(self, x: float, y: float, anchor: bool = True) -> None:
        """Place the node, discarding its velocity.

        Args:
            x: New horizontal position.
            y: New vertical position.
            anchor: Whether the new position also becomes the origin.
        """
        self.x = x
        self.y = y
        self.vx = 0.0
        self.vy = 0.0
        if anchor:
            self.origin_x = x
            self.origin_y = y

    def offset_from_origin(self) -> Tuple[float, float, float]:
        """Get the displacement from the origin.

        Returns:
            Horizontal offset, vertical offset and distance.
        """
        dx = self.x - self.origin_x
        dy = self.y - self.origin_y
        return dx, dy, math.hypot(dx, dy)

    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)

    def has_outgoing(self) -> bool:
        return bool(self.outgoing)

    def __repr__(self) -> str:
        """Return string representation of the node.

        Returns:
            String representation of the node.
        """
        return f"Node({self.id}, {self.x:.1f}, {self.y:.1f})"
