"""Edge class for the packet network.

This module defines the Edge class, which represents a connection between
two nodes. An edge is drawn undirected but packets only travel it in the
direction it was created in.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Edge:
    """Represents a source-initiated connection between nodes.

    Attributes:
        source: Source node ID.
        target: Target node ID.
    """

    source: int
    target: int

    def __post_init__(self):
        if self.source == self.target:
            raise ValueError(f"Edge cannot connect node {self.source} to itself")

    @property
    def key(self) -> Tuple[int, int]:
        """Unordered identity of the edge, shared by both directions."""
        return (min(self.source, self.target), max(self.source, self.target))

    def connects(self, a: int, b: int) -> bool:
        """Check whether the edge joins two nodes in either direction.

        Args:
            a: First node ID.
            b: Second node ID.

        Returns:
            True if the edge joins the two nodes.
        """
        return self.key == (min(a, b), max(a, b))

    def __repr__(self) -> str:
        return f"Edge({self.source}->{self.target})"
