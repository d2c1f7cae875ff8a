"""Enumerations for the packet network.

This module defines enumerations used throughout the engine.
"""

from enum import Enum


class LayoutStrategy(Enum):
    """Enum for node placement strategies.

    Attributes:
        SCATTER: Random placement with a minimum spacing and planar edges.
        LATTICE: Jittered grid placement with k-nearest edges.
    """

    SCATTER = 1
    LATTICE = 2


class BoundaryPolicy(Enum):
    """Enum for how drifting nodes are kept in place.

    Attributes:
        DRIFT_RADIUS: Nodes bounce off a circle around their origin.
        CANVAS_EDGE: Nodes bounce off the canvas borders.
    """

    DRIFT_RADIUS = 1
    CANVAS_EDGE = 2


class ReturnForceModel(Enum):
    """Enum for the restoring force pulling nodes back to their origin.

    Attributes:
        LINEAR: Force grows linearly with the distance from the origin.
        POWER: Force grows with a power of distance over the drift radius.
    """

    LINEAR = 1
    POWER = 2


class DestinationPolicy(Enum):
    """Enum for how a new packet's final destination is chosen.

    Attributes:
        SINGLE_HOP: The first hop is the final destination.
        MULTI_HOP: The destination may lie several hops further on.
    """

    SINGLE_HOP = 1
    MULTI_HOP = 2


class PacketState(Enum):
    """Enum for the packet life cycle.

    Attributes:
        TRAVELING: Moving along an edge.
        ARRIVED_INTERMEDIATE: Reached a node that is not the destination.
        ARRIVED_FINAL: Reached the destination (terminal).
        DROPPED_HOP_LIMIT: Ran out of hops (terminal).
        DROPPED_NO_ROUTE: Reached a node without outgoing edges (terminal).
    """

    TRAVELING = 1
    ARRIVED_INTERMEDIATE = 2
    ARRIVED_FINAL = 3
    DROPPED_HOP_LIMIT = 4
    DROPPED_NO_ROUTE = 5

    @property
    def dropped(self) -> bool:
        return self in (PacketState.DROPPED_HOP_LIMIT, PacketState.DROPPED_NO_ROUTE)


class PulseRole(Enum):
    """Enum for the reason a node pulses.

    Attributes:
        SEND: The node emitted a packet.
        RECEIVE_FINAL: The node is the destination of an arriving packet.
        ROUTE: The node forwarded a packet.
    """

    SEND = "send"
    RECEIVE_FINAL = "receive-final"
    ROUTE = "route"


class EffectKind(Enum):
    """Enum for the kinds of visual effects."""

    PULSE = "pulse"
    PROCESSING_FLASH = "processing_flash"
    BLINK = "blink"
    RIPPLE = "ripple"
