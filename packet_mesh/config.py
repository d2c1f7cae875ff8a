"""Configuration for the packet network.

This module defines the NetworkConfig dataclass, which enumerates every
tunable of the engine together with its default value.
"""

import json
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict

from packet_mesh.core.enums import (
    BoundaryPolicy,
    DestinationPolicy,
    LayoutStrategy,
    ReturnForceModel,
)


@dataclass
class NetworkConfig:
    """Engine configuration.

    Distances are in canvas pixels, durations in seconds and speeds in
    pixels (or edge lengths for packets) per second.

    Attributes:
        layout: Node placement strategy.
        node_count: Target number of nodes (approximate for lattices).
        node_min_distance: Minimum spacing between scattered nodes.
        node_margin: Margin kept free around the canvas border.
        node_placement_retries: Attempts to find a well spaced position.
        lattice_jitter: Maximum deviation from a cell centre, as a fraction
            of half the cell size.
        min_edges_per_node: Lower bound of edges a lattice node creates.
        max_edges_per_node: Upper bound of edges any node creates.
        node_max_speed: Speed clamp for drifting nodes.
        node_acceleration: Amplitude of the random acceleration.
        node_damping: Multiplicative velocity damping per tick.
        node_drift_radius: Maximum distance a node may wander from its origin.
        node_return_force: Strength of the restoring force.
        return_force_model: Shape of the restoring force.
        return_force_exponent: Exponent used by the power force model.
        boundary_policy: How nodes are kept inside their allowed area.
        bounce_damping: Factor applied to the inverted velocity on a bounce.
        packet_speed: Edge lengths a packet covers per second.
        packet_max_hops: Forwarding steps before a packet is dropped.
        destination_policy: How the final destination of a packet is chosen.
        multi_hop_chance: Probability that a destination is planned past the
            first hop.
        multi_hop_stop_chance: Probability of ending the planning walk after
            each extension step.
        emit_source_retries: Resamples of a source without outgoing edges
            before falling back to a node known to have edges.
        pulse_duration: Lifetime of node pulses.
        processing_flash_duration: Lifetime of processing flashes.
        blink_duration: Lifetime of removal blinks.
        ripple_duration: Lifetime of arrival ripples.
        pulse_send_color: Colour of pulses for emitted packets.
        pulse_receive_final_color: Colour of pulses for delivered packets.
        pulse_route_color: Colour of pulses for forwarded packets.
        processing_flash_color: Colour of processing flashes.
        blink_color: Colour of removal blinks.
        packet_emit_chance: Probability that the host emits a packet per tick.
        max_dt: Upper bound of a single tick's time delta.
    """

    layout: LayoutStrategy = LayoutStrategy.SCATTER
    node_count: int = 12
    node_min_distance: float = 60.0
    node_margin: float = 30.0
    node_placement_retries: int = 100
    lattice_jitter: float = 0.6
    min_edges_per_node: int = 1
    max_edges_per_node: int = 4

    node_max_speed: float = 30.0
    node_acceleration: float = 3.0
    node_damping: float = 0.98
    node_drift_radius: float = 30.0
    node_return_force: float = 0.6
    return_force_model: ReturnForceModel = ReturnForceModel.POWER
    return_force_exponent: float = 2.0
    boundary_policy: BoundaryPolicy = BoundaryPolicy.DRIFT_RADIUS
    bounce_damping: float = 0.5

    packet_speed: float = 0.5
    packet_max_hops: int = 3
    destination_policy: DestinationPolicy = DestinationPolicy.MULTI_HOP
    multi_hop_chance: float = 0.5
    multi_hop_stop_chance: float = 0.3
    emit_source_retries: int = 8

    pulse_duration: float = 0.5
    processing_flash_duration: float = 0.3
    blink_duration: float = 0.5
    ripple_duration: float = 0.7
    pulse_send_color: str = "rgba(120, 255, 120, 0.7)"
    pulse_receive_final_color: str = "rgba(120, 120, 255, 0.7)"
    pulse_route_color: str = "rgba(255, 180, 80, 0.8)"
    processing_flash_color: str = "rgba(255, 255, 150, 0.7)"
    blink_color: str = "red"

    packet_emit_chance: float = 0.06
    max_dt: float = 0.1

    def __post_init__(self) -> None:
        """Coerce enum names and integral floats, then validate."""
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is int:
                if isinstance(value, float) and value.is_integer():
                    setattr(self, f.name, int(value))
                elif isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"{f.name} must be an integer, got {value!r}")
                continue
            enum_type = f.type if isinstance(f.type, type) else None
            if enum_type is not None and issubclass(enum_type, Enum):
                if isinstance(value, str):
                    try:
                        setattr(self, f.name, enum_type[value.upper()])
                    except KeyError:
                        raise ValueError(f"Unknown {f.name}: {value}") from None
                elif not isinstance(value, enum_type):
                    raise ValueError(f"{f.name} must be a {enum_type.__name__}")
        self.validate()

    def validate(self) -> None:
        """Check that every value lies in its allowed range.

        Raises:
            ValueError: If a value is out of range.
        """
        if self.node_count < 0:
            raise ValueError("node_count must not be negative")
        if self.node_min_distance < 0 or self.node_margin < 0:
            raise ValueError("node spacing and margin must not be negative")
        if self.node_placement_retries < 1:
            raise ValueError("node_placement_retries must be at least 1")
        if not 0 <= self.lattice_jitter <= 1:
            raise ValueError("lattice_jitter must lie in [0, 1]")
        if self.min_edges_per_node < 0:
            raise ValueError("min_edges_per_node must not be negative")
        if self.max_edges_per_node < max(self.min_edges_per_node, 1):
            raise ValueError(
                "max_edges_per_node must be at least 1 and min_edges_per_node"
            )
        if self.node_max_speed < 0 or self.node_acceleration < 0:
            raise ValueError("node speed and acceleration must not be negative")
        if not 0 <= self.node_damping <= 1:
            raise ValueError("node_damping must lie in [0, 1]")
        if self.node_drift_radius <= 0:
            raise ValueError("node_drift_radius must be positive")
        if self.node_return_force < 0:
            raise ValueError("node_return_force must not be negative")
        if not 0 <= self.bounce_damping <= 1:
            raise ValueError("bounce_damping must lie in [0, 1]")
        if self.packet_speed <= 0:
            raise ValueError("packet_speed must be positive")
        if self.packet_max_hops < 0:
            raise ValueError("packet_max_hops must not be negative")
        for name in ("multi_hop_chance", "multi_hop_stop_chance", "packet_emit_chance"):
            if not 0 <= getattr(self, name) <= 1:
                raise ValueError(f"{name} must lie in [0, 1]")
        if self.emit_source_retries < 0:
            raise ValueError("emit_source_retries must not be negative")
        for name in (
            "pulse_duration",
            "processing_flash_duration",
            "blink_duration",
            "ripple_duration",
            "max_dt",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @property
    def static(self) -> bool:
        """Whether nodes only damp out residual motion."""
        return self.node_acceleration == 0 and self.node_return_force == 0

    def with_overrides(self, **overrides: Any) -> "NetworkConfig":
        """Return a validated copy with some fields replaced."""
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        """Build a configuration from a plain dictionary.

        Args:
            data: Field values keyed by field name. Enum fields accept names.

        Returns:
            The validated configuration.

        Raises:
            ValueError: If the dictionary holds unknown keys or bad values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, filename: str) -> "NetworkConfig":
        """Load a configuration from a JSON file.

        Args:
            filename: Path of the JSON file.

        Returns:
            The validated configuration.
        """
        with open(filename) as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as JSON serializable values."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.name if isinstance(value, Enum) else value
        return result
