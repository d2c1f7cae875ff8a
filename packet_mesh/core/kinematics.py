"""Node motion for the packet network.

This module moves nodes around their origin: a small random acceleration,
damping, a speed clamp, a restoring force toward the origin and one of two
boundary policies. With acceleration and return force both at zero the same
update just damps out residual velocity, which keeps lattices static.
"""

import math
from typing import Iterable

from packet_mesh.config import NetworkConfig
from packet_mesh.core.enums import BoundaryPolicy, ReturnForceModel
from packet_mesh.core.node import Node
from packet_mesh.utils.rng import MeshRNG

EPSILON = 1e-9


class NodeKinematics:
    """Integrates node velocities and positions.

    Attributes:
        config: Engine configuration.
        rng: Random number generator for the random acceleration.
        width: Canvas width used by the canvas edge policy.
        height: Canvas height used by the canvas edge policy.
    """

    def __init__(self, config: NetworkConfig, rng: MeshRNG, width: float, height: float):
        self.config = config
        self.rng = rng
        self.width = width
        self.height = height

    def set_bounds(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def update(self, nodes: Iterable[Node], dt: float) -> None:
        """Move every node by one tick.

        Args:
            nodes: Nodes to move.
            dt: Time step in seconds.
        """
        for node in nodes:
            self.update_node(node, dt)

    def update_node(self, node: Node, dt: float) -> None:
        """Move a single node by one tick.

        Args:
            node: The node to move.
            dt: Time step in seconds.
        """
        config = self.config

        if config.node_acceleration:
            node.vx += self.rng.signed(config.node_acceleration)
            node.vy += self.rng.signed(config.node_acceleration)

        node.vx *= config.node_damping
        node.vy *= config.node_damping

        speed = node.speed()
        if speed > config.node_max_speed:
            scale = config.node_max_speed / speed
            node.vx *= scale
            node.vy *= scale

        self.apply_return_force(node)

        node.x += node.vx * dt
        node.y += node.vy * dt

        if config.boundary_policy is BoundaryPolicy.DRIFT_RADIUS:
            self.bounce_off_drift_radius(node)
        else:
            self.bounce_off_canvas(node)

    def apply_return_force(self, node: Node) -> None:
        """Pull the node's velocity toward its origin.

        Args:
            node: The node to pull.
        """
        strength = self.config.node_return_force
        if not strength:
            return
        dx, dy, distance = node.offset_from_origin()
        if self.config.return_force_model is ReturnForceModel.LINEAR:
            node.vx -= dx * strength
            node.vy -= dy * strength
            return
        if distance < EPSILON:
            return
        radius = max(self.config.node_drift_radius, EPSILON)
        force = strength * math.pow(distance / radius, self.config.return_force_exponent)
        node.vx -= dx / distance * force
        node.vy -= dy / distance * force

    def bounce_off_drift_radius(self, node: Node) -> None:
        """Keep the node within the drift radius of its origin.

        Args:
            node: The node to constrain.
        """
        radius = self.config.node_drift_radius
        dx, dy, distance = node.offset_from_origin()
        if distance <= radius or distance < EPSILON:
            return
        node.x = node.origin_x + dx / distance * radius
        node.y = node.origin_y + dy / distance * radius
        node.vx *= -self.config.bounce_damping
        node.vy *= -self.config.bounce_damping

    def bounce_off_canvas(self, node: Node) -> None:
        """Keep the node on the canvas.

        Args:
            node: The node to constrain.
        """
        bounce = self.config.bounce_damping
        width = max(self.width, 0.0)
        height = max(self.height, 0.0)
        if node.x < 0.0 or node.x > width:
            node.x = min(max(node.x, 0.0), width)
            node.vx *= -bounce
        if node.y < 0.0 or node.y > height:
            node.y = min(max(node.y, 0.0), height)
            node.vy *= -bounce
