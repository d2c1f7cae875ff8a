"""Visualization utilities for the packet network.

This module provides functions for drawing a frame of the network with
matplotlib, and for plotting metrics of several runs. It is a headless
stand-in for the page's canvas renderer and only reads network state.
"""

import os
from typing import Any, Dict, List, Tuple

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
from matplotlib.patches import Circle

from packet_mesh.core.enums import EffectKind
from packet_mesh.core.network import Network

BACKGROUND_COLOR = "#0a0f19"
EDGE_COLOR = "#3c3c3c"
NODE_RADIUS = 22
PACKET_RADIUS = 10

EFFECT_RADIUS = {
    EffectKind.PULSE: (NODE_RADIUS, NODE_RADIUS * 1.8),
    EffectKind.PROCESSING_FLASH: (NODE_RADIUS * 1.3, NODE_RADIUS * 1.3),
    EffectKind.BLINK: (26, 26),
    EffectKind.RIPPLE: (22, 66),
}


def draw_network(network: Network, ax: plt.Axes) -> None:
    """Draw the current frame of a network onto matplotlib axes.

    Args:
        network: The network to draw.
        ax: Target axes.
    """
    ax.set_facecolor(BACKGROUND_COLOR)
    ax.set_xlim(0, network.width)
    ax.set_ylim(network.height, 0)
    ax.set_aspect("equal")

    pos = {node_id: node.position for node_id, node in network.nodes.items()}

    for kind, queue in network.effects.queues.items():
        start, end = EFFECT_RADIUS[kind]
        for effect in queue:
            remaining = network.effects.remaining(effect)
            node = network.nodes.get(effect.node_id)
            if node is None or remaining <= 0:
                continue
            radius = start + (end - start) * (1 - remaining)
            ax.add_patch(
                Circle(
                    node.position,
                    radius,
                    fill=False,
                    edgecolor=_matplotlib_color(effect.color),
                    alpha=0.7 * remaining,
                    linewidth=3,
                )
            )

    nx.draw_networkx_edges(
        network.graph, pos, ax=ax, edge_color=EDGE_COLOR, alpha=0.9, width=3, arrows=False
    )
    nx.draw_networkx_nodes(
        network.graph,
        pos,
        ax=ax,
        node_size=NODE_RADIUS * 12,
        node_color=[_matplotlib_color(network.nodes[n].color) for n in network.graph.nodes],
        alpha=0.6,
    )

    packets = [p for p in network.packets if p.active]
    if packets:
        coords = np.array([network.packet_position(p) for p in packets])
        ax.scatter(
            coords[:, 0],
            coords[:, 1],
            s=PACKET_RADIUS * 8,
            c=[_matplotlib_color(p.color) for p in packets],
            alpha=0.7,
            zorder=3,
        )
    ax.axis("off")


def save_network_visualization(
    network: Network,
    filename: str | None = None,
    figsize: Tuple[int, int] = (10, 8),
    block=True,
) -> None:
    """Save a frame of the network to a file.

    Args:
        network: Network instance.
        filename: Output filename, or None to show it immediately.
        figsize: Figure size as (width, height) in inches.
        block: Whether showing the figure blocks.
    """
    fig, ax = plt.subplots(figsize=figsize)
    fig.patch.set_facecolor(BACKGROUND_COLOR)
    draw_network(network, ax)
    plt.tight_layout()

    if filename:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(filename, facecolor=fig.get_facecolor())
        plt.close(fig)
    else:
        plt.show(block=block)
        if not block:
            plt.pause(0.001)


def plot_metrics(
    metrics_list: List[Dict[str, Any]],
    labels: List[str],
    output_dir: str | None = None,
    show=True,
) -> None:
    """Plot packet outcomes of several runs side by side.

    Args:
        metrics_list: List of metrics dictionaries from different runs.
        labels: Label of each run.
        output_dir: Directory to save output plots.
        show: Whether to show the plot when it is not saved.
    """
    fig, axes = plt.subplots(1, 3, figsize=(12, 5))

    delivered = [m["packets_delivered"] for m in metrics_list]
    hop_drops = [m["packets_dropped_hop_limit"] for m in metrics_list]
    route_drops = [m["packets_dropped_no_route"] for m in metrics_list]
    rates = [m["delivery_rate"] for m in metrics_list]
    hops = [m["average_hops"] for m in metrics_list]

    x = np.arange(len(labels))

    # Outcomes subplot
    axes[0].bar(x - 0.25, delivered, width=0.25, label="Delivered")
    axes[0].bar(x, hop_drops, width=0.25, color="red", label="Hop limit")
    axes[0].bar(x + 0.25, route_drops, width=0.25, color="gray", label="No route")
    axes[0].set_ylabel("Packets")
    axes[0].set_title("Packet Outcomes")
    axes[0].legend()

    # Delivery rate subplot
    axes[1].bar(x, rates, width=0.4, color="green")
    axes[1].set_ylabel("Delivery Rate")
    axes[1].set_title("Delivery Rate Comparison")
    axes[1].set_ylim(0, 1)

    # Average hops subplot
    axes[2].bar(x, hops, width=0.4, color="orange")
    axes[2].set_ylabel("Hops")
    axes[2].set_title("Average Hops of Delivered Packets")

    for ax in axes:
        ax.set_xlabel("Run")
        ax.set_xticks(x)
        ax.set_xticklabels(labels)

    plt.tight_layout()

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        plt.savefig(os.path.join(output_dir, "metrics_comparison.png"))
        plt.close(fig)
    elif show:
        plt.show()


def _matplotlib_color(color: str):
    """Translate CSS rgba()/rgb() strings, pass anything else through."""
    color = color.strip()
    if color.startswith("rgb"):
        values = [float(v) for v in color[color.index("(") + 1 : color.rindex(")")].split(",")]
        rgb = tuple(v / 255 for v in values[:3])
        return rgb + (values[3],) if len(values) > 3 else rgb
    return color
