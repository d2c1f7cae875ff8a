#!/usr/bin/env python3
"""Run the packet network headless and report what happened.

The animation is driven by a SimPy frame clock instead of a browser, and the
final frame can be saved as an image.
"""

import argparse
import logging
import os
from typing import Any, Dict, List

import simpy

from packet_mesh.config import NetworkConfig
from packet_mesh.core.animation import AnimationLoop
from packet_mesh.core.network import Network
from packet_mesh.utils.metrics import save_metrics_to_csv, save_metrics_to_json


def run_animation(
    config: NetworkConfig,
    width: float,
    height: float,
    duration: float,
    router_type: str = "loop-avoiding",
    seed: int | None = None,
    target_tps: float = 50.0,
    updates: bool = False,
) -> Network:
    """Animate a network for a while.

    Args:
        config: Engine configuration.
        width: Canvas width.
        height: Canvas height.
        duration: Seconds to animate.
        router_type: Next hop selection strategy.
        seed: Random seed for reproducibility.
        target_tps: Frames per second.
        updates: Whether to print progress.

    Returns:
        The network after the run.
    """
    env = simpy.Environment()
    network = Network(width, height, config, seed=seed, router_type=router_type)
    loop = AnimationLoop(env, network, target_tps=target_tps, seed=seed)
    loop.run(duration, updates=updates)
    return network


def print_metrics(label: str, metrics: Dict[str, Any]) -> None:
    print(f"{label}:")
    print(f"  Nodes / edges:   {metrics['node_count']} / {metrics['edge_count']}")
    print(f"  Emitted:         {metrics['packets_emitted']}")
    print(f"  Delivered:       {metrics['packets_delivered']}")
    print(f"  Hop limit drops: {metrics['packets_dropped_hop_limit']}")
    print(f"  No route drops:  {metrics['packets_dropped_no_route']}")
    print(f"  Delivery rate:   {metrics['delivery_rate'] * 100:.2f}%")
    print(f"  Average hops:    {metrics['average_hops']:.2f}")


def main() -> None:
    """Parse arguments and run one animation per router."""
    parser = argparse.ArgumentParser(description="Animated packet network")
    parser.add_argument("--config", help="JSON file with configuration overrides")
    parser.add_argument("--width", type=float, default=1280)
    parser.add_argument("--height", type=float, default=720)
    parser.add_argument("--duration", type=float, default=30.0, help="Seconds to animate")
    parser.add_argument("--tps", type=float, default=50.0, help="Frames per second")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--layout", choices=["scatter", "lattice"], help="Override the node layout"
    )
    parser.add_argument(
        "--router",
        action="append",
        choices=["loop-avoiding", "backtrack-avoiding"],
        help="Router to run, may be given several times",
    )
    parser.add_argument("--output-dir", default=None, help="Directory for results")
    parser.add_argument("--snapshot", action="store_true", help="Save the final frame")
    parser.add_argument("--verbose", action="store_true", help="Log engine events")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    config = NetworkConfig.from_json(args.config) if args.config else NetworkConfig()
    if args.layout:
        config = config.with_overrides(layout=args.layout)

    routers: List[str] = args.router or ["loop-avoiding"]
    metrics_list: List[Dict[str, Any]] = []
    for router in routers:
        print(f"Running animation with {router} router...")
        network = run_animation(
            config,
            args.width,
            args.height,
            args.duration,
            router_type=router,
            seed=args.seed,
            target_tps=args.tps,
            updates=True,
        )
        metrics = network.calculate_metrics()
        metrics_list.append(metrics)
        print_metrics(router, metrics)

        if args.output_dir:
            save_metrics_to_json(metrics, os.path.join(args.output_dir, f"{router}_metrics.json"))
            if args.snapshot:
                from packet_mesh.utils.visualization import save_network_visualization

                save_network_visualization(
                    network, os.path.join(args.output_dir, f"{router}_frame.png")
                )

    if args.output_dir:
        save_metrics_to_csv(
            metrics_list, routers, os.path.join(args.output_dir, "metrics_comparison.csv")
        )
        if len(routers) > 1:
            from packet_mesh.utils.visualization import plot_metrics

            plot_metrics(metrics_list, routers, args.output_dir, show=False)
        print(f"\nResults saved to '{args.output_dir}' directory.")


if __name__ == "__main__":
    main()
