"""Metrics utilities for the packet network.

This module provides functions for saving and comparing the metrics a
Network reports, such as delivery rate, drops and average hop counts.
"""

import csv
import json
import os
from typing import Any, Dict, List

from packet_mesh.core.network import Network

COMPARED_METRICS = (
    "packets_emitted",
    "packets_delivered",
    "packets_dropped_hop_limit",
    "packets_dropped_no_route",
    "delivery_rate",
    "average_hops",
)


def save_metrics_to_json(
    metrics: Dict[str, Any], filename: str = "results/metrics.json"
) -> None:
    """Save metrics to a JSON file.

    Args:
        metrics: Dictionary of metrics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w") as f:
        json.dump(metrics, f, indent=2)


def save_metrics_to_csv(
    metrics_list: List[Dict[str, Any]],
    labels: List[str],
    filename: str = "results/metrics_comparison.csv",
) -> None:
    """Save a comparison of metrics from several runs to a CSV file.

    Args:
        metrics_list: List of metrics dictionaries from different runs.
        labels: Label of each run, in the order of metrics_list.
        filename: Output filename.
    """
    if len(metrics_list) != len(labels):
        raise ValueError("Every metrics dictionary needs exactly one label")
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Run", *COMPARED_METRICS])
        for label, metrics in zip(labels, metrics_list):
            writer.writerow([label, *(metrics.get(key, 0) for key in COMPARED_METRICS)])


def compare_networks(
    networks: Dict[str, Network], output_dir: str = "results"
) -> Dict[str, List[Any]]:
    """Compare the metrics of several networks and save them.

    Args:
        networks: Networks keyed by a run label.
        output_dir: Directory to save output files.

    Returns:
        Dictionary of metric comparisons.
    """
    labels = list(networks)
    metrics_list = [network.calculate_metrics() for network in networks.values()]

    save_metrics_to_csv(metrics_list, labels, os.path.join(output_dir, "metrics_comparison.csv"))
    for label, metrics in zip(labels, metrics_list):
        save_metrics_to_json(metrics, os.path.join(output_dir, f"{label.lower()}_metrics.json"))

    comparison: Dict[str, List[Any]] = {"runs": labels}
    for key in COMPARED_METRICS:
        comparison[key] = [m[key] for m in metrics_list]
    return comparison
