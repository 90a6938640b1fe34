"""Metrics utilities for network simulation.

This module provides functions for summarizing the packet counters a
Simulator collects during a run.
"""

import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def summarize_metrics(metrics: Dict[str, Any]) -> List[str]:
    """Format a metrics dictionary as human readable lines.

    Args:
        metrics: Dictionary returned by Simulator.run.

    Returns:
        One line for the totals, then one line per node.
    """
    lines = [
        f"Simulation ended at {metrics['end_time']:g}s: "
        f"{metrics['packets_sent']} sent, "
        f"{metrics['packets_received']} received, "
        f"{metrics['packets_dropped']} dropped"
    ]

    node_ids = sorted(
        set(metrics["sent_per_node"])
        | set(metrics["received_per_node"])
        | set(metrics["dropped_per_node"])
    )
    for node_id in node_ids:
        lines.append(
            f"  node {node_id}: "
            f"sent={metrics['sent_per_node'].get(node_id, 0)} "
            f"received={metrics['received_per_node'].get(node_id, 0)} "
            f"dropped={metrics['dropped_per_node'].get(node_id, 0)}"
        )
    return lines


def log_metrics(metrics: Dict[str, Any]) -> None:
    """Log the metrics summary at INFO level."""
    for line in summarize_metrics(metrics):
        logger.info(line)
