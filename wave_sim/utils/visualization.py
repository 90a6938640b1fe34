"""Visualization utilities for network simulation.

This module provides a plot of the simulated topology: nodes at their
positions, with one edge style per fabric.
"""

from typing import Optional, Tuple

import matplotlib.pyplot as plt
import networkx as nx

from wave_sim.core.enums import Fabric
from wave_sim.core.simulator import Simulator

EDGE_STYLES = {
    Fabric.OCB: {"edge_color": "blue", "style": "dashed"},
    Fabric.CSMA: {"edge_color": "gray", "style": "solid"},
}


def save_network_visualization(
    simulator: Simulator,
    filename: Optional[str] = None,
    figsize: Tuple[int, int] = (10, 4),
    block: bool = True,
) -> None:
    """Save network topology visualization to a file.

    Args:
        simulator: Simulator holding the topology.
        filename: Output filename, or None to show it immediately.
        figsize: Figure size as (width, height) in inches.
        block: Whether showing the figure blocks until it is closed.
    """
    fig = plt.figure(figsize=figsize)

    graph = simulator.graph
    pos = {node_id: data["pos"][:2] for node_id, data in graph.nodes(data=True)}

    nx.draw_networkx_nodes(graph, pos, node_size=500, node_color="lightblue")

    for fabric, style in EDGE_STYLES.items():
        edges = [(u, v) for u, v, key in graph.edges(keys=True) if key == fabric.name]
        if not edges:
            continue
        nx.draw_networkx_edges(
            nx.Graph(edges), pos, width=2, alpha=0.6, label=fabric.name, **style
        )

    labels = {}
    for node_id, node in simulator.nodes.items():
        addresses = [str(d.ip) for d in node.devices if d.ip is not None]
        labels[node_id] = "\n".join([str(node_id)] + addresses)
    nx.draw_networkx_labels(graph, pos, labels=labels, font_size=8)

    plt.title("Network Topology")
    plt.legend()
    plt.axis("off")
    plt.tight_layout()

    if filename:
        plt.savefig(filename)
        plt.close(fig)
    else:
        plt.show(block=block)
