# visualize_neat.py

import json
import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np

from mario_neat.neat_genome import NodeType

logger = logging.getLogger(__name__)

NODE_COLORS = {
    NodeType.INPUT: "skyblue",
    NodeType.OUTPUT: "lightgreen",
    NodeType.HIDDEN: "gray",
}


def screen_message(screen: np.ndarray) -> str:
    """Serialise a tile window as the dashboard's update_screen event."""
    return json.dumps({"event": "update_screen", "data": np.asarray(screen).astype(int).tolist()})


def plot_genome(genome, filename, title="NEAT Network"):
    """
    Draws the structure of a single genome using networkx/matplotlib.
    Unconnected input nodes are left out; a full tile window has far too many to draw.
    """
    G = nx.DiGraph()
    connected = {conn.src for conn in genome.connections} | {conn.tgt for conn in genome.connections}
    shown = [node for node in genome.nodes if node.type != NodeType.INPUT or node.id in connected]

    for node in shown:
        G.add_node(node.id)
    node_color = [NODE_COLORS[node.type] for node in shown]
    node_label = {node.id: f"{node.id}\n{node.type.value}" for node in shown}

    edge_colors = []
    edge_widths = []
    for conn in genome.connections:
        G.add_edge(conn.src, conn.tgt)
    # Parallel connections collapse into one edge; style each by its last gene
    styles = {}
    for conn in genome.connections:
        styles[(conn.src, conn.tgt)] = ("black", 2 + abs(conn.weight) * 2) if conn.enabled else ("red", 1)
    for edge in G.edges():
        color, width = styles[edge]
        edge_colors.append(color)
        edge_widths.append(width)

    pos = nx.spring_layout(G, seed=42)
    plt.figure(figsize=(8, 5))
    nx.draw(G, pos, with_labels=True, labels=node_label,
            node_color=node_color, edge_color=edge_colors,
            width=edge_widths, arrows=True)
    plt.title(title)
    plt.savefig(filename, bbox_inches='tight')
    plt.close()
    logger.info(f"Genome plot saved to {filename}")


def plot_fitness_curve(logbook, filename="fitness.png"):
    """
    Plot best/avg/min fitness over generations from the population's logbook.
    """
    generations = logbook.select("gen")
    plt.figure(figsize=(10, 4))
    plt.plot(generations, logbook.select("max"), label="Best")
    plt.plot(generations, logbook.select("avg"), label="Average")
    plt.plot(generations, logbook.select("min"), label="Worst")
    plt.xlabel("Generation")
    plt.ylabel("Fitness")
    plt.legend()
    plt.tight_layout()
    plt.savefig(filename)
    plt.close()
    logger.info(f"Fitness curve saved to {filename}")


def plot_structure_stats(genome_history, filename="structure_stats.png"):
    """
    Plot number of nodes/connections per generation.
    """
    num_nodes = [len(genome.nodes) for genome in genome_history]
    num_conns = [len(genome.connections) for genome in genome_history]
    plt.figure(figsize=(10, 4))
    plt.plot(num_nodes, label="Nodes")
    plt.plot(num_conns, label="Connections")
    plt.xlabel("Generation")
    plt.ylabel("Count")
    plt.legend()
    plt.tight_layout()
    plt.savefig(filename)
    plt.close()
    logger.info(f"Structure stats saved to {filename}")
