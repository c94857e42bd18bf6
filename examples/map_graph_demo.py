#!/usr/bin/env python3
"""
Demo script building a map graph for a radial island.
"""

from collections import Counter

import numpy as np

from py_mapgraph.core import MapNodeType
from py_mapgraph.pipeline import MapGenerationConfig, generate_map_graph
from py_mapgraph.utils.logging_config import configure_logging


def island_height_map(width, height):
    """Heights from 100 in the middle down to 0 at the border."""
    x, y = np.meshgrid(np.arange(width), np.arange(height), indexing='ij')
    distance = np.hypot(x - width / 2, y - height / 2) / (min(width, height) / 2)
    return np.clip(100 * (1 - distance), 0, 100)


def main():
    """Generate one island and print a summary."""
    configure_logging(level="WARNING")

    print("Map Graph Demo")
    print("=" * 40)

    width, height = 200, 150
    config = MapGenerationConfig(width=width, height=height, min_site_distance=6,
                                 seed=42, relax_iterations=1, snap_distance=1.0)
    result = generate_map_graph(config, height_map=island_height_map(width, height))
    graph = result.graph

    print(f"\nSites:  {len(result.sites)}")
    print(f"Nodes:  {len(graph.nodes_by_center_position)}")
    print(f"Points: {len(graph.points)}")
    print(f"Edges:  {len(graph.edges)}")

    problems = graph.validate()
    print(f"Structural problems: {len(problems)}")

    print("\nNode types:")
    counts = Counter(node.node_type for node in graph.nodes)
    for node_type in MapNodeType:
        if counts[node_type]:
            print(f"  {node_type.name:12s} {counts[node_type]}")

    print(f"\nRivers: {len(result.rivers)}")
    for river in result.rivers:
        print(f"  #{river.id}: {len(river.points)} points, length {river.length:.1f}, "
              f"source height {river.source.elevation:.0f}")

    center = graph.get_center()
    node = graph.get_closest_node(center.x, center.y)
    print(f"\nCenter node at ({node.center_point.x:.1f}, {node.center_point.y:.1f}): "
          f"{node.node_type.name}, {node.edge_count()} edges, "
          f"height difference {node.height_difference():.1f}")


if __name__ == "__main__":
    main()
