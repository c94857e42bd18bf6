"""
Node classification from elevation.

Water nodes connected to the map border are salt water (ocean), enclosed
ones are fresh water (lakes). Land is typed by altitude, land touching
water becomes beach.
"""

from collections import Counter, deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict

import structlog

from .map_types import MapNodeType

if TYPE_CHECKING:
    from .map_graph import MapGraph

logger = structlog.get_logger()


@dataclass
class NodeTypeOptions:
    """Elevation thresholds, in height map units."""
    sea_level: float = 20.0
    mountain_level: float = 50.0
    snow_level: float = 75.0


def assign_node_types(graph: "MapGraph", options: NodeTypeOptions = None) -> Dict[MapNodeType, int]:
    """
    Classify every node of the graph. Nodes tagged ERROR keep their tag.

    Returns:
        Number of nodes per type
    """
    options = options or NodeTypeOptions()
    nodes = [node for node in graph.nodes_by_center_position.values()
             if node.node_type != MapNodeType.ERROR]

    water = {node for node in nodes if node.elevation < options.sea_level}

    # Flood fill the ocean from water nodes on the map border
    ocean = {node for node in water if node.is_edge()}
    queue = deque(ocean)
    while queue:
        node = queue.popleft()
        for neighbor in node.neighbor_nodes():
            if neighbor in water and neighbor not in ocean:
                ocean.add(neighbor)
                queue.append(neighbor)

    for node in nodes:
        if node in water:
            node.node_type = MapNodeType.SALT_WATER if node in ocean else MapNodeType.FRESH_WATER
        elif any(neighbor in water for neighbor in node.neighbor_nodes()):
            node.node_type = MapNodeType.BEACH
        elif node.elevation >= options.snow_level:
            node.node_type = MapNodeType.SNOW
        elif node.elevation >= options.mountain_level:
            node.node_type = MapNodeType.MOUNTAIN
        else:
            node.node_type = MapNodeType.GRASS

    counts = Counter(node.node_type for node in graph.nodes_by_center_position.values())
    logger.info("Node types assigned", **{node_type.name.lower(): count
                                           for node_type, count in counts.items()})
    return dict(counts)
