"""
River generation on the map graph.

Rivers run along the edges between nodes. A river starts at a high point,
follows the down-slope edge of every point it reaches and adds its flow to
the ``water`` of each traversed half-edge (and its opposite), so shared
stretches accumulate the flow of every river that uses them.
"""

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Set

import structlog

from .map_types import WATER_TYPES, MapPoint

if TYPE_CHECKING:
    from .map_graph import MapGraph

logger = structlog.get_logger()


@dataclass
class RiverOptions:
    """River generation options."""
    river_count: int = 10  # Maximum number of rivers
    min_source_height: float = 50.0  # Sources must be at least this high
    flow: float = 1.0  # Water added per river and edge


@dataclass
class River:
    """One river, from source to mouth."""
    id: int
    points: List[MapPoint] = field(default_factory=list)
    flow: float = 0.0

    @property
    def source(self) -> MapPoint:
        return self.points[0]

    @property
    def mouth(self) -> MapPoint:
        return self.points[-1]

    @property
    def length(self) -> float:
        return sum(
            math.hypot(b.position.x - a.position.x, b.position.y - a.position.y)
            for a, b in zip(self.points, self.points[1:])
        )


def create_rivers(graph: "MapGraph", options: RiverOptions = None) -> List[River]:
    """
    Trace rivers from the highest points down to water.

    Args:
        graph: Map graph with heights and node types assigned
        options: River options

    Returns:
        Rivers with at least one edge, highest source first
    """
    options = options or RiverOptions()
    logger.info("Generating rivers", max_rivers=options.river_count)

    sources = sorted(
        (point for point in graph.points.values()
         if point.elevation >= options.min_source_height and point.leaving_edge is not None),
        key=lambda point: point.elevation,
        reverse=True,
    )

    rivers: List[River] = []
    river_points: Set[MapPoint] = set()
    for source in sources:
        if len(rivers) >= options.river_count:
            break
        if source in river_points:
            continue  # Already part of another river

        path = _trace_river(source, options.flow)
        if len(path) > 1:
            rivers.append(River(id=len(rivers), points=path, flow=options.flow))
            river_points.update(path)

    logger.info("Rivers generated", count=len(rivers))
    return rivers


def _trace_river(source: MapPoint, flow: float) -> List[MapPoint]:
    path = [source]
    visited = {source}
    current = source

    while True:
        if any(node.node_type in WATER_TYPES for node in current.nodes()):
            break  # Reached a lake or the sea
        edge = current.down_slope_edge()
        if edge is None:
            break
        destination = edge.destination
        if destination in visited:
            break  # Flat ground, flowing in circles

        edge.water += flow
        if edge.opposite is not None:
            edge.opposite.water += flow

        path.append(destination)
        visited.add(destination)
        current = destination

    return path
