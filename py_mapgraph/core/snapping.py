"""
Vertex snapping for the map graph.

Voronoi cells of nearly co-circular sites share very short edges. Snapping
collapses such an edge (and its opposite) into a single vertex, as long as
both neighbouring cells keep at least three edges.
"""

from typing import TYPE_CHECKING, Optional, Set, Tuple

import structlog

from .geometry import sqr_distance
from .map_types import MapNodeHalfEdge, MapPoint

if TYPE_CHECKING:
    from .map_graph import MapGraph

logger = structlog.get_logger()


def snap_points(graph: "MapGraph", snap_distance: float) -> int:
    """
    Merge every pair of interior points closer than ``snap_distance``.

    Each point is processed at most once, tracked in a visited set, so a
    pair is merged exactly once whichever side is reached first.

    Returns:
        Number of merged point pairs
    """
    snap_distance_sqr = snap_distance * snap_distance
    visited_points: Set[MapPoint] = set()
    removed_edges: Set[MapNodeHalfEdge] = set()
    snapped = 0

    for key in list(graph.points.keys()):
        point = graph.points.get(key)
        if point is None or point in visited_points:
            continue

        neighbors = point.edges_list()
        if any(edge.opposite is None for edge in neighbors):
            continue

        for neighbor in neighbors:
            if neighbor.destination in visited_points:
                continue
            visited_points.add(neighbor.destination)

            # Never take a node below three edges
            can_snap = (
                neighbor.opposite is not None
                and sqr_distance(point.position, neighbor.destination.position) < snap_distance_sqr
                and neighbor.node.edge_count() > 3
                and neighbor.opposite.node.edge_count() > 3
            )
            if not can_snap:
                continue

            visited_points.add(point)
            removed = _snap_edge(graph, point, neighbor)
            if removed is not None:
                removed_edges.update(removed)
                snapped += 1

    if removed_edges:
        graph.edges = [edge for edge in graph.edges if edge not in removed_edges]

    logger.info("Snapping complete", snapped=snapped, snap_distance=snap_distance)
    return snapped


def _snap_edge(graph: "MapGraph", point: MapPoint,
               edge: MapNodeHalfEdge) -> Optional[Tuple[MapNodeHalfEdge, MapNodeHalfEdge]]:
    """Collapse ``edge`` so that its destination merges into ``point``."""
    destination = edge.destination
    destination_edges = destination.edges_list()
    # Points on the map border are left alone
    if any(other.opposite is None for other in destination_edges):
        return None

    opposite = edge.opposite
    del graph.points[destination.position.xy]

    if point.leaving_edge is edge:
        point.leaving_edge = opposite.next

    if edge.node.start_edge is edge:
        edge.node.start_edge = edge.previous
    edge.next.previous = edge.previous
    edge.previous.next = edge.next

    if opposite.node.start_edge is opposite:
        opposite.node.start_edge = opposite.previous
    opposite.next.previous = opposite.previous
    opposite.previous.next = opposite.next

    for other in destination_edges:
        if other.opposite is not None:
            other.opposite.destination = point

    logger.debug("Snapped point", kept=(point.position.x, point.position.y),
                 removed=(destination.position.x, destination.position.y))
    return edge, opposite
