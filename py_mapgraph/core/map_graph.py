"""
Half-edge map graph built from a Voronoi diagram.

Construction steps:
1. Group the raw Voronoi edges by site
2. Orient and sort each site's segments clockwise, drop degenerate ones
3. Emit one half-edge per segment, closing cells on the map border by
   walking the plot bounds (inserting the map corners where needed)
4. Link every half-edge to its opposite on the neighbouring cell
5. Optionally snap near-duplicate vertices and apply a height map
"""

import time
from collections import defaultdict
from typing import Dict, List, Optional

import structlog

from .geometry import Point2, Rect, angle_from, cross, sqr_distance
from .heights import update_heights
from .map_types import MapNode, MapNodeHalfEdge, MapNodeType, MapPoint
from .snapping import snap_points
from .voronoi_graph import LineSegment, VoronoiDiagram

logger = structlog.get_logger()

# Raw segments and ring segments shorter than this are dropped
EDGE_POINT_EPSILON = 0.001
# Opposite ends may drift apart by this much between neighbouring cells
OPPOSITE_TOLERANCE = 0.5


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class MapGraph:
    """
    Half-edge mesh of the map.

    Attributes:
        plot_bounds: Bounds of the whole tessellation (quantized)
        points: Vertices keyed by quantized horizontal position
        nodes_by_center_position: Faces keyed by quantized site position
        edges: All half-edges
    """

    def __init__(self, voronoi: VoronoiDiagram, height_map=None, snap_distance: float = 0.0,
                 opposite_tolerance: float = OPPOSITE_TOLERANCE,
                 edge_epsilon: float = EDGE_POINT_EPSILON):
        self.opposite_tolerance = opposite_tolerance
        self.edge_epsilon = edge_epsilon

        self.plot_bounds: Rect = voronoi.plot_bounds.quantized()
        self.points: Dict[Point2, MapPoint] = {}
        self.nodes_by_center_position: Dict[Point2, MapNode] = {}
        self.edges: List[MapNodeHalfEdge] = []

        started = time.perf_counter()
        self._create_from_voronoi(voronoi)
        logger.info("Map graph created from Voronoi", elapsed_ms=_elapsed_ms(started),
                    nodes=len(self.nodes_by_center_position),
                    points=len(self.points), edges=len(self.edges))

        if snap_distance > 0:
            started = time.perf_counter()
            snap_points(self, snap_distance)
            logger.info("Points snapped", elapsed_ms=_elapsed_ms(started),
                        points=len(self.points), edges=len(self.edges))

        if height_map is not None:
            started = time.perf_counter()
            update_heights(self, height_map)
            logger.info("Heights updated", elapsed_ms=_elapsed_ms(started))

    @property
    def nodes(self) -> List[MapNode]:
        return list(self.nodes_by_center_position.values())

    def _create_from_voronoi(self, voronoi: VoronoiDiagram):
        bounds = voronoi.plot_bounds
        corner_sites = {
            self.plot_bounds.top_left: voronoi.nearest_site_point(bounds.x_min, bounds.y_max),
            self.plot_bounds.top_right: voronoi.nearest_site_point(bounds.x_max, bounds.y_max),
            self.plot_bounds.bottom_right: voronoi.nearest_site_point(bounds.x_max, bounds.y_min),
            self.plot_bounds.bottom_left: voronoi.nearest_site_point(bounds.x_min, bounds.y_min),
        }

        epsilon_sqr = self.edge_epsilon * self.edge_epsilon
        site_edges: Dict[Point2, List[LineSegment]] = defaultdict(list)
        edge_points_removed = 0
        for edge in voronoi.edges():
            if not edge.visible:
                continue
            if sqr_distance(edge.left_end, edge.right_end) < epsilon_sqr:
                edge_points_removed += 1
                continue
            for site in (edge.left_site, edge.right_site):
                if site is not None:
                    site_edges[site].append(LineSegment(edge.left_end, edge.right_end))

        if edge_points_removed:
            logger.warning("Voronoi edges too short, removed", count=edge_points_removed)

        edges_by_start: Dict[Point2, List[MapNodeHalfEdge]] = defaultdict(list)
        for site in voronoi.site_coords():
            boundaries = self._boundaries_for_site(site_edges.get(site, []), site)
            center = Point2.quantized(*site)
            node = MapNode(center_point=center.to_3d())
            self.nodes_by_center_position[center] = node
            self._build_ring(node, site, boundaries, corner_sites, edges_by_start)

        self._connect_opposites(edges_by_start)

    def _boundaries_for_site(self, segments: List[LineSegment], site: Point2) -> List[LineSegment]:
        """Segments of one site oriented and sorted clockwise."""
        boundaries = [
            LineSegment(segment.p1, segment.p0) if cross(site, segment.p0, segment.p1) > 0
            else LineSegment(segment.p0, segment.p1)
            for segment in segments
        ]
        boundaries.sort(key=lambda segment: angle_from(site, segment.p0), reverse=True)
        snap_boundaries(boundaries, self.edge_epsilon)
        return boundaries

    def _build_ring(self, node: MapNode, site: Point2, boundaries: List[LineSegment],
                    corner_sites: Dict[Point2, Point2],
                    edges_by_start: Dict[Point2, List[MapNodeHalfEdge]]):
        first_edge = None
        previous_edge = None

        # A lone site covers the whole map
        if not boundaries and all(owner == site for owner in corner_sites.values()):
            bounds = self.plot_bounds
            ring = [bounds.top_left, bounds.top_right, bounds.bottom_right, bounds.bottom_left]
            for start, end in zip(ring, ring[1:] + ring[:1]):
                previous_edge = self._add_edge(edges_by_start, previous_edge, start, end, node)
                if first_edge is None:
                    first_edge = previous_edge
                    node.start_edge = previous_edge

        for i, segment in enumerate(boundaries):
            start = Point2.quantized(*segment.p0)
            end = Point2.quantized(*segment.p1)
            if start == end:
                continue

            previous_edge = self._add_edge(edges_by_start, previous_edge, start, end, node)
            if first_edge is None:
                first_edge = previous_edge
            if node.start_edge is None:
                node.start_edge = previous_edge

            # Consecutive segments that do not meet lie on the map border
            following = boundaries[(i + 1) % len(boundaries)]
            gap_end = Point2.quantized(*following.p0)
            if end != gap_end:
                previous_edge = self._close_gap(edges_by_start, previous_edge, site, end,
                                                gap_end, corner_sites, node)

        if first_edge is None:
            node.node_type = MapNodeType.ERROR
            logger.warning("Site has no boundary edges", site=tuple(site))
            return

        previous_edge.next = first_edge
        first_edge.previous = previous_edge
        _add_leaving_edge(first_edge)

    def _close_gap(self, edges_by_start, previous_edge: MapNodeHalfEdge, site: Point2,
                   start: Point2, end: Point2, corner_sites: Dict[Point2, Point2],
                   node: MapNode) -> MapNodeHalfEdge:
        """Walk the plot bounds clockwise from ``start`` to ``end``."""
        bounds = self.plot_bounds
        # Map corners in clockwise order, corners[i] ends side i
        corners = [bounds.top_right, bounds.bottom_right, bounds.bottom_left, bounds.top_left]

        side = self._side_of(start)
        if side is not None:
            position = start
            for offset in range(4):
                index = (side + offset) % 4
                if self._ahead_on_side(index, position, end):
                    break
                corner = corners[index]
                if corner != start and corner_sites[corner] == site:
                    current = previous_edge.destination.position.xy
                    previous_edge = self._add_edge(edges_by_start, previous_edge, current, corner, node)
                position = corner

        current = previous_edge.destination.position.xy
        if current != end:
            previous_edge = self._add_edge(edges_by_start, previous_edge, current, end, node)
        return previous_edge

    def _side_of(self, point: Point2) -> Optional[int]:
        """Index of the plot side (top, right, bottom, left) holding ``point``."""
        bounds = self.plot_bounds
        if point.y == bounds.y_max:
            return 0
        if point.x == bounds.x_max:
            return 1
        if point.y == bounds.y_min:
            return 2
        if point.x == bounds.x_min:
            return 3
        return None

    def _ahead_on_side(self, side: int, position: Point2, end: Point2) -> bool:
        """True when ``end`` lies on ``side`` clockwise after ``position``."""
        bounds = self.plot_bounds
        if side == 0:
            return end.y == bounds.y_max and end.x >= position.x
        if side == 1:
            return end.x == bounds.x_max and end.y <= position.y
        if side == 2:
            return end.y == bounds.y_min and end.x <= position.x
        return end.x == bounds.x_min and end.y >= position.y

    def _add_edge(self, edges_by_start, previous: Optional[MapNodeHalfEdge], start: Point2,
                  end: Point2, node: MapNode) -> MapNodeHalfEdge:
        assert start != end, "Start and end of a half-edge must not be the same"

        edge = MapNodeHalfEdge(node=node)
        if start not in self.points:
            self.points[start] = MapPoint(position=start.to_3d(), leaving_edge=edge)
        if end not in self.points:
            self.points[end] = MapPoint(position=end.to_3d())
        edge.destination = self.points[end]

        edges_by_start[start].append(edge)
        self.edges.append(edge)

        if previous is not None:
            previous.next = edge
            edge.previous = previous
            _add_leaving_edge(edge)
        return edge

    def _connect_opposites(self, edges_by_start: Dict[Point2, List[MapNodeHalfEdge]]):
        tolerance = self.opposite_tolerance
        errors = 0
        for edge in self.edges:
            if edge.opposite is not None:
                continue

            start = edge.previous.destination.position
            end = edge.destination.position

            opposite = None
            best_distance = None
            for candidate in edges_by_start.get(end.xy, []):
                if candidate.opposite is not None or candidate is edge:
                    continue
                destination = candidate.destination.position
                dx = abs(destination.x - start.x)
                dy = abs(destination.y - start.y)
                if dx < tolerance and dy < tolerance:
                    distance = dx * dx + dy * dy
                    if best_distance is None or distance < best_distance:
                        opposite = candidate
                        best_distance = distance

            if opposite is not None:
                edge.opposite = opposite
                opposite.opposite = edge
            elif not (self.plot_bounds.on_boundary(start) or self.plot_bounds.on_boundary(end)):
                edge.node.node_type = MapNodeType.ERROR
                errors += 1
                logger.warning("Edge without opposite is not on the map boundary",
                               start=(start.x, start.y), end=(end.x, end.y),
                               node=(edge.node.center_point.x, edge.node.center_point.y))

        if errors:
            logger.warning("Nodes flagged with construction errors", edges=errors)

    def get_center(self) -> Point2:
        return self.plot_bounds.center

    def get_closest_node(self, x: float, y: float) -> Optional[MapNode]:
        """Node whose center is closest to (x, y). Linear scan."""
        closest_node = None
        lowest_distance = None
        for node in self.nodes_by_center_position.values():
            distance = sqr_distance(node.center_point, (x, y))
            if lowest_distance is None or distance < lowest_distance:
                closest_node = node
                lowest_distance = distance
        return closest_node

    def validate(self) -> List[str]:
        """
        Check the structural invariants of the mesh.

        Returns:
            Human readable descriptions of every violation, empty when valid
        """
        problems = []
        edge_set = set(self.edges)
        tolerance_sqr = 2 * self.opposite_tolerance ** 2

        for edge in self.edges:
            if edge.next is None or edge.previous is None:
                problems.append(f"{edge!r} is not part of a ring")
                continue
            if edge.next.previous is not edge:
                problems.append(f"{edge!r} next/previous are not mutual")
            opposite = edge.opposite
            if opposite is None:
                continue
            if opposite not in edge_set:
                problems.append(f"{edge!r} has a deleted opposite")
            elif opposite.opposite is not edge:
                problems.append(f"{edge!r} opposite does not point back")
            elif sqr_distance(opposite.destination.position, edge.start.position) > tolerance_sqr:
                problems.append(f"{edge!r} opposite does not end at its start")

        for node in self.nodes_by_center_position.values():
            if node.start_edge is None:
                if node.node_type != MapNodeType.ERROR:
                    problems.append(f"{node!r} has no edges")
                continue
            edge = node.start_edge
            for _ in range(len(self.edges) + 1):
                if edge.node is not node:
                    problems.append(f"{node!r} ring contains {edge!r} of another node")
                if edge not in edge_set:
                    problems.append(f"{node!r} ring contains deleted {edge!r}")
                edge = edge.next
                if edge is None or edge is node.start_edge:
                    break
            if edge is not node.start_edge:
                problems.append(f"{node!r} ring does not return to its start edge")

        for key, point in self.points.items():
            leaving_edge = point.leaving_edge
            if leaving_edge is None:
                problems.append(f"{point!r} has no leaving edge")
                continue
            if leaving_edge not in edge_set or leaving_edge.start is not point:
                problems.append(f"{point!r} leaving edge does not start at it")
                continue
            fan = point.edges_list()
            if all(edge.opposite is not None for edge in fan) and fan[-1].opposite.next is not leaving_edge:
                problems.append(f"{point!r} fan does not return to its leaving edge")

        return problems


def _add_leaving_edge(edge: MapNodeHalfEdge):
    start = edge.previous.destination
    if start.leaving_edge is None:
        start.leaving_edge = edge


def snap_boundaries(boundaries: List[LineSegment], snap_distance: float):
    """
    Remove segments shorter than ``snap_distance`` from a sorted ring.

    The neighbouring segments are joined when their ends are close enough.
    """
    snap_distance_sqr = snap_distance * snap_distance
    for i in range(len(boundaries) - 1, -1, -1):
        if sqr_distance(boundaries[i].p0, boundaries[i].p1) >= snap_distance_sqr:
            continue
        previous = i - 1 if i > 0 else len(boundaries) - 1
        following = i + 1 if i + 1 < len(boundaries) else 0
        if sqr_distance(boundaries[previous].p1, boundaries[following].p0) < snap_distance_sqr:
            boundaries[previous].p1 = boundaries[following].p0
        del boundaries[i]
