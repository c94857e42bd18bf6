"""
Half-edge mesh entities of the map graph.

A MapNode is a face (one Voronoi cell), a MapNodeHalfEdge is a directed edge
on the boundary of exactly one face and a MapPoint is a vertex. Edges of a
face form a cycle through ``next``/``previous``; two faces sharing a border
each own one half-edge and link them through ``opposite``.

The classes compare by identity. Cross references are plain object
references, the mesh (MapGraph) owns all of them.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional

from .geometry import Point3, Rect

# Upper bound for walking the edges around a vertex
FAN_MAX_ITERATIONS = 20


class MapNodeType(IntEnum):
    """Classification of a map node."""

    FRESH_WATER = 0
    SALT_WATER = 1
    GRASS = 2
    MOUNTAIN = 3
    CITY = 4
    BEACH = 5
    ERROR = 6  # construction invariants failed, topology not trusted
    SNOW = 7


WATER_TYPES = frozenset({MapNodeType.FRESH_WATER, MapNodeType.SALT_WATER})


@dataclass(eq=False, repr=False)
class MapPoint:
    """Half-edge vertex."""

    position: Point3
    # Any half-edge that starts at this point
    leaving_edge: Optional["MapNodeHalfEdge"] = None

    @property
    def elevation(self) -> float:
        return self.position.z

    def edges(self, max_iterations: int = FAN_MAX_ITERATIONS) -> Iterator["MapNodeHalfEdge"]:
        """
        Walk the half-edges leaving this point.

        Moves from an edge to ``edge.opposite.next``. The walk stops early at
        the mesh boundary (no opposite) and after ``max_iterations`` edges,
        so a corrupted fan is truncated rather than looped over forever.
        """
        first_edge = self.leaving_edge
        if first_edge is None:
            return

        next_edge = first_edge
        iterations = 0
        while True:
            yield next_edge
            iterations += 1
            next_edge = next_edge.opposite.next if next_edge.opposite is not None else None
            if next_edge is None or next_edge is first_edge or iterations >= max_iterations:
                break

    def edges_list(self, max_iterations: int = FAN_MAX_ITERATIONS) -> List["MapNodeHalfEdge"]:
        return list(self.edges(max_iterations))

    def nodes(self) -> List["MapNode"]:
        """Faces around this point, in fan order."""
        return [edge.node for edge in self.edges()]

    def lowest_node(self) -> Optional["MapNode"]:
        lowest_node = None
        for node in self.nodes():
            if lowest_node is None or node.center_point.z < lowest_node.center_point.z:
                lowest_node = node
        return lowest_node

    def down_slope_edge(self) -> Optional["MapNodeHalfEdge"]:
        """
        Leaving edge towards the lowest neighbour that is not above this point.

        Returns None when every neighbour is higher.
        """
        best_edge = None
        for edge in self.edges():
            destination_height = edge.destination.position.z
            if destination_height <= self.position.z:
                if best_edge is None or destination_height < best_edge.destination.position.z:
                    best_edge = edge
        return best_edge

    def __repr__(self) -> str:
        return f"MapPoint({self.position.x}, {self.position.y}, {self.position.z})"


@dataclass(eq=False, repr=False)
class MapNodeHalfEdge:
    """Directed edge on the boundary of one map node."""

    node: "MapNode"
    destination: Optional[MapPoint] = None
    next: Optional["MapNodeHalfEdge"] = None
    previous: Optional["MapNodeHalfEdge"] = None
    opposite: Optional["MapNodeHalfEdge"] = None
    water: float = 0.0  # accumulated river flow along this edge

    @property
    def start(self) -> Optional[MapPoint]:
        """The point this edge leaves from."""
        return self.previous.destination if self.previous is not None else None

    @property
    def is_boundary(self) -> bool:
        return self.opposite is None

    def __repr__(self) -> str:
        start = self.start.position if self.start is not None else None
        end = self.destination.position if self.destination is not None else None
        return f"MapNodeHalfEdge({start} -> {end})"


@dataclass(eq=False, repr=False)
class MapNode:
    """Half-edge face, one per Voronoi site."""

    center_point: Point3
    # An arbitrary half-edge on the border of this node
    start_edge: Optional[MapNodeHalfEdge] = None
    node_type: MapNodeType = MapNodeType.FRESH_WATER

    _height_difference: Optional[float] = field(default=None, init=False)
    _bounding_rectangle: Optional[Rect] = field(default=None, init=False)

    def edges(self) -> Iterator[MapNodeHalfEdge]:
        """Walk the edge ring starting at ``start_edge``."""
        if self.start_edge is None:
            return
        yield self.start_edge
        edge = self.start_edge.next
        while edge is not self.start_edge:
            yield edge
            edge = edge.next

    def edges_list(self) -> List[MapNodeHalfEdge]:
        return list(self.edges())

    def edge_count(self) -> int:
        return sum(1 for _ in self.edges())

    def corners(self) -> Iterator[MapPoint]:
        for edge in self.edges():
            yield edge.destination

    def corners_list(self) -> List[MapPoint]:
        return list(self.corners())

    def is_edge(self) -> bool:
        """True when the node touches the outer boundary of the mesh."""
        return any(edge.opposite is None for edge in self.edges())

    def neighbor_nodes(self) -> List["MapNode"]:
        return [
            edge.opposite.node
            for edge in self.edges()
            if edge.opposite is not None and edge.opposite.node is not None
        ]

    @property
    def elevation(self) -> float:
        return self.center_point.z

    def reset_height_difference(self):
        """Drop the cached height difference after elevations change."""
        self._height_difference = None

    def height_difference(self) -> float:
        """Highest minus lowest corner elevation, computed once."""
        if self._height_difference is None:
            heights = [corner.position.z for corner in self.corners()]
            self._height_difference = max(heights) - min(heights) if heights else 0.0
        return self._height_difference

    def lowest_corner(self) -> Optional[MapPoint]:
        lowest = None
        for corner in self.corners():
            if lowest is None or corner.position.z < lowest.position.z:
                lowest = corner
        return lowest

    def lowest_edge(self) -> Optional[MapNodeHalfEdge]:
        lowest = None
        for edge in self.edges():
            if lowest is None or edge.destination.position.z < lowest.destination.position.z:
                lowest = edge
        return lowest

    def bounding_rectangle(self) -> Rect:
        """2D bounding box of the corners, ignoring elevation. Computed once."""
        if self._bounding_rectangle is None:
            xs = [corner.position.x for corner in self.corners()]
            ys = [corner.position.y for corner in self.corners()]
            if xs:
                self._bounding_rectangle = Rect(min(xs), min(ys), max(xs), max(ys))
            else:
                x, y = self.center_point.x, self.center_point.y
                self._bounding_rectangle = Rect(x, y, x, y)
        return self._bounding_rectangle

    def __repr__(self) -> str:
        return f"MapNode({self.center_point}, {self.node_type.name})"
