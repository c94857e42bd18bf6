"""Tests for vertex snapping."""

import pytest

from py_mapgraph.core.geometry import Point2, Rect
from py_mapgraph.core.map_graph import MapGraph
from py_mapgraph.core.sampling import poisson_disk_sample
from py_mapgraph.core.snapping import snap_points
from py_mapgraph.core.voronoi_graph import VoronoiDiagram

from conftest import BOTTOM, LEFT, P, Q, RIGHT, TOP, short_edge_diagram


def node_at(graph, site):
    return graph.nodes_by_center_position[Point2.quantized(*site)]


class TestShortEdge:
    """Two cells sharing an edge of length 0.4."""

    def test_before_snapping(self):
        graph = MapGraph(short_edge_diagram())

        assert len(graph.points) == 10
        assert len(graph.edges) == 18
        assert [node_at(graph, site).edge_count() for site in (LEFT, RIGHT, TOP, BOTTOM)] == [4, 4, 5, 5]

    def test_snapping_merges_the_short_edge(self):
        graph = MapGraph(short_edge_diagram(), snap_distance=0.5)

        assert len(graph.points) == 9
        assert len(graph.edges) == 16
        assert [node_at(graph, site).edge_count() for site in (LEFT, RIGHT, TOP, BOTTOM)] == [3, 3, 5, 5]
        assert (P in graph.points) != (Q in graph.points)

    def test_snapped_graph_is_valid(self):
        graph = MapGraph(short_edge_diagram(), snap_distance=0.5)
        assert graph.validate() == []

    def test_surviving_point_fan(self):
        graph = MapGraph(short_edge_diagram(), snap_distance=0.5)
        survivor = graph.points[P] if P in graph.points else graph.points[Q]

        fan = survivor.edges_list()
        assert len(fan) == 4
        assert fan[-1].opposite.next is survivor.leaving_edge
        assert {node.center_point.xy for node in survivor.nodes()} == {
            Point2.quantized(*site) for site in (LEFT, RIGHT, TOP, BOTTOM)
        }

    def test_former_neighbors_touch_at_one_point(self):
        graph = MapGraph(short_edge_diagram(), snap_distance=0.5)
        left = node_at(graph, LEFT)
        right = node_at(graph, RIGHT)

        assert right not in left.neighbor_nodes()
        shared = set(left.corners_list()) & set(right.corners_list())
        assert len(shared) == 1

    def test_removed_edges_are_not_referenced(self):
        graph = MapGraph(short_edge_diagram(), snap_distance=0.5)
        edges = set(graph.edges)

        for node in graph.nodes:
            assert node.start_edge in edges
            assert all(edge in edges for edge in node.edges())
        for point in graph.points.values():
            assert point.leaving_edge in edges

    @pytest.mark.parametrize("snap_distance", [0.0, 0.3])
    def test_no_snap_below_edge_length(self, snap_distance):
        graph = MapGraph(short_edge_diagram(), snap_distance=snap_distance)

        assert len(graph.points) == 10
        assert len(graph.edges) == 18
        assert graph.validate() == []

    def test_snap_count(self):
        graph = MapGraph(short_edge_diagram())
        assert snap_points(graph, 0.5) == 1
        assert snap_points(graph, 0.5) == 0


def test_never_snaps_below_triangles():
    """A cell that is already a quadrilateral can not lose an edge to a triangle neighbour."""
    graph = MapGraph(short_edge_diagram(), snap_distance=0.5)
    snapped = snap_points(graph, 100.0)

    assert snapped == 0
    assert all(node.edge_count() >= 3 for node in graph.nodes)


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_random_map_snapping(seed):
    bounds = Rect.from_size(100, 100)
    sites = poisson_disk_sample(bounds, 6.0, seed=seed)
    graph = MapGraph(VoronoiDiagram.from_points(sites, bounds), snap_distance=1.0)

    assert graph.validate() == []
    assert all(node.edge_count() >= 3 for node in graph.nodes)
