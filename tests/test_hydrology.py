"""Tests for river generation."""

import pytest
import numpy as np

from py_mapgraph.core.geometry import Point2
from py_mapgraph.core.hydrology import River, RiverOptions, create_rivers
from py_mapgraph.core.map_graph import MapGraph
from py_mapgraph.core.map_types import WATER_TYPES
from py_mapgraph.core.node_types import assign_node_types


@pytest.fixture
def ramp_graph(grid3_diagram):
    """Terrain rising towards the top right corner, sea in the bottom left."""
    x, y = np.meshgrid(np.arange(31), np.arange(31), indexing='ij')
    graph = MapGraph(grid3_diagram, height_map=x + y)
    assign_node_types(graph)
    return graph


class TestCreateRivers:
    """Test river tracing."""

    def test_rivers_created(self, ramp_graph):
        rivers = create_rivers(ramp_graph)
        assert len(rivers) >= 1
        assert all(len(river.points) > 1 for river in rivers)

    def test_highest_source_first(self, ramp_graph):
        rivers = create_rivers(ramp_graph)
        assert rivers[0].source.position.xy == Point2(30.0, 30.0)

    def test_rivers_flow_downhill(self, ramp_graph):
        for river in create_rivers(ramp_graph):
            elevations = [point.elevation for point in river.points]
            assert all(b <= a for a, b in zip(elevations, elevations[1:]))

    def test_sources_above_minimum(self, ramp_graph):
        for river in create_rivers(ramp_graph, RiverOptions(min_source_height=55)):
            assert river.source.elevation >= 55

    def test_water_is_symmetric(self, ramp_graph):
        create_rivers(ramp_graph)
        for edge in ramp_graph.edges:
            if edge.opposite is not None:
                assert edge.water == edge.opposite.water

    def test_water_accumulates(self, ramp_graph):
        rivers = create_rivers(ramp_graph, RiverOptions(flow=2.5))
        total = sum(edge.water for edge in ramp_graph.edges)
        assert total > 0
        assert all(edge.water % 2.5 == 0 for edge in ramp_graph.edges)
        assert all(river.flow == 2.5 for river in rivers)

    def test_river_count_limit(self, ramp_graph):
        assert len(create_rivers(ramp_graph, RiverOptions(river_count=1))) == 1
        assert create_rivers(ramp_graph, RiverOptions(river_count=0)) == []

    def test_no_sources(self, ramp_graph):
        assert create_rivers(ramp_graph, RiverOptions(min_source_height=1000)) == []

    def test_river_stops_at_water(self, ramp_graph):
        for river in create_rivers(ramp_graph):
            for point in river.points[:-1]:
                assert not any(node.node_type in WATER_TYPES for node in point.nodes())

    def test_points_not_repeated(self, ramp_graph):
        for river in create_rivers(ramp_graph):
            assert len(set(river.points)) == len(river.points)


class TestRiver:
    """Test river properties."""

    def test_length(self, ramp_graph):
        points = [ramp_graph.points[Point2(30.0, 30.0)], ramp_graph.points[Point2(30.0, 20.0)],
                  ramp_graph.points[Point2(20.0, 20.0)]]
        river = River(id=0, points=points, flow=1.0)

        assert river.source is points[0]
        assert river.mouth is points[-1]
        assert river.length == pytest.approx(20.0)
