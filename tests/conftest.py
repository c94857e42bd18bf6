"""Hand built Voronoi diagrams shared by the tests."""

import pytest

from py_mapgraph.core.geometry import Point2, Rect
from py_mapgraph.core.voronoi_graph import VoronoiDiagram, VoronoiEdge


def grid_diagram(n: int, cell: float) -> VoronoiDiagram:
    """
    Square cells: n x n sites on a regular grid.

    Edges along the plot bounds are not part of the diagram.
    """
    def site(i, j):
        return Point2((i + 0.5) * cell, (j + 0.5) * cell)

    sites = [site(i, j) for j in range(n) for i in range(n)]
    edges = []
    for i in range(n - 1):
        for j in range(n):
            x = (i + 1) * cell
            edges.append(VoronoiEdge(Point2(x, j * cell), Point2(x, (j + 1) * cell),
                                     site(i, j), site(i + 1, j)))
    for i in range(n):
        for j in range(n - 1):
            y = (j + 1) * cell
            edges.append(VoronoiEdge(Point2(i * cell, y), Point2((i + 1) * cell, y),
                                     site(i, j), site(i, j + 1)))
    return VoronoiDiagram(sites, edges, Rect(0.0, 0.0, n * cell, n * cell))


# Four sites around a short vertical edge P-Q shared by LEFT and RIGHT
LEFT = Point2(3.0, 10.0)
RIGHT = Point2(17.0, 10.0)
TOP = Point2(10.0, 17.2)
BOTTOM = Point2(10.0, 2.8)
P = Point2(10.0, 10.2)
Q = Point2(10.0, 9.8)


def short_edge_diagram(right_copy_offset: float = 0.0) -> VoronoiDiagram:
    """
    Four cells on a 20 x 20 map where LEFT and RIGHT share an edge of length 0.4.

    With ``right_copy_offset`` the RIGHT cell gets its own, shifted copy of
    the shared edge, which leaves both cells without a matching opposite.
    """
    a = Point2(0.0, 19.9)
    c = Point2(20.0, 19.9)
    d = Point2(0.0, 0.1)
    e = Point2(20.0, 0.1)
    edges = [
        VoronoiEdge(P, a, LEFT, TOP),
        VoronoiEdge(P, c, RIGHT, TOP),
        VoronoiEdge(Q, d, LEFT, BOTTOM),
        VoronoiEdge(Q, e, RIGHT, BOTTOM),
    ]
    if right_copy_offset:
        shifted_p = Point2(P.x + right_copy_offset, P.y)
        shifted_q = Point2(Q.x + right_copy_offset, Q.y)
        edges.append(VoronoiEdge(P, Q, LEFT, None))
        edges.append(VoronoiEdge(shifted_p, shifted_q, None, RIGHT))
    else:
        edges.append(VoronoiEdge(P, Q, LEFT, RIGHT))
    return VoronoiDiagram([LEFT, RIGHT, TOP, BOTTOM], edges, Rect(0.0, 0.0, 20.0, 20.0))


@pytest.fixture
def quad_diagram():
    """2 x 2 cells on a 10 x 10 map."""
    return grid_diagram(2, 5.0)


@pytest.fixture
def grid3_diagram():
    """3 x 3 cells on a 30 x 30 map."""
    return grid_diagram(3, 10.0)
