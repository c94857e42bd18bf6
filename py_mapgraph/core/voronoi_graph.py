"""Raw Voronoi tessellation consumed by the map graph builder."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import structlog
from scipy.spatial import Voronoi, cKDTree

from .geometry import Point2, Rect

logger = structlog.get_logger()


@dataclass
class LineSegment:
    """Boundary segment of one cell. ``p1`` may be moved while repairing rings."""
    p0: Point2
    p1: Point2


@dataclass
class VoronoiEdge:
    """One Voronoi edge, clipped to the plot bounds."""
    left_end: Point2
    right_end: Point2
    left_site: Optional[Point2] = None
    right_site: Optional[Point2] = None
    visible: bool = True


class VoronoiDiagram:
    """
    Voronoi edges grouped by the sites they separate.

    The diagram never contains the edges of the plot bounds themselves,
    cells on the border of the map are left open on that side.
    """

    def __init__(self, sites: Iterable[Sequence[float]], edges: Iterable[VoronoiEdge],
                 plot_bounds: Rect):
        self.plot_bounds = plot_bounds
        self._sites = [Point2(float(x), float(y)) for x, y in sites]
        if not self._sites:
            raise ValueError("Voronoi diagram needs at least one site")
        self._edges = list(edges)
        self._tree = cKDTree(np.array(self._sites, dtype=float))

        self._edges_by_site: Dict[Point2, List[VoronoiEdge]] = {site: [] for site in self._sites}
        for edge in self._edges:
            for site in (edge.left_site, edge.right_site):
                if site is not None and site in self._edges_by_site:
                    self._edges_by_site[site].append(edge)

    @classmethod
    def from_points(cls, points, plot_bounds: Rect) -> "VoronoiDiagram":
        """
        Compute the diagram of ``points`` clipped to ``plot_bounds``.

        Args:
            points: Array-like of [x, y] seed coordinates, strictly inside the bounds
            plot_bounds: Rectangle the cells are clipped to

        Returns:
            VoronoiDiagram without the rectangle's own edges
        """
        points = _validate_points(points, plot_bounds)
        n_points = len(points)

        logger.info("Computing Voronoi diagram", sites=n_points)
        vor = _mirrored_voronoi(points, plot_bounds)

        low = [plot_bounds.x_min, plot_bounds.y_min]
        high = [plot_bounds.x_max, plot_bounds.y_max]
        vertices = np.clip(vor.vertices, low, high)

        edges = []
        skipped = 0
        for (p1, p2), ridge_vertices in zip(vor.ridge_points, vor.ridge_vertices):
            # Ridges against reflected points are the plot bounds
            if p1 >= n_points or p2 >= n_points:
                continue
            if -1 in ridge_vertices:
                skipped += 1
                continue
            v1, v2 = ridge_vertices
            edges.append(VoronoiEdge(
                left_end=Point2(float(vertices[v1][0]), float(vertices[v1][1])),
                right_end=Point2(float(vertices[v2][0]), float(vertices[v2][1])),
                left_site=Point2(float(points[p1][0]), float(points[p1][1])),
                right_site=Point2(float(points[p2][0]), float(points[p2][1])),
            ))

        if skipped:
            logger.warning("Unbounded ridges between sites skipped", count=skipped)
        logger.info("Voronoi diagram calculated", edges=len(edges), vertices=len(vor.vertices))

        return cls(points.tolist(), edges, plot_bounds)

    def site_coords(self) -> List[Point2]:
        return list(self._sites)

    def edges(self) -> List[VoronoiEdge]:
        return list(self._edges)

    def nearest_site_point(self, x: float, y: float) -> Point2:
        _, index = self._tree.query([x, y])
        return self._sites[int(index)]

    def voronoi_boundary_for_site(self, site: Point2) -> List[LineSegment]:
        """Visible edges of one site as fresh, unordered segments."""
        return [
            LineSegment(edge.left_end, edge.right_end)
            for edge in self._edges_by_site.get(site, [])
            if edge.visible
        ]

    def neighbor_sites_for_site(self, site: Point2) -> List[Point2]:
        neighbors = []
        for edge in self._edges_by_site.get(site, []):
            other = edge.right_site if edge.left_site == site else edge.left_site
            if other is not None and other not in neighbors:
                neighbors.append(other)
        return neighbors


def _validate_points(points, plot_bounds: Rect) -> np.ndarray:
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[1] != 2 or len(points) == 0:
        raise ValueError("points must be a non-empty array of [x, y] coordinates")

    inside = (
        (points[:, 0] > plot_bounds.x_min) & (points[:, 0] < plot_bounds.x_max)
        & (points[:, 1] > plot_bounds.y_min) & (points[:, 1] < plot_bounds.y_max)
    )
    if not np.all(inside):
        raise ValueError(f"{int(np.sum(~inside))} points are not strictly inside the plot bounds")

    if len(np.unique(points, axis=0)) != len(points):
        raise ValueError("points must be distinct")
    return points


def _mirrored_voronoi(points: np.ndarray, plot_bounds: Rect) -> Voronoi:
    """
    Voronoi of the points plus their reflections across the four bounds.

    Every real cell of the result is the unclipped cell intersected with the
    plot bounds, and is therefore finite.
    """
    left = points.copy()
    left[:, 0] = 2 * plot_bounds.x_min - left[:, 0]
    right = points.copy()
    right[:, 0] = 2 * plot_bounds.x_max - right[:, 0]
    bottom = points.copy()
    bottom[:, 1] = 2 * plot_bounds.y_min - bottom[:, 1]
    top = points.copy()
    top[:, 1] = 2 * plot_bounds.y_max - top[:, 1]
    return Voronoi(np.vstack([points, left, right, bottom, top]))


def compute_polygon_centroid(vertices: np.ndarray) -> np.ndarray:
    """Centroid of a polygon (shoelace formula), mean for degenerate ones."""
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    x = vertices[:, 0]
    y = vertices[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)
    a = x * y_next - x_next * y
    area = a.sum()
    if abs(area) < 1e-10:
        return np.mean(vertices, axis=0)

    area *= 0.5
    cx = ((x + x_next) * a).sum() / (6.0 * area)
    cy = ((y + y_next) * a).sum() / (6.0 * area)
    return np.array([cx, cy])


def relax_points(points, plot_bounds: Rect, n_iterations: int = 1) -> np.ndarray:
    """
    Lloyd's relaxation: move every point to the centroid of its clipped cell.

    Args:
        points: Seed points strictly inside the bounds
        plot_bounds: Clipping rectangle
        n_iterations: Number of relaxation passes

    Returns:
        Relaxed copy of the points
    """
    points = _validate_points(points, plot_bounds).copy()
    logger.info("Starting Lloyd's relaxation", iterations=n_iterations)

    # Centroids of cells touching a border can land on it
    margin = 10.0 ** -3
    for iteration in range(n_iterations):
        vor = _mirrored_voronoi(points, plot_bounds)
        for i in range(len(points)):
            region = vor.regions[vor.point_region[i]]
            if -1 in region or len(region) < 3:
                continue
            centroid = compute_polygon_centroid(vor.vertices[region])
            points[i][0] = np.clip(centroid[0], plot_bounds.x_min + margin, plot_bounds.x_max - margin)
            points[i][1] = np.clip(centroid[1], plot_bounds.y_min + margin, plot_bounds.y_max - margin)

        logger.info("Relaxation iteration complete", iteration=iteration + 1)

    return points
