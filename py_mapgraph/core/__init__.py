"""
Core map graph functionality.
"""

from .geometry import Point2, Point3, Rect
from .heights import HeightMap, update_heights
from .hydrology import River, RiverOptions, create_rivers
from .map_graph import MapGraph
from .map_types import MapNode, MapNodeHalfEdge, MapNodeType, MapPoint
from .node_types import NodeTypeOptions, assign_node_types
from .sampling import get_jittered_grid, poisson_disk_sample
from .snapping import snap_points
from .voronoi_graph import LineSegment, VoronoiDiagram, VoronoiEdge, relax_points

__all__ = ['Point2', 'Point3', 'Rect', 'HeightMap', 'update_heights',
           'River', 'RiverOptions', 'create_rivers', 'MapGraph',
           'MapNode', 'MapNodeHalfEdge', 'MapNodeType', 'MapPoint',
           'NodeTypeOptions', 'assign_node_types', 'get_jittered_grid',
           'poisson_disk_sample', 'snap_points', 'LineSegment', 'VoronoiDiagram',
           'VoronoiEdge', 'relax_points']
