"""End to end map graph generation."""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import structlog

from .config import Settings, settings
from .core.geometry import Rect
from .core.heights import HeightMap
from .core.hydrology import River, RiverOptions, create_rivers
from .core.map_graph import MapGraph
from .core.node_types import NodeTypeOptions, assign_node_types
from .core.sampling import poisson_disk_sample
from .core.voronoi_graph import VoronoiDiagram, relax_points

logger = structlog.get_logger()


@dataclass
class MapGenerationConfig:
    """Parameters of one map generation run."""
    width: float
    height: float
    min_site_distance: float
    seed: Optional[int] = None
    relax_iterations: int = 0
    snap_distance: float = 0.0
    edge_epsilon: float = 0.001
    opposite_tolerance: float = 0.5
    node_types: NodeTypeOptions = field(default_factory=NodeTypeOptions)
    rivers: RiverOptions = field(default_factory=RiverOptions)

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "MapGenerationConfig":
        return cls(
            width=source.map_width,
            height=source.map_height,
            min_site_distance=source.min_site_distance,
            seed=source.seed,
            relax_iterations=source.relax_iterations,
            snap_distance=source.snap_distance,
            edge_epsilon=source.edge_epsilon,
            opposite_tolerance=source.opposite_tolerance,
            node_types=NodeTypeOptions(
                sea_level=source.sea_level,
                mountain_level=source.mountain_level,
                snow_level=source.snow_level,
            ),
            rivers=RiverOptions(
                river_count=source.river_count,
                min_source_height=source.river_source_height,
            ),
        )

    @property
    def bounds(self) -> Rect:
        return Rect.from_size(self.width, self.height)


@dataclass
class MapGenerationResult:
    """Everything produced by one run."""
    sites: np.ndarray
    graph: MapGraph
    rivers: List[River] = field(default_factory=list)


def generate_map_graph(config: Optional[MapGenerationConfig] = None,
                       height_map: Optional[HeightMap] = None) -> MapGenerationResult:
    """
    Sample sites, build the Voronoi map graph and derive terrain from it.

    Node typing and rivers need elevation, so they only run when a height
    map is given.
    """
    config = config or MapGenerationConfig.from_settings()
    logger.info("Generating map graph", width=config.width, height=config.height,
                min_site_distance=config.min_site_distance, seed=config.seed)

    bounds = config.bounds
    sites = poisson_disk_sample(bounds, config.min_site_distance, config.seed)
    if config.relax_iterations > 0:
        sites = relax_points(sites, bounds, config.relax_iterations)

    voronoi = VoronoiDiagram.from_points(sites, bounds)
    graph = MapGraph(
        voronoi,
        height_map=height_map,
        snap_distance=config.snap_distance,
        opposite_tolerance=config.opposite_tolerance,
        edge_epsilon=config.edge_epsilon,
    )

    rivers = []
    if height_map is not None:
        assign_node_types(graph, config.node_types)
        rivers = create_rivers(graph, config.rivers)

    problems = graph.validate()
    if problems:
        logger.warning("Map graph has structural problems", count=len(problems), first=problems[0])

    return MapGenerationResult(sites=sites, graph=graph, rivers=rivers)
