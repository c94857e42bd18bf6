"""Elevation from an external height field."""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

import numpy as np

from .geometry import Point3

if TYPE_CHECKING:
    from .map_graph import MapGraph


@dataclass
class HeightMap:
    """2D elevation grid indexed as ``values[x, y]``."""
    values: np.ndarray

    def __post_init__(self):
        self.values = np.asarray(self.values, dtype=float)
        if self.values.ndim != 2:
            raise ValueError(f"Height map must be 2D, got shape {self.values.shape}")

    @property
    def width(self) -> int:
        return self.values.shape[0]

    @property
    def height(self) -> int:
        return self.values.shape[1]


def update_heights(graph: "MapGraph", height_map: Union[HeightMap, np.ndarray]):
    """
    Set the elevation of every node center and point from the height map.

    Positions are looked up by the floor of their horizontal coordinates.
    Positions outside the grid keep their current elevation.
    """
    if not isinstance(height_map, HeightMap):
        height_map = HeightMap(height_map)
    values = height_map.values
    x_max, y_max = height_map.width, height_map.height

    for node in graph.nodes_by_center_position.values():
        node.center_point = update_height(values, node.center_point, x_max, y_max)
        node.reset_height_difference()
    for point in graph.points.values():
        point.position = update_height(values, point.position, x_max, y_max)


def update_height(values: np.ndarray, position: Point3, x_max: int, y_max: int) -> Point3:
    x = math.floor(position.x)
    y = math.floor(position.y)
    if 0 <= x < x_max and 0 <= y < y_max:
        return position._replace(z=float(values[x, y]))
    return position
