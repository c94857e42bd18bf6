"""Half-edge Voronoi map graphs for terrain generation."""

__version__ = "0.1.0"
