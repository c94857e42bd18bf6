"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings pulled from MAPGRAPH_* environment variables or a .env file."""

    # Map generation
    map_width: float = Field(default=256.0, gt=0, description="Map width")
    map_height: float = Field(default=256.0, gt=0, description="Map height")
    min_site_distance: float = Field(default=8.0, gt=0, description="Minimum distance between sites")
    relax_iterations: int = Field(default=0, ge=0, description="Lloyd relaxation passes")
    seed: int = Field(default=0, description="Random seed for site sampling")

    # Mesh construction
    snap_distance: float = Field(default=1.0, ge=0, description="Points closer than this are merged, 0 disables")
    edge_epsilon: float = Field(default=0.001, gt=0, description="Segments shorter than this are dropped")
    opposite_tolerance: float = Field(default=0.5, gt=0, description="Max drift between opposite edge ends")

    # Terrain
    sea_level: float = Field(default=20.0, description="Nodes below this are water")
    mountain_level: float = Field(default=50.0, description="Nodes from this height are mountains")
    snow_level: float = Field(default=75.0, description="Nodes from this height are snow")
    river_count: int = Field(default=10, ge=0, description="Maximum number of rivers")
    river_source_height: float = Field(default=50.0, description="Minimum river source height")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    class Config:
        env_prefix = "MAPGRAPH_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
