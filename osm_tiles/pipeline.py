"""
Tile grid pipeline

Orchestrates one generation run:

  1. Validate the configuration
  2. Fetch raw OSM data from the provider
  3. Parse and rasterize it onto a tile grid
  4. Compute grid statistics

Usage:
    pipeline = TileGridPipeline(MockProvider())
    result = pipeline.run(OSMConfig.for_city("berlin"))
    pipeline.save(result, "output/berlin.json")
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from loguru import logger

from .config import OSMConfig, validate_config
from .grid.generator import DefaultGridGenerator, GridGenerator
from .grid.tile_grid import GridStatistics, TileGrid
from .providers.base import OSMDataProvider, OSMMetadata


@dataclass
class GenerationResult:
    """Output of one pipeline run"""
    grid: TileGrid
    statistics: GridStatistics
    source: OSMMetadata
    config: OSMConfig

    def summary(self) -> Dict[str, Any]:
        meta = self.grid.metadata
        return {
            "provider": self.source.provider_type,
            "source": self.source.source,
            "bounding_box": list(self.grid.bounding_box.as_tuple()),
            "elements_processed": meta.elements_processed,
            "tiles_populated": meta.tiles_populated,
            "generation_time_ms": meta.generation_time_ms,
            "statistics": self.statistics.to_dict(),
        }


class TileGridPipeline:
    """Fetch OSM data with a provider and turn it into a tile grid"""

    def __init__(self, provider: OSMDataProvider, generator: Optional[GridGenerator] = None):
        self.provider = provider
        self.generator = generator or DefaultGridGenerator()

    def run(self, config: OSMConfig) -> GenerationResult:
        """
        Run the complete pipeline

        Args:
            config: Region, features and grid settings

        Returns:
            GenerationResult with the grid and its statistics

        Raises:
            ConfigError: If config is invalid
            NetworkError / GeographicError: If the provider fails
            ParseError: If the provider returned malformed data
        """
        validate_config(config)

        logger.info(f"Starting tile grid pipeline with '{self.provider.provider_type}' provider")

        # ============================================================
        # STAGE 1: Fetch
        # ============================================================
        logger.info("Stage 1: Fetching OSM data...")
        osm_data = self.provider.fetch_data(config)
        logger.info(
            f"Fetched {osm_data.size_bytes() / 1024:.1f} KB for bbox {osm_data.bounding_box.as_tuple()}"
        )

        # ============================================================
        # STAGE 2: Rasterize
        # ============================================================
        logger.info("Stage 2: Generating tile grid...")
        grid = self.generator.generate_grid(osm_data, config)

        # ============================================================
        # STAGE 3: Statistics
        # ============================================================
        statistics = grid.statistics()
        logger.info(
            f"Pipeline complete: {statistics.non_empty_tiles}/{statistics.total_tiles} tiles non-empty "
            f"({statistics.coverage_ratio:.1%} coverage)"
        )

        return GenerationResult(grid=grid, statistics=statistics, source=osm_data.metadata, config=config)

    def save(self, result: GenerationResult, output_path: str) -> str:
        """Save the generated grid to a JSON file"""
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        return result.grid.save(output_path)
