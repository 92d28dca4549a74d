"""
Grid image export

Renders a TileGrid as an RGB image, one block of scale x scale pixels per
tile, colored with each tile type's default color. Row 0 (north) is the top
of the image.
"""

import os
from typing import Dict, Optional, Tuple

import numpy as np
from loguru import logger
from PIL import Image

from .grid.tile_grid import TileGrid
from .grid.tiles import TileType


def grid_to_array(grid: TileGrid, palette: Optional[Dict[TileType, Tuple[int, int, int]]] = None) -> np.ndarray:
    """(height, width, 3) uint8 array of tile colors"""
    palette = palette or {}
    colors = np.zeros((grid.height, grid.width, 3), dtype=np.uint8)

    # Many cells share a type; look each color up once
    cache: Dict[TileType, Tuple[int, int, int]] = {}
    for x, y, tile in grid.iter_tiles():
        tile_type = tile.tile_type
        if tile_type not in cache:
            cache[tile_type] = palette.get(tile_type, tile_type.default_color())
        colors[y, x] = cache[tile_type]

    return colors


def grid_to_image(
    grid: TileGrid,
    scale: int = 1,
    palette: Optional[Dict[TileType, Tuple[int, int, int]]] = None,
) -> Image.Image:
    """
    Render grid as a PIL image

    Args:
        grid: Grid to render
        scale: Pixels per tile edge
        palette: Optional color overrides by tile type

    Returns:
        RGB image of size (width * scale, height * scale)
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")

    colors = grid_to_array(grid, palette)
    if scale > 1:
        colors = np.repeat(np.repeat(colors, scale, axis=0), scale, axis=1)

    return Image.fromarray(colors)


def save_png(grid: TileGrid, path: str, scale: int = 1) -> str:
    """Save grid rendering as PNG"""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    image = grid_to_image(grid, scale=scale)
    image.save(path, format="PNG")
    logger.info(f"Saved {image.width}x{image.height} grid image to {path}")
    return path
