"""
Error types for OSM tile grid generation

All errors derive from OSMTilesError. Concrete kinds also derive from the
closest builtin (ValueError, IndexError, RuntimeError) so callers that only
know the builtins still catch them.
"""

from typing import Optional


class OSMTilesError(Exception):
    """Base class for all osm_tiles errors"""


class ParseError(OSMTilesError, ValueError):
    """Malformed or structurally invalid OSM data"""


class ConfigError(OSMTilesError, ValueError):
    """Invalid configuration or provider selection"""


class GeographicError(OSMTilesError):
    """A region could not be resolved to coordinates"""


class GridGenerationError(OSMTilesError):
    """Grid generation failed"""


class GridBoundsError(GridGenerationError, IndexError):
    """Access to a grid cell outside the grid"""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(
            f"Coordinates ({x}, {y}) out of bounds for grid {width}x{height}"
        )


class NetworkError(OSMTilesError, RuntimeError):
    """Base class for transport failures while fetching OSM data"""


class HttpStatusError(NetworkError):
    def __init__(self, status: int, url: Optional[str] = None):
        self.status = status
        self.url = url
        super().__init__(f"HTTP request failed: {status}")


class RequestTimeoutError(NetworkError):
    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Request timed out after {seconds} seconds")


class ConnectionFailedError(NetworkError):
    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Connection error: {message}")
