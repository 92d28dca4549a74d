"""
OSM data providers

Modular providers behind one interface:
- Base: OSMDataProvider, OSMData, OSMMetadata, ProviderCapabilities
- Overpass: Overpass API with Nominatim geocoding and an optional disk cache
- Mock: Canned offline data for tests and development
- File: Local Overpass JSON / OSM XML exports
"""

from typing import List

from ..errors import ConfigError
from .base import OSMData, OSMDataFormat, OSMDataProvider, OSMMetadata, ProviderCapabilities
from .cache import OSMCache
from .file import FileProvider
from .mock import MockProvider
from .overpass import OverpassProvider

PROVIDERS = {
    "overpass": OverpassProvider,
    "mock": MockProvider,
    "file": FileProvider,
}


def available_providers() -> List[str]:
    return list(PROVIDERS)


def create_provider(name: str, **kwargs) -> OSMDataProvider:
    """
    Create a provider by name

    Args:
        name: One of available_providers()
        **kwargs: Passed to the provider constructor (e.g. file_path for "file")

    Raises:
        ConfigError: If the name is unknown
    """
    provider_cls = PROVIDERS.get(name.lower())
    if provider_cls is None:
        raise ConfigError(
            f"Unknown provider: '{name}'. Available providers: {', '.join(available_providers())}"
        )
    return provider_cls(**kwargs)


__all__ = [
    "OSMData",
    "OSMDataFormat",
    "OSMDataProvider",
    "OSMMetadata",
    "ProviderCapabilities",
    "OSMCache",
    "FileProvider",
    "MockProvider",
    "OverpassProvider",
    "available_providers",
    "create_provider",
]
