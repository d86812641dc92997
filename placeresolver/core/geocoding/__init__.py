"""Geocoding resolution package.

This package resolves free-text place descriptions to coordinates:
- Query normalization for stable cache keys
- Bounded TTL cache with frequency-aware eviction
- Provider adapters (Nominatim, Mapbox, Google) behind one interface
- Priority-ordered provider chain with per-call timeouts
- Confidence-based disambiguation with ranked alternatives
"""

from placeresolver.core.geocoding.cache import GeocodeCache
from placeresolver.core.geocoding.chain import ChainOutcome, ProviderChain
from placeresolver.core.geocoding.disambiguator import Disambiguator
from placeresolver.core.geocoding.errors import (
    ErrorKind,
    GeocodingError,
    NoResultsError,
    ProviderConfigurationError,
    ProviderEmptyResult,
    ProviderError,
    ProviderMalformedResponse,
    ProviderTimeout,
    ProviderUnavailable,
)
from placeresolver.core.geocoding.models import (
    Alternative,
    CacheEntry,
    CacheStats,
    Coordinates,
    GeocodeResult,
    PlaceComponents,
    PlaceMatch,
    PlaceType,
    ProviderResult,
    ResolveOptions,
)
from placeresolver.core.geocoding.normalizer import normalize
from placeresolver.core.geocoding.service import (
    GeocodingService,
    build_geocoding_service,
)

__all__ = [
    "GeocodingService",
    "build_geocoding_service",
    "GeocodeCache",
    "ProviderChain",
    "ChainOutcome",
    "Disambiguator",
    "normalize",
    "ErrorKind",
    "GeocodingError",
    "NoResultsError",
    "ProviderError",
    "ProviderTimeout",
    "ProviderUnavailable",
    "ProviderConfigurationError",
    "ProviderEmptyResult",
    "ProviderMalformedResponse",
    "Alternative",
    "CacheEntry",
    "CacheStats",
    "Coordinates",
    "GeocodeResult",
    "PlaceComponents",
    "PlaceMatch",
    "PlaceType",
    "ProviderResult",
    "ResolveOptions",
]
