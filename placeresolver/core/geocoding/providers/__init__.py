"""Geocoding provider adapters."""

from placeresolver.core.config import ProviderSettings, Settings
from placeresolver.core.geocoding.providers.base import GeocodingProvider, Provider
from placeresolver.core.geocoding.providers.google import GoogleProvider
from placeresolver.core.geocoding.providers.mapbox import MapboxProvider
from placeresolver.core.geocoding.providers.nominatim import NominatimProvider

PROVIDER_CLASSES: dict[str, type[GeocodingProvider]] = {
    NominatimProvider.name: NominatimProvider,
    MapboxProvider.name: MapboxProvider,
    GoogleProvider.name: GoogleProvider,
}


def build_provider(provider_settings: ProviderSettings, timeout: float) -> GeocodingProvider:
    """Create one adapter from its settings.

    Raises:
        ValueError: Unknown provider name
    """
    try:
        provider_cls = PROVIDER_CLASSES[provider_settings.name]
    except KeyError:
        raise ValueError(f"Unknown geocoding provider: {provider_settings.name}") from None
    return provider_cls(
        enabled=provider_settings.enabled,
        priority=provider_settings.priority,
        timeout=timeout,
        **provider_settings.options,
    )


def build_providers(settings: Settings) -> list[GeocodingProvider]:
    """Create every known adapter from settings, enabled or not."""
    return [
        build_provider(provider_settings, settings.request_timeout)
        for provider_settings in settings.provider_settings()
    ]


__all__ = [
    "GeocodingProvider",
    "Provider",
    "NominatimProvider",
    "MapboxProvider",
    "GoogleProvider",
    "PROVIDER_CLASSES",
    "build_provider",
    "build_providers",
]
