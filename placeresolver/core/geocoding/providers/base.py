"""Provider adapter interface and the geopy-backed base adapter."""

from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable

from geopy.exc import (
    ConfigurationError,
    GeocoderAuthenticationFailure,
    GeocoderInsufficientPrivileges,
    GeocoderParseError,
    GeocoderServiceError,
    GeocoderTimedOut,
    GeocoderUnavailable,
    GeopyError,
)
from geopy.geocoders.base import Geocoder
from geopy.location import Location

from placeresolver.core.geocoding.constants import REQUEST_TIMEOUT_SECONDS
from placeresolver.core.geocoding.errors import (
    ProviderConfigurationError,
    ProviderEmptyResult,
    ProviderMalformedResponse,
    ProviderTimeout,
    ProviderUnavailable,
)
from placeresolver.core.geocoding.models import PlaceMatch, ProviderResult, ResolveOptions
from placeresolver.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class Provider(Protocol):
    """What the provider chain needs from an adapter."""

    name: str

    @property
    def enabled(self) -> bool: ...

    @property
    def priority(self) -> int: ...

    def query(self, text: str, options: ResolveOptions) -> ProviderResult: ...


class GeocodingProvider(ABC):
    """Base class for adapters wrapping a geopy geocoder.

    Subclasses build the geopy geocoder, run the search and map each geopy
    ``Location`` to a ``PlaceMatch`` whose confidence is already on the
    shared ``[0, 1]`` scale. This class turns geopy exceptions into the
    ``ProviderError`` taxonomy.
    """

    name = "provider"

    def __init__(
        self,
        enabled: bool = True,
        priority: int = 1,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        geocoder: Optional[Geocoder] = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            enabled: Whether the adapter may participate in the chain
            priority: Chain position, 1 = tried first
            timeout: HTTP timeout passed to geopy, in seconds
            geocoder: Prebuilt geopy geocoder, mainly for tests
        """
        if priority < 1:
            raise ValueError(f"priority must be >= 1, got {priority}")
        self._enabled = enabled
        self._priority = priority
        self.timeout = timeout
        self._geocoder = geocoder

    @property
    def enabled(self) -> bool:
        """Enabled by configuration and has what it needs to run."""
        return self._enabled and self.is_configured()

    @property
    def priority(self) -> int:
        return self._priority

    def is_configured(self) -> bool:
        """Whether required credentials are present."""
        return True

    @property
    def geocoder(self) -> Geocoder:
        """The geopy geocoder, built on first use."""
        if self._geocoder is None:
            self._geocoder = self._build_geocoder()
        return self._geocoder

    @abstractmethod
    def _build_geocoder(self) -> Geocoder:
        """Create the geopy geocoder for this provider."""
        raise NotImplementedError

    @abstractmethod
    def _search(self, text: str, options: ResolveOptions) -> Any:
        """Run the geopy search. May return a list, one Location, or None."""
        raise NotImplementedError

    @abstractmethod
    def _to_match(self, location: Location, rank: int, text: str) -> PlaceMatch:
        """Map one geopy Location to a PlaceMatch.

        Args:
            location: Location with the provider's raw payload in ``raw``
            rank: Position in the provider's answer, 0 = first
            text: Query text sent to the provider
        """
        raise NotImplementedError

    def query(self, text: str, options: Optional[ResolveOptions] = None) -> ProviderResult:
        """Geocode ``text`` with this provider.

        Args:
            text: Query text
            options: Resolution options

        Returns:
            ProviderResult with the best match first

        Raises:
            ProviderConfigurationError: Missing or rejected credentials
            ProviderTimeout: The HTTP call timed out
            ProviderUnavailable: Network, service or quota failure
            ProviderEmptyResult: No matches
            ProviderMalformedResponse: Unexpected payload
        """
        options = options or ResolveOptions()
        if not self.is_configured():
            raise ProviderConfigurationError(self.name, "credentials not configured")

        try:
            raw_locations = self._search(text, options)
        except GeocoderTimedOut as e:
            raise ProviderTimeout(self.name, str(e)) from e
        except (
            GeocoderAuthenticationFailure,
            GeocoderInsufficientPrivileges,
            ConfigurationError,
        ) as e:
            raise ProviderConfigurationError(self.name, str(e)) from e
        except GeocoderParseError as e:
            raise ProviderMalformedResponse(self.name, str(e)) from e
        except (GeocoderUnavailable, GeocoderServiceError, GeopyError) as e:
            raise ProviderUnavailable(self.name, str(e)) from e

        if raw_locations is None:
            locations: list[Location] = []
        elif isinstance(raw_locations, Location):
            locations = [raw_locations]
        else:
            locations = list(raw_locations)

        if not locations:
            raise ProviderEmptyResult(self.name, f"no match for {text[:50]!r}")

        try:
            matches = [
                self._to_match(location, rank, text)
                for rank, location in enumerate(locations)
            ]
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise ProviderMalformedResponse(
                self.name, f"{type(e).__name__}: {e}"
            ) from e

        # Stable: provider order breaks confidence ties
        matches.sort(key=lambda m: m.raw_confidence, reverse=True)
        matches = matches[: options.max_results]

        logger.debug(
            "provider_query_ok",
            provider=self.name,
            matches=len(matches),
            best=matches[0].display_name,
            confidence=matches[0].raw_confidence,
        )
        return ProviderResult.from_matches(self.name, self.priority, matches)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(enabled={self.enabled}, priority={self.priority})"
        )
