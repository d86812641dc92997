"""Error taxonomy for geocoding resolution.

Two layers:

- ``ProviderError`` and subclasses describe one adapter call going wrong.
  They are soft: the provider chain logs them and moves on.
- ``GeocodingError`` is the only error a caller of ``GeocodingService`` sees.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Caller-visible resolution failure kinds."""

    EMPTY_QUERY = "empty_query"
    NO_RESULTS = "no_results"
    ALL_PROVIDERS_FAILED = "all_providers_failed"


class GeocodingError(Exception):
    """Raised when a query cannot be resolved."""

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        self.kind = kind
        self.message = message or kind.value.replace("_", " ")
        super().__init__(f"{kind.value}: {self.message}")


class NoResultsError(GeocodingError):
    """Every consulted provider answered with zero matches."""

    def __init__(self, message: str = "no provider returned a match") -> None:
        super().__init__(ErrorKind.NO_RESULTS, message)


class ProviderError(Exception):
    """Base class for a failed provider call."""

    label = "provider_error"

    def __init__(self, provider: str, message: str = "") -> None:
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}" if message else provider)


class ProviderTimeout(ProviderError):
    """The provider did not answer within the per-call timeout."""

    label = "timeout"


class ProviderUnavailable(ProviderError):
    """Network, service or quota failure."""

    label = "unavailable"


class ProviderConfigurationError(ProviderError):
    """Missing or rejected credentials, or an invalid adapter setup."""

    label = "configuration"


class ProviderEmptyResult(ProviderError):
    """The call succeeded but matched nothing."""

    label = "empty"


class ProviderMalformedResponse(ProviderError):
    """The payload did not have the expected shape."""

    label = "malformed"
