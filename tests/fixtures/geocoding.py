"""Geocoding test fixtures: stub providers, a controllable clock, result builders."""

import threading
import time
from collections.abc import Callable, Iterator, Sequence
from typing import Any, Optional

import pytest

from placeresolver.core.geocoding.cache import GeocodeCache
from placeresolver.core.geocoding.chain import ProviderChain
from placeresolver.core.geocoding.disambiguator import Disambiguator
from placeresolver.core.geocoding.models import (
    Coordinates,
    GeocodeResult,
    PlaceComponents,
    PlaceMatch,
    PlaceType,
    ProviderResult,
    ResolveOptions,
)
from placeresolver.core.geocoding.service import GeocodingService


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider:
    """Provider double that returns a canned result or raises a canned error.

    ``responses`` maps exact query text to a result and takes precedence.
    """

    def __init__(
        self,
        name: str,
        priority: int = 1,
        enabled: bool = True,
        result: Optional[ProviderResult] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        responses: Optional[dict[str, ProviderResult]] = None,
    ) -> None:
        self.name = name
        self._priority = priority
        self._enabled = enabled
        self.result = result
        self.error = error
        self.delay = delay
        self.responses = responses or {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def query(self, text: str, options: ResolveOptions) -> ProviderResult:
        with self._lock:
            self.calls.append(text)
        if self.delay:
            time.sleep(self.delay)
        if text in self.responses:
            return self.responses[text]
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


def make_match(
    display_name: str,
    lat: float,
    lng: float,
    confidence: float,
    place_type: PlaceType = PlaceType.CITY,
) -> PlaceMatch:
    """Build a PlaceMatch for use as a raw alternative."""
    return PlaceMatch(
        display_name=display_name,
        coordinates=Coordinates(lat=lat, lng=lng),
        raw_confidence=confidence,
        place_type=place_type,
    )


def make_result(
    provider: str,
    display_name: str,
    lat: float,
    lng: float,
    confidence: float,
    priority: int = 1,
    place_type: PlaceType = PlaceType.CITY,
    components: Optional[PlaceComponents] = None,
    alternatives: Sequence[PlaceMatch] = (),
) -> ProviderResult:
    """Build a ProviderResult as an adapter would."""
    return ProviderResult(
        provider=provider,
        priority=priority,
        display_name=display_name,
        coordinates=Coordinates(lat=lat, lng=lng),
        raw_confidence=confidence,
        place_type=place_type,
        components=components or PlaceComponents(),
        raw_alternatives=tuple(alternatives),
    )


def stub_provider(
    name: str,
    display_name: str = "Austin, Texas, United States",
    lat: float = 30.2672,
    lng: float = -97.7431,
    confidence: float = 0.9,
    priority: int = 1,
    **kwargs: Any,
) -> StubProvider:
    """Build a StubProvider returning a single result."""
    place_type = kwargs.pop("place_type", PlaceType.CITY)
    components = kwargs.pop("components", None)
    alternatives = kwargs.pop("alternatives", ())
    return StubProvider(
        name,
        priority=priority,
        result=make_result(
            name,
            display_name,
            lat,
            lng,
            confidence,
            priority=priority,
            place_type=place_type,
            components=components,
            alternatives=alternatives,
        ),
        **kwargs,
    )


def make_geocode_result(query: str = "austin", confidence: float = 0.9) -> GeocodeResult:
    """Build a final GeocodeResult for cache tests."""
    return GeocodeResult(
        query=query,
        display_name=f"{query.title()}, Somewhere",
        coordinates=Coordinates(lat=30.0, lng=-97.0),
        confidence=confidence,
        type=PlaceType.CITY,
        providers=("nominatim",),
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    """Controllable clock for cache expiry tests."""
    return FakeClock()


@pytest.fixture
def make_service(
    fake_clock: FakeClock,
) -> Iterator[Callable[..., GeocodingService]]:
    """Factory building a service over the given providers.

    Chains created through the factory are closed after the test.
    """
    services: list[GeocodingService] = []

    def _make(
        providers: Sequence[Any],
        request_timeout: float = 1.0,
        acceptance_threshold: float = 0.5,
        cache_expiry: float = 3600.0,
        max_cache_size: int = 100,
        max_workers: int = 8,
        **disambiguator_kwargs: Any,
    ) -> GeocodingService:
        service = GeocodingService(
            chain=ProviderChain(
                providers,
                request_timeout=request_timeout,
                acceptance_threshold=acceptance_threshold,
                max_workers=max_workers,
            ),
            cache=GeocodeCache(
                cache_expiry=cache_expiry,
                max_cache_size=max_cache_size,
                clock=fake_clock,
            ),
            disambiguator=Disambiguator(**disambiguator_kwargs),
        )
        services.append(service)
        return service

    yield _make

    for service in services:
        service.close()
