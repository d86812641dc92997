"""Geocoding resolution service.

This module provides the public entry point that:
- Rejects empty queries before any provider is called
- Serves repeated queries from an in-memory cache
- Falls back across providers in priority order
- Picks the best match and ranks alternatives across providers
"""

import time
from collections.abc import Callable, Sequence
from typing import Optional

from placeresolver.core.config import Settings
from placeresolver.core.geocoding.cache import GeocodeCache
from placeresolver.core.geocoding.chain import ProviderChain
from placeresolver.core.geocoding.constants import (
    FUZZY_ACCEPT_ABOVE,
    FUZZY_MAX_RESULTS,
    FUZZY_RETRY_BELOW,
)
from placeresolver.core.geocoding.disambiguator import Disambiguator
from placeresolver.core.geocoding.errors import ErrorKind, GeocodingError
from placeresolver.core.geocoding.models import CacheStats, GeocodeResult, ResolveOptions
from placeresolver.core.geocoding.normalizer import cache_key, provider_text, typo_variations
from placeresolver.core.geocoding.providers import build_providers
from placeresolver.core.geocoding.providers.base import Provider
from placeresolver.core.logging import get_logger, get_query_logger

logger = get_logger(__name__)


class GeocodingService:
    """Resolve free-text place descriptions to one best match.

    One instance owns its cache for the life of the process. ``resolve``
    is safe to call from many threads; concurrent misses for the same key
    are not coalesced and the last writer wins.
    """

    def __init__(
        self,
        chain: ProviderChain,
        cache: Optional[GeocodeCache] = None,
        disambiguator: Optional[Disambiguator] = None,
    ) -> None:
        """Initialize the service.

        Args:
            chain: Provider chain used on cache misses
            cache: Result cache; a default-sized one is created if omitted
            disambiguator: Result selector; defaults are used if omitted
        """
        self.chain = chain
        self.cache = cache or GeocodeCache()
        self.disambiguator = disambiguator or Disambiguator()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        providers: Optional[Sequence[Provider]] = None,
        clock: Callable[[], float] = time.time,
    ) -> "GeocodingService":
        """Build a service wired from configuration.

        Args:
            settings: Resolver settings
            providers: Adapters to use instead of the configured ones
            clock: Time source for the cache

        Returns:
            GeocodingService instance
        """
        chain = ProviderChain(
            providers if providers is not None else build_providers(settings),
            request_timeout=settings.request_timeout,
            acceptance_threshold=settings.GEOCODING_ACCEPTANCE_THRESHOLD,
            max_workers=settings.GEOCODING_MAX_WORKERS,
        )
        cache = GeocodeCache(
            cache_expiry=settings.GEOCODING_CACHE_EXPIRY,
            max_cache_size=settings.GEOCODING_MAX_CACHE_SIZE,
            clock=clock,
        )
        disambiguator = Disambiguator(
            min_confidence_threshold=settings.GEOCODING_MIN_CONFIDENCE,
            max_alternatives=settings.GEOCODING_MAX_ALTERNATIVES,
            tie_epsilon=settings.GEOCODING_TIE_EPSILON,
            dedupe_degrees=settings.GEOCODING_DEDUPE_DEGREES,
        )
        logger.info(
            "geocoding_service_initialized",
            providers=[
                {"name": p.name, "enabled": p.enabled, "priority": p.priority}
                for p in chain.providers
            ],
            cache_expiry=cache.cache_expiry,
            max_cache_size=cache.max_cache_size,
        )
        return cls(chain=chain, cache=cache, disambiguator=disambiguator)

    def resolve(
        self, query: str, options: Optional[ResolveOptions] = None
    ) -> GeocodeResult:
        """Resolve ``query`` to the best matching place.

        Args:
            query: Free-text place description
            options: Resolution options

        Returns:
            GeocodeResult, from cache when a live entry exists

        Raises:
            GeocodingError: ``EMPTY_QUERY`` for blank input,
                ``ALL_PROVIDERS_FAILED`` when no provider answered,
                ``NO_RESULTS`` (as NoResultsError) when providers answered
                with zero matches
        """
        if not query or not query.strip():
            raise GeocodingError(ErrorKind.EMPTY_QUERY, "query is empty")

        options = options or ResolveOptions()
        log = get_query_logger(query)
        key = cache_key(query, options.preferred_country)

        entry = self.cache.get(key)
        if entry is not None:
            log.debug("geocode_cache_served", key=key, hit_count=entry.hit_count)
            return entry.result

        text = provider_text(query)
        log.info("geocode_resolving", provider_text=text)
        outcome = self.chain.resolve(text, options)

        if not outcome.results:
            if outcome.all_failed:
                log.warning(
                    "geocode_all_providers_failed",
                    failures={name: e.label for name, e in outcome.failures.items()},
                )
                raise GeocodingError(
                    ErrorKind.ALL_PROVIDERS_FAILED,
                    f"no provider could resolve {query[:100]!r}",
                )
            log.info("geocode_no_results", consulted=outcome.consulted)

        # Raises NoResultsError when there is nothing to choose from
        result = self.disambiguator.select(outcome.results, query)
        self.cache.put(key, result)
        return result

    def fuzzy_resolve(
        self, query: str, options: Optional[ResolveOptions] = None
    ) -> list[GeocodeResult]:
        """Resolve ``query`` and, when that is weak, spacing variations of it.

        Args:
            query: Free-text place description
            options: Resolution options

        Returns:
            Up to five results, the direct result first when there is one.
            Results found through a variation carry it as ``suggestion``.

        Raises:
            GeocodingError: ``EMPTY_QUERY`` for blank input
        """
        results: list[GeocodeResult] = []
        direct: Optional[GeocodeResult] = None
        try:
            direct = self.resolve(query, options)
            results.append(direct)
        except GeocodingError as e:
            if e.kind == ErrorKind.EMPTY_QUERY:
                raise
            logger.info("fuzzy_direct_failed", query=query[:50], kind=e.kind.value)

        if direct is None or direct.confidence < FUZZY_RETRY_BELOW:
            for variation in typo_variations(query):
                try:
                    candidate = self.resolve(variation, options)
                except GeocodingError as e:
                    logger.debug("fuzzy_variation_failed", variation=variation, kind=e.kind.value)
                    continue
                if candidate.confidence > FUZZY_ACCEPT_ABOVE:
                    results.append(candidate.model_copy(update={"suggestion": variation}))

        return results[:FUZZY_MAX_RESULTS]

    def cache_stats(self) -> CacheStats:
        """Cache size and total hits, for observability."""
        return self.cache.stats()

    def close(self) -> None:
        """Release provider worker threads."""
        self.chain.close()

    def __enter__(self) -> "GeocodingService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def build_geocoding_service(settings: Optional[Settings] = None) -> GeocodingService:
    """Create a service from settings, the module-level ones by default."""
    if settings is None:
        from placeresolver.core.config import settings as default_settings

        settings = default_settings
    return GeocodingService.from_settings(settings)
