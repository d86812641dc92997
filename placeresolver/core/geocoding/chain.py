"""Ordered provider fallback with per-call timeouts."""

import concurrent.futures
import threading
import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from placeresolver.core.geocoding.constants import (
    ACCEPTANCE_THRESHOLD,
    REQUEST_TIMEOUT_SECONDS,
)
from placeresolver.core.geocoding.errors import (
    ProviderEmptyResult,
    ProviderError,
    ProviderTimeout,
    ProviderUnavailable,
)
from placeresolver.core.geocoding.models import ProviderResult, ResolveOptions
from placeresolver.core.geocoding.providers.base import Provider
from placeresolver.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ChainOutcome:
    """What one pass over the providers produced.

    ``results`` and ``consulted`` keep provider order, which the
    disambiguator uses as a tie-break.
    """

    results: list[ProviderResult] = field(default_factory=list)
    failures: dict[str, ProviderError] = field(default_factory=dict)
    empty: list[str] = field(default_factory=list)
    consulted: list[str] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        """No provider answered, either because all errored or none ran."""
        return not self.results and not self.empty


class ProviderCall:
    """One provider query handed to a worker thread.

    The timeout is measured from the moment a worker starts the call, so
    time spent queued behind other calls does not count against it.
    """

    def __init__(self, provider: Provider, query: str, options: ResolveOptions) -> None:
        self.provider = provider
        self.query = query
        self.options = options
        self.future: Optional["Future[ProviderResult]"] = None
        self.started = threading.Event()
        self.started_at = 0.0

    def run(self) -> ProviderResult:
        self.started_at = time.monotonic()
        self.started.set()
        return self.provider.query(self.query, self.options)

    def result(self, timeout: float) -> ProviderResult:
        """Wait for the provider's answer.

        Args:
            timeout: Seconds allowed for the call once it starts, and for
                waiting on a free worker before that

        Returns:
            The provider's result

        Raises:
            ProviderUnavailable: The call was never submitted
            ProviderTimeout: No free worker or no answer in time
            ProviderError: Whatever the adapter raised
        """
        name = self.provider.name
        if self.future is None:
            raise ProviderUnavailable(name, "previous call still running")
        if not self.started.wait(timeout) and self.future.cancel():
            raise ProviderTimeout(name, f"no free worker within {timeout:.1f}s")
        # A call that could not be cancelled has been picked up
        self.started.wait()
        remaining = self.started_at + timeout - time.monotonic()
        try:
            return self.future.result(timeout=max(0.0, remaining))
        except concurrent.futures.TimeoutError:
            raise ProviderTimeout(name, f"no answer within {timeout:.1f}s") from None


class ProviderChain:
    """Runs enabled providers in priority order.

    Without ``include_alternatives`` providers run one at a time and the
    chain stops at the first result whose confidence reaches the acceptance
    threshold. With it, every enabled provider is queried concurrently and
    each call gets the same per-call timeout, so alternatives can span
    providers.

    Each provider has its own worker pool so a hung backend only ties up
    its own threads. A provider whose timed-out call is still running is
    skipped until that call returns.

    Provider failures never escape: they are logged and recorded on the
    returned ``ChainOutcome``.
    """

    def __init__(
        self,
        providers: Sequence[Provider],
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
        acceptance_threshold: float = ACCEPTANCE_THRESHOLD,
        max_workers: int = 8,
    ) -> None:
        """Initialize the chain.

        Args:
            providers: Adapters in registration order
            request_timeout: Per-call timeout in seconds
            acceptance_threshold: Confidence that stops the chain early
            max_workers: Threads available to each provider
        """
        if request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {request_timeout}")
        self.providers = list(providers)
        self.request_timeout = request_timeout
        self.acceptance_threshold = acceptance_threshold
        self._executors = {
            provider.name: ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix=f"geocode-{provider.name}"
            )
            for provider in self.providers
        }
        self._lock = threading.Lock()
        self._abandoned: dict[str, int] = {}

    def ordered_providers(self) -> list[Provider]:
        """Enabled providers by ascending priority, registration order on ties."""
        return sorted(
            (p for p in self.providers if p.enabled), key=lambda p: p.priority
        )

    def resolve(self, query: str, options: Optional[ResolveOptions] = None) -> ChainOutcome:
        """Gather candidate results for ``query``.

        Args:
            query: Text to send to providers
            options: Resolution options

        Returns:
            ChainOutcome; ``results`` may be empty
        """
        options = options or ResolveOptions()
        providers = self.ordered_providers()
        if not providers:
            logger.warning("provider_chain_no_enabled_providers", query=query[:50])
            return ChainOutcome()

        if options.include_alternatives:
            return self._resolve_all(query, options, providers)
        return self._resolve_until_accepted(query, options, providers)

    def _resolve_until_accepted(
        self, query: str, options: ResolveOptions, providers: list[Provider]
    ) -> ChainOutcome:
        outcome = ChainOutcome()
        for provider in providers:
            result = self._collect(outcome, self._submit(provider, query, options))
            if result is None:
                continue
            if result.raw_confidence >= self.acceptance_threshold:
                logger.info(
                    "provider_chain_accepted",
                    provider=provider.name,
                    confidence=result.raw_confidence,
                )
                break
            logger.info(
                "provider_chain_fall_through",
                provider=provider.name,
                confidence=result.raw_confidence,
                threshold=self.acceptance_threshold,
            )
        return outcome

    def _resolve_all(
        self, query: str, options: ResolveOptions, providers: list[Provider]
    ) -> ChainOutcome:
        outcome = ChainOutcome()
        calls = [self._submit(provider, query, options) for provider in providers]
        for call in calls:
            self._collect(outcome, call)
        return outcome

    def _submit(self, provider: Provider, query: str, options: ResolveOptions) -> ProviderCall:
        call = ProviderCall(provider, query, options)
        if self.has_abandoned_call(provider.name):
            logger.info("provider_skipped_busy", provider=provider.name)
            return call
        call.future = self._executors[provider.name].submit(call.run)
        return call

    def _collect(self, outcome: ChainOutcome, call: ProviderCall) -> Optional[ProviderResult]:
        """Wait for one provider call and record how it went."""
        provider = call.provider
        outcome.consulted.append(provider.name)
        try:
            result = call.result(self.request_timeout)
        except ProviderEmptyResult as e:
            logger.info("provider_empty_result", provider=provider.name, error=e.message)
            outcome.empty.append(provider.name)
            return None
        except ProviderTimeout as e:
            if call.future is not None and not call.future.done():
                self._abandon(provider.name, call.future)
            error: ProviderError = e
        except ProviderError as e:
            error = e
        except Exception as e:
            logger.error(
                "provider_unexpected_error", provider=provider.name, exc_info=True
            )
            error = ProviderUnavailable(provider.name, f"{type(e).__name__}: {e}")
        else:
            outcome.results.append(result)
            return result

        logger.warning(
            "provider_failed",
            provider=provider.name,
            kind=error.label,
            error=error.message,
        )
        outcome.failures[provider.name] = error
        return None

    def has_abandoned_call(self, name: str) -> bool:
        """Whether a timed-out call to provider ``name`` is still running."""
        with self._lock:
            return name in self._abandoned

    def _abandon(self, name: str, future: "Future[ProviderResult]") -> None:
        # The worker thread cannot be interrupted; its late answer is dropped
        with self._lock:
            self._abandoned[name] = self._abandoned.get(name, 0) + 1
        future.add_done_callback(lambda _future: self._release(name))

    def _release(self, name: str) -> None:
        with self._lock:
            self._abandoned[name] -= 1
            if not self._abandoned[name]:
                del self._abandoned[name]
        logger.info("provider_abandoned_call_finished", provider=name)

    def close(self) -> None:
        """Stop accepting provider calls and release worker threads."""
        for executor in self._executors.values():
            executor.shutdown(wait=False, cancel_futures=True)
