"""
Fan-out/merge search aggregation.

`SearchAggregator` lets several independent search providers be treated as
one. A query is sent to every provider concurrently; once every call has
settled (answered, failed, or run out of time) the results are merged:
one entry per id, best score kept, ordered by score descending.

Provider failures and timeouts are isolated: the provider contributes no
results and the other providers are unaffected. Only faults in the merge
itself, such as a result without an id, fail the whole query.
"""

import asyncio
from collections.abc import Sequence as SequenceABC
from typing import Iterable, List, Optional, Sequence

from .config import AggregatorConfig
from .logger import StructuredLogger, get_logger
from .merge import merge_results
from .providers.base import SearchProvider, provider_name
from .result import ScoredResult
from .retry import CircuitBreaker, is_transient_error


class SearchAggregator:
    """
    Aggregate several search providers behind a single `query` call.

    Args:
        providers: Providers to fan out to; order fixes invocation order
        config: Per-call options (max_results, timeout_ms, breaker settings)
        logger: Logger receiving per-provider metrics; defaults to the global one

    Example:
        aggregator = SearchAggregator([local_index, elastic])
        results = await aggregator.query("telemetry")
    """

    def __init__(
        self,
        providers: Iterable[SearchProvider] = (),
        config: Optional[AggregatorConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.providers: List[SearchProvider] = list(providers)
        self.config = config or AggregatorConfig()
        self.logger = logger or get_logger()
        self._breakers: List[Optional[CircuitBreaker]] = [
            self._make_breaker() for _ in self.providers
        ]

    def _make_breaker(self) -> Optional[CircuitBreaker]:
        if self.config.breaker_threshold <= 0:
            return None
        return CircuitBreaker(
            failure_threshold=self.config.breaker_threshold,
            recovery_timeout=self.config.breaker_recovery_s,
        )

    async def query(
        self,
        term: str,
        max_results: Optional[int] = None,
        timeout_ms: Optional[int] = None,
    ) -> List[ScoredResult]:
        """
        Search every provider for `term` and merge what they return.

        `max_results` and `timeout_ms` override the configured values for
        this call only.

        Returns:
            Results deduplicated by id and sorted by score, highest first.
            Empty when no provider is configured or none answered.

        Raises:
            InvalidResultError: If a provider returned a malformed result
        """
        if not isinstance(term, str):
            raise TypeError(f"term must be a string, got {type(term).__name__}")
        options = AggregatorConfig(
            max_results=self.config.max_results if max_results is None else max_results,
            timeout_ms=self.config.timeout_ms if timeout_ms is None else timeout_ms,
        )

        self.logger.record_query()
        if not self.providers:
            return []

        outcomes = await asyncio.gather(*(
            self._query_provider(index, provider, term, options)
            for index, provider in enumerate(self.providers)
        ))

        combined = [r for results in outcomes for r in results]
        merged = merge_results(combined)
        self.logger.debug(
            "Merged provider results",
            term=term,
            providers=len(self.providers),
            collected=len(combined),
            merged=len(merged),
        )
        return merged

    async def _query_provider(
        self,
        index: int,
        provider: SearchProvider,
        term: str,
        options: AggregatorConfig,
    ) -> Sequence[ScoredResult]:
        """Run one provider call; any failure or timeout yields no results."""
        name = provider_name(provider)
        breaker = self._breakers[index]
        if breaker is not None and not breaker.allow_request():
            self.logger.debug(
                "Skipping provider with open circuit",
                provider=name,
                retry_in_s=round(breaker.time_until_reset()),
            )
            return []

        self.logger.record_provider_attempt(name)
        try:
            results = await asyncio.wait_for(
                provider.query(term, options.max_results, options.timeout_ms),
                timeout=options.timeout_s,
            )
            if not isinstance(results, SequenceABC) or isinstance(results, (str, bytes)):
                raise TypeError(f"expected a sequence of results, got {type(results).__name__}")
            results = list(results)
        except asyncio.TimeoutError:
            self._record_failure(name, breaker, "Timeout")
            self.logger.warning(
                "Provider timed out", provider=name, timeout_ms=options.timeout_ms
            )
            return []
        except asyncio.CancelledError:
            if breaker is not None:
                breaker.cancel_trial()
            raise
        except Exception as e:
            self._record_failure(name, breaker, type(e).__name__)
            if is_transient_error(e):
                self.logger.warning("Provider call failed", provider=name, error=str(e))
            else:
                self.logger.error(
                    "Provider call failed",
                    provider=name,
                    error_type=type(e).__name__,
                    error=str(e),
                )
            return []

        self.logger.record_provider_success(name)
        if breaker is not None:
            breaker.record_success()
        return results

    def _record_failure(self, name: str, breaker: Optional[CircuitBreaker], error_type: str):
        self.logger.record_provider_failure(name, error_type)
        if breaker is not None:
            breaker.record_failure()
