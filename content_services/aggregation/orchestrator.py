"""
Aggregation Orchestrator

Fans a query out to the admitted providers in parallel, collects whatever
completes within the aggregation timeout, and turns the combined raw
records into one ranked, truncated record list.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from collections.abc import Callable, Sequence

from ..providers.base_client import BaseProviderAdapter
from ..providers.rate_limiter import RateLimiter
from ..providers.synthetic import generate_fallback_records
from ..ranker.normalizer import normalize_records
from ..ranker.record_ranker import RecordRanker
from ..shared.errors import InvalidQuery, ProviderError
from ..shared.models import AggregationOutcome, ProviderFailure, Query, RawRecord
from ..shared.structured_logging import get_structured_logger

logger = logging.getLogger(__name__)

TIMEOUT_REASON = "timeout"


class AggregationOrchestrator:
    """
    Parallel fan-out over provider adapters.

    Each round gets its own thread pool with one worker per admitted adapter,
    so a call left hanging by an earlier round never delays a later one. A
    failing call never affects the others; calls still running when the
    timeout elapses are reported as timed out and their results discarded.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        ranker: RecordRanker | None = None,
        timeout_seconds: float = 10.0,
        fallback: Callable[[Query, str], list[RawRecord]] = generate_fallback_records,
    ):
        """
        Initialize the orchestrator.

        Args:
            rate_limiter: Admission gate consulted before every provider call
            ranker: Ranking engine (default RecordRanker())
            timeout_seconds: Global bound on waiting for provider calls
            fallback: Generator for records when no provider produced any
        """
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got: {timeout_seconds}")
        self.rate_limiter = rate_limiter
        self.ranker = ranker or RecordRanker()
        self.timeout_seconds = timeout_seconds
        self._fallback = fallback
        self._closed = False

    def aggregate(
        self,
        query: Query,
        adapters: Sequence[BaseProviderAdapter],
        kind: str | None = None,
    ) -> AggregationOutcome:
        """
        Aggregate results for a query across adapters.

        Args:
            query: Validated caller query
            adapters: Providers to query, in preference order
            kind: Record kind for fallback generation (default: first adapter's kind)

        Returns:
            AggregationOutcome with records ranked and truncated to query.limit.
            Provider failures are recorded in the outcome, never raised.

        Raises:
            InvalidQuery: If query is not a Query or no adapters are given
            RuntimeError: If the orchestrator has been shut down
        """
        if self._closed:
            raise RuntimeError("Orchestrator has been shut down")
        if not isinstance(query, Query):
            raise InvalidQuery(f"Expected a Query, got: {type(query).__name__}")
        if not adapters:
            raise InvalidQuery("At least one provider is required")
        names = [adapter.name for adapter in adapters]
        if len(set(names)) != len(names):
            raise InvalidQuery(f"Duplicate providers requested: {names}")
        kind = kind or adapters[0].kind

        admitted = []
        skipped = []
        for adapter in adapters:
            if self.rate_limiter.try_admit(adapter.name):
                admitted.append(adapter)
            else:
                skipped.append(adapter.name)
        if skipped:
            logger.info(f"Rate limited, skipping this round: {', '.join(skipped)}")

        futures = {}
        done, not_done = (set(), set())
        if admitted:
            executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=len(admitted), thread_name_prefix="provider"
            )
            try:
                futures = {
                    executor.submit(self._run_adapter, adapter, query): adapter
                    for adapter in admitted
                }
                done, not_done = concurrent.futures.wait(futures, timeout=self.timeout_seconds)
            finally:
                # Hung calls finish in the background; nothing waits on them
                executor.shutdown(wait=False)

        results: dict[str, list[RawRecord]] = {}
        failures: dict[str, ProviderFailure] = {}
        for future in done:
            adapter = futures[future]
            try:
                results[adapter.name] = list(future.result())
            except ProviderError as e:
                failures[adapter.name] = ProviderFailure(adapter.name, e.reason)
            except Exception as e:
                logger.error(f"Unexpected error from provider {adapter.name}: {e}", exc_info=True)
                failures[adapter.name] = ProviderFailure(adapter.name, type(e).__name__)

        for future in not_done:
            adapter = futures[future]
            # Running calls cannot be interrupted; their results are discarded
            logger.warning(
                f"Provider {adapter.name} did not finish within {self.timeout_seconds}s"
            )
            failures[adapter.name] = ProviderFailure(adapter.name, TIMEOUT_REASON)

        # Collect in request order so deduplication does not depend on completion order
        succeeded = [adapter for adapter in admitted if adapter.name in results]
        failed = [failures[adapter.name] for adapter in admitted if adapter.name in failures]
        raw_records = [record for adapter in succeeded for record in results[adapter.name]]
        real_data = any(
            results[adapter.name] and not adapter.synthetic for adapter in succeeded
        )

        if not raw_records:
            try:
                raw_records = list(self._fallback(query, kind))
            except Exception as e:
                logger.error(f"Fallback generation failed for '{query.text}': {e}", exc_info=True)
                raw_records = []
            if not raw_records:
                logger.error(f"No records available for '{query.text}'")
                return AggregationOutcome(
                    records=(),
                    providers_succeeded=tuple(adapter.name for adapter in succeeded),
                    providers_failed=tuple(failed),
                    used_fallback=False,
                    providers_skipped=tuple(skipped),
                )
            logger.info(f"Using {len(raw_records)} fallback record(s) for '{query.text}'")

        records = self.ranker.rank(normalize_records(raw_records), query.text, query.limit)

        logger.info(
            f"Aggregated {len(records)} record(s) for '{query.text}': "
            f"{len(succeeded)} succeeded, {len(failed)} failed, {len(skipped)} skipped"
        )
        return AggregationOutcome(
            records=tuple(records),
            providers_succeeded=tuple(adapter.name for adapter in succeeded),
            providers_failed=tuple(failed),
            used_fallback=not real_data,
            providers_skipped=tuple(skipped),
        )

    @staticmethod
    def _run_adapter(adapter: BaseProviderAdapter, query: Query) -> list[RawRecord]:
        log = get_structured_logger(__name__, provider=adapter.name, query=query.text)
        started = time.monotonic()
        try:
            records = adapter.search(query, query.limit)
        except ProviderError as e:
            log.warning(f"Search failed: {e.reason}")
            raise
        log.debug(f"Search returned {len(records)} record(s) in {time.monotonic() - started:.2f}s")
        return records

    def shutdown(self) -> None:
        """Stop accepting rounds. Calls still in flight are not waited for."""
        self._closed = True
