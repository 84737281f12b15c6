"""
Fallback user search.

Runs an ordered list of strategies one at a time and returns the users of
the first strategy that yields at least one valid record. Later strategies
are never consulted once one succeeds, and results are never merged across
strategies: the most field-specific phrasing wins.

Invariant:
A search returns a list (possibly empty) for every strategy-local failure.
"""

from typing import List, Optional, Sequence

from .env import DEFAULT_LIMIT
from .logger import StructuredLogger, get_logger
from .models import NormalizedUser, SearchOutcome, StrategyResult, StrategyStatus
from .strategies import DEFAULT_STRATEGIES, Strategy


class UserSearch:
    """Orchestrates the strategy fallback chain against one client."""

    def __init__(
        self,
        client,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
        limit: int = DEFAULT_LIMIT,
        logger: Optional[StructuredLogger] = None,
    ):
        self.client = client
        self.strategies = tuple(strategies)
        self.limit = limit
        self.logger = logger or get_logger()

    def search(self, query: str) -> List[NormalizedUser]:
        return self.search_detailed(query).users

    def search_detailed(self, query: str) -> SearchOutcome:
        """Walk the strategies in order, keeping every attempt in the outcome."""
        query = (query or "").strip()
        outcome = SearchOutcome(query=query)
        if not query:
            self.logger.debug("Blank query, nothing to search")
            return outcome

        self.logger.info("Searching for users", query=query)
        total = len(self.strategies)
        for i, strategy in enumerate(self.strategies, start=1):
            result = strategy.run(self.client, query, self.limit)
            outcome.attempts.append(result)
            self._record(i, total, result)

            if result.succeeded:
                outcome.users = list(result.users)
                return outcome

        self.logger.info("All search strategies failed", query=query, tried=total)
        return outcome

    def _record(self, position: int, total: int, result: StrategyResult) -> None:
        label = result.label
        where = f"Strategy {position}/{total} ({label})"

        if result.status is StrategyStatus.SKIPPED:
            self.logger.record_strategy_skip(label)
            self.logger.debug(f"{where} not applicable, skipping")
            return

        self.logger.record_strategy_attempt(label)
        if result.status is StrategyStatus.OK:
            self.logger.record_strategy_success(label)
            self.logger.info(
                f"{where} succeeded", cql=result.cql, users=len(result.users)
            )
        elif result.status is StrategyStatus.EMPTY:
            self.logger.record_strategy_failure(label, "EmptyResult")
            self.logger.info(f"{where} returned no results, trying next", cql=result.cql)
        else:
            error_type = (
                f"HTTP_{result.http_status}" if result.http_status is not None
                else "TransportError"
            )
            self.logger.record_strategy_failure(label, error_type)
            self.logger.warning(
                f"{where} failed",
                cql=result.cql,
                status=result.http_status,
                error=result.error,
            )
