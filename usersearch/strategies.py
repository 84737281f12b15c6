"""
Search strategies: one declarative descriptor per way of phrasing a user query.

Each strategy turns its invocation into a StrategyResult. Transport errors,
bad statuses and malformed bodies are reported in the result and never
raised to the caller.
"""

from dataclasses import dataclass
from typing import Callable, Tuple

from .cql import (
    USER_SEARCH_PATH,
    CONTENT_SEARCH_PATH,
    fullname_match,
    user_match,
    accountid_match,
    content_user_match,
    looks_like_identifier,
)
from .models import StrategyResult, StrategyStatus
from .normalize import normalize_users

ERROR_TEXT_LIMIT = 200


def always(query: str) -> bool:
    return True


@dataclass(frozen=True)
class Strategy:
    label: str
    endpoint: str
    build_cql: Callable[[str], str]
    applies: Callable[[str], bool] = always

    def run(self, client, query: str, limit: int) -> StrategyResult:
        """Invoke this strategy against `client` and classify the outcome."""
        if not self.applies(query):
            return StrategyResult(self.label, StrategyStatus.SKIPPED)

        cql = self.build_cql(query)
        try:
            response = client.get(self.endpoint, params={"cql": cql, "limit": limit})
        except Exception as e:
            # TransportError or anything else the client lets through
            return StrategyResult(
                self.label, StrategyStatus.ERROR, cql=cql, error=f"{type(e).__name__}: {e}"
            )

        if not response.ok:
            return StrategyResult(
                self.label,
                StrategyStatus.ERROR,
                cql=cql,
                http_status=response.status,
                error=response.text[:ERROR_TEXT_LIMIT],
            )

        try:
            body = response.json()
        except ValueError as e:
            return StrategyResult(
                self.label,
                StrategyStatus.ERROR,
                cql=cql,
                http_status=response.status,
                error=f"Malformed JSON body: {e}",
            )

        users = normalize_users(body)
        status = StrategyStatus.OK if users else StrategyStatus.EMPTY
        return StrategyResult(
            self.label, status, users=users, cql=cql, http_status=response.status
        )


FULLNAME_SEARCH = Strategy("fullname-search", USER_SEARCH_PATH, fullname_match)
USER_SEARCH = Strategy("user-search", USER_SEARCH_PATH, user_match)
ACCOUNTID_SEARCH = Strategy(
    "accountid-search", USER_SEARCH_PATH, accountid_match, applies=looks_like_identifier
)
GENERAL_SEARCH = Strategy("general-search", CONTENT_SEARCH_PATH, content_user_match)

# Most field-specific first; the first strategy with a usable hit wins.
DEFAULT_STRATEGIES: Tuple[Strategy, ...] = (
    FULLNAME_SEARCH,
    USER_SEARCH,
    ACCOUNTID_SEARCH,
    GENERAL_SEARCH,
)
