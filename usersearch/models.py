"""
Record types shared by the search, normalization and probe code.

Everything here is built fresh per call; nothing is cached between searches.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


@dataclass(frozen=True)
class NormalizedUser:
    """Canonical user identity derived from a raw search hit."""

    id: str
    name: str
    email: Optional[str] = None
    username: Optional[str] = None

    def is_valid(self) -> bool:
        return _is_non_empty_str(self.id) and _is_non_empty_str(self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "username": self.username,
        }


@dataclass(frozen=True)
class RawUser:
    """The `user` sub-record of a search hit, every field optional."""

    type: Optional[str] = None
    accountId: Optional[str] = None
    userKey: Optional[str] = None
    displayName: Optional[str] = None
    publicName: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_hit(cls, hit: Any) -> Optional["RawUser"]:
        if not isinstance(hit, dict):
            return None
        user = hit.get("user")
        if not isinstance(user, dict):
            return None
        return cls(
            type=user.get("type"),
            accountId=user.get("accountId"),
            userKey=user.get("userKey"),
            displayName=user.get("displayName"),
            publicName=user.get("publicName"),
            username=user.get("username"),
            email=user.get("email"),
        )


class StrategyStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class StrategyResult:
    """Outcome of one strategy invocation. Only OK carries users."""

    label: str
    status: StrategyStatus
    users: List[NormalizedUser] = field(default_factory=list)
    cql: Optional[str] = None
    http_status: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is StrategyStatus.OK and len(self.users) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "status": self.status.value,
            "cql": self.cql,
            "http_status": self.http_status,
            "error": self.error,
            "user_count": len(self.users),
        }


@dataclass
class SearchOutcome:
    """Users returned by a search plus the per-strategy attempt trace."""

    query: str
    users: List[NormalizedUser] = field(default_factory=list)
    attempts: List[StrategyResult] = field(default_factory=list)

    @property
    def winner(self) -> Optional[str]:
        for attempt in self.attempts:
            if attempt.succeeded:
                return attempt.label
        return None

    @property
    def exhausted(self) -> bool:
        return not self.users

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "winner": self.winner,
            "users": [u.to_dict() for u in self.users],
            "attempts": [a.to_dict() for a in self.attempts],
        }


@dataclass(frozen=True)
class SearchFailure:
    """Caller-facing failure, kept apart from an empty result list."""

    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error}


@dataclass
class EndpointCheck:
    """Raw status of a single probed endpoint."""

    name: str
    status: Optional[int] = None
    ok: bool = False
    status_text: Optional[str] = None
    error: Optional[str] = None
    type: Optional[str] = None
    result_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        # a request that never got an answer has no status to report
        if self.type != "exception":
            data["status"] = self.status
            data["ok"] = self.ok
        if self.status_text is not None:
            data["statusText"] = self.status_text
        if self.error is not None:
            data["error"] = self.error
        if self.type is not None:
            data["type"] = self.type
        if self.result_count is not None:
            data["resultCount"] = self.result_count
        return data


@dataclass
class DiagnosticReport:
    """Aggregate endpoint health, for operators only."""

    endpoint_tests: Dict[str, EndpointCheck] = field(default_factory=dict)
    cql_test: Optional[EndpointCheck] = None
    message: str = "Comprehensive endpoint testing completed"

    @property
    def success(self) -> bool:
        return any(check.ok for check in self.endpoint_tests.values())

    @property
    def recommendation(self) -> str:
        user_search = self.endpoint_tests.get("user-search-endpoint")
        if user_search is not None and user_search.status == 410:
            return (
                "User search endpoint returns 410 - may be deprecated. "
                "Try alternative approaches."
            )
        return "Check individual endpoint results for issues."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "endpointTests": {
                name: check.to_dict() for name, check in self.endpoint_tests.items()
            },
            "cqlTest": self.cql_test.to_dict() if self.cql_test else None,
            "message": self.message,
            "recommendation": self.recommendation,
        }
