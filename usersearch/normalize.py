from typing import Any, List, Optional, Sequence

from .models import NormalizedUser, RawUser

KNOWN_USER_TYPE = "known"

ID_FIELDS = ("accountId", "userKey")
NAME_FIELDS = ("displayName", "publicName", "username")


def _first_non_empty(raw: RawUser, fields: Sequence[str]) -> Optional[str]:
    for f in fields:
        v = getattr(raw, f)
        # numeric keys show up on some older Server instances
        if isinstance(v, (int, float)) and not isinstance(v, bool) and v:
            return str(v)
        if isinstance(v, str) and v.strip():
            return v
    return None


def resolve_id(raw: RawUser) -> Optional[str]:
    return _first_non_empty(raw, ID_FIELDS)


def resolve_name(raw: RawUser) -> Optional[str]:
    return _first_non_empty(raw, NAME_FIELDS)


def extract_hits(body: Any) -> List[Any]:
    """Return the `results` list of a response body, or [] for anything else."""
    if not isinstance(body, dict):
        return []
    results = body.get("results")
    if not isinstance(results, list):
        return []
    return results


def normalize_hit(hit: Any) -> Optional[NormalizedUser]:
    """
    Turn one raw hit into a NormalizedUser.

    Returns None for hits without a user sub-record, for anonymous or
    unknown user types, and for users missing an id or a name.
    """
    raw = RawUser.from_hit(hit)
    if raw is None or raw.type != KNOWN_USER_TYPE:
        return None

    user = NormalizedUser(
        id=resolve_id(raw) or "",
        name=resolve_name(raw) or "",
        email=raw.email,
        username=raw.username,
    )
    if not user.is_valid():
        return None
    return user


def normalize_users(body: Any) -> List[NormalizedUser]:
    """Normalize a response body, keeping endpoint order and duplicates."""
    users = []
    for hit in extract_hits(body):
        user = normalize_hit(hit)
        if user is not None:
            users.append(user)
    return users
