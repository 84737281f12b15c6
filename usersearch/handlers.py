"""
Caller-facing operations.

These wrap the search, probe and course store in plain-data results so a
UI can tell "no matches" (an empty list) apart from "search is broken"
(a dict with an `error` message).
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .client import ConfluenceClient, TransportError
from .env import ConfigError, Settings
from .logger import get_logger
from .models import SearchFailure
from .probe import probe
from .search import UserSearch
from . import storage


def _resolve(client, settings: Optional[Settings]):
    """Return (client, settings, failure); failure is set when either cannot be built."""
    try:
        settings = settings or Settings.from_env()
        if client is None:
            client = ConfluenceClient.from_settings(settings)
    except ConfigError as e:
        return None, settings, SearchFailure(str(e))
    return client, settings, None


def search_users(
    payload: Dict[str, Any],
    client=None,
    settings: Optional[Settings] = None,
) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
    """Search for users matching payload["query"]."""
    client, settings, failure = _resolve(client, settings)
    if failure is not None:
        get_logger().error("User search unavailable", error=failure.error)
        return failure.to_dict()

    query = payload.get("query") if isinstance(payload, dict) else None
    if not isinstance(query, str):
        return SearchFailure("Search query must be a string").to_dict()

    searcher = UserSearch(client, limit=settings.limit)
    try:
        users = searcher.search(query)
    except Exception as e:
        get_logger().error("User search crashed", query=query, error=str(e))
        return SearchFailure(f"User search failed: {e}").to_dict()
    return [u.to_dict() for u in users]


def test_user_access(client=None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Run endpoint diagnostics and return the report as a dict."""
    client, settings, failure = _resolve(client, settings)
    if failure is not None:
        return {"success": False, "error": failure.error, "test": "configuration"}
    try:
        return probe(client).to_dict()
    except Exception as e:
        get_logger().error("API test error", error=str(e))
        return {"success": False, "error": str(e), "test": "general_error"}


def get_current_account_id(client=None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Look up the account id of the identity the client authenticates as."""
    client, settings, failure = _resolve(client, settings)
    if failure is not None:
        return failure.to_dict()
    try:
        response = client.get("/wiki/rest/api/user/current")
    except TransportError as e:
        return {"error": str(e)}
    if not response.ok:
        return {"error": f"Current user lookup failed: {response.status}"}
    try:
        body = response.json()
    except ValueError as e:
        return {"error": f"Malformed JSON body: {e}"}
    return {"accountId": body.get("accountId") if isinstance(body, dict) else None}


def add_course(payload: Dict[str, Any], store_path: Path) -> Dict[str, Any]:
    result = storage.add_course(store_path, payload)
    if not result["success"]:
        get_logger().error("Error adding course", error=result["error"])
    return result


def get_courses(store_path: Path) -> List[Dict[str, Any]]:
    return storage.get_courses(store_path)
