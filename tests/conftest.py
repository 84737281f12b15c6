"""
Pytest configuration and shared fixtures.
"""

import json
import pytest
from pathlib import Path
from typing import Dict, Any, List

from usersearch.client import ApiResponse, TransportError
from usersearch.logger import get_logger, reset_logger


@pytest.fixture(autouse=True)
def quiet_logger():
    """Replace the global logger with one that writes nowhere."""
    reset_logger()
    logger = get_logger(enable_console=False, enable_file=False)
    yield logger
    reset_logger()


def make_response(body=None, status: int = 200, text: str = None) -> ApiResponse:
    if text is None:
        text = json.dumps(body) if body is not None else ""
    return ApiResponse(
        status=status,
        ok=200 <= status < 300,
        status_text="OK" if status < 400 else "Error",
        text=text,
    )


def known_hit(**user) -> Dict[str, Any]:
    return {"user": {"type": "known", **user}}


class FakeClient:
    """
    Stand-in for ConfluenceClient.

    `replies` is consumed in call order; each entry is an ApiResponse, or an
    exception instance to raise.
    """

    def __init__(self, replies: List[Any] = None):
        self.replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []

    def get(self, path, params=None):
        self.calls.append({"path": path, "params": params})
        if not self.replies:
            raise TransportError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def cqls(self) -> List[str]:
        return [c["params"]["cql"] for c in self.calls if c["params"] and "cql" in c["params"]]


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def valid_course() -> Dict[str, Any]:
    """Valid course payload."""
    return {
        "title": "Confluence for admins",
        "description": "Spaces, permissions and templates.",
        "atlassianUrl": "https://community.atlassian.com/learning/course/confluence-admin",
        "level": "Intermediate",
        "product": "Confluence",
        "imageBase64": "data:image/png;base64,AAAA",
    }


@pytest.fixture
def temp_store_file(tmp_path) -> Path:
    """Create an empty course store."""
    store_file = tmp_path / "courses.json"
    store_file.write_text(json.dumps({"courses": []}))
    return store_file
