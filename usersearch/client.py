"""Thin Confluence REST client shared by the search strategies and the prober."""

from dataclasses import dataclass
import json
from typing import Any, Dict, Optional

import requests

from .env import Settings, DEFAULT_TIMEOUT, DEFAULT_MAX_RETRIES
from .logger import StructuredLogger, get_logger
from .retry import (
    RetryError,
    exponential_backoff,
    is_transient_error,
    should_retry_http_status,
)


class TransportError(Exception):
    """Raised when a request could not be completed at all."""


class _RetryableStatus(Exception):
    def __init__(self, response):
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


class _TransientRequestError(Exception):
    def __init__(self, original):
        super().__init__(str(original))
        self.original = original


@dataclass
class ApiResponse:
    """Status and raw body of one HTTP exchange."""

    status: int
    ok: bool
    status_text: str
    text: str

    @classmethod
    def from_requests(cls, resp: requests.Response) -> "ApiResponse":
        return cls(
            status=resp.status_code,
            ok=resp.ok,
            status_text=resp.reason or "",
            text=resp.text,
        )

    def json(self) -> Any:
        """Decode the body. Raises ValueError on malformed JSON."""
        return json.loads(self.text)


class ConfluenceClient:
    """
    GET-only access to the Confluence REST API.

    Non-2xx responses are returned as-is; callers decide what a status
    means. Only failures to get any response raise TransportError.
    """

    def __init__(
        self,
        base_url: str,
        email: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = 0.5,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.logger = logger or get_logger()

        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if email and api_token:
            self.session.auth = (email, api_token)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ConfluenceClient":
        return cls(
            base_url=settings.require_base_url(),
            email=settings.email,
            api_token=settings.api_token,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            **kwargs,
        )

    def _on_retry(self, attempt: int, exc: Exception, delay: float):
        self.logger.debug("Retrying request", attempt=attempt, error=str(exc), delay=delay)

    def _fetch(self, url: str, params: Optional[Dict[str, Any]]):
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError):
            raise
        except requests.exceptions.RequestException as e:
            # e.g. a body cut off mid-read
            if is_transient_error(e):
                raise _TransientRequestError(e) from e
            raise
        if should_retry_http_status(resp.status_code):
            raise _RetryableStatus(resp)
        return resp

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        url = f"{self.base_url}{path}"
        self.logger.record_api_call()

        fetch = exponential_backoff(
            max_retries=self.max_retries,
            base_delay=self.retry_delay,
            exceptions=(
                requests.exceptions.Timeout,
                requests.exceptions.ConnectionError,
                _TransientRequestError,
                _RetryableStatus,
            ),
            on_retry=self._on_retry,
        )(self._fetch)

        try:
            resp = fetch(url, params)
        except RetryError as e:
            cause = e.__cause__
            if isinstance(cause, _RetryableStatus):
                # out of retries on e.g. a 503: hand back the last response
                return ApiResponse.from_requests(cause.response)
            if isinstance(cause, _TransientRequestError):
                cause = cause.original
            self.logger.warning("Request failed after retries", url=url, error=str(cause))
            raise TransportError(f"Request to {path} failed: {cause}") from e
        except requests.exceptions.RequestException as e:
            self.logger.error("Request error", url=url, error=str(e))
            raise TransportError(f"Request to {path} failed: {e}") from e

        return ApiResponse.from_requests(resp)
