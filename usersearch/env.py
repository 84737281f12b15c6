import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .logger import LOG_LEVELS

DEFAULT_TIMEOUT = 10.0
DEFAULT_LIMIT = 20
DEFAULT_MAX_RETRIES = 2
DEFAULT_STORE = "data/courses.json"


class ConfigError(ValueError):
    """Raised when required settings are missing or malformed."""


def load_env() -> None:
    """Load .env from the working directory if present."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a {cast.__name__}, got {raw!r}")


def _env_log_level() -> str:
    level = (os.getenv("USERSEARCH_LOG_LEVEL") or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(
            f"USERSEARCH_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}"
        )
    return level


@dataclass
class Settings:
    """Connection and tuning settings, read from the environment."""

    base_url: Optional[str] = None
    email: Optional[str] = None
    api_token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    limit: int = DEFAULT_LIMIT
    max_retries: int = DEFAULT_MAX_RETRIES
    store: str = DEFAULT_STORE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            base_url=os.getenv("CONFLUENCE_BASE_URL") or None,
            email=os.getenv("CONFLUENCE_EMAIL") or None,
            api_token=os.getenv("CONFLUENCE_API_TOKEN") or None,
            timeout=_env_number("USERSEARCH_TIMEOUT", DEFAULT_TIMEOUT, float),
            limit=_env_number("USERSEARCH_LIMIT", DEFAULT_LIMIT, int),
            max_retries=_env_number("USERSEARCH_MAX_RETRIES", DEFAULT_MAX_RETRIES, int),
            store=os.getenv("USERSEARCH_STORE") or DEFAULT_STORE,
            log_level=_env_log_level(),
        )

    def require_base_url(self) -> str:
        if not self.base_url:
            raise ConfigError(
                "Missing CONFLUENCE_BASE_URL. Set env var or pass --base-url."
            )
        return self.base_url.rstrip("/")
