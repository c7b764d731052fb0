from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

_SQLITE_PREFIX = "sqlite:///"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'sqlite' (default) or 'memory'
    - DATABASE_URL: sqlite connection string. Default 'sqlite:///./data/todos.db'
    - HOST / PORT: listening address for the API server. Default 0.0.0.0:3000
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name. Default 'INFO'
    - API_URL: base URL the client uses to reach the API. Default 'http://localhost:3000/api'
    """

    persistence_backend: str
    database_url: str
    host: str
    port: int
    cors_allow_origins: List[str]
    log_level: str
    api_url: str

    @property
    def sqlite_db_path(self) -> str:
        """Filesystem path encoded in DATABASE_URL."""
        return sqlite_path_from_url(self.database_url)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def sqlite_path_from_url(url: str) -> str:
    """
    Extract the database file path from a 'sqlite:///<path>' URL.

    Raises:
        ValueError: if the URL does not use the sqlite scheme.
    """
    if not url.startswith(_SQLITE_PREFIX):
        raise ValueError(f"Unsupported DATABASE_URL {url!r}; expected '{_SQLITE_PREFIX}<path>'")
    path = url[len(_SQLITE_PREFIX):]
    if not path:
        raise ValueError("DATABASE_URL does not name a database file")
    return path


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "sqlite").strip().lower()
    if backend not in {"memory", "sqlite"}:
        backend = "sqlite"

    return Settings(
        persistence_backend=backend,
        database_url=_get_env("DATABASE_URL", "sqlite:///./data/todos.db").strip(),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_int(_get_env("PORT", "3000"), 3000),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        api_url=_get_env("API_URL", "http://localhost:3000/api").strip().rstrip("/"),
    )
