from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .validators import ALLOWED_TIMEZONES

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR or CRITICAL
    - AUTH_TOKENS: comma-separated 'token=user_id' or 'token=user_id:ADMIN' entries
      accepted as bearer credentials
    - DEFAULT_TIMEZONE: timezone for tasks whose creator has no profile timezone (default 'UTC')
    - BATCH_MAX_WORKERS: threads used to run batch items; 1 (default) runs them sequentially
    """

    persistence_backend: str
    sqlite_db_path: str
    cors_allow_origins: List[str]
    log_level: str
    auth_tokens: Dict[str, Tuple[str, bool]]
    default_timezone: str
    batch_max_workers: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int, minimum: int = 1) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        # Star will be handled in main via allow_origins=["*"]
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_auth_tokens(raw: str) -> Dict[str, Tuple[str, bool]]:
    """
    Parse 'token=user_id[:ADMIN]' entries into {token: (user_id, is_admin)}.
    Malformed entries are skipped with a warning.
    """
    tokens: Dict[str, Tuple[str, bool]] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        token, sep, identity = entry.partition("=")
        user_id, _, role = identity.partition(":")
        if not sep or not token.strip() or not user_id.strip():
            logger.warning("Ignoring malformed AUTH_TOKENS entry")
            continue
        tokens[token.strip()] = (user_id.strip(), role.strip().upper() == "ADMIN")
    return tokens


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        log_level = "INFO"

    default_timezone = _get_env("DEFAULT_TIMEZONE", "UTC").strip()
    if default_timezone not in ALLOWED_TIMEZONES:
        logger.warning("Unsupported DEFAULT_TIMEZONE %s, using UTC", default_timezone)
        default_timezone = "UTC"

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
        auth_tokens=_parse_auth_tokens(_get_env("AUTH_TOKENS", "")),
        default_timezone=default_timezone,
        batch_max_workers=_parse_int(_get_env("BATCH_MAX_WORKERS", "1"), 1),
    )
