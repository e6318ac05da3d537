"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. Only the bootstrap (``AppConfig.from_env``, the
CLI) reads environment variables; everything else receives the config.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from fastrest.errors import ConfigurationError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, db_url="sqlite:///app.db")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Logging
    log_level: str = "info"
    log_format: str = "text"  # "text" or "json"
    log_file: str | None = None  # None = stderr

    # Database
    db_url: str | None = None
    db_echo: bool = False

    # CORS
    cors_allow_origins: tuple[str, ...] = ("*",)
    cors_allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
    cors_allow_headers: tuple[str, ...] = ("Content-Type", "Authorization", "X-Requested-With")
    cors_max_age: int = 3600

    def __post_init__(self) -> None:
        if self.log_format not in LOG_FORMATS:
            msg = f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}"
            raise ConfigurationError(msg)
        if not 0 < self.port < 65536:
            msg = f"port must be between 1 and 65535, got {self.port}"
            raise ConfigurationError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build a config from environment variables.

        ==================== ==========================
        Variable             Field
        ==================== ==========================
        APP_HOST             host
        APP_PORT             port
        APP_DEBUG            debug
        LOG_LEVEL            log_level
        LOG_FORMAT           log_format
        LOG_PATH             log_file
        DATABASE_URL         db_url
        DB_ECHO              db_echo
        CORS_ALLOW_ORIGINS   cors_allow_origins (comma-separated)
        CORS_ALLOW_METHODS   cors_allow_methods (comma-separated)
        CORS_ALLOW_HEADERS   cors_allow_headers (comma-separated)
        CORS_MAX_AGE         cors_max_age
        ==================== ==========================

        Unset variables keep the field default. *environ* defaults to
        ``os.environ``.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("APP_HOST", defaults.host),
            port=_int(env, "APP_PORT", defaults.port),
            debug=_bool(env, "APP_DEBUG", defaults.debug),
            log_level=env.get("LOG_LEVEL", defaults.log_level).lower(),
            log_format=env.get("LOG_FORMAT", defaults.log_format).lower(),
            log_file=env.get("LOG_PATH") or defaults.log_file,
            db_url=env.get("DATABASE_URL") or defaults.db_url,
            db_echo=_bool(env, "DB_ECHO", defaults.db_echo),
            cors_allow_origins=_csv(env, "CORS_ALLOW_ORIGINS", defaults.cors_allow_origins),
            cors_allow_methods=_csv(env, "CORS_ALLOW_METHODS", defaults.cors_allow_methods),
            cors_allow_headers=_csv(env, "CORS_ALLOW_HEADERS", defaults.cors_allow_headers),
            cors_max_age=_int(env, "CORS_MAX_AGE", defaults.cors_max_age),
        )

    @classmethod
    def from_env_file(
        cls, path: str | Path = ".env", environ: Mapping[str, str] | None = None
    ) -> AppConfig:
        """Like ``from_env`` with a ``.env`` file underneath.

        Variables already set in *environ* win over the file; a missing
        file is not an error.
        """
        env = os.environ if environ is None else environ
        file_values = {k: v for k, v in dotenv_values(path).items() if v is not None}
        return cls.from_env({**file_values, **env})


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    msg = f"{key} must be a boolean (1/0, true/false, yes/no, on/off), got {raw!r}"
    raise ConfigurationError(msg)


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from None


def _csv(env: Mapping[str, str], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = env.get(key)
    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())
