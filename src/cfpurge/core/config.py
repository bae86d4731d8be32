from __future__ import annotations

import os
from dataclasses import dataclass, replace

from cfpurge.core.errors import ConfigurationError

RETENTION_DAYS = 30

DEFAULT_DSN = "dbname=cfdb"
DEFAULT_PG_CONNECT_TIMEOUT_SECONDS = 10
DEFAULT_CF_KEY_BIN = "cf-key"
DEFAULT_CF_KEY_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True)
class Settings:
    dsn: str
    pg_connect_timeout_seconds: int
    cf_key_bin: str
    cf_key_timeout_seconds: float
    retention_days: int = RETENTION_DAYS

    def with_overrides(self, *, dsn: str | None = None) -> Settings:
        if dsn is None:
            return self
        if not dsn.strip():
            raise ConfigurationError("Database connection string must not be empty.")
        return replace(self, dsn=dsn)


def _read_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip() or default


def _read_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings() -> Settings:
    return Settings(
        dsn=_read_str_env("CFPURGE_DSN", DEFAULT_DSN),
        pg_connect_timeout_seconds=_read_int_env(
            "CFPURGE_PG_CONNECT_TIMEOUT_SECONDS", DEFAULT_PG_CONNECT_TIMEOUT_SECONDS
        ),
        cf_key_bin=_read_str_env("CFPURGE_CF_KEY_BIN", DEFAULT_CF_KEY_BIN),
        cf_key_timeout_seconds=_read_float_env(
            "CFPURGE_CF_KEY_TIMEOUT_SECONDS", DEFAULT_CF_KEY_TIMEOUT_SECONDS
        ),
    )
