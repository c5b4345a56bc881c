"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Optional, TypeVar

from dotenv import find_dotenv, load_dotenv


class ConfigError(Exception):
    """Configuration is missing or malformed."""


_UNSIGNED = re.compile(r"\+?\d+")

_Parser = Callable[[str, str], Any]


def _unsigned(bits: int) -> _Parser:
    limit = (1 << bits) - 1

    def parse(key: str, raw: str) -> int:
        text = raw.strip()
        if not _UNSIGNED.fullmatch(text):
            raise ConfigError(f"invalid value {raw!r} for `{key}`: expected an unsigned integer")
        value = int(text)
        if value > limit:
            raise ConfigError(f"invalid value {raw!r} for `{key}`: out of range")
        return value

    return parse


_u16 = _unsigned(16)
_u32 = _unsigned(32)
_u64 = _unsigned(64)


def _setting(key: str, parse: Optional[_Parser] = None, default: Any = MISSING) -> Any:
    """Declare a field read from ``key``; without a parser the raw string is kept."""
    return field(default=default, metadata={"env": key, "parse": parse})


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = _setting("database_url")
    read_url: str = _setting("read_database_url")
    max_connections: int = _setting("db_max_connections", _u32, 20)
    min_connections: int = _setting("db_min_connections", _u32, 5)
    acquire_timeout_secs: int = _setting("db_acquire_timeout_secs", _u64, 5)


@dataclass(frozen=True)
class RedisConfig:
    url: str = _setting("redis_url")
    pool_size: int = _setting("redis_pool_size", _u64, 10)


@dataclass(frozen=True)
class ServerConfig:
    port: int = _setting("http_port", _u16)
    shutdown_timeout_secs: int = _setting("shutdown_timeout_secs", _u64, 30)
    sse_channel_capacity: int = _setting("sse_channel_capacity", _u64, 16)


@dataclass(frozen=True)
class ClientsConfig:
    profile_url: str = _setting("profile_api_url")
    timeout_secs: int = _setting("http_timeout_secs", _u64, 3)
    connect_timeout_secs: int = _setting("http_connect_timeout_secs", _u64, 1)
    pool_idle_timeout_secs: int = _setting("http_pool_idle_timeout_secs", _u64, 90)
    max_retries: int = _setting("http_max_retries", _u32, 3)


@dataclass(frozen=True)
class CacheConfig:
    like_counts_ttl_secs: int = _setting("cache_ttl_like_counts_secs", _u64, 300)
    content_validation_ttl_secs: int = _setting("cache_ttl_content_validation_secs", _u64, 3600)
    user_status_ttl_secs: int = _setting("cache_ttl_user_status_secs", _u64, 60)
    leaderboard_ttl_secs: int = _setting("cache_ttl_leaderboard_secs", _u64, 90)


@dataclass(frozen=True)
class LimitsConfig:
    write_per_minute: int = _setting("rate_limit_write_per_minute", _u32, 30)
    read_per_minute: int = _setting("rate_limit_read_per_minute", _u32, 1000)
    rate_limit_window_secs: int = _setting("rate_limit_window_secs", _u64, 60)
    max_batch_pairs: int = _setting("max_batch_pairs", _u64, 100)
    max_top_liked_limit: int = _setting("max_top_liked_limit", _u64, 50)
    user_likes_default_page_size: int = _setting("user_likes_default_page_size", _u64, 20)
    user_likes_max_page_size: int = _setting("user_likes_max_page_size", _u64, 100)


@dataclass(frozen=True)
class CircuitBreakerConfig:
    failure_threshold: int = _setting("circuit_breaker_failure_threshold", _u32, 5)
    recovery_timeout_secs: int = _setting("circuit_breaker_recovery_timeout_secs", _u64, 30)
    success_threshold: int = _setting("circuit_breaker_success_threshold", _u32, 3)


@dataclass(frozen=True)
class GeneralConfig:
    log_level: str = _setting("log_level", None, "info")
    heartbeat_interval_secs: int = _setting("sse_heartbeat_interval_secs", _u64, 15)
    leaderboard_refresh_interval_secs: int = _setting(
        "leaderboard_refresh_interval_secs", _u64, 60
    )


_T = TypeVar("_T")


def _build(cls: type[_T], values: Mapping[str, str]) -> _T:
    kwargs: dict[str, Any] = {}
    for spec in fields(cls):  # type: ignore[arg-type]
        key = spec.metadata["env"]
        parse = spec.metadata["parse"]
        if key in values:
            raw = values[key]
            kwargs[spec.name] = raw if parse is None else parse(key, raw)
        elif spec.default is MISSING:
            raise ConfigError(f"missing field `{key}`")
    return cls(**kwargs)


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""

    database: DatabaseConfig
    redis: RedisConfig
    server: ServerConfig
    clients: ClientsConfig
    cache: CacheConfig
    limits: LimitsConfig
    circuit_breaker: CircuitBreakerConfig
    app: GeneralConfig

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Load configuration from environment variables.

        Variable names are matched case-insensitively. When no mapping is
        given, a ``.env`` file is loaded first (without overriding variables
        already set) and the process environment is used.
        """
        if environ is None:
            load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ
        values = {key.lower(): value for key, value in environ.items()}
        return cls(
            database=_build(DatabaseConfig, values),
            redis=_build(RedisConfig, values),
            server=_build(ServerConfig, values),
            clients=_build(ClientsConfig, values),
            cache=_build(CacheConfig, values),
            limits=_build(LimitsConfig, values),
            circuit_breaker=_build(CircuitBreakerConfig, values),
            app=_build(GeneralConfig, values),
        )