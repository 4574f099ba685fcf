"""Configuration primitives for the explain diagnostics service."""

from __future__ import annotations

from dataclasses import dataclass
import os


def _env_flag(name: str, *, default: bool) -> bool:
    """Interpret common truthy/falsey environment values."""

    value = os.environ.get(name)
    if value is None:
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, *, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration defaults for profiler replay."""

    mongodb_uri: str = os.environ.get(
        "MONGODB_URI", "mongodb://localhost:27017/studio3t_profiler"
    )
    default_database: str = "studio3t_profiler"
    profile_collection: str = os.environ.get("SLOWQ_PROFILE_COLLECTION", "system.profile")
    explain_verbosity: str = os.environ.get("SLOWQ_EXPLAIN_VERBOSITY", "executionStats")
    explain_timeout_ms: int = _env_int("SLOWQ_EXPLAIN_TIMEOUT_MS", default=10_000)
    server_selection_timeout_ms: int = _env_int(
        "SLOWQ_SERVER_SELECTION_TIMEOUT_MS", default=5_000
    )
    connect_timeout_ms: int = _env_int("SLOWQ_CONNECT_TIMEOUT_MS", default=10_000)
    require_existing_collection: bool = _env_flag(
        "SLOWQ_REQUIRE_EXISTING_COLLECTION", default=True
    )
    enable_profiling: bool = _env_flag("SLOWQ_ENABLE_PROFILING", default=True)
    slow_ms: int = _env_int("SLOWQ_SLOW_MS", default=100)
    default_list_limit: int = _env_int("SLOWQ_LIST_LIMIT", default=100)
    max_workers: int = _env_int("SLOWQ_MAX_WORKERS", default=4)

    @property
    def database_name(self) -> str:
        """Database named by the URI path, e.g. ``mongodb://host/shop?x=1`` -> ``shop``."""

        remainder = self.mongodb_uri.split("://", 1)[-1]
        if "/" not in remainder:
            return self.default_database
        path = remainder.split("/", 1)[1].split("?", 1)[0]
        return path or self.default_database


settings = Settings()
