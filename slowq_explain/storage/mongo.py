"""MongoDB connection lifecycle for the diagnostics service."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import OperationFailure

from ..config import Settings, settings as default_settings
from ..utils.logging_utils import get_logger

LOGGER = get_logger("storage.mongo")


def connect(config: Settings | None = None) -> Tuple[MongoClient, Database]:
    """Open a client for ``config.mongodb_uri`` and return it with its database."""

    config = config or default_settings
    client: MongoClient = MongoClient(
        config.mongodb_uri,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        connectTimeoutMS=config.connect_timeout_ms,
    )
    database = client[config.database_name]
    LOGGER.info("Connected to MongoDB database: %s", config.database_name)

    if config.enable_profiling:
        enable_profiling(database, slow_ms=config.slow_ms)
    return client, database


def enable_profiling(database: Database, *, slow_ms: int = 100) -> Dict[str, Any] | None:
    """Switch profiling to level 1 when it is off; returns the previous status."""

    try:
        status = database.command({"profile": -1})
        LOGGER.info("Current profiling level: %s", status.get("was"))
        if status.get("was") == 0:
            database.command({"profile": 1, "slowms": slow_ms})
            LOGGER.info("MongoDB profiling enabled for operations > %dms", slow_ms)
        return status
    except OperationFailure as exc:
        LOGGER.warning(
            "Could not enable profiling (may need admin privileges): %s", exc
        )
        return None


def close(client: MongoClient | None) -> None:
    if client is None:
        return
    client.close()
    LOGGER.info("MongoDB connection closed")
