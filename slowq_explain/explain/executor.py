"""Submit reconstructed requests to the server's explain command."""

from __future__ import annotations

from typing import Any, Dict, Optional

import pymongo
from pymongo.errors import PyMongoError

from ..config import Settings, settings as default_settings
from ..errors import ExplainExecutionError
from ..profiler.namespace import Namespace
from ..utils.logging_utils import get_logger
from .requests import ExplainRequest
from .stages import ExplainResult, parse_explain

LOGGER = get_logger("explain.executor")


class PlanExecutor:
    """Adapter around ``{explain: <command>}``; writes are planned, never applied."""

    def __init__(
        self,
        client: Any,
        *,
        verbosity: Optional[str] = None,
        timeout_ms: Optional[int] = None,
        require_existing_collection: Optional[bool] = None,
        config: Settings | None = None,
    ) -> None:
        config = config or default_settings
        self.client = client
        self.verbosity = verbosity or config.explain_verbosity
        self.timeout_ms = config.explain_timeout_ms if timeout_ms is None else timeout_ms
        self.require_existing_collection = (
            config.require_existing_collection
            if require_existing_collection is None
            else require_existing_collection
        )

    def build_command(self, namespace: Namespace, request: ExplainRequest) -> Dict[str, Any]:
        return {
            "explain": request.to_command(namespace.collection),
            "verbosity": self.verbosity,
        }

    def explain(self, namespace: Namespace, request: ExplainRequest) -> ExplainResult:
        database = self.client[namespace.database]
        command = self.build_command(namespace, request)
        seconds = self.timeout_ms / 1000.0 if self.timeout_ms else None
        LOGGER.debug("Explaining %s on %s", request.operation_type, namespace)

        try:
            with pymongo.timeout(seconds):
                if self.require_existing_collection:
                    names = database.list_collection_names(filter={"name": namespace.collection})
                    if namespace.collection not in names:
                        raise ExplainExecutionError(
                            f"Collection {namespace} does not exist"
                        )
                reply = database.command(command)
        except PyMongoError as exc:
            timed_out = bool(getattr(exc, "timeout", False))
            LOGGER.warning(
                "Explain for %s on %s failed%s: %s",
                request.operation_type,
                namespace,
                " (timeout)" if timed_out else "",
                exc,
            )
            raise ExplainExecutionError(str(exc), timed_out=timed_out) from exc

        return parse_explain(reply)
