"""Normalized view of ``system.profile`` documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

OPERATION_TYPES = ("find", "update", "delete", "count", "aggregate", "unknown")

_OP_ALIASES = {
    "find": "find",
    "query": "find",
    "update": "update",
    "delete": "delete",
    "remove": "delete",
    "count": "count",
    "aggregate": "aggregate",
}

# Leading verbs of commands profiled under ``op: "command"``.
_COMMAND_VERBS = ("find", "aggregate", "count", "update", "delete")


def _first_int(doc: Mapping[str, Any], *keys: str) -> int:
    for key in keys:
        value = doc.get(key)
        if value is None:
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return 0


def normalize_operation_type(op: Any, command: Mapping[str, Any] | None = None) -> str:
    """Map a raw profiler ``op`` tag onto one of :data:`OPERATION_TYPES`."""

    tag = str(op or "").strip().lower()
    if tag in _OP_ALIASES:
        return _OP_ALIASES[tag]
    if tag == "command" and command:
        for key in command:
            if key in _COMMAND_VERBS:
                return key
    return "unknown"


@dataclass(frozen=True)
class ProfiledOperation:
    """Read-only record of an operation captured by the database profiler."""

    identifier: str
    namespace: Optional[str]
    operation_type: str
    raw_op: Optional[str]
    command: Dict[str, Any]
    timestamp: Optional[datetime] = None
    millis: int = 0
    keys_examined: int = 0
    docs_examined: int = 0
    docs_returned: int = 0
    plan_summary: Optional[str] = None
    client: Optional[str] = None
    user: Optional[str] = None
    app_name: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "ProfiledOperation":
        command = doc.get("command") or doc.get("query") or {}
        if not isinstance(command, Mapping):
            command = {}
        raw_op = doc.get("op")
        return cls(
            identifier=str(doc.get("_id", "")),
            namespace=doc.get("ns"),
            operation_type=normalize_operation_type(raw_op, command),
            raw_op=raw_op,
            command=dict(command),
            timestamp=doc.get("ts"),
            millis=_first_int(doc, "millis", "duration"),
            keys_examined=_first_int(doc, "keysExamined", "nscanned"),
            docs_examined=_first_int(doc, "docsExamined", "nscannedObjects"),
            docs_returned=_first_int(doc, "nreturned", "docsReturned"),
            plan_summary=doc.get("planSummary"),
            client=doc.get("client"),
            user=doc.get("user"),
            app_name=doc.get("appName"),
            raw=dict(doc),
        )

    def profiler_context(self) -> Dict[str, Any]:
        """Subset of the record echoed back to operators alongside a diagnostic."""

        return {
            "timestamp": self.timestamp,
            "execution_time": self.millis,
            "plan_summary": self.plan_summary,
            "client": self.client,
            "user": self.user,
            "app_name": self.app_name,
        }

    def as_summary(self) -> Dict[str, Any]:
        return {
            "query_id": self.identifier,
            "query_text": self.command,
            "execution_time": self.millis,
            "keys_examined": self.keys_examined,
            "docs_examined": self.docs_examined,
            "docs_returned": self.docs_returned,
            "ts": self.timestamp,
            "namespace": self.namespace,
            "operation": self.raw_op or "unknown",
            "plan_summary": self.plan_summary,
        }
