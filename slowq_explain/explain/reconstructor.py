"""Rebuild explainable requests from logged profiler commands."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, List, Optional

from ..errors import UnsupportedAggregationError
from ..profiler.records import ProfiledOperation
from .requests import (
    AggregateRequest,
    CountRequest,
    DeleteRequest,
    ExplainRequest,
    FindRequest,
    UnknownRequest,
    UpdateRequest,
)


def _first_present(command: Mapping[str, Any], *aliases: str) -> Any:
    for alias in aliases:
        value = command.get(alias)
        if value is not None:
            return value
    return None


def _document(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _non_negative_int(value: Any) -> int:
    try:
        return abs(int(value))
    except (TypeError, ValueError):
        return 0


def _first_statement(command: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """First entry of a batched ``updates``/``deletes`` list, or the command itself."""

    statements = command.get(key)
    if isinstance(statements, Sequence) and not isinstance(statements, (str, bytes)):
        if statements and isinstance(statements[0], Mapping):
            return statements[0]
    return command


def _reconstruct_find(command: Mapping[str, Any]) -> FindRequest:
    return FindRequest(
        filter=_document(_first_present(command, "filter", "query")),
        sort=_document(command.get("sort")),
        limit=_non_negative_int(command.get("limit")),
        skip=_non_negative_int(command.get("skip")),
    )


def _reconstruct_update(command: Mapping[str, Any]) -> UpdateRequest:
    statement = command
    if _first_present(command, "q", "filter") is None:
        statement = _first_statement(command, "updates")
    spec = _first_present(statement, "u", "update")
    if isinstance(spec, Sequence) and not isinstance(spec, (str, bytes)):
        update_spec: Any = [dict(stage) for stage in spec if isinstance(stage, Mapping)]
    else:
        update_spec = _document(spec)
    return UpdateRequest(
        filter=_document(_first_present(statement, "q", "filter")),
        update_spec=update_spec,
    )


def _reconstruct_delete(command: Mapping[str, Any]) -> DeleteRequest:
    statement = command
    if _first_present(command, "q", "filter") is None:
        statement = _first_statement(command, "deletes")
    return DeleteRequest(filter=_document(_first_present(statement, "q", "filter")))


def _reconstruct_count(command: Mapping[str, Any]) -> CountRequest:
    return CountRequest(filter=_document(_first_present(command, "query", "filter")))


def _reconstruct_aggregate(command: Mapping[str, Any]) -> AggregateRequest:
    pipeline = command.get("pipeline")
    if (
        not isinstance(pipeline, Sequence)
        or isinstance(pipeline, (str, bytes, Mapping))
        or not pipeline
    ):
        raise UnsupportedAggregationError("Invalid aggregation pipeline")
    stages: List[Dict[str, Any]] = []
    for stage in pipeline:
        if not isinstance(stage, Mapping):
            raise UnsupportedAggregationError("Invalid aggregation pipeline stage")
        stages.append(dict(stage))
    return AggregateRequest(pipeline=stages)


_DISPATCH: Dict[str, Callable[[Mapping[str, Any]], ExplainRequest]] = {
    "find": _reconstruct_find,
    "update": _reconstruct_update,
    "delete": _reconstruct_delete,
    "count": _reconstruct_count,
    "aggregate": _reconstruct_aggregate,
}


def reconstruct_request(
    operation_type: str,
    command: Mapping[str, Any] | None,
    *,
    source_type: Optional[str] = None,
) -> ExplainRequest:
    """Build the explain descriptor for *command* logged under *operation_type*.

    Only aggregations fail hard; every other shape degrades to an empty filter.
    """

    command = command or {}
    builder = _DISPATCH.get(operation_type)
    if builder is None:
        return UnknownRequest(
            filter=_document(_first_present(command, "filter", "query")),
            source_type=source_type or operation_type,
        )
    return builder(command)


def reconstruct_operation(operation: ProfiledOperation) -> ExplainRequest:
    return reconstruct_request(
        operation.operation_type, operation.command, source_type=operation.raw_op
    )
