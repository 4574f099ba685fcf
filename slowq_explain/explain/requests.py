"""Executable descriptors rebuilt from profiled command shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, NamedTuple, Optional, Union


class QueryShape(NamedTuple):
    """Filter and sort a request applies, as seen by the recommendation rules."""

    filter: Dict[str, Any]
    sort: Dict[str, Any]


@dataclass(frozen=True)
class FindRequest:
    filter: Dict[str, Any] = field(default_factory=dict)
    sort: Dict[str, Any] = field(default_factory=dict)
    limit: int = 0
    skip: int = 0

    operation_type: ClassVar[str] = "find"

    def query_shape(self) -> QueryShape:
        return QueryShape(self.filter, self.sort)

    def to_command(self, collection: str) -> Dict[str, Any]:
        command: Dict[str, Any] = {"find": collection, "filter": self.filter}
        if self.sort:
            command["sort"] = self.sort
        if self.limit:
            command["limit"] = self.limit
        if self.skip:
            command["skip"] = self.skip
        return command

    def as_dict(self) -> Dict[str, Any]:
        return {
            "operation_type": self.operation_type,
            "filter": self.filter,
            "sort": self.sort,
            "limit": self.limit,
            "skip": self.skip,
        }


@dataclass(frozen=True)
class UpdateRequest:
    filter: Dict[str, Any] = field(default_factory=dict)
    update_spec: Union[Dict[str, Any], List[Dict[str, Any]]] = field(default_factory=dict)

    operation_type: ClassVar[str] = "update"

    @property
    def multi(self) -> bool:
        # Replacement documents cannot be applied with multi=true.
        if isinstance(self.update_spec, list):
            return True
        return bool(self.update_spec) and all(key.startswith("$") for key in self.update_spec)

    def query_shape(self) -> QueryShape:
        return QueryShape(self.filter, {})

    def to_command(self, collection: str) -> Dict[str, Any]:
        return {
            "update": collection,
            "updates": [{"q": self.filter, "u": self.update_spec, "multi": self.multi}],
        }

    def as_dict(self) -> Dict[str, Any]:
        return {
            "operation_type": self.operation_type,
            "filter": self.filter,
            "update_spec": self.update_spec,
        }


@dataclass(frozen=True)
class DeleteRequest:
    filter: Dict[str, Any] = field(default_factory=dict)

    operation_type: ClassVar[str] = "delete"

    def query_shape(self) -> QueryShape:
        return QueryShape(self.filter, {})

    def to_command(self, collection: str) -> Dict[str, Any]:
        return {"delete": collection, "deletes": [{"q": self.filter, "limit": 0}]}

    def as_dict(self) -> Dict[str, Any]:
        return {"operation_type": self.operation_type, "filter": self.filter}


@dataclass(frozen=True)
class CountRequest:
    filter: Dict[str, Any] = field(default_factory=dict)

    operation_type: ClassVar[str] = "count"

    def query_shape(self) -> QueryShape:
        return QueryShape(self.filter, {})

    def to_command(self, collection: str) -> Dict[str, Any]:
        return {"count": collection, "query": self.filter}

    def as_dict(self) -> Dict[str, Any]:
        return {"operation_type": self.operation_type, "filter": self.filter}


@dataclass(frozen=True)
class AggregateRequest:
    pipeline: List[Dict[str, Any]]

    operation_type: ClassVar[str] = "aggregate"

    def query_shape(self) -> QueryShape:
        """Leading ``$match`` filter and the ``$sort`` that immediately follows it."""

        filter_obj: Dict[str, Any] = {}
        sort_obj: Dict[str, Any] = {}
        position = 0
        if self.pipeline and isinstance(self.pipeline[0].get("$match"), dict):
            filter_obj = self.pipeline[0]["$match"]
            position = 1
        if position < len(self.pipeline) and isinstance(self.pipeline[position].get("$sort"), dict):
            sort_obj = self.pipeline[position]["$sort"]
        return QueryShape(filter_obj, sort_obj)

    def to_command(self, collection: str) -> Dict[str, Any]:
        return {"aggregate": collection, "pipeline": self.pipeline, "cursor": {}}

    def as_dict(self) -> Dict[str, Any]:
        return {"operation_type": self.operation_type, "pipeline": self.pipeline}


@dataclass(frozen=True)
class UnknownRequest:
    """Best-effort read for operation types without a dedicated explain path."""

    filter: Dict[str, Any] = field(default_factory=dict)
    source_type: Optional[str] = None

    operation_type: ClassVar[str] = "unknown"

    def query_shape(self) -> QueryShape:
        return QueryShape(self.filter, {})

    def to_command(self, collection: str) -> Dict[str, Any]:
        return {"find": collection, "filter": self.filter}

    def as_dict(self) -> Dict[str, Any]:
        return {
            "operation_type": self.operation_type,
            "source_type": self.source_type,
            "filter": self.filter,
        }


ExplainRequest = Union[
    FindRequest, UpdateRequest, DeleteRequest, CountRequest, AggregateRequest, UnknownRequest
]
