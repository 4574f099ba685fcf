"""Rule engine producing index and tuning recommendations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..explain.requests import ExplainRequest, QueryShape
from .extractor import Diagnostic, PerformanceBlock

LOW_EFFICIENCY_THRESHOLD = 10.0
BLOCKING_SORT = "SORT"


@dataclass(frozen=True)
class Recommendation:
    type: str
    priority: str
    message: str
    reason: str
    suggested_index: Optional[Dict[str, Any]] = None
    command: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority,
            "message": self.message,
            "reason": self.reason,
            "suggested_index": self.suggested_index,
            "command": self.command,
        }


@dataclass(frozen=True)
class RuleContext:
    performance: PerformanceBlock
    shape: QueryShape
    collection: Optional[str]
    stage_names: frozenset


Rule = Callable[[RuleContext], Optional[Recommendation]]


def index_fields(filter_obj: Mapping[str, Any]) -> Dict[str, int]:
    """Ascending index keys for the plain fields a filter constrains.

    ``$and`` clauses contribute their fields; other top-level operators
    (``$or``, ``$nor``, ``$expr``, ``$text``...) do not.
    """

    spec: Dict[str, int] = {}
    for key, value in filter_obj.items():
        if key == "$and" and isinstance(value, list):
            for clause in value:
                if isinstance(clause, Mapping):
                    for field_name in index_fields(clause):
                        spec.setdefault(field_name, 1)
        elif not str(key).startswith("$"):
            spec.setdefault(key, 1)
    return spec


def _create_index_command(collection: Optional[str], spec: Dict[str, Any]) -> Optional[str]:
    if not spec:
        return None
    fields = ", ".join(f"{field_name}: {direction}" for field_name, direction in spec.items())
    return f"db.{collection or '<collection>'}.createIndex({{{fields}}})"


def _sort_index(ctx: RuleContext) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(index_fields(ctx.shape.filter))
    for key, direction in ctx.shape.sort.items():
        # $meta sorts (textScore, searchScore) cannot be indexed.
        if not isinstance(direction, bool) and direction in (1, -1):
            merged[key] = int(direction)
    return merged


def missing_index_rule(ctx: RuleContext) -> Optional[Recommendation]:
    if not (ctx.performance.is_collection_scan and ctx.shape.filter):
        return None
    spec = index_fields(ctx.shape.filter)
    return Recommendation(
        type="missing_index",
        priority="high",
        message="Consider creating an index on the query filter fields",
        reason="Collection scan detected - query is examining all documents",
        suggested_index=spec or None,
        command=_create_index_command(ctx.collection, spec),
    )


def sort_index_rule(ctx: RuleContext) -> Optional[Recommendation]:
    if not (ctx.performance.is_collection_scan and ctx.shape.sort):
        return None
    spec = _sort_index(ctx)
    return Recommendation(
        type="sort_index",
        priority="medium",
        message="Consider creating an index to support sorting",
        reason="Sort operation may benefit from an index",
        suggested_index=spec or None,
        command=_create_index_command(ctx.collection, spec),
    )


def low_efficiency_rule(ctx: RuleContext) -> Optional[Recommendation]:
    examined = ctx.performance.total_docs_examined
    returned = ctx.performance.total_docs_returned
    if examined <= 0 or returned <= 0:
        return None
    percentage = returned / examined * 100
    if percentage >= LOW_EFFICIENCY_THRESHOLD:
        return None
    return Recommendation(
        type="low_efficiency",
        priority="medium",
        message=f"Query efficiency is low ({percentage:.1f}%)",
        reason=f"Examining {examined} documents to return {returned} results",
    )


def in_memory_sort_rule(ctx: RuleContext) -> Optional[Recommendation]:
    if ctx.performance.is_collection_scan or BLOCKING_SORT not in ctx.stage_names:
        return None
    spec = _sort_index(ctx)
    return Recommendation(
        type="in_memory_sort",
        priority="low",
        message="Sort is performed in memory after the index scan",
        reason="Blocking SORT stage found in the winning plan",
        suggested_index=spec or None,
        command=_create_index_command(ctx.collection, spec),
    )


DEFAULT_RULES: tuple[Rule, ...] = (
    missing_index_rule,
    sort_index_rule,
    low_efficiency_rule,
    in_memory_sort_rule,
)


def generate_recommendations(
    diagnostic: Diagnostic,
    request: ExplainRequest,
    *,
    collection: Optional[str] = None,
    rules: Sequence[Rule] = DEFAULT_RULES,
) -> List[Recommendation]:
    """Evaluate every rule independently, keeping declaration order."""

    ctx = RuleContext(
        performance=diagnostic.performance,
        shape=request.query_shape(),
        collection=collection,
        stage_names=diagnostic.plan_stage_names
        | frozenset(stage.stage for stage in diagnostic.stages),
    )
    recommendations: List[Recommendation] = []
    for rule in rules:
        recommendation = rule(ctx)
        if recommendation is not None:
            recommendations.append(recommendation)
    return recommendations
