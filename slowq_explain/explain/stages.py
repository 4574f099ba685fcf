"""Stage trees parsed from explain output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import PlanExtractionError

COLLSCAN = "COLLSCAN"


def _counter(node: Mapping[str, Any], key: str) -> int:
    value = node.get(key)
    if value is None:
        return 0
    if isinstance(value, bool):
        raise PlanExtractionError(f"Counter {key!r} is not numeric: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise PlanExtractionError(f"Counter {key!r} is not numeric: {value!r}") from exc


@dataclass(frozen=True)
class RawStageNode:
    """One physical stage; fan-in stages simply carry several children."""

    stage: str
    docs_examined: int = 0
    keys_examined: int = 0
    works: int = 0
    advanced: int = 0
    need_time: int = 0
    need_yield: int = 0
    is_eof: bool = False
    execution_time_millis_estimate: int = 0
    index_name: Optional[str] = None
    direction: Optional[str] = None
    children: Tuple["RawStageNode", ...] = ()

    @classmethod
    def from_document(cls, node: Mapping[str, Any]) -> "RawStageNode":
        if not isinstance(node, Mapping):
            raise PlanExtractionError(f"Stage entry is not a document: {node!r}")
        # Slot-based engines nest the classic tree under ``queryPlan``.
        if "stage" not in node and isinstance(node.get("queryPlan"), Mapping):
            node = node["queryPlan"]
        return cls(
            stage=str(node.get("stage") or "UNKNOWN"),
            docs_examined=_counter(node, "docsExamined"),
            keys_examined=_counter(node, "keysExamined"),
            works=_counter(node, "works"),
            advanced=_counter(node, "advanced"),
            need_time=_counter(node, "needTime"),
            need_yield=_counter(node, "needYield"),
            is_eof=bool(node.get("isEOF", False)),
            execution_time_millis_estimate=_counter(node, "executionTimeMillisEstimate"),
            index_name=node.get("indexName"),
            direction=node.get("direction"),
            children=tuple(cls.from_document(child) for child in _child_documents(node)),
        )


def _child_documents(node: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    children: List[Mapping[str, Any]] = []
    if isinstance(node.get("inputStage"), Mapping):
        children.append(node["inputStage"])
    inputs = node.get("inputStages")
    if isinstance(inputs, list):
        children.extend(inputs)
    shards = node.get("shards")
    if isinstance(shards, list):
        for shard in shards:
            if not isinstance(shard, Mapping):
                continue
            plan = shard.get("executionStages") or shard.get("winningPlan")
            if isinstance(plan, Mapping):
                children.append(plan)
    return children


@dataclass(frozen=True)
class ExplainSummary:
    """Top-level counters; ``None`` means the engine did not report the value."""

    execution_time_millis: Optional[int] = None
    total_keys_examined: Optional[int] = None
    total_docs_examined: Optional[int] = None
    docs_returned: Optional[int] = None

    @property
    def has_execution_stats(self) -> bool:
        return self.total_docs_examined is not None or self.docs_returned is not None


@dataclass
class ExplainResult:
    root: Optional[RawStageNode]
    summary: ExplainSummary
    query_planner: Dict[str, Any] = field(default_factory=dict)
    execution_stats: Dict[str, Any] = field(default_factory=dict)
    server_info: Dict[str, Any] = field(default_factory=dict)
    plan_root: Optional[RawStageNode] = None

    @property
    def plan_tree(self) -> Optional[RawStageNode]:
        """Classic stage tree used for index and full-scan checks."""

        return self.plan_root if self.plan_root is not None else self.root


def _optional_counter(stats: Mapping[str, Any], *keys: str) -> Optional[int]:
    for key in keys:
        if stats.get(key) is not None:
            return _counter(stats, key)
    return None


def _explain_sections(document: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Find ``queryPlanner`` and ``executionStats``, looking inside ``$cursor`` for pipelines."""

    planner = document.get("queryPlanner")
    stats = document.get("executionStats")
    if planner is None and stats is None:
        stages = document.get("stages")
        if isinstance(stages, list) and stages and isinstance(stages[0], Mapping):
            cursor = stages[0].get("$cursor")
            if isinstance(cursor, Mapping):
                planner = cursor.get("queryPlanner")
                stats = cursor.get("executionStats")
    return (
        dict(planner) if isinstance(planner, Mapping) else {},
        dict(stats) if isinstance(stats, Mapping) else {},
    )


def _classic_plan(planner: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    # Slot-based execution stats use lowercase stage names (scan, ixseek, group);
    # the classic names only appear under winningPlan.queryPlan.
    winning = planner.get("winningPlan")
    if isinstance(winning, Mapping) and isinstance(winning.get("queryPlan"), Mapping):
        return winning["queryPlan"]
    return None


def parse_explain(document: Mapping[str, Any]) -> ExplainResult:
    """Turn a raw explain reply into a stage tree plus summary counters."""

    if not isinstance(document, Mapping):
        raise PlanExtractionError("Explain output is not a document")
    planner, stats = _explain_sections(document)

    root_doc = stats.get("executionStages")
    if not isinstance(root_doc, Mapping):
        root_doc = planner.get("winningPlan")
    root = RawStageNode.from_document(root_doc) if isinstance(root_doc, Mapping) else None
    classic = _classic_plan(planner)
    plan_root = RawStageNode.from_document(classic) if classic is not None else None

    summary = ExplainSummary(
        execution_time_millis=_optional_counter(stats, "executionTimeMillis"),
        total_keys_examined=_optional_counter(stats, "totalKeysExamined"),
        total_docs_examined=_optional_counter(stats, "totalDocsExamined"),
        docs_returned=_optional_counter(stats, "nReturned", "totalDocsReturned"),
    )
    server_info = document.get("serverInfo")
    return ExplainResult(
        root=root,
        summary=summary,
        query_planner=planner,
        execution_stats=stats,
        server_info=dict(server_info) if isinstance(server_info, Mapping) else {},
        plan_root=plan_root,
    )
