"""Normalize explain stage trees into diagnostic summaries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from ..explain.stages import COLLSCAN, ExplainResult, RawStageNode
from ..profiler.records import ProfiledOperation
from ..utils.logging_utils import get_logger

LOGGER = get_logger("analysis.extractor")

StageVisitor = Callable[[RawStageNode, int], None]


def walk_stages(root: Optional[RawStageNode], visit: StageVisitor) -> None:
    """Pre-order, depth-first walk; siblings are visited in their given order."""

    if root is None:
        return
    pending = [(root, 0)]
    while pending:
        node, depth = pending.pop()
        visit(node, depth)
        for child in reversed(node.children):
            pending.append((child, depth + 1))


def compute_efficiency(docs_examined: int, docs_returned: int) -> int:
    """Share of examined documents that were returned, as a 0-100 integer."""

    if docs_examined <= 0:
        return 100
    if docs_returned <= 0:
        return 0
    # Half-up rounding, so 0.5% reports as 1.
    value = math.floor(100.0 * docs_returned / docs_examined + 0.5)
    return max(0, min(100, int(value)))


@dataclass(frozen=True)
class FlatStage:
    stage: str
    depth: int
    execution_time_millis_estimate: int = 0
    works: int = 0
    advanced: int = 0
    need_time: int = 0
    need_yield: int = 0
    is_eof: bool = False
    index_name: Optional[str] = None
    direction: Optional[str] = None
    docs_examined: int = 0
    keys_examined: int = 0

    @classmethod
    def from_node(cls, node: RawStageNode, depth: int) -> "FlatStage":
        return cls(
            stage=node.stage,
            depth=depth,
            execution_time_millis_estimate=node.execution_time_millis_estimate,
            works=node.works,
            advanced=node.advanced,
            need_time=node.need_time,
            need_yield=node.need_yield,
            is_eof=node.is_eof,
            index_name=node.index_name,
            direction=node.direction,
            docs_examined=node.docs_examined,
            keys_examined=node.keys_examined,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "depth": self.depth,
            "execution_time_millis_estimate": self.execution_time_millis_estimate,
            "works": self.works,
            "advanced": self.advanced,
            "need_time": self.need_time,
            "need_yield": self.need_yield,
            "is_eof": self.is_eof,
            "index_name": self.index_name,
            "direction": self.direction,
            "docs_examined": self.docs_examined,
            "keys_examined": self.keys_examined,
        }


@dataclass(frozen=True)
class PerformanceBlock:
    execution_time_millis: int
    total_keys_examined: int
    total_docs_examined: int
    total_docs_returned: int
    indexes_used: List[str]
    is_collection_scan: bool
    efficiency: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "execution_time_millis": self.execution_time_millis,
            "total_keys_examined": self.total_keys_examined,
            "total_docs_examined": self.total_docs_examined,
            "total_docs_returned": self.total_docs_returned,
            "indexes_used": list(self.indexes_used),
            "is_collection_scan": self.is_collection_scan,
            "efficiency": self.efficiency,
        }


@dataclass(frozen=True)
class Diagnostic:
    performance: PerformanceBlock
    stages: List[FlatStage]
    recommendations: List[Any] = field(default_factory=list)
    plan_stage_names: FrozenSet[str] = frozenset()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "performance": self.performance.as_dict(),
            "recommendations": [rec.as_dict() for rec in self.recommendations],
            "stages": [stage.as_dict() for stage in self.stages],
        }


def _pick(reported: Optional[int], logged: int) -> int:
    return reported if reported is not None else logged


def extract_diagnostic(
    result: ExplainResult, operation: ProfiledOperation | None = None
) -> Diagnostic:
    """Compute the performance block and flattened stage list for *result*.

    The stage list follows the executed tree. Index and full-scan checks
    follow the classic plan tree, which differs for slot-based plans.
    Counters missing from the explain summary fall back to the profiled
    operation's logged metrics.
    """

    stages: List[FlatStage] = []
    indexes: List[str] = []
    seen_indexes = set()
    plan_stage_names = set()

    def _flatten(node: RawStageNode, depth: int) -> None:
        stages.append(FlatStage.from_node(node, depth))

    def _inspect(node: RawStageNode, depth: int) -> None:
        plan_stage_names.add(node.stage)
        if node.index_name and node.index_name not in seen_indexes:
            seen_indexes.add(node.index_name)
            indexes.append(node.index_name)

    walk_stages(result.root, _flatten)
    walk_stages(result.plan_tree, _inspect)

    summary = result.summary
    millis = keys = examined = returned = 0
    if operation is not None:
        if not summary.has_execution_stats:
            LOGGER.info(
                "No execution statistics in explain output; using profiled metrics for %s",
                operation.identifier,
            )
        millis, keys = operation.millis, operation.keys_examined
        examined, returned = operation.docs_examined, operation.docs_returned
    examined = _pick(summary.total_docs_examined, examined)
    returned = _pick(summary.docs_returned, returned)

    performance = PerformanceBlock(
        execution_time_millis=_pick(summary.execution_time_millis, millis),
        total_keys_examined=_pick(summary.total_keys_examined, keys),
        total_docs_examined=examined,
        total_docs_returned=returned,
        indexes_used=indexes,
        is_collection_scan=COLLSCAN in plan_stage_names,
        efficiency=compute_efficiency(examined, returned),
    )
    return Diagnostic(
        performance=performance,
        stages=stages,
        plan_stage_names=frozenset(plan_stage_names),
    )
