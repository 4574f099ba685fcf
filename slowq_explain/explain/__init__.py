from .executor import PlanExecutor
from .reconstructor import reconstruct_operation, reconstruct_request
from .requests import (
    AggregateRequest,
    CountRequest,
    DeleteRequest,
    ExplainRequest,
    FindRequest,
    QueryShape,
    UnknownRequest,
    UpdateRequest,
)
from .stages import COLLSCAN, ExplainResult, ExplainSummary, RawStageNode, parse_explain

__all__ = [
    "PlanExecutor",
    "reconstruct_operation",
    "reconstruct_request",
    "AggregateRequest",
    "CountRequest",
    "DeleteRequest",
    "ExplainRequest",
    "FindRequest",
    "QueryShape",
    "UnknownRequest",
    "UpdateRequest",
    "COLLSCAN",
    "ExplainResult",
    "ExplainSummary",
    "RawStageNode",
    "parse_explain",
]
