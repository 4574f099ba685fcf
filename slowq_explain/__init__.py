"""Replay profiled MongoDB operations through explain and diagnose their plans."""

from .analysis import DiagnosticAssembler, DiagnosticResponse
from .errors import (
    DiagnosticError,
    ExplainExecutionError,
    MalformedNamespaceError,
    NotFoundError,
    PlanExtractionError,
    RecoverableDiagnosticError,
    UnsupportedAggregationError,
)

__all__ = [
    "DiagnosticAssembler",
    "DiagnosticResponse",
    "DiagnosticError",
    "ExplainExecutionError",
    "MalformedNamespaceError",
    "NotFoundError",
    "PlanExtractionError",
    "RecoverableDiagnosticError",
    "UnsupportedAggregationError",
]
