"""Error taxonomy for the diagnostic engine."""

from __future__ import annotations


class DiagnosticError(Exception):
    """Base class for every error raised while diagnosing an operation."""


class MalformedNamespaceError(DiagnosticError):
    """Namespace string could not be split into database and collection."""

    def __init__(self, namespace: str) -> None:
        super().__init__(f"Cannot parse collection from namespace: {namespace!r}")
        self.namespace = namespace


class NotFoundError(DiagnosticError):
    """No profiled operation matched the requested identifier."""

    def __init__(self, query_id: str) -> None:
        super().__init__(f"No profiler data found for queryId: {query_id}")
        self.query_id = query_id


class RecoverableDiagnosticError(DiagnosticError):
    """Failure after the operation was located; yields a partial result."""


class UnsupportedAggregationError(RecoverableDiagnosticError):
    """Aggregate operation whose logged command has no usable pipeline."""


class ExplainExecutionError(RecoverableDiagnosticError):
    """The storage engine rejected the explain request or timed out."""

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class PlanExtractionError(RecoverableDiagnosticError):
    """The explain document did not contain a usable stage tree."""
