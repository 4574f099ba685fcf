"""Orchestrate locate -> reconstruct -> explain -> extract -> recommend."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pymongo.errors import PyMongoError

from ..config import Settings, settings as default_settings
from ..errors import DiagnosticError, RecoverableDiagnosticError
from ..explain.executor import PlanExecutor
from ..explain.reconstructor import reconstruct_operation
from ..explain.requests import ExplainRequest
from ..explain.stages import ExplainResult
from ..profiler.locator import OperationLocator
from ..profiler.namespace import resolve_namespace
from ..profiler.records import ProfiledOperation
from ..utils.concurrency import create_thread_pool
from ..utils.logging_utils import get_logger
from ..utils.timing import collect_into, timed
from .extractor import Diagnostic, extract_diagnostic
from .recommendations import generate_recommendations

LOGGER = get_logger("analysis.assembler")


class DiagnosticState(str, Enum):
    LOCATED = "located"
    RECONSTRUCTED = "reconstructed"
    EXECUTED = "executed"
    EXTRACTED = "extracted"
    RECOMMENDED = "recommended"
    PARTIALLY_FAILED = "partially_failed"


@dataclass
class DiagnosticResponse:
    """Full or partial outcome of diagnosing one profiled operation."""

    query_id: str
    operation: ProfiledOperation
    state: DiagnosticState
    request: Optional[ExplainRequest] = None
    explain: Optional[ExplainResult] = None
    diagnostic: Optional[Diagnostic] = None
    failed_stage: Optional[DiagnosticState] = None
    error: Optional[str] = None
    message: Optional[str] = None
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.state is DiagnosticState.RECOMMENDED

    def explain_plan(self) -> Optional[Dict[str, Any]]:
        if self.diagnostic is None or self.explain is None:
            return None
        plan: Dict[str, Any] = {
            "query_planner": self.explain.query_planner,
            "execution_stats": self.explain.execution_stats,
            "server_info": self.explain.server_info,
        }
        plan.update(self.diagnostic.as_dict())
        return plan

    def as_dict(self) -> Dict[str, Any]:
        data = {
            "query_id": self.query_id,
            "namespace": self.operation.namespace,
            "operation": self.operation.raw_op,
            "operation_type": self.operation.operation_type,
            "original_query": self.operation.command,
            "explain_request": self.request.as_dict() if self.request is not None else None,
            "explain_plan": self.explain_plan(),
            "profiler_data": self.operation.profiler_context(),
            "state": self.state.value,
            "timings": dict(self.timings),
        }
        payload: Dict[str, Any] = {"success": self.success, "data": data}
        if not self.success:
            data["failed_stage"] = self.failed_stage.value if self.failed_stage else None
            payload["error"] = self.error
            payload["message"] = self.message
        return payload


@dataclass
class BatchOutcome:
    query_id: str
    response: Optional[DiagnosticResponse] = None
    error: Optional[Exception] = None


class DiagnosticAssembler:
    """Run the diagnostic pipeline for profiled operations.

    Errors raised while locating the operation or parsing its namespace
    propagate to the caller. Anything later becomes a partial response that
    still carries the operation context.
    """

    def __init__(
        self,
        locator: OperationLocator,
        executor: PlanExecutor,
        *,
        max_workers: Optional[int] = None,
    ) -> None:
        self.locator = locator
        self.executor = executor
        self.max_workers = max_workers

    @classmethod
    def from_client(cls, client: Any, config: Settings | None = None) -> "DiagnosticAssembler":
        config = config or default_settings
        profile = client[config.database_name][config.profile_collection]
        return cls(
            OperationLocator(profile),
            PlanExecutor(client, config=config),
            max_workers=config.max_workers,
        )

    def diagnose(self, query_id: str) -> DiagnosticResponse:
        operation = self.locator.locate(query_id)
        namespace = resolve_namespace(operation.namespace)

        timings: Dict[str, float] = {}
        sink = collect_into(timings, LOGGER)
        response = DiagnosticResponse(
            query_id=query_id,
            operation=operation,
            state=DiagnosticState.LOCATED,
            timings=timings,
        )

        step = DiagnosticState.RECONSTRUCTED
        try:
            response.request = reconstruct_operation(operation)
            response.state = step

            step = DiagnosticState.EXECUTED
            with timed("explain", sink):
                response.explain = self.executor.explain(namespace, response.request)
            response.state = step

            step = DiagnosticState.EXTRACTED
            diagnostic = extract_diagnostic(response.explain, operation)
            response.state = step

            step = DiagnosticState.RECOMMENDED
            recommendations = generate_recommendations(
                diagnostic, response.request, collection=namespace.collection
            )
            response.diagnostic = dataclasses.replace(
                diagnostic, recommendations=recommendations
            )
            response.state = step
        except RecoverableDiagnosticError as exc:
            LOGGER.warning(
                "Diagnosis of %s stopped before %s: %s", query_id, step.value, exc
            )
            response.state = DiagnosticState.PARTIALLY_FAILED
            response.failed_stage = step
            response.error = "Failed to generate explain plan"
            response.message = str(exc)
        return response

    def diagnose_many(self, query_ids: Iterable[str]) -> List[BatchOutcome]:
        """Diagnose independent operations concurrently, preserving input order."""

        ids = list(query_ids)
        if not ids:
            return []
        with create_thread_pool(self.max_workers) as pool:
            futures = [pool.submit(self.diagnose, query_id) for query_id in ids]
            outcomes: List[BatchOutcome] = []
            for query_id, future in zip(ids, futures):
                try:
                    outcomes.append(BatchOutcome(query_id, response=future.result()))
                except (DiagnosticError, PyMongoError) as exc:
                    LOGGER.warning("Diagnosis of %s failed: %s", query_id, exc)
                    outcomes.append(BatchOutcome(query_id, error=exc))
        return outcomes
