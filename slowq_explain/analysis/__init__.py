from .assembler import BatchOutcome, DiagnosticAssembler, DiagnosticResponse, DiagnosticState
from .extractor import (
    Diagnostic,
    FlatStage,
    PerformanceBlock,
    compute_efficiency,
    extract_diagnostic,
    walk_stages,
)
from .recommendations import (
    DEFAULT_RULES,
    Recommendation,
    generate_recommendations,
    index_fields,
)

__all__ = [
    "BatchOutcome",
    "DiagnosticAssembler",
    "DiagnosticResponse",
    "DiagnosticState",
    "Diagnostic",
    "FlatStage",
    "PerformanceBlock",
    "compute_efficiency",
    "extract_diagnostic",
    "walk_stages",
    "DEFAULT_RULES",
    "Recommendation",
    "generate_recommendations",
    "index_fields",
]
