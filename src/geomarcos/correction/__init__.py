"""Maintenance passes over the marker store: correction, validation, diagnostics."""

from .batch import (
    CORRECTION_REASON,
    BatchCorrector,
    CorrectionPlan,
    CorrectionReport,
    PlanItem,
    Resolution,
)
from .maintenance import (
    MarkerDiagnostics,
    ValidationSummary,
    diagnose_markers,
    evaluate_marker,
    validate_markers,
)

__all__ = [
    "BatchCorrector",
    "CORRECTION_REASON",
    "CorrectionPlan",
    "CorrectionReport",
    "MarkerDiagnostics",
    "PlanItem",
    "Resolution",
    "ValidationSummary",
    "diagnose_markers",
    "evaluate_marker",
    "validate_markers",
]
