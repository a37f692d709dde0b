"""Validation and diagnostic passes over persisted markers."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..geodesy.projection import ProjectionError, Projector, default_projector
from ..store.records import MarkerRecord
from ..store.repository import MarkerStore
from ..validation.classifier import (
    BRAZIL_BOUNDS,
    UTM_22S,
    Classification,
    CoordinateKind,
    UtmBounds,
    classify,
    describe,
    is_valid,
)

__all__ = [
    "MarkerDiagnostics",
    "ValidationSummary",
    "diagnose_markers",
    "evaluate_marker",
    "validate_markers",
]

LOGGER = logging.getLogger(__name__)


def evaluate_marker(
    record: MarkerRecord,
    *,
    projector: Optional[Projector] = None,
    bounds: UtmBounds = UTM_22S,
) -> Classification:
    """Classify a stored marker, checking that valid UTM points fall in Brazil.

    Only ``PROJECTED_VALID`` points are converted back to latitude/longitude;
    local survey coordinates have no geodetic meaning to check.
    """

    result = classify(record.coordinate_e, record.coordinate_n, CoordinateKind.PROJECTED, bounds)
    if result is not Classification.PROJECTED_VALID:
        return result
    projector = projector or (default_projector() if bounds == UTM_22S else Projector(bounds))
    try:
        lon, lat = projector.to_geographic(record.coordinate_e, record.coordinate_n)  # type: ignore[arg-type]
    except ProjectionError as exc:
        LOGGER.debug("marker %s: back-conversion failed: %s", record.code, exc)
        return Classification.CONVERSION_FAILED
    if not BRAZIL_BOUNDS.contains(lon, lat):
        return Classification.CONVERSION_FAILED
    return result


@dataclass
class ValidationSummary:
    total: int = 0
    valid: int = 0
    invalid: int = 0
    by_classification: Counter = field(default_factory=Counter)
    details: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "valid": self.valid,
            "invalid": self.invalid,
            "by_classification": dict(self.by_classification),
            "details": list(self.details),
        }


def validate_markers(
    store: MarkerStore,
    *,
    force: bool = False,
    projector: Optional[Projector] = None,
    bounds: UtmBounds = UTM_22S,
) -> ValidationSummary:
    """Record a validation outcome on every pending marker in one transaction.

    Markers validated earlier are left alone unless ``force`` is set.
    """

    summary = ValidationSummary()
    now = datetime.now(timezone.utc)
    with store.transaction():
        for record in store.select_for_validation(force=force):
            result = evaluate_marker(record, projector=projector, bounds=bounds)
            ok = is_valid(result)
            error = None if ok else describe(result)
            store.set_validation(record.id, ok, error, when=now)  # type: ignore[arg-type]
            summary.total += 1
            summary.by_classification[result.value] += 1
            if ok:
                summary.valid += 1
            else:
                summary.invalid += 1
                summary.details.append(
                    {
                        "marker_id": record.id,
                        "code": record.code,
                        "coordinate_e": record.coordinate_e,
                        "coordinate_n": record.coordinate_n,
                        "classification": result.value,
                        "error": error,
                    }
                )
    LOGGER.info("validated %d markers (%d invalid)", summary.total, summary.invalid)
    return summary


@dataclass
class MarkerDiagnostics:
    total: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    by_classification: Counter = field(default_factory=Counter)
    validated: Dict[str, int] = field(default_factory=dict)
    misencoded: List[str] = field(default_factory=list)
    null_values: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "by_status": dict(self.by_status),
            "by_classification": dict(self.by_classification),
            "validated": dict(self.validated),
            "misencoded": list(self.misencoded),
            "null_values": list(self.null_values),
            "invalid": list(self.invalid),
        }


def diagnose_markers(store: MarkerStore, *, bounds: UtmBounds = UTM_22S) -> MarkerDiagnostics:
    """Summarise the state of the active markers without writing anything."""

    diagnostics = MarkerDiagnostics(by_status=store.status_counts())
    validated: Counter = Counter()
    for record in store.markers():
        diagnostics.total += 1
        result = classify(record.coordinate_e, record.coordinate_n, CoordinateKind.PROJECTED, bounds)
        diagnostics.by_classification[result.value] += 1
        validated["pending" if record.validated is None else ("valid" if record.validated else "invalid")] += 1
        if result is Classification.GEOGRAPHIC_MISTAKEN_FOR_PROJECTED:
            diagnostics.misencoded.append(record.code)
        elif result is Classification.NULL_VALUES:
            diagnostics.null_values.append(record.code)
        elif not is_valid(result):
            diagnostics.invalid.append(record.code)
    diagnostics.validated = dict(validated)
    return diagnostics
