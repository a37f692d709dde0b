"""Batch correction of geographic coordinates stored in projected columns.

Correction is a two step affair.  :meth:`BatchCorrector.plan` reads the
store and decides, record by record, what should happen; nothing is written.
:meth:`BatchCorrector.commit` applies a plan inside one transaction, so either
every correction, audit entry and status change lands or none does.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..geodesy.projection import ProjectionError, Projector, default_projector
from ..store.records import CorrectionLogEntry, MarkerRecord, MarkerStatus
from ..store.repository import MarkerStore
from ..validation.classifier import (
    UTM_22S,
    Classification,
    CoordinateKind,
    UtmBounds,
    classify,
    classify_conversion,
)

__all__ = [
    "BatchCorrector",
    "CORRECTION_REASON",
    "CorrectionPlan",
    "CorrectionReport",
    "PlanItem",
    "Resolution",
]

LOGGER = logging.getLogger(__name__)

CORRECTION_REASON = "Automatic lat/long to UTM conversion (geographic coordinates stored as projected)"


class Resolution(str, Enum):
    CORRECT = "CORRECT"
    MARK_PENDING = "MARK_PENDING"
    UNCHANGED = "UNCHANGED"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class PlanItem:
    """Decision taken for one marker."""

    marker_id: int
    code: str
    old_e: Optional[float]
    old_n: Optional[float]
    resolution: Resolution
    classification: Optional[Classification] = None
    new_e: Optional[float] = None
    new_n: Optional[float] = None
    new_classification: Optional[Classification] = None
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "marker_id": self.marker_id,
            "code": self.code,
            "old_e": self.old_e,
            "old_n": self.old_n,
            "new_e": self.new_e,
            "new_n": self.new_n,
            "resolution": self.resolution.value,
            "classification": self.classification.value if self.classification else None,
            "new_classification": self.new_classification.value if self.new_classification else None,
            "error": self.error,
        }


@dataclass
class CorrectionPlan:
    items: List[PlanItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def of(self, resolution: Resolution) -> List[PlanItem]:
        return [item for item in self.items if item.resolution is resolution]

    def counts(self) -> Dict[str, int]:
        counts = {resolution.value: 0 for resolution in Resolution}
        for item in self.items:
            counts[item.resolution.value] += 1
        return counts

    @property
    def has_changes(self) -> bool:
        return any(item.resolution in (Resolution.CORRECT, Resolution.MARK_PENDING) for item in self.items)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "created_at": self.created_at.isoformat(),
            "total": len(self.items),
            "counts": self.counts(),
            "items": [item.as_dict() for item in self.items],
        }


@dataclass
class CorrectionReport:
    """Outcome of :meth:`BatchCorrector.commit`."""

    corrected: int = 0
    marked_pending: int = 0
    unchanged: int = 0
    skipped: int = 0
    stale: List[int] = field(default_factory=list)
    log_entries: List[CorrectionLogEntry] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "corrected": self.corrected,
            "marked_pending": self.marked_pending,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "stale": list(self.stale),
        }


class BatchCorrector:
    """Find and fix markers whose projected columns hold decimal degrees."""

    def __init__(
        self,
        store: MarkerStore,
        *,
        projector: Optional[Projector] = None,
        bounds: UtmBounds = UTM_22S,
        operator: str = "SYSTEM-AUTO",
        reason: str = CORRECTION_REASON,
    ) -> None:
        if not operator.strip():
            raise ValueError("operator must not be blank")
        self.store = store
        self.bounds = bounds
        self.projector = projector if projector is not None else (
            default_projector() if bounds == UTM_22S else Projector(bounds)
        )
        self.operator = operator
        self.reason = reason

    # ------------------------------------------------------------------
    def _decide(self, record: MarkerRecord) -> PlanItem:
        e, n = record.coordinate_e, record.coordinate_n
        current = classify(e, n, CoordinateKind.PROJECTED, self.bounds)
        base = dict(marker_id=record.id, code=record.code, old_e=e, old_n=n, classification=current)
        if current is not Classification.GEOGRAPHIC_MISTAKEN_FOR_PROJECTED:
            return PlanItem(resolution=Resolution.UNCHANGED, **base)

        # Stored (e, n) is really (lon, lat).
        lon, lat = float(e), float(n)  # type: ignore[arg-type]
        try:
            projected = self.projector.to_projected(lon, lat)
        except ProjectionError as exc:
            LOGGER.debug("marker %s: projection failed: %s", record.code, exc)
            return PlanItem(
                resolution=Resolution.MARK_PENDING,
                new_classification=Classification.CONVERSION_FAILED,
                error=str(exc),
                **base,
            )

        outcome = classify_conversion(lon, lat, projected, self.bounds)
        if outcome is Classification.PROJECTED_VALID:
            return PlanItem(
                resolution=Resolution.CORRECT,
                new_e=projected[0],
                new_n=projected[1],
                new_classification=outcome,
                **base,
            )
        return PlanItem(resolution=Resolution.MARK_PENDING, new_classification=outcome, **base)

    def plan(self, records: Optional[Iterable[MarkerRecord]] = None) -> CorrectionPlan:
        """Return the decisions for every candidate record without writing anything."""

        if records is None:
            records = self.store.select_for_correction(MarkerStatus.SURVEYED)
        plan = CorrectionPlan()
        for record in records:
            try:
                item = self._decide(record)
            except (TypeError, ValueError, ArithmeticError) as exc:
                LOGGER.warning("marker %s skipped: %s", record.code, exc)
                item = PlanItem(
                    marker_id=record.id,  # type: ignore[arg-type]
                    code=record.code,
                    old_e=record.coordinate_e,
                    old_n=record.coordinate_n,
                    resolution=Resolution.SKIPPED,
                    error=str(exc),
                )
            plan.items.append(item)
        LOGGER.info("correction plan: %s", plan.counts())
        return plan

    def commit(self, plan: CorrectionPlan) -> CorrectionReport:
        """Apply ``plan`` in a single transaction.

        Records whose coordinates changed since the plan was made are left
        alone and reported as ``stale``.  Store failures roll back the whole
        batch and propagate.
        """

        report = CorrectionReport()
        with self.store.transaction():
            for item in plan.items:
                if item.resolution is Resolution.UNCHANGED:
                    report.unchanged += 1
                    continue
                if item.resolution is Resolution.SKIPPED:
                    report.skipped += 1
                    continue

                current = self.store.get(item.marker_id)
                if current is None or (current.coordinate_e, current.coordinate_n) != (item.old_e, item.old_n):
                    LOGGER.warning("marker %s changed since planning; left untouched", item.code)
                    report.stale.append(item.marker_id)
                    report.skipped += 1
                    continue

                if item.resolution is Resolution.CORRECT:
                    entry = CorrectionLogEntry(
                        marker_id=item.marker_id,
                        old_e=item.old_e,
                        old_n=item.old_n,
                        new_e=item.new_e,  # type: ignore[arg-type]
                        new_n=item.new_n,  # type: ignore[arg-type]
                        reason=self.reason,
                        operator=self.operator,
                    )
                    self.store.append_correction(entry)
                    self.store.update_coordinates(item.marker_id, entry.new_e, entry.new_n)
                    report.log_entries.append(entry)
                    report.corrected += 1
                else:
                    self.store.set_status(item.marker_id, MarkerStatus.PENDING)
                    report.marked_pending += 1
        LOGGER.info("correction committed: %s", report.as_dict())
        return report

    def run(self, *, dry_run: bool = True) -> CorrectionPlan | CorrectionReport:
        plan = self.plan()
        if dry_run:
            return plan
        return self.commit(plan)
