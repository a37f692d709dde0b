"""Marker persistence: SQLAlchemy tables, pydantic records and the store adapter."""

from .records import CorrectionLogEntry, MarkerRecord, MarkerStatus, MarkerType
from .repository import MarkerNotFoundError, MarkerStore
from .schema import Base, CorrectionRow, MarkerRow

__all__ = [
    "Base",
    "CorrectionLogEntry",
    "CorrectionRow",
    "MarkerNotFoundError",
    "MarkerRecord",
    "MarkerRow",
    "MarkerStatus",
    "MarkerStore",
    "MarkerType",
]
