"""Pydantic models describing persisted markers and correction history."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["CorrectionLogEntry", "MarkerRecord", "MarkerStatus", "MarkerType"]

_TYPE_IN_CODE = re.compile(r"^[A-Z]+-([MPV])-", re.IGNORECASE)


class MarkerType(str, Enum):
    VERTEX = "V"
    MARK = "M"
    POINT = "P"

    @classmethod
    def from_code(cls, code: str) -> "MarkerType":
        """Infer the type from codes such as ``FHV-M-3403``; vertices otherwise."""

        match = _TYPE_IN_CODE.match(code or "")
        if match:
            return cls(match.group(1).upper())
        return cls.VERTEX


class MarkerStatus(str, Enum):
    SURVEYED = "LEVANTADO"
    PENDING = "PENDENTE"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MarkerRecord(BaseModel):
    """A geodesic marker as stored in the marker table."""

    id: Optional[int] = None
    code: str
    type: MarkerType = MarkerType.VERTEX
    coordinate_e: Optional[float] = None
    coordinate_n: Optional[float] = None
    validated: Optional[bool] = None
    validation_error: Optional[str] = None
    validated_at: Optional[datetime] = None
    status: MarkerStatus = MarkerStatus.SURVEYED
    active: bool = True
    lat_original: Optional[float] = None
    lon_original: Optional[float] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("code")
    @classmethod
    def _code_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("marker code must not be blank")
        return value


class CorrectionLogEntry(BaseModel):
    """Immutable audit row written for every automatic coordinate rewrite."""

    marker_id: int
    old_e: Optional[float]
    old_n: Optional[float]
    new_e: float
    new_n: float
    reason: str = Field(..., min_length=1)
    operator: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True, from_attributes=True)
