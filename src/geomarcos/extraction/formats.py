"""Common data structures shared across extraction stages."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..validation.classifier import Classification, CoordinateKind

__all__ = [
    "DocumentMetadata",
    "ExtractedVertex",
    "ExtractionResult",
    "ExtractionStats",
    "SkipReason",
    "SkipRecord",
]


class SkipReason(str, Enum):
    """Why a candidate vertex or metadata field was not accepted."""

    PATTERN_NO_MATCH = "PATTERN_NO_MATCH"
    REGEX_INCOMPLETE_CAPTURE = "REGEX_INCOMPLETE_CAPTURE"
    NUMBER_PARSE_FAILED = "NUMBER_PARSE_FAILED"
    DMS_PARSE_FAILED = "DMS_PARSE_FAILED"
    NULL_VALUES = "NULL_VALUES"
    ABSURD_VALUES = "ABSURD_VALUES"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    GEOGRAPHIC_MISTAKEN_FOR_PROJECTED = "GEOGRAPHIC_MISTAKEN_FOR_PROJECTED"
    CONVERSION_FAILED = "CONVERSION_FAILED"

    @classmethod
    def from_classification(cls, result: Classification) -> "SkipReason":
        return cls(result.value)


@dataclass(frozen=True)
class ExtractedVertex:
    """A named vertex with canonical projected coordinates."""

    name: str
    encoding: CoordinateKind
    raw_pair: Tuple[str, str]
    canonical_e: float
    canonical_n: float
    classification: Classification
    rule: str = ""
    lat_original: Optional[float] = None
    lon_original: Optional[float] = None

    @property
    def key(self) -> Tuple[str, float, float]:
        return (self.name, round(self.canonical_e, 2), round(self.canonical_n, 2))

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "encoding": self.encoding.value,
            "raw_pair": list(self.raw_pair),
            "canonical_e": self.canonical_e,
            "canonical_n": self.canonical_n,
            "classification": self.classification.value,
            "rule": self.rule,
        }
        if self.lat_original is not None:
            payload["lat_original"] = self.lat_original
            payload["lon_original"] = self.lon_original
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ExtractedVertex":
        """Rebuild a vertex from :meth:`as_dict` output."""

        raw_pair = payload.get("raw_pair") or ("", "")
        return cls(
            name=str(payload["name"]),
            encoding=CoordinateKind(payload.get("encoding", CoordinateKind.PROJECTED.value)),
            raw_pair=(str(raw_pair[0]), str(raw_pair[1])),
            canonical_e=float(payload["canonical_e"]),
            canonical_n=float(payload["canonical_n"]),
            classification=Classification(payload.get("classification", Classification.PROJECTED_VALID.value)),
            rule=str(payload.get("rule", "")),
            lat_original=payload.get("lat_original"),
            lon_original=payload.get("lon_original"),
        )


@dataclass
class DocumentMetadata:
    """Document level attributes of a *memorial descritivo*."""

    matricula: Optional[str] = None
    imovel: Optional[str] = None
    proprietarios: List[str] = field(default_factory=list)
    comarca: Optional[str] = None
    municipio: Optional[str] = None
    uf: Optional[str] = None
    area_m2: Optional[float] = None
    perimetro_m: Optional[float] = None

    def found_fields(self) -> List[str]:
        return [key for key, value in asdict(self).items() if value not in (None, [], "")]

    def as_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value not in (None, [], "")}


@dataclass(frozen=True)
class SkipRecord:
    """A candidate dropped during extraction."""

    reason: SkipReason
    rule: str
    name: Optional[str] = None
    detail: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason.value, "rule": self.rule, "name": self.name, "detail": self.detail}


@dataclass
class ExtractionStats:
    total_matches: int = 0
    unique_vertices: int = 0
    duplicates: int = 0
    skipped: List[SkipRecord] = field(default_factory=list)
    metadata_fields: int = 0

    @property
    def skipped_reasons(self) -> Dict[str, int]:
        return dict(Counter(record.reason.value for record in self.skipped))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_matches": self.total_matches,
            "unique_vertices": self.unique_vertices,
            "duplicates": self.duplicates,
            "skipped": len(self.skipped),
            "skipped_reasons": self.skipped_reasons,
            "metadata_fields": self.metadata_fields,
        }


@dataclass
class ExtractionResult:
    """Outcome of one extraction pass over a document."""

    metadata: DocumentMetadata
    vertices: List[ExtractedVertex]
    stats: ExtractionStats
    diagnostics: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.as_dict(),
            "vertices": [vertex.as_dict() for vertex in self.vertices],
            "stats": self.stats.as_dict(),
            "diagnostics": dict(self.diagnostics),
        }
