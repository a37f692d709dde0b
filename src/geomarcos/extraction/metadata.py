"""Document level metadata extraction for *memoriais descritivos*."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .formats import DocumentMetadata
from .normalize import normalize_string, normalize_text, strip_accents
from .parsers.numbers import CoordinateParseError, NumberFormat, parse_number_br

__all__ = [
    "DEFAULT_METADATA_PATTERNS",
    "MetadataDiagnostics",
    "MetadataExtractor",
    "STATE_CODES",
    "state_code",
]

LOGGER = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.UNICODE
HECTARE_TO_M2 = 10_000.0

STATE_CODES: Dict[str, str] = {
    "ACRE": "AC",
    "ALAGOAS": "AL",
    "AMAPA": "AP",
    "AMAZONAS": "AM",
    "BAHIA": "BA",
    "CEARA": "CE",
    "DISTRITO FEDERAL": "DF",
    "ESPIRITO SANTO": "ES",
    "GOIAS": "GO",
    "MARANHAO": "MA",
    "MATO GROSSO DO SUL": "MS",
    "MATO GROSSO": "MT",
    "MINAS GERAIS": "MG",
    "PARANA": "PR",
    "PARAIBA": "PB",
    "PARA": "PA",
    "PERNAMBUCO": "PE",
    "PIAUI": "PI",
    "RIO DE JANEIRO": "RJ",
    "RIO GRANDE DO NORTE": "RN",
    "RIO GRANDE DO SUL": "RS",
    "RONDONIA": "RO",
    "RORAIMA": "RR",
    "SANTA CATARINA": "SC",
    "SAO PAULO": "SP",
    "SERGIPE": "SE",
    "TOCANTINS": "TO",
}
_STATE_NAMES_LONGEST_FIRST = sorted(STATE_CODES, key=len, reverse=True)

_SEPARATOR_LINE = re.compile(r"^[:\-_]+$")
_SECTION_HEADER = re.compile(r"^(COMARCA|MUNIC[ÍI]PIO|[ÁA]REA|PER[ÍI]METRO)", _FLAGS)
_TRAILING_UF = re.compile(r"\s*[–\-—/]\s*[A-Z]{2}\s*$", _FLAGS)
_HECTARE_UNIT = re.compile(r"^(HA|HECTARES?)$", _FLAGS)


def _compile(*patterns: str) -> Tuple[re.Pattern[str], ...]:
    return tuple(re.compile(pattern, _FLAGS) for pattern in patterns)


DEFAULT_METADATA_PATTERNS: Mapping[str, Tuple[re.Pattern[str], ...]] = {
    "matricula": _compile(
        r"MATR[ÍI]CULA\s*(?:N\s*[°ºO]?\.?|SOB\s+O\s+N\s*[°º]?\.?|:)?\s*(\d[\d.,/]*)",
        r"MATRICULAD[OA]\s+SOB\s+O?\s*N\s*[°º]?\.?\s*(\d[\d.,/]*)",
    ),
    "imovel": _compile(
        r"IM[ÓO]VEL\s*:\s*([^\n]+)",
        r"PROPRIEDADE\s*:\s*([^\n]+)",
    ),
    "proprietarios": _compile(
        r"PROPRIET[ÁA]RIOS?\s*:\s*([\s\S]*?)(?=\n\s*\n|COMARCA|MUNIC[ÍI]PIO)",
        r"PROPRIET[ÁA]RIO\s*:\s*([^\n]+)",
        r"DE\s+PROPRIEDADE\s+DE\s+([^,;.\n]+)",
    ),
    "comarca": _compile(
        r"COMARCA\s*:\s*([^\n]+)",
        r"COMARCA\s+DE\s+([^\n,;.]+)",
    ),
    "municipio": _compile(
        r"MUNIC[ÍI]PIO\s*:\s*([^\n]+)",
        r"MUNIC[ÍI]PIO\s+DE\s+([A-ZÀ-Ý ]+?)\s*[–\-—/]\s*[A-Z]{2}\b",
    ),
    "uf": _compile(
        r"\bUF\s*:\s*([A-Z]{2})\b",
        r"ESTADO\s+D[OEA]\s+([A-ZÀ-Ý ]+)",
    ),
    "area": _compile(
        r"[ÁA]REA(?:\s+SGL)?\s*:\s*([\d.,]+)\s*(M²|M2|HA|HECTARES?)(?![A-Z])",
        r"[ÁA]REA\s+SUPERFICIAL\s+DE\s+([\d.,]+)\s*(M²|M2|HA|HECTARES?)(?![A-Z])",
        r"[ÁA]REA\s+(?:TOTAL\s+)?DE\s+([\d.,]+)\s*(M²|M2|HA|HECTARES?)(?![A-Z])",
    ),
    "perimetro": _compile(
        r"PER[ÍI]METRO(?:\s+SGL|\s*\(M\))?\s*:\s*([\d.,]+)\s*M\b",
        r"PER[ÍI]METRO\s+DE\s+([\d.,]+)\s*M\b",
    ),
}


def state_code(name: str) -> str:
    """Map a state name (with or without accents) to its two-letter code.

    Unknown names fall back to their first two letters.
    """

    cleaned = " ".join(strip_accents(name).upper().split())
    if len(cleaned) == 2 and cleaned.isalpha():
        return cleaned
    if cleaned in STATE_CODES:
        return STATE_CODES[cleaned]
    for candidate in _STATE_NAMES_LONGEST_FIRST:
        if cleaned.startswith(candidate + " "):
            return STATE_CODES[candidate]
    return cleaned[:2]


@dataclass
class MetadataDiagnostics:
    """Which pattern matched each field and which fields failed."""

    field_hits: Dict[str, int] = field(default_factory=dict)
    field_errors: Dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {"field_hits": dict(self.field_hits), "field_errors": dict(self.field_errors)}


class MetadataExtractor:
    """Apply ordered pattern lists per field; first match wins."""

    def __init__(
        self,
        patterns: Mapping[str, Sequence[re.Pattern[str]]] | None = None,
        *,
        number_format: NumberFormat | str = NumberFormat.AUTO,
    ) -> None:
        self.patterns = dict(patterns or DEFAULT_METADATA_PATTERNS)
        self.number_format = NumberFormat(number_format)
        self._handlers: Dict[str, Callable[[re.Match[str]], Any]] = {
            "proprietarios": self._owners,
            "area": self._area,
            "perimetro": self._perimeter,
            "uf": self._uf,
            "matricula": self._registration,
            "municipio": self._municipality,
        }

    def extract(self, text: str) -> Tuple[DocumentMetadata, MetadataDiagnostics]:
        normalized = normalize_text(text)
        metadata = DocumentMetadata()
        diagnostics = MetadataDiagnostics()
        for field_name, patterns in self.patterns.items():
            for index, pattern in enumerate(patterns):
                match = pattern.search(normalized)
                if match is None:
                    continue
                handler = self._handlers.get(field_name, self._plain)
                try:
                    value = handler(match)
                except (CoordinateParseError, ValueError, IndexError) as exc:
                    diagnostics.field_errors[field_name] = str(exc)
                    LOGGER.debug("metadata field %s failed: %s", field_name, exc)
                    break
                self._assign(metadata, field_name, value)
                diagnostics.field_hits[field_name] = index
                break
        return metadata, diagnostics

    @staticmethod
    def _assign(metadata: DocumentMetadata, field_name: str, value: Any) -> None:
        target = {"area": "area_m2", "perimetro": "perimetro_m"}.get(field_name, field_name)
        if hasattr(metadata, target):
            setattr(metadata, target, value)

    @staticmethod
    def _plain(match: re.Match[str]) -> str:
        return normalize_string(match.group(1))

    @staticmethod
    def _registration(match: re.Match[str]) -> str:
        return match.group(1).strip().rstrip(".,/")

    @staticmethod
    def _municipality(match: re.Match[str]) -> str:
        return _TRAILING_UF.sub("", normalize_string(match.group(1))).strip()

    @staticmethod
    def _owners(match: re.Match[str]) -> List[str]:
        owners: List[str] = []
        for line in match.group(1).splitlines():
            candidate = line.strip()
            if len(candidate) < 4:
                continue
            if _SEPARATOR_LINE.match(candidate) or _SECTION_HEADER.match(candidate):
                continue
            owners.append(normalize_string(candidate))
        return owners

    def _area(self, match: re.Match[str]) -> float:
        value = parse_number_br(match.group(1), self.number_format)
        unit: Optional[str] = match.group(2) if match.lastindex and match.lastindex >= 2 else None
        if unit and _HECTARE_UNIT.match(unit):
            value *= HECTARE_TO_M2
        return value

    def _perimeter(self, match: re.Match[str]) -> float:
        return parse_number_br(match.group(1), self.number_format)

    @staticmethod
    def _uf(match: re.Match[str]) -> str:
        return state_code(match.group(1))
