"""Vertex and metadata extraction from *memoriais descritivos*.

The package exposes the deterministic building blocks (text normalisation,
number and DMS parsers, named vertex rules, metadata patterns) together with
:class:`VertexExtractionPipeline`, which chains them into a single pass.
"""

from .dedup import Deduplicator, deduplicate
from .formats import (
    DocumentMetadata,
    ExtractedVertex,
    ExtractionResult,
    ExtractionStats,
    SkipReason,
    SkipRecord,
)
from .metadata import MetadataDiagnostics, MetadataExtractor, state_code
from .normalize import normalize_string, normalize_text
from .parsers.dms import dms_to_decimal, parse_angle
from .parsers.numbers import CoordinateParseError, NumberFormat, parse_number_br
from .pipeline import VertexExtractionPipeline, join_elements, process_document
from .rules import (
    DEFAULT_VERTEX_RULES,
    AxisOrder,
    PatternRule,
    PatternValidationError,
    RuleMatch,
    build_rule,
    compile_rules,
)

__all__ = [
    "AxisOrder",
    "CoordinateParseError",
    "DEFAULT_VERTEX_RULES",
    "Deduplicator",
    "DocumentMetadata",
    "ExtractedVertex",
    "ExtractionResult",
    "ExtractionStats",
    "MetadataDiagnostics",
    "MetadataExtractor",
    "NumberFormat",
    "PatternRule",
    "PatternValidationError",
    "RuleMatch",
    "SkipReason",
    "SkipRecord",
    "VertexExtractionPipeline",
    "build_rule",
    "compile_rules",
    "deduplicate",
    "dms_to_decimal",
    "join_elements",
    "normalize_string",
    "normalize_text",
    "parse_angle",
    "parse_number_br",
    "process_document",
    "state_code",
]
