"""Vertex extraction pipeline for survey documents.

Every rule runs over the whole normalised text; candidates from all rules are
parsed, classified and deduplicated.  Failures are recorded as
:class:`SkipRecord` entries and never interrupt the pass.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..geodesy.projection import ProjectionError, Projector, default_projector
from ..validation.classifier import (
    UTM_22S,
    Classification,
    CoordinateKind,
    UtmBounds,
    classify,
    classify_conversion,
    is_valid,
)
from .dedup import Deduplicator
from .formats import ExtractedVertex, ExtractionResult, ExtractionStats, SkipReason, SkipRecord
from .metadata import MetadataExtractor
from .normalize import normalize_text
from .parsers.dms import dms_to_decimal
from .parsers.numbers import CoordinateParseError, NumberFormat, parse_number_br
from .rules import DEFAULT_VERTEX_RULES, AxisOrder, PatternRule, RuleMatch

__all__ = ["VertexExtractionPipeline", "join_elements", "process_document"]

LOGGER = logging.getLogger(__name__)


class _Skip(Exception):
    def __init__(self, reason: SkipReason, detail: str = "") -> None:
        super().__init__(detail or reason.value)
        self.reason = reason
        self.detail = detail


def join_elements(elements: Iterable[Any]) -> str:
    """Join text elements from a document reader (objects or mappings with ``text``)."""

    parts: List[str] = []
    for element in elements:
        if isinstance(element, Mapping):
            text = element.get("text")
        else:
            text = getattr(element, "text", element)
        if text:
            parts.append(str(text))
    return "\n".join(parts)


class VertexExtractionPipeline:
    """Turn document text into canonical, validated vertices."""

    def __init__(
        self,
        rules: Sequence[PatternRule] = DEFAULT_VERTEX_RULES,
        *,
        projector: Optional[Projector] = None,
        bounds: UtmBounds = UTM_22S,
        number_format: NumberFormat | str = NumberFormat.AUTO,
        metadata_extractor: Optional[MetadataExtractor] = None,
    ) -> None:
        self.rules = tuple(rules)
        self.bounds = bounds
        self.projector = projector if projector is not None else (
            default_projector() if bounds == UTM_22S else Projector(bounds)
        )
        self.number_format = NumberFormat(number_format)
        self.metadata_extractor = metadata_extractor or MetadataExtractor(number_format=self.number_format)

    # ------------------------------------------------------------------
    def _projected(self, match: RuleMatch) -> ExtractedVertex:
        try:
            e = parse_number_br(match.first, self.number_format)  # type: ignore[arg-type]
            n = parse_number_br(match.second, self.number_format)  # type: ignore[arg-type]
        except CoordinateParseError as exc:
            raise _Skip(SkipReason.NUMBER_PARSE_FAILED, str(exc)) from exc

        result = classify(e, n, CoordinateKind.PROJECTED, self.bounds)
        if not is_valid(result):
            raise _Skip(SkipReason.from_classification(result), f"E={e}, N={n}")
        return ExtractedVertex(
            name=match.name or "",
            encoding=CoordinateKind.PROJECTED,
            raw_pair=(match.first or "", match.second or ""),
            canonical_e=e,
            canonical_n=n,
            classification=result,
            rule=match.rule,
        )

    def _geographic(self, match: RuleMatch, order: AxisOrder) -> ExtractedVertex:
        if order is AxisOrder.LON_LAT:
            lon_raw, lat_raw = match.first, match.second
        else:
            lat_raw, lon_raw = match.first, match.second
        try:
            lon = dms_to_decimal(lon_raw)  # type: ignore[arg-type]
            lat = dms_to_decimal(lat_raw)  # type: ignore[arg-type]
        except CoordinateParseError as exc:
            raise _Skip(SkipReason.DMS_PARSE_FAILED, str(exc)) from exc

        source = classify(lon, lat, CoordinateKind.GEOGRAPHIC, self.bounds)
        if source is not Classification.GEOGRAPHIC_VALID:
            raise _Skip(SkipReason.from_classification(source), f"lon={lon}, lat={lat}")

        projected: Optional[Tuple[float, float]]
        try:
            projected = self.projector.to_projected(lon, lat)
        except ProjectionError as exc:
            LOGGER.debug("projection failed for %s: %s", match.name, exc)
            projected = None

        result = classify_conversion(lon, lat, projected, self.bounds)
        if result is not Classification.PROJECTED_VALID or projected is None:
            reason = SkipReason.CONVERSION_FAILED if is_valid(result) else SkipReason.from_classification(result)
            raise _Skip(reason, f"lon={lon:.6f}, lat={lat:.6f} -> {projected}")
        e, n = projected
        return ExtractedVertex(
            name=match.name or "",
            encoding=CoordinateKind.GEOGRAPHIC,
            raw_pair=(match.first or "", match.second or ""),
            canonical_e=e,
            canonical_n=n,
            classification=result,
            rule=match.rule,
            lat_original=lat,
            lon_original=lon,
        )

    def _candidate(self, rule: PatternRule, match: RuleMatch) -> ExtractedVertex:
        if not match.name or not match.first or not match.second:
            raise _Skip(
                SkipReason.REGEX_INCOMPLETE_CAPTURE,
                f"name={match.name!r}, first={match.first!r}, second={match.second!r}",
            )
        if rule.coordinate_kind is CoordinateKind.PROJECTED:
            return self._projected(match)
        return self._geographic(match, rule.order)

    # ------------------------------------------------------------------
    def extract_vertices(self, text: str) -> Tuple[List[ExtractedVertex], ExtractionStats, Counter]:
        """Run every rule over ``text`` and return accepted vertices."""

        normalized = normalize_text(text)
        stats = ExtractionStats()
        rule_counts: Counter = Counter()
        dedup = Deduplicator()
        vertices: List[ExtractedVertex] = []

        for rule in self.rules:
            for match in rule.find_all(normalized):
                stats.total_matches += 1
                rule_counts[rule.name] += 1
                try:
                    vertex = self._candidate(rule, match)
                except _Skip as skip:
                    LOGGER.debug("skipped %s from %s: %s %s", match.name, rule.name, skip.reason.value, skip.detail)
                    stats.skipped.append(
                        SkipRecord(reason=skip.reason, rule=rule.name, name=match.name, detail=skip.detail)
                    )
                    continue
                if dedup.accept(vertex):
                    vertices.append(vertex)

        stats.duplicates = dedup.duplicates
        stats.unique_vertices = len(vertices)
        return vertices, stats, rule_counts

    def process(self, text: str) -> ExtractionResult:
        """Extract metadata and vertices from one document."""

        metadata, metadata_diagnostics = self.metadata_extractor.extract(text)
        vertices, stats, rule_counts = self.extract_vertices(text)
        stats.metadata_fields = len(metadata.found_fields())
        diagnostics = {
            "rule_matches": {rule.name: rule_counts.get(rule.name, 0) for rule in self.rules},
            "metadata": metadata_diagnostics.as_dict(),
            "skips": [record.as_dict() for record in stats.skipped],
        }
        LOGGER.debug(
            "extracted %d vertices from %d matches (%d skipped)",
            len(vertices),
            stats.total_matches,
            len(stats.skipped),
        )
        return ExtractionResult(metadata=metadata, vertices=vertices, stats=stats, diagnostics=diagnostics)


def process_document(
    text: str,
    *,
    rules: Sequence[PatternRule] = DEFAULT_VERTEX_RULES,
    number_format: NumberFormat | str = NumberFormat.AUTO,
    bounds: UtmBounds = UTM_22S,
) -> ExtractionResult:
    """Convenience wrapper building a :class:`VertexExtractionPipeline`."""

    pipeline = VertexExtractionPipeline(rules, number_format=number_format, bounds=bounds)
    return pipeline.process(text)
