"""Commands operating on the persisted marker store."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import typer

from ..config import get_settings
from ..correction.batch import BatchCorrector
from ..correction.maintenance import diagnose_markers, validate_markers
from ..extraction.formats import ExtractedVertex
from ..store.repository import MarkerStore
from ..utils.logging import configure_json_logger, logged_operation

__all__ = ["app"]

app = typer.Typer(help="Validate, diagnose and correct stored markers.", add_completion=False)

_DB_HELP = "SQLAlchemy URL of the marker database (defaults to GEOMARCOS_DATABASE_URL)"


def _open_store(db: Optional[str]) -> MarkerStore:
    if db:
        return MarkerStore(db)
    return MarkerStore.from_settings(get_settings())


def _iter_vertex_payloads(path: Path) -> Iterator[Dict[str, Any]]:
    """Yield vertex dicts from ``extract`` output (JSONL or JSON)."""

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".jsonl":
        documents: List[Any] = [json.loads(line) for line in text.splitlines() if line.strip()]
    else:
        loaded = json.loads(text)
        documents = loaded if isinstance(loaded, list) else [loaded]
    for document in documents:
        if not isinstance(document, dict):
            raise typer.BadParameter(f"Unexpected entry in {path}: {document!r}")
        if "vertices" in document:
            yield from document["vertices"]
        else:
            yield document


@app.command("import")
def import_markers(
    input_path: Path = typer.Option(..., "--input", exists=True, dir_okay=False, help="Output of 'geomarcos extract'"),
    db: Optional[str] = typer.Option(None, "--db", help=_DB_HELP),
    log_file: Optional[Path] = typer.Option(None, "--log-file", dir_okay=False, help="Optional JSONL log path"),
) -> None:
    """Store extracted vertices as new surveyed markers."""

    logger = configure_json_logger(log_file)
    with logged_operation(logger, "markers.import", input=str(input_path)) as operation:
        try:
            vertices = [ExtractedVertex.from_dict(payload) for payload in _iter_vertex_payloads(input_path)]
        except (KeyError, TypeError, ValueError) as exc:
            raise typer.BadParameter(f"Invalid vertex in {input_path}: {exc}") from exc

        store = _open_store(db)
        try:
            ids = store.add_vertices(vertices)
        finally:
            store.dispose()
        operation.record(imported=len(ids))
    typer.echo(json.dumps({"status": "completed", "imported": len(ids), "ids": ids}, ensure_ascii=False))


@app.command("validate")
def validate_command(
    force: bool = typer.Option(False, "--force", help="Revalidate markers that already carry a result"),
    db: Optional[str] = typer.Option(None, "--db", help=_DB_HELP),
    log_file: Optional[Path] = typer.Option(None, "--log-file", dir_okay=False, help="Optional JSONL log path"),
) -> None:
    """Classify stored coordinates and record the outcome on each marker."""

    settings = get_settings()
    logger = configure_json_logger(log_file)
    with logged_operation(logger, "markers.validate", force=force) as operation:
        store = _open_store(db)
        try:
            summary = validate_markers(store, force=force, bounds=settings.utm_bounds)
        finally:
            store.dispose()
        operation.record(total=summary.total, valid=summary.valid, invalid=summary.invalid)
    typer.echo(json.dumps(summary.as_dict(), indent=2, ensure_ascii=False))


@app.command("diagnose")
def diagnose_command(
    db: Optional[str] = typer.Option(None, "--db", help=_DB_HELP),
) -> None:
    """Report marker counts by status and coordinate classification."""

    settings = get_settings()
    store = _open_store(db)
    try:
        diagnostics = diagnose_markers(store, bounds=settings.utm_bounds)
    finally:
        store.dispose()
    typer.echo(json.dumps(diagnostics.as_dict(), indent=2, ensure_ascii=False))


@app.command("correct")
def correct_command(
    commit: bool = typer.Option(False, "--commit", help="Apply the plan; without it only the dry-run plan is shown"),
    operator: Optional[str] = typer.Option(None, "--operator", help="Name recorded in the correction log"),
    db: Optional[str] = typer.Option(None, "--db", help=_DB_HELP),
    log_file: Optional[Path] = typer.Option(None, "--log-file", dir_okay=False, help="Optional JSONL log path"),
) -> None:
    """Convert geographic coordinates stored as UTM and flag the unresolvable ones."""

    settings = get_settings()
    logger = configure_json_logger(log_file)
    with logged_operation(logger, "markers.correct", commit=commit) as operation:
        store = _open_store(db)
        try:
            corrector = BatchCorrector(store, bounds=settings.utm_bounds, operator=operator or settings.operator)
            plan = corrector.plan()
            payload: Dict[str, Any] = {"dry_run": not commit, "plan": plan.as_dict()}
            if commit:
                report = corrector.commit(plan)
                payload["report"] = report.as_dict()
        finally:
            store.dispose()
        operation.record(committed=commit, **plan.counts())
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
