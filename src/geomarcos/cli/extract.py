"""CLI entrypoint running vertex and metadata extraction over documents."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from tqdm import tqdm

from ..config import get_settings
from ..extraction.parsers.numbers import NumberFormat
from ..extraction.pipeline import VertexExtractionPipeline, join_elements
from ..utils.logging import configure_json_logger, logged_operation

__all__ = ["extract_command", "read_document"]


def read_document(path: Path) -> str:
    """Return the text of ``path``.

    ``.json`` files are expected to hold a list of text elements (objects
    with a ``text`` key), as produced by document partitioners; anything else
    is read as UTF-8 text.
    """

    if path.suffix.lower() == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(payload, dict):
            payload = payload.get("elements", [payload])
        return join_elements(payload)
    return path.read_text(encoding="utf-8")


def extract_command(
    inputs: List[Path] = typer.Option(
        ..., "--input", exists=True, dir_okay=False, help="Text (.txt) or element (.json) document; repeatable"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", dir_okay=False, help="Destination JSONL with one extraction result per document"
    ),
    number_format: NumberFormat = typer.Option(
        NumberFormat.AUTO,
        "--number-format",
        case_sensitive=False,
        help="Decimal convention of the documents (auto, br, international)",
    ),
    log_file: Optional[Path] = typer.Option(None, "--log-file", dir_okay=False, help="Optional JSONL log path"),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show a progress bar"),
) -> None:
    """Extract vertices and metadata from memoriais descritivos."""

    settings = get_settings()
    logger = configure_json_logger(log_file)
    pipeline = VertexExtractionPipeline(bounds=settings.utm_bounds, number_format=number_format)
    with logged_operation(
        logger,
        "extract",
        inputs=[str(path) for path in inputs],
        output=str(output) if output else None,
        number_format=number_format.value,
    ) as operation:
        documents = []
        for path in tqdm(inputs, desc="Extracting vertices", unit="doc", disable=not progress):
            result = pipeline.process(read_document(path))
            documents.append({"source": str(path), **result.as_dict()})
            operation.event("document", source=str(path), **result.stats.as_dict())

        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            with output.open("w", encoding="utf-8") as dst:
                for document in documents:
                    json.dump(document, dst, ensure_ascii=False)
                    dst.write("\n")
        operation.record(
            documents=len(documents),
            vertices=sum(len(document["vertices"]) for document in documents),
        )

    if output is not None:
        summary = {"status": "completed", **operation.results, "output": str(output)}
        typer.echo(json.dumps(summary, ensure_ascii=False))
    else:
        typer.echo(json.dumps(documents, indent=2, ensure_ascii=False))
