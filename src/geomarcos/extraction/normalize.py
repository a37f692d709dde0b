"""Text normalisation helpers applied before pattern matching."""
from __future__ import annotations

import unicodedata
from typing import Optional

__all__ = [
    "PRESERVED_SYMBOLS",
    "normalize_text",
    "normalize_string",
    "strip_accents",
]

# Angular and separator marks the vertex patterns rely on.
PRESERVED_SYMBOLS = frozenset("°′″'\"º-")


def normalize_text(text: Optional[str]) -> str:
    """Uppercase ``text`` keeping degree, minute and second marks intact."""

    if not text:
        return ""
    composed = unicodedata.normalize("NFC", text)
    return "".join(ch if ch in PRESERVED_SYMBOLS else ch.upper() for ch in composed)


def normalize_string(value: str) -> str:
    """Trim and collapse spaces, composing accents without folding symbols like ``º``."""

    normalized = unicodedata.normalize("NFC", value)
    normalized = " ".join(normalized.split())
    return normalized.strip()


def strip_accents(value: str) -> str:
    """Drop combining marks so ``PARANÁ`` and ``PARANA`` compare equal."""

    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))
