"""Region name normalization used for fuzzy joins across sources."""

from __future__ import annotations

import re
import unicodedata

_APOSTROPHES = re.compile(r"[‘’ʼ`´]")
_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[-\s]")


def strip_accents(text: str) -> str:
    """Remove combining marks (é -> e, ï -> i, ç -> c, ...)."""
    return "".join(
        c for c in unicodedata.normalize("NFD", text) if unicodedata.category(c) != "Mn"
    )


def normalize(name) -> str:
    """Lowercase, strip accents, turn hyphens into spaces and collapse whitespace.

    Total and idempotent: ``normalize(normalize(x)) == normalize(x)``.
    """
    if name is None:
        return ""
    text = strip_accents(str(name).lower())
    text = _APOSTROPHES.sub("'", text)
    text = text.replace("-", " ")
    return _WHITESPACE.sub(" ", text).strip()


def compact(name) -> str:
    """Normalized form with hyphens and spaces removed entirely."""
    return _SEPARATORS.sub("", normalize(name))
