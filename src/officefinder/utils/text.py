"""Text helpers shared by the extractors and the snippet builder."""

from __future__ import annotations

import re
from typing import Iterable

_WHITESPACE_RE = re.compile(r"\s+")
_NEWLINES_RE = re.compile(r"\n+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse every whitespace run (spaces, tabs, newlines) to one space and trim."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def join_nonempty(parts: Iterable[str], separator: str = "\n") -> str:
    """Join the non-empty parts with ``separator``."""
    return separator.join(part for part in parts if part)


def collapse_newlines(text: str) -> str:
    return _NEWLINES_RE.sub(" ", text)


def fold_case(text: str) -> str:
    """Lower-case ``text`` without changing its length.

    Characters whose lower-case form spans several code points are kept as-is
    so offsets computed on the folded text index the original text.
    """
    lowered = text.lower()
    if len(lowered) == len(text):
        return lowered
    return "".join(ch if len(ch.lower()) != 1 else ch.lower() for ch in text)
