"""Context snippets around the first match."""

from __future__ import annotations

from typing import Optional

from officefinder.utils.text import collapse_newlines

ELLIPSIS = "…"
# Extra context kept around a match that does not fit the centred window
MATCH_MARGIN = 10


def make_snippet(
    text: str,
    match_start: Optional[int],
    match_end: Optional[int],
    max_len: int = 200,
) -> str:
    """Window of about ``max_len`` characters centred on the match.

    The match is always fully contained in the snippet; the window grows past
    ``max_len`` when the match itself is longer. Without a match the head of
    the text is returned.
    """
    if not text:
        return ""
    length = len(text)
    if match_start is None or match_end is None or match_start < 0 or match_end < 0:
        return collapse_newlines(text[:max_len])

    match_start = min(match_start, length)
    match_end = min(max(match_end, match_start), length)

    middle = (match_start + match_end) // 2
    start = max(0, middle - max_len // 2)
    end = min(length, start + max_len)
    start = max(0, end - max_len)

    if match_start < start:
        start = max(0, match_start - MATCH_MARGIN)
    if match_end > end:
        end = min(length, match_end + MATCH_MARGIN)

    snippet = collapse_newlines(text[start:end])
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < length:
        snippet = snippet + ELLIPSIS
    return snippet
