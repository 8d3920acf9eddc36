"""Case-insensitive term matching over extracted document text.

Four modes are supported, selected by ``SearchOptions.mode``:

* substring - plain occurrences of the term
* exact phrase - the whitespace-normalized term as a whole-word phrase
* ignore spaces - the term with all whitespace removed, matched while
  skipping any whitespace in the text
* proximity - the term's words in order, each within a bounded number of
  tokens after the previous one

In every mode matches never overlap, the scan runs strictly left to right
and only the first match's span is reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from officefinder.models import MatchMode, MatchResult, SearchOptions
from officefinder.utils.text import fold_case, normalize_whitespace

# Maximal runs of letters and digits (``\w`` without the underscore)
TOKEN_PATTERN = re.compile(r"[^\W_]+")

Span = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class Token:
    word: str
    start: int
    end: int


def tokenize(text: str) -> List[Token]:
    """Split ``text`` into case-folded word tokens with their offsets."""
    return [Token(m.group().lower(), m.start(), m.end()) for m in TOKEN_PATTERN.finditer(text)]


def _result(count: int, first: Optional[Span]) -> MatchResult:
    if count == 0 or first is None:
        return MatchResult.empty()
    return MatchResult(count=count, first_match_start=first[0], first_match_end=first[1])


def count_substring(text: str, term: str) -> MatchResult:
    haystack = fold_case(text)
    needle = fold_case(term)
    if not needle:
        return MatchResult.empty()

    count = 0
    first: Optional[Span] = None
    index = haystack.find(needle)
    while index >= 0:
        count += 1
        if first is None:
            first = (index, index + len(needle))
        index = haystack.find(needle, index + len(needle))
    return _result(count, first)


def _is_word_char(ch: str) -> bool:
    return ch.isalnum()


def count_exact_phrase(text: str, term: str) -> MatchResult:
    """Whole-word occurrences of the whitespace-normalized term."""
    haystack = fold_case(text)
    needle = fold_case(normalize_whitespace(term))
    if not needle:
        return MatchResult.empty()

    count = 0
    first: Optional[Span] = None
    index = haystack.find(needle)
    while index >= 0:
        end = index + len(needle)
        left_ok = index == 0 or not (_is_word_char(haystack[index - 1]) and _is_word_char(needle[0]))
        right_ok = end == len(haystack) or not (_is_word_char(haystack[end]) and _is_word_char(needle[-1]))
        if left_ok and right_ok:
            count += 1
            if first is None:
                first = (index, end)
            index = haystack.find(needle, end)
        else:
            index = haystack.find(needle, index + 1)
    return _result(count, first)


def count_ignoring_spaces(text: str, term: str) -> MatchResult:
    """Occurrences of the term when whitespace is ignored on both sides.

    A failed attempt restarts one character after its start, so inputs full
    of near-matching prefixes are quadratic.
    """
    haystack = fold_case(text)
    pattern = "".join(fold_case(term).split())
    if not pattern:
        return MatchResult.empty()

    size = len(haystack)
    count = 0
    first: Optional[Span] = None
    start = 0
    while start < size:
        if haystack[start].isspace():
            start += 1
            continue

        pos = start
        matched = 0
        while pos < size and matched < len(pattern):
            ch = haystack[pos]
            if ch.isspace():
                pos += 1
                continue
            if ch != pattern[matched]:
                break
            pos += 1
            matched += 1

        if matched == len(pattern):
            count += 1
            if first is None:
                first = (start, pos)
            start = pos
        else:
            start += 1
    return _result(count, first)


def count_proximity(text: str, term: str, distance: int) -> MatchResult:
    """Ordered occurrences of the term's words.

    After each matched word, the next one must appear among the following
    ``distance + 1`` tokens, i.e. at most ``distance`` tokens are skipped.
    """
    words = [token.word for token in tokenize(term)]
    if not words:
        return MatchResult.empty()
    tokens = tokenize(text)

    count = 0
    first: Optional[Span] = None
    index = 0
    while index < len(tokens):
        if tokens[index].word != words[0]:
            index += 1
            continue

        last = index
        for word in words[1:]:
            window_end = min(len(tokens), last + distance + 2)
            found = next(
                (pos for pos in range(last + 1, window_end) if tokens[pos].word == word),
                None,
            )
            if found is None:
                break
            last = found
        else:
            count += 1
            if first is None:
                first = (tokens[index].start, tokens[last].end)
            index = last + 1
            continue
        index += 1
    return _result(count, first)


def compute_matches(text: str, term: str, options: SearchOptions) -> MatchResult:
    """Count matches of ``term`` in ``text`` under the mode chosen by ``options``."""
    if not text or not term:
        return MatchResult.empty()

    mode = options.mode
    if mode is MatchMode.PROXIMITY:
        return count_proximity(text, term, options.proximity_distance)
    if mode is MatchMode.IGNORE_SPACES:
        return count_ignoring_spaces(text, term)
    if mode is MatchMode.EXACT_PHRASE:
        return count_exact_phrase(text, term)
    return count_substring(text, term)
