"""Most-recent-first search term history stored as JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

LOGGER = logging.getLogger(__name__)


class SearchHistory:
    """Unique search terms, newest first, capped at ``limit`` entries."""

    def __init__(self, path: Path, *, limit: int = 20) -> None:
        self.path = Path(path)
        self.limit = limit
        self._terms: List[str] = []

    @property
    def terms(self) -> List[str]:
        return list(self._terms)

    def load(self) -> List[str]:
        self._terms = []
        if not self.path.exists():
            return self.terms
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable history file %s: %s", self.path, exc)
            return self.terms
        if not isinstance(raw, list):
            LOGGER.warning("Ignoring malformed history file %s", self.path)
            return self.terms
        for item in raw:
            term = str(item).strip()
            if term and term not in self._terms:
                self._terms.append(term)
        del self._terms[self.limit :]
        return self.terms

    def add(self, term: str) -> None:
        term = term.replace("\n", " ").strip()
        if not term:
            return
        if term in self._terms:
            self._terms.remove(term)
        self._terms.insert(0, term)
        del self._terms[self.limit :]

    def clear(self) -> None:
        self._terms = []

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._terms, ensure_ascii=False, indent=2), encoding="utf-8")
