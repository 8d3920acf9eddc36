"""Core OfficeFinder data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

MIN_PROXIMITY_DISTANCE = 1
MAX_PROXIMITY_DISTANCE = 10


class MatchMode(str, Enum):
    SUBSTRING = "substring"
    EXACT_PHRASE = "exact_phrase"
    IGNORE_SPACES = "ignore_spaces"
    PROXIMITY = "proximity"


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Matching options for one search run.

    Proximity mode is exclusive: when enabled, ``exact_phrase`` and
    ``ignore_spaces`` are forced off.
    """

    exact_phrase: bool = False
    ignore_spaces: bool = False
    proximity: bool = False
    proximity_distance: int = 3

    def __post_init__(self) -> None:
        if not MIN_PROXIMITY_DISTANCE <= self.proximity_distance <= MAX_PROXIMITY_DISTANCE:
            raise ValueError(
                f"proximity_distance must be between {MIN_PROXIMITY_DISTANCE} "
                f"and {MAX_PROXIMITY_DISTANCE}, got {self.proximity_distance}"
            )
        if self.proximity:
            object.__setattr__(self, "exact_phrase", False)
            object.__setattr__(self, "ignore_spaces", False)

    @property
    def mode(self) -> MatchMode:
        if self.proximity:
            return MatchMode.PROXIMITY
        if self.exact_phrase and self.ignore_spaces:
            return MatchMode.IGNORE_SPACES
        if self.exact_phrase:
            return MatchMode.EXACT_PHRASE
        return MatchMode.SUBSTRING


@dataclass(frozen=True, slots=True)
class ExtractedDocument:
    """Normalized plain text of one document."""

    path: Path
    text: str


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Match count plus the code-point span of the first match."""

    count: int = 0
    first_match_start: int | None = None
    first_match_end: int | None = None

    @classmethod
    def empty(cls) -> "MatchResult":
        return cls()

    @property
    def found(self) -> bool:
        return self.count > 0


@dataclass(slots=True)
class SearchResultRecord:
    """Per-file search hit, keyed by canonical path."""

    file_path: Path
    match_count: int
    snippet: str

    def merge(self, other: "SearchResultRecord") -> None:
        """Accumulate another hit for the same file, keeping the first snippet."""
        self.match_count += other.match_count

    def to_dict(self) -> dict[str, object]:
        return {
            "file_path": str(self.file_path),
            "match_count": self.match_count,
            "snippet": self.snippet,
        }


@dataclass(slots=True)
class RunStats:
    files_scanned: int = 0
    matches_found: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "files_scanned": self.files_scanned,
            "matches_found": self.matches_found,
            "elapsed": self.elapsed,
        }


@dataclass(slots=True)
class RunOutcome:
    """Completion payload of a search run."""

    stats: RunStats
    cancelled: bool = False
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.cancelled
