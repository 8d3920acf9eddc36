"""Directory walk, per-file extraction and matching, result aggregation.

A search run executes on a single background thread. Callbacks are invoked
on that thread in visit order; ``on_completed`` is always the last one.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from officefinder.config import AppConfig
from officefinder.errors import ContainerError, ExtractError, TraversalError, UsageError
from officefinder.ingestion.loaders import DocumentFormat, detect_format, load_document
from officefinder.models import RunOutcome, RunStats, SearchOptions, SearchResultRecord
from officefinder.search.matcher import compute_matches
from officefinder.search.snippet import make_snippet
from officefinder.utils.files import canonical_path, walk_files

LOGGER = logging.getLogger(__name__)


def format_progress(stats: RunStats) -> str:
    return f"Scanned {stats.files_scanned} file(s), found {stats.matches_found} matches…"


def _ignore(*_args: object) -> None:
    return None


class CancellationToken:
    """Cooperative cancellation flag shared by the caller and the worker."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(slots=True)
class SearchCallbacks:
    on_result: Callable[[SearchResultRecord], None] = _ignore
    on_progress: Callable[[str], None] = _ignore
    on_completed: Callable[[RunOutcome], None] = _ignore


class ResultAggregator:
    """One record per canonical file path.

    Repeated hits for the same file add up their counts and keep the
    snippet of the first hit. The worker merges while callers may read,
    so both go through a lock.
    """

    def __init__(self) -> None:
        self._records: Dict[Path, SearchResultRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def merge(self, record: SearchResultRecord) -> SearchResultRecord:
        """Fold ``record`` in and return a copy of the cumulative record."""
        key = canonical_path(record.file_path)
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                existing = dataclasses.replace(record)
                self._records[key] = existing
            else:
                existing.merge(record)
            return dataclasses.replace(existing)

    def records(self) -> List[SearchResultRecord]:
        with self._lock:
            return [dataclasses.replace(record) for record in self._records.values()]


class RunHandle:
    """Caller-side view of a running search."""

    def __init__(self, token: CancellationToken) -> None:
        self.token = token
        self.aggregator = ResultAggregator()
        self.stats = RunStats()
        self.outcome: Optional[RunOutcome] = None
        self._done = threading.Event()

    def cancel(self) -> None:
        self.token.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run completed; False if ``timeout`` elapsed first."""
        return self._done.wait(timeout)

    def result(self, timeout: Optional[float] = None) -> RunOutcome:
        """Block until the run completed and return its outcome.

        Raises TimeoutError when ``timeout`` elapses first.
        """
        if not self._done.wait(timeout) or self.outcome is None:
            raise TimeoutError("Search is still running")
        return self.outcome

    def finish(self) -> None:
        self._done.set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def results(self) -> List[SearchResultRecord]:
        return self.aggregator.records()


class _SearchRun:
    """State owned by the worker thread for one run."""

    def __init__(
        self,
        handle: RunHandle,
        root: Path,
        term: str,
        options: SearchOptions,
        callbacks: SearchCallbacks,
        *,
        snippet_chars: int,
        progress_interval: float,
        logger: logging.Logger,
        clock: Callable[[], float],
    ) -> None:
        self.handle = handle
        self.root = root
        self.term = term
        self.options = options
        self.callbacks = callbacks
        self.snippet_chars = snippet_chars
        self.progress_interval = progress_interval
        self.logger = logger
        self.clock = clock
        self._last_progress: Optional[float] = None

    @property
    def stats(self) -> RunStats:
        return self.handle.stats

    @property
    def cancelled(self) -> bool:
        return self.handle.token.cancelled

    def execute(self) -> None:
        for path in walk_files(
            self.root,
            should_stop=lambda: self.cancelled,
            on_error=self._on_traversal_error,
        ):
            if self.cancelled:
                return
            fmt = detect_format(path)
            if fmt is not None:
                self.stats.files_scanned += 1
                self._process_file(path, fmt)
            self._maybe_report_progress()
            if self.cancelled:
                return

    def _process_file(self, path: Path, fmt: DocumentFormat) -> None:
        try:
            document = load_document(path, fmt)
        except (ContainerError, ExtractError, OSError) as exc:
            self.logger.warning("Failed to read %s: %s", path, exc)
            return

        result = compute_matches(document.text, self.term, self.options)
        if not result.found:
            return

        self.stats.matches_found += result.count
        snippet = make_snippet(
            document.text, result.first_match_start, result.first_match_end, self.snippet_chars
        )
        record = self.handle.aggregator.merge(SearchResultRecord(path, result.count, snippet))
        self.logger.info("Match in: %s (%d)", path, result.count)
        self.callbacks.on_result(record)

    def _on_traversal_error(self, error: TraversalError) -> None:
        self.logger.warning("%s", error)

    def _maybe_report_progress(self) -> None:
        now = self.clock()
        if self._last_progress is None or now - self._last_progress > self.progress_interval:
            self._last_progress = now
            self.callbacks.on_progress(format_progress(self.stats))


class SearchOrchestrator:
    """Runs searches one at a time on a background worker."""

    def __init__(
        self,
        *,
        snippet_chars: int = 200,
        progress_interval: float = 0.4,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.snippet_chars = snippet_chars
        self.progress_interval = progress_interval
        self.logger = logger or LOGGER
        self.clock = clock
        self._lock = threading.Lock()
        self._active: Optional[RunHandle] = None

    @classmethod
    def from_config(
        cls, config: AppConfig, *, logger: Optional[logging.Logger] = None
    ) -> "SearchOrchestrator":
        return cls(
            snippet_chars=config.snippet_chars,
            progress_interval=config.progress_interval,
            logger=logger,
        )

    @property
    def busy(self) -> bool:
        return self._active is not None and not self._active.done

    def run(
        self,
        root: Path,
        term: str,
        options: SearchOptions,
        callbacks: Optional[SearchCallbacks] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RunHandle:
        """Start a search in the background and return its handle.

        Raises UsageError when a run is already active, ``root`` is not a
        directory or ``term`` is blank.
        """
        root = Path(root).expanduser()
        term = (term or "").strip()
        if not term:
            raise UsageError("Enter a search term.")
        if not root.exists():
            raise UsageError(f"Root directory does not exist: {root}")
        if not root.is_dir():
            raise UsageError(f"Root is not a directory: {root}")

        with self._lock:
            if self.busy:
                raise UsageError("A search is already running.")
            handle = RunHandle(cancel_token or CancellationToken())
            run = _SearchRun(
                handle,
                root,
                term,
                options,
                callbacks or SearchCallbacks(),
                snippet_chars=self.snippet_chars,
                progress_interval=self.progress_interval,
                logger=self.logger,
                clock=self.clock,
            )
            self._active = handle
            worker = threading.Thread(
                target=self._work, args=(run,), name="officefinder-search", daemon=True
            )
            worker.start()
        return handle

    def search(
        self,
        root: Path,
        term: str,
        options: SearchOptions,
        callbacks: Optional[SearchCallbacks] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RunOutcome:
        """Run a search and block until it completes."""
        return self.run(root, term, options, callbacks, cancel_token).result()

    def _work(self, run: _SearchRun) -> None:
        handle = run.handle
        started = self.clock()
        error: Optional[BaseException] = None
        self.logger.info("Starting search for '%s' in %s", run.term, run.root)
        try:
            run.execute()
        except Exception as exc:
            self.logger.exception("Search failed: %s", exc)
            error = exc

        handle.stats.elapsed = self.clock() - started
        outcome = RunOutcome(stats=handle.stats, cancelled=handle.token.cancelled, error=error)
        handle.outcome = outcome
        stats = handle.stats
        if outcome.cancelled:
            self.logger.info(
                "Search cancelled. Files scanned: %d, matches: %d.",
                stats.files_scanned,
                stats.matches_found,
            )
        elif error is None:
            self.logger.info(
                "Search completed. Files scanned: %d, matches: %d.",
                stats.files_scanned,
                stats.matches_found,
            )
        try:
            run.callbacks.on_completed(outcome)
        except Exception:
            self.logger.exception("Completion callback failed")
        finally:
            handle.finish()
