"""Application configuration defaults."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path


def _get_default_history_path() -> Path:
    """Get the default search history path based on platform and execution context."""
    user_history = Path.home() / "Documents" / "OfficeFinder" / "history.json"

    # When running as a frozen app (PyInstaller bundle)
    if getattr(sys, "frozen", False):
        return user_history

    # When running from source, prefer local data/ if it exists
    local_history = Path("data/history.json")
    if local_history.exists():
        return local_history

    return user_history


@dataclass(slots=True)
class AppConfig:
    history_path: Path | None = None
    snippet_chars: int = 200
    progress_interval: float = 0.4
    history_limit: int = 20

    def __post_init__(self) -> None:
        if self.history_path is None:
            self.history_path = _get_default_history_path()

    def resolve_history_path(self, base_dir: Path | None = None) -> Path:
        if self.history_path is None:
            self.history_path = _get_default_history_path()
        if Path(self.history_path).is_absolute() or base_dir is None:
            return Path(self.history_path)
        return base_dir / self.history_path
