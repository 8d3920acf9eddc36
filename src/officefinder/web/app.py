"""FastAPI application exposing the OfficeFinder search engine."""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from officefinder.config import AppConfig
from officefinder.errors import UsageError
from officefinder.history import SearchHistory
from officefinder.models import SearchOptions
from officefinder.search.orchestrator import SearchOrchestrator

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="OfficeFinder Web", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# One engine per process: concurrent requests get a 409 instead of queueing.
orchestrator = SearchOrchestrator.from_config(AppConfig())


class SearchPayload(BaseModel):
    root: str
    term: str
    exact_phrase: bool = False
    ignore_spaces: bool = False
    proximity: bool = False
    proximity_distance: int = 3


class OpenRequest(BaseModel):
    path: Path


def _history() -> SearchHistory:
    config = AppConfig()
    history = SearchHistory(config.resolve_history_path(Path.cwd()), limit=config.history_limit)
    history.load()
    return history


def _resolve_root(raw: str) -> Path:
    clean = raw.strip().replace("\r", "").replace("\n", "")
    if not clean or "\0" in clean:
        raise HTTPException(status_code=400, detail="Invalid root directory")
    root = Path(os.path.realpath(os.path.expanduser(clean)))
    if not root.exists():
        raise HTTPException(status_code=404, detail=f"Root directory not found: {clean}")
    if not root.is_dir():
        raise HTTPException(status_code=400, detail=f"Root must be a directory: {clean}")
    return root


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(asctime)s] [%(levelname)s] %(message)s")


@app.post("/search")
async def search_documents(payload: SearchPayload) -> dict[str, Any]:
    term = payload.term.strip()
    if not term:
        raise HTTPException(status_code=400, detail="Empty search term")

    try:
        options = SearchOptions(
            exact_phrase=payload.exact_phrase,
            ignore_spaces=payload.ignore_spaces,
            proximity=payload.proximity,
            proximity_distance=payload.proximity_distance,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    root = _resolve_root(payload.root)
    try:
        handle = orchestrator.run(root, term, options)
    except UsageError as exc:
        status = 409 if orchestrator.busy else 400
        raise HTTPException(status_code=status, detail=str(exc)) from exc

    await asyncio.to_thread(handle.wait)
    outcome = handle.result()
    if outcome.error is not None:
        LOGGER.error("Search failed: %s", outcome.error)
        raise HTTPException(status_code=500, detail=str(outcome.error))

    history = _history()
    history.add(term)
    try:
        history.save()
    except OSError as exc:
        LOGGER.warning("Could not save search history: %s", exc)

    results: List[dict[str, object]] = [record.to_dict() for record in handle.results]
    return {
        "results": results,
        "stats": handle.stats.to_dict(),
        "cancelled": outcome.cancelled,
    }


@app.post("/open")
async def open_document(payload: OpenRequest) -> dict[str, str]:
    path = payload.path.expanduser()
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"File not found: {path}")

    try:
        if os.name == "posix":  # macOS/Linux
            opener = "open" if sys.platform == "darwin" else "xdg-open"
            subprocess.Popen([opener, str(path)])
        else:
            os.startfile(path)  # type: ignore[attr-defined]
    except Exception as exc:  # pragma: no cover
        LOGGER.error("Unable to open %s: %s", path, exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return {"status": "ok"}


@app.get("/history")
async def list_history() -> dict[str, List[str]]:
    return {"terms": _history().terms}
