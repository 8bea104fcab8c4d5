"""Read an API document from a local file or over HTTP."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

from .errors import DocumentLoadError

logger = logging.getLogger(__name__)

TIMEOUT = 30


def load_file(path: str | Path) -> dict[str, Any]:
    source = str(path)
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise DocumentLoadError(source, exc.strerror or str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise DocumentLoadError(source, f"invalid JSON: {exc}") from exc
    logger.info("loaded %s", source)
    return raw


def load_url(url: str, session: requests.Session | None = None) -> dict[str, Any]:
    http = session or requests.Session()
    try:
        response = http.get(url, timeout=TIMEOUT, headers={"Accept": "application/json"})
        response.raise_for_status()
        raw = response.json()
    except requests.RequestException as exc:
        raise DocumentLoadError(url, str(exc)) from exc
    except ValueError as exc:
        raise DocumentLoadError(url, f"invalid JSON: {exc}") from exc
    logger.info("fetched %s", url)
    return raw


def load_document(file: str | Path | None = None, url: str | None = None) -> dict[str, Any]:
    """Load from exactly one of ``file`` or ``url``."""
    if (file is None) == (url is None):
        raise ValueError("exactly one of file or url is required")
    if file is not None:
        return load_file(file)
    return load_url(url)
