"""CLI I/O helpers: reading pasted input, loading corpora, writing JSON."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.enrich.models import ImportContext
from core.utils.errors import ContextLoadError

STORE_PATH_ENV = "EVIMPORT_STORE_PATH"


def default_store_path() -> Path:
    """Learned-match file location: ``$EVIMPORT_STORE_PATH`` or ``~/.evimport``."""

    raw = os.getenv(STORE_PATH_ENV)
    if raw:
        return Path(raw)
    return Path.home() / ".evimport" / "learned_matches.json"


def read_input_text(source: Path | None) -> str:
    """Read raw pasted text from a file, or stdin when ``source`` is None or ``-``."""

    if source is None or str(source) == "-":
        return sys.stdin.read()
    return source.read_text(encoding="utf-8")


def load_import_context(path: Path) -> ImportContext:
    """Load an import context JSON file (camelCase or snake_case keys)."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ContextLoadError(f"Context file not found: {path}", source=str(path)) from exc
    except json.JSONDecodeError as exc:
        raise ContextLoadError(f"Invalid context JSON: {path}", source=str(path)) from exc

    if not isinstance(raw, dict):
        raise ContextLoadError(f"Context JSON must be an object: {path}", source=str(path))

    try:
        return ImportContext.model_validate(raw)
    except ValidationError as exc:
        raise ContextLoadError(f"Invalid context schema: {path}", source=str(path)) from exc


def dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
