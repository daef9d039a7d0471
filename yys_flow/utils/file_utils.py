"""File utilities."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_text_file(path: str) -> str:
    """Read a diagram source file as UTF-8.

    - Raises FileNotFoundError when the path does not exist.
    - Strips a leading BOM, which editors on Windows like to add to exported JSON.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError(f"Not a UTF-8 text file: {p.name}") from exc
    return text.lstrip("\ufeff")


def read_json_file(path: str) -> Any:
    """Read and decode a JSON file, raising ValueError on malformed content."""
    text = read_text_file(path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {Path(path).name}: {exc}") from exc
