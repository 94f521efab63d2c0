"""File I/O for Lever: tolerant readers and atomic writers.

Writers go through a temp file in the target directory and ``os.replace``,
so a crash mid-write leaves the previous file intact. On POSIX the temp file
is also held under ``flock`` while it is written; Windows has no ``fcntl``
and relies on the rename alone.
"""

from __future__ import annotations

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator

import yaml

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None


def read_text(path: Path) -> str:
    """Read a text file, returning empty string if missing."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_json(path: Path) -> dict[str, Any]:
    """Read the JSON object stored at *path*.

    A missing, blank, malformed or non-object file raises ``ValueError``
    (``json.JSONDecodeError`` is one); check ``path.exists()`` first to tell
    "no data" from "bad data".
    """
    text = read_text(path)
    if not text.strip():
        raise ValueError(f"No JSON document in {path}")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning empty dict if missing, empty or not a mapping."""
    text = read_text(path)
    if not text.strip():
        return {}
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else {}


@contextmanager
def _locked(f: IO[str]) -> Iterator[None]:
    if fcntl is None:
        yield
        return
    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
    try:
        yield
    finally:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)


def _write_atomic(path: Path, content: str, suffix: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f, _locked(f):
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def write_text_atomic(path: Path, content: str) -> None:
    _write_atomic(path, content, ".tmp")


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Pretty-printed UTF-8 JSON, non-ASCII kept as-is."""
    _write_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", ".json.tmp")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    content = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _write_atomic(path, content, ".yaml.tmp")
