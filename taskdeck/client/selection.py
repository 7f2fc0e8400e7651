"""Durable key-value surface for the active workspace selection.

Only one key is used in practice (``currentWorkspaceId``), but the surface is a
tiny generic get/set so it can be backed by anything that survives restarts.
Both operations are synchronous.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from loguru import logger

CURRENT_WORKSPACE_KEY = "currentWorkspaceId"


@runtime_checkable
class PersistedSelection(Protocol):
    def get(self, key: str = CURRENT_WORKSPACE_KEY) -> str | None:
        """Return the stored value, or ``None`` if the key was never set."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, durably."""
        ...


class MemorySelectionStore:
    """Dict-backed selection store.  Lives as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str = CURRENT_WORKSPACE_KEY) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileSelectionStore:
    """JSON-file selection store.

    The whole file is one JSON object.  Writes are atomic (temp file in the
    same directory, then rename) so a crash never leaves a half-written file.
    An unreadable or corrupt file reads as empty.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str = CURRENT_WORKSPACE_KEY) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        _atomic_write(self._path, json.dumps(data, indent=2))

    def _load(self) -> dict:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Selection store unreadable at {}: {}", self._path, exc)
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Selection store at {} is not valid JSON; ignoring it", self._path)
            return {}
        return data if isinstance(data, dict) else {}


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise
