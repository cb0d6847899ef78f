"""Key-value storage adapter for persisted calculator state.

Values are stored as strings under the fixed keys in ``config.STORAGE_KEYS``,
the way browser local storage holds them: the theme and last mode as plain
strings, history and memory as JSON arrays.  Reads never fail -- a missing
or unreadable value falls back to its default and is logged.

Two backends are provided: an in-memory dict (the default, useful for
testing) and a single JSON file on disk.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from config import STORAGE_KEYS, Settings
from models import CalculatorMode, HistoryEntry, MemorySlot, Theme

logger = logging.getLogger("calcsuite.storage")

_HISTORY = TypeAdapter(list[HistoryEntry])
_MEMORY = TypeAdapter(list[MemorySlot])


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class StorageBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryBackend:
    """Dict-backed storage that lives as long as the process."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileBackend:
    """All keys in one JSON object on disk, rewritten on every set."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".calcsuite-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------

class StorageAdapter:
    """Typed get/set for each persisted key.  Last write wins."""

    def __init__(self, backend: StorageBackend | None = None) -> None:
        self.backend: StorageBackend = backend if backend is not None else InMemoryBackend()

    @classmethod
    def from_settings(cls, settings: Settings) -> StorageAdapter:
        if settings.storage_path:
            return cls(JsonFileBackend(settings.storage_path))
        return cls()

    # -- theme ---------------------------------------------------------------

    def get_theme(self) -> Theme:
        raw = self.backend.get(STORAGE_KEYS["theme"])
        try:
            return Theme(raw) if raw else Theme.DARK
        except ValueError:
            logger.warning("Unknown stored theme %r, using dark", raw)
            return Theme.DARK

    def set_theme(self, theme: Theme) -> None:
        self.backend.set(STORAGE_KEYS["theme"], Theme(theme).value)

    # -- history -------------------------------------------------------------

    def get_history(self) -> list[HistoryEntry]:
        raw = self.backend.get(STORAGE_KEYS["history"])
        if not raw:
            return []
        try:
            return _HISTORY.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable history: %s", e.error_count())
            return []

    def set_history(self, history: list[HistoryEntry]) -> None:
        self.backend.set(STORAGE_KEYS["history"], _HISTORY.dump_json(history).decode())

    def clear_history(self) -> None:
        self.set_history([])

    # -- memory --------------------------------------------------------------

    def get_memory(self) -> list[MemorySlot]:
        raw = self.backend.get(STORAGE_KEYS["memory"])
        if not raw:
            return []
        try:
            return _MEMORY.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable memory: %s", e.error_count())
            return []

    def set_memory(self, memory: list[MemorySlot]) -> None:
        self.backend.set(STORAGE_KEYS["memory"], _MEMORY.dump_json(memory).decode())

    # -- last mode -----------------------------------------------------------

    def get_last_mode(self) -> CalculatorMode:
        raw = self.backend.get(STORAGE_KEYS["last_mode"])
        try:
            return CalculatorMode(raw) if raw else CalculatorMode.BASIC
        except ValueError:
            logger.warning("Unknown stored mode %r, using basic", raw)
            return CalculatorMode.BASIC

    def set_last_mode(self, mode: CalculatorMode) -> None:
        self.backend.set(STORAGE_KEYS["last_mode"], CalculatorMode(mode).value)
