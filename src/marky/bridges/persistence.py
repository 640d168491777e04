"""Key-value string stores standing in for browser local storage."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from marky.runtime.telemetry import record_event, span


class KeyValueStore(Protocol):
    def save(self, key: str, value: str) -> None:
        ...

    def load(self, key: str) -> Optional[str]:
        ...

    def clear(self, key: str) -> None:
        ...


class MemoryStore:
    """In-process store; also records how many writes it received."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def save(self, key: str, value: str) -> None:
        self._values[key] = value
        self.writes += 1

    def load(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def clear(self, key: str) -> None:
        self._values.pop(key, None)


class LocalStore:
    """JSON file holding every key; rewritten atomically on each change."""

    def __init__(self, path: os.PathLike[str] | str) -> None:
        self.path = Path(path).expanduser()

    def save(self, key: str, value: str) -> None:
        with span("storage::save", component="storage", metadata={"key": key, "chars": len(value)}):
            values = self._read()
            values[key] = value
            self._write(values)

    def load(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def clear(self, key: str) -> None:
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)

    def _read(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            record_event("storage.corrupt", level="warning", data={"path": str(self.path)})
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self, values: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".marky-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(values, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = ["KeyValueStore", "LocalStore", "MemoryStore"]
