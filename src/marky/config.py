"""Editor settings resolved from ``MARKY_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "MARKY_"


def _env_int(env: Mapping[str, str], key: str, fallback: int) -> int:
    value = env.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


@dataclass(frozen=True)
class EditorConfig:
    storage_path: Path = field(default_factory=lambda: Path.home() / ".marky" / "storage.json")
    storage_key: str = "markdownContent"
    content_debounce_ms: int = 1000
    format_debounce_ms: int = 100
    toolbar_margin: float = 10.0
    download_name: str = "document.md"
    export_dir: Path = field(default_factory=Path.cwd)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EditorConfig":
        values = os.environ if env is None else env
        defaults = cls()
        storage = values.get(f"{ENV_PREFIX}STORAGE_PATH")
        export_dir = values.get(f"{ENV_PREFIX}EXPORT_DIR")
        return cls(
            storage_path=Path(storage).expanduser() if storage else defaults.storage_path,
            storage_key=values.get(f"{ENV_PREFIX}STORAGE_KEY", defaults.storage_key),
            content_debounce_ms=_env_int(values, "CONTENT_DEBOUNCE_MS", defaults.content_debounce_ms),
            format_debounce_ms=_env_int(values, "FORMAT_DEBOUNCE_MS", defaults.format_debounce_ms),
            toolbar_margin=float(_env_int(values, "TOOLBAR_MARGIN", int(defaults.toolbar_margin))),
            download_name=values.get(f"{ENV_PREFIX}DOWNLOAD_NAME", defaults.download_name),
            export_dir=Path(export_dir).expanduser() if export_dir else defaults.export_dir,
        )


__all__ = ["EditorConfig"]
