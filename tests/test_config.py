from __future__ import annotations

from pathlib import Path

from marky.config import EditorConfig


def test_defaults() -> None:
    config = EditorConfig()

    assert config.storage_key == "markdownContent"
    assert config.content_debounce_ms == 1000
    assert config.format_debounce_ms == 100
    assert config.download_name == "document.md"


def test_from_env_overrides_and_falls_back(tmp_path: Path) -> None:
    config = EditorConfig.from_env(
        {
            "MARKY_STORAGE_PATH": str(tmp_path / "s.json"),
            "MARKY_CONTENT_DEBOUNCE_MS": "250",
            "MARKY_FORMAT_DEBOUNCE_MS": "soon",
            "MARKY_EXPORT_DIR": str(tmp_path),
        }
    )

    assert config.storage_path == tmp_path / "s.json"
    assert config.content_debounce_ms == 250
    assert config.format_debounce_ms == 100
    assert config.export_dir == tmp_path


def test_from_env_with_empty_mapping_matches_defaults() -> None:
    config = EditorConfig.from_env({})

    assert config.storage_key == EditorConfig().storage_key
    assert config.toolbar_margin == 10.0
