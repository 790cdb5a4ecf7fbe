from __future__ import annotations

import json
from pathlib import Path

import pytest

from cover_image.config import (
    PATH_KEY,
    ConfigError,
    CoverImageSettings,
    JsonSettingsStore,
    MemoryStore,
    load_settings,
    safe_load_settings,
)


def test_load_defaults() -> None:
    assert load_settings(MemoryStore()) == CoverImageSettings()


def test_is_true_needs_a_real_bool() -> None:
    store = MemoryStore({"cover_image_enabled": "yes"})
    assert not store.is_true("cover_image_enabled")
    assert not load_settings(store).enabled


def test_non_string_path_is_config_error() -> None:
    with pytest.raises(ConfigError):
        load_settings(MemoryStore({PATH_KEY: 42}))


def test_safe_load_falls_back_per_key() -> None:
    settings = safe_load_settings(MemoryStore({PATH_KEY: 42, "cover_image_fallback_path": "", "cover_image_enabled": True}))
    assert settings.target_path == "cover.png"
    assert settings.fallback_path == ""
    assert settings.enabled


def test_json_store_persists_each_save(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "settings.json"
    store = JsonSettingsStore(path)
    store.save_setting(PATH_KEY, "/sdcard/cover.png")
    store.save_setting("cover_image_enabled", True)

    assert json.loads(path.read_text(encoding="utf-8")) == {
        PATH_KEY: "/sdcard/cover.png",
        "cover_image_enabled": True,
    }
    reopened = JsonSettingsStore(path)
    assert reopened.read_setting(PATH_KEY) == "/sdcard/cover.png"
    assert reopened.is_true("cover_image_enabled")


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_json_store_rejects_bad_file(tmp_path: Path, content: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        JsonSettingsStore(path)
