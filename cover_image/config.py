from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Protocol

from .logutil import get_logger

_logger = get_logger(__name__)


PATH_KEY = "cover_image_path"
FALLBACK_PATH_KEY = "cover_image_fallback_path"
ENABLED_KEY = "cover_image_enabled"
FALLBACK_KEY = "cover_image_fallback"

DEFAULT_PATH = "cover.png"
DEFAULT_FALLBACK_PATH = "cover_fallback.png"

APP_NAME = "cover-image"


def default_settings_path() -> Path:
    """Platform-appropriate location of the CLI settings file."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / APP_NAME / "settings.json"


class ConfigError(ValueError):
    pass


class ConfigStore(Protocol):
    def read_setting(self, key: str) -> Any: ...

    def save_setting(self, key: str, value: Any) -> None: ...

    def is_true(self, key: str) -> bool: ...


class MemoryStore:
    """Dict-backed settings store, also used for per-document settings."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})

    def read_setting(self, key: str) -> Any:
        return self.values.get(key)

    def save_setting(self, key: str, value: Any) -> None:
        self.values[key] = value

    def is_true(self, key: str) -> bool:
        return self.values.get(key) is True


class JsonSettingsStore(MemoryStore):
    """Settings persisted to a JSON file, rewritten on every save."""

    def __init__(self, path: os.PathLike[str] | str) -> None:
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise ConfigError(f"Invalid settings file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file must hold an object: {self.path}")
        return data

    def save_setting(self, key: str, value: Any) -> None:
        super().save_setting(key, value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.values, sort_keys=True, indent=2), encoding="utf-8")
        _logger.debug("Saved %s to %s", key, self.path)


@dataclass(frozen=True)
class CoverImageSettings:
    enabled: bool = False
    fallback_enabled: bool = False
    target_path: str = DEFAULT_PATH
    fallback_path: str = DEFAULT_FALLBACK_PATH

    def evolve(self, **changes: Any) -> "CoverImageSettings":
        return replace(self, **changes)


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _read_path(store: ConfigStore, key: str, default: str) -> str:
    value = store.read_setting(key)
    if value is None:
        return default
    _require(isinstance(value, str), f"{key} must be a string, got {value!r}")
    return value


def load_settings(store: ConfigStore) -> CoverImageSettings:
    """Read the settings, filling in defaults for keys never saved."""

    return CoverImageSettings(
        enabled=store.is_true(ENABLED_KEY),
        fallback_enabled=store.is_true(FALLBACK_KEY),
        target_path=_read_path(store, PATH_KEY, DEFAULT_PATH),
        fallback_path=_read_path(store, FALLBACK_PATH_KEY, DEFAULT_FALLBACK_PATH),
    )


def safe_load_settings(store: ConfigStore) -> CoverImageSettings:
    """Like `load_settings`, but a malformed path falls back to its default."""

    try:
        return load_settings(store)
    except ConfigError as exc:
        _logger.error("Cover image: configuration error: %s", exc)

    def _path(key: str, default: str) -> str:
        try:
            return _read_path(store, key, default)
        except ConfigError:
            return default

    return CoverImageSettings(
        enabled=store.is_true(ENABLED_KEY),
        fallback_enabled=store.is_true(FALLBACK_KEY),
        target_path=_path(PATH_KEY, DEFAULT_PATH),
        fallback_path=_path(FALLBACK_PATH_KEY, DEFAULT_FALLBACK_PATH),
    )
