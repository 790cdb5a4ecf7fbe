from __future__ import annotations

import weakref
from typing import Any

from .config import (
    DEFAULT_FALLBACK_PATH,
    DEFAULT_PATH,
    ENABLED_KEY,
    FALLBACK_KEY,
    FALLBACK_PATH_KEY,
    PATH_KEY,
)
from .imagesource import PillowCoverSource
from .manager import CoverImageManager
from .notices import log_notifier


class PluginConfigStore:
    """Adapts the host's dict-like `api.plugin_config` to the settings store API."""

    def __init__(self, plugin_config: Any) -> None:
        self._config = plugin_config

    def read_setting(self, key: str) -> Any:
        try:
            return self._config[key]
        except KeyError:
            return None

    def save_setting(self, key: str, value: Any) -> None:
        self._config[key] = value

    def is_true(self, key: str) -> bool:
        return self.read_setting(key) is True


def ensure_plugin_defaults(api) -> None:  # type: ignore[no-untyped-def]
    """Register plugin options so defaults and stored values resolve correctly.

    The host's config section is not a dict; options must be registered for
    __getitem__ to return either stored values or defaults.
    """

    api.plugin_config.register_option(PATH_KEY, DEFAULT_PATH)
    api.plugin_config.register_option(FALLBACK_PATH_KEY, DEFAULT_FALLBACK_PATH)
    api.plugin_config.register_option(ENABLED_KEY, False)
    api.plugin_config.register_option(FALLBACK_KEY, False)


_managers: "weakref.WeakKeyDictionary[Any, CoverImageManager]" = weakref.WeakKeyDictionary()


def get_manager(api) -> CoverImageManager:  # type: ignore[no-untyped-def]
    """Return the manager bound to this plugin instance, creating it on first use."""

    manager = _managers.get(api)
    if manager is None:
        ensure_plugin_defaults(api)
        device = getattr(api, "device", None)
        manager = CoverImageManager(
            PluginConfigStore(api.plugin_config),
            getattr(api, "image_source", None) or PillowCoverSource(),
            notify=getattr(api, "notify", None) or log_notifier(api.logger),
            writable_roots=getattr(device, "writable_roots", None),
            logger=api.logger,
        )
        _managers[api] = manager
    return manager


def on_document_opened(api, document):  # type: ignore[no-untyped-def]
    """Write the cover of the document the reader just finished opening."""

    try:
        get_manager(api).on_document_opened(document)
    except (OSError, RuntimeError, AttributeError, TypeError, ValueError):
        api.logger.error("Cover image: processing failed on open", exc_info=True)


def on_document_closed(api, document):  # type: ignore[no-untyped-def]
    """Swap in the fallback image, or remove the cover, as the document closes."""

    try:
        get_manager(api).on_document_closed(document)
    except (OSError, RuntimeError, AttributeError, TypeError, ValueError):
        api.logger.error("Cover image: processing failed on close", exc_info=True)
