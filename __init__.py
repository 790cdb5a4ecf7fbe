"""Cover Image plugin.

Entry point for the reader is `enable(api)`.
Core logic lives in the `cover_image/` package.
"""

from __future__ import annotations

from .cover_image.options import CoverImageOptionsPage
from .cover_image.plugin_hooks import ensure_plugin_defaults, on_document_closed, on_document_opened


def enable(api) -> None:  # type: ignore[no-untyped-def]
    # Only devices whose screensaver reads an image file can use this.
    device = getattr(api, "device", None)
    if device is not None and not device.supports_cover_image():
        api.logger.info("Cover image: not supported on this device")
        return

    api.logger.info("Cover image: plugin enabled")

    ensure_plugin_defaults(api)
    api.register_options_page(CoverImageOptionsPage)

    # Open fires once the document is ready to render its cover; close
    # fires before the reader tears the document down.
    api.register_document_opened_processor(on_document_opened)
    api.register_document_closed_processor(on_document_closed)


def disable() -> None:
    # Best-effort: the reader does not require explicit unregister.
    pass
