from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol

from .config import JsonSettingsStore, MemoryStore


EXCLUDE_KEY = "exclude_cover_image"


class DocumentSettings(Protocol):
    def read_setting(self, key: str) -> Any: ...

    def save_setting(self, key: str, value: Any) -> None: ...


@dataclass(eq=False)
class DocumentHandle:
    """An open document as seen by the plugin.

    `settings` is the document's own persisted store, not the global one.
    `path` is only needed by image sources that read the file themselves.
    """

    id: str
    settings: DocumentSettings = field(default_factory=MemoryStore)
    path: Optional[Path] = None


def is_excluded(doc: DocumentHandle) -> bool:
    return doc.settings.read_setting(EXCLUDE_KEY) is True


def set_excluded(doc: DocumentHandle, excluded: bool) -> None:
    doc.settings.save_setting(EXCLUDE_KEY, excluded)


def settings_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".coverimage.json")


def document_from_path(path: Path) -> DocumentHandle:
    """Handle for a document file whose settings sit next to it as JSON."""

    return DocumentHandle(id=str(path), settings=JsonSettingsStore(settings_path_for(path)), path=path)
