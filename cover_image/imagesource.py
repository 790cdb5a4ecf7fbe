"""
Cover extraction.

The reader normally supplies its own image source (it already knows how
to render the first page of a document). `PillowCoverSource` is a small
stand-alone source used by the companion CLI: it understands plain image
files and zip-based books (CBZ comics, EPUB).
"""

from __future__ import annotations

import io
import os
import zipfile
import zlib
from pathlib import Path
from typing import Optional, Protocol

from PIL import Image

from .document import DocumentHandle
from .logutil import get_logger

_logger = get_logger(__name__)

IMAGE_EXTS: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff")
ARCHIVE_EXTS: tuple[str, ...] = (".cbz", ".zip", ".epub")


class ImageBuffer(Protocol):
    def encode(self, fmt: str = "PNG") -> bytes: ...

    def write_as_file(self, path: os.PathLike[str] | str, fmt: str = "PNG") -> None: ...


class ImageSource(Protocol):
    def get_cover_image(self, doc: DocumentHandle) -> Optional[ImageBuffer]: ...


class PillowImageBuffer:
    def __init__(self, image: Image.Image) -> None:
        self.image = image

    def encode(self, fmt: str = "PNG") -> bytes:
        buf = io.BytesIO()
        image = self.image
        if fmt.upper() in ("JPEG", "JPG") and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        # Pillow writes PNG non-interlaced unless asked otherwise.
        image.save(buf, format=fmt)
        return buf.getvalue()

    def write_as_file(self, path: os.PathLike[str] | str, fmt: str = "PNG") -> None:
        Path(path).write_bytes(self.encode(fmt))


def _open_loaded(fp) -> Image.Image:  # type: ignore[no-untyped-def]
    with Image.open(fp) as img:
        img.load()
        return img.copy()


def _pick_archive_member(names: list[str]) -> Optional[str]:
    images = sorted(n for n in names if n.lower().endswith(IMAGE_EXTS) and not n.endswith("/"))
    if not images:
        return None
    # EPUBs usually name their cover image explicitly.
    for name in images:
        if "cover" in Path(name).stem.lower():
            return name
    return images[0]


class PillowCoverSource:
    def get_cover_image(self, doc: DocumentHandle) -> Optional[PillowImageBuffer]:
        if doc.path is None:
            return None

        path = Path(doc.path)
        ext = path.suffix.lower()
        try:
            if ext in IMAGE_EXTS:
                return PillowImageBuffer(_open_loaded(path))
            if ext in ARCHIVE_EXTS:
                with zipfile.ZipFile(path) as zf:
                    member = _pick_archive_member(zf.namelist())
                    if member is None:
                        _logger.debug("No cover image inside %s", path)
                        return None
                    with zf.open(member) as fh:
                        return PillowImageBuffer(_open_loaded(io.BytesIO(fh.read())))
        except (OSError, zipfile.BadZipFile, zlib.error, Image.DecompressionBombError):
            _logger.debug("Cover extraction failed for %s", path, exc_info=True)
            return None

        _logger.debug("Unsupported document type for cover extraction: %s", path)
        return None
