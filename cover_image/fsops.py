from __future__ import annotations

import os
import shutil
import uuid
from pathlib import Path

from .imagesource import ImageBuffer


def _temp_sibling(dst: Path) -> Path:
    # Same directory as the target so os.replace stays a rename.
    return dst.with_name(f".{dst.name}.{uuid.uuid4().hex}.tmp")


def write_image(image: ImageBuffer, dst: os.PathLike[str] | str, fmt: str = "PNG") -> None:
    target = Path(dst)
    tmp = _temp_sibling(target)
    try:
        image.write_as_file(tmp, fmt)
        os.replace(tmp, target)
    finally:
        tmp.unlink(missing_ok=True)


def copy_file(src: os.PathLike[str] | str, dst: os.PathLike[str] | str) -> None:
    target = Path(dst)
    tmp = _temp_sibling(target)
    try:
        shutil.copyfile(src, tmp)
        os.replace(tmp, target)
    finally:
        tmp.unlink(missing_ok=True)


def remove_file(path: os.PathLike[str] | str) -> bool:
    """Delete `path`; a missing file is not an error. Returns True if removed."""

    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    return True
