"""Validation of user-supplied image paths.

All checks are read-only `stat`/`access` calls. Nothing here creates,
touches or removes files.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Literal, Optional

from .notices import (
    IS_DIRECTORY_TEMPLATE,
    MISSING_FILENAME_TEXT,
    MISSING_PARENT_TEMPLATE,
    UNWRITABLE_TEMPLATE,
)


PathProblem = Literal["unwritable", "missing_parent", "missing_filename", "is_directory"]


@dataclass(frozen=True)
class PathCheck:
    ok: bool
    reason: Optional[PathProblem] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok


PATH_OK = PathCheck(ok=True)


def split_path(path: str) -> tuple[str, str]:
    """Split into (directory, filename).

    A trailing separator leaves an empty filename; a bare filename resolves
    against the current directory.
    """

    directory, name = os.path.split(path)
    return directory or os.curdir, name


def _display_dir(directory: str) -> str:
    return os.path.join(directory, "")


def _inside(directory: str, root: str) -> bool:
    try:
        return os.path.commonpath([directory, root]) == root
    except ValueError:
        # Different drives on Windows.
        return False


def is_writable_location(directory: str, writable_roots: Iterable[os.PathLike[str] | str] | None = None) -> bool:
    """Whether files may be written below `directory`.

    With `writable_roots` the directory has to live inside one of them.
    Without, the nearest existing ancestor has to be writable, so that a
    missing directory in a writable tree is reported as missing rather than
    as unwritable.
    """

    absdir = os.path.abspath(directory)
    if writable_roots is not None:
        return any(_inside(absdir, os.path.abspath(os.fspath(root))) for root in writable_roots)

    probe = absdir
    while not os.path.exists(probe):
        parent = os.path.dirname(probe)
        if parent == probe:
            break
        probe = parent
    return os.access(probe, os.W_OK)


def check_path(path: str, writable_roots: Iterable[os.PathLike[str] | str] | None = None) -> PathCheck:
    directory, name = split_path(path)

    if not is_writable_location(directory, writable_roots):
        return PathCheck(False, "unwritable", UNWRITABLE_TEMPLATE.format(path=_display_dir(directory)))
    if not os.path.isdir(directory):
        return PathCheck(False, "missing_parent", MISSING_PARENT_TEMPLATE.format(path=_display_dir(directory)))
    if name == "":
        return PathCheck(False, "missing_filename", MISSING_FILENAME_TEXT)
    if os.path.isdir(path):
        return PathCheck(False, "is_directory", IS_DIRECTORY_TEMPLATE.format(path=path))
    return PATH_OK


def is_regular_file(path: str) -> bool:
    return bool(path) and os.path.isfile(path)
