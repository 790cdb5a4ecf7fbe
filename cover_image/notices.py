"""User-facing notices.

The manager never talks to a widget toolkit directly. It hands `Notice`
objects to a notifier callable: the options page shows them as message
boxes, the CLI and the tests log them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .logutil import get_logger

_logger = get_logger(__name__)


UNWRITABLE_TEMPLATE = 'Path "{path}" isn\'t in a writable location.'
MISSING_PARENT_TEMPLATE = 'The path "{path}" doesn\'t exist.'
MISSING_FILENAME_TEXT = "Please enter a filename at the end of the path."
IS_DIRECTORY_TEMPLATE = 'The path "{path}" must point to a file, but it points to a directory.'
INVALID_FALLBACK_TEMPLATE = (
    '"{path}" \nis not a valid image file!\nA valid fallback image is required in Cover-Image'
)

# Seconds before an invalid-fallback warning dismisses itself.
FALLBACK_WARNING_TIMEOUT = 10

ABOUT_TEXT = """\
This plugin saves the current book cover to a file. That file can be used as a screensaver on certain Android devices, such as Tolinos.

If enabled, the cover image of the actual file is stored in the selected screensaver file. Books can be excluded if desired.

If fallback is activated, the fallback file will be copied to the screensaver file on book closing.
If the filename is empty or the file doesn't exist, the cover file will be deleted and the system screensaver will be used instead.

If the fallback image isn't activated, the screensaver image will stay in place after closing a book."""


@dataclass(frozen=True)
class Notice:
    text: str
    timeout: Optional[int] = None
    show_icon: bool = True


Notifier = Callable[[Notice], None]


def invalid_fallback_notice(path: str) -> Notice:
    return Notice(text=INVALID_FALLBACK_TEMPLATE.format(path=path), timeout=FALLBACK_WARNING_TIMEOUT)


def log_notifier(logger: logging.Logger | None = None) -> Notifier:
    """Build a notifier that writes notices to a logger as warnings."""

    target = logger or _logger

    def _notify(notice: Notice) -> None:
        target.warning("Cover image: %s", notice.text.replace("\n", " "))

    return _notify
