"""Keeps the screensaver image file in step with the open document.

The target file holds either the cover of the open, non-excluded document
or the fallback image, or it does not exist. Every public method performs
at most one file operation on it and reports what happened as a
`SyncResult`; I/O failures are logged and reported, never raised.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Literal, Optional

from .config import (
    ENABLED_KEY,
    FALLBACK_KEY,
    FALLBACK_PATH_KEY,
    PATH_KEY,
    ConfigStore,
    CoverImageSettings,
    safe_load_settings,
)
from .document import DocumentHandle, is_excluded, set_excluded
from .fsops import copy_file, remove_file, write_image
from .imagesource import ImageSource
from .logutil import get_logger
from .notices import Notice, Notifier, invalid_fallback_notice, log_notifier
from .pathcheck import PATH_OK, PathCheck, check_path, is_regular_file

_logger = get_logger(__name__)


SyncAction = Literal["written", "copied", "deleted", "unchanged", "failed"]


@dataclass(frozen=True)
class SyncResult:
    action: SyncAction
    path: str = ""
    check: PathCheck = PATH_OK
    notice: Optional[Notice] = None

    @property
    def ok(self) -> bool:
        return self.action != "failed"


class CoverImageManager:
    def __init__(
        self,
        store: ConfigStore,
        image_source: ImageSource,
        *,
        notify: Notifier | None = None,
        writable_roots: Iterable[os.PathLike[str] | str] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.image_source = image_source
        self.logger = logger or _logger
        self.notify = notify or log_notifier(self.logger)
        self.writable_roots = list(writable_roots) if writable_roots is not None else None
        self.settings: CoverImageSettings = safe_load_settings(store)
        self.document: Optional[DocumentHandle] = None

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    @property
    def fallback_enabled(self) -> bool:
        return self.settings.fallback_enabled

    @property
    def target_path(self) -> str:
        return self.settings.target_path

    @property
    def fallback_path(self) -> str:
        return self.settings.fallback_path

    # -- state queries used by the options page ---------------------------

    def check_target(self, path: str | None = None) -> PathCheck:
        return check_path(self.target_path if path is None else path, self.writable_roots)

    def is_target_usable(self) -> bool:
        return self.target_path != "" and self.check_target().ok

    def is_fallback_usable(self) -> bool:
        return is_regular_file(self.fallback_path)

    def is_active(self) -> bool:
        return self.enabled or self.fallback_enabled

    def is_excluded(self, doc: DocumentHandle | None = None) -> bool:
        doc = doc or self.document
        return doc is not None and is_excluded(doc)

    @contextmanager
    def notifying(self, notify: Notifier) -> Iterator[None]:
        """Route notices to `notify` for the duration of the block only."""

        previous = self.notify
        self.notify = notify
        try:
            yield
        finally:
            self.notify = previous

    # -- lifecycle --------------------------------------------------------

    def on_document_opened(self, doc: DocumentHandle) -> SyncResult:
        self.logger.debug("Cover image: document opened: %s", doc.id)
        self.document = doc
        return self._create_cover(doc)

    def on_document_closed(self, doc: DocumentHandle | None = None) -> SyncResult:
        self.logger.debug("Cover image: document closed")
        if doc is None or doc is self.document:
            self.document = None
        return self._close_cleanup(self.target_path)

    # -- configuration ----------------------------------------------------

    def set_target_path(self, new_path: str) -> SyncResult:
        old_path = self.target_path
        if new_path == old_path:
            return SyncResult("unchanged", old_path)

        self._close_cleanup(old_path)
        self._save(PATH_KEY, new_path, target_path=new_path)

        check = self.check_target(new_path)
        if new_path != "" and check.ok:
            return self._create_cover(self.document)
        return self._disable(check, new_path)

    def set_fallback_path(self, new_path: str) -> SyncResult:
        self._save(FALLBACK_PATH_KEY, new_path, fallback_path=new_path)
        notice = None
        if new_path != "" and not is_regular_file(new_path):
            notice = self._warn(invalid_fallback_notice(new_path))
        return SyncResult("unchanged", new_path, notice=notice)

    def toggle_enabled(self) -> SyncResult:
        if self.enabled:
            self._save(ENABLED_KEY, False, enabled=False)
            return self._cleanup_image(self.target_path)

        check = self.check_target()
        if self.target_path == "" or not check.ok:
            notice = self._warn(Notice(text=check.message))
            return SyncResult("failed", self.target_path, check=check, notice=notice)
        self._save(ENABLED_KEY, True, enabled=True)
        return self._create_cover(self.document)

    def toggle_fallback(self) -> SyncResult:
        fallback = not self.fallback_enabled
        self._save(FALLBACK_KEY, fallback, fallback_enabled=fallback)
        if fallback and self.document is None:
            return self._close_cleanup(self.target_path)
        return SyncResult("unchanged", self.target_path)

    def toggle_exclusion(self, doc: DocumentHandle | None = None) -> SyncResult:
        doc = doc or self.document
        if doc is None:
            return SyncResult("unchanged", self.target_path)

        excluded = not is_excluded(doc)
        set_excluded(doc, excluded)
        if excluded:
            return self._cleanup_image(self.target_path)
        return self._create_cover(doc)

    # -- internals --------------------------------------------------------

    def _save(self, key: str, value: Any, **changes: Any) -> None:
        self.settings = self.settings.evolve(**changes)
        self.store.save_setting(key, value)

    def _warn(self, notice: Notice) -> Notice:
        try:
            self.notify(notice)
        except Exception:
            self.logger.warning("Cover image: could not show notice: %s", notice.text, exc_info=True)
        return notice

    def _disable(self, check: PathCheck, path: str) -> SyncResult:
        self._save(ENABLED_KEY, False, enabled=False)
        notice = self._warn(Notice(text=check.message))
        return SyncResult("failed", path, check=check, notice=notice)

    def _create_cover(self, doc: DocumentHandle | None) -> SyncResult:
        target = self.target_path
        if doc is None or not self.enabled or is_excluded(doc):
            return SyncResult("unchanged", target)

        check = self.check_target()
        if not check.ok:
            return self._disable(check, target)

        image = self.image_source.get_cover_image(doc)
        if image is None:
            self.logger.debug("Cover image: no cover for %s", doc.id)
            return SyncResult("unchanged", target)

        try:
            write_image(image, target, "PNG")
        except OSError:
            self.logger.debug("Cover image: writing %s failed", target, exc_info=True)
            return SyncResult("failed", target)
        self.logger.debug("Cover image: image written to %s", target)
        return SyncResult("written", target)

    def _close_cleanup(self, target: str) -> SyncResult:
        if not self.fallback_enabled:
            return SyncResult("unchanged", target)
        return self._cleanup_image(target)

    def _cleanup_image(self, target: str) -> SyncResult:
        """Replace the target with the fallback image, or delete it.

        Deletes whenever the fallback is off, empty or not a regular file.
        """

        fallback = self.fallback_path
        if not self.fallback_enabled or fallback == "" or not is_regular_file(fallback):
            result = self._remove(target)
            if self.fallback_enabled and fallback != "":
                notice = self._warn(invalid_fallback_notice(fallback))
                result = SyncResult(result.action, target, notice=notice)
            return result

        check = check_path(target, self.writable_roots)
        if not check.ok:
            # Unattended: the target may live on storage that went away.
            self.logger.debug("Cover image: not copying fallback, %s", check.message)
            return SyncResult("unchanged", target, check=check)

        try:
            copy_file(fallback, target)
        except OSError:
            self.logger.debug("Cover image: copying %s failed", fallback, exc_info=True)
            return SyncResult("failed", target)
        self.logger.debug("Cover image: fallback %s copied to %s", fallback, target)
        return SyncResult("copied", target)

    def _remove(self, target: str) -> SyncResult:
        try:
            removed = remove_file(target)
        except OSError:
            self.logger.debug("Cover image: removing %s failed", target, exc_info=True)
            return SyncResult("failed", target)
        if not removed:
            return SyncResult("unchanged", target)
        self.logger.debug("Cover image: removed %s", target)
        return SyncResult("deleted", target)
