from __future__ import annotations

import importlib

from .manager import CoverImageManager, SyncResult
from .notices import ABOUT_TEXT, Notice, Notifier
from .plugin_hooks import get_manager


def _qt():
    qtwidgets = importlib.import_module("PyQt6.QtWidgets")
    qtcore = importlib.import_module("PyQt6.QtCore")
    return qtwidgets, qtcore


def qt_notifier(parent) -> Notifier:  # type: ignore[no-untyped-def]
    """Show notices as warning boxes; boxes with a timeout close themselves."""

    QtWidgets, QtCore = _qt()

    def _notify(notice: Notice) -> None:
        box = QtWidgets.QMessageBox(parent)
        box.setIcon(
            QtWidgets.QMessageBox.Icon.Warning if notice.show_icon else QtWidgets.QMessageBox.Icon.NoIcon
        )
        box.setWindowTitle("Cover Image")
        box.setText(notice.text)
        if notice.timeout:
            QtCore.QTimer.singleShot(notice.timeout * 1000, box.accept)
        box.exec()

    return _notify


class CoverImageOptionsPage:
    NAME = "cover_image"
    TITLE = "Save cover image"
    PARENT = "screen"

    def __init__(self, api=None, parent=None):
        self.api = api

        QtWidgets, QtCore = _qt()
        self._QtCore = QtCore
        self._QtWidgets = QtWidgets

        root = QtWidgets.QWidget(parent)
        layout = QtWidgets.QVBoxLayout(root)

        about = QtWidgets.QLabel(ABOUT_TEXT)
        about.setWordWrap(True)
        layout.addWidget(about)

        form = QtWidgets.QFormLayout()
        self.path_edit = QtWidgets.QLineEdit()
        self.path_edit.setToolTip("The cover of the current book will be stored in this file.")
        self.fallback_edit = QtWidgets.QLineEdit()
        self.fallback_edit.setToolTip(
            "File to use when no cover is wanted or book is excluded.\n"
            "Leave this blank to turn off the fallback image."
        )
        form.addRow("System screensaver image", self.path_edit)
        form.addRow("Fallback image", self.fallback_edit)
        layout.addLayout(form)

        self.enabled_cb = QtWidgets.QCheckBox("Save book cover")
        self.exclude_cb = QtWidgets.QCheckBox("Exclude this book cover")
        self.fallback_cb = QtWidgets.QCheckBox("Turn on fallback image")
        layout.addWidget(self.enabled_cb)
        layout.addWidget(self.exclude_cb)
        layout.addWidget(self.fallback_cb)
        layout.addStretch(1)

        self.manager: CoverImageManager = get_manager(api)

        self._root = root

    def get_widget(self):
        return self._root

    def load(self):
        m = self.manager
        self.path_edit.setText(m.target_path)
        self.fallback_edit.setText(m.fallback_path)

        self.enabled_cb.setChecked(m.enabled and m.is_target_usable())
        self.enabled_cb.setEnabled(m.is_target_usable())

        self.exclude_cb.setChecked(m.is_excluded())
        self.exclude_cb.setEnabled(m.document is not None)

        self.fallback_cb.setChecked(m.fallback_enabled)

    def save(self) -> list[SyncResult]:
        """Apply every edited field through the manager, one operation each."""

        # Notices raised here belong to this page; lifecycle hooks keep their own notifier.
        with self.manager.notifying(qt_notifier(self._root)):
            results = self._apply()
        self.load()
        return results

    def _apply(self) -> list[SyncResult]:
        m = self.manager
        results: list[SyncResult] = []

        new_path = self.path_edit.text()
        if new_path != m.target_path:
            results.append(m.set_target_path(new_path))

        new_fallback = self.fallback_edit.text()
        if new_fallback != m.fallback_path:
            results.append(m.set_fallback_path(new_fallback))

        if self.fallback_cb.isChecked() != m.fallback_enabled:
            results.append(m.toggle_fallback())

        if m.is_target_usable() and self.enabled_cb.isChecked() != m.enabled:
            results.append(m.toggle_enabled())

        if m.document is not None and self.exclude_cb.isChecked() != m.is_excluded():
            results.append(m.toggle_exclusion())

        return results
