from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QEvent, QObject, Qt, Signal
from PySide6.QtGui import QKeyEvent, QTextDocument
from PySide6.QtWidgets import QInputDialog, QLineEdit, QTextEdit, QVBoxLayout, QWidget

from nexora.app import config

from .editor_actions import ActionDispatcher, UrlPrompt
from .editor_engine import QtTextEngine
from .editor_toolbar import EditorToolbar
from .i18n import tr
from .slash_commands import build_slash_commands
from .slash_menu import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_UP,
    SlashMenuController,
    SlashMenuPopup,
)


logger = logging.getLogger(__name__)

_KEY_NAMES = {
    Qt.Key_Escape: KEY_ESCAPE,
    Qt.Key_Down: KEY_DOWN,
    Qt.Key_Up: KEY_UP,
    Qt.Key_Return: KEY_ENTER,
    Qt.Key_Enter: KEY_ENTER,
    Qt.Key_Backspace: KEY_BACKSPACE,
}


def key_name(event: QKeyEvent) -> str:
    return _KEY_NAMES.get(event.key(), "")


class BlockEditor(QWidget):
    """WYSIWYG page editor: toolbar, rich-text surface and "/" command menu.

    ``contentChanged`` carries the serialized HTML after every edit. Content
    pushed in through :meth:`set_content` replaces the document only when it
    differs from the current serialization, and never echoes back out.
    """

    contentChanged = Signal(str)

    def __init__(
        self,
        content: str = "",
        *,
        placeholder: Optional[str] = None,
        editable: bool = True,
        language: Optional[str] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._language = language or config.load_language()
        self._applying_external = False
        self._document: Optional[QTextDocument] = None

        self.surface = QTextEdit()
        self.surface.setObjectName("blockEditorSurface")
        self.surface.setAcceptRichText(True)
        self.surface.setPlaceholderText(
            placeholder or config.load_editor_placeholder() or tr("blockeditor.placeholder", self._language)
        )
        self.engine = QtTextEngine(self.surface)
        self.dispatcher = ActionDispatcher(self.engine, self._prompt_url_dialog, self._language)
        self.toolbar = EditorToolbar(self.dispatcher, self._language, self)
        for shortcut_action in self.toolbar.shortcut_actions():
            self.addAction(shortcut_action)

        self._area = QWidget(self)
        area_layout = QVBoxLayout(self._area)
        area_layout.setContentsMargins(0, 0, 0, 0)
        area_layout.addWidget(self.surface)

        self.slash = SlashMenuController(self.engine, self.dispatcher, build_slash_commands(self._language))
        self.slash_popup = SlashMenuPopup(self.slash, self.surface, tr("slash.header", self._language), self._area)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.toolbar)
        layout.addWidget(self._area, 1)

        self.surface.installEventFilter(self)
        self.surface.cursorPositionChanged.connect(self.toolbar.refresh_states)
        self.surface.currentCharFormatChanged.connect(lambda _fmt: self.toolbar.refresh_states())
        self._connect_document_signals()

        self.set_content(content)
        self.set_editable(editable)

    # --- document wiring -----------------------------------------------

    def _connect_document_signals(self) -> None:
        document = self.surface.document()
        if document is self._document:
            return
        if self._document is not None:
            try:
                self._document.contentsChange.disconnect(self._on_contents_change)
                self._document.contentsChanged.disconnect(self._on_contents_changed)
            except (RuntimeError, TypeError):
                pass
        self._document = document
        document.contentsChange.connect(self._on_contents_change)
        document.contentsChanged.connect(self._on_contents_changed)

    def _on_contents_change(self, position: int, _removed: int, added: int) -> None:
        if self._applying_external:
            return
        self.slash.on_document_changed(position, added)

    def _on_contents_changed(self) -> None:
        if self._applying_external:
            return
        self.contentChanged.emit(self.engine.to_html())

    # --- public API ----------------------------------------------------

    @property
    def language(self) -> str:
        return self._language

    def content(self) -> str:
        return self.engine.to_html()

    def markdown(self) -> str:
        return self.surface.document().toMarkdown()

    def plain_text(self) -> str:
        return self.surface.toPlainText()

    def set_content(self, html: str) -> bool:
        """Replace the document with *html* unless it already serializes to it."""
        html = html or ""
        if html == self.engine.to_html():
            return False
        self._applying_external = True
        try:
            self.engine.set_html(html)
        finally:
            self._applying_external = False
        self._connect_document_signals()
        self.slash.close()
        self.toolbar.refresh_states()
        return True

    def is_editable(self) -> bool:
        return self.engine.is_editable()

    def set_editable(self, editable: bool) -> None:
        self.engine.set_editable(bool(editable))
        self.toolbar.setEnabled(bool(editable))
        if not editable:
            self.slash.close()

    def set_url_prompt(self, prompt: Optional[UrlPrompt]) -> None:
        """Swap the blocking URL dialog (tests pass a stub here)."""
        self.dispatcher.set_url_prompt(prompt or self._prompt_url_dialog)

    def set_font_point_size(self, size: int) -> None:
        font = self.surface.font()
        font.setPointSize(max(6, min(32, int(size))))
        self.surface.setFont(font)

    def _prompt_url_dialog(self, label: str, default: str) -> Optional[str]:
        text, ok = QInputDialog.getText(self, "Nexora", label, QLineEdit.Normal, default)
        if not ok:
            return None
        return text.strip()

    # --- key routing ---------------------------------------------------

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if obj is self.surface and event.type() == QEvent.KeyPress:
            if self.slash.handle_key(key_name(event), event.text()):
                event.accept()
                return True
        return super().eventFilter(obj, event)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.slash.close()
        super().closeEvent(event)
