from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QAction, QKeySequence, QTextCursor
from PySide6.QtWidgets import (
    QInputDialog,
    QLineEdit,
    QPlainTextEdit,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from .i18n import tr
from .url_utils import is_valid_url


logger = logging.getLogger(__name__)

CONTENT_TYPES = ("markdown", "html")


@dataclass(frozen=True)
class EditResult:
    text: str
    selection_start: int
    selection_end: int


def wrap_selection(text: str, start: int, end: int, before: str, after: str, fallback: str = "text") -> EditResult:
    """Surround text[start:end] (or *fallback* when empty) with before/after."""
    start, end = sorted((max(0, start), max(0, end)))
    selected = text[start:end] or fallback
    new_text = text[:start] + before + selected + after + text[end:]
    inner = start + len(before)
    return EditResult(new_text, inner, inner + len(selected))


def prefix_line(text: str, position: int, prefix: str) -> EditResult:
    """Insert *prefix* at the start of the line containing *position*."""
    position = max(0, min(len(text), position))
    line_start = text.rfind("\n", 0, position) + 1
    new_text = text[:line_start] + prefix + text[line_start:]
    caret = position + len(prefix)
    return EditResult(new_text, caret, caret)


def insert_block(text: str, position: int, block: str) -> EditResult:
    """Insert *block* at *position*, starting a new line when mid-line."""
    position = max(0, min(len(text), position))
    lead = "\n" if position > 0 and text[position - 1] != "\n" else ""
    new_text = text[:position] + lead + block + text[position:]
    caret = position + len(lead) + len(block)
    return EditResult(new_text, caret, caret)


def apply_source_action(
    item_id: str,
    text: str,
    start: int,
    end: int,
    content_type: str,
    *,
    url: Optional[str] = None,
    language: Optional[str] = None,
) -> Optional[EditResult]:
    """Apply toolbar item *item_id* to a Markdown or HTML source buffer.

    Returns None when the item is unknown or needs a URL that is missing
    or not allowed.
    """
    md = content_type != "html"
    placeholder = tr("source.placeholder_text", language)
    code = tr("source.placeholder_code", language)
    if item_id in ("link", "image"):
        if not url or not is_valid_url(url):
            logger.debug("Rejected %s URL %r", item_id, url)
            return None
        if item_id == "link":
            if md:
                return wrap_selection(text, start, end, "[", f"]({url})", placeholder)
            return wrap_selection(text, start, end, f'<a href="{html.escape(url, quote=True)}">', "</a>", placeholder)
        alt = tr("source.image_alt", language)
        if md:
            return insert_block(text, start, f"![{alt}]({url})\n")
        return insert_block(text, start, f'<img src="{html.escape(url, quote=True)}" alt="{html.escape(alt)}" />\n')
    if item_id == "bold":
        return wrap_selection(text, start, end, *(("**", "**") if md else ("<strong>", "</strong>")), placeholder)
    if item_id == "italic":
        return wrap_selection(text, start, end, *(("_", "_") if md else ("<em>", "</em>")), placeholder)
    if item_id in ("h1", "h2", "h3"):
        level = int(item_id[1])
        if md:
            return prefix_line(text, start, "#" * level + " ")
        return wrap_selection(text, start, end, f"<h{level}>", f"</h{level}>", placeholder)
    if item_id == "bullet_list":
        return prefix_line(text, start, "- " if md else "<li>")
    if item_id == "ordered_list":
        return prefix_line(text, start, "1. " if md else "<li>")
    if item_id == "blockquote":
        if md:
            return prefix_line(text, start, "> ")
        return wrap_selection(text, start, end, "<blockquote>", "</blockquote>", placeholder)
    if item_id == "code":
        return wrap_selection(text, start, end, *(("`", "`") if md else ("<code>", "</code>")), placeholder)
    if item_id == "code_block":
        block = f"```\n{code}\n```\n" if md else f"<pre><code>\n{code}\n</code></pre>\n"
        return insert_block(text, start, block)
    if item_id == "horizontal_rule":
        return insert_block(text, start, "\n---\n" if md else "\n<hr />\n")
    if item_id == "table":
        if md:
            block = "\n| Header | Header |\n|--------|--------|\n| Cell   | Cell   |\n"
        else:
            block = (
                "\n<table>\n  <tr><th>Header</th><th>Header</th></tr>\n"
                "  <tr><td>Cell</td><td>Cell</td></tr>\n</table>\n"
            )
        return insert_block(text, start, block)
    logger.debug("Unknown source toolbar item %r", item_id)
    return None


# id, tooltip key, glyph, shortcut
SOURCE_TOOLBAR: tuple[Optional[tuple[str, str, str, Optional[str]]], ...] = (
    ("bold", "toolbar.bold", "B", "Ctrl+B"),
    ("italic", "toolbar.italic", "I", "Ctrl+I"),
    None,
    ("h1", "toolbar.h1", "H1", None),
    ("h2", "toolbar.h2", "H2", None),
    ("h3", "toolbar.h3", "H3", None),
    None,
    ("bullet_list", "toolbar.ul", "•", None),
    ("ordered_list", "toolbar.ol", "1.", None),
    ("blockquote", "toolbar.quote", "❝", None),
    None,
    ("code", "toolbar.code", "<>", None),
    ("code_block", "toolbar.codeblock", "{ }", None),
    None,
    ("link", "toolbar.link", "🔗", None),
    ("image", "toolbar.image", "🖼", None),
    ("horizontal_rule", "toolbar.hr", "—", None),
    ("table", "toolbar.table", "⊞", None),
)


class SourceEditor(QWidget):
    """Plain-text Markdown/HTML editor with a formatting toolbar."""

    contentChanged = Signal(str)

    def __init__(
        self,
        content: str = "",
        content_type: str = "markdown",
        *,
        language: Optional[str] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._language = language
        self._content_type = content_type if content_type in CONTENT_TYPES else "markdown"
        self._applying_external = False
        self._prompt: Callable[[str, str], Optional[str]] = self._prompt_url_dialog

        self.editor = QPlainTextEdit()
        self.editor.setObjectName("sourceEditor")
        self.editor.setLineWrapMode(QPlainTextEdit.WidgetWidth)
        self.editor.textChanged.connect(self._on_text_changed)

        self.toolbar = QToolBar("Source", self)
        self.toolbar.setMovable(False)
        self.toolbar.setFocusPolicy(Qt.NoFocus)
        self._actions: dict[str, QAction] = {}
        for entry in SOURCE_TOOLBAR:
            if entry is None:
                self.toolbar.addSeparator()
                continue
            item_id, tooltip_key, glyph, shortcut = entry
            action = QAction(glyph, self)
            action.setObjectName(f"source_{item_id}")
            action.setToolTip(tr(tooltip_key, language))
            if shortcut:
                action.setShortcut(QKeySequence(shortcut))
                action.setShortcutContext(Qt.WidgetWithChildrenShortcut)
                self.addAction(action)
            action.triggered.connect(partial(self._on_triggered, item_id))
            self.toolbar.addAction(action)
            self._actions[item_id] = action

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.toolbar)
        layout.addWidget(self.editor, 1)
        self.set_content(content)

    @property
    def content_type(self) -> str:
        return self._content_type

    def set_content_type(self, content_type: str) -> None:
        if content_type not in CONTENT_TYPES:
            raise ValueError(f"Unsupported content type: {content_type!r}")
        self._content_type = content_type

    def content(self) -> str:
        return self.editor.toPlainText()

    def set_content(self, text: str) -> bool:
        text = text or ""
        if text == self.editor.toPlainText():
            return False
        self._applying_external = True
        try:
            self.editor.setPlainText(text)
        finally:
            self._applying_external = False
        return True

    def set_editable(self, editable: bool) -> None:
        self.editor.setReadOnly(not editable)
        self.toolbar.setEnabled(bool(editable))

    def set_url_prompt(self, prompt: Optional[Callable[[str, str], Optional[str]]]) -> None:
        self._prompt = prompt or self._prompt_url_dialog

    def set_font_point_size(self, size: int) -> None:
        font = self.editor.font()
        font.setPointSize(max(6, min(32, int(size))))
        self.editor.setFont(font)

    def action_for(self, item_id: str) -> QAction:
        return self._actions[item_id]

    def apply(self, item_id: str) -> bool:
        if self.editor.isReadOnly():
            return False
        url = None
        if item_id in ("link", "image"):
            key = "prompt.link" if item_id == "link" else "prompt.image"
            url = self._prompt(tr(key, self._language), "")
            if not url:
                return False
        cursor = self.editor.textCursor()
        result = apply_source_action(
            item_id,
            self.editor.toPlainText(),
            cursor.selectionStart(),
            cursor.selectionEnd(),
            self._content_type,
            url=url,
            language=self._language,
        )
        if result is None:
            return False
        self._replace_text(result)
        return True

    def _replace_text(self, result: EditResult) -> None:
        cursor = self.editor.textCursor()
        cursor.beginEditBlock()
        cursor.select(QTextCursor.Document)
        cursor.insertText(result.text)
        cursor.endEditBlock()
        cursor.setPosition(result.selection_start)
        cursor.setPosition(result.selection_end, QTextCursor.KeepAnchor)
        self.editor.setTextCursor(cursor)
        self.editor.setFocus()

    def _on_triggered(self, item_id: str, _checked: bool = False) -> None:
        self.apply(item_id)

    def _on_text_changed(self) -> None:
        if self._applying_external:
            return
        self.contentChanged.emit(self.editor.toPlainText())

    def _prompt_url_dialog(self, label: str, default: str) -> Optional[str]:
        text, ok = QInputDialog.getText(self, "Nexora", label, QLineEdit.Normal, default)
        return text.strip() if ok else None
