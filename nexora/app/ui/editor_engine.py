from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterator, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QTextBlock,
    QTextBlockFormat,
    QTextCharFormat,
    QTextCursor,
    QTextFormat,
    QTextImageFormat,
    QTextLength,
    QTextListFormat,
    QTextTableFormat,
)
from PySide6.QtWidgets import QTextEdit


logger = logging.getLogger(__name__)

MARKS = ("bold", "italic", "underline", "strike", "highlight", "code")
LIST_KINDS = ("bullet_list", "ordered_list", "task_list")
ALIGNMENTS = ("left", "center", "right")

# Same size steps Qt's own HTML importer uses for <h1>..<h4>
HEADING_SIZE_ADJUSTMENT = {1: 3, 2: 2, 3: 1, 4: 0}
HIGHLIGHT_COLOR = QColor("#fef08a")
LINK_COLOR = QColor("#2563eb")
CODE_FONT_FAMILY = "monospace"
BLOCKQUOTE_MARGIN = 40

QUOTE_LEVEL_PROP = QTextFormat.Property.BlockQuoteLevel.value
FONT_SIZE_ADJUSTMENT_PROP = QTextFormat.Property.FontSizeAdjustment.value
RULER_WIDTH_PROP = QTextFormat.Property.BlockTrailingHorizontalRulerWidth.value
BOLD_WEIGHT = QFont.Weight.Bold.value


def _weight_value(weight) -> int:
    return int(getattr(weight, "value", weight))


class EditorEngine(ABC):
    """Capabilities the toolbar and slash menu need from a rich-text engine.

    Positions are character offsets into the document. Commands the engine
    cannot apply at the caret are silently ignored.
    """

    @abstractmethod
    def to_html(self) -> str: ...

    @abstractmethod
    def set_html(self, html: str) -> None: ...

    @abstractmethod
    def is_editable(self) -> bool: ...

    @abstractmethod
    def set_editable(self, editable: bool) -> None: ...

    @abstractmethod
    def toggle_mark(self, mark: str) -> None: ...

    @abstractmethod
    def set_block(self, block: str, **attrs) -> None:
        """Turn the blocks under the caret into ``paragraph`` or ``heading`` (level=N)."""

    @abstractmethod
    def toggle_block(self, block: str, **attrs) -> None:
        """Toggle heading/list/blockquote/code_block for the blocks under the caret."""

    @abstractmethod
    def insert_node(self, node: str, **attrs) -> bool:
        """Insert ``horizontal_rule``, ``table`` or ``image`` at the caret."""

    @abstractmethod
    def set_link(self, href: str) -> None: ...

    @abstractmethod
    def unset_link(self) -> None: ...

    @abstractmethod
    def link_href(self) -> Optional[str]: ...

    @abstractmethod
    def set_alignment(self, align: str) -> None: ...

    @abstractmethod
    def is_active(self, name: str, **attrs) -> bool: ...

    @abstractmethod
    def cursor_position(self) -> int: ...

    @abstractmethod
    def text_range(self, start: int, end: int) -> str: ...

    @abstractmethod
    def delete_range(self, start: int, end: int) -> None: ...

    @abstractmethod
    def undo(self) -> None: ...

    @abstractmethod
    def redo(self) -> None: ...

    def focus(self) -> None:
        """Give keyboard focus back to the editing surface (optional)."""

    def text_before_cursor(self, count: int) -> str:
        pos = self.cursor_position()
        return self.text_range(max(0, pos - count), pos)


class QtTextEngine(EditorEngine):
    """EditorEngine backed by a QTextEdit and its QTextDocument."""

    def __init__(self, editor: QTextEdit) -> None:
        self._editor = editor

    @property
    def editor(self) -> QTextEdit:
        return self._editor

    # --- content -------------------------------------------------------

    def to_html(self) -> str:
        return self._editor.toHtml()

    def set_html(self, html: str) -> None:
        self._editor.setHtml(html or "")

    def is_editable(self) -> bool:
        return not self._editor.isReadOnly()

    def set_editable(self, editable: bool) -> None:
        self._editor.setReadOnly(not editable)

    def focus(self) -> None:
        self._editor.setFocus()

    # --- marks ---------------------------------------------------------

    def toggle_mark(self, mark: str) -> None:
        if mark not in MARKS:
            logger.debug("Ignoring unknown mark %r", mark)
            return
        active = self.is_active(mark)
        fmt = QTextCharFormat()
        if mark == "bold":
            fmt.setFontWeight(QFont.Weight.Normal if active else QFont.Weight.Bold)
        elif mark == "italic":
            fmt.setFontItalic(not active)
        elif mark == "underline":
            fmt.setFontUnderline(not active)
        elif mark == "strike":
            fmt.setFontStrikeOut(not active)
        elif mark == "highlight":
            fmt.setBackground(QBrush(Qt.NoBrush) if active else QBrush(HIGHLIGHT_COLOR))
        elif mark == "code":
            fmt.setFontFixedPitch(not active)
            family = self._editor.font().family() if active else CODE_FONT_FAMILY
            fmt.setFontFamilies([family])
        self._editor.mergeCurrentCharFormat(fmt)

    def _mark_active(self, mark: str, fmt: QTextCharFormat) -> bool:
        if mark == "bold":
            return _weight_value(fmt.fontWeight()) >= BOLD_WEIGHT
        if mark == "italic":
            return fmt.fontItalic()
        if mark == "underline":
            # Links are underlined too; only count explicit underline outside anchors
            return fmt.fontUnderline() and not fmt.isAnchor()
        if mark == "strike":
            return fmt.fontStrikeOut()
        if mark == "highlight":
            return fmt.background().style() != Qt.NoBrush
        if mark == "code":
            return fmt.fontFixedPitch()
        return False

    # --- blocks --------------------------------------------------------

    def _selected_blocks(self, cursor: QTextCursor) -> Iterator[QTextBlock]:
        doc = self._editor.document()
        block = doc.findBlock(cursor.selectionStart())
        last = doc.findBlock(cursor.selectionEnd())
        while block.isValid():
            yield block
            if block == last:
                break
            block = block.next()

    def _merge_block_chars(self, cursor: QTextCursor, fmt: QTextCharFormat) -> None:
        for block in list(self._selected_blocks(cursor)):
            span = QTextCursor(block)
            span.movePosition(QTextCursor.EndOfBlock, QTextCursor.KeepAnchor)
            if span.hasSelection():
                span.mergeCharFormat(fmt)
            span.mergeBlockCharFormat(fmt)

    def _update_block_formats(self, cursor: QTextCursor, **changes) -> None:
        for block in list(self._selected_blocks(cursor)):
            block_cursor = QTextCursor(block)
            fmt = block.blockFormat()
            for key, value in changes.items():
                if key == "heading_level":
                    fmt.setHeadingLevel(value)
                elif key == "non_breakable":
                    fmt.setNonBreakableLines(value)
                elif key == "quote_level":
                    fmt.setProperty(QUOTE_LEVEL_PROP, value)
                    margin = BLOCKQUOTE_MARGIN if value else 0
                    fmt.setLeftMargin(margin)
                    fmt.setRightMargin(margin)
                elif key == "marker":
                    fmt.setMarker(value)
                elif key == "indent":
                    fmt.setIndent(value)
            block_cursor.setBlockFormat(fmt)

    def _apply_heading(self, level: int) -> None:
        cursor = self._editor.textCursor()
        cursor.beginEditBlock()
        self._update_block_formats(cursor, heading_level=level)
        char_fmt = QTextCharFormat()
        char_fmt.setProperty(FONT_SIZE_ADJUSTMENT_PROP, HEADING_SIZE_ADJUSTMENT.get(level, 0))
        char_fmt.setFontWeight(QFont.Weight.Bold if level else QFont.Weight.Normal)
        self._merge_block_chars(cursor, char_fmt)
        cursor.endEditBlock()
        self._editor.mergeCurrentCharFormat(char_fmt)

    def set_block(self, block: str, **attrs) -> None:
        if block == "paragraph":
            self._apply_heading(0)
            if self.is_active("code_block"):
                self._toggle_code_block()
        elif block == "heading":
            level = int(attrs.get("level", 1))
            if level not in HEADING_SIZE_ADJUSTMENT:
                logger.debug("Ignoring unsupported heading level %s", level)
                return
            self._apply_heading(level)
        else:
            logger.debug("Ignoring unknown block %r", block)

    def toggle_block(self, block: str, **attrs) -> None:
        if block == "heading":
            level = int(attrs.get("level", 1))
            if self.is_active("heading", level=level):
                self.set_block("paragraph")
            else:
                self.set_block("heading", level=level)
        elif block in LIST_KINDS:
            self._toggle_list(block)
        elif block == "blockquote":
            cursor = self._editor.textCursor()
            cursor.beginEditBlock()
            self._update_block_formats(cursor, quote_level=0 if self.is_active("blockquote") else 1)
            cursor.endEditBlock()
        elif block == "code_block":
            self._toggle_code_block()
        else:
            logger.debug("Ignoring unknown block %r", block)

    def _toggle_list(self, kind: str) -> None:
        cursor = self._editor.textCursor()
        style = QTextListFormat.Style.ListDecimal if kind == "ordered_list" else QTextListFormat.Style.ListDisc
        marker = (
            QTextBlockFormat.MarkerType.Unchecked
            if kind == "task_list"
            else QTextBlockFormat.MarkerType.NoMarker
        )
        cursor.beginEditBlock()
        if self.is_active(kind):
            for block in list(self._selected_blocks(cursor)):
                text_list = block.textList()
                if text_list is not None:
                    text_list.remove(block)
            self._update_block_formats(
                cursor, indent=0, marker=QTextBlockFormat.MarkerType.NoMarker
            )
        else:
            current = cursor.currentList()
            if current is not None:
                list_fmt = current.format()
                list_fmt.setStyle(style)
                current.setFormat(list_fmt)
            else:
                list_fmt = QTextListFormat()
                list_fmt.setStyle(style)
                cursor.createList(list_fmt)
            self._update_block_formats(cursor, marker=marker)
        cursor.endEditBlock()

    def _toggle_code_block(self) -> None:
        cursor = self._editor.textCursor()
        active = self.is_active("code_block")
        char_fmt = QTextCharFormat()
        char_fmt.setFontFixedPitch(not active)
        char_fmt.setFontFamilies([self._editor.font().family() if active else CODE_FONT_FAMILY])
        cursor.beginEditBlock()
        if not active:
            self._update_block_formats(cursor, heading_level=0)
        self._update_block_formats(cursor, non_breakable=not active)
        self._merge_block_chars(cursor, char_fmt)
        cursor.endEditBlock()
        self._editor.mergeCurrentCharFormat(char_fmt)

    # --- nodes ---------------------------------------------------------

    def insert_node(self, node: str, **attrs) -> bool:
        if node == "horizontal_rule":
            return self._insert_horizontal_rule()
        if node == "table":
            return self._insert_table(
                int(attrs.get("rows", 3)),
                int(attrs.get("cols", 3)),
                bool(attrs.get("header", True)),
            )
        if node == "image":
            return self._insert_image(str(attrs.get("src") or ""))
        logger.debug("Ignoring unknown node %r", node)
        return False

    def _insert_horizontal_rule(self) -> bool:
        cursor = self._editor.textCursor()
        if cursor.currentTable() is not None:
            return False
        rule = QTextBlockFormat()
        rule.setProperty(
            RULER_WIDTH_PROP,
            QTextLength(QTextLength.Type.PercentageLength, 100),
        )
        cursor.beginEditBlock()
        cursor.clearSelection()
        if cursor.block().length() <= 1:
            cursor.setBlockFormat(rule)
        else:
            cursor.insertBlock(rule)
        cursor.insertBlock(QTextBlockFormat(), QTextCharFormat())
        cursor.endEditBlock()
        self._editor.setTextCursor(cursor)
        return True

    def _insert_table(self, rows: int, cols: int, header: bool) -> bool:
        cursor = self._editor.textCursor()
        if rows < 1 or cols < 1 or cursor.currentTable() is not None:
            return False
        fmt = QTextTableFormat()
        fmt.setHeaderRowCount(1 if header else 0)
        fmt.setBorder(1)
        fmt.setCellPadding(4)
        fmt.setCellSpacing(0)
        fmt.setWidth(QTextLength(QTextLength.Type.PercentageLength, 100))
        cursor.beginEditBlock()
        table = cursor.insertTable(rows, cols, fmt)
        if header:
            bold = QTextCharFormat()
            bold.setFontWeight(QFont.Weight.Bold)
            for col in range(cols):
                table.cellAt(0, col).firstCursorPosition().mergeBlockCharFormat(bold)
        cursor.endEditBlock()
        self._editor.setTextCursor(table.cellAt(0, 0).firstCursorPosition())
        return True

    def _insert_image(self, src: str) -> bool:
        if not src:
            return False
        fmt = QTextImageFormat()
        fmt.setName(src)
        cursor = self._editor.textCursor()
        cursor.insertImage(fmt)
        self._editor.setTextCursor(cursor)
        return True

    # --- links ---------------------------------------------------------

    def _anchor_span(self, cursor: QTextCursor) -> Optional[tuple[int, int]]:
        """Return the (start, end) of the link fragment touching the caret."""
        pos = cursor.position()
        block = cursor.block()
        it = block.begin()
        while not it.atEnd():
            fragment = it.fragment()
            if fragment.isValid() and fragment.charFormat().isAnchor():
                start = fragment.position()
                end = start + fragment.length()
                if start <= pos <= end:
                    return start, end
            it += 1
        return None

    def _select_link_or_selection(self) -> QTextCursor:
        cursor = self._editor.textCursor()
        if not cursor.hasSelection():
            span = self._anchor_span(cursor)
            if span:
                cursor.setPosition(span[0])
                cursor.setPosition(span[1], QTextCursor.KeepAnchor)
        return cursor

    def set_link(self, href: str) -> None:
        fmt = QTextCharFormat()
        fmt.setAnchor(True)
        fmt.setAnchorHref(href)
        fmt.setFontUnderline(True)
        fmt.setForeground(QBrush(LINK_COLOR))
        cursor = self._select_link_or_selection()
        if cursor.hasSelection():
            cursor.mergeCharFormat(fmt)
            return
        cursor.insertText(href, fmt)
        cursor.mergeCharFormat(self._plain_link_format())
        self._editor.setTextCursor(cursor)

    def _plain_link_format(self) -> QTextCharFormat:
        fmt = QTextCharFormat()
        fmt.setAnchor(False)
        fmt.setAnchorHref("")
        fmt.setFontUnderline(False)
        fmt.setForeground(self._editor.palette().text())
        return fmt

    def unset_link(self) -> None:
        cursor = self._select_link_or_selection()
        if cursor.hasSelection():
            cursor.mergeCharFormat(self._plain_link_format())
        self._editor.mergeCurrentCharFormat(self._plain_link_format())

    def link_href(self) -> Optional[str]:
        fmt = self._editor.currentCharFormat()
        if fmt.isAnchor() and fmt.anchorHref():
            return fmt.anchorHref()
        return None

    # --- alignment -----------------------------------------------------

    def set_alignment(self, align: str) -> None:
        flags = {"left": Qt.AlignLeft, "center": Qt.AlignHCenter, "right": Qt.AlignRight}
        if align not in flags:
            logger.debug("Ignoring unknown alignment %r", align)
            return
        self._editor.setAlignment(flags[align])

    # --- state queries -------------------------------------------------

    def is_active(self, name: str, **attrs) -> bool:
        if name in MARKS:
            return self._mark_active(name, self._editor.currentCharFormat())
        cursor = self._editor.textCursor()
        block_fmt = cursor.blockFormat()
        if name == "link":
            return self._editor.currentCharFormat().isAnchor()
        if name == "paragraph":
            return block_fmt.headingLevel() == 0 and not block_fmt.nonBreakableLines()
        if name == "heading":
            level = attrs.get("level")
            if level is None:
                return block_fmt.headingLevel() > 0
            return block_fmt.headingLevel() == int(level)
        if name in LIST_KINDS:
            text_list = cursor.currentList()
            if text_list is None:
                return False
            has_marker = block_fmt.marker() != QTextBlockFormat.MarkerType.NoMarker
            if name == "task_list":
                return has_marker
            style = text_list.format().style()
            if name == "ordered_list":
                return style == QTextListFormat.Style.ListDecimal and not has_marker
            return style != QTextListFormat.Style.ListDecimal and not has_marker
        if name == "blockquote":
            level = block_fmt.intProperty(QUOTE_LEVEL_PROP)
            return level > 0 or (
                block_fmt.leftMargin() >= BLOCKQUOTE_MARGIN and block_fmt.rightMargin() >= BLOCKQUOTE_MARGIN
            )
        if name == "code_block":
            return block_fmt.nonBreakableLines()
        if name == "table":
            return cursor.currentTable() is not None
        if name == "align":
            wanted = attrs.get("value", "left")
            horizontal = self._editor.alignment() & Qt.AlignHorizontal_Mask
            if wanted == "center":
                return horizontal == Qt.AlignHCenter
            if wanted == "right":
                return horizontal == Qt.AlignRight
            return horizontal in (Qt.AlignLeft, Qt.AlignLeading)
        return False

    # --- ranges / history ----------------------------------------------

    def _clamp(self, pos: int) -> int:
        last = max(0, self._editor.document().characterCount() - 1)
        return max(0, min(last, pos))

    def cursor_position(self) -> int:
        return self._editor.textCursor().position()

    def text_range(self, start: int, end: int) -> str:
        start, end = self._clamp(start), self._clamp(end)
        if end <= start:
            return ""
        cursor = QTextCursor(self._editor.document())
        cursor.setPosition(start)
        cursor.setPosition(end, QTextCursor.KeepAnchor)
        return cursor.selectedText().replace("\u2029", "\n")

    def delete_range(self, start: int, end: int) -> None:
        start, end = self._clamp(start), self._clamp(end)
        if end <= start:
            return
        cursor = self._editor.textCursor()
        cursor.setPosition(start)
        cursor.setPosition(end, QTextCursor.KeepAnchor)
        cursor.removeSelectedText()
        self._editor.setTextCursor(cursor)

    def undo(self) -> None:
        self._editor.undo()

    def redo(self) -> None:
        self._editor.redo()
