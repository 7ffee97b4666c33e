"""Tests for QtTextEngine on a real QTextDocument."""
import pytest
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QTextEdit

from nexora.app.ui.editor_engine import RULER_WIDTH_PROP, QtTextEngine


@pytest.fixture
def engine(qapp):
    return QtTextEngine(QTextEdit())


def _select_all(engine):
    cursor = engine.editor.textCursor()
    cursor.select(QTextCursor.Document)
    engine.editor.setTextCursor(cursor)


def _caret_to(engine, pos):
    cursor = engine.editor.textCursor()
    cursor.setPosition(pos)
    engine.editor.setTextCursor(cursor)


class TestMarks:
    @pytest.mark.parametrize("mark", ["bold", "italic", "underline", "strike", "highlight", "code"])
    def test_toggle_on_and_off(self, engine, mark):
        engine.editor.setPlainText("hello")
        _select_all(engine)
        engine.toggle_mark(mark)
        assert engine.is_active(mark) is True
        engine.toggle_mark(mark)
        assert engine.is_active(mark) is False

    def test_unknown_mark_is_ignored(self, engine):
        engine.editor.setPlainText("hello")
        before = engine.to_html()
        engine.toggle_mark("sparkle")
        assert engine.to_html() == before


class TestBlocks:
    def test_heading_toggle(self, engine):
        engine.editor.setPlainText("Title")
        engine.toggle_block("heading", level=2)
        assert engine.is_active("heading", level=2)
        assert not engine.is_active("heading", level=1)
        assert not engine.is_active("paragraph")
        engine.toggle_block("heading", level=2)
        assert engine.is_active("paragraph")

    def test_heading_switches_level(self, engine):
        engine.editor.setPlainText("Title")
        engine.toggle_block("heading", level=1)
        engine.toggle_block("heading", level=3)
        assert engine.is_active("heading", level=3)

    def test_set_paragraph_clears_heading(self, engine):
        engine.editor.setPlainText("Title")
        engine.set_block("heading", level=1)
        engine.set_block("paragraph")
        assert engine.is_active("paragraph")

    def test_bullet_then_ordered_then_off(self, engine):
        engine.editor.setPlainText("item")
        engine.toggle_block("bullet_list")
        assert engine.is_active("bullet_list")
        assert not engine.is_active("ordered_list")
        engine.toggle_block("ordered_list")
        assert engine.is_active("ordered_list")
        assert not engine.is_active("bullet_list")
        engine.toggle_block("ordered_list")
        assert engine.editor.textCursor().currentList() is None

    def test_task_list(self, engine):
        engine.editor.setPlainText("todo")
        engine.toggle_block("task_list")
        assert engine.is_active("task_list")
        assert not engine.is_active("bullet_list")
        engine.toggle_block("task_list")
        assert not engine.is_active("task_list")

    def test_blockquote(self, engine):
        engine.editor.setPlainText("quoted")
        engine.toggle_block("blockquote")
        assert engine.is_active("blockquote")
        engine.toggle_block("blockquote")
        assert not engine.is_active("blockquote")

    def test_code_block(self, engine):
        engine.editor.setPlainText("x = 1")
        engine.toggle_block("code_block")
        assert engine.is_active("code_block")
        assert not engine.is_active("paragraph")
        engine.toggle_block("code_block")
        assert not engine.is_active("code_block")


class TestNodes:
    def test_table_inserted_once(self, engine):
        assert engine.insert_node("table", rows=3, cols=3, header=True) is True
        assert engine.is_active("table")
        table = engine.editor.textCursor().currentTable()
        assert (table.rows(), table.columns()) == (3, 3)
        assert table.format().headerRowCount() == 1
        # No nested tables
        assert engine.insert_node("table", rows=2, cols=2) is False

    def test_horizontal_rule(self, engine):
        engine.editor.setPlainText("above")
        _caret_to(engine, 5)
        assert engine.insert_node("horizontal_rule") is True
        doc = engine.editor.document()
        rules = [
            doc.findBlockByNumber(i)
            for i in range(doc.blockCount())
            if doc.findBlockByNumber(i).blockFormat().hasProperty(RULER_WIDTH_PROP)
        ]
        assert len(rules) == 1

    def test_image(self, engine):
        assert engine.insert_node("image", src="https://example.com/cat.png") is True
        assert 'src="https://example.com/cat.png"' in engine.to_html()

    def test_image_without_src(self, engine):
        assert engine.insert_node("image") is False

    def test_unknown_node(self, engine):
        assert engine.insert_node("rocket") is False


class TestLinks:
    def test_link_on_selection(self, engine):
        engine.editor.setPlainText("hello")
        _select_all(engine)
        engine.set_link("https://example.com")
        assert engine.link_href() == "https://example.com"
        assert engine.is_active("link")
        assert 'href="https://example.com"' in engine.to_html()

    def test_unset_link_at_caret(self, engine):
        engine.editor.setPlainText("hello")
        _select_all(engine)
        engine.set_link("https://example.com")
        _caret_to(engine, 2)
        engine.unset_link()
        assert "href=" not in engine.to_html()

    def test_link_without_selection_inserts_url(self, engine):
        engine.set_link("https://example.com")
        assert engine.editor.toPlainText() == "https://example.com"
        assert 'href="https://example.com"' in engine.to_html()


class TestRangesAndState:
    def test_alignment(self, engine):
        engine.editor.setPlainText("centered")
        engine.set_alignment("center")
        assert engine.is_active("align", value="center")
        assert not engine.is_active("align", value="left")
        engine.set_alignment("right")
        assert engine.is_active("align", value="right")

    def test_text_range_and_delete(self, engine):
        engine.editor.setPlainText("ab\ncd")
        assert engine.text_range(0, 5) == "ab\ncd"
        assert engine.text_range(3, 99) == "cd"
        engine.delete_range(1, 3)
        assert engine.editor.toPlainText() == "acd"
        assert engine.cursor_position() == 1

    def test_text_before_cursor(self, engine):
        engine.editor.setPlainText("hello /h")
        _caret_to(engine, 8)
        assert engine.text_before_cursor(2) == "/h"

    def test_undo_redo(self, engine):
        engine.editor.setPlainText("")
        engine.editor.insertPlainText("abc")
        engine.undo()
        assert engine.editor.toPlainText() == ""
        engine.redo()
        assert engine.editor.toPlainText() == "abc"

    def test_editable_flag(self, engine):
        engine.set_editable(False)
        assert engine.is_editable() is False
        engine.set_editable(True)
        assert engine.is_editable() is True
