"""Tests for the page editor window: modes, saving, drafts and closing."""
import pytest
from PySide6.QtWidgets import QMessageBox

from nexora.app.drafts import DraftStore
from nexora.app.page_io import PageDocument, load_page, save_page
from nexora.app.ui.page_editor_window import PageEditorWindow


@pytest.fixture(autouse=True)
def quiet_dialogs(monkeypatch):
    """Replace modal message boxes; records what would have been shown."""
    shown = []
    monkeypatch.setattr(QMessageBox, "warning", lambda *args, **kwargs: shown.append(("warning", args[1:])))
    monkeypatch.setattr(QMessageBox, "critical", lambda *args, **kwargs: shown.append(("critical", args[1:])))
    monkeypatch.setattr(QMessageBox, "question", lambda *args, **kwargs: QMessageBox.Discard)
    return shown


@pytest.fixture
def drafts(tmp_path):
    return DraftStore(tmp_path / "drafts")


@pytest.fixture
def md_page(tmp_path):
    path = tmp_path / "welcome.md"
    save_page(PageDocument(path=path, title="Welcome", content="# Heading\n\nSome *text*"))
    return path


def _open(qtbot, path, drafts, **kwargs):
    window = PageEditorWindow(path, draft_store=drafts, language="en", **kwargs)
    qtbot.addWidget(window)
    return window


class TestLoading:
    def test_markdown_mode_shows_source(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        assert window.title_edit.text() == "Welcome"
        assert window.source_editor.content() == "# Heading\n\nSome *text*"
        assert window.source_editor.content_type == "markdown"
        assert not window.is_dirty()
        assert window.windowTitle() == "Welcome | Nexora"

    def test_wysiwyg_mode_renders_markdown(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="wysiwyg")
        assert window.block_editor.plain_text() == "Heading\nSome text"
        assert not window.is_dirty()

    def test_new_page(self, qtbot, tmp_path, drafts):
        window = _open(qtbot, tmp_path / "brand_new.md", drafts, mode="markdown")
        assert window.title_edit.text() == "brand new"
        assert window.source_editor.content() == ""

    def test_invalid_mode(self, qtbot, md_page, drafts):
        with pytest.raises(ValueError):
            PageEditorWindow(md_page, draft_store=drafts, mode="rtf")


class TestModes:
    def test_markdown_to_wysiwyg(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.set_mode("wysiwyg")
        assert window.mode == "wysiwyg"
        assert window.mode_actions["wysiwyg"].isChecked()
        assert "Heading" in window.block_editor.plain_text()
        assert not window.is_dirty()

    def test_markdown_to_html_source(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.set_mode("html")
        assert window.source_editor.content_type == "html"
        assert "<h1>Heading</h1>" in window.source_editor.content()

    def test_wysiwyg_to_markdown_exports_markdown(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="wysiwyg")
        window.set_mode("markdown")
        source = window.source_editor.content()
        assert "<!DOCTYPE" not in source
        assert "# Heading" in source

    def test_unknown_mode(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        with pytest.raises(ValueError):
            window.set_mode("pdf")


class TestSaving:
    def test_edit_marks_dirty_and_save_writes(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.source_editor.editor.appendPlainText("More.")
        assert window.is_dirty()
        assert window.save() is True
        assert not window.is_dirty()
        page = load_page(md_page)
        assert page.title == "Welcome"
        assert page.content.endswith("More.")

    def test_title_change_is_saved(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.title_edit.setText("  Renamed  ")
        assert window.is_dirty()
        assert window.save() is True
        assert load_page(md_page).title == "Renamed"
        assert window.windowTitle() == "Renamed | Nexora"

    def test_blank_title_refused(self, qtbot, md_page, drafts, quiet_dialogs):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.title_edit.setText("   ")
        assert window.save() is False
        assert quiet_dialogs[-1][0] == "warning"
        assert load_page(md_page).title == "Welcome"

    def test_blank_content_refused(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.source_editor.editor.setPlainText("  \n ")
        assert window.save() is False

    def test_html_page_saved_from_markdown_mode_is_converted(self, qtbot, tmp_path, drafts):
        path = tmp_path / "page.html"
        save_page(PageDocument(path=path, title="Page", content="<p>Hi</p>", content_type="html"))
        window = _open(qtbot, path, drafts, mode="markdown")
        window.source_editor.editor.setPlainText("**Bold**")
        assert window.save() is True
        assert load_page(path).content == "<p><strong>Bold</strong></p>"

    def test_markdown_page_saved_from_wysiwyg_stays_markdown(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="wysiwyg")
        assert window.save() is True
        raw = md_page.read_text(encoding="utf-8")
        assert "<!DOCTYPE" not in raw
        assert "<html" not in raw
        assert "# Heading" in raw

        reopened = _open(qtbot, md_page, drafts, mode="markdown")
        source = reopened.source_editor.content()
        assert not source.startswith("<")
        assert "# Heading" in source

    def test_save_shortcut(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        assert window.save_action.shortcut().toString() == "Ctrl+S"

    def test_read_only(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown", read_only=True)
        assert window.is_read_only()
        assert window.title_edit.isReadOnly()
        assert window.source_editor.editor.isReadOnly()
        assert not window.block_editor.is_editable()
        assert window.save() is False
        assert "Read-only" in window.windowTitle()


class TestDrafts:
    def test_change_starts_autosave_timer(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        assert not window._draft_timer.isActive()
        window.source_editor.editor.appendPlainText("x")
        assert window._draft_timer.isActive()
        assert window._draft_timer.interval() == 10_000

    def test_draft_recovered_and_discarded(self, qtbot, md_page, drafts):
        first = _open(qtbot, md_page, drafts, mode="markdown")
        first.title_edit.setText("Draft title")
        first._write_draft()

        second = _open(qtbot, md_page, drafts, mode="markdown")
        assert second.title_edit.text() == "Draft title"
        assert second.is_dirty()
        assert second.discard_draft_action.isVisible()

        second.discard_draft()
        assert second.title_edit.text() == "Welcome"
        assert not second.is_dirty()
        assert drafts.load(str(md_page.resolve())) is None

    def test_identical_draft_is_dropped(self, qtbot, md_page, drafts):
        key = str(md_page.resolve())
        drafts.save(key, "Welcome", "# Heading\n\nSome *text*", "markdown")
        window = _open(qtbot, md_page, drafts, mode="markdown")
        assert not window.is_dirty()
        assert drafts.load(key) is None

    def test_save_clears_draft(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.source_editor.editor.appendPlainText("x")
        window._write_draft()
        assert drafts.load(str(md_page.resolve())) is not None
        window.save()
        assert drafts.load(str(md_page.resolve())) is None

    def test_clean_window_writes_no_draft(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window._write_draft()
        assert drafts.load(str(md_page.resolve())) is None


class TestClosing:
    def test_cancel_keeps_window_open(self, qtbot, md_page, drafts, monkeypatch):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.show()
        window.source_editor.editor.appendPlainText("x")
        monkeypatch.setattr(QMessageBox, "question", lambda *args, **kwargs: QMessageBox.Cancel)
        assert window.close() is False
        assert window.isVisible()
        monkeypatch.setattr(QMessageBox, "question", lambda *args, **kwargs: QMessageBox.Discard)

    def test_save_on_close(self, qtbot, md_page, drafts, monkeypatch):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.show()
        window.source_editor.editor.appendPlainText("Saved on close")
        monkeypatch.setattr(QMessageBox, "question", lambda *args, **kwargs: QMessageBox.Save)
        assert window.close() is True
        assert load_page(md_page).content.endswith("Saved on close")

    def test_discard_on_close_clears_draft(self, qtbot, md_page, drafts):
        window = _open(qtbot, md_page, drafts, mode="markdown")
        window.show()
        window.source_editor.editor.appendPlainText("x")
        window._write_draft()
        assert window.close() is True
        assert drafts.load(str(md_page.resolve())) is None
        assert load_page(md_page).content == "# Heading\n\nSome *text*"
