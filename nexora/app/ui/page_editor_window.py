from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QTimer, Qt
from PySide6.QtGui import QAction, QActionGroup, QKeySequence
from PySide6.QtWidgets import (
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QStackedWidget,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from nexora.app import config
from nexora.app.drafts import DraftStore
from nexora.app.page_io import PageDocument, PageIOError, load_page, markdown_to_html, save_page

from .block_editor import BlockEditor
from .i18n import tr
from .source_editor import SourceEditor


logger = logging.getLogger(__name__)

MODE_WYSIWYG = "wysiwyg"
MODE_MARKDOWN = "markdown"
MODE_HTML = "html"


class PageEditorWindow(QMainWindow):
    """Single-page editor window: WYSIWYG or source editing of one page file."""

    def __init__(
        self,
        page_path: Path | str,
        *,
        mode: Optional[str] = None,
        language: Optional[str] = None,
        read_only: bool = False,
        draft_store: Optional[DraftStore] = None,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._language = language or config.load_language()
        self._read_only = bool(read_only)
        self._drafts = draft_store or DraftStore(config.drafts_dir())
        self._badge_base_style = "border: 1px solid #666; padding: 2px 6px; border-radius: 3px;"
        self._font_size = config.load_editor_font_size()
        self._saved_state: tuple[str, str] = ("", "")
        self._loading = False

        self.page = self._open_page(Path(page_path))
        self._draft_key = str(self.page.path.resolve())
        initial_mode = mode or config.load_default_editor_mode()
        if initial_mode not in config.EDITOR_MODES:
            raise ValueError(f"Unsupported editor mode: {initial_mode!r}")
        self._mode = initial_mode

        self.title_edit = QLineEdit()
        self.title_edit.setObjectName("pageTitleEdit")
        self.title_edit.setPlaceholderText(tr("page.title_label", self._language))
        self.block_editor = BlockEditor(language=self._language)
        self.source_editor = SourceEditor(language=self._language)
        for editor in (self.block_editor, self.source_editor):
            editor.set_font_point_size(self._font_size)
        self._stack = QStackedWidget()
        self._stack.addWidget(self.block_editor)
        self._stack.addWidget(self.source_editor)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(6, 6, 6, 0)
        layout.setSpacing(4)
        layout.addWidget(self.title_edit)
        layout.addWidget(self._stack, 1)
        self.setCentralWidget(central)

        self._draft_timer = QTimer(self)
        self._draft_timer.setInterval(config.load_draft_autosave_ms())
        self._draft_timer.setSingleShot(True)
        self._draft_timer.timeout.connect(self._write_draft)

        self._build_toolbar()
        self._dirty_status_label = QLabel("")
        self._dirty_status_label.setObjectName("pageDirtyStatusLabel")
        self.statusBar().addPermanentWidget(self._dirty_status_label, 0)

        self._load_content()
        self.title_edit.textChanged.connect(self._on_changed)
        self.block_editor.contentChanged.connect(self._on_changed)
        self.source_editor.contentChanged.connect(self._on_changed)
        self.set_read_only(self._read_only)
        self._recover_draft()
        self.resize(1000, 760)

    # --- setup -----------------------------------------------------------

    def _open_page(self, path: Path) -> PageDocument:
        if not path.exists():
            logger.info("Starting new page at %s", path)
            title = path.stem.replace("_", " ")
            content_type = "html" if path.suffix.lower() in (".html", ".htm") else "markdown"
            return PageDocument(path=path, title=title, content="", content_type=content_type)
        try:
            return load_page(path)
        except PageIOError as exc:
            logger.error("Failed to load %s: %s", path, exc)
            QMessageBox.critical(self, tr("page.load_failed", self._language), str(exc))
            return PageDocument(path=path, title=path.stem, content="", content_type="markdown")

    def _build_toolbar(self) -> None:
        toolbar = QToolBar("Page")
        toolbar.setMovable(False)
        self.save_action = QAction(tr("page.save", self._language), self)
        self.save_action.setObjectName("pageSaveAction")
        self.save_action.setShortcut(QKeySequence("Ctrl+S"))
        self.save_action.setShortcutContext(Qt.WindowShortcut)
        self.save_action.triggered.connect(lambda: self.save())
        toolbar.addAction(self.save_action)
        toolbar.addSeparator()

        self._mode_group = QActionGroup(self)
        self._mode_group.setExclusive(True)
        self.mode_actions: dict[str, QAction] = {}
        for mode in config.EDITOR_MODES:
            action = QAction(tr(f"page.mode_{mode}", self._language), self)
            action.setObjectName(f"mode_{mode}")
            action.setCheckable(True)
            action.setChecked(mode == self._mode)
            action.triggered.connect(lambda _checked=False, m=mode: self.set_mode(m))
            self._mode_group.addAction(action)
            toolbar.addAction(action)
            self.mode_actions[mode] = action
        toolbar.addSeparator()

        font_down = QAction("A-", self)
        font_down.triggered.connect(lambda: self._adjust_font_size(-1))
        font_up = QAction("A+", self)
        font_up.triggered.connect(lambda: self._adjust_font_size(1))
        toolbar.addAction(font_down)
        toolbar.addAction(font_up)
        toolbar.addSeparator()

        self.discard_draft_action = QAction(tr("page.draft_discard", self._language), self)
        self.discard_draft_action.setObjectName("discardDraftAction")
        self.discard_draft_action.setVisible(False)
        self.discard_draft_action.triggered.connect(self.discard_draft)
        toolbar.addAction(self.discard_draft_action)
        self.addToolBar(Qt.TopToolBarArea, toolbar)

    def _load_content(self) -> None:
        self._loading = True
        try:
            self.title_edit.setText(self.page.title)
            self._apply_content(self.page.content, self.page.content_type)
        finally:
            self._loading = False
        self._mark_saved()
        self.statusBar().showMessage("Ready")

    # --- content ---------------------------------------------------------

    @property
    def mode(self) -> str:
        return self._mode

    def current_content(self) -> tuple[str, str]:
        """Return (content, content_type) as currently shown."""
        if self._mode == MODE_WYSIWYG:
            return self.block_editor.content(), "html"
        return self.source_editor.content(), self._mode

    def _apply_content(self, content: str, content_type: str) -> None:
        """Show *content* in the editor for the current mode."""
        previous = self._loading
        self._loading = True
        try:
            if self._mode == MODE_WYSIWYG:
                html = content if content_type == "html" else markdown_to_html(content)
                self.block_editor.set_content(html)
                self._stack.setCurrentWidget(self.block_editor)
            else:
                text = markdown_to_html(content) if (self._mode == MODE_HTML and content_type == "markdown") else content
                self.source_editor.set_content_type(self._mode)
                self.source_editor.set_content(text)
                self._stack.setCurrentWidget(self.source_editor)
        finally:
            self._loading = previous

    def set_mode(self, mode: str) -> None:
        """Switch editors, carrying the current content across.

        Markdown is converted to HTML when moving to WYSIWYG or HTML mode.
        The WYSIWYG document is exported as Markdown when moving to Markdown
        mode. HTML source moves into Markdown mode unchanged, since Markdown
        accepts inline HTML.
        """
        if mode not in config.EDITOR_MODES:
            raise ValueError(f"Unsupported editor mode: {mode!r}")
        if mode == self._mode:
            return
        if self._mode == MODE_WYSIWYG and mode == MODE_MARKDOWN:
            content, content_type = self.block_editor.markdown(), "markdown"
        else:
            content, content_type = self.current_content()
        was_dirty = self.is_dirty()
        self._mode = mode
        self._apply_content(content, content_type)
        self.mode_actions[mode].setChecked(True)
        if not was_dirty:
            self._mark_saved()
        logger.debug("Switched %s to %s mode", self.page.path, mode)
        self._update_dirty_indicator()

    def _serialized(self) -> tuple[str, str]:
        content, _content_type = self.current_content()
        return self.title_edit.text().strip(), content.strip()

    def _content_for_file(self) -> str:
        if self.page.content_type == "markdown" and self._mode == MODE_WYSIWYG:
            return self.block_editor.markdown().strip()
        content, content_type = self.current_content()
        if self.page.content_type == "html" and content_type == "markdown":
            content = markdown_to_html(content)
        return content.strip()

    def _mark_saved(self) -> None:
        self._saved_state = self._serialized()
        self._update_dirty_indicator()

    def is_dirty(self) -> bool:
        return self._serialized() != self._saved_state

    def _on_changed(self, *_args) -> None:
        if self._loading:
            return
        if self.is_dirty() and not self._read_only:
            self._draft_timer.start()
        else:
            self._draft_timer.stop()
        self._update_dirty_indicator()

    # --- read-only -------------------------------------------------------

    def is_read_only(self) -> bool:
        return self._read_only

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = bool(read_only)
        self.block_editor.set_editable(not self._read_only)
        self.source_editor.set_editable(not self._read_only)
        self.title_edit.setReadOnly(self._read_only)
        self.save_action.setEnabled(not self._read_only)
        if self._read_only:
            self._draft_timer.stop()
        self._update_title()
        self._update_dirty_indicator()

    # --- saving ----------------------------------------------------------

    def save(self) -> bool:
        if self._read_only:
            return False
        title = self.title_edit.text().strip()
        content = self._content_for_file()
        if not title or not content:
            QMessageBox.warning(self, tr("page.save", self._language), tr("page.empty_error", self._language))
            return False
        page = self.page.with_content(title, content)
        try:
            save_page(page)
        except PageIOError as exc:
            logger.error("Save failed for %s: %s", page.path, exc)
            QMessageBox.critical(self, tr("page.save_failed", self._language), str(exc))
            return False
        self.page = page
        self._draft_timer.stop()
        self._drafts.clear(self._draft_key)
        self.discard_draft_action.setVisible(False)
        self._mark_saved()
        self._update_title()
        self.statusBar().showMessage(tr("page.saved", self._language), 2000)
        return True

    # --- drafts ----------------------------------------------------------

    def _write_draft(self) -> None:
        if self._read_only or not self.is_dirty():
            return
        content, content_type = self.current_content()
        try:
            self._drafts.save(self._draft_key, self.title_edit.text(), content, content_type)
        except OSError as exc:
            logger.warning("Could not write draft for %s: %s", self.page.path, exc)

    def _recover_draft(self) -> None:
        if self._read_only:
            return
        draft = self._drafts.load(self._draft_key)
        if draft is None:
            return
        if (draft.title.strip(), draft.content.strip()) == self._saved_state:
            self._drafts.clear(self._draft_key)
            return
        logger.info("Recovered draft for %s", self.page.path)
        self.title_edit.setText(draft.title)
        self._apply_content(draft.content, draft.content_type)
        self.discard_draft_action.setVisible(True)
        self.statusBar().showMessage(tr("page.draft_recovered", self._language))
        self._update_dirty_indicator()

    def discard_draft(self) -> None:
        self._draft_timer.stop()
        self._drafts.clear(self._draft_key)
        self.discard_draft_action.setVisible(False)
        self._load_content()

    # --- chrome ----------------------------------------------------------

    def _update_title(self) -> None:
        label = self.page.title or self.page.path.name
        if self._read_only:
            self.setWindowTitle(f"{label} | {tr('page.read_only', self._language)} | Nexora")
        else:
            self.setWindowTitle(f"{label} | Nexora")

    def _update_dirty_indicator(self) -> None:
        if not hasattr(self, "_dirty_status_label"):
            return
        label = self._dirty_status_label
        if self._read_only:
            label.setText("O/")
            label.setStyleSheet(self._badge_base_style + " background-color: #9e9e9e; color: #f5f5f5; margin-right: 6px;")
            label.setToolTip(tr("page.read_only", self._language))
            return
        label.setText("●")
        if self.is_dirty():
            label.setStyleSheet(self._badge_base_style + " background-color: #e57373; color: #000; margin-right: 6px;")
            label.setToolTip(tr("page.unsaved", self._language))
        else:
            label.setStyleSheet(self._badge_base_style + " background-color: #81c784; color: #000; margin-right: 6px;")
            label.setToolTip(tr("page.all_saved", self._language))

    def _adjust_font_size(self, delta: int) -> None:
        new_size = max(6, min(32, self._font_size + delta))
        if new_size == self._font_size:
            return
        self._font_size = new_size
        self.block_editor.set_font_point_size(new_size)
        self.source_editor.set_font_point_size(new_size)
        config.save_editor_font_size(new_size)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if not self._read_only and self.is_dirty():
            choice = QMessageBox.question(
                self,
                "Nexora",
                tr("page.close_unsaved", self._language),
                QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
                QMessageBox.Save,
            )
            if choice == QMessageBox.Cancel:
                event.ignore()
                return
            if choice == QMessageBox.Save and not self.save():
                event.ignore()
                return
            if choice == QMessageBox.Discard:
                self._drafts.clear(self._draft_key)
        self._draft_timer.stop()
        self.block_editor.close()
        super().closeEvent(event)
