from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from PySide6.QtCore import QEvent, QObject, QPoint, Qt, Signal
from PySide6.QtWidgets import (
    QApplication,
    QFrame,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from .editor_actions import ActionDispatcher
from .editor_engine import EditorEngine
from .slash_commands import SlashCommand, filter_commands


logger = logging.getLogger(__name__)

TRIGGER = "/"
FILTER_CHAR_PATTERN = re.compile(r"^[a-zA-Z0-9äöüÄÖÜß]$")

KEY_ESCAPE = "Escape"
KEY_DOWN = "ArrowDown"
KEY_UP = "ArrowUp"
KEY_ENTER = "Enter"
KEY_BACKSPACE = "Backspace"


@dataclass
class SlashMenuState:
    open: bool = False
    filter: str = ""
    index: int = 0
    # Document position of the "/" that opened the menu
    anchor: Optional[int] = None


class SlashMenuController:
    """State machine behind the "/" command menu.

    Keys are offered through :meth:`handle_key` before the editing surface
    sees them; a True return means the key was consumed. Document changes
    are reported through :meth:`on_document_changed`, which is where a typed
    "/" actually opens the menu.
    """

    def __init__(
        self,
        engine: EditorEngine,
        dispatcher: ActionDispatcher,
        commands: Sequence[SlashCommand],
    ) -> None:
        self.engine = engine
        self.dispatcher = dispatcher
        self.commands: tuple[SlashCommand, ...] = tuple(commands)
        self.state = SlashMenuState()
        self._trigger_pending = False
        self._listeners: list[Callable[[], None]] = []

    # --- observers -----------------------------------------------------

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    # --- queries -------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state.open

    def visible_commands(self) -> list[SlashCommand]:
        return filter_commands(self.commands, self.state.filter)

    # --- transitions ---------------------------------------------------

    def open(self, anchor: Optional[int] = None) -> None:
        self.state = SlashMenuState(open=True, filter="", index=0, anchor=anchor)
        logger.debug("Slash menu opened at %s", anchor)
        self._notify()

    def close(self) -> None:
        self._trigger_pending = False
        if not self.state.open:
            return
        self.state = SlashMenuState()
        logger.debug("Slash menu closed")
        self._notify()

    def move(self, delta: int) -> None:
        count = len(self.visible_commands())
        if not count:
            return
        self.state.index = max(0, min(count - 1, self.state.index + delta))
        self._notify()

    def highlight(self, index: int) -> None:
        if 0 <= index < len(self.visible_commands()) and index != self.state.index:
            self.state.index = index
            self._notify()

    def handle_key(self, key: str, text: str = "") -> bool:
        if not self.engine.is_editable():
            return False
        if not self.state.open:
            if text == TRIGGER:
                self._trigger_pending = True
            return False
        if key == KEY_ESCAPE:
            self.close()
            return True
        if key == KEY_DOWN:
            self.move(1)
            return True
        if key == KEY_UP:
            self.move(-1)
            return True
        if key == KEY_ENTER:
            self.execute()
            return True
        if key == KEY_BACKSPACE:
            if not self.state.filter:
                # Let the surface delete the "/" itself
                self.close()
                return False
            self.state.filter = self.state.filter[:-1]
            self._notify()
            return False
        if text and FILTER_CHAR_PATTERN.match(text):
            self.state.filter += text
            self._notify()
        return False

    def on_document_changed(self, position: Optional[int] = None, added: int = 0) -> None:
        """Open the menu once a pending "/" has landed in the document."""
        if not self._trigger_pending:
            return
        self._trigger_pending = False
        if self.state.open:
            return
        # Qt can report the first edit of a block as replacing all of it
        candidates = [self.engine.cursor_position() - 1]
        if position is not None and added > 0:
            candidates.insert(0, position + added - 1)
        for slash_at in candidates:
            if slash_at >= 0 and self.engine.text_range(slash_at, slash_at + 1) == TRIGGER:
                self.open(anchor=slash_at)
                return

    def execute(self, index: Optional[int] = None) -> bool:
        if not self.state.open:
            return False
        commands = self.visible_commands()
        if not commands:
            return False
        chosen = self.state.index if index is None else index
        chosen = max(0, min(len(commands) - 1, chosen))
        command = commands[chosen]
        self._remove_trigger_text()
        self.close()
        logger.debug("Running slash command %s", command.id)
        self.dispatcher.run(command.action)
        return True

    def _remove_trigger_text(self) -> bool:
        """Delete the typed "/" and filter, re-checking where they are now."""
        expected = TRIGGER + self.state.filter
        size = len(expected)
        caret = self.engine.cursor_position()
        if caret >= size and self.engine.text_range(caret - size, caret) == expected:
            self.engine.delete_range(caret - size, caret)
            return True
        anchor = self.state.anchor
        if anchor is not None and self.engine.text_range(anchor, anchor + size) == expected:
            self.engine.delete_range(anchor, anchor + size)
            return True
        logger.debug("Slash trigger text %r no longer at caret; leaving document untouched", expected)
        return False


class SlashMenuPopup(QFrame):
    """Floating list of slash commands shown over the editing surface."""

    commandClicked = Signal(int)
    commandHovered = Signal(int)

    def __init__(self, controller: SlashMenuController, surface: QTextEdit, header: str, parent: QWidget) -> None:
        super().__init__(parent)
        self._controller = controller
        self._surface = surface
        self._filter_installed = False
        self._shown_ids: list[str] = []
        self.setObjectName("slashMenu")
        self.setFrameShape(QFrame.StyledPanel)
        self.setFocusPolicy(Qt.NoFocus)
        self.setStyleSheet(
            "#slashMenu { background: palette(base); border: 1px solid #888; border-radius: 6px; }"
        )
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(4)
        self._header = QLabel(header)
        self._header.setStyleSheet("color: #888; font-size: 11px;")
        layout.addWidget(self._header)
        self.list = QListWidget()
        self.list.setFocusPolicy(Qt.NoFocus)
        self.list.setUniformItemSizes(True)
        self.list.setMouseTracking(True)
        self.list.itemClicked.connect(lambda item: self.commandClicked.emit(self.list.row(item)))
        self.list.itemEntered.connect(lambda item: self.commandHovered.emit(self.list.row(item)))
        layout.addWidget(self.list)
        self.setMinimumWidth(220)
        self.hide()
        self.commandClicked.connect(controller.execute)
        self.commandHovered.connect(controller.highlight)
        controller.add_listener(self.refresh)

    def refresh(self) -> None:
        commands = self._controller.visible_commands()
        if not self._controller.is_open or not commands:
            self._hide_menu()
            return
        ids = [command.id for command in commands]
        if ids != self._shown_ids:
            self.list.clear()
            for command in commands:
                item = QListWidgetItem(f"{command.icon}  {command.label}")
                item.setData(Qt.UserRole, command.id)
                self.list.addItem(item)
            self._shown_ids = ids
            rows = min(len(commands), 8)
            self.list.setFixedHeight(rows * max(self.list.sizeHintForRow(0), 18) + 6)
            self.adjustSize()
        index = self._controller.state.index
        self.list.setCurrentRow(index if 0 <= index < len(commands) else -1)
        self._place_near_caret()
        self._install_click_filter()
        self.show()
        self.raise_()

    def _place_near_caret(self) -> None:
        parent = self.parentWidget()
        if parent is None:
            return
        rect = self._surface.cursorRect()
        pos = self._surface.viewport().mapTo(parent, rect.bottomLeft() + QPoint(0, 4))
        max_x = max(0, parent.width() - self.width())
        max_y = max(0, parent.height() - self.height())
        self.move(max(0, min(pos.x(), max_x)), max(0, min(pos.y(), max_y)))

    def _hide_menu(self) -> None:
        self._remove_click_filter()
        self.hide()

    def _install_click_filter(self) -> None:
        app = QApplication.instance()
        if app is not None and not self._filter_installed:
            app.installEventFilter(self)
            self._filter_installed = True

    def _remove_click_filter(self) -> None:
        app = QApplication.instance()
        if app is not None and self._filter_installed:
            app.removeEventFilter(self)
        self._filter_installed = False

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if event.type() == QEvent.MouseButtonPress and isinstance(obj, QWidget):
            if obj is not self and not self.isAncestorOf(obj):
                self._controller.close()
        return super().eventFilter(obj, event)

    def hideEvent(self, event) -> None:  # type: ignore[override]
        self._remove_click_filter()
        super().hideEvent(event)
