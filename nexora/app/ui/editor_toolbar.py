from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QToolBar, QWidget

from .editor_actions import ActionDispatcher, EditorAction
from .i18n import tr


@dataclass(frozen=True)
class ToolbarItem:
    id: str
    tooltip_key: str
    glyph: str
    action: EditorAction
    shortcut: Optional[str] = None


# Actions that have a pressed/active state at the caret
STATEFUL_ACTIONS = {
    "toggle_mark",
    "set_paragraph",
    "toggle_heading",
    "toggle_list",
    "toggle_blockquote",
    "toggle_code_block",
    "edit_link",
    "set_alignment",
}

TOOLBAR_GROUPS: tuple[tuple[ToolbarItem, ...], ...] = (
    (
        ToolbarItem("bold", "toolbar.bold", "B", EditorAction.of("toggle_mark", mark="bold"), "Ctrl+B"),
        ToolbarItem("italic", "toolbar.italic", "I", EditorAction.of("toggle_mark", mark="italic"), "Ctrl+I"),
        ToolbarItem("underline", "toolbar.underline", "U", EditorAction.of("toggle_mark", mark="underline"), "Ctrl+U"),
        ToolbarItem("strike", "toolbar.strike", "S", EditorAction.of("toggle_mark", mark="strike")),
        ToolbarItem("highlight", "toolbar.highlight", "🖍", EditorAction.of("toggle_mark", mark="highlight")),
    ),
    (
        ToolbarItem("paragraph", "toolbar.paragraph", "¶", EditorAction.of("set_paragraph")),
        ToolbarItem("h1", "toolbar.h1", "H1", EditorAction.of("toggle_heading", level=1)),
        ToolbarItem("h2", "toolbar.h2", "H2", EditorAction.of("toggle_heading", level=2)),
        ToolbarItem("h3", "toolbar.h3", "H3", EditorAction.of("toggle_heading", level=3)),
    ),
    (
        ToolbarItem("bullet_list", "toolbar.ul", "•", EditorAction.of("toggle_list", kind="bullet_list")),
        ToolbarItem("ordered_list", "toolbar.ol", "1.", EditorAction.of("toggle_list", kind="ordered_list")),
        ToolbarItem("task_list", "toolbar.task", "☑", EditorAction.of("toggle_list", kind="task_list")),
    ),
    (
        ToolbarItem("blockquote", "toolbar.quote", "❝", EditorAction.of("toggle_blockquote")),
        ToolbarItem("code", "toolbar.code", "<>", EditorAction.of("toggle_mark", mark="code")),
        ToolbarItem("code_block", "toolbar.codeblock", "{ }", EditorAction.of("toggle_code_block")),
        ToolbarItem("horizontal_rule", "toolbar.hr", "—", EditorAction.of("insert_horizontal_rule")),
    ),
    (
        ToolbarItem("link", "toolbar.link", "🔗", EditorAction.of("edit_link")),
        ToolbarItem("image", "toolbar.image", "🖼", EditorAction.of("insert_image")),
        ToolbarItem("table", "toolbar.table", "⊞", EditorAction.of("insert_table", rows=3, cols=3, header=True)),
    ),
    (
        ToolbarItem("align_left", "toolbar.align_left", "⇤", EditorAction.of("set_alignment", align="left")),
        ToolbarItem("align_center", "toolbar.align_center", "≡", EditorAction.of("set_alignment", align="center")),
        ToolbarItem("align_right", "toolbar.align_right", "⇥", EditorAction.of("set_alignment", align="right")),
    ),
    (
        ToolbarItem("undo", "toolbar.undo", "↶", EditorAction.of("undo"), "Ctrl+Z"),
        ToolbarItem("redo", "toolbar.redo", "↷", EditorAction.of("redo"), "Ctrl+Shift+Z"),
    ),
)


class EditorToolbar(QToolBar):
    """Formatting toolbar; every button runs an EditorAction through the dispatcher."""

    def __init__(self, dispatcher: ActionDispatcher, language: Optional[str] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__("Format", parent)
        self.setMovable(False)
        self.setFocusPolicy(Qt.NoFocus)
        self._dispatcher = dispatcher
        self._items: dict[str, ToolbarItem] = {}
        self._actions: dict[str, QAction] = {}
        for group_index, group in enumerate(TOOLBAR_GROUPS):
            if group_index:
                self.addSeparator()
            for item in group:
                qaction = QAction(item.glyph, self)
                qaction.setObjectName(f"toolbar_{item.id}")
                qaction.setToolTip(tr(item.tooltip_key, language))
                qaction.setCheckable(item.action.name in STATEFUL_ACTIONS)
                if item.shortcut:
                    qaction.setShortcut(QKeySequence(item.shortcut))
                    qaction.setShortcutContext(Qt.WidgetWithChildrenShortcut)
                qaction.triggered.connect(partial(self._on_triggered, item.id))
                self.addAction(qaction)
                self._items[item.id] = item
                self._actions[item.id] = qaction

    def action_for(self, item_id: str) -> QAction:
        return self._actions[item_id]

    def shortcut_actions(self) -> list[QAction]:
        return [self._actions[item.id] for item in self._items.values() if item.shortcut]

    def trigger(self, item_id: str) -> bool:
        item = self._items.get(item_id)
        if item is None:
            return False
        result = self._dispatcher.run(item.action)
        self.refresh_states()
        return result

    def _on_triggered(self, item_id: str, _checked: bool = False) -> None:
        self.trigger(item_id)

    def refresh_states(self) -> None:
        for item_id, item in self._items.items():
            qaction = self._actions[item_id]
            if not qaction.isCheckable():
                continue
            active = self._dispatcher.is_active(item.action)
            qaction.setChecked(bool(active))

    def active_items(self) -> list[str]:
        return [item_id for item_id, qaction in self._actions.items() if qaction.isCheckable() and qaction.isChecked()]
