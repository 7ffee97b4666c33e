from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .editor_engine import EditorEngine
from .i18n import tr
from .url_utils import is_valid_url


logger = logging.getLogger(__name__)

# (prompt label, pre-filled value) -> entered text, or None when cancelled
UrlPrompt = Callable[[str, str], Optional[str]]


@dataclass(frozen=True)
class EditorAction:
    """A semantic editing command, independent of the engine that runs it."""

    name: str
    params: tuple[tuple[str, object], ...] = ()

    @classmethod
    def of(cls, name: str, **params) -> "EditorAction":
        return cls(name, tuple(sorted(params.items())))

    @property
    def kwargs(self) -> dict:
        return dict(self.params)

    def param(self, key: str, default=None):
        return self.kwargs.get(key, default)


def _no_prompt(_label: str, _default: str) -> Optional[str]:
    return None


class ActionDispatcher:
    """Translate EditorActions into EditorEngine calls.

    Toolbar buttons and slash commands both run through here, so the same
    action always produces the same document mutation.
    """

    def __init__(
        self,
        engine: EditorEngine,
        prompt_url: Optional[UrlPrompt] = None,
        language: Optional[str] = None,
    ) -> None:
        self.engine = engine
        self._prompt_url: UrlPrompt = prompt_url or _no_prompt
        self.language = language
        self._handlers: dict[str, Callable[[EditorAction], bool]] = {
            "toggle_mark": self._toggle_mark,
            "set_paragraph": self._set_paragraph,
            "toggle_heading": self._toggle_heading,
            "toggle_list": self._toggle_list,
            "toggle_blockquote": lambda _a: self._toggle_block("blockquote"),
            "toggle_code_block": lambda _a: self._toggle_block("code_block"),
            "insert_horizontal_rule": lambda _a: self.engine.insert_node("horizontal_rule"),
            "insert_table": self._insert_table,
            "insert_image": self._insert_image,
            "edit_link": self._edit_link,
            "set_alignment": self._set_alignment,
            "undo": lambda _a: self._history(self.engine.undo),
            "redo": lambda _a: self._history(self.engine.redo),
        }

    def set_url_prompt(self, prompt_url: Optional[UrlPrompt]) -> None:
        self._prompt_url = prompt_url or _no_prompt

    def supports(self, action: EditorAction) -> bool:
        return action.name in self._handlers

    def run(self, action: EditorAction) -> bool:
        """Run *action*; returns False when it was rejected or cancelled."""
        handler = self._handlers.get(action.name)
        if handler is None:
            logger.warning("Unknown editor action: %s", action.name)
            return False
        if not self.engine.is_editable():
            logger.debug("Editor is read-only; skipping %s", action.name)
            return False
        self.engine.focus()
        result = handler(action)
        return True if result is None else bool(result)

    def is_active(self, action: EditorAction) -> Optional[bool]:
        """Return the pressed state for *action*, or None when it has none."""
        name = action.name
        if name == "toggle_mark":
            return self.engine.is_active(action.param("mark"))
        if name == "set_paragraph":
            return self.engine.is_active("paragraph")
        if name == "toggle_heading":
            return self.engine.is_active("heading", level=action.param("level", 1))
        if name == "toggle_list":
            return self.engine.is_active(action.param("kind", "bullet_list"))
        if name == "toggle_blockquote":
            return self.engine.is_active("blockquote")
        if name == "toggle_code_block":
            return self.engine.is_active("code_block")
        if name == "edit_link":
            return self.engine.is_active("link")
        if name == "set_alignment":
            return self.engine.is_active("align", value=action.param("align", "left"))
        return None

    # --- handlers ------------------------------------------------------

    def _toggle_mark(self, action: EditorAction) -> bool:
        self.engine.toggle_mark(action.param("mark"))
        return True

    def _set_paragraph(self, _action: EditorAction) -> bool:
        self.engine.set_block("paragraph")
        return True

    def _toggle_heading(self, action: EditorAction) -> bool:
        self.engine.toggle_block("heading", level=action.param("level", 1))
        return True

    def _toggle_list(self, action: EditorAction) -> bool:
        self.engine.toggle_block(action.param("kind", "bullet_list"))
        return True

    def _toggle_block(self, block: str) -> bool:
        self.engine.toggle_block(block)
        return True

    def _insert_table(self, action: EditorAction) -> bool:
        return self.engine.insert_node(
            "table",
            rows=action.param("rows", 3),
            cols=action.param("cols", 3),
            header=action.param("header", True),
        )

    def _insert_image(self, _action: EditorAction) -> bool:
        url = self._prompt_url(tr("prompt.image", self.language), "")
        if not url:
            return False
        if not is_valid_url(url):
            logger.debug("Rejected image URL %r", url)
            return False
        return self.engine.insert_node("image", src=url)

    def _edit_link(self, _action: EditorAction) -> bool:
        current = self.engine.link_href() or "https://"
        url = self._prompt_url(tr("prompt.link", self.language), current)
        if url is None:
            return False
        if url == "":
            self.engine.unset_link()
            return True
        if not is_valid_url(url):
            logger.debug("Rejected link URL %r", url)
            return False
        self.engine.set_link(url)
        return True

    def _set_alignment(self, action: EditorAction) -> bool:
        self.engine.set_alignment(action.param("align", "left"))
        return True

    def _history(self, step: Callable[[], None]) -> bool:
        step()
        return True
