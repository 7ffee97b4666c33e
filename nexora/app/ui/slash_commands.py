from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .editor_actions import EditorAction
from .i18n import tr


@dataclass(frozen=True)
class SlashCommand:
    id: str
    label: str
    icon: str
    action: EditorAction


# id, icon, action; labels come from the i18n table ("slash.<id>")
SLASH_COMMAND_TABLE: tuple[tuple[str, str, EditorAction], ...] = (
    ("h1", "𝐇₁", EditorAction.of("toggle_heading", level=1)),
    ("h2", "𝐇₂", EditorAction.of("toggle_heading", level=2)),
    ("h3", "𝐇₃", EditorAction.of("toggle_heading", level=3)),
    ("bullet", "•", EditorAction.of("toggle_list", kind="bullet_list")),
    ("ordered", "1.", EditorAction.of("toggle_list", kind="ordered_list")),
    ("task", "☑", EditorAction.of("toggle_list", kind="task_list")),
    ("quote", "❝", EditorAction.of("toggle_blockquote")),
    ("code", "</>", EditorAction.of("toggle_code_block")),
    ("hr", "—", EditorAction.of("insert_horizontal_rule")),
    ("table", "⊞", EditorAction.of("insert_table", rows=3, cols=3, header=True)),
    ("image", "🖼", EditorAction.of("insert_image")),
)


def build_slash_commands(language: Optional[str] = None) -> tuple[SlashCommand, ...]:
    return tuple(
        SlashCommand(id=cmd_id, label=tr(f"slash.{cmd_id}", language), icon=icon, action=action)
        for cmd_id, icon, action in SLASH_COMMAND_TABLE
    )


def filter_commands(commands: Iterable[SlashCommand], query: str) -> list[SlashCommand]:
    """Commands whose label contains *query*, case-insensitively, in table order."""
    needle = (query or "").lower()
    return [cmd for cmd in commands if needle in cmd.label.lower()]


def find_command(commands: Sequence[SlashCommand], command_id: str) -> Optional[SlashCommand]:
    return next((cmd for cmd in commands if cmd.id == command_id), None)
