from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

GLOBAL_CONFIG = Path(os.getenv("NEXORA_CONFIG") or (Path.home() / ".nexora_config.json"))
DRAFTS_DIR = Path(os.getenv("NEXORA_DRAFTS_DIR") or (Path.home() / ".nexora_drafts"))

EDITOR_MODES = ("wysiwyg", "markdown", "html")
LANGUAGES = ("de", "en")


def init_settings() -> None:
    GLOBAL_CONFIG.parent.mkdir(parents=True, exist_ok=True)


def _read_global_config() -> dict:
    """Return the parsed global config, or an empty dict on error/missing."""
    if not GLOBAL_CONFIG.exists():
        return {}
    try:
        payload = json.loads(GLOBAL_CONFIG.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _update_global_config(updates: dict) -> None:
    """Merge updates into global config file."""
    existing = _read_global_config()
    existing.update(updates)
    GLOBAL_CONFIG.parent.mkdir(parents=True, exist_ok=True)
    GLOBAL_CONFIG.write_text(json.dumps(existing, indent=2), encoding="utf-8")


def load_language() -> str:
    """Return the UI language (de | en, default: de)."""
    payload = _read_global_config()
    lang = payload.get("language")
    if isinstance(lang, str) and lang.strip().lower() in LANGUAGES:
        return lang.strip().lower()
    return "de"


def save_language(language: str) -> None:
    lang = (language or "").strip().lower()
    if lang not in LANGUAGES:
        raise ValueError(f"Unsupported language: {language!r}")
    _update_global_config({"language": lang})


def load_editor_font_size(default: int = 12) -> int:
    payload = _read_global_config()
    try:
        size = int(payload.get("editor_font_size", default))
    except (TypeError, ValueError):
        return default
    return max(6, min(32, size))


def save_editor_font_size(size: int) -> None:
    _update_global_config({"editor_font_size": max(6, min(32, int(size)))})


def load_default_editor_mode() -> str:
    """Return the editor mode new windows open in: wysiwyg | markdown | html."""
    payload = _read_global_config()
    mode = payload.get("default_editor_mode")
    if isinstance(mode, str) and mode in EDITOR_MODES:
        return mode
    return "wysiwyg"


def save_default_editor_mode(mode: str) -> None:
    if mode not in EDITOR_MODES:
        raise ValueError(f"Unsupported editor mode: {mode!r}")
    _update_global_config({"default_editor_mode": mode})


def load_draft_autosave_ms(default: int = 10_000) -> int:
    payload = _read_global_config()
    try:
        value = int(payload.get("draft_autosave_ms", default))
    except (TypeError, ValueError):
        return default
    return max(1000, value)


def save_draft_autosave_ms(ms: int) -> None:
    _update_global_config({"draft_autosave_ms": max(1000, int(ms))})


def load_editor_placeholder() -> Optional[str]:
    payload = _read_global_config()
    text = payload.get("editor_placeholder")
    return text if isinstance(text, str) and text.strip() else None


def save_editor_placeholder(text: Optional[str]) -> None:
    _update_global_config({"editor_placeholder": text.strip() if text else None})


def drafts_dir() -> Path:
    return DRAFTS_DIR
