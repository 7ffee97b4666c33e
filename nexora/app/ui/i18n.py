from __future__ import annotations

DEFAULT_LANGUAGE = "de"

STRINGS: dict[str, dict[str, str]] = {
    "de": {
        "slash.header": "Blöcke einfügen",
        "slash.h1": "Überschrift 1",
        "slash.h2": "Überschrift 2",
        "slash.h3": "Überschrift 3",
        "slash.bullet": "Aufzählung",
        "slash.ordered": "Nummerierte Liste",
        "slash.task": "Aufgabenliste",
        "slash.quote": "Zitat",
        "slash.code": "Codeblock",
        "slash.hr": "Trennlinie",
        "slash.table": "Tabelle",
        "slash.image": "Bild (URL)",
        "toolbar.bold": "Fett (Ctrl+B)",
        "toolbar.italic": "Kursiv (Ctrl+I)",
        "toolbar.underline": "Unterstrichen (Ctrl+U)",
        "toolbar.strike": "Durchgestrichen",
        "toolbar.highlight": "Hervorheben",
        "toolbar.paragraph": "Absatz",
        "toolbar.h1": "Überschrift 1",
        "toolbar.h2": "Überschrift 2",
        "toolbar.h3": "Überschrift 3",
        "toolbar.ul": "Aufzählung",
        "toolbar.ol": "Nummerierte Liste",
        "toolbar.task": "Aufgabenliste",
        "toolbar.quote": "Zitat",
        "toolbar.code": "Inline-Code",
        "toolbar.codeblock": "Codeblock",
        "toolbar.hr": "Trennlinie",
        "toolbar.link": "Link",
        "toolbar.image": "Bild einfügen",
        "toolbar.table": "Tabelle einfügen",
        "toolbar.align_left": "Links",
        "toolbar.align_center": "Zentriert",
        "toolbar.align_right": "Rechts",
        "toolbar.undo": "Rückgängig (Ctrl+Z)",
        "toolbar.redo": "Wiederholen (Ctrl+Shift+Z)",
        "prompt.link": "URL eingeben:",
        "prompt.image": "Bild-URL eingeben:",
        "source.image_alt": "Bild",
        "source.placeholder_text": "text",
        "source.placeholder_code": "code",
        "blockeditor.placeholder": "Schreibe etwas oder tippe / für Befehle …",
        "page.title_label": "Titel",
        "page.mode_wysiwyg": "WYSIWYG",
        "page.mode_markdown": "Markdown",
        "page.mode_html": "HTML",
        "page.save": "Speichern",
        "page.saved": "Gespeichert",
        "page.unsaved": "Ungespeicherte Änderungen",
        "page.all_saved": "Alle Änderungen gespeichert",
        "page.read_only": "Schreibgeschützt",
        "page.draft_recovered": "Ein ungespeicherter Entwurf wurde wiederhergestellt.",
        "page.draft_discard": "Entwurf verwerfen",
        "page.save_failed": "Speichern fehlgeschlagen",
        "page.load_failed": "Seite konnte nicht geladen werden",
        "page.empty_error": "Titel und Inhalt dürfen nicht leer sein.",
        "page.close_unsaved": "Die Seite hat ungespeicherte Änderungen. Speichern?",
    },
    "en": {
        "slash.header": "Insert blocks",
        "slash.h1": "Heading 1",
        "slash.h2": "Heading 2",
        "slash.h3": "Heading 3",
        "slash.bullet": "Bullet list",
        "slash.ordered": "Numbered list",
        "slash.task": "Task list",
        "slash.quote": "Quote",
        "slash.code": "Code block",
        "slash.hr": "Divider",
        "slash.table": "Table",
        "slash.image": "Image (URL)",
        "toolbar.bold": "Bold (Ctrl+B)",
        "toolbar.italic": "Italic (Ctrl+I)",
        "toolbar.underline": "Underline (Ctrl+U)",
        "toolbar.strike": "Strikethrough",
        "toolbar.highlight": "Highlight",
        "toolbar.paragraph": "Paragraph",
        "toolbar.h1": "Heading 1",
        "toolbar.h2": "Heading 2",
        "toolbar.h3": "Heading 3",
        "toolbar.ul": "Bullet list",
        "toolbar.ol": "Numbered list",
        "toolbar.task": "Task list",
        "toolbar.quote": "Quote",
        "toolbar.code": "Inline code",
        "toolbar.codeblock": "Code block",
        "toolbar.hr": "Divider",
        "toolbar.link": "Link",
        "toolbar.image": "Insert image",
        "toolbar.table": "Insert table",
        "toolbar.align_left": "Left",
        "toolbar.align_center": "Center",
        "toolbar.align_right": "Right",
        "toolbar.undo": "Undo (Ctrl+Z)",
        "toolbar.redo": "Redo (Ctrl+Shift+Z)",
        "prompt.link": "Enter URL:",
        "prompt.image": "Enter image URL:",
        "source.image_alt": "Image",
        "source.placeholder_text": "text",
        "source.placeholder_code": "code",
        "blockeditor.placeholder": "Write something or type / for commands…",
        "page.title_label": "Title",
        "page.mode_wysiwyg": "WYSIWYG",
        "page.mode_markdown": "Markdown",
        "page.mode_html": "HTML",
        "page.save": "Save",
        "page.saved": "Saved",
        "page.unsaved": "Unsaved changes",
        "page.all_saved": "All changes saved",
        "page.read_only": "Read-only",
        "page.draft_recovered": "An unsaved draft was recovered.",
        "page.draft_discard": "Discard draft",
        "page.save_failed": "Save failed",
        "page.load_failed": "Failed to load page",
        "page.empty_error": "Title and content must not be empty.",
        "page.close_unsaved": "The page has unsaved changes. Save them?",
    },
}


def normalize_language(language: str | None) -> str:
    lang = (language or "").strip().lower()
    return lang if lang in STRINGS else DEFAULT_LANGUAGE


def tr(key: str, language: str | None = None) -> str:
    """Translate *key*; falls back to the other table, then to the key itself."""
    lang = normalize_language(language)
    text = STRINGS[lang].get(key)
    if text is not None:
        return text
    for table in STRINGS.values():
        if key in table:
            return table[key]
    return key
