from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path

import markdown


logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown", ".txt"}
HTML_SUFFIXES = {".html", ".htm"}
MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "sane_lists"]

# Optional header block carrying the page title:
#   ---
#   title: My page
#   ---
_FRONT_MATTER = re.compile(r"\A---[ \t]*\n(?P<body>.*?)\n---[ \t]*\n?", re.DOTALL)


class PageIOError(OSError):
    """Raised when a page file cannot be read or written."""


@dataclass(frozen=True)
class PageDocument:
    path: Path
    title: str
    content: str
    content_type: str = "markdown"

    def with_content(self, title: str, content: str, content_type: str | None = None) -> "PageDocument":
        return replace(self, title=title, content=content, content_type=content_type or self.content_type)


def content_type_for(path: Path | str) -> str:
    """Return ``html`` for .html/.htm files, ``markdown`` for everything else."""
    suffix = Path(path).suffix.lower()
    if suffix in HTML_SUFFIXES:
        return "html"
    return "markdown"


def markdown_to_html(text: str) -> str:
    return markdown.markdown(text or "", extensions=MARKDOWN_EXTENSIONS)


def split_front_matter(raw: str) -> tuple[dict[str, str], str]:
    match = _FRONT_MATTER.match(raw)
    if not match:
        return {}, raw
    meta: dict[str, str] = {}
    for line in match.group("body").splitlines():
        if not line.strip():
            continue
        key, sep, value = line.partition(":")
        if not sep or not key.strip():
            # Not a header, just a horizontal rule pair around text
            return {}, raw
        meta[key.strip().lower()] = value.strip()
    if "title" not in meta:
        return {}, raw
    body = raw[match.end():]
    if body.startswith("\n"):
        body = body[1:]
    return meta, body


def render_page(page: PageDocument) -> str:
    header = f"---\ntitle: {page.title.strip()}\n---\n\n"
    return header + page.content


def load_page(path: Path | str) -> PageDocument:
    """Read a page file; the title comes from its header or the file name."""
    path = Path(path)
    if not path.is_file():
        raise PageIOError(f"Page not found: {path}")
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PageIOError(f"Failed to read {path}: {exc}") from exc
    meta, body = split_front_matter(raw)
    title = meta.get("title") or path.stem.replace("_", " ")
    logger.debug("Loaded page %s (%d chars)", path, len(body))
    return PageDocument(path=path, title=title, content=body, content_type=content_type_for(path))


def save_page(page: PageDocument) -> None:
    path = Path(page.path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(render_page(page), encoding="utf-8")
        tmp.replace(path)
    except OSError as exc:
        raise PageIOError(f"Failed to write {path}: {exc}") from exc
    logger.info("Saved page %s", path)
