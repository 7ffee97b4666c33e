from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

DRAFT_MAX_AGE = 24 * 60 * 60


@dataclass(frozen=True)
class Draft:
    title: str
    content: str
    content_type: str
    saved_at: float


class DraftStore:
    """One JSON file per page holding its last unsaved state."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return self.root / f"{digest}.json"

    def save(self, key: str, title: str, content: str, content_type: str, now: Optional[float] = None) -> Path:
        record = {
            "key": key,
            "title": title,
            "content": content,
            "content_type": content_type,
            "saved_at": time.time() if now is None else now,
        }
        target = self.path_for(key)
        self.root.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(record, ensure_ascii=False), encoding="utf-8")
        logger.debug("Draft saved for %s", key)
        return target

    def load(self, key: str, max_age: float = DRAFT_MAX_AGE, now: Optional[float] = None) -> Optional[Draft]:
        """Return the stored draft, or None if missing, corrupt or expired.

        Corrupt and expired drafts are removed from disk.
        """
        target = self.path_for(key)
        if not target.exists():
            return None
        try:
            record = json.loads(target.read_text(encoding="utf-8"))
            draft = Draft(
                title=str(record["title"]),
                content=str(record["content"]),
                content_type=str(record.get("content_type") or "markdown"),
                saved_at=float(record["saved_at"]),
            )
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable draft %s: %s", target, exc)
            self.clear(key)
            return None
        current = time.time() if now is None else now
        if current - draft.saved_at > max_age:
            logger.debug("Draft for %s expired", key)
            self.clear(key)
            return None
        return draft

    def clear(self, key: str) -> None:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            pass
