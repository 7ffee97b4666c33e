"""Tests for the draft store."""
from nexora.app.drafts import DRAFT_MAX_AGE, DraftStore


def test_save_and_load(tmp_path):
    store = DraftStore(tmp_path / "drafts")
    store.save("/pages/a.md", "Title", "Body", "markdown", now=1000.0)
    draft = store.load("/pages/a.md", now=1060.0)
    assert draft is not None
    assert (draft.title, draft.content, draft.content_type, draft.saved_at) == ("Title", "Body", "markdown", 1000.0)


def test_keys_are_isolated(tmp_path):
    store = DraftStore(tmp_path)
    store.save("a", "A", "a", "markdown")
    store.save("b", "B", "b", "html")
    assert store.load("a").title == "A"
    assert store.load("b").content_type == "html"
    assert store.path_for("a") != store.path_for("b")


def test_expired_draft_is_deleted(tmp_path):
    store = DraftStore(tmp_path)
    store.save("page", "T", "C", "markdown", now=0.0)
    assert store.load("page", now=DRAFT_MAX_AGE + 1) is None
    assert not store.path_for("page").exists()


def test_corrupt_draft_is_deleted(tmp_path):
    store = DraftStore(tmp_path)
    path = store.path_for("page")
    path.write_text("{not json", encoding="utf-8")
    assert store.load("page") is None
    assert not path.exists()


def test_clear(tmp_path):
    store = DraftStore(tmp_path)
    store.save("page", "T", "C", "markdown")
    store.clear("page")
    store.clear("page")
    assert store.load("page") is None


def test_missing_draft(tmp_path):
    assert DraftStore(tmp_path / "nowhere").load("page") is None
