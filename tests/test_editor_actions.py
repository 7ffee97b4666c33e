"""Tests for EditorAction values and the ActionDispatcher."""
from nexora.app.ui.editor_actions import ActionDispatcher, EditorAction

from fake_engine import FakeEngine


class PromptStub:
    """Records prompt calls and answers with a fixed value."""

    def __init__(self, answer):
        self.answer = answer
        self.calls = []

    def __call__(self, label, default):
        self.calls.append((label, default))
        return self.answer


class TestEditorAction:
    def test_params_are_order_independent(self):
        assert EditorAction.of("insert_table", rows=3, cols=2) == EditorAction.of("insert_table", cols=2, rows=3)

    def test_param_lookup(self):
        action = EditorAction.of("toggle_heading", level=2)
        assert action.param("level") == 2
        assert action.param("missing", "x") == "x"
        assert action.kwargs == {"level": 2}

    def test_hashable(self):
        assert len({EditorAction.of("undo"), EditorAction.of("undo")}) == 1


class TestDispatcher:
    def test_unknown_action_is_rejected(self):
        engine = FakeEngine()
        dispatcher = ActionDispatcher(engine)
        assert dispatcher.supports(EditorAction.of("explode")) is False
        assert dispatcher.run(EditorAction.of("explode")) is False
        assert engine.calls == []

    def test_read_only_blocks_everything(self):
        engine = FakeEngine(editable=False)
        dispatcher = ActionDispatcher(engine)
        assert dispatcher.run(EditorAction.of("toggle_mark", mark="bold")) is False
        assert engine.calls == []

    def test_marks_and_blocks(self):
        engine = FakeEngine()
        dispatcher = ActionDispatcher(engine)
        dispatcher.run(EditorAction.of("toggle_mark", mark="italic"))
        dispatcher.run(EditorAction.of("set_paragraph"))
        dispatcher.run(EditorAction.of("toggle_list", kind="ordered_list"))
        dispatcher.run(EditorAction.of("set_alignment", align="center"))
        dispatcher.run(EditorAction.of("undo"))
        assert engine.calls == [
            ("toggle_mark", "italic"),
            ("set_block", "paragraph", {}),
            ("toggle_block", "ordered_list", {}),
            ("set_alignment", "center"),
            ("undo",),
        ]

    def test_is_active_for_stateless_action(self):
        dispatcher = ActionDispatcher(FakeEngine())
        assert dispatcher.is_active(EditorAction.of("insert_horizontal_rule")) is None
        assert dispatcher.is_active(EditorAction.of("toggle_mark", mark="bold")) is False


class TestUrlPrompts:
    def test_image_with_valid_url(self):
        engine = FakeEngine()
        prompt = PromptStub("https://example.com/cat.png")
        dispatcher = ActionDispatcher(engine, prompt, "de")
        assert dispatcher.run(EditorAction.of("insert_image")) is True
        assert prompt.calls == [("Bild-URL eingeben:", "")]
        assert engine.calls == [("insert_node", "image", {"src": "https://example.com/cat.png"})]

    def test_image_with_invalid_url_does_nothing(self):
        engine = FakeEngine()
        dispatcher = ActionDispatcher(engine, PromptStub("javascript:alert(1)"))
        assert dispatcher.run(EditorAction.of("insert_image")) is False
        assert engine.calls == []

    def test_image_cancelled(self):
        engine = FakeEngine()
        dispatcher = ActionDispatcher(engine, PromptStub(None))
        assert dispatcher.run(EditorAction.of("insert_image")) is False
        assert engine.calls == []

    def test_link_prefilled_with_current_href(self):
        engine = FakeEngine()
        engine.href = "https://old.example.com"
        prompt = PromptStub("https://new.example.com")
        dispatcher = ActionDispatcher(engine, prompt, "en")
        assert dispatcher.run(EditorAction.of("edit_link")) is True
        assert prompt.calls == [("Enter URL:", "https://old.example.com")]
        assert engine.calls == [("set_link", "https://new.example.com")]

    def test_link_default_prefill(self):
        prompt = PromptStub(None)
        ActionDispatcher(FakeEngine(), prompt).run(EditorAction.of("edit_link"))
        assert prompt.calls[0][1] == "https://"

    def test_empty_link_removes_it(self):
        engine = FakeEngine()
        dispatcher = ActionDispatcher(engine, PromptStub(""))
        assert dispatcher.run(EditorAction.of("edit_link")) is True
        assert engine.calls == [("unset_link",)]

    def test_invalid_link_rejected(self):
        engine = FakeEngine()
        dispatcher = ActionDispatcher(engine, PromptStub("ftp://example.com"))
        assert dispatcher.run(EditorAction.of("edit_link")) is False
        assert engine.calls == []
