import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from nexora.app import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config and drafts at a per-test directory."""
    monkeypatch.setattr(config, "GLOBAL_CONFIG", tmp_path / "config" / "nexora_config.json")
    monkeypatch.setattr(config, "DRAFTS_DIR", tmp_path / "drafts")
    return tmp_path
