"""Tests for the canonical store and presets."""

from __future__ import annotations

from pathlib import Path

import frontmatter
import pytest

from memsync.errors import BackupError, PresetError
from memsync.storage.store import TemplateStore
from memsync.template.codec import Item, MemoryDocument, Section, generate_template


@pytest.fixture
def store(tmp_path: Path) -> TemplateStore:
    return TemplateStore(tmp_path / "data")


def _doc(name: str = "Alice") -> MemoryDocument:
    return MemoryDocument([Section("User Information", "desc", [Item("Name", name)])])


class TestCanonical:
    def test_creates_directories(self, store: TemplateStore):
        assert store.root.is_dir()
        assert store.presets_dir.is_dir()

    def test_load_synthesizes_default(self, store: TemplateStore):
        assert not store.exists()
        doc = store.load()
        assert doc.titles() == ["User Information"]
        assert doc.sections[0].get("name").value == "Default User"
        assert store.exists()
        # First creation has nothing to snapshot
        assert store.backups.list_backups() == []

    def test_save_writes_generated_text(self, store: TemplateStore):
        text = store.save(_doc())
        assert store.read_text() == text == generate_template(_doc())

    def test_overwrite_takes_one_backup(self, store: TemplateStore):
        store.save(_doc("Alice"))
        before = store.path.read_bytes()
        store.save(_doc("Bob"))

        backups = store.backups.list_backups()
        assert len(backups) == 1
        assert (store.backups.backup_dir / backups[0]).read_bytes() == before

    def test_no_write_without_backup(self, store: TemplateStore, monkeypatch: pytest.MonkeyPatch):
        store.save(_doc("Alice"))
        before = store.read_text()

        def fail() -> Path:
            raise BackupError("disk full")

        monkeypatch.setattr(store.backups, "create_backup", fail)
        with pytest.raises(BackupError):
            store.save(_doc("Bob"))
        assert store.read_text() == before


class TestPresets:
    def test_round_trip(self, store: TemplateStore):
        store.save_preset("Work Profile", _doc("Dave"))
        assert store.list_presets() == ["work-profile"]
        loaded = store.load_preset("work profile")
        assert loaded == _doc("Dave")

    def test_frontmatter_metadata(self, store: TemplateStore):
        path = store.save_preset("dave", _doc("Dave"))
        post = frontmatter.load(str(path))
        assert post["name"] == "dave"
        assert "created" in post.metadata
        assert "-~- Name: Dave" in post.content

    def test_missing_preset(self, store: TemplateStore):
        with pytest.raises(PresetError):
            store.load_preset("nope")

    def test_invalid_name(self, store: TemplateStore):
        with pytest.raises(PresetError):
            store.save_preset("///", _doc())
