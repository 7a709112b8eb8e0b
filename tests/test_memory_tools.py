"""Tests for the transport-facing tool table."""

from __future__ import annotations

from pathlib import Path

import pytest

from memsync.config import DestinationConfig, MemsyncConfig, SyncConfig
from memsync.core import MemorySync
from memsync.errors import BackupError
from memsync.tools.memory_tools import get_memory_tools

TEMPLATE = "# myAI Memory\n\n# User Information\n-~- Name: Alice\n\n"


@pytest.fixture
def service(tmp_path: Path) -> MemorySync:
    config = MemsyncConfig(
        data_dir=tmp_path / "data",
        sync=SyncConfig(cooldown=0.0),
        destinations=[DestinationConfig("claude-web", tmp_path / "CLAUDE.md")],
    )
    return MemorySync(config)


@pytest.fixture
def tools(service: MemorySync) -> dict:
    return get_memory_tools(service)


class TestToolTable:
    def test_exposed_names(self, tools: dict):
        assert set(tools) == {
            "get_template",
            "get_section",
            "update_section",
            "update_template",
            "sync_platforms",
            "list_platforms",
            "list_presets",
            "load_preset",
            "create_preset",
            "remember",
            "list_backups",
            "restore_backup",
        }

    @pytest.mark.asyncio
    async def test_template_round_trip(self, tools: dict):
        assert await tools["update_template"](TEMPLATE) == "Template updated"
        assert await tools["get_template"]() == TEMPLATE

    @pytest.mark.asyncio
    async def test_invalid_template(self, tools: dict):
        assert "invalid content" in await tools["update_template"]("")

    @pytest.mark.asyncio
    async def test_section_not_found(self, tools: dict):
        assert await tools["get_section"]("Nope") == "Section 'Nope' not found"

    @pytest.mark.asyncio
    async def test_update_section(self, tools: dict):
        assert await tools["update_section"]("Hobbies", "-~- Sport: Tennis") == "Section 'Hobbies' updated"
        assert "-~- Sport: Tennis" in await tools["get_section"]("hobbies")

    @pytest.mark.asyncio
    async def test_update_section_rejected(self, tools: dict):
        result = await tools["update_section"]("   ", "-~- K: v")
        assert result.startswith("Failed to update section")

    @pytest.mark.asyncio
    async def test_backup_failure_is_reported(self, tools: dict, service: MemorySync, monkeypatch: pytest.MonkeyPatch):
        await tools["update_template"](TEMPLATE)

        def fail():
            raise BackupError("disk full")

        monkeypatch.setattr(service.store.backups, "create_backup", fail)
        result = await tools["update_section"]("User Information", "-~- Name: Bob")
        assert result == "Failed to update section 'User Information': disk full"

    @pytest.mark.asyncio
    async def test_sync_platforms_returns_dicts(self, tools: dict, tmp_path: Path):
        await tools["update_template"](TEMPLATE)
        results = await tools["sync_platforms"]()
        assert results == [{"destination": "claude-web", "status": "synced", "success": True, "message": results[0]["message"]}]
        assert (tmp_path / "CLAUDE.md").read_text(encoding="utf-8") == TEMPLATE

    @pytest.mark.asyncio
    async def test_list_platforms(self, tools: dict):
        assert await tools["list_platforms"]() == "claude-web"

    @pytest.mark.asyncio
    async def test_presets(self, tools: dict):
        assert await tools["list_presets"]() == "(no presets)"
        await tools["update_template"](TEMPLATE)
        assert await tools["create_preset"]("work") == "Preset 'work' created"
        assert await tools["list_presets"]() == "work"
        assert await tools["load_preset"]("work") == "Preset 'work' loaded"
        assert await tools["load_preset"]("missing") == "Failed to load preset 'missing'"

    @pytest.mark.asyncio
    async def test_remember(self, tools: dict):
        await tools["update_template"](TEMPLATE)
        message = await tools["remember"]("Use myAI Memory to remember I live in Paris")
        assert message == "Added to User Information. Synced to 1/1 platforms."

    @pytest.mark.asyncio
    async def test_backups(self, tools: dict):
        assert await tools["list_backups"]() == "(no backups)"
        await tools["update_template"](TEMPLATE)
        await tools["update_section"]("User Information", "-~- Name: Bob")

        names = (await tools["list_backups"]()).splitlines()
        assert names
        assert await tools["restore_backup"](names[0]) == f"Restored from {names[0]}"
        assert await tools["restore_backup"]("memory-nope.md") == "Backup 'memory-nope.md' not found"
