"""Tests for the sync fan-out."""

from __future__ import annotations

import asyncio
import threading
import time
from pathlib import Path

import pytest

from memsync.sync.base import SyncResult, SyncStatus
from memsync.sync.orchestrator import SyncOrchestrator
from memsync.sync.platform import FileSyncer

MEMORY = "# myAI Memory\n\n# A\n-~- K: v\n\n"


class SlowSyncer:
    """Records overlap so tests can check the fan-out really runs concurrently."""

    active = 0
    peak = 0

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def sync(self, content: str) -> SyncResult:
        SlowSyncer.active += 1
        SlowSyncer.peak = max(SlowSyncer.peak, SlowSyncer.active)
        await asyncio.sleep(0.01)
        SlowSyncer.active -= 1
        return SyncResult(self.name, SyncStatus.SYNCED, "ok")


class SlowWriteSyncer(FileSyncer):
    """Real file destination whose write blocks, like a slow disk."""

    lock = threading.Lock()
    active = 0
    peak = 0

    def _write_file(self, path: Path, text: str) -> None:
        with SlowWriteSyncer.lock:
            SlowWriteSyncer.active += 1
            SlowWriteSyncer.peak = max(SlowWriteSyncer.peak, SlowWriteSyncer.active)
        time.sleep(0.05)
        super()._write_file(path, text)
        with SlowWriteSyncer.lock:
            SlowWriteSyncer.active -= 1


class ExplodingSyncer:
    @property
    def name(self) -> str:
        return "boom"

    async def sync(self, content: str) -> SyncResult:
        raise RuntimeError("kaboom")


class TestSyncAll:
    @pytest.mark.asyncio
    async def test_one_broken_destination(self, tmp_path: Path):
        (tmp_path / "blocker").write_text("x", encoding="utf-8")
        orchestrator = SyncOrchestrator(
            [
                FileSyncer("windsurf", tmp_path / "windsurf" / "global_rules.md"),
                FileSyncer("broken", tmp_path / "blocker" / "CLAUDE.md"),
                FileSyncer("claude-web", tmp_path / "CLAUDE.md"),
            ]
        )
        results = {r.destination: r for r in await orchestrator.sync_all(MEMORY)}

        assert results["windsurf"].success
        assert results["claude-web"].success
        assert not results["broken"].success
        assert "blocker" in results["broken"].message
        assert (tmp_path / "CLAUDE.md").read_text(encoding="utf-8") == MEMORY

    @pytest.mark.asyncio
    async def test_exception_becomes_result(self):
        orchestrator = SyncOrchestrator([ExplodingSyncer(), SlowSyncer("ok")])
        results = await orchestrator.sync_all(MEMORY)
        assert [r.destination for r in results] == ["boom", "ok"]
        assert results[0].status is SyncStatus.FAILED
        assert "kaboom" in results[0].message
        assert results[1].success

    @pytest.mark.asyncio
    async def test_runs_in_parallel(self):
        SlowSyncer.active = SlowSyncer.peak = 0
        orchestrator = SyncOrchestrator([SlowSyncer("a"), SlowSyncer("b"), SlowSyncer("c")])
        await orchestrator.sync_all(MEMORY)
        assert SlowSyncer.peak == 3

    @pytest.mark.asyncio
    async def test_file_writes_overlap(self, tmp_path: Path):
        SlowWriteSyncer.active = SlowWriteSyncer.peak = 0
        orchestrator = SyncOrchestrator(
            [SlowWriteSyncer(name, tmp_path / f"{name}.md") for name in ("a", "b", "c")]
        )
        results = await orchestrator.sync_all(MEMORY)

        assert all(r.success for r in results)
        assert SlowWriteSyncer.peak > 1
        assert (tmp_path / "b.md").read_text(encoding="utf-8") == MEMORY

    @pytest.mark.asyncio
    async def test_no_destinations(self):
        assert await SyncOrchestrator().sync_all(MEMORY) == []


class TestSyncOne:
    @pytest.mark.asyncio
    async def test_known(self, tmp_path: Path):
        orchestrator = SyncOrchestrator([FileSyncer("claude-web", tmp_path / "CLAUDE.md")])
        result = await orchestrator.sync_one("claude-web", MEMORY)
        assert result.success

    @pytest.mark.asyncio
    async def test_unknown(self):
        result = await SyncOrchestrator([SlowSyncer("a")]).sync_one("nope", MEMORY)
        assert not result.success
        assert "Unknown destination" in result.message

    def test_destinations(self):
        assert SyncOrchestrator([SlowSyncer("a"), SlowSyncer("b")]).destinations() == ["a", "b"]
