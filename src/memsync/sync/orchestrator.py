"""Fan the serialized document out to every destination."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from memsync.sync.base import PlatformSyncer, SyncResult, SyncStatus

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Runs all registered syncers concurrently and collects every result."""

    def __init__(self, syncers: Iterable[PlatformSyncer] = ()) -> None:
        self._syncers: dict[str, PlatformSyncer] = {}
        for syncer in syncers:
            self.add(syncer)

    def add(self, syncer: PlatformSyncer) -> None:
        self._syncers[syncer.name] = syncer
        logger.info("Registered destination: %s", syncer.name)

    def destinations(self) -> list[str]:
        return list(self._syncers)

    async def _run(self, syncer: PlatformSyncer, content: str) -> SyncResult:
        try:
            return await syncer.sync(content)
        except Exception as e:
            logger.exception("Unexpected error syncing %s", syncer.name)
            return SyncResult(syncer.name, SyncStatus.FAILED, f"Unexpected error: {e}")

    async def sync_all(self, content: str) -> list[SyncResult]:
        if not self._syncers:
            logger.warning("No destinations configured")
            return []

        results = await asyncio.gather(*(self._run(s, content) for s in self._syncers.values()))
        ok = sum(1 for r in results if r.success)
        logger.info("Synced %d/%d destinations", ok, len(results))
        return list(results)

    async def sync_one(self, destination: str, content: str) -> SyncResult:
        syncer = self._syncers.get(destination)
        if not syncer:
            return SyncResult(
                destination,
                SyncStatus.FAILED,
                f"Unknown destination '{destination}'. Available: {self.destinations()}",
            )
        return await self._run(syncer, content)
