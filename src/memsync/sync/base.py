"""Syncer protocol and shared result types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class SyncStatus(str, Enum):
    SYNCED = "synced"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Outcome of pushing the memory region to one destination."""

    destination: str
    status: SyncStatus
    message: str

    @property
    def success(self) -> bool:
        # A throttled no-op counts as success; ``status`` tells the two apart.
        return self.status is not SyncStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status is SyncStatus.SKIPPED

    def to_dict(self) -> dict:
        return {
            "destination": self.destination,
            "success": self.success,
            "status": self.status.value,
            "message": self.message,
        }


@runtime_checkable
class PlatformSyncer(Protocol):
    """Protocol that every destination must implement."""

    @property
    def name(self) -> str: ...

    async def sync(self, content: str) -> SyncResult:
        """Write ``content`` into the destination's memory region."""
        ...


@runtime_checkable
class CacheInvalidator(Protocol):
    """Optional capability notified after destinations were rewritten."""

    async def clear(self) -> None: ...
