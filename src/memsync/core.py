"""MemorySync: the context object every operation handler works against.

Responsibilities:
1. Own the in-memory MemoryDocument, loaded lazily from the canonical store
2. Serialize mutations through a single lock (one writer at a time)
3. Persist every mutation behind a backup (write-through)
4. Push the serialized document to destinations through the orchestrator
5. Notify the optional cache capability after destinations changed
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from memsync.config import MemsyncConfig
from memsync.errors import MergeError, PresetError, ValidationError
from memsync.storage.store import TemplateStore
from memsync.sync.base import CacheInvalidator, PlatformSyncer, SyncResult, SyncStatus
from memsync.sync.orchestrator import SyncOrchestrator
from memsync.sync.platform import FileSyncer, ProjectsSyncer
from memsync.template.codec import (
    MemoryDocument,
    Section,
    generate_section,
    generate_template,
    parse_template,
    validate_template,
)
from memsync.template.commands import format_content, parse_memory_command
from memsync.template.merger import SectionMerger

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    success: bool
    message: str


def build_syncers(config: MemsyncConfig) -> list[PlatformSyncer]:
    syncers: list[PlatformSyncer] = []
    for dest in config.destinations:
        if dest.kind == "projects":
            syncers.append(ProjectsSyncer(dest.name, dest.path, cooldown=config.sync.cooldown))
        else:
            syncers.append(FileSyncer(dest.name, dest.path, cooldown=config.sync.cooldown))
    return syncers


class MemorySync:
    """Template operations plus destination sync, behind one lock."""

    def __init__(
        self,
        config: MemsyncConfig,
        *,
        syncers: list[PlatformSyncer] | None = None,
        cache: CacheInvalidator | None = None,
    ) -> None:
        self.config = config
        self.store = TemplateStore(config.data_dir, max_backups=config.sync.max_backups)
        self.merger = SectionMerger()
        self.orchestrator = SyncOrchestrator(build_syncers(config) if syncers is None else syncers)
        self.cache = cache
        self._document: MemoryDocument | None = None
        self._lock = asyncio.Lock()

    @property
    def document(self) -> MemoryDocument:
        if self._document is None:
            self._document = self.store.load()
        return self._document

    def _commit(self, document: MemoryDocument) -> None:
        """Persist, then swap. A failed write leaves the previous document."""
        self.store.save(document)
        self._document = document

    # ── Reads ─────────────────────────────────────────────────

    async def get_template(self) -> str:
        return generate_template(self.document)

    async def get_section(self, title: str) -> str | None:
        section = self.document.find(title)
        return generate_section(section) if section else None

    def find_section(self, title: str) -> Section | None:
        return self.document.find(title)

    # ── Mutations ─────────────────────────────────────────────

    async def update_section(self, title: str, content: str) -> bool:
        """Merge ``content`` into section ``title`` and persist.

        Returns False for a rejected fragment or a failed write. BackupError
        propagates.
        """
        async with self._lock:
            try:
                merged = self.merger.merge_section(self.document, title, content)
            except MergeError as e:
                logger.warning("Rejected update to section '%s': %s", title, e)
                return False
            try:
                self._commit(merged)
            except OSError as e:
                logger.error("Failed to save after updating section '%s': %s", title, e)
                return False
            return True

    async def update_template(self, text: str) -> bool:
        """Replace the whole document. Invalid input leaves state untouched."""
        async with self._lock:
            try:
                document = self._parse_valid(text)
            except ValidationError as e:
                logger.warning("Rejected template update: %s", e)
                return False
            try:
                self._commit(document)
            except OSError as e:
                logger.error("Failed to save template: %s", e)
                return False
            return True

    def _parse_valid(self, text: str) -> MemoryDocument:
        if not text or not text.strip():
            raise ValidationError("Template content is empty")
        document = parse_template(text)
        if not validate_template(document):
            raise ValidationError("Invalid template structure")
        return document

    # ── Sync ──────────────────────────────────────────────────

    def list_platforms(self) -> list[str]:
        return self.orchestrator.destinations()

    async def sync_platforms(self, destination: str | None = None) -> list[SyncResult]:
        content = await self.get_template()
        if destination:
            results = [await self.orchestrator.sync_one(destination, content)]
        else:
            results = await self.orchestrator.sync_all(content)

        if self.cache and any(r.status is SyncStatus.SYNCED for r in results):
            try:
                await self.cache.clear()
            except Exception as e:
                logger.warning("Cache invalidation failed: %s", e)
        return results

    # ── Presets ───────────────────────────────────────────────

    def list_presets(self) -> list[str]:
        return self.store.list_presets()

    async def create_preset(self, name: str) -> bool:
        try:
            self.store.save_preset(name, self.document)
        except PresetError as e:
            logger.warning("%s", e)
            return False
        return True

    async def load_preset(self, name: str) -> bool:
        async with self._lock:
            try:
                document = self.store.load_preset(name)
            except PresetError as e:
                logger.warning("%s", e)
                return False
            if not validate_template(document):
                logger.warning("Preset '%s' has an invalid structure", name)
                return False
            try:
                self._commit(document)
            except OSError as e:
                logger.error("Failed to save after loading preset '%s': %s", name, e)
                return False
            logger.info("Loaded preset '%s'", name)
            return True

    # ── Backups ───────────────────────────────────────────────

    def list_backups(self) -> list[str]:
        return self.store.backups.list_backups()

    async def restore_backup(self, name: str) -> bool:
        async with self._lock:
            if not self.store.backups.restore_from_backup(name):
                return False
            self._document = self.store.load()
            return True

    # ── Natural-language commands ─────────────────────────────

    async def remember(self, command: str) -> CommandResult:
        """Handle "remember ..." commands: update a section, then sync everywhere."""
        parsed = parse_memory_command(command)
        if not parsed:
            return CommandResult(
                False,
                "Not a valid memory command. Use 'Use myAI Memory to remember [your information]'",
            )

        if not await self.update_section(parsed.section, format_content(parsed.content)):
            return CommandResult(False, f"Failed to update section '{parsed.section}'.")

        results = await self.sync_platforms()
        ok = sum(1 for r in results if r.success)
        return CommandResult(
            True, f"Added to {parsed.section}. Synced to {ok}/{len(results)} platforms."
        )
