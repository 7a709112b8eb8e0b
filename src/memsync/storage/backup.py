"""Timestamped snapshots of the canonical memory file."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

from memsync.errors import BackupError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%f"


class BackupManager:
    """Create, list and restore snapshots of one canonical file.

    Snapshots are named ``<stem>-<timestamp>.md``. Timestamps have a fixed
    width and are strictly increasing, so name order is creation order.
    """

    def __init__(self, canonical: Path, backup_dir: Path | None = None, keep: int = 50) -> None:
        self.canonical = canonical
        self.backup_dir = backup_dir or canonical.parent / "backups"
        self.keep = keep

    @property
    def _prefix(self) -> str:
        return f"{self.canonical.stem}-"

    def _next_path(self) -> Path:
        ts = datetime.now()
        newest = self.list_backups()
        if newest:
            last = datetime.strptime(newest[0][len(self._prefix) : -len(".md")], TIMESTAMP_FORMAT)
            if ts <= last:
                ts = last + timedelta(microseconds=1)
        return self.backup_dir / f"{self._prefix}{ts.strftime(TIMESTAMP_FORMAT)}.md"

    def create_backup(self) -> Path:
        """Copy the canonical file into the backup directory. Raises BackupError."""
        if not self.canonical.exists():
            raise BackupError(f"Nothing to back up: {self.canonical} does not exist")
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            path = self._next_path()
            path.write_bytes(self.canonical.read_bytes())
        except (OSError, ValueError) as e:
            raise BackupError(f"Failed to back up {self.canonical}: {e}") from e

        logger.info("Created backup %s", path.name)
        self.cleanup()
        return path

    def list_backups(self) -> list[str]:
        """Backup file names, newest first."""
        if not self.backup_dir.is_dir():
            return []
        names = [
            p.name
            for p in self.backup_dir.glob(f"{self._prefix}*.md")
            if self._is_backup_name(p.name)
        ]
        return sorted(names, reverse=True)

    def restore_from_backup(self, name: str) -> bool:
        """Snapshot the current state, then copy backup ``name`` over the canonical file."""
        if not self._is_backup_name(name) or Path(name).name != name:
            logger.warning("Not a backup name: %s", name)
            return False
        source = self.backup_dir / name
        if not source.is_file():
            logger.warning("Backup not found: %s", name)
            return False

        # Read first: pruning after the safety snapshot may remove the source.
        data = source.read_bytes()
        if self.canonical.exists():
            self.create_backup()
        try:
            self.canonical.write_bytes(data)
        except OSError as e:
            raise BackupError(f"Failed to restore {name}: {e}") from e
        logger.info("Restored %s from %s", self.canonical.name, name)
        return True

    def cleanup(self) -> int:
        """Keep only the newest ``keep`` snapshots. Returns count removed."""
        if self.keep <= 0:
            return 0
        removed = 0
        for name in self.list_backups()[self.keep :]:
            (self.backup_dir / name).unlink()
            removed += 1
        return removed

    def _is_backup_name(self, name: str) -> bool:
        if not (name.startswith(self._prefix) and name.endswith(".md")):
            return False
        try:
            datetime.strptime(name[len(self._prefix) : -len(".md")], TIMESTAMP_FORMAT)
        except ValueError:
            return False
        return True
