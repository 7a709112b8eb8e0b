"""File destinations for the memory region.

A destination file may hold arbitrary text of its own. Everything from the
``# myAI Memory`` line to the end of the file belongs to us and is replaced
on every sync; everything before it is kept verbatim.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import stat
import time
from collections.abc import Callable
from pathlib import Path

from memsync.sync.base import SyncResult, SyncStatus
from memsync.template.codec import BANNER

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN = 5.0

_REGION_START = re.compile(rf"^{re.escape(BANNER)}[ \t\r]*$", re.MULTILINE)

_GITIGNORE_PATTERNS = {"CLAUDE.md", "/CLAUDE.md", "**/CLAUDE.md", "CLAUDE.*"}


def find_memory_region(text: str) -> int:
    """Offset of the memory region in ``text``, or -1."""
    match = _REGION_START.search(text)
    return match.start() if match else -1


def extract_memory_region(content: str) -> str:
    """The part of ``content`` that should land in destinations."""
    start = find_memory_region(content)
    if start < 0:
        return f"{BANNER}\n\n{content.lstrip()}"
    return content[start:]


def splice_memory_region(existing: str, region: str) -> str:
    """Replace (or append) the memory region of ``existing`` with ``region``."""
    start = find_memory_region(existing)
    if start >= 0:
        return existing[:start] + region
    head = existing.rstrip()
    if not head:
        return region
    return f"{head}\n\n{region}"


def ensure_file_writable(path: Path) -> None:
    """Create ``path`` (and parents) if missing, relax permissions if read-only.

    Raises OSError when the file still cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.touch()
        logger.info("Created empty file: %s", path)
    elif not os.access(path, os.W_OK):
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IWUSR)
        logger.info("Made file writable: %s", path)

    if path.is_dir():
        raise IsADirectoryError(f"Is a directory: {path}")
    if not os.access(path, os.W_OK):
        raise PermissionError(f"File not writable: {path}")


class _Cooldown:
    """Per-destination throttle. Not a lock: calls inside the window just no-op."""

    def __init__(self, seconds: float, clock: Callable[[], float]) -> None:
        self.seconds = seconds
        self._clock = clock
        self._last: float | None = None

    def active(self) -> bool:
        return self._last is not None and self._clock() - self._last < self.seconds

    def mark(self) -> None:
        self._last = self._clock()


def read_text_exact(path: Path) -> str:
    """Read UTF-8 text without newline translation, so CRLF survives a rewrite."""
    return path.read_bytes().decode("utf-8")


def write_text_exact(path: Path, text: str) -> None:
    path.write_bytes(text.encode("utf-8"))


class FileSyncer:
    """Keep the memory region of a single file up to date.

    File I/O runs in a worker thread so several destinations can be written
    concurrently; the cooldown is checked and marked on the event loop.
    """

    def __init__(
        self,
        name: str,
        path: Path,
        cooldown: float = DEFAULT_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._name = name
        self.path = path
        self._cooldown = _Cooldown(cooldown, clock)

    @property
    def name(self) -> str:
        return self._name

    def _skipped(self, reason: str = "within cooldown period") -> SyncResult:
        logger.debug("Skipping %s sync - %s", self.name, reason)
        return SyncResult(self.name, SyncStatus.SKIPPED, f"Skipped - {reason}")

    def _prepare(self, path: Path) -> str:
        """Make ``path`` writable and return its current text."""
        ensure_file_writable(path)
        return read_text_exact(path)

    def _write_file(self, path: Path, text: str) -> None:
        """Rewrite the whole file in one call."""
        write_text_exact(path, text)

    async def sync(self, content: str) -> SyncResult:
        if self._cooldown.active():
            return self._skipped()

        try:
            existing = await asyncio.to_thread(self._prepare, self.path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot prepare %s for sync (%s): %s", self.name, self.path, e)
            return SyncResult(self.name, SyncStatus.FAILED, f"Error: {e}")

        updated = splice_memory_region(existing, extract_memory_region(content))
        try:
            await asyncio.to_thread(self._write_file, self.path, updated)
        except OSError as e:
            logger.warning("Failed to write %s (%s): %s", self.name, self.path, e)
            return SyncResult(self.name, SyncStatus.FAILED, f"Error: {e}")
        finally:
            self._cooldown.mark()

        logger.info("Synced %s: %s", self.name, self.path)
        return SyncResult(self.name, SyncStatus.SYNCED, f"Synced to {self.path}")


def is_claude_md_gitignored(project: Path) -> bool:
    gitignore = project / ".gitignore"
    if not gitignore.is_file():
        return False
    lines = read_text_exact(gitignore).splitlines()
    return any(line.strip() in _GITIGNORE_PATTERNS for line in lines)


def add_claude_md_to_gitignore(project: Path) -> None:
    gitignore = project / ".gitignore"
    content = read_text_exact(gitignore) if gitignore.exists() else ""
    if not content.strip():
        content = "# Git ignore file\n\n"
    elif not content.endswith("\n"):
        content += "\n"
    write_text_exact(gitignore, content + "/CLAUDE.md\n")
    logger.info("Added CLAUDE.md to %s", gitignore)


class ProjectsSyncer(FileSyncer):
    """Update ``CLAUDE.md`` in every project directory under a root folder.

    Each project's ``.gitignore`` gets a ``/CLAUDE.md`` entry first so the
    personal memory is never committed. A project that cannot be updated is
    reported and the remaining projects are still written.
    """

    FILENAME = "CLAUDE.md"

    def __init__(
        self,
        name: str,
        projects_dir: Path,
        cooldown: float = DEFAULT_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(name, projects_dir, cooldown=cooldown, clock=clock)

    def _projects(self) -> list[Path]:
        return sorted(p for p in self.path.iterdir() if p.is_dir() and not p.name.startswith("."))

    def _sync_project(self, project: Path, region: str) -> None:
        try:
            if not is_claude_md_gitignored(project):
                add_claude_md_to_gitignore(project)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to update .gitignore in %s: %s", project, e)

        target = project / self.FILENAME
        existing = self._prepare(target)
        self._write_file(target, splice_memory_region(existing, region))

    def _sync_projects(self, projects: list[Path], region: str) -> tuple[list[Path], list[str]]:
        updated: list[Path] = []
        failed: list[str] = []
        for project in projects:
            try:
                self._sync_project(project, region)
                updated.append(project)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Failed to sync %s/%s: %s", project.name, self.FILENAME, e)
                failed.append(f"{project.name}/{self.FILENAME}: {e}")
        return updated, failed

    async def sync(self, content: str) -> SyncResult:
        if self._cooldown.active():
            return self._skipped()

        try:
            projects = await asyncio.to_thread(self._projects)
        except OSError as e:
            logger.warning("Cannot list projects in %s: %s", self.path, e)
            return SyncResult(self.name, SyncStatus.FAILED, f"Error: {e}")
        if not projects:
            return self._skipped(f"no projects in {self.path}")

        region = extract_memory_region(content)
        try:
            updated, failed = await asyncio.to_thread(self._sync_projects, projects, region)
        finally:
            self._cooldown.mark()

        if failed and not updated:
            return SyncResult(self.name, SyncStatus.FAILED, "Failed to update any CLAUDE.md files: " + "; ".join(failed))
        message = f"Updated {len(updated)} {self.FILENAME} files"
        if failed:
            message += f" ({len(failed)} failed: {'; '.join(failed)})"
        logger.info("Synced %s: %s", self.name, message)
        return SyncResult(self.name, SyncStatus.SYNCED, message)
