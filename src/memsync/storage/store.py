"""Canonical memory file and named presets.

Layout:
    <data_dir>/
    ├── memory.md              # canonical document, source of truth
    ├── presets/
    │   └── <name>.md          # YAML frontmatter (name, created) + document
    └── backups/
        └── memory-<ts>.md     # snapshot taken before every overwrite
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

import frontmatter

from memsync.errors import PresetError
from memsync.storage.backup import BackupManager
from memsync.template.codec import (
    Item,
    MemoryDocument,
    Section,
    generate_template,
    parse_template,
)

logger = logging.getLogger(__name__)

CANONICAL_FILENAME = "memory.md"


def default_document() -> MemoryDocument:
    return MemoryDocument(
        sections=[
            Section(
                title="User Information",
                description="Use this information if you need to reference them directly",
                items=[Item("Name", "Default User")],
            )
        ]
    )


class TemplateStore:
    """Read/write access to the canonical document and its presets."""

    def __init__(self, root: Path, max_backups: int = 50) -> None:
        self.root = root
        self.path = root / CANONICAL_FILENAME
        self.presets_dir = root / "presets"
        self.backups = BackupManager(self.path, root / "backups", keep=max_backups)
        self._ensure_initialized()

    def _ensure_initialized(self) -> None:
        """Ensure base directories exist. Idempotent."""
        self.root.mkdir(parents=True, exist_ok=True)
        self.presets_dir.mkdir(exist_ok=True)

    # ── Canonical document ────────────────────────────────────

    def exists(self) -> bool:
        return self.path.exists()

    def read_text(self) -> str:
        if self.path.exists():
            return self.path.read_text(encoding="utf-8")
        return ""

    def load(self) -> MemoryDocument:
        """Load the canonical document, synthesizing a default one if absent."""
        if not self.path.exists():
            document = default_document()
            self.save(document)
            logger.info("Created default memory document at %s", self.path)
            return document
        return parse_template(self.read_text())

    def save(self, document: MemoryDocument) -> str:
        """Serialize and write ``document``. Returns the written text.

        An existing file is snapshotted first; if that fails BackupError
        propagates and nothing is written.
        """
        text = generate_template(document)
        if self.path.exists():
            self.backups.create_backup()
        self.path.write_text(text, encoding="utf-8")
        logger.info("Saved %s (%d sections, %d chars)", self.path.name, len(document.sections), len(text))
        return text

    # ── Presets ───────────────────────────────────────────────

    def _slugify(self, name: str) -> str:
        """Minimal slug: lowercase, strip illegal chars, spaces to hyphens."""
        slug = re.sub(r'[<>:"/\\|?*\n\r\t]', "", name)
        slug = slug.strip().lower().replace(" ", "-").lstrip(".")
        return slug

    def _preset_path(self, name: str) -> Path:
        slug = self._slugify(name)
        if not slug:
            raise PresetError(f"Invalid preset name: {name!r}")
        return self.presets_dir / f"{slug}.md"

    def list_presets(self) -> list[str]:
        if not self.presets_dir.is_dir():
            return []
        return sorted(p.stem for p in self.presets_dir.glob("*.md"))

    def save_preset(self, name: str, document: MemoryDocument) -> Path:
        path = self._preset_path(name)
        post = frontmatter.Post(
            generate_template(document),
            name=name,
            created=datetime.now().isoformat(timespec="seconds"),
        )
        try:
            path.write_text(frontmatter.dumps(post) + "\n", encoding="utf-8")
        except OSError as e:
            raise PresetError(f"Failed to write preset {name}: {e}") from e
        logger.info("Saved preset '%s' to %s", name, path.name)
        return path

    def load_preset(self, name: str) -> MemoryDocument:
        path = self._preset_path(name)
        if not path.exists():
            raise PresetError(f"Preset not found: {name}")
        try:
            post = frontmatter.load(str(path))
        except Exception as e:
            raise PresetError(f"Failed to read preset {name}: {e}") from e
        return parse_template(post.content)
