"""Tool table for transport adapters (stdio, HTTP, MCP).

Each entry maps one exposed operation onto a MemorySync call and returns a
plain string (or a list of result dicts for syncs), so adapters only have to
frame the output. Failures come back as descriptive text, never raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable

from memsync.errors import BackupError

if TYPE_CHECKING:
    from memsync.core import MemorySync


def get_memory_tools(service: MemorySync) -> dict[str, Callable[..., Awaitable[Any]]]:
    """Return a dict of tool_name -> async callable for memory operations."""

    async def get_template() -> str:
        """Return the full myAI Memory document as markdown."""
        return await service.get_template()

    async def get_section(section_name: str) -> str:
        """Return one section of the memory (case-insensitive name)."""
        content = await service.get_section(section_name)
        return content or f"Section '{section_name}' not found"

    async def update_section(section_name: str, content: str) -> str:
        """Merge content (-~- Key: Value lines or free text) into a section."""
        try:
            ok = await service.update_section(section_name, content)
        except BackupError as e:
            return f"Failed to update section '{section_name}': {e}"
        if not ok:
            return f"Failed to update section '{section_name}'"
        return f"Section '{section_name}' updated"

    async def update_template(content: str) -> str:
        """Replace the whole memory document.
        A backup of the previous version is created first.
        """
        try:
            ok = await service.update_template(content)
        except BackupError as e:
            return f"Failed to update template: {e}"
        return "Template updated" if ok else "Failed to update template: invalid content"

    async def sync_platforms(platform: str | None = None) -> list[dict]:
        """Push the memory to every destination (or just ``platform``)."""
        results = await service.sync_platforms(platform)
        return [r.to_dict() for r in results]

    async def list_platforms() -> str:
        """List configured destination ids."""
        return "\n".join(service.list_platforms()) or "(no destinations configured)"

    async def list_presets() -> str:
        presets = service.list_presets()
        return "\n".join(presets) or "(no presets)"

    async def load_preset(preset_name: str) -> str:
        try:
            ok = await service.load_preset(preset_name)
        except BackupError as e:
            return f"Failed to load preset '{preset_name}': {e}"
        return f"Preset '{preset_name}' loaded" if ok else f"Failed to load preset '{preset_name}'"

    async def create_preset(preset_name: str) -> str:
        ok = await service.create_preset(preset_name)
        return f"Preset '{preset_name}' created" if ok else f"Failed to create preset '{preset_name}'"

    async def remember(command: str) -> str:
        """Handle a natural-language command such as 'remember that I live in London'."""
        try:
            result = await service.remember(command)
        except BackupError as e:
            return f"Failed to remember: {e}"
        return result.message

    async def list_backups() -> str:
        return "\n".join(service.list_backups()) or "(no backups)"

    async def restore_backup(backup_name: str) -> str:
        try:
            ok = await service.restore_backup(backup_name)
        except BackupError as e:
            return f"Failed to restore '{backup_name}': {e}"
        return f"Restored from {backup_name}" if ok else f"Backup '{backup_name}' not found"

    return {
        "get_template": get_template,
        "get_section": get_section,
        "update_section": update_section,
        "update_template": update_template,
        "sync_platforms": sync_platforms,
        "list_platforms": list_platforms,
        "list_presets": list_presets,
        "load_preset": load_preset,
        "create_preset": create_preset,
        "remember": remember,
        "list_backups": list_backups,
        "restore_backup": restore_backup,
    }
