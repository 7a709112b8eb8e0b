"""Configuration loading from environment variables and memsync.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_DATA_DIR = Path.home() / ".memsync" / "data"
_CONFIG_FILENAME = "memsync.toml"


@dataclass
class DestinationConfig:
    """A file (or folder of projects) that receives the memory region."""

    name: str
    path: Path
    kind: str = "file"  # "file" | "projects"


@dataclass
class SyncConfig:
    """Destination write throttling and backup retention."""

    cooldown: float = 5.0
    max_backups: int = 50


def _default_destinations() -> list[DestinationConfig]:
    home = Path.home()
    return [
        DestinationConfig(
            "windsurf", home / ".codeium" / "windsurf" / "memories" / "global_rules.md"
        ),
        DestinationConfig("claude-web", home / "CLAUDE.md"),
        DestinationConfig("claude-code", home / "CascadeProjects", kind="projects"),
    ]


@dataclass
class MemsyncConfig:
    """Top-level memsync configuration."""

    data_dir: Path = _DEFAULT_DATA_DIR
    sync: SyncConfig = field(default_factory=SyncConfig)
    destinations: list[DestinationConfig] = field(default_factory=_default_destinations)


def _expand(path: str | Path) -> Path:
    return Path(os.path.expandvars(str(path))).expanduser()


def _parse_destinations(entries: list[dict]) -> list[DestinationConfig]:
    destinations = []
    for entry in entries:
        kind = entry.get("kind", "file")
        if kind not in ("file", "projects"):
            raise ValueError(f"Unknown destination kind '{kind}' for {entry.get('name')}")
        destinations.append(DestinationConfig(entry["name"], _expand(entry["path"]), kind))
    return destinations


def load_config(config_path: Path | None = None) -> MemsyncConfig:
    """Load configuration from environment variables and optional memsync.toml.

    Priority: environment variables > memsync.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.memsync/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".memsync" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    sync_data = file_data.get("sync", {})

    data_dir = os.getenv("MEMSYNC_DATA_DIR", file_data.get("data_dir"))
    config = MemsyncConfig(
        data_dir=_expand(data_dir) if data_dir else _DEFAULT_DATA_DIR,
        sync=SyncConfig(
            cooldown=float(os.getenv("MEMSYNC_COOLDOWN", sync_data.get("cooldown", 5.0))),
            max_backups=int(os.getenv("MEMSYNC_MAX_BACKUPS", sync_data.get("max_backups", 50))),
        ),
    )
    if "destinations" in file_data:
        config.destinations = _parse_destinations(file_data["destinations"])
    return config
