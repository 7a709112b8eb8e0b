"""Exception types raised by the memory engine."""

from __future__ import annotations


class MemsyncError(Exception):
    """Base class for all memsync errors."""


class ValidationError(MemsyncError):
    """A document violates the structural invariants."""


class MergeError(MemsyncError):
    """A section update fragment could not be turned into a section."""


class BackupError(MemsyncError):
    """A snapshot of the canonical store could not be taken or restored."""


class PresetError(MemsyncError):
    """A preset could not be read or written."""
