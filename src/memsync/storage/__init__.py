"""Canonical store, presets and backups."""
