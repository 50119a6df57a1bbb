"""CLI commands."""

from . import compact, config, main, vm

__all__ = ["compact", "config", "main", "vm"]
