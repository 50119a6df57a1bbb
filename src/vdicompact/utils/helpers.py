"""Helper utilities."""

import sys
from pathlib import Path
from typing import Any

from typer.core import TyperGroup


def ordered_group(order: list[str]) -> type[TyperGroup]:
    """Create a TyperGroup subclass that orders commands."""

    class _OrderedGroup(TyperGroup):
        def list_commands(self, ctx: Any) -> list[str]:
            commands = super().list_commands(ctx)
            rank = {n: i for i, n in enumerate(order)}
            return sorted(commands, key=lambda n: rank.get(n, 99))

    return _OrderedGroup


def program_dir() -> Path:
    """Directory holding the running program (console script or module)."""
    return Path(sys.argv[0]).resolve().parent


def file_size(path: Path) -> int | None:
    """Size of a file in bytes, or None if it cannot be read."""
    try:
        return path.stat().st_size
    except OSError:
        return None
