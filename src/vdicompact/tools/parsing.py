"""Parsers for VBoxManage text output.

VBoxManage has no structured output format for the commands used here, so
everything is scraped from its line-oriented text. Every parser returns
``None`` (or an empty list) when the output does not look as expected.
"""

import re

_RE_QUOTED = re.compile(r'"(.*)"')
_RE_VM_STATE = re.compile(r'^VMState="?(?P<state>[^"\r\n]*)"?\s*$', re.MULTILINE)


def parse_vm_names(text: str) -> list[str]:
    """Extract VM names from ``list vms`` / ``list runningvms`` output.

    Each line looks like ``"Windows 10" {2f1c...}``.

    Args:
        text: Raw command output

    Returns:
        VM names in output order
    """
    names = []
    for line in text.splitlines():
        match = _RE_QUOTED.search(line)
        if match and match.group(1):
            names.append(match.group(1))
    return names


def disk_path_pattern(extension: str) -> re.Pattern[str]:
    """Build the ``<key>="<path><extension>"`` pattern for one extension."""
    return re.compile(
        r'^"?[^"=\r\n]+"?="(?P<path>[^"\r\n]+' + re.escape(extension) + r')"\s*$',
        re.IGNORECASE | re.MULTILINE,
    )


def parse_disk_path(text: str, extension: str = ".vdi") -> str | None:
    """Extract the first disk image path from ``showvminfo --machinereadable``.

    Args:
        text: Raw machine-readable VM info
        extension: Disk image extension, matched case-insensitively

    Returns:
        Disk image path, or None if no attachment has that extension
    """
    match = disk_path_pattern(extension).search(text)
    if not match:
        return None
    return match.group("path")


def parse_vm_state(text: str) -> str | None:
    """Extract the ``VMState`` value from machine-readable VM info."""
    match = _RE_VM_STATE.search(text)
    if not match:
        return None
    return match.group("state").strip() or None


def is_powered_off(state: str | None) -> bool:
    """Check whether a reported VM state means powered off."""
    return state is not None and "poweroff" in state.lower()
