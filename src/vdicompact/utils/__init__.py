"""Utility functions and helpers."""

from .helpers import (
    file_size,
    ordered_group,
    program_dir,
)
from .output import (
    confirm,
    console,
    create_table,
    format_bytes,
    format_percentage,
    get_status_color,
    print_error,
    print_info,
    print_success,
    print_warning,
    print_what_if,
    prompt,
)

__all__ = [
    "confirm",
    "console",
    "create_table",
    "file_size",
    "format_bytes",
    "format_percentage",
    "get_status_color",
    "ordered_group",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "print_what_if",
    "program_dir",
    "prompt",
]
