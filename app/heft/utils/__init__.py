"""Utility modules for heft.

This module exports commonly used utility functions.
"""

from heft.utils.formatting import (
    console,
    err_console,
    format_age,
    format_bytes,
    format_delta,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from heft.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_age",
    "format_bytes",
    "format_delta",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
