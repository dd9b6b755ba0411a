"""Utility modules for the Microsoft Store CLI."""

from msstore_cli.utils.shell import (
    CommandResult,
    CommandRunner,
    is_windows,
    strip_ansi,
)
from msstore_cli.utils.version import (
    StoreVersion,
    parse_version,
    to_version_string,
)

__all__ = [
    # Shell utilities
    "CommandRunner",
    "CommandResult",
    "strip_ansi",
    "is_windows",
    # Version utilities
    "StoreVersion",
    "parse_version",
    "to_version_string",
]
