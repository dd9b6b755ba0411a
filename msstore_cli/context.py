"""Per-invocation state threaded through every command.

One CommandContext is built for each CLI invocation. It owns:
- the external command runner
- the cancellation token shared by every process and HTTP call
- the install/probe cache for package managers
- the Rich consoles used for user-facing output
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from msstore_cli.exceptions import OperationCancelledError
from msstore_cli.utils.shell import CommandRunner, is_windows


class CancellationToken:
    """Cooperative cancellation signal for one invocation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if cancel() was called."""
        if self._event.is_set():
            raise OperationCancelledError()


class ProbeCache:
    """Remembers package-manager work already done in this process.

    Keys are (tool, directory) for installs and (tool, directory, package)
    for "is this package installed" probes. Detection and configuration
    both probe, so without the cache ``npm install`` would run twice.
    """

    def __init__(self) -> None:
        self._installs: set[tuple[str, str]] = set()
        self._packages: dict[tuple[str, str, str], bool] = {}
        self._tool_paths: dict[str, str] = {}

    @staticmethod
    def _key(directory: Path) -> str:
        return str(directory.resolve())

    def was_installed(self, tool: str, directory: Path) -> bool:
        return (tool, self._key(directory)) in self._installs

    def mark_installed(self, tool: str, directory: Path) -> None:
        self._installs.add((tool, self._key(directory)))

    def get_package(self, tool: str, directory: Path, package: str) -> bool | None:
        """Return the cached probe result, or None if never probed."""
        return self._packages.get((tool, self._key(directory), package))

    def set_package(self, tool: str, directory: Path, package: str, installed: bool) -> None:
        self._packages[(tool, self._key(directory), package)] = installed

    def get_tool_path(self, tool: str) -> str | None:
        return self._tool_paths.get(tool)

    def set_tool_path(self, tool: str, path: str) -> None:
        self._tool_paths[tool] = path


@dataclass
class CommandContext:
    """Everything a configurator needs besides its own arguments."""

    runner: CommandRunner = field(default_factory=CommandRunner)
    cache: ProbeCache = field(default_factory=ProbeCache)
    token: CancellationToken = field(default_factory=CancellationToken)
    console: Console = field(default_factory=lambda: Console(soft_wrap=True))
    err_console: Console = field(default_factory=lambda: Console(stderr=True, soft_wrap=True))
    verbose: bool = False
    windows: bool = field(default_factory=is_windows)
