"""External process execution utilities.

Provides the command runner every configurator builds through:
- Full stdout/stderr capture (never streamed to the console)
- Non-zero exits returned as data, never raised
- Cooperative cancellation that terminates the running process
- ANSI escape code stripping for output scanners
"""

import logging
import os
import re
import shlex
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from msstore_cli.exceptions import CommandNotFoundError, OperationCancelledError

if TYPE_CHECKING:
    from msstore_cli.context import CancellationToken

logger = logging.getLogger(__name__)

# Regex pattern for ANSI escape sequences
# Matches: ESC[...m, ESC[...;...m, OSC ...BEL and other control sequences
ANSI_PATTERN = re.compile(
    r"\x1b\[[0-9;?]*[a-zA-Z]|\x1b\][^\x07]*\x07|\x1b[PX^_][^\x1b]*\x1b\\"
)

# Additional pattern for control characters that might slip through
CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences and control characters from text.

    Build tools colour their output when they think they run in a
    terminal; markers such as ``file=`` must be matched on clean text.

    Args:
        text: Input text potentially containing ANSI codes

    Returns:
        Clean text with all ANSI sequences removed
    """
    if not text:
        return ""
    result = ANSI_PATTERN.sub("", text)
    result = CONTROL_CHARS_PATTERN.sub("", result)
    return result


def is_windows() -> bool:
    """Return True when running on Windows."""
    return sys.platform == "win32"


@dataclass(frozen=True)
class CommandResult:
    """Captured evidence of one external process call.

    Attributes:
        command: Program that was run
        arguments: Arguments passed to it
        cwd: Working directory
        exit_code: Process exit code
        stdout: Full standard output
        stderr: Full standard error
    """

    command: str
    arguments: tuple[str, ...]
    cwd: Path | None
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.arguments])


def split_arguments(arguments: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Normalise an argument string or sequence into a list."""
    if arguments is None:
        return []
    if isinstance(arguments, str):
        return shlex.split(arguments, posix=not is_windows())
    return list(arguments)


class CommandRunner:
    """Runs external programs and captures their output.

    Only failing to launch the program or cancellation raise; a non-zero
    exit code is a normal result for the caller to inspect.
    """

    def __init__(self, poll_interval: float = 0.2, kill_grace_period: float = 5.0) -> None:
        """Initialize the runner.

        Args:
            poll_interval: Seconds between cancellation checks
            kill_grace_period: Seconds to wait after terminate() before kill()
        """
        self.poll_interval = poll_interval
        self.kill_grace_period = kill_grace_period

    def run(
        self,
        command: str,
        arguments: str | list[str] | tuple[str, ...] | None = None,
        cwd: Path | None = None,
        token: "CancellationToken | None" = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Execute a command to completion.

        Args:
            command: Program name or path
            arguments: Argument list, or a string split shell-style
            cwd: Working directory for the command
            token: Cancellation token checked while the process runs
            env: Additional environment variables

        Returns:
            CommandResult with exit code and full output

        Raises:
            CommandNotFoundError: If the program cannot be launched
            OperationCancelledError: If the token fires or Ctrl-C is pressed
        """
        args = split_arguments(arguments)
        if token is not None:
            token.raise_if_cancelled()

        # Resolve .cmd/.bat shims (npm, yarn, flutter) on Windows
        executable = shutil.which(command) or command

        merged_env = {**os.environ}
        if env:
            merged_env.update(env)

        logger.debug("Running '%s' in %s", " ".join([command, *args]), cwd or Path.cwd())

        try:
            process = subprocess.Popen(
                [executable, *args],
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=merged_env,
            )
        except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
            raise CommandNotFoundError(command, details=str(e)) from e

        try:
            stdout, stderr = self._wait(process, command, token)
        except KeyboardInterrupt:
            if token is not None:
                token.cancel()
            self._terminate(process)
            raise OperationCancelledError(f"'{command}' was cancelled.") from None

        logger.debug("'%s' exited with code %s", command, process.returncode)

        return CommandResult(
            command=command,
            arguments=tuple(args),
            cwd=cwd,
            exit_code=process.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
        )

    def _wait(
        self,
        process: subprocess.Popen[str],
        command: str,
        token: "CancellationToken | None",
    ) -> tuple[str, str]:
        while True:
            try:
                return process.communicate(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                if token is not None and token.is_cancelled:
                    self._terminate(process)
                    raise OperationCancelledError(f"'{command}' was cancelled.") from None

    def _terminate(self, process: subprocess.Popen[str]) -> None:
        process.terminate()
        try:
            process.communicate(timeout=self.kill_grace_period)
        except subprocess.TimeoutExpired:
            process.kill()
            process.communicate()
