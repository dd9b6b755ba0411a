"""Unit tests for the external command runner and output helpers."""

import sys
from pathlib import Path

import pytest

from msstore_cli.context import CancellationToken
from msstore_cli.exceptions import CommandNotFoundError, OperationCancelledError
from msstore_cli.utils.shell import CommandResult, CommandRunner, split_arguments, strip_ansi


class TestStripAnsi:
    """Tests for strip_ansi()."""

    def test_removes_colour_codes(self) -> None:
        assert strip_ansi("\x1b[32mdone\x1b[0m") == "done"

    def test_removes_osc_sequences(self) -> None:
        assert strip_ansi("\x1b]0;title\x07text") == "text"

    def test_keeps_plain_text(self) -> None:
        assert strip_ansi("target=AppX file=app.appx") == "target=AppX file=app.appx"

    def test_empty_input(self) -> None:
        assert strip_ansi("") == ""


class TestSplitArguments:
    """Tests for split_arguments()."""

    def test_none_is_empty(self) -> None:
        assert split_arguments(None) == []

    def test_sequence_is_copied(self) -> None:
        args = ("build", "-w=appx")
        assert split_arguments(args) == ["build", "-w=appx"]

    def test_string_is_split(self) -> None:
        assert split_arguments("pub add --dev msix") == ["pub", "add", "--dev", "msix"]


class TestCommandResult:
    """Tests for CommandResult."""

    def test_succeeded_only_for_zero_exit(self) -> None:
        assert CommandResult("npm", ("install",), None, 0).succeeded
        assert not CommandResult("npm", ("install",), None, 1).succeeded

    def test_command_line(self) -> None:
        result = CommandResult("npx", ("electron-builder", "build"), None, 0)
        assert result.command_line == "npx electron-builder build"


class TestCommandRunner:
    """Tests for CommandRunner.run() against real processes."""

    def test_captures_stdout_and_stderr(self, tmp_path: Path) -> None:
        script = "import sys; print('out'); print('err', file=sys.stderr)"
        result = CommandRunner().run(sys.executable, ["-c", script], cwd=tmp_path)

        assert result.succeeded
        assert result.stdout.strip() == "out"
        assert result.stderr.strip() == "err"
        assert result.cwd == tmp_path

    def test_non_zero_exit_is_returned_not_raised(self) -> None:
        """A failing tool is data for the caller to inspect."""
        result = CommandRunner().run(sys.executable, ["-c", "import sys; sys.exit(3)"])

        assert result.exit_code == 3
        assert not result.succeeded

    def test_missing_program_raises(self) -> None:
        with pytest.raises(CommandNotFoundError) as exc_info:
            CommandRunner().run("definitely-not-a-real-tool-msstore")
        assert "definitely-not-a-real-tool-msstore" in str(exc_info.value)

    def test_cancelled_token_prevents_launch(self) -> None:
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelledError):
            CommandRunner().run(sys.executable, ["-c", "print('never')"], token=token)

    def test_cancellation_terminates_running_process(self) -> None:
        """A token cancelled while the process runs stops it."""
        import threading

        token = CancellationToken()
        timer = threading.Timer(0.3, token.cancel)
        timer.start()
        try:
            with pytest.raises(OperationCancelledError):
                CommandRunner(poll_interval=0.05, kill_grace_period=1).run(
                    sys.executable, ["-c", "import time; time.sleep(30)"], token=token
                )
        finally:
            timer.cancel()
