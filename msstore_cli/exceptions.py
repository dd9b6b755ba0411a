"""Custom exception hierarchy for the Microsoft Store CLI.

Exit codes are small negative integers so callers can tell failure causes
apart:
- -1: General failure (detection, build, manifest, Store API, ...)
- -2: No usable Store developer account
- -4: The project type cannot be packaged
- -5: The project type cannot be published
- -6: Packaging this project type requires Windows
"""


class MSStoreError(Exception):
    """Base exception for all CLI errors.

    Each subclass defines an exit_code used by the CLI when the error
    terminates a command.
    """

    exit_code: int = -1

    def __init__(
        self,
        message: str,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Brief error message
            details: Detailed explanation of what went wrong
            fix_hint: Suggested command or action to fix the issue
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"\nDetails: {self.details}")
        if self.fix_hint:
            parts.append(f"\nFix: {self.fix_hint}")
        return "".join(parts)


class ConfigurationError(MSStoreError):
    """CLI settings errors.

    Raised when:
    - Settings file has invalid YAML
    - Settings values fail validation
    - Store credentials are missing
    """


class DetectionError(MSStoreError):
    """No project configurator matches the given path or URL."""

    def __init__(self, path_or_url: str, role: str = "configurator") -> None:
        super().__init__(f"We could not find a project {role} for the project at '{path_or_url}'.")
        self.path_or_url = path_or_url
        self.role = role


class ManifestError(MSStoreError):
    """A project manifest could not be read or patched.

    Raised when:
    - The manifest file is missing
    - The manifest has invalid XML/JSON/YAML syntax
    - An expected element or section is absent
    """

    def __init__(
        self,
        message: str,
        path: object = None,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message, details=details, fix_hint=fix_hint)
        self.path = path


class CommandNotFoundError(MSStoreError):
    """An external tool could not be launched at all."""

    def __init__(self, command: str, details: str | None = None) -> None:
        super().__init__(
            f"Could not run '{command}'. Is it installed and on your PATH?",
            details=details,
        )
        self.command = command


class OperationCancelledError(MSStoreError):
    """The invocation was cancelled (e.g. Ctrl-C) while work was in flight."""

    def __init__(self, message: str = "Operation cancelled.") -> None:
        super().__init__(message)


class BuildError(MSStoreError):
    """An external build tool returned a non-zero exit code.

    Carries the captured output so it can be surfaced verbatim.
    """

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message, details=stderr.strip() or stdout.strip() or None)
        self.tool_exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class ArtifactNotFoundError(MSStoreError):
    """A build succeeded but its output did not name the produced package.

    Distinct from BuildError: this usually means the external tool changed
    its output format (a version mismatch), not that the build failed.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(
            message,
            details=details,
            fix_hint="Check the version of the build tool; its output format may have changed",
        )


class PackagingNotSupportedError(MSStoreError):
    """The selected project type has no packaging capability."""

    exit_code = -4

    def __init__(self, message: str = "We can't package this type of project.") -> None:
        super().__init__(message)


class PublishingNotSupportedError(MSStoreError):
    """The selected project type has no publishing capability."""

    exit_code = -5

    def __init__(self, message: str = "We can't publish this type of project.") -> None:
        super().__init__(message)


class WindowsOnlyError(MSStoreError):
    """Packaging was requested for a Windows-only project type elsewhere."""

    exit_code = -6

    def __init__(self) -> None:
        super().__init__("This project type can only be packaged on Windows.")


class AccountError(MSStoreError):
    """No usable Store developer account is configured."""

    exit_code = -2


class StoreAPIError(MSStoreError):
    """Store submission API failures.

    Raised when:
    - Authentication with the token endpoint fails
    - An HTTP request returns an error status
    - A response body is not valid JSON
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        super().__init__(message, details=details, fix_hint=fix_hint)
        self.status = status
