"""Locate packages produced by external build tools.

Build tools announce the package they wrote somewhere in their output:
- electron-builder: a line with ``target=AppX`` and ``file=<path>``
- MSBuild / dotnet publish: ``Project -> <path>`` lines
- flutter msix: ``msix created: <path>``

Every scanner strips ANSI escapes first and resolves relative paths against
the project working directory.
"""

import re
from pathlib import Path, PureWindowsPath

from msstore_cli.exceptions import ArtifactNotFoundError
from msstore_cli.utils.shell import strip_ansi

ARROW = "->"


def _lines(stdout: str) -> list[str]:
    return strip_ansi(stdout).replace("\r\n", "\n").split("\n")


def _clean_path_token(value: str) -> str:
    return value.strip().strip('"').strip("'").strip()


def resolve_path(path_str: str, cwd: Path | None) -> Path:
    """Resolve a path printed by a tool against its working directory.

    Absolute POSIX and Windows paths are kept as they are.
    """
    path = Path(path_str)
    if path.is_absolute() or PureWindowsPath(path_str).is_absolute() or cwd is None:
        return path
    return cwd / path


def find_marker_path(
    stdout: str,
    line_marker: str,
    token: str,
    cwd: Path | None = None,
) -> Path:
    """Extract the path after ``token`` on the last line containing ``line_marker``.

    Args:
        stdout: Captured command output
        line_marker: Text identifying the relevant line (e.g. "target=AppX")
        token: Text right before the path (e.g. "file=")
        cwd: Directory relative paths are resolved against

    Returns:
        Path of the produced package

    Raises:
        ArtifactNotFoundError: If no line carries the marker and token
    """
    candidates = [line for line in _lines(stdout) if line_marker in line]
    if candidates:
        line = candidates[-1]
        match = re.search(re.escape(token), line, re.IGNORECASE)
        if match is not None:
            path_str = _clean_path_token(line[match.end():])
            if path_str:
                return resolve_path(path_str, cwd)

    raise ArtifactNotFoundError(
        "Failed to find the path to the packaged msix file.",
        details=f"No line containing '{line_marker}' followed by '{token}' in the build output",
    )


def find_arrow_paths(
    stdout: str,
    extensions: tuple[str, ...],
    cwd: Path | None = None,
) -> list[Path]:
    """Extract every ``... -> <path>`` target ending in one of ``extensions``.

    Args:
        stdout: Captured command output
        extensions: Package extensions to accept (".msix", ".msixupload", ...)
        cwd: Directory relative paths are resolved against

    Returns:
        Package paths in output order, without duplicates

    Raises:
        ArtifactNotFoundError: If no arrow line names a package
    """
    lowered = tuple(ext.lower() for ext in extensions)
    found: list[Path] = []
    for line in _lines(stdout):
        if ARROW not in line:
            continue
        path_str = _clean_path_token(line.rsplit(ARROW, 1)[1])
        if path_str.lower().endswith(lowered):
            path = resolve_path(path_str, cwd)
            if path not in found:
                found.append(path)

    if not found:
        raise ArtifactNotFoundError(
            "Failed to find the path to the packaged app.",
            details=f"No '{ARROW} <path>' line ending in {', '.join(extensions)} in the build output",
        )
    return found


def find_prefixed_path(stdout: str, prefix: str, cwd: Path | None = None) -> Path:
    """Extract the path following ``prefix`` on the last line that has it.

    Raises:
        ArtifactNotFoundError: If no line contains the prefix
    """
    for line in reversed(_lines(stdout)):
        index = line.find(prefix)
        if index == -1:
            continue
        path_str = _clean_path_token(line[index + len(prefix):])
        if path_str:
            return resolve_path(path_str, cwd)

    raise ArtifactNotFoundError(
        "Failed to find the path to the packaged msix file.",
        details=f"No line containing '{prefix}' in the build output",
    )


def find_package_files(
    directory: Path,
    extensions: tuple[str, ...],
    recursive: bool = False,
) -> list[Path]:
    """List publishable package files in a directory.

    Args:
        directory: Directory to search
        extensions: Accepted extensions, compared case-insensitively
        recursive: Search subdirectories too

    Returns:
        Sorted list of matching files (empty if the directory is missing)
    """
    if not directory.is_dir():
        return []

    lowered = tuple(ext.lower() for ext in extensions)
    candidates = directory.rglob("*") if recursive else directory.iterdir()
    return sorted(
        path for path in candidates if path.is_file() and path.name.lower().endswith(lowered)
    )
