"""Version parsing and formatting utilities.

Store packages use four-part versions (MAJOR.MINOR.BUILD.REVISION) while
npm and MAUI display versions are three-part. Users may pass anything from
two to four parts; missing parts are zero.
"""

import re
from typing import NamedTuple

# Two to four dot-separated non-negative integers
VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?(?:\.(\d+))?$")

# Each part of a package version is limited to an unsigned 16-bit value
MAX_VERSION_PART = 65535


class StoreVersion(NamedTuple):
    """A parsed package version."""

    major: int
    minor: int
    build: int = 0
    revision: int = 0

    def __str__(self) -> str:
        return to_version_string(self)


def parse_version(version_str: str) -> StoreVersion:
    """Parse a version string into a StoreVersion.

    Args:
        version_str: Version string (e.g., '1.2', '1.2.3', 'v1.2.3.4')

    Returns:
        StoreVersion with missing parts set to zero

    Raises:
        ValueError: If the string is not a valid version

    Examples:
        >>> parse_version('1.2.3')
        StoreVersion(major=1, minor=2, build=3, revision=0)
    """
    if not version_str or not version_str.strip():
        raise ValueError("Invalid version: ''")

    match = VERSION_PATTERN.match(version_str.strip())
    if not match:
        raise ValueError(f"Invalid version: '{version_str}'")

    parts = [int(p) if p is not None else 0 for p in match.groups()]
    if any(p > MAX_VERSION_PART for p in parts):
        raise ValueError(
            f"Invalid version: '{version_str}' (each part must be <= {MAX_VERSION_PART})"
        )

    return StoreVersion(*parts)


def to_version_string(version: StoreVersion, ignore_revision: bool = False) -> str:
    """Format a version.

    Args:
        version: Parsed version
        ignore_revision: Emit MAJOR.MINOR.BUILD (npm/semver style)

    Returns:
        Four-part string, or three-part when ignore_revision is set
    """
    if ignore_revision:
        return f"{version.major}.{version.minor}.{version.build}"
    return f"{version.major}.{version.minor}.{version.build}.{version.revision}"
