"""Core data model shared by the detector, configurators and commands."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ProjectType(Enum):
    """Kinds of project the CLI knows how to bring to the Store."""

    UWP = "UWP"
    WINUI = "WinUI"
    MAUI = "MAUI"
    FLUTTER = "Flutter"
    ELECTRON = "Electron"
    REACT_NATIVE = "React Native"
    RAW_MSIX = "MSIX"
    PWA = "PWA"

    def __str__(self) -> str:
        return self.value


class Capability(Enum):
    """What a configurator can do with its project type."""

    CONFIGURE = "configure"
    PACKAGE = "package"
    PUBLISH = "publish"


class BuildArch(Enum):
    """Target processor architectures."""

    X86 = "x86"
    X64 = "x64"
    ARM64 = "arm64"

    @property
    def msbuild_name(self) -> str:
        """Platform name as MSBuild expects it (X86, X64, ARM64)."""
        return self.value.upper()

    @classmethod
    def parse(cls, value: str) -> "BuildArch":
        """Parse a CLI architecture value, ignoring case.

        Raises:
            ValueError: If value is not a known architecture
        """
        normalized = value.strip().lower()
        for arch in cls:
            if arch.value == normalized:
                return arch
        valid = ", ".join(a.value for a in cls)
        raise ValueError(f"Invalid architecture '{value}'. Valid values: {valid}")


@dataclass(frozen=True)
class ProjectDescriptor:
    """A resolved project: what the detector found at a path or URL.

    Attributes:
        path_or_url: The value the user passed in
        project_type: Resolved project type
        root: Project root directory (None for URLs)
        project_file: Main project file (.csproj, package.json, .msix, ...)
    """

    path_or_url: str
    project_type: ProjectType
    root: Path | None = None
    project_file: Path | None = None


@dataclass(frozen=True)
class AppIdentity:
    """Store identity written into project manifests.

    Attributes:
        app_id: Store-assigned application id (e.g. 9NBLGGH4R315)
        primary_name: Reserved app name shown in the Store
        package_identity_name: Package/Identity/Name value
        publisher_name: Publisher certificate subject (CN=...)
        publisher_display_name: Publisher name shown to users
    """

    app_id: str
    primary_name: str
    package_identity_name: str
    publisher_name: str
    publisher_display_name: str


@dataclass(frozen=True)
class PackagedArtifact:
    """Output of a packaging step."""

    output_directory: Path | None
    files: tuple[Path, ...] = ()
