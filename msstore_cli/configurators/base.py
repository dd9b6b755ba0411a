"""Abstract base class for project configurators and their registry.

A configurator knows one kind of project:
- How to recognise it from a path or URL
- How to write Store identity into its manifests
- How to build a Store package with the platform tools
- Where the built packages end up for publishing
"""

import logging
import urllib.parse
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from msstore_cli.artifacts import find_package_files
from msstore_cli.context import CommandContext
from msstore_cli.exceptions import (
    BuildError,
    DetectionError,
    PackagingNotSupportedError,
    PublishingNotSupportedError,
    WindowsOnlyError,
)
from msstore_cli.models import (
    AppIdentity,
    BuildArch,
    Capability,
    PackagedArtifact,
    ProjectDescriptor,
    ProjectType,
)
from msstore_cli.store.models import DevCenterApplication, SubmissionStatus
from msstore_cli.store.submission import publish_packages
from msstore_cli.utils.shell import CommandResult
from msstore_cli.utils.version import StoreVersion

if TYPE_CHECKING:
    from msstore_cli.store.api import StoreAPI

logger = logging.getLogger(__name__)


def is_url(path_or_url: str) -> bool:
    """True for absolute non-file URIs (a Windows drive letter is not a scheme)."""
    parts = urllib.parse.urlsplit(path_or_url)
    return len(parts.scheme) > 1 and parts.scheme.lower() != "file" and bool(parts.netloc)


class ProjectConfigurator(ABC):
    """Abstract base class for configurator implementations.

    Each project type (UWP, Electron, Flutter, ...) implements this
    interface. Capabilities are declared per class; operations outside
    them raise the matching "not supported" error.
    """

    # Class-level attributes to be defined by subclasses
    project_type: ClassVar[ProjectType]
    priority: ClassVar[int]
    capabilities: ClassVar[frozenset[Capability]]

    package_only_on_windows: ClassVar[bool] = False
    default_build_archs: ClassVar[tuple[BuildArch, ...]] = ()
    output_subdirectory: ClassVar[str | None] = None
    default_input_subdirectory: ClassVar[str] = "AppPackages"
    package_file_extensions: ClassVar[tuple[str, ...]] = ()
    package_files_recursive: ClassVar[bool] = False

    def __init__(self, context: CommandContext) -> None:
        """Initialize configurator with the invocation context.

        Args:
            context: Runner, cache, cancellation token and consoles
        """
        self.context = context

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        return str(self.project_type)

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @abstractmethod
    def can_configure(self, path_or_url: str) -> bool:
        """Check if this configurator handles the given path or URL.

        Must not modify the project; package-manager probes are cached in
        the context.
        """

    @abstractmethod
    def get_info(self, path_or_url: str) -> ProjectDescriptor:
        """Resolve the project root and main project file."""

    @abstractmethod
    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        """Write Store identity into the project.

        Running it again with the same identity leaves files unchanged.

        Returns:
            Output directory to use for packaging, if the project dictates one

        Raises:
            ManifestError: If a manifest cannot be read or patched
        """

    def package(
        self,
        path_or_url: str,
        identity: AppIdentity | None = None,
        archs: tuple[BuildArch, ...] | None = None,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> PackagedArtifact:
        """Build Store package(s) for the project.

        Raises:
            PackagingNotSupportedError: If the project type cannot be packaged
            BuildError: If a build tool fails
            ArtifactNotFoundError: If the build output names no package
        """
        raise PackagingNotSupportedError()

    def ensure_can_package(self) -> None:
        """Raise if packaging is unsupported here or on this host."""
        if not self.supports(Capability.PACKAGE):
            raise PackagingNotSupportedError()
        if self.package_only_on_windows and not self.context.windows:
            raise WindowsOnlyError()

    def print_output_location(self, artifact: PackagedArtifact) -> None:
        self.context.err_console.print("The packaged app is here:")
        if artifact.output_directory is not None:
            self.context.console.print(str(artifact.output_directory))
        for file in artifact.files:
            logger.debug("Packaged %s", file)

    def get_app_id(self, path_or_url: str) -> str | None:
        """Return the Store app id recorded in the project by configure."""
        return None

    def resolve_app_id(self, path_or_url: str, api: "StoreAPI") -> str | None:
        """Find the Store app id of the project, asking the Store if needed."""
        return self.get_app_id(path_or_url)

    def input_directory(self, path_or_url: str) -> Path:
        """Default directory holding packages to publish."""
        root = self.get_info(path_or_url).root or Path.cwd()
        return root / self.default_input_subdirectory

    def find_package_files(self, path_or_url: str, input_dir: Path | None = None) -> list[Path]:
        """List publishable package files (empty if none were built yet)."""
        directory = input_dir or self.input_directory(path_or_url)
        return find_package_files(
            directory, self.package_file_extensions, recursive=self.package_files_recursive
        )

    def publish(
        self,
        path_or_url: str,
        application: DevCenterApplication,
        api: "StoreAPI",
        files: list[Path],
        flight_id: str | None = None,
        no_commit: bool = False,
        rollout_percentage: float | None = None,
    ) -> SubmissionStatus | None:
        """Upload package files to a Store submission and commit it.

        Raises:
            PublishingNotSupportedError: If the project type cannot be published
            StoreAPIError: If the submission fails
        """
        if not self.supports(Capability.PUBLISH):
            raise PublishingNotSupportedError()

        for file in files:
            self.context.console.print(f"Publishing {file}")
        return publish_packages(
            api,
            application,
            files,
            self.context.console,
            flight_id=flight_id,
            no_commit=no_commit,
            rollout_percentage=rollout_percentage,
            token=self.context.token,
        )

    def run_tool(
        self,
        command: str,
        arguments: list[str],
        cwd: Path | None,
        failure_message: str,
    ) -> CommandResult:
        """Run a build tool, raising BuildError on a non-zero exit."""
        result = self.context.runner.run(command, arguments, cwd=cwd, token=self.context.token)
        if not result.succeeded:
            logger.debug("'%s' failed:\n%s\n%s", result.command_line, result.stdout, result.stderr)
            raise BuildError(
                failure_message,
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result


class FileProjectConfigurator(ProjectConfigurator):
    """Base for configurators of projects that live in a directory.

    Subclasses list glob patterns for their main project file; the first
    match at the top level of the directory wins.
    """

    project_file_patterns: ClassVar[tuple[str, ...]] = ()

    def _root(self, path_or_url: str) -> Path:
        path = Path(path_or_url)
        return path.parent if path.is_file() else path

    def find_project_file(self, root: Path) -> Path | None:
        for pattern in self.project_file_patterns:
            matches = sorted(root.glob(pattern))
            if matches:
                return matches[0]
        return None

    def get_info(self, path_or_url: str) -> ProjectDescriptor:
        root = self._root(path_or_url)
        path = Path(path_or_url)
        project_file = path if path.is_file() else self.find_project_file(root)
        return ProjectDescriptor(
            path_or_url=path_or_url,
            project_type=self.project_type,
            root=root,
            project_file=project_file,
        )

    def can_configure(self, path_or_url: str) -> bool:
        if is_url(path_or_url):
            return False
        root = self._root(path_or_url)
        return root.is_dir() and self.find_project_file(root) is not None


class ConfiguratorRegistry:
    """Registry for configurator implementations.

    Detection walks the registered classes in ascending priority and
    returns the first that accepts the path or URL.
    """

    _configurators: dict[ProjectType, type[ProjectConfigurator]] = {}

    @classmethod
    def register(cls, configurator_class: type[ProjectConfigurator]) -> type[ProjectConfigurator]:
        """Register a configurator class.

        Can be used as a decorator:
            @ConfiguratorRegistry.register
            class FlutterConfigurator(FileProjectConfigurator):
                ...

        Raises:
            TypeError: If configurator_class is missing required attributes
            ValueError: If the project type or priority is already taken
        """
        required_attrs = ["project_type", "priority", "capabilities"]
        missing = [attr for attr in required_attrs if not hasattr(configurator_class, attr)]
        if missing:
            raise TypeError(
                f"Configurator class {configurator_class.__name__} missing required "
                f"class attributes: {', '.join(missing)}."
            )

        project_type = configurator_class.project_type
        existing = cls._configurators.get(project_type)
        if existing is not None:
            if existing is not configurator_class:
                raise ValueError(
                    f"Project type '{project_type}' already registered by {existing.__name__}. "
                    f"Cannot register {configurator_class.__name__}."
                )
            return configurator_class

        for other in cls._configurators.values():
            if other.priority == configurator_class.priority:
                raise ValueError(
                    f"Priority {other.priority} already used by {other.__name__}. "
                    "Detection order must be unambiguous."
                )

        cls._configurators[project_type] = configurator_class
        return configurator_class

    @classmethod
    def get(cls, project_type: ProjectType) -> type[ProjectConfigurator] | None:
        return cls._configurators.get(project_type)

    @classmethod
    def ordered(cls) -> list[type[ProjectConfigurator]]:
        """Registered classes in detection order."""
        return sorted(cls._configurators.values(), key=lambda c: c.priority)

    @classmethod
    def detect(
        cls,
        path_or_url: str,
        context: CommandContext,
        role: str = "configurator",
    ) -> ProjectConfigurator:
        """Return the first configurator that accepts the path or URL.

        Args:
            path_or_url: Project directory, package file or URL
            context: Invocation context handed to the configurator
            role: Word used in the error message ("configurator", "publisher")

        Raises:
            DetectionError: If no registered configurator matches
        """
        for configurator_class in cls.ordered():
            configurator = configurator_class(context)
            if configurator.can_configure(path_or_url):
                logger.debug("Detected %s project at %s", configurator, path_or_url)
                return configurator
        raise DetectionError(path_or_url, role=role)
