"""Flutter configurator built on the ``msix`` pub package."""

from pathlib import Path
from typing import ClassVar

from msstore_cli.artifacts import find_prefixed_path
from msstore_cli.configurators.base import ConfiguratorRegistry, FileProjectConfigurator
from msstore_cli.manifests import pubspec
from msstore_cli.models import AppIdentity, BuildArch, Capability, PackagedArtifact, ProjectType
from msstore_cli.utils.version import StoreVersion

MSIX_PACKAGE = "msix"
ARTIFACT_PREFIX = "msix created: "


@ConfiguratorRegistry.register
class FlutterConfigurator(FileProjectConfigurator):
    """Directories with a pubspec.yaml."""

    project_type = ProjectType.FLUTTER
    priority = 30
    capabilities = frozenset({Capability.CONFIGURE, Capability.PACKAGE, Capability.PUBLISH})
    package_only_on_windows = True
    default_build_archs = (BuildArch.X64,)
    default_input_subdirectory = str(Path("build") / "windows" / "x64" / "runner" / "Release")
    package_file_extensions = (".msix",)
    project_file_patterns: ClassVar[tuple[str, ...]] = ("pubspec.yaml",)

    def _pubspec(self, path_or_url: str) -> Path:
        return self._root(path_or_url) / "pubspec.yaml"

    def _pub_get(self, root: Path) -> None:
        cache = self.context.cache
        if cache.was_installed("flutter", root):
            return
        with self.context.err_console.status("Running 'flutter pub get'..."):
            self.run_tool("flutter", ["pub", "get"], root, "Failed to run 'flutter pub get'.")
        cache.mark_installed("flutter", root)

    def install_msix(self, root: Path) -> None:
        """Add the msix pub package as a dev dependency when missing."""
        self._pub_get(root)
        if pubspec.has_dependency(root / "pubspec.yaml", MSIX_PACKAGE):
            return
        with self.context.err_console.status(f"Installing '{MSIX_PACKAGE}' package..."):
            self.run_tool(
                "flutter",
                ["pub", "add", "--dev", MSIX_PACKAGE],
                root,
                f"Failed to install '{MSIX_PACKAGE}' package.",
            )
        self.context.err_console.print(f"'{MSIX_PACKAGE}' package installed successfully!")

    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        root = self._root(path_or_url)
        self.install_msix(root)
        pubspec.update_manifest(self._pubspec(path_or_url), identity, version)
        self.context.console.print(
            f"Flutter project '{root}' is now configured to build to the Microsoft Store!"
        )
        self.context.console.print(
            "For more information on building your Flutter project to the Microsoft Store, see "
            "https://pub.dev/packages/msix#microsoft-store-icon-publishing-to-the-microsoft-store"
        )
        return output

    def package(
        self,
        path_or_url: str,
        identity: AppIdentity | None = None,
        archs: tuple[BuildArch, ...] | None = None,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> PackagedArtifact:
        root = self._root(path_or_url)
        self._pub_get(root)

        if version is not None:
            pubspec.set_version(self._pubspec(path_or_url), version)

        output_arguments = ["--output-path", str(output)] if output is not None else []

        with self.context.err_console.status("Building Windows executable..."):
            self.run_tool(
                "flutter",
                ["pub", "run", "msix:build", "--store", *output_arguments, "-v"],
                root,
                "Failed to build the Windows executable.",
            )
        with self.context.err_console.status("Packaging 'msix'..."):
            result = self.run_tool(
                "flutter",
                ["pub", "run", "msix:pack", "--store", *output_arguments, "-v"],
                root,
                "Failed to generate msix package.",
            )

        package_file = find_prefixed_path(result.stdout, ARTIFACT_PREFIX, root)
        return PackagedArtifact(output_directory=package_file.parent, files=(package_file,))

    def get_app_id(self, path_or_url: str) -> str | None:
        return pubspec.get_app_id(self._pubspec(path_or_url))
