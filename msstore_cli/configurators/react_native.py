"""React Native for Windows configurator.

The Windows app lives under ``windows/`` and is built like a UWP app.
"""

from pathlib import Path

from msstore_cli.configurators import msbuild
from msstore_cli.configurators.base import ConfiguratorRegistry
from msstore_cli.configurators.node import NodeProjectConfigurator
from msstore_cli.exceptions import ManifestError, MSStoreError
from msstore_cli.manifests import appx
from msstore_cli.models import AppIdentity, BuildArch, Capability, PackagedArtifact, ProjectType
from msstore_cli.utils.version import StoreVersion

WINDOWS_DIRECTORY = "windows"


@ConfiguratorRegistry.register
class ReactNativeConfigurator(NodeProjectConfigurator):
    """package.json projects with react-native installed."""

    project_type = ProjectType.REACT_NATIVE
    priority = 40
    capabilities = frozenset({Capability.CONFIGURE, Capability.PACKAGE, Capability.PUBLISH})
    package_only_on_windows = True
    default_build_archs = (BuildArch.X64, BuildArch.ARM64)
    package_file_extensions = msbuild.STORE_UPLOAD_EXTENSIONS

    def can_configure(self, path_or_url: str) -> bool:
        return self.probe_react_native(path_or_url) is True

    def find_appx_manifest(self, path_or_url: str) -> Path:
        """Locate the Package.appxmanifest of the Windows app.

        Raises:
            ManifestError: If the project has no Windows app yet
        """
        windows_dir = self._root(path_or_url) / WINDOWS_DIRECTORY
        manifest = appx.find_manifest(windows_dir, recursive=True)
        if manifest is None:
            raise ManifestError(
                "Package.appxmanifest not found",
                windows_dir,
                fix_hint="Add Windows support with 'npx react-native-windows-init' first",
            )
        return manifest

    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        manifest = self.find_appx_manifest(path_or_url)
        appx.update_manifest(manifest, identity, version)
        self.context.console.print(
            f"React Native project '{manifest}' is now configured to build to the Microsoft Store!"
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
        if not self.run_install(root):
            raise MSStoreError(f"Failed to run '{self.package_manager(root)} install'.")

        manifest = self.find_appx_manifest(path_or_url)
        if version is not None:
            appx.set_version(manifest, version)

        with self.context.err_console.status("Building the Store package with MSBuild..."):
            files = msbuild.build_bundle(
                self, root / WINDOWS_DIRECTORY, archs or self.default_build_archs, output
            )
        return PackagedArtifact(output_directory=output or files[0].parent, files=tuple(files))

    def input_directory(self, path_or_url: str) -> Path:
        return self.find_appx_manifest(path_or_url).parent / self.default_input_subdirectory

    def get_app_id(self, path_or_url: str) -> str | None:
        try:
            return appx.get_app_id(self.find_appx_manifest(path_or_url))
        except ManifestError:
            return None
