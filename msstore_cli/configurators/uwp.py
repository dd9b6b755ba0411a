"""UWP configurator: Package.appxmanifest plus an MSBuild store upload build."""

from pathlib import Path
from typing import ClassVar

from msstore_cli.configurators import msbuild
from msstore_cli.configurators.base import ConfiguratorRegistry, FileProjectConfigurator
from msstore_cli.manifests import appx
from msstore_cli.models import AppIdentity, BuildArch, Capability, PackagedArtifact, ProjectType
from msstore_cli.utils.version import StoreVersion

APPX_MANIFEST = "Package.appxmanifest"


@ConfiguratorRegistry.register
class UWPConfigurator(FileProjectConfigurator):
    """Directories with a project or solution and a top-level Package.appxmanifest."""

    project_type = ProjectType.UWP
    priority = 80
    capabilities = frozenset({Capability.CONFIGURE, Capability.PACKAGE, Capability.PUBLISH})
    package_only_on_windows = True
    default_build_archs = (BuildArch.X64, BuildArch.ARM64)
    package_file_extensions = msbuild.STORE_UPLOAD_EXTENSIONS
    project_file_patterns: ClassVar[tuple[str, ...]] = ("*.csproj", "*.vcxproj", "*.sln")

    def appx_manifest(self, path_or_url: str) -> Path:
        return self._root(path_or_url) / APPX_MANIFEST

    def can_configure(self, path_or_url: str) -> bool:
        return super().can_configure(path_or_url) and self.appx_manifest(path_or_url).is_file()

    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        manifest = self.appx_manifest(path_or_url)
        appx.update_manifest(manifest, identity, version)
        self.context.console.print(
            f"{self.display_name} project at '{manifest.parent}' is now configured to build to the Microsoft Store!"
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
        if version is not None:
            appx.set_version(self.appx_manifest(path_or_url), version)

        with self.context.err_console.status("Building the Store package with MSBuild..."):
            files = self.build(root, archs or self.default_build_archs, output)
        return PackagedArtifact(output_directory=output or files[0].parent, files=tuple(files))

    def build(self, root: Path, archs: tuple[BuildArch, ...], output: Path | None) -> list[Path]:
        return msbuild.build_bundle(self, root, archs, output)

    def get_app_id(self, path_or_url: str) -> str | None:
        return appx.get_app_id(self.appx_manifest(path_or_url))
