""".NET MAUI configurator: csproj properties plus the Windows platform manifest."""

from pathlib import Path
from typing import ClassVar

from msstore_cli.artifacts import find_arrow_paths
from msstore_cli.configurators import msbuild
from msstore_cli.configurators.base import ConfiguratorRegistry, FileProjectConfigurator
from msstore_cli.exceptions import ManifestError
from msstore_cli.manifests import appx, csproj
from msstore_cli.models import AppIdentity, BuildArch, Capability, PackagedArtifact, ProjectType
from msstore_cli.utils.version import StoreVersion

WINDOWS_MANIFEST = Path("Platforms") / "Windows" / "Package.appxmanifest"
DEFAULT_VERSION = "1.0.0.0"


@ConfiguratorRegistry.register
class MauiConfigurator(FileProjectConfigurator):
    """.csproj projects with <UseMaui>true</UseMaui>."""

    project_type = ProjectType.MAUI
    priority = 60
    capabilities = frozenset({Capability.CONFIGURE, Capability.PACKAGE, Capability.PUBLISH})
    package_only_on_windows = True
    default_build_archs = (BuildArch.X64, BuildArch.ARM64)
    package_file_extensions = msbuild.MSIX_EXTENSIONS
    package_files_recursive = True
    project_file_patterns: ClassVar[tuple[str, ...]] = ("*.csproj",)

    def can_configure(self, path_or_url: str) -> bool:
        if not super().can_configure(path_or_url):
            return False
        project_file = self.get_info(path_or_url).project_file
        return project_file is not None and csproj.uses_maui(project_file)

    def _project_file(self, path_or_url: str) -> Path:
        project_file = self.get_info(path_or_url).project_file
        if project_file is None:
            raise ManifestError("No .csproj file found", self._root(path_or_url))
        return project_file

    def appx_manifest(self, path_or_url: str) -> Path:
        return self._root(path_or_url) / WINDOWS_MANIFEST

    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        project_file = self._project_file(path_or_url)
        # MAUI fills DisplayName/PublisherDisplayName from the project properties
        appx.update_manifest(self.appx_manifest(path_or_url), identity, version, update_properties=False)
        csproj.update_maui_project(project_file, identity, version)
        self.context.console.print(
            f"MAUI project '{project_file}' is now configured to build to the Microsoft Store!"
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
        project_file = self._project_file(path_or_url)
        manifest = self.appx_manifest(path_or_url)

        if version is not None:
            appx.set_version(manifest, version)

        framework = csproj.get_windows_target_framework(project_file)
        if framework is None:
            raise ManifestError(
                "No Windows target framework found",
                project_file,
                fix_hint="Add a netX.Y-windows10.0.xxxxx.0 entry to <TargetFrameworks>",
            )
        package_version = (
            appx.read_identity(manifest).get("version") if manifest.is_file() else None
        ) or DEFAULT_VERSION

        self.run_tool("dotnet", ["restore"], root, "Failed to restore the project packages.")

        files: list[Path] = []
        with self.context.err_console.status("Building the Store package with dotnet..."):
            for arch in archs or self.default_build_archs:
                arguments = [
                    "publish",
                    "-f",
                    framework,
                    f"-p:RuntimeIdentifierOverride=win10-{arch.value}",
                    "--self-contained",
                    "-c",
                    "Release",
                ]
                if output is not None:
                    test_dir = output / f"{root.name}_{package_version}_{arch.msbuild_name}_Test"
                    arguments += [
                        f"-p:AppxPackageDir={msbuild.windows_directory(output)}",
                        f"-p:AppxPackageTestDir={msbuild.windows_directory(test_dir)}",
                    ]
                result = self.run_tool(
                    "dotnet", arguments, root, f"Failed to build the {arch.value} package with dotnet."
                )
                for path in find_arrow_paths(result.stdout, msbuild.MSIX_EXTENSIONS, root):
                    if path not in files:
                        files.append(path)

        return PackagedArtifact(output_directory=output or files[0].parent, files=tuple(files))

    def get_app_id(self, path_or_url: str) -> str | None:
        project_file = self.get_info(path_or_url).project_file
        if project_file is not None:
            app_id = csproj.get_app_id(project_file)
            if app_id:
                return app_id
        return appx.get_app_id(self.appx_manifest(path_or_url))
