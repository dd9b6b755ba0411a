"""WinUI 3 (Windows App SDK) configurator: one MSBuild run per architecture."""

from pathlib import Path
from typing import ClassVar

from msstore_cli.configurators import msbuild
from msstore_cli.configurators.base import ConfiguratorRegistry
from msstore_cli.configurators.uwp import UWPConfigurator
from msstore_cli.manifests import appx, csproj
from msstore_cli.models import BuildArch, ProjectType

WINDOWS_APP_SDK = "Microsoft.WindowsAppSDK"
DEFAULT_VERSION = "1.0.0.0"


@ConfiguratorRegistry.register
class WinUIConfigurator(UWPConfigurator):
    """Projects referencing Microsoft.WindowsAppSDK with a Package.appxmanifest."""

    project_type = ProjectType.WINUI
    priority = 70
    package_file_extensions = msbuild.MSIX_EXTENSIONS
    package_files_recursive = True
    project_file_patterns: ClassVar[tuple[str, ...]] = ("*.csproj", "*.vcxproj")

    def can_configure(self, path_or_url: str) -> bool:
        if not super().can_configure(path_or_url):
            return False
        project_file = self.get_info(path_or_url).project_file
        return project_file is not None and csproj.references_package(project_file, WINDOWS_APP_SDK)

    def build(self, root: Path, archs: tuple[BuildArch, ...], output: Path | None) -> list[Path]:
        manifest = self.appx_manifest(str(root))
        version = appx.read_identity(manifest).get("version") or DEFAULT_VERSION
        return msbuild.build_per_arch(self, root, archs, root.name, version, output)
