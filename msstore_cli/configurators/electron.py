"""Electron configurator: electron-builder with the appx target."""

import logging
from pathlib import Path

from msstore_cli.artifacts import find_marker_path
from msstore_cli.configurators.base import ConfiguratorRegistry
from msstore_cli.configurators.node import NodeProjectConfigurator
from msstore_cli.exceptions import MSStoreError
from msstore_cli.manifests import electron as electron_manifest
from msstore_cli.models import AppIdentity, BuildArch, Capability, PackagedArtifact, ProjectType
from msstore_cli.utils.version import StoreVersion

logger = logging.getLogger(__name__)

ARCH_FLAGS = {
    BuildArch.X64: "--x64",
    BuildArch.X86: "--ia32",
    BuildArch.ARM64: "--arm64",
}


@ConfiguratorRegistry.register
class ElectronConfigurator(NodeProjectConfigurator):
    """package.json projects that do not depend on react-native."""

    project_type = ProjectType.ELECTRON
    priority = 50
    capabilities = frozenset({Capability.CONFIGURE, Capability.PACKAGE, Capability.PUBLISH})
    package_only_on_windows = True
    default_build_archs = (BuildArch.X64, BuildArch.ARM64)
    output_subdirectory = electron_manifest.DEFAULT_OUTPUT_DIRECTORY
    default_input_subdirectory = electron_manifest.DEFAULT_OUTPUT_DIRECTORY
    package_file_extensions = (".appx",)

    def can_configure(self, path_or_url: str) -> bool:
        return self.probe_react_native(path_or_url) is False

    def _package_json(self, path_or_url: str) -> Path:
        return self._root(path_or_url) / "package.json"

    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        package_json = self._package_json(path_or_url)
        self.install_dependency(package_json.parent, "electron-builder")
        electron_manifest.update_manifest(package_json, identity, version)

        console = self.context.console
        console.print(f"Electron project '{package_json}' is now configured to build to the Microsoft Store!")
        console.print(
            "For more information on building your Electron project to the Microsoft Store, see "
            "https://www.electron.build/configuration/appx#how-to-publish-your-electron-app-to-the-windows-app-store"
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
        package_json = self._package_json(path_or_url)
        root = package_json.parent
        tool = self.package_manager(root)

        if not self.run_install(root):
            raise MSStoreError(f"Failed to run '{tool} install'.")

        if version is not None:
            electron_manifest.set_version(package_json, version)

        if output is not None:
            self.context.console.print(
                "[yellow]The output option is not supported for Electron apps. "
                "The provided output directory will be ignored.[/yellow]"
            )
            logger.warning(
                "To customize the output folder, change build.directories.output in %s", package_json
            )

        arguments = ["electron-builder", "build", "-w=appx"]
        for arch in (BuildArch.X64, BuildArch.X86, BuildArch.ARM64):
            if arch in (archs or self.default_build_archs):
                arguments.append(ARCH_FLAGS[arch])

        if tool == "yarn":
            command, arguments = "yarn", ["run", *arguments]
        else:
            command = "npx"

        with self.context.err_console.status("Packaging 'msix'..."):
            result = self.run_tool(command, arguments, root, "Failed to generate msix package.")
        self.context.err_console.print("Store package built successfully!")

        package_file = find_marker_path(result.stdout, "target=AppX", "file=", root)
        return PackagedArtifact(output_directory=package_file.parent, files=(package_file,))

    def input_directory(self, path_or_url: str) -> Path:
        package_json = self._package_json(path_or_url)
        return package_json.parent / electron_manifest.get_output_directory(package_json)

    def get_app_id(self, path_or_url: str) -> str | None:
        return electron_manifest.get_app_id(self._package_json(path_or_url))
