"""MSBuild invocation shared by the UWP, WinUI and React Native configurators.

MSBuild is located with vswhere and always run from the project directory
so it picks the project (or solution) there.
"""

import ntpath
import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from msstore_cli.artifacts import find_arrow_paths
from msstore_cli.exceptions import CommandNotFoundError
from msstore_cli.models import BuildArch
from msstore_cli.utils.shell import strip_ansi

if TYPE_CHECKING:
    from msstore_cli.configurators.base import ProjectConfigurator

VSWHERE_ARGUMENTS = [
    "-latest",
    "-requires",
    "Microsoft.Component.MSBuild",
    "-find",
    r"MSBuild\**\Bin\MSBuild.exe",
]

STORE_UPLOAD_EXTENSIONS = (".msixupload", ".appxupload")
MSIX_EXTENSIONS = (".msix",)


def vswhere_path() -> str:
    program_files = os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)")
    return ntpath.join(program_files, "Microsoft Visual Studio", "Installer", "vswhere.exe")


def find_msbuild(configurator: "ProjectConfigurator") -> str:
    """Return the MSBuild.exe path reported by vswhere (cached per invocation).

    Raises:
        CommandNotFoundError: If vswhere reports no MSBuild installation
    """
    cache = configurator.context.cache
    cached = cache.get_tool_path("msbuild")
    if cached:
        return cached

    result = configurator.run_tool(
        vswhere_path(), VSWHERE_ARGUMENTS, None, "Failed to locate MSBuild with vswhere."
    )
    paths = [line.strip() for line in strip_ansi(result.stdout).splitlines() if line.strip()]
    if not paths:
        raise CommandNotFoundError(
            "MSBuild.exe",
            details="vswhere did not report a Visual Studio installation with MSBuild",
        )
    cache.set_tool_path("msbuild", paths[0])
    return paths[0]


def windows_directory(path: Path) -> str:
    """Directory path with the trailing backslash MSBuild properties expect."""
    return str(path).rstrip("\\/") + "\\"


def restore(configurator: "ProjectConfigurator", msbuild: str, cwd: Path) -> None:
    configurator.run_tool(msbuild, ["/t:restore"], cwd, "Failed to restore the project packages.")


def _bundle_platforms(archs: Sequence[BuildArch]) -> str:
    names = "|".join(arch.msbuild_name for arch in archs)
    return f'"{names}"' if len(archs) > 1 else names


def store_upload_properties(
    platform: BuildArch,
    bundle_archs: Sequence[BuildArch],
    output: Path | None = None,
    test_directory: Path | None = None,
) -> str:
    """Build the ``/p:`` argument for a Store upload build."""
    properties = [
        "Configuration=Release",
        "AppxBundle=Always",
        f"Platform={platform.msbuild_name}",
        f"AppxBundlePlatforms={_bundle_platforms(bundle_archs)}",
    ]
    if output is not None:
        properties.append(f"AppxPackageDir={windows_directory(output)}")
    properties.append("UapAppxPackageBuildMode=StoreUpload")
    if test_directory is not None:
        properties.append(f"AppxPackageTestDir={windows_directory(test_directory)}")
    return "/p:" + ";".join(properties)


def build_bundle(
    configurator: "ProjectConfigurator",
    cwd: Path,
    archs: Sequence[BuildArch],
    output: Path | None = None,
) -> list[Path]:
    """Restore and build one bundle for every architecture (UWP style).

    Returns:
        The .msixupload/.appxupload files named in the build output
    """
    msbuild = find_msbuild(configurator)
    restore(configurator, msbuild, cwd)

    platform = BuildArch.X64 if BuildArch.X64 in archs else archs[0]
    result = configurator.run_tool(
        msbuild,
        [store_upload_properties(platform, archs, output)],
        cwd,
        "Failed to build the Store package with MSBuild.",
    )
    return find_arrow_paths(result.stdout, STORE_UPLOAD_EXTENSIONS, cwd)


def build_per_arch(
    configurator: "ProjectConfigurator",
    cwd: Path,
    archs: Sequence[BuildArch],
    package_name: str,
    version: str,
    output: Path | None = None,
) -> list[Path]:
    """Restore once, then build a separate package per architecture (WinUI style).

    Returns:
        The .msix files named in the build outputs
    """
    msbuild = find_msbuild(configurator)
    restore(configurator, msbuild, cwd)

    files: list[Path] = []
    for arch in archs:
        test_directory = None
        if output is not None:
            test_directory = output / f"{package_name}_{version}_{arch.msbuild_name}_Test"
        result = configurator.run_tool(
            msbuild,
            [store_upload_properties(arch, [arch], output, test_directory)],
            cwd,
            f"Failed to build the {arch.value} package with MSBuild.",
        )
        files.extend(p for p in find_arrow_paths(result.stdout, MSIX_EXTENSIONS, cwd) if p not in files)
    return files
