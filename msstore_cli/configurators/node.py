"""Shared npm/yarn handling for Electron and React Native projects.

Projects with a yarn.lock use yarn, everything else npm. Installs and
"is this package installed" probes are cached in the invocation's
ProbeCache, since detection and configuration both need them.
"""

import logging
from pathlib import Path
from typing import ClassVar

from msstore_cli.configurators.base import FileProjectConfigurator
from msstore_cli.exceptions import MSStoreError

logger = logging.getLogger(__name__)


class NodeProjectConfigurator(FileProjectConfigurator):
    """Base for package.json based projects."""

    project_file_patterns: ClassVar[tuple[str, ...]] = ("package.json",)

    @staticmethod
    def is_yarn(root: Path) -> bool:
        return (root / "yarn.lock").is_file()

    def package_manager(self, root: Path) -> str:
        return "yarn" if self.is_yarn(root) else "npm"

    def run_install(self, root: Path) -> bool:
        """Run ``npm install`` / ``yarn install`` once per directory.

        Returns:
            True if the install succeeded (now or earlier in this invocation)
        """
        tool = self.package_manager(root)
        cache = self.context.cache
        if cache.was_installed(tool, root):
            logger.info("Using cache. '%s install' already executed for %s.", tool, root)
            return True

        err = self.context.err_console
        with err.status(f"Running '{tool} install'..."):
            result = self.context.runner.run(tool, ["install"], cwd=root, token=self.context.token)
        if not result.succeeded:
            err.print(f"[red]'{tool} install' failed.[/red]")
            logger.debug("%s\n%s", result.stdout, result.stderr)
            return False

        err.print(f"'{tool} install' ran successfully.")
        cache.mark_installed(tool, root)
        return True

    def package_exists(self, root: Path, package: str, use_cache: bool = True) -> bool:
        """Check whether a package is installed (``npm list`` / ``yarn why``)."""
        tool = self.package_manager(root)
        cache = self.context.cache
        if use_cache:
            cached = cache.get_package(tool, root, package)
            if cached is not None:
                logger.info("Using cache. %s probe for '%s' in %s: %s", tool, package, root, cached)
                return cached

        if tool == "yarn":
            arguments = ["why", package]
            markers = [f"─ {package}@", f'=> Found "{package}@']
        else:
            arguments = ["list", package]
            markers = [f"`-- {package}@"]

        with self.context.err_console.status(f"Checking if package '{package}' is already installed..."):
            result = self.context.runner.run(tool, arguments, cwd=root, token=self.context.token)

        installed = result.succeeded and any(marker in result.stdout for marker in markers)
        cache.set_package(tool, root, package, installed)
        return installed

    def install_dependency(self, root: Path, package: str) -> None:
        """Install ``package`` as a dev dependency unless it is already there.

        Raises:
            MSStoreError: If the install fails
        """
        tool = self.package_manager(root)
        if not self.run_install(root):
            raise MSStoreError(f"Failed to run '{tool} install'.")
        if self.package_exists(root, package):
            self.context.err_console.print(
                f"'{package}' package is already installed, no need to install it again."
            )
            return

        arguments = ["add", "--dev", package] if tool == "yarn" else ["install", "--save-dev", package]
        with self.context.err_console.status(f"Installing '{package}' package..."):
            result = self.context.runner.run(tool, arguments, cwd=root, token=self.context.token)
        if not result.succeeded:
            raise MSStoreError(
                f"Failed to install '{package}' package.",
                details=result.stderr.strip() or result.stdout.strip() or None,
            )
        self.context.cache.set_package(tool, root, package, True)
        self.context.err_console.print(f"'{package}' package installed successfully!")

    def probe_react_native(self, path_or_url: str) -> bool | None:
        """Install dependencies and probe for react-native.

        Returns:
            None if the directory is not a node project or install failed,
            otherwise whether react-native is installed
        """
        if not super().can_configure(path_or_url):
            return None
        root = self._root(path_or_url)
        if not self.run_install(root):
            return None
        return self.package_exists(root, "react-native")
