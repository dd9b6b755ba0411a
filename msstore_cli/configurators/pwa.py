"""Progressive Web App configurator.

PWAs are packaged by PWABuilder, so configuring one only means showing the
Store identity values to enter there.
"""

from pathlib import Path

from rich.table import Table

from msstore_cli.configurators.base import ConfiguratorRegistry, ProjectConfigurator, is_url
from msstore_cli.models import AppIdentity, Capability, ProjectDescriptor, ProjectType
from msstore_cli.utils.version import StoreVersion

PWABUILDER_URL = "https://www.pwabuilder.com"


@ConfiguratorRegistry.register
class PWAConfigurator(ProjectConfigurator):
    """Public http(s) URLs."""

    project_type = ProjectType.PWA
    priority = 10
    capabilities = frozenset({Capability.CONFIGURE})

    def can_configure(self, path_or_url: str) -> bool:
        return is_url(path_or_url)

    def get_info(self, path_or_url: str) -> ProjectDescriptor:
        return ProjectDescriptor(path_or_url=path_or_url, project_type=self.project_type)

    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        table = Table(title="Store identity for your PWA", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Package ID", identity.package_identity_name)
        table.add_row("Publisher ID", identity.publisher_name)
        table.add_row("Publisher display name", identity.publisher_display_name)
        table.add_row("App name", identity.primary_name)
        table.add_row("Store app ID", identity.app_id)

        console = self.context.console
        console.print(table)
        console.print(
            f"Use these values to generate the Windows package of '{path_or_url}' at {PWABUILDER_URL}."
        )
        return None
