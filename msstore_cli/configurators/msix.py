"""Already built packages (.msix, .appx, bundles and upload files).

There is nothing to configure or build; the file is published as is. When
no app id is given, the package identity name is read from the manifest
inside the archive and matched against the account's applications.
"""

import io
import logging
import xml.etree.ElementTree as ET
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

from msstore_cli.configurators.base import ConfiguratorRegistry, ProjectConfigurator, is_url
from msstore_cli.exceptions import ManifestError
from msstore_cli.models import AppIdentity, Capability, ProjectDescriptor, ProjectType
from msstore_cli.utils.version import StoreVersion

if TYPE_CHECKING:
    from msstore_cli.store.api import StoreAPI

logger = logging.getLogger(__name__)

PACKAGE_EXTENSIONS = (".msix", ".msixbundle", ".appx", ".appxbundle", ".appxupload", ".msixupload")
MANIFEST_NAMES = ("AppxManifest.xml", "AppxMetadata/AppxBundleManifest.xml")
MAX_NESTING = 2


def _identity_name(manifest_xml: bytes) -> str | None:
    root = ET.fromstring(manifest_xml)
    for element in root.iter():
        if element.tag.rsplit("}", 1)[-1] == "Identity":
            return element.get("Name")
    return None


def _identity_from_archive(archive: zipfile.ZipFile, depth: int = 0) -> str | None:
    names = archive.namelist()
    for manifest_name in MANIFEST_NAMES:
        if manifest_name in names:
            return _identity_name(archive.read(manifest_name))

    if depth >= MAX_NESTING:
        return None
    for name in names:
        if name.lower().endswith(PACKAGE_EXTENSIONS):
            with zipfile.ZipFile(io.BytesIO(archive.read(name))) as nested:
                identity = _identity_from_archive(nested, depth + 1)
            if identity:
                return identity
    return None


def read_package_identity_name(package: Path) -> str | None:
    """Return Identity/@Name from the manifest inside a package file.

    Raises:
        ManifestError: If the file is not a readable package archive
    """
    try:
        with zipfile.ZipFile(package) as archive:
            return _identity_from_archive(archive)
    except (zipfile.BadZipFile, ET.ParseError) as e:
        raise ManifestError("Could not read the package manifest", package, details=str(e)) from e
    except OSError as e:
        raise ManifestError("Could not open package", package, details=str(e)) from e


@ConfiguratorRegistry.register
class MSIXConfigurator(ProjectConfigurator):
    """A single package file passed directly."""

    project_type = ProjectType.RAW_MSIX
    priority = 20
    capabilities = frozenset({Capability.CONFIGURE, Capability.PUBLISH})
    package_file_extensions = PACKAGE_EXTENSIONS

    def can_configure(self, path_or_url: str) -> bool:
        if is_url(path_or_url):
            return False
        path = Path(path_or_url)
        return path.is_file() and path.name.lower().endswith(PACKAGE_EXTENSIONS)

    def get_info(self, path_or_url: str) -> ProjectDescriptor:
        path = Path(path_or_url)
        return ProjectDescriptor(
            path_or_url=path_or_url,
            project_type=self.project_type,
            root=path.parent,
            project_file=path,
        )

    def configure(
        self,
        path_or_url: str,
        identity: AppIdentity,
        version: StoreVersion | None = None,
        output: Path | None = None,
    ) -> Path | None:
        self.context.console.print(
            f"'{Path(path_or_url).name}' is already packaged, there is nothing to configure."
        )
        return None

    def input_directory(self, path_or_url: str) -> Path:
        return Path(path_or_url).parent

    def find_package_files(self, path_or_url: str, input_dir: Path | None = None) -> list[Path]:
        return [Path(path_or_url)]

    def resolve_app_id(self, path_or_url: str, api: "StoreAPI") -> str | None:
        identity_name = read_package_identity_name(Path(path_or_url))
        if not identity_name:
            return None
        logger.debug("Package identity name: %s", identity_name)
        for application in api.get_applications():
            if application.package_identity_name == identity_name:
                return application.id
        return None
