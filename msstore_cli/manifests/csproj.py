"""MSBuild project file (.csproj / .vcxproj) helpers.

Properties are edited with regex substitution on the raw file, the same way
version fields are edited elsewhere, so comments and layout are kept.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from xml.sax.saxutils import escape, unescape

from msstore_cli.exceptions import ManifestError
from msstore_cli.manifests._io import ManifestText, read_manifest
from msstore_cli.models import AppIdentity
from msstore_cli.utils.version import StoreVersion, to_version_string

APP_ID_PROPERTY = "MSStoreCLIAppID"

PROPERTY_GROUP = re.compile(r"(<PropertyGroup\b[^>]*>)(.*?)(</PropertyGroup\s*>)", re.DOTALL)
CHILD_INDENT = re.compile(r"\n([ \t]+)<")
USE_MAUI = re.compile(r"<UseMaui\s*>\s*true\s*</UseMaui\s*>", re.IGNORECASE)


def _property_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"(<{name}(?:\s[^>]*)?>)(.*?)(</{name}\s*>)", re.DOTALL)


def _validate(manifest: ManifestText) -> None:
    try:
        ET.fromstring(manifest.text)
    except ET.ParseError as e:
        raise ManifestError("Invalid XML in project file", manifest.path, details=str(e)) from e


def get_property(path: Path, name: str) -> str | None:
    """Return the text of the first ``<name>`` property element, if any."""
    match = _property_pattern(name).search(read_manifest(path).text)
    return unescape(match.group(2).strip()) if match else None


def get_all_properties(path: Path, name: str) -> list[str]:
    """Return the text of every ``<name>`` element (conditional ones included)."""
    return [
        unescape(m.group(2).strip()) for m in _property_pattern(name).finditer(read_manifest(path).text)
    ]


def set_property_text(text: str, name: str, value: str, newline: str = "\n") -> str:
    """Set a property in project file text, inserting it if missing.

    New properties go at the end of the first PropertyGroup.

    Raises:
        ValueError: If the project has no PropertyGroup
    """
    escaped = escape(value)
    match = _property_pattern(name).search(text)
    if match:
        return text[: match.start(2)] + escaped + text[match.end(2):]

    group = PROPERTY_GROUP.search(text)
    if group is None:
        raise ValueError("No PropertyGroup element")

    inner = group.group(2)
    indent_match = CHILD_INDENT.search(inner)
    indent = indent_match.group(1) if indent_match else "    "
    stripped = inner.rstrip()
    new_inner = f"{stripped}{newline}{indent}<{name}>{escaped}</{name}>{inner[len(stripped):]}"
    return text[: group.start(2)] + new_inner + text[group.end(2):]


def set_properties(path: Path, properties: dict[str, str]) -> bool:
    """Set several properties on a project file.

    Returns:
        True if the file changed on disk

    Raises:
        ManifestError: If the file is not valid XML or has no PropertyGroup
    """
    manifest = read_manifest(path)
    _validate(manifest)
    text = manifest.text
    for name, value in properties.items():
        try:
            text = set_property_text(text, name, value, manifest.newline)
        except ValueError:
            raise ManifestError("No PropertyGroup element found in project file", path) from None
    manifest.text = text
    return manifest.save()


def update_maui_project(path: Path, identity: AppIdentity, version: StoreVersion | None = None) -> bool:
    """Write Store identity into the properties of a MAUI project file."""
    properties = {
        "ApplicationTitle": identity.primary_name,
        "ApplicationId": identity.package_identity_name,
    }
    if version is not None:
        properties["ApplicationDisplayVersion"] = to_version_string(version, ignore_revision=True)
    properties[APP_ID_PROPERTY] = identity.app_id
    return set_properties(path, properties)


def get_app_id(path: Path) -> str | None:
    if not path.exists():
        return None
    return get_property(path, APP_ID_PROPERTY) or None


def uses_maui(path: Path) -> bool:
    return bool(USE_MAUI.search(read_manifest(path).text))


def references_package(path: Path, package: str) -> bool:
    """Check for a ``<PackageReference Include="package">`` in the project."""
    pattern = re.compile(rf"<PackageReference\b[^>]*\bInclude\s*=\s*[\"']{re.escape(package)}[\"']", re.IGNORECASE)
    return bool(pattern.search(read_manifest(path).text))


def get_windows_target_framework(path: Path) -> str | None:
    """Return the first Windows target framework moniker of the project.

    MAUI projects usually list it in a conditional element such as
    ``$(TargetFrameworks);net8.0-windows10.0.19041.0``.
    """
    for name in ("TargetFrameworks", "TargetFramework"):
        for value in get_all_properties(path, name):
            for moniker in value.split(";"):
                moniker = moniker.strip()
                if "-windows" in moniker and not moniker.startswith("$("):
                    return moniker
    return None
