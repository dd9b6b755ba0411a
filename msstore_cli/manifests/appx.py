"""Package.appxmanifest reader/patcher for UWP, WinUI, MAUI and React Native.

The manifest is validated with ElementTree but patched by targeted text
substitution, so comments, attribute order and indentation are untouched.
Patched values:
- Identity Name, Publisher and (optionally) Version attributes
- Properties/DisplayName and Properties/PublisherDisplayName
- an ``<!-- msstore-cli-app-id: ... -->`` marker after Identity
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from xml.sax.saxutils import escape, unescape

from msstore_cli.exceptions import ManifestError
from msstore_cli.manifests._io import ManifestText, read_manifest
from msstore_cli.models import AppIdentity
from msstore_cli.utils.version import StoreVersion, to_version_string

logger = logging.getLogger(__name__)

IDENTITY_TAG = re.compile(r"<Identity\b[^>]*?/?>", re.DOTALL)
PROPERTIES_BLOCK = re.compile(r"(<Properties\s*>)(.*?)(</Properties\s*>)", re.DOTALL)
APP_ID_MARKER = re.compile(r"<!--\s*msstore-cli-app-id:\s*(?P<id>[^\s]*)\s*-->")

_ATTR_ESCAPES = {'"': "&quot;"}


def _attribute_pattern(name: str) -> re.Pattern[str]:
    return re.compile(rf"(\s{name}\s*=\s*)([\"'])(.*?)\2", re.DOTALL)


def set_attribute(tag: str, name: str, value: str) -> str:
    """Set an attribute on a start/empty tag, keeping its quote style.

    Adds the attribute before the closing bracket if missing.
    """
    pattern = _attribute_pattern(name)
    match = pattern.search(tag)
    if match:
        quote = match.group(2)
        escaped = escape(value, _ATTR_ESCAPES if quote == '"' else {"'": "&apos;"})
        return tag[: match.start(3)] + escaped + tag[match.end(3):]

    escaped = escape(value, _ATTR_ESCAPES)
    closing = "/>" if tag.rstrip().endswith("/>") else ">"
    body = tag.rstrip()[: -len(closing)].rstrip()
    return f'{body} {name}="{escaped}"{closing}'


def get_attribute(tag: str, name: str) -> str | None:
    match = _attribute_pattern(name).search(tag)
    return unescape(match.group(3), {"&quot;": '"', "&apos;": "'"}) if match else None


def _line_indent(text: str, position: int) -> str:
    line_start = text.rfind("\n", 0, position) + 1
    prefix = text[line_start:position]
    return prefix if prefix.strip() == "" else ""


def _set_element_text(block: str, name: str, value: str, newline: str, indent: str) -> str:
    pattern = re.compile(rf"(<{name}\s*>)(.*?)(</{name}\s*>)", re.DOTALL)
    escaped = escape(value)
    match = pattern.search(block)
    if match:
        return block[: match.start(2)] + escaped + block[match.end(2):]
    return f"{newline}{indent}<{name}>{escaped}</{name}>" + block


def _validate(manifest: ManifestText) -> None:
    try:
        ET.fromstring(manifest.text)
    except ET.ParseError as e:
        raise ManifestError("Invalid XML in manifest", manifest.path, details=str(e)) from e


def update_manifest(
    path: Path,
    identity: AppIdentity,
    version: StoreVersion | None = None,
    update_properties: bool = True,
) -> bool:
    """Write Store identity into an appx manifest.

    Args:
        path: Package.appxmanifest to patch
        identity: Store identity to write
        version: Package version to set, if any
        update_properties: Also set DisplayName/PublisherDisplayName
            (MAUI keeps its own placeholders there)

    Returns:
        True if the file changed on disk

    Raises:
        ManifestError: If the manifest is invalid or has no Identity element
    """
    manifest = read_manifest(path)
    _validate(manifest)
    text = manifest.text
    newline = manifest.newline

    identity_match = IDENTITY_TAG.search(text)
    if not identity_match:
        raise ManifestError("No Identity element found in manifest", path)

    tag = identity_match.group(0)
    tag = set_attribute(tag, "Name", identity.package_identity_name)
    tag = set_attribute(tag, "Publisher", identity.publisher_name)
    if version is not None:
        tag = set_attribute(tag, "Version", to_version_string(version))
    identity_indent = _line_indent(text, identity_match.start())
    text = text[: identity_match.start()] + tag + text[identity_match.end():]
    identity_end = identity_match.start() + len(tag)

    marker = f"<!-- msstore-cli-app-id: {identity.app_id} -->"
    marker_match = APP_ID_MARKER.search(text)
    if marker_match:
        text = text[: marker_match.start()] + marker + text[marker_match.end():]
    else:
        text = text[:identity_end] + f"{newline}{identity_indent}{marker}" + text[identity_end:]

    if update_properties:
        properties_match = PROPERTIES_BLOCK.search(text)
        if not properties_match:
            raise ManifestError("No Properties element found in manifest", path)
        inner = properties_match.group(2)
        child_indent = identity_indent * 2 if identity_indent else "    "
        inner = _set_element_text(
            inner, "PublisherDisplayName", identity.publisher_display_name, newline, child_indent
        )
        inner = _set_element_text(inner, "DisplayName", identity.primary_name, newline, child_indent)
        text = text[: properties_match.start(2)] + inner + text[properties_match.end(2):]

    manifest.text = text
    changed = manifest.save()
    logger.debug("Appx manifest %s %s", path, "updated" if changed else "already up to date")
    return changed


def read_identity(path: Path) -> dict[str, str | None]:
    """Read Identity Name, Publisher and Version from a manifest."""
    manifest = read_manifest(path)
    _validate(manifest)
    match = IDENTITY_TAG.search(manifest.text)
    if not match:
        raise ManifestError("No Identity element found in manifest", path)
    tag = match.group(0)
    return {
        "name": get_attribute(tag, "Name"),
        "publisher": get_attribute(tag, "Publisher"),
        "version": get_attribute(tag, "Version"),
    }


def get_app_id(path: Path) -> str | None:
    """Return the Store app id written by a previous configure, if any."""
    if not path.exists():
        return None
    match = APP_ID_MARKER.search(read_manifest(path).text)
    return match.group("id") if match else None


def set_version(path: Path, version: StoreVersion) -> bool:
    """Set the Identity Version attribute only."""
    manifest = read_manifest(path)
    _validate(manifest)
    match = IDENTITY_TAG.search(manifest.text)
    if not match:
        raise ManifestError("No Identity element found in manifest", path)
    tag = set_attribute(match.group(0), "Version", to_version_string(version))
    manifest.text = manifest.text[: match.start()] + tag + manifest.text[match.end():]
    return manifest.save()


def find_manifest(directory: Path, recursive: bool = False) -> Path | None:
    """Locate a Package.appxmanifest in a directory."""
    if not directory.is_dir():
        return None
    if not recursive:
        candidate = directory / "Package.appxmanifest"
        return candidate if candidate.is_file() else None
    matches = sorted(
        (p for p in directory.rglob("Package.appxmanifest") if "node_modules" not in p.parts),
        key=lambda p: (len(p.parts), str(p)),
    )
    return matches[0] if matches else None
