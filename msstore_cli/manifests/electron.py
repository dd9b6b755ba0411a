"""Electron package.json / electron-builder.json patcher.

Adds the ``appx`` Windows target and the ``appx`` identity section that
electron-builder reads, and records the Store app id in package.json.
Key order, indentation and the trailing newline of the original file are
preserved.
"""

import json
import re
from pathlib import Path
from typing import Any

from msstore_cli.exceptions import ManifestError
from msstore_cli.manifests._io import ManifestText, read_manifest
from msstore_cli.models import AppIdentity
from msstore_cli.utils.version import StoreVersion, to_version_string

APP_ID_KEY = "msstoreCliAppID"
BUILDER_CONFIG_FILE = "electron-builder.json"
DEFAULT_OUTPUT_DIRECTORY = "dist"

INDENT_PATTERN = re.compile(r"^([ \t]+)\S", re.MULTILINE)


def _detect_indent(text: str) -> str | int:
    match = INDENT_PATTERN.search(text)
    return match.group(1) if match else 2


def load_json(manifest: ManifestText) -> dict[str, Any]:
    try:
        data = json.loads(manifest.text)
    except json.JSONDecodeError as e:
        raise ManifestError(
            "Invalid JSON",
            manifest.path,
            details=str(e),
            fix_hint=f"Fix JSON syntax errors in {manifest.path.name}",
        ) from e
    if not isinstance(data, dict):
        raise ManifestError("Expected a JSON object at the top level", manifest.path)
    return data


def save_json(manifest: ManifestText, data: dict[str, Any]) -> bool:
    """Serialise data with the file's own indentation and write if changed.

    The whole document is re-serialised, so a write normalises the layout
    of untouched parts too (compact arrays become one item per line). A
    document whose content did not change is never rewritten, and files
    that already use ``\\uXXXX`` escapes keep non-ASCII characters escaped.
    """
    if json.loads(manifest.text) == data:
        return False
    text = json.dumps(
        data, indent=_detect_indent(manifest.text), ensure_ascii="\\u" in manifest.text
    )
    if manifest.text.endswith("\n"):
        text += "\n"
    text = text.replace("\n", manifest.newline) if manifest.newline == "\r\n" else text
    manifest.text = text
    return manifest.save()


def _section(parent: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
    value = parent.setdefault(key, {})
    if not isinstance(value, dict):
        raise ManifestError(f"'{key}' must be an object", path)
    return value


def _is_appx_target(target: Any) -> bool:
    if isinstance(target, dict):
        return target.get("target") == "appx"
    return target == "appx"


def apply_build_config(build: dict[str, Any], identity: AppIdentity, path: Path) -> None:
    """Mutate an electron-builder config object in place."""
    win = _section(build, "win", path)
    targets = win.get("target")
    if isinstance(targets, list):
        if not any(_is_appx_target(t) for t in targets):
            targets.append("appx")
    elif isinstance(targets, (str, dict)):
        if not _is_appx_target(targets):
            win["target"] = ["appx", targets]
    else:
        win["target"] = ["appx"]

    appx = _section(build, "appx", path)
    appx["publisherDisplayName"] = identity.publisher_display_name
    appx["displayName"] = identity.primary_name
    appx["publisher"] = identity.publisher_name
    appx["identityName"] = identity.package_identity_name
    appx["applicationId"] = "App"


def update_manifest(
    package_json: Path,
    identity: AppIdentity,
    version: StoreVersion | None = None,
) -> bool:
    """Write Store identity into an Electron project.

    The electron-builder config goes to ``electron-builder.json`` when the
    project has one, otherwise to the ``build`` section of package.json.

    Returns:
        True if any file changed on disk

    Raises:
        ManifestError: If a file is not valid JSON or has unexpected shapes
    """
    manifest = read_manifest(package_json)
    data = load_json(manifest)
    changed = False

    builder_config = package_json.parent / BUILDER_CONFIG_FILE
    if builder_config.exists():
        config_manifest = read_manifest(builder_config)
        config_data = load_json(config_manifest)
        apply_build_config(config_data, identity, builder_config)
        changed |= save_json(config_manifest, config_data)
    else:
        apply_build_config(_section(data, "build", package_json), identity, package_json)

    data[APP_ID_KEY] = identity.app_id
    if version is not None:
        data["version"] = to_version_string(version, ignore_revision=True)

    changed |= save_json(manifest, data)
    return changed


def set_version(package_json: Path, version: StoreVersion) -> bool:
    """Set the package.json version (three-part) if it differs."""
    manifest = read_manifest(package_json)
    data = load_json(manifest)
    version_str = to_version_string(version, ignore_revision=True)
    if data.get("version") == version_str:
        return False
    data["version"] = version_str
    return save_json(manifest, data)


def _build_section(package_json: Path) -> dict[str, Any]:
    builder_config = package_json.parent / BUILDER_CONFIG_FILE
    if builder_config.exists():
        return load_json(read_manifest(builder_config))
    build = load_json(read_manifest(package_json)).get("build")
    return build if isinstance(build, dict) else {}


def get_app_id(package_json: Path) -> str | None:
    if not package_json.exists():
        return None
    value = load_json(read_manifest(package_json)).get(APP_ID_KEY)
    return value if isinstance(value, str) else None


def _directory_option(package_json: Path, key: str, default: str) -> str:
    directories = _build_section(package_json).get("directories")
    if isinstance(directories, dict) and isinstance(directories.get(key), str):
        return directories[key]
    return default


def get_output_directory(package_json: Path) -> str:
    """electron-builder output directory (``build.directories.output``)."""
    return _directory_option(package_json, "output", DEFAULT_OUTPUT_DIRECTORY)
