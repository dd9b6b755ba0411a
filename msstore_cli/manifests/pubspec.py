"""Flutter pubspec.yaml patcher.

Only the top-level ``msix_config`` block is touched, one line per key, so
comments and layout elsewhere in the file survive. PyYAML validates the
file before and after the edit.
"""

import json
import re
from pathlib import Path
from typing import Any

import yaml

from msstore_cli.exceptions import ManifestError
from msstore_cli.manifests._io import ManifestText, read_manifest
from msstore_cli.models import AppIdentity
from msstore_cli.utils.version import StoreVersion, to_version_string

BLOCK_KEY = "msix_config"
APP_ID_KEY = "msstore_appId"

BLOCK_START = re.compile(rf"^{BLOCK_KEY}:[ \t]*(#[^\r\n]*)?(?=\r?$)", re.MULTILINE)
# A top-level line (anything but blank, indented or comment lines) ends the block
TOP_LEVEL_LINE = re.compile(r"^[^\s#]", re.MULTILINE)
CHILD_INDENT = re.compile(r"^([ \t]+)\S", re.MULTILINE)


def _scalar(value: str | bool) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    # A JSON string is a valid double-quoted YAML scalar
    return json.dumps(value, ensure_ascii=False)


def load_yaml(manifest: ManifestText) -> dict[str, Any]:
    try:
        data = yaml.safe_load(manifest.text)
    except yaml.YAMLError as e:
        raise ManifestError(
            "Invalid YAML",
            manifest.path,
            details=str(e),
            fix_hint=f"Fix YAML syntax errors in {manifest.path.name}",
        ) from e
    if not isinstance(data, dict):
        raise ManifestError("Expected a mapping at the top level", manifest.path)
    return data


def set_block_values(text: str, values: dict[str, str | bool], newline: str = "\n") -> str:
    """Set ``key: value`` lines inside the msix_config block of a pubspec text.

    Existing keys are rewritten in place; missing keys are appended to the
    block. The block itself is appended to the file when absent.
    """
    start = BLOCK_START.search(text)
    if start is None:
        lines = [f"{BLOCK_KEY}:"] + [f"  {key}: {_scalar(value)}" for key, value in values.items()]
        prefix = text if text.endswith(("\n", "\r\n")) or not text else text + newline
        return prefix + newline.join(lines) + newline

    body_start = start.end()
    following = TOP_LEVEL_LINE.search(text, body_start + 1)
    body_end = following.start() if following else len(text)
    body = text[body_start:body_end]

    indent_match = CHILD_INDENT.search(body)
    indent = indent_match.group(1) if indent_match else "  "

    for key, value in values.items():
        line = f"{indent}{key}: {_scalar(value)}"
        pattern = re.compile(rf"^[ \t]+{re.escape(key)}:[^\r\n]*", re.MULTILINE)
        if pattern.search(body):
            body = pattern.sub(lambda _: line, body, count=1)
            continue
        # Append after the last non-blank line of the block
        content = body.rstrip("\r\n \t")
        rest = body[len(content):]
        spaces = len(rest) - len(rest.lstrip(" \t"))
        content, rest = content + rest[:spaces], rest[spaces:]
        if not rest.startswith(("\n", "\r\n")):
            rest = newline + rest
        body = content + newline + line + rest

    return text[:body_start] + body + text[body_end:]


def update_manifest(
    path: Path,
    identity: AppIdentity,
    version: StoreVersion | None = None,
) -> bool:
    """Write Store identity into the msix_config block of pubspec.yaml.

    Returns:
        True if the file changed on disk

    Raises:
        ManifestError: If the file is not valid YAML before or after patching
    """
    manifest = read_manifest(path)
    load_yaml(manifest)

    values: dict[str, str | bool] = {
        "display_name": identity.primary_name,
        "publisher_display_name": identity.publisher_display_name,
        "identity_name": identity.package_identity_name,
        "publisher": identity.publisher_name,
    }
    if version is not None:
        values["msix_version"] = to_version_string(version)
    values["store"] = True
    values[APP_ID_KEY] = identity.app_id

    manifest.text = set_block_values(manifest.text, values, manifest.newline)

    data = load_yaml(manifest)
    block = data.get(BLOCK_KEY)
    if not isinstance(block, dict) or block.get(APP_ID_KEY) != identity.app_id:
        raise ManifestError(f"Could not update the '{BLOCK_KEY}' section", path)

    return manifest.save()


def get_msix_config(path: Path) -> dict[str, Any]:
    block = load_yaml(read_manifest(path)).get(BLOCK_KEY)
    return block if isinstance(block, dict) else {}


def get_app_id(path: Path) -> str | None:
    if not path.exists():
        return None
    value = get_msix_config(path).get(APP_ID_KEY)
    return str(value) if value is not None else None


def has_dependency(path: Path, package: str) -> bool:
    """Check dependencies and dev_dependencies for a package."""
    data = load_yaml(read_manifest(path))
    for section in ("dependencies", "dev_dependencies"):
        deps = data.get(section)
        if isinstance(deps, dict) and package in deps:
            return True
    return False


def set_version(path: Path, version: StoreVersion) -> bool:
    """Set msix_config.msix_version (four-part)."""
    manifest = read_manifest(path)
    load_yaml(manifest)
    manifest.text = set_block_values(
        manifest.text, {"msix_version": to_version_string(version)}, manifest.newline
    )
    load_yaml(manifest)
    return manifest.save()
