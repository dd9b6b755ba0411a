"""Byte-faithful text I/O shared by the manifest patchers.

Manifests are edited as text so unrelated content keeps its exact
formatting. Line endings and a UTF-8 BOM are preserved, and files are only
rewritten when their content actually changes.
"""

import codecs
from pathlib import Path

from msstore_cli.exceptions import ManifestError


class ManifestText:
    """Text of a manifest file plus what is needed to write it back unchanged."""

    def __init__(self, path: Path, text: str, bom: bool, original: bytes) -> None:
        self.path = path
        self.text = text
        self.bom = bom
        self._original = original

    @property
    def newline(self) -> str:
        return "\r\n" if "\r\n" in self.text else "\n"

    def encode(self) -> bytes:
        data = self.text.encode("utf-8")
        return codecs.BOM_UTF8 + data if self.bom else data

    def save(self) -> bool:
        """Write the text back if it differs from what was read.

        Returns:
            True if the file was rewritten
        """
        data = self.encode()
        if data == self._original:
            return False
        try:
            self.path.write_bytes(data)
        except OSError as e:
            raise ManifestError("Failed to write manifest", self.path, details=str(e)) from e
        self._original = data
        return True


def read_manifest(path: Path) -> ManifestText:
    """Read a manifest as UTF-8 text.

    Raises:
        ManifestError: If the file is missing or not valid UTF-8
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        raise ManifestError("Manifest file not found", path) from None
    except OSError as e:
        raise ManifestError("Failed to read manifest", path, details=str(e)) from e

    bom = raw.startswith(codecs.BOM_UTF8)
    body = raw[len(codecs.BOM_UTF8):] if bom else raw
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestError("Manifest is not valid UTF-8", path, details=str(e)) from e

    return ManifestText(path, text, bom, raw)
