"""Unit tests for the Flutter pubspec.yaml msix_config patcher."""

from dataclasses import replace
from pathlib import Path

import pytest
import yaml
from conftest import APP_ID, PUBSPEC

from msstore_cli.exceptions import ManifestError
from msstore_cli.manifests import pubspec
from msstore_cli.models import AppIdentity
from msstore_cli.utils.version import StoreVersion


@pytest.fixture
def pubspec_file(tmp_path: Path) -> Path:
    path = tmp_path / "pubspec.yaml"
    path.write_text(PUBSPEC)
    return path


class TestUpdateManifest:
    """Tests for pubspec.update_manifest()."""

    def test_appends_msix_config_block(self, pubspec_file: Path, identity: AppIdentity) -> None:
        changed = pubspec.update_manifest(pubspec_file, identity)

        assert changed is True
        block = yaml.safe_load(pubspec_file.read_text())["msix_config"]
        assert block == {
            "display_name": "Test App",
            "publisher_display_name": "Contoso Software",
            "identity_name": "Contoso.TestApp",
            "publisher": identity.publisher_name,
            "store": True,
            "msstore_appId": APP_ID,
        }

    def test_keeps_comments_and_other_sections(self, pubspec_file: Path, identity: AppIdentity) -> None:
        pubspec.update_manifest(pubspec_file, identity)

        text = pubspec_file.read_text()
        assert text.startswith(PUBSPEC)
        assert "# Keep this comment" in text

    def test_second_run_is_byte_identical(self, pubspec_file: Path, identity: AppIdentity) -> None:
        pubspec.update_manifest(pubspec_file, identity, StoreVersion(1, 2, 3))
        first = pubspec_file.read_bytes()

        assert pubspec.update_manifest(pubspec_file, identity, StoreVersion(1, 2, 3)) is False
        assert pubspec_file.read_bytes() == first

    def test_crlf_second_run_is_byte_identical(self, tmp_path: Path, identity: AppIdentity) -> None:
        path = tmp_path / "pubspec.yaml"
        path.write_bytes(PUBSPEC.replace("\n", "\r\n").encode("utf-8"))

        pubspec.update_manifest(path, identity)
        first = path.read_bytes()

        assert pubspec.update_manifest(path, identity) is False
        assert path.read_bytes() == first
        assert first.count(b"msix_config:") == 1
        assert b"\r\r" not in first
        assert b"\n" not in first.replace(b"\r\n", b"")

    def test_crlf_empty_block(self) -> None:
        text = "name: app\r\nmsix_config:\r\nflutter:\r\n"

        once = pubspec.set_block_values(text, {"store": True}, newline="\r\n")
        twice = pubspec.set_block_values(once, {"store": True}, newline="\r\n")

        assert once == "name: app\r\nmsix_config:\r\n  store: true\r\nflutter:\r\n"
        assert twice == once

    def test_version_is_four_part(self, pubspec_file: Path, identity: AppIdentity) -> None:
        pubspec.update_manifest(pubspec_file, identity, StoreVersion(1, 2, 3))
        assert pubspec.get_msix_config(pubspec_file)["msix_version"] == "1.2.3.0"

    def test_existing_block_updated_in_place(self, tmp_path: Path, identity: AppIdentity) -> None:
        path = tmp_path / "pubspec.yaml"
        path.write_text(
            "name: app\n"
            "msix_config:\n"
            "    display_name: Old Name\n"
            "    logo_path: assets/logo.png  \n"
            "\n"
            "flutter:\n"
            "  uses-material-design: true\n"
        )

        pubspec.update_manifest(path, identity)

        data = yaml.safe_load(path.read_text())
        assert data["msix_config"]["display_name"] == "Test App"
        assert data["msix_config"]["logo_path"] == "assets/logo.png"
        assert data["msix_config"]["msstore_appId"] == APP_ID
        assert data["flutter"] == {"uses-material-design": True}
        assert '    display_name: "Test App"\n' in path.read_text()

    def test_quotes_values_needing_it(self, pubspec_file: Path, identity: AppIdentity) -> None:
        """Publisher subjects contain '=' and ',' which must stay one scalar."""
        subject = "CN=Contoso, O=Contoso Corp, C=US"
        pubspec.update_manifest(pubspec_file, replace(identity, publisher_name=subject))

        assert pubspec.get_msix_config(pubspec_file)["publisher"] == subject

    def test_invalid_yaml_raises(self, tmp_path: Path, identity: AppIdentity) -> None:
        path = tmp_path / "pubspec.yaml"
        path.write_text("name: [unclosed\n")

        with pytest.raises(ManifestError) as exc_info:
            pubspec.update_manifest(path, identity)
        assert "Invalid YAML" in str(exc_info.value)


class TestPubspecHelpers:
    """Tests for get_app_id(), has_dependency() and set_version()."""

    def test_get_app_id(self, pubspec_file: Path, identity: AppIdentity) -> None:
        assert pubspec.get_app_id(pubspec_file) is None
        pubspec.update_manifest(pubspec_file, identity)
        assert pubspec.get_app_id(pubspec_file) == APP_ID

    def test_has_dependency(self, pubspec_file: Path) -> None:
        assert pubspec.has_dependency(pubspec_file, "msix")
        assert pubspec.has_dependency(pubspec_file, "flutter")
        assert not pubspec.has_dependency(pubspec_file, "provider")

    def test_set_version(self, pubspec_file: Path, identity: AppIdentity) -> None:
        pubspec.update_manifest(pubspec_file, identity)
        pubspec.set_version(pubspec_file, StoreVersion(4, 0, 1))

        assert pubspec.get_msix_config(pubspec_file)["msix_version"] == "4.0.1.0"
