"""Pytest fixtures for msstore CLI tests.

Provides common fixtures for:
- A scripted command runner that never launches real processes
- Command contexts writing to in-memory consoles
- A fake Store API with one application
- Project directories for every supported project type
"""

import io
import json
import os
import zipfile
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml
from rich.console import Console

from msstore_cli.context import CommandContext
from msstore_cli.exceptions import StoreAPIError
from msstore_cli.models import AppIdentity
from msstore_cli.store.models import (
    ApplicationSubmission,
    DevCenterApplication,
    Flight,
    SubmissionPackage,
    SubmissionReference,
    SubmissionStatus,
)
from msstore_cli.utils.shell import CommandResult, split_arguments

APP_ID = "9PN3ABCDEFGA"
SUBMISSION_ID = "1152921504621243649"
PUBLISHER_DISPLAY_NAME = "Contoso Software"

UWP_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<Package
  xmlns="http://schemas.microsoft.com/appx/manifest/foundation/windows10"
  xmlns:uap="http://schemas.microsoft.com/appx/manifest/uap/windows10"
  IgnorableNamespaces="uap">

  <!-- Identity is replaced with the Store values -->
  <Identity
    Name="00000000-1111-2222-3333-444444444444"
    Publisher="CN=Developer"
    Version="1.0.0.0" />

  <Properties>
    <DisplayName>UWPProject</DisplayName>
    <PublisherDisplayName>Developer</PublisherDisplayName>
    <Logo>Assets\\StoreLogo.png</Logo>
  </Properties>

  <Applications>
    <Application Id="App" Executable="$targetnametoken$.exe" EntryPoint="UWPProject.App" />
  </Applications>
</Package>
"""

UWP_CSPROJ = """<?xml version="1.0" encoding="utf-8"?>
<Project ToolsVersion="15.0" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <PropertyGroup>
    <OutputType>AppContainerExe</OutputType>
    <RootNamespace>UWPProject</RootNamespace>
  </PropertyGroup>
</Project>
"""

WINUI_CSPROJ = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <OutputType>WinExe</OutputType>
    <TargetFramework>net8.0-windows10.0.19041.0</TargetFramework>
    <UseWinUI>true</UseWinUI>
  </PropertyGroup>
  <ItemGroup>
    <PackageReference Include="Microsoft.WindowsAppSDK" Version="1.5.240311000" />
  </ItemGroup>
</Project>
"""

MAUI_CSPROJ = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFrameworks>net8.0-android;net8.0-ios</TargetFrameworks>
    <TargetFrameworks Condition="$([MSBuild]::IsOSPlatform('windows'))">$(TargetFrameworks);net8.0-windows10.0.19041.0</TargetFrameworks>
    <OutputType>Exe</OutputType>
    <UseMaui>true</UseMaui>
    <ApplicationTitle>MauiProject</ApplicationTitle>
    <ApplicationId>com.companyname.mauiproject</ApplicationId>
    <ApplicationDisplayVersion>1.0</ApplicationDisplayVersion>
  </PropertyGroup>
</Project>
"""

MAUI_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<Package xmlns="http://schemas.microsoft.com/appx/manifest/foundation/windows10">
  <Identity Name="maui-package-name-placeholder" Publisher="CN=User Name" Version="0.0.0.0" />
  <Properties>
    <DisplayName>$placeholder$</DisplayName>
    <PublisherDisplayName>User Name</PublisherDisplayName>
  </Properties>
</Package>
"""

PUBSPEC = """name: flutter_project
description: A new Flutter project.

# Keep this comment
version: 1.0.0+1

environment:
  sdk: '>=3.0.0 <4.0.0'

dependencies:
  flutter:
    sdk: flutter

dev_dependencies:
  flutter_test:
    sdk: flutter
  msix: ^3.16.7

flutter:
  uses-material-design: true
"""


class FakeRunner:
    """Command runner returning scripted results and recording every call.

    Responses are matched by command and, when given, the exact argument
    list. The most recently added matching response wins; unmatched calls
    succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[CommandResult] = []
        self._responses: list[tuple[str, tuple[str, ...] | None, int, str, str]] = []

    def add(
        self,
        command: str,
        arguments: list[str] | None = None,
        stdout: str = "",
        stderr: str = "",
        exit_code: int = 0,
    ) -> None:
        args = tuple(arguments) if arguments is not None else None
        self._responses.append((command, args, exit_code, stdout, stderr))

    def run(self, command, arguments=None, cwd=None, token=None, env=None) -> CommandResult:
        args = tuple(split_arguments(arguments))
        exit_code, stdout, stderr = 0, "", ""
        for expected_command, expected_args, code, out, err in reversed(self._responses):
            if expected_command == command and expected_args in (None, args):
                exit_code, stdout, stderr = code, out, err
                break
        result = CommandResult(command, args, cwd, exit_code, stdout, stderr)
        self.calls.append(result)
        return result

    def commands(self) -> list[str]:
        return [call.command_line for call in self.calls]

    def calls_to(self, command: str) -> list[CommandResult]:
        return [call for call in self.calls if call.command == command]


class FakeStoreAPI:
    """In-memory stand-in for StoreAPI with one application."""

    def __init__(self, applications: list[DevCenterApplication] | None = None) -> None:
        self.applications = applications if applications is not None else [make_application()]
        self.submissions: dict[str, ApplicationSubmission] = {}
        self.flights: dict[str, Flight] = {}
        self.updated: list[ApplicationSubmission] = []
        self.uploaded: list[list[str]] = []
        self.committed: list[tuple[str, str, str | None]] = []
        self.deleted_submissions: list[str] = []
        self.deleted_flights: list[str] = []
        self.statuses: list[SubmissionStatus] = []
        self.commit_status = SubmissionStatus(status="CommitStarted")
        self.authenticated = False

    def authenticate(self) -> str:
        self.authenticated = True
        return "token"

    def get_applications(self) -> list[DevCenterApplication]:
        return list(self.applications)

    def get_application(self, app_id: str) -> DevCenterApplication:
        for application in self.applications:
            if application.id == app_id:
                return application
        raise StoreAPIError(f"Store API request failed: GET applications/{app_id}", status=404)

    def get_flights(self, app_id: str) -> list[Flight]:
        return list(self.flights.values())

    def get_flight(self, app_id: str, flight_id: str) -> Flight:
        return self.flights[flight_id]

    def delete_flight(self, app_id: str, flight_id: str) -> None:
        self.deleted_flights.append(flight_id)

    def get_submission(self, app_id: str, submission_id: str, flight_id: str | None = None) -> ApplicationSubmission:
        return self.submissions[submission_id]

    def create_submission(self, app_id: str, flight_id: str | None = None) -> ApplicationSubmission:
        submission = ApplicationSubmission(
            id=SUBMISSION_ID,
            flight_id=flight_id,
            status="PendingCommit",
            file_upload_url="https://example.blob.core.windows.net/upload?sig=a+b",
        )
        if flight_id:
            submission.flight_packages = [
                SubmissionPackage(file_name="old.msix", file_status="Uploaded")
            ]
        else:
            submission.application_packages = [
                SubmissionPackage(file_name="old.msixupload", file_status="Uploaded")
            ]
        self.submissions[SUBMISSION_ID] = submission
        return submission

    def update_submission(
        self, app_id: str, submission: ApplicationSubmission, flight_id: str | None = None
    ) -> ApplicationSubmission:
        self.updated.append(submission)
        self.submissions[submission.id or ""] = submission
        return submission

    def delete_submission(self, app_id: str, submission_id: str, flight_id: str | None = None) -> None:
        self.deleted_submissions.append(submission_id)

    def commit_submission(self, app_id: str, submission_id: str, flight_id: str | None = None) -> SubmissionStatus:
        self.committed.append((app_id, submission_id, flight_id))
        return self.commit_status

    def get_submission_status(
        self, app_id: str, submission_id: str, flight_id: str | None = None
    ) -> SubmissionStatus:
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0] if self.statuses else SubmissionStatus(status="PreProcessing")

    def upload_package_archive(self, upload_url: str, archive: Path) -> None:
        with zipfile.ZipFile(archive) as zf:
            self.uploaded.append(zf.namelist())


def make_application(**overrides: object) -> DevCenterApplication:
    data: dict[str, object] = {
        "id": APP_ID,
        "primaryName": "Test App",
        "packageFamilyName": "Contoso.TestApp_8wekyb3d8bbwe",
        "packageIdentityName": "Contoso.TestApp",
        "publisherName": "CN=ABCDEF12-3456-7890-ABCD-EF1234567890",
    }
    data.update(overrides)
    return DevCenterApplication.model_validate(data)


def make_context(runner: FakeRunner | None = None, windows: bool = True) -> CommandContext:
    """Build a context whose consoles write to StringIO buffers."""
    return CommandContext(
        runner=runner or FakeRunner(),  # type: ignore[arg-type]
        console=Console(file=io.StringIO(), soft_wrap=True, width=200),
        err_console=Console(file=io.StringIO(), soft_wrap=True, width=200),
        windows=windows,
    )


def output_of(context: CommandContext) -> str:
    return context.console.file.getvalue()  # type: ignore[attr-defined]


def errors_of(context: CommandContext) -> str:
    return context.err_console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def context(runner: FakeRunner) -> CommandContext:
    """Context on a Windows host with the scripted runner."""
    return make_context(runner, windows=True)


@pytest.fixture
def non_windows_context(runner: FakeRunner) -> CommandContext:
    return make_context(runner, windows=False)


@pytest.fixture
def store_api() -> FakeStoreAPI:
    return FakeStoreAPI()


@pytest.fixture
def identity() -> AppIdentity:
    return AppIdentity(
        app_id=APP_ID,
        primary_name="Test App",
        package_identity_name="Contoso.TestApp",
        publisher_name="CN=ABCDEF12-3456-7890-ABCD-EF1234567890",
        publisher_display_name=PUBLISHER_DISPLAY_NAME,
    )


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Temporarily clean environment variables.

    Removes MSSTORE_* environment variables during test.
    """
    old_env = {}
    for key in list(os.environ.keys()):
        if key.startswith("MSSTORE_"):
            old_env[key] = os.environ.pop(key)

    yield

    os.environ.update(old_env)


@pytest.fixture
def settings_file(tmp_path: Path, clean_env: None, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Settings file with a publisher display name, selected via MSSTORE_CONFIG_FILE."""
    path = tmp_path / "settings" / "settings.yml"
    path.parent.mkdir()
    path.write_text(yaml.safe_dump({"publisher_display_name": PUBLISHER_DISPLAY_NAME}))
    monkeypatch.setenv("MSSTORE_CONFIG_FILE", str(path))
    return path


@pytest.fixture
def uwp_project(tmp_path: Path) -> Path:
    project = tmp_path / "UWPProject"
    project.mkdir()
    (project / "UWPProject.csproj").write_text(UWP_CSPROJ)
    (project / "Package.appxmanifest").write_text(UWP_MANIFEST)
    return project


@pytest.fixture
def winui_project(tmp_path: Path) -> Path:
    project = tmp_path / "WinUIProject"
    project.mkdir()
    (project / "WinUIProject.csproj").write_text(WINUI_CSPROJ)
    (project / "Package.appxmanifest").write_text(UWP_MANIFEST)
    return project


@pytest.fixture
def maui_project(tmp_path: Path) -> Path:
    project = tmp_path / "MauiProject"
    windows_dir = project / "Platforms" / "Windows"
    windows_dir.mkdir(parents=True)
    (project / "MauiProject.csproj").write_text(MAUI_CSPROJ)
    (windows_dir / "Package.appxmanifest").write_text(MAUI_MANIFEST)
    return project


@pytest.fixture
def flutter_project(tmp_path: Path) -> Path:
    project = tmp_path / "flutter_project"
    project.mkdir()
    (project / "pubspec.yaml").write_text(PUBSPEC)
    return project


def _write_package_json(project: Path, data: dict) -> None:
    (project / "package.json").write_text(json.dumps(data, indent=2) + "\n")


@pytest.fixture
def electron_project(tmp_path: Path) -> Path:
    """npm based Electron project."""
    project = tmp_path / "electron-app"
    project.mkdir()
    _write_package_json(
        project,
        {
            "name": "electron-app",
            "version": "1.0.0",
            "main": "main.js",
            "devDependencies": {"electron": "^30.0.0"},
        },
    )
    return project


@pytest.fixture
def yarn_electron_project(electron_project: Path) -> Path:
    (electron_project / "yarn.lock").write_text("# yarn lockfile v1\n")
    return electron_project


@pytest.fixture
def react_native_project(tmp_path: Path) -> Path:
    project = tmp_path / "rn-app"
    windows_app = project / "windows" / "rnapp"
    windows_app.mkdir(parents=True)
    _write_package_json(
        project,
        {"name": "rn-app", "version": "0.0.1", "dependencies": {"react-native": "0.73.0"}},
    )
    (windows_app / "Package.appxmanifest").write_text(UWP_MANIFEST)
    return project


def write_msix(path: Path, identity_name: str = "Contoso.TestApp") -> Path:
    """Write a minimal package archive holding an AppxManifest.xml."""
    manifest = (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<Package xmlns="http://schemas.microsoft.com/appx/manifest/foundation/windows10">'
        f'<Identity Name="{identity_name}" Publisher="CN=Contoso" Version="1.0.0.0" />'
        "</Package>"
    )
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("AppxManifest.xml", manifest)
    return path


@pytest.fixture
def msix_file(tmp_path: Path) -> Path:
    project = tmp_path / "MSIXProject"
    project.mkdir()
    return write_msix(project / "test.msix")


def npm_list_output(package: str, installed: bool) -> str:
    if installed:
        return f"rn-app@0.0.1 /work\n`-- {package}@0.73.0\n"
    return "electron-app@1.0.0 /work\n`-- (empty)\n"


def script_node_probe(runner: FakeRunner, react_native: bool, yarn: bool = False) -> None:
    """Script the install and react-native probe of a node project."""
    if yarn:
        runner.add("yarn", ["install"])
        stdout = '=> Found "react-native@0.73.0"\n' if react_native else "error We couldn't find a match!\n"
        runner.add("yarn", ["why", "react-native"], stdout=stdout, exit_code=0 if react_native else 1)
    else:
        runner.add("npm", ["install"])
        runner.add(
            "npm",
            ["list", "react-native"],
            stdout=npm_list_output("react-native", react_native),
            exit_code=0 if react_native else 1,
        )


def pending_reference(submission_id: str = SUBMISSION_ID) -> SubmissionReference:
    return SubmissionReference(id=submission_id)
