"""Tests for the msstore command line.

Commands run in-process with Typer's CliRunner. The invocation context is
swapped for one holding the scripted runner, and the Store API for the
in-memory fake, so no external tool or network is ever used.
"""

from collections.abc import Callable
from pathlib import Path

import pytest
import yaml
from click.testing import Result
from conftest import (
    APP_ID,
    SUBMISSION_ID,
    FakeRunner,
    FakeStoreAPI,
    make_application,
    make_context,
)
from typer.testing import CliRunner

from msstore_cli import __version__, cli
from msstore_cli.config.loader import load_config
from msstore_cli.configurators import msbuild
from msstore_cli.configurators.uwp import UWPConfigurator
from msstore_cli.context import CommandContext
from msstore_cli.models import AppIdentity, BuildArch
from msstore_cli.store.models import ApplicationSubmission, Flight, SubmissionStatus

TENANT_ID = "11111111-2222-3333-4444-555555555555"
CLIENT_ID = "66666666-7777-8888-9999-000000000000"
MSBUILD = r"C:\VS\MSBuild\Current\Bin\MSBuild.exe"
BUNDLE_NAME = "UWPProject_1.0.0.0_x64_arm64_bundle.msixupload"

Invoke = Callable[..., Result]


@pytest.fixture
def invoke(
    monkeypatch: pytest.MonkeyPatch,
    runner: FakeRunner,
    store_api: FakeStoreAPI,
    settings_file: Path,
) -> Invoke:
    """Run the CLI with the fake runner and Store API on a chosen host."""
    host = {"windows": True}

    def create_context(verbose: bool = False) -> CommandContext:
        return CommandContext(
            runner=runner,  # type: ignore[arg-type]
            console=cli.console,
            err_console=cli.err_console,
            verbose=verbose,
            windows=host["windows"],
        )

    monkeypatch.setattr(cli, "create_context", create_context)
    monkeypatch.setattr(cli, "create_store_api", lambda config, context: store_api)
    cli_runner = CliRunner()

    def _invoke(*args: object, input: str | None = None, windows: bool = True) -> Result:
        host["windows"] = windows
        return cli_runner.invoke(cli.app, [str(arg) for arg in args], input=input)

    return _invoke


@pytest.fixture
def configured_uwp_project(uwp_project: Path, identity: AppIdentity) -> Path:
    """UWP project that already went through init."""
    UWPConfigurator(make_context()).configure(str(uwp_project), identity)
    return uwp_project


def script_uwp_build(runner: FakeRunner, project: Path, directory: str = "AppPackages") -> Path:
    """Script vswhere and MSBuild; the bundle MSBuild reports exists on disk."""
    bundle = project / directory / BUNDLE_NAME
    bundle.parent.mkdir(parents=True, exist_ok=True)
    bundle.write_bytes(b"bundle")
    runner.add(msbuild.vswhere_path(), stdout=MSBUILD + "\n")
    runner.add(
        MSBUILD,
        [msbuild.store_upload_properties(BuildArch.X64, [BuildArch.X64, BuildArch.ARM64])],
        stdout=f"  UWPProject -> {directory}/{BUNDLE_NAME}\n",
    )
    return bundle


class TestMain:
    """Tests for the root command."""

    def test_version(self, invoke: Invoke) -> None:
        result = invoke("--version")

        assert result.exit_code == 0
        assert f"msstore version {__version__}" in result.output

    def test_no_arguments_shows_help(self, invoke: Invoke) -> None:
        result = invoke()
        assert "Usage" in result.output


class TestPublishCommand:
    """Tests for 'msstore publish'."""

    def test_publish_built_uwp_packages(
        self, invoke: Invoke, configured_uwp_project: Path, store_api: FakeStoreAPI, runner: FakeRunner
    ) -> None:
        packages = configured_uwp_project / "AppPackages"
        packages.mkdir()
        (packages / "test.msixupload").write_bytes(b"package")

        result = invoke("publish", configured_uwp_project, "--verbose", windows=False)

        assert result.exit_code == 0, result.output
        assert "Submission commit success!" in result.output
        assert "test.msixupload" in result.output
        assert store_api.uploaded == [["test.msixupload"]]
        assert store_api.committed == [(APP_ID, SUBMISSION_ID, None)]
        assert runner.calls == []

    def test_packages_first_when_nothing_built(
        self, invoke: Invoke, configured_uwp_project: Path, store_api: FakeStoreAPI, runner: FakeRunner
    ) -> None:
        script_uwp_build(runner, configured_uwp_project, "bin/Store")

        result = invoke("publish", configured_uwp_project)

        assert result.exit_code == 0, result.output
        assert "The packaged app is here:" in result.output
        assert store_api.uploaded == [["UWPProject_1.0.0.0_x64_arm64_bundle.msixupload"]]

    def test_packaging_needs_windows(self, invoke: Invoke, configured_uwp_project: Path) -> None:
        result = invoke("publish", configured_uwp_project, windows=False)

        assert result.exit_code == -6
        assert "This project type can only be packaged on Windows." in result.output

    def test_unknown_project(self, invoke: Invoke, tmp_path: Path) -> None:
        result = invoke("publish", tmp_path)

        assert result.exit_code == -1
        assert "We could not find a project publisher for the project at" in result.output

    def test_missing_path(self, invoke: Invoke, tmp_path: Path) -> None:
        result = invoke("publish", tmp_path / "missing")

        assert result.exit_code == 2
        assert "File or directory does not exist" in result.output

    def test_unconfigured_project_needs_app_id(self, invoke: Invoke, uwp_project: Path) -> None:
        result = invoke("publish", uwp_project)

        assert result.exit_code == -1
        assert "Could not find the Store app id of this project." in result.output

    def test_msix_with_app_id_and_no_commit(
        self, invoke: Invoke, msix_file: Path, store_api: FakeStoreAPI
    ) -> None:
        result = invoke("publish", msix_file, "--appId", APP_ID, "--noCommit")

        assert result.exit_code == 0, result.output
        assert "Skipping submission commit." in result.output
        assert store_api.uploaded == [["test.msix"]]
        assert store_api.committed == []

    def test_msix_app_id_from_package_identity(
        self, invoke: Invoke, msix_file: Path, store_api: FakeStoreAPI
    ) -> None:
        result = invoke("publish", msix_file, "-nc")

        assert result.exit_code == 0, result.output
        assert store_api.uploaded == [["test.msix"]]

    def test_flight_and_rollout(self, invoke: Invoke, msix_file: Path, store_api: FakeStoreAPI) -> None:
        store_api.flights["f1"] = Flight(flight_id="f1")

        result = invoke("publish", msix_file, "--appId", APP_ID, "--flightId", "f1", "-prp", "10")

        assert result.exit_code == 0, result.output
        assert store_api.committed == [(APP_ID, SUBMISSION_ID, "f1")]
        rollout = store_api.updated[0].package_delivery_options.package_rollout  # type: ignore[union-attr]
        assert rollout is not None and rollout.package_rollout_percentage == 10

    def test_rollout_out_of_range(self, invoke: Invoke, msix_file: Path) -> None:
        result = invoke("publish", msix_file, "-prp", "120")
        assert result.exit_code == 2

    def test_pwa_cannot_be_published(self, invoke: Invoke) -> None:
        result = invoke("publish", "https://contoso.com")

        assert result.exit_code == -5
        assert "We can't publish this type of project." in result.output


class TestPackageCommand:
    """Tests for 'msstore package'."""

    def test_package_uwp(self, invoke: Invoke, uwp_project: Path, runner: FakeRunner) -> None:
        script_uwp_build(runner, uwp_project)

        result = invoke("package", uwp_project)

        assert result.exit_code == 0, result.output
        assert "The packaged app is here:" in result.output
        assert str(uwp_project / "AppPackages") in result.output

    def test_windows_only(self, invoke: Invoke, uwp_project: Path, runner: FakeRunner) -> None:
        result = invoke("package", uwp_project, windows=False)

        assert result.exit_code == -6
        assert "This project type can only be packaged on Windows." in result.output
        assert runner.calls == []

    def test_msix_cannot_be_packaged(self, invoke: Invoke, msix_file: Path) -> None:
        result = invoke("package", msix_file)

        assert result.exit_code == -4
        assert "We can't package this type of project." in result.output

    def test_arch_option(self, invoke: Invoke, uwp_project: Path, runner: FakeRunner) -> None:
        runner.add(msbuild.vswhere_path(), stdout=MSBUILD + "\n")
        runner.add(MSBUILD, stdout="  UWPProject -> AppPackages/UWPProject_1.0.0.0_x86_bundle.msixupload\n")

        result = invoke("package", uwp_project, "--arch", "x86,x64", "-a", "X86")

        assert result.exit_code == 0, result.output
        assert "AppxBundlePlatforms=\"X86|X64\"" in runner.calls[-1].arguments[0]

    def test_invalid_arch(self, invoke: Invoke, uwp_project: Path) -> None:
        result = invoke("package", uwp_project, "--arch", "mips")

        assert result.exit_code == 2
        assert "Invalid architecture 'mips'" in result.output

    def test_app_id_configures_first(
        self, invoke: Invoke, uwp_project: Path, runner: FakeRunner
    ) -> None:
        script_uwp_build(runner, uwp_project)

        result = invoke("package", uwp_project, "--appId", APP_ID, "--version", "2.0.1")

        assert result.exit_code == 0, result.output
        manifest = (uwp_project / "Package.appxmanifest").read_text()
        assert APP_ID in manifest
        assert 'Version="2.0.1.0"' in manifest


class TestInitCommand:
    """Tests for 'msstore init'."""

    def test_init_with_app_id(self, invoke: Invoke, uwp_project: Path, runner: FakeRunner) -> None:
        result = invoke("init", uwp_project, "--appId", APP_ID)

        assert result.exit_code == 0, result.output
        assert "This seems to be a UWP project." in result.output
        assert UWPConfigurator(make_context()).get_app_id(str(uwp_project)) == APP_ID
        assert runner.calls == []

    def test_init_prompts_for_app(self, invoke: Invoke, uwp_project: Path, store_api: FakeStoreAPI) -> None:
        store_api.applications = [
            make_application(id="9NOTTHISONE0", primaryName="Other App"),
            make_application(),
        ]

        result = invoke("init", uwp_project, input="5\n2\n")

        assert result.exit_code == 0, result.output
        assert "Pick a number between 1 and 2." in result.output
        assert UWPConfigurator(make_context()).get_app_id(str(uwp_project)) == APP_ID

    def test_init_without_apps(self, invoke: Invoke, uwp_project: Path, store_api: FakeStoreAPI) -> None:
        store_api.applications = []

        result = invoke("init", uwp_project)

        assert result.exit_code == -1
        assert "Your account has no registered apps yet." in result.output

    def test_init_without_publisher_display_name(
        self, invoke: Invoke, uwp_project: Path, settings_file: Path
    ) -> None:
        settings_file.write_text("{}\n")

        result = invoke("init", uwp_project, "--appId", APP_ID, input="\n")

        assert result.exit_code == -1
        assert "Please, provide the PublisherDisplayName" in result.output
        assert "Invalid Publisher Display Name" in result.output
        assert "publisher_display_name" not in yaml.safe_load(settings_file.read_text())

    def test_publisher_display_name_is_asked_and_saved(
        self, invoke: Invoke, uwp_project: Path, settings_file: Path
    ) -> None:
        settings_file.write_text("{}\n")

        result = invoke("init", uwp_project, "--appId", APP_ID, input="Fabrikam\n")

        assert result.exit_code == 0, result.output
        assert load_config(settings_file).publisher_display_name == "Fabrikam"
        assert "<PublisherDisplayName>Fabrikam</PublisherDisplayName>" in (
            uwp_project / "Package.appxmanifest"
        ).read_text()

    def test_publisher_display_name_option(self, invoke: Invoke, uwp_project: Path) -> None:
        result = invoke("init", uwp_project, "--appId", APP_ID, "-n", "Fabrikam")

        assert result.exit_code == 0, result.output
        assert "<PublisherDisplayName>Fabrikam</PublisherDisplayName>" in (
            uwp_project / "Package.appxmanifest"
        ).read_text()

    def test_init_package_needs_windows(self, invoke: Invoke, uwp_project: Path) -> None:
        result = invoke("init", uwp_project, "--appId", APP_ID, "--package", windows=False)

        assert result.exit_code == -6
        assert "This project type can only be packaged on Windows." in result.output

    @pytest.mark.parametrize("flag", ["--package", "--publish"])
    def test_init_cannot_package_msix(
        self, invoke: Invoke, msix_file: Path, runner: FakeRunner, store_api: FakeStoreAPI, flag: str
    ) -> None:
        result = invoke("init", msix_file, "--appId", APP_ID, flag)

        assert result.exit_code == -4
        assert "We can't package this type of project." in result.output
        assert runner.calls == []
        assert store_api.committed == []

    def test_init_announces_setup(self, invoke: Invoke, uwp_project: Path) -> None:
        result = invoke("init", uwp_project, "--appId", APP_ID, "--verbose")

        assert result.exit_code == 0, result.output
        assert "Using PublisherDisplayName: " in result.output
        assert result.output.index("Let's set it up for you!") < result.output.index(
            "is now configured to build to the Microsoft Store!"
        )

    def test_init_package_and_publish(
        self, invoke: Invoke, uwp_project: Path, runner: FakeRunner, store_api: FakeStoreAPI
    ) -> None:
        script_uwp_build(runner, uwp_project)

        result = invoke("init", uwp_project, "--appId", APP_ID, "--publish")

        assert result.exit_code == 0, result.output
        assert store_api.committed == [(APP_ID, SUBMISSION_ID, None)]

    def test_failed_submission(
        self, invoke: Invoke, uwp_project: Path, runner: FakeRunner, store_api: FakeStoreAPI
    ) -> None:
        script_uwp_build(runner, uwp_project)
        store_api.commit_status = SubmissionStatus(status="CommitFailed")

        result = invoke("init", uwp_project, "--appId", APP_ID, "--publish")

        assert result.exit_code == -1
        assert "Submission failed with status CommitFailed" in result.output

    def test_pwa(self, invoke: Invoke) -> None:
        result = invoke("init", "https://contoso.com", "--appId", APP_ID)

        assert result.exit_code == 0, result.output
        assert "This seems to be a PWA project." in result.output
        assert "Contoso.TestApp" in result.output

    def test_unknown_app(self, invoke: Invoke, uwp_project: Path) -> None:
        result = invoke("init", uwp_project, "--appId", "9UNKNOWN0000")

        assert result.exit_code == -1
        assert "Store API request failed" in result.output


class TestReconfigureCommand:
    """Tests for 'msstore reconfigure'."""

    def test_saves_credentials(self, invoke: Invoke, settings_file: Path, store_api: FakeStoreAPI) -> None:
        result = invoke(
            "reconfigure",
            "--tenantId", TENANT_ID,
            "--sellerId", "12345",
            "--clientId", CLIENT_ID,
            "--clientSecret", "secret",
        )

        assert result.exit_code == 0, result.output
        assert f"Awesome! Credentials saved to {settings_file}" in result.output
        assert store_api.authenticated
        config = load_config(settings_file)
        assert config.credentials.complete
        assert config.publisher_display_name == "Contoso Software"

    def test_prompts_for_missing_values(self, invoke: Invoke, settings_file: Path) -> None:
        result = invoke("reconfigure", "-t", TENANT_ID, "-s", "12345", input=f"{CLIENT_ID}\nsecret\n")

        assert result.exit_code == 0, result.output
        assert load_config(settings_file).credentials.client_secret == "secret"

    def test_invalid_tenant(self, invoke: Invoke) -> None:
        result = invoke("reconfigure", "-t", "tenant", "-s", "1", "-c", CLIENT_ID, "-cs", "secret")

        assert result.exit_code == -1
        assert "Invalid credentials" in result.output

    def test_reset(self, invoke: Invoke, settings_file: Path) -> None:
        settings_file.write_text(
            yaml.safe_dump(
                {
                    "publisher_display_name": "Contoso Software",
                    "credentials": {"tenant_id": TENANT_ID, "client_secret": "secret"},
                }
            )
        )

        result = invoke("reconfigure", "--reset")

        assert result.exit_code == 0, result.output
        assert "Credentials cleared." in result.output
        config = load_config(settings_file)
        assert config.credentials.tenant_id is None
        assert config.publisher_display_name == "Contoso Software"


class TestStoreResourceCommands:
    """Tests for the apps, submission and flights command groups."""

    def test_apps_list(self, invoke: Invoke) -> None:
        result = invoke("apps", "list")

        assert result.exit_code == 0, result.output
        assert APP_ID in result.output

    def test_apps_list_empty(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        store_api.applications = []
        assert "Your account has no registered apps yet." in invoke("apps", "list").output

    def test_apps_get(self, invoke: Invoke) -> None:
        result = invoke("apps", "get", APP_ID)

        assert result.exit_code == 0, result.output
        assert '"packageIdentityName": "Contoso.TestApp"' in result.output

    def test_submission_get_and_status(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        store_api.applications = [make_application(pendingApplicationSubmission={"id": SUBMISSION_ID})]
        store_api.submissions[SUBMISSION_ID] = ApplicationSubmission(id=SUBMISSION_ID, status="PendingCommit")

        assert '"status": "PendingCommit"' in invoke("submission", "get", APP_ID).output
        assert "Submission status: PreProcessing" in invoke("submission", "status", APP_ID).output

    def test_submission_get_without_submission(self, invoke: Invoke) -> None:
        result = invoke("submission", "get", APP_ID)

        assert result.exit_code == -1
        assert f"Could not find a submission for application '{APP_ID}'." in result.output

    def test_submission_publish(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        result = invoke("submission", "publish", APP_ID)

        assert result.exit_code == 0, result.output
        assert "Submission committed with status CommitStarted" in result.output
        assert store_api.committed == [(APP_ID, SUBMISSION_ID, None)]

    def test_submission_poll_failure(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        store_api.applications = [make_application(lastPublishedApplicationSubmission={"id": SUBMISSION_ID})]
        store_api.submissions[SUBMISSION_ID] = ApplicationSubmission(id=SUBMISSION_ID)
        store_api.statuses = [SubmissionStatus(status="CertificationFailed")]

        result = invoke("submission", "poll", APP_ID)

        assert result.exit_code == -1
        assert "Submission status: CertificationFailed" in result.output

    def test_submission_delete_confirmed(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        store_api.applications = [make_application(pendingApplicationSubmission={"id": SUBMISSION_ID})]

        result = invoke("submission", "delete", APP_ID, input="y\n")

        assert result.exit_code == 0, result.output
        assert store_api.deleted_submissions == [SUBMISSION_ID]
        assert f"Submission '{SUBMISSION_ID}' deleted." in result.output

    def test_submission_delete_declined(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        store_api.applications = [make_application(pendingApplicationSubmission={"id": SUBMISSION_ID})]

        result = invoke("submission", "delete", APP_ID, input="n\n")

        assert result.exit_code == 0
        assert store_api.deleted_submissions == []

    def test_submission_delete_nothing_pending(self, invoke: Invoke) -> None:
        assert "No pending submission found." in invoke("submission", "delete", APP_ID).output

    def test_flights(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        assert "This app has no flights." in invoke("flights", "list", APP_ID).output

        store_api.flights["f1"] = Flight(flight_id="f1", friendly_name="Insiders", group_ids=["g1"])
        listed = invoke("flights", "list", APP_ID)
        assert "Insiders" in listed.output

        deleted = invoke("flights", "delete", APP_ID, "f1", "--noConfirm")
        assert deleted.exit_code == 0, deleted.output
        assert store_api.deleted_flights == ["f1"]

    def test_flight_submission_delete(self, invoke: Invoke, store_api: FakeStoreAPI) -> None:
        store_api.flights["f1"] = Flight(flight_id="f1", pending_flight_submission={"id": "77"})

        result = invoke("flights", "submission", "delete", APP_ID, "f1", "--noConfirm")

        assert result.exit_code == 0, result.output
        assert store_api.deleted_submissions == ["77"]
