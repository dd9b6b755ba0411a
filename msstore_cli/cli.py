"""Command-line interface for the Microsoft Store CLI.

Provides commands for:
- init: Configure a project for the Store (optionally package and publish)
- package: Build Store packages for a project
- publish: Upload packages to a Store submission
- reconfigure: Store credentials and publisher settings
- apps / submission / flights: Inspect and manage Store resources
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from msstore_cli import __version__
from msstore_cli.config import CLIConfig, StoreCredentials, load_config, reset_credentials, save_config
from msstore_cli.configurators import ConfiguratorRegistry, ProjectConfigurator, is_url
from msstore_cli.context import CommandContext
from msstore_cli.exceptions import (
    ConfigurationError,
    MSStoreError,
    PublishingNotSupportedError,
    StoreAPIError,
)
from msstore_cli.logging_utils import configure_logging
from msstore_cli.models import AppIdentity, BuildArch, Capability
from msstore_cli.store import (
    DevCenterApplication,
    StoreAPI,
    get_any_submission,
    get_existing_submission,
    poll_submission_status,
)
from msstore_cli.utils.version import StoreVersion, parse_version

app = typer.Typer(
    name="msstore",
    help="Configure, package and publish apps to the Microsoft Store",
    add_completion=False,
    no_args_is_help=True,
)
apps_app = typer.Typer(help="Execute apps related tasks.", no_args_is_help=True)
submission_app = typer.Typer(help="Execute submission related tasks.", no_args_is_help=True)
flights_app = typer.Typer(help="Execute flights related tasks.", no_args_is_help=True)
flight_submission_app = typer.Typer(
    help="Execute flight submissions related tasks.", no_args_is_help=True
)
app.add_typer(apps_app, name="apps")
app.add_typer(submission_app, name="submission")
app.add_typer(flights_app, name="flights")
flights_app.add_typer(flight_submission_app, name="submission")

# Regular output on stdout, errors and progress on stderr
console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"msstore version {__version__}")
        raise typer.Exit()


def create_context(verbose: bool = False) -> CommandContext:
    """Build the context for one invocation and set up logging."""
    configure_logging(verbose)
    return CommandContext(console=console, err_console=err_console, verbose=verbose)


def create_store_api(config: CLIConfig, context: CommandContext) -> StoreAPI:
    return StoreAPI(config, token=context.token)


@contextmanager
def handle_errors(context: CommandContext | None = None) -> Iterator[None]:
    """Turn CLI errors and Ctrl-C into exit codes."""
    try:
        yield
    except MSStoreError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=e.exit_code) from None
    except KeyboardInterrupt:
        if context is not None:
            context.token.cancel()
        err_console.print("[red]Operation cancelled.[/red]")
        raise typer.Exit(code=-1) from None


def validate_path_or_url(value: str | None) -> str:
    """Default to the current directory; reject paths that do not exist."""
    if value is None:
        return str(Path.cwd())
    if is_url(value):
        return value
    path = Path(value).expanduser()
    if not path.exists():
        raise typer.BadParameter("File or directory does not exist")
    return str(path.resolve())


def parse_archs(values: list[str] | None) -> tuple[BuildArch, ...] | None:
    """Parse repeated and/or comma separated --arch values."""
    if not values:
        return None
    archs: list[BuildArch] = []
    for value in values:
        for item in value.split(","):
            if not item.strip():
                continue
            try:
                arch = BuildArch.parse(item)
            except ValueError as e:
                raise typer.BadParameter(str(e), param_hint="--arch") from None
            if arch not in archs:
                archs.append(arch)
    return tuple(archs) or None


def parse_version_option(value: str | None) -> StoreVersion | None:
    if value is None:
        return None
    try:
        return parse_version(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--version") from None


def build_identity(application: DevCenterApplication, publisher_display_name: str) -> AppIdentity:
    """Combine a Store application with the publisher display name.

    Raises:
        StoreAPIError: If the application lacks identity fields
    """
    fields = {
        "id": application.id,
        "primaryName": application.primary_name,
        "packageIdentityName": application.package_identity_name,
        "publisherName": application.publisher_name,
    }
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise StoreAPIError(
            "The Store application is missing identity data",
            details=f"Missing fields: {', '.join(missing)}",
        )
    return AppIdentity(
        app_id=application.id or "",
        primary_name=application.primary_name or "",
        package_identity_name=application.package_identity_name or "",
        publisher_name=application.publisher_name or "",
        publisher_display_name=publisher_display_name,
    )


def resolve_publisher_display_name(option: str | None, config: CLIConfig) -> str:
    """Return the publisher display name, asking for it (and saving it) when unknown."""
    name = option or config.publisher_display_name
    if name:
        return name

    name = typer.prompt(
        "Please, provide the PublisherDisplayName", default="", show_default=False, err=True
    ).strip()
    if not name:
        raise MSStoreError(
            "Invalid Publisher Display Name",
            fix_hint="Pass --publisherDisplayName or run 'msstore reconfigure --publisherDisplayName <name>'",
        )
    config.publisher_display_name = name
    save_config(config)
    return name


def select_application(api: StoreAPI) -> DevCenterApplication:
    """Let the user pick one of the account's applications."""
    with err_console.status("Retrieving your apps..."):
        applications = api.get_applications()
    if not applications:
        raise MSStoreError(
            "Your account has no registered apps yet.",
            fix_hint="Reserve an app name in Partner Center, then run this command again",
        )

    table = Table(title="Your apps")
    table.add_column("#", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    for index, application in enumerate(applications, start=1):
        table.add_row(str(index), application.id or "", application.primary_name or "")
    console.print(table)

    while True:
        choice = typer.prompt("Which app should be used", type=int, err=True)
        if 1 <= choice <= len(applications):
            return applications[choice - 1]
        err_console.print(f"[red]Pick a number between 1 and {len(applications)}.[/red]")


def package_and_report(
    configurator: ProjectConfigurator,
    path_or_url: str,
    identity: AppIdentity | None,
    archs: tuple[BuildArch, ...] | None,
    version: StoreVersion | None,
    output: Path | None,
) -> list[Path]:
    """Package the project and return the files to publish."""
    configurator.ensure_can_package()
    artifact = configurator.package(path_or_url, identity, archs, version, output)
    configurator.print_output_location(artifact)
    if artifact.files:
        return list(artifact.files)
    return configurator.find_package_files(path_or_url, artifact.output_directory)


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Microsoft Store CLI.

    Configures UWP, WinUI, MAUI, Flutter, Electron, React Native, MSIX and
    PWA projects for the Microsoft Store, packages them and publishes them.
    """
    pass


@app.command()
def init(
    path_or_url: str = typer.Argument(  # noqa: B008
        None,
        callback=validate_path_or_url,
        help="Root directory of the project, a package file or a PWA URL",
    ),
    publisher_display_name: str | None = typer.Option(  # noqa: B008
        None,
        "--publisherDisplayName",
        "-n",
        help="Publisher display name used to configure the project",
    ),
    package: bool = typer.Option(  # noqa: B008
        False, "--package", help="Also package the project after configuring it"
    ),
    publish: bool = typer.Option(  # noqa: B008
        False, "--publish", help="Also publish the project after configuring it"
    ),
    flight_id: str | None = typer.Option(  # noqa: B008
        None, "--flightId", "-f", help="Flight to publish to"
    ),
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Output directory for the packaged app"
    ),
    arch: list[str] | None = typer.Option(  # noqa: B008
        None, "--arch", "-a", help="Architecture(s) to build for: x86, x64, arm64"
    ),
    version: str | None = typer.Option(  # noqa: B008
        None, "--version", "-ver", help="Version used when building the app"
    ),
    package_rollout_percentage: float | None = typer.Option(  # noqa: B008
        None,
        "--packageRolloutPercentage",
        "-prp",
        min=0,
        max=100,
        help="Percentage of users receiving the new packages",
    ),
    app_id: str | None = typer.Option(  # noqa: B008
        None, "--appId", help="Store app id to configure the project with"
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Show detailed output"
    ),
) -> None:
    """Configure a project with the identity of one of your Store apps.

    Examples:
        msstore init                      # current directory, pick an app
        msstore init . --appId 9NBLGGH4R315 --package
        msstore init https://contoso.com  # print identity for PWABuilder
    """
    context = create_context(verbose)
    archs = parse_archs(arch)
    store_version = parse_version_option(version)

    with handle_errors(context):
        configurator = ConfiguratorRegistry.detect(path_or_url, context)
        console.print(f"This seems to be a {configurator} project.")

        config = load_config()
        api = create_store_api(config, context)
        display_name = resolve_publisher_display_name(publisher_display_name, config)

        if app_id:
            with err_console.status(f"Retrieving application '{app_id}'..."):
                application = api.get_application(app_id)
        else:
            application = select_application(api)
        identity = build_identity(application, display_name)
        if verbose:
            console.print(f"Using PublisherDisplayName: {escape(display_name)}")

        console.print("Let's set it up for you!")
        console.print()
        output_directory = configurator.configure(path_or_url, identity, store_version, output)

        files: list[Path] = []
        if package or publish:
            files = package_and_report(
                configurator, path_or_url, identity, archs, store_version, output_directory
            )

        if publish:
            if not files:
                files = configurator.find_package_files(path_or_url)
            status = configurator.publish(
                path_or_url,
                application,
                api,
                files,
                flight_id=flight_id,
                rollout_percentage=package_rollout_percentage,
            )
            if status is not None and status.is_failed:
                raise MSStoreError(f"Submission failed with status {status.status}")


@app.command("package")
def package_command(
    path_or_url: str = typer.Argument(  # noqa: B008
        None,
        callback=validate_path_or_url,
        help="Root directory of the project",
    ),
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Output directory for the packaged app"
    ),
    arch: list[str] | None = typer.Option(  # noqa: B008
        None, "--arch", "-a", help="Architecture(s) to build for: x86, x64, arm64"
    ),
    version: str | None = typer.Option(  # noqa: B008
        None, "--version", "-ver", help="Version used when building the app"
    ),
    app_id: str | None = typer.Option(  # noqa: B008
        None, "--appId", help="Configure the project with this Store app before packaging"
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Show detailed output"
    ),
) -> None:
    """Build the Store package(s) of a project."""
    context = create_context(verbose)
    archs = parse_archs(arch)
    store_version = parse_version_option(version)

    with handle_errors(context):
        configurator = ConfiguratorRegistry.detect(path_or_url, context)
        configurator.ensure_can_package()

        identity = None
        output_directory = output
        if app_id:
            config = load_config()
            api = create_store_api(config, context)
            display_name = resolve_publisher_display_name(None, config)
            with err_console.status(f"Retrieving application '{app_id}'..."):
                application = api.get_application(app_id)
            identity = build_identity(application, display_name)
            output_directory = (
                configurator.configure(path_or_url, identity, store_version, output) or output
            )

        package_and_report(
            configurator, path_or_url, identity, archs, store_version, output_directory
        )


@app.command()
def publish(
    path_or_url: str = typer.Argument(  # noqa: B008
        None,
        callback=validate_path_or_url,
        help="Root directory of the project or a package file",
    ),
    input_directory: Path | None = typer.Option(  # noqa: B008
        None, "--inputDirectory", "-i", help="Directory holding the packages to publish"
    ),
    app_id: str | None = typer.Option(  # noqa: B008
        None, "--appId", "-id", help="Store app id to publish to"
    ),
    no_commit: bool = typer.Option(  # noqa: B008
        False, "--noCommit", "-nc", help="Leave the submission in draft"
    ),
    flight_id: str | None = typer.Option(  # noqa: B008
        None, "--flightId", "-f", help="Flight to publish to"
    ),
    package_rollout_percentage: float | None = typer.Option(  # noqa: B008
        None,
        "--packageRolloutPercentage",
        "-prp",
        min=0,
        max=100,
        help="Percentage of users receiving the new packages",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Show detailed output"
    ),
) -> None:
    """Publish a project's packages to the Store.

    Packages already built are uploaded as they are; when there are none,
    the project is packaged first.
    """
    context = create_context(verbose)

    with handle_errors(context):
        configurator = ConfiguratorRegistry.detect(path_or_url, context, role="publisher")
        if not configurator.supports(Capability.PUBLISH):
            raise PublishingNotSupportedError()

        config = load_config()
        api = create_store_api(config, context)

        resolved_app_id = app_id or configurator.resolve_app_id(path_or_url, api)
        if not resolved_app_id:
            raise MSStoreError(
                "Could not find the Store app id of this project.",
                fix_hint="Run 'msstore init' on the project first, or pass --appId",
            )
        with err_console.status(f"Retrieving application '{resolved_app_id}'..."):
            application = api.get_application(resolved_app_id)

        files = configurator.find_package_files(path_or_url, input_directory)
        if not files and configurator.supports(Capability.PACKAGE):
            files = package_and_report(configurator, path_or_url, None, None, None, None)
        if not files:
            raise MSStoreError(
                "No packages found to publish.",
                details=f"Looked in {input_directory or configurator.input_directory(path_or_url)}",
            )

        status = configurator.publish(
            path_or_url,
            application,
            api,
            files,
            flight_id=flight_id,
            no_commit=no_commit,
            rollout_percentage=package_rollout_percentage,
        )
        if status is not None and status.is_failed:
            raise MSStoreError(f"Submission failed with status {status.status}")


@app.command()
def reconfigure(
    tenant_id: str | None = typer.Option(  # noqa: B008
        None, "--tenantId", "-t", help="Azure AD tenant id"
    ),
    seller_id: str | None = typer.Option(  # noqa: B008
        None, "--sellerId", "-s", help="Partner Center seller id"
    ),
    client_id: str | None = typer.Option(  # noqa: B008
        None, "--clientId", "-c", help="Azure AD application (client) id"
    ),
    client_secret: str | None = typer.Option(  # noqa: B008
        None, "--clientSecret", "-cs", help="Azure AD application secret"
    ),
    publisher_display_name: str | None = typer.Option(  # noqa: B008
        None, "--publisherDisplayName", help="Publisher display name used by init"
    ),
    reset: bool = typer.Option(  # noqa: B008
        False, "--reset", help="Clear the stored credentials"
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Show detailed output"
    ),
) -> None:
    """Store the credentials used to call the Microsoft Store API."""
    context = create_context(verbose)

    with handle_errors(context):
        if reset:
            reset_credentials()
            console.print("Credentials cleared.")
            return

        config = load_config()
        current = config.credentials
        values = {
            "tenant_id": tenant_id or current.tenant_id,
            "seller_id": seller_id or current.seller_id,
            "client_id": client_id or current.client_id,
            "client_secret": client_secret or current.client_secret,
        }
        prompts = {
            "tenant_id": "Tenant Id",
            "seller_id": "Seller Id",
            "client_id": "Client Id",
            "client_secret": "Client Secret",
        }
        for key, label in prompts.items():
            if not values[key]:
                values[key] = typer.prompt(
                    label, hide_input=key == "client_secret", err=True
                )

        try:
            credentials = StoreCredentials(**values)
        except PydanticValidationError as e:
            raise ConfigurationError("Invalid credentials", details=str(e)) from e

        config.credentials = credentials
        if publisher_display_name:
            config.publisher_display_name = publisher_display_name

        with err_console.status("Checking the credentials..."):
            create_store_api(config, context).authenticate()

        path = save_config(config)
        console.print(f"Awesome! Credentials saved to {path}")


# Store resources


def _store_api(context: CommandContext) -> StoreAPI:
    return create_store_api(load_config(), context)


def _print_resource(data: dict) -> None:
    console.print_json(data=data)


def _confirm(message: str, no_confirm: bool) -> None:
    if not no_confirm and not typer.confirm(message, err=True):
        raise typer.Exit()


@apps_app.command("list")
def apps_list(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """List all the apps of your account."""
    context = create_context(verbose)
    with handle_errors(context):
        api = _store_api(context)
        with err_console.status("Retrieving your apps..."):
            applications = api.get_applications()

        if not applications:
            console.print("Your account has no registered apps yet.")
            return

        table = Table(title="Apps")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Package family name")
        for application in applications:
            table.add_row(
                application.id or "",
                application.primary_name or "",
                application.package_family_name or "",
            )
        console.print(table)


@apps_app.command("get")
def apps_get(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Show the details of an app."""
    context = create_context(verbose)
    with handle_errors(context):
        api = _store_api(context)
        _print_resource(api.get_application(product_id).to_api())


def _show_submission(product_id: str, flight_id: str | None, verbose: bool) -> None:
    context = create_context(verbose)
    with handle_errors(context):
        api = _store_api(context)
        application = api.get_application(product_id)
        submission = get_existing_submission(api, application, flight_id)
        if submission is None:
            raise MSStoreError(f"Could not find a submission for application '{product_id}'.")
        _print_resource(submission.to_api())


def _submission_status(product_id: str, flight_id: str | None, verbose: bool) -> None:
    context = create_context(verbose)
    with handle_errors(context):
        api = _store_api(context)
        application = api.get_application(product_id)
        submission = get_existing_submission(api, application, flight_id)
        if submission is None or not submission.id:
            raise MSStoreError(f"Could not find a submission for application '{product_id}'.")
        status = api.get_submission_status(product_id, submission.id, flight_id)
        console.print(f"Submission status: {status.status}")
        message = status.error_message()
        if message:
            console.print(escape(message))


def _publish_submission(product_id: str, flight_id: str | None, verbose: bool) -> None:
    context = create_context(verbose)
    with handle_errors(context):
        api = _store_api(context)
        application = api.get_application(product_id)
        submission = get_any_submission(api, application, console, flight_id)
        if not submission.id:
            raise MSStoreError(f"Could not find a submission for application '{product_id}'.")
        status = api.commit_submission(product_id, submission.id, flight_id)
        if not status.status:
            raise StoreAPIError(
                f"Could not commit submission for application '{product_id}'",
                details=status.error_message() or None,
            )
        console.print(f"Submission committed with status [green]{status.status}[/green]")


def _poll_submission(product_id: str, flight_id: str | None, verbose: bool) -> None:
    context = create_context(verbose)
    with handle_errors(context):
        config = load_config()
        api = create_store_api(config, context)
        application = api.get_application(product_id)
        submission = get_existing_submission(api, application, flight_id)
        if submission is None or not submission.id:
            raise MSStoreError(f"Could not find a submission for application '{product_id}'.")
        status = poll_submission_status(
            api,
            product_id,
            submission.id,
            console,
            flight_id=flight_id,
            interval=config.timeouts.submission_poll_interval,
            token=context.token,
        )
        if status.is_failed:
            raise MSStoreError(f"Submission failed with status {status.status}")


def _delete_submission(product_id: str, flight_id: str | None, no_confirm: bool, verbose: bool) -> None:
    context = create_context(verbose)
    with handle_errors(context):
        api = _store_api(context)
        if flight_id:
            pending = api.get_flight(product_id, flight_id).pending_flight_submission
        else:
            pending = api.get_application(product_id).pending_application_submission
        if pending is None or not pending.id:
            console.print("No pending submission found.")
            return
        _confirm(f"Delete pending submission '{pending.id}'?", no_confirm)
        api.delete_submission(product_id, pending.id, flight_id)
        console.print(f"Submission '{pending.id}' deleted.")


@submission_app.command("status")
def submission_status(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Show the status of the current submission."""
    _submission_status(product_id, None, verbose)


@submission_app.command("get")
def submission_get(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Show the pending (or last published) submission."""
    _show_submission(product_id, None, verbose)


@submission_app.command("publish")
def submission_publish(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Commit the pending submission."""
    _publish_submission(product_id, None, verbose)


@submission_app.command("poll")
def submission_poll(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Wait until the current submission leaves the commit phase."""
    _poll_submission(product_id, None, verbose)


@submission_app.command("delete")
def submission_delete(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    no_confirm: bool = typer.Option(False, "--noConfirm", help="Do not ask for confirmation"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Delete the pending submission."""
    _delete_submission(product_id, None, no_confirm, verbose)


@flights_app.command("list")
def flights_list(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """List the flights of an app."""
    context = create_context(verbose)
    with handle_errors(context):
        flights = _store_api(context).get_flights(product_id)
        if not flights:
            console.print("This app has no flights.")
            return

        table = Table(title="Flights")
        table.add_column("Flight ID", style="cyan")
        table.add_column("Name")
        table.add_column("Groups")
        table.add_column("Rank higher than")
        for flight in flights:
            table.add_row(
                flight.flight_id or "",
                flight.friendly_name or "",
                ", ".join(flight.group_ids),
                flight.rank_higher_than or "",
            )
        console.print(table)


@flights_app.command("get")
def flights_get(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    flight_id: str = typer.Argument(..., help="Flight id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Show the details of a flight."""
    context = create_context(verbose)
    with handle_errors(context):
        _print_resource(_store_api(context).get_flight(product_id, flight_id).to_api())


@flights_app.command("delete")
def flights_delete(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    flight_id: str = typer.Argument(..., help="Flight id"),  # noqa: B008
    no_confirm: bool = typer.Option(False, "--noConfirm", help="Do not ask for confirmation"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Delete a flight."""
    context = create_context(verbose)
    with handle_errors(context):
        _confirm(f"Delete flight '{flight_id}'?", no_confirm)
        _store_api(context).delete_flight(product_id, flight_id)
        console.print(f"Flight '{flight_id}' deleted.")


@flight_submission_app.command("get")
def flight_submission_get(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    flight_id: str = typer.Argument(..., help="Flight id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Show the pending (or last published) flight submission."""
    _show_submission(product_id, flight_id, verbose)


@flight_submission_app.command("publish")
def flight_submission_publish(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    flight_id: str = typer.Argument(..., help="Flight id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Commit the pending flight submission."""
    _publish_submission(product_id, flight_id, verbose)


@flight_submission_app.command("poll")
def flight_submission_poll(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    flight_id: str = typer.Argument(..., help="Flight id"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Wait until the flight submission leaves the commit phase."""
    _poll_submission(product_id, flight_id, verbose)


@flight_submission_app.command("delete")
def flight_submission_delete(
    product_id: str = typer.Argument(..., help="Store app id"),  # noqa: B008
    flight_id: str = typer.Argument(..., help="Flight id"),  # noqa: B008
    no_confirm: bool = typer.Option(False, "--noConfirm", help="Do not ask for confirmation"),  # noqa: B008
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),  # noqa: B008
) -> None:
    """Delete the pending flight submission."""
    _delete_submission(product_id, flight_id, no_confirm, verbose)


if __name__ == "__main__":
    app()
