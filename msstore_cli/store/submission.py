"""Submission workflow on top of the Store API.

publish_packages performs the documented submission sequence:
1. Mark the packages already in the submission for deletion
2. Add the new package files as PendingUpload
3. Update the submission
4. Zip the files and upload the archive to the submission's blob URL
5. Commit (unless told not to)
"""

import logging
import tempfile
import time
import zipfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from msstore_cli.context import CancellationToken
from msstore_cli.exceptions import StoreAPIError
from msstore_cli.store.models import (
    ApplicationSubmission,
    DevCenterApplication,
    PackageDeliveryOptions,
    PackageRollout,
    SubmissionPackage,
    SubmissionStatus,
)

if TYPE_CHECKING:
    from msstore_cli.store.api import StoreAPI

logger = logging.getLogger(__name__)


def get_any_submission(
    api: "StoreAPI",
    application: DevCenterApplication,
    console: Console,
    flight_id: str | None = None,
) -> ApplicationSubmission:
    """Return the pending submission, creating a new one if there is none.

    Raises:
        StoreAPIError: If the application has no id or a request fails
    """
    if not application.id:
        raise StoreAPIError("Application has no id")

    if flight_id:
        flight = api.get_flight(application.id, flight_id)
        pending = flight.pending_flight_submission
    else:
        pending = application.pending_application_submission

    if pending is not None and pending.id:
        console.print(f"Found pending submission with id '{pending.id}'.")
        return api.get_submission(application.id, pending.id, flight_id)

    console.print("No pending submission found, creating a new one.")
    return api.create_submission(application.id, flight_id)


def get_existing_submission(
    api: "StoreAPI",
    application: DevCenterApplication,
    flight_id: str | None = None,
) -> ApplicationSubmission | None:
    """Return the pending submission, or the last published one, or None."""
    if not application.id:
        raise StoreAPIError("Application has no id")

    if flight_id:
        flight = api.get_flight(application.id, flight_id)
        candidates = [flight.pending_flight_submission, flight.last_published_flight_submission]
    else:
        candidates = [
            application.pending_application_submission,
            application.last_published_application_submission,
        ]

    for reference in candidates:
        if reference is not None and reference.id:
            return api.get_submission(application.id, reference.id, flight_id)
    return None


def _build_archive(files: Sequence[Path], directory: Path) -> Path:
    archive = directory / "packages.zip"
    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for file in files:
            zf.write(file, arcname=file.name)
    return archive


def apply_packages(
    submission: ApplicationSubmission,
    files: Sequence[Path],
    rollout_percentage: float | None = None,
) -> None:
    """Replace the submission's packages with ``files`` in place."""
    packages = submission.packages
    for package in packages:
        package.file_status = "PendingDelete"
    for file in files:
        packages.append(SubmissionPackage(file_name=file.name, file_status="PendingUpload"))

    if rollout_percentage is not None:
        options = submission.package_delivery_options or PackageDeliveryOptions()
        options.package_rollout = PackageRollout(
            is_package_rollout=True,
            package_rollout_percentage=rollout_percentage,
        )
        submission.package_delivery_options = options


def publish_packages(
    api: "StoreAPI",
    application: DevCenterApplication,
    files: Sequence[Path],
    console: Console,
    flight_id: str | None = None,
    no_commit: bool = False,
    rollout_percentage: float | None = None,
    token: CancellationToken | None = None,
) -> SubmissionStatus | None:
    """Upload package files to a submission and commit it.

    Returns:
        Commit status, or None when the commit was skipped

    Raises:
        StoreAPIError: If any request fails or the commit is rejected
    """
    if not files:
        raise StoreAPIError("No package files to publish")
    if not application.id:
        raise StoreAPIError("Application has no id")

    submission = get_any_submission(api, application, console, flight_id)
    if not submission.id:
        raise StoreAPIError("Could not get a submission for this application")

    apply_packages(submission, files, rollout_percentage)
    submission = api.update_submission(application.id, submission, flight_id)
    if not submission.file_upload_url:
        raise StoreAPIError("Submission has no file upload URL")

    with tempfile.TemporaryDirectory(prefix="msstore-") as tmp:
        archive = _build_archive(files, Path(tmp))
        if token is not None:
            token.raise_if_cancelled()
        with console.status("Uploading packages..."):
            api.upload_package_archive(submission.file_upload_url, archive)
    console.print("Packages uploaded.")

    if no_commit:
        console.print("Skipping submission commit.")
        return None

    status = api.commit_submission(application.id, submission.id, flight_id)
    if status.status is None:
        raise StoreAPIError("Submission commit failed", details=status.error_message() or None)

    console.print("Submission commit success! Here is some data:")
    console.print(f"Submission id: {submission.id}")
    console.print(f"Status: {status.status}")
    for package in submission.packages:
        if package.file_status != "PendingDelete":
            console.print(f"Package: {package.file_name}")
    return status


def poll_submission_status(
    api: "StoreAPI",
    app_id: str,
    submission_id: str,
    console: Console,
    flight_id: str | None = None,
    interval: float = 30,
    token: CancellationToken | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SubmissionStatus:
    """Poll the submission status until it leaves the commit phase.

    Returns:
        The first status that is not pending
    """
    last_status: str | None = None
    while True:
        if token is not None:
            token.raise_if_cancelled()
        status = api.get_submission_status(app_id, submission_id, flight_id)
        if status.status != last_status:
            console.print(f"Submission status: {status.status}")
            last_status = status.status
        if not status.is_pending:
            break
        logger.debug("Submission %s still %s, waiting %ss", submission_id, status.status, interval)
        sleep(interval)

    if status.is_failed:
        message = status.error_message()
        if message:
            console.print(message)
    return status
