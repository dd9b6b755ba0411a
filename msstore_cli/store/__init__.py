"""Microsoft Store submission API client and workflow."""

from msstore_cli.store.api import StoreAPI
from msstore_cli.store.models import (
    ApplicationSubmission,
    DevCenterApplication,
    Flight,
    SubmissionPackage,
    SubmissionStatus,
)
from msstore_cli.store.submission import (
    get_any_submission,
    get_existing_submission,
    poll_submission_status,
    publish_packages,
)

__all__ = [
    "StoreAPI",
    "DevCenterApplication",
    "ApplicationSubmission",
    "SubmissionPackage",
    "SubmissionStatus",
    "Flight",
    "get_any_submission",
    "get_existing_submission",
    "publish_packages",
    "poll_submission_status",
]
