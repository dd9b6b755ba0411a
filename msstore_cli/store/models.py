"""Pydantic models for Store submission API resources.

The API speaks camelCase JSON. Unknown fields are kept so a submission
read from the service can be sent back with an update without losing
anything this CLI does not model.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PENDING_STATUSES = frozenset({"CommitStarted"})
FAILED_STATUSES = frozenset(
    {
        "Canceled",
        "CommitFailed",
        "PreProcessingFailed",
        "CertificationFailed",
        "PublishFailed",
        "ReleaseFailed",
    }
)


class StoreModel(BaseModel):
    """Base for API resources: camelCase aliases, extra fields preserved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SubmissionReference(StoreModel):
    id: str | None = None
    resource_location: str | None = None


class DevCenterApplication(StoreModel):
    """An application registered in Partner Center."""

    id: str | None = None
    primary_name: str | None = None
    package_family_name: str | None = None
    package_identity_name: str | None = None
    publisher_name: str | None = None
    first_published_date: str | None = None
    last_published_application_submission: SubmissionReference | None = None
    pending_application_submission: SubmissionReference | None = None


class DevCenterError(StoreModel):
    code: str | None = None
    details: str | None = None


class StatusDetails(StoreModel):
    errors: list[DevCenterError] = Field(default_factory=list)
    warnings: list[DevCenterError] = Field(default_factory=list)
    certification_reports: list[dict[str, Any]] = Field(default_factory=list)


class SubmissionPackage(StoreModel):
    """A package entry of a submission."""

    file_name: str | None = None
    file_status: str | None = None
    id: str | None = None
    version: str | None = None
    architecture: str | None = None


class PackageRollout(StoreModel):
    is_package_rollout: bool = False
    package_rollout_percentage: float = 0.0
    package_rollout_status: str | None = None
    fallback_submission_id: str | None = None


class PackageDeliveryOptions(StoreModel):
    package_rollout: PackageRollout | None = None
    is_mandatory_update: bool | None = None
    mandatory_update_effective_date: str | None = None


class ApplicationSubmission(StoreModel):
    """An application or flight submission.

    Application submissions list their packages under
    ``applicationPackages``, flight submissions under ``flightPackages``.
    """

    id: str | None = None
    flight_id: str | None = None
    friendly_name: str | None = None
    status: str | None = None
    status_details: StatusDetails | None = None
    file_upload_url: str | None = None
    application_packages: list[SubmissionPackage] | None = None
    flight_packages: list[SubmissionPackage] | None = None
    package_delivery_options: PackageDeliveryOptions | None = None

    @property
    def packages(self) -> list[SubmissionPackage]:
        if self.flight_id is not None or self.flight_packages is not None:
            if self.flight_packages is None:
                self.flight_packages = []
            return self.flight_packages
        if self.application_packages is None:
            self.application_packages = []
        return self.application_packages


class SubmissionStatus(StoreModel):
    """Result of a commit or status request."""

    status: str | None = None
    status_details: StatusDetails | None = None

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES

    @property
    def is_failed(self) -> bool:
        return self.status in FAILED_STATUSES

    def error_message(self) -> str:
        """Render errors and warnings reported by the service."""
        if self.status_details is None:
            return ""
        lines = [f"{e.code}: {e.details}" for e in self.status_details.errors]
        lines += [f"{w.code}: {w.details}" for w in self.status_details.warnings]
        return "\n".join(lines)


class Flight(StoreModel):
    """A package flight of an application."""

    flight_id: str | None = None
    friendly_name: str | None = None
    group_ids: list[str] = Field(default_factory=list)
    rank_higher_than: str | None = None
    last_published_flight_submission: SubmissionReference | None = None
    pending_flight_submission: SubmissionReference | None = None
