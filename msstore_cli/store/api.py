"""Store submission REST API client.

Thin urllib wrapper around https://manage.devcenter.microsoft.com/v1.0/my/
authenticated with an Azure AD client-credential token.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from pathlib import Path
from typing import Any

from msstore_cli.config.models import CLIConfig
from msstore_cli.context import CancellationToken
from msstore_cli.exceptions import AccountError, StoreAPIError
from msstore_cli.store.models import (
    ApplicationSubmission,
    DevCenterApplication,
    Flight,
    SubmissionStatus,
)

logger = logging.getLogger(__name__)

API_PATH = "/v1.0/my/"
TOKEN_RESOURCE = "https://manage.devcenter.microsoft.com"
PAGE_SIZE = 100
USER_AGENT = "msstore-cli"

Opener = Callable[..., Any]


def _error_details(error: urllib.error.HTTPError) -> str:
    try:
        body = error.read().decode("utf-8", errors="replace")
    except OSError:
        return str(error)
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return body or str(error)
    if isinstance(data, dict):
        message = data.get("message") or data.get("error_description") or data.get("error")
        code = data.get("code") or data.get("statusCode")
        if message:
            return f"{code}: {message}" if code else str(message)
    return body


class StoreAPI:
    """Client for the Store submission API.

    One instance serves one CLI invocation; the access token is fetched on
    the first request and reused.
    """

    def __init__(
        self,
        config: CLIConfig,
        token: CancellationToken | None = None,
        opener: Opener | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: CLI settings holding credentials, endpoints and timeouts
            token: Cancellation token checked before every request
            opener: Replacement for urllib.request.urlopen
        """
        self.config = config
        self.token = token or CancellationToken()
        self._opener = opener or urllib.request.urlopen
        self._access_token: str | None = None

    @property
    def base_url(self) -> str:
        return self.config.endpoints.store_api_url + API_PATH

    def _open(self, request: urllib.request.Request, timeout: int) -> bytes:
        self.token.raise_if_cancelled()
        logger.debug("%s %s", request.get_method(), request.full_url)
        try:
            with self._opener(request, timeout=timeout) as response:
                return response.read()
        except urllib.error.HTTPError as e:
            details = _error_details(e)
            fix_hint = None
            if e.code in (401, 403):
                fix_hint = "Check your credentials with 'msstore reconfigure'"
            raise StoreAPIError(
                f"Store API request failed: {request.get_method()} {request.full_url}",
                status=e.code,
                details=details,
                fix_hint=fix_hint,
            ) from e
        except urllib.error.URLError as e:
            raise StoreAPIError(
                f"Could not reach {urllib.parse.urlsplit(request.full_url).netloc}",
                details=str(e.reason),
            ) from e

    def authenticate(self) -> str:
        """Fetch (once) and return an access token.

        Raises:
            AccountError: If no credentials are configured
            StoreAPIError: If the token endpoint rejects them
        """
        if self._access_token:
            return self._access_token

        credentials = self.config.credentials
        if not credentials.complete:
            raise AccountError(
                "No Microsoft Store credentials are configured.",
                fix_hint="Run 'msstore reconfigure' with your tenant, seller and client details",
            )

        url = f"{self.config.endpoints.login_url}/{credentials.tenant_id}/oauth2/token"
        form = urllib.parse.urlencode(
            {
                "grant_type": "client_credentials",
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
                "resource": TOKEN_RESOURCE,
            }
        ).encode("utf-8")
        request = urllib.request.Request(
            url,
            data=form,
            method="POST",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": USER_AGENT,
            },
        )
        payload = self._decode(self._open(request, self.config.timeouts.http_request), url)
        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise StoreAPIError("Authentication failed", details="No access_token in token response")
        self._access_token = str(access_token)
        return self._access_token

    @staticmethod
    def _decode(body: bytes, url: str) -> Any:
        if not body:
            return None
        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StoreAPIError(f"Invalid JSON response from {url}", details=str(e)) from e

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        access_token = self.authenticate()
        url = urllib.parse.urljoin(self.base_url, path)
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"
        request = urllib.request.Request(url, data=data, method=method, headers=headers)
        return self._decode(self._open(request, self.config.timeouts.http_request), url)

    @staticmethod
    def _submissions_path(app_id: str, flight_id: str | None) -> str:
        if flight_id:
            return f"applications/{app_id}/flights/{flight_id}/submissions"
        return f"applications/{app_id}/submissions"

    def _submission(self, data: Any, flight_id: str | None) -> ApplicationSubmission:
        submission = ApplicationSubmission.model_validate(data or {})
        if flight_id and submission.flight_id is None:
            submission.flight_id = flight_id
        return submission

    # Applications

    def get_applications(self) -> list[DevCenterApplication]:
        """List every application of the account, following pagination."""
        apps: list[DevCenterApplication] = []
        path: str | None = f"applications?skip=0&top={PAGE_SIZE}"
        while path:
            data = self._request("GET", path) or {}
            apps.extend(DevCenterApplication.model_validate(item) for item in data.get("value", []))
            path = data.get("@nextLink")
        return apps

    def get_application(self, app_id: str) -> DevCenterApplication:
        return DevCenterApplication.model_validate(self._request("GET", f"applications/{app_id}"))

    # Flights

    def get_flights(self, app_id: str) -> list[Flight]:
        flights: list[Flight] = []
        path: str | None = f"applications/{app_id}/listflights?skip=0&top={PAGE_SIZE}"
        while path:
            data = self._request("GET", path) or {}
            flights.extend(Flight.model_validate(item) for item in data.get("value", []))
            path = data.get("@nextLink")
        return flights

    def get_flight(self, app_id: str, flight_id: str) -> Flight:
        return Flight.model_validate(self._request("GET", f"applications/{app_id}/flights/{flight_id}"))

    def delete_flight(self, app_id: str, flight_id: str) -> None:
        self._request("DELETE", f"applications/{app_id}/flights/{flight_id}")

    # Submissions

    def get_submission(
        self, app_id: str, submission_id: str, flight_id: str | None = None
    ) -> ApplicationSubmission:
        data = self._request("GET", f"{self._submissions_path(app_id, flight_id)}/{submission_id}")
        return self._submission(data, flight_id)

    def create_submission(self, app_id: str, flight_id: str | None = None) -> ApplicationSubmission:
        data = self._request("POST", self._submissions_path(app_id, flight_id))
        return self._submission(data, flight_id)

    def update_submission(
        self, app_id: str, submission: ApplicationSubmission, flight_id: str | None = None
    ) -> ApplicationSubmission:
        body = submission.to_api()
        body.pop("flightId", None)
        data = self._request(
            "PUT", f"{self._submissions_path(app_id, flight_id)}/{submission.id}", body
        )
        return self._submission(data, flight_id)

    def delete_submission(self, app_id: str, submission_id: str, flight_id: str | None = None) -> None:
        self._request("DELETE", f"{self._submissions_path(app_id, flight_id)}/{submission_id}")

    def commit_submission(
        self, app_id: str, submission_id: str, flight_id: str | None = None
    ) -> SubmissionStatus:
        data = self._request(
            "POST", f"{self._submissions_path(app_id, flight_id)}/{submission_id}/commit"
        )
        return SubmissionStatus.model_validate(data or {})

    def get_submission_status(
        self, app_id: str, submission_id: str, flight_id: str | None = None
    ) -> SubmissionStatus:
        data = self._request(
            "GET", f"{self._submissions_path(app_id, flight_id)}/{submission_id}/status"
        )
        return SubmissionStatus.model_validate(data or {})

    def upload_package_archive(self, upload_url: str, archive: Path) -> None:
        """PUT a zip of packages to the submission's Azure blob SAS URL."""
        try:
            data = archive.read_bytes()
        except OSError as e:
            raise StoreAPIError(f"Failed to read {archive}", details=str(e)) from e

        request = urllib.request.Request(
            upload_url.replace("+", "%2B"),
            data=data,
            method="PUT",
            headers={"x-ms-blob-type": "BlockBlob", "User-Agent": USER_AGENT},
        )
        self._open(request, self.config.timeouts.package_upload)
