"""Pydantic v2 configuration models for the CLI settings file.

These models provide:
- Type-safe loading of ~/.msstore/settings.yml
- Validation of Store credentials
- Default Store endpoints and timeouts
- Environment variable override support
"""

import uuid

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class StoreCredentials(BaseModel):
    """Azure AD application used to call the Store submission API."""

    tenant_id: str | None = Field(default=None, description="Azure AD tenant id (GUID)")
    seller_id: str | None = Field(default=None, description="Partner Center seller id")
    client_id: str | None = Field(default=None, description="Azure AD client id (GUID)")
    client_secret: str | None = Field(default=None, description="Azure AD client secret")

    @field_validator("tenant_id", "client_id")
    @classmethod
    def validate_guid(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        try:
            return str(uuid.UUID(v))
        except ValueError:
            raise ValueError(f"'{v}' is not a valid GUID") from None

    @property
    def complete(self) -> bool:
        """True when every value needed for a client-credential login is set."""
        return all([self.tenant_id, self.seller_id, self.client_id, self.client_secret])


class EndpointsConfig(BaseModel):
    """Store service endpoints."""

    store_api_url: str = Field(
        default="https://manage.devcenter.microsoft.com",
        description="Base URL of the Store submission API",
    )
    login_url: str = Field(
        default="https://login.microsoftonline.com",
        description="Azure AD authority used for token requests",
    )

    @field_validator("store_api_url", "login_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")


class TimeoutsConfig(BaseModel):
    """Timeout configuration in seconds."""

    http_request: int = Field(
        default=100,
        ge=5,
        description="Timeout for a single Store API request",
    )
    package_upload: int = Field(
        default=1800,
        ge=60,
        description="Timeout for uploading a package archive",
    )
    submission_poll_interval: int = Field(
        default=30,
        ge=1,
        description="Seconds between submission status checks",
    )


class CLIConfig(BaseSettings):
    """Root model of the CLI settings file.

    Supports environment variable overrides with MSSTORE_ prefix.
    Example: MSSTORE_CREDENTIALS__CLIENT_SECRET=...
    """

    publisher_display_name: str | None = Field(
        default=None,
        description="Publisher display name written into manifests",
    )
    credentials: StoreCredentials = Field(default_factory=StoreCredentials)
    endpoints: EndpointsConfig = Field(default_factory=EndpointsConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)

    model_config = {
        "env_prefix": "MSSTORE_",
        "env_nested_delimiter": "__",
    }
