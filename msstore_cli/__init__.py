"""Configure, package and publish apps to the Microsoft Store."""

__version__ = "0.1.0"

from msstore_cli.exceptions import (
    AccountError,
    ArtifactNotFoundError,
    BuildError,
    CommandNotFoundError,
    ConfigurationError,
    DetectionError,
    ManifestError,
    MSStoreError,
    OperationCancelledError,
    PackagingNotSupportedError,
    PublishingNotSupportedError,
    StoreAPIError,
    WindowsOnlyError,
)

__all__ = [
    "__version__",
    "MSStoreError",
    "ConfigurationError",
    "DetectionError",
    "ManifestError",
    "CommandNotFoundError",
    "OperationCancelledError",
    "BuildError",
    "ArtifactNotFoundError",
    "PackagingNotSupportedError",
    "PublishingNotSupportedError",
    "WindowsOnlyError",
    "AccountError",
    "StoreAPIError",
]
