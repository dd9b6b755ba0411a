"""Project configurators.

Importing this package registers every configurator with
ConfiguratorRegistry. Detection order (lowest priority first):
PWA, MSIX, Flutter, React Native, Electron, MAUI, WinUI, UWP.
"""

from msstore_cli.configurators import (  # noqa: F401
    electron,
    flutter,
    maui,
    msix,
    pwa,
    react_native,
    uwp,
    winui,
)
from msstore_cli.configurators.base import (
    ConfiguratorRegistry,
    FileProjectConfigurator,
    ProjectConfigurator,
    is_url,
)

__all__ = [
    "ConfiguratorRegistry",
    "ProjectConfigurator",
    "FileProjectConfigurator",
    "is_url",
]
