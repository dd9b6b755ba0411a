"""Manifest patchers, one module per file format.

- appx: Package.appxmanifest (UWP, WinUI, MAUI, React Native)
- csproj: MSBuild project properties (MAUI)
- electron: package.json / electron-builder.json
- pubspec: Flutter pubspec.yaml
"""

from msstore_cli.manifests import appx, csproj, electron, pubspec

__all__ = ["appx", "csproj", "electron", "pubspec"]
