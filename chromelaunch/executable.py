"""Find an installed Chrome, Chromium or Edge executable."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

CHROME_ENV_VAR = "CHROME"

_CHROME_CHANNELS = ("stable", "beta", "dev", "unstable")
_EDGE_CHANNELS = ("stable", "beta", "dev")

# Program names looked up on PATH, in order of preference.
CANDIDATE_NAMES: tuple[str, ...] = (
    *(f"google-chrome-{channel}" for channel in _CHROME_CHANNELS),
    "chromium",
    "chromium-browser",
    *(f"microsoft-edge-{channel}" for channel in _EDGE_CHANNELS),
    "chrome",
    "chrome-browser",
    "msedge",
    "microsoft-edge",
)

# Application bundles on macOS; each bundle's binary carries the bundle's name.
_MACOS_APPS = (
    "Google Chrome",
    "Google Chrome Beta",
    "Google Chrome Dev",
    "Google Chrome Canary",
    "Chromium",
    "Microsoft Edge",
    "Microsoft Edge Beta",
    "Microsoft Edge Dev",
    "Microsoft Edge Canary",
)

MACOS_PATHS: tuple[str, ...] = tuple(
    f"/Applications/{app}.app/Contents/MacOS/{app}" for app in _MACOS_APPS
)

WINDOWS_PATHS: tuple[str, ...] = (
    "\\".join(
        ("C:", "Program Files (x86)", "Microsoft", "Edge", "Application", "msedge.exe")
    ),
)

_REGISTRY_KEY = "\\".join(
    ("SOFTWARE", "Microsoft", "Windows", "CurrentVersion", "App Paths", "chrome.exe")
)


class ExecutableNotFound(LookupError):
    """Raised when no browser executable can be found."""


def _chrome_path_from_registry() -> Path | None:
    try:
        import winreg
    except ImportError:
        return None
    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, _REGISTRY_KEY) as key:
            value, _ = winreg.QueryValueEx(key, "")
    except OSError:
        return None
    return Path(value) if value else None


def _platform_candidates():
    """Yield well-known install locations for the running system."""
    if sys.platform == "darwin":
        yield from MACOS_PATHS
    elif sys.platform in ("win32", "cygwin"):
        registry_path = _chrome_path_from_registry()
        if registry_path is not None:
            yield str(registry_path)
        yield from WINDOWS_PATHS


def _on_path():
    for name in CANDIDATE_NAMES:
        found = shutil.which(name)
        if found:
            yield found


def default_executable() -> Path:
    """Return the path of a browser executable.

    The ``CHROME`` environment variable wins if it names an existing file.
    Otherwise well-known program names are searched for on PATH, then the
    standard install locations of macOS and Windows are tried.
    """
    env_path = os.environ.get(CHROME_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return Path(env_path)

    found = next(_on_path(), None)
    if found is not None:
        return Path(found)

    existing = next((c for c in _platform_candidates() if os.path.exists(c)), None)
    if existing is not None:
        return Path(existing)

    raise ExecutableNotFound("Could not auto detect a chrome executable")