"""Locate or download a Chromium snapshot build for the current platform."""

from __future__ import annotations

import logging
import os
import platform as _platform
import shutil
import subprocess
import sys
import urllib.request
import zipfile
from dataclasses import dataclass
from pathlib import Path

import platformdirs

log = logging.getLogger(__name__)

CUR_REV = "1095492"
LATEST = "latest"

APP_NAME = "chromelaunch"
DEFAULT_HOST = "https://storage.googleapis.com"

_SNAPSHOT_FOLDERS = {
    "linux": "Linux_x64",
    "mac": "Mac",
    "mac_arm": "Mac_Arm",
    "win": "Win_x64",
}


class FetchError(Exception):
    """Raised when a Chromium build cannot be found or installed."""


@dataclass(frozen=True)
class FetcherOptions:
    """Where to look for Chromium and whether it may be downloaded.

    ``revision`` is a snapshot revision number, or ``LATEST`` to ask the
    snapshot server for the newest one.
    """

    revision: str = CUR_REV
    install_dir: Path | None = None
    allow_download: bool = True
    allow_standard_dirs: bool = True


def current_platform() -> str:
    """Return the snapshot platform name for the running system."""
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        machine = _platform.machine().lower()
        return "mac_arm" if machine in ("arm64", "aarch64") else "mac"
    if sys.platform in ("win32", "cygwin"):
        return "win"
    raise FetchError(f"Unsupported platform: {sys.platform}")


def _check_platform(platform: str) -> None:
    if platform not in _SNAPSHOT_FOLDERS:
        raise FetchError(f"Unsupported platform: {platform}")


def archive_name(revision: str, platform: str) -> str:
    """Name of the top-level directory inside a snapshot archive."""
    _check_platform(platform)
    if platform == "linux":
        return "chrome-linux"
    if platform in ("mac", "mac_arm"):
        return "chrome-mac"
    # The Windows archive name changed at r591479.
    try:
        newer = int(revision) > 591_479
    except ValueError:
        newer = False
    return "chrome-win" if newer else "chrome-win32"


def executable_relpath(platform: str) -> Path:
    """Path of the browser executable inside the archive directory."""
    _check_platform(platform)
    if platform == "linux":
        return Path("chrome")
    if platform in ("mac", "mac_arm"):
        return Path("Chromium.app", "Contents", "MacOS", "Chromium")
    return Path("chrome.exe")


def download_url(revision: str, platform: str) -> str:
    """URL of the snapshot archive for a revision."""
    _check_platform(platform)
    folder = _SNAPSHOT_FOLDERS[platform]
    name = archive_name(revision, platform)
    return f"{DEFAULT_HOST}/chromium-browser-snapshots/{folder}/{revision}/{name}.zip"


def latest_revision(platform: str) -> str:
    """Ask the snapshot server for the newest revision on a platform."""
    _check_platform(platform)
    folder = _SNAPSHOT_FOLDERS[platform]
    url = f"{DEFAULT_HOST}/chromium-browser-snapshots/{folder}/LAST_CHANGE"
    with urllib.request.urlopen(url) as resp:
        return resp.read().decode("utf-8").strip()


def get_download_size(url: str) -> int:
    """Size of the resource at ``url`` in whole MiB."""
    with urllib.request.urlopen(url) as resp:
        length = resp.headers.get("Content-Length")
    if length is None:
        raise FetchError("response doesn't include the content length")
    try:
        return int(length) // 2**20
    except ValueError as exc:
        raise FetchError(f"invalid content length: {length!r}") from exc


def _standard_data_dir() -> Path:
    return platformdirs.user_data_path(APP_NAME, appauthor=False)


def _walk(root: Path):
    """Yield ``root`` and every path beneath it, top-down."""
    if not root.exists():
        return
    yield root
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        for name in (*dirnames, *filenames):
            yield base / name


def _extract(zip_path: Path, extract_path: Path) -> None:
    if sys.platform == "darwin":
        # The app bundle holds symlinks that the zipfile module cannot restore.
        result = subprocess.run(
            ["unzip", str(zip_path.resolve())],
            cwd=extract_path,
            capture_output=True,
            text=True,
            errors="replace",
        )
        if result.returncode != 0:
            log.error(
                "Unable to extract zip using unzip command:\n---- stdout:\n%s\n---- stderr:\n%s",
                result.stdout,
                result.stderr,
            )
        return

    with zipfile.ZipFile(zip_path) as archive:
        for index, info in enumerate(archive.infolist()):
            if info.comment:
                log.debug("File %d comment: %s", index, info.comment.decode("utf-8", "replace"))
            target = archive.extract(info, extract_path)
            log.debug("File %d extracted to %r (%d bytes)", index, target, info.file_size)
            mode = info.external_attr >> 16
            if mode and os.name == "posix":
                os.chmod(target, mode & 0o7777)


def unzip(zip_path: str | os.PathLike[str]) -> Path:
    """Extract an archive next to itself into a folder named after it, then delete it."""
    zip_path = Path(zip_path)
    if not zip_path.stem:
        raise FetchError("zip_path does not have a file stem")
    extract_path = zip_path.parent / zip_path.stem
    extract_path.mkdir(parents=True, exist_ok=True)

    log.info("Extracting (this can take a while): %s", extract_path)
    _extract(zip_path, extract_path)

    log.info("Cleaning up")
    try:
        zip_path.unlink()
    except OSError:
        log.info("Failed to delete zip")
    return extract_path


class Fetcher:
    """Finds an installed Chromium revision, downloading it when allowed."""

    def __init__(self, options: FetcherOptions | None = None) -> None:
        self.options = options if options is not None else FetcherOptions()

    def _revision(self) -> str:
        if self.options.revision == LATEST:
            return latest_revision(current_platform())
        return self.options.revision

    def _search_dirs(self) -> list[Path]:
        dirs = []
        if self.options.install_dir is not None:
            dirs.append(Path(self.options.install_dir))
        if self.options.allow_standard_dirs:
            dirs.append(_standard_data_dir())
        return dirs

    def fetch(self) -> Path:
        """Return the path to the browser executable, installing it if needed."""
        revision = self._revision()
        try:
            return self.chrome_path(revision)
        except FetchError:
            pass

        if self.options.allow_download:
            unzip(self.download(revision))
            return self.chrome_path(revision)

        raise FetchError("Could not fetch")

    def find_install(self, revision: str) -> Path:
        """Return the installation directory named ``{platform}-{revision}``."""
        platform = current_platform()
        for root in self._search_dirs():
            for entry in _walk(root):
                parts = entry.name.split("-")
                if len(parts) == 2 and parts[0] == platform and parts[1] == revision:
                    return entry
        raise FetchError("Could not find an existing revision")

    def chrome_path(self, revision: str) -> Path:
        """Full path of the browser executable of an installed revision."""
        platform = current_platform()
        base = self.find_install(revision)
        return base / archive_name(revision, platform) / executable_relpath(platform)

    def download(self, revision: str) -> Path:
        """Download the archive of a revision and return the path it was saved to."""
        platform = current_platform()
        folder_name = f"{platform}-{revision}"
        if self.options.install_dir is not None:
            path = Path(self.options.install_dir) / folder_name
        elif self.options.allow_standard_dirs:
            path = _standard_data_dir() / folder_name
        else:
            raise FetchError("No allowed installation directory")
        path = path.with_name(path.name + ".zip")

        url = download_url(revision, platform)
        log.info("Chrome download url: %s", url)
        log.info("Total size of download: %d MiB", get_download_size(url))

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FetchError(f"Could not create directory at {path.parent}") from exc

        log.info("Creating file for download: %s", path)
        with urllib.request.urlopen(url) as resp, path.open("wb") as out:
            shutil.copyfileobj(resp, out)
        return path