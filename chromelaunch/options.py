"""Launch options for a Chrome process and the command line built from them."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from chromelaunch.fetcher import FetcherOptions

# Flags passed to the browser unless disabled or individually ignored,
# listed in the order they appear on the command line.
_DEFAULT_FLAGS = """
    disable-background-networking enable-features=NetworkService,NetworkServiceInProcess
    disable-background-timer-throttling disable-backgrounding-occluded-windows
    disable-breakpad disable-client-side-phishing-detection
    disable-component-extensions-with-background-pages disable-default-apps
    disable-dev-shm-usage disable-extensions disable-features=TranslateUI,BlinkGenPropertyTrees
    disable-hang-monitor disable-ipc-flooding-protection disable-popup-blocking
    disable-prompt-on-repost disable-renderer-backgrounding disable-sync
    force-color-profile=srgb metrics-recording-only no-first-run
    enable-automation password-store=basic use-mock-keychain
"""

DEFAULT_ARGS: tuple[str, ...] = tuple(f"--{flag}" for flag in _DEFAULT_FLAGS.split())


@dataclass
class LaunchOptions:
    """How a browser process is run.

    With the defaults a binary is looked up (or fetched), a free debugging
    port is chosen, a throwaway profile directory is used and the browser
    runs headless. ``idle_browser_timeout`` is in seconds; ``extensions``
    are folders of unpacked extensions, which headless mode ignores.
    Turning on ``ignore_certificate_errors`` skips TLS verification.
    """

    headless: bool = True
    sandbox: bool = True
    devtools: bool = False
    enable_gpu: bool = False
    enable_logging: bool = False
    window_size: tuple[int, int] | None = None
    port: int | None = None
    ignore_certificate_errors: bool = True
    path: Path | None = None
    user_data_dir: Path | None = None
    extensions: Sequence[str | os.PathLike[str]] = field(default_factory=list)
    args: Sequence[str | os.PathLike[str]] = field(default_factory=list)
    ignore_default_args: Sequence[str] = field(default_factory=list)
    disable_default_args: bool = False
    fetcher_options: FetcherOptions = field(default_factory=FetcherOptions)
    idle_browser_timeout: float = 30.0
    process_envs: Mapping[str, str] | None = None
    proxy_server: str | None = None


def _default_flags(options: LaunchOptions) -> list[str]:
    if options.disable_default_args:
        return []
    ignored = {os.fspath(arg) for arg in options.ignore_default_args}
    return [arg for arg in DEFAULT_ARGS if arg not in ignored]


def _mode_flags(options: LaunchOptions) -> list[str]:
    if options.devtools:
        return ["--auto-open-devtools-for-tabs"]
    return ["--headless"] if options.headless else []


def build_args(
    options: LaunchOptions,
    port: int,
    user_data_dir: str | os.PathLike[str],
) -> list[str]:
    """Return the command-line arguments for launching the browser."""
    base = ("--verbose", "--log-level=0", "--no-first-run")
    args = [
        f"--remote-debugging-port={port}",
        *base,
        f"--user-data-dir={os.fspath(user_data_dir)}",
        *_default_flags(options),
        *(os.fspath(arg) for arg in options.args),
    ]

    if options.window_size is not None:
        width, height = options.window_size
        args.append(f"--window-size={width},{height}")

    args += _mode_flags(options)

    toggles = (
        (options.ignore_certificate_errors, "--ignore-certificate-errors"),
        (options.enable_logging, "--enable-logging"),
        (not options.enable_gpu, "--disable-gpu"),
    )
    args += [flag for wanted, flag in toggles if wanted]

    if options.proxy_server is not None:
        args.append(f"--proxy-server={options.proxy_server}")

    if not options.sandbox:
        args += ["--no-sandbox", "--disable-setuid-sandbox"]

    args += [f"--load-extension={os.fspath(ext)}" for ext in options.extensions]
    return args