"""Start a browser process and find its DevTools WebSocket URL."""

from __future__ import annotations

import dataclasses
import logging
import os
import queue
import random
import re
import shutil
import socket
import subprocess
import sys
import tempfile
import threading
from collections.abc import Iterable
from pathlib import Path

from chromelaunch.fetcher import Fetcher
from chromelaunch.options import LaunchOptions, build_args

log = logging.getLogger(__name__)

_PORT_RANGE = range(8000, 9000)
_MAX_ATTEMPTS = 11
_WS_URL_TIMEOUT = 30.0

_PORT_TAKEN_RE = re.compile(r"ERROR.*bind\(\)")
_LISTENING_RE = re.compile(r"listening on (.*/devtools/browser/.*)$")
_ROOT_SANDBOX = "Running as root without --no-sandbox is not supported"


class ChromeLaunchError(Exception):
    """Base class for failures while starting the browser."""


class PortOpenTimeout(ChromeLaunchError):
    def __init__(self) -> None:
        super().__init__(
            "Chrome launched, but didn't give us a WebSocket URL before we timed out"
        )


class NoAvailablePorts(ChromeLaunchError):
    def __init__(self) -> None:
        super().__init__("There are no available ports between 8000 and 9000 for debugging")


class DebugPortInUse(ChromeLaunchError):
    def __init__(self) -> None:
        super().__init__("The chosen debugging port is already in use")


class RunningAsRootWithoutNoSandbox(ChromeLaunchError):
    def __init__(self) -> None:
        super().__init__("You need to set the sandbox(false) option when running as root")


def ws_url_from_lines(lines: Iterable[str]) -> str | None:
    """Scan browser output for the DevTools URL.

    Returns the URL, or ``None`` if the output ends without one. Raises
    when the output shows that the browser cannot start.
    """
    for raw in lines:
        line = raw.rstrip("\r\n")
        log.debug("Chrome output: %s", line)
        if _ROOT_SANDBOX in line:
            raise RunningAsRootWithoutNoSandbox()
        if _PORT_TAKEN_RE.search(line):
            raise DebugPortInUse()
        match = _LISTENING_RE.search(line)
        if match:
            return match.group(1)
    return None


def port_is_available(port: int) -> bool:
    """Whether a TCP listener can be bound to ``127.0.0.1:port``."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(("127.0.0.1", port))
        except OSError:
            return False
    return True


def get_available_port() -> int:
    """Pick a random free port between 8000 and 8999."""
    ports = list(_PORT_RANGE)
    random.shuffle(ports)
    for port in ports:
        if port_is_available(port):
            return port
    raise NoAvailablePorts()


class Process:
    """A running browser process with a temporary profile if none was given.

    The process is killed and its temporary profile removed on ``close``,
    on leaving a ``with`` block, or when the object is collected.
    """

    def __init__(self, options: LaunchOptions | None = None) -> None:
        self._child: subprocess.Popen[str] | None = None
        self._temp_dir: Path | None = None
        self.user_data_dir: Path | None = None
        self.debug_ws_url = ""

        options = options if options is not None else LaunchOptions()
        if options.path is None:
            options = dataclasses.replace(
                options, path=Fetcher(options.fetcher_options).fetch()
            )
        self._options = options

        self._start()
        log.info("Started Chrome. PID: %d", self.pid)

        for attempt in range(_MAX_ATTEMPTS):
            try:
                self.debug_ws_url = self._ws_url_from_output()
            except RunningAsRootWithoutNoSandbox:
                self.close()
                raise
            except ChromeLaunchError as exc:
                log.debug("Problem getting WebSocket URL from Chrome: %s", exc)
                self.close()
                if options.port is not None:
                    raise
                self._start()
            else:
                log.debug("Found debugging WS URL: %s", self.debug_ws_url)
                break
            log.debug(
                "Trying again to find available debugging port. Attempts: %d", attempt
            )
        else:
            self.close()
            raise NoAvailablePorts()

        # Stop listening to the browser's output once the URL is known.
        if self._child is not None and self._child.stderr is not None:
            self._child.stderr.close()

    @property
    def pid(self) -> int:
        """Process id of the browser."""
        if self._child is None:
            raise ChromeLaunchError("browser process is not running")
        return self._child.pid

    def _start(self) -> None:
        options = self._options
        port = options.port if options.port is not None else get_available_port()

        if options.user_data_dir is not None:
            user_data_dir = Path(options.user_data_dir)
            self._temp_dir = None
        else:
            user_data_dir = Path(tempfile.mkdtemp(prefix="chromelaunch-profile"))
            self._temp_dir = user_data_dir
        self.user_data_dir = user_data_dir
        log.debug("Chrome will have profile: %s", user_data_dir)

        args = build_args(options, port, user_data_dir)
        if options.path is None:
            raise ChromeLaunchError("Chrome path required")
        path = os.fspath(options.path)
        log.info("Launching Chrome binary at %s", path)
        log.debug("with CLI arguments: %s", args)

        env = None
        if options.process_envs is not None:
            env = {**os.environ, **options.process_envs}

        creationflags = subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0
        try:
            self._child = subprocess.Popen(
                [path, *args],
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                env=env,
                creationflags=creationflags,
            )
        except OSError:
            self._remove_temp_dir()
            raise

    def _ws_url_from_output(self) -> str:
        child = self._child
        if child is None or child.stderr is None:
            raise PortOpenTimeout()
        stderr = child.stderr
        results: queue.Queue[tuple[str | None, BaseException | None]] = queue.Queue(1)

        def reader() -> None:
            try:
                results.put((ws_url_from_lines(stderr), None))
            except Exception as exc:  # handed back to the waiting thread
                results.put((None, exc))

        threading.Thread(target=reader, daemon=True).start()
        try:
            url, error = results.get(timeout=_WS_URL_TIMEOUT)
        except queue.Empty:
            raise PortOpenTimeout() from None
        if error is not None:
            if isinstance(error, ChromeLaunchError):
                raise error
            raise PortOpenTimeout() from error
        if url is None:
            raise PortOpenTimeout()
        return url

    def _remove_temp_dir(self) -> None:
        if self._temp_dir is None:
            return
        try:
            shutil.rmtree(self._temp_dir)
        except OSError as exc:
            log.warning("Failed to close temporary directory: %s", exc)
        self._temp_dir = None

    def close(self) -> None:
        """Kill the browser and remove its temporary profile."""
        child = self._child
        if child is not None:
            log.info("Killing Chrome. PID: %d", child.pid)
            try:
                child.kill()
            except OSError:
                pass
            child.wait()
            if child.stderr is not None:
                try:
                    child.stderr.close()
                except OSError:
                    pass
            self._child = None
        self._remove_temp_dir()

    def __enter__(self) -> Process:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_child", None) is not None or getattr(self, "_temp_dir", None):
            self.close()