# chromelaunch

Start a Chrome or Chromium browser with its DevTools remote-debugging port
open, and get back the WebSocket URL that a DevTools client connects to.

## What it does

- **Finds a browser.** `chromelaunch.executable.default_executable()` checks
  the `CHROME` environment variable first and uses it if it names a file that
  exists. Next it searches `PATH` for the usual Chrome, Chromium and Edge
  program names (`CANDIDATE_NAMES`). Then it tries the standard install
  locations: the `/Applications` bundles on macOS, or the registry entry and
  the Edge install path on Windows. If none of these turns up a browser, it
  raises `ExecutableNotFound`.
- **Fetches a browser snapshot.** `chromelaunch.fetcher.Fetcher` looks for
  an installed Chromium snapshot in a folder named `{platform}-{revision}`.
  It searches the `install_dir` you give first, then the per-user data
  directory. If no snapshot is there and downloading is allowed, it downloads
  and unpacks the snapshot archive. By default it uses revision `CUR_REV`;
  pass `revision=LATEST` to ask the snapshot server for the newest one.
- **Launches it.** `chromelaunch.process.Process` starts the browser and
  reads the browser's error output until the DevTools URL appears. By
  default it creates a fresh temporary profile, picks a random free debugging
  port from 8000–8999, and passes a set of default flags (`DEFAULT_ARGS`).
  Closing the process kills the browser and removes the temporary profile.

## Installation

```
pip install chromelaunch
```

## Usage

```python
from chromelaunch.executable import default_executable
from chromelaunch.options import LaunchOptions
from chromelaunch.process import Process

with Process(LaunchOptions(path=default_executable())) as chrome:
    print(chrome.pid, chrome.user_data_dir)
    print(chrome.debug_ws_url)   # ws://127.0.0.1:8xxx/devtools/browser/...
```

If `path` is left as `None`, `Process` calls
`Fetcher(options.fetcher_options).fetch()` to find a snapshot, and
downloads one if needed. A `Process` can also be closed explicitly with
`close()`.

`LaunchOptions` is a dataclass with these fields:

- `headless` (default `True`) and `devtools`. When `devtools` is set, the
  browser gets `--auto-open-devtools-for-tabs` instead of `--headless`.
- `sandbox` (default `True`). Setting it to `False` adds `--no-sandbox` and
  `--disable-setuid-sandbox`.
- `enable_gpu`. `--disable-gpu` is passed unless this is set.
- `enable_logging`.
- `ignore_certificate_errors` (default `True`).
- `window_size`, as `(width, height)`.
- `port`. This is a fixed debugging port. If it is set, a launch failure is
  raised at once instead of being retried on another port.
- `path` and `user_data_dir`.
- `extensions`: folders of unpacked extensions.
- `args`, `ignore_default_args` and `disable_default_args`.
- `process_envs`: extra environment variables for the browser.
- `proxy_server`.
- `fetcher_options`.
- `idle_browser_timeout`: a number of seconds. The launcher itself does not
  use it; it is kept for the client that connects to the browser.

To see the exact command line that a set of options produces, without
starting anything, call `build_args`:

```python
from chromelaunch.options import LaunchOptions, build_args

print(build_args(LaunchOptions(window_size=(1280, 800)), 9222, "/tmp/profile"))
```

To find the DevTools URL in browser output you already have, call
`ws_url_from_lines`:

```python
from chromelaunch.process import ws_url_from_lines

ws_url_from_lines(["DevTools listening on ws://127.0.0.1:9222/devtools/browser/abc"])
```

### Downloading a snapshot

```python
from chromelaunch.fetcher import Fetcher, FetcherOptions, LATEST

path = Fetcher(FetcherOptions(install_dir="./browsers")).fetch()
newest = Fetcher(FetcherOptions(revision=LATEST, allow_standard_dirs=False,
                                install_dir="./browsers")).fetch()
```

The module also provides these helpers:

- `current_platform()`
- `archive_name()`
- `executable_relpath()`
- `download_url()`
- `latest_revision()`
- `get_download_size()`
- `unzip()`

### Errors

If the browser cannot be launched, `Process` raises a subclass of
`ChromeLaunchError`:

- `PortOpenTimeout`: no DevTools URL appeared within 30 seconds, or the
  output ended without one.
- `NoAvailablePorts`: no free port was found, or every retry failed.
- `DebugPortInUse`
- `RunningAsRootWithoutNoSandbox`: pass `sandbox=False` when running as
  root.

`Fetcher` raises `FetchError` in these cases:

- No installed snapshot can be found and downloading is not allowed.
- No installation directory is allowed.
- The platform is not supported.

## What it does not do

This package only finds, fetches and starts the browser and hands back its
DevTools WebSocket URL. It does not speak the DevTools protocol itself. It
has no tabs, navigation, screenshots, PDF printing, cookies or event
listeners. To drive the browser, pass `debug_ws_url` to a DevTools client
of your choice. There is no command-line program.