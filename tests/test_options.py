from pathlib import Path

from chromelaunch.fetcher import CUR_REV, FetcherOptions
from chromelaunch.options import DEFAULT_ARGS, LaunchOptions, build_args


def _args(**kwargs):
    return build_args(LaunchOptions(**kwargs), 9222, "/tmp/profile")


def test_defaults_match_source():
    options = LaunchOptions()
    assert options.headless is True
    assert options.sandbox is True
    assert options.devtools is False
    assert options.enable_gpu is False
    assert options.ignore_certificate_errors is True
    assert options.user_data_dir is None
    assert options.idle_browser_timeout == 30.0
    assert options.fetcher_options == FetcherOptions()
    assert options.fetcher_options.revision == CUR_REV


def test_default_args_appear_in_built_command():
    args = _args()
    assert args.count("--disable-background-networking") == 1
    assert "--use-mock-keychain" in args
    assert "--disable-features=TranslateUI,BlinkGenPropertyTrees" in args
    assert len(args) == 5 + 23 + 3


def test_leading_args():
    args = _args()
    assert args[:5] == [
        "--remote-debugging-port=9222",
        "--verbose",
        "--log-level=0",
        "--no-first-run",
        "--user-data-dir=/tmp/profile",
    ]


def test_default_args_included_in_order():
    args = _args()
    assert args[5 : 5 + len(DEFAULT_ARGS)] == list(DEFAULT_ARGS)


def test_default_flags_tail():
    args = _args()
    assert args[5 + len(DEFAULT_ARGS) :] == [
        "--headless",
        "--ignore-certificate-errors",
        "--disable-gpu",
    ]


def test_ignore_default_args():
    args = _args(ignore_default_args=["--disable-extensions", "--disable-sync"])
    assert "--disable-extensions" not in args
    assert "--disable-sync" not in args
    assert "--disable-hang-monitor" in args


def test_disable_default_args():
    args = _args(disable_default_args=True)
    assert all(arg not in args for arg in DEFAULT_ARGS if arg != "--no-first-run")
    assert args == [
        "--remote-debugging-port=9222",
        "--verbose",
        "--log-level=0",
        "--no-first-run",
        "--user-data-dir=/tmp/profile",
        "--headless",
        "--ignore-certificate-errors",
        "--disable-gpu",
    ]


def test_extra_args_follow_defaults():
    args = _args(args=["--foo", "--bar=1"])
    pos = len(DEFAULT_ARGS) + 5
    assert args[pos : pos + 2] == ["--foo", "--bar=1"]


def test_window_size():
    assert "--window-size=800,600" in _args(window_size=(800, 600))
    assert not any(a.startswith("--window-size=") for a in _args())


def test_devtools_overrides_headless():
    args = _args(devtools=True)
    assert "--headless" not in args
    assert "--auto-open-devtools-for-tabs" in args


def test_not_headless():
    args = _args(headless=False)
    assert "--headless" not in args
    assert "--auto-open-devtools-for-tabs" not in args


def test_flags_toggle():
    args = _args(
        ignore_certificate_errors=False, enable_logging=True, enable_gpu=True
    )
    assert "--ignore-certificate-errors" not in args
    assert "--enable-logging" in args
    assert "--disable-gpu" not in args


def test_proxy_server():
    assert "--proxy-server=localhost:3128" in _args(proxy_server="localhost:3128")
    assert not any(a.startswith("--proxy-server") for a in _args())


def test_no_sandbox():
    args = _args(sandbox=False)
    assert args[-2:] == ["--no-sandbox", "--disable-setuid-sandbox"]
    assert "--no-sandbox" not in _args()


def test_extensions_last():
    args = _args(extensions=[Path("ext/one"), "ext/two"])
    assert args[-2:] == [
        f"--load-extension={Path('ext/one')}",
        "--load-extension=ext/two",
    ]


def test_user_data_dir_path_object():
    args = build_args(LaunchOptions(), 8000, Path("profile"))
    assert f"--user-data-dir={Path('profile')}" in args
    assert "--remote-debugging-port=8000" in args


def test_mutable_defaults_not_shared():
    first = LaunchOptions()
    second = LaunchOptions()
    first.args.append("--x")
    assert "--x" in _args(args=first.args)
    assert "--x" not in build_args(second, 9222, "/tmp/profile")