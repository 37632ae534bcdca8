import webbrowser
from pathlib import Path
from unittest.mock import patch

import pytest

from modvalley.utils.exception import LaunchFailure
from modvalley.utils.generic import (
    chunks,
    format_time_display,
    open_url_browser,
    platform_specific_open,
)


def test_chunks() -> None:
    assert list(chunks(_list=[1, 2, 3, 4, 5], limit=2)) == [[1, 2], [3, 4], [5]]
    assert list(chunks(_list=[], limit=2)) == []


def test_format_time_display_never() -> None:
    assert format_time_display(None) == "Never"


def test_format_time_display_recent() -> None:
    with patch("modvalley.utils.generic.get_relative_time", return_value="Just now"):
        display = format_time_display(1_700_000_000_000)
    assert display.endswith("| Just now")


def test_open_url_browser_no_browser() -> None:
    with patch("modvalley.utils.generic.webbrowser.open", return_value=False):
        with pytest.raises(LaunchFailure):
            open_url_browser("https://www.nexusmods.com/stardewvalley/mods/1915")


def test_open_url_browser_error() -> None:
    with patch(
        "modvalley.utils.generic.webbrowser.open",
        side_effect=webbrowser.Error("no runnable browser"),
    ):
        with pytest.raises(LaunchFailure):
            open_url_browser("https://smapi.io")


def test_open_url_browser_success() -> None:
    with patch(
        "modvalley.utils.generic.webbrowser.open", return_value=True
    ) as mock_open:
        open_url_browser("https://smapi.io")
    mock_open.assert_called_once_with("https://smapi.io")


def test_platform_specific_open_missing_path(tmp_path: Path) -> None:
    with pytest.raises(LaunchFailure):
        platform_specific_open(tmp_path / "missing")


def test_platform_specific_open_linux(tmp_path: Path) -> None:
    with (
        patch("modvalley.utils.generic.sys.platform", "linux"),
        patch("modvalley.utils.generic.subprocess.Popen") as mock_popen,
    ):
        platform_specific_open(tmp_path)
    assert mock_popen.call_args[0][0] == ["xdg-open", str(tmp_path)]


def test_platform_specific_open_os_error(tmp_path: Path) -> None:
    with (
        patch("modvalley.utils.generic.sys.platform", "linux"),
        patch(
            "modvalley.utils.generic.subprocess.Popen",
            side_effect=FileNotFoundError("xdg-open"),
        ),
    ):
        with pytest.raises(LaunchFailure):
            platform_specific_open(tmp_path)
