import os
import subprocess
import sys
import webbrowser
from datetime import datetime
from pathlib import Path
from time import localtime, strftime, time
from typing import Any, Generator

from loguru import logger

from modvalley.utils.exception import LaunchFailure


def now_ms() -> int:
    """
    Current wall clock time as epoch milliseconds
    """
    return int(time() * 1000)


def chunks(_list: list[Any], limit: int) -> Generator[list[Any], None, None]:
    """
    Split list into chunks no larger than the configured limit

    :param list: a list to break into chunks
    :param limit: maximum size of the returned list
    """
    for i in range(0, len(_list), limit):
        yield _list[i : i + limit]


def open_url_browser(url: str) -> None:
    """
    Open a url in a user's default web browser

    :raises LaunchFailure: if no browser could be launched
    """
    logger.info(f"USER ACTION: Opening url {url}")
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise LaunchFailure(f"Unable to open {url}: {e}") from e
    if not opened:
        raise LaunchFailure(f"No web browser was able to open {url}")


def platform_specific_open(path: str | Path) -> None:
    """
    Function to open a folder in the platform-specific file-explorer app
    or a file in the relevant system default application. On mac, if the path
    is a directory or an .app file, open the path in Finder using -R
    (i.e. treat .app as directory).

    :param path: path to open
    :type path: str | Path
    :raises LaunchFailure: if the path does not exist or the opener fails
    """
    logger.info(f"USER ACTION: opening {path}")
    p = Path(path)
    path = str(path)
    if not p.exists():
        raise LaunchFailure(f"Path does not exist: {path}")
    try:
        if sys.platform == "darwin":
            logger.info(f"Opening {path} with subprocess open on MacOS")
            if p.is_dir() and p.suffix == ".app":
                subprocess.Popen(["open", path, "-R"])
            else:
                subprocess.Popen(["open", path])
        elif sys.platform == "win32":
            logger.info(f"Opening {path} with startfile on Windows")
            os.startfile(path)  # type: ignore[attr-defined]
        elif sys.platform == "linux":
            logger.info(f"Opening {path} with xdg-open on Linux")
            subprocess.Popen(
                ["xdg-open", path], env=dict(os.environ, LD_LIBRARY_PATH="")
            )
        else:
            logger.error("Attempting to open directory on an unknown system")
            raise LaunchFailure(f"Unsupported platform: {sys.platform}")
    except OSError as e:
        raise LaunchFailure(f"Unable to open {path}: {e}") from e


def get_relative_time(timestamp: int) -> str:
    """
    Convert a timestamp to a relative time string (e.g. "2 days ago").

    Args:
        timestamp (int): Unix timestamp to convert.

    Returns:
        str: Human-readable relative time string, or "Invalid timestamp" if conversion fails.
    """
    try:
        dt = datetime.fromtimestamp(timestamp)
        now = datetime.now()
        delta = now - dt

        if delta.days > 365:
            return f"{delta.days // 365} years ago"
        elif delta.days > 30:
            return f"{delta.days // 30} months ago"
        elif delta.days > 0:
            return f"{delta.days} days ago"
        elif delta.seconds > 3600:
            return f"{delta.seconds // 3600} hours ago"
        elif delta.seconds > 60:
            return f"{delta.seconds // 60} minutes ago"
        else:
            return "Just now"
    except (ValueError, TypeError, OverflowError, OSError):
        return "Invalid timestamp"


def format_time_display(timestamp_ms: int | None) -> str:
    """
    Format an epoch millisecond timestamp into absolute and relative time for display.

    Args:
        timestamp_ms (int | None): Timestamp to format, or None if never recorded.

    Returns:
        str: "YYYY-MM-DD HH:MM:SS | relative" or "Never".
    """
    if timestamp_ms is None:
        return "Never"

    timestamp = timestamp_ms // 1000
    try:
        abs_time = strftime("%Y-%m-%d %H:%M:%S", localtime(timestamp))
        rel_time = get_relative_time(timestamp)
        return f"{abs_time} | {rel_time}"
    except (ValueError, TypeError, OSError, OverflowError):
        return "Invalid timestamp"
