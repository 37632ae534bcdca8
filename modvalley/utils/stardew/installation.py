"""
Locate a Stardew Valley installation and its Mods folder.
"""

import os
import subprocess
import sys
from pathlib import Path

import msgspec
from loguru import logger

from modvalley.utils.exception import DetectionFailure

GAME_FOLDER_NAME = "Stardew Valley"
WINDOWS_EXECUTABLES = ["Stardew Valley.exe", "StardewValley.exe"]
MACOS_EXECUTABLES = ["StardewValley", "Stardew Valley"]
MACOS_FOLDER_MARKERS = [
    "StardewValley",
    "Stardew Valley",
    "StardewModdingAPI",
    "Stardew Valley.app",
]
LINUX_EXECUTABLES = ["StardewValley", "Stardew Valley"]


class StardewInstallation(msgspec.Struct, frozen=True):
    game_folder: str | None = None
    mods_folder: str | None = None
    found: bool = False


def get_steam_path_windows() -> Path | None:
    """
    Read the Steam install path from the registry through `reg query`.
    """
    try:
        output = subprocess.run(
            [
                "reg",
                "query",
                "HKEY_LOCAL_MACHINE\\SOFTWARE\\Valve\\Steam",
                "/v",
                "InstallPath",
            ],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug(f"Unable to query the registry for Steam: {e}")
        return None
    if output.returncode != 0:
        return None
    for line in output.stdout.splitlines():
        if "InstallPath" in line:
            # InstallPath    REG_SZ    C:\Program Files (x86)\Steam
            parts = line.split(None, 2)
            if len(parts) == 3:
                return Path(parts[2].strip())
    return None


def get_stardew_paths(platform: str = sys.platform) -> list[Path]:
    """
    Candidate game folders for the given platform, most likely first.
    """
    paths: list[Path] = []
    home = os.environ.get("HOME")

    if platform == "win32":
        steam_path = get_steam_path_windows()
        if steam_path is not None:
            paths.append(steam_path / "steamapps" / "common" / GAME_FOLDER_NAME)
        program_files = os.environ.get("PROGRAMFILES")
        if program_files:
            paths.append(
                Path(program_files) / "Steam" / "steamapps" / "common" / GAME_FOLDER_NAME
            )
    elif platform == "darwin":
        if home:
            paths.append(
                Path(home)
                / "Library"
                / "Application Support"
                / "Steam"
                / "steamapps"
                / "common"
                / GAME_FOLDER_NAME
            )
            paths.append(
                Path(home) / "Applications" / "Stardew Valley.app" / "Contents" / "MacOS"
            )
            paths.append(Path(home) / "Applications" / "Stardew Valley.app")
        paths.append(Path("/Applications/Stardew Valley.app/Contents/MacOS"))
        paths.append(Path("/Applications/Stardew Valley.app"))
    elif platform.startswith("linux"):
        if home:
            paths.append(
                Path(home) / ".steam" / "steam" / "steamapps" / "common" / GAME_FOLDER_NAME
            )
            paths.append(
                Path(home)
                / ".local"
                / "share"
                / "Steam"
                / "steamapps"
                / "common"
                / GAME_FOLDER_NAME
            )

    return paths


def _has_any_file(folder: Path) -> bool:
    try:
        return any(entry.is_file() for entry in folder.iterdir())
    except OSError:
        return False


def is_stardew_directory(path: Path, platform: str = sys.platform) -> bool:
    if platform == "win32":
        return any((path / name).exists() for name in WINDOWS_EXECUTABLES)

    if platform == "darwin":
        if path.suffix == ".app":
            contents_macos = path / "Contents" / "MacOS"
            if not contents_macos.exists():
                return False
            if any((contents_macos / name).exists() for name in MACOS_EXECUTABLES):
                return True
            return _has_any_file(contents_macos)

        if any((path / name).exists() for name in MACOS_FOLDER_MARKERS):
            return True
        # Steam on macOS ships the game as a bare Contents folder
        contents = path / "Contents"
        if contents.exists():
            if (contents / "MacOS").exists() and _has_any_file(contents / "MacOS"):
                return True
            if (contents / "Resources").exists():
                return True
        return False

    return any((path / name).exists() for name in LINUX_EXECUTABLES)


def find_mods_folder(game_folder: Path) -> Path | None:
    candidates = [
        game_folder / "Mods",
        game_folder / "Contents" / "MacOS" / "Mods",
        game_folder / "Contents" / "Resources" / "Mods",
    ]
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    return None


def detect_stardew_valley(
    game_folder: str = "",
    mods_folder: str = "",
    platform: str = sys.platform,
) -> StardewInstallation:
    """
    Detect the game install and its Mods folder.

    Configured folders take precedence over auto-detection.

    :param game_folder: game folder configured by the user, if any
    :param mods_folder: Mods folder configured by the user, if any
    :return: the detection result; `found` is False when nothing matched
    :raises DetectionFailure: if the platform has no candidate locations at all
    """
    if game_folder:
        configured = Path(game_folder)
        if configured.is_dir():
            mods = Path(mods_folder) if mods_folder else find_mods_folder(configured)
            logger.info(f"Using configured game folder {configured}")
            return StardewInstallation(
                game_folder=str(configured),
                mods_folder=str(mods) if mods is not None and mods.is_dir() else None,
                found=True,
            )
        logger.warning(f"Configured game folder does not exist: {configured}")

    possible_paths = get_stardew_paths(platform)
    if not possible_paths:
        raise DetectionFailure(
            "No potential Stardew Valley installation paths found for this operating system"
        )

    for path in possible_paths:
        logger.debug(f"Checking for Stardew Valley in {path}")
        if is_stardew_directory(path, platform):
            mods = Path(mods_folder) if mods_folder else find_mods_folder(path)
            logger.info(f"Found Stardew Valley at {path}, mods folder: {mods}")
            return StardewInstallation(
                game_folder=str(path),
                mods_folder=str(mods) if mods is not None and mods.is_dir() else None,
                found=True,
            )

    logger.warning("Stardew Valley installation not found")
    return StardewInstallation()
