import json
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict

from loguru import logger
from PySide6.QtCore import QObject

from modvalley.utils.app_info import AppInfo
from modvalley.utils.constants import (
    DEFAULT_PHASE_RESET_DELAY,
    DEFAULT_PROGRESS_TICK_INTERVAL,
    SMAPI_API_URL,
)
from modvalley.utils.event_bus import EventBus


class Settings(QObject):
    def __init__(self, settings_file: Path | None = None) -> None:
        super().__init__()

        self._settings_file = settings_file or AppInfo().app_settings_file
        self._debug_file = self._settings_file.parent / "DEBUG"

        # Game paths. Empty means auto-detect.
        self.game_folder: str = ""
        self.mods_folder: str = ""

        # Update checks
        self.check_updates_on_startup: bool = False
        self.progress_tick_interval: float = DEFAULT_PROGRESS_TICK_INTERVAL
        self.phase_reset_delay: float = DEFAULT_PHASE_RESET_DELAY
        self.smapi_api_url: str = SMAPI_API_URL

        # Authentication
        # Only used when no keyring backend is available
        self.nexus_api_key: str = ""

        # Advanced
        self.debug_logging_enabled: bool = False

        # Main Window
        self.main_window_width: int = 1000
        self.main_window_height: int = 650

    def __setattr__(self, key: str, value: Any) -> None:
        # If private attribute, set it normally
        if key.startswith("_"):
            super().__setattr__(key, value)
            return

        if hasattr(self, key) and getattr(self, key) == value:
            return
        super().__setattr__(key, value)
        EventBus().settings_have_changed.emit()

    def load(self) -> None:
        self.debug_logging_enabled = self._debug_file.is_file()

        try:
            with open(str(self._settings_file), "r") as file:
                data = json.load(file)
                self._from_dict(data)
        except FileNotFoundError:
            logger.info(f"No settings file at {self._settings_file}, using defaults")
            self.save()
        except JSONDecodeError:
            logger.error(f"Settings file {self._settings_file} is not valid JSON")
            raise

    def save(self) -> None:
        if self.debug_logging_enabled:
            self._debug_file.touch(exist_ok=True)
        else:
            self._debug_file.unlink(missing_ok=True)

        self._settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(str(self._settings_file), "w") as file:
            json.dump(self._to_dict(), file, indent=4)

    def _from_dict(self, data: Dict[str, Any]) -> None:
        for key, value in data.items():
            if not hasattr(self, key):
                continue
            setattr(self, key, value)

    def _to_dict(self, skip_private: bool = True) -> Dict[str, Any]:
        skip_attributes = ["destroyed", "objectNameChanged"]

        data = {}

        for key, value in self.__dict__.items():
            if key in skip_attributes:
                continue
            if skip_private and key.startswith("_"):
                continue
            data[key] = value

        return data
