"""
Request/response boundary between the update engine and the outside world.

Everything that touches the game folder, the network, the desktop or the
credential store goes through `ModBackend`, so controllers can be driven
with a mock in tests.
"""

from pathlib import Path
from typing import Sequence

from modvalley.models.package_record import PackageRecord
from modvalley.models.secure_settings import SecureSettings
from modvalley.models.settings import Settings
from modvalley.models.update_status import StatusMap, UpdateStatus
from modvalley.utils import generic
from modvalley.utils.stardew import manifest
from modvalley.utils.stardew.installation import (
    StardewInstallation,
    detect_stardew_valley,
)
from modvalley.utils.webapi.smapi import SmapiWebApi
from modvalley.utils.webapi.update_checker import RemoteUpdateChecker


class ModBackend:
    def __init__(
        self,
        settings: Settings,
        secure_settings: SecureSettings,
        checker: RemoteUpdateChecker | None = None,
    ) -> None:
        self.settings = settings
        self.secure_settings = secure_settings
        self.checker = checker or RemoteUpdateChecker(
            api_key_provider=self.load_api_key,
            smapi=SmapiWebApi(url=settings.smapi_api_url),
        )

    def detect_installation(self) -> StardewInstallation:
        return detect_stardew_valley(
            game_folder=self.settings.game_folder,
            mods_folder=self.settings.mods_folder,
        )

    def scan_packages(self, mods_folder: str | Path) -> list[PackageRecord]:
        return manifest.scan_mods(mods_folder)

    def batch_check(self, records: Sequence[PackageRecord]) -> StatusMap:
        return self.checker.batch_check(list(records))

    def single_check(self, record: PackageRecord) -> UpdateStatus:
        return self.checker.single_check(record)

    def override_version(
        self, mods_folder: str | Path, folder_name: str, version: str
    ) -> None:
        manifest.set_manifest_version(mods_folder, folder_name, version)

    def open_path(self, path: str | Path) -> None:
        generic.platform_specific_open(path)

    def open_external_link(self, url: str) -> None:
        generic.open_url_browser(url)

    def load_api_key(self) -> str:
        return self.secure_settings.get_nexus_api_key()

    def save_api_key(self, value: str) -> None:
        self.secure_settings.set_nexus_api_key(value.strip())

    def credential_configured(self) -> bool:
        return bool(self.load_api_key())
