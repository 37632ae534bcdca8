from loguru import logger
from PySide6.QtCore import QObject

from modvalley.models.package_record import PackageRecord
from modvalley.utils.backend import ModBackend
from modvalley.utils.event_bus import EventBus
from modvalley.utils.exception import DetectionFailure
from modvalley.utils.stardew.installation import StardewInstallation


class ModsController(QObject):
    """
    Holds the current snapshot of installed mods.

    The snapshot is an immutable tuple replaced wholesale by `refresh`.
    """

    def __init__(self, backend: ModBackend) -> None:
        super().__init__()
        self.backend = backend
        self.installation: StardewInstallation | None = None
        self._records: tuple[PackageRecord, ...] = ()

    @property
    def records(self) -> tuple[PackageRecord, ...]:
        return self._records

    @property
    def mods_folder(self) -> str:
        """
        :raises DetectionFailure: if detection has not found a Mods folder
        """
        if self.installation is None or not self.installation.found:
            raise DetectionFailure("Stardew Valley installation not found")
        if not self.installation.mods_folder:
            raise DetectionFailure(
                'No Mods folder found. Create a "Mods" folder in your Stardew Valley directory to start using mods.'
            )
        return self.installation.mods_folder

    def get(self, folder_name: str) -> PackageRecord | None:
        return next(
            (record for record in self._records if record.folder_name == folder_name),
            None,
        )

    def detect(self) -> StardewInstallation:
        """
        :raises DetectionFailure: if the game cannot be found
        """
        installation = self.backend.detect_installation()
        self.installation = installation
        if not installation.found:
            raise DetectionFailure(
                "Stardew Valley installation not found! Please make sure Stardew Valley is installed and try again."
            )
        return installation

    def refresh(self) -> tuple[PackageRecord, ...]:
        """
        Rescan the Mods folder and replace the snapshot.

        :raises DetectionFailure: if there is no Mods folder
        :raises ScanFailure: if the folder cannot be read; the old snapshot is kept
        """
        mods_folder = self.mods_folder
        EventBus().refresh_started.emit()
        try:
            self._records = tuple(self.backend.scan_packages(mods_folder))
        finally:
            EventBus().refresh_finished.emit()
        logger.info(f"Mods list refreshed: {len(self._records)} mods")
        return self._records
