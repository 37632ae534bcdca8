from typing import Callable

from loguru import logger

from modvalley.controllers.mods_controller import ModsController
from modvalley.models.package_record import PackageRecord
from modvalley.models.update_cache import UpdateCache
from modvalley.models.workflow_state import VerificationResult
from modvalley.utils.backend import ModBackend
from modvalley.utils.event_bus import EventBus
from modvalley.utils.exception import ScanFailure


def _emit_refresh_request() -> None:
    EventBus().do_refresh_mods_list.emit()


class VerificationResolver:
    """
    The two ways an update workflow can end: re-check the installed files
    against the remote, or record the latest version by hand.

    Either way a resolved mod loses its cache entry and the mods list is
    asked to refresh once.
    """

    def __init__(
        self,
        backend: ModBackend,
        cache: UpdateCache,
        mods_controller: ModsController,
        request_refresh: Callable[[], None] = _emit_refresh_request,
    ) -> None:
        self.backend = backend
        self.cache = cache
        self.mods_controller = mods_controller
        self.request_refresh = request_refresh

    def recheck(self, folder_name: str) -> VerificationResult:
        """
        Re-query the remote with the mod's manifest as it is on disk now.

        :raises ScanFailure: if the mod can no longer be read
        :raises RemoteFailure: if the remote check fails
        """
        record = self._current_record(folder_name)
        status = self.backend.single_check(record)

        if status.update_available:
            logger.info(
                f"{record.name} still reports {status.current_version}, latest is {status.latest_version}"
            )
            return VerificationResult(
                folder_name=folder_name,
                success=False,
                message=(
                    f"{record.name} is still not up to date. "
                    f"Installed: {status.current_version}, latest: {status.latest_version}"
                ),
                installed_version=status.current_version,
                latest_version=status.latest_version,
            )

        self._resolved(folder_name)
        return VerificationResult(
            folder_name=folder_name,
            success=True,
            message=f"{record.name} is up to date ({status.current_version}).",
            installed_version=status.current_version,
            latest_version=status.latest_version,
        )

    def force_override(self, folder_name: str, latest_version: str) -> VerificationResult:
        """
        Write `latest_version` into the mod's manifest without checking anything.

        Calling this again for an already resolved mod rewrites the manifest
        but leaves the cache alone.

        :raises OverrideFailure: if the manifest cannot be written
        """
        logger.info(f"USER ACTION: forcing version of {folder_name} to {latest_version}")
        self.backend.override_version(
            self.mods_controller.mods_folder, folder_name, latest_version
        )
        self._resolved(folder_name)
        return VerificationResult(
            folder_name=folder_name,
            success=True,
            message=f"Recorded version {latest_version} for {folder_name}.",
            installed_version=latest_version,
            latest_version=latest_version,
        )

    def _current_record(self, folder_name: str) -> PackageRecord:
        records = self.backend.scan_packages(self.mods_controller.mods_folder)
        record = next(
            (record for record in records if record.folder_name == folder_name), None
        )
        if record is None:
            raise ScanFailure(f"{folder_name} is no longer installed")
        return record

    def _resolved(self, folder_name: str) -> None:
        if self.cache.remove(folder_name):
            EventBus().update_cache_changed.emit()
        self.request_refresh()
