"""
Batch update check across all installed mods.

The remote query and a cosmetic progress ticker run side by side on a small
thread pool. Only the query's result reaches the update cache; the ticker
just walks the checkable mods so the UI has something to show while the
request is in flight.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from threading import Event
from typing import Callable, Sequence

from loguru import logger
from PySide6.QtCore import QObject

from modvalley.models.package_record import PackageRecord
from modvalley.models.update_cache import UpdateCache
from modvalley.models.update_status import StatusMap
from modvalley.utils.backend import ModBackend
from modvalley.utils.constants import DEFAULT_PROGRESS_TICK_INTERVAL
from modvalley.utils.event_bus import EventBus
from modvalley.utils.exception import RateLimitWarning
from modvalley.utils.generic import now_ms
from modvalley.utils.rate_limit import should_warn


@dataclass(frozen=True)
class CheckProgress:
    name: str
    index: int
    total: int


class UpdateCheckController(QObject):
    def __init__(
        self,
        backend: ModBackend,
        cache: UpdateCache,
        tick_interval: float = DEFAULT_PROGRESS_TICK_INTERVAL,
        clock: Callable[[], int] = now_ms,
        progress_callback: Callable[[CheckProgress], None] | None = None,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.cache = cache
        self.tick_interval = tick_interval
        self.clock = clock
        self.progress_callback = progress_callback
        self._progress: CheckProgress | None = None
        self._bypass_rate_limit = False

    @property
    def progress(self) -> CheckProgress | None:
        return self._progress

    def needs_confirmation(self) -> bool:
        return should_warn(
            self.clock(), self.cache.last_check, self.backend.credential_configured()
        )

    def confirm_rate_limit_override(self) -> None:
        """Let the next call to `check_for_updates` skip the rate limit gate."""
        logger.info("USER ACTION: confirmed update check inside the rate limit window")
        self._bypass_rate_limit = True

    def check_for_updates(self, records: Sequence[PackageRecord]) -> StatusMap | None:
        """
        Check every installed mod for updates and replace the update cache.

        :param records: the current mods snapshot, in display order
        :return: the new status map, or None when there was nothing to check
        :raises RateLimitWarning: if the last check is too recent and the user
            has not confirmed
        :raises RemoteFailure: if the remote query fails; the cache is untouched
        """
        bypass, self._bypass_rate_limit = self._bypass_rate_limit, False

        if not records:
            logger.debug("No mods installed, skipping update check")
            return None

        eligible = [record for record in records if record.is_checkable]
        if not eligible:
            logger.info("No mods with update keys, skipping update check")
            self._publish(CheckProgress(name="", index=0, total=0))
            return None

        if not bypass and self.needs_confirmation():
            raise RateLimitWarning(
                "Mods were checked for updates less than an hour ago. "
                "Checking again counts against your Nexus API quota."
            )

        logger.info(f"Checking {len(eligible)} mod(s) for updates")
        stop_ticker = Event()
        try:
            with ThreadPoolExecutor(
                max_workers=2, thread_name_prefix="update-check"
            ) as executor:
                query = executor.submit(self.backend.batch_check, list(records))
                ticker = executor.submit(self._tick, eligible, stop_ticker)
                try:
                    statuses = query.result()
                except Exception:
                    stop_ticker.set()
                    raise
                ticker.result()
        except Exception as e:
            self._progress = None
            logger.warning(f"Update check failed: {e}")
            raise

        eligible_names = {record.folder_name for record in eligible}
        dropped = sorted(set(statuses) - eligible_names)
        if dropped:
            logger.warning(
                f"Ignoring update status for mods without update keys: {dropped}"
            )
        new_statuses = {
            name: status for name, status in statuses.items() if name in eligible_names
        }

        self.cache.replace(new_statuses, self.clock())
        EventBus().update_cache_changed.emit()
        EventBus().update_check_finished.emit()
        available = sum(s.update_available for s in new_statuses.values())
        logger.info(f"Update check complete: {available} update(s) available")
        return new_statuses

    def _tick(self, eligible: list[PackageRecord], stop: Event) -> None:
        total = len(eligible)
        for index, record in enumerate(eligible, start=1):
            if stop.is_set():
                return
            self._publish(CheckProgress(name=record.name, index=index, total=total))
            if stop.wait(self.tick_interval):
                return

    def _publish(self, progress: CheckProgress) -> None:
        self._progress = progress
        if self.progress_callback is not None:
            self.progress_callback(progress)
        EventBus().update_check_progress.emit(
            progress.name, progress.index, progress.total
        )
