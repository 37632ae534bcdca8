"""
Persisted per-mod update status, plus the time of the last full check.

The cache is owned by the application controller and handed to every
component that reads or writes it. Mutations are whole-map replacements or
single-key removals; each one is written to the key-value store before the
in-memory copy changes, so a failed write leaves the cache as it was.
"""

import msgspec
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from modvalley.controllers.kv_store_controller import KeyValueStoreController
from modvalley.models.update_status import StatusMap, UpdateStatus
from modvalley.utils.constants import LAST_UPDATE_CHECK_SLOT, UPDATE_STATUS_SLOT
from modvalley.utils.exception import CacheWriteFailure


class UpdateCache:
    def __init__(self, store: KeyValueStoreController) -> None:
        self._store = store
        self._statuses: StatusMap = {}
        self._last_check: int | None = None
        self._revision = 0

    @property
    def revision(self) -> int:
        """Incremented on every successful mutation."""
        return self._revision

    @property
    def last_check(self) -> int | None:
        return self._last_check

    @property
    def statuses(self) -> StatusMap:
        return dict(self._statuses)

    def get(self, folder_name: str) -> UpdateStatus | None:
        return self._statuses.get(folder_name)

    def __contains__(self, folder_name: object) -> bool:
        return folder_name in self._statuses

    def __len__(self) -> int:
        return len(self._statuses)

    def load(self) -> None:
        """
        Read both slots from the store. A missing or unreadable slot
        means "never checked".
        """
        raw_statuses = self._store.read(UPDATE_STATUS_SLOT)
        raw_last_check = self._store.read(LAST_UPDATE_CHECK_SLOT)

        statuses: StatusMap = {}
        if raw_statuses is not None:
            try:
                statuses = msgspec.json.decode(raw_statuses, type=StatusMap)
            except msgspec.DecodeError as e:
                logger.warning(f"Discarding unreadable update status cache: {e}")

        last_check: int | None = None
        if raw_last_check is not None:
            try:
                last_check = msgspec.json.decode(raw_last_check, type=int | None)
            except msgspec.DecodeError as e:
                logger.warning(f"Discarding unreadable last update check time: {e}")

        self._statuses = statuses
        self._last_check = last_check
        self._revision += 1
        logger.info(
            f"Loaded update cache with {len(statuses)} entries, last check: {last_check}"
        )

    def replace(self, statuses: StatusMap, checked_at: int) -> None:
        """
        Replace the whole status map and the last check time in one write.

        :raises CacheWriteFailure: if the store rejects the write
        """
        new_statuses = dict(statuses)
        self._write(
            {
                UPDATE_STATUS_SLOT: msgspec.json.encode(new_statuses).decode(),
                LAST_UPDATE_CHECK_SLOT: msgspec.json.encode(checked_at).decode(),
            }
        )
        self._statuses = new_statuses
        self._last_check = checked_at
        self._revision += 1
        logger.debug(f"Update cache replaced with {len(new_statuses)} entries")

    def remove(self, folder_name: str) -> bool:
        """
        Drop one mod's entry. Removing an absent entry writes nothing.

        :return: True if an entry was removed
        :raises CacheWriteFailure: if the store rejects the write
        """
        if folder_name not in self._statuses:
            logger.debug(f"No cached update status for {folder_name}, nothing to remove")
            return False
        new_statuses = {
            key: value for key, value in self._statuses.items() if key != folder_name
        }
        self._write({UPDATE_STATUS_SLOT: msgspec.json.encode(new_statuses).decode()})
        self._statuses = new_statuses
        self._revision += 1
        logger.debug(f"Removed cached update status for {folder_name}")
        return True

    def _write(self, values: dict[str, str]) -> None:
        try:
            self._store.write(values)
        except SQLAlchemyError as e:
            raise CacheWriteFailure(f"Unable to persist update cache: {e}") from e
