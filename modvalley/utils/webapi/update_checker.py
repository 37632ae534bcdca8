from typing import Callable

from loguru import logger

from modvalley.models.package_record import PackageRecord
from modvalley.models.update_status import StatusMap, UpdateStatus
from modvalley.utils.exception import RemoteFailure
from modvalley.utils.webapi.nexus import NexusWebApi
from modvalley.utils.webapi.smapi import SmapiWebApi


class RemoteUpdateChecker:
    """
    Answers batch and single update checks.

    With a Nexus API key configured, mods that have a Nexus update key are
    looked up on Nexus directly; everything else goes through the SMAPI web
    API, which needs no key.
    """

    def __init__(
        self,
        api_key_provider: Callable[[], str],
        smapi: SmapiWebApi | None = None,
        nexus_factory: Callable[[str], NexusWebApi] = NexusWebApi,
    ) -> None:
        self.api_key_provider = api_key_provider
        self.smapi = smapi or SmapiWebApi()
        self.nexus_factory = nexus_factory

    def batch_check(self, records: list[PackageRecord]) -> StatusMap:
        """
        :param records: every installed mod; mods without update keys are skipped
        :return: mapping of folder name to update status for checked mods
        :raises RemoteFailure: if any remote request fails
        """
        checkable = [record for record in records if record.is_checkable]
        logger.info(f"Checking {len(checkable)} of {len(records)} mods for updates")

        statuses: StatusMap = {}
        remaining = checkable
        api_key = self.api_key_provider()
        if api_key:
            nexus = self.nexus_factory(api_key)
            remaining = []
            for record in checkable:
                status = nexus.check(record)
                if status is None:
                    remaining.append(record)
                else:
                    statuses[record.folder_name] = status

        if remaining:
            statuses.update(self.smapi.check(remaining))

        logger.info(
            f"Update check finished: {sum(s.update_available for s in statuses.values())} update(s) available"
        )
        return statuses

    def single_check(self, record: PackageRecord) -> UpdateStatus:
        """
        :raises RemoteFailure: if the request fails or returns nothing for the mod
        """
        if not record.is_checkable:
            return UpdateStatus(
                current_version=record.version,
                latest_version=record.version,
                update_available=False,
            )
        status = self.batch_check([record]).get(record.folder_name)
        if status is None:
            raise RemoteFailure(f"No update information returned for {record.name}")
        return status
