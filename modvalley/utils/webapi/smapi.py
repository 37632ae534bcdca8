"""
Client for the SMAPI web API mod update endpoint.

https://smapi.io/api

The endpoint accepts a batch of mods with their update keys and installed
versions, and answers with a suggested update for each mod that has a newer
release on one of its update sites. No API key is needed.
"""

import sys

import msgspec
import requests
from loguru import logger

from modvalley.models.package_record import PackageRecord
from modvalley.models.update_status import StatusMap, UpdateStatus
from modvalley.utils.app_info import AppInfo
from modvalley.utils.constants import (
    MANUAL_CHECK_ONLY,
    SMAPI_API_URL,
    SMAPI_API_VERSION,
    STARDEW_GAME_VERSION,
)
from modvalley.utils.exception import RemoteFailure
from modvalley.utils.generic import chunks
from modvalley.utils.webapi.retry import WebAPIRetryConfig, api_request_with_retry

# The web API rejects very large batches
SMAPI_BATCH_LIMIT = 100


class SmapiModQuery(msgspec.Struct, rename="camel"):
    id: str
    update_keys: list[str]
    installed_version: str | None = None
    is_broken: bool = False


class SmapiSearch(msgspec.Struct, rename="camel"):
    mods: list[SmapiModQuery]
    api_version: str = SMAPI_API_VERSION
    game_version: str = STARDEW_GAME_VERSION
    platform: str = "Windows"
    include_extended_metadata: bool = False


class SmapiSuggestedUpdate(msgspec.Struct, rename="camel"):
    version: str
    url: str | None = None


class SmapiModEntry(msgspec.Struct, rename="camel"):
    id: str
    suggested_update: SmapiSuggestedUpdate | None = None
    errors: list[str] = msgspec.field(default_factory=list)


def smapi_platform(platform: str = sys.platform) -> str:
    if platform == "darwin":
        return "Mac"
    if platform.startswith("linux"):
        return "Linux"
    return "Windows"


def _installed_version(record: PackageRecord) -> str | None:
    return None if record.version == "Unknown" else record.version


def status_from_entry(record: PackageRecord, entry: SmapiModEntry) -> UpdateStatus:
    update = entry.suggested_update
    if update is None:
        return UpdateStatus(
            current_version=record.version,
            latest_version=record.version,
            update_available=False,
        )
    return UpdateStatus(
        current_version=record.version,
        latest_version=update.version,
        update_available=True,
        download_url=update.url or MANUAL_CHECK_ONLY,
    )


class SmapiWebApi:
    def __init__(
        self,
        url: str = SMAPI_API_URL,
        retry_config: WebAPIRetryConfig | None = None,
        platform: str = sys.platform,
    ) -> None:
        self.url = url
        self.retry_config = retry_config
        self.platform = smapi_platform(platform)

    def check(self, records: list[PackageRecord]) -> StatusMap:
        """
        Query update information for every record that has update keys.

        :return: mapping of folder name to update status, for checkable records only
        :raises RemoteFailure: on transport, HTTP or parse errors
        """
        checkable = [record for record in records if record.is_checkable]
        if not checkable:
            return {}

        statuses: StatusMap = {}
        for chunk in chunks(_list=checkable, limit=SMAPI_BATCH_LIMIT):
            statuses.update(self._check_chunk(chunk))
        return statuses

    def _check_chunk(self, records: list[PackageRecord]) -> StatusMap:
        # Copies of the same mod in several folders share one query
        by_remote_id: dict[str, list[PackageRecord]] = {}
        for record in records:
            by_remote_id.setdefault(record.remote_id.lower(), []).append(record)
        search = SmapiSearch(
            mods=[
                SmapiModQuery(
                    id=group[0].remote_id,
                    update_keys=list(group[0].update_keys),
                    installed_version=_installed_version(group[0]),
                )
                for group in by_remote_id.values()
            ],
            platform=self.platform,
        )
        logger.debug(f"Querying SMAPI web API for {len(records)} mod(s)")
        try:
            response = api_request_with_retry(
                "POST",
                self.url,
                json=msgspec.to_builtins(search),
                headers={
                    "User-Agent": AppInfo().user_agent,
                    "Accept": "application/json",
                },
                config=self.retry_config,
            )
        except requests.RequestException as e:
            logger.warning(
                f"Unable to complete request! Are you connected to the internet? Received exception: {e.__class__.__name__}"
            )
            raise RemoteFailure(f"SMAPI update check failed: {e}") from e

        try:
            entries = msgspec.json.decode(response.content, type=list[SmapiModEntry])
        except msgspec.DecodeError as e:
            logger.error(f"Invalid JSON response: {e}")
            raise RemoteFailure(f"Invalid response from SMAPI web API: {e}") from e

        statuses: StatusMap = {}
        for entry in entries:
            group = by_remote_id.get(entry.id.lower())
            if group is None:
                logger.warning(f"SMAPI web API returned an unknown mod id: {entry.id}")
                continue
            for error in entry.errors:
                logger.debug(f"SMAPI reported for {entry.id}: {error}")
            for record in group:
                statuses[record.folder_name] = status_from_entry(record, entry)

        logger.debug(
            f"Received WebAPI response {response.status_code} with {len(statuses)} result(s)"
        )
        return statuses
