"""
Client for the Nexus Mods public API.

https://app.swaggerhub.com/apis-docs/NexusMods/nexus-mods_public_api_params_in_form_data/1.0

Requests are authenticated with the user's personal API key and count
against an hourly quota.
"""

import msgspec
import requests
from loguru import logger

from modvalley.models.package_record import PackageRecord
from modvalley.models.update_status import UpdateStatus
from modvalley.utils.app_info import AppInfo
from modvalley.utils.constants import (
    NEXUS_API_URL,
    NEXUS_GAME_DOMAIN,
    NEXUS_MOD_PAGE_URL,
    UpdateSource,
)
from modvalley.utils.exception import RemoteFailure
from modvalley.utils.webapi.retry import WebAPIRetryConfig, api_request_with_retry


class NexusModInfo(msgspec.Struct):
    mod_id: int
    name: str = ""
    version: str = ""
    available: bool = True


def nexus_mod_id(record: PackageRecord) -> int | None:
    """
    Extract the Nexus mod id from update keys like "Nexus:1915" or "Nexus:1915@main".
    """
    for key in record.update_keys:
        site, _, value = key.partition(":")
        if site.strip().lower() != UpdateSource.NEXUS.value.lower():
            continue
        mod_id = value.split("@", 1)[0].strip()
        if mod_id.isdigit() and int(mod_id) > 0:
            return int(mod_id)
    return None


class NexusWebApi:
    def __init__(
        self,
        api_key: str,
        base_url: str = NEXUS_API_URL,
        retry_config: WebAPIRetryConfig | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.retry_config = retry_config

    def get_mod(self, mod_id: int) -> NexusModInfo:
        """
        :raises requests.RequestException: on transport or HTTP errors
        :raises msgspec.DecodeError: on an unexpected payload
        """
        url = f"{self.base_url}/games/{NEXUS_GAME_DOMAIN}/mods/{mod_id}.json"
        response = api_request_with_retry(
            "GET",
            url,
            headers={
                "apikey": self.api_key,
                "Application-Name": AppInfo().app_name,
                "Application-Version": AppInfo().app_version,
                "Accept": "application/json",
            },
            config=self.retry_config,
        )
        remaining = response.headers.get("X-RL-Hourly-Remaining")
        if remaining is not None:
            logger.debug(f"Nexus API hourly requests remaining: {remaining}")
        return msgspec.json.decode(response.content, type=NexusModInfo)

    def check(self, record: PackageRecord) -> UpdateStatus | None:
        """
        Compare the installed version with the version listed on Nexus.

        :return: the update status, or None if the record has no Nexus update key
            or the mod page is gone
        :raises RemoteFailure: on transport, quota or parse errors
        """
        mod_id = nexus_mod_id(record)
        if mod_id is None:
            return None

        try:
            info = self.get_mod(mod_id)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                logger.info(f"Nexus mod {mod_id} for {record.folder_name} not found")
                return None
            raise RemoteFailure(f"Nexus update check failed for {record.name}: {e}") from e
        except requests.RequestException as e:
            raise RemoteFailure(f"Nexus update check failed for {record.name}: {e}") from e
        except msgspec.DecodeError as e:
            raise RemoteFailure(f"Invalid response from Nexus API: {e}") from e

        if not info.available or not info.version:
            return None

        update_available = info.version.strip() != record.version.strip()
        return UpdateStatus(
            current_version=record.version,
            latest_version=info.version,
            update_available=update_available,
            download_url=(
                NEXUS_MOD_PAGE_URL.format(mod_id=mod_id) if update_available else None
            ),
        )
