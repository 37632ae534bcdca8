from unittest.mock import Mock

import pytest

from modvalley.models.package_record import PackageRecord
from modvalley.models.update_status import UpdateStatus
from modvalley.utils.exception import RemoteFailure
from modvalley.utils.webapi.nexus import NexusWebApi
from modvalley.utils.webapi.smapi import SmapiWebApi
from modvalley.utils.webapi.update_checker import RemoteUpdateChecker

NEXUS_MOD = PackageRecord(
    folder_name="ContentPatcher",
    name="Content Patcher",
    version="1.0.0",
    update_keys=["Nexus:1915"],
)
GITHUB_MOD = PackageRecord(
    folder_name="Automate",
    name="Automate",
    version="2.0.0",
    update_keys=["GitHub:Pathoschild/StardewMods"],
)
PLAIN_MOD = PackageRecord(folder_name="LocalTweaks", name="Local Tweaks")

AVAILABLE = UpdateStatus(
    current_version="1.0.0",
    latest_version="1.2.0",
    update_available=True,
    download_url="https://www.nexusmods.com/stardewvalley/mods/1915?tab=files",
)
CURRENT = UpdateStatus(
    current_version="2.0.0", latest_version="2.0.0", update_available=False
)


def _checker(
    api_key: str = "", nexus: Mock | None = None
) -> tuple[RemoteUpdateChecker, Mock]:
    smapi = Mock(spec=SmapiWebApi)
    smapi.check.return_value = {}
    factory = Mock(return_value=nexus or Mock(spec=NexusWebApi))
    checker = RemoteUpdateChecker(lambda: api_key, smapi=smapi, nexus_factory=factory)
    return checker, smapi


def test_batch_check_without_key_uses_smapi_only() -> None:
    checker, smapi = _checker()
    smapi.check.return_value = {"ContentPatcher": AVAILABLE}

    statuses = checker.batch_check([NEXUS_MOD, GITHUB_MOD, PLAIN_MOD])

    assert statuses == {"ContentPatcher": AVAILABLE}
    smapi.check.assert_called_once_with([NEXUS_MOD, GITHUB_MOD])
    checker.nexus_factory.assert_not_called()  # type: ignore[attr-defined]


def test_batch_check_with_key_prefers_nexus() -> None:
    nexus = Mock(spec=NexusWebApi)
    nexus.check.side_effect = lambda record: (
        AVAILABLE if record is NEXUS_MOD else None
    )
    checker, smapi = _checker(api_key="secret", nexus=nexus)
    smapi.check.return_value = {"Automate": CURRENT}

    statuses = checker.batch_check([NEXUS_MOD, GITHUB_MOD, PLAIN_MOD])

    assert statuses == {"ContentPatcher": AVAILABLE, "Automate": CURRENT}
    checker.nexus_factory.assert_called_once_with("secret")  # type: ignore[attr-defined]
    smapi.check.assert_called_once_with([GITHUB_MOD])


def test_batch_check_propagates_remote_failure() -> None:
    checker, smapi = _checker()
    smapi.check.side_effect = RemoteFailure("offline")
    with pytest.raises(RemoteFailure):
        checker.batch_check([NEXUS_MOD])


def test_single_check_not_checkable() -> None:
    checker, smapi = _checker()
    status = checker.single_check(PLAIN_MOD)
    assert status.update_available is False
    smapi.check.assert_not_called()


def test_single_check_returns_status() -> None:
    checker, smapi = _checker()
    smapi.check.return_value = {"ContentPatcher": AVAILABLE}
    assert checker.single_check(NEXUS_MOD) == AVAILABLE


def test_single_check_missing_result() -> None:
    checker, _ = _checker()
    with pytest.raises(RemoteFailure):
        checker.single_check(NEXUS_MOD)
