import os
from pathlib import Path
from typing import Generator, Union
from unittest.mock import Mock

# Widget tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication, QDialog

from modvalley.controllers.kv_store_controller import KeyValueStoreController
from modvalley.models.package_record import PackageRecord
from modvalley.models.update_cache import UpdateCache
from modvalley.utils.backend import ModBackend


@pytest.fixture(autouse=True)
def auto_accept_dialogs(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Automatically accept all QDialog exec calls during tests to prevent blocking.
    """

    def fake_exec(self: QDialog) -> int:
        # Return QDialog.Accepted constant value 1
        return 1

    monkeypatch.setattr(QDialog, "exec", fake_exec)


@pytest.fixture(scope="function")
def qapp() -> Generator[Union[QApplication, QCoreApplication], None, None]:
    """Create a QApplication instance for Qt tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture()
def kv_store(tmp_path: Path) -> KeyValueStoreController:
    return KeyValueStoreController(tmp_path / "dbs" / "client_store.db")


@pytest.fixture()
def update_cache(kv_store: KeyValueStoreController) -> UpdateCache:
    cache = UpdateCache(kv_store)
    cache.load()
    return cache


@pytest.fixture()
def backend() -> Mock:
    """A ModBackend with every external call mocked out."""
    mock = Mock(spec=ModBackend)
    mock.credential_configured.return_value = False
    mock.scan_packages.return_value = []
    mock.batch_check.return_value = {}
    return mock


@pytest.fixture()
def checkable_record() -> PackageRecord:
    return PackageRecord(
        folder_name="ContentPatcher",
        name="Content Patcher",
        version="1.0.0",
        author="Pathoschild",
        update_keys=["Nexus:1915"],
        unique_id="Pathoschild.ContentPatcher",
    )


@pytest.fixture()
def plain_record() -> PackageRecord:
    return PackageRecord(folder_name="LocalTweaks", name="Local Tweaks", version="0.1")
