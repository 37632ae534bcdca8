from pathlib import Path
from unittest.mock import Mock

import pytest
from pytestqt.qtbot import QtBot

from modvalley.controllers.mods_controller import ModsController
from modvalley.controllers.update_check_controller import UpdateCheckController
from modvalley.controllers.update_workflow_controller import UpdateWorkflowController
from modvalley.controllers.verification_resolver import VerificationResolver
from modvalley.models.settings import Settings
from modvalley.models.update_cache import UpdateCache
from modvalley.utils.event_bus import EventBus
from modvalley.views.main_window import MainWindow


@pytest.fixture()
def main_window(
    qtbot: QtBot, tmp_path: Path, backend: Mock, update_cache: UpdateCache
) -> MainWindow:
    mods_controller = ModsController(backend)
    resolver = VerificationResolver(
        backend, update_cache, mods_controller, request_refresh=Mock()
    )
    window = MainWindow(
        Settings(settings_file=tmp_path / "settings.json"),
        backend,
        update_cache,
        mods_controller,
        UpdateCheckController(backend, update_cache, tick_interval=0),
        UpdateWorkflowController(backend, update_cache, mods_controller, resolver),
    )
    qtbot.addWidget(window)
    return window


def test_buttons_disabled_while_refreshing(main_window: MainWindow) -> None:
    EventBus().refresh_started.emit()
    assert not main_window.refresh_button.isEnabled()
    assert not main_window.check_button.isEnabled()

    EventBus().refresh_finished.emit()
    assert main_window.refresh_button.isEnabled()
    assert main_window.check_button.isEnabled()


def test_last_check_label_follows_finished_check(
    main_window: MainWindow, update_cache: UpdateCache
) -> None:
    assert main_window.last_check_label.text().endswith("Never")

    update_cache.replace({}, 1_700_000_000_000)
    EventBus().update_check_finished.emit()

    assert not main_window.last_check_label.text().endswith("Never")


def test_close_disconnects_event_bus(main_window: MainWindow) -> None:
    main_window.close()

    EventBus().refresh_started.emit()

    assert main_window.refresh_button.isEnabled()
