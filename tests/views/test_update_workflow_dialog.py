from unittest.mock import Mock, patch

import pytest
from pytestqt.qtbot import QtBot

from modvalley.controllers.mods_controller import ModsController
from modvalley.controllers.update_workflow_controller import UpdateWorkflowController
from modvalley.controllers.verification_resolver import VerificationResolver
from modvalley.models.update_cache import UpdateCache
from modvalley.models.update_status import UpdateStatus
from modvalley.models.workflow_state import ResolutionPolicy, WorkflowStep
from modvalley.utils.constants import MANUAL_CHECK_ONLY
from modvalley.utils.exception import LaunchFailure
from modvalley.utils.stardew.installation import StardewInstallation
from modvalley.views.update_workflow_dialog import UpdateWorkflowDialog


@pytest.fixture()
def workflow_controller(
    backend: Mock, update_cache: UpdateCache
) -> UpdateWorkflowController:
    backend.detect_installation.return_value = StardewInstallation(
        game_folder="/games/Stardew Valley",
        mods_folder="/games/Stardew Valley/Mods",
        found=True,
    )
    mods_controller = ModsController(backend)
    mods_controller.detect()
    update_cache.replace(
        {
            "P": UpdateStatus(
                current_version="1.0",
                latest_version="1.2",
                update_available=True,
                download_url="https://example.com/p",
            ),
            "Q": UpdateStatus(
                current_version="3.0",
                latest_version="3.1",
                update_available=True,
                download_url=MANUAL_CHECK_ONLY,
            ),
        },
        1_000,
    )
    resolver = VerificationResolver(
        backend, update_cache, mods_controller, request_refresh=Mock()
    )
    return UpdateWorkflowController(
        backend,
        update_cache,
        mods_controller,
        resolver,
        policy=ResolutionPolicy(phase_reset_delay=0),
    )


def test_buttons_follow_steps(
    qtbot: QtBot, workflow_controller: UpdateWorkflowController, backend: Mock
) -> None:
    workflow_controller.start("P")
    dialog = UpdateWorkflowDialog(workflow_controller, "P")
    qtbot.addWidget(dialog)

    assert dialog.download_group.isEnabled()
    assert not dialog.install_group.isEnabled()
    assert not dialog.verify_group.isEnabled()
    assert dialog.download_hint.text() == "https://example.com/p"

    dialog.download_button.click()
    backend.open_external_link.assert_called_once_with("https://example.com/p")
    assert dialog.install_group.isEnabled()
    assert not dialog.verify_group.isEnabled()

    dialog.installed_button.click()
    assert dialog.verify_group.isEnabled()
    assert dialog.verify_button.isEnabled()
    assert dialog.override_button.isEnabled()

    dialog.reject()
    assert workflow_controller.workflow is None


def test_manual_only_download(
    qtbot: QtBot, workflow_controller: UpdateWorkflowController, backend: Mock
) -> None:
    workflow_controller.start("Q")
    dialog = UpdateWorkflowDialog(workflow_controller, "Q")
    qtbot.addWidget(dialog)

    assert dialog.download_button.text() == "Continue"
    dialog.download_button.click()

    backend.open_external_link.assert_not_called()
    assert dialog.install_group.isEnabled()
    dialog.reject()


def test_launch_failure_shows_warning(
    qtbot: QtBot, workflow_controller: UpdateWorkflowController, backend: Mock
) -> None:
    backend.open_external_link.side_effect = LaunchFailure("no browser")
    workflow_controller.start("P")
    dialog = UpdateWorkflowDialog(workflow_controller, "P")
    qtbot.addWidget(dialog)

    with patch("modvalley.views.update_workflow_dialog.show_warning") as mock_warning:
        dialog.download_button.click()

    mock_warning.assert_called_once()
    assert workflow_controller.workflow is not None
    assert workflow_controller.workflow.step is WorkflowStep.DOWNLOAD
    assert not dialog.install_group.isEnabled()
    dialog.reject()
