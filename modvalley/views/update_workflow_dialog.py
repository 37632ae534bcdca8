from typing import Callable

from loguru import logger
from PySide6.QtCore import QThreadPool, QTimer
from PySide6.QtWidgets import (
    QDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from modvalley.controllers.update_workflow_controller import UpdateWorkflowController
from modvalley.models.workflow_state import (
    VerificationPhase,
    VerificationResult,
    WorkflowStep,
)
from modvalley.utils.event_bus import EventBus
from modvalley.utils.exception import ModValleyError
from modvalley.views.dialogue import show_dialogue_conditional, show_warning
from modvalley.views.task_runnable import TaskRunnable


class UpdateWorkflowDialog(QDialog):
    """
    Walks the user through downloading, installing and verifying one mod update.

    The dialog only renders `UpdateWorkflowController.workflow`; every button
    goes through the controller and the view re-reads the state on
    `EventBus().workflow_changed`.
    """

    def __init__(
        self,
        workflow_controller: UpdateWorkflowController,
        mod_name: str,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.workflow_controller = workflow_controller
        self.setWindowTitle(self.tr("Update {mod_name}").format(mod_name=mod_name))
        self.setModal(True)
        self.setObjectName("dialogue")
        self.setMinimumWidth(460)

        workflow = workflow_controller.workflow
        versions = ""
        if workflow is not None:
            versions = self.tr("Installed: {current}    Latest: {latest}").format(
                current=workflow.status.current_version,
                latest=workflow.status.latest_version,
            )

        header = QLabel(f"<b>{mod_name}</b><br>{versions}")
        header.setWordWrap(True)

        # Step 1
        self.download_group = QGroupBox(self.tr("1. Download"))
        self.download_hint = QLabel()
        self.download_hint.setWordWrap(True)
        self.download_button = QPushButton(self.tr("Open Download Page"))
        download_layout = QVBoxLayout()
        download_layout.addWidget(self.download_hint)
        download_layout.addWidget(self.download_button)
        self.download_group.setLayout(download_layout)

        # Step 2
        self.install_group = QGroupBox(self.tr("2. Install"))
        install_hint = QLabel(
            self.tr(
                "Extract the downloaded archive into your Mods folder, "
                "replacing the old version of the mod."
            )
        )
        install_hint.setWordWrap(True)
        self.open_folder_button = QPushButton(self.tr("Open Mods Folder"))
        self.installed_button = QPushButton(self.tr("I Have Installed It"))
        install_buttons = QHBoxLayout()
        install_buttons.addWidget(self.open_folder_button)
        install_buttons.addWidget(self.installed_button)
        install_layout = QVBoxLayout()
        install_layout.addWidget(install_hint)
        install_layout.addLayout(install_buttons)
        self.install_group.setLayout(install_layout)

        # Step 3
        self.verify_group = QGroupBox(self.tr("3. Verify"))
        self.verify_button = QPushButton(self.tr("Check Installed Version"))
        self.override_button = QPushButton(self.tr("Mark As Updated"))
        self.override_button.setToolTip(
            self.tr("Write the latest version into the mod's manifest without checking")
        )
        verify_buttons = QHBoxLayout()
        verify_buttons.addWidget(self.verify_button)
        verify_buttons.addWidget(self.override_button)
        self.verify_group.setLayout(verify_buttons)

        self.status_label = QLabel()
        self.status_label.setWordWrap(True)

        self.close_button = QPushButton(self.tr("Close"))
        close_layout = QHBoxLayout()
        close_layout.addStretch()
        close_layout.addWidget(self.close_button)

        layout = QVBoxLayout()
        layout.addWidget(header)
        layout.addWidget(self.download_group)
        layout.addWidget(self.install_group)
        layout.addWidget(self.verify_group)
        layout.addWidget(self.status_label)
        layout.addLayout(close_layout)
        self.setLayout(layout)

        self.download_button.clicked.connect(self._on_download_clicked)
        self.open_folder_button.clicked.connect(self._on_open_folder_clicked)
        self.installed_button.clicked.connect(self._on_installed_clicked)
        self.verify_button.clicked.connect(self._on_verify_clicked)
        self.override_button.clicked.connect(self._on_override_clicked)
        self.close_button.clicked.connect(self.reject)

        EventBus().workflow_changed.connect(self.refresh_state)
        self._listening = True
        self.refresh_state()

    def refresh_state(self) -> None:
        workflow = self.workflow_controller.workflow
        if workflow is None:
            if self.isVisible():
                self.accept()
            return

        if workflow.status.is_manual_check_only:
            self.download_hint.setText(
                self.tr(
                    "No download link is known for this mod. "
                    "Find the new version on the mod's page, then continue."
                )
            )
            self.download_button.setText(self.tr("Continue"))
        else:
            self.download_hint.setText(workflow.status.download_url or "")

        running = workflow.is_running
        self.download_group.setEnabled(not running)
        self.install_group.setEnabled(
            workflow.step >= WorkflowStep.INSTALL and not running
        )
        self.verify_group.setEnabled(workflow.step is WorkflowStep.VERIFY)
        self.verify_button.setEnabled(workflow.phase is VerificationPhase.IDLE)
        self.override_button.setEnabled(workflow.phase is VerificationPhase.IDLE)

        if running:
            self.status_label.setText(self.tr("Verifying..."))
        elif workflow.phase is VerificationPhase.IDLE:
            self.status_label.setText("")

    def done(self, result: int) -> None:
        if self._listening:
            EventBus().workflow_changed.disconnect(self.refresh_state)
            self._listening = False
        if self.workflow_controller.workflow is not None:
            self.workflow_controller.close()
        super().done(result)

    def _on_download_clicked(self) -> None:
        try:
            self.workflow_controller.open_download()
        except ModValleyError as e:
            show_warning(
                title=self.tr("Unable to open download page"),
                text=str(e),
                parent=self,
            )

    def _on_open_folder_clicked(self) -> None:
        try:
            self.workflow_controller.open_install_location()
        except ModValleyError as e:
            show_warning(
                title=self.tr("Unable to open Mods folder"), text=str(e), parent=self
            )

    def _on_installed_clicked(self) -> None:
        try:
            self.workflow_controller.confirm_installed()
        except ModValleyError as e:
            show_warning(title=self.tr("Update"), text=str(e), parent=self)

    def _on_verify_clicked(self) -> None:
        self._start_resolution(self.workflow_controller.auto_verify)

    def _on_override_clicked(self) -> None:
        override_text = self.tr("Mark As Updated")
        answer = show_dialogue_conditional(
            title=self.tr("Mark as updated"),
            text=self.tr("Record the latest version without checking the installed files?"),
            information=self.tr(
                "Use this when the mod author forgot to bump the version in the manifest."
            ),
            button_text_override=[override_text],
            parent=self,
        )
        if answer != override_text:
            logger.debug("Force override cancelled by user")
            return
        self._start_resolution(self.workflow_controller.force_override)

    def _start_resolution(self, action: Callable[[], VerificationResult]) -> None:
        self.verify_button.setEnabled(False)
        self.override_button.setEnabled(False)
        task = TaskRunnable(action)
        task.signals.finished.connect(self._on_resolution_finished)
        task.signals.failed.connect(self._on_resolution_failed)
        QThreadPool.globalInstance().start(task)

    def _on_resolution_finished(self, result: VerificationResult) -> None:
        self.status_label.setText(result.message)
        self._schedule_settle()

    def _on_resolution_failed(self, error: Exception) -> None:
        self.status_label.setText(str(error))
        if not isinstance(error, ModValleyError):
            logger.error(f"Unexpected error during verification: {error}")
        self._schedule_settle()

    def _schedule_settle(self) -> None:
        delay = self.workflow_controller.policy.phase_reset_delay_ms
        if delay > 0:
            QTimer.singleShot(delay, self.workflow_controller.settle_phase)
