"""
Guided Download -> Install -> Verify workflow for a single mod.

At most one workflow is open at a time. It is held as an optional
`WorkflowState` that is replaced on every transition, so starting a new
workflow simply drops the old value.

Verification calls may run on a worker thread. If the workflow is closed or
replaced while a call is in flight, the call still finishes and its cache
change is kept (the cache mirrors what is on disk), but the phase of the
workflow that replaced it is left alone.
"""

from typing import Callable

from loguru import logger
from PySide6.QtCore import QObject

from modvalley.controllers.mods_controller import ModsController
from modvalley.controllers.verification_resolver import VerificationResolver
from modvalley.models.update_cache import UpdateCache
from modvalley.models.workflow_state import (
    ResolutionPolicy,
    VerificationPhase,
    VerificationResult,
    WorkflowState,
    WorkflowStep,
)
from modvalley.utils.backend import ModBackend
from modvalley.utils.event_bus import EventBus
from modvalley.utils.exception import (
    WorkflowBusy,
    WorkflowStepError,
    WorkflowUnavailable,
)


class UpdateWorkflowController(QObject):
    def __init__(
        self,
        backend: ModBackend,
        cache: UpdateCache,
        mods_controller: ModsController,
        resolver: VerificationResolver,
        policy: ResolutionPolicy | None = None,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.cache = cache
        self.mods_controller = mods_controller
        self.resolver = resolver
        self.policy = policy or ResolutionPolicy()
        self._workflow: WorkflowState | None = None

    @property
    def workflow(self) -> WorkflowState | None:
        return self._workflow

    def can_start(self, folder_name: str) -> bool:
        status = self.cache.get(folder_name)
        return (
            status is not None
            and status.update_available
            and status.has_download_reference
        )

    def start(self, folder_name: str) -> WorkflowState:
        """
        Open the workflow for a mod with a cached, downloadable update.

        Any open workflow is discarded.

        :raises WorkflowUnavailable: if the mod has no pending update
        """
        status = self.cache.get(folder_name)
        if (
            status is None
            or not status.update_available
            or not status.has_download_reference
        ):
            raise WorkflowUnavailable(f"No pending update for {folder_name}")

        if self._workflow is not None:
            logger.debug(f"Discarding update workflow for {self._workflow.folder_name}")
        logger.info(f"USER ACTION: starting update workflow for {folder_name}")
        workflow = WorkflowState(folder_name=folder_name, status=status)
        self._set(workflow)
        return workflow

    def close(self) -> None:
        if self._workflow is not None:
            logger.debug(f"Closing update workflow for {self._workflow.folder_name}")
        self._set(None)

    def open_download(self) -> None:
        """
        Step 1. Open the download page and move on to installing.

        :raises LaunchFailure: if the browser cannot be opened; the step is unchanged
        """
        workflow = self._require()
        if workflow.status.is_manual_check_only:
            logger.info(
                f"No download link for {workflow.folder_name}, the user has to find it manually"
            )
        else:
            self.backend.open_external_link(workflow.status.download_url or "")
        self._replace(
            workflow, workflow.advance_to(max(workflow.step, WorkflowStep.INSTALL))
        )

    def open_install_location(self) -> None:
        """
        Step 2. Open the Mods folder. Does not change the step.

        :raises LaunchFailure: if the folder cannot be opened
        """
        workflow = self._require()
        if workflow.step < WorkflowStep.INSTALL:
            raise WorkflowStepError("Download the update before installing it")
        self.backend.open_path(self.mods_controller.mods_folder)

    def confirm_installed(self) -> None:
        """Step 2. The user says the new files are in place."""
        workflow = self._require()
        if workflow.step < WorkflowStep.INSTALL:
            raise WorkflowStepError("Download the update before installing it")
        logger.info(f"USER ACTION: confirmed install of {workflow.folder_name}")
        self._replace(workflow, workflow.advance_to(WorkflowStep.VERIFY))

    def auto_verify(self) -> VerificationResult:
        """
        Step 3. Re-check the mod against the remote.

        :raises WorkflowStepError: before step 3
        :raises WorkflowBusy: while another verification is running
        :raises ScanFailure, RemoteFailure: from the resolver; the phase becomes Failed
        """
        return self._resolve(
            lambda workflow: self.resolver.recheck(workflow.folder_name)
        )

    def force_override(self) -> VerificationResult:
        """
        Step 3. Record the latest version in the manifest without checking.

        :raises WorkflowStepError: before step 3
        :raises WorkflowBusy: while another verification is running
        :raises OverrideFailure: from the resolver; the phase becomes Failed
        """
        return self._resolve(
            lambda workflow: self.resolver.force_override(
                workflow.folder_name, workflow.status.latest_version
            )
        )

    def settle_phase(self) -> None:
        """
        End the pause after a resolution: a succeeded workflow closes, a failed
        one goes back to idle so it can be retried.
        """
        workflow = self._workflow
        if workflow is None:
            return
        if workflow.phase is VerificationPhase.SUCCEEDED:
            self.close()
        elif workflow.phase is VerificationPhase.FAILED:
            self._replace(workflow, workflow.with_phase(VerificationPhase.IDLE))

    def _resolve(
        self, action: Callable[[WorkflowState], VerificationResult]
    ) -> VerificationResult:
        workflow = self._require()
        if workflow.step < WorkflowStep.VERIFY:
            raise WorkflowStepError("Install the update before verifying it")
        if workflow.is_running:
            raise WorkflowBusy("A verification is already running")

        running = workflow.with_phase(VerificationPhase.RUNNING)
        self._set(running)
        try:
            result = action(running)
        except Exception as e:
            self._finish(running, VerificationPhase.FAILED)
            EventBus().workflow_resolved.emit(running.folder_name, False, str(e))
            raise

        self._finish(
            running,
            VerificationPhase.SUCCEEDED if result.success else VerificationPhase.FAILED,
        )
        EventBus().workflow_resolved.emit(
            result.folder_name, result.success, result.message
        )
        return result

    def _finish(self, issued: WorkflowState, phase: VerificationPhase) -> None:
        if self._workflow is not issued:
            logger.info(
                f"Update workflow for {issued.folder_name} was closed during verification"
            )
            return
        self._set(issued.with_phase(phase))
        if self.policy.phase_reset_delay <= 0:
            self.settle_phase()

    def _require(self) -> WorkflowState:
        if self._workflow is None:
            raise WorkflowUnavailable("No update workflow is open")
        return self._workflow

    def _replace(self, expected: WorkflowState, new: WorkflowState) -> None:
        if self._workflow is expected:
            self._set(new)

    def _set(self, workflow: WorkflowState | None) -> None:
        self._workflow = workflow
        EventBus().workflow_changed.emit()
