"""
State models for the per-mod update workflow.

A workflow walks one mod through Download -> Install -> Verify. Every
transition produces a new `WorkflowState`; nothing is mutated in place.
"""

from dataclasses import dataclass, replace
from enum import Enum, IntEnum

from modvalley.models.update_status import UpdateStatus
from modvalley.utils.constants import DEFAULT_PHASE_RESET_DELAY
from modvalley.utils.exception import WorkflowStepError


class WorkflowStep(IntEnum):
    DOWNLOAD = 1
    INSTALL = 2
    VERIFY = 3


class VerificationPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class WorkflowState:
    """
    Ephemeral state of the single active update workflow.

    `status` is a snapshot of the cached update status taken when the
    workflow started; it is not re-read while the workflow is open.
    """

    folder_name: str
    status: UpdateStatus
    step: WorkflowStep = WorkflowStep.DOWNLOAD
    phase: VerificationPhase = VerificationPhase.IDLE

    @property
    def is_running(self) -> bool:
        return self.phase is VerificationPhase.RUNNING

    @property
    def can_verify(self) -> bool:
        return self.step is WorkflowStep.VERIFY and not self.is_running

    def advance_to(self, step: WorkflowStep) -> "WorkflowState":
        """
        Move to a later step. Steps never go backwards while the workflow is open.

        :raises WorkflowStepError: if `step` is before the current step
        """
        if step < self.step:
            raise WorkflowStepError(
                f"Cannot go back from step {self.step.value} to step {step.value}"
            )
        return replace(self, step=step)

    def with_phase(self, phase: VerificationPhase) -> "WorkflowState":
        return replace(self, phase=phase)


@dataclass(frozen=True)
class ResolutionPolicy:
    """
    Delay, in seconds, between a resolved verification and the phase
    returning to idle. Gives the dialog time to show the outcome.
    """

    phase_reset_delay: float = DEFAULT_PHASE_RESET_DELAY

    @property
    def phase_reset_delay_ms(self) -> int:
        return int(self.phase_reset_delay * 1000)


@dataclass(frozen=True)
class VerificationResult:
    folder_name: str
    success: bool
    message: str
    installed_version: str = ""
    latest_version: str = ""
