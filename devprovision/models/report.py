"""
Step outcomes and the per-run report.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .platform import Platform


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProvisionStep(str, Enum):
    """States of the provisioning state machine that can produce an outcome."""
    START = "start"
    CHECK_PREREQUISITES = "check_prerequisites"
    CHECK_INSTALLED = "check_installed"
    INSTALLING = "installing"
    CHECK_RUNNING = "check_running"
    STARTING = "starting"
    POLLING_READY = "polling_ready"


class StepStatus(str, Enum):
    """Tag of a step outcome."""
    ALREADY_SATISFIED = "already_satisfied"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ErrorKind(str, Enum):
    """Failure taxonomy carried by failed steps."""
    PREREQUISITE_FAILURE = "prerequisite_failure"
    ACTION_ERROR = "action_error"
    POST_ACTION_VERIFICATION_FAILURE = "post_action_verification_failure"
    READINESS_TIMEOUT = "readiness_timeout"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    INVALID_DESCRIPTOR = "invalid_descriptor"
    CANCELLED = "cancelled"


NON_FATAL_ERRORS = frozenset({ErrorKind.READINESS_TIMEOUT})


class ProvisionResult(str, Enum):
    """Terminal outcome of provisioning one tool or a whole run."""
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    FATAL = "fatal"


_SEVERITY = {
    ProvisionResult.SUCCESS: 0,
    ProvisionResult.PARTIAL_FAILURE: 1,
    ProvisionResult.FATAL: 2,
}


def worst_result(results) -> ProvisionResult:
    """Most severe result of an iterable, SUCCESS when empty."""
    return max(results, key=_SEVERITY.__getitem__, default=ProvisionResult.SUCCESS)


class StepOutcome(BaseModel):
    """Immutable result of one state transition for one tool."""
    model_config = ConfigDict(frozen=True)

    tool: str = Field(..., description="Tool the step belongs to")
    step: ProvisionStep
    status: StepStatus
    reason: Optional[str] = Field(None, description="Detail or failure reason")
    error: Optional[ErrorKind] = None
    probe_calls: Optional[int] = Field(None, description="Probe invocations made by a poll step")
    recorded_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def already_satisfied(cls, tool: str, step: ProvisionStep, reason: Optional[str] = None) -> "StepOutcome":
        return cls(tool=tool, step=step, status=StepStatus.ALREADY_SATISFIED, reason=reason)

    @classmethod
    def succeeded(cls, tool: str, step: ProvisionStep, reason: Optional[str] = None,
                  probe_calls: Optional[int] = None) -> "StepOutcome":
        return cls(tool=tool, step=step, status=StepStatus.SUCCEEDED,
                   reason=reason, probe_calls=probe_calls)

    @classmethod
    def failed(cls, tool: str, step: ProvisionStep, reason: str, error: ErrorKind,
               probe_calls: Optional[int] = None) -> "StepOutcome":
        return cls(tool=tool, step=step, status=StepStatus.FAILED,
                   reason=reason, error=error, probe_calls=probe_calls)

    @property
    def is_fatal(self) -> bool:
        return self.status == StepStatus.FAILED and self.error not in NON_FATAL_ERRORS


class RunReport(BaseModel):
    """Everything that happened during one provisioning run."""
    target: str = Field(..., description="Tool requested by the caller")
    platform: Platform
    steps: List[StepOutcome] = Field(default_factory=list)
    results: Dict[str, ProvisionResult] = Field(
        default_factory=dict,
        description="Terminal result per tool, in completion order"
    )
    result: Optional[ProvisionResult] = None
    notes: List[str] = Field(default_factory=list)
    guidance: List[str] = Field(default_factory=list)

    started_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    def record(self, outcome: StepOutcome) -> StepOutcome:
        self.steps.append(outcome)
        return outcome

    def note(self, text: str) -> None:
        self.notes.append(text)

    def steps_for(self, tool: str) -> List[StepOutcome]:
        return [s for s in self.steps if s.tool == tool]

    def complete(self, result: ProvisionResult) -> None:
        """Mark the run as complete."""
        self.result = result
        self.completed_at = _utcnow()
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

    @property
    def exit_code(self) -> int:
        """Process exit code recommended for this run."""
        if self.result in (ProvisionResult.SUCCESS, ProvisionResult.PARTIAL_FAILURE):
            return 0
        return 1
