"""
Data models for devprovision.
"""

from .platform import Platform, fallback_chain
from .descriptor import Action, PollPolicy, Probe, ToolDefinition, ToolDescriptor, ToolImplementation
from .report import (
    ErrorKind,
    ProvisionResult,
    ProvisionStep,
    RunReport,
    StepOutcome,
    StepStatus,
    worst_result,
)

__all__ = [
    "Platform",
    "fallback_chain",
    "Action",
    "Probe",
    "PollPolicy",
    "ToolDefinition",
    "ToolDescriptor",
    "ToolImplementation",
    "ErrorKind",
    "ProvisionResult",
    "ProvisionStep",
    "RunReport",
    "StepOutcome",
    "StepStatus",
    "worst_result",
]
