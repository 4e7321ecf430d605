"""
Core provisioning engine.
"""

from .errors import ActionError, ProvisioningError, RegistryError, UnsupportedPlatformError
from .poller import BackoffPoller, PollOutcome, PollResult
from .registry import ToolRegistry
from .orchestrator import ProvisioningOrchestrator
from .environment import detect_platform
from .artifact_manager import ArtifactManager
from .reporting import render_report

__all__ = [
    "ActionError",
    "ProvisioningError",
    "RegistryError",
    "UnsupportedPlatformError",
    "BackoffPoller",
    "PollOutcome",
    "PollResult",
    "ToolRegistry",
    "ProvisioningOrchestrator",
    "detect_platform",
    "ArtifactManager",
    "render_report",
]
