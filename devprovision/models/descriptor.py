"""
Tool descriptor models: poll policy, per-platform implementations and the
resolved descriptor the orchestrator drives.
"""

from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .platform import Platform, fallback_chain


Probe = Callable[[], Awaitable[bool]]
Action = Callable[[], Awaitable[None]]


class PollPolicy(BaseModel):
    """Bounded fixed-interval retry budget for readiness polling."""
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=30, ge=1, description="Probe calls before giving up")
    interval_seconds: float = Field(default=2.0, ge=0, description="Wait between probe calls")

    @property
    def timeout_seconds(self) -> float:
        """Hard upper bound on the time spent waiting."""
        return self.max_attempts * self.interval_seconds


class ToolImplementation(BaseModel):
    """Probes and actions for one tool on one platform family."""
    install_probe: Probe
    install_action: Action
    start_probe: Optional[Probe] = None
    start_action: Optional[Action] = None
    readiness_probe: Optional[Probe] = None
    prerequisites: List[str] = Field(default_factory=list)
    policy: Optional[PollPolicy] = None
    guidance: List[str] = Field(default_factory=list, description="Shown after a successful run")
    partial_guidance: List[str] = Field(
        default_factory=list,
        description="Shown when the tool did not confirm readiness in time"
    )
    remedy: Optional[str] = Field(None, description="Manual remedy shown on fatal failure")

    @model_validator(mode="after")
    def check_start_pair(self) -> "ToolImplementation":
        if (self.start_probe is None) != (self.start_action is None):
            raise ValueError("start_probe and start_action must be given together")
        return self


class ToolDefinition(BaseModel):
    """Registry entry: a tool and its strategy table of platform implementations."""
    name: str = Field(..., description="Tool identifier")
    display_name: Optional[str] = None
    description: Optional[str] = None
    policy: PollPolicy = Field(default_factory=PollPolicy)
    implementations: Dict[Platform, ToolImplementation] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.display_name or self.name

    def implementation_for(self, platform: Platform) -> Optional[Tuple[Platform, ToolImplementation]]:
        """Find the most specific implementation for a platform."""
        for candidate in fallback_chain(platform):
            implementation = self.implementations.get(candidate)
            if implementation is not None:
                return candidate, implementation
        return None

    def supports(self, platform: Platform) -> bool:
        return self.implementation_for(platform) is not None


class ToolDescriptor(BaseModel):
    """A tool resolved for the running platform."""
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    platform: Platform
    prerequisites: List[str] = Field(default_factory=list)
    install_probe: Probe
    install_action: Action
    start_probe: Optional[Probe] = None
    start_action: Optional[Action] = None
    readiness_probe: Optional[Probe] = None
    policy: PollPolicy = Field(default_factory=PollPolicy)
    guidance: List[str] = Field(default_factory=list)
    partial_guidance: List[str] = Field(default_factory=list)
    remedy: Optional[str] = None

    @property
    def is_service(self) -> bool:
        """Whether the tool has a running state to check and start."""
        return self.start_probe is not None
