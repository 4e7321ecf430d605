"""Shared fixtures and fakes for devprovision tests."""

from typing import Dict, Iterable, List, Optional, Set

import pytest

from devprovision.core.poller import BackoffPoller
from devprovision.core.registry import ToolRegistry
from devprovision.integrations.shell import CommandResult, CommandRunner
from devprovision.models import Platform, PollPolicy, ToolDefinition, ToolImplementation


class FakeProbe:
    """Probe returning scripted answers; the last answer repeats."""

    def __init__(self, answers: Iterable[bool] = (False,)):
        self.answers: List[bool] = list(answers)
        self.calls = 0

    def set(self, value: bool) -> None:
        self.answers = [value]

    async def __call__(self) -> bool:
        self.calls += 1
        index = min(self.calls, len(self.answers)) - 1
        return self.answers[index]


class FakeAction:
    """Action recording its calls, optionally flipping probes or failing."""

    def __init__(self, flips: Optional[List[FakeProbe]] = None,
                 error: Optional[Exception] = None, log: Optional[List[str]] = None,
                 label: str = "action"):
        self.flips = flips or []
        self.error = error
        self.log = log
        self.label = label
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1
        if self.log is not None:
            self.log.append(self.label)
        if self.error is not None:
            raise self.error
        for probe in self.flips:
            probe.set(True)


class RecordingRunner(CommandRunner):
    """Runner that records commands instead of executing them."""

    def __init__(self, executables: Set[str], outputs: Optional[Dict[str, str]] = None,
                 failing: Optional[Set[str]] = None):
        super().__init__(use_sudo=False)
        self.executables = executables
        self.outputs = outputs or {}
        self.failing = failing or set()
        self.commands: List[List[str]] = []

    def exists(self, name: str) -> bool:
        return name in self.executables

    async def run(self, *args, **kwargs) -> CommandResult:
        self.commands.append(list(args))
        key = " ".join(args)
        returncode = 1 if key in self.failing else 0
        return CommandResult(args=list(args), returncode=returncode, stdout=self.outputs.get(key, ""))


class RecordingSleep:
    """Replacement for asyncio.sleep that returns immediately."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def simple_tool(name: str, installed: bool = True, prerequisites=(), log: Optional[List[str]] = None,
                platforms=(Platform.LINUX,), **impl_kwargs) -> ToolDefinition:
    """Tool definition whose install action makes its install probe pass."""
    probe = FakeProbe([installed])
    impl_kwargs.setdefault("install_probe", probe)
    impl_kwargs.setdefault("install_action", FakeAction(flips=[probe], log=log, label=f"install {name}"))
    impl = ToolImplementation(prerequisites=list(prerequisites), **impl_kwargs)
    return ToolDefinition(name=name, implementations={platform: impl for platform in platforms})


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def poller(sleep: RecordingSleep) -> BackoffPoller:
    return BackoffPoller(probe_timeout=None, sleep=sleep)


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def fast_policy() -> PollPolicy:
    return PollPolicy(max_attempts=3, interval_seconds=0)
