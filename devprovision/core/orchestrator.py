"""
Provisioning orchestrator - drives one tool and its prerequisites through
CheckPrerequisites -> CheckInstalled -> Installing -> CheckRunning ->
Starting -> PollingReady -> Done.
"""

import asyncio
import logging
from typing import Dict, Optional

from ..models.descriptor import PollPolicy, ToolDescriptor
from ..models.platform import Platform
from ..models.report import (
    ErrorKind,
    ProvisionResult,
    ProvisionStep,
    RunReport,
    StepOutcome,
    worst_result,
)
from .capabilities import run_action, run_probe
from .errors import ActionError, RegistryError, UnsupportedPlatformError
from .poller import BackoffPoller, PollOutcome
from .registry import ToolRegistry


class ProvisioningOrchestrator:
    """Ensures a tool is installed, running and responsive."""

    def __init__(self,
                 registry: ToolRegistry,
                 platform: Platform,
                 poller: Optional[BackoffPoller] = None,
                 probe_timeout: Optional[float] = 10.0,
                 action_timeout: Optional[float] = 1800.0,
                 policy_overrides: Optional[Dict[str, PollPolicy]] = None,
                 cancel_event: Optional[asyncio.Event] = None,
                 deadline: Optional[float] = None):
        """
        Initialize the orchestrator.

        Args:
            registry: Tool registry to resolve descriptors from
            platform: Platform detected at startup
            poller: Readiness poller
            probe_timeout: Upper bound for each install/start probe call
            action_timeout: Upper bound for each install/start action
            policy_overrides: Poll policy per tool name, taking precedence over the catalog
            cancel_event: Set to interrupt readiness polling
            deadline: Absolute event loop time after which readiness polls stop
        """
        self.logger = logging.getLogger(__name__)
        self.registry = registry
        self.platform = platform
        self.poller = poller or BackoffPoller(probe_timeout=probe_timeout)
        self.probe_timeout = probe_timeout
        self.action_timeout = action_timeout
        self.policy_overrides = policy_overrides or {}
        self.cancel_event = cancel_event
        self.deadline = deadline

    async def provision(self, tool_name: str) -> RunReport:
        """
        Provision a tool and its prerequisites.

        Never raises for provisioning failures; everything that happened is in
        the returned report.
        """
        report = RunReport(target=tool_name, platform=self.platform)
        self.logger.info(f"Provisioning {tool_name} on {self.platform.value}")

        try:
            order = self.registry.dependency_order(tool_name, self.platform)
            self.logger.debug(f"Provisioning order: {' -> '.join(order)}")
        except RegistryError as e:
            error = ErrorKind.UNSUPPORTED_PLATFORM if isinstance(e, UnsupportedPlatformError) \
                else ErrorKind.INVALID_DESCRIPTOR
            self._fail(report, tool_name, ProvisionStep.START, str(e), error)
            report.results[tool_name] = ProvisionResult.FATAL
            report.complete(ProvisionResult.FATAL)
            return report

        await self._ensure(tool_name, report)

        result = worst_result(report.results.values())
        report.complete(result)
        self.logger.info(f"Provisioning {tool_name} finished: {result.value}")
        return report

    async def _ensure(self, name: str, report: RunReport) -> ProvisionResult:
        """Provision one tool after its prerequisites, once per run."""
        if name in report.results:
            return report.results[name]

        descriptor = self.registry.describe(name, self.platform, self.policy_overrides.get(name))

        if self.cancel_event is not None and self.cancel_event.is_set():
            self._fail(report, name, ProvisionStep.START, "cancelled before start", ErrorKind.CANCELLED)
            return self._finish(report, descriptor, ProvisionResult.FATAL)

        for prereq in descriptor.prerequisites:
            prereq_result = await self._ensure(prereq, report)
            if prereq_result != ProvisionResult.SUCCESS:
                self._fail(report, name, ProvisionStep.CHECK_PREREQUISITES,
                           f"prerequisite {prereq} ended {prereq_result.value}", ErrorKind.PREREQUISITE_FAILURE)
                return self._finish(report, descriptor, ProvisionResult.FATAL)

        result = await self._run_states(descriptor, report)
        return self._finish(report, descriptor, result)

    async def _run_states(self, descriptor: ToolDescriptor, report: RunReport) -> ProvisionResult:
        name = descriptor.name

        # CheckInstalled / Installing
        if await run_probe(descriptor.install_probe, self.probe_timeout):
            self.logger.info(f"{descriptor.display_name} is already installed")
            report.record(StepOutcome.already_satisfied(name, ProvisionStep.CHECK_INSTALLED, "already installed"))
        else:
            self.logger.info(f"Installing {descriptor.display_name}...")
            try:
                await run_action(descriptor.install_action, self.action_timeout)
            except ActionError as e:
                self._fail(report, name, ProvisionStep.INSTALLING,
                           f"install failed: {e.diagnostic()}", ErrorKind.ACTION_ERROR)
                return ProvisionResult.FATAL

            if not await run_probe(descriptor.install_probe, self.probe_timeout):
                self._fail(report, name, ProvisionStep.INSTALLING,
                           "install did not take effect", ErrorKind.POST_ACTION_VERIFICATION_FAILURE)
                return ProvisionResult.FATAL
            report.record(StepOutcome.succeeded(name, ProvisionStep.INSTALLING, "installed"))

        # CheckRunning / Starting
        if descriptor.is_service:
            if await run_probe(descriptor.start_probe, self.probe_timeout):
                self.logger.info(f"{descriptor.display_name} is already running")
                report.record(StepOutcome.already_satisfied(name, ProvisionStep.CHECK_RUNNING, "already running"))
            else:
                self.logger.info(f"Starting {descriptor.display_name}...")
                try:
                    await run_action(descriptor.start_action, self.action_timeout)
                except ActionError as e:
                    self._fail(report, name, ProvisionStep.STARTING,
                               f"start failed: {e.diagnostic()}", ErrorKind.ACTION_ERROR)
                    return ProvisionResult.FATAL
                report.record(StepOutcome.succeeded(name, ProvisionStep.STARTING, "started"))

        # PollingReady
        if descriptor.readiness_probe is None:
            return ProvisionResult.SUCCESS

        self.logger.info(f"Waiting for {descriptor.display_name} to become responsive...")
        poll = await self.poller.poll(
            descriptor.readiness_probe,
            descriptor.policy,
            cancel_event=self.cancel_event,
            deadline=self.deadline
        )

        if poll.outcome == PollOutcome.READY:
            report.record(StepOutcome.succeeded(
                name, ProvisionStep.POLLING_READY,
                f"ready after {poll.attempts} probe calls", probe_calls=poll.attempts
            ))
            return ProvisionResult.SUCCESS

        if poll.outcome == PollOutcome.CANCELLED:
            self._fail(report, name, ProvisionStep.POLLING_READY,
                       f"cancelled after {poll.attempts} probe calls", ErrorKind.CANCELLED,
                       probe_calls=poll.attempts)
            return ProvisionResult.FATAL

        outcome = report.record(StepOutcome.failed(
            name, ProvisionStep.POLLING_READY,
            f"timed out after {poll.attempts} probe calls", ErrorKind.READINESS_TIMEOUT,
            probe_calls=poll.attempts
        ))
        self.logger.warning(f"{descriptor.display_name}: {outcome.reason}")
        return ProvisionResult.PARTIAL_FAILURE

    def _fail(self, report: RunReport, name: str, step: ProvisionStep, reason: str,
              error: ErrorKind, probe_calls: Optional[int] = None) -> None:
        report.record(StepOutcome.failed(name, step, reason, error, probe_calls=probe_calls))
        self.logger.error(f"{name}: {step.value} failed: {reason}")

    def _finish(self, report: RunReport, descriptor: ToolDescriptor,
                result: ProvisionResult) -> ProvisionResult:
        report.results[descriptor.name] = result
        label = descriptor.display_name

        if result == ProvisionResult.SUCCESS:
            if descriptor.name == report.target:
                report.guidance.extend(descriptor.guidance)
        elif result == ProvisionResult.PARTIAL_FAILURE:
            report.note(
                f"{label} is installed but did not confirm it is responsive within "
                f"{descriptor.policy.timeout_seconds:.0f}s. First-run warm-up may explain the timeout."
            )
            report.guidance.extend(descriptor.partial_guidance)
        else:
            remedy = descriptor.remedy or f"Resolve the failure above, or install {label} manually, then re-run."
            report.note(f"{label}: {remedy}")
        return result
