"""
Human-readable rendering of a run report.
"""

from typing import List

from ..models.report import ProvisionResult, RunReport, StepOutcome, StepStatus


BANNER = "=" * 60

_STATUS_MARKS = {
    StepStatus.ALREADY_SATISFIED: "[ok]",
    StepStatus.SUCCEEDED: "[done]",
    StepStatus.FAILED: "[FAIL]",
}

_HEADLINES = {
    ProvisionResult.SUCCESS: "{target} is installed and ready!",
    ProvisionResult.PARTIAL_FAILURE: "{target} is installed but was not confirmed responsive.",
    ProvisionResult.FATAL: "Failed to provision {target}.",
}


def format_step(step: StepOutcome) -> str:
    mark = _STATUS_MARKS[step.status]
    if step.status == StepStatus.FAILED and step.error is not None:
        if not step.is_fatal:
            mark = "[WARN]"
        detail = f"{step.error.value}: {step.reason}"
    else:
        detail = step.reason or step.status.value
    return f"  {mark:<7}{step.tool:<12} {step.step.value:<20} {detail}"


def render_report(report: RunReport) -> str:
    """Render a completed report as plain text."""
    lines: List[str] = [
        BANNER,
        f"Provisioning {report.target} on {report.platform.value}",
        BANNER,
    ]
    lines.extend(format_step(step) for step in report.steps)

    result = report.result or ProvisionResult.FATAL
    lines.append(BANNER)
    lines.append(_HEADLINES[result].format(target=report.target))
    if report.duration_seconds is not None:
        lines.append(f"Duration: {report.duration_seconds:.2f} seconds")
    lines.append(BANNER)

    if report.notes:
        lines.append("")
        lines.extend(f"Note: {note}" for note in report.notes)
    if report.guidance:
        lines.append("")
        lines.extend(report.guidance)

    return "\n".join(lines)
