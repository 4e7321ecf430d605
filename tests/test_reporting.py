"""Tests for report rendering and storage."""

import json
from pathlib import Path

from devprovision.core.artifact_manager import ArtifactManager
from devprovision.core.reporting import format_step, render_report
from devprovision.models import ErrorKind, Platform, ProvisionResult, ProvisionStep, RunReport, StepOutcome


def partial_report() -> RunReport:
    report = RunReport(target="jenkins", platform=Platform.MACOS)
    report.record(StepOutcome.already_satisfied("java", ProvisionStep.CHECK_INSTALLED, "already installed"))
    report.record(StepOutcome.succeeded("jenkins", ProvisionStep.INSTALLING, "installed"))
    report.record(StepOutcome.failed("jenkins", ProvisionStep.POLLING_READY, "timed out after 60 probe calls",
                                     ErrorKind.READINESS_TIMEOUT, probe_calls=60))
    report.results.update(java=ProvisionResult.SUCCESS, jenkins=ProvisionResult.PARTIAL_FAILURE)
    report.note("Jenkins is installed but did not confirm it is responsive within 120s.")
    report.guidance.append("1. Open http://localhost:8080 in your browser")
    report.complete(ProvisionResult.PARTIAL_FAILURE)
    return report


class TestRenderReport:
    """Tests for plain text rendering."""

    def test_partial_report(self) -> None:
        text = render_report(partial_report())

        assert "Provisioning jenkins on macos" in text
        assert "jenkins is installed but was not confirmed responsive." in text
        assert "Note: Jenkins is installed but did not confirm" in text
        assert "http://localhost:8080" in text
        assert "Duration:" in text

    def test_step_marks(self) -> None:
        report = partial_report()

        assert format_step(report.steps[0]).strip().startswith("[ok]")
        assert format_step(report.steps[1]).strip().startswith("[done]")
        warn = format_step(report.steps[2])
        assert warn.strip().startswith("[WARN]")
        assert "readiness_timeout" in warn

    def test_fatal_step_mark(self) -> None:
        step = StepOutcome.failed("docker", ProvisionStep.INSTALLING, "install failed", ErrorKind.ACTION_ERROR)

        assert format_step(step).strip().startswith("[FAIL]")

    def test_fatal_headline(self) -> None:
        report = RunReport(target="docker", platform=Platform.LINUX)
        report.complete(ProvisionResult.FATAL)

        assert "Failed to provision docker." in render_report(report)


class TestArtifactManager:
    """Tests for saving reports."""

    def test_save_report_under_run_dir(self, tmp_path: Path) -> None:
        manager = ArtifactManager(tmp_path, run_id="run1")

        path = manager.save_report(partial_report())

        assert path == tmp_path / "runs" / "run1" / "jenkins.json"
        data = json.loads(path.read_text())
        assert data["result"] == "partial_failure"
        assert data["steps"][-1]["error"] == "readiness_timeout"

    def test_save_report_to_explicit_path(self, tmp_path: Path) -> None:
        target = tmp_path / "reports" / "out.json"

        path = ArtifactManager(tmp_path).save_report(partial_report(), target)

        assert path == target
        assert json.loads(target.read_text())["target"] == "jenkins"

    def test_save_json_subdirs(self, tmp_path: Path) -> None:
        manager = ArtifactManager(tmp_path, run_id="run2")

        path = manager.save_json("extra.json", {"a": 1}, subdirs=["nested"])

        assert path == tmp_path / "runs" / "run2" / "nested" / "extra.json"
