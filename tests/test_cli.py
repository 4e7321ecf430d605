"""Tests for the command line entry point."""

import json
import os
from pathlib import Path

import pytest

import main
from devprovision.core.registry import ToolRegistry
from devprovision.models import Platform

from conftest import simple_tool


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    """Run in a scratch directory without touching the real root logger."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("DEVPROVISION_"):
            monkeypatch.delenv(name)
    calls = []
    monkeypatch.setattr(main, "setup_root_logger", lambda *args, **kwargs: calls.append((args, kwargs)))
    return calls


@pytest.fixture
def fake_catalog(monkeypatch):
    registry = ToolRegistry()
    registry.register(simple_tool("cli", installed=False, guidance=["Try: cli --help"]))
    monkeypatch.setattr(main, "build_default_registry", lambda toolbox: registry)
    return registry


class TestParseArguments:
    """Tests for argument parsing."""

    def test_ensure(self) -> None:
        args = main.parse_arguments(["--platform", "debian", "ensure", "docker", "--timeout", "90"])

        assert args.command == "ensure"
        assert args.tool == "docker"
        assert args.timeout == 90.0
        assert args.platform == "debian"

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main.parse_arguments([])

        assert exc_info.value.code == 2

    def test_unknown_platform_rejected(self) -> None:
        with pytest.raises(SystemExit):
            main.parse_arguments(["--platform", "beos", "detect"])


class TestLoadConfig:
    """Tests for merging the config file with command line overrides."""

    def test_file_and_overrides(self, tmp_path: Path) -> None:
        config_file = tmp_path / "devprovision.json"
        config_file.write_text(json.dumps({
            "execution": {"probe_timeout": 3},
            "polling": {"overrides": {"jenkins": {"max_attempts": 90, "interval_seconds": 2}}},
        }))
        args = main.parse_arguments([
            "--config", str(config_file), "--log-level", "DEBUG", "--platform", "rhel",
            "ensure", "jenkins", "--no-sudo",
        ])

        settings = main.load_config(args)

        assert settings.execution.probe_timeout == 3
        assert settings.execution.use_sudo is False
        assert settings.logging.level == "DEBUG"
        assert settings.platform == Platform.RHEL
        assert settings.polling.overrides["jenkins"].max_attempts == 90


class TestMain:
    """Tests for main()."""

    @pytest.mark.asyncio
    async def test_detect(self, capsys) -> None:
        code = await main.main(["--platform", "macos", "detect"])

        assert code == 0
        assert capsys.readouterr().out.strip() == "macos"

    @pytest.mark.asyncio
    async def test_list(self, capsys) -> None:
        code = await main.main(["--platform", "windows", "list"])

        out = capsys.readouterr().out
        assert code == 0
        assert "wsl-ubuntu" in out
        docker_line = next(line for line in out.splitlines() if line.startswith("docker"))
        assert "unsupported" in docker_line

    @pytest.mark.asyncio
    async def test_unknown_tool_is_usage_error(self, capsys) -> None:
        code = await main.main(["--platform", "linux", "ensure", "emacs"])

        assert code == main.EXIT_USAGE
        assert "Unknown tool 'emacs'" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_invalid_config_is_usage_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.json"
        config_file.write_text(json.dumps({"execution": {"probe_timeout": -1}}))

        code = await main.main(["--config", str(config_file), "detect"])

        assert code == main.EXIT_USAGE

    @pytest.mark.asyncio
    async def test_ensure_prints_and_saves_report(self, fake_catalog, capsys, tmp_path: Path) -> None:
        report_path = tmp_path / "report.json"

        code = await main.main(["--platform", "linux", "ensure", "cli", "--report-json", str(report_path)])

        out = capsys.readouterr().out
        assert code == 0
        assert "cli is installed and ready!" in out
        assert "Try: cli --help" in out
        data = json.loads(report_path.read_text())
        assert data["result"] == "success"
        assert data["steps"][0]["step"] == "installing"

    @pytest.mark.asyncio
    async def test_ensure_unsupported_platform_exits_1(self, fake_catalog) -> None:
        code = await main.main(["--platform", "macos", "ensure", "cli"])

        assert code == 1

    @pytest.mark.asyncio
    async def test_logging_configured_from_settings(self, cli_env) -> None:
        await main.main(["--log-level", "WARNING", "--platform", "linux", "detect"])

        args, kwargs = cli_env[0]
        assert args[1] == "WARNING"
        assert kwargs["backup_count"] == 5
