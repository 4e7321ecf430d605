"""
Shared building blocks for tool definitions.
"""

import platform as _platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..models.descriptor import Probe
from ..integrations.downloads import Downloader
from ..integrations.package_managers import PackageManagers
from ..integrations.shell import CommandRunner


_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def machine_arch(machine: Optional[str] = None) -> str:
    """Architecture name used in release download URLs."""
    machine = (machine or _platform.machine()).lower()
    return _ARCH_ALIASES.get(machine, machine)


@dataclass
class Toolbox:
    """Everything a tool definition needs to build its probes and actions."""
    runner: CommandRunner
    packages: PackageManagers
    downloads: Downloader
    arch: str = field(default_factory=machine_arch)
    probe_timeout: float = 10.0

    @classmethod
    def create(cls, command_timeout: float = 600.0, use_sudo: bool = True,
               download_timeout: float = 60.0, probe_timeout: float = 10.0) -> "Toolbox":
        runner = CommandRunner(timeout=command_timeout, use_sudo=use_sudo)
        return cls(
            runner=runner,
            packages=PackageManagers(runner),
            downloads=Downloader(runner, timeout=download_timeout),
            probe_timeout=probe_timeout,
        )

    def on_path(self, name: str) -> Probe:
        """Probe: an executable is on PATH."""
        async def probe() -> bool:
            return self.runner.exists(name)
        probe.__name__ = f"on_path({name})"
        return probe

    def path_exists(self, path: Path) -> Probe:
        """Probe: a file or directory exists."""
        async def probe() -> bool:
            return Path(path).expanduser().exists()
        probe.__name__ = f"path_exists({path})"
        return probe

    def command_ok(self, *args: str) -> Probe:
        """Probe: a command exits with code 0."""
        async def probe() -> bool:
            return await self.runner.succeeds(*args, timeout=self.probe_timeout)
        probe.__name__ = f"command_ok({' '.join(args)})"
        return probe

    def http_ok(self, url: str) -> Probe:
        """Probe: something answers HTTP at the URL."""
        async def probe() -> bool:
            return await self.downloads.http_responds(url, timeout=self.probe_timeout)
        probe.__name__ = f"http_ok({url})"
        return probe
