"""
Package manager helpers (Homebrew, apt, yum, dnf, pip).
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..core.errors import ActionError
from .shell import CommandRunner


# Order in which Linux package managers are preferred.
LINUX_MANAGERS = ("apt", "yum", "dnf")

_EXECUTABLES = {
    "apt": "apt-get",
    "yum": "yum",
    "dnf": "dnf",
}


class PackageManagers:
    """Thin wrappers over the platform package managers."""

    def __init__(self, runner: CommandRunner):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self._apt_updated = False

    def available(self, manager: str) -> bool:
        return self.runner.exists(_EXECUTABLES.get(manager, manager))

    def linux_manager(self) -> Optional[str]:
        """First supported Linux package manager found on PATH."""
        for manager in LINUX_MANAGERS:
            if self.available(manager):
                return manager
        return None

    # Homebrew

    @property
    def has_brew(self) -> bool:
        return self.runner.exists("brew")

    async def brew_tap(self, tap: str) -> None:
        await self.runner.check("brew", "tap", tap)

    async def brew_install(self, *formulae: str, cask: bool = False) -> None:
        args = ["brew", "install"]
        if cask:
            args.append("--cask")
        await self.runner.check(*args, *formulae)

    async def brew_installed(self, formula: str) -> bool:
        return await self.runner.succeeds("brew", "list", formula)

    async def brew_service_started(self, name: str) -> bool:
        result = await self.runner.run("brew", "services", "list")
        if not result.ok:
            return False
        for line in result.stdout.splitlines():
            fields = line.split()
            if len(fields) >= 2 and fields[0] == name and fields[1] == "started":
                return True
        return False

    async def brew_service_start(self, name: str) -> None:
        await self.runner.check("brew", "services", "start", name)

    # Linux

    async def apt_update(self, force: bool = False) -> None:
        if self._apt_updated and not force:
            return
        await self.runner.check("apt-get", "update", "-y", privileged=True)
        self._apt_updated = True

    async def apt_install(self, *packages: str) -> None:
        await self.apt_update()
        # sudo resets the environment, so the frontend is set on the command line
        await self.runner.check(
            "env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", *packages,
            privileged=True
        )

    async def yum_install(self, *packages: str) -> None:
        await self.runner.check("yum", "install", "-y", *packages, privileged=True)

    async def dnf_install(self, *packages: str) -> None:
        await self.runner.check("dnf", "install", "-y", *packages, privileged=True)

    async def install(self, manager: str, packages: Sequence[str]) -> None:
        """Install packages with a named Linux package manager."""
        if manager == "apt":
            await self.apt_install(*packages)
        elif manager == "yum":
            await self.yum_install(*packages)
        elif manager == "dnf":
            await self.dnf_install(*packages)
        else:
            raise ActionError(f"Unsupported package manager: {manager}")

    async def linux_install(self, packages: Dict[str, List[str]]) -> str:
        """
        Install with the first available package manager that has a package list.

        Args:
            packages: Package names per manager, e.g. ``{"apt": [...], "dnf": [...]}``

        Returns:
            The manager that was used
        """
        for manager in LINUX_MANAGERS:
            if manager in packages and self.available(manager):
                self.logger.info(f"Using {manager} to install {' '.join(packages[manager])}")
                await self.install(manager, packages[manager])
                return manager
        raise ActionError(
            f"No supported package manager found (tried {', '.join(m for m in LINUX_MANAGERS if m in packages)})"
        )

    # pip

    async def pip_install(self, *packages: str, user: bool = False) -> None:
        pip = "pip3" if self.runner.exists("pip3") else "pip"
        args = [pip, "install"]
        if user:
            args.append("--user")
        await self.runner.check(*args, *packages, privileged=not user)
