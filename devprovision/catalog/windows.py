"""
Windows Subsystem for Linux and the Ubuntu distribution tools run inside on Windows.
"""

import tempfile
from pathlib import Path

from ..core.capabilities import sequence
from ..core.errors import ActionError
from ..models.descriptor import ToolDefinition, ToolImplementation
from ..models.platform import Platform
from .base import Toolbox


WSL_DISTRO = "Ubuntu"
UBUNTU_APPX_URL = "https://aka.ms/wslubuntu2204"

WSL_FEATURES = ("Microsoft-Windows-Subsystem-Linux", "VirtualMachinePlatform")


def wsl(toolbox: Toolbox) -> ToolDefinition:
    runner = toolbox.runner

    async def require_admin() -> None:
        if not await runner.succeeds("net", "session"):
            raise ActionError("Administrator privileges are required. Run devprovision as Administrator.")

    async def enable_features() -> None:
        for feature in WSL_FEATURES:
            await runner.check(
                "powershell", "-Command",
                f"Enable-WindowsOptionalFeature -Online -FeatureName {feature} -NoRestart"
            )

    return ToolDefinition(
        name="wsl",
        display_name="WSL",
        description="Windows Subsystem for Linux",
        implementations={
            Platform.WINDOWS: ToolImplementation(
                install_probe=toolbox.command_ok("wsl", "--list"),
                install_action=sequence(require_admin, enable_features),
                remedy="WSL features have been enabled. Restart your computer and run devprovision again.",
            ),
        },
    )


def wsl_ubuntu(toolbox: Toolbox) -> ToolDefinition:
    runner = toolbox.runner

    async def set_default_version() -> None:
        await runner.check("wsl", "--set-default-version", "2")

    async def install_appx() -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            appx = await toolbox.downloads.download(UBUNTU_APPX_URL, Path(temp_dir) / "Ubuntu.appx")
            await runner.check("powershell", "-Command", f"Add-AppxPackage -Path '{appx}'")

    return ToolDefinition(
        name="wsl-ubuntu",
        display_name="Ubuntu for WSL",
        description="Ubuntu distribution inside WSL",
        implementations={
            Platform.WINDOWS: ToolImplementation(
                prerequisites=["wsl"],
                install_probe=toolbox.command_ok("wsl", "-d", WSL_DISTRO, "-e", "true"),
                install_action=sequence(set_default_version, install_appx),
                remedy="Complete the Ubuntu setup by running: ubuntu, then run devprovision again.",
            ),
        },
    )
