"""
Language runtimes other tools depend on: Java (Jenkins) and Python 3 (Ansible).
"""

from ..core.errors import ActionError
from ..models.descriptor import ToolDefinition, ToolImplementation
from ..models.platform import Platform
from .base import Toolbox


HOMEBREW_INSTALL_HINT = (
    'Install Homebrew first: /bin/bash -c "$(curl -fsSL '
    'https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
)


def require_brew(toolbox: Toolbox, what: str) -> None:
    if not toolbox.packages.has_brew:
        raise ActionError(f"Homebrew not found, cannot install {what}. {HOMEBREW_INSTALL_HINT}")


def java(toolbox: Toolbox) -> ToolDefinition:
    packages = toolbox.packages

    async def install_macos() -> None:
        require_brew(toolbox, "Java")
        await packages.brew_install("temurin", cask=True)

    async def install_linux() -> None:
        await packages.linux_install({
            "apt": ["openjdk-17-jdk"],
            "yum": ["java-17-openjdk-devel"],
            "dnf": ["java-17-openjdk-devel"],
        })

    installed = toolbox.on_path("java")
    smoke = toolbox.command_ok("java", "-version")

    return ToolDefinition(
        name="java",
        display_name="Java",
        description="Java runtime required by Jenkins",
        implementations={
            Platform.MACOS: ToolImplementation(
                install_probe=installed,
                install_action=install_macos,
                readiness_probe=smoke,
                remedy="Install a JDK (17 or newer) manually, e.g. from https://adoptium.net/",
            ),
            Platform.LINUX: ToolImplementation(
                install_probe=installed,
                install_action=install_linux,
                readiness_probe=smoke,
                remedy="Install OpenJDK 17 with your distribution's package manager.",
            ),
        },
    )


def python3(toolbox: Toolbox) -> ToolDefinition:
    packages = toolbox.packages

    async def install_macos() -> None:
        require_brew(toolbox, "Python 3")
        await packages.brew_install("python")

    async def install_linux() -> None:
        await packages.linux_install({
            "apt": ["python3", "python3-pip"],
            "yum": ["python3", "python3-pip"],
            "dnf": ["python3", "python3-pip"],
        })

    installed = toolbox.on_path("python3")

    return ToolDefinition(
        name="python3",
        display_name="Python 3",
        description="Python interpreter required by Ansible",
        implementations={
            Platform.MACOS: ToolImplementation(install_probe=installed, install_action=install_macos),
            Platform.LINUX: ToolImplementation(install_probe=installed, install_action=install_linux),
        },
    )
