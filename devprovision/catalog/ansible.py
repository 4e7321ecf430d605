"""
Ansible, from distribution packages with a pip fallback, or inside WSL on Windows.
"""

import logging

from ..core.capabilities import first_successful
from ..models.descriptor import ToolDefinition, ToolImplementation
from ..models.platform import Platform
from .base import Toolbox
from .windows import WSL_DISTRO


logger = logging.getLogger(__name__)

WSL_INSTALL_SCRIPT = (
    "sudo apt-get update && "
    "sudo apt-get install -y python3 python3-pip && "
    "sudo pip3 install ansible"
)


def ansible(toolbox: Toolbox) -> ToolDefinition:
    runner = toolbox.runner
    packages = toolbox.packages

    installed = toolbox.on_path("ansible")
    smoke = toolbox.command_ok("ansible", "localhost", "-c", "local", "-m", "ping")

    async def install_brew() -> None:
        await packages.brew_install("ansible")

    async def install_pip_user() -> None:
        await packages.pip_install("ansible", user=True)

    async def install_pip() -> None:
        logger.info("Installing Ansible using pip...")
        await packages.pip_install("ansible")

    async def install_debian() -> None:
        await packages.apt_install("software-properties-common")
        if await runner.succeeds("sh", "-c", '. /etc/os-release && [ "$ID" = ubuntu ]'):
            await runner.check("apt-add-repository", "--yes", "--update", "ppa:ansible/ansible", privileged=True)
        await packages.apt_install("ansible")

    async def install_rhel() -> None:
        await packages.linux_install({"yum": ["epel-release"], "dnf": ["epel-release"]})
        await packages.linux_install({"yum": ["ansible"], "dnf": ["ansible"]})

    async def install_fedora() -> None:
        await packages.dnf_install("ansible")

    async def install_macos() -> None:
        if packages.has_brew:
            await install_brew()
        else:
            await install_pip_user()

    guidance = [
        "ansible --version: Check Ansible version",
        "ansible-playbook playbook.yml: Run an Ansible playbook",
        "ansible-inventory --list: List inventory hosts",
        "ansible-doc -l: List all available modules",
        "For more information, visit: https://docs.ansible.com/ansible/latest/",
    ]
    remedy = "Install Ansible manually: https://docs.ansible.com/ansible/latest/installation_guide/"

    def unix(install) -> ToolImplementation:
        return ToolImplementation(
            prerequisites=["python3"],
            install_probe=installed,
            install_action=first_successful(install, install_pip, verify=installed),
            readiness_probe=smoke,
            guidance=guidance,
            remedy=remedy,
        )

    wsl_installed = toolbox.command_ok("wsl", "-d", WSL_DISTRO, "-e", "ansible", "--version")

    async def install_in_wsl() -> None:
        await runner.check("wsl", "-d", WSL_DISTRO, "-e", "bash", "-c", WSL_INSTALL_SCRIPT)

    return ToolDefinition(
        name="ansible",
        display_name="Ansible",
        description="Configuration-management tool",
        implementations={
            Platform.MACOS: unix(install_macos),
            Platform.DEBIAN: unix(install_debian),
            Platform.RHEL: unix(install_rhel),
            Platform.FEDORA: unix(install_fedora),
            Platform.LINUX: unix(install_pip),
            Platform.WINDOWS: ToolImplementation(
                prerequisites=["wsl-ubuntu"],
                install_probe=wsl_installed,
                install_action=install_in_wsl,
                readiness_probe=wsl_installed,
                guidance=[
                    "Ansible runs inside WSL. Open a prompt and enter WSL with: wsl",
                    "Then run Ansible commands there, e.g.: ansible --version",
                    "Windows paths can be accessed from WSL using /mnt/c/...",
                ],
                remedy="Install Ansible inside WSL with: sudo pip3 install ansible",
            ),
        },
    )
