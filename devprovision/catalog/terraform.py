"""
Terraform, from the HashiCorp package repositories or the release zip.
"""

import logging

from ..models.descriptor import ToolDefinition, ToolImplementation
from ..models.platform import Platform
from .base import Toolbox


logger = logging.getLogger(__name__)

RELEASE_URL = "https://releases.hashicorp.com/terraform/{version}/terraform_{version}_{os}_{arch}.zip"

APT_REPO_SCRIPT = """
set -e
curl -fsSL https://apt.releases.hashicorp.com/gpg | gpg --dearmor --yes -o /usr/share/keyrings/hashicorp-archive-keyring.gpg
echo "deb [signed-by=/usr/share/keyrings/hashicorp-archive-keyring.gpg] https://apt.releases.hashicorp.com $(lsb_release -cs) main" > /etc/apt/sources.list.d/hashicorp.list
"""

RPM_REPOS = {
    "yum": "https://rpm.releases.hashicorp.com/RHEL/hashicorp.repo",
    "dnf": "https://rpm.releases.hashicorp.com/fedora/hashicorp.repo",
}


def terraform(toolbox: Toolbox) -> ToolDefinition:
    runner = toolbox.runner
    packages = toolbox.packages

    def install_binary(os_name: str):
        async def install() -> None:
            version = await toolbox.downloads.latest_github_release("hashicorp", "terraform")
            logger.info(f"Latest Terraform version: {version}")
            url = RELEASE_URL.format(version=version, os=os_name, arch=toolbox.arch)
            await toolbox.downloads.install_binary(url, "terraform", zip_member="terraform")
        install.__name__ = f"install_terraform_{os_name}"
        return install

    install_darwin_binary = install_binary("darwin")
    install_linux_binary = install_binary("linux")

    async def install_macos() -> None:
        if packages.has_brew:
            logger.info("Using Homebrew to install Terraform...")
            await packages.brew_tap("hashicorp/tap")
            await packages.brew_install("hashicorp/tap/terraform")
        else:
            logger.info("Homebrew not found, installing Terraform using direct download...")
            await install_darwin_binary()

    async def install_linux() -> None:
        manager = packages.linux_manager()
        if manager == "apt":
            await packages.apt_install("gnupg", "curl", "lsb-release")
            await runner.shell(APT_REPO_SCRIPT, privileged=True)
            await packages.apt_update(force=True)
            await packages.apt_install("terraform")
        elif manager == "yum":
            await packages.yum_install("yum-utils")
            await runner.check("yum-config-manager", "--add-repo", RPM_REPOS["yum"], privileged=True)
            await packages.yum_install("terraform")
        elif manager == "dnf":
            await packages.dnf_install("dnf-plugins-core")
            await runner.check("dnf", "config-manager", "--add-repo", RPM_REPOS["dnf"], privileged=True)
            await packages.dnf_install("terraform")
        else:
            logger.info("No supported package manager found, installing Terraform using direct download...")
            await install_linux_binary()

    installed = toolbox.on_path("terraform")
    smoke = toolbox.command_ok("terraform", "version")
    guidance = [
        "terraform init: Initialize a Terraform working directory",
        "terraform plan: Show changes required by the current configuration",
        "terraform apply: Create or update infrastructure",
        "terraform destroy: Destroy previously-created infrastructure",
        "For more information, visit: https://developer.hashicorp.com/terraform/docs",
    ]
    remedy = "Install Terraform manually: https://developer.hashicorp.com/terraform/install"

    return ToolDefinition(
        name="terraform",
        display_name="Terraform",
        description="Infrastructure-as-code CLI",
        implementations={
            Platform.MACOS: ToolImplementation(
                install_probe=installed, install_action=install_macos,
                readiness_probe=smoke, guidance=guidance, remedy=remedy,
            ),
            Platform.LINUX: ToolImplementation(
                install_probe=installed, install_action=install_linux,
                readiness_probe=smoke, guidance=guidance, remedy=remedy,
            ),
        },
    )
