"""
Docker: Docker Desktop on macOS, Docker Engine on Linux and WSL.
"""

import logging
import os
import tempfile
from pathlib import Path

from ..core.capabilities import any_of, first_successful, sequence
from ..core.errors import ActionError
from ..models.descriptor import PollPolicy, ToolDefinition, ToolImplementation
from ..models.platform import Platform
from .base import Toolbox


logger = logging.getLogger(__name__)

DOCKER_APP = Path("/Applications/Docker.app")
DESKTOP_DMG_URL = "https://desktop.docker.com/mac/main/{arch}/Docker.dmg"
CONVENIENCE_SCRIPT_URL = "https://get.docker.com"

DEBIAN_REPO_SCRIPT = """
set -e
. /etc/os-release
install -m 0755 -d /etc/apt/keyrings
curl -fsSL "https://download.docker.com/linux/$ID/gpg" | gpg --dearmor --yes -o /etc/apt/keyrings/docker.gpg
echo "deb [arch=$(dpkg --print-architecture) signed-by=/etc/apt/keyrings/docker.gpg] https://download.docker.com/linux/$ID ${VERSION_CODENAME:-$(lsb_release -cs)} stable" > /etc/apt/sources.list.d/docker.list
"""

ENGINE_PACKAGES = ["docker-ce", "docker-ce-cli", "containerd.io"]


def docker(toolbox: Toolbox) -> ToolDefinition:
    runner = toolbox.runner
    packages = toolbox.packages

    async def install_desktop_dmg() -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            dmg = await toolbox.downloads.download(
                DESKTOP_DMG_URL.format(arch=toolbox.arch), Path(temp_dir) / "Docker.dmg"
            )
            attached = await runner.check("hdiutil", "attach", "-nobrowse", str(dmg))
            volume = next(
                (line.split("\t")[-1].strip() for line in attached.stdout.splitlines() if "/Volumes/" in line),
                None
            )
            if not volume:
                raise ActionError("Could not find the mounted Docker volume", output=attached.output)
            try:
                await runner.check("cp", "-R", f"{volume}/Docker.app", "/Applications/")
            finally:
                await runner.run("hdiutil", "detach", volume)

    async def install_macos() -> None:
        if packages.has_brew:
            logger.info("Using Homebrew to install Docker...")
            await packages.brew_install("docker", cask=True)
        else:
            logger.info("Homebrew not found, installing Docker Desktop from the DMG...")
            await install_desktop_dmg()

    async def add_debian_repo() -> None:
        await packages.apt_install("ca-certificates", "curl", "gnupg", "lsb-release")
        await runner.shell(DEBIAN_REPO_SCRIPT, privileged=True)
        await packages.apt_update(force=True)

    async def install_debian_packages() -> None:
        await packages.apt_install(*ENGINE_PACKAGES)

    async def install_rhel_packages() -> None:
        await packages.yum_install("yum-utils")
        await runner.check("yum-config-manager", "--add-repo",
                           "https://download.docker.com/linux/centos/docker-ce.repo", privileged=True)
        await packages.yum_install(*ENGINE_PACKAGES)

    async def install_fedora_packages() -> None:
        await packages.dnf_install("dnf-plugins-core")
        await runner.check("dnf", "config-manager", "--add-repo",
                           "https://download.docker.com/linux/fedora/docker-ce.repo", privileged=True)
        await packages.dnf_install(*ENGINE_PACKAGES)

    async def install_with_convenience_script() -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            script = await toolbox.downloads.download(CONVENIENCE_SCRIPT_URL, Path(temp_dir) / "get-docker.sh")
            await runner.check("sh", str(script), privileged=True)

    async def add_user_to_group() -> None:
        user = os.environ.get("SUDO_USER") or os.environ.get("USER")
        await runner.check("groupadd", "-f", "docker", privileged=True)
        if user and user != "root":
            await runner.check("usermod", "-aG", "docker", user, privileged=True)

    async def start_systemd() -> None:
        await runner.check("systemctl", "start", "docker", privileged=True)

    async def start_service() -> None:
        await runner.check("service", "docker", "start", privileged=True)

    async def start_macos() -> None:
        await runner.check("open", "-a", "Docker")

    installed = toolbox.on_path("docker")
    responsive = toolbox.command_ok("docker", "info")
    policy = PollPolicy(max_attempts=30, interval_seconds=2.0)
    guidance = ["To verify the installation, try running: docker run hello-world"]
    linux_guidance = guidance + [
        "You may need to log out and back in for docker group membership to take effect."
    ]
    start_linux = first_successful(start_systemd, start_service)

    def engine(install) -> ToolImplementation:
        return ToolImplementation(
            install_probe=installed,
            install_action=sequence(install, add_user_to_group),
            start_probe=responsive,
            start_action=start_linux,
            readiness_probe=responsive,
            policy=policy,
            guidance=linux_guidance,
            remedy="Install Docker Engine manually: https://docs.docker.com/engine/install/",
        )

    return ToolDefinition(
        name="docker",
        display_name="Docker",
        description="Container runtime",
        policy=policy,
        implementations={
            Platform.MACOS: ToolImplementation(
                install_probe=any_of(installed, toolbox.path_exists(DOCKER_APP)),
                install_action=install_macos,
                start_probe=responsive,
                start_action=start_macos,
                readiness_probe=responsive,
                policy=policy,
                guidance=guidance,
                partial_guidance=["Docker Desktop may still be starting; check the whale icon in the menu bar."],
                remedy="Install Docker Desktop manually: https://docs.docker.com/desktop/install/mac-install/",
            ),
            Platform.DEBIAN: engine(sequence(add_debian_repo, install_debian_packages)),
            Platform.RHEL: engine(install_rhel_packages),
            Platform.FEDORA: engine(install_fedora_packages),
            Platform.LINUX: engine(install_with_convenience_script),
            Platform.WSL: ToolImplementation(
                install_probe=installed,
                install_action=sequence(add_debian_repo, install_debian_packages, add_user_to_group),
                start_probe=responsive,
                start_action=start_service,
                readiness_probe=responsive,
                policy=policy,
                guidance=linux_guidance + [
                    "For the complete Docker Desktop experience on Windows, install Docker Desktop for Windows."
                ],
                remedy="Ensure Docker Desktop for Windows is installed and WSL integration is enabled.",
            ),
        },
    )
