"""
Jenkins CI server, via Homebrew on macOS and the Jenkins package repositories on Linux.
"""

import logging
import tempfile
from pathlib import Path

from ..core.capabilities import any_of, first_successful
from ..models.descriptor import PollPolicy, ToolDefinition, ToolImplementation
from ..models.platform import Platform
from .base import Toolbox
from .runtimes import require_brew


logger = logging.getLogger(__name__)

JENKINS_URL = "http://localhost:8080"
JENKINS_KEY_URL = "https://pkg.jenkins.io/debian-stable/jenkins.io-2023.key"
JENKINS_WAR_URL = "https://get.jenkins.io/war-stable/latest/jenkins.war"
WAR_DIR = Path("/opt/jenkins")

APT_REPO_SCRIPT = f"""
set -e
curl -fsSL {JENKINS_KEY_URL} -o /usr/share/keyrings/jenkins-keyring.asc
echo "deb [signed-by=/usr/share/keyrings/jenkins-keyring.asc] https://pkg.jenkins.io/debian-stable binary/" > /etc/apt/sources.list.d/jenkins.list
"""

RPM_REPO_SCRIPT = """
set -e
curl -fsSL https://pkg.jenkins.io/redhat-stable/jenkins.repo -o /etc/yum.repos.d/jenkins.repo
rpm --import https://pkg.jenkins.io/redhat-stable/jenkins.io-2023.key
"""

SYSTEMD_UNIT = f"""[Unit]
Description=Jenkins Automation Server
After=network.target

[Service]
User=jenkins
ExecStart=/usr/bin/java -Djava.awt.headless=true -jar {WAR_DIR}/jenkins.war --httpPort=8080
Restart=on-failure

[Install]
WantedBy=multi-user.target
"""


def first_run_guidance(password_path: str, view_hint: str = "") -> list:
    steps = [
        "Jenkins is starting for the first time and needs to be configured:",
        f"1. Open {JENKINS_URL} in your browser",
        f"2. For the initial admin password, check the file at: {password_path}",
    ]
    if view_hint:
        steps.append(f"   You can view it with: {view_hint}")
    steps.append("3. Follow the on-screen instructions to complete the Jenkins setup")
    return steps


def jenkins(toolbox: Toolbox) -> ToolDefinition:
    runner = toolbox.runner
    packages = toolbox.packages

    async def install_macos() -> None:
        require_brew(toolbox, "Jenkins")
        await packages.brew_install("jenkins")

    async def install_war() -> None:
        logger.info("No supported package manager found. Installing Jenkins via direct download...")
        await runner.check("mkdir", "-p", str(WAR_DIR), privileged=True)
        with tempfile.TemporaryDirectory() as temp_dir:
            war = await toolbox.downloads.download(JENKINS_WAR_URL, Path(temp_dir) / "jenkins.war")
            await runner.check("mv", str(war), str(WAR_DIR / "jenkins.war"), privileged=True)
        await runner.run("useradd", "-r", "-m", "-d", "/var/lib/jenkins", "jenkins", privileged=True)
        await runner.check("chown", "-R", "jenkins:jenkins", str(WAR_DIR), privileged=True)
        await runner.check("tee", "/etc/systemd/system/jenkins.service",
                           input_text=SYSTEMD_UNIT, privileged=True)
        await runner.check("systemctl", "daemon-reload", privileged=True)

    async def install_linux() -> None:
        manager = packages.linux_manager()
        if manager == "apt":
            await packages.apt_install("ca-certificates", "curl")
            await runner.shell(APT_REPO_SCRIPT, privileged=True)
            await packages.apt_update(force=True)
            await packages.apt_install("jenkins")
        elif manager in ("yum", "dnf"):
            await runner.shell(RPM_REPO_SCRIPT, privileged=True)
            await packages.install(manager, ["jenkins"])
        else:
            await install_war()

    async def start_systemd() -> None:
        await runner.check("systemctl", "start", "jenkins", privileged=True)

    async def start_service() -> None:
        await runner.check("service", "jenkins", "start", privileged=True)

    async def start_macos() -> None:
        await packages.brew_service_start("jenkins")

    async def installed_macos() -> bool:
        return await packages.brew_installed("jenkins")

    async def started_macos() -> bool:
        return await packages.brew_service_started("jenkins")

    responsive = toolbox.http_ok(JENKINS_URL)
    policy = PollPolicy(max_attempts=60, interval_seconds=2.0)
    guidance = [f"Jenkins URL: {JENKINS_URL}", "For more information, visit: https://www.jenkins.io/doc/"]

    return ToolDefinition(
        name="jenkins",
        display_name="Jenkins",
        description="CI server",
        policy=policy,
        implementations={
            Platform.MACOS: ToolImplementation(
                prerequisites=["java"],
                install_probe=installed_macos,
                install_action=install_macos,
                start_probe=started_macos,
                start_action=start_macos,
                readiness_probe=responsive,
                policy=policy,
                guidance=guidance,
                partial_guidance=first_run_guidance("~/.jenkins/secrets/initialAdminPassword"),
                remedy="Install Jenkins manually with: brew install jenkins",
            ),
            Platform.LINUX: ToolImplementation(
                prerequisites=["java"],
                install_probe=any_of(
                    toolbox.on_path("jenkins"),
                    toolbox.path_exists(Path("/usr/share/jenkins/jenkins.war")),
                    toolbox.path_exists(Path("/usr/share/java/jenkins.war")),
                    toolbox.path_exists(WAR_DIR / "jenkins.war"),
                ),
                install_action=install_linux,
                start_probe=any_of(
                    toolbox.command_ok("systemctl", "is-active", "--quiet", "jenkins"),
                    toolbox.command_ok("service", "jenkins", "status"),
                ),
                start_action=first_successful(start_systemd, start_service),
                readiness_probe=responsive,
                policy=policy,
                guidance=guidance,
                partial_guidance=first_run_guidance(
                    "/var/lib/jenkins/secrets/initialAdminPassword",
                    "sudo cat /var/lib/jenkins/secrets/initialAdminPassword",
                ),
                remedy="Install Jenkins manually: https://www.jenkins.io/doc/book/installing/linux/",
            ),
        },
    )
