"""
kubectl and a local Kubernetes cluster via minikube.
"""

import logging

from ..core.capabilities import sequence
from ..models.descriptor import PollPolicy, ToolDefinition, ToolImplementation
from ..models.platform import Platform
from .base import Toolbox


logger = logging.getLogger(__name__)

KUBECTL_STABLE_URL = "https://dl.k8s.io/release/stable.txt"
KUBECTL_URL = "https://dl.k8s.io/release/{version}/bin/{os}/{arch}/kubectl"
MINIKUBE_URL = "https://storage.googleapis.com/minikube/releases/latest/minikube-{os}-{arch}"


def kubectl(toolbox: Toolbox) -> ToolDefinition:
    packages = toolbox.packages

    def install_binary(os_name: str):
        async def install() -> None:
            version = await toolbox.downloads.fetch_text(KUBECTL_STABLE_URL)
            url = KUBECTL_URL.format(version=version, os=os_name, arch=toolbox.arch)
            await toolbox.downloads.install_binary(url, "kubectl")
        install.__name__ = f"install_kubectl_{os_name}"
        return install

    install_darwin_binary = install_binary("darwin")

    async def install_macos() -> None:
        if packages.has_brew:
            logger.info("Using Homebrew to install kubectl...")
            await packages.brew_install("kubectl")
        else:
            logger.info("Homebrew not found, installing kubectl using direct download...")
            await install_darwin_binary()

    installed = toolbox.on_path("kubectl")
    client_ok = toolbox.command_ok("kubectl", "version", "--client")

    return ToolDefinition(
        name="kubectl",
        display_name="kubectl",
        description="Kubernetes command-line client",
        implementations={
            Platform.MACOS: ToolImplementation(
                install_probe=installed, install_action=install_macos, readiness_probe=client_ok,
            ),
            Platform.LINUX: ToolImplementation(
                install_probe=installed, install_action=install_binary("linux"), readiness_probe=client_ok,
            ),
        },
    )


def kubernetes(toolbox: Toolbox) -> ToolDefinition:
    runner = toolbox.runner
    packages = toolbox.packages

    def install_binary(os_name: str):
        async def install() -> None:
            url = MINIKUBE_URL.format(os=os_name, arch=toolbox.arch)
            await toolbox.downloads.install_binary(url, "minikube")
        install.__name__ = f"install_minikube_{os_name}"
        return install

    install_darwin_binary = install_binary("darwin")

    async def install_macos() -> None:
        if packages.has_brew:
            logger.info("Using Homebrew to install minikube...")
            await packages.brew_install("minikube")
        else:
            logger.info("Homebrew not found, installing minikube using direct download...")
            await install_darwin_binary()

    async def start_minikube() -> None:
        await runner.check("minikube", "start", "--driver=docker")

    async def enable_ingress() -> None:
        logger.info("Enabling Kubernetes ingress...")
        await runner.check("minikube", "addons", "enable", "ingress")

    installed = toolbox.on_path("minikube")
    cluster_up = toolbox.command_ok("kubectl", "cluster-info")
    policy = PollPolicy(max_attempts=30, interval_seconds=2.0)
    guidance = [
        "Inspect the cluster with: kubectl get nodes",
        "To access the Kubernetes dashboard, run: minikube dashboard",
    ]
    remedy = "Check `minikube status` and `minikube logs`, then re-run."

    def implementation(install) -> ToolImplementation:
        return ToolImplementation(
            prerequisites=["docker", "kubectl"],
            install_probe=installed,
            install_action=install,
            start_probe=cluster_up,
            start_action=sequence(start_minikube, enable_ingress),
            readiness_probe=cluster_up,
            policy=policy,
            guidance=guidance,
            partial_guidance=["The cluster may still be starting; check progress with: minikube status"],
            remedy=remedy,
        )

    return ToolDefinition(
        name="kubernetes",
        display_name="Kubernetes (minikube)",
        description="Local single-node Kubernetes cluster",
        policy=policy,
        implementations={
            Platform.MACOS: implementation(install_macos),
            Platform.LINUX: implementation(install_binary("linux")),
        },
    )
