"""
Built-in tool definitions.
"""

from typing import Optional

from ..core.registry import ToolRegistry
from .base import Toolbox, machine_arch
from .ansible import ansible
from .docker import docker
from .jenkins import jenkins
from .kubernetes import kubectl, kubernetes
from .runtimes import java, python3
from .terraform import terraform
from .windows import wsl, wsl_ubuntu


DEFINITIONS = (
    docker,
    kubectl,
    kubernetes,
    java,
    jenkins,
    python3,
    ansible,
    terraform,
    wsl,
    wsl_ubuntu,
)


def build_default_registry(toolbox: Optional[Toolbox] = None) -> ToolRegistry:
    """Registry holding every built-in tool."""
    toolbox = toolbox or Toolbox.create()
    registry = ToolRegistry()
    for build in DEFINITIONS:
        registry.register(build(toolbox))
    return registry


__all__ = ["Toolbox", "machine_arch", "build_default_registry", "DEFINITIONS"]
