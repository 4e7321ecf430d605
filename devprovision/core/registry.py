"""
Registry of tool definitions and descriptor resolution per platform.
"""

import logging
from typing import Dict, Iterator, List, Optional

from ..models.descriptor import PollPolicy, ToolDefinition, ToolDescriptor
from ..models.platform import Platform
from .errors import RegistryError, UnsupportedPlatformError


class ToolRegistry:
    """Holds tool definitions for the lifetime of the process."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._definitions: Dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> ToolDefinition:
        if definition.name in self._definitions:
            raise RegistryError(f"Tool already registered: {definition.name}")
        self._definitions[definition.name] = definition
        self.logger.debug(f"Registered tool {definition.name} for {sorted(p.value for p in definition.implementations)}")
        return definition

    def get(self, name: str) -> ToolDefinition:
        try:
            return self._definitions[name]
        except KeyError:
            raise RegistryError(f"Unknown tool: {name}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._definitions[name] for name in self.names())

    def names(self) -> List[str]:
        return sorted(self._definitions)

    def supported_on(self, platform: Platform) -> List[str]:
        return [d.name for d in self if d.supports(platform)]

    def describe(self, name: str, platform: Platform,
                 policy: Optional[PollPolicy] = None) -> ToolDescriptor:
        """
        Resolve a tool into a descriptor for the given platform.

        Args:
            name: Tool identifier
            platform: Detected platform
            policy: Poll policy overriding both the definition and implementation defaults

        Returns:
            ToolDescriptor bound to the most specific implementation

        Raises:
            RegistryError: unknown tool or no implementation for the platform
        """
        definition = self.get(name)
        found = definition.implementation_for(platform)
        if found is None:
            raise UnsupportedPlatformError(f"{definition.label} is not supported on {platform.value}")
        matched, impl = found

        return ToolDescriptor(
            name=definition.name,
            display_name=definition.label,
            platform=matched,
            prerequisites=list(impl.prerequisites),
            install_probe=impl.install_probe,
            install_action=impl.install_action,
            start_probe=impl.start_probe,
            start_action=impl.start_action,
            readiness_probe=impl.readiness_probe,
            policy=policy or impl.policy or definition.policy,
            guidance=list(impl.guidance),
            partial_guidance=list(impl.partial_guidance),
            remedy=impl.remedy,
        )

    def dependency_order(self, name: str, platform: Platform) -> List[str]:
        """
        Prerequisite-first order in which tools would be provisioned.

        Raises:
            RegistryError: unknown tool, unsupported platform or a prerequisite cycle
        """
        order: List[str] = []
        visiting: List[str] = []

        def visit(current: str) -> None:
            if current in order:
                return
            if current in visiting:
                cycle = " -> ".join(visiting[visiting.index(current):] + [current])
                raise RegistryError(f"Prerequisite cycle: {cycle}")
            visiting.append(current)
            for prereq in self.describe(current, platform).prerequisites:
                visit(prereq)
            visiting.pop()
            order.append(current)

        visit(name)
        return order

    def validate(self, platform: Platform) -> None:
        """Check every tool supported on the platform resolves without cycles."""
        for name in self.supported_on(platform):
            self.dependency_order(name, platform)
