"""Tests for the tool registry."""

import pytest

from devprovision.core.errors import RegistryError, UnsupportedPlatformError
from devprovision.models import Platform, PollPolicy, ToolDefinition, ToolImplementation

from conftest import FakeAction, FakeProbe, simple_tool


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_register_and_get(self, registry) -> None:
        definition = registry.register(simple_tool("cli"))

        assert registry.get("cli") is definition
        assert "cli" in registry
        assert "other" not in registry

    def test_duplicate_registration_rejected(self, registry) -> None:
        registry.register(simple_tool("cli"))

        with pytest.raises(RegistryError, match="already registered"):
            registry.register(simple_tool("cli"))

    def test_unknown_tool(self, registry) -> None:
        with pytest.raises(RegistryError, match="Unknown tool"):
            registry.get("missing")

    def test_names_are_sorted(self, registry) -> None:
        registry.register(simple_tool("zeta"))
        registry.register(simple_tool("alpha"))

        assert registry.names() == ["alpha", "zeta"]
        assert [d.name for d in registry] == ["alpha", "zeta"]

    def test_supported_on(self, registry) -> None:
        registry.register(simple_tool("mac-only", platforms=(Platform.MACOS,)))
        registry.register(simple_tool("linux-any", platforms=(Platform.LINUX,)))

        assert registry.supported_on(Platform.MACOS) == ["mac-only"]
        assert registry.supported_on(Platform.FEDORA) == ["linux-any"]
        assert registry.supported_on(Platform.UNKNOWN) == []


class TestDescribe:
    """Tests for resolving a descriptor per platform."""

    def test_most_specific_implementation_wins(self, registry) -> None:
        generic = ToolImplementation(install_probe=FakeProbe(), install_action=FakeAction())
        debian = ToolImplementation(install_probe=FakeProbe(), install_action=FakeAction())
        registry.register(ToolDefinition(
            name="cli",
            implementations={Platform.LINUX: generic, Platform.DEBIAN: debian},
        ))

        assert registry.describe("cli", Platform.DEBIAN).install_action is debian.install_action
        assert registry.describe("cli", Platform.RHEL).install_action is generic.install_action
        assert registry.describe("cli", Platform.WSL).platform == Platform.DEBIAN

    def test_unsupported_platform(self, registry) -> None:
        registry.register(simple_tool("cli", platforms=(Platform.MACOS,)))

        with pytest.raises(UnsupportedPlatformError, match="not supported on windows"):
            registry.describe("cli", Platform.WINDOWS)

    def test_policy_precedence(self, registry) -> None:
        tool_policy = PollPolicy(max_attempts=7, interval_seconds=1)
        impl_policy = PollPolicy(max_attempts=9, interval_seconds=3)
        override = PollPolicy(max_attempts=2, interval_seconds=0)
        registry.register(ToolDefinition(
            name="svc",
            policy=tool_policy,
            implementations={
                Platform.MACOS: ToolImplementation(install_probe=FakeProbe(), install_action=FakeAction(),
                                                   policy=impl_policy),
                Platform.LINUX: ToolImplementation(install_probe=FakeProbe(), install_action=FakeAction()),
            },
        ))

        assert registry.describe("svc", Platform.LINUX).policy == tool_policy
        assert registry.describe("svc", Platform.MACOS).policy == impl_policy
        assert registry.describe("svc", Platform.MACOS, override).policy == override

    def test_display_name_defaults_to_name(self, registry) -> None:
        registry.register(simple_tool("cli"))

        assert registry.describe("cli", Platform.LINUX).display_name == "cli"


class TestDependencyOrder:
    """Tests for prerequisite ordering."""

    def test_prerequisites_first(self, registry) -> None:
        registry.register(simple_tool("a"))
        registry.register(simple_tool("b", prerequisites=["a"]))
        registry.register(simple_tool("c", prerequisites=["a", "b"]))

        assert registry.dependency_order("c", Platform.LINUX) == ["a", "b", "c"]

    def test_cycle_detected(self, registry) -> None:
        registry.register(simple_tool("a", prerequisites=["b"]))
        registry.register(simple_tool("b", prerequisites=["a"]))

        with pytest.raises(RegistryError, match="a -> b -> a"):
            registry.dependency_order("a", Platform.LINUX)

    def test_unknown_prerequisite(self, registry) -> None:
        registry.register(simple_tool("a", prerequisites=["ghost"]))

        with pytest.raises(RegistryError, match="ghost"):
            registry.dependency_order("a", Platform.LINUX)

    def test_prerequisite_unsupported_on_platform(self, registry) -> None:
        registry.register(simple_tool("mac-dep", platforms=(Platform.MACOS,)))
        registry.register(simple_tool("a", prerequisites=["mac-dep"], platforms=(Platform.LINUX,)))

        with pytest.raises(UnsupportedPlatformError):
            registry.dependency_order("a", Platform.LINUX)

    def test_validate(self, registry) -> None:
        registry.register(simple_tool("a", prerequisites=["b"]))
        registry.register(simple_tool("b", prerequisites=["a"]))

        with pytest.raises(RegistryError):
            registry.validate(Platform.LINUX)
