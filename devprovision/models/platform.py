"""
Platform identifiers and the fallback chain used to pick implementations.
"""

from enum import Enum
from typing import Dict, List


class Platform(str, Enum):
    """Platform families a tool implementation can target."""
    MACOS = "macos"
    DEBIAN = "debian"
    RHEL = "rhel"
    FEDORA = "fedora"
    LINUX = "linux"
    WSL = "wsl"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


# Most specific first. Generic Linux implementations detect the package
# manager at run time, so every Linux flavour can fall back to them.
PLATFORM_FALLBACKS: Dict[Platform, List[Platform]] = {
    Platform.MACOS: [Platform.MACOS],
    Platform.DEBIAN: [Platform.DEBIAN, Platform.LINUX],
    Platform.RHEL: [Platform.RHEL, Platform.LINUX],
    Platform.FEDORA: [Platform.FEDORA, Platform.LINUX],
    Platform.LINUX: [Platform.LINUX],
    Platform.WSL: [Platform.WSL, Platform.DEBIAN, Platform.LINUX],
    Platform.WINDOWS: [Platform.WINDOWS],
    Platform.UNKNOWN: [],
}


def fallback_chain(platform: Platform) -> List[Platform]:
    """Return the platforms to try, in order, when looking up an implementation."""
    return list(PLATFORM_FALLBACKS.get(platform, [platform]))
