"""
Detection of the platform family the provisioner is running on.

Read-only: inspects ``platform.system()``, ``/proc/version`` and
``/etc/os-release``. Detection runs once at startup and the result selects
the implementation used for every tool.
"""

import logging
import platform as _platform
from pathlib import Path
from typing import Dict, Optional

from ..models.platform import Platform


logger = logging.getLogger(__name__)

DEBIAN_IDS = {"debian", "ubuntu", "linuxmint", "pop", "raspbian", "kali", "elementary"}
RHEL_IDS = {"rhel", "centos", "rocky", "almalinux", "ol", "amzn", "scientific"}
FEDORA_IDS = {"fedora"}


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse ``/etc/os-release`` content into a dict."""
    values: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def linux_family(os_release: Dict[str, str], etc: Path = Path("/etc")) -> Platform:
    """Map os-release ID / ID_LIKE (or legacy release files) to a platform family."""
    distro = os_release.get("ID", "").lower()
    if distro in FEDORA_IDS:
        return Platform.FEDORA
    if distro in DEBIAN_IDS:
        return Platform.DEBIAN
    if distro in RHEL_IDS:
        return Platform.RHEL

    like = os_release.get("ID_LIKE", "").lower().split()
    if any(d in DEBIAN_IDS for d in like):
        return Platform.DEBIAN
    if any(d in RHEL_IDS for d in like) or "fedora" in like:
        return Platform.RHEL

    if (etc / "debian_version").exists():
        return Platform.DEBIAN
    if (etc / "redhat-release").exists():
        return Platform.RHEL
    return Platform.LINUX


def is_wsl(proc_version: Path = Path("/proc/version")) -> bool:
    """Whether this Linux kernel belongs to Windows Subsystem for Linux."""
    try:
        return "microsoft" in proc_version.read_text().lower()
    except OSError:
        return False


def detect_platform(system: Optional[str] = None,
                    proc_version: Path = Path("/proc/version"),
                    etc: Path = Path("/etc")) -> Platform:
    """
    Detect the running platform.

    Args:
        system: Override for ``platform.system()``
        proc_version: Kernel version file used for WSL detection
        etc: Directory holding ``os-release`` and legacy release files

    Returns:
        The detected Platform
    """
    system = system if system is not None else _platform.system()

    if system == "Darwin":
        detected = Platform.MACOS
    elif system == "Windows":
        detected = Platform.WINDOWS
    elif system == "Linux":
        if is_wsl(proc_version):
            detected = Platform.WSL
        else:
            os_release: Dict[str, str] = {}
            try:
                os_release = parse_os_release((etc / "os-release").read_text())
            except OSError:
                logger.debug("No os-release file found")
            detected = linux_family(os_release, etc)
    else:
        detected = Platform.UNKNOWN

    logger.info(f"Detected platform: {detected.value}")
    return detected
