"""
Integrations with the host system: commands, package managers, downloads.
"""

from .shell import CommandResult, CommandRunner
from .package_managers import PackageManagers
from .downloads import Downloader

__all__ = ["CommandResult", "CommandRunner", "PackageManagers", "Downloader"]
