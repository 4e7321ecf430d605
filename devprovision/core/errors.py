"""
Exceptions raised by devprovision.
"""

from typing import Optional, Sequence


class ProvisioningError(Exception):
    """Base class for devprovision errors."""


class ActionError(ProvisioningError):
    """An install or start action failed."""

    def __init__(self, message: str,
                 command: Optional[Sequence[str]] = None,
                 returncode: Optional[int] = None,
                 output: Optional[str] = None):
        super().__init__(message)
        self.command = list(command) if command else None
        self.returncode = returncode
        self.output = output

    def diagnostic(self, limit: int = 500) -> str:
        """Message plus the tail of the command output."""
        text = str(self)
        if self.output:
            tail = self.output.strip()[-limit:]
            if tail:
                text = f"{text}\n{tail}"
        return text


class RegistryError(ProvisioningError):
    """Unknown tool, duplicate registration, prerequisite cycle or unsupported platform."""


class UnsupportedPlatformError(RegistryError):
    """A tool has no implementation for the detected platform."""
