"""
Async command runner used by probes and install/start actions.
"""

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..core.errors import ActionError


@dataclass
class CommandResult:
    """Result of running an external command."""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class CommandRunner:
    """Runs commands with a timeout and optional privilege escalation."""

    def __init__(self, timeout: float = 600.0, use_sudo: bool = True):
        """
        Initialize the runner.

        Args:
            timeout: Default timeout in seconds for a command
            use_sudo: Prefix privileged commands with sudo when not running as root
        """
        self.logger = logging.getLogger(__name__)
        self.timeout = timeout
        self.use_sudo = use_sudo

    def exists(self, name: str) -> bool:
        """Whether an executable is on PATH."""
        return shutil.which(name) is not None

    def privileged_args(self, args: Sequence[str]) -> List[str]:
        """Prefix a command with sudo when it needs root and we are not root."""
        args = list(args)
        if not self.use_sudo:
            return args
        geteuid = getattr(os, "geteuid", None)
        if geteuid is None or geteuid() == 0:
            return args
        if not self.exists("sudo"):
            return args
        return ["sudo"] + args

    async def run(self, *args: str,
                  timeout: Optional[float] = None,
                  privileged: bool = False,
                  input_text: Optional[str] = None,
                  env: Optional[Dict[str, str]] = None,
                  cwd: Optional[str] = None) -> CommandResult:
        """
        Run a command and capture its output.

        A missing executable yields return code 127 and a timeout yields -1
        with ``timed_out`` set; neither raises.
        """
        cmd = self.privileged_args(args) if privileged else list(args)
        timeout = timeout if timeout is not None else self.timeout
        self.logger.debug(f"Running: {' '.join(cmd)}")

        run_env = None
        if env:
            run_env = dict(os.environ)
            run_env.update(env)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=run_env,
                cwd=cwd
            )
        except FileNotFoundError:
            return CommandResult(args=cmd, returncode=127, stderr=f"{cmd[0]}: command not found")
        except PermissionError as e:
            return CommandResult(args=cmd, returncode=126, stderr=str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(input_text.encode() if input_text is not None else None),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            self.logger.warning(f"Command timed out after {timeout} seconds: {' '.join(cmd)}")
            return CommandResult(args=cmd, returncode=-1, timed_out=True,
                                 stderr=f"timed out after {timeout} seconds")
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        return CommandResult(
            args=cmd,
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else ""
        )

    async def check(self, *args: str, **kwargs) -> CommandResult:
        """Run a command and raise ``ActionError`` unless it succeeds."""
        result = await self.run(*args, **kwargs)
        if not result.ok:
            reason = "timed out" if result.timed_out else f"exited with code {result.returncode}"
            raise ActionError(
                f"Command {reason}: {' '.join(result.args)}",
                command=result.args,
                returncode=result.returncode,
                output=result.output
            )
        return result

    async def succeeds(self, *args: str, timeout: Optional[float] = None) -> bool:
        """Probe helper: whether a command exits with code 0."""
        result = await self.run(*args, timeout=timeout)
        return result.ok

    async def shell(self, script: str, privileged: bool = False,
                    timeout: Optional[float] = None) -> CommandResult:
        """Run a POSIX shell snippet (pipelines, redirects) and raise on failure."""
        return await self.check("sh", "-c", script, privileged=privileged, timeout=timeout)
