"""
HTTP helpers: responsiveness checks, release lookups and binary downloads.
"""

import asyncio
import json
import logging
import os
import shutil
import tempfile
import urllib.error
import urllib.request
import zipfile
from pathlib import Path
from typing import Optional

from ..core.errors import ActionError
from .shell import CommandRunner


class Downloader:
    """Blocking urllib calls executed off the event loop."""

    def __init__(self, runner: CommandRunner, timeout: float = 60.0,
                 github_token: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.runner = runner
        self.timeout = timeout
        self.github_token = github_token or os.environ.get("GITHUB_TOKEN")

    async def http_responds(self, url: str, timeout: float = 5.0) -> bool:
        """
        Whether anything answers HTTP at ``url``.

        Any HTTP status counts, including 401/403/503 served while a service is
        still initializing. Only connection-level failures count as down.
        """
        def _head() -> bool:
            request = urllib.request.Request(url, method="HEAD")
            try:
                with urllib.request.urlopen(request, timeout=timeout):
                    return True
            except urllib.error.HTTPError:
                return True
            except (urllib.error.URLError, OSError):
                return False

        return await asyncio.to_thread(_head)

    async def fetch_text(self, url: str) -> str:
        def _fetch() -> str:
            try:
                with urllib.request.urlopen(url, timeout=self.timeout) as response:
                    return response.read().decode().strip()
            except urllib.error.HTTPError as e:
                raise ActionError(f"HTTP {e.code} fetching {url}")
            except urllib.error.URLError as e:
                raise ActionError(f"Failed to fetch {url}: {e.reason}")

        return await asyncio.to_thread(_fetch)

    async def fetch_json(self, url: str) -> dict:
        """Fetch and decode a JSON document."""
        def _fetch() -> dict:
            request = urllib.request.Request(url)
            if self.github_token and "api.github.com" in url:
                request.add_header("Authorization", f"token {self.github_token}")
            request.add_header("Accept", "application/vnd.github.v3+json")
            try:
                with urllib.request.urlopen(request, timeout=self.timeout) as response:
                    return json.loads(response.read().decode())
            except urllib.error.HTTPError as e:
                if e.code == 403:
                    raise ActionError(f"Rate limited fetching {url}. Set GITHUB_TOKEN to increase the limit.")
                raise ActionError(f"HTTP {e.code} fetching {url}")
            except urllib.error.URLError as e:
                raise ActionError(f"Failed to fetch {url}: {e.reason}")

        return await asyncio.to_thread(_fetch)

    async def latest_github_release(self, owner: str, repo: str) -> str:
        """Latest release version of a GitHub repository, without a leading ``v``."""
        data = await self.fetch_json(f"https://api.github.com/repos/{owner}/{repo}/releases/latest")
        tag = data.get("tag_name")
        if not tag:
            raise ActionError(f"No release found for {owner}/{repo}")
        return tag[1:] if tag.startswith("v") else tag

    async def download(self, url: str, destination: Path) -> Path:
        """Download ``url`` to ``destination``."""
        def _download() -> Path:
            destination.parent.mkdir(parents=True, exist_ok=True)
            try:
                with urllib.request.urlopen(url, timeout=self.timeout) as response, \
                        open(destination, "wb") as f:
                    shutil.copyfileobj(response, f)
            except urllib.error.HTTPError as e:
                raise ActionError(f"HTTP {e.code} downloading {url}")
            except urllib.error.URLError as e:
                raise ActionError(f"Failed to download {url}: {e.reason}")
            return destination

        self.logger.info(f"Downloading {url}")
        return await asyncio.to_thread(_download)

    async def install_binary(self, url: str, name: str,
                             target_dir: Path = Path("/usr/local/bin"),
                             zip_member: Optional[str] = None) -> Path:
        """
        Download an executable (optionally from inside a zip) into ``target_dir``.

        Args:
            url: Download URL
            name: Executable name in ``target_dir``
            target_dir: Directory on PATH
            zip_member: Archive member to extract when ``url`` is a zip

        Returns:
            Path of the installed executable
        """
        target = target_dir / name
        with tempfile.TemporaryDirectory() as temp_dir:
            temp_path = Path(temp_dir)
            downloaded = await self.download(url, temp_path / Path(url).name)

            if zip_member:
                with zipfile.ZipFile(downloaded) as archive:
                    archive.extract(zip_member, temp_path / "extract")
                binary = temp_path / "extract" / zip_member
            else:
                binary = downloaded

            binary.chmod(0o755)
            await self.runner.check("mkdir", "-p", str(target_dir), privileged=True)
            await self.runner.check("mv", str(binary), str(target), privileged=True)

        self.logger.info(f"Installed {name} to {target}")
        return target
