"""Wrapper around the hytale-downloader command-line tool."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from hytale_entrypoint.core.errors import ConfigError, UpdateError

logger = logging.getLogger(__name__)

DOWNLOADER_NAMES = ("hytale-downloader.exe", "hytale-downloader")


def find_downloader(server_root: Path) -> Path:
    """Locate the downloader binary shipped in the image."""
    for name in DOWNLOADER_NAMES:
        candidate = Path(server_root) / name
        if candidate.is_file():
            return candidate
    raise ConfigError(
        f"hytale-downloader not found in {server_root}; rebuild the image or "
        "mount the downloader binary there"
    )


class DownloaderCli:
    """Run the downloader with the credential file it shares with us."""

    def __init__(
        self,
        executable: Path,
        *,
        credentials_file: Path,
        skip_update_check: bool = False,
    ) -> None:
        self.executable = Path(executable)
        self._base_args: List[str] = ["-credentials-path", str(credentials_file)]
        if skip_update_check:
            self._base_args.append("-skip-update-check")

    def command(self, *extra: str) -> List[str]:
        return [str(self.executable), *self._base_args, *extra]

    def print_version(self) -> Optional[str]:
        """Return the latest published server version, or ``None`` if unknown."""
        try:
            result = subprocess.run(
                self.command("-print-version"),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            logger.warning("Could not run downloader to query version: %s", exc)
            return None
        lines = result.stdout.splitlines()
        version = lines[0].strip() if lines else ""
        return version or None

    def download(self, destination: Path, *, cwd: Path) -> None:
        """Download the server archive to ``destination`` inside ``cwd``."""
        args: Sequence[str] = self.command("-download-path", str(destination))
        try:
            subprocess.run(args, cwd=cwd, check=False)
        except OSError as exc:
            raise UpdateError(f"Failed to run downloader: {exc}") from exc


__all__ = ["DOWNLOADER_NAMES", "DownloaderCli", "find_downloader"]
