"""
Server binary installation and update handling.
"""

from __future__ import annotations

import logging
import shutil
import time
import zipfile
from pathlib import Path
from typing import Optional

from hytale_entrypoint.clients.downloader import DownloaderCli
from hytale_entrypoint.core.config import PathSettings, UpdateMode
from hytale_entrypoint.core.errors import ConfigError, UpdateError

logger = logging.getLogger(__name__)

SERVER_JAR = "HytaleServer.jar"
ARCHIVE_NAME = "server-files.zip"
NESTED_DIR = "Server"


class ServerFilesManager:
    """Keep ``SERVER_FILES_DIR`` populated according to the update mode."""

    def __init__(
        self,
        paths: PathSettings,
        downloader: DownloaderCli,
        *,
        update_mode: UpdateMode = UpdateMode.AUTO,
    ) -> None:
        self._paths = paths
        self._downloader = downloader
        self._mode = update_mode

    @property
    def files_dir(self) -> Path:
        return self._paths.server_files_dir

    @property
    def jar_path(self) -> Path:
        return self.files_dir / SERVER_JAR

    def recorded_version(self) -> Optional[str]:
        try:
            value = self._paths.current_version_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return value or None

    def record_version(self, version: Optional[str]) -> None:
        if version:
            self._paths.current_version_file.write_text(f"{version}\n", encoding="utf-8")

    def local_version_fallback(self) -> str:
        """Jar modification time, or now, for installs with no recorded version."""
        try:
            return str(int(self.jar_path.stat().st_mtime))
        except OSError:
            return str(int(time.time()))

    def ensure_recorded_version(self) -> None:
        if not self._paths.current_version_file.exists():
            self.record_version(self.local_version_fallback())

    def invalidate_aot_cache(self) -> None:
        self._paths.aot_cache_file.unlink(missing_ok=True)
        self._paths.aot_version_file.unlink(missing_ok=True)

    def handle_updates(self) -> None:
        self.files_dir.mkdir(parents=True, exist_ok=True)

        if self._mode == UpdateMode.ALWAYS:
            self.download(self._downloader.print_version())
            return

        if self._mode == UpdateMode.NEVER:
            if not self.jar_path.is_file():
                raise ConfigError(
                    f"UPDATE_MODE=never but {SERVER_JAR} is missing from {self.files_dir}"
                )
            self.ensure_recorded_version()
            return

        if not self.jar_path.is_file():
            self.download(self._downloader.print_version())
            return

        recorded = self.recorded_version()
        remote = self._downloader.print_version()
        if not remote:
            logger.warning("Unable to determine latest server version, skipping update check")
            self.ensure_recorded_version()
            return
        if recorded is None or remote != recorded:
            logger.info("New server version detected: %s", remote)
            self.download(remote)
        else:
            logger.info("Server files already up to date (%s)", recorded)

    def download(self, remote_version: Optional[str]) -> None:
        self.files_dir.mkdir(parents=True, exist_ok=True)
        archive = self.files_dir / ARCHIVE_NAME

        logger.info("Downloading server files...")
        self._downloader.download(Path(ARCHIVE_NAME), cwd=self.files_dir)
        if not archive.is_file():
            raise UpdateError("Failed to download server files")

        logger.info("Unzipping server files...")
        try:
            with zipfile.ZipFile(archive) as bundle:
                bundle.extractall(self.files_dir)
        except zipfile.BadZipFile as exc:
            raise UpdateError(f"Downloaded archive is corrupt: {exc}") from exc
        finally:
            archive.unlink(missing_ok=True)

        nested = self.files_dir / NESTED_DIR
        if (nested / SERVER_JAR).is_file():
            logger.info("Detected '%s' subdirectory, moving files to root...", NESTED_DIR)
            shutil.copytree(nested, self.files_dir, dirs_exist_ok=True, symlinks=True)
            shutil.rmtree(nested)

        self.record_version(remote_version or self.local_version_fallback())
        self.invalidate_aot_cache()
        logger.info("Server files downloaded and extracted successfully")

    def validate(self) -> Optional[Path]:
        """Check the install and return the assets path the server should use."""
        if not self.jar_path.is_file():
            raise UpdateError(f"{SERVER_JAR} not found after download")
        for candidate in (self.files_dir / "Assets.zip", self.files_dir / "Assets"):
            if candidate.exists():
                return candidate
        logger.warning("Assets not found - server may not start correctly")
        return None


__all__ = ["SERVER_JAR", "ServerFilesManager"]
