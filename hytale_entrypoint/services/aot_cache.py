"""JVM ahead-of-time cache selection."""

from __future__ import annotations

import logging
from typing import List

from hytale_entrypoint.core.config import PathSettings

logger = logging.getLogger(__name__)


class AotCachePlanner:
    """Decide whether this run reuses the AOT cache or trains a new one."""

    def __init__(self, paths: PathSettings, *, enabled: bool = True) -> None:
        self._paths = paths
        self._enabled = enabled

    def prepare(self, current_version: str) -> List[str]:
        if not self._enabled:
            logger.info("AOT caching disabled")
            return []

        self._paths.aot_cache_dir.mkdir(parents=True, exist_ok=True)
        cache_file = self._paths.aot_cache_file
        version_file = self._paths.aot_version_file

        try:
            cached_version = version_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            cached_version = ""

        if cache_file.is_file() and cached_version == current_version:
            logger.info("Using existing AOT cache")
            return [f"-XX:AOTCache={cache_file}"]

        cache_file.unlink(missing_ok=True)
        version_file.write_text(f"{current_version}\n", encoding="utf-8")
        logger.info("AOT cache will be generated on this run (training mode)")
        return [f"-XX:AOTCacheOutput={cache_file}"]


__all__ = ["AotCachePlanner"]
