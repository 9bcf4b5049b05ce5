"""Checks for the tools the server needs before anything is downloaded."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Callable, Optional

from hytale_entrypoint.core.errors import ConfigError

logger = logging.getLogger(__name__)

RECOMMENDED_JAVA_MAJOR = "25"


def java_version(java: str) -> Optional[str]:
    """Return the first line of ``java -version`` output."""
    try:
        result = subprocess.run(
            [java, "-version"], capture_output=True, text=True, check=False
        )
    except OSError:
        return None
    output = (result.stderr or result.stdout).splitlines()
    return output[0].strip() if output else None


def check_java(
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
    version_probe: Callable[[str], Optional[str]] = java_version,
) -> str:
    """Fail when Java is missing; warn when it is not the recommended release."""
    java = which("java")
    if java is None:
        raise ConfigError("Java is not installed; use an image that provides a JDK 25")

    detected = version_probe(java) or "unknown"
    if f'"{RECOMMENDED_JAVA_MAJOR}' not in detected:
        logger.warning(
            "Java %s is recommended (detected: %s)", RECOMMENDED_JAVA_MAJOR, detected
        )
    return java


__all__ = ["check_java", "java_version"]
