"""
Game server process launch.

The entrypoint stays in the foreground as the container's init-facing
process: termination signals it receives are forwarded to the JVM and the
JVM's exit status becomes the container's exit status.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from hytale_entrypoint.core.config import ServerSettings
from hytale_entrypoint.services.server_files import SERVER_JAR

logger = logging.getLogger(__name__)

FORWARDED_SIGNALS = (signal.SIGTERM, signal.SIGINT)

JVM_TUNING_FLAGS = (
    "-XX:+UseG1GC",
    "-XX:MaxGCPauseMillis=50",
    "-XX:+UseStringDeduplication",
    "-XX:+UseContainerSupport",
)


def build_command(
    server: ServerSettings,
    *,
    java: str = "java",
    aot_args: Sequence[str] = (),
    assets_path: Optional[str] = None,
    extra_args: Sequence[str] = (),
) -> List[str]:
    """Assemble the full ``java`` command line for the server jar."""
    command = [java, f"-Xms{server.memory_mb}M", f"-Xmx{server.memory_mb}M"]
    command.extend(JVM_TUNING_FLAGS)
    command.extend(aot_args)
    command.extend(["-jar", SERVER_JAR])
    command.extend(["--bind", server.bind])
    command.extend(["--auth-mode", server.auth_mode.value])
    command.append("--disable-sentry")
    if assets_path:
        command.extend(["--assets", assets_path])
    command.extend(extra_args)
    return command


class ServerLauncher:
    """Start the server in the foreground and relay shutdown signals to it."""

    def __init__(self, server: ServerSettings, *, working_dir: Path) -> None:
        self._server = server
        self._working_dir = Path(working_dir)
        self._process: Optional[subprocess.Popen] = None

    def log_summary(self) -> None:
        server = self._server
        logger.info("Starting Hytale Server...")
        logger.info("Server Name: %s", server.server_name)
        logger.info("Max Players: %s", server.max_players)
        logger.info("View Distance: %s", server.view_distance)
        logger.info("Memory: %sMB", server.memory_mb)
        logger.info("Auth Mode: %s", server.auth_mode.value)
        logger.info("Bind: %s", server.bind)
        logger.info("Working Directory: %s", self._working_dir)

    def _forward(self, signum: int, _frame) -> None:
        process = self._process
        if process is not None and process.poll() is None:
            logger.info("Stopping Hytale server...")
            process.send_signal(signal.SIGTERM)

    def run(
        self, command: Sequence[str], *, extra_env: Optional[Mapping[str, str]] = None
    ) -> int:
        env: Dict[str, str] = dict(os.environ)
        env.update(extra_env or {})

        logger.info("Executing: %s", " ".join(command))
        self._process = subprocess.Popen(list(command), cwd=self._working_dir, env=env)

        previous = {sig: signal.signal(sig, self._forward) for sig in FORWARDED_SIGNALS}
        try:
            return self._process.wait()
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)


__all__ = ["FORWARDED_SIGNALS", "ServerLauncher", "build_command"]
