"""
Container entrypoint: prepare, authenticate and launch the Hytale server.

Steps run strictly in order. Anything that prevents downloading or
configuring the server aborts startup with exit code 1; player
authentication problems only degrade it.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from hytale_entrypoint import dependencies
from hytale_entrypoint.core.config import AppSettings, load_settings
from hytale_entrypoint.core.errors import ConfigError, EntrypointError
from hytale_entrypoint.core.logging import configure_logging
from hytale_entrypoint.models.auth import AuthState
from hytale_entrypoint.services.launcher import build_command
from hytale_entrypoint.services.prerequisites import check_java

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STARTUP_ERROR = 1

BANNER = "\n".join(
    [
        "╔" + "═" * 66 + "╗",
        "║" + "Dealer Node - Hytale Server".center(66) + "║",
        "╚" + "═" * 66 + "╝",
    ]
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hytale-entrypoint",
        description="Prepare, authenticate and launch a Hytale dedicated server.",
    )
    parser.add_argument(
        "server_args",
        nargs=argparse.REMAINDER,
        help="Extra arguments appended to the server command line.",
    )
    return parser


def _describe_os_error(exc: OSError) -> str:
    reason = exc.strerror or str(exc)
    if exc.filename is None:
        return f"Filesystem error: {reason}"
    return (
        f"Filesystem error on {exc.filename}: {reason}; check that the volume "
        "is mounted and writable by the container user"
    )


async def authenticate(settings: AppSettings) -> tuple[AuthState, Optional[int]]:
    """Run the auth orchestrator, stopping early on SIGTERM/SIGINT.

    Returns the auth state and the signal that interrupted it, if any.
    """
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    received: List[int] = []

    def _request_stop(signum: int) -> None:
        received.append(signum)
        stop_event.set()

    installed = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, _request_stop, sig)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            pass

    try:
        orchestrator = dependencies.get_auth_orchestrator(settings, stop_event=stop_event)
        state = await orchestrator.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
    return state, (received[0] if received else None)


async def refresh_downloader_credentials(settings: AppSettings) -> None:
    service = dependencies.get_downloader_credential_service(settings)
    await service.ensure_fresh()


def run(settings: AppSettings, server_args: List[str]) -> int:
    print(BANNER, flush=True)

    # Prerequisites: mounted downloader credential and a JDK.
    dependencies.get_downloader_credential_service(settings).validate()
    java = check_java()

    downloader = dependencies.get_downloader(settings)
    logger.info("Using downloader: %s", downloader.executable)
    asyncio.run(refresh_downloader_credentials(settings))

    files = dependencies.get_server_files_manager(settings, downloader)
    files.handle_updates()
    assets = files.validate()

    dependencies.get_config_writer(settings).write()

    current_version = files.recorded_version() or files.local_version_fallback()
    aot_args = dependencies.get_aot_planner(settings).prepare(current_version)

    auth_state, interrupted_by = asyncio.run(authenticate(settings))
    if interrupted_by is not None:
        logger.info("Shutdown requested before the server started")
        return 128 + interrupted_by

    launcher = dependencies.get_launcher(settings)
    launcher.log_summary()
    command = build_command(
        settings.server,
        java=java,
        aot_args=aot_args,
        assets_path=assets.name if assets is not None else None,
        extra_args=server_args,
    )
    return launcher.run(command, extra_env=auth_state.as_environment())


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        configure_logging()
        logger.error("%s", exc)
        return EXIT_STARTUP_ERROR

    configure_logging(settings.log_level)
    try:
        return run(settings, list(args.server_args))
    except EntrypointError as exc:
        logger.error("%s", exc)
        return EXIT_STARTUP_ERROR
    except OSError as exc:
        logger.error("%s", _describe_os_error(exc))
        return EXIT_STARTUP_ERROR


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
