"""Utility for inspecting entrypoint configuration and stored credentials.

The tool performs two checks:

1. ``check`` instantiates ``AppSettings`` from the environment (and an
   optional ``.env`` file), surfacing missing or malformed values before the
   container is restarted with them.
2. ``status`` reports whether the downloader and server credential documents
   exist, parse, and when they expire. Token values are never printed.

Example usages::

    python -m scripts.check_credentials check
    docker compose exec hytale python /opt/hytale-entrypoint/scripts/check_credentials.py status
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from hytale_entrypoint.clients.credential_store import CredentialStore
from hytale_entrypoint.core.config import AppSettings, load_settings
from hytale_entrypoint.core.errors import ConfigError
from hytale_entrypoint.models.credentials import DownloaderCredential, ServerCredential
from hytale_entrypoint.utils.timefmt import format_epoch

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CREDENTIALS_MISSING = 3
EXIT_CREDENTIALS_EXPIRED = 4


def _describe_downloader(
    path: Path, store: CredentialStore, now: float, buffer_seconds: int
) -> int:
    credential = store.load(path, DownloaderCredential)
    if credential is None:
        print(f"downloader: missing or unreadable ({path})")
        return EXIT_CREDENTIALS_MISSING
    expiry = format_epoch(credential.expires_at)
    if credential.needs_refresh(now=now, buffer_seconds=buffer_seconds):
        refreshable = "refreshable" if credential.refresh_token else "no refresh token"
        print(f"downloader: access token expired ({expiry}, {refreshable})")
        return EXIT_OK if credential.refresh_token else EXIT_CREDENTIALS_EXPIRED
    print(f"downloader: valid until {expiry} (branch {credential.branch})")
    return EXIT_OK


def _describe_server(
    path: Path, store: CredentialStore, now: float, buffer_seconds: int
) -> int:
    credential = store.load(path, ServerCredential)
    if credential is None:
        print(f"server: no stored session ({path})")
        return EXIT_CREDENTIALS_MISSING
    expiry = format_epoch(credential.session_expires_at)
    profile = credential.profile_username or credential.profile_uuid or "unknown profile"
    if credential.session_valid(now=now, buffer_seconds=buffer_seconds):
        print(f"server: session for {profile} valid until {expiry}")
        return EXIT_OK
    if credential.refresh_token:
        print(f"server: session for {profile} expired ({expiry}); will refresh on start")
        return EXIT_OK
    print(f"server: session for {profile} expired ({expiry}); device login required")
    return EXIT_CREDENTIALS_EXPIRED


def _status(settings: AppSettings, clock: Callable[[], float] = time.time) -> int:
    store = CredentialStore()
    now = clock()
    buffer_seconds = settings.oauth.refresh_buffer_seconds
    results = [
        _describe_downloader(settings.paths.credentials_file, store, now, buffer_seconds),
        _describe_server(
            settings.paths.server_credentials_file, store, now, buffer_seconds
        ),
    ]
    return max(results)


def _check() -> int:
    print("Settings OK.")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate entrypoint settings and report credential status."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("check", help="Validate settings only.")
    subparsers.add_parser(
        "status", help="Validate settings and report stored credential expiry."
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Settings validation failed: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    handlers: dict[str, Callable[[], int]] = {
        "check": _check,
        "status": lambda: _status(settings),
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
