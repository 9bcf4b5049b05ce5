"""
Maintain the server's ``config.json`` from environment settings.

Server builds have shipped the same settings under PascalCase, snake_case
and camelCase keys. Each logical field lists its known spellings; the first
one present in the existing document is updated in place, otherwise the
canonical (first) spelling is written.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

from hytale_entrypoint.core.config import PathSettings, ServerSettings
from hytale_entrypoint.core.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigField:
    """A logical setting and the key spellings it may appear under."""

    attribute: str
    candidates: Tuple[str, ...]

    @property
    def canonical(self) -> str:
        return self.candidates[0]

    def resolve(self, document: Dict[str, Any]) -> str:
        for key in self.candidates:
            if key in document:
                return key
        return self.canonical


CONFIG_FIELDS: Sequence[ConfigField] = (
    ConfigField("server_name", ("ServerName", "server_name", "serverName")),
    ConfigField("server_password", ("Password", "password")),
    ConfigField("max_players", ("MaxPlayers", "max_players", "maxPlayers")),
    ConfigField("view_distance", ("ViewDistance", "view_distance", "viewDistance")),
)


def apply_settings(document: Dict[str, Any], server: ServerSettings) -> Dict[str, Any]:
    """Return a copy of ``document`` with every managed field set from ``server``."""
    updated = dict(document)
    resolved = {field: field.resolve(document) for field in CONFIG_FIELDS}
    for field, key in resolved.items():
        updated[key] = getattr(server, field.attribute)
    return updated


class ServerConfigWriter:
    """Create or update ``config.json`` and link it where the server reads it."""

    def __init__(self, paths: PathSettings, server: ServerSettings) -> None:
        self._paths = paths
        self._server = server

    def write(self) -> Path:
        config_file = self._paths.config_file
        config_file.parent.mkdir(parents=True, exist_ok=True)

        if config_file.exists():
            try:
                existing = json.loads(config_file.read_text(encoding="utf-8"))
            except ValueError as exc:
                raise ConfigError(
                    f"{config_file} is not valid JSON; fix or remove it: {exc}"
                ) from exc
            if not isinstance(existing, dict):
                raise ConfigError(f"{config_file} must contain a JSON object")
            self._atomic_write(config_file, apply_settings(existing, self._server))
            logger.info("Updated config.json")
        else:
            self._atomic_write(config_file, apply_settings({}, self._server))
            logger.info("Generated config.json")

        self._link(config_file)
        return config_file

    def _link(self, config_file: Path) -> None:
        link = self._paths.server_config_link
        if link.is_symlink() and Path(os.readlink(link)) == config_file:
            return
        link.parent.mkdir(parents=True, exist_ok=True)
        if link.is_symlink() or link.exists():
            link.unlink()
        link.symlink_to(config_file)

    @staticmethod
    def _atomic_write(path: Path, document: Dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
                handle.write("\n")
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = ["CONFIG_FIELDS", "ConfigField", "ServerConfigWriter", "apply_settings"]
