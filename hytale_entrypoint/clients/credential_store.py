"""JSON-file persistence for credential documents."""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from hytale_entrypoint.core.errors import CredentialPersistenceError

logger = logging.getLogger(__name__)

CredentialT = TypeVar("CredentialT", bound=BaseModel)

OWNER_READ_WRITE = stat.S_IRUSR | stat.S_IWUSR


def restrict_permissions(path: Path) -> bool:
    """Apply owner-only permissions, tolerating bind mounts we do not own."""
    try:
        os.chmod(path, OWNER_READ_WRITE)
    except OSError as exc:
        logger.warning("Could not restrict permissions on %s: %s", path, exc)
        return False
    return True


class CredentialStore:
    """Load and atomically replace flat JSON credential documents."""

    def load(self, path: Path, model: Type[CredentialT]) -> Optional[CredentialT]:
        """Return the parsed document, or ``None`` when it is missing or unusable."""
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read credential file %s: %s", path, exc)
            return None

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Credential file %s is not valid JSON", path)
            return None
        if not isinstance(data, dict):
            logger.warning("Credential file %s does not contain a JSON object", path)
            return None

        try:
            return model.model_validate(data)
        except ValidationError:
            logger.warning("Credential file %s has unexpected field types", path)
            return None

    def save(self, path: Path, credential: BaseModel) -> None:
        """Replace ``path`` with the full document, never leaving a partial file."""
        target = Path(path)
        payload = json.dumps(credential.model_dump(mode="json"), indent=2)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
        except OSError as exc:
            raise CredentialPersistenceError(
                f"Could not write credential file {target}: {exc}"
            ) from exc

        tmp_path = Path(tmp_name)
        replaced = False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            restrict_permissions(tmp_path)
            os.replace(tmp_path, target)
            replaced = True
        except OSError as exc:
            raise CredentialPersistenceError(
                f"Could not write credential file {target}: {exc}"
            ) from exc
        finally:
            if not replaced:
                tmp_path.unlink(missing_ok=True)


__all__ = ["CredentialStore", "restrict_permissions"]
