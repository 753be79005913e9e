"""Client-local backend credentials.

Operators can connect the site to a JSONbin bin without editing the
deployment config: the bin id and access key are kept in a small JSON file
and picked up the next time configuration is loaded.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

CREDENTIALS_PATH = Path.home() / ".config" / "filmfolio" / "credentials.json"


class StoredCredentials(BaseModel):
    bin_id: str = ""
    api_key: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.bin_id or self.api_key)


class CredentialStore:
    """Reads and writes :class:`StoredCredentials` at a fixed path."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or CREDENTIALS_PATH

    def load(self) -> StoredCredentials:
        """Return stored credentials, or empty ones if the file is missing or bad."""
        if not self.path.exists():
            return StoredCredentials()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return StoredCredentials.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError):
            logger.warning("Ignoring unreadable credentials file %s", self.path)
            return StoredCredentials()

    def save(self, credentials: StoredCredentials) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(credentials.model_dump_json(indent=2), encoding="utf-8")
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.path)

    def clear(self) -> bool:
        """Delete the credentials file. Returns True if one existed."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
