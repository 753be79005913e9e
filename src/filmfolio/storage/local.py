"""JSON file backend — the on-disk stand-in for browser local storage.

Keeps the document in a single JSON file, written atomically on every save.
The size ceiling mirrors the ~5 MB quota browsers give local storage, which
embedded images used to exhaust.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from filmfolio.shared.errors import BackendServerError, BackendUnreachableError
from filmfolio.storage.base import BackendKind, DocumentBackend

logger = logging.getLogger(__name__)

DOCUMENT_FILENAME = "portfolio.json"
DEFAULT_MAX_BYTES = 5_000_000


class LocalFileBackend(DocumentBackend):
    """Stores the document as ``portfolio.json`` inside a data directory."""

    kind = BackendKind.LOCAL

    def __init__(self, data_dir: Path, *, max_document_bytes: int | None = DEFAULT_MAX_BYTES) -> None:
        self._path = Path(data_dir) / DOCUMENT_FILENAME
        self.max_document_bytes = max_document_bytes

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Any | None:
        if not self._path.exists():
            return None
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise BackendUnreachableError(f"Could not read {self._path}: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Corrupt document at %s, starting fresh", self._path)
            return None

    def write(self, payload: bytes) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".portfolio-", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            raise BackendServerError(f"Could not write {self._path}: {exc}") from exc

    def describe(self) -> str:
        return f"local file {self._path}"
