"""JSONbin.io integration — config and API client.

A bin holds one JSON record.  Reads go to ``/b/{id}/latest`` and return the
record wrapped in ``{"record": ..., "metadata": ...}``; writes ``PUT`` the
whole record back.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from filmfolio.integrations.http import NotFound, send
from filmfolio.shared.errors import BackendServerError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.jsonbin.io/v3"
# Free-plan bins top out around 100 KB per record.
DEFAULT_MAX_BYTES = 100_000


class JsonBinConfig(BaseModel):
    """Configuration for the JSONbin document store."""

    bin_id: str = ""
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    max_document_bytes: int = DEFAULT_MAX_BYTES

    @property
    def is_configured(self) -> bool:
        return bool(self.bin_id and self.api_key)


class JsonBinClient:
    """Client for the JSONbin v3 REST API."""

    def __init__(self, config: JsonBinConfig) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")

    def _headers(self, *, json_body: bool = False) -> dict[str, str]:
        headers = {"X-Master-Key": self.config.api_key}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def read_record(self) -> Any | None:
        """Return the latest record, or None when the bin does not exist."""
        url = f"{self.base_url}/b/{self.config.bin_id}/latest"
        try:
            result = send("GET", url, headers=self._headers())
        except NotFound:
            logger.info("JSONbin %s not found", self.config.bin_id)
            return None
        if not isinstance(result, dict):
            return None
        return result.get("record")

    def replace_record(self, payload: bytes) -> None:
        """Overwrite the bin with ``payload`` (serialized JSON)."""
        url = f"{self.base_url}/b/{self.config.bin_id}"
        try:
            send("PUT", url, headers=self._headers(json_body=True), body=payload)
        except NotFound as exc:
            raise BackendServerError(
                f"JSONbin bin '{self.config.bin_id}' does not exist", status=404
            ) from exc

