"""Supabase integration — config and REST client.

The document lives in one row of a PostgREST table (``id`` text primary
key, ``data`` jsonb).  Images go to a Storage bucket that must be public
so the returned URLs can be embedded in the document.
"""

from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any

from pydantic import BaseModel

from filmfolio.integrations.http import send

logger = logging.getLogger(__name__)


class SupabaseConfig(BaseModel):
    """Configuration for the Supabase table + storage pair."""

    url: str = ""
    anon_key: str = ""
    table: str = "portfolio"
    document_id: str = "main"
    bucket: str = "portfolio-images"
    max_document_bytes: int | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


class SupabaseClient:
    """Client for the PostgREST and Storage endpoints of a Supabase project."""

    def __init__(self, config: SupabaseConfig) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {self.config.anon_key}",
        }
        headers.update(extra)
        return headers

    def _row_url(self) -> str:
        return f"{self.base_url}/rest/v1/{urllib.parse.quote(self.config.table)}"

    def fetch_document(self) -> Any | None:
        """Return the ``data`` column of the document row, or None if absent."""
        query = urllib.parse.urlencode(
            {"id": f"eq.{self.config.document_id}", "select": "data"}
        )
        rows = send("GET", f"{self._row_url()}?{query}", headers=self._headers(Accept="application/json"))
        if not rows:
            return None
        if not isinstance(rows, list) or not isinstance(rows[0], dict):
            logger.warning("Unexpected row shape from Supabase table %s", self.config.table)
            return None
        return rows[0].get("data")

    def upsert_document(self, payload: bytes) -> None:
        """Insert or replace the document row with ``payload`` (serialized JSON)."""
        body = b"".join(
            [
                b'{"id":',
                json.dumps(self.config.document_id).encode("utf-8"),
                b',"data":',
                payload,
                b"}",
            ]
        )
        headers = self._headers(
            **{
                "Content-Type": "application/json",
                "Prefer": "resolution=merge-duplicates,return=minimal",
            }
        )
        send("POST", self._row_url(), headers=headers, body=body)

    def upload_object(self, path: str, data: bytes, content_type: str) -> str:
        """Upload bytes to the configured bucket and return the public URL."""
        bucket = urllib.parse.quote(self.config.bucket)
        object_path = urllib.parse.quote(path)
        url = f"{self.base_url}/storage/v1/object/{bucket}/{object_path}"
        headers = self._headers(**{"Content-Type": content_type, "x-upsert": "true"})
        send("POST", url, headers=headers, body=data, timeout=60.0)
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        bucket = urllib.parse.quote(self.config.bucket)
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{urllib.parse.quote(path)}"
