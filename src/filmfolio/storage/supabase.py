"""Supabase backend — document row in PostgREST, images in Storage."""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any

from filmfolio.integrations.http import NotFound
from filmfolio.integrations.supabase import SupabaseClient, SupabaseConfig
from filmfolio.shared.errors import (
    AuthorizationError,
    BackendServerError,
    CapacityError,
    ImageRejectedError,
    RateLimitedError,
)
from filmfolio.storage.base import BackendKind, DocumentBackend

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class SupabaseBackend(DocumentBackend):
    kind = BackendKind.SUPABASE
    has_object_store = True

    def __init__(self, config: SupabaseConfig, client: SupabaseClient | None = None) -> None:
        self.config = config
        self.client = client or SupabaseClient(config)
        self.max_document_bytes = config.max_document_bytes

    def read(self) -> Any | None:
        try:
            return self.client.fetch_document()
        except NotFound as exc:
            raise BackendServerError(
                f"Supabase table '{self.config.table}' does not exist", status=404
            ) from exc

    def write(self, payload: bytes) -> None:
        try:
            self.client.upsert_document(payload)
        except NotFound as exc:
            raise BackendServerError(
                f"Supabase table '{self.config.table}' does not exist", status=404
            ) from exc

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        safe_name = _UNSAFE_CHARS.sub("_", filename).strip("_") or "image"
        path = f"uploads/{uuid.uuid4().hex}_{safe_name}"
        try:
            url = self.client.upload_object(path, data, content_type)
        except NotFound as exc:
            raise ImageRejectedError(
                f"Storage bucket '{self.config.bucket}' does not exist"
            ) from exc
        except AuthorizationError as exc:
            raise ImageRejectedError(
                f"Not allowed to upload to bucket '{self.config.bucket}', check its policies"
            ) from exc
        except CapacityError as exc:
            raise ImageRejectedError(
                f"Image of {len(data):,} bytes exceeds the storage upload limit"
            ) from exc
        except (RateLimitedError, BackendServerError) as exc:
            raise ImageRejectedError(f"Image upload was refused: {exc}") from exc
        logger.info("Uploaded %s (%d bytes) to %s", filename, len(data), url)
        return url

    def describe(self) -> str:
        return f"Supabase {self.config.url} ({self.config.table}/{self.config.document_id})"
