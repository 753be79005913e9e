"""Persistence adapter between the site and its storage backend.

``PortfolioStore`` is the only thing the CLI, the web API and the edit
session talk to.  It loads the whole document on boot, replaces it
wholesale on save, and turns image files into references the document can
hold.  Which backend sits underneath is decided by the binding it is
given.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from filmfolio.config import ImageSettings
from filmfolio.content.defaults import default_document
from filmfolio.content.models import ContentDocument
from filmfolio.shared.errors import (
    BackendError,
    CapacityError,
    ImageDecodeError,
    ImageRejectedError,
    SaveFailure,
)
from filmfolio.shared.images import compress_to_data_uri, guess_content_type, read_image_source
from filmfolio.storage.binding import BackendBinding

logger = logging.getLogger(__name__)


class SaveResult(BaseModel):
    """Outcome of :meth:`PortfolioStore.save_document`."""

    ok: bool
    reason: SaveFailure | None = None
    message: str = ""
    size: int = 0
    limit: int | None = None

    @classmethod
    def success(cls, size: int) -> SaveResult:
        return cls(ok=True, size=size)

    @classmethod
    def failed(
        cls,
        reason: SaveFailure,
        message: str,
        *,
        size: int = 0,
        limit: int | None = None,
    ) -> SaveResult:
        return cls(ok=False, reason=reason, message=message, size=size, limit=limit)


def is_document_shaped(raw: Any) -> bool:
    """Minimal structural check: a projects list and a site-profile mapping."""
    if not isinstance(raw, dict):
        return False
    site = raw.get("content", raw.get("site"))
    return isinstance(raw.get("projects"), list) and isinstance(site, dict)


def parse_document(raw: Any) -> ContentDocument | None:
    """Validate a stored JSON value, returning None if it is not a document."""
    if not is_document_shaped(raw):
        return None
    try:
        return ContentDocument.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Stored document failed validation: %s", exc.error_count())
        return None


class PortfolioStore:
    """Load, save and image upload against whichever backend is bound."""

    def __init__(
        self,
        binding: BackendBinding,
        *,
        images: ImageSettings | None = None,
        default_factory: Callable[[], ContentDocument] = default_document,
    ) -> None:
        self._binding = binding
        self._images = images or ImageSettings()
        self._default_factory = default_factory

    @property
    def binding(self) -> BackendBinding:
        return self._binding

    @property
    def is_configured(self) -> bool:
        return self._binding.is_configured

    # ── Document ─────────────────────────────────────────────────

    def load_document(self) -> ContentDocument | None:
        """Fetch the current document.

        Returns:
            The stored document; the default document if the stored one is
            missing or malformed (written back when the backend allows);
            or None when no backend is configured.

        Raises:
            BackendUnreachableError: If the backend cannot be contacted.
            BackendError: For rejected credentials or server errors.
        """
        backend = self._binding.backend
        if backend is None:
            logger.info("Backend not configured, skipping load")
            return None

        raw = backend.read()
        document = parse_document(raw)
        if document is not None:
            return document

        if raw is None:
            logger.warning("No document stored in %s, using the default", backend.describe())
        else:
            logger.warning("Malformed document in %s, using the default", backend.describe())
        fallback = self._default_factory()
        if backend.supports_write_back:
            result = self.save_document(fallback)
            if not result.ok:
                logger.warning("Could not write the default document back: %s", result.message)
        return fallback

    def save_document(self, doc: ContentDocument) -> SaveResult:
        """Replace the stored document with ``doc``, whole.

        The size ceiling is checked before anything is sent. ``doc`` is
        never modified.
        """
        backend = self._binding.backend
        if backend is None:
            return SaveResult.failed(
                SaveFailure.NOT_CONFIGURED,
                f"No backend configured: {self._binding.reason}",
            )

        payload = doc.to_json_bytes()
        size = len(payload)
        limit = backend.max_document_bytes
        if limit is not None and size > limit:
            exc = CapacityError(size, limit)
            logger.warning("Refusing to save: %s", exc)
            return SaveResult.failed(exc.reason, str(exc), size=size, limit=limit)

        try:
            backend.write(payload)
        except BackendError as exc:
            logger.warning("Save to %s failed: %s", backend.describe(), exc)
            return SaveResult.failed(exc.reason, str(exc), size=size, limit=limit)

        logger.info("Saved %d bytes to %s", size, backend.describe())
        return SaveResult.success(size)

    # ── Images ───────────────────────────────────────────────────

    def upload_image(self, source: Path | bytes, filename: str | None = None) -> str:
        """Turn an image into a reference usable in any image field.

        Returns either a public URL (remote object store) or a
        ``data:image/jpeg`` URI (re-encoded locally).

        Raises:
            ImageReadError: The source could not be read.
            ImageDecodeError: The source is not a decodable image.
            ImageRejectedError: The object store refused the upload.
        """
        data = read_image_source(source)
        if filename is None:
            filename = "image" if isinstance(source, (bytes, bytearray)) else Path(source).name

        if self._use_object_store():
            content_type = guess_content_type(filename, data)
            if not content_type.startswith("image/"):
                raise ImageDecodeError(f"'{filename}' does not look like an image")
            return self._binding.backend.upload(data, filename, content_type)  # type: ignore[union-attr]

        return compress_to_data_uri(
            data,
            max_dimension=self._images.max_dimension,
            quality=self._images.quality,
        )

    def _use_object_store(self) -> bool:
        backend = self._binding.backend
        has_store = backend is not None and backend.has_object_store
        if self._images.mode == "remote":
            if not has_store:
                raise ImageRejectedError(
                    "Remote image uploads need a backend with an object store (Supabase)"
                )
            return True
        if self._images.mode == "auto":
            return has_store
        return False
