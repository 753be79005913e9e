"""Base class for document storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Any


class BackendKind(StrEnum):
    """Which storage service holds the document."""

    LOCAL = "local"
    JSONBIN = "jsonbin"
    SUPABASE = "supabase"


class DocumentBackend(ABC):
    """A store holding one JSON document under a fixed key.

    Backends speak raw JSON: validation and fallback to the default
    document are handled by ``PortfolioStore``.
    """

    kind: BackendKind
    #: Largest serialized document the backend accepts, None for no limit.
    max_document_bytes: int | None = None
    #: Whether a default document may be written back after a bad read.
    supports_write_back: bool = True
    #: Whether :meth:`upload` stores bytes and returns a URL.
    has_object_store: bool = False

    @abstractmethod
    def read(self) -> Any | None:
        """Return the stored JSON value, or None when nothing is stored."""

    @abstractmethod
    def write(self, payload: bytes) -> None:
        """Replace the stored document with ``payload`` (serialized JSON)."""

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        """Store image bytes and return a fetchable URL."""
        raise NotImplementedError(f"{self.kind} backend has no object store")

    def describe(self) -> str:
        """Short human-readable location, for status output."""
        return str(self.kind)
