"""Error taxonomy for document persistence and image handling.

Every backend failure is raised as a subclass of :class:`BackendError`
carrying the :class:`SaveFailure` reason that ``PortfolioStore.save_document``
reports back to callers.  Image failures form a separate branch so the
admin surfaces can show a specific message instead of a generic one.
"""

from __future__ import annotations

from enum import StrEnum


class SaveFailure(StrEnum):
    """Why a document save did not reach the backend."""

    NOT_CONFIGURED = "not_configured"
    UNAUTHORIZED = "unauthorized"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    RATE_LIMITED = "rate_limited"
    UNREACHABLE = "unreachable"
    SERVER_ERROR = "server_error"


class FilmfolioError(Exception):
    """Base error for filmfolio."""


class BackendError(FilmfolioError):
    """A storage backend refused or failed an operation."""

    reason: SaveFailure = SaveFailure.SERVER_ERROR


class AuthorizationError(BackendError):
    """The backend rejected the configured credentials."""

    reason = SaveFailure.UNAUTHORIZED


class CapacityError(BackendError):
    """The serialized document exceeds the backend's size ceiling."""

    reason = SaveFailure.PAYLOAD_TOO_LARGE

    def __init__(self, size: int, limit: int | None = None) -> None:
        self.size = size
        self.limit = limit
        if limit is None:
            message = f"Document of {size:,} bytes was rejected as too large"
        else:
            message = f"Document is {size:,} bytes, backend limit is {limit:,} bytes"
        super().__init__(message)


class RateLimitedError(BackendError):
    """The backend asked us to slow down."""

    reason = SaveFailure.RATE_LIMITED


class BackendUnreachableError(BackendError):
    """The backend is configured but could not be contacted."""

    reason = SaveFailure.UNREACHABLE


class BackendServerError(BackendError):
    """The backend answered with an unexpected error status."""

    reason = SaveFailure.SERVER_ERROR

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class ImageUploadError(FilmfolioError):
    """Base error for image uploads."""


class ImageReadError(ImageUploadError):
    """The image file could not be read."""


class ImageDecodeError(ImageUploadError):
    """The file is not an image Pillow can decode."""


class ImageRejectedError(ImageUploadError):
    """The remote object store refused the upload."""
