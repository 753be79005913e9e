"""Storage backend factory and registry."""

from __future__ import annotations

from pathlib import Path

from filmfolio.config import FilmfolioConfig
from filmfolio.storage.base import BackendKind, DocumentBackend


def create_backend(kind: BackendKind | str, config: FilmfolioConfig) -> DocumentBackend:
    """Create a backend of the given kind from configuration.

    Credentials are not checked here; :func:`resolve_binding` decides
    whether a backend should be created at all.

    Raises:
        ValueError: If the kind is unknown.
    """
    if isinstance(kind, str):
        kind = BackendKind(kind)

    from filmfolio.storage.jsonbin import JsonBinBackend
    from filmfolio.storage.local import LocalFileBackend
    from filmfolio.storage.supabase import SupabaseBackend

    if kind is BackendKind.LOCAL:
        return LocalFileBackend(
            Path(config.local.data_dir),
            max_document_bytes=config.local.max_document_bytes,
        )
    if kind is BackendKind.JSONBIN:
        return JsonBinBackend(config.jsonbin)
    if kind is BackendKind.SUPABASE:
        return SupabaseBackend(config.supabase)

    raise ValueError(f"Unknown backend: {kind!r}")


__all__ = ["BackendKind", "DocumentBackend", "create_backend"]
