"""Resolve which storage backend the site talks to.

Resolution happens once at startup.  A missing credential is a normal
state, represented by a binding without a backend, never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from filmfolio.config import FilmfolioConfig
from filmfolio.storage import create_backend
from filmfolio.storage.base import BackendKind, DocumentBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendBinding:
    """The resolved backend, or the reason there is none."""

    kind: BackendKind | None
    backend: DocumentBackend | None
    reason: str = ""

    @property
    def is_configured(self) -> bool:
        return self.backend is not None

    @classmethod
    def not_configured(cls, reason: str, kind: BackendKind | None = None) -> BackendBinding:
        return cls(kind=kind, backend=None, reason=reason)

    def describe(self) -> str:
        if self.backend is None:
            return f"not configured ({self.reason})"
        return self.backend.describe()


def resolve_binding(config: FilmfolioConfig) -> BackendBinding:
    """Pick and build the backend named by ``config.storage.backend``.

    ``auto`` prefers Supabase, then JSONbin, based on which has
    credentials.  A forced remote kind without credentials resolves to
    not configured.
    """
    choice = config.storage.backend

    if choice == "auto":
        if config.supabase.is_configured:
            kind = BackendKind.SUPABASE
        elif config.jsonbin.is_configured:
            kind = BackendKind.JSONBIN
        else:
            logger.info("No backend credentials found, running without persistence")
            return BackendBinding.not_configured(
                "set SUPABASE_URL/SUPABASE_ANON_KEY or connect a JSONbin bin"
            )
    else:
        kind = BackendKind(choice)

    if kind is BackendKind.SUPABASE and not config.supabase.is_configured:
        return BackendBinding.not_configured("SUPABASE_URL and SUPABASE_ANON_KEY are not set", kind)
    if kind is BackendKind.JSONBIN and not config.jsonbin.is_configured:
        return BackendBinding.not_configured("JSONbin bin id and access key are not set", kind)

    backend = create_backend(kind, config)
    logger.info("Using %s", backend.describe())
    return BackendBinding(kind=kind, backend=backend)
