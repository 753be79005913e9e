"""Editing session over the persistence adapter.

Edits are applied to the in-memory document first and saved afterwards.
A failed save leaves the edit in place and records a notice for the
operator; nothing is reverted behind their back.  Background saves run on a
single worker thread, so they reach the backend in the order they were
issued.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field

from filmfolio.content.defaults import default_document
from filmfolio.content.models import ContentDocument
from filmfolio.shared.errors import BackendError, BackendUnreachableError, ImageUploadError
from filmfolio.storage.store import PortfolioStore, SaveResult

logger = logging.getLogger(__name__)

Edit = Callable[[ContentDocument], ContentDocument]


class ConnectionState(StrEnum):
    NOT_CONFIGURED = "not_configured"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class SaveStatus(StrEnum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    FAILED = "failed"


class NoticeLevel(StrEnum):
    INFO = "info"
    ERROR = "error"


class Notice(BaseModel):
    """A message for the operator (banner, alert or inline text)."""

    level: NoticeLevel
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class EditSession:
    """Holds the working document and pushes it through a PortfolioStore."""

    def __init__(self, store: PortfolioStore, document: ContentDocument, connection: ConnectionState) -> None:
        self._store = store
        self._document = document
        self._connection = connection
        self._status = SaveStatus.IDLE
        self._last_result: SaveResult | None = None
        self._notices: list[Notice] = []
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._latest_issued = 0
        self._executor: ThreadPoolExecutor | None = None

    @classmethod
    def open(cls, store: PortfolioStore) -> EditSession:
        """Load the document the way the site does on boot."""
        session = cls(store, default_document(), ConnectionState.NOT_CONFIGURED)
        session._boot()
        return session

    def _boot(self) -> None:
        try:
            loaded = self._store.load_document()
        except BackendUnreachableError as exc:
            self._connection = ConnectionState.DISCONNECTED
            self._document = default_document()
            self.notify(NoticeLevel.ERROR, f"Backend unreachable, showing default content: {exc}")
            return
        except BackendError as exc:
            self._connection = ConnectionState.DISCONNECTED
            self._document = default_document()
            self.notify(NoticeLevel.ERROR, f"Could not load content: {exc}")
            return

        if loaded is None:
            self._connection = ConnectionState.NOT_CONFIGURED
            self._document = default_document()
            self.notify(
                NoticeLevel.INFO,
                f"No backend configured, changes will not be saved ({self._store.binding.reason})",
            )
        else:
            self._connection = ConnectionState.CONNECTED
            self._document = loaded

    # ── State ────────────────────────────────────────────────────

    @property
    def document(self) -> ContentDocument:
        return self._document

    @property
    def store(self) -> PortfolioStore:
        return self._store

    @property
    def connection(self) -> ConnectionState:
        return self._connection

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def last_result(self) -> SaveResult | None:
        return self._last_result

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    def notify(self, level: NoticeLevel, message: str) -> None:
        if level is NoticeLevel.ERROR:
            logger.warning(message)
        else:
            logger.info(message)
        self._notices.append(Notice(level=level, message=message))

    def dismiss_notices(self) -> None:
        self._notices.clear()

    # ── Editing ──────────────────────────────────────────────────

    def apply(self, edit: Edit) -> ContentDocument:
        """Apply ``edit`` to the working document immediately."""
        with self._lock:
            self._document = edit(self._document)
            return self._document

    def replace(self, document: ContentDocument) -> ContentDocument:
        return self.apply(lambda _current: document)

    def save(self) -> SaveResult:
        """Push the working document and wait for the outcome.

        Runs on the save worker, after any background saves already queued.
        """
        return self.save_in_background().result()

    def commit(self, edit: Edit) -> SaveResult:
        """Apply ``edit``, then save the resulting document."""
        self.apply(edit)
        return self.save()

    def save_in_background(self) -> Future[SaveResult]:
        """Queue a save of the current document and return its future."""

        def _run(seq: int, snapshot: ContentDocument) -> SaveResult:
            result = self._store.save_document(snapshot)
            self._finish_save(seq, result)
            return result

        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="filmfolio-save")
            seq = next(self._sequence)
            self._latest_issued = seq
            self._status = SaveStatus.SAVING
            return self._executor.submit(_run, seq, self._document)

    def _finish_save(self, seq: int, result: SaveResult) -> None:
        with self._lock:
            superseded = seq != self._latest_issued
            if not superseded:
                self._status = SaveStatus.SAVED if result.ok else SaveStatus.FAILED
                self._last_result = result
        if not result.ok:
            self.notify(NoticeLevel.ERROR, f"Save failed ({result.reason}): {result.message}")

    # ── Images ───────────────────────────────────────────────────

    def upload_image(self, source: Path | bytes, filename: str | None = None) -> str:
        """Upload through the store, recording a notice if it fails."""
        try:
            return self._store.upload_image(source, filename)
        except (ImageUploadError, BackendError) as exc:
            self.notify(NoticeLevel.ERROR, f"Image upload failed: {exc}")
            raise

    # ── Lifecycle ────────────────────────────────────────────────

    def reconfigure(self, store: PortfolioStore) -> None:
        """Swap in a store built from new settings and reload from it."""
        self.close()
        self._store = store
        self._status = SaveStatus.IDLE
        self._last_result = None
        self._notices.clear()
        self._boot()

    def close(self) -> None:
        """Wait for queued saves and stop the worker thread."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
