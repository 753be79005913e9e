"""Tests for EditSession: boot states, optimistic edits and save ordering."""

import json
import threading
from pathlib import Path
from typing import Any

import pytest

from filmfolio.content import default_document
from filmfolio.content.mutations import add_project, new_project, update_project, update_site
from filmfolio.session import ConnectionState, EditSession, NoticeLevel, SaveStatus
from filmfolio.shared.errors import (
    AuthorizationError,
    BackendError,
    BackendUnreachableError,
    ImageDecodeError,
)
from filmfolio.storage.base import BackendKind, DocumentBackend
from filmfolio.storage.binding import BackendBinding
from filmfolio.storage.local import LocalFileBackend
from filmfolio.storage.store import PortfolioStore


class ScriptedBackend(DocumentBackend):
    """Backend whose reads and writes follow a script of results."""

    kind = BackendKind.JSONBIN

    def __init__(self, stored: Any = None, *, read_error: BackendError | None = None) -> None:
        self.stored = stored
        self.read_error = read_error
        self.write_errors: list[BackendError | None] = []
        self.writes: list[dict] = []
        self.gate = threading.Event()
        self.gate.set()

    def read(self) -> Any:
        if self.read_error is not None:
            raise self.read_error
        return self.stored

    def write(self, payload: bytes) -> None:
        self.gate.wait(timeout=5)
        error = self.write_errors.pop(0) if self.write_errors else None
        if error is not None:
            raise error
        self.stored = json.loads(payload)
        self.writes.append(self.stored)


def _make_store(backend: DocumentBackend | None) -> PortfolioStore:
    if backend is None:
        return PortfolioStore(BackendBinding.not_configured("no credentials"))
    return PortfolioStore(BackendBinding(kind=backend.kind, backend=backend))


class TestOpen:
    def test_connected(self):
        doc = update_site(default_document(), name="LEE")
        session = EditSession.open(_make_store(ScriptedBackend(doc.to_wire())))
        assert session.connection is ConnectionState.CONNECTED
        assert session.document == doc
        assert session.notices == []
        assert session.status is SaveStatus.IDLE

    def test_not_configured(self):
        session = EditSession.open(_make_store(None))
        assert session.connection is ConnectionState.NOT_CONFIGURED
        assert session.document == default_document()
        assert session.notices[0].level is NoticeLevel.INFO

    def test_unreachable_shows_default(self):
        backend = ScriptedBackend(read_error=BackendUnreachableError("offline"))
        session = EditSession.open(_make_store(backend))
        assert session.connection is ConnectionState.DISCONNECTED
        assert session.document == default_document()
        assert session.notices[0].level is NoticeLevel.ERROR
        assert "unreachable" in session.notices[0].message

    def test_rejected_credentials(self):
        backend = ScriptedBackend(read_error=AuthorizationError("bad key"))
        session = EditSession.open(_make_store(backend))
        assert session.connection is ConnectionState.DISCONNECTED
        assert "bad key" in session.notices[0].message


class TestEditing:
    def test_apply_is_immediate(self):
        session = EditSession.open(_make_store(None))
        session.apply(lambda doc: update_site(doc, name="LEE"))
        assert session.document.site.name == "LEE"
        assert session.status is SaveStatus.IDLE

    def test_commit_saves(self, tmp_path: Path):
        backend = LocalFileBackend(tmp_path)
        session = EditSession.open(_make_store(backend))
        result = session.commit(lambda doc: add_project(doc, new_project(title_alt="Tide")))

        assert result.ok is True
        assert session.status is SaveStatus.SAVED
        assert session.last_result == result
        assert backend.read()["projects"][0]["titleAlt"] == "Tide"

    def test_failed_save_keeps_edit(self):
        session = EditSession.open(_make_store(None))
        result = session.commit(lambda doc: update_site(doc, name="LEE"))

        assert result.ok is False
        assert session.status is SaveStatus.FAILED
        assert session.document.site.name == "LEE"
        assert session.notices[-1].level is NoticeLevel.ERROR

    def test_failed_edit_leaves_document(self):
        session = EditSession.open(_make_store(None))
        before = session.document
        with pytest.raises(KeyError):
            session.commit(lambda doc: update_project(doc, "missing", year="2025"))
        assert session.document is before

    def test_replace(self):
        session = EditSession.open(_make_store(None))
        replacement = update_site(default_document(), name="Z")
        session.replace(replacement)
        assert session.document is replacement

    def test_dismiss_notices(self):
        session = EditSession.open(_make_store(None))
        session.dismiss_notices()
        assert session.notices == []


class TestBackgroundSaves:
    def test_saves_reach_backend_in_order(self):
        backend = ScriptedBackend(default_document().to_wire())
        session = EditSession.open(_make_store(backend))
        backend.gate.clear()

        session.apply(lambda doc: update_site(doc, name="first"))
        first = session.save_in_background()
        session.apply(lambda doc: update_site(doc, name="second"))
        second = session.save_in_background()
        assert session.status is SaveStatus.SAVING
        backend.gate.set()

        assert first.result(timeout=5).ok
        assert second.result(timeout=5).ok
        session.close()
        assert [w["content"]["name"] for w in backend.writes] == ["first", "second"]
        assert session.status is SaveStatus.SAVED

    def test_superseded_failure_does_not_set_status(self):
        backend = ScriptedBackend(default_document().to_wire())
        backend.write_errors = [BackendUnreachableError("blip"), None]
        session = EditSession.open(_make_store(backend))
        backend.gate.clear()

        first = session.save_in_background()
        second = session.save_in_background()
        backend.gate.set()

        assert first.result(timeout=5).ok is False
        assert second.result(timeout=5).ok is True
        session.close()
        assert session.status is SaveStatus.SAVED
        assert any("blip" in n.message for n in session.notices)

    def test_save_waits_behind_queued_background_save(self):
        backend = ScriptedBackend(default_document().to_wire())
        session = EditSession.open(_make_store(backend))
        backend.gate.clear()

        session.apply(lambda doc: update_site(doc, name="queued"))
        queued = session.save_in_background()
        session.apply(lambda doc: update_site(doc, name="latest"))
        results = []
        saver = threading.Thread(target=lambda: results.append(session.save()))
        saver.start()
        backend.gate.set()
        saver.join(timeout=5)

        assert queued.result(timeout=5).ok
        assert results[0].ok
        session.close()
        assert [w["content"]["name"] for w in backend.writes] == ["queued", "latest"]
        assert backend.stored["content"]["name"] == "latest"
        assert session.status is SaveStatus.SAVED


class TestImagesAndReconfigure:
    def test_upload_failure_records_notice(self):
        session = EditSession.open(_make_store(None))
        with pytest.raises(ImageDecodeError):
            session.upload_image(b"not an image")
        assert session.notices[-1].message.startswith("Image upload failed")

    def test_reconfigure_reloads(self, tmp_path: Path):
        session = EditSession.open(_make_store(None))
        session.reconfigure(_make_store(LocalFileBackend(tmp_path)))
        assert session.connection is ConnectionState.CONNECTED
        assert session.notices == []
        assert (tmp_path / "portfolio.json").exists()
