"""Tests for PortfolioStore load/save/upload semantics."""

import base64
import io
import json
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from filmfolio.config import ImageSettings
from filmfolio.content import default_document
from filmfolio.content.mutations import add_project, new_project, update_site
from filmfolio.shared.errors import (
    AuthorizationError,
    BackendError,
    BackendUnreachableError,
    ImageDecodeError,
    ImageRejectedError,
    SaveFailure,
)
from filmfolio.storage.base import BackendKind, DocumentBackend
from filmfolio.storage.binding import BackendBinding
from filmfolio.storage.local import LocalFileBackend
from filmfolio.storage.store import PortfolioStore, parse_document


class FakeBackend(DocumentBackend):
    """In-memory backend that records writes and can be told to fail."""

    kind = BackendKind.JSONBIN

    def __init__(
        self,
        stored: Any = None,
        *,
        max_document_bytes: int | None = None,
        read_error: BackendError | None = None,
        write_error: BackendError | None = None,
        has_object_store: bool = False,
    ) -> None:
        self.stored = stored
        self.max_document_bytes = max_document_bytes
        self.read_error = read_error
        self.write_error = write_error
        self.has_object_store = has_object_store
        self.writes: list[bytes] = []
        self.uploads: list[tuple[str, str]] = []

    def read(self) -> Any:
        if self.read_error is not None:
            raise self.read_error
        return self.stored

    def write(self, payload: bytes) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(payload)
        self.stored = json.loads(payload)

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        self.uploads.append((filename, content_type))
        return f"https://cdn.example.com/{filename}"


def _make_store(backend: DocumentBackend | None, **kwargs: Any) -> PortfolioStore:
    if backend is None:
        return PortfolioStore(BackendBinding.not_configured("no credentials"), **kwargs)
    return PortfolioStore(BackendBinding(kind=backend.kind, backend=backend), **kwargs)


def _png_bytes(width: int = 2400, height: int = 1600, mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height), "red").save(buffer, format="PNG")
    return buffer.getvalue()


class TestLoad:
    def test_not_configured_returns_none(self):
        assert _make_store(None).load_document() is None

    def test_returns_stored_document(self):
        doc = update_site(default_document(), name="LEE")
        store = _make_store(FakeBackend(doc.to_wire()))
        assert store.load_document() == doc

    def test_unreachable_raises(self):
        store = _make_store(FakeBackend(read_error=BackendUnreachableError("offline")))
        with pytest.raises(BackendUnreachableError):
            store.load_document()

    def test_rejected_credentials_raise(self):
        store = _make_store(FakeBackend(read_error=AuthorizationError("bad key")))
        with pytest.raises(AuthorizationError):
            store.load_document()

    def test_missing_document_falls_back_and_writes_back(self):
        backend = FakeBackend(None)
        loaded = _make_store(backend).load_document()
        assert loaded == default_document()
        assert len(backend.writes) == 1
        assert backend.stored["content"]["name"] == "KIM DIRECTOR"

    @pytest.mark.parametrize(
        "raw",
        [
            {},
            {"projects": "nope", "content": {}},
            {"projects": [], "staff": []},
            {"projects": [{"title": "no id"}], "content": {}},
            ["not", "a", "dict"],
        ],
    )
    def test_malformed_document_falls_back(self, raw):
        backend = FakeBackend(raw)
        assert _make_store(backend).load_document() == default_document()
        assert len(backend.writes) == 1

    def test_no_write_back_when_unsupported(self):
        backend = FakeBackend({})
        backend.supports_write_back = False
        assert _make_store(backend).load_document() == default_document()
        assert backend.writes == []

    def test_failed_write_back_still_returns_default(self):
        backend = FakeBackend(None, write_error=AuthorizationError("read-only key"))
        assert _make_store(backend).load_document() == default_document()

    def test_custom_default_factory(self):
        store = _make_store(FakeBackend(None), default_factory=lambda: update_site(default_document(), name="X"))
        assert store.load_document().site.name == "X"


class TestSave:
    def test_round_trip(self):
        doc = add_project(default_document(), new_project(title_alt="Second"))
        store = _make_store(FakeBackend())
        result = store.save_document(doc)
        assert result.ok is True
        assert result.size == len(doc.to_json_bytes())
        assert store.load_document() == doc

    def test_round_trip_local(self, tmp_path: Path):
        doc = update_site(default_document(), about_text="바뀐 소개")
        store = _make_store(LocalFileBackend(tmp_path))
        assert store.save_document(doc).ok
        assert store.load_document() == doc

    def test_not_configured(self):
        result = _make_store(None).save_document(default_document())
        assert result.ok is False
        assert result.reason is SaveFailure.NOT_CONFIGURED
        assert "no credentials" in result.message

    def test_capacity_checked_before_sending(self):
        backend = FakeBackend(max_document_bytes=100)
        result = _make_store(backend).save_document(default_document())
        assert result.ok is False
        assert result.reason is SaveFailure.PAYLOAD_TOO_LARGE
        assert result.limit == 100
        assert result.size > 100
        assert backend.writes == []

    @pytest.mark.parametrize(
        ("error", "reason"),
        [
            (AuthorizationError("bad key"), SaveFailure.UNAUTHORIZED),
            (BackendUnreachableError("offline"), SaveFailure.UNREACHABLE),
        ],
    )
    def test_backend_errors_become_results(self, error, reason):
        result = _make_store(FakeBackend(write_error=error)).save_document(default_document())
        assert result.ok is False
        assert result.reason is reason

    def test_does_not_modify_document(self):
        doc = default_document()
        before = doc.model_copy(deep=True)
        _make_store(FakeBackend()).save_document(doc)
        assert doc == before


class TestParseDocument:
    def test_accepts_site_key(self):
        assert parse_document({"projects": [], "site": {"name": "A"}}).site.name == "A"

    def test_rejects_non_dict(self):
        assert parse_document("text") is None


class TestUploadImage:
    def test_embeds_without_object_store(self):
        store = _make_store(FakeBackend())
        reference = store.upload_image(_png_bytes())
        assert reference.startswith("data:image/jpeg;base64,")
        decoded = Image.open(io.BytesIO(base64.b64decode(reference.split(",", 1)[1])))
        assert max(decoded.size) == 1000

    def test_embeds_when_not_configured(self):
        reference = _make_store(None).upload_image(_png_bytes(200, 100))
        assert reference.startswith("data:image/jpeg;base64,")

    def test_uses_object_store_in_auto_mode(self):
        backend = FakeBackend(has_object_store=True)
        reference = _make_store(backend).upload_image(_png_bytes(10, 10), "still.png")
        assert reference == "https://cdn.example.com/still.png"
        assert backend.uploads == [("still.png", "image/png")]

    def test_embed_mode_ignores_object_store(self):
        backend = FakeBackend(has_object_store=True)
        store = _make_store(backend, images=ImageSettings(mode="embed"))
        assert store.upload_image(_png_bytes(10, 10), "a.png").startswith("data:")
        assert backend.uploads == []

    def test_remote_mode_without_object_store(self):
        store = _make_store(FakeBackend(), images=ImageSettings(mode="remote"))
        with pytest.raises(ImageRejectedError):
            store.upload_image(_png_bytes(10, 10))

    def test_remote_rejects_non_image(self):
        store = _make_store(FakeBackend(has_object_store=True))
        with pytest.raises(ImageDecodeError):
            store.upload_image(b"just some text", "notes.txt")

    def test_reads_from_path(self, tmp_path: Path):
        path = tmp_path / "poster.png"
        path.write_bytes(_png_bytes(40, 30))
        backend = FakeBackend(has_object_store=True)
        _make_store(backend).upload_image(path)
        assert backend.uploads == [("poster.png", "image/png")]
