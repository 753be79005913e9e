"""JSONbin backend — the whole document is one bin record."""

from __future__ import annotations

from typing import Any

from filmfolio.integrations.jsonbin import JsonBinClient, JsonBinConfig
from filmfolio.storage.base import BackendKind, DocumentBackend


class JsonBinBackend(DocumentBackend):
    kind = BackendKind.JSONBIN

    def __init__(self, config: JsonBinConfig, client: JsonBinClient | None = None) -> None:
        self.config = config
        self.client = client or JsonBinClient(config)
        self.max_document_bytes = config.max_document_bytes

    def read(self) -> Any | None:
        return self.client.read_record()

    def write(self, payload: bytes) -> None:
        self.client.replace_record(payload)

    def describe(self) -> str:
        return f"JSONbin {self.config.bin_id}"
