"""Record store backed by a single entry in a key-value service."""

from typing import Protocol

from ticketdesk.core.config import settings
from ticketdesk.storage.base import RecordStore


class KeyValueClient(Protocol):
    """Minimal client surface: a redis-py client satisfies it."""

    def get(self, key: str) -> str | bytes | None: ...

    def set(self, key: str, value: str) -> object: ...


class KeyValueRecordStore(RecordStore):
    """Stores the snapshot as one JSON blob under a fixed key."""

    backend_name = "key_value"

    def __init__(self, client: KeyValueClient, key: str | None = None) -> None:
        """Initialize the store.

        Args:
            client: Key-value client with get(key) and set(key, value).
            key: Entry holding the whole document. Defaults to
                settings.store_key.
        """
        super().__init__()
        self._client = client
        self.key = key or settings.store_key

    def _read_document(self) -> str | bytes | None:
        return self._client.get(self.key)

    def _write_document(self, document: str) -> None:
        self._client.set(self.key, document)
