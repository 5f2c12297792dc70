"""In-process record store for local demos and tests."""

from ticketdesk.storage.base import RecordStore


class MemoryRecordStore(RecordStore):
    """Keeps the serialized document in memory.

    The document is stored as JSON text, like browser local storage, so
    every load hands out a fresh copy and callers cannot mutate stored
    state without saving.
    """

    backend_name = "memory"

    def __init__(self, document: str | None = None) -> None:
        """Initialize the store.

        Args:
            document: Optional initial JSON document.
        """
        super().__init__()
        self._document = document

    def _read_document(self) -> str | None:
        return self._document

    def _write_document(self, document: str) -> None:
        self._document = document

    def clear(self) -> None:
        """Drop all stored data (for testing)."""
        with self._lock:
            self._document = None
