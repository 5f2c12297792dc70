"""Record store factory functions.

Singleton pattern: one store per process so its lock guards every writer.
"""

from ticketdesk.core.config import settings
from ticketdesk.storage.base import RecordStore
from ticketdesk.storage.json_file import JsonFileRecordStore
from ticketdesk.storage.memory import MemoryRecordStore

_record_store: RecordStore | None = None


def get_record_store() -> RecordStore:
    """Get or create the record store singleton.

    The backend is chosen by settings.store_backend. The key_value backend
    needs a client and must be installed with set_record_store() at
    startup.

    Returns:
        RecordStore instance.

    Raises:
        ValueError: If the configured backend cannot be built from settings.
    """
    global _record_store

    if _record_store is None:
        backend = settings.store_backend
        if backend == "json_file":
            _record_store = JsonFileRecordStore(settings.store_path)
        elif backend == "memory":
            _record_store = MemoryRecordStore()
        elif backend == "key_value":
            raise ValueError(
                "key_value store requires a client; "
                "install it with set_record_store(KeyValueRecordStore(client))"
            )
        else:
            raise ValueError(f"Unknown store backend: {backend}")

    return _record_store


def set_record_store(store: RecordStore) -> None:
    """Install a pre-built store as the singleton."""
    global _record_store
    _record_store = store


def reset_record_store() -> None:
    """Reset the store singleton.

    Used in tests to ensure isolation between test cases.
    """
    global _record_store
    _record_store = None
