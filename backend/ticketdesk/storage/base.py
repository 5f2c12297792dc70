"""Abstract base class for whole-snapshot record stores.

Every backend persists one JSON document holding all users, tickets and
auth tokens. Callers never update a single record: they load the full
snapshot, change it, and save the full snapshot back.

Reads are forgiving: a missing, empty, unreadable or malformed document
loads as an empty snapshot. Writes are strict: any backend failure is
raised as StorageError.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from ticketdesk.core.errors import StorageError
from ticketdesk.models import Snapshot

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Whole-document store with a single-writer guard.

    Subclasses implement _read_document and _write_document against their
    medium (file, key-value entry, in-process string). This class owns
    decoding, error policy, and locking.

    The lock serializes transactions within one process. Two processes
    sharing the same file or key are still last-writer-wins.
    """

    backend_name: str = "base"

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @abstractmethod
    def _read_document(self) -> str | bytes | None:
        """Return the raw stored document, or None if nothing is stored."""

    @abstractmethod
    def _write_document(self, document: str) -> None:
        """Replace the stored document with the given JSON text."""

    def load(self) -> Snapshot:
        """Read the full snapshot.

        Returns:
            The stored snapshot, or an empty one if storage is empty,
            unreadable, or malformed.
        """
        try:
            raw = self._read_document()
            if not raw:
                return Snapshot()
            return Snapshot.from_document(json.loads(raw))
        except Exception as exc:
            logger.warning(
                "Record store read failed, using empty snapshot "
                "(backend=%s, error=%s)",
                self.backend_name,
                type(exc).__name__,
            )
            return Snapshot()

    def save(self, snapshot: Snapshot) -> None:
        """Write the full snapshot.

        Raises:
            StorageError: If the backend rejects the write.
        """
        document = json.dumps(snapshot.to_document(), indent=2)
        try:
            self._write_document(document)
        except Exception as exc:
            logger.error(
                "Record store write failed (backend=%s, error=%s)",
                self.backend_name,
                type(exc).__name__,
            )
            raise StorageError() from exc

    @contextmanager
    def transaction(self) -> Iterator[Snapshot]:
        """Load, yield for mutation, and save under the store lock.

        Nothing is written if the body raises.

        Usage:
            with store.transaction() as snapshot:
                snapshot.tickets.append(ticket)
        """
        with self._lock:
            snapshot = self.load()
            yield snapshot
            self.save(snapshot)

    @contextmanager
    def read(self) -> Iterator[Snapshot]:
        """Yield a consistent read-only snapshot under the store lock."""
        with self._lock:
            yield self.load()
