"""Record store backed by a JSON file on local disk."""

import os
import tempfile
from pathlib import Path

from ticketdesk.storage.base import RecordStore


class JsonFileRecordStore(RecordStore):
    """Stores the snapshot as one pretty-printed JSON file.

    Writes go to a temporary file in the same directory and are swapped
    into place with os.replace, so readers never see a half-written file.
    """

    backend_name = "json_file"

    def __init__(self, path: str | Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON document. The parent directory is
                created on first write.
        """
        super().__init__()
        self.path = Path(path)

    def _read_document(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write_document(self, document: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
