"""Tests for record store backends.

Covers the shared load/save contract on all three backends, the
forgiving read policy, the strict write policy, and transactions.
"""

import json
import threading
from datetime import UTC, datetime

import pytest

from ticketdesk.core.errors import StorageError
from ticketdesk.models import Snapshot, Ticket, User
from ticketdesk.services.ticket_service import TicketService
from ticketdesk.storage import (
    JsonFileRecordStore,
    KeyValueRecordStore,
    MemoryRecordStore,
    get_record_store,
    set_record_store,
)

_CREATED = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeKeyValueClient:
    """Dict-backed stand-in for a key-value service client."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail_writes = False

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        if self.fail_writes:
            raise ConnectionError("service unavailable")
        self.data[key] = value
        return True


def _snapshot() -> Snapshot:
    return Snapshot(
        users=[User(id="u1", email="a@example.com", password="secret1", name="A")],
        tickets=[
            Ticket(
                id="t1",
                title="Printer jam",
                status="open",
                user_id="u1",
                created_at=_CREATED,
                updated_at=_CREATED,
            )
        ],
    )


@pytest.fixture(params=["json_file", "key_value", "memory"])
def any_store(request, tmp_path):
    """Each backend in turn, starting empty."""
    if request.param == "json_file":
        return JsonFileRecordStore(tmp_path / "db.json")
    if request.param == "key_value":
        return KeyValueRecordStore(FakeKeyValueClient(), "ticketdesk:test")
    return MemoryRecordStore()


# =============================================================================
# Shared Contract
# =============================================================================


class TestSharedContract:
    """Tests every backend must pass."""

    def test_empty_store_loads_empty_snapshot(self, any_store):
        snapshot = any_store.load()
        assert snapshot.users == []
        assert snapshot.tickets == []
        assert snapshot.tokens == {}

    def test_saved_snapshot_loads_back(self, any_store):
        any_store.save(_snapshot())

        loaded = any_store.load()

        assert loaded.users[0].email == "a@example.com"
        assert loaded.tickets[0].title == "Printer jam"
        assert loaded.tickets[0].created_at == _CREATED

    def test_transaction_saves_changes(self, any_store):
        with any_store.transaction() as snapshot:
            snapshot.users.append(
                User(id="u2", email="b@example.com", password="secret2", name="B")
            )

        assert [u.id for u in any_store.load().users] == ["u2"]

    def test_transaction_does_not_save_when_body_raises(self, any_store):
        any_store.save(_snapshot())

        with pytest.raises(RuntimeError), any_store.transaction() as snapshot:
            snapshot.tickets.clear()
            raise RuntimeError("abort")

        assert len(any_store.load().tickets) == 1

    def test_loaded_snapshot_is_a_copy(self, any_store):
        """Mutating a loaded snapshot without saving leaves storage untouched."""
        any_store.save(_snapshot())

        any_store.load().tickets.clear()

        assert len(any_store.load().tickets) == 1


# =============================================================================
# Read Failures
# =============================================================================


class TestForgivingReads:
    """Tests that unreadable documents load as empty."""

    def test_malformed_json_loads_empty(self):
        store = MemoryRecordStore("{not json")
        assert store.load().users == []

    def test_non_object_document_loads_empty(self):
        store = MemoryRecordStore(json.dumps([1, 2, 3]))
        assert store.load().users == []

    def test_malformed_record_is_skipped_not_fatal(self):
        document = json.dumps(
            {
                "users": [
                    {"id": "u1", "email": "a@example.com", "password": "p", "name": "A"},
                    {"id": "u2"},
                ]
            }
        )

        snapshot = MemoryRecordStore(document).load()

        assert [u.id for u in snapshot.users] == ["u1"]
        assert snapshot.unparsed_count == 1

    def test_malformed_record_survives_a_write(self):
        bad_user = {"id": "u2", "nickname": "legacy"}
        good_user = {"id": "u1", "email": "a@example.com", "password": "p", "name": "A"}
        store = MemoryRecordStore(json.dumps({"users": [good_user, bad_user]}))

        with store.transaction() as snapshot:
            snapshot.users.append(
                User(id="u3", email="c@example.com", password="secret3", name="C")
            )

        stored = json.loads(store._read_document())["users"]
        assert [u["id"] for u in stored] == ["u1", "u3", "u2"]
        assert bad_user in stored

    def test_numeric_ids_load_as_strings(self):
        document = json.dumps(
            {
                "users": [
                    {"id": 1, "email": "a@example.com", "password": "p", "name": "A"}
                ],
                "tickets": [
                    {
                        "id": 7,
                        "title": "Printer jam",
                        "status": "open",
                        "userId": 1,
                        "createdAt": "2024-01-01T12:00:00Z",
                        "updatedAt": "2024-01-01T12:00:00Z",
                    }
                ],
            }
        )

        snapshot = MemoryRecordStore(document).load()

        assert snapshot.users[0].id == "1"
        assert snapshot.tickets[0].id == "7"
        assert snapshot.tickets[0].user_id == "1"

    def test_missing_sections_load_empty(self):
        document = json.dumps({"users": []})
        snapshot = MemoryRecordStore(document).load()
        assert snapshot.tickets == []
        assert snapshot.tokens == {}

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "db.json"
        path.write_text("]]]", encoding="utf-8")

        assert JsonFileRecordStore(path).load().tickets == []

    def test_key_value_defaults_to_configured_key(self):
        client = FakeKeyValueClient()
        KeyValueRecordStore(client).save(Snapshot())
        assert list(client.data) == ["ticketdesk:db"]

    def test_bytes_from_key_value_client_are_decoded(self):
        client = FakeKeyValueClient()
        client.data["k"] = json.dumps(_snapshot().to_document()).encode()

        store = KeyValueRecordStore(client, "k")

        assert store.load().users[0].id == "u1"


# =============================================================================
# Write Failures
# =============================================================================


class TestStrictWrites:
    """Tests that write failures surface as StorageError."""

    def test_key_value_write_failure_raises_storage_error(self):
        client = FakeKeyValueClient()
        client.fail_writes = True
        store = KeyValueRecordStore(client, "k")

        with pytest.raises(StorageError):
            store.save(_snapshot())

    def test_file_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileRecordStore(blocker / "db.json")

        with pytest.raises(StorageError):
            store.save(_snapshot())


# =============================================================================
# JSON File Layout
# =============================================================================


class TestJsonFileLayout:
    """Tests for the on-disk document."""

    def test_document_uses_camel_case_and_auth_section(self, tmp_path):
        path = tmp_path / "db.json"
        JsonFileRecordStore(path).save(_snapshot())

        document = json.loads(path.read_text(encoding="utf-8"))

        assert set(document) == {"users", "tickets", "auth"}
        assert document["auth"] == {"tokens": []}
        assert document["tickets"][0]["userId"] == "u1"
        assert "createdAt" in document["tickets"][0]

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "data" / "db.json"
        JsonFileRecordStore(path).save(Snapshot())
        assert path.exists()

    def test_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "db.json"
        store = JsonFileRecordStore(path)
        store.save(_snapshot())
        store.save(Snapshot())

        assert [p.name for p in tmp_path.iterdir()] == ["db.json"]


# =============================================================================
# Factory
# =============================================================================


class TestFactory:
    """Tests for the store singleton."""

    def test_returns_same_instance(self, monkeypatch, tmp_path):
        from ticketdesk.core.config import settings

        monkeypatch.setattr(settings, "store_path", str(tmp_path / "db.json"))
        assert get_record_store() is get_record_store()

    def test_builds_memory_store_from_settings(self, monkeypatch):
        from ticketdesk.core.config import settings

        monkeypatch.setattr(settings, "store_backend", "memory")
        assert isinstance(get_record_store(), MemoryRecordStore)

    def test_key_value_requires_installed_store(self, monkeypatch):
        from ticketdesk.core.config import settings

        monkeypatch.setattr(settings, "store_backend", "key_value")
        with pytest.raises(ValueError, match="set_record_store"):
            get_record_store()

    def test_set_record_store_installs_singleton(self):
        store = KeyValueRecordStore(FakeKeyValueClient(), "k")
        set_record_store(store)
        assert get_record_store() is store


# =============================================================================
# Concurrent Writers
# =============================================================================


class TestConcurrentWriters:
    """Tests that transactions serialize writers within one process."""

    @pytest.mark.parametrize("backend", ["json_file", "memory"])
    def test_no_lost_updates_across_threads(self, backend, tmp_path):
        if backend == "json_file":
            store = JsonFileRecordStore(tmp_path / "db.json")
        else:
            store = MemoryRecordStore()
        tickets = TicketService(store)
        threads_count, per_thread = 8, 20
        start = threading.Barrier(threads_count)
        failures: list[BaseException] = []

        def create_many(worker: int) -> None:
            start.wait()
            try:
                for n in range(per_thread):
                    tickets.create("owner-1", f"Ticket {worker}-{n}", status="open")
            except Exception as exc:  # noqa: BLE001
                failures.append(exc)

        workers = [
            threading.Thread(target=create_many, args=(i,)) for i in range(threads_count)
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        assert failures == []
        created = tickets.list("owner-1")
        assert len(created) == threads_count * per_thread
        assert len({t.id for t in created}) == threads_count * per_thread
