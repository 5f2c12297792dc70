"""Whole-snapshot record stores.

Three interchangeable backends share one interface (RecordStore):
- JsonFileRecordStore: JSON file on disk
- KeyValueRecordStore: one blob in a key-value service
- MemoryRecordStore: serialized document held in-process
"""

from ticketdesk.storage.base import RecordStore
from ticketdesk.storage.factory import (
    get_record_store,
    reset_record_store,
    set_record_store,
)
from ticketdesk.storage.json_file import JsonFileRecordStore
from ticketdesk.storage.key_value import KeyValueClient, KeyValueRecordStore
from ticketdesk.storage.memory import MemoryRecordStore

__all__ = [
    "JsonFileRecordStore",
    "KeyValueClient",
    "KeyValueRecordStore",
    "MemoryRecordStore",
    "RecordStore",
    "get_record_store",
    "reset_record_store",
    "set_record_store",
]
