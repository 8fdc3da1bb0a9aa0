"""
Unit tests for the slot store adapters.

Part of IRL-10: Local cache and remote mirror adapters

JsonFileSlotStore runs against pytest's tmp_path; SupabaseSlotStore gets a
MagicMock client so no network is involved.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from application.exceptions import StorageError
from infrastructure.db import SupabaseSlotStore
from infrastructure.storage import InMemorySlotStore, JsonFileSlotStore


@pytest.fixture
def file_store(tmp_path) -> JsonFileSlotStore:
    return JsonFileSlotStore(tmp_path / "nested" / "slots.json")


@pytest.mark.unit
class TestJsonFileSlotStore:
    def test_missing_file_reads_as_empty(self, file_store):
        assert file_store.get_item("k") is None

    def test_set_then_get(self, file_store):
        file_store.set_item("k", "v")

        assert file_store.get_item("k") == "v"
        assert json.loads(file_store.path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_slots_are_independent(self, file_store):
        file_store.set_item("a", "1")
        file_store.set_item("b", "2")
        file_store.remove_item("a")

        assert file_store.get_item("a") is None
        assert file_store.get_item("b") == "2"

    def test_remove_missing_key_is_noop(self, file_store):
        file_store.remove_item("nothing")

        assert not file_store.path.exists()

    def test_invalid_json_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "slots.json"
        path.write_text("{broken", encoding="utf-8")
        store = JsonFileSlotStore(path)

        assert store.get_item("k") is None
        store.set_item("k", "v")
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_non_object_json_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "slots.json"
        path.write_text("[1, 2]", encoding="utf-8")

        assert JsonFileSlotStore(path).get_item("0") is None

    def test_non_string_values_are_ignored(self, tmp_path):
        path = tmp_path / "slots.json"
        path.write_text(json.dumps({"a": 1, "b": "x"}), encoding="utf-8")

        store = JsonFileSlotStore(path)

        assert store.get_item("a") is None
        assert store.get_item("b") == "x"

    def test_unreadable_path_raises_storage_error(self, tmp_path):
        # A directory where the file should be cannot be read as text.
        store = JsonFileSlotStore(tmp_path)

        with pytest.raises(StorageError):
            store.get_item("k")

    def test_failed_write_removes_temp_file(self, file_store):
        with patch("infrastructure.storage.file_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                file_store.set_item("k", "v")

        assert list(file_store.path.parent.iterdir()) == []


@pytest.mark.unit
class TestInMemorySlotStore:
    def test_round_trip(self):
        store = InMemorySlotStore()
        store.set_item("k", "v")

        assert store.get_item("k") == "v"
        store.remove_item("k")
        store.remove_item("k")
        assert store.get_item("k") is None

    def test_seed_is_copied(self):
        seed = {"k": "v"}
        store = InMemorySlotStore(seed)
        store.set_item("other", "x")

        assert seed == {"k": "v"}
        assert store.dump() == {"k": "v", "other": "x"}


def _client_returning(data):
    client = MagicMock()
    client.table.return_value.select.return_value.eq.return_value.limit.return_value.execute.return_value = (
        MagicMock(data=data)
    )
    return client


@pytest.mark.unit
class TestSupabaseSlotStore:
    def test_get_item_reads_payload(self):
        client = _client_returning([{"payload": '{"a": 1}'}])
        store = SupabaseSlotStore(client)

        assert store.get_item("ironlog_remote_v1:u1") == '{"a": 1}'
        client.table.assert_called_with("state_slots")
        client.table.return_value.select.return_value.eq.assert_called_with(
            "slot_key", "ironlog_remote_v1:u1"
        )

    def test_get_item_missing_row(self):
        store = SupabaseSlotStore(_client_returning([]))

        assert store.get_item("k") is None

    def test_set_item_upserts(self):
        client = MagicMock()
        store = SupabaseSlotStore(client, table="mirror")

        store.set_item("k", "payload")

        client.table.assert_called_with("mirror")
        row = client.table.return_value.upsert.call_args.args[0]
        assert row["slot_key"] == "k"
        assert row["payload"] == "payload"
        assert row["updated_at"]
        assert client.table.return_value.upsert.call_args.kwargs == {"on_conflict": "slot_key"}

    def test_remove_item_deletes(self):
        client = MagicMock()

        SupabaseSlotStore(client).remove_item("k")

        client.table.return_value.delete.return_value.eq.assert_called_with("slot_key", "k")

    def test_read_failure_raises_storage_error(self):
        client = MagicMock()
        client.table.side_effect = RuntimeError("connection refused")

        with pytest.raises(StorageError) as exc_info:
            SupabaseSlotStore(client).get_item("k")

        assert exc_info.value.slot_key == "k"
        assert "connection refused" in exc_info.value.message

    def test_write_failure_raises_storage_error(self):
        client = MagicMock()
        client.table.return_value.upsert.return_value.execute.side_effect = RuntimeError("quota")

        with pytest.raises(StorageError):
            SupabaseSlotStore(client).set_item("k", "v")
