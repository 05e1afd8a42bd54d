"""Tests for BigQueryIdentityStore."""

from unittest.mock import MagicMock

import pytest

from serverside_analytics.events import IdentityRecord
from serverside_analytics.identity import IdentityStoreUnavailable
from serverside_analytics.identity_store import BigQueryIdentityStore, get_ddl


class TestBigQueryIdentityStore:
    @pytest.fixture
    def store(self):
        store = BigQueryIdentityStore(
            project_id="test-project",
            dataset_id="test_dataset",
            table_id="test_table",
            auto_create_table=False,
        )
        store._client = MagicMock()
        return store

    def test_find_first_returns_record(self, store):
        store._client.query.return_value.result.return_value = [
            {"client_id": "C1", "session_id": "S1", "quote_id": "55", "order_id": None}
        ]

        record = store.find_first("55")

        assert record == IdentityRecord(client_id="C1", session_id="S1", quote_id="55")
        query = store._client.query.call_args.args[0]
        assert "`test-project.test_dataset.test_table`" in query
        assert "quote_id = @correlation_id OR order_id = @correlation_id" in query
        job_config = store._client.query.call_args.kwargs["job_config"]
        assert job_config.query_parameters[0].value == "55"

    def test_find_first_miss(self, store):
        store._client.query.return_value.result.return_value = []
        assert store.find_first("55") is None

    def test_find_first_failure_raises_unavailable(self, store):
        store._client.query.side_effect = Exception("BQ down")
        with pytest.raises(IdentityStoreUnavailable):
            store.find_first("55")

    def test_save_inserts_row(self, store):
        store._client.insert_rows_json.return_value = []

        store.save(IdentityRecord(client_id="C1", session_id="S1", quote_id="55"))

        table, rows = store._client.insert_rows_json.call_args.args
        assert table == "test-project.test_dataset.test_table"
        assert rows[0]["client_id"] == "C1"
        assert rows[0]["quote_id"] == "55"
        assert "created_at" in rows[0]

    def test_save_insert_errors_raise(self, store):
        store._client.insert_rows_json.return_value = [{"index": 0, "errors": ["bad"]}]
        with pytest.raises(IdentityStoreUnavailable):
            store.save(IdentityRecord(client_id="C1", session_id="S1"))

    def test_close_releases_client(self, store):
        client = store._client
        store.close()
        client.close.assert_called_once()
        assert store._client is None

    def test_full_table_id(self, store):
        assert store.full_table_id == "test-project.test_dataset.test_table"


class TestGetDDL:
    def test_generates_valid_ddl(self):
        ddl = get_ddl("my-project", "my_dataset", "my_table")
        assert "CREATE TABLE IF NOT EXISTS" in ddl
        assert "`my-project.my_dataset.my_table`" in ddl
        assert "created_at TIMESTAMP NOT NULL" in ddl
        assert "client_id STRING" in ddl
        assert "CLUSTER BY quote_id, order_id" in ddl
