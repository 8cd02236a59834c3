"""Contract tests for adapter protocol compliance."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from entity_graph.adapters.protocol import SyncAdapter
from entity_graph.adapters.sqlite import SqliteSyncAdapter
from entity_graph.core.connection import ConnectionConfig, ConnectionManager
from entity_graph.core.exceptions import AdapterError, PoolError


class TestSqliteSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        adapter = SqliteSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.paramstyle == "named"

    def test_lifecycle(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        assert len(pool) == 1

        conn = adapter.acquire_connection(pool)
        assert conn is not None

        cursor = adapter.execute(conn, "SELECT :a + :b AS val", {"a": 1, "b": 2})
        row = cursor.fetchone()
        assert row["val"] == 3

        adapter.release_connection(conn, pool)
        assert len(pool) == 1

        adapter.close_pool(pool)
        assert len(pool) == 0

    def test_foreign_keys_enforced(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        conn = adapter.acquire_connection(pool)

        row = adapter.execute(conn, "PRAGMA foreign_keys").fetchone()
        assert row[0] == 1
        adapter.release_connection(conn, pool)
        adapter.close_pool(pool)

    def test_empty_pool(self) -> None:
        with pytest.raises(PoolError):
            SqliteSyncAdapter().acquire_connection([])


class TestConnectionManager:
    def test_adapter_lookup_by_driver(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        assert isinstance(manager.adapter, SqliteSyncAdapter)

    def test_unsupported_driver(self) -> None:
        with pytest.raises(AdapterError, match="Unsupported database driver"):
            ConnectionManager(ConnectionConfig(driver="db2", database="x"))

    def test_injected_adapter(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        assert ConnectionManager(sqlite_config, adapter).adapter is adapter

    def test_pool_is_lazy_and_reusable(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        with manager.get_connection() as conn:
            conn.execute("CREATE TABLE t (id INTEGER)")
        with manager.get_connection() as conn:
            assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 0
        manager.close_pool()

    def test_context_manager_closes_pool(self, sqlite_config: ConnectionConfig) -> None:
        with ConnectionManager(sqlite_config) as manager:
            assert manager.is_open
        assert not manager.is_open

    def test_pool_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ConnectionConfig(driver="sqlite", database=":memory:", pool_size=0)
