"""SQLite adapter (stdlib sqlite3).

The pool is a plain list of open connections. Rows come back as
``sqlite3.Row`` so columns are addressable by their ``t<n>__<column>``
aliases, and foreign keys are enforced on every connection.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from entity_graph.core.connection import ConnectionConfig
from entity_graph.core.exceptions import ConnectionError, PoolError  # noqa: A004


class SqliteSyncAdapter:
    """Synchronous SQLite adapter.

    With ``database=":memory:"`` every pooled connection is a separate
    database, so in-memory setups use ``pool_size=1``.
    """

    paramstyle = "named"

    def _connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(config.database, **config.extra)
        except sqlite3.Error as e:
            raise ConnectionError(f"Cannot open SQLite database {config.database!r}: {e}") from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def create_pool(self, config: ConnectionConfig) -> list[sqlite3.Connection]:
        return [self._connect(config) for _ in range(config.pool_size)]

    def acquire_connection(self, pool: list[sqlite3.Connection]) -> sqlite3.Connection:
        if not pool:
            raise PoolError("SQLite pool exhausted: all connections are in use")
        return pool.pop()

    def release_connection(
        self, connection: sqlite3.Connection, pool: list[sqlite3.Connection]
    ) -> None:
        pool.append(connection)

    def close_pool(self, pool: list[sqlite3.Connection]) -> None:
        while pool:
            pool.pop().close()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        """Run one statement; driver errors propagate unchanged."""
        return connection.execute(sql, params or {})
