"""Database adapter protocol.

The planner only needs ``execute(connection, sql, params)`` returning a
DB-API cursor; an adapter supplies that plus the pool lifecycle around it.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from entity_graph.core.connection import ConnectionConfig


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter.

    ``paramstyle`` is ``"named"`` (``:name``) or ``"pyformat"``
    (``%(name)s``); the Engine rewrites statements to match.
    """

    paramstyle: str

    def create_pool(self, config: ConnectionConfig) -> Any: ...

    def acquire_connection(self, pool: Any) -> Any: ...

    def release_connection(self, connection: Any, pool: Any) -> None: ...

    def close_pool(self, pool: Any) -> None: ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Run one statement and return a cursor exposing ``description``."""
        ...
