"""Statement execution engine.

The Engine is the storage-access layer: it binds parameters, dispatches one
statement per call through the adapter, and reports every dispatched
statement to its RoundTripCounter. Driver exceptions pass through unchanged.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from entity_graph.core.connection import ConnectionConfig, ConnectionManager
from entity_graph.core.counter import RoundTripCounter, StatementShape
from entity_graph.core.enums import StatementKind
from entity_graph.core.params import normalize_params

logger = logging.getLogger(__name__)


def _rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    first_row = rows[0]
    if isinstance(first_row, dict):
        return [dict(row) for row in rows]

    return [dict(zip(columns, row, strict=True)) for row in rows]


class Engine:
    """Synchronous statement execution engine."""

    def __init__(
        self,
        connection_manager: ConnectionManager,
        counter: RoundTripCounter | None = None,
    ) -> None:
        self._connection_manager = connection_manager
        self._counter = counter if counter is not None else RoundTripCounter()
        self._paramstyle = connection_manager.adapter.paramstyle

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        counter: RoundTripCounter | None = None,
    ) -> Engine:
        """Create an Engine from a ConnectionConfig."""
        return cls(ConnectionManager(config), counter)

    @property
    def counter(self) -> RoundTripCounter:
        return self._counter

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    def with_counter(self, counter: RoundTripCounter) -> Engine:
        """Engine sharing this connection pool but measuring into *counter*."""
        return Engine(self._connection_manager, counter)

    def fetch_all(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        shape: StatementShape | None = None,
    ) -> list[dict[str, Any]]:
        """Dispatch one statement and return its rows as dicts."""
        if shape is None:
            shape = StatementShape(
                kind=StatementKind.RAW,
                tables=(),
                join_count=0,
                sql=sql,
                parameter_count=len(params or {}),
            )
        sql = normalize_params(sql, self._paramstyle)

        with self._connection_manager.get_connection() as conn:
            try:
                cursor = self._connection_manager.adapter.execute(conn, sql, params)
                rows = _rows_to_dicts(cursor)
            except Exception:
                self._counter.record_statement(shape)
                raise

        self._counter.record_statement(dataclasses.replace(shape, row_count=len(rows)))
        logger.debug(
            "%s statement on %s returned %d rows",
            shape.kind.value,
            ", ".join(shape.tables) or "<unknown>",
            len(rows),
        )
        return rows
