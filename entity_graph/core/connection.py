"""Connection configuration and pool lifecycle.

ConnectionConfig is a Pydantic model validated once at startup.
ConnectionManager resolves the SyncAdapter for the configured driver (or takes
an injected one) and hands out pooled connections as context managers.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, Field

from entity_graph.core.exceptions import AdapterError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Where the entity tables live and how many connections to pool.

    ``extra`` is passed through to the driver's connect call.
    """

    driver: str
    database: str
    pool_size: int = Field(default=5, ge=1)
    extra: dict[str, Any] = {}


# Driver name -> (module, adapter class)
_ADAPTERS: dict[str, tuple[str, str]] = {
    "sqlite": ("entity_graph.adapters.sqlite", "SqliteSyncAdapter"),
}


def load_adapter(driver: str) -> Any:
    """Instantiate the adapter registered for *driver*.

    Raises:
        AdapterError: if the driver is unknown or its adapter cannot be imported.
    """
    try:
        module_path, class_name = _ADAPTERS[driver.lower()]
    except KeyError:
        raise AdapterError(f"Unsupported database driver: {driver}") from None

    try:
        return getattr(importlib.import_module(module_path), class_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Owns one adapter and its pool.

    The pool is created on first use. Usable as a context manager that
    closes the pool on exit.

    Args:
        config: Connection configuration.
        adapter: Adapter instance; looked up from ``config.driver`` when omitted.
    """

    def __init__(self, config: ConnectionConfig, adapter: Any | None = None) -> None:
        self.config = config
        self._adapter = adapter if adapter is not None else load_adapter(config.driver)
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def initialize_pool(self) -> Any:
        if self._pool is None:
            self._pool = self._adapter.create_pool(self.config)
            logger.debug(
                "Opened %s pool for %r with %d connection(s)",
                self.config.driver,
                self.config.database,
                self.config.pool_size,
            )
        return self._pool

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """Borrow a pooled connection for the duration of the block."""
        pool = self.initialize_pool()
        connection = self._adapter.acquire_connection(pool)
        try:
            yield connection
        finally:
            self._adapter.release_connection(connection, pool)

    def close_pool(self) -> None:
        if self._pool is not None:
            self._adapter.close_pool(self._pool)
            self._pool = None
            logger.debug("Closed %s pool for %r", self.config.driver, self.config.database)

    def __enter__(self) -> ConnectionManager:
        self.initialize_pool()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close_pool()
