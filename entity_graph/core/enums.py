"""Enumerations shared by metadata, planner and instrumentation."""

from __future__ import annotations

from enum import Enum


class Cardinality(Enum):
    """How many target entities a relationship yields per source entity."""

    TO_ONE = "to_one"
    TO_MANY = "to_many"


class Ownership(Enum):
    """Which storage row carries the foreign key of a relationship."""

    SOURCE = "source"
    TARGET = "target"
    JOIN_TABLE = "join_table"


class FetchPolicy(Enum):
    """Statically configured default for a relationship."""

    EAGER = "eager"
    LAZY = "lazy"


class FetchMode(Enum):
    """How a fetch plan treats relationships it does not list.

    FETCH: unlisted relationships are always deferred.
    LOAD: unlisted relationships keep their FetchPolicy.
    """

    FETCH = "fetch"
    LOAD = "load"


class StatementKind(Enum):
    """Classification of a dispatched statement."""

    ROOT = "root"
    BATCH = "batch"
    LAZY = "lazy"
    RAW = "raw"
