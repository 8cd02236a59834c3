"""EntityGraph - bounded-round-trip entity graph loading."""

from __future__ import annotations

from entity_graph.core.connection import ConnectionConfig, ConnectionManager
from entity_graph.core.counter import RoundTripCounter, RoundTripRecord, StatementShape
from entity_graph.core.engine import Engine
from entity_graph.core.enums import (
    Cardinality,
    FetchMode,
    FetchPolicy,
    Ownership,
    StatementKind,
)
from entity_graph.core.exceptions import (
    AdapterError,
    AmbiguousMergeError,
    ColumnMismatchError,
    ConnectionError,  # noqa: A004
    EntityGraphError,
    ExecutionError,
    InvalidFilterError,
    InvalidPathError,
    LazyLoadForbiddenError,
    MappingError,
    MetadataError,
    PlanError,
    PoolError,
    UnknownEntityTypeError,
)
from entity_graph.core.settings import LoaderSettings, get_settings
from entity_graph.mapping.builder import entity, schema
from entity_graph.mapping.entity import Deferred, Entity, Loaded
from entity_graph.mapping.metadata import EntityType, JoinTable, Relationship, Schema
from entity_graph.mapping.model import ModelMapper
from entity_graph.planner.planner import FetchPlan, FetchPlanner
from entity_graph.planner.statements import Contains
from entity_graph.repository.base import Repository

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Engine
    "Engine",
    # Instrumentation
    "RoundTripCounter",
    "RoundTripRecord",
    "StatementShape",
    # Settings
    "LoaderSettings",
    "get_settings",
    # Metadata
    "EntityType",
    "Relationship",
    "JoinTable",
    "Schema",
    "entity",
    "schema",
    # Planner
    "FetchPlanner",
    "FetchPlan",
    "Contains",
    # Entities
    "Entity",
    "Loaded",
    "Deferred",
    # Mapping
    "ModelMapper",
    # Repository
    "Repository",
    # Enums
    "Cardinality",
    "Ownership",
    "FetchPolicy",
    "FetchMode",
    "StatementKind",
    # Exceptions
    "EntityGraphError",
    "MetadataError",
    "UnknownEntityTypeError",
    "PlanError",
    "InvalidPathError",
    "InvalidFilterError",
    "AmbiguousMergeError",
    "MappingError",
    "ColumnMismatchError",
    "ExecutionError",
    "LazyLoadForbiddenError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
