"""EntityGraph exception hierarchy.

Store-level exceptions raised by the database driver are deliberately NOT
part of this hierarchy: they propagate to the caller unchanged.
"""

from __future__ import annotations


class EntityGraphError(Exception):
    """Base exception for all EntityGraph errors."""


# --- Metadata ---


class MetadataError(EntityGraphError):
    """Raised when entity type or relationship metadata is invalid."""


class UnknownEntityTypeError(MetadataError):
    """Raised when an entity type name is not registered in the schema."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unknown entity type: '{type_name}'")


# --- Planning ---


class PlanError(EntityGraphError):
    """Base for fetch plan construction errors."""


class InvalidPathError(PlanError):
    """Raised when a relationship path does not resolve against the schema."""

    def __init__(self, path: str, segment: str, type_name: str) -> None:
        self.path = path
        self.segment = segment
        self.type_name = type_name
        super().__init__(
            f"Invalid relationship path '{path}': '{segment}' is not a "
            f"relationship of {type_name}"
        )


class InvalidFilterError(PlanError):
    """Raised when a root filter names a column the root type does not have."""

    def __init__(self, type_name: str, column: str) -> None:
        self.type_name = type_name
        self.column = column
        super().__init__(f"Cannot filter {type_name} on unknown column '{column}'")


class AmbiguousMergeError(PlanError):
    """Raised when a merge group would join independent to-many branches.

    Indicates a planner defect, never a caller mistake.
    """


# --- Mapping ---


class MappingError(EntityGraphError):
    """Base for projection errors."""


class ColumnMismatchError(MappingError):
    """Raised when required fields cannot be mapped from entity values."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: missing fields {missing_fields}")


# --- Execution ---


class ExecutionError(EntityGraphError):
    """Base for errors raised while materializing an entity graph."""


class LazyLoadForbiddenError(ExecutionError):
    """Raised when a deferred relationship is resolved while lazy loading is disabled."""

    def __init__(self, type_name: str, attribute_name: str) -> None:
        self.type_name = type_name
        self.attribute_name = attribute_name
        super().__init__(
            f"{type_name}.{attribute_name} is not loaded and lazy loading is disabled"
        )


# --- Adapter ---


class AdapterError(EntityGraphError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
