"""Entity metadata DSL builder.

Provides a fluent builder for declaring entity types and their relationships
as static configuration:

    department = (
        entity("Department", table="departments")
        .key("id")
        .columns("name", "description")
        .to_many("courses", "Course", mapped_by="department_id")
        .to_one("details", "DepartmentDetails", mapped_by="department_id")
    )
"""

from __future__ import annotations

import re

from entity_graph.core.enums import Cardinality, FetchPolicy, Ownership
from entity_graph.core.exceptions import MetadataError
from entity_graph.mapping.metadata import EntityType, JoinTable, Relationship, Schema

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(kind: str, name: str) -> None:
    if not _IDENTIFIER.match(name):
        raise MetadataError(f"Invalid {kind} name '{name}': must be a plain SQL identifier")


def entity(name: str, table: str | None = None) -> EntityTypeBuilder:
    """Entry point for the metadata DSL.

    Args:
        name: Entity type name used in paths and error messages.
        table: Backing table. Defaults to the lowercased name.
    """
    return EntityTypeBuilder(name, table or name.lower())


def schema(*builders: EntityTypeBuilder | EntityType) -> Schema:
    """Build every declaration and collect them into a validated Schema."""
    return Schema(b if isinstance(b, EntityType) else b.build() for b in builders)


class EntityTypeBuilder:
    """Fluent builder for one entity type."""

    def __init__(self, name: str, table: str) -> None:
        self._name = name
        self._table = table
        self._key: str | None = None
        self._columns: list[str] = []
        self._relationships: list[Relationship] = []

    def key(self, column: str) -> EntityTypeBuilder:
        """Set the primary key column."""
        self._key = column
        return self

    def columns(self, *names: str) -> EntityTypeBuilder:
        """Declare scalar columns."""
        self._columns.extend(names)
        return self

    def to_one(
        self,
        name: str,
        target: str,
        *,
        foreign_key: str | None = None,
        mapped_by: str | None = None,
        fetch: FetchPolicy = FetchPolicy.LAZY,
    ) -> EntityTypeBuilder:
        """Declare a to-one relationship.

        Pass ``foreign_key`` when this row carries the foreign key, or
        ``mapped_by`` when the target row carries it.
        """
        if (foreign_key is None) == (mapped_by is None):
            raise MetadataError(
                f"{self._name}.{name}: exactly one of foreign_key or mapped_by is required"
            )
        ownership = Ownership.SOURCE if foreign_key is not None else Ownership.TARGET
        self._relationships.append(
            Relationship(
                name=name,
                target=target,
                cardinality=Cardinality.TO_ONE,
                ownership=ownership,
                column=foreign_key or mapped_by,
                fetch=fetch,
            )
        )
        return self

    def to_many(
        self,
        name: str,
        target: str,
        *,
        mapped_by: str | None = None,
        join_table: JoinTable | tuple[str, str, str] | None = None,
        fetch: FetchPolicy = FetchPolicy.LAZY,
    ) -> EntityTypeBuilder:
        """Declare a to-many relationship.

        Pass ``mapped_by`` (foreign key column on the target row) for
        one-to-many, or ``join_table`` as ``(table, source_column,
        target_column)`` for many-to-many.
        """
        if (mapped_by is None) == (join_table is None):
            raise MetadataError(
                f"{self._name}.{name}: exactly one of mapped_by or join_table is required"
            )
        if join_table is not None and not isinstance(join_table, JoinTable):
            join_table = JoinTable(*join_table)
        self._relationships.append(
            Relationship(
                name=name,
                target=target,
                cardinality=Cardinality.TO_MANY,
                ownership=Ownership.TARGET if mapped_by is not None else Ownership.JOIN_TABLE,
                column=mapped_by,
                join_table=join_table,
                fetch=fetch,
            )
        )
        return self

    def build(self) -> EntityType:
        """Compile and validate the declaration into an EntityType."""
        if self._key is None:
            raise MetadataError(f"Entity type '{self._name}' must have a key set via .key()")

        _check_identifier("table", self._table)
        _check_identifier("column", self._key)
        for column in self._columns:
            _check_identifier("column", column)

        columns = tuple(c for c in dict.fromkeys(self._columns) if c != self._key)

        relationships: dict[str, Relationship] = {}
        for rel in self._relationships:
            _check_identifier("relationship", rel.name)
            if rel.name in relationships:
                raise MetadataError(f"Duplicate relationship '{self._name}.{rel.name}'")
            if rel.name == self._key or rel.name in columns:
                raise MetadataError(
                    f"Relationship '{self._name}.{rel.name}' collides with a column name"
                )
            if rel.column is not None:
                _check_identifier("column", rel.column)
            if rel.join_table is not None:
                _check_identifier("table", rel.join_table.table)
                _check_identifier("column", rel.join_table.source_column)
                _check_identifier("column", rel.join_table.target_column)
            relationships[rel.name] = rel

        return EntityType(
            name=self._name,
            table=self._table,
            key=self._key,
            columns=columns,
            relationships=relationships,
        )
