"""Entity type metadata.

Frozen dataclasses describing entity types and their relationships, plus the
Schema that validates and indexes them. Loaded once at startup and read-only
afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from entity_graph.core.enums import Cardinality, FetchPolicy, Ownership
from entity_graph.core.exceptions import MetadataError, UnknownEntityTypeError


@dataclass(frozen=True)
class JoinTable:
    """Link table of a many-to-many relationship."""

    table: str
    source_column: str  # references the declaring entity's key
    target_column: str  # references the target entity's key


@dataclass(frozen=True)
class Relationship:
    """A relationship attribute of an entity type.

    ``column`` is the foreign key column: on the declaring row for
    Ownership.SOURCE, on the target row for Ownership.TARGET, unused for
    Ownership.JOIN_TABLE.
    """

    name: str
    target: str
    cardinality: Cardinality
    ownership: Ownership
    column: str | None = None
    join_table: JoinTable | None = None
    fetch: FetchPolicy = FetchPolicy.LAZY

    @property
    def is_collection(self) -> bool:
        return self.cardinality is Cardinality.TO_MANY


@dataclass(frozen=True)
class EntityType:
    """A named record type mapped onto one table."""

    name: str
    table: str
    key: str
    columns: tuple[str, ...] = ()
    relationships: dict[str, Relationship] = field(default_factory=dict)

    @property
    def select_columns(self) -> tuple[str, ...]:
        """Key, scalar columns, and the foreign keys this row carries."""
        names = [self.key, *self.columns]
        for rel in self.relationships.values():
            if rel.ownership is Ownership.SOURCE and rel.column is not None:
                names.append(rel.column)
        return tuple(dict.fromkeys(names))

    def relationship(self, name: str) -> Relationship | None:
        return self.relationships.get(name)


class Schema:
    """Validated registry of entity types.

    Args:
        entity_types: Entity types (or builders exposing ``build()``).

    Raises:
        MetadataError: On duplicate names or dangling relationship targets.
    """

    def __init__(self, entity_types: Iterable[EntityType]) -> None:
        self._types: dict[str, EntityType] = {}
        for entity_type in entity_types:
            if not isinstance(entity_type, EntityType):
                entity_type = entity_type.build()
            if entity_type.name in self._types:
                raise MetadataError(f"Duplicate entity type '{entity_type.name}'")
            self._types[entity_type.name] = entity_type
        self._validate()

    def _validate(self) -> None:
        for entity_type in self._types.values():
            for rel in entity_type.relationships.values():
                if rel.target not in self._types:
                    raise MetadataError(
                        f"{entity_type.name}.{rel.name} targets unknown entity type "
                        f"'{rel.target}'"
                    )

    def __getitem__(self, name: str) -> EntityType:
        try:
            return self._types[name]
        except KeyError:
            raise UnknownEntityTypeError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[EntityType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def target_of(self, rel: Relationship) -> EntityType:
        return self[rel.target]

    def join_columns(self, source: EntityType, rel: Relationship) -> tuple[str, str]:
        """Return ``(local, remote)`` columns joining *source* along *rel*.

        *local* is read from the source row. *remote* lives on the target row,
        or on the link table for many-to-many relationships.
        """
        target = self.target_of(rel)
        if rel.ownership is Ownership.SOURCE:
            assert rel.column is not None
            return rel.column, target.key
        if rel.ownership is Ownership.TARGET:
            assert rel.column is not None
            return source.key, rel.column
        assert rel.join_table is not None
        return source.key, rel.join_table.source_column
