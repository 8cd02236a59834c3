"""Entity graph assembly.

Single-pass reconstruction of joined result sets using one identity map per
load operation. Joined rows repeat a parent once per child; the identity map
collapses them into one entity, and per-parent membership sets keep every
child exactly once.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from entity_graph.mapping.entity import Deferred, Entity, Loaded
from entity_graph.mapping.metadata import EntityType, Relationship
from entity_graph.mapping.plan import EntityPlan

# Alias of the column carrying the parent-side join value of a scoped statement
OWNER_COLUMN = "__owner"


def _extract_fields(row: dict[str, Any], prefix: str, columns: Iterable[str]) -> dict[str, Any]:
    """Extract fields from a row using a column alias prefix."""
    return {column: row.get(prefix + column) for column in columns}


class GraphAssembler:
    """Splices statement results into one in-memory entity graph.

    Args:
        deferred_factory: Creates the Deferred handle installed on every
            relationship of a newly materialized entity.
    """

    def __init__(self, deferred_factory: Callable[[Entity, Relationship], Deferred]) -> None:
        self._deferred_factory = deferred_factory
        self._identity: dict[tuple[str, Any], Entity] = {}
        self._members: dict[tuple[tuple[str, Any], str], set[Any]] = {}

    def __len__(self) -> int:
        return len(self._identity)

    def get(self, type_name: str, key: Any) -> Entity | None:
        return self._identity.get((type_name, key))

    def materialize(self, entity_type: EntityType, row: dict[str, Any], prefix: str) -> Entity | None:
        """Return the entity a row describes, creating it on first sight.

        Returns None for NULL keys (the outer side of a LEFT JOIN).
        """
        key = row.get(prefix + entity_type.key)
        if key is None:
            return None

        identity = (entity_type.name, key)
        entity = self._identity.get(identity)
        if entity is None:
            entity = Entity(entity_type, _extract_fields(row, prefix, entity_type.select_columns))
            for rel in entity_type.relationships.values():
                entity.set_state(rel.name, self._deferred_factory(entity, rel))
            self._identity[identity] = entity
        return entity

    def prepare(self, parent: Entity, rel: Relationship) -> None:
        """Mark *rel* loaded-and-empty on *parent* unless already loaded."""
        if isinstance(parent.state(rel.name), Loaded):
            return
        parent.set_state(rel.name, Loaded([] if rel.is_collection else None))

    def attach(self, parent: Entity, rel: Relationship, child: Entity) -> None:
        self.prepare(parent, rel)
        if not rel.is_collection:
            parent.set_state(rel.name, Loaded(child))
            return

        members = self._members.setdefault((parent.identity, rel.name), set())
        if child.key not in members:
            members.add(child.key)
            parent.state(rel.name).value.append(child)

    def assemble(
        self,
        rows: Sequence[dict[str, Any]],
        plans: Sequence[EntityPlan],
        owners: Mapping[Any, list[Entity]] | None = None,
    ) -> list[list[Entity]]:
        """Materialize and link the entities of every row.

        Args:
            rows: Result rows with ``<prefix><column>`` keys.
            plans: One EntityPlan per entity slot, parents before children.
            owners: For scoped statements, owner value -> parent entities the
                first slot attaches to via ``plans[0].relationship``.

        Returns:
            Per slot, the distinct entities seen, in first-seen order.
        """
        seen: list[dict[tuple[str, Any], Entity]] = [{} for _ in plans]

        anchor_rel = plans[0].relationship
        if owners is not None and anchor_rel is not None:
            for parents in owners.values():
                for parent in parents:
                    self.prepare(parent, anchor_rel)

        for row in rows:
            row_entities: list[Entity | None] = []
            for index, plan in enumerate(plans):
                if plan.parent_index is None:
                    entity = self.materialize(plan.entity_type, row, plan.prefix)
                    if entity is not None and owners is not None and anchor_rel is not None:
                        for parent in owners.get(row.get(OWNER_COLUMN), ()):
                            self.attach(parent, anchor_rel, entity)
                else:
                    parent = row_entities[plan.parent_index]
                    entity = None
                    if parent is not None:
                        assert plan.relationship is not None
                        self.prepare(parent, plan.relationship)
                        entity = self.materialize(plan.entity_type, row, plan.prefix)
                        if entity is not None:
                            self.attach(parent, plan.relationship, entity)

                row_entities.append(entity)
                if entity is not None:
                    seen[index].setdefault(entity.identity, entity)

        return [list(bucket.values()) for bucket in seen]
