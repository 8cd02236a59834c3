"""Repository base class.

Thin wrapper over FetchPlanner for DDD-oriented usage: subclasses name the
entity type once and expose intention-revealing finders.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from entity_graph.core.enums import FetchMode
from entity_graph.mapping.entity import Entity
from entity_graph.mapping.metadata import EntityType
from entity_graph.planner.planner import FetchPlanner


class Repository:
    """Base repository for one root entity type.

    Subclasses set ``entity_name`` or pass it to the constructor, and define
    concrete finders that delegate to ``find_all``/``find_by_key``.
    """

    entity_name: str | None = None

    def __init__(self, planner: FetchPlanner, entity_name: str | None = None) -> None:
        self.planner = planner
        name = entity_name or self.entity_name
        if name is None:
            raise ValueError(f"{type(self).__name__} needs an entity_name")
        self.entity_type: EntityType = planner.schema[name]

    def find_all(
        self,
        *paths: str,
        mode: FetchMode = FetchMode.FETCH,
        where: Mapping[str, Any] | None = None,
    ) -> list[Entity]:
        """All root entities matching *where*, with *paths* loaded eagerly."""
        plan = self.planner.plan(self.entity_type, paths, mode)
        return self.planner.execute(plan, where)

    def find_by_key(
        self,
        key: Any,
        *paths: str,
        mode: FetchMode = FetchMode.FETCH,
    ) -> Entity | None:
        """The entity with primary key *key*, or None."""
        found = self.find_all(*paths, mode=mode, where={self.entity_type.key: key})
        return found[0] if found else None
