"""Execution context of one ``FetchPlanner.execute`` call.

Owns the identity map shared by every statement of the call, including the
lazy loads later triggered through the Deferred handles it hands out.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from entity_graph.core.engine import Engine
from entity_graph.core.enums import StatementKind
from entity_graph.core.exceptions import LazyLoadForbiddenError
from entity_graph.core.settings import LoaderSettings
from entity_graph.mapping.aggregate import GraphAssembler
from entity_graph.mapping.entity import Deferred, Entity, Loaded
from entity_graph.mapping.metadata import Relationship, Schema
from entity_graph.planner.grouping import MergeGroup
from entity_graph.planner.paths import PathNode
from entity_graph.planner.statements import (
    Statement,
    entity_plans,
    render_primary,
    render_scoped,
)

if TYPE_CHECKING:
    from entity_graph.planner.planner import FetchPlan

logger = logging.getLogger(__name__)


class LoadContext:
    """Runs the statements of one plan and resolves its lazy handles.

    Args:
        schema: Entity type metadata.
        engine: Storage access; every statement goes through ``fetch_all``.
        settings: Loader settings (chunk size, lazy-load policy, warnings).
    """

    def __init__(self, schema: Schema, engine: Engine, settings: LoaderSettings) -> None:
        self._schema = schema
        self._engine = engine
        self._settings = settings
        self._assembler = GraphAssembler(self._deferred)
        self._node_entities: dict[PathNode, dict[tuple[str, Any], Entity]] = {}
        self._lazy_loads: Counter[str] = Counter()

    def run(self, plan: FetchPlan, where: tuple[str, dict[str, Any]] | None) -> list[Entity]:
        """Execute every merge group of *plan*, primary first."""
        primary, *secondary = plan.groups
        statement = render_primary(self._schema, primary, where)
        rows = self._dispatch(statement)
        slots = self._assembler.assemble(rows, entity_plans(primary))
        self._remember(primary, slots)

        for group in secondary:
            self._run_scoped(group)

        return slots[0]

    def _run_scoped(self, group: MergeGroup) -> None:
        anchor = group.anchor
        parent_node, rel = anchor.parent, anchor.relationship
        assert parent_node is not None and rel is not None

        parents = self._node_entities.get(parent_node, {}).values()
        owners = self._owners(parents, rel)
        if not owners:
            logger.debug("Skipping '%s': no parent entities to scope by", anchor.path)
            return

        chunk_size = self._settings.max_in_params
        values = list(owners)
        plans = entity_plans(group)
        for start in range(0, len(values), chunk_size):
            chunk = values[start : start + chunk_size]
            statement = render_scoped(self._schema, group, chunk)
            rows = self._dispatch(statement)
            slots = self._assembler.assemble(
                rows, plans, owners={value: owners[value] for value in chunk}
            )
            self._remember(group, slots)

    def _owners(self, parents: Any, rel: Relationship) -> dict[Any, list[Entity]]:
        """Group parent entities by their join value.

        Parents with a NULL join value have nothing to load: the relationship
        is marked loaded and empty right away.
        """
        owners: dict[Any, list[Entity]] = {}
        for parent in parents:
            local, _ = self._schema.join_columns(parent.entity_type, rel)
            value = parent.get(local)
            if value is None:
                self._assembler.prepare(parent, rel)
                continue
            owners.setdefault(value, []).append(parent)
        return owners

    def _remember(self, group: MergeGroup, slots: Sequence[list[Entity]]) -> None:
        for node, entities in zip(group.nodes, slots, strict=True):
            bucket = self._node_entities.setdefault(node, {})
            for entity in entities:
                bucket.setdefault(entity.identity, entity)

    def _dispatch(self, statement: Statement) -> list[dict[str, Any]]:
        return self._engine.fetch_all(statement.sql, statement.params, shape=statement.shape)

    # --- Lazy loading ---

    def _deferred(self, entity: Entity, rel: Relationship) -> Deferred:
        return Deferred(
            lambda: self._lazy_load(entity, rel),
            f"{entity.type_name}.{rel.name} of {entity.key!r}",
        )

    def _lazy_load(self, entity: Entity, rel: Relationship) -> Any:
        """Resolve one deferred relationship with a single LAZY statement."""
        state = entity.state(rel.name)
        if isinstance(state, Loaded):
            return state.value

        owners = self._owners([entity], rel)
        if not owners:
            return entity.state(rel.name).value

        if self._settings.raise_on_lazy_load:
            raise LazyLoadForbiddenError(entity.type_name, rel.name)

        self._track_lazy_load(entity.type_name, rel.name)

        parent_node = PathNode(entity_type=entity.entity_type)
        anchor = parent_node.add_child(rel, self._schema.target_of(rel), implicit=False)
        group = MergeGroup(anchor=anchor, nodes=[anchor])

        statement = render_scoped(self._schema, group, list(owners), kind=StatementKind.LAZY)
        rows = self._dispatch(statement)
        self._assembler.assemble(rows, entity_plans(group), owners=owners)
        return entity.state(rel.name).value

    def _track_lazy_load(self, type_name: str, name: str) -> None:
        attribute = f"{type_name}.{name}"
        self._lazy_loads[attribute] += 1
        threshold = self._settings.nplus1_warning_threshold
        if threshold and self._lazy_loads[attribute] == threshold:
            logger.warning(
                "N+1 loading detected: %s lazily loaded for %d instances. "
                "Add '%s' to the fetch plan to load it in one statement.",
                attribute,
                threshold,
                name,
            )
