"""Fetch planner.

Turns a root entity type and a set of relationship paths into a FetchPlan,
then executes it in the smallest number of statements that avoids Cartesian
products between independent to-many branches.

Example:
    planner = FetchPlanner(schema, engine)
    plan = planner.plan("Department", ["courses.students"])
    departments = planner.execute(plan, {"name": "Physics"})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from entity_graph.core.engine import Engine
from entity_graph.core.enums import FetchMode
from entity_graph.core.settings import LoaderSettings, get_settings
from entity_graph.mapping.entity import Entity
from entity_graph.mapping.metadata import EntityType, Schema
from entity_graph.planner.context import LoadContext
from entity_graph.planner.grouping import MergeGroup, partition
from entity_graph.planner.paths import PathNode, build_path_tree, order_paths
from entity_graph.planner.statements import render_filter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchPlan:
    """Immutable, validated description of one read.

    Built per call and discarded after the read.
    """

    root: EntityType
    paths: tuple[str, ...]
    mode: FetchMode
    tree: PathNode
    groups: tuple[MergeGroup, ...]

    @property
    def statement_count(self) -> int:
        """Statements dispatched when no group needs chunking."""
        return len(self.groups)

    @property
    def eager_paths(self) -> tuple[str, ...]:
        """Requested paths, their prefixes and expanded eager defaults."""
        return tuple(node.path for node in self.tree.walk() if not node.is_root)

    def describe(self) -> str:
        """One line per statement; eager defaults added in LOAD mode are marked."""
        lines = [f"{self.root.name} [{self.mode.value}]"]
        for index, group in enumerate(self.groups):
            label = "root" if group.is_primary else f"by {group.anchor.path}"
            paths = ", ".join(
                f"{node.path} (eager)" if node.implicit else node.path
                for node in group.nodes
                if not node.is_root
            )
            lines.append(f"  statement {index + 1} ({label}): {paths or '-'}")
        return "\n".join(lines)


class FetchPlanner:
    """Plans and executes entity graph reads.

    Args:
        schema: Validated entity type metadata.
        engine: Storage access layer; its counter sees every statement.
        settings: Loader settings, defaults to ``get_settings()``.
    """

    def __init__(
        self,
        schema: Schema,
        engine: Engine,
        settings: LoaderSettings | None = None,
    ) -> None:
        self._schema = schema
        self._engine = engine
        self._settings = settings if settings is not None else get_settings()

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def settings(self) -> LoaderSettings:
        return self._settings

    def plan(
        self,
        root: str | EntityType,
        paths: Iterable[str] | str = (),
        mode: FetchMode = FetchMode.FETCH,
    ) -> FetchPlan:
        """Validate *paths* against *root* and group them into statements.

        Raises:
            UnknownEntityTypeError: if *root* is not in the schema.
            InvalidPathError: naming the first unresolvable segment.
            AmbiguousMergeError: if grouping produced a Cartesian join.
        """
        root_type = root if isinstance(root, EntityType) else self._schema[root]
        ordered = order_paths(paths)
        tree = build_path_tree(self._schema, root_type, ordered, mode)
        groups = tuple(partition(tree))

        plan = FetchPlan(root=root_type, paths=ordered, mode=mode, tree=tree, groups=groups)
        logger.info(
            "Planned %s with %d path(s) in %s mode: %d statement(s)",
            root_type.name,
            len(ordered),
            mode.value,
            len(groups),
        )
        return plan

    def execute(
        self,
        plan: FetchPlan,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
    ) -> list[Entity]:
        """Run *plan* and return the distinct root entities in first-seen order.

        Raises:
            InvalidFilterError: before any statement is dispatched.
        """
        where = render_filter(plan.root, filter)
        context = LoadContext(self._schema, self._engine, self._settings)
        return context.run(plan, where)

    def load(
        self,
        root: str | EntityType,
        paths: Iterable[str] | str = (),
        mode: FetchMode = FetchMode.FETCH,
        filter: Mapping[str, Any] | None = None,  # noqa: A002
    ) -> list[Entity]:
        """Plan and execute in one call."""
        return self.execute(self.plan(root, paths, mode), filter)
