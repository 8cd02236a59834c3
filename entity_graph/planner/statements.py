"""SQL rendering for merge groups.

Every entity slot of a statement gets the alias ``t<n>`` and its columns come
back as ``t<n>__<column>``; link tables of many-to-many edges use ``j<n>``.
Identifiers come from validated metadata, values are always bound as
``:name`` parameters.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from entity_graph.core.counter import StatementShape
from entity_graph.core.enums import Ownership, StatementKind
from entity_graph.core.exceptions import InvalidFilterError
from entity_graph.core.params import expand_in_params
from entity_graph.mapping.aggregate import OWNER_COLUMN
from entity_graph.mapping.metadata import EntityType, Schema
from entity_graph.mapping.plan import EntityPlan
from entity_graph.planner.grouping import MergeGroup


@dataclass(frozen=True)
class Statement:
    """A rendered statement ready for ``Engine.fetch_all``."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)
    shape: StatementShape | None = None


def alias(index: int) -> str:
    return f"t{index}"


def prefix(index: int) -> str:
    return f"t{index}__"


def entity_plans(group: MergeGroup) -> list[EntityPlan]:
    """Row layout of a group's statement, one slot per node."""
    plans: list[EntityPlan] = []
    for index, node in enumerate(group.nodes):
        parent_index = None
        if index and node.parent is not None:
            parent_index = group.index_of(node.parent)
        plans.append(
            EntityPlan(
                entity_type=node.entity_type,
                prefix=prefix(index),
                relationship=node.relationship,
                parent_index=parent_index,
            )
        )
    return plans


@dataclass(frozen=True)
class Contains:
    """Root filter value matching columns that contain *text* (``LIKE``)."""

    text: str


def render_filter(
    root: EntityType,
    where: Mapping[str, Any] | None,
) -> tuple[str, dict[str, Any]] | None:
    """Compile a root filter into a WHERE clause on ``t0``.

    Scalars compare with ``=``, None with ``IS NULL``, lists, tuples and sets
    with ``IN`` and ``Contains`` with ``LIKE '%text%'``. An empty collection
    matches nothing. Parameters are named after the clause position, so
    column names never collide.

    Raises:
        InvalidFilterError: if a column is not selectable on *root*.
    """
    if not where:
        return None

    known = set(root.select_columns)
    clauses: list[str] = []
    params: dict[str, Any] = {}
    for position, (column, value) in enumerate(where.items()):
        if column not in known:
            raise InvalidFilterError(root.name, column)
        target = f"{alias(0)}.{column}"
        name = f"f{position}"
        if value is None:
            clauses.append(f"{target} IS NULL")
        elif isinstance(value, Contains):
            clauses.append(f"{target} LIKE :{name}")
            params[name] = f"%{value.text}%"
        elif isinstance(value, (list, tuple, set, frozenset)):
            values = sorted(value) if isinstance(value, (set, frozenset)) else list(value)
            if not values:
                clauses.append("1 = 0")
                continue
            placeholders, bound = expand_in_params(f"{name}_", values)
            clauses.append(f"{target} IN ({placeholders})")
            params.update(bound)
        else:
            clauses.append(f"{target} = :{name}")
            params[name] = value
    return " AND ".join(clauses), params


def _select_list(group: MergeGroup) -> list[str]:
    columns: list[str] = []
    for index, node in enumerate(group.nodes):
        for column in node.entity_type.select_columns:
            columns.append(f"{alias(index)}.{column} AS {prefix(index)}{column}")
    return columns


def _join_clauses(schema: Schema, group: MergeGroup, tables: list[str]) -> list[str]:
    """LEFT JOINs for every node after the group's anchor."""
    joins: list[str] = []
    for index, node in enumerate(group.nodes[1:], start=1):
        parent, rel = node.parent, node.relationship
        assert parent is not None and rel is not None
        parent_alias = alias(group.index_of(parent))
        target = node.entity_type
        local, remote = schema.join_columns(parent.entity_type, rel)

        if rel.ownership is Ownership.JOIN_TABLE:
            assert rel.join_table is not None
            link = f"j{index}"
            joins.append(
                f"LEFT JOIN {rel.join_table.table} {link} "
                f"ON {link}.{remote} = {parent_alias}.{local}"
            )
            joins.append(
                f"LEFT JOIN {target.table} {alias(index)} "
                f"ON {alias(index)}.{target.key} = {link}.{rel.join_table.target_column}"
            )
            tables.append(rel.join_table.table)
        else:
            joins.append(
                f"LEFT JOIN {target.table} {alias(index)} "
                f"ON {alias(index)}.{remote} = {parent_alias}.{local}"
            )
        tables.append(target.table)
    return joins


def _order_by(group: MergeGroup) -> list[str]:
    return [f"{alias(index)}.{node.entity_type.key}" for index, node in enumerate(group.nodes)]


def _shape(
    kind: StatementKind,
    sql: str,
    params: dict[str, Any],
    tables: list[str],
    joins: int,
) -> StatementShape:
    return StatementShape(
        kind=kind,
        tables=tuple(dict.fromkeys(tables)),
        join_count=joins,
        sql=sql,
        parameter_count=len(params),
    )


def render_primary(
    schema: Schema,
    group: MergeGroup,
    where: tuple[str, dict[str, Any]] | None = None,
) -> Statement:
    """Render the root statement of a plan."""
    root = group.anchor.entity_type
    tables = [root.table]
    joins = _join_clauses(schema, group, tables)
    params: dict[str, Any] = {}

    lines = [
        "SELECT " + ", ".join(_select_list(group)),
        f"FROM {root.table} {alias(0)}",
        *joins,
    ]
    if where is not None:
        clause, params = where
        lines.append(f"WHERE {clause}")
    lines.append("ORDER BY " + ", ".join(_order_by(group)))

    sql = "\n".join(lines)
    return Statement(sql, params, _shape(StatementKind.ROOT, sql, params, tables, len(joins)))


def render_scoped(
    schema: Schema,
    group: MergeGroup,
    owner_values: Sequence[Any],
    kind: StatementKind = StatementKind.BATCH,
) -> Statement:
    """Render a statement loading a group for a set of parent join values.

    The parent-side join value of every row is returned as ``__owner`` so the
    rows can be spliced onto the parent entities.
    """
    anchor = group.anchor
    rel = anchor.relationship
    parent = anchor.parent
    if rel is None or parent is None:
        raise ValueError("A scoped statement needs a relationship anchor")

    target = anchor.entity_type
    _, remote = schema.join_columns(parent.entity_type, rel)
    tables: list[str] = []
    source: list[str] = []

    if rel.ownership is Ownership.JOIN_TABLE:
        assert rel.join_table is not None
        owner = f"j0.{remote}"
        source.append(f"FROM {rel.join_table.table} j0")
        source.append(
            f"JOIN {target.table} {alias(0)} "
            f"ON {alias(0)}.{target.key} = j0.{rel.join_table.target_column}"
        )
        tables.append(rel.join_table.table)
    else:
        owner = f"{alias(0)}.{remote}"
        source.append(f"FROM {target.table} {alias(0)}")
    tables.append(target.table)

    joins = _join_clauses(schema, group, tables)
    placeholders, params = expand_in_params("k", owner_values)

    lines = [
        "SELECT " + ", ".join([f"{owner} AS {OWNER_COLUMN}", *_select_list(group)]),
        *source,
        *joins,
        f"WHERE {owner} IN ({placeholders})",
        "ORDER BY " + ", ".join([owner, *_order_by(group)]),
    ]
    sql = "\n".join(lines)
    join_count = len(joins) + len(source) - 1
    return Statement(sql, params, _shape(kind, sql, params, tables, join_count))
