"""Row layout plans.

Frozen dataclasses telling the GraphAssembler where each entity of a
statement's rows lives and how it hangs off its parent.
"""

from __future__ import annotations

from dataclasses import dataclass

from entity_graph.mapping.metadata import EntityType, Relationship


@dataclass(frozen=True)
class EntityPlan:
    """One entity slot of a statement row.

    ``parent_index`` points at an earlier slot of the same row. The first
    slot has no parent in the row; when the statement is scoped by owner
    values, ``relationship`` attaches it to the owners instead.
    """

    entity_type: EntityType
    prefix: str  # column alias prefix, e.g. "t1__"
    relationship: Relationship | None = None
    parent_index: int | None = None
