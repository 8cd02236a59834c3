"""Merge groups and the Cartesian-product guard.

A merge group is the set of path nodes one statement can join without
multiplying rows across independent branches: any number of to-one edges,
but to-many edges only along a single ancestor chain. A to-many edge that
would open a second chain starts its own group, scoped later by the keys of
the parent entities loaded by an earlier group.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from entity_graph.core.exceptions import AmbiguousMergeError
from entity_graph.planner.paths import PathNode


@dataclass(eq=False)
class MergeGroup:
    """Path nodes resolved by one statement, anchor first, parents before children."""

    anchor: PathNode
    nodes: list[PathNode] = field(default_factory=list)

    @property
    def is_primary(self) -> bool:
        return self.anchor.is_root

    @property
    def collection_nodes(self) -> list[PathNode]:
        return [node for node in self.nodes if node.is_collection]

    @property
    def paths(self) -> list[str]:
        return [node.path for node in self.nodes if not node.is_root]

    def index_of(self, node: PathNode) -> int:
        for index, member in enumerate(self.nodes):
            if member is node:
                return index
        raise ValueError(f"'{node.path}' is not part of this group")


def partition(root: PathNode) -> list[MergeGroup]:
    """Split the path tree into merge groups in execution order.

    Each group runs after the group that loads its anchor's parent entities.
    """
    groups: list[MergeGroup] = []
    pending: deque[PathNode] = deque([root])

    while pending:
        anchor = pending.popleft()
        group = MergeGroup(anchor=anchor, nodes=[anchor])
        _collect(anchor, group, anchor if anchor.is_collection else None, pending)
        groups.append(group)

    for group in groups:
        check_group(group)
    return groups


def _collect(
    node: PathNode,
    group: MergeGroup,
    tip: PathNode | None,
    pending: deque[PathNode],
) -> PathNode | None:
    """Add *node*'s subtree to *group*; returns the deepest joined to-many edge."""
    for child in node.children.values():
        if not child.is_collection:
            group.nodes.append(child)
            tip = _collect(child, group, tip, pending)
        elif tip is None or tip is node or tip.is_ancestor_of(node):
            group.nodes.append(child)
            tip = _collect(child, group, child, pending)
        else:
            pending.append(child)
    return tip


def check_group(group: MergeGroup) -> None:
    """Assert a group is joinable without a cross product.

    Raises:
        AmbiguousMergeError: if a node is detached from the group or two
            to-many edges sit on independent branches.
    """
    members = set(group.nodes)
    for node in group.nodes[1:]:
        if node.parent not in members:
            raise AmbiguousMergeError(
                f"'{node.path}' is joined without its parent in the same statement"
            )

    chain = group.collection_nodes
    for upper, lower in zip(chain, chain[1:]):
        if not upper.is_ancestor_of(lower):
            raise AmbiguousMergeError(
                f"'{upper.path}' and '{lower.path}' are independent to-many branches "
                "and cannot share a statement"
            )
