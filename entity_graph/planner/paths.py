"""Relationship path parsing and the path tree.

``"courses.students"`` resolves segment by segment against the schema; the
resolved paths of one plan are merged into a tree rooted at the query's root
entity type. Every path implies its prefixes.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from entity_graph.core.enums import FetchMode, FetchPolicy
from entity_graph.core.exceptions import InvalidPathError
from entity_graph.mapping.metadata import EntityType, Relationship, Schema


@dataclass(eq=False)
class PathNode:
    """One resolved relationship edge, or the root when ``relationship`` is None."""

    entity_type: EntityType
    relationship: Relationship | None = None
    parent: PathNode | None = None
    path: str = ""
    implicit: bool = False  # added by an eager default, not requested
    children: dict[str, PathNode] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.relationship is None

    @property
    def is_collection(self) -> bool:
        return self.relationship is not None and self.relationship.is_collection

    def ancestors(self) -> Iterator[PathNode]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def is_ancestor_of(self, other: PathNode) -> bool:
        return any(node is self for node in other.ancestors())

    def walk(self) -> Iterator[PathNode]:
        """Pre-order traversal, self first."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def add_child(self, rel: Relationship, target: EntityType, *, implicit: bool) -> PathNode:
        node = self.children.get(rel.name)
        if node is None:
            path = rel.name if self.is_root else f"{self.path}.{rel.name}"
            node = PathNode(
                entity_type=target,
                relationship=rel,
                parent=self,
                path=path,
                implicit=implicit,
            )
            self.children[rel.name] = node
        elif not implicit:
            node.implicit = False
        return node


def order_paths(paths: Iterable[str] | str) -> tuple[str, ...]:
    """Deduplicate paths; unordered collections are sorted for stable plans."""
    if isinstance(paths, str):
        return (paths,)
    if isinstance(paths, (set, frozenset)):
        return tuple(sorted(paths))
    return tuple(dict.fromkeys(paths))


def build_path_tree(
    schema: Schema,
    root: EntityType,
    paths: Iterable[str],
    mode: FetchMode,
) -> PathNode:
    """Resolve every path against *schema* and merge them into one tree.

    Raises:
        InvalidPathError: naming the first segment that does not resolve.
    """
    tree = PathNode(entity_type=root)
    for path in paths:
        node = tree
        for segment in (part.strip() for part in path.split(".")):
            rel = node.entity_type.relationship(segment) if segment else None
            if rel is None:
                raise InvalidPathError(path, segment, node.entity_type.name)
            node = node.add_child(rel, schema.target_of(rel), implicit=False)

    if mode is FetchMode.LOAD:
        _expand_eager_defaults(schema, tree)
    return tree


def _expand_eager_defaults(schema: Schema, node: PathNode) -> None:
    """Add eager-by-default relationships below *node*, recursively.

    Never re-enters an entity type already on the chain from the root, so
    eager cycles terminate.
    """
    chain = {node.entity_type.name, *(a.entity_type.name for a in node.ancestors())}
    for rel in node.entity_type.relationships.values():
        if rel.fetch is not FetchPolicy.EAGER or rel.name in node.children:
            continue
        if rel.target in chain:
            continue
        node.add_child(rel, schema.target_of(rel), implicit=True)

    for child in list(node.children.values()):
        _expand_eager_defaults(schema, child)
