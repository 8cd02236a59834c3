"""Materialized entities and relationship state.

A relationship on a materialized entity is either ``Loaded(value)`` or
``Deferred(handle)``. Resolving a Deferred value is an explicit call
(``Entity.load``); plain attribute or item access never touches the store.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union

from entity_graph.mapping.metadata import EntityType


@dataclass(frozen=True)
class Loaded:
    """Relationship value already present in memory."""

    value: Any


class Deferred:
    """Relationship not loaded yet.

    ``resolve()`` performs the load through the handle it was created with.
    """

    __slots__ = ("_loader", "description")

    def __init__(self, loader: Callable[[], Any], description: str) -> None:
        self._loader = loader
        self.description = description

    def resolve(self) -> Any:
        return self._loader()

    def __repr__(self) -> str:
        return f"Deferred({self.description})"


RelationState = Union[Loaded, Deferred]


class Entity:
    """One row of an entity type together with its relationship states."""

    __slots__ = ("_entity_type", "_values", "_relations")

    def __init__(self, entity_type: EntityType, values: dict[str, Any]) -> None:
        self._entity_type = entity_type
        self._values = values
        self._relations: dict[str, RelationState] = {}

    @property
    def entity_type(self) -> EntityType:
        return self._entity_type

    @property
    def type_name(self) -> str:
        return self._entity_type.name

    @property
    def key(self) -> Any:
        return self._values[self._entity_type.key]

    @property
    def identity(self) -> tuple[str, Any]:
        return self._entity_type.name, self.key

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, column: str) -> Any:
        return self._values[column]

    def get(self, column: str, default: Any = None) -> Any:
        return self._values.get(column, default)

    def state(self, name: str) -> RelationState:
        """Current state of relationship *name*."""
        try:
            return self._relations[name]
        except KeyError:
            raise KeyError(f"{self.type_name} has no relationship '{name}'") from None

    def is_loaded(self, name: str) -> bool:
        return isinstance(self.state(name), Loaded)

    def load(self, name: str) -> Any:
        """Return the value of relationship *name*, resolving it if deferred."""
        state = self.state(name)
        if isinstance(state, Loaded):
            return state.value
        return state.resolve()

    def set_state(self, name: str, state: RelationState) -> None:
        self._relations[name] = state

    def to_dict(self) -> dict[str, Any]:
        """Scalars plus loaded relationships, recursively.

        Deferred relationships are left out. An entity already being rendered
        higher up is rendered as its key only.
        """
        return self._render(set())

    def _render(self, stack: set[tuple[str, Any]]) -> dict[str, Any]:
        result = dict(self._values)
        stack = stack | {self.identity}
        for name, state in self._relations.items():
            if not isinstance(state, Loaded):
                continue
            value = state.value
            if isinstance(value, list):
                result[name] = [_render_related(item, stack) for item in value]
            elif value is None:
                result[name] = None
            else:
                result[name] = _render_related(value, stack)
        return result

    def __repr__(self) -> str:
        return f"<{self.type_name} {self.key!r}>"


def _render_related(entity: Entity, stack: set[tuple[str, Any]]) -> Any:
    if entity.identity in stack:
        return entity.key
    return entity._render(stack)
