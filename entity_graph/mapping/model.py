"""Entity-to-model projection.

Supports dataclasses, Pydantic models, and plain classes. Only the loaded part
of an entity graph is projected; deferred relationships are never resolved.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from entity_graph.core.exceptions import ColumnMismatchError
from entity_graph.mapping.entity import Entity

T = TypeVar("T")


def _is_pydantic_model(cls: type) -> bool:
    return isinstance(cls, type) and issubclass(cls, BaseModel)


class ModelMapper(Generic[T]):
    """Projects entities (or plain dicts) onto a target class.

    Detection order:
    1. Pydantic BaseModel -> model_validate(data); nested models validate
       the loaded relationships, extra keys are left to the model config.
    2. dataclass -> target_class(**data), keys outside the fields dropped
    3. Plain class -> target_class(**data)

    Args:
        target_class: The class to construct.
        aliases: Optional attribute-name to field-name mapping.
    """

    def __init__(
        self,
        target_class: type[T],
        aliases: dict[str, str] | None = None,
    ) -> None:
        self._target_class = target_class
        self._aliases = aliases
        self._is_pydantic = _is_pydantic_model(target_class)
        self._is_dataclass = dataclasses.is_dataclass(target_class)

    def _apply_aliases(self, data: dict[str, Any]) -> dict[str, Any]:
        if not self._aliases:
            return data
        return {self._aliases.get(key, key): value for key, value in data.items()}

    def _dataclass_fields(self, data: dict[str, Any]) -> dict[str, Any]:
        names = {f.name for f in dataclasses.fields(self._target_class)}  # type: ignore[arg-type]
        return {key: value for key, value in data.items() if key in names}

    def map_one(self, source: Entity | dict[str, Any]) -> T:
        """Project a single entity or dict onto a target_class instance."""
        data = source.to_dict() if isinstance(source, Entity) else dict(source)
        data = self._apply_aliases(data)

        if self._is_pydantic:
            try:
                return self._target_class.model_validate(data)  # type: ignore[attr-defined, no-any-return]
            except ValidationError as e:
                missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
                raise ColumnMismatchError(self._target_class.__name__, missing) from e

        if self._is_dataclass:
            data = self._dataclass_fields(data)

        try:
            return self._target_class(**data)
        except TypeError as e:
            raise ColumnMismatchError(self._target_class.__name__, [str(e)]) from e

    def map_many(self, sources: Iterable[Entity | dict[str, Any]]) -> list[T]:
        """Map all sources via map_one."""
        return [self.map_one(source) for source in sources]
