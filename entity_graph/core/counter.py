"""Round-trip instrumentation.

The counter is a passive observer: the Engine reports every statement it
dispatches, and callers read the tally between two checkpoints. It never
issues, reorders or suppresses a statement.
"""

from __future__ import annotations

from dataclasses import dataclass

from entity_graph.core.enums import StatementKind


@dataclass(frozen=True)
class StatementShape:
    """What a dispatched statement looked like, without its parameter values."""

    kind: StatementKind
    tables: tuple[str, ...]
    join_count: int
    sql: str = ""
    parameter_count: int = 0
    row_count: int | None = None  # None when the store raised


@dataclass(frozen=True)
class RoundTripRecord:
    """Immutable snapshot of a counter."""

    count: int
    statements: tuple[StatementShape, ...]

    def by_kind(self, kind: StatementKind) -> tuple[StatementShape, ...]:
        return tuple(shape for shape in self.statements if shape.kind is kind)


class RoundTripCounter:
    """Counts and classifies statements issued since the last reset.

    One instance per measured unit of work. Instances are not safe to share
    between concurrently running units.
    """

    def __init__(self) -> None:
        self._count = 0
        self._log: list[StatementShape] = []

    def reset(self) -> None:
        """Zero the tally and clear the statement log."""
        self._count = 0
        self._log.clear()

    def record_statement(self, shape: StatementShape) -> None:
        """Called by the storage-access layer once per dispatched statement."""
        self._count += 1
        self._log.append(shape)

    def count(self, kind: StatementKind | None = None) -> int:
        """Statements recorded since the last reset, optionally of one kind."""
        if kind is None:
            return self._count
        return sum(1 for shape in self._log if shape.kind is kind)

    @property
    def statements(self) -> tuple[StatementShape, ...]:
        return tuple(self._log)

    def snapshot(self) -> RoundTripRecord:
        return RoundTripRecord(count=self._count, statements=tuple(self._log))

    def __len__(self) -> int:
        return self._count
