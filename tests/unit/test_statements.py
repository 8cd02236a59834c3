"""Unit tests for SQL rendering of merge groups."""

from __future__ import annotations

import pytest

from entity_graph.core.enums import FetchMode, StatementKind
from entity_graph.core.exceptions import InvalidFilterError
from entity_graph.mapping.metadata import Schema
from entity_graph.planner.grouping import MergeGroup, partition
from entity_graph.planner.paths import build_path_tree
from entity_graph.planner.statements import (
    Contains,
    entity_plans,
    render_filter,
    render_primary,
    render_scoped,
)


def _groups(university: Schema, root: str, *paths: str) -> list[MergeGroup]:
    return partition(build_path_tree(university, university[root], paths, FetchMode.FETCH))


class TestRenderPrimary:
    def test_root_only(self, university: Schema) -> None:
        (group,) = _groups(university, "Department")
        statement = render_primary(university, group)

        assert statement.sql == (
            "SELECT t0.id AS t0__id, t0.name AS t0__name, t0.description AS t0__description\n"
            "FROM departments t0\n"
            "ORDER BY t0.id"
        )
        assert statement.params == {}
        assert statement.shape is not None
        assert statement.shape.kind is StatementKind.ROOT
        assert statement.shape.tables == ("departments",)
        assert statement.shape.join_count == 0

    def test_one_to_many_left_join(self, university: Schema) -> None:
        (group,) = _groups(university, "Department", "courses")
        statement = render_primary(university, group)

        assert "LEFT JOIN courses t1 ON t1.department_id = t0.id" in statement.sql
        assert "t1.department_id AS t1__department_id" in statement.sql
        assert statement.sql.endswith("ORDER BY t0.id, t1.id")
        assert statement.shape.join_count == 1

    def test_many_to_one_left_join(self, university: Schema) -> None:
        (group,) = _groups(university, "Review", "course")
        statement = render_primary(university, group)
        assert "LEFT JOIN courses t1 ON t1.id = t0.course_id" in statement.sql

    def test_many_to_many_joins_link_table(self, university: Schema) -> None:
        (group,) = _groups(university, "Course", "students")
        statement = render_primary(university, group)

        assert "LEFT JOIN course_students j1 ON j1.course_id = t0.id" in statement.sql
        assert "LEFT JOIN students t1 ON t1.id = j1.student_id" in statement.sql
        assert statement.shape.tables == ("courses", "course_students", "students")
        assert statement.shape.join_count == 2

    def test_nested_aliases_point_at_parent(self, university: Schema) -> None:
        (group,) = _groups(university, "Department", "courses.reviews.student")
        statement = render_primary(university, group)

        assert "LEFT JOIN reviews t2 ON t2.course_id = t1.id" in statement.sql
        assert "LEFT JOIN students t3 ON t3.id = t2.student_id" in statement.sql

    def test_where_clause(self, university: Schema) -> None:
        (group,) = _groups(university, "Department")
        where = render_filter(university["Department"], {"name": "Physics"})
        statement = render_primary(university, group, where)

        assert "WHERE t0.name = :f0" in statement.sql
        assert statement.params == {"f0": "Physics"}
        assert statement.shape.parameter_count == 1


class TestRenderScoped:
    def test_one_to_many_scope(self, university: Schema) -> None:
        (_, group) = _groups(university, "Course", "students", "reviews")
        statement = render_scoped(university, group, [1, 2])

        assert statement.sql == (
            "SELECT t0.course_id AS __owner, t0.id AS t0__id, t0.rating AS t0__rating, "
            "t0.comment AS t0__comment, t0.course_id AS t0__course_id, "
            "t0.student_id AS t0__student_id\n"
            "FROM reviews t0\n"
            "WHERE t0.course_id IN (:k0, :k1)\n"
            "ORDER BY t0.course_id, t0.id"
        )
        assert statement.params == {"k0": 1, "k1": 2}
        assert statement.shape.kind is StatementKind.BATCH

    def test_many_to_many_scope(self, university: Schema) -> None:
        (_, group) = _groups(university, "Course", "reviews", "students")
        statement = render_scoped(university, group, [4])

        assert "j0.course_id AS __owner" in statement.sql
        assert "FROM course_students j0\nJOIN students t0 ON t0.id = j0.student_id" in statement.sql
        assert "WHERE j0.course_id IN (:k0)" in statement.sql
        assert statement.shape.tables == ("course_students", "students")
        assert statement.shape.join_count == 1

    def test_scope_joins_subtree(self, university: Schema) -> None:
        (_, group) = _groups(university, "Department", "courses.students", "courses.reviews.student")
        statement = render_scoped(university, group, [1])

        assert group.anchor.path == "courses.reviews"
        assert "LEFT JOIN students t1 ON t1.id = t0.student_id" in statement.sql

    def test_lazy_kind(self, university: Schema) -> None:
        (_, group) = _groups(university, "Course", "students", "reviews")
        statement = render_scoped(university, group, [1], kind=StatementKind.LAZY)
        assert statement.shape.kind is StatementKind.LAZY

    def test_primary_group_cannot_be_scoped(self, university: Schema) -> None:
        (group,) = _groups(university, "Course")
        with pytest.raises(ValueError):
            render_scoped(university, group, [1])


class TestEntityPlans:
    def test_parent_indexes(self, university: Schema) -> None:
        (group,) = _groups(university, "Department", "courses.reviews", "details")
        plans = entity_plans(group)

        assert [p.prefix for p in plans] == ["t0__", "t1__", "t2__", "t3__"]
        assert [p.parent_index for p in plans] == [None, 0, 1, 0]
        assert plans[0].relationship is None


class TestRenderFilter:
    def test_none_without_filter(self, university: Schema) -> None:
        assert render_filter(university["Course"], None) is None
        assert render_filter(university["Course"], {}) is None

    def test_combined_clauses(self, university: Schema) -> None:
        clause, params = render_filter(
            university["Course"], {"id": [1, 2], "department_id": 3, "credits": None}
        )

        assert clause == (
            "t0.id IN (:f0_0, :f0_1) AND t0.department_id = :f1 "
            "AND t0.credits IS NULL"
        )
        assert params == {"f0_0": 1, "f0_1": 2, "f1": 3}

    def test_set_values_are_sorted(self, university: Schema) -> None:
        _, params = render_filter(university["Course"], {"id": {3, 1}})
        assert params == {"f0_0": 1, "f0_1": 3}

    def test_parameter_names_never_collide(self, university: Schema) -> None:
        # "title" expands to f0_0, f0_1; "credits" must not reuse either name
        clause, params = render_filter(
            university["Course"], {"title": ["Calculus I", "Statistics"], "credits": 4}
        )

        assert clause == "t0.title IN (:f0_0, :f0_1) AND t0.credits = :f1"
        assert params == {"f0_0": "Calculus I", "f0_1": "Statistics", "f1": 4}
        assert len(params) == 3

    def test_contains_compiles_to_like(self, university: Schema) -> None:
        clause, params = render_filter(university["Department"], {"name": Contains("Sci")})

        assert clause == "t0.name LIKE :f0"
        assert params == {"f0": "%Sci%"}

    def test_empty_collection_matches_nothing(self, university: Schema) -> None:
        assert render_filter(university["Course"], {"id": []}) == ("1 = 0", {})

    def test_unknown_column(self, university: Schema) -> None:
        with pytest.raises(InvalidFilterError, match="budget"):
            render_filter(university["Course"], {"budget": 1})

    def test_relationship_name_is_not_a_column(self, university: Schema) -> None:
        with pytest.raises(InvalidFilterError):
            render_filter(university["Course"], {"reviews": 1})
