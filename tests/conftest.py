"""Shared test fixtures.

The university schema: departments with one-to-one details, courses with
reviews and a many-to-many enrollment of students, students with optional
profiles. Department.details and Student.profile are eager by default.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from entity_graph.core.connection import ConnectionConfig, ConnectionManager
from entity_graph.core.counter import RoundTripCounter
from entity_graph.core.engine import Engine
from entity_graph.core.enums import FetchPolicy
from entity_graph.core.settings import LoaderSettings
from entity_graph.mapping.builder import entity, schema
from entity_graph.mapping.metadata import Schema
from entity_graph.planner.planner import FetchPlanner

UNIVERSITY_DDL = """
CREATE TABLE departments (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    description TEXT
);
CREATE TABLE department_details (
    department_id INTEGER PRIMARY KEY REFERENCES departments(id),
    building TEXT,
    head_of_department TEXT
);
CREATE TABLE courses (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    credits INTEGER,
    department_id INTEGER NOT NULL REFERENCES departments(id)
);
CREATE TABLE students (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL
);
CREATE TABLE student_profiles (
    id INTEGER PRIMARY KEY,
    student_id INTEGER NOT NULL UNIQUE REFERENCES students(id),
    bio TEXT
);
CREATE TABLE course_students (
    course_id INTEGER NOT NULL REFERENCES courses(id),
    student_id INTEGER NOT NULL REFERENCES students(id),
    PRIMARY KEY (course_id, student_id)
);
CREATE TABLE reviews (
    id INTEGER PRIMARY KEY,
    rating INTEGER NOT NULL,
    comment TEXT,
    course_id INTEGER NOT NULL REFERENCES courses(id),
    student_id INTEGER REFERENCES students(id)
);
"""

# 3 departments with 4, 3 and 3 courses; details only for the first two
UNIVERSITY_SEED = """
INSERT INTO departments (id, name, description) VALUES
    (1, 'Computer Science', 'Computation and information'),
    (2, 'Mathematics', 'Numbers, quantities and shapes'),
    (3, 'Physics', NULL);
INSERT INTO department_details (department_id, building, head_of_department) VALUES
    (1, 'Turing Hall', 'Dr. Alan Smith'),
    (2, 'Euler Building', 'Dr. Maria Garcia');
INSERT INTO courses (id, title, credits, department_id) VALUES
    (1, 'Intro to Programming', 4, 1),
    (2, 'Data Structures', 4, 1),
    (3, 'Database Systems', 3, 1),
    (4, 'Machine Learning', 4, 1),
    (5, 'Calculus I', 4, 2),
    (6, 'Linear Algebra', 3, 2),
    (7, 'Statistics', 3, 2),
    (8, 'Classical Mechanics', 4, 3),
    (9, 'Electromagnetism', 4, 3),
    (10, 'Quantum Physics', 3, 3);
INSERT INTO students (id, name, email) VALUES
    (1, 'Alice', 'alice@example.com'),
    (2, 'Bob', 'bob@example.com'),
    (3, 'Carol', 'carol@example.com'),
    (4, 'Dave', 'dave@example.com'),
    (5, 'Eve', 'eve@example.com');
INSERT INTO student_profiles (id, student_id, bio) VALUES
    (1, 1, 'Likes compilers'),
    (2, 2, 'Likes proofs'),
    (3, 3, 'Likes lasers');
INSERT INTO course_students (course_id, student_id) VALUES
    (1, 1), (1, 2), (1, 3),
    (2, 2), (2, 3),
    (3, 1),
    (5, 4), (5, 5),
    (8, 1), (8, 5);
"""

# 20 reviews, two per course, spread over all five students
REVIEWS_SEED = "INSERT INTO reviews (id, rating, comment, course_id, student_id) VALUES " + (
    ", ".join(
        f"({i}, {1 + i % 5}, 'Review {i}', {1 + (i - 1) // 2}, {1 + (i - 1) % 5})"
        for i in range(1, 21)
    )
)


def university_schema() -> Schema:
    return schema(
        entity("Department", table="departments")
        .key("id")
        .columns("name", "description")
        .to_many("courses", "Course", mapped_by="department_id")
        .to_one("details", "DepartmentDetails", mapped_by="department_id", fetch=FetchPolicy.EAGER),
        entity("DepartmentDetails", table="department_details")
        .key("department_id")
        .columns("building", "head_of_department")
        .to_one("department", "Department", foreign_key="department_id", fetch=FetchPolicy.EAGER),
        entity("Course", table="courses")
        .key("id")
        .columns("title", "credits")
        .to_one("department", "Department", foreign_key="department_id")
        .to_many("reviews", "Review", mapped_by="course_id")
        .to_many("students", "Student", join_table=("course_students", "course_id", "student_id")),
        entity("Student", table="students")
        .key("id")
        .columns("name", "email")
        .to_one("profile", "StudentProfile", mapped_by="student_id", fetch=FetchPolicy.EAGER)
        .to_many("reviews", "Review", mapped_by="student_id")
        .to_many("courses", "Course", join_table=("course_students", "student_id", "course_id")),
        entity("StudentProfile", table="student_profiles")
        .key("id")
        .columns("bio")
        .to_one("student", "Student", foreign_key="student_id"),
        entity("Review", table="reviews")
        .key("id")
        .columns("rating", "comment")
        .to_one("course", "Course", foreign_key="course_id")
        .to_one("student", "Student", foreign_key="student_id"),
    )


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def university() -> Schema:
    return university_schema()


@pytest.fixture
def counter() -> RoundTripCounter:
    return RoundTripCounter()


@pytest.fixture
def settings() -> LoaderSettings:
    return LoaderSettings(
        max_in_params=500,
        raise_on_lazy_load=False,
        nplus1_warning_threshold=10,
    )


@pytest.fixture
def manager(sqlite_config: ConnectionConfig) -> Iterator[ConnectionManager]:
    """Seeded in-memory university database, created through a raw connection."""
    manager = ConnectionManager(sqlite_config)
    with manager.get_connection() as conn:
        conn.executescript(UNIVERSITY_DDL)
        conn.executescript(UNIVERSITY_SEED)
        conn.execute(REVIEWS_SEED)
        conn.commit()
    yield manager
    manager.close_pool()


@pytest.fixture
def engine(manager: ConnectionManager, counter: RoundTripCounter) -> Engine:
    return Engine(manager, counter)


@pytest.fixture
def planner(university: Schema, engine: Engine, settings: LoaderSettings) -> FetchPlanner:
    return FetchPlanner(university, engine, settings)
