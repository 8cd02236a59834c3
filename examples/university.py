"""
Shared setup for the examples: the university schema and a seeded
in-memory SQLite database.
"""

import logging

from entity_graph import (
    ConnectionConfig,
    Engine,
    FetchPolicy,
    RoundTripCounter,
    entity,
    get_settings,
    schema,
)

DDL = """
CREATE TABLE departments (id INTEGER PRIMARY KEY, name TEXT NOT NULL, description TEXT);
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
CREATE TABLE students (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT NOT NULL);
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

SEED = """
INSERT INTO departments VALUES
    (1, 'Computer Science', 'Study of computation and information'),
    (2, 'Mathematics', 'Study of numbers, quantities, and shapes'),
    (3, 'Physics', 'Study of matter, energy, and fundamental forces'),
    (4, 'Biology', 'Study of living organisms'),
    (5, 'Chemistry', 'Study of substances and their interactions');
INSERT INTO department_details VALUES
    (1, 'Turing Hall', 'Dr. Alan Smith'),
    (2, 'Euler Building', 'Dr. Maria Garcia'),
    (3, 'Newton Center', 'Dr. James Wilson'),
    (4, 'Darwin Lab', 'Dr. Sarah Chen'),
    (5, 'Curie Institute', 'Dr. Robert Kim');
INSERT INTO courses VALUES
    (1, 'Intro to Programming', 4, 1), (2, 'Data Structures', 4, 1),
    (3, 'Database Systems', 3, 1), (4, 'Machine Learning', 4, 1),
    (5, 'Calculus I', 4, 2), (6, 'Linear Algebra', 3, 2), (7, 'Statistics', 3, 2),
    (8, 'Classical Mechanics', 4, 3), (9, 'Electromagnetism', 4, 3),
    (10, 'Quantum Physics', 3, 3), (11, 'Cell Biology', 4, 4), (12, 'Genetics', 4, 4),
    (13, 'Ecology', 3, 4), (14, 'General Chemistry', 4, 5),
    (15, 'Organic Chemistry', 4, 5), (16, 'Biochemistry', 3, 5);
INSERT INTO students VALUES
    (1, 'Alice Johnson', 'alice@university.edu'),
    (2, 'Bob Williams', 'bob@university.edu'),
    (3, 'Charlie Brown', 'charlie@university.edu'),
    (4, 'Diana Prince', 'diana@university.edu'),
    (5, 'Eve Davis', 'eve@university.edu');
INSERT INTO course_students VALUES
    (1, 1), (1, 2), (1, 3), (2, 1), (2, 4), (3, 2), (5, 3), (5, 5),
    (6, 4), (8, 1), (8, 5), (11, 2), (12, 3), (14, 4), (15, 5);
INSERT INTO reviews VALUES
    (1, 5, 'Great intro!', 1, 1), (2, 4, 'Challenging but fun', 2, 1),
    (3, 5, 'Loved the SQL parts', 3, 2), (4, 3, 'Too fast paced', 4, 2),
    (5, 4, 'Solid fundamentals', 5, 3), (6, 5, 'Beautiful proofs', 6, 4),
    (7, 2, 'Dry lectures', 7, 5), (8, 5, 'Inspiring professor', 8, 1),
    (9, 4, 'Hard exams', 9, 3), (10, 3, 'Mind-bending', 10, 4),
    (11, 4, 'Fascinating', 11, 5), (12, 5, 'Excellent labs', 12, 2),
    (13, 4, 'Good fieldwork', 13, 3), (14, 3, 'Lots of memorizing', 14, 4),
    (15, 4, 'Fun reactions', 15, 5), (16, 5, 'Best course ever', 16, 1),
    (17, 4, 'Well organized', 1, 3), (18, 3, 'Okay', 2, 5),
    (19, 5, 'Clear explanations', 5, 4), (20, 4, 'Useful', 8, 2);
"""

UNIVERSITY = schema(
    entity("Department", table="departments")
    .key("id")
    .columns("name", "description")
    .to_many("courses", "Course", mapped_by="department_id")
    .to_one("details", "DepartmentDetails", mapped_by="department_id", fetch=FetchPolicy.EAGER),
    entity("DepartmentDetails", table="department_details")
    .key("department_id")
    .columns("building", "head_of_department")
    .to_one("department", "Department", foreign_key="department_id"),
    entity("Course", table="courses")
    .key("id")
    .columns("title", "credits")
    .to_one("department", "Department", foreign_key="department_id")
    .to_many("reviews", "Review", mapped_by="course_id")
    .to_many("students", "Student", join_table=("course_students", "course_id", "student_id")),
    entity("Student", table="students")
    .key("id")
    .columns("name", "email")
    .to_many("reviews", "Review", mapped_by="student_id")
    .to_many("courses", "Course", join_table=("course_students", "student_id", "course_id")),
    entity("Review", table="reviews")
    .key("id")
    .columns("rating", "comment")
    .to_one("course", "Course", foreign_key="course_id")
    .to_one("student", "Student", foreign_key="student_id"),
)


def configure_logging():
    """Configure logging from ENTITY_GRAPH_LOG_LEVEL (default WARNING)."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def create_engine(counter: RoundTripCounter) -> Engine:
    """Create a seeded in-memory database (one pooled connection)."""
    engine = Engine.from_config(
        ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1),
        counter,
    )
    with engine.connection_manager.get_connection() as conn:
        conn.executescript(DDL)
        conn.executescript(SEED)
        conn.commit()
    return engine
