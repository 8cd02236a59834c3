"""
Example 03: Repository Pattern

Named finders on top of the planner, projection onto Pydantic models and
refusing lazy loads outright.
"""

from pydantic import BaseModel

from entity_graph import (
    FetchPlanner,
    LazyLoadForbiddenError,
    LoaderSettings,
    ModelMapper,
    Repository,
    RoundTripCounter,
)

from university import UNIVERSITY, configure_logging, create_engine


class StudentSummary(BaseModel):
    id: int
    name: str


class CourseSummary(BaseModel):
    id: int
    title: str
    students: list[StudentSummary]


class CourseRepository(Repository):
    entity_name = "Course"

    def find_all_with_students(self):
        return self.find_all("students")

    def find_with_reviews_and_students(self, course_id: int):
        return self.find_by_key(course_id, "reviews.student", "students")


def main():
    configure_logging()
    counter = RoundTripCounter()
    engine = create_engine(counter)
    planner = FetchPlanner(UNIVERSITY, engine, LoaderSettings(raise_on_lazy_load=True))
    courses = CourseRepository(planner)

    summaries = ModelMapper(CourseSummary).map_many(courses.find_all_with_students())
    for summary in summaries[:3]:
        print(f"{summary.title}: {[s.name for s in summary.students]}")
    print(f"Round trips: {counter.count()}")

    course = courses.find_with_reviews_and_students(1)
    for review in course.load("reviews"):
        print(f"  {review['rating']}/5 by {review.load('student')['name']}")

    try:
        course.load("department")
    except LazyLoadForbiddenError as e:
        print(f"Refused: {e}")

    engine.connection_manager.close_pool()


if __name__ == "__main__":
    main()
