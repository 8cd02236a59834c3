"""
Example 01: The N+1 Problem

Loads departments with and without a fetch plan and prints the round trips
each approach costs.
"""

from entity_graph import FetchPlanner, RoundTripCounter, StatementKind

from university import UNIVERSITY, configure_logging, create_engine


def main():
    configure_logging()
    counter = RoundTripCounter()
    engine = create_engine(counter)
    planner = FetchPlanner(UNIVERSITY, engine)

    print("=== Without a fetch plan ===")
    counter.reset()
    for department in planner.load("Department"):
        titles = [course["title"] for course in department.load("courses")]
        print(f"  {department['name']}: {len(titles)} courses")
    print(f"Round trips: {counter.count()} "
          f"(1 root + {counter.count(StatementKind.LAZY)} lazy loads)")

    print("\n=== With a fetch plan ===")
    counter.reset()
    for department in planner.load("Department", ["courses"]):
        titles = [course["title"] for course in department.load("courses")]
        print(f"  {department['name']}: {len(titles)} courses")
    print(f"Round trips: {counter.count()}")

    print("\n=== Reviews with course and student ===")
    counter.reset()
    for review in planner.load("Review"):
        review.load("course")
        review.load("student")
    print(f"Without plan: {counter.count()} round trips")

    counter.reset()
    planner.load("Review", ["course", "student"])
    print(f"With plan:    {counter.count()} round trip")

    engine.connection_manager.close_pool()


if __name__ == "__main__":
    main()
