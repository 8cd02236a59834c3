"""
Example 02: Fetch Plans

Shows how sibling collections are split to avoid a Cartesian product, how
FETCH and LOAD treat eager defaults, and what each statement looked like.
"""

from entity_graph import FetchMode, FetchPlanner, LoaderSettings, RoundTripCounter

from university import UNIVERSITY, configure_logging, create_engine


def main():
    configure_logging()
    counter = RoundTripCounter()
    engine = create_engine(counter)
    planner = FetchPlanner(UNIVERSITY, engine, LoaderSettings(max_in_params=5))

    plan = planner.plan("Course", ["reviews.student", "students"])
    print(plan.describe())

    courses = planner.execute(plan)
    print(f"\nLoaded {len(courses)} courses in {counter.count()} statements:")
    for shape in counter.statements:
        print(f"  {shape.kind.value:<5} tables={','.join(shape.tables)} "
              f"joins={shape.join_count} rows={shape.row_count}")

    print("\n=== FETCH vs LOAD ===")
    for mode in (FetchMode.FETCH, FetchMode.LOAD):
        counter.reset()
        department = planner.load("Department", ["courses"], mode, filter={"id": 1})[0]
        state = type(department.state("details")).__name__
        print(f"  {mode.value}: details is {state}, {counter.count()} statement(s)")

    engine.connection_manager.close_pool()


if __name__ == "__main__":
    main()
