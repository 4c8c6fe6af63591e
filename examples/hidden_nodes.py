"""Example pipeline: load a JSON problem that hides a node and report the drops."""

from pathlib import Path

from layout_ir import format_conflict_table, format_positions, load_problem_file, solve_layout

PROBLEM = Path(__file__).with_name("problem.json")


def main() -> None:
    problem = load_problem_file(PROBLEM)
    result = solve_layout(problem)
    print(f"Status: {result.status}")
    print(format_positions(result.positions(), problem.node_map()))
    if result.dropped:
        print("Dropped:")
        print(format_conflict_table(result.dropped))


if __name__ == "__main__":
    main()
