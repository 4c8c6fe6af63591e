"""Example pipeline: explain why a layout cannot be satisfied."""

from layout_ir import (
    AlignmentConstraint,
    CyclicConstraint,
    LayoutProblem,
    Node,
    SourceGroup,
    TopConstraint,
    format_conflict_table,
    solve_layout,
)


def main() -> None:
    problem = LayoutProblem(
        nodes=[Node(node_id) for node_id in ("A", "B", "C", "D")],
        required=[
            SourceGroup("A, B and C share a row", (AlignmentConstraint("y", "A", "B"), AlignmentConstraint("y", "B", "C"))),
            SourceGroup("A above D", (TopConstraint("A", "D"),)),
        ],
        cyclic=[CyclicConstraint((("A", "B", "C"),), label="ring A-B-C")],
    )
    result = solve_layout(problem)
    print(f"Status: {result.status}")
    if result.conflict:
        print(format_conflict_table(result.conflict))


if __name__ == "__main__":
    main()
