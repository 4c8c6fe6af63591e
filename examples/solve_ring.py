"""Example pipeline: arrange four nodes on a ring next to a group and solve."""

from layout_ir import (
    CyclicConstraint,
    Group,
    LayoutProblem,
    LeftConstraint,
    Node,
    SourceGroup,
    format_positions,
    solve_layout,
)


def main() -> None:
    problem = LayoutProblem(
        nodes=[Node(node_id) for node_id in ("A", "B", "C", "D", "E", "F")],
        required=[SourceGroup("E left of F", (LeftConstraint("E", "F"),))],
        cyclic=[CyclicConstraint((("A", "B", "C", "D"),), "clockwise", label="ring A-B-C-D")],
        groups=[Group("pair", ("E", "F"))],
    )
    result = solve_layout(problem)
    print(f"Status: {result.status}")
    for choice in result.chosen_alternatives or []:
        print(f"  {choice.source}: alternative {choice.alternative_index}")
    print(format_positions(result.normalized_positions()))
    print(f"Group boxes: {result.group_boxes()}")


if __name__ == "__main__":
    main()
