from layout_ir.constraints import AlignmentConstraint, LeftConstraint, TopConstraint
from layout_ir.solver.alignment import alignment_classes, implicit_order_constraints


def test_classes_are_transitive_per_axis():
    classes = alignment_classes(
        [
            AlignmentConstraint('y', 'C', 'B'),
            AlignmentConstraint('y', 'B', 'A'),
            AlignmentConstraint('x', 'D', 'E'),
            LeftConstraint('A', 'D'),
        ]
    )

    assert classes == {'x': [['D', 'E']], 'y': [['A', 'B', 'C']]}


def test_rows_are_ordered_by_solved_x_and_columns_by_solved_y():
    constraints = [AlignmentConstraint('y', 'A', 'B'), AlignmentConstraint('x', 'C', 'D')]
    positions = {'A': (50.0, 0.0), 'B': (10.0, 0.0), 'C': (0.0, 9.0), 'D': (0.0, -3.0)}

    implicit = implicit_order_constraints(constraints, positions, 20.0)

    assert implicit == [LeftConstraint('B', 'A', 20.0), TopConstraint('D', 'C', 20.0)]


def test_ties_fall_back_to_node_id():
    implicit = implicit_order_constraints(
        [AlignmentConstraint('y', 'B', 'A')], {'A': (0.0, 0.0), 'B': (0.0, 0.0)}
    )

    assert implicit == [LeftConstraint('A', 'B', 15.0)]


def test_no_alignments_means_no_implicit_constraints():
    assert implicit_order_constraints([LeftConstraint('A', 'B')], {'A': (0.0, 0.0), 'B': (20.0, 0.0)}) == []
