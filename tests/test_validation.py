import pytest

from layout_ir.constraints import (
    AlignmentConstraint,
    BoundingBoxConstraint,
    CyclicConstraint,
    Disjunction,
    Group,
    GroupSeparationConstraint,
    HideDirective,
    LayoutProblem,
    LeftConstraint,
    Node,
    SourceGroup,
    StructuralError,
    TopConstraint,
)
from layout_ir.validate import ValidationError, validate


def problem(required=(), **kwargs):
    return LayoutProblem(
        nodes=kwargs.pop('nodes', [Node('A'), Node('B'), Node('C')]),
        required=[SourceGroup('src', tuple(required))] if required else [],
        **kwargs,
    )


def test_validate_accepts_valid_problem():
    validate(
        problem(
            [LeftConstraint('A', 'B'), TopConstraint('B', 'C', 0.0), AlignmentConstraint('x', 'A', 'C')],
            groups=[Group('g', ('A', 'B')), Group('h', ('C',))],
            disjunctions=[
                Disjunction(((BoundingBoxConstraint('C', 'g', 'left'),), (GroupSeparationConstraint('g', 'h', 'top'),)))
            ],
            cyclic=[CyclicConstraint((('A', 'B', 'C'),), 'counterclockwise')],
            hidden=[HideDirective('hide X', ('X',))],
        )
    )


@pytest.mark.parametrize(
    'constraint, message_part',
    [
        (LeftConstraint('A', 'Z'), "unknown node 'Z'"),
        (LeftConstraint('A', 'A'), 'related to itself'),
        (TopConstraint('A', 'B', -1.0), 'non-negative'),
        (AlignmentConstraint('z', 'A', 'B'), "unknown axis 'z'"),
        (AlignmentConstraint('x', 'B', 'B'), 'aligned with itself'),
        (BoundingBoxConstraint('A', 'nope', 'left'), "unknown group 'nope'"),
        (BoundingBoxConstraint('C', 'g', 'middle'), "unknown side 'middle'"),
        (GroupSeparationConstraint('g', 'g', 'left'), 'separated from itself'),
        ('A left of B', 'unsupported constraint'),
    ],
)
def test_rejects_malformed_constraints(constraint, message_part):
    bad = problem([constraint], groups=[Group('g', ('A', 'B'))])

    with pytest.raises(ValidationError) as exc:
        validate(bad)

    assert message_part in str(exc.value)
    assert exc.value.constraint == constraint


def test_rejects_duplicate_nodes():
    with pytest.raises(ValidationError, match="duplicate node id 'A'"):
        validate(problem(nodes=[Node('A'), Node('A')]))


def test_rejects_groups_with_unknown_members():
    with pytest.raises(ValidationError, match="unknown node 'Q'"):
        validate(problem(groups=[Group('g', ('A', 'Q'))]))


@pytest.mark.parametrize(
    'cyclic, message_part',
    [
        (CyclicConstraint((('A', 'B', 'A'),)), 'repeats a node'),
        (CyclicConstraint((('A', 'B', 'Z'),)), "unknown node 'Z'"),
        (CyclicConstraint((('A', 'B', 'C'),), 'sideways'), "unknown direction 'sideways'"),
    ],
)
def test_rejects_malformed_cyclic_constraints(cyclic, message_part):
    with pytest.raises(ValidationError) as exc:
        validate(problem(cyclic=[cyclic]))

    assert message_part in str(exc.value)


def test_disjunction_needs_alternatives():
    with pytest.raises(StructuralError, match="at least one alternative"):
        Disjunction((), source="empty")


def test_validation_error_is_structural():
    assert issubclass(ValidationError, StructuralError)
    assert issubclass(ValidationError, ValueError)
