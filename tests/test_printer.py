from layout_ir.constraints import (
    AlignmentConstraint,
    BoundingBoxConstraint,
    ConflictEntry,
    Disjunction,
    GroupBoundaryConstraint,
    GroupSeparationConstraint,
    LeftConstraint,
    Node,
    TopConstraint,
)
from layout_ir.printer import (
    describe_constraint,
    describe_disjunction,
    describe_node,
    format_conflict_table,
    format_positions,
)


def test_node_without_attributes_shows_its_id():
    assert describe_node(Node('n1')) == 'id = n1'


def test_node_attributes_are_limited_and_truncated():
    node = Node(
        'n1',
        label='Alice',
        attributes={
            'name': ['Alice Wonderland of the Looking Glass'],
            'age': ['25'],
            'city': ['Paris'],
        },
    )

    text = describe_node(node)

    assert text == 'Alice (name: Alice Wonderland of ...; age: 25; ...)'
    assert 'city' not in text


def test_node_with_one_attribute():
    assert describe_node(Node('n2', attributes={'k': ['a', 'b']})) == 'n2 (k: a, b)'


def test_describe_each_constraint_kind():
    assert describe_constraint(LeftConstraint('A', 'B')) == 'A left of B (gap 15)'
    assert describe_constraint(TopConstraint('A', 'B', 2.5)) == 'A above B (gap 2.5)'
    assert describe_constraint(AlignmentConstraint('x', 'A', 'B')) == 'A vertically aligned with B'
    assert describe_constraint(AlignmentConstraint('y', 'A', 'B')) == 'A horizontally aligned with B'
    assert describe_constraint(BoundingBoxConstraint('C', 'g', 'bottom')) == 'C below group g (gap 15)'
    assert describe_constraint(GroupBoundaryConstraint('g', ('A', 'B'))) == 'group g contains A, B (padding 15)'
    assert describe_constraint(GroupSeparationConstraint('g', 'h', 'right')) == 'group g right of group h (gap 15)'


def test_describe_constraint_uses_node_names_when_given():
    nodes = {'A': Node('A')}

    assert describe_constraint(LeftConstraint('A', 'B'), nodes) == 'id = A left of B (gap 15)'


def test_describe_disjunction_numbers_alternatives():
    disjunction = Disjunction(((LeftConstraint('A', 'B'),), ()))

    assert describe_disjunction(disjunction) == (
        'alternative 1: A left of B (gap 15)',
        'alternative 2: (no constraints)',
    )


def test_conflict_table_has_two_columns():
    entries = [
        ConflictEntry('A left of B', (), ('A left of B (gap 15)',)),
        ConflictEntry('hide B', (), ('B', 'C')),
    ]

    table = format_conflict_table(entries).splitlines()

    assert table[0] == 'source constraint | affected diagram elements'
    assert table[2] == 'A left of B       | A left of B (gap 15)'
    assert table[3] == 'hide B            | B'
    assert table[4] == '                  | C'


def test_positions_are_listed_with_two_decimals():
    assert format_positions({'A': (1.0, 2.346)}) == 'A: x=1.00 y=2.35'
