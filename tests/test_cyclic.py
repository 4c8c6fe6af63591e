import pytest

from layout_ir.constraints import (
    AlignmentConstraint,
    CyclicConstraint,
    LeftConstraint,
    StructuralError,
    TopConstraint,
)
from layout_ir.cyclic import circular_positions, expand, expand_alternatives, expand_fragment


def nodes(count):
    return tuple(chr(ord('A') + i) for i in range(count))


@pytest.mark.parametrize('count', [3, 4, 5, 6])
def test_each_perturbation_relates_every_pair_on_both_axes(count):
    sets = expand_fragment(nodes(count))

    assert len(sets) == count
    for constraints in sets:
        assert len(constraints) == count * (count - 1)
        assert all(isinstance(c, (LeftConstraint, TopConstraint, AlignmentConstraint)) for c in constraints)


@pytest.mark.parametrize('count', [1, 2])
def test_short_fragments_yield_empty_sets(count):
    sets = expand_fragment(nodes(count))

    assert sets == [()] * count


def test_three_node_ring_first_perturbation():
    sets = expand_fragment(('A', 'B', 'C'), min_radius=100.0, min_sep_x=15.0, min_sep_y=15.0)

    assert sets[0] == (
        LeftConstraint('B', 'A', 15.0),
        TopConstraint('A', 'B', 15.0),
        LeftConstraint('C', 'A', 15.0),
        TopConstraint('C', 'A', 15.0),
        AlignmentConstraint('x', 'B', 'C'),
        TopConstraint('C', 'B', 15.0),
    )


def test_square_positions_produce_alignments():
    sets = expand_fragment(('A', 'B', 'C', 'D'))

    first = sets[0]
    assert AlignmentConstraint('x', 'B', 'D') in first
    assert AlignmentConstraint('y', 'A', 'C') in first


@pytest.mark.parametrize('count', [3, 4, 5])
def test_direction_changes_first_perturbation_content(count):
    clockwise = expand_fragment(nodes(count), 'clockwise')
    counter = expand_fragment(nodes(count), 'counterclockwise')

    assert set(clockwise[0]) != set(counter[0])


def test_separations_are_passed_through():
    sets = expand_fragment(('A', 'B', 'C'), min_sep_x=40.0, min_sep_y=7.0)

    gaps = {(type(c), c.min_gap) for c in sets[1] if not isinstance(c, AlignmentConstraint)}
    assert gaps <= {(LeftConstraint, 40.0), (TopConstraint, 7.0)}


def test_expand_is_deterministic():
    cyclic = CyclicConstraint((('A', 'B', 'C', 'D'),))

    assert expand(cyclic) == expand(cyclic)


def test_fragments_are_concatenated_into_one_disjunction():
    cyclic = CyclicConstraint((('A', 'B', 'C'), ('D', 'E', 'F', 'G')), label='ring')

    disjunction = expand(cyclic)

    assert len(disjunction) == 7
    assert disjunction.source == 'ring'
    assert len(disjunction.alternatives[0]) == 6
    assert len(disjunction.alternatives[3]) == 12


def test_unknown_direction_is_rejected():
    with pytest.raises(StructuralError):
        expand_fragment(('A', 'B', 'C'), 'sideways')


def test_descriptor_without_nodes_is_rejected():
    assert expand_alternatives(CyclicConstraint(((),))) == []
    with pytest.raises(StructuralError):
        expand(CyclicConstraint(((),)))


def test_circular_positions_start_on_positive_x_axis():
    positions = circular_positions(('A', 'B', 'C', 'D'), 0, 10.0)

    assert positions['A'] == pytest.approx((10.0, 0.0))
    assert positions['B'] == pytest.approx((0.0, 10.0), abs=1e-9)
    assert positions['C'] == pytest.approx((-10.0, 0.0), abs=1e-9)
