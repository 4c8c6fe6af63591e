from layout_ir import (
    Disjunction,
    Group,
    HideDirective,
    LayoutProblem,
    LeftConstraint,
    Node,
    SourceGroup,
    TopConstraint,
    drop_hidden_nodes,
    find_group_overlaps,
    solve_layout,
)


def chain_problem(hidden=('B',)):
    return LayoutProblem(
        nodes=[Node('A'), Node('B'), Node('C'), Node('D')],
        required=[
            SourceGroup('A->B', (LeftConstraint('A', 'B'),)),
            SourceGroup('B->C', (LeftConstraint('B', 'C'),)),
            SourceGroup('C->D', (LeftConstraint('C', 'D'),)),
        ],
        hidden=[HideDirective('hide B', hidden)] if hidden else [],
    )


def test_hidden_node_constraints_are_dropped_and_reported():
    report = drop_hidden_nodes(chain_problem())

    assert [source.constraints for source in report.required] == [(), (), (LeftConstraint('C', 'D'),)]
    assert report.dropped_count == 2
    assert [entry.source for entry in report.entries] == ['hide B', 'A->B', 'B->C']
    assert report.entries[0].elements == ('B',)
    assert report.entries[1].elements == ('A left of B (gap 15)',)


def test_layout_without_hidden_node():
    result = solve_layout(chain_problem())

    assert result.satisfiable
    positions = result.positions()
    assert set(positions) == {'A', 'C', 'D'}
    assert all(var.owner != 'B' for var in result.assignment)
    assert positions['C'][0] + 15.0 <= positions['D'][0] + 1e-6
    assert 'C->D' not in [entry.source for entry in result.dropped]
    assert [entry.source for entry in result.dropped] == ['hide B', 'A->B', 'B->C']


def test_no_hide_directives_means_no_drops():
    report = drop_hidden_nodes(chain_problem(hidden=()))

    assert report.entries == []
    assert report.dropped_count == 0


def test_alternatives_and_groups_lose_hidden_nodes():
    problem = chain_problem()
    problem.groups = [Group('g', ('A', 'B', 'C'))]
    disjunction = Disjunction(
        ((LeftConstraint('A', 'B'), TopConstraint('A', 'C')), (TopConstraint('C', 'D'),)),
        source='choice',
    )

    report = drop_hidden_nodes(problem, [disjunction])

    assert report.disjunctions[0].alternatives == ((TopConstraint('A', 'C'),), (TopConstraint('C', 'D'),))
    assert report.groups[0].node_ids == ('A', 'C')
    assert 'choice' in [entry.source for entry in report.entries]


def test_constraints_are_attributed_to_the_first_matching_directive():
    problem = chain_problem()
    problem.hidden = [HideDirective('hide B', ('B',)), HideDirective('hide C', ('C',))]

    report = drop_hidden_nodes(problem)

    assert [entry.source for entry in report.entries] == ['hide B', 'A->B', 'B->C', 'hide C', 'C->D']


def test_nested_and_disjoint_groups_do_not_overlap():
    groups = [Group('outer', ('A', 'B', 'C')), Group('inner', ('A', 'B')), Group('other', ('D', 'E'))]

    assert find_group_overlaps(groups) == []


def test_overlapping_groups_are_reported():
    entries = find_group_overlaps([Group('g1', ('A', 'B')), Group('g2', ('B', 'C'))])

    assert [entry.source for entry in entries] == ['group g1', 'group g2']
    assert 'B' in entries[0].elements
    assert 'neither group is contained in the other' in entries[0].elements[0]
