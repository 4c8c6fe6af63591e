import pytest

from layout_ir.constraints import (
    AlignmentConstraint,
    Disjunction,
    LeftConstraint,
    SourceGroup,
    TopConstraint,
)
from layout_ir.solver import LayoutSession, SearchBudget, SolveOptions
from layout_ir.solver.diagnose import ConflictDiagnoser, deletion_filter, diagnose, merge_sources


C1 = LeftConstraint('A', 'B')
C2 = LeftConstraint('B', 'A')
C3 = TopConstraint('A', 'C')


@pytest.fixture
def session():
    with LayoutSession() as active:
        yield active


def test_deletion_filter_keeps_an_irreducible_subset():
    kept = deletion_filter([5, 5, 1], lambda items: sum(items) >= 10)

    assert kept == [5, 5]


def test_deletion_filter_visits_units_in_order():
    kept = deletion_filter(['a', 'b', 'c'], lambda items: len(items) >= 1)

    assert kept == ['c']


def test_only_the_conflicting_pair_is_reported(session):
    sources = [SourceGroup('c1', (C1,)), SourceGroup('c2', (C2,)), SourceGroup('c3', (C3,))]

    entries = diagnose(sources, session.check)

    reported = [c for entry in entries for c in entry.constraints]
    assert [entry.source for entry in entries] == ['c1', 'c2']
    assert C1 in reported and C2 in reported
    assert C3 not in reported


def test_refinement_trims_a_unit_to_the_implicated_constraints(session):
    sources = [SourceGroup('rules', (C1, C3, C2))]

    entries = diagnose(sources, session.check)

    assert len(entries) == 1
    assert entries[0].constraints == (C1, C2)
    assert entries[0].elements == ('A left of B (gap 15)', 'B left of A (gap 15)')


def test_unrefined_diagnosis_keeps_whole_units(session):
    sources = [SourceGroup('rules', (C1, C3, C2))]

    entries = diagnose(sources, session.check, refine=False)

    assert entries[0].constraints == (C1, C3, C2)


def test_satisfiable_input_has_no_conflict(session):
    assert diagnose([SourceGroup('c1', (C1,)), SourceGroup('c3', (C3,))], session.check) == []


def test_sources_sharing_a_label_are_merged():
    merged = merge_sources([SourceGroup('x', (C1,)), SourceGroup('y', (C3,)), SourceGroup('x', (C2, C1))])

    assert [unit.label for unit in merged] == ['x', 'y']
    assert merged[0].constraints == (C1, C2)


def test_shared_constraint_is_reported_once_per_needed_source(session):
    # C1 is derived from two sources; either one alone keeps it active.
    sources = [SourceGroup('first', (C1,)), SourceGroup('second', (C1, C3)), SourceGroup('third', (C2,))]

    entries = diagnose(sources, session.check)

    assert [entry.source for entry in entries] == ['second', 'third']
    assert entries[0].constraints == (C1,)


def test_disjunction_units_are_named_when_search_fails(session):
    sources = [SourceGroup('a before b', (C1,)), SourceGroup('unrelated', (C3,))]
    blocking = Disjunction(((C2,), (AlignmentConstraint('x', 'A', 'B'),)), source='ring')
    harmless = Disjunction(((TopConstraint('C', 'D'),),), source='other')

    diagnoser = ConflictDiagnoser(session.check, lambda req, dis: session.search(req, dis).status)
    entries = diagnoser.diagnose_disjunctive(sources, [blocking, harmless])

    assert [entry.source for entry in entries] == ['a before b', 'ring']
    assert entries[1].elements[0].startswith('alternative 1: ')


def test_disjunctive_diagnosis_keeps_units_when_budget_runs_out():
    sources = [SourceGroup('a before b', (C1,))]
    blocking = Disjunction(((C2,), (AlignmentConstraint('x', 'A', 'B'),)), source='ring')

    with LayoutSession(SolveOptions(budget=SearchBudget(max_nodes=1))) as limited:
        diagnoser = ConflictDiagnoser(limited.check, lambda req, dis: limited.search(req, dis).status)
        entries = diagnoser.diagnose_disjunctive(sources, [blocking])

    assert [entry.source for entry in entries] == ['a before b', 'ring']
