import pytest

from layout_ir.constraints import VariableId
from layout_ir.solver.core import CorePool
from layout_ir.solver.disjunctive import DisjunctiveSolver, solve_disjunctive
from layout_ir.solver.expressions import LinearExpression, eq, le
from layout_ir.solver.model import SearchBudget


A_X = VariableId('A', 'x')
B_X = VariableId('B', 'x')
B_Y = VariableId('B', 'y')


def fix(var, value):
    return eq(LinearExpression.of_variable(var), LinearExpression.from_mapping({}, value))


def at_least(var, value):
    return le(LinearExpression.from_mapping({}, value), LinearExpression.of_variable(var))


def holds(rows, values, tol=1e-6):
    for row in rows:
        value = row.expression.evaluate(values)
        if row.relation == '==' and abs(value) > tol:
            return False
        if row.relation == '<=' and value > tol:
            return False
    return True


def test_exactly_one_alternative_holds():
    required = [fix(A_X, 100.0)]
    alternatives = ((fix(B_X, 200.0), fix(B_Y, 250.0)), (fix(B_X, 250.0), fix(B_Y, 200.0)))

    outcome = solve_disjunctive(CorePool(), required, [alternatives])

    assert outcome.satisfiable
    assert outcome.choices == (0,)
    assert outcome.values[A_X] == pytest.approx(100.0)
    assert sum(holds(alternative, outcome.values) for alternative in alternatives) == 1


def test_pruning_selects_the_only_feasible_alternative():
    required = [at_least(A_X, 60.0)]
    alternatives = ((fix(A_X, 20.0),), (fix(A_X, 40.0),), (fix(A_X, 80.0),))

    outcome = solve_disjunctive(CorePool(), required, [alternatives])

    assert outcome.status == 'sat'
    assert outcome.choices == (2,)
    assert outcome.values[A_X] == pytest.approx(80.0)


def test_backtracks_into_earlier_disjunction():
    first = ((fix(A_X, 10.0),), (fix(A_X, 20.0),))
    second = ((fix(A_X, 20.0),),)

    outcome = solve_disjunctive(CorePool(), [], [first, second])

    assert outcome.choices == (1, 0)
    assert outcome.max_depth_reached == 2


def test_without_disjunctions_matches_direct_solve():
    rows = [fix(A_X, 5.0), at_least(B_X, 30.0)]
    pool = CorePool()

    outcome = solve_disjunctive(pool, rows, [])
    direct = CorePool().check(rows)

    assert outcome.satisfiable == direct.satisfiable
    assert outcome.values == pytest.approx(direct.values)
    assert outcome.choices == ()


def test_required_conflict_is_flagged():
    outcome = solve_disjunctive(CorePool(), [fix(A_X, 1.0), fix(A_X, 2.0)], [((fix(B_X, 1.0),),)])

    assert outcome.status == 'unsat'
    assert outcome.required_infeasible
    assert outcome.nodes_visited == 1


def test_exhaustive_failure_is_unsat():
    alternatives = ((fix(A_X, 10.0),), (fix(A_X, 20.0),))

    outcome = solve_disjunctive(CorePool(), [at_least(A_X, 50.0)], [alternatives])

    assert outcome.status == 'unsat'
    assert not outcome.required_infeasible
    assert outcome.nodes_visited == 3


def test_node_budget_reports_exhaustion_not_unsat():
    first = ((fix(A_X, 10.0),), (fix(A_X, 20.0),))
    second = ((fix(B_X, 1.0),),)

    outcome = solve_disjunctive(CorePool(), [], [first, second], SearchBudget(max_nodes=1))

    assert outcome.status == 'budget-exhausted'
    assert not outcome.satisfiable
    assert outcome.values == {}


def test_depth_budget_reports_exhaustion():
    first = ((fix(A_X, 10.0),),)
    second = ((fix(B_X, 1.0),),)

    outcome = solve_disjunctive(CorePool(), [], [first, second], SearchBudget(max_depth=1))

    assert outcome.status == 'budget-exhausted'


def test_declared_variables_are_reported():
    solver = DisjunctiveSolver(CorePool(), variables=[B_Y])

    outcome = solver.solve([fix(A_X, 1.0)], [])

    assert outcome.values[B_Y] == 0.0


def test_negative_budget_is_rejected():
    with pytest.raises(ValueError):
        SearchBudget(max_nodes=-1)
