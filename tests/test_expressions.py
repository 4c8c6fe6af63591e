import pytest

from layout_ir.constraints import VariableId
from layout_ir.solver.expressions import ExpressionCache, LinearExpression, LinearRow, eq, le


A_X = VariableId('A', 'x')
B_X = VariableId('B', 'x')


def test_cache_returns_identical_objects_for_identical_keys():
    cache = ExpressionCache()

    first = cache.plus(A_X, 15)
    second = cache.plus(A_X, 15.0)

    assert first is second
    assert cache.hits == 1
    assert cache.misses == 1


def test_cache_distinguishes_operation_and_constant():
    cache = ExpressionCache()

    assert cache.plus(A_X, 15) is not cache.minus(A_X, 15)
    assert cache.plus(A_X, 15) is not cache.plus(A_X, 20)
    assert cache.plus(A_X, 15) is not cache.plus(B_X, 15)
    assert cache.minus(A_X, 15).constant == -15.0


def test_offset_routes_by_sign():
    cache = ExpressionCache()

    assert cache.offset(A_X, 0) is cache.variable(A_X)
    assert cache.offset(A_X, 5) is cache.plus(A_X, 5)
    assert cache.offset(A_X, -5) is cache.minus(A_X, 5)


def test_clear_empties_the_cache():
    cache = ExpressionCache()
    cache.variable(A_X)
    cache.plus(B_X, 3)
    assert len(cache) == 2

    cache.clear()

    assert len(cache) == 0
    assert cache.stats() == {'variables': 0, 'derived': 0, 'hits': 0, 'misses': 0}


def test_subtraction_merges_terms_and_drops_zeros():
    expr = LinearExpression.of_variable(A_X) - LinearExpression.of_variable(A_X)

    assert expr.terms == ()
    assert expr.constant == 0.0


def test_le_row_moves_everything_to_the_left():
    cache = ExpressionCache()

    row = le(cache.plus(A_X, 15), cache.variable(B_X))

    assert row.relation == '<='
    assert dict(row.expression.terms) == {A_X: 1.0, B_X: -1.0}
    assert row.expression.constant == 15.0
    assert row.expression.evaluate({A_X: 0.0, B_X: 15.0}) == pytest.approx(0.0)
    assert str(row) == 'A.x - B.x + 15 <= 0'


def test_eq_row_and_missing_variables_default_to_zero():
    row = eq(LinearExpression.of_variable(A_X), LinearExpression.from_mapping({}, 100.0))

    assert isinstance(row, LinearRow)
    assert row.relation == '=='
    assert row.expression.evaluate({}) == pytest.approx(-100.0)
    assert row.expression.evaluate({A_X: 100.0}) == pytest.approx(0.0)
