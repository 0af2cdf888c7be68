"""
게이트 표현식 테스트

테스트 범위:
  - 연산자 조립 (+, -, *, 단항 -, int/FR 스칼라)
  - degree, evaluate, queries, selectors
  - 정규 repr
"""

import pytest

from zkcircuits.frontend.constraint_system import Column, ColumnKind, Selector
from zkcircuits.frontend.expression import (
    Constant, Query, SelectorQuery, Sum, Product, Negated, Scaled,
)
from zkcircuits.plonk.field import FR


A0 = Column(ColumnKind.ADVICE, 0)
A1 = Column(ColumnKind.ADVICE, 1)
Q0 = Selector(0)


def _evaluate(expr, cells, enabled=True):
    return expr.evaluate(
        lambda column, rotation: FR(cells[(column.index, rotation)]),
        lambda selector: FR(1) if enabled else FR(0),
    )


class TestOperators:

    def test_node_types(self):
        x = Query(A0, 0)
        y = Query(A1, 0)
        assert isinstance(x + y, Sum)
        assert isinstance(x * y, Product)
        assert isinstance(-x, Negated)
        assert isinstance(x * 3, Scaled)
        assert isinstance(3 * x, Scaled)
        assert isinstance(x * FR(2), Scaled)

    def test_int_lifted_to_constant(self):
        x = Query(A0, 0)
        expr = 1 - x
        assert isinstance(expr, Sum)
        assert isinstance(expr.left, Constant)

    def test_rejects_unknown_operand(self):
        with pytest.raises(TypeError):
            Query(A0, 0) + "x"


class TestEvaluate:

    def test_square_gate(self):
        """s · (x@1 - x@0²) 는 x@1 = x@0² 일 때 0."""
        s = SelectorQuery(Q0)
        x0 = Query(A0, 0)
        x1 = Query(A0, 1)
        expr = s * (x1 - x0 * x0)
        assert _evaluate(expr, {(0, 0): 3, (0, 1): 9}) == FR(0)
        assert _evaluate(expr, {(0, 0): 3, (0, 1): 10}) == FR(1)

    def test_disabled_selector_zeroes(self):
        s = SelectorQuery(Q0)
        expr = s * (Query(A0, 0) - 5)
        assert _evaluate(expr, {(0, 0): 7}, enabled=False) == FR(0)

    def test_negation_and_scaling(self):
        x = Query(A0, 0)
        assert _evaluate(-x * 3 + 10, {(0, 0): 2}) == FR(4)


class TestStructure:

    def test_degree(self):
        s = SelectorQuery(Q0)
        b = Query(A0, 0)
        assert (s * b * (1 - b)).degree() == 3
        assert (b * 5 + 1).degree() == 1
        assert Constant(7).degree() == 0

    def test_queries_and_selectors(self):
        s = SelectorQuery(Q0)
        expr = s * (Query(A0, 1) - Query(A0, 0) * Query(A1, -1))
        assert expr.queries() == {(A0, 1), (A0, 0), (A1, -1)}
        assert expr.selectors() == {Q0}

    def test_repr_is_canonical(self):
        s = SelectorQuery(Q0)
        x = Query(A0, 0)
        assert repr(s * (x - 3)) == "(q[0] * (advice[0]@0 + -3))"
        assert repr(x * 2) == "(advice[0]@0 * 2)"

    def test_repr_stable_across_builds(self):
        def build():
            x = Query(A0, 0)
            return SelectorQuery(Q0) * x * (1 - x)
        assert repr(build()) == repr(build())
