"""
MockProver 테스트

테스트 범위:
  - 만족하는 레이아웃은 위반 없음
  - 게이트 위반, 복사 위반, instance 위반, 공개 입력 수 불일치
  - 모르는(unknown) 값은 위반으로 보고
  - assert_satisfied는 SynthesisError
"""

import pytest

from zkcircuits.errors import SynthesisError
from zkcircuits.frontend.constraint_system import ConstraintSystemBuilder
from zkcircuits.frontend.layouter import Layouter, Value
from zkcircuits.frontend.mock import check_satisfied, assert_satisfied
from zkcircuits.plonk.field import FR


def _build(x_value, square_value, copy_value=None):
    """x² 영역 + (선택) 결과를 복사한 영역, 결과는 instance[0]에 바인딩."""
    builder = ConstraintSystemBuilder()
    x = builder.advice_column()
    inst = builder.instance_column()
    builder.enable_equality(x)
    builder.enable_equality(inst)
    q = builder.selector()
    builder.create_gate("square", lambda meta: [
        meta.query_selector(q)
        * (meta.query_advice(x, 1) - meta.query_advice(x, 0) * meta.query_advice(x, 0))
    ])
    shape = builder.build()
    layouter = Layouter(shape)

    def body(region):
        region.enable_selector(q, 0)
        region.assign_advice("x", x, 0, x_value)
        return region.assign_advice("x^2", x, 1, square_value)

    out = layouter.assign_region("square", body)
    if copy_value is not None:
        def copy_body(region):
            copied = region.assign_advice("copy", x, 0, copy_value)
            region.constrain_equal(out, copied)
        layouter.assign_region("copy", copy_body)
    layouter.constrain_instance(out, inst, 0)
    return shape, layouter.layout


class TestCheckSatisfied:

    def test_satisfied(self):
        shape, layout = _build(3, 9, copy_value=9)
        assert check_satisfied(shape, layout) == []
        assert check_satisfied(shape, layout, [FR(9)]) == []

    def test_gate_violation(self):
        shape, layout = _build(3, 10)
        failures = check_satisfied(shape, layout)
        assert len(failures) == 1
        assert "square" in failures[0]

    def test_copy_violation(self):
        shape, layout = _build(3, 9, copy_value=8)
        failures = check_satisfied(shape, layout)
        assert any(f.startswith("copy") for f in failures)

    def test_public_input_violation(self):
        shape, layout = _build(3, 9)
        failures = check_satisfied(shape, layout, [FR(10)])
        assert any(f.startswith("instance") for f in failures)

    def test_public_input_arity(self):
        shape, layout = _build(3, 9)
        failures = check_satisfied(shape, layout, [FR(9), FR(1)])
        assert len(failures) == 1

    def test_unknown_value_reported(self):
        shape, layout = _build(Value.unknown(), Value.unknown())
        failures = check_satisfied(shape, layout)
        assert failures
        assert "square" in failures[0]


class TestAssertSatisfied:

    def test_passes_silently(self):
        shape, layout = _build(4, 16)
        assert_satisfied(shape, layout, [16])

    def test_raises_synthesis_error(self):
        shape, layout = _build(4, 15)
        with pytest.raises(SynthesisError):
            assert_satisfied(shape, layout)
