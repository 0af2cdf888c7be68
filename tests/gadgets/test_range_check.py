"""
RangeCheck 칩 테스트

테스트 범위:
  - N비트 안의 값은 만족, 2^N 이상은 재구성 제약 위반
  - 경계값 0, 2^N - 1, 2^N
  - check()로 기존 셀 검사 (복사 제약)
  - 비트 폭 검증
  - witness 없는 레이아웃과 지문 일치, 낮춘 회로 만족
"""

import pytest

from zkcircuits.errors import ConstraintViolation
from zkcircuits.frontend.arithmetize import Arithmetization
from zkcircuits.frontend.constraint_system import ConstraintSystemBuilder
from zkcircuits.frontend.layouter import Layouter, Value
from zkcircuits.frontend.mock import check_satisfied
from zkcircuits.gadgets.range_check import RangeCheckChip, MAX_BITS


def _assign(value, num_bits=4):
    builder = ConstraintSystemBuilder()
    config = RangeCheckChip.configure(builder, num_bits)
    shape = builder.build()
    layouter = Layouter(shape)
    cell = RangeCheckChip(config).assign(layouter, value)
    return shape, layouter.layout, cell


def _check_existing(value, num_bits=4):
    builder = ConstraintSystemBuilder()
    source = builder.advice_column()
    builder.enable_equality(source)
    config = RangeCheckChip.configure(builder, num_bits)
    shape = builder.build()
    layouter = Layouter(shape)
    cell = layouter.assign_region("load", lambda r: r.assign_advice("v", source, 0, value))
    RangeCheckChip(config).check(layouter, cell)
    return shape, layouter.layout


class TestRangeCheck:

    @pytest.mark.parametrize("value", [0, 1, 5, 15])
    def test_in_range(self, value):
        shape, layout, _ = _assign(value)
        assert check_satisfied(shape, layout) == []

    @pytest.mark.parametrize("value", [16, 17, 255])
    def test_out_of_range(self, value):
        shape, layout, _ = _assign(value)
        failures = check_satisfied(shape, layout)
        assert any("range decompose" in f for f in failures)

    def test_negative_value_fails(self):
        """-1 은 p - 1 이므로 N비트에 들어가지 않는다."""
        shape, layout, _ = _assign(-1, num_bits=8)
        assert check_satisfied(shape, layout) != []

    def test_region_height(self):
        shape, layout, _ = _assign(3, num_bits=6)
        assert layout.regions[0].height == 6

    def test_returns_value_cell(self):
        _, _, cell = _assign(9)
        assert int(cell.value.inner) == 9

    def test_check_existing_cell(self):
        shape, layout = _check_existing(7)
        assert check_satisfied(shape, layout) == []
        assert len(layout.copies) == 1

    def test_check_existing_cell_out_of_range(self):
        shape, layout = _check_existing(99)
        assert check_satisfied(shape, layout) != []


class TestBitWidth:

    @pytest.mark.parametrize("bits", [0, -1, MAX_BITS + 1])
    def test_invalid_widths(self, bits):
        with pytest.raises(ConstraintViolation):
            RangeCheckChip.configure(ConstraintSystemBuilder(), bits)

    def test_max_width_accepted(self):
        RangeCheckChip.configure(ConstraintSystemBuilder(), MAX_BITS)


class TestRangeCheckLowering:

    def test_same_layout_without_witness(self):
        _, known, _ = _assign(5)
        _, unknown, _ = _assign(Value.unknown())
        assert known.fingerprint() == unknown.fingerprint()

    def test_lowered_circuit_satisfied(self):
        shape, layout, _ = _assign(11)
        arith = Arithmetization(shape, layout)
        a, b, c = arith.wire_values([], 64)
        assert arith.circuit().is_satisfied(a, b, c, [])

    def test_lowered_circuit_rejects_out_of_range(self):
        shape, layout, _ = _assign(20)
        arith = Arithmetization(shape, layout)
        a, b, c = arith.wire_values([], 64)
        assert not arith.circuit().is_satisfied(a, b, c, [])
