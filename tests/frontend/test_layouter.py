"""
Layouter / Region / Value 테스트

테스트 범위:
  - Value: known/unknown 전파
  - 영역 쌓기 (시작 행, 높이, 전체 행 수)
  - 할당 규칙 (advice만, 재할당 금지, 음수 오프셋 금지)
  - 복사 제약과 instance 바인딩의 등치 허용 검사
  - 게이트 회전이 영역 밖이면 ConstraintViolation
  - 레이아웃 지문은 값과 무관하다
"""

import pytest

from zkcircuits.errors import ConstraintViolation
from zkcircuits.frontend.constraint_system import ConstraintSystemBuilder
from zkcircuits.frontend.layouter import Value, Layouter, Cell
from zkcircuits.plonk.field import FR


def _shape():
    """advice x(등치), advice y(등치 없음), instance, square 게이트 (회전 0..1)."""
    builder = ConstraintSystemBuilder()
    x = builder.advice_column()
    y = builder.advice_column()
    inst = builder.instance_column()
    builder.enable_equality(x)
    builder.enable_equality(inst)
    q = builder.selector()
    builder.create_gate("square", lambda meta: [
        meta.query_selector(q)
        * (meta.query_advice(x, 1) - meta.query_advice(x, 0) * meta.query_advice(x, 0))
    ])
    return builder.build(), x, y, inst, q


def _square_layout(value):
    shape, x, _, inst, q = _shape()
    layouter = Layouter(shape)

    def body(region):
        region.enable_selector(q, 0)
        region.assign_advice("x", x, 0, value)
        return region.assign_advice("x^2", x, 1, value * value)

    out = layouter.assign_region("square", body)
    layouter.constrain_instance(out, inst, 0)
    return layouter.layout


# ─────────────────────────────────────────────────────────────────────
# Value
# ─────────────────────────────────────────────────────────────────────

class TestValue:

    def test_known_arithmetic(self):
        v = Value.known(3) * Value.known(4) + 1
        assert v.is_known()
        assert v.inner == FR(13)

    def test_unknown_propagates(self):
        v = Value.unknown() * Value.known(4) + 1
        assert not v.is_known()
        assert v.inner is None
        assert (-Value.unknown()).inner is None

    def test_reflected_operators(self):
        assert (10 - Value.known(3)).inner == FR(7)
        assert (2 * Value.known(3)).inner == FR(6)
        assert (1 + Value.known(3)).inner == FR(4)

    def test_map(self):
        assert Value.known(6).map(lambda v: int(v) >> 1).inner == FR(3)
        assert Value.unknown().map(lambda v: v).inner is None


# ─────────────────────────────────────────────────────────────────────
# 영역
# ─────────────────────────────────────────────────────────────────────

class TestRegions:

    def test_regions_stack(self):
        shape, x, y, _, _ = _shape()
        layouter = Layouter(shape)
        first = layouter.assign_region("a", lambda r: r.assign_advice("v", x, 2, 1))
        second = layouter.assign_region("b", lambda r: r.assign_advice("v", y, 0, 2))
        assert first.row == 2
        assert second.row == 3
        assert [(r.name, r.start, r.height) for r in layouter.layout.regions] == [
            ("a", 0, 3), ("b", 3, 1),
        ]
        assert layouter.layout.num_rows == 4

    def test_assign_returns_cell_and_value(self):
        shape, x, _, _, _ = _shape()
        layouter = Layouter(shape)
        cell = layouter.assign_region("a", lambda r: r.assign_advice("v", x, 0, 7))
        assert cell.cell == Cell(x, 0)
        assert cell.value.inner == FR(7)
        assert layouter.layout.assignments[Cell(x, 0)] == FR(7)

    def test_unknown_value_recorded_as_none(self):
        shape, x, _, _, _ = _shape()
        layouter = Layouter(shape)
        layouter.assign_region("a", lambda r: r.assign_advice("v", x, 0, Value.unknown()))
        assert layouter.layout.assignments[Cell(x, 0)] is None

    def test_reassign_rejected(self):
        shape, x, _, _, _ = _shape()
        layouter = Layouter(shape)

        def body(region):
            region.assign_advice("v", x, 0, 1)
            region.assign_advice("v", x, 0, 2)

        with pytest.raises(ConstraintViolation):
            layouter.assign_region("a", body)

    def test_instance_column_not_assignable(self):
        shape, _, _, inst, _ = _shape()
        layouter = Layouter(shape)
        with pytest.raises(ConstraintViolation):
            layouter.assign_region("a", lambda r: r.assign_advice("v", inst, 0, 1))

    def test_negative_offset_rejected(self):
        shape, x, _, _, _ = _shape()
        layouter = Layouter(shape)
        with pytest.raises(ConstraintViolation):
            layouter.assign_region("a", lambda r: r.assign_advice("v", x, -1, 1))

    def test_gate_rotation_outside_region(self):
        """square 게이트는 다음 행을 질의하므로 높이 1 영역에서는 안 된다."""
        shape, x, _, _, q = _shape()
        layouter = Layouter(shape)

        def body(region):
            region.enable_selector(q, 0)
            region.assign_advice("x", x, 0, 3)

        with pytest.raises(ConstraintViolation):
            layouter.assign_region("short", body)


# ─────────────────────────────────────────────────────────────────────
# 복사 제약 / instance
# ─────────────────────────────────────────────────────────────────────

class TestCopies:

    def test_copy_advice(self):
        shape, x, _, _, _ = _shape()
        layouter = Layouter(shape)
        src = layouter.assign_region("a", lambda r: r.assign_advice("v", x, 0, 5))
        dst = layouter.assign_region("b", lambda r: r.copy_advice("v", src, x, 0))
        assert dst.value.inner == FR(5)
        assert layouter.layout.copies == [(src.cell, dst.cell)]

    def test_copy_requires_equality(self):
        shape, x, y, _, _ = _shape()
        layouter = Layouter(shape)
        src = layouter.assign_region("a", lambda r: r.assign_advice("v", y, 0, 5))
        with pytest.raises(ConstraintViolation):
            layouter.assign_region("b", lambda r: r.copy_advice("v", src, x, 0))

    def test_constrain_instance(self):
        layout = _square_layout(Value.known(3))
        assert layout.instance_positions() == [(0, 0)]
        assert layout.num_public_inputs == 1
        assert layout.bound_public_inputs() == [FR(9)]

    def test_constrain_instance_requires_instance_column(self):
        shape, x, _, _, _ = _shape()
        layouter = Layouter(shape)
        cell = layouter.assign_region("a", lambda r: r.assign_advice("v", x, 0, 5))
        with pytest.raises(ConstraintViolation):
            layouter.constrain_instance(cell, x, 0)

    def test_constrain_instance_requires_equality_on_cell(self):
        shape, _, y, inst, _ = _shape()
        layouter = Layouter(shape)
        cell = layouter.assign_region("a", lambda r: r.assign_advice("v", y, 0, 5))
        with pytest.raises(ConstraintViolation):
            layouter.constrain_instance(cell, inst, 0)

    def test_public_inputs_sorted_by_position(self):
        shape, x, _, inst, _ = _shape()
        layouter = Layouter(shape)

        def body(region):
            return [region.assign_advice("v", x, i, 10 + i) for i in range(2)]

        cells = layouter.assign_region("a", body)
        layouter.constrain_instance(cells[0], inst, 1)
        layouter.constrain_instance(cells[1], inst, 0)
        assert layouter.layout.bound_public_inputs() == [FR(11), FR(10)]


# ─────────────────────────────────────────────────────────────────────
# 지문
# ─────────────────────────────────────────────────────────────────────

class TestLayoutFingerprint:

    def test_independent_of_values(self):
        known = _square_layout(Value.known(3))
        unknown = _square_layout(Value.unknown())
        assert known.fingerprint() == unknown.fingerprint()
        assert unknown.bound_public_inputs() == [None]

    def test_describe_contents(self):
        text = _square_layout(Value.known(3)).describe()
        assert "region square 0 2" in text
        assert "enable q[0] 0" in text
        assert "instance advice[0]:1 instance[0]:0" in text
