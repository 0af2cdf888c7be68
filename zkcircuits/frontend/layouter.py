"""
레이아웃터 (Layouter) 와 영역 (Region)
========================================

synthesize 단계에서 witness 값을 셀에 배치한다.

  Layouter
   └── assign_region("name", fn)
        └── Region (시작 행 start, 높이 height)
             ├── assign_advice(name, column, offset, value) → AssignedCell
             ├── copy_advice(name, cell, column, offset)     → AssignedCell
             ├── enable_selector(selector, offset)
             └── constrain_equal(cell_a, cell_b)

영역은 위에서 아래로 쌓인다 (단일 칩 레이아웃터). 영역 높이는
사용한 최대 오프셋 + 1 이다.

**Value**:
  키 생성용 인스턴스는 witness가 없으므로 값이 "모름(unknown)" 이다.
  Value.unknown()에 대한 모든 연산 결과도 unknown 이어서, 같은 synthesize
  코드가 witness 유무와 상관없이 같은 레이아웃을 만든다.

**Layout**:
  셀 값, 활성화된 셀렉터, 복사 제약, instance 바인딩, 영역 목록.
  fingerprint()는 값을 제외한 구조만 해싱한다.
"""

import hashlib
from dataclasses import dataclass

from zkcircuits.errors import ConstraintViolation
from zkcircuits.frontend.constraint_system import Column, ColumnKind
from zkcircuits.plonk.field import FR


class Value:
    """알 수도 있고 모를 수도 있는 필드 값."""

    __slots__ = ("_inner",)

    def __init__(self, inner=None):
        if inner is not None and not isinstance(inner, FR):
            inner = FR(inner)
        self._inner = inner

    @classmethod
    def known(cls, value):
        return cls(FR(value) if not isinstance(value, FR) else value)

    @classmethod
    def unknown(cls):
        return cls(None)

    def is_known(self):
        return self._inner is not None

    @property
    def inner(self):
        """알려진 값. 모르는 값이면 None."""
        return self._inner

    def map(self, fn):
        if self._inner is None:
            return Value.unknown()
        return Value.known(fn(self._inner))

    def zip_with(self, other, fn):
        other = _as_value(other)
        if self._inner is None or other._inner is None:
            return Value.unknown()
        return Value.known(fn(self._inner, other._inner))

    def __add__(self, other):
        return self.zip_with(other, lambda a, b: a + b)

    def __sub__(self, other):
        return self.zip_with(other, lambda a, b: a - b)

    def __mul__(self, other):
        return self.zip_with(other, lambda a, b: a * b)

    def __radd__(self, other):
        return _as_value(other) + self

    def __rsub__(self, other):
        return _as_value(other) - self

    def __rmul__(self, other):
        return _as_value(other) * self

    def __neg__(self):
        return self.map(lambda a: FR(0) - a)

    def __repr__(self):
        if self._inner is None:
            return "Value(unknown)"
        return f"Value({int(self._inner)})"


def _as_value(value):
    if isinstance(value, Value):
        return value
    return Value.known(value)


@dataclass(frozen=True)
class Cell:
    column: Column
    row: int


@dataclass(frozen=True)
class AssignedCell:
    cell: Cell
    value: Value

    @property
    def column(self):
        return self.cell.column

    @property
    def row(self):
        return self.cell.row


@dataclass(frozen=True)
class RegionInfo:
    name: str
    start: int
    height: int


class Layout:
    """synthesize 결과 (값 + 구조)."""

    def __init__(self):
        self.assignments = {}
        self.enabled = set()
        self.copies = []
        self.instance_bindings = []
        self.regions = []
        self.num_rows = 0

    def instance_positions(self):
        """바인딩된 (instance 열, 행) 목록. 공개 입력 벡터의 순서이다."""
        positions = {(inst.index, row) for _, inst, row in self.instance_bindings}
        return sorted(positions)

    @property
    def num_public_inputs(self):
        return len(self.instance_positions())

    def bound_public_inputs(self):
        """바인딩된 셀 값으로 공개 입력 벡터를 만든다 (모르는 값은 None)."""
        values = {}
        for cell, inst, row in self.instance_bindings:
            values.setdefault((inst.index, row), self.assignments.get(cell))
        return [values[pos] for pos in self.instance_positions()]

    def describe(self):
        lines = [f"rows={self.num_rows}"]
        lines.extend(f"region {r.name} {r.start} {r.height}" for r in self.regions)
        lines.extend(
            f"enable {sel!r} {row}"
            for sel, row in sorted(self.enabled, key=lambda e: (e[0].index, e[1]))
        )
        lines.extend(
            f"copy {a.column!r}:{a.row} {b.column!r}:{b.row}" for a, b in self.copies
        )
        lines.extend(
            f"instance {cell.column!r}:{cell.row} {inst!r}:{row}"
            for cell, inst, row in self.instance_bindings
        )
        return "\n".join(lines)

    def fingerprint(self):
        return hashlib.sha256(self.describe().encode()).hexdigest()


class Region:
    def __init__(self, name, start, shape, layout):
        self.name = name
        self.start = start
        self._shape = shape
        self._layout = layout
        self._max_offset = -1
        self._enabled = []

    def _touch(self, offset):
        if offset < 0:
            raise ConstraintViolation(f"영역 {self.name!r}: 음수 오프셋 {offset}")
        self._max_offset = max(self._max_offset, offset)

    @property
    def height(self):
        return self._max_offset + 1

    def assign_advice(self, name, column, offset, value):
        """advice 셀에 값을 배치한다.

        Args:
            name: 디버깅용 이름
            column: advice Column
            offset: 영역 내 행 오프셋
            value: Value, int 또는 FR

        Raises:
            ConstraintViolation: advice 열이 아니거나 이미 할당된 셀일 때
        """
        if column.kind is not ColumnKind.ADVICE:
            raise ConstraintViolation(f"{name}: advice 열이 아닙니다: {column!r}")
        self._touch(offset)
        cell = Cell(column, self.start + offset)
        if cell in self._layout.assignments:
            raise ConstraintViolation(f"{name}: 이미 할당된 셀 {column!r}:{cell.row}")
        value = _as_value(value)
        self._layout.assignments[cell] = value.inner
        return AssignedCell(cell, value)

    def copy_advice(self, name, assigned, column, offset):
        """기존 셀 값을 새 셀에 복사하고 두 셀을 같게 묶는다."""
        copied = self.assign_advice(name, column, offset, assigned.value)
        self.constrain_equal(assigned, copied)
        return copied

    def enable_selector(self, selector, offset):
        self._touch(offset)
        self._enabled.append((selector, offset))
        self._layout.enabled.add((selector, self.start + offset))

    def constrain_equal(self, left, right):
        _constrain_copy(self._shape, self._layout, left, right)

    def close(self):
        """영역 높이를 확정하고 활성 게이트의 회전이 영역 안에 있는지 확인한다.

        Raises:
            ConstraintViolation: 게이트가 영역 밖의 행을 질의할 때
        """
        for selector, offset in self._enabled:
            for gate in self._shape.gates_for(selector):
                if offset + gate.min_rotation < 0 or offset + gate.max_rotation >= self.height:
                    raise ConstraintViolation(
                        f"영역 {self.name!r}(높이 {self.height})가 게이트 {gate.name!r}"
                        f"의 회전 [{gate.min_rotation}, {gate.max_rotation}]"
                        f"을 오프셋 {offset}에서 담지 못합니다"
                    )
        return RegionInfo(self.name, self.start, self.height)


def _constrain_copy(shape, layout, left, right):
    for assigned in (left, right):
        if assigned.column not in shape.equality:
            raise ConstraintViolation(
                f"등치가 허용되지 않은 열의 복사 제약: {assigned.column!r}"
            )
    layout.copies.append((left.cell, right.cell))


class Layouter:
    """영역을 위에서 아래로 쌓는 단일 칩 레이아웃터."""

    def __init__(self, shape):
        self.shape = shape
        self.layout = Layout()
        self._next_row = 0

    def assign_region(self, name, fn):
        """새 영역을 열고 fn(region)을 실행한 뒤 그 결과를 반환한다."""
        region = Region(name, self._next_row, self.shape, self.layout)
        result = fn(region)
        info = region.close()
        self.layout.regions.append(info)
        self._next_row += info.height
        self.layout.num_rows = self._next_row
        return result

    def constrain_instance(self, assigned, instance_column, row):
        """셀을 instance 열의 row번째 공개 입력에 묶는다.

        Raises:
            ConstraintViolation: instance 열이 아니거나 등치가 허용되지 않은 열일 때
        """
        if instance_column.kind is not ColumnKind.INSTANCE:
            raise ConstraintViolation(f"instance 열이 아닙니다: {instance_column!r}")
        if instance_column not in self.shape.equality:
            raise ConstraintViolation(f"등치가 허용되지 않은 instance 열: {instance_column!r}")
        if assigned.column not in self.shape.equality:
            raise ConstraintViolation(f"등치가 허용되지 않은 열: {assigned.column!r}")
        if row < 0:
            raise ConstraintViolation(f"음수 instance 행: {row}")
        self.layout.instance_bindings.append((assigned.cell, instance_column, row))
