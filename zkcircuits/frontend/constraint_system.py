"""
제약 시스템 빌더 (ConstraintSystemBuilder)
============================================

회로의 "모양(shape)"을 선언한다. witness 값과 무관하다.

  ┌───────────┬───────────┬──────────┬────────┐
  │ advice[0] │ advice[1] │ instance │ q[0]   │   ← 열(column)과 셀렉터
  ├───────────┼───────────┼──────────┼────────┤
  │    x      │           │   x²     │  1     │   row 0
  │    x²     │           │          │  0     │   row 1
  └───────────┴───────────┴──────────┴────────┘

**선언 규칙**:
  - 모든 게이트는 셀렉터를 하나 이상 질의해야 한다
  - 게이트는 advice 열만 질의한다 (instance 값은 복사 제약으로 들어온다)
  - build() 이후의 선언은 ShapeError

사용 예시:
    >>> builder = ConstraintSystemBuilder()
    >>> x = builder.advice_column()
    >>> q = builder.selector()
    >>> builder.create_gate("square", lambda meta: [
    ...     meta.query_selector(q)
    ...     * (meta.query_advice(x, 1) - meta.query_advice(x, 0) * meta.query_advice(x, 0))
    ... ])
    >>> shape = builder.build()
"""

import enum
import hashlib
from dataclasses import dataclass

from zkcircuits.errors import ShapeError
from zkcircuits.frontend.expression import Query, SelectorQuery


class ColumnKind(enum.Enum):
    ADVICE = "advice"
    INSTANCE = "instance"


@dataclass(frozen=True)
class Column:
    kind: ColumnKind
    index: int

    def sort_key(self):
        return (self.kind.value, self.index)

    def __repr__(self):
        return f"{self.kind.value}[{self.index}]"


@dataclass(frozen=True, order=True)
class Selector:
    index: int

    def __repr__(self):
        return f"q[{self.index}]"


@dataclass(frozen=True)
class Gate:
    """이름 있는 다항식 항등식 묶음."""

    name: str
    polys: tuple
    selectors: frozenset
    queries: frozenset

    @property
    def min_rotation(self):
        return min((rot for _, rot in self.queries), default=0)

    @property
    def max_rotation(self):
        return max((rot for _, rot in self.queries), default=0)

    def degree(self):
        return max(p.degree() for p in self.polys)


class VirtualCells:
    """create_gate 콜백에 전달되는 질의 핸들."""

    def __init__(self, builder):
        self._builder = builder

    def query_advice(self, column, rotation=0):
        """
        Raises:
            ShapeError: instance 열이거나 선언되지 않은 열일 때
        """
        if column.kind is not ColumnKind.ADVICE:
            raise ShapeError(f"게이트는 advice 열만 질의할 수 있습니다: {column!r}")
        self._builder._check_column(column)
        return Query(column, rotation)

    def query_selector(self, selector):
        if not 0 <= selector.index < self._builder._num_selectors:
            raise ShapeError(f"선언되지 않은 셀렉터: {selector!r}")
        return SelectorQuery(selector)


@dataclass(frozen=True)
class CircuitShape:
    """불변 회로 모양: 열, 셀렉터, 게이트, 등치(equality) 허용 열."""

    num_advice: int
    num_instance: int
    num_selectors: int
    gates: tuple
    equality: frozenset

    def advice_columns(self):
        return [Column(ColumnKind.ADVICE, i) for i in range(self.num_advice)]

    def instance_columns(self):
        return [Column(ColumnKind.INSTANCE, i) for i in range(self.num_instance)]

    def gates_for(self, selector):
        return [gate for gate in self.gates if selector in gate.selectors]

    def describe(self):
        """지문에 쓰이는 정규 텍스트."""
        lines = [
            f"advice={self.num_advice}",
            f"instance={self.num_instance}",
            f"selectors={self.num_selectors}",
            "equality=" + ",".join(repr(c) for c in sorted(self.equality, key=Column.sort_key)),
        ]
        for gate in self.gates:
            lines.append(f"gate {gate.name}")
            lines.extend(f"  {poly!r}" for poly in gate.polys)
        return "\n".join(lines)

    def fingerprint(self):
        return hashlib.sha256(self.describe().encode()).hexdigest()


class ConstraintSystemBuilder:
    def __init__(self):
        self._num_advice = 0
        self._num_instance = 0
        self._num_selectors = 0
        self._gates = []
        self._equality = set()
        self._built = False

    def _check_open(self):
        if self._built:
            raise ShapeError("build() 이후에는 선언할 수 없습니다")

    def _check_column(self, column):
        limit = self._num_advice if column.kind is ColumnKind.ADVICE else self._num_instance
        if not 0 <= column.index < limit:
            raise ShapeError(f"선언되지 않은 열: {column!r}")

    def column(self, kind):
        self._check_open()
        if kind is ColumnKind.ADVICE:
            self._num_advice += 1
            return Column(kind, self._num_advice - 1)
        if kind is ColumnKind.INSTANCE:
            self._num_instance += 1
            return Column(kind, self._num_instance - 1)
        raise ShapeError(f"알 수 없는 열 종류: {kind!r}")

    def advice_column(self):
        return self.column(ColumnKind.ADVICE)

    def instance_column(self):
        return self.column(ColumnKind.INSTANCE)

    def selector(self):
        self._check_open()
        self._num_selectors += 1
        return Selector(self._num_selectors - 1)

    def enable_equality(self, column):
        self._check_open()
        self._check_column(column)
        self._equality.add(column)

    def create_gate(self, name, fn):
        """fn(meta)가 반환한 표현식들을 이름 있는 게이트로 등록한다.

        Raises:
            ShapeError: 표현식이 없거나 셀렉터를 질의하지 않을 때
        """
        self._check_open()
        polys = tuple(fn(VirtualCells(self)))
        if not polys:
            raise ShapeError(f"게이트 {name!r}에 표현식이 없습니다")
        selectors = set()
        queries = set()
        for poly in polys:
            selectors |= poly.selectors()
            queries |= poly.queries()
        if not selectors:
            raise ShapeError(f"게이트 {name!r}가 셀렉터를 질의하지 않습니다")
        gate = Gate(name, polys, frozenset(selectors), frozenset(queries))
        self._gates.append(gate)
        return gate

    def build(self):
        self._check_open()
        self._built = True
        return CircuitShape(
            num_advice=self._num_advice,
            num_instance=self._num_instance,
            num_selectors=self._num_selectors,
            gates=tuple(self._gates),
            equality=frozenset(self._equality),
        )
