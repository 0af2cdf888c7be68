"""
MockProver: 배치된 witness의 제약 만족 여부를 암호 연산 없이 검사한다.

  1. 활성화된 (셀렉터, 행) 마다 해당 게이트의 모든 표현식 == 0
     (할당되지 않은 셀은 0)
  2. 복사 제약: 두 셀의 값이 같다
  3. instance 바인딩: 셀 값 == 공개 입력 벡터의 해당 위치
"""

from zkcircuits.errors import SynthesisError
from zkcircuits.frontend.layouter import Cell
from zkcircuits.plonk.field import FR


class _UnknownValue(Exception):
    pass


def _cell_value(layout, cell):
    if cell not in layout.assignments:
        return FR(0)
    value = layout.assignments[cell]
    if value is None:
        raise _UnknownValue(cell)
    return value


def check_satisfied(shape, layout, public_inputs=None):
    """위반 사항을 설명하는 문자열 리스트를 반환한다 (빈 리스트면 만족)."""
    failures = []

    for selector, row in sorted(layout.enabled, key=lambda e: (e[1], e[0].index)):
        for gate in shape.gates_for(selector):
            def query(column, rotation, row=row):
                return _cell_value(layout, Cell(column, row + rotation))

            def select(sel, row=row):
                return FR(1) if (sel, row) in layout.enabled else FR(0)

            for index, poly in enumerate(gate.polys):
                try:
                    result = poly.evaluate(query, select)
                except _UnknownValue as exc:
                    failures.append(f"gate {gate.name!r} row {row}: 값이 없는 셀 {exc.args[0]}")
                    break
                if result != 0:
                    failures.append(f"gate {gate.name!r} poly {index} row {row}: {int(result)} != 0")

    for left, right in layout.copies:
        if layout.assignments.get(left) != layout.assignments.get(right):
            failures.append(
                f"copy {left.column!r}:{left.row} != {right.column!r}:{right.row}"
            )

    positions = layout.instance_positions()
    if public_inputs is None:
        public_inputs = layout.bound_public_inputs()
    elif len(public_inputs) != len(positions):
        failures.append(
            f"공개 입력 수 {len(public_inputs)}가 바인딩 수 {len(positions)}와 다릅니다"
        )
        return failures
    expected = dict(zip(positions, public_inputs))
    for cell, inst, row in layout.instance_bindings:
        value = layout.assignments.get(cell)
        target = expected[(inst.index, row)]
        if value is None or target is None or FR(target) != value:
            failures.append(f"instance {inst!r}:{row} != {cell.column!r}:{cell.row}")

    return failures


def assert_satisfied(shape, layout, public_inputs=None):
    """
    Raises:
        SynthesisError: 하나라도 위반이 있을 때 (첫 몇 개를 메시지에 담는다)
    """
    failures = check_satisfied(shape, layout, public_inputs)
    if failures:
        summary = "; ".join(failures[:5])
        if len(failures) > 5:
            summary += f" (외 {len(failures) - 5}건)"
        raise SynthesisError(f"제약을 만족하지 않습니다: {summary}")
