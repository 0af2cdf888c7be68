"""
산술화 (Arithmetization): PLONKish 모양 + 레이아웃 → vanilla PLONK 게이트
===========================================================================

**변수**:
  - 공개 입력 변수 x_0 .. x_{m-1}  (회로 앞쪽 m개 행의 공개 입력 게이트)
  - 셀 변수: 복사 제약과 instance 바인딩으로 묶인 셀들은 union-find로
    하나의 변수가 된다 (instance에 묶인 셀은 해당 공개 입력 변수와 합쳐진다)
  - 중간 변수: 곱셈/축약 게이트의 출력 (배선 c)

**낮추기(lowering)**:
  활성 셀렉터가 있는 (게이트, 행) 마다 표현식을 아핀 결합
  Σ cᵢ·vᵢ + k 로 평탄화한다.

  셀렉터 질의        → 상수 (그 행에서 활성이면 1)
  advice 질의        → 셀 변수
  비상수 × 비상수    → 양쪽을 단일 변수 (αx + k₁), (βy + k₂) 로 줄이고
                        곱셈 게이트 하나:
                        q_M=αβ, q_L=αk₂, q_R=βk₁, q_C=k₁k₂, q_O=-1
  항이 많은 결합      → 두 항씩 새 변수로 축약 (c₁v₁ + c₂v₂ - w = 0)
  최종 제약 (= 0)    → 3항 이하 게이트 하나.
                        단일 항 c·w + k 이고 w가 자신을 만든 게이트의
                        배선 c에서만 쓰이면 그 게이트에 합친다 (fusion)

같은 (게이트, 행) 안에서 같은 표현식 노드는 한 번만 낮춘다.
결과는 모양과 레이아웃 구조만으로 결정되므로 키 생성과 증명 생성이
같은 게이트 목록을 얻는다.
"""

from zkcircuits.errors import SynthesisError
from zkcircuits.frontend.expression import (
    Constant, Query, SelectorQuery, Sum, Product, Negated, Scaled,
)
from zkcircuits.frontend.layouter import Cell
from zkcircuits.plonk.circuit import Circuit, Gate, WIRE_A, WIRE_B, WIRE_C
from zkcircuits.plonk.field import FR


class _Affine:
    """Σ coef·var + const  (terms: {var: coef})."""

    __slots__ = ("terms", "const")

    def __init__(self, terms=None, const=None):
        self.terms = terms if terms is not None else {}
        self.const = const if const is not None else FR(0)

    def add(self, other):
        terms = dict(self.terms)
        for var, coef in other.terms.items():
            total = terms.get(var, FR(0)) + coef
            if total == 0:
                terms.pop(var, None)
            else:
                terms[var] = total
        return _Affine(terms, self.const + other.const)

    def scale(self, factor):
        if factor == 0:
            return _Affine()
        return _Affine(
            {var: coef * factor for var, coef in self.terms.items()},
            self.const * factor,
        )

    def is_constant(self):
        return not self.terms


class Arithmetization:
    """모양 + 레이아웃을 vanilla PLONK 게이트 목록으로 낮춘 결과.

    속성:
        num_public_inputs: 공개 입력 수 (앞쪽 행 수)
        rows: [(Gate, (a_var, b_var, c_var))]  공개 입력 게이트 다음 행들
        num_rows: 전체 행 수
    """

    def __init__(self, shape, layout):
        self.shape = shape
        self.layout = layout

        self._parent = {}
        self._members = {}
        self._var_of_root = {}
        self.var_defs = []
        self.rows = []
        self._producer = {}

        positions = layout.instance_positions()
        self.num_public_inputs = len(positions)
        self._build_unions(positions)
        self.pi_vars = [self._var_for_key(("pi", i)) for i in range(len(positions))]

        self._lower()

    # ── union-find ──

    def _find(self, key):
        if key not in self._parent:
            self._parent[key] = key
            self._members[key] = [key]
            return key
        root = key
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[key] != root:
            self._parent[key], key = root, self._parent[key]
        return root

    def _union(self, left, right):
        left, right = self._find(left), self._find(right)
        if left == right:
            return
        # 공개 입력 키가 대표가 되도록 한다
        if right[0] != "pi" and left[0] == "pi":
            left, right = right, left
        self._parent[left] = right
        self._members[right].extend(self._members.pop(left))

    def _build_unions(self, positions):
        index = {pos: i for i, pos in enumerate(positions)}
        for i in range(len(positions)):
            self._find(("pi", i))
        for left, right in self.layout.copies:
            self._union(("cell", left), ("cell", right))
        for cell, inst, row in self.layout.instance_bindings:
            self._union(("cell", cell), ("pi", index[(inst.index, row)]))

    def _var_for_key(self, key):
        root = self._find(key)
        if root not in self._var_of_root:
            self._var_of_root[root] = len(self.var_defs)
            self.var_defs.append(("class", root))
        return self._var_of_root[root]

    # ── 게이트 생성 ──

    def _new_output(self, gate, a, b):
        """gate(a, b) - out = 0 행을 추가하고 out 변수를 반환한다."""
        out = len(self.var_defs)
        self.var_defs.append(("out", gate, a, b))
        self._producer[out] = len(self.rows)
        self.rows.append((gate, (a, b, out)))
        return out

    def _reduce(self, affine, limit):
        terms = list(affine.terms.items())
        while len(terms) > limit:
            (v1, c1), (v2, c2) = terms[0], terms[1]
            w = self._new_output(Gate(c1, c2, -1, 0, 0), v1, v2)
            terms = [(w, FR(1))] + terms[2:]
        return _Affine(dict(terms), affine.const)

    def _single(self, affine):
        reduced = self._reduce(affine, 1)
        (var, coef), = reduced.terms.items()
        return var, coef, reduced.const

    def _multiply(self, left, right):
        if left.is_constant():
            return right.scale(left.const)
        if right.is_constant():
            return left.scale(right.const)
        x, alpha, k1 = self._single(left)
        y, beta, k2 = self._single(right)
        gate = Gate(alpha * k2, beta * k1, -1, alpha * beta, k1 * k2)
        return _Affine({self._new_output(gate, x, y): FR(1)})

    # ── 표현식 평탄화 ──

    def _flatten(self, node, row, memo):
        key = id(node)
        if key in memo:
            return memo[key]
        if isinstance(node, Constant):
            result = _Affine(const=node.value)
        elif isinstance(node, Query):
            var = self._var_for_key(("cell", Cell(node.column, row + node.rotation)))
            result = _Affine({var: FR(1)})
        elif isinstance(node, SelectorQuery):
            enabled = (node.selector, row) in self.layout.enabled
            result = _Affine(const=FR(1) if enabled else FR(0))
        elif isinstance(node, Sum):
            result = self._flatten(node.left, row, memo).add(
                self._flatten(node.right, row, memo))
        elif isinstance(node, Negated):
            result = self._flatten(node.inner, row, memo).scale(FR(-1))
        elif isinstance(node, Scaled):
            result = self._flatten(node.inner, row, memo).scale(node.factor)
        elif isinstance(node, Product):
            result = self._multiply(
                self._flatten(node.left, row, memo),
                self._flatten(node.right, row, memo),
            )
        else:
            raise TypeError(f"알 수 없는 표현식 노드: {node!r}")
        memo[key] = result
        return result

    def _active(self):
        seen = set()
        active = []
        for selector, row in sorted(self.layout.enabled, key=lambda e: (e[1], e[0].index)):
            for index, gate in enumerate(self.shape.gates):
                if selector in gate.selectors and (index, row) not in seen:
                    seen.add((index, row))
                    active.append((gate, row))
        return active

    def _lower(self):
        finals = []
        for gate, row in self._active():
            memo = {}
            for poly in gate.polys:
                finals.append(self._reduce(self._flatten(poly, row, memo), 3))

        uses = {}
        for _, slots in self.rows:
            for var in slots:
                uses[var] = uses.get(var, 0) + 1
        final_uses = {}
        for final in finals:
            for var in final.terms:
                final_uses[var] = final_uses.get(var, 0) + 1

        for final in finals:
            if final.is_constant():
                if final.const != 0:
                    self.rows.append((Gate(0, 0, 0, 0, final.const), (None, None, None)))
                continue
            if len(final.terms) == 1:
                (var, coef), = final.terms.items()
                if (var in self._producer and uses.get(var) == 1
                        and final_uses.get(var) == 1):
                    index = self._producer.pop(var)
                    producer, (a, b, _) = self.rows[index]
                    fused = producer.scale(coef, final.const)
                    fused.q_o = FR(0)
                    self.rows[index] = (fused, (a, b, None))
                    continue
            vars_ = list(final.terms)
            coefs = [final.terms[v] for v in vars_] + [FR(0)] * (3 - len(vars_))
            slots = tuple(vars_) + (None,) * (3 - len(vars_))
            self.rows.append((Gate(coefs[0], coefs[1], coefs[2], 0, final.const), slots))

    # ── 결과 ──

    @property
    def num_rows(self):
        return self.num_public_inputs + len(self.rows)

    def circuit(self):
        """vanilla PLONK Circuit (공개 입력 게이트 + 낮춘 게이트 + 복사 제약)."""
        circuit = Circuit()
        positions = {}
        for i, var in enumerate(self.pi_vars):
            row = circuit.add_public_input_gate()
            positions.setdefault(var, []).append((row, WIRE_A))
        for gate, slots in self.rows:
            row = circuit.add_gate(*gate.selectors())
            for wire, var in zip((WIRE_A, WIRE_B, WIRE_C), slots):
                if var is not None:
                    positions.setdefault(var, []).append((row, wire))
        for var_positions in positions.values():
            for (g1, w1), (g2, w2) in zip(var_positions, var_positions[1:]):
                circuit.add_copy_constraint(g1, w1, g2, w2)
        return circuit

    def variable_values(self, public_inputs):
        """
        Raises:
            SynthesisError: 공개 입력 수가 다르거나 값이 없는 셀 변수가 있을 때
        """
        if len(public_inputs) != self.num_public_inputs:
            raise SynthesisError(
                f"공개 입력 수 {len(public_inputs)}가 바인딩 수 "
                f"{self.num_public_inputs}와 다릅니다"
            )
        values = []
        for definition in self.var_defs:
            if definition[0] == "out":
                _, gate, a, b = definition
                va, vb = values[a], values[b]
                values.append(gate.q_m * va * vb + gate.q_l * va + gate.q_r * vb + gate.q_c)
            else:
                values.append(self._class_value(definition[1], public_inputs))
        return values

    def _class_value(self, root, public_inputs):
        members = self._members[root]
        for kind, ident in members:
            if kind == "pi":
                return FR(public_inputs[ident])
        for _, cell in members:
            if cell in self.layout.assignments:
                value = self.layout.assignments[cell]
                if value is None:
                    raise SynthesisError(f"값이 없는 셀: {cell.column!r}:{cell.row}")
                return value
        return FR(0)

    def wire_values(self, public_inputs, n):
        """길이 n으로 패딩된 배선 값 (a, b, c)."""
        if self.num_rows > n:
            raise SynthesisError(f"행 수 {self.num_rows}가 도메인 크기 {n}을 초과합니다")
        values = self.variable_values(public_inputs)
        a = [FR(0)] * n
        b = [FR(0)] * n
        c = [FR(0)] * n
        for i, var in enumerate(self.pi_vars):
            a[i] = values[var]
        for offset, (_, slots) in enumerate(self.rows):
            row = self.num_public_inputs + offset
            for wires, var in zip((a, b, c), slots):
                if var is not None:
                    wires[row] = values[var]
        return a, b, c
