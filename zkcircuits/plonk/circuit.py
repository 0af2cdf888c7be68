"""
PLONK 회로 표현 (Vanilla Circuit)
===================================

백엔드가 증명하는 저수준 회로: 게이트 행과 배선 복사 제약.
상위 계층(frontend.arithmetize)이 PLONKish 형태(CircuitShape)를 이 형태로
낮춘다(lowering).

**게이트 구조**:
    q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C + PI = 0

  | 유형     | q_L | q_R | q_O | q_M | q_C | 의미            |
  |----------|-----|-----|-----|-----|-----|-----------------|
  | 곱셈     |  0  |  0  | -1  |  1  |  0  | a·b = c         |
  | 덧셈     |  1  |  1  | -1  |  0  |  0  | a + b = c       |
  | 상수덧셈 |  1  |  0  | -1  |  0  |  k  | a + k = c       |
  | 공개입력 |  1  |  0  |  0  |  0  |  0  | a = x_i         |

**공개 입력**:
  공개 입력 게이트는 항상 회로의 앞쪽 m개 행에 둔다. i번째 행에서
  PI(ωⁱ) = -x_i 이므로 a_i - x_i = 0, 즉 a 배선이 공개 값과 같아진다.

**배선(Copy) 제약과 순열 σ**:
  위치 인덱스: a의 i번째 = i, b의 i번째 = n+i, c의 i번째 = 2n+i.
  제약마다 두 위치의 σ 값을 맞바꾸면(transposition) 두 순환이 하나로
  합쳐진다. 이미 같은 순환에 있는 두 위치를 맞바꾸면 순환이 쪼개지므로,
  union-find로 중복 제약을 건너뛴다.
"""

from zkcircuits.plonk.field import FR


WIRE_A = 0
WIRE_B = 1
WIRE_C = 2


class Gate:
    """PLONK 산술 게이트 한 행."""

    def __init__(self, q_l, q_r, q_o, q_m, q_c):
        self.q_l = q_l if isinstance(q_l, FR) else FR(q_l)
        self.q_r = q_r if isinstance(q_r, FR) else FR(q_r)
        self.q_o = q_o if isinstance(q_o, FR) else FR(q_o)
        self.q_m = q_m if isinstance(q_m, FR) else FR(q_m)
        self.q_c = q_c if isinstance(q_c, FR) else FR(q_c)

    def evaluate(self, a, b, c, pi=0):
        """q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C + PI 를 계산한다."""
        return (
            self.q_l * a
            + self.q_r * b
            + self.q_o * c
            + self.q_m * (a * b)
            + self.q_c
            + pi
        )

    def scale(self, factor, constant=0):
        """모든 셀렉터에 factor를 곱하고 상수항에 constant를 더한 게이트."""
        return Gate(
            self.q_l * factor,
            self.q_r * factor,
            self.q_o * factor,
            self.q_m * factor,
            self.q_c * factor + constant,
        )

    def selectors(self):
        return (self.q_l, self.q_r, self.q_o, self.q_m, self.q_c)

    def __repr__(self):
        names = ("q_L", "q_R", "q_O", "q_M", "q_C")
        parts = [f"{name}={int(q)}" for name, q in zip(names, self.selectors()) if q != 0]
        return "Gate(" + ", ".join(parts) + ")"


class Circuit:
    """PLONK 산술 회로.

    속성:
        gates: Gate 리스트 (행 순서)
        copy_constraints: (gate1, wire1, gate2, wire2) 튜플 리스트
        num_public_inputs: 공개 입력 수 (앞쪽 행 수)
    """

    def __init__(self):
        self.gates = []
        self.copy_constraints = []
        self.num_public_inputs = 0

    @property
    def n(self):
        """게이트 수 (패딩 전)."""
        return len(self.gates)

    def add_gate(self, q_l=0, q_r=0, q_o=0, q_m=0, q_c=0):
        """임의 셀렉터 게이트를 추가하고 행 인덱스를 반환한다."""
        self.gates.append(Gate(q_l, q_r, q_o, q_m, q_c))
        return len(self.gates) - 1

    def add_public_input_gate(self):
        """a = 공개 입력 (PI(ωⁱ) = -x_i).

        공개 입력 게이트는 다른 게이트보다 먼저 추가해야 한다.

        Raises:
            ValueError: 일반 게이트 뒤에 추가하려 할 때
        """
        if len(self.gates) != self.num_public_inputs:
            raise ValueError("공개 입력 게이트는 회로의 앞쪽 행에만 둘 수 있습니다")
        self.num_public_inputs += 1
        return self.add_gate(q_l=1)

    def add_copy_constraint(self, gate1, wire1, gate2, wire2):
        """게이트1.wire1 == 게이트2.wire2 (wire: 0=a, 1=b, 2=c)."""
        self.copy_constraints.append((gate1, wire1, gate2, wire2))

    def padded_gates(self, n):
        """길이 n으로 0-게이트를 채운 게이트 리스트.

        Raises:
            ValueError: 게이트 수가 n을 초과할 때
        """
        if len(self.gates) > n:
            raise ValueError(f"게이트 수 {len(self.gates)}가 도메인 크기 {n}을 초과합니다")
        return self.gates + [Gate(0, 0, 0, 0, 0) for _ in range(n - len(self.gates))]

    def get_selector_polynomials(self, n=None):
        """셀렉터 벡터 (q_L, q_R, q_O, q_M, q_C)를 반환한다."""
        gates = self.padded_gates(n if n is not None else self.n)
        q_l = [g.q_l for g in gates]
        q_r = [g.q_r for g in gates]
        q_o = [g.q_o for g in gates]
        q_m = [g.q_m for g in gates]
        q_c = [g.q_c for g in gates]
        return q_l, q_r, q_o, q_m, q_c

    def build_copy_constraints(self, n=None):
        """배선 순열 σ (길이 3n)를 구성한다.

        Args:
            n: 도메인 크기 (기본값: 게이트 수)

        Returns:
            list[int]: sigma[i] = i번째 위치와 같은 순환의 다음 위치
        """
        if n is None:
            n = self.n
        sigma = list(range(3 * n))
        parent = list(range(3 * n))

        def find(pos):
            while parent[pos] != pos:
                parent[pos] = parent[parent[pos]]
                pos = parent[pos]
            return pos

        for g1, w1, g2, w2 in self.copy_constraints:
            pos1 = w1 * n + g1
            pos2 = w2 * n + g2
            root1, root2 = find(pos1), find(pos2)
            if root1 == root2:
                continue
            parent[root1] = root2
            sigma[pos1], sigma[pos2] = sigma[pos2], sigma[pos1]

        return sigma

    def is_satisfied(self, a_vals, b_vals, c_vals, public_inputs):
        """배선 값이 모든 게이트와 복사 제약을 만족하는지 확인한다."""
        for i, gate in enumerate(self.gates):
            pi = FR(0) - public_inputs[i] if i < self.num_public_inputs else 0
            if gate.evaluate(a_vals[i], b_vals[i], c_vals[i], pi) != 0:
                return False
        wires = (a_vals, b_vals, c_vals)
        for g1, w1, g2, w2 in self.copy_constraints:
            if wires[w1][g1] != wires[w2][g2]:
                return False
        return True
