"""
Poseidon 스타일 해시 커밋먼트
===============================

**순열 파라미터**:
  - 폭 t = 3 (rate 2 + capacity 1), S-box x⁵
  - 라운드: full 2 → partial 3 → full 2  (full 4 + partial 3)
  - MDS: Cauchy 행렬 M[i][j] = 1 / (xᵢ + yⱼ),  x = [0, 1, 2], y = [3, 4, 5]
  - 라운드 상수: SHA-256("zkcircuits.poseidon.rc.{r}.{i}") mod p

  한 라운드:  sᵢ ← sᵢ + rc[r][i]
             sᵢ ← sᵢ⁵  (full: 모든 레인, partial: 레인 0만)
             s  ← M · s

**흡수(absorb)**:
  arity 1:  [x₀, 0,  1]
  arity 2:  [x₀, x₁, 2]
  digest = 순열 후 레인 0. 입력이 3개 이상이면 왼쪽부터 접는다:
  H(x₀, x₁, x₂) = H(H(x₀, x₁), x₂)

**회로 배치** (영역 높이 8):

  offset │ s0 │ s1 │ s2 │ 활성 셀렉터
  ───────┼────┼────┼────┼──────────────────
     0   │ x₀ │ x₁ │ a  │ absorb(a), round 0
     1   │    │    │    │ round 1
    ...  │    │    │    │ ...
     6   │    │    │    │ round 6
     7   │ h  │    │    │

  라운드 게이트 r:  s(offset+1) - M · sbox(s(offset) + rc[r]) = 0
  S-box는 t² = t·t, t⁴ = t²·t², t⁵ = t⁴·t 로 펼친다.
"""

import hashlib
from dataclasses import dataclass

from zkcircuits.errors import ConstraintViolation
from zkcircuits.frontend.constraint_system import Column, Selector
from zkcircuits.frontend.layouter import Value
from zkcircuits.plonk.field import FR, CURVE_ORDER


WIDTH = 3
FULL_ROUNDS = 4
PARTIAL_ROUNDS = 3
TOTAL_ROUNDS = FULL_ROUNDS + PARTIAL_ROUNDS
REGION_HEIGHT = TOTAL_ROUNDS + 1


def _round_constant(r, i):
    digest = hashlib.sha256(f"zkcircuits.poseidon.rc.{r}.{i}".encode()).digest()
    return FR(int.from_bytes(digest, "big") % CURVE_ORDER)


ROUND_CONSTANTS = [[_round_constant(r, i) for i in range(WIDTH)] for r in range(TOTAL_ROUNDS)]

_MDS_X = (0, 1, 2)
_MDS_Y = (3, 4, 5)
MDS = [[FR(1) / FR(x + y) for y in _MDS_Y] for x in _MDS_X]


def is_full_round(r):
    half = FULL_ROUNDS // 2
    return r < half or r >= half + PARTIAL_ROUNDS


# ─────────────────────────────────────────────────────────────────────
# 네이티브 구현
# ─────────────────────────────────────────────────────────────────────

def permutation_round(state, r):
    """한 라운드를 적용한 새 상태 (FR 리스트)."""
    state = [s + c for s, c in zip(state, ROUND_CONSTANTS[r])]
    if is_full_round(r):
        state = [s ** 5 for s in state]
    else:
        state = [state[0] ** 5] + state[1:]
    return [sum((MDS[i][j] * state[j] for j in range(WIDTH)), FR(0)) for i in range(WIDTH)]


def permute(state):
    state = [FR(s) for s in state]
    for r in range(TOTAL_ROUNDS):
        state = permutation_round(state, r)
    return state


def initial_state(inputs):
    if len(inputs) == 1:
        return [FR(inputs[0]), FR(0), FR(1)]
    return [FR(inputs[0]), FR(inputs[1]), FR(2)]


def poseidon_hash(inputs):
    """
    Raises:
        ValueError: 입력이 비어 있을 때
    """
    inputs = list(inputs)
    if not inputs:
        raise ValueError("해시할 입력이 없습니다")
    if len(inputs) <= 2:
        return permute(initial_state(inputs))[0]
    digest = poseidon_hash(inputs[:2])
    for value in inputs[2:]:
        digest = poseidon_hash([digest, value])
    return digest


def commit(value, salt):
    """C = H(value, salt)."""
    return poseidon_hash([value, salt])


# ─────────────────────────────────────────────────────────────────────
# 회로 칩
# ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PoseidonConfig:
    state: tuple
    q_rounds: tuple
    q_absorb1: Selector
    q_absorb2: Selector


class PoseidonChip:
    def __init__(self, config):
        self.config = config

    @staticmethod
    def configure(builder):
        state = tuple(builder.advice_column() for _ in range(WIDTH))
        for column in state:
            builder.enable_equality(column)
        q_rounds = tuple(builder.selector() for _ in range(TOTAL_ROUNDS))
        q_absorb1 = builder.selector()
        q_absorb2 = builder.selector()

        for r in range(TOTAL_ROUNDS):
            builder.create_gate(f"poseidon round {r}", _round_gate(state, q_rounds[r], r))

        def absorb1(meta):
            q = meta.query_selector(q_absorb1)
            return [
                q * meta.query_advice(state[1], 0),
                q * (meta.query_advice(state[2], 0) - 1),
            ]

        def absorb2(meta):
            q = meta.query_selector(q_absorb2)
            return [q * (meta.query_advice(state[2], 0) - 2)]

        builder.create_gate("poseidon absorb 1", absorb1)
        builder.create_gate("poseidon absorb 2", absorb2)
        return PoseidonConfig(state, q_rounds, q_absorb1, q_absorb2)

    def _hash_region(self, layouter, cells):
        config = self.config
        s0, s1, s2 = config.state

        def body(region):
            region.copy_advice("input 0", cells[0], s0, 0)
            if len(cells) == 1:
                region.assign_advice("zero lane", s1, 0, Value.known(0))
                region.assign_advice("capacity", s2, 0, Value.known(1))
                region.enable_selector(config.q_absorb1, 0)
            else:
                region.copy_advice("input 1", cells[1], s1, 0)
                region.assign_advice("capacity", s2, 0, Value.known(2))
                region.enable_selector(config.q_absorb2, 0)

            values = [cell.value for cell in cells]
            values += [Value.known(0)] if len(cells) == 1 else []
            values.append(Value.known(len(cells)))

            digest = None
            for r in range(TOTAL_ROUNDS):
                region.enable_selector(config.q_rounds[r], r)
                values = _next_values(values, r)
                assigned = [
                    region.assign_advice(f"round {r} lane {i}", column, r + 1, values[i])
                    for i, column in enumerate(config.state)
                ]
                digest = assigned[0]
            return digest

        return layouter.assign_region("poseidon", body)

    def hash(self, layouter, cells):
        """셀들의 해시 digest 셀을 반환한다.

        Raises:
            ConstraintViolation: 입력이 없을 때
        """
        cells = list(cells)
        if not cells:
            raise ConstraintViolation("해시할 입력 셀이 없습니다")
        if len(cells) <= 2:
            return self._hash_region(layouter, cells)
        digest = self._hash_region(layouter, cells[:2])
        for cell in cells[2:]:
            digest = self._hash_region(layouter, [digest, cell])
        return digest

    def commit(self, layouter, value_cell, salt_cell):
        return self.hash(layouter, [value_cell, salt_cell])


def _next_values(values, r):
    if not all(v.is_known() for v in values):
        return [Value.unknown() for _ in values]
    return [Value.known(s) for s in permutation_round([v.inner for v in values], r)]


def _round_gate(state, q_round, r):
    full = is_full_round(r)
    constants = ROUND_CONSTANTS[r]

    def gate(meta):
        q = meta.query_selector(q_round)
        boxed = []
        for i, column in enumerate(state):
            t = meta.query_advice(column, 0) + constants[i]
            if full or i == 0:
                t2 = t * t
                t4 = t2 * t2
                t = t4 * t
            boxed.append(t)
        polys = []
        for i, column in enumerate(state):
            mixed = boxed[0] * MDS[i][0] + boxed[1] * MDS[i][1] + boxed[2] * MDS[i][2]
            polys.append(q * (meta.query_advice(column, 1) - mixed))
        return polys

    return gate
