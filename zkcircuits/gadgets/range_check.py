"""
RangeCheck 칩: value < 2^N 을 비트 분해로 증명한다.

  offset │ value │ bits │ q_bit │ q_decompose
  ───────┼───────┼──────┼───────┼────────────
     0   │   v   │  b₀  │   1   │     1
     1   │       │  b₁  │   1   │
    ...  │       │  ... │   1   │
    N-1  │       │ b_N-1│   1   │

  range bit:        q_bit · b·(1 - b) = 0
  range decompose:  q_decompose · (v - Σ 2ⁱ·bᵢ) = 0

값이 N비트를 넘으면 하위 N비트만 배치되므로 재구성 제약을 만족하지 못한다.
"""

from dataclasses import dataclass

from zkcircuits.errors import ConstraintViolation
from zkcircuits.frontend.constraint_system import Column, Selector
from zkcircuits.frontend.layouter import Value


MAX_BITS = 252


@dataclass(frozen=True)
class RangeCheckConfig:
    value: Column
    bits: Column
    q_bit: Selector
    q_decompose: Selector
    num_bits: int


def check_bit_width(num_bits):
    if not isinstance(num_bits, int) or not 1 <= num_bits <= MAX_BITS:
        raise ConstraintViolation(f"지원하지 않는 비트 폭: {num_bits!r} (1..{MAX_BITS})")


class RangeCheckChip:
    def __init__(self, config):
        self.config = config

    @staticmethod
    def configure(builder, num_bits):
        check_bit_width(num_bits)
        value = builder.advice_column()
        bits = builder.advice_column()
        builder.enable_equality(value)
        q_bit = builder.selector()
        q_decompose = builder.selector()

        def bit_gate(meta):
            b = meta.query_advice(bits, 0)
            return [meta.query_selector(q_bit) * b * (1 - b)]

        def decompose_gate(meta):
            acc = meta.query_advice(value, 0)
            for i in range(num_bits):
                acc = acc - meta.query_advice(bits, i) * (1 << i)
            return [meta.query_selector(q_decompose) * acc]

        builder.create_gate("range bit", bit_gate)
        builder.create_gate("range decompose", decompose_gate)
        return RangeCheckConfig(value, bits, q_bit, q_decompose, num_bits)

    def _decompose(self, region, value_cell):
        config = self.config
        region.enable_selector(config.q_decompose, 0)
        for i in range(config.num_bits):
            region.enable_selector(config.q_bit, i)
            bit = value_cell.value.map(lambda v, i=i: (int(v) >> i) & 1)
            region.assign_advice(f"bit {i}", config.bits, i, bit)
        return value_cell

    def assign(self, layouter, value):
        """새 셀에 value를 배치하고 범위 검사한다. 값 셀을 반환한다."""
        if not isinstance(value, Value):
            value = Value.known(value)

        def body(region):
            cell = region.assign_advice("value", self.config.value, 0, value)
            return self._decompose(region, cell)

        return layouter.assign_region("range check", body)

    def check(self, layouter, cell):
        """기존 셀을 복사해 와서 범위 검사한다."""
        def body(region):
            copied = region.copy_advice("value", cell, self.config.value, 0)
            return self._decompose(region, copied)

        return layouter.assign_region("range check", body)
