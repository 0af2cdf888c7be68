"""
Comparator 칩: 범위 검사된 두 N비트 값 a, b 에 대해 a ≥ b 를 계산한다.

  d = a - b + 2^N  ∈ [1, 2^(N+1))

  offset │ lhs │ rhs │ bits │ q_bit │ q_compare
  ───────┼─────┼─────┼──────┼───────┼──────────
     0   │  a  │  b  │  d₀  │   1   │    1
    ...  │     │     │  ... │   1   │
     N   │     │     │  d_N │   1   │            ← d_N = [a ≥ b]

  compare bit:        q_bit · d·(1 - d) = 0
  compare decompose:  q_compare · (a - b + 2^N - Σ 2ⁱ·dᵢ) = 0

a ≤ b 는 피연산자를 바꾼 같은 영역이다. a == b 이면 둘 다 1.

**주의**: a, b가 N비트임은 소유 회로가 RangeCheck로 보장해야 한다.
"""

from dataclasses import dataclass

from zkcircuits.frontend.constraint_system import Column, Selector
from zkcircuits.gadgets.range_check import check_bit_width


@dataclass(frozen=True)
class ComparatorConfig:
    lhs: Column
    rhs: Column
    bits: Column
    q_bit: Selector
    q_compare: Selector
    num_bits: int


class ComparatorChip:
    def __init__(self, config):
        self.config = config

    @staticmethod
    def configure(builder, num_bits):
        check_bit_width(num_bits)
        lhs = builder.advice_column()
        rhs = builder.advice_column()
        bits = builder.advice_column()
        for column in (lhs, rhs, bits):
            builder.enable_equality(column)
        q_bit = builder.selector()
        q_compare = builder.selector()

        def bit_gate(meta):
            d = meta.query_advice(bits, 0)
            return [meta.query_selector(q_bit) * d * (1 - d)]

        def compare_gate(meta):
            acc = meta.query_advice(lhs, 0) - meta.query_advice(rhs, 0) + (1 << num_bits)
            for i in range(num_bits + 1):
                acc = acc - meta.query_advice(bits, i) * (1 << i)
            return [meta.query_selector(q_compare) * acc]

        builder.create_gate("compare bit", bit_gate)
        builder.create_gate("compare decompose", compare_gate)
        return ComparatorConfig(lhs, rhs, bits, q_bit, q_compare, num_bits)

    def greater_eq(self, layouter, a, b):
        """[a ≥ b] 비트 셀을 반환한다."""
        config = self.config
        num_bits = config.num_bits

        def body(region):
            lhs = region.copy_advice("lhs", a, config.lhs, 0)
            rhs = region.copy_advice("rhs", b, config.rhs, 0)
            region.enable_selector(config.q_compare, 0)
            diff = lhs.value - rhs.value + (1 << num_bits)
            top = None
            for i in range(num_bits + 1):
                region.enable_selector(config.q_bit, i)
                bit = diff.map(lambda v, i=i: (int(v) >> i) & 1)
                top = region.assign_advice(f"diff bit {i}", config.bits, i, bit)
            return top

        return layouter.assign_region("compare", body)

    def less_eq(self, layouter, a, b):
        """[a ≤ b] 비트 셀을 반환한다."""
        return self.greater_eq(layouter, b, a)
