"""
AgeRange 회로: 커밋된 나이가 [min_age, max_age] 안에 있는지 증명한다.

  commitment = H(age, salt)
  RangeCheck(bits): age, min_age, max_age
  ge = [age ≥ min_age],  le = [age ≤ max_age]   (Comparator)
  valid = ge · le

  공개 입력: [commitment, valid, min_age, max_age]

범위 밖의 나이도 증명은 만들어지며 valid = 0 이 공개된다.
"""

from dataclasses import dataclass

from zkcircuits.circuits.base import CircuitKind, CircuitSpec
from zkcircuits.gadgets.comparator import ComparatorChip, ComparatorConfig
from zkcircuits.gadgets.poseidon import PoseidonChip, PoseidonConfig, commit
from zkcircuits.gadgets.range_check import RangeCheckChip, RangeCheckConfig
from zkcircuits.plonk.field import FR


@dataclass
class AgeRangeWitness:
    age: int
    salt: int
    min_age: int
    max_age: int


@dataclass(frozen=True)
class AgeRangeConfig:
    range_check: RangeCheckConfig
    comparator: ComparatorConfig
    poseidon: PoseidonConfig
    private: object
    ge: object
    le: object
    valid: object
    instance: object
    q_and: object


def and_gate(builder, ge, le, valid, q_and):
    def gate(meta):
        g = meta.query_advice(ge, 0)
        l = meta.query_advice(le, 0)
        v = meta.query_advice(valid, 0)
        return [meta.query_selector(q_and) * (v - g * l)]

    builder.create_gate("and", gate)


def assign_and(layouter, config, ge_cell, le_cell):
    def body(region):
        region.enable_selector(config.q_and, 0)
        g = region.copy_advice("ge", ge_cell, config.ge, 0)
        l = region.copy_advice("le", le_cell, config.le, 0)
        return region.assign_advice("valid", config.valid, 0, g.value * l.value)

    return layouter.assign_region("and", body)


class AgeRangeCircuit(CircuitSpec):
    KIND = CircuitKind.AGE_RANGE
    DEFAULT_K = 8
    WITNESS = AgeRangeWitness
    PARAMS = {"bits": 8}

    def configure(self, builder):
        bits = self._params["bits"]
        range_check = RangeCheckChip.configure(builder, bits)
        comparator = ComparatorChip.configure(builder, bits)
        poseidon = PoseidonChip.configure(builder)
        private = builder.advice_column()
        ge = builder.advice_column()
        le = builder.advice_column()
        valid = builder.advice_column()
        instance = builder.instance_column()
        for column in (private, ge, le, valid, instance):
            builder.enable_equality(column)
        q_and = builder.selector()
        and_gate(builder, ge, le, valid, q_and)
        return AgeRangeConfig(
            range_check, comparator, poseidon, private, ge, le, valid, instance, q_and,
        )

    def synthesize(self, config, layouter):
        range_chip = RangeCheckChip(config.range_check)
        comparator = ComparatorChip(config.comparator)
        poseidon = PoseidonChip(config.poseidon)

        age = range_chip.assign(layouter, self.value("age"))
        min_age = range_chip.assign(layouter, self.value("min_age"))
        max_age = range_chip.assign(layouter, self.value("max_age"))
        salt = layouter.assign_region(
            "salt",
            lambda region: region.assign_advice("salt", config.private, 0, self.value("salt")),
        )

        commitment = poseidon.commit(layouter, age, salt)
        ge = comparator.greater_eq(layouter, age, min_age)
        le = comparator.less_eq(layouter, age, max_age)
        valid = assign_and(layouter, config, ge, le)

        layouter.constrain_instance(commitment, config.instance, 0)
        layouter.constrain_instance(valid, config.instance, 1)
        layouter.constrain_instance(min_age, config.instance, 2)
        layouter.constrain_instance(max_age, config.instance, 3)

    def expected_public_inputs(self):
        w = self.witness
        valid = 1 if w.min_age <= w.age <= w.max_age else 0
        return [commit(w.age, w.salt), FR(valid), FR(w.min_age), FR(w.max_age)]
