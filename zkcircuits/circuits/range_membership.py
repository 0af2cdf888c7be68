"""
RangeMembership 회로: 비밀 값이 [0, 2^bits) 안에 있음을 증명한다.

  RangeCheck(bits) 로 값을 분해하고, valid 셀을 1로 고정해 instance[0]에 묶는다.
  공개 입력: [1]
"""

from dataclasses import dataclass

from zkcircuits.circuits.base import CircuitKind, CircuitSpec
from zkcircuits.frontend.layouter import Value
from zkcircuits.gadgets.range_check import RangeCheckChip, RangeCheckConfig
from zkcircuits.plonk.field import FR


@dataclass
class RangeMembershipWitness:
    value: int


@dataclass(frozen=True)
class RangeMembershipConfig:
    range_check: RangeCheckConfig
    flag: object
    instance: object
    q_valid: object


class RangeMembershipCircuit(CircuitSpec):
    KIND = CircuitKind.RANGE_MEMBERSHIP
    DEFAULT_K = 5
    WITNESS = RangeMembershipWitness
    PARAMS = {"bits": 8}

    def configure(self, builder):
        range_check = RangeCheckChip.configure(builder, self._params["bits"])
        flag = builder.advice_column()
        instance = builder.instance_column()
        builder.enable_equality(flag)
        builder.enable_equality(instance)
        q_valid = builder.selector()

        builder.create_gate("valid", lambda meta: [
            meta.query_selector(q_valid) * (meta.query_advice(flag, 0) - 1)
        ])
        return RangeMembershipConfig(range_check, flag, instance, q_valid)

    def synthesize(self, config, layouter):
        RangeCheckChip(config.range_check).assign(layouter, self.value("value"))

        def body(region):
            region.enable_selector(config.q_valid, 0)
            return region.assign_advice("valid", config.flag, 0, Value.known(1))

        valid = layouter.assign_region("valid", body)
        layouter.constrain_instance(valid, config.instance, 0)

    def expected_public_inputs(self):
        return [FR(1)]
