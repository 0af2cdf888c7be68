"""
BalanceSufficiency 회로: 커밋된 잔액이 요구 금액 이상인지 증명한다.

  commitment = H(H(balance, account_id), salt)
  RangeCheck(bits): balance, required_amount
  sufficient = [balance ≥ required_amount]

  공개 입력: [commitment, sufficient, required_amount]
"""

from dataclasses import dataclass

from zkcircuits.circuits.base import CircuitKind, CircuitSpec
from zkcircuits.gadgets.comparator import ComparatorChip, ComparatorConfig
from zkcircuits.gadgets.poseidon import PoseidonChip, PoseidonConfig, poseidon_hash
from zkcircuits.gadgets.range_check import RangeCheckChip, RangeCheckConfig
from zkcircuits.plonk.field import FR


@dataclass
class BalanceWitness:
    balance: int
    account_id: int
    salt: int
    required_amount: int


@dataclass(frozen=True)
class BalanceConfig:
    range_check: RangeCheckConfig
    comparator: ComparatorConfig
    poseidon: PoseidonConfig
    private: object
    instance: object


def balance_commitment(balance, account_id, salt):
    return poseidon_hash([balance, account_id, salt])


class BalanceSufficiencyCircuit(CircuitSpec):
    KIND = CircuitKind.BALANCE_SUFFICIENCY
    DEFAULT_K = 9
    WITNESS = BalanceWitness
    PARAMS = {"bits": 32}

    def configure(self, builder):
        bits = self._params["bits"]
        range_check = RangeCheckChip.configure(builder, bits)
        comparator = ComparatorChip.configure(builder, bits)
        poseidon = PoseidonChip.configure(builder)
        private = builder.advice_column()
        instance = builder.instance_column()
        builder.enable_equality(private)
        builder.enable_equality(instance)
        return BalanceConfig(range_check, comparator, poseidon, private, instance)

    def synthesize(self, config, layouter):
        range_chip = RangeCheckChip(config.range_check)
        comparator = ComparatorChip(config.comparator)
        poseidon = PoseidonChip(config.poseidon)

        balance = range_chip.assign(layouter, self.value("balance"))
        required = range_chip.assign(layouter, self.value("required_amount"))

        def private_inputs(region):
            account = region.assign_advice("account_id", config.private, 0, self.value("account_id"))
            salt = region.assign_advice("salt", config.private, 1, self.value("salt"))
            return account, salt

        account, salt = layouter.assign_region("private inputs", private_inputs)
        commitment = poseidon.hash(layouter, [balance, account, salt])
        sufficient = comparator.greater_eq(layouter, balance, required)

        layouter.constrain_instance(commitment, config.instance, 0)
        layouter.constrain_instance(sufficient, config.instance, 1)
        layouter.constrain_instance(required, config.instance, 2)

    def expected_public_inputs(self):
        w = self.witness
        sufficient = 1 if w.balance >= w.required_amount else 0
        return [
            balance_commitment(w.balance, w.account_id, w.salt),
            FR(sufficient),
            FR(w.required_amount),
        ]
