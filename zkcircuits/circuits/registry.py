"""
회로 레지스트리: CircuitKind → CircuitSpec 클래스 + 메타데이터.
"""

from dataclasses import dataclass

from zkcircuits.circuits.age_range import AgeRangeCircuit
from zkcircuits.circuits.balance import BalanceSufficiencyCircuit
from zkcircuits.circuits.base import CircuitKind, CircuitSpec
from zkcircuits.circuits.merkle import MerkleMembershipCircuit
from zkcircuits.circuits.range_membership import RangeMembershipCircuit
from zkcircuits.circuits.square import SquareCircuit
from zkcircuits.circuits.voting import VoteCastCircuit
from zkcircuits.errors import ShapeError


@dataclass(frozen=True)
class CircuitInfo:
    name: str
    description: str
    inputs: tuple
    outputs: tuple
    status: str = "production"


CIRCUITS = {
    CircuitKind.SQUARE: SquareCircuit,
    CircuitKind.RANGE_MEMBERSHIP: RangeMembershipCircuit,
    CircuitKind.AGE_RANGE: AgeRangeCircuit,
    CircuitKind.BALANCE_SUFFICIENCY: BalanceSufficiencyCircuit,
    CircuitKind.MERKLE_MEMBERSHIP: MerkleMembershipCircuit,
    CircuitKind.VOTE_CAST: VoteCastCircuit,
}

CIRCUIT_INFO = {
    CircuitKind.SQUARE: CircuitInfo(
        "square",
        "비밀 x의 제곱 y = x² 을 공개한다",
        ("x",),
        ("y",),
    ),
    CircuitKind.RANGE_MEMBERSHIP: CircuitInfo(
        "range_membership",
        "비밀 값이 [0, 2^bits) 범위에 있음을 증명한다",
        ("value",),
        ("valid",),
    ),
    CircuitKind.AGE_RANGE: CircuitInfo(
        "age_range",
        "커밋된 나이가 [min_age, max_age] 범위에 있는지 증명한다",
        ("age", "salt", "min_age", "max_age"),
        ("commitment", "valid", "min_age", "max_age"),
    ),
    CircuitKind.BALANCE_SUFFICIENCY: CircuitInfo(
        "balance_sufficiency",
        "커밋된 잔액이 요구 금액 이상인지 증명한다",
        ("balance", "account_id", "salt", "required_amount"),
        ("commitment", "sufficient", "required_amount"),
    ),
    CircuitKind.MERKLE_MEMBERSHIP: CircuitInfo(
        "merkle_membership",
        "비밀 잎이 공개 Merkle 루트의 트리에 속함을 증명한다",
        ("leaf", "path_elements", "path_indices"),
        ("root",),
    ),
    CircuitKind.VOTE_CAST: CircuitInfo(
        "vote_cast",
        "등록된 유권자의 0/1 투표를 nullifier와 함께 증명한다",
        ("voter_secret", "vote", "path_elements", "path_indices"),
        ("merkle_root", "nullifier", "vote_hash"),
    ),
}


def spec_class(circuit):
    """CircuitKind, 이름 문자열, CircuitSpec 클래스 중 하나를 클래스로 바꾼다."""
    if isinstance(circuit, type) and issubclass(circuit, CircuitSpec):
        if circuit.KIND not in CIRCUITS:
            raise ShapeError(f"등록되지 않은 회로 클래스: {circuit.__name__}")
        return circuit
    return CIRCUITS[CircuitKind.parse(circuit)]


def circuit_info(circuit):
    return CIRCUIT_INFO[spec_class(circuit).KIND]


def list_circuits():
    return [CIRCUIT_INFO[kind] for kind in CircuitKind]
