"""
MerkleMembership 회로: 비밀 잎이 공개 루트의 Merkle 트리에 속함을 증명한다.

  root = MerklePath(leaf, path_elements, path_indices)   (depth 레벨)
  공개 입력: [root]
"""

from dataclasses import dataclass, field

from zkcircuits.circuits.base import CircuitKind, CircuitSpec
from zkcircuits.errors import ConstraintViolation
from zkcircuits.gadgets.merkle import MerklePathChip, MerklePathConfig, merkle_root
from zkcircuits.gadgets.poseidon import PoseidonConfig, PoseidonChip


@dataclass
class MerkleMembershipWitness:
    leaf: int
    path_elements: list = field(default_factory=list)
    path_indices: list = field(default_factory=list)


@dataclass(frozen=True)
class MerkleMembershipConfig:
    merkle: MerklePathConfig
    poseidon: PoseidonConfig
    private: object
    instance: object


def check_path(spec, depth):
    """
    Raises:
        ConstraintViolation: 경로 길이가 depth와 다를 때
    """
    if spec.witness is None:
        return
    for name in ("path_elements", "path_indices"):
        length = len(getattr(spec.witness, name))
        if length != depth:
            raise ConstraintViolation(f"{name} 길이 {length}가 트리 깊이 {depth}와 다릅니다")


class MerkleMembershipCircuit(CircuitSpec):
    KIND = CircuitKind.MERKLE_MEMBERSHIP
    DEFAULT_K = 9
    WITNESS = MerkleMembershipWitness
    PARAMS = {"depth": 4}

    def configure(self, builder):
        poseidon = PoseidonChip.configure(builder)
        merkle = MerklePathChip.configure(builder)
        private = builder.advice_column()
        instance = builder.instance_column()
        builder.enable_equality(private)
        builder.enable_equality(instance)
        return MerkleMembershipConfig(merkle, poseidon, private, instance)

    def synthesize(self, config, layouter):
        depth = self._params["depth"]
        check_path(self, depth)
        chip = MerklePathChip.construct(config.merkle, config.poseidon)

        leaf = layouter.assign_region(
            "leaf",
            lambda region: region.assign_advice("leaf", config.private, 0, self.value("leaf")),
        )
        root = chip.root(
            layouter, leaf,
            self.values("path_elements", depth),
            self.values("path_indices", depth),
        )
        layouter.constrain_instance(root, config.instance, 0)

    def expected_public_inputs(self):
        w = self.witness
        return [merkle_root(w.leaf, w.path_elements, w.path_indices)]
