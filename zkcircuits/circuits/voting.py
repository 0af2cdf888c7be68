"""
VoteCast 회로: 등록된 유권자가 한 번만, 0/1 표를 던졌음을 증명한다.

  leaf      = H(voter_secret)                  (arity 1)
  root      = MerklePath(leaf, path)            → 유권자 트리 멤버십
  nullifier = H(voter_secret, 1)               (상수 1 셀은 게이트로 고정)
  vote · (1 - vote) = 0
  vote_hash = H(vote, voter_secret)

  공개 입력: [merkle_root, nullifier, vote_hash]

같은 비밀로 두 번 투표하면 같은 nullifier가 나온다.
"""

from dataclasses import dataclass, field

from zkcircuits.circuits.base import CircuitKind, CircuitSpec
from zkcircuits.circuits.merkle import check_path
from zkcircuits.frontend.layouter import Value
from zkcircuits.gadgets.merkle import MerklePathChip, MerklePathConfig, merkle_root
from zkcircuits.gadgets.poseidon import PoseidonChip, PoseidonConfig, poseidon_hash


@dataclass
class VoteWitness:
    voter_secret: int
    vote: int
    path_elements: list = field(default_factory=list)
    path_indices: list = field(default_factory=list)


@dataclass(frozen=True)
class VoteConfig:
    merkle: MerklePathConfig
    poseidon: PoseidonConfig
    private: object
    instance: object
    q_one: object
    q_vote: object


def voter_leaf(voter_secret):
    return poseidon_hash([voter_secret])


def nullifier(voter_secret):
    return poseidon_hash([voter_secret, 1])


def vote_hash(vote, voter_secret):
    return poseidon_hash([vote, voter_secret])


class VoteCastCircuit(CircuitSpec):
    KIND = CircuitKind.VOTE_CAST
    DEFAULT_K = 9
    WITNESS = VoteWitness
    PARAMS = {"depth": 2}

    def configure(self, builder):
        poseidon = PoseidonChip.configure(builder)
        merkle = MerklePathChip.configure(builder)
        private = builder.advice_column()
        instance = builder.instance_column()
        builder.enable_equality(private)
        builder.enable_equality(instance)
        q_one = builder.selector()
        q_vote = builder.selector()

        builder.create_gate("one", lambda meta: [
            meta.query_selector(q_one) * (meta.query_advice(private, 0) - 1)
        ])

        def vote_gate(meta):
            v = meta.query_advice(private, 0)
            return [meta.query_selector(q_vote) * v * (1 - v)]

        builder.create_gate("vote boolean", vote_gate)
        return VoteConfig(merkle, poseidon, private, instance, q_one, q_vote)

    def synthesize(self, config, layouter):
        depth = self._params["depth"]
        check_path(self, depth)
        poseidon = PoseidonChip(config.poseidon)
        chip = MerklePathChip.construct(config.merkle, config.poseidon)

        def private_inputs(region):
            secret = region.assign_advice("voter_secret", config.private, 0, self.value("voter_secret"))
            region.enable_selector(config.q_vote, 1)
            vote = region.assign_advice("vote", config.private, 1, self.value("vote"))
            region.enable_selector(config.q_one, 2)
            one = region.assign_advice("one", config.private, 2, Value.known(1))
            return secret, vote, one

        secret, vote, one = layouter.assign_region("private inputs", private_inputs)

        leaf = poseidon.hash(layouter, [secret])
        root = chip.root(
            layouter, leaf,
            self.values("path_elements", depth),
            self.values("path_indices", depth),
        )
        null = poseidon.hash(layouter, [secret, one])
        ballot = poseidon.hash(layouter, [vote, secret])

        layouter.constrain_instance(root, config.instance, 0)
        layouter.constrain_instance(null, config.instance, 1)
        layouter.constrain_instance(ballot, config.instance, 2)

    def expected_public_inputs(self):
        w = self.witness
        return [
            merkle_root(voter_leaf(w.voter_secret), w.path_elements, w.path_indices),
            nullifier(w.voter_secret),
            vote_hash(w.vote, w.voter_secret),
        ]
