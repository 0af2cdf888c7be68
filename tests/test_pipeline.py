"""
ProofPipeline 종단 간 테스트
==============================

시나리오:
  1. Square x=5 → [25] 검증 True, [24] 검증 False
  2. AgeRange age=25, salt=12345, [18, 65] → 커밋먼트 H(25, 12345), valid=1
  3. AgeRange age=17 → valid=0, valid=1로 위조하면 False
  4. RangeMembership(bits=8): 255는 증명, 256은 SynthesisError
  5. BalanceSufficiency, MerkleMembership, VoteCast: 증명 후 커밋먼트, 루트,
     nullifier를 바꿔치기하면 False

조작:
  - 커밋먼트 바꿔치기, valid 뒤집기, 증명 바이트 변경, 공개 입력 수 불일치 → False
  - verify는 어떤 입력에도 예외를 던지지 않는다
  - witness에 따라 모양이 바뀌는 회로는 ShapeError, 낮춘 회로 불일치는 ProveError

키 생성은 모듈 또는 클래스 fixture에서 한 번만 한다.
"""

import pytest

from zkcircuits import serialization
from zkcircuits.circuits.age_range import AgeRangeCircuit, AgeRangeWitness
from zkcircuits.circuits.balance import BalanceSufficiencyCircuit, BalanceWitness, balance_commitment
from zkcircuits.circuits.merkle import MerkleMembershipCircuit, MerkleMembershipWitness
from zkcircuits.circuits.range_membership import RangeMembershipWitness
from zkcircuits.circuits.square import SquareCircuit, SquareWitness
from zkcircuits.circuits.voting import VoteCastCircuit, VoteWitness, voter_leaf, nullifier, vote_hash
from zkcircuits.config import Settings
from zkcircuits.errors import InvalidEncoding, ProveError, ShapeError, SynthesisError
from zkcircuits.frontend.arithmetize import Arithmetization
from zkcircuits.frontend.layouter import Value
from zkcircuits.gadgets.merkle import build_merkle_tree, merkle_path
from zkcircuits.gadgets.poseidon import commit
from zkcircuits.keys import KeyManager, KeyStore, VerifyingKey
from zkcircuits.pipeline import ProofPipeline
from zkcircuits.plonk.field import FR


LEAVES = [101, 202, 303, 404, 505]
SECRETS = [7, 8, 9, 10]


@pytest.fixture(scope="module")
def manager():
    return KeyManager(Settings(srs_seed="pipeline-test"), KeyStore())


@pytest.fixture(scope="module")
def pipeline():
    return ProofPipeline()


@pytest.fixture(scope="module")
def square(manager, pipeline):
    pk, vk = manager.generate_keys(SquareCircuit, k=3)
    proof = pipeline.prove(pk, SquareWitness(x=5))
    return {"pk": pk, "vk": vk, "proof": proof}


@pytest.fixture(scope="module")
def age(manager, pipeline):
    pk, vk = manager.generate_keys(AgeRangeCircuit)
    adult = pipeline.prove_record(pk, AgeRangeWitness(25, 12345, 18, 65))
    minor = pipeline.prove_record(pk, AgeRangeWitness(17, 12345, 18, 65))
    return {"pk": pk, "vk": vk, "adult": adult, "minor": minor}


def _flip(data, index):
    data = bytearray(data)
    data[index] ^= 0x01
    return bytes(data)


# ─────────────────────────────────────────────────────────────────────
# 시나리오 1: Square
# ─────────────────────────────────────────────────────────────────────

class TestSquareScenario:

    def test_proof_size(self, square):
        assert len(square["proof"]) == serialization.PROOF_SIZE

    def test_verifies(self, pipeline, square):
        assert pipeline.verify(square["vk"], [25], square["proof"]) is True
        assert pipeline.verify(square["vk"], [FR(25)], square["proof"]) is True

    def test_wrong_output(self, pipeline, square):
        assert pipeline.verify(square["vk"], [24], square["proof"]) is False

    def test_verifying_key_from_bytes(self, pipeline, square):
        vk = VerifyingKey.from_bytes(square["vk"].to_bytes())
        assert pipeline.verify(vk, [25], square["proof"]) is True

    def test_explicit_public_inputs(self, pipeline, square):
        proof = pipeline.prove(square["pk"], SquareWitness(x=5), [25])
        assert pipeline.verify(square["vk"], [25], proof) is True

    def test_proofs_are_randomized(self, pipeline, square):
        proof = pipeline.prove(square["pk"], SquareWitness(x=5))
        assert proof != square["proof"]

    def test_wrong_claimed_output(self, pipeline, square):
        with pytest.raises(SynthesisError):
            pipeline.prove(square["pk"], SquareWitness(x=5), [24])

    def test_wrong_public_input_count(self, pipeline, square):
        with pytest.raises(SynthesisError):
            pipeline.prove(square["pk"], SquareWitness(x=5), [25, 1])

    def test_wrong_witness_type(self, pipeline, square):
        with pytest.raises(SynthesisError):
            pipeline.prove(square["pk"], RangeMembershipWitness(value=5))

    def test_record_needs_flag(self, pipeline, square):
        with pytest.raises(SynthesisError):
            pipeline.prove_record(square["pk"], SquareWitness(x=5))


# ─────────────────────────────────────────────────────────────────────
# verify는 예외를 던지지 않는다
# ─────────────────────────────────────────────────────────────────────

class TestVerifyNeverRaises:

    @pytest.mark.parametrize("proof_bytes", [
        b"",
        b"garbage",
        b"\x00" * serialization.PROOF_SIZE,
        b"\xff" * serialization.PROOF_SIZE,
        None,
        "text",
    ])
    def test_garbage_proof(self, pipeline, square, proof_bytes):
        assert pipeline.verify(square["vk"], [25], proof_bytes) is False

    @pytest.mark.parametrize("public_inputs", [[], [25, 25], None, [-1], [True], ["25"]])
    def test_bad_public_inputs(self, pipeline, square, public_inputs):
        assert pipeline.verify(square["vk"], public_inputs, square["proof"]) is False

    @pytest.mark.parametrize("index", [0, 63, 64 * 4 + 10, 64 * 9, 799])
    def test_flipped_proof_byte(self, pipeline, square, index):
        tampered = _flip(square["proof"], index)
        assert pipeline.verify(square["vk"], [25], tampered) is False


# ─────────────────────────────────────────────────────────────────────
# 시나리오 2, 3: AgeRange wire record
# ─────────────────────────────────────────────────────────────────────

class TestAgeRangeScenario:

    def test_adult_record(self, age):
        value, flag, proof_bytes = serialization.decode_record(age["adult"])
        assert value == commit(25, 12345)
        assert flag is True
        assert len(proof_bytes) == serialization.PROOF_SIZE

    def test_adult_verifies(self, pipeline, age):
        assert pipeline.verify_record(age["vk"], age["adult"], [18, 65]) is True

    def test_adult_verifies_with_public_inputs(self, pipeline, age):
        _, _, proof_bytes = serialization.decode_record(age["adult"])
        public = [commit(25, 12345), 1, 18, 65]
        assert pipeline.verify(age["vk"], public, proof_bytes) is True

    def test_minor_record(self, pipeline, age):
        value, flag, _ = serialization.decode_record(age["minor"])
        assert value == commit(17, 12345)
        assert flag is False
        assert pipeline.verify_record(age["vk"], age["minor"], [18, 65]) is True

    def test_minor_forged_valid(self, pipeline, age):
        forged = _flip(age["minor"], serialization.FR_SIZE)
        assert forged[serialization.FR_SIZE] == 1
        assert pipeline.verify_record(age["vk"], forged, [18, 65]) is False

    def test_adult_flipped_valid(self, pipeline, age):
        flipped = _flip(age["adult"], serialization.FR_SIZE)
        assert pipeline.verify_record(age["vk"], flipped, [18, 65]) is False

    def test_commitment_substitution(self, pipeline, age):
        _, _, proof_bytes = serialization.decode_record(age["adult"])
        record = serialization.encode_record(commit(25, 12346), True, proof_bytes)
        assert pipeline.verify_record(age["vk"], record, [18, 65]) is False

    def test_other_bounds(self, pipeline, age):
        assert pipeline.verify_record(age["vk"], age["adult"], [21, 65]) is False
        assert pipeline.verify_record(age["vk"], age["adult"], [18, 64]) is False

    def test_missing_bounds(self, pipeline, age):
        assert pipeline.verify_record(age["vk"], age["adult"]) is False

    def test_swapped_proofs(self, pipeline, age):
        _, _, minor_proof = serialization.decode_record(age["minor"])
        record = age["adult"][:serialization.RECORD_HEADER_SIZE] + minor_proof
        assert pipeline.verify_record(age["vk"], record, [18, 65]) is False

    def test_flipped_proof_byte(self, pipeline, age):
        tampered = _flip(age["adult"], len(age["adult"]) - 1)
        assert pipeline.verify_record(age["vk"], tampered, [18, 65]) is False

    def test_short_record(self, pipeline, age):
        with pytest.raises(InvalidEncoding):
            pipeline.verify_record(age["vk"], age["adult"][:10], [18, 65])

    def test_bad_record_flag(self, pipeline, age):
        record = bytearray(age["adult"])
        record[serialization.FR_SIZE] = 2
        with pytest.raises(InvalidEncoding):
            pipeline.verify_record(age["vk"], bytes(record), [18, 65])

    def test_square_key_rejects_age_proof(self, pipeline, square, age):
        _, _, proof_bytes = serialization.decode_record(age["adult"])
        assert pipeline.verify(square["vk"], [25], proof_bytes) is False


# ─────────────────────────────────────────────────────────────────────
# 시나리오 4: RangeMembership
# ─────────────────────────────────────────────────────────────────────

class TestRangeMembershipScenario:

    @pytest.fixture(scope="class")
    def range_keys(self, manager):
        pk, vk = manager.generate_keys("range_membership", bits=8)
        return {"pk": pk, "vk": vk}

    def test_max_value_proves(self, pipeline, range_keys):
        proof = pipeline.prove(range_keys["pk"], RangeMembershipWitness(value=255))
        assert pipeline.verify(range_keys["vk"], [1], proof) is True

    def test_overflow_rejected(self, pipeline, range_keys):
        with pytest.raises(SynthesisError):
            pipeline.prove(range_keys["pk"], RangeMembershipWitness(value=256))


# ─────────────────────────────────────────────────────────────────────
# 모양 불일치와 낮춘 회로 검사
# ─────────────────────────────────────────────────────────────────────

class WitnessDependentSquare(SquareCircuit):
    """witness가 있을 때만 영역을 하나 더 만드는 잘못된 회로."""

    def synthesize(self, config, layouter):
        super().synthesize(config, layouter)
        if self.has_witness():
            layouter.assign_region(
                "pad",
                lambda region: region.assign_advice("pad", config.x, 0, Value.known(0)),
            )


class TestProveGuards:

    def test_witness_dependent_shape(self, pipeline):
        manager = KeyManager(Settings(srs_seed="pipeline-shape"), KeyStore())
        pk, _ = manager.generate_keys(WitnessDependentSquare, k=4)
        with pytest.raises(ShapeError):
            pipeline.prove(pk, SquareWitness(3))

    def test_unsatisfied_lowered_circuit(self, pipeline, square, monkeypatch):
        wire_values = Arithmetization.wire_values

        def corrupted(self, public_inputs, n):
            a, b, c = wire_values(self, public_inputs, n)
            a = list(a)
            a[0] = a[0] + FR(1)
            return a, b, c

        monkeypatch.setattr(Arithmetization, "wire_values", corrupted)
        with pytest.raises(ProveError):
            pipeline.prove(square["pk"], SquareWitness(x=5))


# ─────────────────────────────────────────────────────────────────────
# 커밋먼트와 멤버십 회로: 증명 → 검증 → 위조
# ─────────────────────────────────────────────────────────────────────

class TestBalanceScenario:

    @pytest.fixture(scope="class")
    def balance(self, manager, pipeline):
        pk, vk = manager.generate_keys(BalanceSufficiencyCircuit)
        proof, public = pipeline.prove_with_public_inputs(pk, BalanceWitness(1000, 42, 999, 500))
        return {"vk": vk, "proof": proof, "public": public}

    def test_public_inputs(self, balance):
        assert balance["public"] == [balance_commitment(1000, 42, 999), FR(1), FR(500)]

    def test_verifies(self, pipeline, balance):
        assert pipeline.verify(balance["vk"], balance["public"], balance["proof"]) is True

    def test_forged_commitment(self, pipeline, balance):
        public = [balance_commitment(1000, 43, 999)] + balance["public"][1:]
        assert pipeline.verify(balance["vk"], public, balance["proof"]) is False

    def test_forged_required_amount(self, pipeline, balance):
        public = balance["public"][:2] + [FR(400)]
        assert pipeline.verify(balance["vk"], public, balance["proof"]) is False


class TestMerkleMembershipScenario:

    @pytest.fixture(scope="class")
    def membership(self, manager, pipeline):
        root, levels = build_merkle_tree(LEAVES, 4)
        elements, indices = merkle_path(levels, 2)
        pk, vk = manager.generate_keys(MerkleMembershipCircuit)
        proof = pipeline.prove(pk, MerkleMembershipWitness(LEAVES[2], elements, indices))
        return {"vk": vk, "proof": proof, "root": root}

    def test_verifies(self, pipeline, membership):
        assert pipeline.verify(membership["vk"], [membership["root"]], membership["proof"]) is True

    def test_forged_root(self, pipeline, membership):
        forged, _ = build_merkle_tree(LEAVES[:3] + [999], 4)
        assert forged != membership["root"]
        assert pipeline.verify(membership["vk"], [forged], membership["proof"]) is False


class TestVoteCastScenario:

    @pytest.fixture(scope="class")
    def ballot(self, manager, pipeline):
        root, levels = build_merkle_tree([voter_leaf(s) for s in SECRETS], 2)
        elements, indices = merkle_path(levels, 1)
        pk, vk = manager.generate_keys(VoteCastCircuit)
        proof, public = pipeline.prove_with_public_inputs(
            pk, VoteWitness(SECRETS[1], 1, elements, indices),
        )
        return {"vk": vk, "proof": proof, "public": public, "root": root}

    def test_public_inputs(self, ballot):
        assert ballot["public"] == [ballot["root"], nullifier(SECRETS[1]), vote_hash(1, SECRETS[1])]

    def test_verifies(self, pipeline, ballot):
        assert pipeline.verify(ballot["vk"], ballot["public"], ballot["proof"]) is True

    def test_forged_nullifier(self, pipeline, ballot):
        public = list(ballot["public"])
        public[1] = nullifier(SECRETS[2])
        assert pipeline.verify(ballot["vk"], public, ballot["proof"]) is False

    def test_forged_vote(self, pipeline, ballot):
        public = list(ballot["public"])
        public[2] = vote_hash(0, SECRETS[1])
        assert pipeline.verify(ballot["vk"], public, ballot["proof"]) is False
