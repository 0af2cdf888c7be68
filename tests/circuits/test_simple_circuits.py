"""
Square / RangeMembership 회로 테스트
=====================================

MockProver 수준 검사와 작은 k에서의 실제 증명/검증.

테스트 범위:
  - Square: y = x², 잘못된 공개 입력 거부, 증명/검증
  - RangeMembership: 경계값 (0, 2^bits - 1, 2^bits), 증명/검증
"""

import pytest

from zkcircuits.circuits.range_membership import RangeMembershipCircuit, RangeMembershipWitness
from zkcircuits.circuits.square import SquareCircuit, SquareWitness
from zkcircuits.config import Settings
from zkcircuits.errors import SynthesisError
from zkcircuits.frontend.arithmetize import Arithmetization
from zkcircuits.frontend.mock import check_satisfied
from zkcircuits.keys import KeyManager, KeyStore
from zkcircuits.pipeline import ProofPipeline
from zkcircuits.plonk.field import FR


def _failures(spec, public_inputs=None):
    synthesis = spec.synthesis()
    if public_inputs is None:
        public_inputs = spec.expected_public_inputs()
    return check_satisfied(synthesis.shape, synthesis.layout, public_inputs)


def _lowered_ok(spec):
    synthesis = spec.synthesis()
    public_inputs = spec.expected_public_inputs()
    arith = Arithmetization(synthesis.shape, synthesis.layout)
    a, b, c = arith.wire_values(public_inputs, 1 << spec.DEFAULT_K)
    return arith.circuit().is_satisfied(a, b, c, public_inputs)


@pytest.fixture(scope="module")
def key_manager():
    return KeyManager(Settings(srs_seed="simple-circuits"), KeyStore())


# ─────────────────────────────────────────────────────────────────────
# Square
# ─────────────────────────────────────────────────────────────────────

class TestSquareCircuit:

    def test_expected_public_inputs(self):
        spec = SquareCircuit.with_witness(SquareWitness(x=7))
        assert spec.expected_public_inputs() == [FR(49)]

    def test_mock_satisfied(self):
        assert _failures(SquareCircuit.with_witness(SquareWitness(x=7))) == []

    def test_wrong_public_input(self):
        spec = SquareCircuit.with_witness(SquareWitness(x=7))
        assert _failures(spec, [FR(50)]) != []

    def test_lowered_fits_default_k(self):
        spec = SquareCircuit.with_witness(SquareWitness(x=7))
        assert _lowered_ok(spec)

    def test_prove_and_verify(self, key_manager):
        pk, vk = key_manager.generate_keys(SquareCircuit)
        pipeline = ProofPipeline()
        proof = pipeline.prove(pk, SquareWitness(x=7))
        assert pipeline.verify(vk, [49], proof) is True
        assert pipeline.verify(vk, [50], proof) is False

    def test_prove_with_wrong_public_input(self, key_manager):
        pk, _ = key_manager.generate_keys(SquareCircuit)
        with pytest.raises(SynthesisError):
            ProofPipeline().prove(pk, SquareWitness(x=7), [FR(50)])


# ─────────────────────────────────────────────────────────────────────
# RangeMembership
# ─────────────────────────────────────────────────────────────────────

class TestRangeMembershipCircuit:

    @pytest.mark.parametrize("value", [0, 1, 200, 255])
    def test_in_range(self, value):
        spec = RangeMembershipCircuit.with_witness(RangeMembershipWitness(value=value))
        assert spec.expected_public_inputs() == [FR(1)]
        assert _failures(spec) == []

    @pytest.mark.parametrize("value", [256, 1000])
    def test_out_of_range(self, value):
        spec = RangeMembershipCircuit.with_witness(RangeMembershipWitness(value=value))
        assert _failures(spec) != []

    def test_custom_bits(self):
        spec = RangeMembershipCircuit.with_witness(RangeMembershipWitness(value=15), bits=4)
        assert _failures(spec) == []
        spec = RangeMembershipCircuit.with_witness(RangeMembershipWitness(value=16), bits=4)
        assert _failures(spec) != []

    def test_lowered_fits_default_k(self):
        spec = RangeMembershipCircuit.with_witness(RangeMembershipWitness(value=77))
        assert _lowered_ok(spec)

    def test_prove_and_verify(self, key_manager):
        pk, vk = key_manager.generate_keys("range_membership")
        pipeline = ProofPipeline()
        proof = pipeline.prove(pk, RangeMembershipWitness(value=42))
        assert pipeline.verify(vk, [1], proof) is True
        assert pipeline.verify(vk, [0], proof) is False

    def test_out_of_range_cannot_prove(self, key_manager):
        pk, _ = key_manager.generate_keys("range_membership")
        with pytest.raises(SynthesisError):
            ProofPipeline().prove(pk, RangeMembershipWitness(value=300))
