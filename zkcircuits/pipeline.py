"""
증명 파이프라인 (ProofPipeline)
=================================

**prove(pk, witness, public_inputs=None)**:
  1. witness로 회로를 다시 configure + synthesize
  2. 지문이 키와 다르면 ShapeError
  3. MockProver로 제약 만족 검사 (공개 입력 벡터 포함) → SynthesisError
  4. 산술화 → 배선 값 → 낮춘 회로 만족 검사 → PLONK 증명
     (낮춘 회로 불일치와 백엔드 실패는 ProveError)
  5. 800바이트 정규 증명 반환

**verify(vk, public_inputs, proof_bytes)**:
  예외를 던지지 않는다. 공개 입력 수 불일치, 잘못된 바이트, 조작된 증명,
  암호학적 거부 모두 False.

**wire record**:
  [공개 값 32바이트][플래그 1바이트][증명]
  공개 입력 = [값, 플래그] + extra_public_inputs
  (AgeRange: extra = [min_age, max_age], BalanceSufficiency: extra = [required_amount])
"""

import logging
import time

from zkcircuits import serialization
from zkcircuits.errors import CircuitError, ProveError, ShapeError, SynthesisError
from zkcircuits.frontend.arithmetize import Arithmetization
from zkcircuits.frontend.mock import assert_satisfied
from zkcircuits.plonk.field import FR, CURVE_ORDER
from zkcircuits.plonk.prover import prove as plonk_prove
from zkcircuits.plonk.verifier import verify as plonk_verify

logger = logging.getLogger(__name__)


def _as_field_elements(values):
    result = []
    for value in values:
        if isinstance(value, FR):
            result.append(value)
        elif isinstance(value, int) and not isinstance(value, bool) and 0 <= value < CURVE_ORDER:
            result.append(FR(value))
        else:
            raise SynthesisError(f"공개 입력은 [0, p) 범위의 정수여야 합니다: {value!r}")
    return result


class ProofPipeline:
    def prove_with_public_inputs(self, pk, witness, public_inputs=None):
        """(증명 바이트, 공개 입력 벡터)를 반환한다."""
        started = time.perf_counter()
        spec = pk.spec_cls.with_witness(witness, **pk.params)
        try:
            synthesis = spec.synthesis()
        except TypeError as exc:
            raise SynthesisError(f"witness 값이 필드 원소가 아닙니다: {exc}") from exc

        if synthesis.fingerprint() != pk.fingerprint:
            raise ShapeError(
                f"{spec.type_key_text()}: witness로 만든 회로 모양이 키와 다릅니다"
            )

        if public_inputs is None:
            public_inputs = synthesis.public_inputs()
        elif len(public_inputs) != pk.num_public_inputs:
            raise SynthesisError(
                f"공개 입력 수 {len(public_inputs)}가 회로의 {pk.num_public_inputs}와 다릅니다"
            )
        public_inputs = _as_field_elements(public_inputs)
        assert_satisfied(synthesis.shape, synthesis.layout, public_inputs)

        arithmetization = Arithmetization(synthesis.shape, synthesis.layout)
        a_vals, b_vals, c_vals = arithmetization.wire_values(public_inputs, pk.n)
        if not arithmetization.circuit().is_satisfied(a_vals, b_vals, c_vals, public_inputs):
            raise ProveError(f"{spec.type_key_text()}: 낮춘 회로의 배선 값이 게이트를 만족하지 않습니다")
        try:
            proof = plonk_prove(a_vals, b_vals, c_vals, public_inputs, pk.preprocessed, pk.srs)
        except (ValueError, ArithmeticError) as exc:
            raise ProveError(f"{spec.type_key_text()}: 증명 생성 실패: {exc}") from exc

        logger.info(
            "proved %s (k=%d) in %.2fs",
            spec.type_key_text(), pk.k, time.perf_counter() - started,
        )
        return serialization.encode_proof(proof), public_inputs

    def prove(self, pk, witness, public_inputs=None):
        """
        Raises:
            ShapeError: 회로 모양이 키와 다를 때
            SynthesisError: witness나 공개 입력이 제약을 만족하지 않을 때
            ProveError: 백엔드 실패
        """
        proof_bytes, _ = self.prove_with_public_inputs(pk, witness, public_inputs)
        return proof_bytes

    def verify(self, vk, public_inputs, proof_bytes):
        try:
            if len(public_inputs) != vk.num_public_inputs:
                logger.debug(
                    "rejecting proof: %d public inputs, key expects %d",
                    len(public_inputs), vk.num_public_inputs,
                )
                return False
            values = _as_field_elements(public_inputs)
            proof = serialization.decode_proof(proof_bytes)
            return plonk_verify(proof, values, vk.preprocessed, vk.srs_g2)
        except (CircuitError, ValueError, TypeError, ArithmeticError, AssertionError) as exc:
            logger.debug("rejecting proof: %s", exc)
            return False

    def prove_record(self, pk, witness):
        """[공개 값][플래그][증명] wire record를 만든다.

        Raises:
            SynthesisError: 두 번째 공개 입력이 0/1 플래그가 아닐 때
        """
        proof_bytes, public_inputs = self.prove_with_public_inputs(pk, witness)
        if len(public_inputs) < 2 or public_inputs[1] not in (FR(0), FR(1)):
            raise SynthesisError("wire record에는 [값, 0/1 플래그, ...] 공개 입력이 필요합니다")
        return serialization.encode_record(public_inputs[0], public_inputs[1] == 1, proof_bytes)

    def verify_record(self, vk, record, extra_public_inputs=()):
        """
        Raises:
            InvalidEncoding: 레코드 헤더가 잘못됐을 때 (디코딩 후에는 bool)
        """
        value, flag, proof_bytes = serialization.decode_record(record)
        public_inputs = [value, FR(1) if flag else FR(0)] + list(extra_public_inputs)
        return self.verify(vk, public_inputs, proof_bytes)
