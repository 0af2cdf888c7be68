"""
PLONK Prover Round 1: 배선(Witness) 다항식 커밋먼트
=====================================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: [a]₁, [b]₁, [c]₁          │
  └─────────────────────────────────────────────────┘

**과정**:
  1. 공개 입력 다항식 PI(x) = Σ (-x_i)·L_i(x) 구성
  2. 배선 값을 IFFT로 보간
  3. 블라인딩: a'(x) = a(x) + (b₁·x + b₂)·Z_H(x)
     Z_H(ωⁱ) = 0 이므로 도메인 위의 값은 변하지 않는다.
  4. KZG 커밋 후 트랜스크립트에 추가
"""

import secrets

from zkcircuits.plonk.field import FR, CURVE_ORDER
from zkcircuits.plonk.polynomial import Polynomial
from zkcircuits.plonk.kzg import commit
from zkcircuits.plonk.utils import public_input_polynomial


def execute(state):
    """Round 1을 실행한다."""
    n = state.n
    omega = state.omega

    state.pi_poly = public_input_polynomial(state.public_inputs, n, omega)

    zh = Polynomial.vanishing(n)
    state.a_poly = add_blinding(Polynomial.from_evaluations(state.a_vals, omega), zh, 2)
    state.b_poly = add_blinding(Polynomial.from_evaluations(state.b_vals, omega), zh, 2)
    state.c_poly = add_blinding(Polynomial.from_evaluations(state.c_vals, omega), zh, 2)

    state.proof.a_comm = commit(state.a_poly, state.srs)
    state.proof.b_comm = commit(state.b_poly, state.srs)
    state.proof.c_comm = commit(state.c_poly, state.srs)

    state.transcript.append_point(b"a_comm", state.proof.a_comm)
    state.transcript.append_point(b"b_comm", state.proof.b_comm)
    state.transcript.append_point(b"c_comm", state.proof.c_comm)


def add_blinding(poly, zh, num_blinds):
    """blinding(x) = (r₁ + r₂·x + ...) · Z_H(x) 를 더한다."""
    blind_coeffs = [FR(secrets.randbelow(CURVE_ORDER)) for _ in range(num_blinds)]
    return poly + Polynomial(blind_coeffs) * zh
