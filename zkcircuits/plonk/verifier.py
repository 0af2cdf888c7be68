"""
PLONK Verifier
================

**검증 과정**:
  1. 공개 입력 수 확인, 트랜스크립트 재생 → β, γ, α, ζ, v, u
  2. Z_H(ζ), L₁(ζ), PI(ζ) 계산 (PI(ζ) = Σ -x_i·L_i(ζ))
  3. 선형화 커밋먼트 [D]₁ 와 상수 r₀
  4. [F]₁ = [t_comb] + v([D] + r₀G₁) + v²[a] + ... + v⁶[S_σ2]
     E    = t̄ + v·r̄ + v²ā + ... + v⁶s̄2 + u·z̄ω,  t̄ = r̄ / Z_H(ζ)
  5. 페어링: e([W_ζ] + u[W_ζω], [τ]₂) == e(ζ[W_ζ] + uζω[W_ζω] + [F] + u[z] - E·G₁, G₂)

공개 입력은 PI(ζ)를 통해 r₀에 들어가므로, 다른 공개 입력으로는
같은 증명이 통과하지 않는다.
"""

import logging

from zkcircuits.plonk.field import FR, G1, ec_mul, ec_add, ec_pairing
from zkcircuits.plonk.kzg import msm
from zkcircuits.plonk.transcript import Transcript, absorb_statement
from zkcircuits.plonk.permutation import K1, K2
from zkcircuits.plonk.utils import (
    vanishing_poly_eval,
    lagrange_basis_eval,
    public_input_poly_eval,
)

logger = logging.getLogger(__name__)


def verify(proof, public_inputs, preprocessed, srs_g2):
    """PLONK 증명을 검증한다.

    Args:
        proof: Proof 객체
        public_inputs: 공개 입력 값 리스트
        preprocessed: PreprocessedData (커밋먼트만 있으면 된다)
        srs_g2: [G2, τ·G2]

    Returns:
        bool: 검증 성공 여부
    """
    pp = preprocessed
    n = pp.n
    omega = pp.omega

    if len(public_inputs) != pp.num_public_inputs:
        logger.debug(
            "public input arity mismatch: got %d, expected %d",
            len(public_inputs), pp.num_public_inputs,
        )
        return False
    public_inputs = [FR(x) for x in public_inputs]

    # ── Step 1: 트랜스크립트 재생 ──
    transcript = Transcript()
    absorb_statement(transcript, pp, public_inputs)

    transcript.append_point(b"a_comm", proof.a_comm)
    transcript.append_point(b"b_comm", proof.b_comm)
    transcript.append_point(b"c_comm", proof.c_comm)
    beta = transcript.challenge_scalar(b"beta")
    gamma = transcript.challenge_scalar(b"gamma")

    transcript.append_point(b"z_comm", proof.z_comm)
    alpha = transcript.challenge_scalar(b"alpha")

    transcript.append_point(b"t_lo_comm", proof.t_lo_comm)
    transcript.append_point(b"t_mid_comm", proof.t_mid_comm)
    transcript.append_point(b"t_hi_comm", proof.t_hi_comm)
    zeta = transcript.challenge_scalar(b"zeta")

    transcript.append_scalar(b"a_eval", proof.a_eval)
    transcript.append_scalar(b"b_eval", proof.b_eval)
    transcript.append_scalar(b"c_eval", proof.c_eval)
    transcript.append_scalar(b"s_sigma1_eval", proof.s_sigma1_eval)
    transcript.append_scalar(b"s_sigma2_eval", proof.s_sigma2_eval)
    transcript.append_scalar(b"z_omega_eval", proof.z_omega_eval)
    transcript.append_scalar(b"r_eval", proof.r_eval)
    v = transcript.challenge_scalar(b"v")

    transcript.append_point(b"W_zeta_comm", proof.W_zeta_comm)
    transcript.append_point(b"W_zeta_omega_comm", proof.W_zeta_omega_comm)
    u = transcript.challenge_scalar(b"u")

    # ── Step 2: 공개 값 ──
    a_eval = proof.a_eval
    b_eval = proof.b_eval
    c_eval = proof.c_eval
    s_sigma1_eval = proof.s_sigma1_eval
    s_sigma2_eval = proof.s_sigma2_eval
    z_omega_eval = proof.z_omega_eval
    r_eval = proof.r_eval

    zh_zeta = vanishing_poly_eval(n, zeta)
    if zh_zeta == 0:
        return False
    l1_zeta = lagrange_basis_eval(0, n, omega, zeta)
    pi_zeta = public_input_poly_eval(public_inputs, n, omega, zeta)

    # ── Step 3: [D]₁ 와 r₀ ──
    perm_z_scalar = (
        alpha
        * (a_eval + beta * zeta + gamma)
        * (b_eval + beta * K1 * zeta + gamma)
        * (c_eval + beta * K2 * zeta + gamma)
    )
    ab_factor = (
        (a_eval + beta * s_sigma1_eval + gamma)
        * (b_eval + beta * s_sigma2_eval + gamma)
    )
    perm_s3_scalar = alpha * ab_factor * beta * z_omega_eval

    r_0 = (
        pi_zeta
        - alpha * ab_factor * z_omega_eval * (c_eval + gamma)
        - alpha * alpha * l1_zeta
    )

    zeta_n = zeta ** n
    zeta_2n = zeta_n * zeta_n

    # ── Step 4: [F]₁ - E·G₁ 를 하나의 MSM으로 ──
    # [F] = [t_lo] + ζⁿ[t_mid] + ζ²ⁿ[t_hi] + v·[D] + v·r₀·G₁ + Σ vᵏ[...]
    v2 = v * v
    v3 = v2 * v
    v4 = v3 * v
    v5 = v4 * v
    v6 = v5 * v

    t_eval = r_eval / zh_zeta
    e_scalar = (
        t_eval + v * r_eval
        + v2 * a_eval + v3 * b_eval + v4 * c_eval
        + v5 * s_sigma1_eval + v6 * s_sigma2_eval
        + u * z_omega_eval
    )

    points = [
        proof.t_lo_comm, proof.t_mid_comm, proof.t_hi_comm,
        pp.q_m_comm, pp.q_l_comm, pp.q_r_comm, pp.q_o_comm, pp.q_c_comm,
        proof.z_comm, pp.s_sigma3_comm,
        proof.a_comm, proof.b_comm, proof.c_comm,
        pp.s_sigma1_comm, pp.s_sigma2_comm,
        G1,
        proof.W_zeta_comm, proof.W_zeta_omega_comm,
    ]
    scalars = [
        FR(1), zeta_n, zeta_2n,
        v * a_eval * b_eval, v * a_eval, v * b_eval, v * c_eval, v,
        v * (perm_z_scalar + alpha * alpha * l1_zeta) + u,
        FR(0) - v * perm_s3_scalar,
        v2, v3, v4,
        v5, v6,
        v * r_0 - e_scalar,
        zeta, u * zeta * omega,
    ]
    B = msm(points, scalars)

    # ── Step 5: 페어링 ──
    A = ec_add(proof.W_zeta_comm, ec_mul(proof.W_zeta_omega_comm, u))
    lhs = ec_pairing(srs_g2[1], A)
    rhs = ec_pairing(srs_g2[0], B)
    if lhs != rhs:
        logger.debug("pairing check failed")
        return False
    return True
