"""
PLONK Prover Round 3: 몫 다항식 t(x) 커밋먼트
================================================

  ┌─────────────────────────────────────────────────┐
  │  Verifier → Prover: α  (Fiat-Shamir)           │
  │  Prover → Verifier: [t_lo]₁, [t_mid]₁, [t_hi]₁│
  └─────────────────────────────────────────────────┘

**세 가지 제약 항**:

  Term 1: 게이트:  q_L·a + q_R·b + q_O·c + q_M·a·b + q_C + PI
  Term 2: 순열 (α):
    (a + βx + γ)(b + βK1x + γ)(c + βK2x + γ)·z(x)
    - (a + βS_σ1 + γ)(b + βS_σ2 + γ)(c + βS_σ3 + γ)·z(ωx)
  Term 3: 경계 (α²):  (z(x) - 1)·L₁(x)

  t(x) = (Term1 + α·Term2 + α²·Term3) / Z_H(x)

**t(x) 3-분할**:
  t(x) = t_lo(x) + xⁿ·t_mid(x) + x²ⁿ·t_hi(x)
  t_lo, t_mid는 n개 계수, 나머지(블라인딩으로 늘어난 차수 포함)는 t_hi.
"""

from zkcircuits.plonk.field import FR
from zkcircuits.plonk.polynomial import Polynomial
from zkcircuits.plonk.kzg import commit
from zkcircuits.plonk.permutation import K1, K2


def execute(state):
    """Round 3을 실행한다.

    Raises:
        ValueError: 제약 다항식이 Z_H(x)로 나누어 떨어지지 않을 때
    """
    state.alpha = state.transcript.challenge_scalar(b"alpha")

    n = state.n
    alpha = state.alpha
    beta = state.beta
    gamma = state.gamma
    pp = state.preprocessed

    a = state.a_poly
    b = state.b_poly
    c = state.c_poly
    z = state.z_poly

    z_omega = z.shift_argument(state.omega)
    x_poly = Polynomial([FR(0), FR(1)])
    gamma_poly = Polynomial([gamma])

    l1_evals = [FR(0)] * n
    l1_evals[0] = FR(1)
    l1 = Polynomial.from_evaluations(l1_evals, state.omega)

    # Term 1: 게이트 제약
    term1 = (
        pp.q_l_poly * a
        + pp.q_r_poly * b
        + pp.q_o_poly * c
        + pp.q_m_poly * (a * b)
        + pp.q_c_poly
        + state.pi_poly
    )

    # Term 2: 순열 제약
    perm_num = (
        (a + x_poly * beta + gamma_poly)
        * (b + x_poly * (beta * K1) + gamma_poly)
        * (c + x_poly * (beta * K2) + gamma_poly)
        * z
    )
    perm_den = (
        (a + pp.s_sigma1_poly * beta + gamma_poly)
        * (b + pp.s_sigma2_poly * beta + gamma_poly)
        * (c + pp.s_sigma3_poly * beta + gamma_poly)
        * z_omega
    )
    term2 = (perm_num - perm_den) * alpha

    # Term 3: 경계 제약
    term3 = (z - Polynomial([FR(1)])) * l1 * (alpha * alpha)

    constraint = term1 + term2 + term3
    t_poly = constraint.divide_by_vanishing(n)

    t_coeffs = list(t_poly.coeffs)
    while len(t_coeffs) < 3 * n:
        t_coeffs.append(FR(0))

    state.t_lo_poly = Polynomial(t_coeffs[:n])
    state.t_mid_poly = Polynomial(t_coeffs[n:2 * n])
    state.t_hi_poly = Polynomial(t_coeffs[2 * n:])

    state.proof.t_lo_comm = commit(state.t_lo_poly, state.srs)
    state.proof.t_mid_comm = commit(state.t_mid_poly, state.srs)
    state.proof.t_hi_comm = commit(state.t_hi_poly, state.srs)

    state.transcript.append_point(b"t_lo_comm", state.proof.t_lo_comm)
    state.transcript.append_point(b"t_mid_comm", state.proof.t_mid_comm)
    state.transcript.append_point(b"t_hi_comm", state.proof.t_hi_comm)
