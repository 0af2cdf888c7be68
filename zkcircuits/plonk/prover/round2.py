"""
PLONK Prover Round 2: 순열 누적자 z(x) 커밋먼트
=================================================

  ┌─────────────────────────────────────────────────┐
  │  Verifier → Prover: β, γ  (Fiat-Shamir)       │
  │  Prover → Verifier: [z]₁                       │
  └─────────────────────────────────────────────────┘

  z(ω⁰) = 1
  z(ω^{i+1}) = z(ωⁱ) · ∏ (wᵢ + β·idᵢ + γ) / (wᵢ + β·σᵢ + γ)

블라인딩은 3개 계수 (z는 ζ와 ζω 두 점에서 열린다).
"""

from zkcircuits.plonk.polynomial import Polynomial
from zkcircuits.plonk.kzg import commit
from zkcircuits.plonk.permutation import compute_accumulator
from zkcircuits.plonk.prover.round1 import add_blinding


def execute(state):
    """Round 2를 실행한다."""
    state.beta = state.transcript.challenge_scalar(b"beta")
    state.gamma = state.transcript.challenge_scalar(b"gamma")

    n = state.n
    z_evals = compute_accumulator(
        state.a_vals, state.b_vals, state.c_vals,
        state.preprocessed.sigma_evals, n, state.domain,
        state.beta, state.gamma,
    )

    z_poly = Polynomial.from_evaluations(z_evals, state.omega)
    state.z_poly = add_blinding(z_poly, Polynomial.vanishing(n), 3)

    state.proof.z_comm = commit(state.z_poly, state.srs)
    state.transcript.append_point(b"z_comm", state.proof.z_comm)
