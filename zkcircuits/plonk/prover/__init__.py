"""
PLONK Prover: 5-라운드 프로토콜 오케스트레이터
=================================================

  ┌─────────────────────────────────────────────────────┐
  │  Statement: n, 전처리 커밋먼트, 공개 입력 흡수       │
  ├─────────────────────────────────────────────────────┤
  │  Round 1: [a]₁, [b]₁, [c]₁  (+ PI(x) 구성)          │
  ├─────────────────────────────────────────────────────┤
  │  Round 2: β, γ → [z]₁                               │
  ├─────────────────────────────────────────────────────┤
  │  Round 3: α → [t_lo]₁, [t_mid]₁, [t_hi]₁            │
  ├─────────────────────────────────────────────────────┤
  │  Round 4: ζ → ā, b̄, c̄, s̄_σ1, s̄_σ2, z̄_ω             │
  ├─────────────────────────────────────────────────────┤
  │  Round 5: r̄ → v → [W_ζ]₁, [W_ζω]₁                   │
  └─────────────────────────────────────────────────────┘

사용 예시:
    >>> from zkcircuits.plonk.prover import prove
    >>> proof = prove(a_vals, b_vals, c_vals, public_inputs, preprocessed, srs)
"""

import logging
import time

from zkcircuits.plonk.field import FR
from zkcircuits.plonk.transcript import Transcript, absorb_statement
from zkcircuits.plonk.prover import round1, round2, round3, round4, round5

logger = logging.getLogger(__name__)


# 증명 필드의 직렬화 순서
PROOF_POINT_FIELDS = (
    "a_comm", "b_comm", "c_comm",
    "z_comm",
    "t_lo_comm", "t_mid_comm", "t_hi_comm",
    "W_zeta_comm", "W_zeta_omega_comm",
)
PROOF_SCALAR_FIELDS = (
    "a_eval", "b_eval", "c_eval",
    "s_sigma1_eval", "s_sigma2_eval",
    "z_omega_eval", "r_eval",
)


class Proof:
    """PLONK 증명 데이터 컨테이너.

    Round 1: a_comm, b_comm, c_comm
    Round 2: z_comm
    Round 3: t_lo_comm, t_mid_comm, t_hi_comm
    Round 4: a_eval, b_eval, c_eval, s_sigma1_eval, s_sigma2_eval, z_omega_eval
    Round 5: r_eval, W_zeta_comm, W_zeta_omega_comm
    """

    def __init__(self):
        for name in PROOF_POINT_FIELDS + PROOF_SCALAR_FIELDS:
            setattr(self, name, None)


class ProverState:
    """라운드 간 공유되는 Prover 상태.

    속성 (입력):
        a_vals, b_vals, c_vals, public_inputs, preprocessed, srs, transcript

    속성 (라운드 간 생성):
        pi_poly, a_poly, b_poly, c_poly, z_poly, t_lo_poly, t_mid_poly, t_hi_poly
        beta, gamma, alpha, zeta, v
    """

    def __init__(self, a_vals, b_vals, c_vals, public_inputs, preprocessed, srs):
        self.a_vals = [FR(v) for v in a_vals]
        self.b_vals = [FR(v) for v in b_vals]
        self.c_vals = [FR(v) for v in c_vals]
        self.public_inputs = [FR(v) for v in public_inputs]
        self.preprocessed = preprocessed
        self.srs = srs

        self.n = preprocessed.n
        self.omega = preprocessed.omega
        self.domain = preprocessed.domain

        self.transcript = Transcript()
        absorb_statement(self.transcript, preprocessed, self.public_inputs)

        self.pi_poly = None
        self.a_poly = None
        self.b_poly = None
        self.c_poly = None
        self.z_poly = None
        self.t_lo_poly = None
        self.t_mid_poly = None
        self.t_hi_poly = None

        self.beta = None
        self.gamma = None
        self.alpha = None
        self.zeta = None
        self.v = None

        self.proof = Proof()

    def build_proof(self):
        return self.proof


def prove(a_vals, b_vals, c_vals, public_inputs, preprocessed, srs):
    """PLONK 5-라운드 프로토콜을 실행하여 증명을 생성한다.

    Args:
        a_vals, b_vals, c_vals: 배선 값 (길이 n, 패딩 포함)
        public_inputs: 공개 입력 값 리스트 (길이 = preprocessed.num_public_inputs)
        preprocessed: PreprocessedData (다항식 포함)
        srs: SRS

    Returns:
        Proof

    Raises:
        ValueError: 배선 길이나 공개 입력 수가 맞지 않거나,
                    witness가 제약을 만족하지 않을 때 (Round 3)
    """
    n = preprocessed.n
    if not (len(a_vals) == len(b_vals) == len(c_vals) == n):
        raise ValueError(f"배선 값의 길이는 도메인 크기 {n}과 같아야 합니다")
    if len(public_inputs) != preprocessed.num_public_inputs:
        raise ValueError(
            f"공개 입력 수 {len(public_inputs)}가 회로의 "
            f"{preprocessed.num_public_inputs}와 다릅니다"
        )

    started = time.perf_counter()
    state = ProverState(a_vals, b_vals, c_vals, public_inputs, preprocessed, srs)

    for number, round_module in enumerate((round1, round2, round3, round4, round5), 1):
        round_module.execute(state)
        logger.debug("round %d done (n=%d, %.2fs)", number, n, time.perf_counter() - started)

    return state.build_proof()
